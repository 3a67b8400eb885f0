"""Capacity API routes."""
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from planner.deps import get_planner
from planner.schemas.capacity import MonthCapacity, Overallocation, SprintCapacity
from planner.schemas.employee import Employee
from planner.services.planner import PlannerSession

router = APIRouter(prefix="/capacity", tags=["capacity"])


def _get_employee(planner: PlannerSession, employee_id: str) -> Employee:
    employee = planner.get_employee(employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


def _parse_month(value: str) -> date:
    try:
        year, month = value.split("-")
        return date(int(year), int(month), 1)
    except ValueError:
        raise HTTPException(status_code=422, detail="Month must be YYYY-MM")


@router.get("/employees/{employee_id}/sprints/{sprint_id}", response_model=SprintCapacity)
async def get_sprint_capacity(
    employee_id: str,
    sprint_id: str,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    employee = _get_employee(planner, employee_id)
    sprint = planner.get_sprint(sprint_id)
    if not sprint:
        raise HTTPException(status_code=404, detail="Sprint not found")
    return planner.capacity.sprint_capacity(employee, sprint)


@router.get("/employees/{employee_id}/months/{month}", response_model=MonthCapacity)
async def get_month_capacity(
    employee_id: str,
    month: str,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    employee = _get_employee(planner, employee_id)
    return planner.capacity.month_capacity(employee, _parse_month(month))


@router.get("/overallocations", response_model=list[Overallocation])
async def list_overallocations(planner: Annotated[PlannerSession, Depends(get_planner)]):
    return planner.capacity.overallocations(planner.employees)
