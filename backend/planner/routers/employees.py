"""Employee API routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from planner.deps import get_planner
from planner.schemas.employee import Employee, EmployeeUpdate
from planner.services.planner import PlannerSession

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=list[Employee])
async def list_employees(
    planner: Annotated[PlannerSession, Depends(get_planner)],
    include_archived: bool = Query(False),
):
    if include_archived:
        return planner.employees
    return [e for e in planner.employees if not e.archived]


@router.patch("/{employee_id}", response_model=Employee)
async def update_employee(
    employee_id: str,
    data: EmployeeUpdate,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    return await planner.update_employee(employee_id, data)
