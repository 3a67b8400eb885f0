"""Allocation API routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from planner.deps import get_planner
from planner.engine.placement import PlacementOutcome
from planner.errors import to_http_exception
from planner.schemas.allocation import (
    Allocation,
    AllocationCreate,
    AllocationUpdate,
    BatchAllocationRequest,
    MoveRequest,
    PlacementResponse,
    PlacementStatus,
    QuickAllocationRequest,
    TimelineAllocationRequest,
)
from planner.services.allocation_store import MutationResult
from planner.services.planner import PlannerSession

router = APIRouter(prefix="/allocations", tags=["allocations"])


def _committed(result: MutationResult) -> Allocation:
    if not result.ok:
        raise to_http_exception(result.error)
    return result.allocation


def _placement_response(outcome: PlacementOutcome) -> PlacementResponse:
    if outcome.status == PlacementStatus.FAILED:
        raise to_http_exception(outcome.errors[0])
    if outcome.status == PlacementStatus.CONFIRMATION_REQUIRED:
        warning = outcome.warning
        raise HTTPException(
            status_code=warning.http_status,
            detail={
                "message": warning.message,
                "requested": warning.requested,
                "available": warning.available,
            },
        )
    return PlacementResponse(
        status=outcome.status,
        message=outcome.message,
        created=outcome.created,
        errors=[e.message for e in outcome.errors],
    )


@router.get("", response_model=list[Allocation])
async def list_allocations(
    planner: Annotated[PlannerSession, Depends(get_planner)],
    employee_id: str | None = Query(None),
    project_id: str | None = Query(None),
    sprint_id: str | None = Query(None),
):
    return [
        a
        for a in planner.allocations
        if (employee_id is None or a.employee_id == employee_id)
        and (project_id is None or a.project_id == project_id)
        and (sprint_id is None or a.sprint_id == sprint_id)
    ]


@router.post("", response_model=Allocation, status_code=status.HTTP_201_CREATED)
async def add_allocation(
    data: AllocationCreate,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    result = await planner.store.add_allocation(data.employee_id, data.project_id, data.sprint_id, data.days)
    return _committed(result)


@router.patch("/{allocation_id}", response_model=Allocation)
async def update_allocation(
    allocation_id: str,
    data: AllocationUpdate,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    result = await planner.store.update_allocation(allocation_id, data.days)
    return _committed(result)


@router.delete("/{allocation_id}")
async def delete_allocation(
    allocation_id: str,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    _committed(await planner.store.delete_allocation(allocation_id))
    return {"ok": True}


@router.post("/move", response_model=PlacementResponse)
async def move_allocation(
    data: MoveRequest,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    outcome = await planner.placement.move_allocation(data.item, data.target_sprint_id)
    return _placement_response(outcome)


@router.post("/batch", response_model=PlacementResponse)
async def batch_allocate(
    data: BatchAllocationRequest,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    outcome = await planner.placement.allocate(
        data.employee_id,
        data.project_id,
        data.sprint_id,
        data.days,
        data.repeat,
        confirm_overallocation=data.confirm_overallocation,
    )
    return _placement_response(outcome)


@router.post("/timeline", response_model=PlacementResponse)
async def allocate_to_project_timeline(
    data: TimelineAllocationRequest,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    outcome = await planner.placement.allocate_to_project_timeline(
        data.employee_id, data.project_id, data.days_per_week
    )
    return _placement_response(outcome)


@router.post("/quick", response_model=PlacementResponse)
async def quick_allocate(
    data: QuickAllocationRequest,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    """Single-sprint allocation, refused when it does not fit the remaining capacity."""
    employee = planner.get_employee(data.employee_id)
    sprint = planner.get_sprint(data.sprint_id)
    if employee is not None and sprint is not None:
        remaining = planner.capacity.remaining_days(employee, sprint)
        if data.days > remaining:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Only {max(remaining, 0)} day(s) remaining in {sprint.name}",
            )
    outcome = await planner.placement.quick_allocate(data.employee_id, data.project_id, data.sprint_id, data.days)
    return _placement_response(outcome)
