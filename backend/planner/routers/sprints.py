"""Sprint API routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from planner.deps import get_planner
from planner.engine.sprints import get_sprint_date_range
from planner.schemas.sprint import Sprint, SprintResponse
from planner.services.planner import PlannerSession

router = APIRouter(prefix="/sprints", tags=["sprints"])


def _to_response(sprint: Sprint, active: Sprint | None) -> SprintResponse:
    return SprintResponse(
        **sprint.model_dump(),
        date_range=get_sprint_date_range(sprint),
        is_active=active is not None and sprint.id == active.id,
    )


@router.get("", response_model=list[SprintResponse])
async def list_sprints(planner: Annotated[PlannerSession, Depends(get_planner)]):
    active = planner.active_sprint
    return [_to_response(s, active) for s in planner.sprints]


@router.get("/active", response_model=SprintResponse)
async def get_active_sprint(planner: Annotated[PlannerSession, Depends(get_planner)]):
    """Sprint containing today; the first sprint when today is outside the window."""
    active = planner.active_sprint
    if active is None:
        if not planner.sprints:
            raise HTTPException(status_code=404, detail="No sprints")
        return _to_response(planner.sprints[0], None)
    return _to_response(active, active)
