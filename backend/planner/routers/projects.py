"""Project API routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from planner.deps import get_planner
from planner.schemas.project import Project, ProjectCreate, ProjectUpdate
from planner.services.planner import PlannerSession

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[Project])
async def list_projects(
    planner: Annotated[PlannerSession, Depends(get_planner)],
    include_archived: bool = Query(False),
):
    """Projects with start/end derived from their allocations."""
    projects = sorted(planner.projects, key=lambda p: p.name.lower())
    if include_archived:
        return projects
    return [p for p in projects if not p.archived]


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    return await planner.add_project(data)


@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    planner: Annotated[PlannerSession, Depends(get_planner)],
):
    return await planner.update_project(project_id, data)
