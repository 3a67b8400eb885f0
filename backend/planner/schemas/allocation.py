"""Allocation and placement schemas."""
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class Allocation(BaseModel):
    id: str
    employee_id: str
    project_id: str
    sprint_id: str
    days: int

    class Config:
        from_attributes = True


class AllocationCreate(BaseModel):
    employee_id: str
    project_id: str
    sprint_id: str
    days: int = Field(..., ge=1)


class AllocationUpdate(BaseModel):
    days: int = Field(..., ge=1)


class DragItem(BaseModel):
    """An allocation being dragged; id and source_sprint_id are set when it already exists."""

    id: str | None = None
    employee_id: str
    project_id: str
    days: int | None = None
    source_sprint_id: str | None = None


class MoveRequest(BaseModel):
    item: DragItem
    target_sprint_id: str


class RepeatMode(str, Enum):
    SINGLE = "single"
    NEXT_N = "next-n"
    UNTIL_PROJECT_END = "until-project-end"


class Repeat(BaseModel):
    mode: RepeatMode = RepeatMode.SINGLE
    count: int | None = None  # only for next-n


class BatchAllocationRequest(BaseModel):
    employee_id: str
    project_id: str
    sprint_id: str
    days: int
    repeat: Repeat = Field(default_factory=Repeat)
    confirm_overallocation: bool = False


class QuickAllocationRequest(BaseModel):
    employee_id: str
    project_id: str
    sprint_id: str
    days: int = Field(..., ge=1)


class TimelineAllocationRequest(BaseModel):
    """Allocate across every sprint overlapping the project's start/end dates."""

    employee_id: str
    project_id: str
    days_per_week: Literal[1, 3, 5]


class PlacementStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    NO_CAPACITY = "no_capacity"
    FAILED = "failed"
    CONFIRMATION_REQUIRED = "confirmation_required"


class PlacementResponse(BaseModel):
    status: PlacementStatus
    message: str
    created: list[Allocation] = []
    errors: list[str] = []
