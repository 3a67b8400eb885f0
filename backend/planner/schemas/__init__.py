"""Pydantic schemas."""
from planner.schemas.auth import Caller, Token, UserLogin
from planner.schemas.sprint import Sprint, SprintResponse
from planner.schemas.employee import Employee, EmployeeUpdate
from planner.schemas.project import Project, ProjectCreate, ProjectUpdate
from planner.schemas.allocation import (
    Allocation,
    AllocationCreate,
    AllocationUpdate,
    BatchAllocationRequest,
    DragItem,
    MoveRequest,
    PlacementResponse,
    PlacementStatus,
    QuickAllocationRequest,
    TimelineAllocationRequest,
    Repeat,
    RepeatMode,
)
from planner.schemas.capacity import MonthCapacity, Overallocation, SprintCapacity

__all__ = [
    "Caller",
    "Token",
    "UserLogin",
    "Sprint",
    "SprintResponse",
    "Employee",
    "EmployeeUpdate",
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "Allocation",
    "AllocationCreate",
    "AllocationUpdate",
    "BatchAllocationRequest",
    "DragItem",
    "MoveRequest",
    "PlacementResponse",
    "PlacementStatus",
    "QuickAllocationRequest",
    "TimelineAllocationRequest",
    "Repeat",
    "RepeatMode",
    "MonthCapacity",
    "Overallocation",
    "SprintCapacity",
]
