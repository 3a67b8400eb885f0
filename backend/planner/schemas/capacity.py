"""Capacity schemas."""
from datetime import date

from pydantic import BaseModel


class SprintCapacity(BaseModel):
    employee_id: str
    sprint_id: str
    available_days: int
    allocated_days: int
    remaining_days: int
    overallocated: bool


class MonthCapacity(BaseModel):
    employee_id: str
    month: date
    working_days: int
    allocated_days: int
    remaining_days: int
    utilization_pct: int


class Overallocation(BaseModel):
    employee_id: str
    sprint_id: str
    available_days: int
    allocated_days: int
