"""Employee schemas."""
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from planner.models.employee import Role


def to_day(value) -> date | None:
    """Normalize a date, datetime or ISO string to a calendar day; None if unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def _normalize_days(value) -> list[date]:
    days: list[date] = []
    for item in value or []:
        day = to_day(item)
        if day is not None and day not in days:
            days.append(day)
    return days


class Employee(BaseModel):
    id: str
    name: str
    role: Role
    image_url: str | None = None
    vacation_dates: list[date] = Field(default_factory=list)
    archived: bool = False
    is_admin: bool = False

    class Config:
        from_attributes = True

    @field_validator("vacation_dates", mode="before")
    @classmethod
    def normalize_vacation_dates(cls, value):
        """Accept ISO dates or datetimes; keep the calendar day only."""
        return _normalize_days(value)


class EmployeeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    role: Role | None = None
    image_url: str | None = None
    vacation_dates: list[date] | None = None
    archived: bool | None = None

    @field_validator("vacation_dates", mode="before")
    @classmethod
    def normalize_vacation_dates(cls, value):
        if value is None:
            return None
        return _normalize_days(value)
