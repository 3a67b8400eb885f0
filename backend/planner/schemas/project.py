"""Project schemas."""
from datetime import date

from pydantic import BaseModel, Field

from planner.models.project import ProjectColor


class Project(BaseModel):
    id: str
    name: str
    color: ProjectColor = ProjectColor.BLUE
    start_date: date | None = None
    end_date: date | None = None
    lead_id: str | None = None
    ticket_reference: str | None = None
    archived: bool = False

    class Config:
        from_attributes = True


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    color: ProjectColor = ProjectColor.BLUE
    start_date: date | None = None
    end_date: date | None = None
    lead_id: str | None = None
    ticket_reference: str | None = Field(None, max_length=255)
    archived: bool = False


class ProjectUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    color: ProjectColor | None = None
    lead_id: str | None = None
    ticket_reference: str | None = Field(None, max_length=255)
    archived: bool | None = None
