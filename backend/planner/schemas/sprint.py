"""Sprint schemas."""
from datetime import date

from pydantic import BaseModel, ConfigDict


class Sprint(BaseModel):
    """A two-week planning unit. Regenerated from the reference epoch, never stored."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    start_date: date
    end_date: date
    working_days: tuple[date, ...]


class SprintResponse(Sprint):
    date_range: str
    is_active: bool = False
