"""Allocation model."""
from datetime import date
from uuid import uuid4

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from planner.database import Base


class Allocation(Base):
    """Days of one employee's time on one project within one sprint."""

    __tablename__ = "allocations"
    __table_args__ = (CheckConstraint("days >= 1", name="ck_allocations_days_positive"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_id: Mapped[str] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sprint_id: Mapped[str | None] = mapped_column(String(20), nullable=True)  # null on legacy rows
    week: Mapped[date] = mapped_column(Date, nullable=False)  # sprint start date
    days: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
