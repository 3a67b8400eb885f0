"""Employee profile model."""
from enum import Enum as PyEnum
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from planner.database import Base


class Role(str, PyEnum):
    ANDROID = "Android"
    ARCHITECT = "Architect"
    BACKEND = "Backend"
    CERTIFICATION = "Certification"
    ELECTRICAL_ENGINEERING = "Electrical Engineering"
    ELECTRICAL_TESTING = "Electrical Testing"
    FIRMWARE = "Firmware"
    FRONTEND = "Frontend"
    IOS = "iOS"
    INDUSTRIAL_DESIGN = "Industrial Design"
    MANAGER = "Manager"
    MECHANICAL_ENGINEERING = "Mechanical Engineering"
    MECHANICAL_TESTING = "Mechanical Testing"
    NPI = "NPI"
    PRODUCT_MANAGER = "Product Manager"
    PRODUCT_OWNER = "Product Owner"
    QA = "QA"
    SQE = "SQE"
    SRE = "SRE"
    SYSTEM = "System"
    TECHNICAL_PROJECT_MANAGER = "Technical Project Manager"
    UI_UX_DESIGN = "UI/UX Design"
    WEARABLE_ENGINEERING = "Wearable Engineering"


class Profile(Base):
    """A team member; also the login identity of the caller."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True, index=True)
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(100), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    vacation_dates: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # ["YYYY-MM-DD", ...]
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    archived: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
