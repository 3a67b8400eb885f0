"""SQLAlchemy models."""
from planner.models.allocation import Allocation
from planner.models.audit import AuditLog
from planner.models.employee import Profile, Role
from planner.models.project import Project, ProjectColor

__all__ = [
    "Allocation",
    "AuditLog",
    "Profile",
    "Project",
    "ProjectColor",
    "Role",
]
