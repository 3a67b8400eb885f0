"""Role-based access control."""
from dataclasses import dataclass
from enum import Enum

from planner.errors import PermissionDenied
from planner.models.employee import Role
from planner.schemas.auth import Caller

MANAGER_ROLES = frozenset(
    {
        Role.MANAGER.value,
        Role.PRODUCT_MANAGER.value,
        Role.PRODUCT_OWNER.value,
        Role.TECHNICAL_PROJECT_MANAGER.value,
    }
)


class Capability(str, Enum):
    MANAGE_ALLOCATIONS = "manage_allocations"
    MANAGE_PROJECTS = "manage_projects"
    EDIT_EMPLOYEE = "edit_employee"
    CREATE_PROJECT = "create_project"  # administrators only


@dataclass(frozen=True)
class AuthorizationDecision:
    allowed: bool
    reason: str = ""

    def raise_for_denial(self) -> None:
        if not self.allowed:
            raise PermissionDenied(self.reason)


_DENIAL_MESSAGES = {
    Capability.MANAGE_ALLOCATIONS: "Only authorized users can manage allocations",
    Capability.MANAGE_PROJECTS: "You do not have permission to update projects",
    Capability.EDIT_EMPLOYEE: "You can only update your own profile",
    Capability.CREATE_PROJECT: "Only administrators can add projects",
}


def is_manager_like(caller: Caller) -> bool:
    return caller.is_admin or (caller.role or "") in MANAGER_ROLES


def check_capability(
    caller: Caller | None,
    capability: Capability,
    target_employee_id: str | None = None,
) -> AuthorizationDecision:
    """Single gate for every mutating planner operation."""
    if caller is None:
        return AuthorizationDecision(False, "Not authenticated")
    if capability == Capability.CREATE_PROJECT:
        if caller.is_admin:
            return AuthorizationDecision(True)
        return AuthorizationDecision(False, _DENIAL_MESSAGES[capability])
    if is_manager_like(caller):
        return AuthorizationDecision(True)
    if capability == Capability.EDIT_EMPLOYEE and target_employee_id == caller.id:
        return AuthorizationDecision(True)
    return AuthorizationDecision(False, _DENIAL_MESSAGES[capability])
