"""Allocation store: optimistic CRUD over allocations with per-operation rollback."""
import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from uuid import uuid4

from planner.auth.rbac import Capability, check_capability
from planner.errors import BackendError, NotFound, PermissionDenied, PlannerError, ValidationError
from planner.schemas.allocation import Allocation
from planner.schemas.auth import Caller
from planner.schemas.employee import Employee
from planner.schemas.project import Project
from planner.schemas.sprint import Sprint
from planner.services.backend import PlannerBackend

logger = logging.getLogger(__name__)

TEMP_ID_PREFIX = "tmp-"


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class MutationState(str, Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    REJECTED = "rejected"  # refused before any local change


@dataclass
class MutationResult:
    kind: MutationKind
    state: MutationState
    allocation: Allocation | None = None
    error: PlannerError | None = None

    @property
    def ok(self) -> bool:
        return self.state == MutationState.COMMITTED


@dataclass(frozen=True)
class MutationEvent:
    """Emitted when a mutation is applied locally (PENDING), then again when it
    is COMMITTED or ROLLED_BACK. Rejected mutations emit nothing.

    ``previous`` is the record before update/delete.
    """

    kind: MutationKind
    state: MutationState
    allocation: Allocation
    previous: Allocation | None = None


Listener = Callable[[MutationEvent], None]


class AllocationStore:
    """Authoritative allocation CRUD against a PlannerBackend.

    Each mutation is applied to ``allocations`` first, then confirmed or
    reverted depending on the backend call. Mutations are serialised so a
    rollback only ever undoes its own change. The collections passed in are
    owned by the planner session and are mutated in place.
    """

    def __init__(
        self,
        backend: PlannerBackend,
        caller: Caller | None,
        allocations: list[Allocation],
        employees: list[Employee],
        projects: list[Project],
        sprints: list[Sprint],
    ) -> None:
        self.backend = backend
        self.caller = caller
        self.allocations = allocations
        self.employees = employees
        self.projects = projects
        self.sprints = sprints
        self._lock = asyncio.Lock()
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def _notify(self, event: MutationEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def get(self, allocation_id: str) -> Allocation | None:
        return next((a for a in self.allocations if a.id == allocation_id), None)

    def _index_of(self, allocation_id: str) -> int:
        for index, allocation in enumerate(self.allocations):
            if allocation.id == allocation_id:
                return index
        return -1

    def _project(self, project_id: str) -> Project | None:
        return next((p for p in self.projects if p.id == project_id), None)

    def _employee(self, employee_id: str) -> Employee | None:
        return next((e for e in self.employees if e.id == employee_id), None)

    def _reject(self, kind: MutationKind, error: PlannerError) -> MutationResult:
        logger.info("Allocation %s rejected: %s", kind.value, error.message)
        return MutationResult(kind=kind, state=MutationState.REJECTED, error=error)

    def _check_permission(self) -> PermissionDenied | None:
        decision = check_capability(self.caller, Capability.MANAGE_ALLOCATIONS)
        if decision.allowed:
            return None
        return PermissionDenied(decision.reason)

    @staticmethod
    def _wrap_backend_error(exc: Exception, message: str) -> BackendError:
        if isinstance(exc, BackendError):
            return exc
        logger.exception("Unexpected backend failure")
        return BackendError(message)

    async def add_allocation(self, employee_id: str, project_id: str, sprint_id: str, days: int) -> MutationResult:
        kind = MutationKind.CREATE
        denied = self._check_permission()
        if denied:
            return self._reject(kind, denied)
        if days < 1:
            return self._reject(kind, ValidationError("Days must be at least 1"))
        if not any(s.id == sprint_id for s in self.sprints):
            return self._reject(kind, ValidationError(f"Unknown sprint: {sprint_id}"))
        project = self._project(project_id)
        if project is None:
            return self._reject(kind, ValidationError(f"Unknown project: {project_id}"))
        if project.archived:
            return self._reject(kind, ValidationError("Cannot allocate to an archived project"))
        employee = self._employee(employee_id)
        if employee is not None and employee.archived:
            return self._reject(kind, ValidationError("Cannot allocate to an archived team member"))

        async with self._lock:
            try:
                exists = await self.backend.validate_employee_exists(employee_id)
            except Exception as exc:
                return self._reject(kind, self._wrap_backend_error(exc, "Failed to validate employee"))
            if not exists:
                return self._reject(kind, ValidationError("Invalid employee ID"))

            pending = Allocation(
                id=f"{TEMP_ID_PREFIX}{uuid4()}",
                employee_id=employee_id,
                project_id=project_id,
                sprint_id=sprint_id,
                days=days,
            )
            self.allocations.append(pending)
            self._notify(MutationEvent(kind=kind, state=MutationState.PENDING, allocation=pending))
            try:
                new_id = await self.backend.insert_allocation(employee_id, project_id, sprint_id, days)
            except Exception as exc:
                index = self._index_of(pending.id)
                if index >= 0:
                    del self.allocations[index]
                error = self._wrap_backend_error(exc, "Failed to add allocation")
                logger.warning("Rolled back allocation for %s in %s: %s", employee_id, sprint_id, error.message)
                self._notify(MutationEvent(kind=kind, state=MutationState.ROLLED_BACK, allocation=pending))
                return MutationResult(kind=kind, state=MutationState.ROLLED_BACK, error=error)

            committed = pending.model_copy(update={"id": new_id})
            self.allocations[self._index_of(pending.id)] = committed

        logger.info("Allocated %s days of %s to %s in %s", days, employee_id, project_id, sprint_id)
        self._notify(MutationEvent(kind=kind, state=MutationState.COMMITTED, allocation=committed))
        return MutationResult(kind=kind, state=MutationState.COMMITTED, allocation=committed)

    async def update_allocation(self, allocation_id: str, days: int) -> MutationResult:
        """Change the day count of an existing allocation; nothing else is editable."""
        kind = MutationKind.UPDATE
        denied = self._check_permission()
        if denied:
            return self._reject(kind, denied)
        if days < 1:
            return self._reject(kind, ValidationError("Days must be at least 1"))

        async with self._lock:
            index = self._index_of(allocation_id)
            if index < 0:
                return self._reject(kind, NotFound("Allocation not found"))
            previous = self.allocations[index]
            project = self._project(previous.project_id)
            if project is not None and project.archived:
                return self._reject(kind, ValidationError("Cannot modify allocations for an archived project"))

            updated = previous.model_copy(update={"days": days})
            self.allocations[index] = updated
            self._notify(MutationEvent(kind=kind, state=MutationState.PENDING, allocation=updated, previous=previous))
            try:
                await self.backend.update_allocation_days(allocation_id, days)
            except Exception as exc:
                current = self._index_of(allocation_id)
                if current >= 0:
                    self.allocations[current] = previous
                error = self._wrap_backend_error(exc, "Failed to update allocation")
                logger.warning("Rolled back update of allocation %s: %s", allocation_id, error.message)
                self._notify(
                    MutationEvent(kind=kind, state=MutationState.ROLLED_BACK, allocation=updated, previous=previous)
                )
                return MutationResult(kind=kind, state=MutationState.ROLLED_BACK, allocation=previous, error=error)

        logger.info("Updated allocation %s to %s days", allocation_id, days)
        self._notify(MutationEvent(kind=kind, state=MutationState.COMMITTED, allocation=updated, previous=previous))
        return MutationResult(kind=kind, state=MutationState.COMMITTED, allocation=updated)

    async def delete_allocation(self, allocation_id: str) -> MutationResult:
        kind = MutationKind.DELETE
        denied = self._check_permission()
        if denied:
            return self._reject(kind, denied)

        async with self._lock:
            index = self._index_of(allocation_id)
            if index < 0:
                return self._reject(kind, NotFound("Allocation not found"))
            removed = self.allocations.pop(index)
            self._notify(MutationEvent(kind=kind, state=MutationState.PENDING, allocation=removed, previous=removed))
            try:
                await self.backend.delete_allocation(allocation_id)
            except Exception as exc:
                self.allocations.insert(min(index, len(self.allocations)), removed)
                error = self._wrap_backend_error(exc, "Failed to delete allocation")
                logger.warning("Restored allocation %s after failed delete: %s", allocation_id, error.message)
                self._notify(
                    MutationEvent(kind=kind, state=MutationState.ROLLED_BACK, allocation=removed, previous=removed)
                )
                return MutationResult(kind=kind, state=MutationState.ROLLED_BACK, allocation=removed, error=error)

        logger.info("Deleted allocation %s", allocation_id)
        self._notify(MutationEvent(kind=kind, state=MutationState.COMMITTED, allocation=removed, previous=removed))
        return MutationResult(kind=kind, state=MutationState.COMMITTED, allocation=removed)
