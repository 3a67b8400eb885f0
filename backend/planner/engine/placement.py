"""Allocation placement: drag-move with overflow splitting, batch, project-timeline and quick allocation.

Every workflow reports its result as a PlacementOutcome; nothing here raises
for permission, validation or backend problems. Steps of a batch run one at a
time in chronological order, and committed steps stay committed when a later
step fails.
"""
import logging
from dataclasses import dataclass, field

from planner.auth.rbac import Capability, check_capability
from planner.config import Settings, get_settings
from planner.engine.capacity import available_days
from planner.errors import CapacityWarning, NotFound, PermissionDenied, PlannerError, ValidationError
from planner.schemas.allocation import Allocation, DragItem, PlacementStatus, Repeat, RepeatMode
from planner.schemas.employee import Employee
from planner.schemas.project import Project
from planner.schemas.sprint import Sprint
from planner.services.allocation_store import AllocationStore

logger = logging.getLogger(__name__)

DAYS_PER_WEEK_OPTIONS = (1, 3, 5)


@dataclass
class PlacementOutcome:
    status: PlacementStatus
    message: str
    created: list[Allocation] = field(default_factory=list)
    errors: list[PlannerError] = field(default_factory=list)
    warning: CapacityWarning | None = None

    @property
    def ok(self) -> bool:
        return self.status in (PlacementStatus.SUCCESS, PlacementStatus.PARTIAL)

    @classmethod
    def failed(cls, error: PlannerError) -> "PlacementOutcome":
        return cls(status=PlacementStatus.FAILED, message=error.message, errors=[error])


def clamp_days(days: int | None, settings: Settings) -> int:
    return max(1, min(settings.max_days_per_sprint, int(days or 1)))


def resolve_target_sprints(
    sprints: list[Sprint],
    start_index: int,
    repeat: Repeat,
    project: Project,
    settings: Settings,
) -> list[Sprint]:
    """Sprints a batch allocation covers, starting at ``start_index``.

    ``sprints`` must be in chronological order.
    """
    tail = sprints[start_index:]
    if repeat.mode == RepeatMode.SINGLE:
        return tail[:1]
    if repeat.mode == RepeatMode.NEXT_N:
        count = max(1, min(settings.max_repeat_sprints, int(repeat.count or 1)))
        return tail[:count]
    # until-project-end: inclusive of a sprint starting on the end date itself
    if project.end_date is None:
        return tail[:1]
    targets = [s for s in tail if s.start_date <= project.end_date]
    return targets or tail[:1]


class PlacementEngine:
    def __init__(
        self,
        store: AllocationStore,
        employees: list[Employee],
        projects: list[Project],
        sprints: list[Sprint],
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.employees = employees
        self.projects = projects
        self.sprints = sprints
        self.settings = settings or get_settings()

    def _permission_error(self) -> PermissionDenied | None:
        decision = check_capability(self.store.caller, Capability.MANAGE_ALLOCATIONS)
        return None if decision.allowed else PermissionDenied(decision.reason)

    def _employee(self, employee_id: str) -> Employee | None:
        return next((e for e in self.employees if e.id == employee_id), None)

    def _project(self, project_id: str) -> Project | None:
        return next((p for p in self.projects if p.id == project_id), None)

    def _ordered_sprints(self) -> list[Sprint]:
        return sorted(self.sprints, key=lambda s: s.start_date)

    @staticmethod
    def _sprint_index(sprints: list[Sprint], sprint_id: str) -> int:
        return next((i for i, s in enumerate(sprints) if s.id == sprint_id), -1)

    async def _place_each(
        self,
        employee_id: str,
        project_id: str,
        targets: list[Sprint],
        days: int,
    ) -> tuple[list[Allocation], list[PlannerError]]:
        """Add ``days`` in each target sprint, one at a time; committed steps stay committed."""
        created: list[Allocation] = []
        errors: list[PlannerError] = []
        for sprint in targets:
            result = await self.store.add_allocation(employee_id, project_id, sprint.id, days)
            if result.ok:
                created.append(result.allocation)
                continue
            errors.append(result.error)
            if self.settings.halt_batch_on_error:
                break
        return created, errors

    async def move_allocation(self, item: DragItem, target_sprint_id: str) -> PlacementOutcome:
        """Drop ``item`` on a sprint, spilling days that do not fit into later sprints.

        Sprints where the employee has no working days left after vacation are
        skipped without consuming any of the dragged days.
        """
        denied = self._permission_error()
        if denied:
            return PlacementOutcome.failed(denied)
        employee = self._employee(item.employee_id)
        if employee is None:
            return PlacementOutcome.failed(ValidationError("Employee not found"))
        sprints = self._ordered_sprints()
        start_index = self._sprint_index(sprints, target_sprint_id)
        if start_index < 0:
            return PlacementOutcome.failed(NotFound("Target sprint not found"))

        if item.source_sprint_id and item.id:
            removed = await self.store.delete_allocation(item.id)
            if not removed.ok:
                return PlacementOutcome.failed(removed.error)

        days_remaining = item.days or self.settings.default_drag_days
        created: list[Allocation] = []
        errors: list[PlannerError] = []
        for sprint in sprints[start_index:]:
            if days_remaining <= 0:
                break
            capacity = available_days(employee, sprint)
            if capacity <= 0:
                continue
            to_allocate = min(days_remaining, capacity)
            result = await self.store.add_allocation(item.employee_id, item.project_id, sprint.id, to_allocate)
            if result.ok:
                created.append(result.allocation)
                days_remaining -= to_allocate
                continue
            errors.append(result.error)
            if self.settings.halt_batch_on_error:
                break

        if created:
            status = PlacementStatus.PARTIAL if days_remaining > 0 else PlacementStatus.SUCCESS
            message = f"Allocation split across {len(created)} sprint(s)"
            logger.info("Moved %s for %s: %s, %s days unplaced", item.project_id, item.employee_id, message, days_remaining)
            return PlacementOutcome(status=status, message=message, created=created, errors=errors)
        if errors:
            return PlacementOutcome(status=PlacementStatus.FAILED, message="Failed to move allocation", errors=errors)
        return PlacementOutcome(status=PlacementStatus.NO_CAPACITY, message="No working days available")

    async def allocate(
        self,
        employee_id: str,
        project_id: str,
        sprint_id: str,
        days: int,
        repeat: Repeat | None = None,
        confirm_overallocation: bool = False,
    ) -> PlacementOutcome:
        """Create one allocation of ``days`` in each sprint selected by ``repeat``."""
        repeat = repeat or Repeat()
        denied = self._permission_error()
        if denied:
            return PlacementOutcome.failed(denied)
        try:
            exists = await self.store.backend.validate_employee_exists(employee_id)
        except PlannerError as exc:
            return PlacementOutcome.failed(exc)
        if not exists:
            return PlacementOutcome.failed(ValidationError("Employee not found"))
        project = self._project(project_id)
        if project is None:
            return PlacementOutcome.failed(ValidationError("Project not found"))
        if project.archived:
            return PlacementOutcome.failed(ValidationError("Cannot allocate to an archived project"))
        sprints = self._ordered_sprints()
        start_index = self._sprint_index(sprints, sprint_id)
        if start_index < 0:
            return PlacementOutcome.failed(NotFound("Sprint not found"))

        safe_days = clamp_days(days, self.settings)
        employee = self._employee(employee_id)
        if employee is not None and not confirm_overallocation:
            capacity = available_days(employee, sprints[start_index])
            if safe_days > capacity:
                warning = CapacityWarning(
                    f"{employee.name} has only {capacity} available day(s) in {sprints[start_index].name}",
                    requested=safe_days,
                    available=capacity,
                )
                return PlacementOutcome(
                    status=PlacementStatus.CONFIRMATION_REQUIRED,
                    message=warning.message,
                    warning=warning,
                )

        targets = resolve_target_sprints(sprints, start_index, repeat, project, self.settings)
        created, errors = await self._place_each(employee_id, project_id, targets, safe_days)

        logger.info(
            "Batch allocation for %s on %s: %s of %s sprint(s) created",
            employee_id,
            project_id,
            len(created),
            len(targets),
        )
        if not created:
            if errors:
                return PlacementOutcome(status=PlacementStatus.FAILED, message="Failed to allocate", errors=errors)
            return PlacementOutcome(status=PlacementStatus.NO_CAPACITY, message="No allocations created")
        message = "Allocation created" if len(created) == 1 else f"Allocations created for {len(created)} sprint(s)"
        status = PlacementStatus.PARTIAL if errors else PlacementStatus.SUCCESS
        return PlacementOutcome(status=status, message=message, created=created, errors=errors)

    async def allocate_to_project_timeline(
        self,
        employee_id: str,
        project_id: str,
        days_per_week: int,
    ) -> PlacementOutcome:
        """Allocate ``days_per_week * 2`` days (at most a full sprint) to every
        sprint overlapping the project's start/end range, edges included."""
        denied = self._permission_error()
        if denied:
            return PlacementOutcome.failed(denied)
        if days_per_week not in DAYS_PER_WEEK_OPTIONS:
            return PlacementOutcome.failed(ValidationError("Days per week must be 1, 3 or 5"))
        project = self._project(project_id)
        if project is None:
            return PlacementOutcome.failed(ValidationError("Project not found"))
        if project.start_date is None or project.end_date is None:
            return PlacementOutcome.failed(ValidationError("Project has no start and end date"))

        targets = [
            s
            for s in self._ordered_sprints()
            if s.start_date <= project.end_date and s.end_date >= project.start_date
        ]
        if not targets:
            return PlacementOutcome(status=PlacementStatus.NO_CAPACITY, message="No sprints overlap the project timeline")

        days = min(days_per_week * 2, self.settings.max_days_per_sprint)
        created, errors = await self._place_each(employee_id, project_id, targets, days)
        logger.info(
            "Timeline allocation for %s on %s: %s of %s sprint(s) created",
            employee_id,
            project_id,
            len(created),
            len(targets),
        )
        if not created:
            return PlacementOutcome(status=PlacementStatus.FAILED, message="Failed to allocate to project", errors=errors)
        status = PlacementStatus.PARTIAL if errors else PlacementStatus.SUCCESS
        return PlacementOutcome(
            status=status,
            message="Allocations added for project timeline",
            created=created,
            errors=errors,
        )

    async def quick_allocate(self, employee_id: str, project_id: str, sprint_id: str, days: int) -> PlacementOutcome:
        """Single-sprint allocation.

        Callers are expected to have checked ``days`` against the employee's
        remaining capacity; any positive day count is accepted here.
        """
        result = await self.store.add_allocation(employee_id, project_id, sprint_id, days)
        if not result.ok:
            return PlacementOutcome.failed(result.error)
        return PlacementOutcome(status=PlacementStatus.SUCCESS, message="Allocation created", created=[result.allocation])
