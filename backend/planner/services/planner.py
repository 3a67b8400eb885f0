"""Planner session: owns the loaded collections and wires the engine together."""
import logging
from datetime import date
from typing import Any

from planner.auth.rbac import Capability, check_capability
from planner.config import Settings, get_settings
from planner.engine.capacity import CapacityCalculator
from planner.engine.placement import PlacementEngine
from planner.engine.project_ranges import calculate_project_date_ranges
from planner.engine.sprints import find_active_sprint, sprint_window
from planner.errors import NotFound
from planner.schemas.allocation import Allocation
from planner.schemas.auth import Caller
from planner.schemas.employee import Employee, EmployeeUpdate
from planner.schemas.project import Project, ProjectCreate, ProjectUpdate
from planner.schemas.sprint import Sprint
from planner.services.allocation_store import AllocationStore, MutationEvent
from planner.services.backend import PlannerBackend

logger = logging.getLogger(__name__)


class PlannerSession:
    """One caller's view of the planner.

    Constructed once per session and discarded with ``close()``. The
    employee, project, allocation and sprint lists are shared by reference with
    the store, calculator and placement engine, and are only ever mutated in
    place.
    """

    def __init__(
        self,
        backend: PlannerBackend,
        caller: Caller | None,
        settings: Settings | None = None,
        today: date | None = None,
    ) -> None:
        self.backend = backend
        self.caller = caller
        self.settings = settings or get_settings()
        self.today = today or date.today()
        self.employees: list[Employee] = []
        self.projects: list[Project] = []
        self.allocations: list[Allocation] = []
        self.sprints: list[Sprint] = []
        # start/end as stored on each project, before derivation from allocations
        self._stored_ranges: dict[str, tuple[date | None, date | None]] = {}
        self.store = AllocationStore(backend, caller, self.allocations, self.employees, self.projects, self.sprints)
        self.capacity = CapacityCalculator(self.allocations, self.sprints)
        self.placement = PlacementEngine(self.store, self.employees, self.projects, self.sprints, self.settings)
        self._unsubscribe = self.store.subscribe(self._on_mutation)

    async def load(self) -> None:
        """Bulk-load everything from the backend and derive project ranges."""
        employees = await self.backend.list_employees()
        projects = await self.backend.list_projects()
        allocations = await self.backend.list_allocations()
        self.sprints[:] = sprint_window(
            self.today,
            self.settings.sprint_lookahead,
            self.settings.sprint_reference_epoch,
        )
        self.employees[:] = employees
        self.projects[:] = projects
        self.allocations[:] = allocations
        self._stored_ranges.clear()
        for project in projects:
            self._remember_range(project)
        self.refresh_project_ranges()
        logger.info(
            "Loaded %s employees, %s projects, %s allocations over %s sprints",
            len(employees),
            len(projects),
            len(allocations),
            len(self.sprints),
        )

    def close(self) -> None:
        self._unsubscribe()
        self.store.clear_listeners()
        for collection in (self.employees, self.projects, self.allocations, self.sprints):
            collection.clear()
        self._stored_ranges.clear()

    def _on_mutation(self, event: MutationEvent) -> None:
        self.refresh_project_ranges()

    def _remember_range(self, project: Project) -> None:
        self._stored_ranges[project.id] = (project.start_date, project.end_date)

    def _with_stored_range(self, project: Project) -> Project:
        stored = self._stored_ranges.get(project.id)
        if stored is None:
            return project
        start_date, end_date = stored
        return project.model_copy(update={"start_date": start_date, "end_date": end_date})

    def refresh_project_ranges(self) -> None:
        """Re-derive every project's range from its stored dates and current allocations."""
        self.projects[:] = calculate_project_date_ranges(
            [self._with_stored_range(p) for p in self.projects],
            self.allocations,
            self.sprints,
            self.settings.sprint_id_ordering,
        )

    @property
    def active_sprint(self) -> Sprint | None:
        return find_active_sprint(self.sprints, self.today)

    def get_employee(self, employee_id: str) -> Employee | None:
        return next((e for e in self.employees if e.id == employee_id), None)

    def get_project(self, project_id: str) -> Project | None:
        return next((p for p in self.projects if p.id == project_id), None)

    def get_sprint(self, sprint_id: str) -> Sprint | None:
        return next((s for s in self.sprints if s.id == sprint_id), None)

    def employee_allocations(self, employee_id: str) -> list[Allocation]:
        return [a for a in self.allocations if a.employee_id == employee_id]

    def project_allocations(self, project_id: str) -> list[Allocation]:
        return [a for a in self.allocations if a.project_id == project_id]

    async def update_employee(self, employee_id: str, data: EmployeeUpdate) -> Employee:
        """Persist profile edits. Raises PlannerError on refusal or backend failure."""
        check_capability(self.caller, Capability.EDIT_EMPLOYEE, employee_id).raise_for_denial()
        current = self.get_employee(employee_id)
        if current is None:
            raise NotFound("Employee not found")
        fields: dict[str, Any] = data.model_dump(exclude_unset=True)
        await self.backend.update_employee(employee_id, fields)
        updated = current.model_copy(update=fields)
        self.employees[self.employees.index(current)] = updated
        logger.info("Updated profile %s: %s", employee_id, sorted(fields))
        return updated

    async def add_project(self, data: ProjectCreate) -> Project:
        """Create a project (administrators only) and keep the list sorted by name."""
        check_capability(self.caller, Capability.CREATE_PROJECT).raise_for_denial()
        fields: dict[str, Any] = data.model_dump()
        project_id = await self.backend.insert_project(fields)
        project = Project(id=project_id, **fields)
        self.projects.append(project)
        self.projects.sort(key=lambda p: p.name.lower())
        self._remember_range(project)
        self.refresh_project_ranges()
        logger.info("Added project %s (%s)", project.name, project_id)
        return self.get_project(project_id)

    async def update_project(self, project_id: str, data: ProjectUpdate) -> Project:
        check_capability(self.caller, Capability.MANAGE_PROJECTS).raise_for_denial()
        current = self.get_project(project_id)
        if current is None:
            raise NotFound("Project not found")
        fields: dict[str, Any] = data.model_dump(exclude_unset=True)
        await self.backend.update_project(project_id, fields)
        updated = current.model_copy(update=fields)
        self.projects[self.projects.index(current)] = updated
        self.refresh_project_ranges()
        logger.info("Updated project %s: %s", project_id, sorted(fields))
        return self.get_project(project_id)
