# ruff: noqa

import asyncio
import os
from datetime import date, timedelta
from typing import Any

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest

from planner.config import Settings
from planner.errors import BackendError
from planner.models.employee import Role
from planner.models.project import ProjectColor
from planner.schemas.allocation import Allocation
from planner.schemas.auth import Caller
from planner.schemas.employee import Employee
from planner.schemas.project import Project
from planner.services.planner import PlannerSession

EPOCH = date(2025, 1, 6)
TODAY = date(2025, 1, 8)


def sprint_start(number: int) -> date:
    return EPOCH + timedelta(days=14 * (number - 1))


def sprint_weekdays(number: int) -> list[date]:
    start = sprint_start(number)
    return [start + timedelta(days=o) for o in (0, 1, 2, 3, 4, 7, 8, 9, 10, 11)]


class FakeBackend:
    """In-memory PlannerBackend with failure injection per method name."""

    def __init__(self, employees=None, projects=None, allocations=None) -> None:
        self.employees: list[Employee] = list(employees or [])
        self.projects: list[Project] = list(projects or [])
        self.allocations: dict[str, Allocation] = {a.id: a for a in allocations or []}
        self.fail_on: set[str] = set()
        self.fail_after: dict[str, int] = {}
        self.calls: list[tuple[str, Any]] = []
        self._next_id = 1

    def _maybe_fail(self, method: str) -> None:
        if method in self.fail_after:
            if self.fail_after[method] <= 0:
                raise BackendError(f"{method} failed")
            self.fail_after[method] -= 1
        if method in self.fail_on:
            raise BackendError(f"{method} failed")

    async def list_employees(self) -> list[Employee]:
        self._maybe_fail("list_employees")
        return list(self.employees)

    async def list_projects(self) -> list[Project]:
        self._maybe_fail("list_projects")
        return list(self.projects)

    async def list_allocations(self) -> list[Allocation]:
        self._maybe_fail("list_allocations")
        return list(self.allocations.values())

    async def insert_allocation(self, employee_id, project_id, sprint_id, days) -> str:
        self.calls.append(("insert_allocation", (employee_id, project_id, sprint_id, days)))
        self._maybe_fail("insert_allocation")
        new_id = f"alloc-{self._next_id}"
        self._next_id += 1
        self.allocations[new_id] = Allocation(
            id=new_id, employee_id=employee_id, project_id=project_id, sprint_id=sprint_id, days=days
        )
        return new_id

    async def update_allocation_days(self, allocation_id, days) -> None:
        self.calls.append(("update_allocation_days", (allocation_id, days)))
        self._maybe_fail("update_allocation_days")
        current = self.allocations[allocation_id]
        self.allocations[allocation_id] = current.model_copy(update={"days": days})

    async def delete_allocation(self, allocation_id) -> None:
        self.calls.append(("delete_allocation", allocation_id))
        self._maybe_fail("delete_allocation")
        self.allocations.pop(allocation_id, None)

    async def update_employee(self, employee_id, fields) -> None:
        self.calls.append(("update_employee", (employee_id, fields)))
        self._maybe_fail("update_employee")

    async def insert_project(self, fields) -> str:
        self.calls.append(("insert_project", fields))
        self._maybe_fail("insert_project")
        new_id = f"proj-{self._next_id}"
        self._next_id += 1
        self.projects.append(Project(id=new_id, **fields))
        return new_id

    async def update_project(self, project_id, fields) -> None:
        self.calls.append(("update_project", (project_id, fields)))
        self._maybe_fail("update_project")

    async def validate_employee_exists(self, employee_id) -> bool:
        self._maybe_fail("validate_employee_exists")
        return any(e.id == employee_id for e in self.employees)


def make_employee(employee_id: str, name: str, role: Role = Role.BACKEND, **kwargs) -> Employee:
    return Employee(id=employee_id, name=name, role=role, **kwargs)


def make_project(project_id: str, name: str, **kwargs) -> Project:
    return Project(id=project_id, name=name, color=kwargs.pop("color", ProjectColor.BLUE), **kwargs)


def load_session(backend: FakeBackend, caller: Caller | None, settings: Settings | None = None) -> PlannerSession:
    session = PlannerSession(backend, caller, settings or Settings(sprint_lookahead=9), today=TODAY)
    asyncio.run(session.load())
    return session


@pytest.fixture
def manager() -> Caller:
    return Caller(id="mgr", role=Role.MANAGER.value)


@pytest.fixture
def admin() -> Caller:
    return Caller(id="adm", role=Role.QA.value, is_admin=True)


@pytest.fixture
def developer() -> Caller:
    return Caller(id="e1", role=Role.BACKEND.value)


@pytest.fixture
def employees() -> list[Employee]:
    return [
        make_employee("e1", "Alice"),
        make_employee("e2", "Bob", Role.FRONTEND, vacation_dates=sprint_weekdays(2)),
        make_employee("e3", "Carol", Role.QA, archived=True),
    ]


@pytest.fixture
def projects() -> list[Project]:
    return [
        make_project("p1", "Apollo"),
        make_project("p2", "Legacy", archived=True),
        make_project("p3", "Zephyr", end_date=sprint_start(4)),
    ]


@pytest.fixture
def backend(employees, projects) -> FakeBackend:
    return FakeBackend(employees, projects)


@pytest.fixture
def session(backend, manager) -> PlannerSession:
    return load_session(backend, manager)
