"""Persistence collaborator: the protocol the engine talks to and its SQLAlchemy implementation."""
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, Protocol

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from planner.engine.sprints import sprint_id_for_date, sprint_start_for_id
from planner.errors import BackendError
from planner.models.allocation import Allocation as AllocationRow
from planner.models.audit import AuditLog
from planner.models.employee import Profile
from planner.models.project import Project as ProjectRow
from planner.schemas.allocation import Allocation
from planner.schemas.employee import Employee
from planner.schemas.project import Project

logger = logging.getLogger(__name__)

EMPLOYEE_FIELDS = {"name", "role", "image_url", "vacation_dates", "archived"}
PROJECT_FIELDS = {"name", "color", "lead_id", "ticket_reference", "archived", "start_date", "end_date"}


class PlannerBackend(Protocol):
    """Key-value style store the planner reads from and writes through.

    Every method may raise ``BackendError``.
    """

    async def list_employees(self) -> list[Employee]: ...

    async def list_projects(self) -> list[Project]: ...

    async def list_allocations(self) -> list[Allocation]: ...

    async def insert_allocation(self, employee_id: str, project_id: str, sprint_id: str, days: int) -> str: ...

    async def update_allocation_days(self, allocation_id: str, days: int) -> None: ...

    async def delete_allocation(self, allocation_id: str) -> None: ...

    async def update_employee(self, employee_id: str, fields: dict[str, Any]) -> None: ...

    async def insert_project(self, fields: dict[str, Any]) -> str: ...

    async def update_project(self, project_id: str, fields: dict[str, Any]) -> None: ...

    async def validate_employee_exists(self, employee_id: str) -> bool: ...


def _to_column_value(key: str, value: Any) -> Any:
    if key == "vacation_dates":
        return [d.isoformat() for d in value or []]
    if isinstance(value, Enum) and key == "role":
        return value.value
    return value


def _row_to_allocation(row: AllocationRow) -> Allocation:
    return Allocation(
        id=row.id,
        employee_id=row.user_id,
        project_id=row.project_id,
        sprint_id=row.sprint_id or sprint_id_for_date(row.week),
        days=row.days,
    )


class SqlAlchemyBackend:
    """PlannerBackend over an AsyncSession. Each mutation is committed on its own."""

    def __init__(self, db: AsyncSession, actor_id: str | None = None) -> None:
        self.db = db
        self.actor_id = actor_id

    @asynccontextmanager
    async def _guard(self, action: str):
        try:
            yield
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.warning("Backend call %s failed: %s", action, exc)
            raise BackendError(f"Failed to {action}") from exc

    def _audit(self, action: str, entity_type: str, entity_id: str, old_value=None, new_value=None) -> None:
        self.db.add(AuditLog(
            user_id=self.actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            old_value=None if old_value is None else str(old_value),
            new_value=None if new_value is None else str(new_value),
        ))

    async def list_employees(self) -> list[Employee]:
        async with self._guard("load employees"):
            result = await self.db.execute(select(Profile).order_by(Profile.name))
            rows = result.scalars().all()
        employees = []
        for row in rows:
            try:
                employees.append(Employee.model_validate(row))
            except SchemaValidationError as exc:
                logger.warning("Skipping profile %s with invalid data: %s", row.id, exc)
        return employees

    async def list_projects(self) -> list[Project]:
        async with self._guard("load projects"):
            result = await self.db.execute(select(ProjectRow).order_by(ProjectRow.name))
            rows = result.scalars().all()
        return [Project.model_validate(row) for row in rows]

    async def list_allocations(self) -> list[Allocation]:
        async with self._guard("load allocations"):
            result = await self.db.execute(select(AllocationRow).order_by(AllocationRow.week))
            rows = result.scalars().all()
        return [_row_to_allocation(row) for row in rows]

    async def insert_allocation(self, employee_id: str, project_id: str, sprint_id: str, days: int) -> str:
        week = sprint_start_for_id(sprint_id)
        if week is None:
            raise BackendError(f"Invalid sprint id: {sprint_id}")
        async with self._guard("add allocation"):
            row = AllocationRow(
                user_id=employee_id,
                project_id=project_id,
                sprint_id=sprint_id,
                week=week,
                days=days,
            )
            self.db.add(row)
            await self.db.flush()
            allocation_id = row.id
            self._audit("add_allocation", "allocation", allocation_id, new_value=f"{sprint_id}:{days}")
            await self.db.commit()
        return allocation_id

    async def update_allocation_days(self, allocation_id: str, days: int) -> None:
        async with self._guard("update allocation"):
            row = await self.db.get(AllocationRow, allocation_id)
            if row is None:
                raise BackendError("Allocation not found")
            old_days = row.days
            row.days = days
            self._audit("update_allocation", "allocation", allocation_id, old_value=old_days, new_value=days)
            await self.db.commit()

    async def delete_allocation(self, allocation_id: str) -> None:
        async with self._guard("delete allocation"):
            row = await self.db.get(AllocationRow, allocation_id)
            if row is None:
                raise BackendError("Allocation not found")
            old_value = f"{row.sprint_id}:{row.days}"
            await self.db.delete(row)
            self._audit("delete_allocation", "allocation", allocation_id, old_value=old_value)
            await self.db.commit()

    async def update_employee(self, employee_id: str, fields: dict[str, Any]) -> None:
        async with self._guard("update profile"):
            row = await self.db.get(Profile, employee_id)
            if row is None:
                raise BackendError("Profile not found")
            for key, value in fields.items():
                if key in EMPLOYEE_FIELDS:
                    setattr(row, key, _to_column_value(key, value))
            self._audit("update_profile", "profile", employee_id, new_value=sorted(fields))
            await self.db.commit()

    async def insert_project(self, fields: dict[str, Any]) -> str:
        async with self._guard("add project"):
            row = ProjectRow(**{k: _to_column_value(k, v) for k, v in fields.items() if k in PROJECT_FIELDS})
            self.db.add(row)
            await self.db.flush()
            project_id = row.id
            self._audit("add_project", "project", project_id, new_value=row.name)
            await self.db.commit()
        return project_id

    async def update_project(self, project_id: str, fields: dict[str, Any]) -> None:
        async with self._guard("update project"):
            row = await self.db.get(ProjectRow, project_id)
            if row is None:
                raise BackendError("Project not found")
            for key, value in fields.items():
                if key in PROJECT_FIELDS:
                    setattr(row, key, _to_column_value(key, value))
            self._audit("update_project", "project", project_id, new_value=sorted(fields))
            await self.db.commit()

    async def validate_employee_exists(self, employee_id: str) -> bool:
        async with self._guard("validate employee"):
            result = await self.db.execute(select(Profile.id).where(Profile.id == employee_id))
            return result.scalar_one_or_none() is not None
