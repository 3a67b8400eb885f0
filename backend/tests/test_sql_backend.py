# ruff: noqa

import asyncio
from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from planner.config import Settings
from planner.database import Base
from planner.errors import BackendError
from planner.models import Allocation, AuditLog, Profile, Project, ProjectColor, Role
from planner.schemas.auth import Caller
from planner.services.backend import SqlAlchemyBackend
from planner.services.planner import PlannerSession


def run_with_db(scenario):
    async def _run():
        engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        maker = async_sessionmaker(engine, expire_on_commit=False)
        try:
            async with maker() as db:
                db.add_all(
                    [
                        Profile(id="e1", name="Alice", role=Role.BACKEND.value, vacation_dates=["2025-01-07"]),
                        Profile(id="e2", name="Bob", role=Role.MANAGER.value, vacation_dates=[]),
                        Project(id="p1", name="Apollo", color=ProjectColor.PINK),
                    ]
                )
                await db.commit()
                return await scenario(db)
        finally:
            await engine.dispose()

    return asyncio.run(_run())


def test_lists_map_rows_to_schemas():
    async def scenario(db):
        backend = SqlAlchemyBackend(db)
        return await backend.list_employees(), await backend.list_projects()

    employees, projects = run_with_db(scenario)
    assert [e.name for e in employees] == ["Alice", "Bob"]
    assert employees[0].vacation_dates == [date(2025, 1, 7)]
    assert employees[1].role == Role.MANAGER
    assert projects[0].color == ProjectColor.PINK


def test_profiles_with_unknown_role_are_skipped():
    async def scenario(db):
        db.add(Profile(id="e9", name="Zed", role="Wizard", vacation_dates=[]))
        await db.commit()
        return await SqlAlchemyBackend(db).list_employees()

    assert [e.id for e in run_with_db(scenario)] == ["e1", "e2"]


def test_legacy_rows_get_sprint_id_from_week():
    async def scenario(db):
        db.add(Allocation(id="a1", user_id="e1", project_id="p1", sprint_id=None, week=date(2025, 1, 20), days=3))
        await db.commit()
        return await SqlAlchemyBackend(db).list_allocations()

    (allocation,) = run_with_db(scenario)
    assert allocation.sprint_id == "sprint-2"
    assert allocation.employee_id == "e1"


def test_insert_update_delete_are_audited():
    async def scenario(db):
        backend = SqlAlchemyBackend(db, actor_id="e2")
        allocation_id = await backend.insert_allocation("e1", "p1", "sprint-3", 4)
        row = await db.get(Allocation, allocation_id)
        stored = (row.week, row.sprint_id, row.days)
        await backend.update_allocation_days(allocation_id, 6)
        updated_days = (await db.get(Allocation, allocation_id)).days
        await backend.delete_allocation(allocation_id)
        remaining = (await db.execute(select(Allocation))).scalars().all()
        actions = (await db.execute(select(AuditLog.action).order_by(AuditLog.id))).scalars().all()
        return stored, updated_days, remaining, actions

    stored, updated_days, remaining, actions = run_with_db(scenario)
    assert stored == (date(2025, 2, 3), "sprint-3", 4)
    assert updated_days == 6
    assert remaining == []
    assert actions == ["add_allocation", "update_allocation", "delete_allocation"]


def test_insert_project_is_audited():
    async def scenario(db):
        backend = SqlAlchemyBackend(db, actor_id="e2")
        project_id = await backend.insert_project(
            {"name": "Orbit", "color": ProjectColor.GREEN, "start_date": date(2025, 3, 3), "end_date": None}
        )
        row = await db.get(Project, project_id)
        audit = (await db.execute(select(AuditLog))).scalars().one()
        return (row.name, row.color, row.start_date), (audit.action, audit.entity_id, audit.user_id)

    stored, audit = run_with_db(scenario)
    assert stored == ("Orbit", ProjectColor.GREEN, date(2025, 3, 3))
    assert audit[0] == "add_project"
    assert audit[1] is not None
    assert audit[2] == "e2"


def test_missing_rows_raise_backend_error():
    async def scenario(db):
        backend = SqlAlchemyBackend(db)
        with pytest.raises(BackendError):
            await backend.delete_allocation("missing")
        with pytest.raises(BackendError):
            await backend.update_project("missing", {"name": "X"})
        with pytest.raises(BackendError):
            await backend.insert_allocation("e1", "p1", "backlog", 2)
        return await backend.validate_employee_exists("e1"), await backend.validate_employee_exists("nope")

    assert run_with_db(scenario) == (True, False)


def test_update_employee_stores_iso_dates():
    async def scenario(db):
        await SqlAlchemyBackend(db).update_employee(
            "e1", {"vacation_dates": [date(2025, 3, 3)], "role": Role.QA, "email": "ignored@x"}
        )
        return await db.get(Profile, "e1")

    profile = run_with_db(scenario)
    assert profile.vacation_dates == ["2025-03-03"]
    assert profile.role == "QA"
    assert profile.email is None


def test_session_round_trip_over_database():
    async def scenario(db):
        caller = Caller(id="e2", role=Role.MANAGER.value)
        session = PlannerSession(SqlAlchemyBackend(db, caller.id), caller, Settings(sprint_lookahead=4), today=date(2025, 1, 8))
        await session.load()
        result = await session.store.add_allocation("e1", "p1", "sprint-2", 5)
        reloaded = PlannerSession(SqlAlchemyBackend(db), caller, Settings(sprint_lookahead=4), today=date(2025, 1, 8))
        await reloaded.load()
        return result, reloaded

    result, reloaded = run_with_db(scenario)
    assert result.ok
    assert [(a.id, a.sprint_id, a.days) for a in reloaded.allocations] == [(result.allocation.id, "sprint-2", 5)]
    assert reloaded.get_project("p1").start_date == date(2025, 1, 20)
