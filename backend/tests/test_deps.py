# ruff: noqa

import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from planner import deps
from planner.errors import BackendError
from planner.services.planner import PlannerSession


class BrokenDb:
    """AsyncSession stand-in whose queries always fail."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    async def rollback(self) -> None:
        pass


def test_session_is_closed_when_load_fails(monkeypatch, manager):
    closed = []

    class RecordingSession(PlannerSession):
        def close(self) -> None:
            closed.append(self.caller.id)
            super().close()

    monkeypatch.setattr(deps, "PlannerSession", RecordingSession)

    async def scenario():
        dependency = deps.get_planner(BrokenDb(), manager)
        with pytest.raises(BackendError):
            await dependency.__anext__()

    asyncio.run(scenario())
    assert closed == ["mgr"]
