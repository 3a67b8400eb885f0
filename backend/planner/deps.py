"""Planner session dependency for FastAPI."""
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from planner.auth.deps import get_current_caller
from planner.config import get_settings
from planner.database import get_db
from planner.schemas.auth import Caller
from planner.services.backend import SqlAlchemyBackend
from planner.services.planner import PlannerSession


async def get_planner(
    db: Annotated[AsyncSession, Depends(get_db)],
    caller: Annotated[Caller, Depends(get_current_caller)],
) -> AsyncIterator[PlannerSession]:
    session = PlannerSession(SqlAlchemyBackend(db, actor_id=caller.id), caller, get_settings())
    try:
        await session.load()
        yield session
    finally:
        session.close()
