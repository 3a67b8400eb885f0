"""Add allocations.sprint_id if missing and fill it from week for legacy rows."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select, text

from planner.database import async_session_maker, engine
from planner.engine.sprints import sprint_id_for_date
from planner.models import Allocation


async def migrate():
    async with engine.begin() as conn:
        await conn.execute(text("ALTER TABLE allocations ADD COLUMN IF NOT EXISTS sprint_id VARCHAR(20)"))

    updated = 0
    async with async_session_maker() as db:
        result = await db.execute(select(Allocation).where(Allocation.sprint_id.is_(None)))
        for row in result.scalars():
            row.sprint_id = sprint_id_for_date(row.week)
            updated += 1
        await db.commit()
    print(f"Backfilled sprint_id on {updated} allocation(s)")


if __name__ == "__main__":
    asyncio.run(migrate())
