"""Seed an admin profile, a small team and a few projects."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from planner.auth.jwt import get_password_hash
from planner.database import async_session_maker, init_db
from planner.models import Profile, Project, ProjectColor, Role


TEAM = [
    ("Alex Rivera", Role.BACKEND),
    ("Sam Chen", Role.FRONTEND),
    ("Jordan Patel", Role.QA),
    ("Robin Okafor", Role.UI_UX_DESIGN),
]

PROJECTS = [
    ("Mobile App Refresh", ProjectColor.PURPLE),
    ("Billing Platform", ProjectColor.GREEN),
    ("Device Firmware 2.0", ProjectColor.ORANGE),
]


async def seed():
    await init_db()
    async with async_session_maker() as db:
        r = await db.execute(select(Profile).where(Profile.email == "admin@planner.local"))
        admin = r.scalar_one_or_none()
        if not admin:
            admin = Profile(
                email="admin@planner.local",
                hashed_password=get_password_hash("admin123"),
                name="Admin User",
                role=Role.MANAGER.value,
                is_admin=True,
                vacation_dates=[],
            )
            db.add(admin)
            await db.flush()

        for name, role in TEAM:
            r = await db.execute(select(Profile).where(Profile.name == name))
            if not r.scalar_one_or_none():
                db.add(Profile(name=name, role=role.value, vacation_dates=[]))

        for name, color in PROJECTS:
            r = await db.execute(select(Project).where(Project.name == name))
            if not r.scalar_one_or_none():
                db.add(Project(name=name, color=color, lead_id=admin.id))
        await db.commit()
    print("Seeded demo team and admin profile (admin@planner.local / admin123)")


if __name__ == "__main__":
    asyncio.run(seed())
