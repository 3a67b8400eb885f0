"""Authentication service."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from planner.auth.jwt import verify_password
from planner.models.employee import Profile
from planner.schemas.auth import Caller, UserLogin


async def authenticate_profile(db: AsyncSession, data: UserLogin) -> Profile | None:
    """Authenticate a profile by email and password."""
    result = await db.execute(select(Profile).where(Profile.email == data.email))
    profile = result.scalar_one_or_none()
    if not profile or not profile.hashed_password or profile.archived:
        return None
    if not verify_password(data.password, profile.hashed_password):
        return None
    return profile


def profile_to_caller(profile: Profile) -> Caller:
    return Caller(id=profile.id, role=profile.role, is_admin=profile.is_admin)
