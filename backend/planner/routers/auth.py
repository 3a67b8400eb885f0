"""Auth API routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from planner.auth.deps import get_current_caller
from planner.auth.jwt import create_access_token
from planner.database import get_db
from planner.schemas.auth import Caller, Token, UserLogin
from planner.services.auth_service import authenticate_profile, profile_to_caller

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
async def login(
    data: UserLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    profile = await authenticate_profile(db, data)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    token = create_access_token(profile.id)
    return Token(access_token=token, caller=profile_to_caller(profile))


@router.get("/me", response_model=Caller)
async def me(caller: Annotated[Caller, Depends(get_current_caller)]):
    return caller
