"""Auth schemas."""
from pydantic import BaseModel


class Caller(BaseModel):
    """Identity and role of whoever is issuing planner calls."""

    id: str
    role: str | None = None
    is_admin: bool = False


class UserLogin(BaseModel):
    email: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    caller: Caller
