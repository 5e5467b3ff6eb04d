"""Pydantic schemas for registration and login."""

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=6, max_length=256)


class LoginRequest(BaseModel):
    """No length rules here: a bad password must fail as LoginFail, not 422."""
    username: str
    password: str


class UserRead(BaseModel):
    id: int
    username: str

    model_config = {"from_attributes": True}
