"""Pydantic schemas for users, login and session responses."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["admin", "user", "guest"]


class User(BaseModel):
    """Authenticated user as seen by the gateway (read-only reference data)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable user identifier.")
    email: str = Field(..., description="Login email address.")
    name: str = Field(..., description="Display name.")
    role: Role = Field(..., description="Authorization role: admin, user or guest.")


class LoginRequest(BaseModel):
    """Credentials submitted to the login endpoint."""

    email: str = Field(..., min_length=1, description="Account email address.")
    password: str = Field(..., min_length=1, description="Account password.")


class LoginResponse(BaseModel):
    """Successful login payload. The session token travels only in the cookie."""

    success: bool = True
    user: User


class LogoutResponse(BaseModel):
    success: bool = True


class CurrentUserResponse(BaseModel):
    user: User
