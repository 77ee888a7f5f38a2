"""
Pydantic schemas for the auth endpoints.

Responses use camelCase keys (``createdAt``) to match the client.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Requests ────────────────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("username", "email")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def _looks_like_email(cls, value: str) -> str:
        local, _, domain = value.partition("@")
        if not local or not domain:
            raise ValueError("Invalid email address")
        return value


class LoginRequest(BaseModel):
    username: str
    password: str


# ── Responses ───────────────────────────────────────────────────────────


class UserOut(CamelModel):
    id: int
    username: str
    email: str
    created_at: datetime


class AuthResponse(CamelModel):
    success: bool
    message: str
    token: Optional[str] = None
    user: Optional[UserOut] = None
