"""
Pydantic schemas for the board endpoints (threads and messages).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from auth.schemas import CamelModel, UserOut


class ThreadCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)

    @field_validator("title")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ThreadOut(CamelModel):
    id: int
    title: str
    user_id: int
    user: UserOut
    created_at: datetime
    message_count: Optional[int] = None


class ThreadSummary(CamelModel):
    id: int
    title: str
    user_id: int
    created_at: datetime


class MessageCreate(CamelModel):
    """
    New message payload.

    ``user_id`` is accepted for compatibility with older clients but
    ignored: the author is always the authenticated caller.
    """

    content: str = Field(..., min_length=1, max_length=5000)
    thread_id: int
    user_id: Optional[int] = None


class MessageOut(CamelModel):
    id: int
    content: str
    thread_id: int
    user_id: int
    user: UserOut
    thread: Optional[ThreadSummary] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
