"""
Database helper functions — small lookups shared by the auth service
and the board routes.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Thread, User


async def get_user_by_username(session: AsyncSession, username: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[User]:
    return await session.get(User, user_id)


async def username_taken(session: AsyncSession, username: str) -> bool:
    result = await session.execute(select(exists().where(User.username == username)))
    return bool(result.scalar())


async def email_taken(session: AsyncSession, email: str) -> bool:
    result = await session.execute(select(exists().where(User.email == email)))
    return bool(result.scalar())


async def get_thread(session: AsyncSession, thread_id: int) -> Optional[Thread]:
    return await session.get(Thread, thread_id)
