"""
Board API routes — threads, messages and a health probe.

Read endpoints are public.  Every mutating endpoint requires a bearer
token, and the author recorded is always the token's identity.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.schemas import MessageCreate, MessageOut, ThreadCreate, ThreadOut
from auth.dependencies import db_session, get_current_identity
from auth.jwt_handler import TokenIdentity
from database.helpers import get_thread, get_user_by_id
from database.models import Message, Thread

logger = logging.getLogger(__name__)

router = APIRouter()


async def _require_author(session: AsyncSession, identity: TokenIdentity) -> None:
    # A valid token can outlive its account.
    if await get_user_by_id(session, identity.user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def _load_message(session: AsyncSession, message_id: int) -> Optional[Message]:
    result = await session.execute(
        select(Message)
        .where(Message.id == message_id)
        .options(selectinload(Message.user), selectinload(Message.thread))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


# ── Health ─────────────────────────────────────────────────────────────


@router.get("/health", tags=["health"])
async def health() -> dict:
    return {"status": "ok"}


# ── Threads ────────────────────────────────────────────────────────────


@router.get("/threads", response_model=List[ThreadOut], tags=["threads"])
async def list_threads(session: AsyncSession = Depends(db_session)):
    """All threads, newest first, with their message counts."""
    result = await session.execute(
        select(Thread, func.count(Message.id))
        .outerjoin(Message, Message.thread_id == Thread.id)
        .group_by(Thread.id)
        .options(selectinload(Thread.user))
        .order_by(Thread.created_at.desc(), Thread.id.desc())
    )
    return [
        ThreadOut.model_validate(thread).model_copy(update={"message_count": count})
        for thread, count in result.all()
    ]


@router.get("/threads/{thread_id}", response_model=ThreadOut, tags=["threads"])
async def get_thread_by_id(thread_id: int, session: AsyncSession = Depends(db_session)):
    result = await session.execute(
        select(Thread).where(Thread.id == thread_id).options(selectinload(Thread.user))
    )
    thread = result.scalar_one_or_none()
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")

    count = await session.scalar(
        select(func.count(Message.id)).where(Message.thread_id == thread_id)
    )
    return ThreadOut.model_validate(thread).model_copy(update={"message_count": count or 0})


@router.post(
    "/threads",
    response_model=ThreadOut,
    status_code=status.HTTP_201_CREATED,
    tags=["threads"],
)
async def create_thread(
    req: ThreadCreate,
    identity: TokenIdentity = Depends(get_current_identity),
    session: AsyncSession = Depends(db_session),
):
    await _require_author(session, identity)

    thread = Thread(title=req.title, user_id=identity.user_id)
    session.add(thread)
    await session.flush()

    result = await session.execute(
        select(Thread).where(Thread.id == thread.id).options(selectinload(Thread.user))
        .execution_options(populate_existing=True)
    )
    created = ThreadOut.model_validate(result.scalar_one()).model_copy(update={"message_count": 0})
    await session.commit()

    logger.info("Created thread %s by user %s", created.id, identity.user_id)
    return created


# ── Messages ───────────────────────────────────────────────────────────


@router.get("/messages", response_model=List[MessageOut], tags=["messages"])
async def list_messages(
    thread_id: Optional[int] = Query(None, alias="threadId"),
    session: AsyncSession = Depends(db_session),
):
    """Messages newest first, optionally restricted to one thread."""
    stmt = (
        select(Message)
        .options(selectinload(Message.user), selectinload(Message.thread))
        .order_by(Message.created_at.desc(), Message.id.desc())
    )
    if thread_id is not None:
        stmt = stmt.where(Message.thread_id == thread_id)

    result = await session.execute(stmt)
    messages = result.scalars().all()
    logger.debug("Retrieved %d messages (thread=%s)", len(messages), thread_id)
    return messages


@router.get("/messages/{message_id}", response_model=MessageOut, tags=["messages"])
async def get_message(message_id: int, session: AsyncSession = Depends(db_session)):
    message = await _load_message(session, message_id)
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return message


@router.post(
    "/messages",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
    tags=["messages"],
)
async def create_message(
    req: MessageCreate,
    identity: TokenIdentity = Depends(get_current_identity),
    session: AsyncSession = Depends(db_session),
):
    if req.user_id is not None and req.user_id != identity.user_id:
        logger.warning(
            "Ignoring client-supplied userId=%s; author is user %s",
            req.user_id, identity.user_id,
        )

    if await get_thread(session, req.thread_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Thread not found")
    await _require_author(session, identity)

    message = Message(
        content=req.content,
        thread_id=req.thread_id,
        user_id=identity.user_id,
    )
    session.add(message)
    await session.flush()

    created = MessageOut.model_validate(await _load_message(session, message.id))
    await session.commit()

    logger.info("Created message %s by user %s", created.id, identity.user_id)
    return created


@router.delete(
    "/messages/{message_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["messages"],
)
async def delete_message(
    message_id: int,
    identity: TokenIdentity = Depends(get_current_identity),
    session: AsyncSession = Depends(db_session),
):
    message = await session.get(Message, message_id)
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    if message.user_id != identity.user_id:
        logger.warning(
            "User %s tried to delete message %s owned by %s",
            identity.user_id, message_id, message.user_id,
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not the author")

    await session.delete(message)
    await session.commit()

    logger.info("Deleted message %s", message_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
