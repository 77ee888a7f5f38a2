"""
Sample data for local development.

Seeded users carry an empty password hash, so they own content but
cannot log in.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Message, Thread, User

logger = logging.getLogger(__name__)

_USERS = [
    ("admin", "admin@messageboard.com", 30),
    ("john_doe", "john@example.com", 20),
    ("jane_smith", "jane@example.com", 15),
]

_THREADS = [
    ("Welcome to the Message Board!", 0, 10),
    ("General Discussion", 1, 8),
    ("Feature Requests", 2, 5),
]

# (content, thread index, author index, days ago)
_MESSAGES = [
    ("Welcome everyone! This is our new message board. Feel free to discuss anything here.", 0, 0, 10),
    ("Thanks for setting this up! Looking forward to great discussions.", 0, 1, 9),
    ("This is awesome! The interface looks really clean.", 0, 2, 9),
    ("Hey everyone! What's your favorite programming language and why?", 1, 1, 7),
    ("I love Python! Readable code without losing flexibility.", 1, 2, 6),
    ("Type hints plus a good test suite make large projects manageable.", 1, 0, 6),
    ("It would be great to have notifications when someone replies to your messages.", 2, 2, 4),
    ("Great idea! Let's collect requirements in this thread first.", 2, 0, 3),
]


async def seed_sample_data(session: AsyncSession) -> bool:
    """Insert sample users, threads and messages into an empty database.

    Returns ``True`` when data was inserted, ``False`` if users already exist.
    """
    count = await session.scalar(select(func.count()).select_from(User))
    if count:
        logger.debug("Skipping seed: %d users already present", count)
        return False

    now = datetime.now(timezone.utc)

    users = [
        User(username=name, email=email, password_hash="", created_at=now - timedelta(days=age))
        for name, email, age in _USERS
    ]
    session.add_all(users)
    await session.flush()

    threads = [
        Thread(title=title, user_id=users[owner].id, created_at=now - timedelta(days=age))
        for title, owner, age in _THREADS
    ]
    session.add_all(threads)
    await session.flush()

    session.add_all(
        Message(
            content=content,
            thread_id=threads[thread].id,
            user_id=users[author].id,
            created_at=now - timedelta(days=age),
        )
        for content, thread, author, age in _MESSAGES
    )
    await session.flush()

    logger.info(
        "Seeded %d users, %d threads, %d messages",
        len(users), len(threads), len(_MESSAGES),
    )
    return True
