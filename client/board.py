"""
Board state for the client: the loaded message list and its sort order.

Failures never raise to the caller; they become notifications.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import ValidationError

from api.schemas import MessageOut
from client.api_client import ApiError
from client.session import SessionManager

logger = logging.getLogger(__name__)

SORT_ORDERS = ("asc", "desc")


class BoardState:
    def __init__(self, session: SessionManager):
        self.session = session
        self._messages: List[MessageOut] = []
        self._sort_order = "desc"

    @property
    def messages(self) -> List[MessageOut]:
        return list(self._messages)

    @property
    def sort_order(self) -> str:
        return self._sort_order

    def set_sort_order(self, order: str) -> None:
        if order not in SORT_ORDERS:
            raise ValueError(f"sort order must be one of {SORT_ORDERS}")
        self._sort_order = order

    def sorted_messages(self) -> List[MessageOut]:
        return sorted(
            self._messages,
            key=lambda m: (m.created_at, m.id),
            reverse=self._sort_order == "desc",
        )

    def clear_messages(self) -> None:
        self._messages = []

    async def test_connection(self) -> bool:
        try:
            await self.session.api.test_connection()
        except ApiError as exc:
            logger.error("API connection failed: %s", exc)
            self.session.notifications.error(
                "Cannot connect to server. Please make sure the API is running."
            )
            return False
        return True

    async def load_messages(self, thread_id: Optional[int] = None) -> bool:
        try:
            raw = await self.session.api.get_messages(thread_id)
            messages = [MessageOut.model_validate(m) for m in raw or []]
        except (ApiError, ValidationError) as exc:
            logger.error("Failed to load messages: %s", exc)
            self.session.notifications.error("Failed to load messages. Please try again.")
            return False

        self._messages = messages
        logger.debug("Loaded %d messages", len(messages))
        return True

    async def create_message(self, content: str, thread_id: int) -> Optional[MessageOut]:
        if not self.session.is_authenticated:
            self.session.notifications.error("You must be logged in to send messages.")
            return None

        try:
            raw = await self.session.api.create_message(content, thread_id)
            message = MessageOut.model_validate(raw)
        except (ApiError, ValidationError) as exc:
            logger.error("Failed to create message: %s", exc)
            self.session.notifications.error("Failed to send message. Please try again.")
            return None

        self._messages.append(message)
        return message
