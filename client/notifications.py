"""
Transient user-facing notifications.

Each notification auto-dismisses ``ttl`` seconds after it was posted;
``active()`` only returns the ones still showing.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5.0


@dataclass
class Notification:
    message: str
    level: str
    posted_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now >= self.posted_at + self.ttl


class Notifications:
    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._items: List[Notification] = []

    def error(self, message: str) -> Notification:
        return self._post(message, "error")

    def info(self, message: str) -> Notification:
        return self._post(message, "info")

    def _post(self, message: str, level: str) -> Notification:
        self._prune()
        item = Notification(message=message, level=level, posted_at=self._clock(), ttl=self.ttl)
        # Newest first, like the alert stack it replaces.
        self._items.insert(0, item)
        logger.info("[%s] %s", level, message)
        return item

    def _prune(self) -> None:
        now = self._clock()
        self._items = [n for n in self._items if not n.expired(now)]

    def active(self) -> List[Notification]:
        self._prune()
        return list(self._items)

    def dismiss(self, item: Notification) -> None:
        if item in self._items:
            self._items.remove(item)

    def clear(self) -> None:
        self._items.clear()
