"""
Client-side session manager.

Holds the current token and user in memory and in durable storage,
exposes authentication state, and logs out whenever the API reports
an unauthorized response.

A ``SessionManager`` is constructed explicitly and handed to whatever
needs authentication state.  ``close()`` detaches it from the API
client.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from auth.schemas import UserOut
from client.api_client import ApiClient, ApiError, UnauthorizedError
from client.notifications import Notifications
from client.storage import (
    AUTH_TOKEN_KEY,
    CURRENT_USER_KEY,
    SESSION_KEYS,
    TOKEN_EXPIRY_KEY,
    SessionStorage,
)

logger = logging.getLogger(__name__)

DEFAULT_SESSION_DURATION = timedelta(hours=24)

AuthListener = Callable[[], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_expiry(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    try:
        value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _parse_user(raw: Any) -> Optional[UserOut]:
    if raw is None:
        return None
    try:
        if isinstance(raw, str):
            return UserOut.model_validate_json(raw)
        return UserOut.model_validate(raw)
    except ValidationError:
        return None


class SessionManager:
    def __init__(
        self,
        api: ApiClient,
        storage: SessionStorage,
        notifications: Optional[Notifications] = None,
        *,
        session_duration: timedelta = DEFAULT_SESSION_DURATION,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.api = api
        self.storage = storage
        self.notifications = notifications or Notifications()
        self.session_duration = session_duration
        self._clock = clock

        self._token: Optional[str] = None
        self._user: Optional[UserOut] = None
        self._expiry: Optional[datetime] = None
        self._listeners: List[AuthListener] = []

        self._detach = api.add_unauthorized_handler(self.logout)

    # ── State ───────────────────────────────────────────────────────────

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None and self._user is not None

    @property
    def current_user(self) -> Optional[UserOut]:
        return self._user

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def expiry(self) -> Optional[datetime]:
        return self._expiry

    # ── Subscriptions ───────────────────────────────────────────────────

    def on_auth_change(self, callback: AuthListener) -> Callable[[], None]:
        """Subscribe to auth-state changes; returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    # ── Auth operations ─────────────────────────────────────────────────

    async def login(self, username: str, password: str) -> bool:
        try:
            res = await self.api.login(username, password)
        except ApiError as exc:
            logger.warning("Login failed: %s", exc)
            self.notifications.error("Login failed. Check credentials.")
            return False

        token, user = self._extract(res)
        if token is None or user is None:
            logger.error("Invalid login response: %r", res)
            self.notifications.error("Login failed. Check credentials.")
            return False

        return self._start(token, user)

    async def register(self, username: str, email: str, password: str) -> bool:
        try:
            res = await self.api.register(username, email, password)
        except ApiError as exc:
            logger.warning("Register failed: %s", exc)
            if exc.status_code == 400:
                self.notifications.error(f"Registration failed: {exc.message}")
            else:
                self.notifications.error("Registration failed.")
            return False

        token, user = self._extract(res)
        if token is None or user is None:
            if isinstance(res, dict) and res.get("success"):
                self.notifications.info("Account created. Please log in.")
            else:
                self.notifications.error("Registration failed.")
            return False

        return self._start(token, user)

    def logout(self) -> None:
        """
        Drop the session everywhere.

        Listeners are only told when there was an authenticated session
        to end.
        """
        was_authenticated = self.is_authenticated
        self._token = None
        self._user = None
        self._expiry = None
        self.api.clear_auth_token()
        self._clear_persisted()
        logger.info("Logged out")
        if was_authenticated:
            self._notify()

    async def restore_session(self) -> bool:
        """
        Restore a persisted session at startup.

        A session whose stored expiry has passed (or is missing) is wiped
        without touching the network.  Otherwise the stored token is
        checked once against a protected endpoint; a 401 logs out.
        """
        token = self.storage.get(AUTH_TOKEN_KEY)
        expiry = _parse_expiry(self.storage.get(TOKEN_EXPIRY_KEY))
        user = _parse_user(self.storage.get(CURRENT_USER_KEY))

        if not token or expiry is None or expiry <= self._clock() or user is None:
            self._clear_persisted()
            return False

        self.api.set_auth_token(token)
        try:
            fresh = _parse_user(await self.api.get_current_user())
        except UnauthorizedError:
            # The unauthorized handler has already logged out.
            logger.info("Stored session rejected by server")
            return False
        except ApiError as exc:
            logger.warning("Could not verify stored session: %s", exc)
            self.notifications.error("Cannot connect to server. Using saved session.")
            fresh = None

        self._token = token
        self._user = fresh or user
        self._expiry = expiry
        if fresh is not None:
            try:
                self.storage.set(CURRENT_USER_KEY, fresh.model_dump_json(by_alias=True))
            except OSError:
                logger.exception("Could not persist refreshed user")
        logger.info("Restored session for %s", self._user.username)
        self._notify()
        return True

    def close(self) -> None:
        """Detach from the API client and drop all subscribers."""
        self._detach()
        self._listeners.clear()

    # ── Internals ───────────────────────────────────────────────────────

    @staticmethod
    def _extract(res: Any) -> tuple[Optional[str], Optional[UserOut]]:
        if not isinstance(res, dict):
            return None, None
        token = res.get("token") or None
        user = _parse_user(res.get("user"))
        return token, user

    def _start(self, token: str, user: UserOut) -> bool:
        # Durable storage first; in-memory state only changes once it holds.
        expiry = self._clock() + self.session_duration
        try:
            self.storage.set(AUTH_TOKEN_KEY, token)
            self.storage.set(TOKEN_EXPIRY_KEY, expiry.isoformat())
            self.storage.set(CURRENT_USER_KEY, user.model_dump_json(by_alias=True))
        except OSError:
            logger.exception("Could not persist session for %s", user.username)
            self._clear_persisted()
            self.notifications.error("Could not save session. Please try again.")
            return False

        self._token = token
        self._user = user
        self._expiry = expiry
        self.api.set_auth_token(token)
        logger.info("Authenticated as %s", user.username)
        self._notify()
        return True

    def _clear_persisted(self) -> None:
        try:
            for key in SESSION_KEYS:
                self.storage.remove(key)
        except OSError:
            logger.exception("Could not clear stored session")

