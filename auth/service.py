"""
Auth service — registration and login orchestration.

Uniqueness of usernames and emails is guaranteed by the database's
unique constraints.  The existence queries before the insert only pick
a friendlier message; an ``IntegrityError`` on insert is treated as the
authoritative duplicate signal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.exceptions import (
    AuthError,
    DuplicateEmail,
    DuplicateUsername,
    InternalError,
    InvalidCredentials,
)
from auth.jwt_handler import JWTHandler
from auth.password import hash_password, needs_rehash, verify_password
from auth.schemas import UserOut
from database.helpers import email_taken, get_user_by_username, username_taken
from database.models import User

logger = logging.getLogger(__name__)

REGISTRATION_FAILED = "An error occurred during registration"
LOGIN_FAILED = "An error occurred during login"


@lru_cache(maxsize=1)
def _placeholder_hash() -> str:
    """bcrypt hash checked against when no account (or no password) matches."""
    return hash_password("message-board-placeholder")


@dataclass
class AuthResult:
    token: str
    user: UserOut


class AuthService:
    def __init__(self, session: AsyncSession, jwt_handler: JWTHandler):
        self.session = session
        self.jwt_handler = jwt_handler

    async def register(self, username: str, email: str, password: str) -> AuthResult:
        """Create an account and issue a token for it."""
        try:
            if await username_taken(self.session, username):
                raise DuplicateUsername()
            if await email_taken(self.session, email):
                raise DuplicateEmail()
        except SQLAlchemyError:
            logger.exception("Registration lookup failed for %s", username)
            raise InternalError(REGISTRATION_FAILED)

        try:
            password_hash = hash_password(password)
        except ValueError as exc:
            raise AuthError(str(exc))

        user = User(username=username, email=email, password_hash=password_hash)
        self.session.add(user)
        try:
            await self.session.flush()
            profile = UserOut.model_validate(user)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise await self._conflict_error(username, email)
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception("Failed to persist user %s", username)
            raise InternalError(REGISTRATION_FAILED)

        token = self.jwt_handler.issue(profile.id, profile.username, profile.email)
        logger.info("Registered user %s (id=%s)", profile.username, profile.id)
        return AuthResult(token=token, user=profile)

    async def login(self, username: str, password: str) -> AuthResult:
        """Verify credentials and issue a token."""
        try:
            user = await get_user_by_username(self.session, username)
        except SQLAlchemyError:
            logger.exception("Login lookup failed for %s", username)
            raise InternalError(LOGIN_FAILED)

        if user is None or not user.password_hash:
            # Same bcrypt cost as a wrong password for a real account.
            verify_password(password, _placeholder_hash())
            logger.warning("Failed login for username=%s", username)
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            logger.warning("Failed login for username=%s", username)
            raise InvalidCredentials()

        # Snapshot before the optional upgrade; a rollback would expire `user`.
        profile = UserOut.model_validate(user)
        if needs_rehash(user.password_hash):
            await self._upgrade_hash(user, profile.id, password)

        token = self.jwt_handler.issue(profile.id, profile.username, profile.email)
        logger.info("Login: %s (id=%s)", profile.username, profile.id)
        return AuthResult(token=token, user=profile)

    async def _conflict_error(self, username: str, email: str) -> AuthError:
        # Another writer won the race; ask the database which column clashed.
        try:
            if await username_taken(self.session, username):
                return DuplicateUsername()
            if await email_taken(self.session, email):
                return DuplicateEmail()
        except SQLAlchemyError:
            logger.exception("Conflict lookup failed for %s", username)
        logger.error("Integrity error registering %s with no visible duplicate", username)
        return InternalError(REGISTRATION_FAILED)

    async def _upgrade_hash(self, user: User, user_id: int, password: str) -> None:
        try:
            user.password_hash = hash_password(password)
            await self.session.commit()
            logger.info("Upgraded legacy password hash for user id=%s", user_id)
        except (SQLAlchemyError, ValueError):
            # The old digest still works; retry on the next login.
            await self.session.rollback()
            logger.exception("Could not upgrade password hash for user id=%s", user_id)
