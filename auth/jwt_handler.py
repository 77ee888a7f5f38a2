"""
JWT token creation and verification.

Tokens are HS256-signed JWTs carrying the user's id (``sub``), username
(``unique_name``), email, a unique token id (``jti``), issued-at and
expiry, plus the configured issuer and audience.

Secret, issuer, audience and lifetime come from ``config``
(env vars ``JWT_SECRET``, ``JWT_ISSUER``, ``JWT_AUDIENCE``,
``JWT_EXPIRY_MINUTES``).
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

import jwt
from pydantic import BaseModel

from config.settings import config

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIdentity(BaseModel):
    """Caller identity recovered from a valid token."""

    user_id: int
    username: str
    email: str
    token_id: str
    issued_at: datetime
    expires_at: datetime


class JWTHandler:
    """Issue and validate signed, time-limited bearer tokens."""

    def __init__(
        self,
        secret: str,
        issuer: str,
        audience: str,
        expiry_minutes: int = 60,
        algorithm: str = "HS256",
        clock: Clock = _utcnow,
    ):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        if expiry_minutes <= 0:
            raise ValueError("Token expiry must be positive")

        self._secret = secret
        self.issuer = issuer
        self.audience = audience
        self.expiry = timedelta(minutes=expiry_minutes)
        self.algorithm = algorithm
        self._clock = clock

    def issue(self, user_id: int, username: str, email: str) -> str:
        """Create a signed token for the given user."""
        now = self._clock()
        payload: Dict[str, Any] = {
            "sub": str(user_id),
            "unique_name": username,
            "email": email,
            "jti": uuid.uuid4().hex,
            "iat": int(now.timestamp()),
            "exp": int((now + self.expiry).timestamp()),
            "iss": self.issuer,
            "aud": self.audience,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def validate(self, token: str) -> Optional[TokenIdentity]:
        """
        Verify signature, issuer, audience and expiry.

        Returns the caller identity, or ``None`` for any invalid token.
        Expiry is checked against this handler's clock with no leeway.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
                options={
                    "require": ["sub", "exp", "iat", "jti", "iss", "aud"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            logger.warning("Rejected token: %s", exc)
            return None

        if payload["exp"] <= self._clock().timestamp():
            logger.warning("Rejected token: expired (jti=%s)", payload.get("jti"))
            return None

        try:
            return TokenIdentity(
                user_id=int(payload["sub"]),
                username=payload["unique_name"],
                email=payload["email"],
                token_id=payload["jti"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Rejected token: malformed claims (%s)", exc)
            return None

    def is_valid(self, token: str) -> bool:
        return self.validate(token) is not None


def decode_unverified(token: str) -> Optional[Dict[str, Any]]:
    """Read a token's claims without checking anything. Never trust the result."""
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None


@lru_cache(maxsize=1)
def get_jwt_handler() -> JWTHandler:
    """Process-wide handler built from ``config``."""
    return JWTHandler(
        secret=config.jwt_secret,
        issuer=config.jwt_issuer,
        audience=config.jwt_audience,
        expiry_minutes=config.jwt_expiry_minutes,
        algorithm=config.jwt_algorithm,
    )
