"""
FastAPI dependencies for authentication.

Provides ``db_session``, ``get_auth_service`` and ``get_current_identity``
dependencies that are used across all protected routes.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt_handler import JWTHandler, TokenIdentity, get_jwt_handler
from auth.service import AuthService
from database.session import get_db_session

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401, not FastAPI's default.
_bearer_scheme = HTTPBearer(auto_error=False)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_auth_service(
    session: AsyncSession = Depends(db_session),
    jwt_handler: JWTHandler = Depends(get_jwt_handler),
) -> AuthService:
    return AuthService(session, jwt_handler)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    jwt_handler: JWTHandler = Depends(get_jwt_handler),
) -> TokenIdentity:
    """
    Extract and verify the Bearer token, returning the caller's identity.

    Raises ``HTTPException(401)`` when the header is missing or the token
    does not validate.
    """
    if credentials is None:
        logger.debug("No bearer token on %s %s", request.method, request.url.path)
        raise _unauthorized("Not authenticated")

    identity = jwt_handler.validate(credentials.credentials)
    if identity is None:
        raise _unauthorized("Invalid or expired token")
    return identity
