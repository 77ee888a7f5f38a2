"""
Auth API routes — register, login, current user.

Route prefix: /api/auth
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_auth_service, get_current_identity
from auth.exceptions import AuthError
from auth.jwt_handler import TokenIdentity
from auth.schemas import AuthResponse, LoginRequest, RegisterRequest, UserOut
from auth.service import AuthService
from database.helpers import get_user_by_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _failure(exc: AuthError) -> JSONResponse:
    body = AuthResponse(success=False, message=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(by_alias=True, exclude_none=True, mode="json"),
    )


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, response_model_exclude_none=True)
async def register(
    req: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Register a new user."""
    try:
        result = await service.register(req.username, req.email, req.password)
    except AuthError as exc:
        return _failure(exc)

    return AuthResponse(
        success=True,
        message="Registration successful",
        token=result.token,
        user=result.user,
    )


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Login with username + password."""
    try:
        result = await service.login(req.username, req.password)
    except AuthError as exc:
        return _failure(exc)

    return AuthResponse(
        success=True,
        message="Login successful",
        token=result.token,
        user=result.user,
    )


@router.get("/me", response_model=UserOut)
async def me(
    identity: TokenIdentity = Depends(get_current_identity),
    session: AsyncSession = Depends(db_session),
):
    """Return the authenticated user; 401 if the account no longer exists."""
    user = await get_user_by_id(session, identity.user_id)
    if user is None:
        logger.warning("Token for deleted user id=%s", identity.user_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
