"""Auth API endpoints and the session dependency."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from baby_tracker.api.models import LoginRequest, SignUpRequest
from baby_tracker.domain.errors import NotAuthenticatedError, error_message
from baby_tracker.domain.models import AuthSession, AuthUser

if TYPE_CHECKING:
    from baby_tracker.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

BEARER_PREFIX = "bearer "


def bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    """Extract the access token from an ``Authorization: Bearer`` header."""
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    return authorization[len(BEARER_PREFIX) :].strip() or None


async def require_user(
    request: Request, token: str | None = Depends(bearer_token)
) -> AuthUser:
    """Resolve the request's session to a user or reject it."""
    container: AppContainer = request.app.state.container
    try:
        return container.auth_service.current_user(token)
    except NotAuthenticatedError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)
        ) from exc


@router.post("/signup")
async def sign_up(body: SignUpRequest, request: Request) -> dict[str, object]:
    """Create an account and its profile."""
    container: AppContainer = request.app.state.container
    try:
        session = container.auth_service.sign_up(
            email=body.email,
            password=body.password,
            father_name=body.father_name,
            mother_name=body.mother_name,
            baby_name=body.baby_name,
            timezone=body.timezone,
            profile_pic_url=body.profile_pic_url,
        )
    except Exception as exc:
        logger.exception("Sign-up failed")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_message(exc, "Sign-up failed."),
        ) from exc
    return _serialize_session(session)


@router.post("/login")
async def login(body: LoginRequest, request: Request) -> dict[str, object]:
    """Sign in with email and password."""
    container: AppContainer = request.app.state.container
    try:
        session = container.auth_service.login(body.email, body.password)
    except Exception as exc:
        logger.exception("Login failed")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_message(exc, "Login failed."),
        ) from exc
    return _serialize_session(session)


@router.post("/logout")
async def logout(
    request: Request,
    user: AuthUser = Depends(require_user),
    token: str | None = Depends(bearer_token),
) -> dict[str, str]:
    """Revoke the session and drop the user's cached timeline."""
    container: AppContainer = request.app.state.container
    container.timeline_store.discard(user.id)
    try:
        container.auth_service.logout(token or "")
    except Exception as exc:
        logger.exception("Logout failed", extra={"user_id": user.id})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_message(exc, "Failed to log out."),
        ) from exc
    return {"status": "ok"}


def _serialize_session(session: AuthSession) -> dict[str, object]:
    return {
        "user_id": str(session.user.id),
        "email": session.user.email,
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "confirmation_required": session.access_token is None,
    }
