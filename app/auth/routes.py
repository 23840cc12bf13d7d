# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for session-related operations.
#
# Note: Actual signup/login (password, passkeys, two-factor) is handled by
# the auth provider. These routes only report on the session a request
# carries, e.g. for the onboarding page deciding where to send the user.
# =============================================================================

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.auth.models import SessionResponse, SessionUserResponse
from app.dependencies import SessionResolverDep, UserDirectoryDep
from core.services.user_directory import UserDirectoryError

logger = logging.getLogger(__name__)

router = APIRouter()

NO_STORE = {"Cache-Control": "no-store"}


@router.get("/session", response_model=SessionResponse)
async def get_session(
    request: Request,
    resolver: SessionResolverDep,
    directory: UserDirectoryDep,
):
    """
    Get the session attached to this request.

    Returns {"user": null} when there is no valid session. Never cached.
    isOnboarded is null when the user has no row or the users table
    can't be read.

    Returns:
        SessionResponse: The session user with its onboarding flag

    Raises:
        500: If the session can't be checked
    """
    try:
        session = await resolver.resolve(request.headers)
    except Exception as e:
        logger.error(f"Session check error: {e}")
        return JSONResponse(
            status_code=500,
            content={"user": None, "error": "Failed to check session"},
            headers=NO_STORE,
        )

    if session is None:
        return JSONResponse(content={"user": None}, headers=NO_STORE)

    try:
        state = await directory.fetch_onboarding_state(session.user.id)
    except UserDirectoryError as e:
        logger.error(f"Onboarding lookup failed for session user {session.user.id}: {e}")
        state = None

    body = SessionResponse(
        user=SessionUserResponse(
            id=session.user.id,
            email=session.user.email,
            isOnboarded=state.is_onboarded if state else None,
            expiresAt=session.expires_at,
        )
    )
    return JSONResponse(content=body.model_dump(mode="json"), headers=NO_STORE)
