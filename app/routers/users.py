# =============================================================================
# app/routers/users.py - User Endpoints
# =============================================================================
# Endpoints about the signed-in user:
# - GET /user/onboarding-status - Whether the user finished onboarding
#
# API paths are bypassed by the access gate, so the endpoint resolves the
# caller's session itself, with the same resolver the gate uses.
# =============================================================================

import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel

from app.dependencies import SessionResolverDep, UserDirectoryDep
from app.exceptions import OnboardingStatusError, UnauthorizedError, UserNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


class OnboardingStatusResponse(BaseModel):
    """Onboarding flag for the caller."""
    isOnboarded: bool


@router.get("/onboarding-status", response_model=OnboardingStatusResponse)
async def get_onboarding_status(
    request: Request,
    resolver: SessionResolverDep,
    directory: UserDirectoryDep,
) -> OnboardingStatusResponse:
    """
    Get the caller's onboarding status.

    Reads the users table directly; the value is never cached.

    Raises:
        401: If not authenticated
        404: If the user has no row in the users table
        500: If the session or the users table can't be read
    """
    try:
        session = await resolver.resolve(request.headers)
        state = None
        if session is not None:
            state = await directory.fetch_onboarding_state(session.user.id)
    except Exception as e:
        logger.error(f"Error fetching onboarding status: {e}")
        raise OnboardingStatusError(str(e))

    if session is None:
        raise UnauthorizedError()

    if state is None:
        raise UserNotFoundError(session.user.id)

    return OnboardingStatusResponse(isOnboarded=state.is_onboarded)
