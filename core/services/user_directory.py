# =============================================================================
# core/services/user_directory.py - User Directory
# =============================================================================
# Answers one question for the gate: has this user finished onboarding?
#
# The flag is read fresh on every call; there is no cache in front of the
# users table.
# =============================================================================

import logging
from typing import Protocol

from fastapi.concurrency import run_in_threadpool

from core.models.identity import OnboardingState
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import ApplicationError, normalize_user_id

logger = logging.getLogger(__name__)


class UserDirectoryError(ApplicationError):
    """Raised when the users table can't be read."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "USER_DIRECTORY_FAILED")
        super().__init__(message, **kwargs)


class UserDirectory(Protocol):
    """Anything that can report a user's onboarding state."""

    async def fetch_onboarding_state(self, user_id: str) -> OnboardingState | None:
        ...


class SupabaseUserDirectory:
    """
    User directory backed by the Supabase users table.

    The Supabase client is synchronous, so reads run in a worker thread
    to keep the event loop free.
    """

    COLUMNS = "id, is_onboarded"

    def __init__(self, client: type[SupabaseClient] = SupabaseClient):
        self._client = client

    async def fetch_onboarding_state(self, user_id: str) -> OnboardingState | None:
        """
        Fetch the onboarding flag for a user.

        Returns:
            OnboardingState, or None when the user has no row

        Raises:
            UserDirectoryError: If the read fails
        """
        user_id = normalize_user_id(user_id)

        try:
            row = await run_in_threadpool(self._client.fetch_user, user_id, self.COLUMNS)
        except SupabaseClientError as e:
            logger.error(f"Database error reading onboarding state: {e}")
            raise UserDirectoryError(
                f"Could not read onboarding state for {user_id}",
                suggestion=e.suggestion,
                details={"user_id": user_id, "cause": e.code},
            ) from e

        if row is None:
            return None

        return OnboardingState(
            user_id=user_id,
            is_onboarded=bool(row.get("is_onboarded")),
        )
