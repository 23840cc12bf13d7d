# =============================================================================
# tests/fakes.py - In-Memory Collaborators
# =============================================================================
# Stand-ins for the Session Resolver and User Directory that record every
# call, so tests can assert how many backend reads the gate made.
# =============================================================================

from __future__ import annotations

import time
from collections.abc import Mapping

from jose import jwt

from core.models.identity import AuthSession, AuthUser, OnboardingState

TEST_JWT_SECRET = "test-jwt-secret-0123456789abcdef"


class FakeSessionResolver:
    """Returns a fixed session (or None), or raises a fixed error."""

    def __init__(self, user_id: str | None = None, error: Exception | None = None):
        self.session = AuthSession(user=AuthUser(id=user_id, email=f"{user_id}@example.com")) if user_id else None
        self.error = error
        self.calls: list[Mapping[str, str]] = []

    async def resolve(self, headers: Mapping[str, str]) -> AuthSession | None:
        self.calls.append(headers)
        if self.error is not None:
            raise self.error
        return self.session


class FakeUserDirectory:
    """Onboarding flags keyed by user id; unknown users have no record."""

    def __init__(self, onboarded: dict[str, bool] | None = None, error: Exception | None = None):
        self.onboarded = dict(onboarded or {})
        self.error = error
        self.calls: list[str] = []

    async def fetch_onboarding_state(self, user_id: str) -> OnboardingState | None:
        self.calls.append(user_id)
        if self.error is not None:
            raise self.error
        if user_id not in self.onboarded:
            return None
        return OnboardingState(user_id=user_id, is_onboarded=self.onboarded[user_id])


def make_token(
    sub: str | None = "u1",
    secret: str = TEST_JWT_SECRET,
    algorithm: str = "HS256",
    audience: str | None = "authenticated",
    expires_in: int = 3600,
    headers: dict | None = None,
    **claims,
) -> str:
    """Sign a session token the way the auth provider would."""
    payload = {"iat": int(time.time()), "exp": int(time.time()) + expires_in, **claims}
    if sub is not None:
        payload["sub"] = sub
    if audience is not None:
        payload["aud"] = audience
    return jwt.encode(payload, secret, algorithm=algorithm, headers=headers)
