# =============================================================================
# core/models/identity.py - Session & User Directory Schemas
# =============================================================================
# Read-only views of the two collaborators the gate consults:
# - TokenPayload: claims of a provider-issued session token
# - AuthUser / AuthSession: the identity a Session Resolver returns
# - OnboardingState: what the User Directory knows about one user
#
# The gate only checks whether a session exists and reads its user id.
# =============================================================================

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenPayload(BaseModel):
    """
    Decoded session token payload.

    Standard JWT claims plus the provider's custom ones. Unknown claims
    are ignored.
    """
    sub: str = Field(..., min_length=1)  # User ID
    email: Optional[str] = None
    aud: Optional[str | list[str]] = None  # Audience
    exp: Optional[int] = None  # Expiration timestamp
    iat: Optional[int] = None  # Issued at timestamp
    role: Optional[str] = None


class AuthUser(BaseModel):
    """
    Authenticated user extracted from a session token.

    This is the minimal user info available from the token itself,
    without querying the database.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None


class AuthSession(BaseModel):
    """A validated session: who the caller is and until when."""

    model_config = ConfigDict(frozen=True)

    user: AuthUser
    expires_at: Optional[datetime] = None

    @classmethod
    def from_claims(cls, claims: TokenPayload) -> "AuthSession":
        expires_at = None
        if claims.exp is not None:
            expires_at = datetime.fromtimestamp(claims.exp, tz=timezone.utc)
        return cls(
            user=AuthUser(id=claims.sub, email=claims.email),
            expires_at=expires_at,
        )


class OnboardingState(BaseModel):
    """Onboarding flag for one user, as stored in the users table."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    is_onboarded: bool = False
