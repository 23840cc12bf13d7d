# =============================================================================
# app/auth/models.py - Authentication Response Models
# =============================================================================
# Pydantic models returned by the auth endpoints. The identity models
# themselves (AuthUser, AuthSession) live in core.models.identity.
# =============================================================================

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from core.models.identity import AuthUser


class SessionUserResponse(BaseModel):
    """
    The signed-in user as reported by GET /api/auth/session.

    isOnboarded is filled from the users table when it can be read.
    """
    id: str
    email: Optional[str] = None
    isOnboarded: Optional[bool] = None
    expiresAt: Optional[datetime] = None


class SessionResponse(BaseModel):
    """
    Response of GET /api/auth/session.

    Example:
        {"user": {"id": "usr_1", "email": "a@b.co", "isOnboarded": true}}
        {"user": null}
    """
    user: Optional[SessionUserResponse] = None


__all__ = [
    "AuthUser",
    "SessionResponse",
    "SessionUserResponse",
]
