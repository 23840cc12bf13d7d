# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Session endpoints for the signed-in user. Tokens are issued by the auth
# provider; this package only reports on the session a request carries.
#
# Usage:
#   from app.auth import routes
#   app.include_router(routes.router, prefix="/api/auth")
# =============================================================================

from app.auth.models import AuthUser, SessionResponse, SessionUserResponse

__all__ = [
    "AuthUser",
    "SessionResponse",
    "SessionUserResponse",
]
