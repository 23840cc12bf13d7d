# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API endpoints.
# Errors should tell HOW to fix, not just WHAT failed.
#
# The access gate itself never raises to the client: it always resolves to
# a pass-through or a redirect. These exceptions cover the JSON endpoints.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class GateAPIException(Exception):
    """
    Base exception for the gate's JSON API.

    All custom HTTP-facing exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "GATE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Auth Exceptions
# =============================================================================

class UnauthorizedError(GateAPIException):
    """Raised when an endpoint needs a session and the request has none."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
            suggestion="Sign in again; send the session token as a Bearer header or session cookie",
            headers={"WWW-Authenticate": "Bearer"},
        )


# =============================================================================
# User Exceptions
# =============================================================================

class UserNotFoundError(GateAPIException):
    """Raised when a signed-in user has no row in the users table."""

    def __init__(self, user_id: str):
        super().__init__(
            message="User not found",
            code="USER_NOT_FOUND",
            status_code=404,
            suggestion="The account exists in the auth provider but has no profile row yet",
            details={"user_id": user_id},
        )


class OnboardingStatusError(GateAPIException):
    """Raised when the onboarding flag can't be read."""

    def __init__(self, error: str):
        super().__init__(
            message="Failed to fetch onboarding status",
            code="ONBOARDING_STATUS_FAILED",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def gate_exception_handler(
    request: Request,
    exc: GateAPIException
) -> JSONResponse:
    """
    Convert GateAPIException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
