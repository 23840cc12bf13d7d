# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the gate and its collaborators.
# =============================================================================

from typing import Any
from uuid import UUID


# =============================================================================
# Identifier Utilities
# =============================================================================

def normalize_user_id(value: str | UUID) -> str:
    """
    Normalize a user identifier to string format.

    Auth providers hand out either UUIDs or opaque string ids; the
    directory always queries by string.

    Example:
        normalize_user_id(uuid_obj)       # "550e8400-..."
        normalize_user_id(" usr_123 ")    # "usr_123"
    """
    if isinstance(value, UUID):
        return str(value)
    return value.strip()


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class MyServiceError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="MY_SERVICE_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
