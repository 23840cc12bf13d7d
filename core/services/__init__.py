# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .access_gate import AccessGate
from .route_rules import RouteRules, matches_route, normalize_path
from .session_resolver import (
    JWTSessionResolver,
    SessionResolutionError,
    SessionResolver,
    extract_session_token,
)
from .user_directory import SupabaseUserDirectory, UserDirectory, UserDirectoryError

__all__ = [
    "AccessGate",
    "RouteRules",
    "matches_route",
    "normalize_path",
    "JWTSessionResolver",
    "SessionResolutionError",
    "SessionResolver",
    "extract_session_token",
    "SupabaseUserDirectory",
    "UserDirectory",
    "UserDirectoryError",
]
