# =============================================================================
# core/services/request_headers.py - Header & Cookie Lookup
# =============================================================================
# The gate receives headers as a plain mapping (Starlette's Headers in
# production, a dict in tests). Plain mappings are wrapped in Starlette's
# case-insensitive Headers; the Authorization header is split the same way
# FastAPI's HTTPBearer does it.
# =============================================================================

from collections.abc import Mapping

from fastapi.security.utils import get_authorization_scheme_param
from starlette.datastructures import Headers
from starlette.requests import cookie_parser


def as_headers(headers: Mapping[str, str]) -> Headers:
    """Wrap a plain mapping in Starlette's case-insensitive Headers."""
    if isinstance(headers, Headers):
        return headers
    return Headers(headers=dict(headers))


def get_header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup. Returns None when absent."""
    return as_headers(headers).get(name)


def get_cookie(headers: Mapping[str, str], name: str) -> str | None:
    """Read one cookie out of the Cookie header."""
    raw = get_header(headers, "cookie")
    if not raw:
        return None
    return cookie_parser(raw).get(name)


def get_bearer_token(headers: Mapping[str, str]) -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header."""
    scheme, credentials = get_authorization_scheme_param(get_header(headers, "authorization"))
    if scheme.lower() != "bearer":
        return None
    return credentials.strip() or None
