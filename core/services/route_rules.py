# =============================================================================
# core/services/route_rules.py - Public Route Set & Bypass Rules
# =============================================================================
# Decides, from the path alone, whether a request skips the gate:
# - bypassed: API calls and static assets (never gated, cookie untouched),
#   except public routes nested under a bypass prefix, such as /api/auth
# - public: the allowlist of pages reachable without a session
#
# Membership is prefix-based: a path matches a route when it equals the
# route or starts with "<route>/". So "/login/sso" is public but
# "/loginx" is not.
# =============================================================================

import posixpath
from dataclasses import dataclass

from app.config import Settings


def normalize_path(path: str) -> str:
    """
    Normalize a request path before matching.

    - guarantees exactly one leading slash
    - collapses repeated slashes
    - resolves "." and ".." segments (never above the root)
    - drops the trailing slash, except for "/"

    Example:
        normalize_path("//login/")           # "/login"
        normalize_path("/home/../dashboard") # "/dashboard"
        normalize_path("")                   # "/"
    """
    # Query strings and fragments are not part of the path
    path = path.split("?", 1)[0].split("#", 1)[0]
    stripped = path.lstrip("/")
    if not stripped:
        return "/"

    normalized = posixpath.normpath("/" + stripped)
    # normpath keeps a leading "//" as-is
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def matches_route(path: str, route: str) -> bool:
    """Prefix rule: exact match, or match followed by '/'."""
    route = route.rstrip("/") or "/"
    if route == "/":
        # "/" only covers the root itself
        return path == "/"
    return path == route or path.startswith(f"{route}/")


@dataclass(frozen=True)
class RouteRules:
    """
    Immutable path rules the gate checks before touching any backend.

    Built once at startup, usually with RouteRules.from_settings().
    Paths passed to is_public/is_bypassed must already be normalized.
    """

    public_routes: tuple[str, ...]
    bypass_prefixes: tuple[str, ...] = ()
    bypass_files: tuple[str, ...] = ()
    static_extensions: tuple[str, ...] = ()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RouteRules":
        return cls(
            public_routes=settings.public_routes,
            bypass_prefixes=settings.bypass_prefixes,
            bypass_files=settings.bypass_files,
            static_extensions=settings.static_extensions,
        )

    def is_public(self, path: str) -> bool:
        return any(matches_route(path, route) for route in self.public_routes)

    def is_bypassed(self, path: str) -> bool:
        if path in self.bypass_files:
            return True
        if self._has_static_extension(path):
            return True
        if any(matches_route(path, prefix) for prefix in self.bypass_prefixes):
            # Public routes under a bypass prefix (/api/auth) go through the public check
            return not self.is_public(path)
        return False

    def is_exempt(self, path: str) -> bool:
        """True when the gate lets the path through without a session."""
        return self.is_bypassed(path) or self.is_public(path)

    def _has_static_extension(self, path: str) -> bool:
        if not self.static_extensions:
            return False
        last_segment = path.rsplit("/", 1)[-1]
        _, dot, extension = last_segment.rpartition(".")
        if not dot or not extension:
            return False
        return extension.lower() in self.static_extensions
