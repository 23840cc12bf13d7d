# =============================================================================
# tests/test_route_rules.py - Path Matching Tests
# =============================================================================
# Tests for path normalization, the prefix rule, and RouteRules.
# =============================================================================

import pytest

from app.config import Settings
from core.services.route_rules import RouteRules, matches_route, normalize_path


# =============================================================================
# normalize_path
# =============================================================================

class TestNormalizePath:
    """Test path normalization."""

    @pytest.mark.parametrize("raw, expected", [
        ("/", "/"),
        ("", "/"),
        ("dashboard", "/dashboard"),
        ("/dashboard/", "/dashboard"),
        ("//login//", "/login"),
        ("///api//auth/callback", "/api/auth/callback"),
        ("/a/./b", "/a/b"),
        ("/home/../dashboard", "/dashboard"),
        ("/../../etc", "/etc"),
        ("/login?next=/dashboard", "/login"),
        ("/settings#security", "/settings"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_path(raw) == expected


# =============================================================================
# matches_route
# =============================================================================

class TestMatchesRoute:
    """Test the exact-or-slash prefix rule."""

    def test_exact_match(self):
        assert matches_route("/login", "/login")

    def test_sub_path_match(self):
        assert matches_route("/api/auth/sign-in/email", "/api/auth")

    def test_lookalike_does_not_match(self):
        assert not matches_route("/login-help", "/login")
        assert not matches_route("/api/authz", "/api/auth")

    def test_trailing_slash_in_route_is_ignored(self):
        assert matches_route("/home", "/home/")

    def test_root_route_only_matches_root(self):
        assert matches_route("/", "/")
        assert not matches_route("/dashboard", "/")


# =============================================================================
# RouteRules
# =============================================================================

class TestRouteRules:
    """Test RouteRules built from settings."""

    def test_default_public_routes(self, route_rules):
        assert route_rules.public_routes == (
            "/home",
            "/login",
            "/signup",
            "/logout",
            "/onboarding",
            "/api/auth",
            "/forgot-password",
            "/reset-password",
        )

    def test_public_routes_are_immutable(self, route_rules):
        with pytest.raises(AttributeError):
            route_rules.public_routes = ("/everything",)

    def test_workspace_pages_are_not_exempt(self, route_rules):
        for path in ["/", "/acme", "/acme/settings/members", "/u1/settings/profile", "/invite/tok"]:
            assert not route_rules.is_exempt(path), path

    def test_bypass_files(self, route_rules):
        assert route_rules.is_bypassed("/robots.txt")
        assert route_rules.is_bypassed("/favicon.ico")
        assert route_rules.is_bypassed("/sitemap.xml")

    def test_static_extension_only_on_last_segment(self, route_rules):
        assert route_rules.is_bypassed("/assets/app.css")
        assert not route_rules.is_bypassed("/acme.png/settings")

    def test_unknown_extension_is_gated(self, route_rules):
        assert not route_rules.is_bypassed("/export/report.pdf")

    def test_custom_settings(self):
        settings = Settings(
            SUPABASE_URL="https://x.supabase.co",
            SUPABASE_SERVICE_KEY="k",
            AUTH_JWT_SECRET="0123456789abcdef",
            PUBLIC_ROUTES=" /welcome , /pricing ,",
            BYPASS_PREFIXES="/assets",
            BYPASS_FILES="",
            STATIC_EXTENSIONS=".PNG",
        )

        rules = RouteRules.from_settings(settings)

        assert rules.public_routes == ("/welcome", "/pricing")
        assert rules.is_public("/pricing/teams")
        assert rules.is_bypassed("/assets/x")
        assert rules.is_bypassed("/logo.png")
        assert not rules.is_bypassed("/api/user")
        assert not rules.is_bypassed("/favicon.ico")

    def test_empty_rules_exempt_nothing(self):
        rules = RouteRules(public_routes=())

        assert not rules.is_exempt("/home")
        assert not rules.is_exempt("/logo.png")

    def test_public_route_under_bypass_prefix(self, route_rules):
        """/api is bypassed, but /api/auth is a public route and is matched as one."""
        assert route_rules.is_bypassed("/api/user/onboarding-status")
        assert not route_rules.is_bypassed("/api/auth")
        assert not route_rules.is_bypassed("/api/auth/callback")
        assert route_rules.is_public("/api/auth/callback")
        assert route_rules.is_exempt("/api/auth/callback")
        assert route_rules.is_bypassed("/api/authz")

    def test_static_file_under_public_api_route_is_bypassed(self, route_rules):
        assert route_rules.is_bypassed("/api/auth/widget.js")
