# =============================================================================
# tests/test_access_gate.py - Access Gate Decision Tests
# =============================================================================
# Tests for AccessGate.decide():
# - public and bypassed paths never touch the collaborators
# - missing sessions go to /home, unfinished onboarding to /onboarding
# - any collaborator failure goes to /home
# - redirect loop protection
#
# Collaborators are in-memory fakes that record their calls.
# =============================================================================

import asyncio

import pytest

from core.models.gate import CounterAction, DecisionReason, GateOutcome
from core.services.session_resolver import SessionResolutionError
from core.services.user_directory import UserDirectoryError
from tests.fakes import FakeSessionResolver, FakeUserDirectory


def decide(gate, path, headers=None):
    return asyncio.run(gate.decide(path, headers or {}))


# =============================================================================
# Public & Bypassed Paths
# =============================================================================

class TestExemptPaths:
    """Paths that skip session resolution entirely."""

    @pytest.mark.parametrize("path", [
        "/home",
        "/login",
        "/signup",
        "/logout",
        "/onboarding",
        "/forgot-password",
        "/reset-password",
        "/reset-password/abc123",
        "/login/two-factor",
        "/api/auth",
        "/api/auth/callback",
    ])
    def test_public_routes_allowed_without_backend_calls(self, make_gate, path):
        """Public routes are allowed and never resolve a session."""
        resolver = FakeSessionResolver(user_id="u1")
        directory = FakeUserDirectory({"u1": False})
        gate = make_gate(resolver, directory)

        decision = decide(gate, path)

        assert decision.is_allowed
        assert resolver.calls == []
        assert directory.calls == []

    @pytest.mark.parametrize("path", [
        "/api/workspace/list",
        "/api/user/onboarding-status",
        "/_next/static/chunks/main.js",
        "/_next/image",
        "/favicon.ico",
        "/robots.txt",
        "/sitemap.xml",
        "/images/logo.png",
        "/fonts/inter.woff2",
        "/acme/avatar.JPG",
    ])
    def test_static_and_api_paths_bypass_gate(self, make_gate, path):
        """API calls and static assets pass through untouched."""
        resolver = FakeSessionResolver()
        gate = make_gate(resolver)

        decision = decide(gate, path)

        assert decision.is_allowed
        assert decision.reason == DecisionReason.STATIC_ASSET
        assert decision.counter == CounterAction.KEEP
        assert resolver.calls == []

    def test_auth_api_is_public_not_static(self, make_gate):
        decision = decide(make_gate(), "/api/auth/callback")

        assert decision.reason == DecisionReason.PUBLIC_ROUTE
        assert decision.counter == CounterAction.RESET

    def test_public_route_resets_redirect_counter(self, make_gate):
        decision = decide(make_gate(), "/home")

        assert decision.reason == DecisionReason.PUBLIC_ROUTE
        assert decision.counter == CounterAction.RESET

    def test_public_route_allowed_even_when_resolver_would_fail(self, make_gate):
        """Public paths don't depend on the identity backend at all."""
        resolver = FakeSessionResolver(error=SessionResolutionError("down"))
        gate = make_gate(resolver)

        assert decide(gate, "/login").is_allowed

    @pytest.mark.parametrize("path", ["/homepage", "/loginx", "/onboardingx", "/apis"])
    def test_prefix_lookalikes_are_gated(self, make_gate, path):
        """A route only covers itself and its sub-paths."""
        resolver = FakeSessionResolver()
        gate = make_gate(resolver)

        decision = decide(gate, path)

        assert decision.location == "/home"
        assert len(resolver.calls) == 1

    def test_dot_segments_cannot_escape_into_public_route(self, make_gate):
        """'/home/../dashboard' is gated as '/dashboard'."""
        resolver = FakeSessionResolver()
        gate = make_gate(resolver)

        decision = decide(gate, "/home/../dashboard")

        assert decision.location == "/home"
        assert decision.reason == DecisionReason.NO_SESSION

    def test_duplicate_slashes_still_public(self, make_gate):
        resolver = FakeSessionResolver()
        gate = make_gate(resolver)

        assert decide(gate, "//login/").is_allowed
        assert resolver.calls == []


# =============================================================================
# Session & Onboarding
# =============================================================================

class TestSessionAndOnboarding:
    """Decisions for gated paths."""

    def test_no_session_redirects_home(self, make_gate):
        gate = make_gate(FakeSessionResolver(), FakeUserDirectory())

        decision = decide(gate, "/dashboard")

        assert decision.outcome == GateOutcome.REDIRECT
        assert decision.location == "/home"
        assert decision.reason == DecisionReason.NO_SESSION
        assert decision.counter == CounterAction.INCREMENT

    def test_no_session_skips_directory(self, make_gate):
        directory = FakeUserDirectory({"u1": True})
        gate = make_gate(FakeSessionResolver(), directory)

        decide(gate, "/dashboard")

        assert directory.calls == []

    def test_not_onboarded_redirects_to_onboarding(self, make_gate, new_user):
        resolver, directory = new_user
        gate = make_gate(resolver, directory)

        decision = decide(gate, "/dashboard")

        assert decision.location == "/onboarding"
        assert decision.reason == DecisionReason.NOT_ONBOARDED
        assert decision.counter == CounterAction.INCREMENT
        assert directory.calls == ["u1"]

    def test_missing_user_record_redirects_to_onboarding(self, make_gate):
        gate = make_gate(FakeSessionResolver(user_id="ghost"), FakeUserDirectory({}))

        decision = decide(gate, "/dashboard")

        assert decision.location == "/onboarding"

    def test_onboarded_user_allowed(self, make_gate, onboarded_user):
        resolver, directory = onboarded_user
        gate = make_gate(resolver, directory)

        decision = decide(gate, "/dashboard")

        assert decision.is_allowed
        assert decision.reason == DecisionReason.AUTHENTICATED
        assert decision.counter == CounterAction.RESET
        assert decision.location is None

    def test_collaborators_called_once_each_in_order(self, make_gate, onboarded_user):
        resolver, directory = onboarded_user
        gate = make_gate(resolver, directory)
        headers = {"authorization": "Bearer abc"}

        decide(gate, "/acme/projects", headers)

        assert resolver.calls == [headers]
        assert directory.calls == ["u1"]

    def test_root_path_is_gated(self, make_gate):
        decision = decide(make_gate(), "/")

        assert decision.location == "/home"

    def test_custom_redirect_targets(self, make_gate, new_user):
        resolver, directory = new_user
        gate = make_gate(resolver, directory, login_redirect="/signin", onboarding_redirect="/welcome")

        assert decide(gate, "/dashboard").location == "/welcome"
        assert decide(make_gate(login_redirect="/signin"), "/dashboard").location == "/signin"


# =============================================================================
# Failure Handling
# =============================================================================

class TestFailClosed:
    """Collaborator failures always end at /home."""

    @pytest.mark.parametrize("error", [
        SessionResolutionError("jwks unreachable"),
        RuntimeError("boom"),
        ConnectionError("refused"),
    ])
    def test_resolver_failure_redirects_home(self, make_gate, error):
        directory = FakeUserDirectory({"u1": True})
        gate = make_gate(FakeSessionResolver(error=error), directory)

        decision = decide(gate, "/dashboard")

        assert decision.location == "/home"
        assert decision.reason == DecisionReason.RESOLUTION_FAILED
        assert directory.calls == []

    def test_directory_failure_redirects_home_not_onboarding(self, make_gate):
        directory = FakeUserDirectory(error=UserDirectoryError("db down"))
        gate = make_gate(FakeSessionResolver(user_id="u1"), directory)

        decision = decide(gate, "/dashboard")

        assert decision.location == "/home"
        assert decision.reason == DecisionReason.RESOLUTION_FAILED

    def test_failure_does_not_count_redirect(self, make_gate):
        """Error redirects leave the loop counter alone."""
        gate = make_gate(FakeSessionResolver(error=RuntimeError("boom")))

        decision = decide(gate, "/dashboard")

        assert decision.counter == CounterAction.KEEP


# =============================================================================
# Redirect Loop Protection
# =============================================================================

class TestRedirectLoop:
    """Loop protection via the redirect_count cookie."""

    def test_limit_reached_redirects_home_without_backend_calls(self, make_gate, onboarded_user):
        resolver, directory = onboarded_user
        gate = make_gate(resolver, directory)

        decision = decide(gate, "/dashboard", {"cookie": "redirect_count=3"})

        assert decision.location == "/home"
        assert decision.reason == DecisionReason.REDIRECT_LOOP
        assert decision.counter == CounterAction.RESET
        assert resolver.calls == []
        assert directory.calls == []

    def test_below_limit_runs_normally(self, make_gate, onboarded_user):
        resolver, directory = onboarded_user
        gate = make_gate(resolver, directory)

        decision = decide(gate, "/dashboard", {"cookie": "redirect_count=2"})

        assert decision.is_allowed

    def test_public_route_ignores_counter(self, make_gate):
        decision = decide(make_gate(), "/onboarding", {"cookie": "redirect_count=10"})

        assert decision.is_allowed

    def test_zero_limit_disables_protection(self, make_gate, onboarded_user):
        resolver, directory = onboarded_user
        gate = make_gate(resolver, directory, redirect_limit=0)

        decision = decide(gate, "/dashboard", {"cookie": "redirect_count=50"})

        assert decision.is_allowed

    @pytest.mark.parametrize("cookie, expected", [
        ("", 0),
        ("redirect_count=2", 2),
        ("theme=dark; redirect_count=4", 4),
        ("redirect_count=abc", 0),
        ("redirect_count=-3", 0),
    ])
    def test_redirect_count_parsing(self, make_gate, cookie, expected):
        gate = make_gate()

        assert gate.redirect_count({"cookie": cookie}) == expected


# =============================================================================
# Idempotence
# =============================================================================

class TestIdempotence:
    """Same inputs and collaborator state give the same decision."""

    @pytest.mark.parametrize("path", ["/dashboard", "/home", "/api/auth/callback"])
    def test_repeated_decisions_are_identical(self, make_gate, new_user, path):
        resolver, directory = new_user
        gate = make_gate(resolver, directory)

        first = decide(gate, path)
        second = decide(gate, path)

        assert first == second

    def test_canonical_scenarios(self, make_gate):
        """The four canonical scenarios."""
        assert decide(make_gate(), "/api/auth/callback").is_allowed
        assert decide(make_gate(), "/dashboard").location == "/home"

        new = make_gate(FakeSessionResolver(user_id="u1"), FakeUserDirectory({"u1": False}))
        assert decide(new, "/dashboard").location == "/onboarding"

        done = make_gate(FakeSessionResolver(user_id="u1"), FakeUserDirectory({"u1": True}))
        assert decide(done, "/dashboard").is_allowed
