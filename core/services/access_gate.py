# =============================================================================
# core/services/access_gate.py - Access Gate Decision Procedure
# =============================================================================
# Decides, for one inbound request, whether it may proceed:
#
#   1. bypassed or public path  -> allow (no backend calls at all)
#   2. redirect loop detected   -> /home
#   3. no session               -> /home
#   4. not onboarded / no row   -> /onboarding
#   5. otherwise                -> allow
#
# Steps 3 and 4 share one failure boundary: if either the session lookup
# or the directory read raises, the caller goes to /home. The gate never
# allows a request on error.
#
# The gate holds no per-request state and never writes to its
# collaborators, so decide() is safe to call concurrently.
# =============================================================================

import logging
from collections.abc import Mapping

from app.config import Settings
from core.models.gate import CounterAction, DecisionReason, GateDecision
from core.services.request_headers import get_cookie
from core.services.route_rules import RouteRules, normalize_path
from core.services.session_resolver import SessionResolver
from core.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


class AccessGate:
    """
    Session and onboarding gate in front of the application.

    Example:
        gate = AccessGate.from_settings(settings, resolver, directory)
        decision = await gate.decide("/acme/projects", request.headers)
        if not decision.is_allowed:
            return RedirectResponse(decision.location)
    """

    def __init__(
        self,
        resolver: SessionResolver,
        directory: UserDirectory,
        rules: RouteRules,
        login_redirect: str = "/home",
        onboarding_redirect: str = "/onboarding",
        redirect_limit: int = 3,
        redirect_count_cookie: str = "redirect_count",
    ):
        self.resolver = resolver
        self.directory = directory
        self.rules = rules
        self.login_redirect = login_redirect
        self.onboarding_redirect = onboarding_redirect
        self.redirect_limit = redirect_limit
        self.redirect_count_cookie = redirect_count_cookie

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        resolver: SessionResolver,
        directory: UserDirectory,
    ) -> "AccessGate":
        return cls(
            resolver=resolver,
            directory=directory,
            rules=RouteRules.from_settings(settings),
            login_redirect=settings.LOGIN_REDIRECT,
            onboarding_redirect=settings.ONBOARDING_REDIRECT,
            redirect_limit=settings.REDIRECT_LIMIT,
            redirect_count_cookie=settings.REDIRECT_COUNT_COOKIE,
        )

    async def decide(self, path: str, headers: Mapping[str, str]) -> GateDecision:
        """
        Run the gate for one request.

        Args:
            path: Request path (normalized here)
            headers: Request headers, including cookies

        Returns:
            GateDecision: allow, or redirect to the login surface / onboarding
        """
        path = normalize_path(path)

        if self.rules.is_bypassed(path):
            return GateDecision.allow(DecisionReason.STATIC_ASSET)

        if self.rules.is_public(path):
            return GateDecision.allow(DecisionReason.PUBLIC_ROUTE, CounterAction.RESET)

        if self._redirect_loop_detected(headers):
            logger.error(f"Redirect loop detected for path: {path}")
            return GateDecision.redirect(
                self.login_redirect,
                DecisionReason.REDIRECT_LOOP,
                CounterAction.RESET,
            )

        try:
            session = await self.resolver.resolve(headers)
            if session is None:
                logger.debug(f"No session for {path}, redirecting to {self.login_redirect}")
                return GateDecision.redirect(
                    self.login_redirect,
                    DecisionReason.NO_SESSION,
                    CounterAction.INCREMENT,
                )

            state = await self.directory.fetch_onboarding_state(session.user.id)
        except Exception as e:
            logger.error(f"Access gate error on {path}: {e}")
            return GateDecision.redirect(self.login_redirect, DecisionReason.RESOLUTION_FAILED)

        if state is None or not state.is_onboarded:
            logger.debug(f"User {session.user.id} not onboarded, redirecting")
            return GateDecision.redirect(
                self.onboarding_redirect,
                DecisionReason.NOT_ONBOARDED,
                CounterAction.INCREMENT,
            )

        return GateDecision.allow(DecisionReason.AUTHENTICATED, CounterAction.RESET)

    def redirect_count(self, headers: Mapping[str, str]) -> int:
        """Consecutive gate redirects recorded in the counter cookie."""
        raw = get_cookie(headers, self.redirect_count_cookie)
        if not raw:
            return 0
        try:
            return max(int(raw), 0)
        except ValueError:
            return 0

    def _redirect_loop_detected(self, headers: Mapping[str, str]) -> bool:
        if self.redirect_limit <= 0:
            return False
        return self.redirect_count(headers) >= self.redirect_limit
