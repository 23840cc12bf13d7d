# =============================================================================
# app/middleware.py - Access Gate Middleware
# =============================================================================
# Runs the access gate in front of every request and turns its decision
# into a pass-through or a 307 redirect, keeping the redirect counter
# cookie up to date.
# =============================================================================

import logging
from collections.abc import Mapping

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse, Response

from core.models.gate import CounterAction, GateDecision
from core.services.access_gate import AccessGate
from core.services.request_headers import get_cookie

logger = logging.getLogger(__name__)

# Sent with every gate redirect
REDIRECT_SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Cache-Control": "private, no-cache, no-store, must-revalidate",
}


def apply_redirect_counter(
    response: Response,
    decision: GateDecision,
    gate: AccessGate,
    headers: Mapping[str, str],
    max_age: int = 60,
) -> Response:
    """Update the redirect counter cookie the way the decision asks."""
    cookie_name = gate.redirect_count_cookie

    if decision.counter == CounterAction.INCREMENT:
        count = gate.redirect_count(headers) + 1
        response.set_cookie(
            cookie_name,
            str(count),
            max_age=max_age,
            httponly=True,
            samesite="lax",
        )
    elif decision.counter == CounterAction.RESET:
        # Only clear a cookie the client actually sent
        if get_cookie(headers, cookie_name) is not None:
            response.delete_cookie(cookie_name)

    return response


def build_redirect_response(
    decision: GateDecision,
    gate: AccessGate,
    headers: Mapping[str, str],
    max_age: int = 60,
) -> RedirectResponse:
    """Turn a redirect decision into a 307 with security headers."""
    response = RedirectResponse(
        url=decision.location,
        status_code=307,
        headers=REDIRECT_SECURITY_HEADERS,
    )
    return apply_redirect_counter(response, decision, gate, headers, max_age=max_age)


class AccessGateMiddleware(BaseHTTPMiddleware):
    """
    Middleware that gates every page request on session and onboarding.

    The gate instance is read from app.state.access_gate on each request,
    so it can be replaced after the app is built (tests do this).
    Allowed requests pass through untouched apart from the redirect
    counter cookie; everything else becomes a 307.
    """

    def __init__(self, app, redirect_count_max_age: int = 60):
        super().__init__(app)
        self.redirect_count_max_age = redirect_count_max_age

    async def dispatch(self, request: Request, call_next):
        """Process each request through the access gate."""
        gate: AccessGate = request.app.state.access_gate
        decision = await gate.decide(request.url.path, request.headers)

        logger.debug(
            f"Gate {decision.outcome.value} {request.method} {request.url.path} "
            f"({decision.reason.value})"
        )

        if not decision.is_allowed:
            return build_redirect_response(
                decision,
                gate,
                request.headers,
                max_age=self.redirect_count_max_age,
            )

        response = await call_next(request)
        return apply_redirect_counter(
            response,
            decision,
            gate,
            request.headers,
            max_age=self.redirect_count_max_age,
        )
