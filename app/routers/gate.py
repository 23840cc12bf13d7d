# =============================================================================
# app/routers/gate.py - Forward-Auth Endpoint
# =============================================================================
# Lets a reverse proxy (nginx auth_request, Traefik ForwardAuth, ...) ask
# the gate about a request it is about to serve from another upstream:
# - GET /gate/check - 200 when allowed, 307 to /home or /onboarding otherwise
#
# The original path comes from X-Forwarded-Uri (Traefik) or X-Original-URI
# (nginx). Cookies and Authorization must be forwarded unchanged.
# =============================================================================

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.config import settings
from app.dependencies import AccessGateDep
from app.middleware import apply_redirect_counter, build_redirect_response
from core.services.request_headers import get_header

logger = logging.getLogger(__name__)

router = APIRouter()

FORWARDED_PATH_HEADERS = ("x-forwarded-uri", "x-original-uri")


def forwarded_path(request: Request) -> str:
    """Path the proxy is asking about, "/" when it sent none."""
    for name in FORWARDED_PATH_HEADERS:
        value = get_header(request.headers, name)
        if value:
            return value
    return "/"


@router.get("/check")
async def check_access(request: Request, gate: AccessGateDep):
    """
    Run the access gate for a proxied request.

    Returns:
        200 with the decision when the request may proceed,
        307 redirect (with the gate's security headers) otherwise
    """
    path = forwarded_path(request)
    decision = await gate.decide(path, request.headers)
    logger.debug(f"Forward-auth {decision.outcome.value} for {path} ({decision.reason.value})")

    if not decision.is_allowed:
        return build_redirect_response(
            decision,
            gate,
            request.headers,
            max_age=settings.REDIRECT_COUNT_MAX_AGE,
        )

    response = JSONResponse(content=decision.model_dump(mode="json"))
    return apply_redirect_counter(
        response,
        decision,
        gate,
        request.headers,
        max_age=settings.REDIRECT_COUNT_MAX_AGE,
    )
