# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Workspace Gate service.
# It configures the FastAPI application with the access gate middleware,
# routers, and exception handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.dependencies import build_access_gate
from app.exceptions import (
    GateAPIException,
    gate_exception_handler,
    validation_exception_handler,
)
from app.middleware import AccessGateMiddleware
from app.routers import health, users, gate
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the effective gate configuration on startup.
    """
    logger.info(f"Starting Workspace Gate in {settings.ENVIRONMENT} mode")
    logger.info(f"Public routes: {', '.join(settings.public_routes)}")
    if settings.REDIRECT_LIMIT == 0:
        logger.warning("Redirect loop protection is disabled")

    yield

    logger.info("Shutting down Workspace Gate")


# Create FastAPI application
app = FastAPI(
    title="Workspace Gate",
    description="""
## Session & Onboarding Gate

Every page request to the workspace application passes through the access gate:

| Request | Outcome |
|---------|---------|
| `/api/...`, static assets | passed through |
| Public pages (`/home`, `/login`, `/signup`, `/logout`, `/onboarding`, `/forgot-password`, `/reset-password`) | passed through |
| No valid session | `307` to `/home` |
| Signed in, onboarding not finished | `307` to `/onboarding` |
| Signed in and onboarded | passed through |

Any failure while checking the session or the user record sends the caller to `/home`.
""",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Session lookups for the signed-in user",
        },
        {
            "name": "Users",
            "description": "Signed-in user state (onboarding)",
        },
        {
            "name": "Gate",
            "description": "Forward-auth checks for reverse proxies",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)

# One gate for the whole process; the middleware and routes share it
app.state.access_gate = build_access_gate(settings)


# =============================================================================
# Middleware
# =============================================================================

# Access gate - every request goes through it
app.add_middleware(
    AccessGateMiddleware,
    redirect_count_max_age=settings.REDIRECT_COUNT_MAX_AGE,
)

# CORS middleware - added last so it wraps the gate
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(GateAPIException)
async def handle_gate_exception(request: Request, exc: GateAPIException):
    """Handle custom gate API exceptions."""
    return await gate_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Session endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/auth",
    tags=["Auth"]
)

# User endpoints
app.include_router(
    users.router,
    prefix="/api/user",
    tags=["Users"]
)

# Forward-auth endpoint
app.include_router(
    gate.router,
    prefix="/api/gate",
    tags=["Gate"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - only reached by signed-in, onboarded users.
    """
    return {
        "name": "Workspace Gate",
        "version": "1.0.0",
        "docs": "/api/docs",
        "health": "/api/health",
    }
