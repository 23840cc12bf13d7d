# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for the gate and its collaborators.
# These are injected into route handlers using Depends().
#
# One AccessGate is built at startup and stored on app.state; the
# middleware and the routes read the same instance, so tests can swap
# collaborators by replacing app.state.access_gate.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings
from core.services.access_gate import AccessGate
from core.services.session_resolver import JWTSessionResolver, SessionResolver
from core.services.user_directory import SupabaseUserDirectory, UserDirectory


def build_access_gate(settings: Settings) -> AccessGate:
    """
    Build the production gate: JWT sessions + Supabase user directory.

    Nothing connects here; the Supabase client and JWKS are fetched lazily.
    """
    return AccessGate.from_settings(
        settings,
        resolver=JWTSessionResolver.from_settings(settings),
        directory=SupabaseUserDirectory(),
    )


def get_access_gate(request: Request) -> AccessGate:
    """Get the gate configured for this application."""
    return request.app.state.access_gate


def get_session_resolver(gate: AccessGate = Depends(get_access_gate)) -> SessionResolver:
    return gate.resolver


def get_user_directory(gate: AccessGate = Depends(get_access_gate)) -> UserDirectory:
    return gate.directory


# Type aliases for dependency injection
AccessGateDep = Annotated[AccessGate, Depends(get_access_gate)]
SessionResolverDep = Annotated[SessionResolver, Depends(get_session_resolver)]
UserDirectoryDep = Annotated[UserDirectory, Depends(get_user_directory)]
