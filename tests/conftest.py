# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides gates wired to in-memory collaborators
# - Provides a TestClient whose app uses those collaborators
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret-0123456789abcdef")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from app.config import settings
from core.services.access_gate import AccessGate
from core.services.route_rules import RouteRules
from tests.fakes import FakeSessionResolver, FakeUserDirectory


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def route_rules():
    """Route rules built from the default settings."""
    return RouteRules.from_settings(settings)


@pytest.fixture
def make_gate(route_rules):
    """Factory for gates wired to fake collaborators."""

    def _make(resolver=None, directory=None, **kwargs):
        return AccessGate(
            resolver=resolver or FakeSessionResolver(),
            directory=directory or FakeUserDirectory(),
            rules=route_rules,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_client(make_gate):
    """
    Factory for TestClients whose app runs the given gate collaborators.

    Redirects are not followed so tests can inspect the gate's 307s.
    The original gate is restored afterwards.
    """
    from app.main import app

    original_gate = app.state.access_gate
    clients = []

    def _make(resolver=None, directory=None, **gate_kwargs):
        app.state.access_gate = make_gate(resolver, directory, **gate_kwargs)
        client = TestClient(app, follow_redirects=False)
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()
    app.state.access_gate = original_gate


@pytest.fixture
def onboarded_user():
    """Collaborators for a signed-in user who finished onboarding."""
    return FakeSessionResolver(user_id="u1"), FakeUserDirectory({"u1": True})


@pytest.fixture
def new_user():
    """Collaborators for a signed-in user who hasn't finished onboarding."""
    return FakeSessionResolver(user_id="u1"), FakeUserDirectory({"u1": False})
