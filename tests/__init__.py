# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Workspace Gate:
# - test_access_gate.py: The decision procedure with in-memory collaborators
# - test_route_rules.py: Path normalization and public/bypass matching
# - test_session_resolver.py: Token extraction and JWT/JWKS verification
# - test_user_directory.py: Supabase-backed onboarding lookups
# - test_middleware.py, test_routes.py: The FastAPI app end to end
# - test_models.py: Pydantic model and settings validation
#
# Run tests with: pytest
# =============================================================================
