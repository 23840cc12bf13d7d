# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the framework-agnostic gate logic:
# - models/: Pydantic schemas (gate decisions, sessions, onboarding state)
# - services/: the access gate and its two collaborators
#   (session resolver, user directory)
#
# Code in this package never touches the FastAPI app, routers or Request
# objects; it works on paths and header mappings only. This keeps the
# logic testable and reusable.
# =============================================================================
