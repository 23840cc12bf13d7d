# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App entry point, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - middleware.py: Access gate middleware (allow / redirect responses)
# - auth/: Session endpoint and its response models
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates
# the gate's decisions to the core/ package.
# =============================================================================
