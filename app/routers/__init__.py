# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - users.py: Signed-in user endpoints (onboarding status)
# - gate.py: Forward-auth endpoint for reverse proxies
#
# Each router is mounted in main.py under the /api prefix, which the
# access gate never redirects.
# =============================================================================

from . import health
from . import users
from . import gate

__all__ = [
    "health",
    "users",
    "gate",
]
