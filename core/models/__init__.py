# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - gate.py: Access gate decisions (allow / redirect, reason, counter)
# - identity.py: Session, token claims and onboarding state
#
# These models define the "contract" between the gate and its callers.
# =============================================================================

# -----------------------------------------------------------------------------
# Gate Models - Decision values
# -----------------------------------------------------------------------------
from .gate import (
    CounterAction,
    DecisionReason,
    GateDecision,
    GateOutcome,
)

# -----------------------------------------------------------------------------
# Identity Models - Sessions and users
# -----------------------------------------------------------------------------
from .identity import (
    AuthSession,
    AuthUser,
    OnboardingState,
    TokenPayload,
)

__all__ = [
    # Gate
    "CounterAction",
    "DecisionReason",
    "GateDecision",
    "GateOutcome",
    # Identity
    "AuthSession",
    "AuthUser",
    "OnboardingState",
    "TokenPayload",
]
