# =============================================================================
# core/models/gate.py - Access Gate Decision Schemas
# =============================================================================
# These models describe what the access gate decided for one request:
# - GateOutcome: allow the request through, or redirect it
# - DecisionReason: which branch of the decision procedure produced it
# - CounterAction: what to do with the redirect-loop counter cookie
# - GateDecision: the immutable value returned by AccessGate.decide()
#
# The HTTP layer turns a GateDecision into either a pass-through or a
# redirect response; nothing here knows about Starlette.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GateOutcome(str, Enum):
    """Whether the request proceeds or is redirected."""
    ALLOW = "allow"
    REDIRECT = "redirect"


class DecisionReason(str, Enum):
    """
    Branch of the decision procedure that produced a decision.

    - static_asset: path is an API call or a static file, never gated
    - public_route: path is on the public allowlist
    - authenticated: valid session and onboarding finished
    - no_session: no (valid) session on the request
    - not_onboarded: session found, onboarding missing or incomplete
    - resolution_failed: session or directory lookup raised
    - redirect_loop: too many consecutive gate redirects
    """
    STATIC_ASSET = "static_asset"
    PUBLIC_ROUTE = "public_route"
    AUTHENTICATED = "authenticated"
    NO_SESSION = "no_session"
    NOT_ONBOARDED = "not_onboarded"
    RESOLUTION_FAILED = "resolution_failed"
    REDIRECT_LOOP = "redirect_loop"


class CounterAction(str, Enum):
    """
    What the response should do with the redirect counter cookie.

    - keep: leave the cookie untouched
    - reset: delete it (the caller reached somewhere stable)
    - increment: store the current count plus one
    """
    KEEP = "keep"
    RESET = "reset"
    INCREMENT = "increment"


class GateDecision(BaseModel):
    """
    Result of running the access gate on one request.

    Example:
        {
            "outcome": "redirect",
            "reason": "not_onboarded",
            "location": "/onboarding",
            "counter": "increment"
        }
    """

    model_config = ConfigDict(frozen=True)

    outcome: GateOutcome = Field(..., description="Allow or redirect")

    reason: DecisionReason = Field(..., description="Why the gate decided this way")

    # Only set for redirects
    location: str | None = Field(
        default=None,
        description="Redirect target path"
    )

    counter: CounterAction = Field(
        default=CounterAction.KEEP,
        description="Redirect counter cookie handling"
    )

    @model_validator(mode="after")
    def _check_location(self) -> "GateDecision":
        if self.outcome == GateOutcome.REDIRECT and not self.location:
            raise ValueError("redirect decisions need a location")
        if self.outcome == GateOutcome.ALLOW and self.location is not None:
            raise ValueError("allow decisions cannot carry a location")
        return self

    @classmethod
    def allow(
        cls,
        reason: DecisionReason,
        counter: CounterAction = CounterAction.KEEP,
    ) -> "GateDecision":
        return cls(outcome=GateOutcome.ALLOW, reason=reason, counter=counter)

    @classmethod
    def redirect(
        cls,
        location: str,
        reason: DecisionReason,
        counter: CounterAction = CounterAction.KEEP,
    ) -> "GateDecision":
        return cls(
            outcome=GateOutcome.REDIRECT,
            reason=reason,
            location=location,
            counter=counter,
        )

    @property
    def is_allowed(self) -> bool:
        return self.outcome == GateOutcome.ALLOW
