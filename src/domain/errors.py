from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


class ValidationFailure(BaseModel):
    """User-correctable problem with the request (missing fields, below minimum, bad recipient/asset)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["validation"] = "validation"
    reason: str


class RoutingInfeasible(BaseModel):
    """The request is well formed but cannot be executed (insufficient balance, unsupported corridor)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["routing"] = "routing"
    reason: str


class ProviderUnavailable(Exception):
    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"{provider} is temporarily unavailable")


class InternalInvariantViolation(Exception):
    """Raised on defects such as a negative or non-finite fee.

    ``detail`` is meant for logs; ``str(exc)`` stays safe to show to a user.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__("We could not price this transaction. Please try again later.")


__all__ = ["InternalInvariantViolation", "ProviderUnavailable", "RoutingInfeasible", "ValidationFailure"]
