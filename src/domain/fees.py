from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, localcontext
from typing import Mapping, Protocol

from pydantic import BaseModel, ConfigDict, model_validator

from .chains import ChainId
from .errors import InternalInvariantViolation

TOTAL_EPSILON = Decimal("1e-12")
CENT = Decimal("0.01")

FEE_COMPONENTS: tuple[str, ...] = ("diboas", "network", "provider", "dex", "routing")


class FeeBreakdown(BaseModel):
    """Fees for one transaction, in USD.

    Values carry full precision; ``rounded`` is for display only.
    """

    model_config = ConfigDict(frozen=True)

    diboas: Decimal = Decimal(0)
    network: Decimal = Decimal(0)
    provider: Decimal = Decimal(0)
    dex: Decimal = Decimal(0)
    routing: Decimal = Decimal(0)
    total: Decimal = Decimal(0)

    @model_validator(mode="after")
    def _validate_components(self) -> FeeBreakdown:
        for name in (*FEE_COMPONENTS, "total"):
            value: Decimal = getattr(self, name)
            if not value.is_finite():
                raise InternalInvariantViolation(f"fee component {name} is not finite")
            if value < 0:
                raise InternalInvariantViolation(f"fee component {name} is negative")
        if abs(self.total - self.components_sum()) > TOTAL_EPSILON:
            raise InternalInvariantViolation("fee total does not match the sum of its components")
        return self

    @classmethod
    def from_components(
        cls,
        *,
        diboas: Decimal,
        network: Decimal,
        provider: Decimal,
        dex: Decimal,
        routing: Decimal,
    ) -> FeeBreakdown:
        components = {"diboas": diboas, "network": network, "provider": provider, "dex": dex, "routing": routing}
        for name, value in components.items():
            # Checked here because pydantic rejects NaN before the model validator runs.
            if not value.is_finite():
                raise InternalInvariantViolation(f"fee component {name} is not finite")
        total = diboas + network + provider + dex + routing
        return cls(diboas=diboas, network=network, provider=provider, dex=dex, routing=routing, total=total)

    def components_sum(self) -> Decimal:
        return sum((getattr(self, name) for name in FEE_COMPONENTS), start=Decimal(0))

    def rounded(self) -> dict[str, Decimal]:
        values = {name: getattr(self, name) for name in (*FEE_COMPONENTS, "total")}
        with localcontext() as ctx:
            # quantize must keep every integer digit plus the cents.
            ctx.prec = max(ctx.prec, *(value.adjusted() + 3 for value in values.values()))
            return {name: value.quantize(CENT) for name, value in values.items()}


@dataclass(frozen=True)
class RoutingFeeEstimate:
    gas: Decimal = Decimal(0)
    bridge: Decimal = Decimal(0)
    swap: Decimal = Decimal(0)
    total: Decimal = Decimal(0)


@dataclass(frozen=True)
class ProviderFeeRates:
    onramp: Mapping[str, Decimal] = field(default_factory=dict)
    offramp: Mapping[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class DexFeeRates:
    standard: Decimal = Decimal(0)


class FeeRateProvider(Protocol):
    """Current rate tables. Rates are fractions of the transaction amount (0.01 == 1%)."""

    async def get_diboas_fees(self) -> Mapping[str, Decimal]: ...

    async def get_network_fees(self) -> Mapping[str, Decimal]: ...

    async def get_payment_provider_fees(self) -> ProviderFeeRates: ...

    async def get_dex_fees(self) -> DexFeeRates: ...


class RoutingFeeEstimator(Protocol):
    async def estimate_routing_fees(
        self, from_chain: ChainId, to_chain: ChainId, amount: Decimal
    ) -> RoutingFeeEstimate | None: ...


__all__ = [
    "DexFeeRates",
    "FEE_COMPONENTS",
    "FeeBreakdown",
    "FeeRateProvider",
    "ProviderFeeRates",
    "RoutingFeeEstimate",
    "RoutingFeeEstimator",
]
