from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from .chains import ChainId
from .errors import InternalInvariantViolation, ProviderUnavailable
from .fees import (
    DexFeeRates,
    FeeBreakdown,
    FeeRateProvider,
    ProviderFeeRates,
    RoutingFeeEstimate,
    RoutingFeeEstimator,
)
from .routing import RoutingPlan
from .transaction import (
    PaymentMethod,
    TransactionRequest,
    TransactionType,
    WithdrawRequest,
    is_traditional_rail,
)
from .validation import parse_amount

logger = logging.getLogger(__name__)

RATE_PROVIDER = "Fee rate provider"
ROUTING_FEE_ESTIMATOR = "Routing fee estimator"

T = TypeVar("T")


def _rate(value: Decimal | None, *, name: str) -> Decimal:
    """Treat a missing rate as zero and refuse anything that is not a finite, non-negative number."""
    if value is None:
        return Decimal(0)
    rate = Decimal(value)
    if not rate.is_finite():
        raise InternalInvariantViolation(f"{name} rate is not finite")
    if rate < 0:
        raise InternalInvariantViolation(f"{name} rate is negative")
    return rate


async def _call_provider(provider: str, call: Callable[..., Awaitable[T]], *args: Any) -> T:
    """Await one provider call; failures that are not defects become ``ProviderUnavailable(provider)``."""
    try:
        return await call(*args)
    except (InternalInvariantViolation, ProviderUnavailable):
        raise
    except Exception as exc:
        logger.warning("%s call failed: %s", provider, exc)
        raise ProviderUnavailable(provider) from exc


def _lookup(table: Mapping[str, Decimal] | None, key: str | None, *, name: str) -> Decimal:
    if table is None or key is None:
        return Decimal(0)
    return _rate(table.get(key), name=f"{name}[{key}]")


def effective_rate(breakdown: FeeBreakdown, amount: Decimal) -> Decimal:
    """Total fee as a fraction of ``amount``."""
    if amount <= 0:
        return Decimal(0)
    return breakdown.total / amount


class FeeCalculator:
    """Price a routed transaction across the five fee dimensions.

    Rate tables are read from the provider on every call and awaited one after another. Amounts keep
    full precision; rounding is left to presentation.
    """

    def __init__(self, *, rate_provider: FeeRateProvider, routing_fee_estimator: RoutingFeeEstimator) -> None:
        self._rate_provider = rate_provider
        self._routing_fee_estimator = routing_fee_estimator

    async def calculate_fees(self, request: TransactionRequest, routing_plan: RoutingPlan) -> FeeBreakdown:
        if not routing_plan.feasible:
            raise InternalInvariantViolation("fees requested for an infeasible routing plan")
        amount = parse_amount(request.amount)
        if amount is None:
            raise InternalInvariantViolation("fees requested for a request without a valid amount")

        transaction_type = TransactionType(request.type)

        diboas_rates = await _call_provider(RATE_PROVIDER, self._rate_provider.get_diboas_fees)
        network_rates = await _call_provider(RATE_PROVIDER, self._rate_provider.get_network_fees)
        provider_rates = await _call_provider(RATE_PROVIDER, self._rate_provider.get_payment_provider_fees)
        dex_rates = await _call_provider(RATE_PROVIDER, self._rate_provider.get_dex_fees)

        diboas = amount * _lookup(diboas_rates, transaction_type.value, name="diboas")
        network = amount * self._network_rate(routing_plan, network_rates)
        provider = amount * self._provider_rate(request, provider_rates)
        dex = amount * self._dex_rate(request, routing_plan, dex_rates)
        routing = await self._routing_fee(routing_plan, amount)

        breakdown = FeeBreakdown.from_components(
            diboas=diboas,
            network=network,
            provider=provider,
            dex=dex,
            routing=routing,
        )
        logger.debug("Priced %s of %s: total fee %s", transaction_type, amount, breakdown.total)
        return breakdown

    @staticmethod
    def _network_rate(routing_plan: RoutingPlan, network_rates: Mapping[str, Decimal] | None) -> Decimal:
        total = Decimal(0)
        for chain in routing_plan.chains():
            total += _lookup(network_rates, chain.value, name="network")
        return total

    @staticmethod
    def _provider_rate(request: TransactionRequest, provider_rates: ProviderFeeRates | None) -> Decimal:
        if provider_rates is None:
            return Decimal(0)
        transaction_type = TransactionType(request.type)
        if transaction_type == TransactionType.ADD:
            return _lookup(provider_rates.onramp, request.payment_method, name="onramp")
        if transaction_type == TransactionType.WITHDRAW and is_traditional_rail(request.payment_method):
            return _lookup(provider_rates.offramp, request.payment_method, name="offramp")
        return Decimal(0)

    @staticmethod
    def _dex_rate(request: TransactionRequest, routing_plan: RoutingPlan, dex_rates: DexFeeRates | None) -> Decimal:
        if dex_rates is None or not _uses_dex(request):
            return Decimal(0)
        if routing_plan.stays_on_platform_chain:
            return Decimal(0)
        return _rate(dex_rates.standard, name="dex.standard")

    async def _routing_fee(self, routing_plan: RoutingPlan, amount: Decimal) -> Decimal:
        if not routing_plan.needs_routing:
            return Decimal(0)
        from_chain = routing_plan.from_chain
        to_chain = routing_plan.to_chain
        if not isinstance(from_chain, ChainId) or not isinstance(to_chain, ChainId):
            raise InternalInvariantViolation("cross-chain routing requested without both chains")
        estimate = await _call_provider(
            ROUTING_FEE_ESTIMATOR,
            self._routing_fee_estimator.estimate_routing_fees,
            from_chain,
            to_chain,
            amount,
        )
        if estimate is None:
            return Decimal(0)
        if not isinstance(estimate, RoutingFeeEstimate):
            raise InternalInvariantViolation(f"routing fee estimate has unexpected type {type(estimate).__name__}")
        return _rate(estimate.total, name="routing")


def _uses_dex(request: TransactionRequest) -> bool:
    transaction_type = TransactionType(request.type)
    if transaction_type in (TransactionType.TRANSFER, TransactionType.SELL):
        return True
    if transaction_type == TransactionType.WITHDRAW:
        return isinstance(request, WithdrawRequest) and request.is_external_wallet
    if transaction_type == TransactionType.BUY:
        return (request.payment_method or PaymentMethod.DIBOAS_WALLET) == PaymentMethod.DIBOAS_WALLET
    return False


__all__ = ["FeeCalculator", "effective_rate"]
