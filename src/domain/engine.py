from __future__ import annotations

import inspect
import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError

from .addresses import AddressClassification, AddressClassifier
from .balance import BalanceProvider, UnifiedBalance
from .errors import ProviderUnavailable, RoutingInfeasible, ValidationFailure
from .fee_calculator import FeeCalculator
from .fees import FeeBreakdown, FeeRateProvider, RoutingFeeEstimator
from .routing import RoutingPlan, RoutingPlanner
from .transaction import TransactionRequest, has_wallet_destination, parse_request, recipient_of
from .validation import MISSING_REQUIRED_FIELDS, TransactionValidator, ValidationResult

logger = logging.getLogger(__name__)


class TransactionPlan(BaseModel):
    """Priced, routable plan handed to the executor. Built per request and never stored."""

    model_config = ConfigDict(frozen=True)

    request: TransactionRequest
    classification: AddressClassification | None = None
    routing_plan: RoutingPlan
    fee_breakdown: FeeBreakdown
    validation: ValidationResult


TransactionOutcome = TransactionPlan | ValidationFailure | RoutingInfeasible


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class TransactionEngine:
    """Validate, route, then price a transaction request.

    Each stage fails fast: routing never runs for an invalid request, and fees are never computed for
    an infeasible route. The engine keeps no state between calls.
    """

    def __init__(
        self,
        *,
        rate_provider: FeeRateProvider,
        routing_fee_estimator: RoutingFeeEstimator,
        balance_provider: BalanceProvider | None = None,
        address_classifier: AddressClassifier | None = None,
    ) -> None:
        self._address_classifier = address_classifier or AddressClassifier()
        self._validator = TransactionValidator(address_classifier=self._address_classifier)
        self._planner = RoutingPlanner(address_classifier=self._address_classifier)
        self._fee_calculator = FeeCalculator(rate_provider=rate_provider, routing_fee_estimator=routing_fee_estimator)
        self._balance_provider = balance_provider

    async def process_transaction(
        self,
        user_id: str,
        request: TransactionRequest,
        balance: UnifiedBalance | None = None,
    ) -> TransactionOutcome:
        validation = self._validator.validate(user_id, request)
        if not validation.is_valid:
            return ValidationFailure(reason=validation.error or MISSING_REQUIRED_FIELDS)

        snapshot = balance if balance is not None else await self._load_balance(user_id)

        routing_plan = self._planner.plan_routing(user_id, request, snapshot)
        if not routing_plan.feasible:
            reason = routing_plan.error or "Transaction cannot be routed"
            logger.info("Routing infeasible for %s request of user=%s: %s", request.type, user_id, reason)
            return RoutingInfeasible(reason=reason)

        fee_breakdown = await self._fee_calculator.calculate_fees(request, routing_plan)

        classification = None
        if has_wallet_destination(request):
            classification = self._address_classifier.classify(recipient_of(request))

        logger.info(
            "Planned %s request for user=%s: %s -> %s",
            request.type,
            user_id,
            routing_plan.from_chain,
            routing_plan.to_chain,
        )
        return TransactionPlan(
            request=request,
            classification=classification,
            routing_plan=routing_plan,
            fee_breakdown=fee_breakdown,
            validation=validation,
        )

    async def process_payload(
        self,
        user_id: str,
        payload: Mapping[str, Any],
        balance: UnifiedBalance | None = None,
    ) -> TransactionOutcome:
        """Like ``process_transaction`` but for a raw mapping, e.g. decoded JSON."""
        if not payload.get("type") or payload.get("amount") in (None, ""):
            return ValidationFailure(reason=MISSING_REQUIRED_FIELDS)
        try:
            request = parse_request(payload)
        except ValidationError as exc:
            logger.info("Malformed payload for user=%s: %s error(s)", user_id, exc.error_count())
            raise
        return await self.process_transaction(user_id, request, balance)

    async def _load_balance(self, user_id: str) -> UnifiedBalance:
        if self._balance_provider is None:
            raise ProviderUnavailable("Balance provider")
        try:
            return await _resolve(self._balance_provider.get_unified_balance(user_id))
        except ProviderUnavailable:
            raise
        except Exception as exc:
            logger.warning("Balance lookup failed for user=%s: %s", user_id, exc)
            raise ProviderUnavailable("Balance provider") from exc


__all__ = ["TransactionEngine", "TransactionOutcome", "TransactionPlan"]
