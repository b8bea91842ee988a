from __future__ import annotations

import logging
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from .addresses import AddressClassifier
from .balance import UnifiedBalance
from .chains import (
    FIAT_ASSET,
    PLATFORM_CHAIN,
    SETTLEMENT_ASSET,
    ChainId,
    Endpoint,
    Rail,
    is_tokenized,
    native_chain_of,
)
from .transaction import (
    PaymentMethod,
    TransactionRequest,
    TransactionType,
    WithdrawRequest,
    is_traditional_rail,
    recipient_of,
)

logger = logging.getLogger(__name__)

UNSUPPORTED_DESTINATION = "Unsupported destination address"


class StepAction(StrEnum):
    ONRAMP = "onramp"
    OFFRAMP = "offramp"
    TRANSFER = "transfer"
    SWAP = "swap"
    BRIDGE = "bridge"
    INVEST = "invest"


class RoutingStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: StepAction
    from_chain: Endpoint
    to_chain: Endpoint
    from_asset: str
    to_asset: str


class RoutingPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    feasible: bool
    from_chain: Endpoint | None = None
    to_chain: Endpoint | None = None
    from_asset: str | None = None
    to_asset: str | None = None
    needs_routing: bool = False
    error: str | None = None
    steps: tuple[RoutingStep, ...] = ()

    def chains(self) -> list[ChainId]:
        """Distinct settlement chains touched by the route, rails excluded."""
        seen: list[ChainId] = []
        for endpoint in (self.from_chain, self.to_chain):
            if isinstance(endpoint, ChainId) and endpoint not in seen:
                seen.append(endpoint)
        return seen

    @property
    def stays_on_platform_chain(self) -> bool:
        return self.from_chain == PLATFORM_CHAIN and self.to_chain == PLATFORM_CHAIN


def _insufficient_balance(transaction_type: str) -> str:
    return f"Insufficient balance for {transaction_type} transaction"


def _movement_steps(from_chain: ChainId, from_asset: str, to_chain: ChainId, to_asset: str) -> tuple[RoutingStep, ...]:
    """Swap into USDC, bridge, then swap into the target asset, skipping the legs that are not needed."""
    steps: list[RoutingStep] = []
    if from_asset != SETTLEMENT_ASSET:
        steps.append(
            RoutingStep(
                action=StepAction.SWAP,
                from_chain=from_chain,
                to_chain=from_chain,
                from_asset=from_asset,
                to_asset=SETTLEMENT_ASSET,
            )
        )
    if from_chain != to_chain:
        steps.append(
            RoutingStep(
                action=StepAction.BRIDGE,
                from_chain=from_chain,
                to_chain=to_chain,
                from_asset=SETTLEMENT_ASSET,
                to_asset=SETTLEMENT_ASSET,
            )
        )
    if to_asset != SETTLEMENT_ASSET:
        steps.append(
            RoutingStep(
                action=StepAction.SWAP,
                from_chain=to_chain,
                to_chain=to_chain,
                from_asset=SETTLEMENT_ASSET,
                to_asset=to_asset,
            )
        )
    if not steps:
        steps.append(
            RoutingStep(
                action=StepAction.TRANSFER,
                from_chain=from_chain,
                to_chain=to_chain,
                from_asset=from_asset,
                to_asset=to_asset,
            )
        )
    return tuple(steps)


class RoutingPlanner:
    """Resolve where a transaction's funds come from, where they land, and whether they cross chains.

    The planner is the only component that looks at balances; it reads the snapshot it is given and
    never changes it.
    """

    def __init__(self, *, address_classifier: AddressClassifier | None = None) -> None:
        self._address_classifier = address_classifier or AddressClassifier()

    def plan_routing(self, user_id: str, request: TransactionRequest, balance: UnifiedBalance) -> RoutingPlan:
        amount = Decimal(str(request.amount))
        transaction_type = TransactionType(request.type)

        if transaction_type == TransactionType.ADD:
            plan = self._plan_add()
        elif transaction_type == TransactionType.WITHDRAW:
            plan = self._plan_withdraw(request, amount, balance)
        elif transaction_type in (TransactionType.SEND, TransactionType.RECEIVE):
            plan = self._plan_p2p(transaction_type, amount, balance)
        elif transaction_type == TransactionType.TRANSFER:
            plan = self._plan_transfer(request, amount, balance)
        elif transaction_type == TransactionType.BUY:
            plan = self._plan_buy(transaction_type, request, amount, balance)
        elif transaction_type == TransactionType.SELL:
            plan = self._plan_sell(request, amount, balance)
        else:
            plan = self._plan_invest(request, amount, balance)

        logger.debug(
            "Routing for user=%s type=%s: feasible=%s %s -> %s needs_routing=%s",
            user_id,
            transaction_type,
            plan.feasible,
            plan.from_chain,
            plan.to_chain,
            plan.needs_routing,
        )
        return plan

    def _plan_add(self) -> RoutingPlan:
        return RoutingPlan(
            feasible=True,
            from_chain=Rail.EXTERNAL,
            to_chain=PLATFORM_CHAIN,
            from_asset=FIAT_ASSET,
            to_asset=SETTLEMENT_ASSET,
            needs_routing=False,
            steps=(
                RoutingStep(
                    action=StepAction.ONRAMP,
                    from_chain=Rail.EXTERNAL,
                    to_chain=PLATFORM_CHAIN,
                    from_asset=FIAT_ASSET,
                    to_asset=SETTLEMENT_ASSET,
                ),
            ),
        )

    def _plan_withdraw(self, request: TransactionRequest, amount: Decimal, balance: UnifiedBalance) -> RoutingPlan:
        external_wallet = isinstance(request, WithdrawRequest) and request.is_external_wallet
        if external_wallet:
            to_chain = self._destination_chain(recipient_of(request))
            if to_chain is None:
                return RoutingPlan(feasible=False, error=UNSUPPORTED_DESTINATION)
            to_endpoint: Endpoint = to_chain
            to_asset = SETTLEMENT_ASSET
            steps = _movement_steps(PLATFORM_CHAIN, SETTLEMENT_ASSET, to_chain, SETTLEMENT_ASSET)
        else:
            to_endpoint = Rail.EXTERNAL
            to_asset = FIAT_ASSET
            steps = (
                RoutingStep(
                    action=StepAction.OFFRAMP,
                    from_chain=PLATFORM_CHAIN,
                    to_chain=Rail.EXTERNAL,
                    from_asset=SETTLEMENT_ASSET,
                    to_asset=FIAT_ASSET,
                ),
            )

        feasible = amount <= balance.available_for_spending
        return RoutingPlan(
            feasible=feasible,
            from_chain=PLATFORM_CHAIN,
            to_chain=to_endpoint,
            from_asset=SETTLEMENT_ASSET,
            to_asset=to_asset,
            needs_routing=isinstance(to_endpoint, ChainId) and to_endpoint != PLATFORM_CHAIN,
            error=None if feasible else _insufficient_balance(TransactionType.WITHDRAW),
            steps=steps,
        )

    def _plan_p2p(self, transaction_type: TransactionType, amount: Decimal, balance: UnifiedBalance) -> RoutingPlan:
        feasible = amount <= balance.available_for_spending
        return RoutingPlan(
            feasible=feasible,
            from_chain=PLATFORM_CHAIN,
            to_chain=PLATFORM_CHAIN,
            from_asset=SETTLEMENT_ASSET,
            to_asset=SETTLEMENT_ASSET,
            needs_routing=False,
            error=None if feasible else _insufficient_balance(transaction_type),
            steps=_movement_steps(PLATFORM_CHAIN, SETTLEMENT_ASSET, PLATFORM_CHAIN, SETTLEMENT_ASSET),
        )

    def _plan_transfer(self, request: TransactionRequest, amount: Decimal, balance: UnifiedBalance) -> RoutingPlan:
        to_chain = self._destination_chain(recipient_of(request))
        if to_chain is None:
            return RoutingPlan(feasible=False, error=UNSUPPORTED_DESTINATION)

        feasible = amount <= balance.available_for_spending
        return RoutingPlan(
            feasible=feasible,
            from_chain=PLATFORM_CHAIN,
            to_chain=to_chain,
            from_asset=SETTLEMENT_ASSET,
            to_asset=SETTLEMENT_ASSET,
            needs_routing=to_chain != PLATFORM_CHAIN,
            error=None if feasible else _insufficient_balance(TransactionType.TRANSFER),
            steps=_movement_steps(PLATFORM_CHAIN, SETTLEMENT_ASSET, to_chain, SETTLEMENT_ASSET),
        )

    def _plan_buy(
        self,
        transaction_type: TransactionType,
        request: TransactionRequest,
        amount: Decimal,
        balance: UnifiedBalance,
    ) -> RoutingPlan:
        asset = (request.asset or "").upper()
        to_chain = native_chain_of(asset)
        feasible = self._has_funding(request.payment_method, amount, balance)
        return RoutingPlan(
            feasible=feasible,
            from_chain=PLATFORM_CHAIN,
            to_chain=to_chain,
            from_asset=SETTLEMENT_ASSET,
            to_asset=asset,
            needs_routing=to_chain != PLATFORM_CHAIN,
            error=None if feasible else _insufficient_balance(transaction_type),
            steps=_movement_steps(PLATFORM_CHAIN, SETTLEMENT_ASSET, to_chain, asset),
        )

    def _plan_sell(self, request: TransactionRequest, amount: Decimal, balance: UnifiedBalance) -> RoutingPlan:
        asset = (request.asset or "").upper()
        from_chain = balance.chain_of(asset)
        feasible = amount <= balance.usd_value_of(asset)
        return RoutingPlan(
            feasible=feasible,
            from_chain=from_chain,
            to_chain=PLATFORM_CHAIN,
            from_asset=asset,
            to_asset=SETTLEMENT_ASSET,
            needs_routing=from_chain != PLATFORM_CHAIN,
            error=None if feasible else _insufficient_balance(TransactionType.SELL),
            steps=_movement_steps(from_chain, asset, PLATFORM_CHAIN, SETTLEMENT_ASSET),
        )

    def _plan_invest(self, request: TransactionRequest, amount: Decimal, balance: UnifiedBalance) -> RoutingPlan:
        asset = (request.asset or "").upper()
        if not is_tokenized(asset):
            return RoutingPlan(feasible=False, error="Unsupported asset for invest")

        plan = self._plan_buy(TransactionType.INVEST, request, amount, balance)
        if not plan.feasible:
            return plan
        invest_step = RoutingStep(
            action=StepAction.INVEST,
            from_chain=PLATFORM_CHAIN,
            to_chain=plan.to_chain or PLATFORM_CHAIN,
            from_asset=SETTLEMENT_ASSET,
            to_asset=asset,
        )
        return plan.model_copy(update={"steps": (invest_step,)})

    def _has_funding(self, payment_method: str | None, amount: Decimal, balance: UnifiedBalance) -> bool:
        if payment_method == PaymentMethod.INVESTED_BALANCE:
            return amount <= balance.invested_amount
        if is_traditional_rail(payment_method):
            # Paid through the on-ramp; the platform balance is not drawn.
            return True
        return amount <= balance.available_for_spending

    def _destination_chain(self, recipient: str | None) -> ChainId | None:
        classification = self._address_classifier.classify(recipient)
        if not classification.is_supported:
            return None
        return classification.chain


__all__ = ["RoutingPlan", "RoutingPlanner", "RoutingStep", "StepAction", "UNSUPPORTED_DESTINATION"]
