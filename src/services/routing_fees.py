from __future__ import annotations

from decimal import Decimal
from typing import Mapping

from domain.chains import ChainId
from domain.fees import RoutingFeeEstimate, RoutingFeeEstimator

# Flat gas cost in USD per transaction on each chain.
DEFAULT_GAS_FEES_USD: dict[ChainId, Decimal] = {
    ChainId.BTC: Decimal("15"),
    ChainId.ETH: Decimal("25"),
    ChainId.SOL: Decimal("0.5"),
    ChainId.SUI: Decimal("0.8"),
}
DEFAULT_BRIDGE_RATE = Decimal("0.001")
DEFAULT_SWAP_RATE = Decimal("0.003")


class StaticRoutingFeeEstimator(RoutingFeeEstimator):
    def __init__(
        self,
        *,
        gas_fees_usd: Mapping[ChainId, Decimal] | None = None,
        bridge_rate: Decimal = DEFAULT_BRIDGE_RATE,
        swap_rate: Decimal = DEFAULT_SWAP_RATE,
    ) -> None:
        self._gas_fees_usd = dict(gas_fees_usd if gas_fees_usd is not None else DEFAULT_GAS_FEES_USD)
        self._bridge_rate = bridge_rate
        self._swap_rate = swap_rate

    async def estimate_routing_fees(
        self, from_chain: ChainId, to_chain: ChainId, amount: Decimal
    ) -> RoutingFeeEstimate:
        cross_chain = from_chain != to_chain
        # Gas is paid on the source chain, and again on the destination when bridging.
        gas = self._gas_fees_usd.get(from_chain, Decimal(0))
        if cross_chain:
            gas += self._gas_fees_usd.get(to_chain, Decimal(0))
        bridge = amount * self._bridge_rate if cross_chain else Decimal(0)
        swap = amount * self._swap_rate
        return RoutingFeeEstimate(gas=gas, bridge=bridge, swap=swap, total=gas + bridge + swap)


__all__ = ["DEFAULT_GAS_FEES_USD", "StaticRoutingFeeEstimator"]
