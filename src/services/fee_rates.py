from __future__ import annotations

from decimal import Decimal
from typing import Mapping

from config import AppSettings, config
from domain.fees import DexFeeRates, FeeRateProvider, ProviderFeeRates

DEFAULT_DIBOAS_RATES: dict[str, Decimal] = {
    "add": Decimal("0.0009"),
    "withdraw": Decimal("0.009"),
    "send": Decimal("0.0009"),
    "receive": Decimal("0.0009"),
    "transfer": Decimal("0.009"),
    "buy": Decimal("0.0009"),
    "sell": Decimal("0.0009"),
    "invest": Decimal("0.0009"),
}

DEFAULT_NETWORK_RATES: dict[str, Decimal] = {
    "BTC": Decimal("0.01"),
    "ETH": Decimal("0.005"),
    "SOL": Decimal("0.000001"),
    "SUI": Decimal("0.000003"),
}

DEFAULT_ONRAMP_RATES: dict[str, Decimal] = {
    "apple_pay": Decimal("0.005"),
    "google_pay": Decimal("0.005"),
    "credit_debit_card": Decimal("0.01"),
    "bank_account": Decimal("0.01"),
    "paypal": Decimal("0.03"),
}

DEFAULT_OFFRAMP_RATES: dict[str, Decimal] = {
    "apple_pay": Decimal("0.03"),
    "google_pay": Decimal("0.03"),
    "credit_debit_card": Decimal("0.02"),
    "bank_account": Decimal("0.02"),
    "paypal": Decimal("0.04"),
}


class StaticFeeRateProvider(FeeRateProvider):
    """In-process rate tables. Each getter returns a fresh copy so callers cannot alter the tables."""

    def __init__(
        self,
        *,
        dex_rate: Decimal,
        diboas_rates: Mapping[str, Decimal] | None = None,
        network_rates: Mapping[str, Decimal] | None = None,
        onramp_rates: Mapping[str, Decimal] | None = None,
        offramp_rates: Mapping[str, Decimal] | None = None,
    ) -> None:
        self._diboas_rates = dict(diboas_rates if diboas_rates is not None else DEFAULT_DIBOAS_RATES)
        self._network_rates = dict(network_rates if network_rates is not None else DEFAULT_NETWORK_RATES)
        self._onramp_rates = dict(onramp_rates if onramp_rates is not None else DEFAULT_ONRAMP_RATES)
        self._offramp_rates = dict(offramp_rates if offramp_rates is not None else DEFAULT_OFFRAMP_RATES)
        self._dex_rate = dex_rate

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> StaticFeeRateProvider:
        settings = settings or config()
        return cls(dex_rate=settings.resolved_dex_fee_rate())

    async def get_diboas_fees(self) -> Mapping[str, Decimal]:
        return dict(self._diboas_rates)

    async def get_network_fees(self) -> Mapping[str, Decimal]:
        return dict(self._network_rates)

    async def get_payment_provider_fees(self) -> ProviderFeeRates:
        return ProviderFeeRates(onramp=dict(self._onramp_rates), offramp=dict(self._offramp_rates))

    async def get_dex_fees(self) -> DexFeeRates:
        return DexFeeRates(standard=self._dex_rate)


__all__ = [
    "DEFAULT_DIBOAS_RATES",
    "DEFAULT_NETWORK_RATES",
    "DEFAULT_OFFRAMP_RATES",
    "DEFAULT_ONRAMP_RATES",
    "StaticFeeRateProvider",
]
