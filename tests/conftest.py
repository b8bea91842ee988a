from decimal import Decimal

import pytest

from domain.balance import AssetHolding, UnifiedBalance
from domain.chains import ChainId
from domain.engine import TransactionEngine
from services.routing_fees import StaticRoutingFeeEstimator
from tests.helpers.fakes import CountingFeeRateProvider


@pytest.fixture(scope="function")
def rate_provider() -> CountingFeeRateProvider:
    return CountingFeeRateProvider()


@pytest.fixture(scope="function")
def routing_fee_estimator() -> StaticRoutingFeeEstimator:
    return StaticRoutingFeeEstimator()


@pytest.fixture(scope="function")
def transaction_engine(
    rate_provider: CountingFeeRateProvider, routing_fee_estimator: StaticRoutingFeeEstimator
) -> TransactionEngine:
    return TransactionEngine(rate_provider=rate_provider, routing_fee_estimator=routing_fee_estimator)


@pytest.fixture(scope="function")
def balance() -> UnifiedBalance:
    return UnifiedBalance(
        available_for_spending=Decimal("2500"),
        invested_amount=Decimal("1000"),
        per_asset={
            "BTC": AssetHolding(amount=Decimal("0.01"), usd_value=Decimal("430"), chain=ChainId.BTC),
            "ETH": AssetHolding(amount=Decimal("1"), usd_value=Decimal("3000"), chain=ChainId.ETH),
            "SOL": AssetHolding(amount=Decimal("10"), usd_value=Decimal("1500"), chain=ChainId.SOL),
        },
    )
