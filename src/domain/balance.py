from __future__ import annotations

from decimal import Decimal
from typing import Awaitable, Mapping, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .chains import ChainId, native_chain_of


class AssetHolding(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Decimal(0)
    usd_value: Decimal = Decimal(0)
    chain: ChainId | None = None

    @model_validator(mode="after")
    def _validate_non_negative(self) -> AssetHolding:
        if self.amount < 0:
            raise ValueError("AssetHolding.amount must be >= 0")
        if self.usd_value < 0:
            raise ValueError("AssetHolding.usd_value must be >= 0")
        return self


class UnifiedBalance(BaseModel):
    """Read-only snapshot of a user's funds across chains and assets.

    ``available_for_spending`` is the USDC the user can move right away; ``invested_amount`` is the
    USD value locked in assets. Only the external balance service changes balances, the core reads
    snapshots.
    """

    model_config = ConfigDict(frozen=True)

    available_for_spending: Decimal = Decimal(0)
    invested_amount: Decimal = Decimal(0)
    per_asset: Mapping[str, AssetHolding] = Field(default_factory=dict)

    @field_validator("per_asset", mode="after")
    @classmethod
    def _normalize_asset_keys(cls, value: Mapping[str, AssetHolding]) -> dict[str, AssetHolding]:
        return {asset.upper(): holding for asset, holding in value.items()}

    @model_validator(mode="after")
    def _validate_non_negative(self) -> UnifiedBalance:
        if self.available_for_spending < 0:
            raise ValueError("available_for_spending must be >= 0")
        if self.invested_amount < 0:
            raise ValueError("invested_amount must be >= 0")
        return self

    def holding(self, asset: str) -> AssetHolding | None:
        return self.per_asset.get(asset.upper())

    def usd_value_of(self, asset: str) -> Decimal:
        holding = self.holding(asset)
        if holding is None:
            return Decimal(0)
        return holding.usd_value

    def chain_of(self, asset: str) -> ChainId:
        holding = self.holding(asset)
        if holding is not None and holding.chain is not None:
            return holding.chain
        return native_chain_of(asset)

    @property
    def total_usd(self) -> Decimal:
        return self.available_for_spending + self.invested_amount


class BalanceProvider(Protocol):
    """Source of unified balance snapshots; implementations may be sync or async."""

    def get_unified_balance(self, user_id: str) -> UnifiedBalance | Awaitable[UnifiedBalance]: ...


__all__ = ["AssetHolding", "BalanceProvider", "UnifiedBalance"]
