from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from functools import cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DexFeeSchedule(StrEnum):
    CURRENT = "current"
    LEGACY = "legacy"


DEX_FEE_SCHEDULE_RATES: dict[DexFeeSchedule, Decimal] = {
    DexFeeSchedule.CURRENT: Decimal("0.008"),
    DexFeeSchedule.LEGACY: Decimal("0.002"),
}


class AppSettings(BaseSettings):
    dex_fee_schedule: DexFeeSchedule = DexFeeSchedule.CURRENT
    # Takes precedence over the schedule when set.
    dex_fee_rate: Decimal | None = None

    fee_rates_url: str | None = None
    fee_rates_timeout: float = 10.0

    model_config = SettingsConfigDict(env_prefix="TXCORE_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("dex_fee_rate")
    @classmethod
    def _validate_dex_fee_rate(cls, value: Decimal | None) -> Decimal | None:
        if value is None:
            return None
        if not value.is_finite() or value < 0:
            raise ValueError("dex_fee_rate must be a finite, non-negative decimal")
        return value

    def resolved_dex_fee_rate(self) -> Decimal:
        if self.dex_fee_rate is not None:
            return self.dex_fee_rate
        return DEX_FEE_SCHEDULE_RATES[self.dex_fee_schedule]


@cache
def config() -> AppSettings:
    return AppSettings()
