from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from domain.balance import BalanceProvider, UnifiedBalance


class BalanceNotFoundError(LookupError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"No balance snapshot for user {user_id}")
        self.user_id = user_id


class InMemoryBalanceProvider(BalanceProvider):
    def __init__(self, balances: Mapping[str, UnifiedBalance] | None = None) -> None:
        self._balances: dict[str, UnifiedBalance] = dict(balances or {})

    def set_balance(self, user_id: str, balance: UnifiedBalance) -> None:
        self._balances[user_id] = balance

    def get_unified_balance(self, user_id: str) -> UnifiedBalance:
        try:
            return self._balances[user_id]
        except KeyError as exc:
            raise BalanceNotFoundError(user_id) from exc


def load_balance_snapshot(path: Path) -> UnifiedBalance:
    """Read one ``UnifiedBalance`` from a JSON file.

    Expected shape::

        {
          "available_for_spending": "2500",
          "invested_amount": "0",
          "per_asset": {"BTC": {"amount": "0.01", "usd_value": "430", "chain": "BTC"}}
        }
    """
    with path.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)
    return UnifiedBalance.model_validate(raw)


__all__ = ["BalanceNotFoundError", "InMemoryBalanceProvider", "load_balance_snapshot"]
