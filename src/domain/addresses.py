from __future__ import annotations

import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from .chains import ChainId

_BASE58 = "1-9A-HJ-NP-Za-km-z"

INVALID_ADDRESS_REASON = "Invalid wallet address format"
BURN_ADDRESS_REASON = "Cannot send to burn address"


class AddressClassification(BaseModel):
    model_config = ConfigDict(frozen=True)

    chain: ChainId | None = None
    network: str | None = None
    is_valid: bool
    is_supported: bool
    reason: str | None = None


@dataclass(frozen=True)
class _AddressRule:
    network: str
    pattern: re.Pattern[str]
    chain: ChainId | None = None
    rejection: str | None = None

    def matches(self, address: str) -> bool:
        return self.pattern.fullmatch(address) is not None


def _rule(
    network: str,
    pattern: str,
    chain: ChainId | None = None,
    flags: int = 0,
    rejection: str | None = None,
) -> _AddressRule:
    return _AddressRule(network=network, pattern=re.compile(pattern, flags), chain=chain, rejection=rejection)


# Evaluated top to bottom, first match wins. ETH must precede SUI: both use the 0x prefix and only
# the length differs. Prefixed unsupported networks precede SOL, whose base58 rule would swallow them.
# The zero address is well formed but would burn the funds, so it is rejected before ETH.
_RULES: tuple[_AddressRule, ...] = (
    _rule("BTC", r"bc1[a-z0-9]{39,59}", ChainId.BTC, re.IGNORECASE),
    _rule("BTC", rf"3[{_BASE58}]{{25,34}}", ChainId.BTC),
    _rule("BTC", rf"1[{_BASE58}]{{25,34}}", ChainId.BTC),
    _rule("ETH", r"0x0{40}", rejection=BURN_ADDRESS_REASON),
    _rule("ETH", r"0x[a-fA-F0-9]{40}", ChainId.ETH),
    _rule("SUI", r"0x[a-fA-F0-9]{64}", ChainId.SUI),
    _rule("TRON", rf"T[{_BASE58}]{{33}}"),
    _rule("XRP", rf"r[{_BASE58}]{{24,34}}"),
    _rule("DOGE", rf"D[5-9A-HJ-NP-U][{_BASE58}]{{32}}"),
    _rule("LTC", rf"[LM][{_BASE58}]{{26,33}}|ltc1[a-z0-9]{{39,59}}"),
    _rule("BNB", r"bnb1[a-z0-9]{38}"),
    _rule("ADA", r"addr1[a-z0-9]{50,}"),
    _rule("ATOM", r"cosmos1[a-z0-9]{38}"),
    _rule("CRO", r"cro1[a-z0-9]{38}"),
    _rule("AVAX", r"X-avax[a-zA-Z0-9]{39}"),
    _rule("XTZ", r"tz[123][a-zA-Z0-9]{33}"),
    _rule("SOL", rf"[{_BASE58}]{{32,44}}", ChainId.SOL),
    _rule("DOT", r"1[a-zA-Z0-9]{47}"),
    _rule("KSM", r"[A-HJ-NP-Za-km-z][a-zA-Z0-9]{46,47}"),
    _rule("XLM", r"G[A-Z2-7]{55}"),
    _rule("ALGO", r"[A-Z2-7]{58}"),
    _rule("XMR", rf"[48][{_BASE58}]{{94}}"),
    _rule("NEAR", r"[a-z0-9_-]+\.near"),
    _rule("HBAR", r"0\.0\.\d+"),
)


def _rejected(rule: _AddressRule) -> AddressClassification:
    return AddressClassification(network=rule.network, is_valid=False, is_supported=False, reason=rule.rejection)


class AddressClassifier:
    """Map a wallet address string to the chain it belongs to."""

    def __init__(self, rules: tuple[_AddressRule, ...] = _RULES) -> None:
        self._rules = rules

    def classify(self, address: str | None) -> AddressClassification:
        if address is None:
            return AddressClassification(is_valid=False, is_supported=False)
        if not isinstance(address, str):
            raise TypeError(f"address must be a string, got {type(address).__name__}")

        candidate = address.strip()
        if not candidate:
            return AddressClassification(is_valid=False, is_supported=False)

        for rule in self._rules:
            if not rule.matches(candidate):
                continue
            if rule.rejection is not None:
                return _rejected(rule)
            if rule.chain is not None:
                return AddressClassification(chain=rule.chain, network=rule.network, is_valid=True, is_supported=True)
            return AddressClassification(
                network=rule.network,
                is_valid=True,
                is_supported=False,
                reason=f"{rule.network} addresses are not currently supported",
            )

        return AddressClassification(is_valid=False, is_supported=False, reason=INVALID_ADDRESS_REASON)

    def classify_for_chain(self, address: str | None, chain: ChainId) -> AddressClassification:
        """Check an address against a single chain's formats, ignoring rule order."""
        if address is None:
            return AddressClassification(is_valid=False, is_supported=False)
        if not isinstance(address, str):
            raise TypeError(f"address must be a string, got {type(address).__name__}")

        candidate = address.strip()
        if not candidate:
            return AddressClassification(is_valid=False, is_supported=False)
        for rule in self._rules:
            if rule.rejection is not None and rule.matches(candidate):
                return _rejected(rule)
        if any(rule.chain == chain and rule.matches(candidate) for rule in self._rules):
            return AddressClassification(chain=chain, network=chain.value, is_valid=True, is_supported=True)
        return AddressClassification(
            is_valid=False,
            is_supported=False,
            reason=f"Invalid {chain.value} address format",
        )

    @staticmethod
    def supported_chains() -> list[ChainId]:
        return list(ChainId)


__all__ = ["AddressClassification", "AddressClassifier", "BURN_ADDRESS_REASON", "INVALID_ADDRESS_REASON"]
