from __future__ import annotations

from enum import StrEnum
from typing import NewType

AssetId = NewType("AssetId", str)


class ChainId(StrEnum):
    BTC = "BTC"
    ETH = "ETH"
    SOL = "SOL"
    SUI = "SUI"


class Rail(StrEnum):
    """Traditional payment network endpoint used by on- and off-ramps."""

    EXTERNAL = "EXTERNAL"


Endpoint = ChainId | Rail

# All platform balances settle as USDC on Solana.
PLATFORM_CHAIN = ChainId.SOL
SETTLEMENT_ASSET = AssetId("USDC")
FIAT_ASSET = AssetId("USD")

CRYPTO_ASSETS: frozenset[str] = frozenset({"BTC", "ETH", "SOL", "SUI"})
TOKENIZED_ASSETS: frozenset[str] = frozenset({"PAXG", "XAUT", "MAG7", "SPX", "REIT"})

_NATIVE_CHAINS: dict[str, ChainId] = {
    "BTC": ChainId.BTC,
    "ETH": ChainId.ETH,
    "SOL": ChainId.SOL,
    "SUI": ChainId.SUI,
    "USDC": ChainId.SOL,
}


def native_chain_of(asset: str) -> ChainId:
    """Chain on which an asset is held.

    Tokenized real-world assets and anything unknown are issued on Solana.
    """
    return _NATIVE_CHAINS.get(asset.upper(), PLATFORM_CHAIN)


def is_tokenized(asset: str) -> bool:
    return asset.upper() in TOKENIZED_ASSETS


def is_crypto(asset: str) -> bool:
    return asset.upper() in CRYPTO_ASSETS


def is_tradable(asset: str) -> bool:
    """Assets that can be bought or sold: native crypto and tokenized real-world assets."""
    return is_crypto(asset) or is_tokenized(asset)
