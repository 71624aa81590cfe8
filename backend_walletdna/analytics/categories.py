"""
Asset category lookup sets used to bucket positions by symbol.

Immutable configuration passed into the metrics extractor; callers that track
a different universe build their own AssetCategories instead of mutating these.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

CATEGORY_STABLECOINS = "stablecoins"
CATEGORY_BLUECHIP = "bluechip"
CATEGORY_DEFI = "defi"
CATEGORY_OTHER = "other"


def _symbols(values: Iterable[str]) -> frozenset[str]:
    return frozenset(v.strip().upper() for v in values if v and v.strip())


@dataclass(frozen=True)
class AssetCategories:
    """Symbol sets per category. Symbols are matched upper-cased."""

    stablecoins: frozenset[str]
    bluechip: frozenset[str]
    """Large-cap base-layer assets (ETH, BTC, major L1s) and their wrapped forms."""
    defi: frozenset[str]
    """DeFi protocol governance tokens."""

    @classmethod
    def from_symbols(
        cls,
        stablecoins: Iterable[str],
        bluechip: Iterable[str],
        defi: Iterable[str],
    ) -> "AssetCategories":
        return cls(stablecoins=_symbols(stablecoins), bluechip=_symbols(bluechip), defi=_symbols(defi))

    def categorize(self, symbol: str | None) -> str:
        """Return the bucket for a symbol; stablecoins win over bluechip over defi, else other."""
        key = (symbol or "").upper()
        if key in self.stablecoins:
            return CATEGORY_STABLECOINS
        if key in self.bluechip:
            return CATEGORY_BLUECHIP
        if key in self.defi:
            return CATEGORY_DEFI
        return CATEGORY_OTHER


DEFAULT_ASSET_CATEGORIES = AssetCategories.from_symbols(
    stablecoins=("USDC", "USDT", "DAI", "BUSD", "FRAX"),
    bluechip=("ETH", "WETH", "BTC", "WBTC", "BNB", "SOL", "MATIC", "AVAX"),
    defi=("AAVE", "UNI", "COMP", "CRV", "SNX", "MKR", "LDO", "RPL"),
)
