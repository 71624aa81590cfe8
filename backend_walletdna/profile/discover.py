"""
Wallet discovery: filter and page through analyzed wallets in memory.

Callers load the analyzed-wallet population from their store; this module
applies personality and risk-range filters, orders by portfolio value
(largest first, stable) and returns one page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from backend_walletdna.analytics.models import PersonalityType
from backend_walletdna.config.settings import get_settings
from backend_walletdna.walletdna_logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class WalletProfile:
    """Listing view of an analyzed wallet."""

    address: str
    personality: PersonalityType | None = None
    risk_score: int | None = None
    portfolio_value: float = 0.0
    ens_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "ens_name": self.ens_name,
            "personality": self.personality.value if self.personality else None,
            "risk_score": self.risk_score,
            "portfolio_value": self.portfolio_value,
        }


@dataclass(frozen=True)
class DiscoverPage:
    wallets: list[WalletProfile]
    total: int
    """Matches before paging."""
    has_more: bool

    def to_dict(self) -> dict[str, Any]:
        return {"wallets": [w.to_dict() for w in self.wallets], "total": self.total, "has_more": self.has_more}


def _in_risk_range(profile: WalletProfile, min_risk: int | None, max_risk: int | None) -> bool:
    if min_risk is None and max_risk is None:
        return True
    if profile.risk_score is None:
        return False
    if min_risk is not None and profile.risk_score < min_risk:
        return False
    if max_risk is not None and profile.risk_score > max_risk:
        return False
    return True


def discover_wallets(
    profiles: Iterable[WalletProfile],
    *,
    personality: PersonalityType | str | None = None,
    min_risk_score: int | None = None,
    max_risk_score: int | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> DiscoverPage:
    """
    Filter by personality and inclusive risk range, order by portfolio value, page.

    A risk bound excludes wallets with no risk score. Negative offset or
    limit are treated as 0; limit defaults to WALLETDNA_DISCOVER_PAGE_SIZE. An
    unknown personality label raises ValueError.
    """
    if limit is None:
        limit = get_settings().discover_page_size
    wanted = PersonalityType(personality) if personality else None
    matches = [
        p for p in profiles
        if (wanted is None or p.personality == wanted) and _in_risk_range(p, min_risk_score, max_risk_score)
    ]
    matches.sort(key=lambda p: p.portfolio_value or 0.0, reverse=True)

    offset = max(0, offset)
    limit = max(0, limit)
    page = matches[offset: offset + limit]
    logger.debug(
        "discover_wallets",
        personality=wanted.value if wanted else None,
        min_risk_score=min_risk_score,
        max_risk_score=max_risk_score,
        total=len(matches),
        returned=len(page),
    )
    return DiscoverPage(wallets=page, total=len(matches), has_more=len(matches) > offset + limit)
