"""
Insight generator: strengths, weaknesses and recommendations from metrics.

Each list is an ordered table of (predicate, message) rules. Output keeps the
first N matching rules in table order (4 strengths, 3 weaknesses, 3
recommendations). Strengths and recommendations fall back to one default
entry; weaknesses may be empty.
"""

from __future__ import annotations

from typing import Callable

from backend_walletdna.analytics.models import InsightSet, Metrics, PersonalityType
from backend_walletdna.walletdna_logging import get_logger

logger = get_logger(__name__)

MAX_STRENGTHS = 4
MAX_WEAKNESSES = 3
MAX_RECOMMENDATIONS = 3

FALLBACK_STRENGTH = "Active crypto participant"
FALLBACK_RECOMMENDATION = "Portfolio looks balanced - maintain current strategy"

InsightRule = tuple[Callable[[Metrics], bool], str]


def _below(m: Metrics, bucket: str, threshold: float) -> bool:
    """Bucket share below threshold; never true for a zero-value portfolio."""
    return not m.allocations.empty and getattr(m.allocations, bucket) < threshold


STRENGTH_RULES: tuple[InsightRule, ...] = (
    (lambda m: m.allocations.bluechip > 0.5, "Strong blue-chip allocation provides stability"),
    (lambda m: m.chain_count >= 3, "Good multi-chain diversification reduces platform risk"),
    (lambda m: m.protocol_count >= 5, "Active DeFi engagement across multiple protocols"),
    (lambda m: m.concentration < 0.4, "Well-diversified portfolio reduces concentration risk"),
    (lambda m: 0.1 < m.allocations.stablecoins < 0.3, "Healthy stablecoin buffer for opportunities"),
)

WEAKNESS_RULES: tuple[InsightRule, ...] = (
    (lambda m: m.allocations.stablecoins > 0.5, "High stablecoin allocation limits upside potential"),
    (lambda m: _below(m, "bluechip", 0.2), "Low exposure to established assets increases risk"),
    (lambda m: m.chain_count == 1, "Single-chain exposure creates platform risk"),
    (lambda m: m.concentration > 0.7, "High concentration in few positions"),
    (lambda m: m.protocol_count > 12, "Many protocols increase complexity and management burden"),
)

RECOMMENDATION_RULES: tuple[InsightRule, ...] = (
    (
        lambda m: m.allocations.stablecoins > 0.4,
        "Consider reducing stablecoin allocation to 15-25% to capture more upside",
    ),
    (lambda m: m.chain_count < 3, "Explore emerging L2s like Base, Arbitrum, or Optimism"),
    (lambda m: _below(m, "bluechip", 0.3), "Increase ETH/BTC allocation for portfolio stability"),
    (lambda m: m.concentration > 0.6, "Diversify holdings to reduce single-position risk"),
    (
        lambda m: not m.allocations.empty and m.allocations.defi == 0 and m.protocol_count < 3,
        "Consider DeFi yield opportunities (Aave, Compound) for passive income",
    ),
)


def _matching(rules: tuple[InsightRule, ...], metrics: Metrics, cap: int) -> list[str]:
    return [message for predicate, message in rules if predicate(metrics)][:cap]


def generate_insights(
    metrics: Metrics,
    personality: PersonalityType | None = None,
    risk_score: int | None = None,
) -> InsightSet:
    """
    Build the InsightSet for a wallet.

    personality and risk_score are accepted so callers pass the full analysis;
    the current rule tables key only on metrics.
    """
    strengths = _matching(STRENGTH_RULES, metrics, MAX_STRENGTHS)
    weaknesses = _matching(WEAKNESS_RULES, metrics, MAX_WEAKNESSES)
    recommendations = _matching(RECOMMENDATION_RULES, metrics, MAX_RECOMMENDATIONS)

    if not strengths:
        strengths = [FALLBACK_STRENGTH]
    if not recommendations:
        recommendations = [FALLBACK_RECOMMENDATION]

    logger.debug(
        "insights_generated",
        personality=personality.value if personality else None,
        risk_score=risk_score,
        strengths=len(strengths),
        weaknesses=len(weaknesses),
        recommendations=len(recommendations),
    )
    return InsightSet(
        strengths=tuple(strengths),
        weaknesses=tuple(weaknesses),
        recommendations=tuple(recommendations),
    )
