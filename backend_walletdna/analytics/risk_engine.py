"""
Risk engine: derive a 1-10 risk score from portfolio metrics.

1 = most conservative, 10 = most aggressive. Starts at a neutral 5 and applies
additive adjustments for stablecoin/bluechip/other allocation, concentration,
chain and protocol counts, then clamps and rounds half-up.

Empty portfolios (no value or no positions) score exactly 5. Portfolios with
value but no positive allocation (every position worth 0) use a reduced rule
set keyed only on chain and position counts.
"""

from __future__ import annotations

import math

from backend_walletdna.analytics.models import Metrics
from backend_walletdna.walletdna_logging import get_logger

logger = get_logger(__name__)

NEUTRAL_SCORE = 5
SCORE_MIN = 1
SCORE_MAX = 10


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _finalize(score: float) -> int:
    return _round_half_up(max(SCORE_MIN, min(SCORE_MAX, score)))


def _fallback_adjustments(metrics: Metrics) -> list[tuple[str, float]]:
    """Adjustments used when no allocation bucket holds value."""
    adjustments: list[tuple[str, float]] = []
    if metrics.chain_count >= 3:
        adjustments.append(("chain_diversified", -1))
    if metrics.chain_count >= 5:
        adjustments.append(("chain_sprawl", 1))
    if metrics.position_count < 3:
        adjustments.append(("few_positions", 1))
    if metrics.position_count > 10:
        adjustments.append(("many_positions", 1))
    return adjustments


def _full_adjustments(metrics: Metrics) -> list[tuple[str, float]]:
    adjustments: list[tuple[str, float]] = []
    alloc = metrics.allocations

    if alloc.stablecoins > 0.5:
        adjustments.append(("stablecoin_heavy", -2))
    elif alloc.stablecoins < 0.1:
        adjustments.append(("stablecoin_light", 1))

    if alloc.bluechip > 0.6:
        adjustments.append(("bluechip_heavy", -2))
    elif alloc.bluechip < 0.2:
        adjustments.append(("bluechip_light", 2))

    if alloc.other > 0.5:
        adjustments.append(("other_heavy", 2))

    if metrics.concentration > 0.7:
        adjustments.append(("concentrated", 2))
    elif metrics.concentration < 0.3:
        adjustments.append(("diversified", -1))

    if metrics.chain_count > 5:
        adjustments.append(("chain_sprawl", 1))
    elif metrics.chain_count == 1:
        adjustments.append(("single_chain", 1))

    if metrics.protocol_count > 10:
        adjustments.append(("protocol_sprawl", 1))
    elif metrics.protocol_count >= 5:
        adjustments.append(("protocol_active", 0.5))

    return adjustments


def calculate_risk_score(metrics: Metrics) -> int:
    """
    Compute the risk score (1-10) for a wallet's metrics.

    Deterministic: base 5 + sum of adjustments, clamped to [1, 10] and
    rounded half-up (5.5 -> 6).
    """
    if metrics.total_value == 0 or metrics.position_count == 0:
        logger.debug("risk_engine_result", risk_score=NEUTRAL_SCORE, reason="empty_portfolio")
        return NEUTRAL_SCORE

    fallback = not metrics.allocations.has_value()
    adjustments = _fallback_adjustments(metrics) if fallback else _full_adjustments(metrics)
    raw = NEUTRAL_SCORE + sum(delta for _, delta in adjustments)
    score = _finalize(raw)

    logger.debug(
        "risk_engine_result",
        risk_score=score,
        raw_score=raw,
        fallback=fallback,
        adjustments=[name for name, _ in adjustments],
    )
    return score
