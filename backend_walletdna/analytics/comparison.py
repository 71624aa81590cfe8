"""
Comparison engine: position a wallet against its cohort of similar wallets.

For portfolio value, risk score, chain count, position count and transaction
count: cohort average (mean of present, finite peer values, 2 decimals),
absolute and percent difference, and a position tag. Value-like dimensions use
percent-diff bands; risk uses absolute-diff bands. Narrative insights are
derived from the tags, with one generic insight when nothing stands out.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Sequence

from backend_walletdna.analytics.models import Metrics
from backend_walletdna.config.settings import get_settings
from backend_walletdna.core.exceptions import ComputationError
from backend_walletdna.walletdna_logging import get_logger

logger = get_logger(__name__)

DIM_PORTFOLIO_VALUE = "portfolio_value"
DIM_RISK_SCORE = "risk_score"
DIM_CHAINS = "chains"
DIM_POSITIONS = "positions"
DIM_TRANSACTIONS = "transactions"

POSITION_SIGNIFICANTLY_ABOVE = "significantly_above"
POSITION_ABOVE = "above"
POSITION_AVERAGE = "average"
POSITION_BELOW = "below"
POSITION_SIGNIFICANTLY_BELOW = "significantly_below"

RISK_MORE_AGGRESSIVE = "more_aggressive"
RISK_SLIGHTLY_AGGRESSIVE = "slightly_aggressive"
RISK_SIMILAR = "similar"
RISK_SLIGHTLY_CONSERVATIVE = "slightly_conservative"
RISK_MORE_CONSERVATIVE = "more_conservative"

EMPTY_COHORT_SUMMARY = "No similar wallets to compare"


class InsightType(str, Enum):
    STRENGTH = "strength"
    WEAKNESS = "weakness"
    WARNING = "warning"
    OPPORTUNITY = "opportunity"
    INFO = "info"


@dataclass(frozen=True)
class PeerProfile:
    """A cohort member: identity, similarity score and whatever profile data the store holds."""

    address: str
    similarity: float = 0.0
    risk_score: float | None = None
    portfolio_value: float | None = None
    """Falls back to metrics.total_value when None."""
    metrics: Metrics | None = None


@dataclass(frozen=True)
class DimensionComparison:
    user: float
    average: float
    diff: float
    diff_percent: int
    position: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user,
            "average": self.average,
            "diff": self.diff,
            "diff_percent": self.diff_percent,
            "position": self.position,
        }


@dataclass(frozen=True)
class ComparisonInsight:
    type: InsightType
    category: str
    message: str
    icon: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "category": self.category, "message": self.message, "icon": self.icon}


@dataclass
class ComparisonResult:
    """Per-dimension positioning against the cohort plus narrative insights."""

    dimensions: dict[str, DimensionComparison]
    insights: list[ComparisonInsight]
    similar_count: int
    generated_at: datetime
    summary: str | None = None
    """Set only when there was no cohort to compare against."""
    peers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        if not self.dimensions:
            return {
                "summary": self.summary,
                "comparison": {},
                "insights": [i.to_dict() for i in self.insights],
                "similar_count": self.similar_count,
                "positioning": "neutral",
                "generated_at": self.generated_at.isoformat(),
            }
        d = {name: dim.to_dict() for name, dim in self.dimensions.items()}
        return {
            "comparison": {
                DIM_PORTFOLIO_VALUE: d[DIM_PORTFOLIO_VALUE],
                DIM_RISK_SCORE: d[DIM_RISK_SCORE],
                "diversity": {DIM_CHAINS: d[DIM_CHAINS], DIM_POSITIONS: d[DIM_POSITIONS]},
                "activity": {DIM_TRANSACTIONS: d[DIM_TRANSACTIONS]},
            },
            "insights": [i.to_dict() for i in self.insights],
            "similar_count": self.similar_count,
            "peers": list(self.peers),
            "generated_at": self.generated_at.isoformat(),
        }


def _round_half_up(value: float, ndigits: int = 0) -> float:
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def calculate_average(values: Iterable[float | None]) -> float:
    """Mean of present, finite values rounded to 2 decimals; 0 when there are none."""
    present = [float(v) for v in values if v is not None and math.isfinite(float(v))]
    if not present:
        return 0.0
    return _round_half_up(sum(present) / len(present), 2)


def calculate_percent_diff(value: float, average: float) -> int:
    """(value - average) / average * 100 rounded half-up; 100 or 0 when average is 0."""
    if average == 0:
        return 100 if value > 0 else 0
    return int(_round_half_up((value - average) / average * 100))


def get_position(diff_percent: int) -> str:
    if diff_percent > 20:
        return POSITION_SIGNIFICANTLY_ABOVE
    if diff_percent > 5:
        return POSITION_ABOVE
    if diff_percent < -20:
        return POSITION_SIGNIFICANTLY_BELOW
    if diff_percent < -5:
        return POSITION_BELOW
    return POSITION_AVERAGE


def get_risk_position(user_risk: float, average_risk: float) -> str:
    diff = user_risk - average_risk
    if diff > 2:
        return RISK_MORE_AGGRESSIVE
    if diff > 0.5:
        return RISK_SLIGHTLY_AGGRESSIVE
    if diff < -2:
        return RISK_MORE_CONSERVATIVE
    if diff < -0.5:
        return RISK_SLIGHTLY_CONSERVATIVE
    return RISK_SIMILAR


def _check_finite(name: str, value: float) -> float:
    if value is None or not math.isfinite(float(value)):
        logger.error("comparison_non_finite_user_value", dimension=name, value=str(value))
        raise ComputationError(f"user value for {name} is not a finite number", dimension=name, value=str(value))
    return value


def _peer_value(peer: PeerProfile) -> float | None:
    if peer.portfolio_value is not None:
        return peer.portfolio_value
    return peer.metrics.total_value if peer.metrics is not None else None


def _compare(
    name: str,
    user: float,
    peers: Sequence[PeerProfile],
    extract: Callable[[PeerProfile], float | None],
    position_fn: Callable[[float, float, int], str],
) -> DimensionComparison:
    user = _check_finite(name, user)
    average = calculate_average(extract(p) for p in peers)
    diff_percent = calculate_percent_diff(user, average)
    return DimensionComparison(
        user=user,
        average=average,
        diff=user - average,
        diff_percent=diff_percent,
        position=position_fn(user, average, diff_percent),
    )


def _metric(attr: str) -> Callable[[PeerProfile], float | None]:
    return lambda p: getattr(p.metrics, attr) if p.metrics is not None else None


def generate_comparison_insights(dimensions: dict[str, DimensionComparison]) -> list[ComparisonInsight]:
    """Map notable (dimension, position) pairs to narrative insights."""
    insights: list[ComparisonInsight] = []

    value = dimensions[DIM_PORTFOLIO_VALUE]
    if value.position == POSITION_SIGNIFICANTLY_ABOVE:
        insights.append(ComparisonInsight(
            InsightType.STRENGTH, "portfolio_value",
            f"Your portfolio value is {abs(value.diff_percent)}% above similar traders", "📈",
        ))
    elif value.position == POSITION_SIGNIFICANTLY_BELOW:
        insights.append(ComparisonInsight(
            InsightType.OPPORTUNITY, "portfolio_value",
            f"Similar traders have {abs(value.diff_percent)}% larger portfolios on average", "💡",
        ))

    risk = dimensions[DIM_RISK_SCORE]
    if risk.position == RISK_MORE_AGGRESSIVE:
        insights.append(ComparisonInsight(
            InsightType.WARNING, "risk",
            f"You're taking more risk than similar traders ({risk.user:g} vs {risk.average:.1f})", "⚠️",
        ))
    elif risk.position == RISK_MORE_CONSERVATIVE:
        insights.append(ComparisonInsight(
            InsightType.STRENGTH, "risk",
            "You're more conservative than similar traders - lower risk profile", "🛡️",
        ))

    chains = dimensions[DIM_CHAINS]
    if chains.position == POSITION_SIGNIFICANTLY_ABOVE:
        insights.append(ComparisonInsight(
            InsightType.STRENGTH, "diversity",
            f"You're more diversified across chains than similar traders ({chains.user:g} vs {chains.average:.1f})",
            "🌐",
        ))
    elif chains.position == POSITION_SIGNIFICANTLY_BELOW:
        insights.append(ComparisonInsight(
            InsightType.OPPORTUNITY, "diversity",
            f"Consider expanding to more chains - similar traders use {chains.average:.0f} chains on average", "🔗",
        ))

    activity = dimensions[DIM_TRANSACTIONS]
    if activity.position == POSITION_SIGNIFICANTLY_ABOVE:
        insights.append(ComparisonInsight(
            InsightType.STRENGTH, "activity",
            f"You're {abs(activity.diff_percent)}% more active than similar traders", "⚡",
        ))
    elif activity.position == POSITION_SIGNIFICANTLY_BELOW:
        insights.append(ComparisonInsight(
            InsightType.INFO, "activity",
            f"Similar traders are {abs(activity.diff_percent)}% more active on-chain", "📊",
        ))

    if not insights:
        insights.append(ComparisonInsight(
            InsightType.INFO, "general", "Your portfolio metrics are similar to comparable traders", "✅",
        ))
    return insights


def compare_with_similar(
    user_metrics: Metrics,
    user_risk_score: float,
    peers: Sequence[PeerProfile],
    *,
    max_peers: int | None = None,
    now: datetime | None = None,
) -> ComparisonResult:
    """
    Compare a wallet with its cohort.

    Peers are ranked by similarity (stable) and the top max_peers form the
    cohort (default WALLETDNA_COHORT_SIZE). An empty cohort is not an error:
    the result carries a summary and no dimensions.

    Raises:
        ComputationError: a user value is NaN or infinite.
    """
    if max_peers is None:
        max_peers = get_settings().cohort_size
    generated_at = now or datetime.now(timezone.utc)
    cohort = sorted(peers, key=lambda p: p.similarity, reverse=True)[: max(0, max_peers)]
    if not cohort:
        logger.debug("comparison_empty_cohort")
        return ComparisonResult(
            dimensions={},
            insights=[],
            similar_count=0,
            generated_at=generated_at,
            summary=EMPTY_COHORT_SUMMARY,
        )

    by_percent = lambda user, avg, pct: get_position(pct)  # noqa: E731
    dimensions = {
        DIM_PORTFOLIO_VALUE: _compare(DIM_PORTFOLIO_VALUE, user_metrics.total_value, cohort, _peer_value, by_percent),
        DIM_RISK_SCORE: _compare(
            DIM_RISK_SCORE, user_risk_score, cohort, lambda p: p.risk_score,
            lambda user, avg, pct: get_risk_position(user, avg),
        ),
        DIM_CHAINS: _compare(DIM_CHAINS, user_metrics.chain_count, cohort, _metric("chain_count"), by_percent),
        DIM_POSITIONS: _compare(DIM_POSITIONS, user_metrics.position_count, cohort, _metric("position_count"), by_percent),
        DIM_TRANSACTIONS: _compare(DIM_TRANSACTIONS, user_metrics.tx_count, cohort, _metric("tx_count"), by_percent),
    }
    insights = generate_comparison_insights(dimensions)

    logger.debug(
        "comparison_result",
        similar_count=len(cohort),
        positions={name: dim.position for name, dim in dimensions.items()},
        insights=[i.category for i in insights],
    )
    return ComparisonResult(
        dimensions=dimensions,
        insights=insights,
        similar_count=len(cohort),
        generated_at=generated_at,
        peers=[p.address for p in cohort],
    )
