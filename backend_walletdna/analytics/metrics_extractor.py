"""
Metrics extractor: derive fixed-shape portfolio metrics from holdings and history.

Converts a PortfolioSnapshot plus its newest-first transaction history into
Metrics: category allocations, chain and protocol diversity, transaction
frequency and Herfindahl concentration. No scoring logic. Never raises on
empty or zero-value input; those degrade to zero-valued metrics. A NaN or
infinite value raises ComputationError.

Shares are taken against the larger of the reported total and the sum of
position values, so the four allocation buckets never sum past 1.
"""

from __future__ import annotations

import math
from typing import Sequence

from backend_walletdna.analytics.categories import (
    CATEGORY_BLUECHIP,
    CATEGORY_DEFI,
    CATEGORY_OTHER,
    CATEGORY_STABLECOINS,
    DEFAULT_ASSET_CATEGORIES,
    AssetCategories,
)
from backend_walletdna.analytics.models import (
    Allocations,
    Metrics,
    PortfolioSnapshot,
    Position,
    TransactionRecord,
)
from backend_walletdna.core.exceptions import ComputationError
from backend_walletdna.walletdna_logging import get_logger
from backend_walletdna.walletdna_logging.logger import short_address

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400
DAYS_PER_MONTH = 30
SECONDS_PER_MONTH = SECONDS_PER_DAY * DAYS_PER_MONTH


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def _finite(name: str, value: float | None, **context: object) -> float:
    value = value or 0.0
    if not math.isfinite(value):
        logger.error("metrics_non_finite_value", field=name, value=str(value), **context)
        raise ComputationError(f"{name} is not a finite number", field=name, value=str(value), **context)
    return value


def _position_value(position: Position) -> float:
    """Finite, non-negative value of one holding."""
    return max(0.0, _finite("position value", position.value, symbol=position.symbol))


def _share_base(positions: Sequence[Position], total_value: float) -> float:
    """Denominator for value shares: reported total, or the position sum when that is larger."""
    total_value = _finite("total_value", total_value)
    if total_value <= 0:
        return 0.0
    return max(total_value, sum(_position_value(p) for p in positions))


def calculate_allocations(
    positions: Sequence[Position],
    total_value: float,
    categories: AssetCategories = DEFAULT_ASSET_CATEGORIES,
) -> Allocations:
    """
    Share of portfolio value held per category.

    Each position adds its value share to the bucket its symbol belongs to;
    unknown symbols land in "other". Zero total_value yields empty allocations.

    Raises:
        ComputationError: total_value or a position value is NaN or infinite.
    """
    base = _share_base(positions, total_value)
    if base <= 0:
        return Allocations.none()

    buckets = {
        CATEGORY_STABLECOINS: 0.0,
        CATEGORY_BLUECHIP: 0.0,
        CATEGORY_DEFI: 0.0,
        CATEGORY_OTHER: 0.0,
    }
    for position in positions:
        buckets[categories.categorize(position.symbol)] += _position_value(position) / base

    return Allocations(
        stablecoins=_clamp_unit(buckets[CATEGORY_STABLECOINS]),
        bluechip=_clamp_unit(buckets[CATEGORY_BLUECHIP]),
        defi=_clamp_unit(buckets[CATEGORY_DEFI]),
        other=_clamp_unit(buckets[CATEGORY_OTHER]),
    )


def extract_protocols(positions: Sequence[Position]) -> tuple[str, ...]:
    """Distinct non-empty protocol tags in first-seen order."""
    return tuple(dict.fromkeys(p.protocol for p in positions if p.protocol))


def calculate_tx_frequency(transactions: Sequence[TransactionRecord]) -> float:
    """
    Average transactions per 30-day month over the observed span.

    The sequence is newest-first: the span runs from the last record to the
    first. Returns 0 for fewer than 2 records, a missing endpoint timestamp,
    or a non-positive span.
    """
    if len(transactions) < 2:
        return 0.0
    newest = transactions[0].timestamp
    oldest = transactions[-1].timestamp
    if newest is None or oldest is None:
        return 0.0
    months = (newest - oldest).total_seconds() / SECONDS_PER_MONTH
    if months <= 0:
        return 0.0
    return len(transactions) / months


def calculate_concentration(positions: Sequence[Position], total_value: float) -> float:
    """Herfindahl index: sum of squared value shares. 0 when total_value is 0."""
    base = _share_base(positions, total_value)
    if base <= 0:
        return 0.0
    total = 0.0
    for position in positions:
        share = _position_value(position) / base
        total += share * share
    return _clamp_unit(total)


def extract_metrics(
    snapshot: PortfolioSnapshot,
    transactions: Sequence[TransactionRecord] | None = None,
    categories: AssetCategories = DEFAULT_ASSET_CATEGORIES,
) -> Metrics:
    """
    Derive Metrics from a portfolio snapshot and its newest-first history.

    Deterministic: identical inputs give identical Metrics.

    Raises:
        ComputationError: the snapshot carries a NaN or infinite value.
    """
    transactions = list(transactions or [])
    positions = snapshot.positions
    total_value = max(0.0, _finite("total_value", snapshot.total_value, address=short_address(snapshot.address)))
    protocols = extract_protocols(positions)

    metrics = Metrics(
        total_value=total_value,
        allocations=calculate_allocations(positions, total_value, categories),
        chain_count=len(snapshot.chains),
        chains=snapshot.chains,
        protocol_count=len(protocols),
        protocols=protocols,
        tx_count=len(transactions),
        avg_tx_per_month=calculate_tx_frequency(transactions),
        concentration=calculate_concentration(positions, total_value),
        position_count=len(positions),
    )
    logger.debug(
        "metrics_extracted",
        address=short_address(snapshot.address),
        total_value=total_value,
        position_count=metrics.position_count,
        chain_count=metrics.chain_count,
        tx_count=metrics.tx_count,
    )
    return metrics
