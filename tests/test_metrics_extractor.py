"""
Tests for metrics extraction (metrics_extractor.extract_metrics and helpers).

Snapshots are built in memory; histories are newest-first like the provider's.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from backend_walletdna.analytics.categories import AssetCategories
from backend_walletdna.analytics.metrics_extractor import (
    calculate_allocations,
    calculate_concentration,
    calculate_tx_frequency,
    extract_metrics,
)
from backend_walletdna.analytics.models import PortfolioSnapshot, Position, TransactionRecord
from backend_walletdna.core.exceptions import ComputationError

START = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def mixed_snapshot(make_snapshot):
    return make_snapshot(
        [("USDC", 200.0), ("ETH", 500.0), ("AAVE", 100.0, "aave"), ("PEPE", 200.0, "uniswap")],
        chains=("ethereum", "arbitrum", "ethereum"),
    )


def test_allocations_bucket_by_symbol(mixed_snapshot):
    """Each position's share lands in its category; unknown symbols go to other."""
    metrics = extract_metrics(mixed_snapshot)
    alloc = metrics.allocations
    assert alloc.stablecoins == pytest.approx(0.2)
    assert alloc.bluechip == pytest.approx(0.5)
    assert alloc.defi == pytest.approx(0.1)
    assert alloc.other == pytest.approx(0.2)
    assert not alloc.empty


def test_counts_and_concentration(mixed_snapshot):
    """Chains are de-duplicated, protocols counted once, concentration is Herfindahl."""
    metrics = extract_metrics(mixed_snapshot)
    assert metrics.chain_count == 2
    assert metrics.chains == ("ethereum", "arbitrum")
    assert metrics.protocols == ("aave", "uniswap")
    assert metrics.protocol_count == 2
    assert metrics.position_count == 4
    assert metrics.concentration == pytest.approx(0.04 + 0.25 + 0.01 + 0.04)


def test_symbols_match_case_insensitively():
    """Lower-case provider symbols still categorize."""
    alloc = calculate_allocations([Position("usdc", "USD Coin", 50.0), Position("weth", "WETH", 50.0)], 100.0)
    assert alloc.stablecoins == pytest.approx(0.5)
    assert alloc.bluechip == pytest.approx(0.5)


def test_custom_categories():
    """Callers can supply their own symbol universe."""
    categories = AssetCategories.from_symbols(stablecoins=["PYUSD"], bluechip=["ETH"], defi=[])
    alloc = calculate_allocations([Position("PYUSD", "PayPal USD", 100.0)], 100.0, categories)
    assert alloc.stablecoins == pytest.approx(1.0)
    assert alloc.other == 0.0


def test_zero_value_portfolio_has_empty_allocations(make_snapshot):
    """Zero total value: allocations are empty and serialize to {}, concentration is 0."""
    metrics = extract_metrics(make_snapshot([], chains=(), total=0.0))
    assert metrics.allocations.empty
    assert metrics.allocations.to_dict() == {}
    assert metrics.concentration == 0.0
    assert metrics.chain_count == 0
    assert metrics.tx_count == 0
    assert metrics.avg_tx_per_month == 0.0


def test_tx_frequency_over_observed_span(make_history):
    """31 transactions over exactly 30 days is 31 per month."""
    history = make_history([START + timedelta(days=i) for i in range(31)])
    assert calculate_tx_frequency(history) == pytest.approx(31.0)


def test_tx_frequency_degenerate_histories():
    """Fewer than 2 records, a missing endpoint timestamp or zero span give 0."""
    single = [TransactionRecord(timestamp=START)]
    missing = [TransactionRecord(timestamp=START), TransactionRecord(timestamp=None)]
    same_time = [TransactionRecord(timestamp=START), TransactionRecord(timestamp=START)]
    assert calculate_tx_frequency([]) == 0.0
    assert calculate_tx_frequency(single) == 0.0
    assert calculate_tx_frequency(missing) == 0.0
    assert calculate_tx_frequency(same_time) == 0.0


def test_concentration_bounds():
    """A single holding is fully concentrated; nothing held is 0."""
    assert calculate_concentration([Position("ETH", "Ether", 100.0)], 100.0) == pytest.approx(1.0)
    assert calculate_concentration([], 0.0) == 0.0


def test_extraction_is_deterministic(mixed_snapshot, make_history):
    """Identical inputs give identical metrics."""
    history = make_history([START + timedelta(days=i) for i in range(5)])
    assert extract_metrics(mixed_snapshot, history) == extract_metrics(mixed_snapshot, history)


def test_positions_worth_more_than_total_keep_shares_within_one(make_snapshot):
    """A stale total below the position sum: shares are taken against the position sum."""
    snapshot = make_snapshot([("ETH", 80.0), ("USDC", 80.0)], total=100.0)
    allocations = extract_metrics(snapshot).allocations
    buckets = (allocations.stablecoins, allocations.bluechip, allocations.defi, allocations.other)
    assert sum(buckets) <= 1.0 + 1e-9
    assert allocations.stablecoins == pytest.approx(0.5)
    assert allocations.bluechip == pytest.approx(0.5)
    assert calculate_concentration(snapshot.positions, 100.0) == pytest.approx(0.5)


def test_non_finite_position_value_raises(make_snapshot):
    snapshot = make_snapshot([("ETH", float("nan")), ("USDC", 50.0)], total=100.0)
    with pytest.raises(ComputationError) as exc:
        extract_metrics(snapshot)
    assert exc.value.details["symbol"] == "ETH"
    with pytest.raises(ComputationError):
        calculate_allocations([Position("ETH", "Ether", float("inf"))], 100.0)


def test_non_finite_total_raises(make_snapshot):
    with pytest.raises(ComputationError):
        extract_metrics(make_snapshot([("ETH", 50.0)], total=float("inf")))


def test_nan_from_provider_payload_raises():
    """NaN strings in a provider payload are not coerced to a valid share."""
    snapshot = PortfolioSnapshot.from_dict({
        "address": "0xabc",
        "total_value": 100.0,
        "positions": [{"symbol": "ETH", "value": "nan"}],
    })
    with pytest.raises(ComputationError):
        extract_metrics(snapshot)
    with pytest.raises(ComputationError):
        extract_metrics(PortfolioSnapshot.from_dict({"address": "0xabc", "total_value": "nan", "positions": []}))
