"""
Pytest fixtures for WalletDNA tests. Builders for metrics, snapshots and
newest-first transaction histories; no provider or database access.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from backend_walletdna.analytics.models import (
    Allocations,
    Metrics,
    PortfolioSnapshot,
    Position,
    TransactionRecord,
)

FIXED_NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)

WALLETDNA_ENV_VARS = (
    "WALLETDNA_SIMILARITY_FLOOR",
    "WALLETDNA_SIMILARITY_TOP_K",
    "WALLETDNA_COHORT_SIZE",
    "WALLETDNA_TX_HISTORY_LIMIT",
    "WALLETDNA_BIO_HISTORY_LIMIT",
    "WALLETDNA_DISCOVER_PAGE_SIZE",
    "WALLETDNA_LOG_LEVEL",
    "WALLETDNA_LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Engine defaults come from the environment; start every test from the built-in values."""
    for name in WALLETDNA_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for age and recency checks."""
    return FIXED_NOW


@pytest.fixture
def make_metrics():
    """
    Build Metrics with neutral defaults; keyword overrides replace fields.
    Allocation buckets can be passed directly (stablecoins=0.7) or as allocations=.
    """

    def _make(**overrides) -> Metrics:
        alloc_fields = {k: overrides.pop(k) for k in ("stablecoins", "bluechip", "defi", "other") if k in overrides}
        allocations = overrides.pop("allocations", None)
        if allocations is None:
            base = {"stablecoins": 0.25, "bluechip": 0.25, "defi": 0.25, "other": 0.25}
            base.update(alloc_fields)
            allocations = Allocations(**base)
        fields = {
            "total_value": 1000.0,
            "allocations": allocations,
            "chain_count": 2,
            "protocol_count": 1,
            "tx_count": 10,
            "avg_tx_per_month": 2.0,
            "concentration": 0.3,
            "position_count": 5,
        }
        fields.update(overrides)
        return Metrics(**fields)

    return _make


@pytest.fixture
def make_snapshot():
    """Build a PortfolioSnapshot from (symbol, value[, protocol]) tuples."""

    def _make(holdings, chains=("ethereum",), address="0xabc0000000000000000000000000000000000001", total=None):
        positions = []
        for holding in holdings:
            symbol, value = holding[0], holding[1]
            protocol = holding[2] if len(holding) > 2 else None
            positions.append(Position(symbol=symbol, name=symbol, value=value, protocol=protocol))
        total_value = sum(p.value for p in positions) if total is None else total
        return PortfolioSnapshot(address=address, total_value=total_value, positions=positions, chains=chains)

    return _make


@pytest.fixture
def make_history():
    """
    Build a newest-first transaction history from chronological datetimes.
    chains and fees, when given, are indexed in the same chronological order.
    """

    def _make(dates, chains=None, fees=None) -> list[TransactionRecord]:
        records = []
        for i, date in enumerate(dates):
            records.append(
                TransactionRecord(
                    timestamp=date,
                    chain=chains[i % len(chains)] if chains else None,
                    fee_value=fees.get(i, 0.0) if fees else 0.0,
                )
            )
        return list(reversed(records))

    return _make
