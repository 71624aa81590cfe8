"""
Tests for provider payload parsing and persisted-metrics round trips (analytics.models).
"""

from __future__ import annotations

from datetime import datetime, timezone

from backend_walletdna.analytics.models import (
    Allocations,
    Metrics,
    PortfolioSnapshot,
    Position,
    TransactionRecord,
    parse_timestamp,
)


def test_position_defaults():
    position = Position.from_dict({"symbol": "ETH", "value": "12.5"})
    assert position.value == 12.5
    assert position.name == "Unknown Token"
    assert position.chain == "unknown"
    assert position.protocol is None


def test_snapshot_from_dict_dedupes_chains():
    snapshot = PortfolioSnapshot.from_dict({
        "address": "0xabc",
        "total_value": 300,
        "positions": [{"symbol": "USDC", "value": 100}, {"symbol": "ETH", "value": 200}],
        "chains": ["ethereum", "base", "ethereum"],
    })
    assert snapshot.chains == ("ethereum", "base")
    assert len(snapshot.positions) == 2
    assert snapshot.total_value == 300.0


def test_transaction_from_provider_item():
    """mined_at wins over later timestamp fields; chain comes from relationships."""
    item = {
        "attributes": {
            "mined_at": "2024-03-01T12:00:00Z",
            "sent_at": "2024-03-02T00:00:00Z",
            "fee": {"value": 2.5},
        },
        "relationships": {"chain": {"data": {"id": "base"}}},
    }
    record = TransactionRecord.from_provider(item)
    assert record.timestamp == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
    assert record.chain == "base"
    assert record.fee_value == 2.5
    assert record.raw is item


def test_transaction_top_level_fallbacks():
    record = TransactionRecord.from_provider({"timestamp": 1700000000, "chain": "polygon"})
    assert record.timestamp == datetime.fromtimestamp(1700000000, tz=timezone.utc)
    assert record.chain == "polygon"
    assert record.fee_value == 0.0


def test_unparsable_timestamp_is_none():
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(None) is None
    assert TransactionRecord.from_provider({}).timestamp is None


def test_naive_timestamps_become_utc():
    record = TransactionRecord(timestamp=datetime(2024, 1, 1))
    assert record.timestamp.tzinfo == timezone.utc


def test_metrics_from_persisted_dict(make_metrics):
    """Metrics saved with to_dict() load back equal; {} allocations load as empty."""
    metrics = make_metrics(chains=("ethereum", "base"), chain_count=2)
    assert Metrics.from_dict(metrics.to_dict()) == metrics
    assert Metrics.from_dict({"allocations": {}}).allocations == Allocations.none()
