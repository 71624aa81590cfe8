"""
Tests for the full analysis pipeline (analytics_pipeline.run_wallet_analysis).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from backend_walletdna.analytics import PersonalityType, run_wallet_analysis
from backend_walletdna.analytics.models import PortfolioSnapshot

START = datetime(2025, 1, 1, tzinfo=timezone.utc)
ANALYZED_AT = datetime(2025, 2, 1, tzinfo=timezone.utc)


def test_empty_wallet_analysis():
    """No positions, no history: neutral risk, default personality, fallback insights."""
    snapshot = PortfolioSnapshot(address="0xempty", total_value=0.0)
    analysis = run_wallet_analysis(snapshot, [], now=ANALYZED_AT)

    assert analysis.risk_score == 5
    assert analysis.personality == PersonalityType.BALANCED_TRADER
    assert analysis.metrics.allocations.to_dict() == {}
    assert analysis.metrics.tx_count == 0
    assert analysis.metrics.avg_tx_per_month == 0.0
    assert len(analysis.strengths) >= 1
    assert len(analysis.recommendations) >= 1


def test_mixed_wallet_analysis(make_snapshot, make_history):
    """Diversified two-chain wallet with a month of daily activity."""
    snapshot = make_snapshot(
        [("USDC", 200.0), ("ETH", 500.0), ("AAVE", 100.0, "aave"), ("PEPE", 200.0, "uniswap")],
        chains=("ethereum", "arbitrum"),
        address="0xmixed",
    )
    history = make_history([START + timedelta(days=i) for i in range(31)])
    analysis = run_wallet_analysis(snapshot, history, now=ANALYZED_AT)

    assert analysis.personality == PersonalityType.BALANCED_TRADER
    assert analysis.risk_score == 5
    assert analysis.strengths == (
        "Well-diversified portfolio reduces concentration risk",
        "Healthy stablecoin buffer for opportunities",
    )
    assert analysis.weaknesses == ()
    assert analysis.recommendations == ("Explore emerging L2s like Base, Arbitrum, or Optimism",)


def test_analysis_to_dict(make_snapshot):
    snapshot = make_snapshot([("ETH", 100.0)], address="0xdict")
    out = run_wallet_analysis(snapshot, now=ANALYZED_AT).to_dict()
    assert out["address"] == "0xdict"
    assert out["analyzed_at"] == ANALYZED_AT.isoformat()
    assert isinstance(out["personality"], str)
    assert set(out) >= {"metrics", "risk_score", "strengths", "weaknesses", "recommendations"}
    assert out["metrics"]["allocations"]["bluechip"] == 1.0


def test_history_limit_reads_newest_records(make_snapshot, make_history, monkeypatch):
    """Only the newest records count; the limit defaults to WALLETDNA_TX_HISTORY_LIMIT."""
    snapshot = make_snapshot([("ETH", 100.0)], address="0xlimit")
    history = make_history([START + timedelta(days=i) for i in range(31)])
    assert run_wallet_analysis(snapshot, history, now=ANALYZED_AT).metrics.tx_count == 31
    assert run_wallet_analysis(snapshot, history, now=ANALYZED_AT, history_limit=3).metrics.tx_count == 3
    monkeypatch.setenv("WALLETDNA_TX_HISTORY_LIMIT", "5")
    metrics = run_wallet_analysis(snapshot, history, now=ANALYZED_AT).metrics
    assert metrics.tx_count == 5
    # newest five are days 26..30: four days apart
    assert metrics.avg_tx_per_month == pytest.approx(37.5)
