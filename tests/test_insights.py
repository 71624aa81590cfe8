"""
Tests for insight generation: ordered rule tables, caps and fallbacks.
"""

from __future__ import annotations

from backend_walletdna.analytics.insights import (
    FALLBACK_RECOMMENDATION,
    FALLBACK_STRENGTH,
    MAX_RECOMMENDATIONS,
    MAX_STRENGTHS,
    MAX_WEAKNESSES,
    generate_insights,
)
from backend_walletdna.analytics.models import Allocations, PersonalityType


def test_strengths_keep_table_order_and_cap(make_metrics):
    """Five strength rules match; the first four are kept in order."""
    metrics = make_metrics(
        stablecoins=0.2, bluechip=0.6, defi=0.1, other=0.1,
        chain_count=3, protocol_count=5, concentration=0.3,
    )
    insights = generate_insights(metrics)
    assert list(insights.strengths) == [
        "Strong blue-chip allocation provides stability",
        "Good multi-chain diversification reduces platform risk",
        "Active DeFi engagement across multiple protocols",
        "Well-diversified portfolio reduces concentration risk",
    ]
    assert len(insights.strengths) == MAX_STRENGTHS


def test_weaknesses_capped_at_three(make_metrics):
    metrics = make_metrics(
        stablecoins=0.6, bluechip=0.1, defi=0.1, other=0.2,
        chain_count=1, concentration=0.8, protocol_count=13,
    )
    insights = generate_insights(metrics)
    assert list(insights.weaknesses) == [
        "High stablecoin allocation limits upside potential",
        "Low exposure to established assets increases risk",
        "Single-chain exposure creates platform risk",
    ]
    assert len(insights.weaknesses) == MAX_WEAKNESSES


def test_recommendations_capped_at_three(make_metrics):
    metrics = make_metrics(
        stablecoins=0.5, bluechip=0.1, defi=0.0, other=0.4,
        chain_count=1, concentration=0.8, protocol_count=0,
    )
    insights = generate_insights(metrics)
    assert list(insights.recommendations) == [
        "Consider reducing stablecoin allocation to 15-25% to capture more upside",
        "Explore emerging L2s like Base, Arbitrum, or Optimism",
        "Increase ETH/BTC allocation for portfolio stability",
    ]
    assert len(insights.recommendations) == MAX_RECOMMENDATIONS


def test_fallbacks_when_nothing_matches(make_metrics):
    """No strength or recommendation rule fires: one fallback each, weaknesses empty."""
    no_strengths = make_metrics(
        stablecoins=0.05, bluechip=0.1, defi=0.05, other=0.8,
        chain_count=1, protocol_count=0, concentration=0.8,
    )
    assert generate_insights(no_strengths).strengths == (FALLBACK_STRENGTH,)

    balanced = make_metrics(
        stablecoins=0.2, bluechip=0.5, defi=0.1, other=0.2,
        chain_count=3, protocol_count=3, concentration=0.3,
    )
    insights = generate_insights(balanced, PersonalityType.CONSERVATIVE_DEFI_NATIVE, 5)
    assert insights.recommendations == (FALLBACK_RECOMMENDATION,)
    assert insights.weaknesses == ()


def test_empty_portfolio_skips_low_bucket_rules(make_metrics):
    """With nothing allocated, "low bluechip" and "no DeFi" rules stay silent."""
    metrics = make_metrics(
        total_value=0.0, allocations=Allocations.none(), chain_count=0,
        protocol_count=0, concentration=0.0, position_count=0,
    )
    insights = generate_insights(metrics)
    assert insights.strengths == ("Well-diversified portfolio reduces concentration risk",)
    assert insights.weaknesses == ()
    assert insights.recommendations == ("Explore emerging L2s like Base, Arbitrum, or Optimism",)
