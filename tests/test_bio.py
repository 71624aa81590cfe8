"""
Tests for wallet bio generation: stats, timeline, badges and tagline.

All cases pass a fixed `now` so ages and recency are reproducible.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from backend_walletdna.profile import generate_user_bio
from backend_walletdna.profile.bio import DEFAULT_TAGLINE

CHAINS = ["ethereum", "polygon", "arbitrum", "base"]


def _utc(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


def test_empty_history(now):
    bio = generate_user_bio([], now=now)
    assert bio.tagline == DEFAULT_TAGLINE
    assert bio.timeline == []
    assert bio.badges == []
    assert bio.stats.total_transactions == 0
    assert bio.stats.portfolio_age_months == 0
    assert bio.stats.first_tx_date is None
    assert bio.generated_at == now


def test_long_running_multichain_wallet(now, make_history):
    """60 transactions every 10 days since March 2020 across 4 chains."""
    start = _utc(2020, 3, 1)
    history = make_history([start + timedelta(days=10 * i) for i in range(60)], chains=CHAINS)
    bio = generate_user_bio(history, now=now)

    assert bio.stats.total_transactions == 60
    assert bio.stats.portfolio_age_months == 63
    assert bio.stats.avg_tx_per_month == 1.0
    assert bio.stats.first_tx_date == start

    assert [b.id for b in bio.badges] == ["diamond-hands", "early-adopter", "active-trader", "veteran", "multi-chain"]
    assert bio.badges[0].description == "Active for 5 years"
    assert bio.badges[1].description == "On-chain since 2020"
    assert bio.tagline == "Crypto veteran since the early days"

    assert [e.label for e in bio.timeline] == [
        "Early crypto pioneer",
        "Started on-chain journey",
        "Multi-chain explorer",
        "1 year on-chain",
        "Active trader",
    ]
    assert bio.timeline[1].description == "First transaction in March 2020"
    assert bio.timeline[2].date == start + timedelta(days=20)
    assert bio.timeline[4].date == start + timedelta(days=490)


def test_recent_burst_is_hot_streak(now, make_history):
    """25 transactions in the last 25 days."""
    history = make_history([now - timedelta(days=25 - i) for i in range(25)])
    bio = generate_user_bio(history, now=now)
    assert bio.tagline == "High-frequency on-chain trader"
    assert bio.has_badge("hot-streak")
    assert bio.stats.portfolio_age_months == 0
    assert bio.stats.avg_tx_per_month == 0.0


def test_whale_fees(now, make_history):
    """More than 100 transactions with one fee above the whale threshold."""
    start = _utc(2024, 1, 1)
    history = make_history([start + timedelta(days=i) for i in range(101)], fees={50: 1500.0})
    bio = generate_user_bio(history, now=now)

    assert bio.stats.portfolio_age_months == 17
    assert [b.id for b in bio.badges] == ["diamond-hands", "active-trader", "whale", "consistent"]
    assert bio.badges[0].description == "Active for 1 year"
    assert bio.tagline == "Whale moving markets"
    assert "Power trader milestone" in [e.label for e in bio.timeline]


def test_market_cycle_events(now, make_history):
    bear = [_utc(2022, 6, d) for d in range(1, 6)]
    bull = [_utc(2023, 3, d) for d in range(1, 11)]
    bio = generate_user_bio(make_history(bear + bull), now=now)
    events = {e.label: e.date for e in bio.timeline}
    assert events["Bear market survivor"] == _utc(2022, 6, 1)
    assert events["Bull run participant"] == _utc(2023, 1, 1)


def test_small_recent_history_is_newcomer(now, make_history):
    history = make_history([now - timedelta(days=3), now - timedelta(days=2), now - timedelta(days=1)])
    bio = generate_user_bio(history, now=now)
    assert bio.tagline == DEFAULT_TAGLINE
    assert [e.label for e in bio.timeline] == ["Started on-chain journey"]


def test_bio_to_dict(now, make_history):
    out = generate_user_bio(make_history([now - timedelta(days=1)]), now=now).to_dict()
    assert set(out) == {"tagline", "timeline", "badges", "stats", "generated_at"}
    assert out["stats"]["total_transactions"] == 1


def test_history_limit_reads_newest_records(now, make_history, monkeypatch):
    history = make_history([_utc(2024, 1, 1) + timedelta(days=i) for i in range(40)])
    assert generate_user_bio(history, now=now).stats.total_transactions == 40
    assert generate_user_bio(history, now=now, history_limit=7).stats.total_transactions == 7
    monkeypatch.setenv("WALLETDNA_BIO_HISTORY_LIMIT", "10")
    bio = generate_user_bio(history, now=now)
    assert bio.stats.total_transactions == 10
    assert bio.stats.first_tx_date == _utc(2024, 1, 31)
