"""
Wallet bio: stats, timeline milestones, achievement badges and a tagline.

Derived from the newest-first transaction history only. Age and recency are
measured against `now` (defaults to the current UTC time); pass it explicitly
for reproducible output.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

from backend_walletdna.analytics.models import TransactionRecord
from backend_walletdna.config.settings import get_settings
from backend_walletdna.walletdna_logging import get_logger

logger = get_logger(__name__)

DAYS_PER_MONTH = 30
RECENT_WINDOW_DAYS = 30
TX_MILESTONES = (
    (50, "Active trader", "Reached 50 transactions", "⚡"),
    (100, "Power trader milestone", "Surpassed 100 on-chain transactions", "💯"),
    (200, "Elite trader", "200+ transactions achieved", "🌟"),
)
EARLY_ERA_LAST_YEAR = 2020
BEAR_MARKET_YEAR = 2022
BEAR_MARKET_MIN_TXS = 5
BULL_RUN_YEAR = 2023
BULL_RUN_MIN_TXS = 10
WHALE_FEE_THRESHOLD = 1000.0

BADGE_DIAMOND_HANDS = "diamond-hands"
BADGE_EARLY_ADOPTER = "early-adopter"
BADGE_ACTIVE_TRADER = "active-trader"
BADGE_HOT_STREAK = "hot-streak"
BADGE_WHALE = "whale"
BADGE_CONSISTENT = "consistent"
BADGE_POWER_USER = "power-user"
BADGE_DEGEN = "degen"
BADGE_VETERAN = "veteran"
BADGE_MULTI_CHAIN = "multi-chain"

DEFAULT_TAGLINE = "Crypto newcomer"


@dataclass(frozen=True)
class TimelineEvent:
    date: datetime
    label: str
    description: str
    icon: str

    def to_dict(self) -> dict[str, str]:
        return {"date": self.date.isoformat(), "label": self.label, "description": self.description, "icon": self.icon}


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str
    icon: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "description": self.description, "icon": self.icon}


@dataclass(frozen=True)
class BioStats:
    total_transactions: int
    portfolio_age_months: int
    """Whole 30-day months from the oldest transaction to now."""
    first_tx_date: datetime | None
    last_tx_date: datetime | None
    avg_tx_per_month: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_transactions": self.total_transactions,
            "portfolio_age_months": self.portfolio_age_months,
            "first_tx_date": self.first_tx_date.isoformat() if self.first_tx_date else None,
            "last_tx_date": self.last_tx_date.isoformat() if self.last_tx_date else None,
            "avg_tx_per_month": self.avg_tx_per_month,
        }


@dataclass
class UserBio:
    tagline: str
    timeline: list[TimelineEvent]
    badges: list[Badge]
    stats: BioStats
    generated_at: datetime

    def has_badge(self, badge_id: str) -> bool:
        return any(b.id == badge_id for b in self.badges)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tagline": self.tagline,
            "timeline": [e.to_dict() for e in self.timeline],
            "badges": [b.to_dict() for b in self.badges],
            "stats": self.stats.to_dict(),
            "generated_at": self.generated_at.isoformat(),
        }


def _add_year(date: datetime) -> datetime:
    try:
        return date.replace(year=date.year + 1)
    except ValueError:
        # Feb 29 -> Feb 28
        return date.replace(year=date.year + 1, day=28)


def _unique_chains(transactions: Sequence[TransactionRecord]) -> set[str]:
    return {tx.chain for tx in transactions if tx.chain}


def _recent_count(transactions: Sequence[TransactionRecord], now: datetime) -> int:
    cutoff = now - timedelta(days=RECENT_WINDOW_DAYS)
    return sum(1 for tx in transactions if tx.timestamp is not None and tx.timestamp > cutoff)


def calculate_stats(transactions: Sequence[TransactionRecord], now: datetime) -> BioStats:
    if not transactions:
        return BioStats(0, 0, None, None, 0.0)

    first = transactions[-1].timestamp
    last = transactions[0].timestamp
    age = 0
    if first is not None:
        age = max(0, math.floor((now - first).total_seconds() / (DAYS_PER_MONTH * 86400)))
    avg = math.floor(len(transactions) / age * 10 + 0.5) / 10 if age > 0 else 0.0
    return BioStats(
        total_transactions=len(transactions),
        portfolio_age_months=age,
        first_tx_date=first,
        last_tx_date=last,
        avg_tx_per_month=avg,
    )


def _milestones(transactions: Sequence[TransactionRecord], now: datetime) -> list[TimelineEvent]:
    """Milestones from newest-first history: index len - N is the N-th transaction ever."""
    events: list[TimelineEvent] = []
    count = len(transactions)

    for n, label, description, icon in TX_MILESTONES:
        if count >= n:
            date = transactions[count - n].timestamp
            if date is not None:
                events.append(TimelineEvent(date, label, description, icon))

    in_bear_year = [tx for tx in transactions if tx.timestamp and tx.timestamp.year == BEAR_MARKET_YEAR]
    if len(in_bear_year) >= BEAR_MARKET_MIN_TXS:
        events.append(TimelineEvent(
            in_bear_year[-1].timestamp, "Bear market survivor", "Stayed active through 2022 crypto winter", "💎",
        ))

    in_bull_year = [tx for tx in transactions if tx.timestamp and tx.timestamp.year == BULL_RUN_YEAR]
    if len(in_bull_year) >= BULL_RUN_MIN_TXS:
        events.append(TimelineEvent(
            datetime(BULL_RUN_YEAR, 1, 1, tzinfo=timezone.utc), "Bull run participant", "Active during 2023 recovery", "🚀",
        ))

    chains = _unique_chains(transactions)
    if len(chains) >= 3:
        seen: set[str] = set()
        for tx in reversed(transactions):
            if not tx.chain:
                continue
            seen.add(tx.chain)
            if len(seen) >= 3:
                if tx.timestamp is not None:
                    events.append(TimelineEvent(
                        tx.timestamp, "Multi-chain explorer", f"Active on {len(chains)} different chains", "🌐",
                    ))
                break

    first = transactions[-1].timestamp
    if first is not None:
        anniversary = _add_year(first)
        if anniversary < now:
            events.append(TimelineEvent(anniversary, "1 year on-chain", "Celebrated first year anniversary", "🎂"))

    return events


def extract_timeline(transactions: Sequence[TransactionRecord], now: datetime) -> list[TimelineEvent]:
    """Key moments of the wallet's history, oldest first."""
    if not transactions:
        return []

    timeline: list[TimelineEvent] = []
    first = transactions[-1].timestamp
    if first is not None:
        timeline.append(TimelineEvent(
            first, "Started on-chain journey", f"First transaction in {first.strftime('%B %Y')}", "🚀",
        ))
        if first.year <= EARLY_ERA_LAST_YEAR:
            timeline.append(TimelineEvent(
                datetime(first.year, 1, 1, tzinfo=timezone.utc), "Early crypto pioneer", "Active in the pre-2021 era", "🏆",
            ))

    timeline.extend(_milestones(transactions, now))
    timeline.sort(key=lambda e: e.date)
    return timeline


def assign_badges(transactions: Sequence[TransactionRecord], stats: BioStats, now: datetime) -> list[Badge]:
    badges: list[Badge] = []
    count = len(transactions)
    age = stats.portfolio_age_months
    first = stats.first_tx_date

    if age >= 12:
        years = age // 12
        badges.append(Badge(BADGE_DIAMOND_HANDS, "Diamond Hands", f"Active for {years} year{'s' if years > 1 else ''}", "💎"))
    if first is not None and first.year <= EARLY_ERA_LAST_YEAR:
        badges.append(Badge(BADGE_EARLY_ADOPTER, "Early Adopter", f"On-chain since {first.year}", "🚀"))
    if count >= 50:
        badges.append(Badge(BADGE_ACTIVE_TRADER, "Active Trader", f"{count}+ transactions", "⚡"))

    recent = _recent_count(transactions, now)
    if recent >= 20:
        badges.append(Badge(BADGE_HOT_STREAK, "Hot Streak", f"{recent} transactions this month", "🔥"))

    # fees above this suggest whale-sized activity
    if count > 100 and any(tx.fee_value > WHALE_FEE_THRESHOLD for tx in transactions):
        badges.append(Badge(BADGE_WHALE, "Whale", "High-value transactions", "🐋"))
    if age >= 6 and count / age >= 1:
        badges.append(Badge(BADGE_CONSISTENT, "Consistent", "Regular on-chain activity", "🎯"))
    if count >= 200:
        badges.append(Badge(BADGE_POWER_USER, "Power User", f"{count}+ transactions", "🌟"))
    if count > 100 and age < 6:
        badges.append(Badge(BADGE_DEGEN, "Degen", "High-frequency experimenter", "🧪"))
    if age >= 36:
        badges.append(Badge(BADGE_VETERAN, "Veteran", "Crypto OG - 3+ years", "🏆"))

    chains = _unique_chains(transactions)
    if len(chains) >= 4:
        badges.append(Badge(BADGE_MULTI_CHAIN, "Multi-chain", f"Active on {len(chains)}+ chains", "🌐"))

    return badges


def generate_tagline(
    stats: BioStats,
    badges: Sequence[Badge],
    transactions: Sequence[TransactionRecord],
    now: datetime,
) -> str:
    """First matching tagline: recent activity, then tenure badges, then age and volume."""
    ids = {b.id for b in badges}
    whale = BADGE_WHALE in ids
    age = stats.portfolio_age_months
    count = stats.total_transactions

    if _recent_count(transactions, now) > 20:
        return "Active whale making waves" if whale else "High-frequency on-chain trader"
    if BADGE_DIAMOND_HANDS in ids and age >= 24:
        return "OG crypto whale" if whale else "Crypto veteran since the early days"
    if BADGE_EARLY_ADOPTER in ids:
        return "OG trader, still building" if BADGE_ACTIVE_TRADER in ids else "Early adopter, diamond hands"
    if whale:
        return "Whale moving markets"
    if BADGE_DEGEN in ids:
        return "Degen trader chasing alpha"
    if BADGE_ACTIVE_TRADER in ids:
        return "Rising star in crypto" if age < 6 else "Seasoned on-chain trader"
    if age >= 12:
        return "Experienced DeFi navigator" if count > 50 else "Long-term crypto holder"
    if age >= 6:
        return "Crypto enthusiast building on-chain"
    if count > 30:
        return "New trader making moves"
    return "On-chain explorer" if count > 10 else DEFAULT_TAGLINE


def generate_user_bio(
    transactions: Sequence[TransactionRecord],
    *,
    now: datetime | None = None,
    history_limit: int | None = None,
) -> UserBio:
    """
    Build the profile bio from a newest-first transaction history.

    Only the newest history_limit records are read (default
    WALLETDNA_BIO_HISTORY_LIMIT).
    """
    if history_limit is None:
        history_limit = get_settings().bio_history_limit
    now = now or datetime.now(timezone.utc)
    transactions = list(transactions or [])[: max(0, history_limit)]

    stats = calculate_stats(transactions, now)
    timeline = extract_timeline(transactions, now)
    badges = assign_badges(transactions, stats, now)
    tagline = generate_tagline(stats, badges, transactions, now)

    logger.debug(
        "user_bio_generated",
        transactions=len(transactions),
        age_months=stats.portfolio_age_months,
        badges=[b.id for b in badges],
        tagline=tagline,
    )
    return UserBio(tagline=tagline, timeline=timeline, badges=badges, stats=stats, generated_at=now)
