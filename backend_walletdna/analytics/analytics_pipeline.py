"""
Analytics pipeline: run full wallet analysis (metrics -> personality + risk -> insights).

Single entrypoint for the request layer: takes the snapshot and history the
caller fetched from the data provider and returns a WalletAnalysis to persist.
Performs no I/O.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from backend_walletdna.analytics.categories import DEFAULT_ASSET_CATEGORIES, AssetCategories
from backend_walletdna.analytics.insights import generate_insights
from backend_walletdna.analytics.metrics_extractor import extract_metrics
from backend_walletdna.analytics.models import PortfolioSnapshot, TransactionRecord, WalletAnalysis
from backend_walletdna.analytics.personality_classifier import classify_personality
from backend_walletdna.analytics.risk_engine import calculate_risk_score
from backend_walletdna.config.settings import get_settings
from backend_walletdna.walletdna_logging import bind_address


def run_wallet_analysis(
    snapshot: PortfolioSnapshot,
    transactions: Sequence[TransactionRecord] | None = None,
    *,
    categories: AssetCategories = DEFAULT_ASSET_CATEGORIES,
    now: datetime | None = None,
    history_limit: int | None = None,
) -> WalletAnalysis:
    """
    Analyze one wallet.

    Safe with an empty snapshot and no history: metrics are zero, risk is 5,
    personality falls through to Balanced Trader unless the chain count alone
    qualifies, and insights use their fallbacks. Only the newest history_limit
    transactions are read (default WALLETDNA_TX_HISTORY_LIMIT).
    """
    if history_limit is None:
        history_limit = get_settings().tx_history_limit
    transactions = list(transactions or [])[: max(0, history_limit)]

    log = bind_address(snapshot.address)
    log.info("analytics_pipeline_start", positions=len(snapshot.positions), transactions=len(transactions))

    metrics = extract_metrics(snapshot, transactions, categories)
    personality = classify_personality(metrics)
    risk_score = calculate_risk_score(metrics)
    insights = generate_insights(metrics, personality, risk_score)

    analysis = WalletAnalysis(
        address=snapshot.address,
        personality=personality,
        risk_score=risk_score,
        metrics=metrics,
        insights=insights,
        analyzed_at=now or datetime.now(timezone.utc),
    )
    log.info(
        "analytics_pipeline_done",
        personality=personality.value,
        risk_score=risk_score,
        total_value=metrics.total_value,
    )
    return analysis
