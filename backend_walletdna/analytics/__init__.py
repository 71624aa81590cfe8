"""
WalletDNA analytics engine.

Derives metrics from a portfolio snapshot and history, then classifies
personality, scores risk, generates insights and compares against a cohort.
Modules: metrics_extractor, personality_classifier, risk_engine, insights,
comparison, recommendations, analytics_pipeline.
"""

from backend_walletdna.analytics.analytics_pipeline import run_wallet_analysis
from backend_walletdna.analytics.comparison import PeerProfile, compare_with_similar
from backend_walletdna.analytics.insights import generate_insights
from backend_walletdna.analytics.metrics_extractor import extract_metrics
from backend_walletdna.analytics.models import (
    Metrics,
    PersonalityType,
    PortfolioSnapshot,
    Position,
    TransactionRecord,
    WalletAnalysis,
)
from backend_walletdna.analytics.personality_classifier import classify_personality
from backend_walletdna.analytics.risk_engine import calculate_risk_score

__all__ = [
    "extract_metrics",
    "classify_personality",
    "calculate_risk_score",
    "generate_insights",
    "compare_with_similar",
    "run_wallet_analysis",
    "PeerProfile",
    "Metrics",
    "PersonalityType",
    "PortfolioSnapshot",
    "Position",
    "TransactionRecord",
    "WalletAnalysis",
]
