"""
Trading recommendations: rule-based advice plus the text contract of the AI service.

The AI enhancement service is optional and external. This module builds the
prompt a caller sends to it, parses the free-text reply into structured
advice, and produces rule-based advice whenever the service is unavailable.
AI text is carried alongside the core analysis, never merged into it.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from backend_walletdna.analytics.comparison import ComparisonResult
from backend_walletdna.analytics.models import WalletAnalysis
from backend_walletdna.walletdna_logging import get_logger

logger = get_logger(__name__)

MAX_RECOMMENDATIONS = 4
MAX_SECTION_ITEMS = 2
MIN_SECTION_LINE_LEN = 10

CATEGORY_RISK_MANAGEMENT = "risk-management"
CATEGORY_DEFI = "defi"
CATEGORY_REBALANCE = "rebalance"
CATEGORY_EXPLORE = "explore"
CATEGORY_GENERAL = "general"

DEFAULT_STRATEGIES = ("Maintain your current risk profile", "Focus on long-term fundamentals")
DEFAULT_WARNINGS = ("Watch for market volatility", "Don't overextend on leverage")
DEFAULT_OPPORTUNITIES = ("Layer 2 ecosystems are growing", "DeFi yields remain attractive")

SECTION_STRATEGY = "strategy"
SECTION_WARNING = "warning"
SECTION_OPPORTUNITY = "opportunity"
SECTION_RECOMMENDATION = "recommendation"

_RECOMMENDATION_RE = re.compile(r"^\d+\.\s+\*\*(.*?)\*\*")
_CATEGORY_RE = re.compile(r"category:\s*\[?([\w-]+)\]?", re.IGNORECASE)
_SECTION_RE = re.compile(
    r"^(?:#+\s*|[-*•]\s*)*\**\s*(strateg(?:y|ies)|warnings?|risks?|caution|opportunit(?:y|ies))\b[^:]*:?\**:?\s*(.*)$",
    re.IGNORECASE,
)
_BULLET_RE = re.compile(r"^[-*•]\s*")


@dataclass(frozen=True)
class Recommendation:
    title: str
    description: str
    category: str = CATEGORY_GENERAL

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "description": self.description, "category": self.category}


@dataclass
class TradingAdvice:
    """Recommendations with supporting strategies, warnings and opportunities."""

    recommendations: list[Recommendation]
    strategies: list[str]
    warnings: list[str]
    opportunities: list[str]
    generated_at: datetime
    raw: str | None = None
    """Original AI text when the advice was parsed from the AI service."""
    source: str = "rules"
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "recommendations": [r.to_dict() for r in self.recommendations],
            "strategies": list(self.strategies),
            "warnings": list(self.warnings),
            "opportunities": list(self.opportunities),
            "source": self.source,
            "generated_at": self.generated_at.isoformat(),
        }
        if self.raw is not None:
            out["raw"] = self.raw
        return out


def generate_rule_based_recommendations(analysis: WalletAnalysis, *, now: datetime | None = None) -> TradingAdvice:
    """Fallback advice from allocation, risk, chain and protocol rules (at most 4)."""
    metrics = analysis.metrics
    alloc = metrics.allocations
    recs: list[Recommendation] = []

    if not alloc.empty and alloc.stablecoins < 0.1:
        recs.append(Recommendation(
            "Build a Stablecoin Buffer",
            "Keep 10-20% in stablecoins for opportunities and market downturns",
            CATEGORY_RISK_MANAGEMENT,
        ))
    elif alloc.stablecoins > 0.5:
        recs.append(Recommendation(
            "Deploy Idle Stablecoins",
            "Consider DeFi yields or strategic positions - too much cash is opportunity cost",
            CATEGORY_DEFI,
        ))

    if not alloc.empty and alloc.bluechip < 0.3 and analysis.risk_score > 6:
        recs.append(Recommendation(
            "Increase Blue-Chip Exposure",
            "Add more ETH/BTC for stability given your high-risk profile",
            CATEGORY_REBALANCE,
        ))

    if metrics.chain_count < 3:
        recs.append(Recommendation(
            "Explore Layer 2 Solutions",
            "Expand to Base, Arbitrum, or Optimism for lower fees and new opportunities",
            CATEGORY_EXPLORE,
        ))

    if not alloc.empty and metrics.protocol_count < 3 and alloc.defi < 0.1:
        recs.append(Recommendation(
            "Start with DeFi Basics",
            "Explore Aave or Compound for passive yield on your holdings",
            CATEGORY_DEFI,
        ))

    logger.debug("rule_recommendations", count=len(recs), titles=[r.title for r in recs])
    return TradingAdvice(
        recommendations=recs[:MAX_RECOMMENDATIONS],
        strategies=list(DEFAULT_STRATEGIES),
        warnings=list(DEFAULT_WARNINGS),
        opportunities=list(DEFAULT_OPPORTUNITIES),
        generated_at=now or datetime.now(timezone.utc),
    )


def build_recommendations_prompt(analysis: WalletAnalysis, comparison: ComparisonResult | None = None) -> str:
    """Prompt for the AI service; the reply format is what parse_ai_recommendations reads."""
    metrics = analysis.metrics
    chains = ", ".join(metrics.chains) or "Unknown"
    comparison_lines = "\n".join(f"- {i.message}" for i in (comparison.insights if comparison else []))
    return f"""
You are a crypto portfolio advisor. Analyze this trader's profile and provide personalized recommendations.

**Trader Profile:**
- Personality: {analysis.personality.value}
- Risk Score: {analysis.risk_score}/10 (1=conservative, 10=degen)
- Portfolio Value: ${metrics.total_value:.2f}
- Chains: {chains}
- Position Count: {metrics.position_count}
- Allocations: {json.dumps(metrics.allocations.to_dict())}

**Comparison with Similar Traders:**
{comparison_lines}

**Your Task:**
Provide 3-4 specific, actionable trading recommendations tailored to their personality and risk profile. Format as:

1. **Recommendation Title**
   Brief description (1-2 sentences)
   Category: [rebalance/explore/defi/risk-management]

2. **Recommendation Title**
   Brief description
   Category: [category]

Also add:
- One strategy for their personality type
- One key warning/risk to watch
- One market opportunity to consider

Keep it concise, professional, and actionable. No fluff.
""".strip()


def _section_for(keyword: str) -> str:
    keyword = keyword.lower()
    if keyword.startswith("strateg"):
        return SECTION_STRATEGY
    if keyword.startswith("opportunit"):
        return SECTION_OPPORTUNITY
    return SECTION_WARNING


def parse_ai_recommendations(text: str, *, now: datetime | None = None) -> TradingAdvice:
    """
    Parse AI reply text into TradingAdvice.

    Numbered "N. **Title**" lines open a recommendation; following lines form
    its description, and a "Category: [x]" line sets its category. Lines that
    start with a strategy / warning / risk / caution / opportunity heading
    switch section when marked up or followed by a colon; content after the
    heading counts as an item.
    Section items shorter than 10 characters are ignored.
    """
    recommendations: list[Recommendation] = []
    sections: dict[str, list[str]] = {SECTION_STRATEGY: [], SECTION_WARNING: [], SECTION_OPPORTUNITY: []}
    section: str | None = None
    title: str | None = None
    category = CATEGORY_GENERAL
    description: list[str] = []

    def flush() -> None:
        if title is not None:
            recommendations.append(Recommendation(title, " ".join(description), category))

    for line in (raw.strip() for raw in (text or "").splitlines()):
        if not line:
            continue

        rec_match = _RECOMMENDATION_RE.match(line)
        if rec_match:
            flush()
            title, category, description = rec_match.group(1).strip(), CATEGORY_GENERAL, []
            section = SECTION_RECOMMENDATION
            continue

        category_match = _CATEGORY_RE.search(line)
        if section == SECTION_RECOMMENDATION and category_match:
            category = category_match.group(1).lower()
            continue

        section_match = _SECTION_RE.match(line)
        # headings are marked up or end in a colon; plain prose mentioning "risk" is not one
        if section_match and (":" in line or line[0] in "#*"):
            flush()
            title = None
            section = _section_for(section_match.group(1))
            rest = section_match.group(2).strip().strip("*").strip()
            if len(rest) > MIN_SECTION_LINE_LEN:
                sections[section].append(rest)
            continue

        if section == SECTION_RECOMMENDATION:
            description.append(line)
        elif section in sections and len(line) > MIN_SECTION_LINE_LEN:
            sections[section].append(_BULLET_RE.sub("", line))

    flush()

    logger.debug(
        "ai_recommendations_parsed",
        recommendations=len(recommendations),
        strategies=len(sections[SECTION_STRATEGY]),
        warnings=len(sections[SECTION_WARNING]),
        opportunities=len(sections[SECTION_OPPORTUNITY]),
    )
    return TradingAdvice(
        recommendations=recommendations[:MAX_RECOMMENDATIONS],
        strategies=sections[SECTION_STRATEGY][:MAX_SECTION_ITEMS],
        warnings=sections[SECTION_WARNING][:MAX_SECTION_ITEMS],
        opportunities=sections[SECTION_OPPORTUNITY][:MAX_SECTION_ITEMS],
        generated_at=now or datetime.now(timezone.utc),
        raw=text,
        source="ai",
    )
