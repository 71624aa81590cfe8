"""
Personality classification for WalletDNA analytics.

First-match decision list over Metrics: rules are evaluated in a fixed
priority order and the first matching rule decides the label. Order matters:
a wallet that parks >60% in stablecoins on 5 chains is a Stablecoin Parker,
not a Multi-chain Explorer.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from backend_walletdna.analytics.models import Metrics, PersonalityType
from backend_walletdna.walletdna_logging import get_logger

logger = get_logger(__name__)


class PersonalityRule(NamedTuple):
    name: str
    predicate: Callable[[Metrics], bool]
    label: PersonalityType


def _stablecoin_parker(m: Metrics) -> bool:
    return m.allocations.stablecoins > 0.6


def _bluechip_hodler(m: Metrics) -> bool:
    return m.allocations.bluechip > 0.7 and m.avg_tx_per_month < 5


def _degen_trader(m: Metrics) -> bool:
    # Low bluechip only counts when there is an allocation to be low in
    return m.avg_tx_per_month > 20 and not m.allocations.empty and m.allocations.bluechip < 0.3


def _multichain_explorer(m: Metrics) -> bool:
    return m.chain_count >= 4


def _yield_farmer(m: Metrics) -> bool:
    return m.protocol_count >= 5 and m.allocations.defi > 0.2


def _conservative_defi_native(m: Metrics) -> bool:
    return m.allocations.bluechip > 0.4 and m.protocol_count >= 3


PERSONALITY_RULES: tuple[PersonalityRule, ...] = (
    PersonalityRule("stablecoin_parker", _stablecoin_parker, PersonalityType.STABLECOIN_PARKER),
    PersonalityRule("bluechip_hodler", _bluechip_hodler, PersonalityType.BLUECHIP_HODLER),
    PersonalityRule("degen_trader", _degen_trader, PersonalityType.DEGEN_TRADER),
    PersonalityRule("multichain_explorer", _multichain_explorer, PersonalityType.MULTICHAIN_EXPLORER),
    PersonalityRule("yield_farmer", _yield_farmer, PersonalityType.YIELD_FARMER),
    PersonalityRule("conservative_defi_native", _conservative_defi_native, PersonalityType.CONSERVATIVE_DEFI_NATIVE),
)

DEFAULT_PERSONALITY = PersonalityType.BALANCED_TRADER


def classify_personality(metrics: Metrics) -> PersonalityType:
    """
    Classify a wallet from its metrics. Order of rules matters.

    Returns the label of the first matching rule in PERSONALITY_RULES,
    Balanced Trader when none match.
    """
    for rule in PERSONALITY_RULES:
        if rule.predicate(metrics):
            logger.debug("personality_classified", rule=rule.name, personality=rule.label.value)
            return rule.label
    logger.debug("personality_classified", rule="default", personality=DEFAULT_PERSONALITY.value)
    return DEFAULT_PERSONALITY
