"""
Application settings.

Typed, immutable view of the WALLETDNA_* environment. Engine keyword arguments
left as None resolve here at call time. Logging reads its own variables (see
walletdna_logging.logger).
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_walletdna.config.env import (
    get_env_float,
    get_env_int,
    load_walletdna_env,
)
from backend_walletdna.core.exceptions import ConfigError

DEFAULT_SIMILARITY_FLOOR = 0.3
DEFAULT_SIMILARITY_TOP_K = 20
DEFAULT_COHORT_SIZE = 20
DEFAULT_TX_HISTORY_LIMIT = 100
DEFAULT_BIO_HISTORY_LIMIT = 200
DEFAULT_DISCOVER_PAGE_SIZE = 20


@dataclass(frozen=True)
class Settings:
    """WalletDNA configuration resolved from the environment."""

    similarity_floor: float = DEFAULT_SIMILARITY_FLOOR
    """Matches must score strictly above this cosine similarity."""
    similarity_top_k: int = DEFAULT_SIMILARITY_TOP_K
    """Maximum number of similar wallets returned per query."""
    cohort_size: int = DEFAULT_COHORT_SIZE
    """Maximum peers used as the comparison baseline."""
    tx_history_limit: int = DEFAULT_TX_HISTORY_LIMIT
    """Newest transactions run_wallet_analysis reads from a history."""
    bio_history_limit: int = DEFAULT_BIO_HISTORY_LIMIT
    """Newest transactions generate_user_bio reads from a history."""
    discover_page_size: int = DEFAULT_DISCOVER_PAGE_SIZE


def get_settings() -> Settings:
    """
    Return settings built from the current environment.

    Raises:
        ConfigError: a numeric variable is unparsable or out of range.
    """
    load_walletdna_env()
    settings = Settings(
        similarity_floor=get_env_float("SIMILARITY_FLOOR", DEFAULT_SIMILARITY_FLOOR),
        similarity_top_k=get_env_int("SIMILARITY_TOP_K", DEFAULT_SIMILARITY_TOP_K),
        cohort_size=get_env_int("COHORT_SIZE", DEFAULT_COHORT_SIZE),
        tx_history_limit=get_env_int("TX_HISTORY_LIMIT", DEFAULT_TX_HISTORY_LIMIT),
        bio_history_limit=get_env_int("BIO_HISTORY_LIMIT", DEFAULT_BIO_HISTORY_LIMIT),
        discover_page_size=get_env_int("DISCOVER_PAGE_SIZE", DEFAULT_DISCOVER_PAGE_SIZE),
    )
    if not -1.0 <= settings.similarity_floor <= 1.0:
        raise ConfigError("WALLETDNA_SIMILARITY_FLOOR must be within [-1, 1]", value=settings.similarity_floor)
    for name in ("similarity_top_k", "cohort_size", "tx_history_limit", "bio_history_limit", "discover_page_size"):
        if getattr(settings, name) < 1:
            raise ConfigError(f"{name} must be >= 1", value=getattr(settings, name))
    return settings
