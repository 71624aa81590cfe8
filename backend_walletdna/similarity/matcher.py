"""
Similarity matcher: rank a population of wallets by cosine similarity.

Exhaustive scan: every population member is scored against the query vector,
members at or below the similarity floor are dropped, the rest are sorted by
score descending (stable, so ties keep population order) and cut to top K.
Cost is O(population) per query; an indexed nearest-neighbor layer can sit in
front of find_similar_wallets without changing its contract.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from backend_walletdna.config.settings import get_settings
from backend_walletdna.core.exceptions import InvalidVectorError
from backend_walletdna.similarity.models import SimilarityCandidate, SimilarityEdge, SimilarityMatch
from backend_walletdna.similarity.vectors import as_vector
from backend_walletdna.walletdna_logging import get_logger
from backend_walletdna.walletdna_logging.logger import short_address

logger = get_logger(__name__)


def _cosine(a: np.ndarray, b: np.ndarray) -> float:
    # rescaled to max-abs 1 so norms neither underflow nor overflow
    scale_a = float(np.max(np.abs(a)))
    scale_b = float(np.max(np.abs(b)))
    if scale_a == 0 or scale_b == 0:
        return 0.0
    a = a / scale_a
    b = b / scale_b
    denominator = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
    if denominator == 0:
        return 0.0
    score = float(np.dot(a, b)) / denominator
    # float error can push |score| a hair past 1
    return float(np.clip(score, -1.0, 1.0))


def calculate_similarity(vector_a: Sequence[float] | np.ndarray, vector_b: Sequence[float] | np.ndarray) -> float:
    """
    Cosine similarity of two similarity vectors, in [-1, 1].

    Returns 0 when either vector has zero magnitude (no direction to compare).

    Raises:
        InvalidVectorError: either vector has the wrong dimension or a non-finite component.
    """
    return _cosine(as_vector(vector_a), as_vector(vector_b))


def find_similar_wallets(
    address: str,
    vector: Sequence[float] | np.ndarray,
    population: Iterable[SimilarityCandidate],
    *,
    floor: float | None = None,
    top_k: int | None = None,
) -> list[SimilarityMatch]:
    """
    Return up to top_k population members with similarity strictly above floor.

    floor and top_k default to WALLETDNA_SIMILARITY_FLOOR and
    WALLETDNA_SIMILARITY_TOP_K. The query address itself is skipped
    (case-insensitive). An empty population yields an empty list.

    Raises:
        InvalidVectorError: the query or any member vector is malformed. The
            error names the offending address.
        ConfigError: a default is needed and the environment setting is invalid.
    """
    if floor is None or top_k is None:
        settings = get_settings()
        floor = settings.similarity_floor if floor is None else floor
        top_k = settings.similarity_top_k if top_k is None else top_k
    query = as_vector(vector)
    own = (address or "").lower()

    scored: list[SimilarityMatch] = []
    considered = 0
    for candidate in population:
        if (candidate.address or "").lower() == own:
            continue
        considered += 1
        try:
            other = as_vector(candidate.vector)
        except InvalidVectorError as e:
            logger.error("similarity_invalid_vector", candidate=short_address(candidate.address), error=e.message)
            raise InvalidVectorError(
                f"population vector for {candidate.address} is invalid: {e.message}",
                address=candidate.address,
                **e.details,
            ) from e
        score = _cosine(query, other)
        if score > floor:
            scored.append(
                SimilarityMatch(
                    address=candidate.address,
                    similarity=score,
                    personality=candidate.personality,
                    risk_score=candidate.risk_score,
                    portfolio_value=candidate.portfolio_value,
                )
            )

    # sorted() is stable: equal scores keep population order
    ranked = sorted(scored, key=lambda match: match.similarity, reverse=True)[: max(0, top_k)]

    logger.debug(
        "similar_wallets_found",
        address=short_address(address),
        population=considered,
        above_floor=len(scored),
        returned=len(ranked),
    )
    return ranked


def build_similarity_edges(source_address: str, matches: Iterable[SimilarityMatch]) -> list[SimilarityEdge]:
    """Edges from source to each match, lower-cased, in match order, for the caller to upsert."""
    source = (source_address or "").lower()
    return [
        SimilarityEdge(source_address=source, target_address=(match.address or "").lower(), score=match.similarity)
        for match in matches
    ]
