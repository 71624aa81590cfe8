"""
Similarity engine — vectorize wallet metrics and rank behaviorally similar wallets.
"""

from backend_walletdna.similarity.matcher import (
    build_similarity_edges,
    calculate_similarity,
    find_similar_wallets,
)
from backend_walletdna.similarity.models import (
    SimilarityCandidate,
    SimilarityEdge,
    SimilarityMatch,
)
from backend_walletdna.similarity.vectors import (
    VECTOR_DIMENSIONS,
    portfolio_to_vector,
)

__all__ = [
    "VECTOR_DIMENSIONS",
    "portfolio_to_vector",
    "calculate_similarity",
    "find_similar_wallets",
    "build_similarity_edges",
    "SimilarityCandidate",
    "SimilarityMatch",
    "SimilarityEdge",
]
