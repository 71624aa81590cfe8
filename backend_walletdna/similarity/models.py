"""
Data models for similarity matching.

Population members carry the vector plus the display fields a match echoes
back; edges are what the caller persists keyed by (source, target).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np


@dataclass(frozen=True)
class SimilarityCandidate:
    """One population member: address, its vector, and optional profile fields."""

    address: str | None
    """None for unlabeled members; compared against the query as an empty address."""
    vector: np.ndarray
    personality: str | None = None
    risk_score: int | None = None
    portfolio_value: float | None = None


@dataclass(frozen=True)
class SimilarityMatch:
    """A population member that passed the similarity floor."""

    address: str | None
    similarity: float
    personality: str | None = None
    risk_score: int | None = None
    portfolio_value: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "similarity": self.similarity,
            "personality": self.personality,
            "risk_score": self.risk_score,
            "portfolio_value": self.portfolio_value,
        }


@dataclass(frozen=True)
class SimilarityEdge:
    """Directed similarity from source to target; score is cosine similarity in [-1, 1]."""

    source_address: str
    target_address: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_address": self.source_address,
            "target_address": self.target_address,
            "score": self.score,
        }
