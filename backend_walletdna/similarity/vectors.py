"""
Similarity vectors for WalletDNA matching.

Builds a fixed-size numeric vector from Metrics. The dimension order is
fixed; vectors are only comparable when built by this same function.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from backend_walletdna.analytics.models import Metrics
from backend_walletdna.core.exceptions import InvalidVectorError

# Chain and protocol counts are scaled so typical wallets stay near [0, 1]
CHAIN_NORMALIZER = 10.0
PROTOCOL_NORMALIZER = 15.0

VECTOR_DIMENSIONS = (
    "stablecoins",
    "bluechip",
    "defi",
    "chain_diversity",
    "protocol_diversity",
    "concentration",
)
VECTOR_SIZE = len(VECTOR_DIMENSIONS)


def portfolio_to_vector(metrics: Metrics) -> np.ndarray:
    """Return the 6-d similarity vector (float64) for a wallet's metrics."""
    alloc = metrics.allocations
    return np.array(
        [
            alloc.stablecoins or 0.0,
            alloc.bluechip or 0.0,
            alloc.defi or 0.0,
            metrics.chain_count / CHAIN_NORMALIZER,
            metrics.protocol_count / PROTOCOL_NORMALIZER,
            metrics.concentration,
        ],
        dtype=np.float64,
    )


def as_vector(values: Sequence[float] | np.ndarray, *, size: int = VECTOR_SIZE) -> np.ndarray:
    """
    Validate and coerce a vector to a 1-d float64 array of the given size.

    Raises:
        InvalidVectorError: wrong shape or a non-finite component. Vectors are
            never truncated or padded.
    """
    try:
        arr = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidVectorError("vector is not numeric") from e
    if arr.ndim != 1 or arr.shape[0] != size:
        raise InvalidVectorError(
            f"vector must have {size} dimensions, got shape {arr.shape}",
            expected=size,
            shape=list(arr.shape),
        )
    if not np.all(np.isfinite(arr)):
        raise InvalidVectorError(
            "vector has non-finite components",
            values=[v if math.isfinite(v) else str(v) for v in arr.tolist()],
        )
    return arr


def vector_to_dict(vector: np.ndarray) -> dict[str, float]:
    """Named view of a similarity vector, in VECTOR_DIMENSIONS order."""
    arr = as_vector(vector)
    return {name: float(v) for name, v in zip(VECTOR_DIMENSIONS, arr)}
