"""
Core utilities — shared exceptions used across the analytics and similarity engines.
"""

from backend_walletdna.core.exceptions import (
    ComputationError,
    ConfigError,
    InvalidVectorError,
    WalletDnaError,
)

__all__ = [
    "WalletDnaError",
    "InvalidVectorError",
    "ComputationError",
    "ConfigError",
]
