"""
Application-level exceptions.

Degenerate inputs (empty portfolio, no transactions, empty cohort) are never
errors; these exceptions mark contract violations in derived data.
"""

from __future__ import annotations


class WalletDnaError(Exception):
    """Base error for WalletDNA engines. `code` is stable for API error mapping."""

    code = "walletdna_error"

    def __init__(self, message: str, **details: object) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, object]:
        return {"code": self.code, "message": self.message, "details": self.details}


class InvalidVectorError(WalletDnaError):
    """Similarity vectors that cannot be compared (dimension mismatch, NaN, inf)."""

    code = "invalid_vector"


class ComputationError(WalletDnaError):
    """A non-finite value reached a computation that would otherwise return a misleading number."""

    code = "computation_error"


class ConfigError(WalletDnaError):
    """An environment setting could not be parsed."""

    code = "config_error"
