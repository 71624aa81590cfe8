"""
Data models for analytics input and output.

Inputs (PortfolioSnapshot, Position, TransactionRecord) are produced by the
wallet-data provider; outputs (Metrics, InsightSet, WalletAnalysis) are
returned to the caller, which persists them via to_dict().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class PersonalityType(str, Enum):
    """Wallet personality labels. NFT_COLLECTOR is reserved; no rule assigns it yet."""

    CONSERVATIVE_DEFI_NATIVE = "Conservative DeFi Native"
    DEGEN_TRADER = "Degen Trader"
    BLUECHIP_HODLER = "Blue-chip Hodler"
    MULTICHAIN_EXPLORER = "Multi-chain Explorer"
    YIELD_FARMER = "Yield Farmer"
    STABLECOIN_PARKER = "Stablecoin Parker"
    NFT_COLLECTOR = "NFT Collector"
    BALANCED_TRADER = "Balanced Trader"


def _float(value: Any, default: float = 0.0) -> float:
    """Coerce to float; default on None or failure."""
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a provider timestamp into an aware UTC datetime.

    Accepts datetime, unix seconds, or ISO 8601 strings (trailing Z allowed).
    Returns None for missing or unparsable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


@dataclass(frozen=True)
class Position:
    """One fungible holding in a portfolio snapshot."""

    symbol: str
    name: str
    value: float
    quantity: float = 0.0
    price: float = 0.0
    chain: str = "unknown"
    protocol: str | None = None
    """Protocol tag for DeFi positions (e.g. "aave"); None for plain wallet holdings."""

    @classmethod
    def from_dict(cls, item: Mapping[str, Any]) -> "Position":
        """Build from a provider position dict; missing fields get neutral defaults."""
        return cls(
            symbol=str(item.get("symbol") or "UNKNOWN"),
            name=str(item.get("name") or "Unknown Token"),
            value=_float(item.get("value")),
            quantity=_float(item.get("quantity")),
            price=_float(item.get("price")),
            chain=str(item.get("chain") or "unknown"),
            protocol=item.get("protocol") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "value": self.value,
            "quantity": self.quantity,
            "price": self.price,
            "chain": self.chain,
            "protocol": self.protocol,
        }


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Wallet holdings at one point in time, as supplied by the data provider."""

    address: str
    total_value: float
    positions: tuple[Position, ...] = ()
    chains: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # chains is a set semantically; keep first-seen order for stable output
        object.__setattr__(self, "positions", tuple(self.positions))
        object.__setattr__(self, "chains", tuple(dict.fromkeys(self.chains)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PortfolioSnapshot":
        positions = data.get("positions") or []
        return cls(
            address=str(data.get("address") or ""),
            total_value=_float(data.get("total_value")),
            positions=tuple(p if isinstance(p, Position) else Position.from_dict(p) for p in positions),
            chains=tuple(str(c) for c in (data.get("chains") or [])),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "total_value": self.total_value,
            "positions": [p.to_dict() for p in self.positions],
            "chains": list(self.chains),
        }


# Provider fields that may carry the transaction time, in priority order
_TIMESTAMP_FIELDS = ("mined_at", "timestamp", "sent_at", "received_at")


@dataclass(frozen=True)
class TransactionRecord:
    """
    One transaction from the provider's history (newest-first sequences).

    Only the timestamp, chain and fee are interpreted; the full provider
    payload is kept in `raw` for callers.
    """

    timestamp: datetime | None
    chain: str | None = None
    fee_value: float = 0.0
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.timestamp is not None and self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))

    @classmethod
    def from_provider(cls, item: Mapping[str, Any]) -> "TransactionRecord":
        """
        Build from a provider transaction item.

        Timestamp: attributes.mined_at / timestamp / sent_at / received_at, then
        top-level timestamp (first present wins). Chain: relationships.chain.data.id,
        then top-level chain.
        """
        attributes = item.get("attributes") or {}
        raw_ts = None
        for key in _TIMESTAMP_FIELDS:
            if attributes.get(key):
                raw_ts = attributes[key]
                break
        if raw_ts is None:
            raw_ts = item.get("timestamp")

        chain = (((item.get("relationships") or {}).get("chain") or {}).get("data") or {}).get("id")
        if not chain:
            chain = item.get("chain") or None

        fee = attributes.get("fee") or {}
        fee_value = _float(fee.get("value")) if isinstance(fee, Mapping) else 0.0

        return cls(timestamp=parse_timestamp(raw_ts), chain=chain, fee_value=fee_value, raw=item)


@dataclass(frozen=True)
class Allocations:
    """
    Share of portfolio value per asset category, each in [0, 1].

    empty=True marks a zero-value portfolio: there is nothing to allocate, so
    buckets read as 0 but rules that test for a low or missing bucket must not fire.
    """

    stablecoins: float = 0.0
    bluechip: float = 0.0
    defi: float = 0.0
    other: float = 0.0
    empty: bool = False

    @classmethod
    def none(cls) -> "Allocations":
        return cls(empty=True)

    def has_value(self) -> bool:
        """True if any bucket holds a positive share."""
        return any(v > 0 for v in (self.stablecoins, self.bluechip, self.defi, self.other))

    def to_dict(self) -> dict[str, float]:
        if self.empty:
            return {}
        return {
            "stablecoins": self.stablecoins,
            "bluechip": self.bluechip,
            "defi": self.defi,
            "other": self.other,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Allocations":
        if not data:
            return cls.none()
        return cls(
            stablecoins=_float(data.get("stablecoins")),
            bluechip=_float(data.get("bluechip")),
            defi=_float(data.get("defi")),
            other=_float(data.get("other")),
        )


@dataclass(frozen=True)
class Metrics:
    """Fixed-shape behavioral metrics derived from one snapshot and its history."""

    total_value: float
    allocations: Allocations
    chain_count: int
    protocol_count: int
    tx_count: int
    avg_tx_per_month: float
    concentration: float
    """Herfindahl index of position values: 0 = diversified, 1 = single holding."""
    position_count: int
    chains: tuple[str, ...] = ()
    protocols: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_value": self.total_value,
            "allocations": self.allocations.to_dict(),
            "chain_count": self.chain_count,
            "chains": list(self.chains),
            "protocol_count": self.protocol_count,
            "protocols": list(self.protocols),
            "tx_count": self.tx_count,
            "avg_tx_per_month": self.avg_tx_per_month,
            "concentration": self.concentration,
            "position_count": self.position_count,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Metrics":
        """Rebuild metrics a caller persisted with to_dict(); missing fields become zero."""
        data = data or {}
        chains = tuple(data.get("chains") or ())
        protocols = tuple(data.get("protocols") or ())
        return cls(
            total_value=_float(data.get("total_value")),
            allocations=Allocations.from_dict(data.get("allocations")),
            chain_count=_int(data.get("chain_count"), len(chains)),
            protocol_count=_int(data.get("protocol_count"), len(protocols)),
            tx_count=_int(data.get("tx_count")),
            avg_tx_per_month=_float(data.get("avg_tx_per_month")),
            concentration=_float(data.get("concentration")),
            position_count=_int(data.get("position_count")),
            chains=chains,
            protocols=protocols,
        )


@dataclass(frozen=True)
class InsightSet:
    """Human-readable strengths (<=4), weaknesses (<=3) and recommendations (<=3)."""

    strengths: tuple[str, ...]
    weaknesses: tuple[str, ...]
    recommendations: tuple[str, ...]

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class WalletAnalysis:
    """Full rule-based analysis of one wallet; what the caller persists per address."""

    address: str
    personality: PersonalityType
    risk_score: int
    metrics: Metrics
    insights: InsightSet
    analyzed_at: datetime

    @property
    def strengths(self) -> tuple[str, ...]:
        return self.insights.strengths

    @property
    def weaknesses(self) -> tuple[str, ...]:
        return self.insights.weaknesses

    @property
    def recommendations(self) -> tuple[str, ...]:
        return self.insights.recommendations

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "address": self.address,
            "personality": self.personality.value,
            "risk_score": self.risk_score,
            "metrics": self.metrics.to_dict(),
            "analyzed_at": self.analyzed_at.isoformat(),
        }
        out.update(self.insights.to_dict())
        return out
