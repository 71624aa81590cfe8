"""
Structured JSON logging: timestamp, event_type, address and engine fields.

structlog with ISO timestamps, log level and consistent keys for aggregation.
Engines log one debug event per computed result; the pipeline logs info
events at start and end of an analysis.

Level and format come from WALLETDNA_LOG_LEVEL (falling back to LOG_LEVEL) and
WALLETDNA_LOG_FORMAT, read after the project .env is loaded.
backend_walletdna.config must not import this module.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

from backend_walletdna.config.env import get_env_str, load_walletdna_env

DEFAULT_LOG_LEVEL = "INFO"
# json for production; anything else renders for the console
DEFAULT_LOG_FORMAT = "json"

ADDRESS_PREVIEW_LEN = 16


def resolve_log_settings() -> tuple[str, str]:
    """Return (level, format) from the environment, loading .env first."""
    load_walletdna_env()
    level = get_env_str("LOG_LEVEL", os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()
    log_format = get_env_str("LOG_FORMAT", DEFAULT_LOG_FORMAT).strip().lower()
    return level, log_format


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Ensure timestamp is always present (ISO 8601)."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Rename structlog 'event' to event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def configure_structlog(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog: contextvars, level, timestamp, event_type, renderer. Unset arguments come from env."""
    env_level, env_format = resolve_log_settings()
    level_value = getattr(logging, (level or env_level).upper(), logging.INFO)
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _normalize_event,
    ]
    if (log_format or env_format).lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def short_address(address: str | None) -> str:
    """Truncate an address for log fields."""
    address = address or ""
    if len(address) > ADDRESS_PREVIEW_LEN:
        return address[:ADDRESS_PREVIEW_LEN] + "..."
    return address


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.debug("risk_engine_result", risk_score=6, adjustments=[...])

    Output (JSON): {"event_type": "risk_engine_result", "risk_score": 6, ..., "level": "debug",
    "logger": "backend_walletdna.analytics.risk_engine", "timestamp": "..."}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_address(address: str) -> structlog.BoundLogger:
    """Return a logger with the (truncated) wallet address bound to every call."""
    return get_logger("backend_walletdna").bind(address=short_address(address))
