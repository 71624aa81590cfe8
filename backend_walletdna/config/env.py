"""
Environment variable loading for WalletDNA.

- Loads .env from the project root when present (python-dotenv).
- Typed readers for numeric settings; unparsable values raise ConfigError.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from backend_walletdna.core.exceptions import ConfigError

# Project root: config is backend_walletdna/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

ENV_PREFIX = "WALLETDNA_"


def load_walletdna_env() -> None:
    """Load .env from project root without overriding variables already set. Safe to call repeatedly."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def _raw(name: str) -> str:
    return (os.getenv(ENV_PREFIX + name) or "").strip()


def get_env_float(name: str, default: float) -> float:
    """Read WALLETDNA_<name> as float; default when unset or blank."""
    raw = _raw(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name} must be a number", value=raw) from e


def get_env_int(name: str, default: int) -> int:
    """Read WALLETDNA_<name> as int; default when unset or blank."""
    raw = _raw(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name} must be an integer", value=raw) from e


def get_env_str(name: str, default: str) -> str:
    return _raw(name) or default
