"""
Structured logging for Backend WalletDNA.

Use get_logger(__name__) in every engine module; events are emitted as JSON
with event_type, level, logger and timestamp.
"""

from backend_walletdna.walletdna_logging.logger import bind_address, get_logger

__all__ = ["get_logger", "bind_address"]
