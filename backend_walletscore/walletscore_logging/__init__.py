"""
Structured logging for Backend WalletScore.

JSON logs with timestamp, wallet_id and event_type.
Use get_logger() in all modules for aggregation-friendly output.
"""

from backend_walletscore.walletscore_logging.logger import bind_wallet, get_logger

__all__ = ["bind_wallet", "get_logger"]
