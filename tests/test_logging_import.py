"""
Test that walletscore_logging can be imported without circular import and logger works.
"""

from __future__ import annotations

from decimal import Decimal


def test_logging_import():
    """Import get_logger from walletscore_logging and use the logger."""
    from backend_walletscore.walletscore_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: Decimal values must render
    logger.info("test_message", key="value", amount=Decimal("1.5"))


def test_bind_wallet():
    from backend_walletscore.walletscore_logging import bind_wallet

    log = bind_wallet("WALLET")
    log.info("wallet_test_message", quantized_score=1)
