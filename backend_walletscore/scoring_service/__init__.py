"""
Scoring service — async orchestration over external wallet and price sources.
"""

from backend_walletscore.scoring_service.service import (
    WalletScore,
    WalletScoringService,
    WalletStatsRequest,
)

__all__ = ["WalletScore", "WalletScoringService", "WalletStatsRequest"]
