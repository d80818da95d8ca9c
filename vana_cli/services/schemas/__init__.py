"""Shared dataclasses for the stats services."""

from vana_cli.services.schemas.stats import (
    CombinedStatsResult,
    CredentialContext,
    ExecutionStats,
    IngestionStats,
    RecentError,
)

__all__ = [
    "CombinedStatsResult",
    "CredentialContext",
    "ExecutionStats",
    "IngestionStats",
    "RecentError",
]
