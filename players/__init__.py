"""Player rankings and achievements."""

from .stats import PlayerStats, PlayerStatsUpdater

__all__ = ["PlayerStats", "PlayerStatsUpdater"]
