"""Player-organised matches."""

from .lifecycle import MatchManager

__all__ = ["MatchManager"]
