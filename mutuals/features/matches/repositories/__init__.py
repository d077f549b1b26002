"""Match repositories package."""

from .match_repository import MatchRepository

__all__ = [
    "MatchRepository",
]
