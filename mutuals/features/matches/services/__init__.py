"""Match services package."""

from .matched_users_service import MatchedUsersService, ReplaceResult

__all__ = [
    "MatchedUsersService",
    "ReplaceResult",
]
