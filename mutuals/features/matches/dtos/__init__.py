"""Matches data transfer objects."""

from .matches_dto import MatchedUserDto, RefreshMatchesResponse

__all__ = [
    "MatchedUserDto",
    "RefreshMatchesResponse",
]
