"""Matches use cases."""

from .refresh_matches_usecase import RefreshMatchesUseCase, RefreshMatchesUseCaseImpl

__all__ = [
    "RefreshMatchesUseCase",
    "RefreshMatchesUseCaseImpl",
]
