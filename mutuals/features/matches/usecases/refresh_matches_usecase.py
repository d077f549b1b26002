"""Use case for refreshing a user's matches from a matcher."""

import logging
from typing import Protocol
from uuid import UUID

from mutuals.features.matches.dtos import MatchedUserDto, RefreshMatchesResponse
from mutuals.features.matches.errors import MatchError
from mutuals.features.matches.services import MatchedUsersService
from mutuals.features.matches.services.protocols import Matcher

logger = logging.getLogger(__name__)


class RefreshMatchesUseCase(Protocol):
    """Protocol for the refresh matches use case."""

    async def execute(self, user_id: UUID) -> RefreshMatchesResponse:
        """Recompute and store the matches of a user."""
        ...


class RefreshMatchesUseCaseImpl:
    """Implementation of the refresh matches use case."""

    def __init__(self, matcher: Matcher, matched_users_service: MatchedUsersService):
        """Initialize the use case with dependencies.

        Args:
            matcher: Service computing the desired matched users
            matched_users_service: Service keeping matches symmetric
        """
        self.matcher = matcher
        self.matched_users_service = matched_users_service

    async def execute(self, user_id: UUID) -> RefreshMatchesResponse:
        """Replace the matches of a user with what the matcher computes.

        Args:
            user_id: The user whose matches should be refreshed

        Returns:
            Response with the added and removed users and the resulting matches

        Raises:
            MatchError: If the computed set cannot be stored
        """
        computed = list(await self.matcher.compute_matches(user_id))

        try:
            result = await self.matched_users_service.replace(user_id, computed)
        except MatchError:
            logger.exception("Failed to refresh matches for user %s", user_id)
            raise

        matched = await self.matched_users_service.matched_users_with_match_data(
            user_id
        )

        return RefreshMatchesResponse(
            user_id=user_id,
            added=result.added,
            removed=result.removed,
            matched_users=[
                MatchedUserDto(
                    user_id=item.user.id,
                    email=item.user.email,
                    match_created_at=item.match_created_at,
                )
                for item in matched
            ],
        )
