"""Symmetric matched-users service.

A match is stored as two directed rows, (A, B) and (B, A). This service is
the only writer that keeps the pair together: every mutation of one
direction checks for the other direction and creates or deletes it in the
same transaction. The existence check is what stops the reciprocal step from
recursing back into the forward one.
"""

import logging
from collections.abc import Callable, Iterable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.db.postgres.session import get_db_session as default_get_db_session
from mutuals.features.matches.errors import SelfMatchError, UserNotFoundError
from mutuals.features.matches.models import Match
from mutuals.features.matches.queries import MatchedUser, MatchedUsersQuery
from mutuals.features.matches.repositories import MatchRepository
from mutuals.features.users.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReplaceResult:
    """Users added to and removed from a matched-users set."""

    added: list[UUID] = field(default_factory=list)
    removed: list[UUID] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


class MatchedUsersService:
    """Keeps matches symmetric across add, remove and replace."""

    def __init__(
        self,
        get_db_session: Callable[
            [], AbstractAsyncContextManager[AsyncSession]
        ] = default_get_db_session,
        repository: MatchRepository | None = None,
    ):
        """Initialize the service with dependencies.

        Args:
            get_db_session: Function to get database session, defaults to the
                application engine from settings
            repository: Storage for match rows
        """
        self.get_db_session = get_db_session
        self.repository = repository or MatchRepository()

    async def matched_users(self, user_id: UUID) -> list[User]:
        """Get the users matched with ``user_id``."""
        async with self.get_db_session() as session:
            return await MatchedUsersQuery(user_id).all(session)

    async def matched_users_with_match_data(self, user_id: UUID) -> list[MatchedUser]:
        """Get the users matched with ``user_id`` and when each match was made."""
        async with self.get_db_session() as session:
            return await MatchedUsersQuery(user_id).with_match_data().all(session)

    async def count_matched_users(self, user_id: UUID) -> int:
        async with self.get_db_session() as session:
            return await self.repository.count(session=session, user_id=user_id)

    async def add(self, user_id: UUID, other_id: UUID) -> bool:
        """Match ``user_id`` with ``other_id`` in both directions.

        Returns:
            True if the match was created, False if it already existed.

        Raises:
            SelfMatchError: If both ids are the same user.
            UserNotFoundError: If either user does not exist.
            ConstraintViolationError: If a concurrent writer created the
                same row first; nothing is committed.
            DBAPIError: If a crossed add from the other side deadlocks on
                PostgreSQL; nothing is committed.
        """
        if user_id == other_id:
            raise SelfMatchError(user_id)

        async with self.get_db_session() as session:
            async with session.begin():
                await self._ensure_users_exist(session, [user_id, other_id])
                return await self._add(session, user_id, other_id, _utcnow())

    async def remove(self, user_id: UUID, other_id: UUID) -> bool:
        """Unmatch ``user_id`` and ``other_id`` in both directions.

        Returns:
            True if a match was removed, False if there was none.
        """
        async with self.get_db_session() as session:
            async with session.begin():
                return await self._remove(session, user_id, other_id)

    async def replace(self, user_id: UUID, new_ids: Iterable[UUID]) -> ReplaceResult:
        """Make ``new_ids`` the exact set of users matched with ``user_id``.

        Users in both the current and the new set are left alone, so their
        matches keep their original ``created_at``. All changes, reciprocals
        included, commit together or not at all.

        Raises:
            SelfMatchError: If ``new_ids`` contains ``user_id``.
            UserNotFoundError: If ``new_ids`` is not empty and ``user_id`` or
                any new user does not exist. Clearing an unknown user's
                matches is a no-op, like ``remove``.
        """
        desired = list(dict.fromkeys(new_ids))
        if user_id in desired:
            raise SelfMatchError(user_id)

        async with self.get_db_session() as session:
            async with session.begin():
                if desired:
                    await self._ensure_users_exist(session, [user_id, *desired])

                current = [
                    match.matched_user_id
                    for match in await self.repository.find_all(
                        session=session, user_id=user_id
                    )
                ]
                wanted = set(desired)
                to_remove = [other_id for other_id in current if other_id not in wanted]
                to_add = [other_id for other_id in desired if other_id not in current]

                if to_remove:
                    removed = await self.repository.delete_where(
                        session=session,
                        criteria=[
                            Match.user_id == user_id,
                            Match.matched_user_id.in_(to_remove),
                        ],
                    )
                    for match in removed:
                        await self._remove_reciprocal(session, match)

                created_at = _utcnow()
                for other_id in to_add:
                    await self._add(session, user_id, other_id, created_at)

        result = ReplaceResult(added=to_add, removed=to_remove)
        if result.changed:
            logger.info(
                "Replaced matches for user %s: %d added, %d removed",
                user_id,
                len(result.added),
                len(result.removed),
            )
        return result

    async def remove_all(self, user_id: UUID) -> ReplaceResult:
        """Remove every match of ``user_id`` along with the reciprocals.

        An unknown ``user_id`` has no matches, so nothing changes.
        """
        return await self.replace(user_id, [])

    async def _add(
        self,
        session: AsyncSession,
        user_id: UUID,
        other_id: UUID,
        created_at: datetime,
    ) -> bool:
        if await self.repository.exists(
            session=session, user_id=user_id, matched_user_id=other_id
        ):
            return False

        match = await self.repository.create(
            session=session,
            user_id=user_id,
            matched_user_id=other_id,
            created_at=created_at,
        )
        await self._add_reciprocal(session, match)
        return True

    async def _add_reciprocal(self, session: AsyncSession, match: Match) -> None:
        if await self.repository.exists(
            session=session,
            user_id=match.matched_user_id,
            matched_user_id=match.user_id,
        ):
            return

        logger.debug(
            "Creating reciprocal match %s -> %s", match.matched_user_id, match.user_id
        )
        await self.repository.create(
            session=session,
            user_id=match.matched_user_id,
            matched_user_id=match.user_id,
            created_at=match.created_at,
        )

    async def _remove(
        self, session: AsyncSession, user_id: UUID, other_id: UUID
    ) -> bool:
        removed = await self.repository.delete_all(
            session=session, user_id=user_id, matched_user_id=other_id
        )
        for match in removed:
            await self._remove_reciprocal(session, match)
        return bool(removed)

    async def _remove_reciprocal(self, session: AsyncSession, match: Match) -> None:
        if not await self.repository.exists(
            session=session,
            user_id=match.matched_user_id,
            matched_user_id=match.user_id,
        ):
            return

        logger.debug(
            "Removing reciprocal match %s -> %s", match.matched_user_id, match.user_id
        )
        await self.repository.delete_all(
            session=session,
            user_id=match.matched_user_id,
            matched_user_id=match.user_id,
        )

    async def _ensure_users_exist(
        self, session: AsyncSession, user_ids: list[UUID]
    ) -> None:
        wanted = set(user_ids)
        result = await session.execute(select(User.id).where(User.id.in_(wanted)))
        found = set(result.scalars().all())
        for user_id in user_ids:
            if user_id not in found:
                raise UserNotFoundError(user_id)


def _utcnow() -> datetime:
    return datetime.now(UTC)
