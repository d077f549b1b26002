"""SQLAlchemy repository for directed match records."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import ColumnElement, and_, distinct, exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.features.matches.errors import ConstraintViolationError
from mutuals.features.matches.models import Match

logger = logging.getLogger(__name__)


class MatchRepository:
    """Storage for ``Match`` rows.

    Every method runs inside the caller's session and transaction; nothing
    here commits. Symmetry is not this layer's concern.
    """

    async def create(
        self,
        *,
        session: AsyncSession,
        user_id: UUID,
        matched_user_id: UUID,
        created_at: datetime | None = None,
    ) -> Match:
        """Insert a match and flush it.

        Raises:
            ConstraintViolationError: If the pair already exists or the row
                breaks another table constraint.
        """
        match = Match(user_id=user_id, matched_user_id=matched_user_id)
        if created_at is not None:
            # SQLite stores the wall clock and drops the offset
            if created_at.tzinfo is not None:
                created_at = created_at.astimezone(UTC)
            match.created_at = created_at

        session.add(match)
        try:
            await session.flush()
        except IntegrityError as e:
            logger.warning(
                "Match insert rejected: user_id=%s matched_user_id=%s (%s)",
                user_id,
                matched_user_id,
                e.orig,
            )
            raise ConstraintViolationError(user_id, matched_user_id) from e

        return match

    async def exists(
        self, *, session: AsyncSession, user_id: UUID, matched_user_id: UUID
    ) -> bool:
        stmt = select(
            exists().where(
                Match.user_id == user_id, Match.matched_user_id == matched_user_id
            )
        )
        result = await session.execute(stmt)
        return bool(result.scalar())

    async def find_all(self, *, session: AsyncSession, user_id: UUID) -> list[Match]:
        """Get the matches owned by ``user_id`` in insertion order."""
        stmt = select(Match).where(Match.user_id == user_id).order_by(Match.id)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def delete_all(
        self, *, session: AsyncSession, user_id: UUID, matched_user_id: UUID
    ) -> list[Match]:
        """Delete the match from ``user_id`` to ``matched_user_id``.

        Returns:
            The deleted records (empty when there was nothing to delete).
        """
        return await self.delete_where(
            session=session,
            criteria=[
                Match.user_id == user_id,
                Match.matched_user_id == matched_user_id,
            ],
        )

    async def delete_where(
        self, *, session: AsyncSession, criteria: list[ColumnElement[bool]]
    ) -> list[Match]:
        """Delete every match satisfying all ``criteria``.

        Rows are loaded and deleted one at a time rather than with a bulk
        ``DELETE`` so callers get each removed record back.

        Returns:
            The deleted records in insertion order.
        """
        stmt = select(Match).where(and_(*criteria)).order_by(Match.id)
        result = await session.execute(stmt)
        matches = list(result.scalars().all())

        for match in matches:
            await session.delete(match)
        await session.flush()

        return matches

    async def count(self, *, session: AsyncSession, user_id: UUID) -> int:
        """Count distinct users matched by ``user_id``."""
        stmt = select(func.count(distinct(Match.matched_user_id))).where(
            Match.user_id == user_id
        )
        result = await session.execute(stmt)
        return result.scalar() or 0
