"""Read queries over a user's matched users.

``MatchedUsersQuery`` is the plain read. ``with_match_data()`` turns it into
an enriched read that also projects the match's ``created_at``. The enriched
value lives only on the returned ``MatchedUser`` pairs and is never written
onto the ``User`` instance, which may be shared through the session's
identity map with other reads.

Counting is defined over distinct user identity, so an enriched query counts
the same as the plain one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import Column, Select, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mutuals.features.matches.errors import AggregateQueryMalformedError
from mutuals.features.matches.models import Match
from mutuals.features.users.models import User

MATCH_CREATED_AT = "match_created_at"


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class MatchedUser:
    """A matched user together with when the match was created."""

    user: User
    match_created_at: datetime


class _BaseMatchedUsersQuery:
    def __init__(self, user_id: UUID):
        self.user_id = user_id

    def _joined(self, stmt: Select) -> Select:
        return stmt.join(Match, Match.matched_user_id == User.id).where(
            Match.user_id == self.user_id
        )

    async def count(self, session: AsyncSession, column: str = "id") -> int:
        """Count distinct matched users.

        Only columns of ``users`` may be counted; projected match data is
        never part of the aggregate.

        Raises:
            AggregateQueryMalformedError: If ``column`` is not a user column.
        """
        target = _user_column(column)
        stmt = self._joined(select(func.count(distinct(target))).select_from(User))
        result = await session.execute(stmt)
        return result.scalar() or 0


class MatchedUsersQuery(_BaseMatchedUsersQuery):
    """Plain read of the users matched by ``user_id``."""

    def statement(self) -> Select[tuple[User]]:
        return self._joined(select(User)).order_by(Match.id)

    def with_match_data(self) -> EnrichedMatchedUsersQuery:
        return EnrichedMatchedUsersQuery(self.user_id)

    async def all(self, session: AsyncSession) -> list[User]:
        """Get matched users, deduplicated, in match insertion order."""
        result = await session.execute(self.statement())
        return list(result.scalars().unique().all())


class EnrichedMatchedUsersQuery(_BaseMatchedUsersQuery):
    """Read of matched users carrying each match's creation time."""

    def statement(self) -> Select[tuple[User, datetime]]:
        return self._joined(
            select(User, Match.created_at.label(MATCH_CREATED_AT))
        ).order_by(Match.id)

    def with_match_data(self) -> EnrichedMatchedUsersQuery:
        return self

    async def all(self, session: AsyncSession) -> list[MatchedUser]:
        """Get ``MatchedUser`` pairs, one per distinct user, in insertion order."""
        result = await session.execute(self.statement())

        seen: set[UUID] = set()
        matched: list[MatchedUser] = []
        for user, created_at in result:
            if user.id in seen:
                continue
            seen.add(user.id)
            matched.append(MatchedUser(user=user, match_created_at=as_utc(created_at)))

        return matched


def _user_column(name: str) -> Column:
    columns = User.__table__.columns
    if name not in columns:
        raise AggregateQueryMalformedError(name)
    return columns[name]
