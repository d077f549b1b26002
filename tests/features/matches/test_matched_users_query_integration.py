"""Integration tests for the matched-users queries and their match data."""

import warnings
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.exc import SADeprecationWarning
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mutuals.features.matches.errors import AggregateQueryMalformedError
from mutuals.features.matches.queries import (
    EnrichedMatchedUsersQuery,
    MatchedUser,
    MatchedUsersQuery,
    as_utc,
)
from mutuals.features.matches.repositories import MatchRepository
from mutuals.features.matches.services import MatchedUsersService
from mutuals.features.users.models import User

# All fixtures are provided by tests/conftest.py


@pytest.fixture
def three_days_ago() -> datetime:
    return datetime.now(UTC) - timedelta(days=3)


@pytest_asyncio.fixture
async def parent_and_child(
    session_factory: async_sessionmaker[AsyncSession],
    match_repository: MatchRepository,
    users: list[User],
    three_days_ago: datetime,
) -> tuple[User, User]:
    """Store a single match from alice to bob created three days ago."""
    parent, child, *_ = users
    async with session_factory() as session:
        async with session.begin():
            await match_repository.create(
                session=session,
                user_id=parent.id,
                matched_user_id=child.id,
                created_at=three_days_ago,
            )
    return parent, child


class TestWithMatchData:
    """Test suite for the enriched matched-users read."""

    @pytest.mark.asyncio
    async def test_provides_match_created_at(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        parent_and_child: tuple[User, User],
        three_days_ago: datetime,
    ):
        """Test that the match timestamp comes back within a second."""
        parent, child = parent_and_child

        async with session_factory() as session:
            matched = await MatchedUsersQuery(parent.id).with_match_data().all(session)

        assert len(matched) == 1
        assert isinstance(matched[0], MatchedUser)
        assert matched[0].user.id == child.id
        assert abs((matched[0].match_created_at - three_days_ago).total_seconds()) <= 1

    @pytest.mark.asyncio
    async def test_reads_without_deprecated_result_api(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        parent_and_child: tuple[User, User],
    ):
        """Test that the enriched read emits no SQLAlchemy deprecation warning."""
        parent, child = parent_and_child

        async with session_factory() as session:
            with warnings.catch_warnings():
                warnings.simplefilter("error", SADeprecationWarning)
                matched = await MatchedUsersQuery(parent.id).with_match_data().all(
                    session
                )

        assert [m.user.id for m in matched] == [child.id]

    @pytest.mark.asyncio
    async def test_match_created_at_is_aware_datetime(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        parent_and_child: tuple[User, User],
    ):
        parent, _ = parent_and_child

        async with session_factory() as session:
            (matched,) = await MatchedUsersQuery(parent.id).with_match_data().all(
                session
            )

        assert isinstance(matched.match_created_at, datetime)
        assert matched.match_created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_absent_on_user_from_different_query(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        parent_and_child: tuple[User, User],
    ):
        """Test that the timestamp never sticks to the User object."""
        parent, child = parent_and_child

        async with session_factory() as session:
            (matched,) = await MatchedUsersQuery(parent.id).with_match_data().all(
                session
            )
            # Same identity map, so this is the very same object
            looked_up = await session.get(User, child.id)

        assert looked_up is matched.user
        assert getattr(looked_up, "match_created_at", None) is None

        async with session_factory() as session:
            fresh = await session.get(User, child.id)
        assert getattr(fresh, "match_created_at", None) is None

    @pytest.mark.asyncio
    async def test_plain_query_returns_users(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        parent_and_child: tuple[User, User],
    ):
        parent, child = parent_and_child

        async with session_factory() as session:
            matched = await MatchedUsersQuery(parent.id).all(session)

        assert len(matched) == 1
        assert isinstance(matched[0], User)
        assert matched[0].id == child.id

    @pytest.mark.asyncio
    async def test_can_still_be_chained(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        parent_and_child: tuple[User, User],
    ):
        """Test that chaining with_match_data again keeps a countable query."""
        parent, _ = parent_and_child

        query = MatchedUsersQuery(parent.id).with_match_data().with_match_data()

        assert isinstance(query, EnrichedMatchedUsersQuery)
        async with session_factory() as session:
            assert await query.count(session) == 1

    @pytest.mark.asyncio
    async def test_service_exposes_match_data(
        self,
        matched_users_service: MatchedUsersService,
        users: list[User],
    ):
        alice, bob, carol, _ = users
        before = datetime.now(UTC) - timedelta(seconds=1)
        await matched_users_service.replace(alice.id, [bob.id, carol.id])

        matched = await matched_users_service.matched_users_with_match_data(alice.id)

        assert [m.user.id for m in matched] == [bob.id, carol.id]
        assert all(m.match_created_at >= before for m in matched)


class TestMatchedUsersCount:
    """Test suite for aggregate-safe counting."""

    @pytest.mark.asyncio
    async def test_enriched_count_matches_plain_count(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        matched_users_service: MatchedUsersService,
        users: list[User],
    ):
        """Test that projecting match data does not change the count."""
        alice, bob, carol, dave = users
        await matched_users_service.replace(alice.id, [bob.id, carol.id, dave.id])

        query = MatchedUsersQuery(alice.id)
        async with session_factory() as session:
            plain = await query.count(session)
            enriched = await query.with_match_data().count(session)

        assert plain == enriched == 3
        assert await matched_users_service.count_matched_users(alice.id) == 3

    @pytest.mark.asyncio
    async def test_count_user_column(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        parent_and_child: tuple[User, User],
    ):
        parent, _ = parent_and_child

        async with session_factory() as session:
            count = await MatchedUsersQuery(parent.id).with_match_data().count(
                session, "email"
            )

        assert count == 1

    @pytest.mark.asyncio
    async def test_count_over_match_data_is_rejected(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        parent_and_child: tuple[User, User],
    ):
        """Test that the projected timestamp cannot be aggregated."""
        parent, _ = parent_and_child

        async with session_factory() as session:
            with pytest.raises(AggregateQueryMalformedError) as excinfo:
                await MatchedUsersQuery(parent.id).with_match_data().count(
                    session, "match_created_at"
                )

        assert excinfo.value.column == "match_created_at"

    @pytest.mark.asyncio
    async def test_count_without_matches_is_zero(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        users: list[User],
    ):
        alice, *_ = users

        async with session_factory() as session:
            assert await MatchedUsersQuery(alice.id).count(session) == 0
            enriched = await MatchedUsersQuery(alice.id).with_match_data().all(session)
            assert enriched == []


class TestAsUtc:
    """Test suite for timestamp normalization."""

    def test_naive_is_treated_as_utc(self):
        naive = datetime(2026, 1, 1, 12, 0, 0)

        assert as_utc(naive) == datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

    def test_aware_is_converted_to_utc(self):
        aware = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

        assert as_utc(aware.astimezone()) == aware
