"""Pytest configuration and shared fixtures for all tests.

This module provides function-scoped fixtures for:
- Test settings pointing at a throwaway SQLite database
- SQLAlchemy engine, session factory and session management
- The matched-users service and seeded users
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mutuals.core.settings import Settings
from mutuals.features.matches.repositories import MatchRepository
from mutuals.features.matches.services import MatchedUsersService
from mutuals.features.users.models import User
from tests.utils.database import create_all_tables, create_users, drop_all_tables


@pytest.fixture(scope="function")
def test_settings(tmp_path: Path) -> Settings:
    """Provide test settings with testing mode enabled."""
    return Settings(
        testing=True,
        database_url_override=f"sqlite+aiosqlite:///{tmp_path / 'mutuals_test.db'}",
    )


@pytest_asyncio.fixture(scope="function")
async def async_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Provide SQLAlchemy async engine for tests.

    Creates a fresh engine and schema for each test.
    """
    engine = create_async_engine(test_settings.database_url, echo=False)
    await create_all_tables(engine)

    yield engine

    await drop_all_tables(engine)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Provide a session factory, used wherever code expects get_db_session."""
    return async_sessionmaker(bind=async_engine, expire_on_commit=False)


@pytest.fixture
def match_repository() -> MatchRepository:
    return MatchRepository()


@pytest.fixture
def matched_users_service(
    session_factory: async_sessionmaker[AsyncSession],
    match_repository: MatchRepository,
) -> MatchedUsersService:
    """Provide the matched-users service bound to the test database."""
    return MatchedUsersService(
        get_db_session=session_factory, repository=match_repository
    )


@pytest_asyncio.fixture
async def users(session_factory: async_sessionmaker[AsyncSession]) -> list[User]:
    """Provide four committed users: alice, bob, carol and dave."""
    return await create_users(
        session_factory,
        "alice@example.com",
        "bob@example.com",
        "carol@example.com",
        "dave@example.com",
    )
