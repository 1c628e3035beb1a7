"""
Global pytest configuration and shared fixtures.

Provides common test infrastructure for all test suites including:
- In-memory database engine and session factory (fresh per test)
- A GameEngine wired to that database with a seeded random source
- Persisting helper for builder-made reference data
- Deterministic random sources for encounter selection
"""

import random
import sys
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Add backend to path
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from arithmancy.db import create_session_factory  # noqa: E402
from arithmancy.engine import GameEngine  # noqa: E402
from arithmancy.models import Base  # noqa: E402

PLAYER_ID = "player-1"
OTHER_PLAYER_ID = "player-2"

# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create in-memory SQLite database engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # Use StaticPool to share single connection
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(test_engine)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def persist(session_factory):
    """
    Save builder-made rows in their own transaction and return them.

    Usage:
        monster, problem = await persist(MonsterBuilder().build(), ProblemBuilder().build())
    """

    async def _persist(*instances):
        async with session_factory() as session:
            async with session.begin():
                session.add_all(instances)
        return instances[0] if len(instances) == 1 else instances

    return _persist


# ============================================================================
# Engine Fixtures
# ============================================================================


class FirstChoice:
    """Random source that always picks the first candidate."""

    def choice(self, seq):
        return seq[0]


class LastChoice:
    """Random source that always picks the last candidate."""

    def choice(self, seq):
        return seq[-1]


@pytest.fixture
def game_engine(session_factory) -> GameEngine:
    return GameEngine(session_factory, rng=random.Random(1234))


@pytest.fixture
def first_choice_engine(session_factory) -> GameEngine:
    return GameEngine(session_factory, rng=FirstChoice())


@pytest.fixture
def last_choice_engine(session_factory) -> GameEngine:
    return GameEngine(session_factory, rng=LastChoice())


@pytest.fixture
async def character(game_engine):
    """A fresh level 1 character owned by PLAYER_ID."""
    return await game_engine.characters.create(PLAYER_ID, "Hypatia")
