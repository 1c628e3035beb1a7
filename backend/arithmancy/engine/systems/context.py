# backend/arithmancy/engine/systems/context.py
"""
GameContext - Shared context object for all game systems.

Provides:
- The database session factory and a per-operation transaction helper
- The random source used for monster/problem selection
- Cross-system references (set by GameEngine during initialization)

This avoids circular imports and provides a clean dependency injection pattern.
"""

from __future__ import annotations

import random
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Protocol, Sequence, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..repository import GameRepository

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything with random.Random's choice(); tests pass stubs or seeded generators."""

    def choice(self, seq: Sequence[T]) -> T: ...


class GameContext:
    """
    Shared context object passed to all game systems.

    Usage:
        ctx = GameContext(session_factory, rng=random.Random(42))
        async with ctx.transaction() as repo:
            character = await repo.get_character(1)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        rng: RandomSource | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.rng: RandomSource = rng or random.Random()

        # System references (set by GameEngine during initialization)
        self.engine: Any = None  # GameEngine
        self.progression: Any = None  # ProgressionSystem
        self.encounters: Any = None  # EncounterSystem
        self.quests: Any = None  # QuestSystem
        self.inventory: Any = None  # InventorySystem
        self.characters: Any = None  # CharacterSystem

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[GameRepository]:
        """
        Open a session and a transaction for one engine operation.

        Commits when the block exits normally, rolls back if it raises, so an
        operation either applies all of its writes or none of them.
        """
        async with self.session_factory() as session:
            async with session.begin():
                yield GameRepository(session)
