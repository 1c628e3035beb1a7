# backend/arithmancy/engine/engine.py
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..logging import get_logger
from .systems import (CharacterConfig, CharacterSystem, EncounterConfig,
                      EncounterSystem, GameContext, InventorySystem,
                      ProgressionConfig, ProgressionSystem, QuestSystem,
                      RandomSource)

logger = get_logger(__name__)


class GameEngine:
    """
    Core game engine.

    - Owns the GameContext (session factory, random source).
    - Builds each system and registers it on the context so systems can
      call each other (encounters and quests both grant experience through
      progression).
    - Holds no per-player state; every call reads and writes the database
      inside its own transaction.

    Uses modular systems for specific domains:
    - ProgressionSystem: Experience and level-ups
    - EncounterSystem: Start, solve and flee encounters
    - QuestSystem: Quest acceptance and objectives
    - InventorySystem: Item use and equipment
    - CharacterSystem: Character creation and lookups
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        rng: RandomSource | None = None,
        progression_config: ProgressionConfig | None = None,
        encounter_config: EncounterConfig | None = None,
        character_config: CharacterConfig | None = None,
    ) -> None:
        # Initialize game context and systems
        self.ctx = GameContext(session_factory, rng=rng)
        self.ctx.engine = self

        self.progression = ProgressionSystem(self.ctx, progression_config)
        self.ctx.progression = self.progression
        self.encounters = EncounterSystem(self.ctx, encounter_config)
        self.ctx.encounters = self.encounters
        self.quests = QuestSystem(self.ctx)
        self.ctx.quests = self.quests
        self.inventory = InventorySystem(self.ctx)
        self.ctx.inventory = self.inventory
        self.characters = CharacterSystem(self.ctx, character_config)
        self.ctx.characters = self.characters

        logger.debug("GameEngine initialized")

