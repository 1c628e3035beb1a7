# backend/arithmancy/engine/systems/__init__.py
"""
Game systems.

Each system handles a specific domain of game logic:
- ProgressionSystem: Experience thresholds and level-ups
- EncounterSystem: Monster encounters resolved by answering a problem
- QuestSystem: Quest acceptance and ordered objective progression
- InventorySystem: Item consumption, equipment, stacks
- CharacterSystem: Character lifecycle, name checks, limits, stats, leaderboard
"""

from .context import GameContext, RandomSource
from .progression import (
    ProgressionSystem,
    ProgressionConfig,
    LevelUpResult,
    calculate_level_up,
    experience_summary,
    experience_threshold,
)
from .encounters import (
    EncounterSystem,
    EncounterConfig,
    EncounterResult,
    normalize_answer,
)
from .quests import QuestSystem, QuestProgressResult
from .inventory import InventorySystem, ItemUseResult
from .characters import CharacterSystem, CharacterConfig, CharacterLimits, CharacterStats

__all__ = [
    "GameContext",
    "RandomSource",
    "ProgressionSystem",
    "ProgressionConfig",
    "LevelUpResult",
    "calculate_level_up",
    "experience_summary",
    "experience_threshold",
    "EncounterSystem",
    "EncounterConfig",
    "EncounterResult",
    "normalize_answer",
    "QuestSystem",
    "QuestProgressResult",
    "InventorySystem",
    "ItemUseResult",
    "CharacterSystem",
    "CharacterConfig",
    "CharacterLimits",
    "CharacterStats",
]
