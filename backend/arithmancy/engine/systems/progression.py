"""
ProgressionSystem - experience thresholds and level-ups.

The threshold curve is floor(100 * level ** 1.5): the cumulative experience a
character needs to *be* at that level. Monster, problem and quest rewards are
balanced against it, so the formula must not change.

A single gain may cross several thresholds; all of them are resolved in one
loop and persisted with one level write.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...logging import get_logger
from ...models import Character
from ..errors import InvalidOperationError
from ..repository import CharacterPatch, GameRepository

if TYPE_CHECKING:
    from .context import GameContext

logger = get_logger(__name__)


def experience_threshold(level: int) -> int:
    """Cumulative experience required to be at `level`."""
    return math.floor(100 * math.pow(level, 1.5))


@dataclass
class ProgressionConfig:
    """Configuration for level-up rewards."""
    health_per_level: int = 20  # Max health gained per level


@dataclass
class LevelUpResult:
    leveled_up: bool
    old_level: int
    experience_gained: int
    total_experience: int
    new_level: int | None = None
    health_increase: int | None = None


def calculate_level_up(
    level: int,
    experience: int,
    amount: int,
    config: ProgressionConfig | None = None,
) -> LevelUpResult:
    """Pure level-up calculation; does not touch the database."""
    config = config or ProgressionConfig()
    total = experience + amount

    new_level = level
    health_increase = 0
    while total >= experience_threshold(new_level + 1):
        new_level += 1
        health_increase += config.health_per_level

    leveled_up = new_level > level
    return LevelUpResult(
        leveled_up=leveled_up,
        old_level=level,
        experience_gained=amount,
        total_experience=total,
        new_level=new_level if leveled_up else None,
        health_increase=health_increase if leveled_up else None,
    )


def experience_summary(level: int) -> dict[str, int]:
    """Thresholds around `level`, as shown by the experience calculator."""
    current = experience_threshold(level)
    following = experience_threshold(level + 1)
    return {
        "current_level": level,
        "experience_for_current_level": current,
        "experience_for_next_level": following,
        "experience_needed_to_level_up": following - current,
    }


class ProgressionSystem:
    """
    Applies experience gains to characters.

    Other systems call apply_experience() with the repository of the
    transaction they are already in; gain_experience() is the standalone
    entry point that opens its own.
    """

    def __init__(self, ctx: "GameContext", config: ProgressionConfig | None = None) -> None:
        self.ctx = ctx
        self.config = config or ProgressionConfig()

    async def apply_experience(
        self, repo: GameRepository, character: Character, amount: int
    ) -> LevelUpResult:
        if amount < 0:
            raise InvalidOperationError(
                "Experience gain cannot be negative", "INVALID_EXPERIENCE_AMOUNT"
            )

        # The increment is written first so the level-up below is computed
        # from a row no other transaction can change before commit
        await repo.update_character(character, CharacterPatch(experience_delta=amount))
        result = calculate_level_up(
            character.level, character.experience_points - amount, amount, self.config
        )

        if result.leveled_up:
            # Level-up heals by the gained pool on top of current health
            patch = CharacterPatch(
                level=result.new_level,
                max_health_delta=result.health_increase,
                current_health_delta=result.health_increase,
            )
            await repo.update_character(character, patch)
            logger.info(
                "Character %s leveled up %d -> %d (+%d max health)",
                character.id, result.old_level, result.new_level, result.health_increase,
            )

        return result

    async def gain_experience(self, character_id: int, amount: int) -> LevelUpResult:
        async with self.ctx.transaction() as repo:
            character = await repo.require_character(character_id, for_update=True)
            return await self.apply_experience(repo, character, amount)
