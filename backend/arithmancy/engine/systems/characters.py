# backend/arithmancy/engine/systems/characters.py
"""
CharacterSystem - Character lifecycle, lookup and rankings.

Players own up to a fixed number of characters, each with a name unique
to that player (case-insensitive). A character may belong to one school;
schools are reference data and do not change starting stats.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from ...logging import get_logger
from ...models import Character, School
from ..errors import ConflictError, InvalidOperationError
from ..repository import GameRepository

if TYPE_CHECKING:
    from .context import GameContext

logger = get_logger(__name__)

# Letters (Latin-1 accents included), spaces, apostrophes and hyphens
NAME_PATTERN = re.compile(r"[A-Za-zÀ-ÿ\s'-]+")


@dataclass
class CharacterConfig:
    """Configuration for new characters."""
    max_characters_per_player: int = 3
    min_name_length: int = 3
    max_name_length: int = 50
    starting_level: int = 1
    starting_health: int = 100
    starting_gold: int = 100


@dataclass
class CharacterStats:
    character: Character
    total_items: int
    completed_quests: int
    correct_problems: int
    won_encounters: int


@dataclass
class CharacterLimits:
    current: int
    maximum: int

    @property
    def remaining(self) -> int:
        return max(0, self.maximum - self.current)

    @property
    def can_create_more(self) -> bool:
        return self.current < self.maximum

    @property
    def percentage_used(self) -> int:
        return round(self.current / self.maximum * 100)


class CharacterSystem:
    def __init__(self, ctx: "GameContext", config: CharacterConfig | None = None) -> None:
        self.ctx = ctx
        self.config = config or CharacterConfig()

    def validate_name(self, name: str) -> str:
        """Return the trimmed name or raise INVALID_NAME."""
        trimmed = name.strip()
        if len(trimmed) < self.config.min_name_length:
            raise InvalidOperationError(
                f"Name must be at least {self.config.min_name_length} characters", "INVALID_NAME"
            )
        if len(trimmed) > self.config.max_name_length:
            raise InvalidOperationError(
                f"Name must be at most {self.config.max_name_length} characters", "INVALID_NAME"
            )
        if not NAME_PATTERN.fullmatch(trimmed):
            raise InvalidOperationError(
                "Name may only contain letters, spaces, apostrophes and hyphens", "INVALID_NAME"
            )
        return trimmed

    async def create(self, player_id: str, name: str, school_id: int | None = None) -> Character:
        name = self.validate_name(name)
        async with self.ctx.transaction() as repo:
            if school_id is not None:
                await self._require_school(repo, school_id)
            if await repo.count_characters(player_id) >= self.config.max_characters_per_player:
                raise ConflictError(
                    f"A player may have at most {self.config.max_characters_per_player} characters",
                    "CHARACTER_LIMIT_REACHED",
                )
            if await repo.character_name_exists(player_id, name):
                raise ConflictError(
                    "You already have a character with this name", "CHARACTER_NAME_EXISTS"
                )
            character = await repo.create_character(
                player_id=player_id,
                name=name,
                level=self.config.starting_level,
                experience_points=0,
                max_health=self.config.starting_health,
                current_health=self.config.starting_health,
                gold=self.config.starting_gold,
                school_id=school_id,
            )

        logger.info("Player %s created character %s (%s)", player_id, character.id, name)
        return character

    async def update(
        self,
        character_id: int,
        *,
        name: str | None = None,
        school_id: int | None = None,
    ) -> Character:
        """Rename a character and/or move it to another school."""
        changes: dict = {}
        if name is not None:
            changes["name"] = self.validate_name(name)
        async with self.ctx.transaction() as repo:
            character = await repo.require_character(character_id, for_update=True)
            if "name" in changes and await repo.character_name_exists(
                character.player_id, changes["name"], exclude_id=character.id
            ):
                raise ConflictError(
                    "You already have a character with this name", "CHARACTER_NAME_EXISTS"
                )
            if school_id is not None:
                await self._require_school(repo, school_id)
                changes["school_id"] = school_id
            if changes:
                await repo.update_character_profile(character, **changes)

        logger.info("Character %s updated (%s)", character_id, ", ".join(changes) or "no changes")
        return character

    async def delete(self, character_id: int) -> None:
        """Delete a character together with its encounters, attempts, quests and items."""
        async with self.ctx.transaction() as repo:
            character = await repo.require_character(character_id, for_update=True)
            await repo.delete_character(character)

        logger.info("Character %s deleted", character_id)

    async def check_name(self, player_id: str, name: str, exclude_id: int | None = None) -> bool:
        """True when `name` is free among the player's characters."""
        trimmed = name.strip()
        if not trimmed:
            raise InvalidOperationError("Name is required", "INVALID_NAME")
        async with self.ctx.transaction() as repo:
            return not await repo.character_name_exists(player_id, trimmed, exclude_id)

    async def limits(self, player_id: str) -> CharacterLimits:
        async with self.ctx.transaction() as repo:
            current = await repo.count_characters(player_id)
        return CharacterLimits(current=current, maximum=self.config.max_characters_per_player)

    async def schools(self) -> List[School]:
        async with self.ctx.transaction() as repo:
            return await repo.schools()

    async def list_for_player(self, player_id: str) -> List[Character]:
        async with self.ctx.transaction() as repo:
            return await repo.characters_for_player(player_id)

    async def get(self, character_id: int) -> Character:
        async with self.ctx.transaction() as repo:
            return await repo.require_character(character_id)

    async def stats(self, character_id: int) -> CharacterStats:
        async with self.ctx.transaction() as repo:
            character = await repo.require_character(character_id)
            counters = await repo.character_stats(character_id)
        return CharacterStats(character=character, **counters)

    async def leaderboard(self, limit: int = 10) -> List[Character]:
        async with self.ctx.transaction() as repo:
            return await repo.top_characters(limit)

    # ---------- Helpers ----------

    async def _require_school(self, repo: GameRepository, school_id: int) -> School:
        school = await repo.get_school(school_id)
        if school is None:
            raise InvalidOperationError("School not found", "INVALID_SCHOOL")
        return school
