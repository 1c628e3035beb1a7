# backend/arithmancy/engine/systems/encounters.py
"""
EncounterSystem - Combat resolved by answering a math problem.

Provides:
- Encounter start with level-appropriate monster and problem selection
- Answer checking (trimmed, case-insensitive exact match)
- Win rewards (experience, gold, level-up) and loss/flee health penalties
- Permanent log of every answer submission

State machine:
    IN_PROGRESS -> WON | LOST | FLED
Terminal states never change again.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from ...logging import get_logger
from ...models import Character, Encounter, EncounterStatus, Monster, Problem
from ..errors import ConflictError, InvalidOperationError, NotFoundError
from ..repository import CharacterPatch, GameRepository
from .progression import LevelUpResult

if TYPE_CHECKING:
    from .context import GameContext

logger = get_logger(__name__)


@dataclass
class EncounterConfig:
    """Configuration for encounter selection and penalties."""
    monster_levels_below: int = 1  # Monsters down to level - 1
    monster_levels_above: int = 2  # ...and up to level + 2
    problem_levels_below: int = 1  # Problems down to level - 1
    problem_levels_above: int = 1  # ...and up to level + 1
    loss_penalty: float = 0.25  # Fraction of max health lost on a wrong answer
    flee_penalty: float = 0.10  # Fraction of max health lost when fleeing
    min_health: int = 1  # Penalties never take a character below this


@dataclass
class EncounterResult:
    success: bool
    experience_gained: int
    gold_gained: int
    encounter: Encounter
    level_up: LevelUpResult | None = None


def normalize_answer(answer: str) -> str:
    """Answers compare after trimming and lowercasing; no numeric parsing."""
    return answer.strip().lower()


def is_correct_answer(problem: Problem, answer: str) -> bool:
    return normalize_answer(problem.answer) == normalize_answer(answer)


def difficulty_window(level: int, below: int, above: int) -> tuple[int, int]:
    return max(1, level - below), level + above


class EncounterSystem:
    """
    Manages encounter lifecycle.

    Usage:
        encounters = EncounterSystem(ctx, config=EncounterConfig())
        encounter = await encounters.start(character_id)
        result = await encounters.solve(encounter.id, "24")
    """

    def __init__(self, ctx: "GameContext", config: EncounterConfig | None = None) -> None:
        self.ctx = ctx
        self.config = config or EncounterConfig()

    # ---------- Selection ----------

    def monster_window(self, level: int) -> tuple[int, int]:
        return difficulty_window(level, self.config.monster_levels_below, self.config.monster_levels_above)

    def problem_window(self, level: int) -> tuple[int, int]:
        return difficulty_window(level, self.config.problem_levels_below, self.config.problem_levels_above)

    async def _pick_monster(self, repo: GameRepository, level: int) -> Monster:
        candidates = await repo.monsters_for_levels(*self.monster_window(level))
        if not candidates:
            raise InvalidOperationError(
                "No suitable monster found for your level", "NO_SUITABLE_MONSTER"
            )
        return self.ctx.rng.choice(candidates)

    async def _pick_problem(self, repo: GameRepository, level: int) -> Problem:
        candidates = await repo.problems_for_levels(*self.problem_window(level))
        if not candidates:
            raise InvalidOperationError(
                "No suitable problem found for your level", "NO_SUITABLE_PROBLEM"
            )
        return self.ctx.rng.choice(candidates)

    # ---------- Lifecycle ----------

    async def start(self, character_id: int, monster_id: int | None = None) -> Encounter:
        """
        Start an encounter.

        With no monster_id a monster is picked at random from the level window;
        an explicit monster is used as-is, whatever its difficulty. The problem
        is always picked at random.
        """
        async with self.ctx.transaction() as repo:
            character = await repo.require_character(character_id)

            if monster_id is not None:
                monster = await repo.get_monster(monster_id)
                if monster is None:
                    raise NotFoundError("Monster not found", "MONSTER_NOT_FOUND")
            else:
                monster = await self._pick_monster(repo, character.level)

            problem = await self._pick_problem(repo, character.level)
            encounter = await repo.create_encounter(character, monster, problem)

        logger.info(
            "Encounter %s started: character %s vs monster %s (problem %s)",
            encounter.id, character.id, monster.id, problem.id,
        )
        return encounter

    async def solve(
        self, encounter_id: int, answer: str, time_taken: int | None = None
    ) -> EncounterResult:
        """Resolve an encounter with the submitted answer."""
        async with self.ctx.transaction() as repo:
            encounter = await self._get_open_encounter(repo, encounter_id)
            monster = encounter.monster
            problem = encounter.problem

            correct = is_correct_answer(problem, answer)
            outcome = EncounterStatus.WON if correct else EncounterStatus.LOST
            await self._claim(repo, encounter, outcome)
            character = await repo.require_character(encounter.character_id, for_update=True)

            if (
                time_taken is not None
                and problem.time_limit_seconds is not None
                and time_taken > problem.time_limit_seconds
            ):
                # Advisory only; late answers are scored normally
                logger.debug(
                    "Encounter %s answered after the time limit (%ss > %ss)",
                    encounter.id, time_taken, problem.time_limit_seconds,
                )

            await repo.record_attempt(
                character_id=character.id,
                problem_id=problem.id,
                user_answer=answer,
                is_correct=correct,
                time_taken_seconds=time_taken,
            )

            experience_gained = 0
            gold_gained = 0
            level_up: LevelUpResult | None = None

            if correct:
                experience_gained = monster.experience_reward + problem.experience_reward
                gold_gained = monster.gold_reward
                await repo.update_character(character, CharacterPatch(gold_delta=gold_gained))
                if experience_gained > 0:
                    level_up = await self.ctx.progression.apply_experience(
                        repo, character, experience_gained
                    )
            else:
                await self._apply_penalty(repo, character, self.config.loss_penalty)

        logger.info(
            "Encounter %s %s: +%d xp, +%d gold",
            encounter.id, encounter.status, experience_gained, gold_gained,
        )
        return EncounterResult(
            success=correct,
            experience_gained=experience_gained,
            gold_gained=gold_gained,
            level_up=level_up,
            encounter=encounter,
        )

    async def flee(self, encounter_id: int) -> Encounter:
        """Abandon an encounter at a small health cost. No rewards, no attempt logged."""
        async with self.ctx.transaction() as repo:
            encounter = await self._get_open_encounter(repo, encounter_id)
            await self._claim(repo, encounter, EncounterStatus.FLED)
            character = await repo.require_character(encounter.character_id, for_update=True)
            await self._apply_penalty(repo, character, self.config.flee_penalty)

        logger.info("Encounter %s fled by character %s", encounter.id, encounter.character_id)
        return encounter

    # ---------- Queries ----------

    async def get(self, encounter_id: int) -> Encounter:
        async with self.ctx.transaction() as repo:
            encounter = await repo.get_encounter(encounter_id)
            if encounter is None:
                raise NotFoundError("Encounter not found", "ENCOUNTER_NOT_FOUND")
            return encounter

    async def active_encounters(self, character_id: int) -> List[Encounter]:
        async with self.ctx.transaction() as repo:
            await repo.require_character(character_id)
            return await repo.active_encounters(character_id)

    async def suitable_monsters(self, character_id: int) -> List[Monster]:
        async with self.ctx.transaction() as repo:
            character = await repo.require_character(character_id)
            return await repo.monsters_for_levels(*self.monster_window(character.level))

    async def suitable_problems(self, character_id: int) -> List[Problem]:
        async with self.ctx.transaction() as repo:
            character = await repo.require_character(character_id)
            return await repo.problems_for_levels(*self.problem_window(character.level))

    # ---------- Helpers ----------

    async def _apply_penalty(self, repo: GameRepository, character: Character, fraction: float) -> None:
        loss = math.floor(character.max_health * fraction)
        await repo.apply_damage(character, loss, self.config.min_health)

    async def _claim(self, repo: GameRepository, encounter: Encounter, outcome: EncounterStatus) -> None:
        """Resolve the encounter before anything else is written; only one request wins."""
        if not await repo.finish_encounter(encounter, outcome):
            raise ConflictError(
                "This encounter is already finished", "ENCOUNTER_ALREADY_FINISHED"
            )

    async def _get_open_encounter(self, repo: GameRepository, encounter_id: int) -> Encounter:
        encounter = await repo.get_encounter(encounter_id, for_update=True)
        if encounter is None:
            raise NotFoundError("Encounter not found", "ENCOUNTER_NOT_FOUND")
        if encounter.is_finished:
            raise ConflictError(
                "This encounter is already finished", "ENCOUNTER_ALREADY_FINISHED"
            )
        return encounter
