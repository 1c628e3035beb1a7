# backend/arithmancy/engine/systems/quests.py
"""
QuestSystem - Quest acceptance and strict objective progression.

Provides:
- Quest discovery (available and repeatable quests for a character)
- Quest acceptance, with re-acceptance for repeatable quests
- Objective completion in strict order, rewards on the last objective
- Abandonment and active/completed listings

Progress state machine (one row per character and quest):
    (none) -> ACTIVE -> COMPLETED
              ACTIVE -> ABANDONED
    COMPLETED (repeatable) / ABANDONED / FAILED -> ACTIVE on re-accept
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from ...logging import get_logger
from ...models import Character, CharacterQuest, Item, Quest, QuestStatus
from ..errors import ConflictError, InvalidOperationError, NotFoundError
from ..repository import CharacterPatch, GameRepository
from .progression import LevelUpResult

if TYPE_CHECKING:
    from .context import GameContext

logger = get_logger(__name__)


@dataclass
class QuestProgressResult:
    quest_completed: bool
    objective_completed: bool
    progress: CharacterQuest
    experience_gained: int = 0
    gold_gained: int = 0
    item_reward: Item | None = None
    level_up: LevelUpResult | None = None


class QuestSystem:
    """
    Manages quest progress for characters.

    Rewards are all-or-nothing: nothing is granted until the final objective
    completes, and then gold, item and experience are granted together.
    """

    def __init__(self, ctx: "GameContext") -> None:
        self.ctx = ctx

    # ---------- Discovery ----------

    async def available(self, character_id: int) -> List[Quest]:
        async with self.ctx.transaction() as repo:
            character = await repo.require_character(character_id)
            return await repo.available_quests(character.id, character.level)

    async def repeatable(self, character_id: int) -> List[Quest]:
        async with self.ctx.transaction() as repo:
            character = await repo.require_character(character_id)
            return await repo.repeatable_quests(character.id, character.level)

    # ---------- Lifecycle ----------

    async def accept(self, character_id: int, quest_id: int) -> CharacterQuest:
        async with self.ctx.transaction() as repo:
            character = await repo.require_character(character_id)
            quest = await repo.get_quest(quest_id)
            if quest is None:
                raise NotFoundError("Quest not found", "QUEST_NOT_FOUND")

            if character.level < quest.min_level:
                raise InvalidOperationError(
                    f"Level {quest.min_level} required to accept this quest",
                    "INSUFFICIENT_LEVEL",
                )

            progress = await repo.get_progress(character.id, quest.id, for_update=True)
            if progress is None:
                progress = await repo.create_progress(character.id, quest)
            elif progress.status == QuestStatus.ACTIVE.value:
                raise ConflictError("Quest already accepted", "QUEST_ALREADY_ACCEPTED")
            elif progress.status == QuestStatus.COMPLETED.value and not quest.is_repeatable:
                raise ConflictError(
                    "This quest has already been completed and cannot be repeated",
                    "QUEST_NOT_REPEATABLE",
                )
            elif not await repo.restart_progress(progress, QuestStatus(progress.status)):
                raise ConflictError("Quest already accepted", "QUEST_ALREADY_ACCEPTED")

        logger.info("Character %s accepted quest %s", character_id, quest_id)
        return progress

    async def complete_objective(
        self, character_id: int, quest_id: int, objective_id: int
    ) -> QuestProgressResult:
        """
        Complete the objective the character is currently on.

        Only objectives[current_objective_index] can be completed; anything
        else (earlier, later, or from another quest) is rejected.
        """
        async with self.ctx.transaction() as repo:
            progress = await self._get_active_progress(repo, character_id, quest_id)
            quest = progress.quest
            objectives = quest.objectives
            index = progress.current_objective_index

            if index >= len(objectives) or objectives[index].id != objective_id:
                raise InvalidOperationError(
                    "This is not the current objective of the quest", "INVALID_OBJECTIVE"
                )

            if index + 1 < len(objectives):
                if not await repo.advance_progress(progress, index):
                    raise InvalidOperationError(
                        "This is not the current objective of the quest", "INVALID_OBJECTIVE"
                    )
                return QuestProgressResult(
                    quest_completed=False, objective_completed=True, progress=progress
                )

            if not await repo.complete_progress(progress, index):
                raise InvalidOperationError("This quest is not active", "QUEST_NOT_ACTIVE")
            character = await repo.require_character(character_id, for_update=True)
            result = await self._grant_rewards(repo, character, quest, progress)

        logger.info(
            "Character %s completed quest %s: +%d xp, +%d gold",
            character_id, quest_id, result.experience_gained, result.gold_gained,
        )
        return result

    async def abandon(self, character_id: int, quest_id: int) -> CharacterQuest:
        async with self.ctx.transaction() as repo:
            progress = await self._get_active_progress(repo, character_id, quest_id)
            if not await repo.abandon_progress(progress):
                raise InvalidOperationError("This quest is not active", "QUEST_NOT_ACTIVE")

        logger.info("Character %s abandoned quest %s", character_id, quest_id)
        return progress

    # ---------- Listings ----------

    async def active_quests(self, character_id: int) -> List[CharacterQuest]:
        async with self.ctx.transaction() as repo:
            await repo.require_character(character_id)
            return await repo.progress_with_status(character_id, QuestStatus.ACTIVE)

    async def completed_quests(self, character_id: int) -> List[CharacterQuest]:
        async with self.ctx.transaction() as repo:
            await repo.require_character(character_id)
            return await repo.progress_with_status(character_id, QuestStatus.COMPLETED)

    # ---------- Helpers ----------

    async def _grant_rewards(
        self,
        repo: GameRepository,
        character: Character,
        quest: Quest,
        progress: CharacterQuest,
    ) -> QuestProgressResult:
        await repo.update_character(character, CharacterPatch(gold_delta=quest.gold_reward))

        if quest.item_reward is not None:
            await repo.add_to_inventory(character.id, quest.item_reward, 1)


        level_up = None
        if quest.experience_reward > 0:
            level_up = await self.ctx.progression.apply_experience(
                repo, character, quest.experience_reward
            )

        return QuestProgressResult(
            quest_completed=True,
            objective_completed=True,
            progress=progress,
            experience_gained=quest.experience_reward,
            gold_gained=quest.gold_reward,
            item_reward=quest.item_reward,
            level_up=level_up,
        )

    async def _get_active_progress(
        self, repo: GameRepository, character_id: int, quest_id: int
    ) -> CharacterQuest:
        progress = await repo.get_progress(character_id, quest_id, for_update=True)
        if progress is None:
            raise NotFoundError("Quest progress not found", "QUEST_PROGRESS_NOT_FOUND")
        if progress.status != QuestStatus.ACTIVE.value:
            raise InvalidOperationError("This quest is not active", "QUEST_NOT_ACTIVE")
        return progress
