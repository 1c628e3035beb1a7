"""
GameRepository - the data store used by all game systems.

Wraps one AsyncSession (one transaction) and exposes the reads and writes the
systems need, keyed by identity or composite key, plus the handful of domain
queries (level-suitable monsters/problems, quests available to a character).

Partial updates go through patch objects: only fields that are set are
written, and *_delta fields become SQL increments so concurrent requests on
the same character do not overwrite each other's gold or experience.

State transitions are conditional writes (`_apply_if`): the UPDATE carries
the expected current state in its WHERE clause and the row count tells the
caller whether it won.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Sequence

from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import (Base, Character, CharacterQuest, Encounter,
                      EncounterStatus, InventoryEntry, Item, Monster, Problem,
                      ProblemAttempt, Quest, QuestStatus, School, utcnow)
from .errors import ConflictError, NotFoundError


# ---------- Patch objects ----------


class _Patch:
    """Base for partial updates. Fields left as None are not written."""

    _deltas: dict[str, str] = {}

    def as_values(self, model: type[Base]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is None:
                continue
            column = self._deltas.get(f.name)
            if column is None:
                values[f.name] = value
            elif value != 0:
                values[column] = getattr(model, column) + value
        return values


@dataclass
class CharacterPatch(_Patch):
    level: int | None = None
    experience_delta: int | None = None
    gold_delta: int | None = None
    max_health_delta: int | None = None
    current_health_delta: int | None = None

    _deltas = {
        "experience_delta": "experience_points",
        "gold_delta": "gold",
        "max_health_delta": "max_health",
        "current_health_delta": "current_health",
    }


@dataclass
class InventoryPatch(_Patch):
    is_equipped: bool | None = None
    quantity_delta: int | None = None

    _deltas = {"quantity_delta": "quantity"}


class GameRepository:
    """Data access for one unit of work. Never commits; the caller owns the transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ---------- Internal helpers ----------

    async def _apply(self, instance: Base, values: dict[str, Any]) -> None:
        """Write column values for one row and reload it into the session."""
        if not values:
            return
        model = type(instance)
        await self.session.execute(
            update(model)
            .where(model.id == instance.id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(instance)

    async def _apply_if(self, instance: Base, values: dict[str, Any], *conditions) -> bool:
        """
        Write column values only while `conditions` still hold for the row.

        The check and the write are one UPDATE statement, so of two concurrent
        callers exactly one sees True. The row is reloaded on success.
        """
        model = type(instance)
        result = await self.session.execute(
            update(model)
            .where(model.id == instance.id, *conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        await self.session.refresh(instance)
        return True

    async def reload(self, instance: Base) -> None:
        await self.session.refresh(instance)

    async def _one(self, stmt, for_update: bool = False):
        if for_update:
            stmt = stmt.with_for_update()
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _all(self, stmt) -> list:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _count(self, stmt) -> int:
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    # ---------- Characters ----------

    async def get_character(self, character_id: int, *, for_update: bool = False) -> Character | None:
        return await self._one(select(Character).where(Character.id == character_id), for_update)

    async def require_character(self, character_id: int, *, for_update: bool = False) -> Character:
        character = await self.get_character(character_id, for_update=for_update)
        if character is None:
            raise NotFoundError("Character not found", "CHARACTER_NOT_FOUND")
        return character

    async def create_character(self, **values: Any) -> Character:
        character = Character(created_at=utcnow(), **values)
        self.session.add(character)
        await self.session.flush()
        return character

    async def characters_for_player(self, player_id: str) -> list[Character]:
        return await self._all(
            select(Character).where(Character.player_id == player_id).order_by(Character.id)
        )

    async def count_characters(self, player_id: str) -> int:
        return await self._count(
            select(func.count()).select_from(Character).where(Character.player_id == player_id)
        )

    async def character_name_exists(
        self, player_id: str, name: str, exclude_id: int | None = None
    ) -> bool:
        """Case-insensitive; `exclude_id` skips the character being renamed."""
        stmt = (
            select(func.count())
            .select_from(Character)
            .where(Character.player_id == player_id, func.lower(Character.name) == name.lower())
        )
        if exclude_id is not None:
            stmt = stmt.where(Character.id != exclude_id)
        return await self._count(stmt) > 0

    async def update_character(self, character: Character, patch: CharacterPatch) -> Character:
        await self._apply(character, patch.as_values(Character))
        return character

    async def update_character_profile(self, character: Character, **values: Any) -> Character:
        await self._apply(character, values)
        return character

    async def delete_character(self, character: Character) -> None:
        """Foreign keys cascade to encounters, attempts, quests and inventory."""
        await self.session.execute(delete(Character).where(Character.id == character.id))
        self.session.expunge(character)

    async def apply_damage(self, character: Character, amount: int, floor: int) -> Character:
        """Subtract `amount` health in SQL, never going below `floor`."""
        after = Character.current_health - amount
        await self._apply(
            character, {"current_health": case((after < floor, floor), else_=after)}
        )
        return character

    async def heal_character(self, character: Character, amount: int) -> Character:
        """Add `amount` health in SQL, capped at max_health."""
        after = Character.current_health + amount
        await self._apply(
            character,
            {"current_health": case((after > Character.max_health, Character.max_health), else_=after)},
        )
        return character

    async def character_stats(self, character_id: int) -> dict[str, int]:
        """Counters shown on the character sheet."""
        counters = {
            "total_items": select(func.count())
            .select_from(InventoryEntry)
            .where(InventoryEntry.character_id == character_id),
            "completed_quests": select(func.count())
            .select_from(CharacterQuest)
            .where(
                CharacterQuest.character_id == character_id,
                CharacterQuest.status == QuestStatus.COMPLETED.value,
            ),
            "correct_problems": select(func.count())
            .select_from(ProblemAttempt)
            .where(ProblemAttempt.character_id == character_id, ProblemAttempt.is_correct.is_(True)),
            "won_encounters": select(func.count())
            .select_from(Encounter)
            .where(
                Encounter.character_id == character_id,
                Encounter.status == EncounterStatus.WON.value,
            ),
        }
        return {key: await self._count(stmt) for key, stmt in counters.items()}

    async def top_characters(self, limit: int = 10) -> list[Character]:
        return await self._all(
            select(Character)
            .order_by(Character.level.desc(), Character.experience_points.desc(), Character.id)
            .limit(limit)
        )

    # ---------- Monsters & problems ----------

    async def get_monster(self, monster_id: int) -> Monster | None:
        return await self._one(select(Monster).where(Monster.id == monster_id))

    async def monsters_for_levels(self, low: int, high: int) -> list[Monster]:
        return await self._all(
            select(Monster)
            .where(Monster.difficulty_level.between(low, high))
            .order_by(Monster.difficulty_level, Monster.id)
        )

    async def get_problem(self, problem_id: int) -> Problem | None:
        return await self._one(select(Problem).where(Problem.id == problem_id))

    async def problems_for_levels(self, low: int, high: int) -> list[Problem]:
        return await self._all(
            select(Problem)
            .where(Problem.difficulty_level.between(low, high))
            .order_by(Problem.difficulty_level, Problem.id)
        )

    async def record_attempt(
        self,
        character_id: int,
        problem_id: int,
        user_answer: str,
        is_correct: bool,
        time_taken_seconds: int | None = None,
    ) -> ProblemAttempt:
        attempt = ProblemAttempt(
            character_id=character_id,
            problem_id=problem_id,
            user_answer=user_answer,
            is_correct=is_correct,
            time_taken_seconds=time_taken_seconds,
            attempted_at=utcnow(),
        )
        self.session.add(attempt)
        await self.session.flush()
        return attempt

    async def attempts_for_character(self, character_id: int) -> list[ProblemAttempt]:
        return await self._all(
            select(ProblemAttempt)
            .where(ProblemAttempt.character_id == character_id)
            .order_by(ProblemAttempt.id)
        )

    # ---------- Encounters ----------

    async def create_encounter(self, character: Character, monster: Monster, problem: Problem) -> Encounter:
        encounter = Encounter(
            character=character,
            monster=monster,
            problem=problem,
            status=EncounterStatus.IN_PROGRESS.value,
            monster_current_health=monster.base_health,
            character_health_at_start=character.current_health,
            started_at=utcnow(),
            completed_at=None,
        )
        self.session.add(encounter)
        await self.session.flush()
        return encounter

    async def get_encounter(self, encounter_id: int, *, for_update: bool = False) -> Encounter | None:
        return await self._one(select(Encounter).where(Encounter.id == encounter_id), for_update)

    async def finish_encounter(self, encounter: Encounter, status: EncounterStatus) -> bool:
        """Move an IN_PROGRESS encounter to `status`. False if it was already resolved."""
        return await self._apply_if(
            encounter,
            {"status": status.value, "completed_at": utcnow()},
            Encounter.status == EncounterStatus.IN_PROGRESS.value,
        )

    async def active_encounters(self, character_id: int) -> list[Encounter]:
        return await self._all(
            select(Encounter)
            .where(
                Encounter.character_id == character_id,
                Encounter.status == EncounterStatus.IN_PROGRESS.value,
            )
            .order_by(Encounter.started_at.desc(), Encounter.id.desc())
        )

    # ---------- Quests ----------

    async def get_quest(self, quest_id: int) -> Quest | None:
        return await self._one(select(Quest).where(Quest.id == quest_id))

    async def available_quests(self, character_id: int, level: int) -> list[Quest]:
        """Quests at or below `level` the character has neither active nor completed."""
        taken = select(CharacterQuest.id).where(
            CharacterQuest.quest_id == Quest.id,
            CharacterQuest.character_id == character_id,
            CharacterQuest.status.in_([QuestStatus.ACTIVE.value, QuestStatus.COMPLETED.value]),
        )
        return await self._all(
            select(Quest)
            .where(Quest.min_level <= level, ~taken.exists())
            .order_by(Quest.min_level, Quest.id)
        )

    async def repeatable_quests(self, character_id: int, level: int) -> list[Quest]:
        """Repeatable quests the character has never taken or has completed."""
        progress = select(CharacterQuest.id).where(
            CharacterQuest.quest_id == Quest.id,
            CharacterQuest.character_id == character_id,
        )
        completed = progress.where(CharacterQuest.status == QuestStatus.COMPLETED.value)
        return await self._all(
            select(Quest)
            .where(
                Quest.is_repeatable.is_(True),
                Quest.min_level <= level,
                or_(~progress.exists(), completed.exists()),
            )
            .order_by(Quest.min_level, Quest.id)
        )

    async def get_progress(
        self, character_id: int, quest_id: int, *, for_update: bool = False
    ) -> CharacterQuest | None:
        return await self._one(
            select(CharacterQuest).where(
                CharacterQuest.character_id == character_id,
                CharacterQuest.quest_id == quest_id,
            ),
            for_update,
        )

    async def create_progress(self, character_id: int, quest: Quest) -> CharacterQuest:
        progress = CharacterQuest(
            character_id=character_id,
            quest=quest,
            status=QuestStatus.ACTIVE.value,
            current_objective_index=0,
            started_at=utcnow(),
            completed_at=None,
        )
        self.session.add(progress)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError("Quest already accepted", "QUEST_ALREADY_ACCEPTED") from exc
        return progress

    async def restart_progress(self, progress: CharacterQuest, from_status: QuestStatus) -> bool:
        """Turn a `from_status` row back into a fresh ACTIVE record."""
        return await self._apply_if(
            progress,
            {
                "status": QuestStatus.ACTIVE.value,
                "current_objective_index": 0,
                "started_at": utcnow(),
                "completed_at": None,
            },
            CharacterQuest.status == from_status.value,
        )

    async def advance_progress(self, progress: CharacterQuest, index: int) -> bool:
        """Complete objective `index` of an active quest. False if someone got there first."""
        return await self._apply_if(
            progress,
            {"current_objective_index": index + 1},
            CharacterQuest.status == QuestStatus.ACTIVE.value,
            CharacterQuest.current_objective_index == index,
        )

    async def complete_progress(self, progress: CharacterQuest, index: int) -> bool:
        return await self._apply_if(
            progress,
            {"status": QuestStatus.COMPLETED.value, "completed_at": utcnow()},
            CharacterQuest.status == QuestStatus.ACTIVE.value,
            CharacterQuest.current_objective_index == index,
        )

    async def abandon_progress(self, progress: CharacterQuest) -> bool:
        return await self._apply_if(
            progress,
            {"status": QuestStatus.ABANDONED.value},
            CharacterQuest.status == QuestStatus.ACTIVE.value,
        )

    async def progress_with_status(self, character_id: int, status: QuestStatus) -> list[CharacterQuest]:
        order = (
            CharacterQuest.completed_at.desc()
            if status is QuestStatus.COMPLETED
            else CharacterQuest.started_at.desc()
        )
        return await self._all(
            select(CharacterQuest)
            .where(CharacterQuest.character_id == character_id, CharacterQuest.status == status.value)
            .order_by(order, CharacterQuest.id.desc())
        )

    # ---------- Items & inventory ----------

    async def get_item(self, item_id: int) -> Item | None:
        return await self._one(select(Item).where(Item.id == item_id))

    async def tradeable_items(self) -> list[Item]:
        return await self._all(
            select(Item).where(Item.is_tradeable.is_(True)).order_by(Item.price, Item.id)
        )

    async def get_inventory_entry(
        self, character_id: int, item_id: int, *, for_update: bool = False
    ) -> InventoryEntry | None:
        return await self._one(
            select(InventoryEntry).where(
                InventoryEntry.character_id == character_id,
                InventoryEntry.item_id == item_id,
            ),
            for_update,
        )

    async def inventory(self, character_id: int, *, equipped_only: bool = False) -> list[InventoryEntry]:
        stmt = select(InventoryEntry).where(InventoryEntry.character_id == character_id)
        if equipped_only:
            stmt = stmt.where(InventoryEntry.is_equipped.is_(True))
        return await self._all(stmt.order_by(InventoryEntry.acquired_at, InventoryEntry.id))

    async def add_to_inventory(self, character_id: int, item: Item, quantity: int = 1) -> InventoryEntry:
        """Create the stack on first acquisition, otherwise grow it."""
        entry = await self.get_inventory_entry(character_id, item.id, for_update=True)
        if entry is not None:
            return await self.update_inventory_entry(entry, InventoryPatch(quantity_delta=quantity))

        entry = InventoryEntry(
            character_id=character_id,
            item=item,
            quantity=quantity,
            is_equipped=False,
            acquired_at=utcnow(),
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def update_inventory_entry(self, entry: InventoryEntry, patch: InventoryPatch) -> InventoryEntry:
        await self._apply(entry, patch.as_values(InventoryEntry))
        return entry

    async def consume_inventory_unit(self, entry: InventoryEntry) -> int:
        """
        Take one unit off a stack and return how many remain.

        The decrement is conditional on stock being left, so a stack cannot be
        spent twice. An emptied stack is deleted.
        """
        consumed = await self._apply_if(
            entry,
            {"quantity": InventoryEntry.quantity - 1},
            InventoryEntry.quantity > 0,
        )
        if not consumed:
            raise NotFoundError("Item not found in inventory", "ITEM_NOT_IN_INVENTORY")
        remaining = entry.quantity
        if remaining <= 0:
            await self.remove_inventory_entry(entry)
            return 0
        return remaining

    async def remove_inventory_entry(self, entry: InventoryEntry) -> None:
        await self.session.execute(delete(InventoryEntry).where(InventoryEntry.id == entry.id))
        self.session.expunge(entry)

    # ---------- Reference data ----------

    async def get_school(self, school_id: int) -> School | None:
        return await self._one(select(School).where(School.id == school_id))

    async def schools(self) -> list[School]:
        return await self._all(select(School).order_by(School.name))

    async def upsert(self, instances: Sequence[Base]) -> int:
        """Insert or update reference rows by primary key."""
        for instance in instances:
            await self.session.merge(instance)
        await self.session.flush()
        return len(instances)
