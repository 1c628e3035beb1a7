# backend/arithmancy/models.py
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (Boolean, DateTime, ForeignKey, Integer, MetaData,
                        String, Text, UniqueConstraint)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Naming convention for constraints (required for batch migrations)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=convention)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EncounterStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    WON = "WON"
    LOST = "LOST"
    FLED = "FLED"


class QuestStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    ABANDONED = "ABANDONED"


class ObjectiveType(str, Enum):
    SOLVE = "SOLVE"
    DEFEAT = "DEFEAT"
    FETCH = "FETCH"
    TALK = "TALK"


class ItemType:
    """Item categories as stored in reference data. Only two carry behavior."""
    CONSUMABLE = "Consumível"  # heals, consumed on use
    EQUIPMENT = "Equipamento"  # can be equipped/unequipped
    ARTIFACT = "Artefato"  # inert


class School(Base):
    """Immutable reference data. A character may belong to one school."""
    __tablename__ = "schools"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    axiom: Mapped[str | None] = mapped_column(String(160), nullable=True)
    health_bonus: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    starting_gold: Mapped[int] = mapped_column(Integer, nullable=False, default=100)


class Character(Base):
    __tablename__ = "characters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Owner identity as supplied by the auth gateway
    player_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    school_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("schools.id", ondelete="SET NULL"), nullable=True
    )

    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    experience_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_health: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    current_health: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    gold: Mapped[int] = mapped_column(Integer, nullable=False, default=100)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    school: Mapped[School | None] = relationship(lazy="selectin")

    __table_args__ = (UniqueConstraint("player_id", "name", name="uq_characters_player_name"),)


class Monster(Base):
    """Immutable reference data."""
    __tablename__ = "monsters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    mathematical_concept: Mapped[str | None] = mapped_column(String(120), nullable=True)

    base_health: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    difficulty_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, index=True)
    experience_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gold_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Problem(Base):
    """Immutable reference data. `answer` is never sent to clients."""
    __tablename__ = "problems"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    problem_type: Mapped[str | None] = mapped_column(String(80), nullable=True)
    answer: Mapped[str] = mapped_column(String(255), nullable=False)

    difficulty_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, index=True)
    hint_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    time_limit_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)  # advisory only
    experience_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Item(Base):
    """Immutable reference data."""
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    type: Mapped[str] = mapped_column(String(40), nullable=False)  # see ItemType
    health_bonus: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_tradeable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_consumable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Quest(Base):
    """Immutable reference data with an ordered list of objectives."""
    __tablename__ = "quests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(160), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    min_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    experience_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    gold_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=25)
    item_reward_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("items.id", ondelete="SET NULL"), nullable=True
    )
    is_repeatable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    item_reward: Mapped[Item | None] = relationship(lazy="selectin")
    objectives: Mapped[list["QuestObjective"]] = relationship(
        lazy="selectin",
        order_by="QuestObjective.order_index",
        cascade="all, delete-orphan",
    )


class QuestObjective(Base):
    __tablename__ = "quest_objectives"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quest_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=ObjectiveType.SOLVE.value)
    target_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Encounter(Base):
    """One combat instance: a character answering one problem against one monster."""
    __tablename__ = "encounters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    character_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True
    )
    monster_id: Mapped[int] = mapped_column(Integer, ForeignKey("monsters.id"), nullable=False)
    problem_id: Mapped[int] = mapped_column(Integer, ForeignKey("problems.id"), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EncounterStatus.IN_PROGRESS.value, index=True
    )
    monster_current_health: Mapped[int] = mapped_column(Integer, nullable=False)
    character_health_at_start: Mapped[int] = mapped_column(Integer, nullable=False)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    character: Mapped[Character] = relationship(lazy="selectin")
    monster: Mapped[Monster] = relationship(lazy="selectin")
    problem: Mapped[Problem] = relationship(lazy="selectin")

    @property
    def is_finished(self) -> bool:
        return self.status != EncounterStatus.IN_PROGRESS.value


class ProblemAttempt(Base):
    """Append-only log of answer submissions."""
    __tablename__ = "problem_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    character_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True
    )
    problem_id: Mapped[int] = mapped_column(Integer, ForeignKey("problems.id"), nullable=False, index=True)
    user_answer: Mapped[str] = mapped_column(String(255), nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    time_taken_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    attempted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class CharacterQuest(Base):
    """A character's progress on one quest. One row per (character, quest)."""
    __tablename__ = "character_quests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    character_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quest_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=QuestStatus.ACTIVE.value)
    current_objective_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    quest: Mapped[Quest] = relationship(lazy="selectin")

    __table_args__ = (UniqueConstraint("character_id", "quest_id", name="uq_character_quests_pair"),)


class InventoryEntry(Base):
    """Stack of one item held by one character."""
    __tablename__ = "inventory_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    character_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_equipped: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    acquired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    item: Mapped[Item] = relationship(lazy="selectin")

    __table_args__ = (UniqueConstraint("character_id", "item_id", name="uq_inventory_entries_pair"),)
