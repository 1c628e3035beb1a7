# backend/arithmancy/routes/schemas.py
"""
Request and response bodies for the game API.

Response models read straight from ORM rows and engine result dataclasses
(from_attributes). Problems are never serialized with their answer.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Requests
# ============================================================================


class CreateCharacterRequest(BaseModel):
    """Create character request body. Name rules are enforced by the engine."""
    name: str = Field(..., min_length=1, max_length=100)
    school_id: Optional[int] = Field(None, gt=0)


class UpdateCharacterRequest(BaseModel):
    """Fields left out are not changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    school_id: Optional[int] = Field(None, gt=0)


class CheckNameRequest(BaseModel):
    name: str = Field(..., max_length=100)
    exclude_character_id: Optional[int] = Field(None, gt=0)


class StartEncounterRequest(BaseModel):
    """Start encounter request body. Omit monster_id for a random monster."""
    monster_id: Optional[int] = Field(None, gt=0)


class SolveEncounterRequest(BaseModel):
    """Answer submission for an encounter."""
    model_config = ConfigDict(str_strip_whitespace=True)

    answer: str = Field(..., min_length=1, max_length=255)
    time_taken: Optional[int] = Field(None, ge=0, le=3600)


class ItemActionRequest(BaseModel):
    item_id: int = Field(..., gt=0)


# ============================================================================
# Reference data
# ============================================================================


class SchoolResponse(ORMModel):
    id: int
    name: str
    description: Optional[str]
    axiom: Optional[str]
    health_bonus: int
    starting_gold: int


class MonsterResponse(ORMModel):
    id: int
    name: str
    description: Optional[str]
    mathematical_concept: Optional[str]
    base_health: int
    difficulty_level: int
    experience_reward: int
    gold_reward: int


class ProblemResponse(ORMModel):
    """Problem as shown to the player (no answer)."""
    id: int
    description: str
    problem_type: Optional[str]
    difficulty_level: int
    hint_text: Optional[str]
    time_limit_seconds: Optional[int]
    experience_reward: int


class ItemResponse(ORMModel):
    id: int
    name: str
    description: Optional[str]
    type: str
    health_bonus: int
    price: int
    is_tradeable: bool
    is_consumable: bool


class ObjectiveResponse(ORMModel):
    id: int
    description: Optional[str]
    type: str
    target_quantity: int
    order_index: int


class QuestResponse(ORMModel):
    id: int
    title: str
    description: Optional[str]
    min_level: int
    experience_reward: int
    gold_reward: int
    is_repeatable: bool
    item_reward: Optional[ItemResponse]
    objectives: List[ObjectiveResponse]


# ============================================================================
# Characters
# ============================================================================


class CharacterResponse(ORMModel):
    id: int
    name: str
    school_id: Optional[int]
    level: int
    experience_points: int
    max_health: int
    current_health: int
    gold: int
    created_at: datetime


class NameAvailabilityResponse(BaseModel):
    name: str
    available: bool


class CharacterCountResponse(BaseModel):
    count: int
    max_limit: int
    can_create_more: bool
    remaining: int


class CharacterLimitsResponse(ORMModel):
    current: int
    maximum: int
    can_create_more: bool
    remaining: int
    percentage_used: int


class CharacterStatsResponse(ORMModel):
    character: CharacterResponse
    total_items: int
    completed_quests: int
    correct_problems: int
    won_encounters: int


class LeaderboardEntry(BaseModel):
    rank: int
    id: int
    name: str
    level: int
    experience_points: int


class LevelUpResponse(ORMModel):
    leveled_up: bool
    old_level: int
    new_level: Optional[int]
    experience_gained: int
    total_experience: int
    health_increase: Optional[int]


class ExperienceSummaryResponse(BaseModel):
    current_level: int
    experience_for_current_level: int
    experience_for_next_level: int
    experience_needed_to_level_up: int


# ============================================================================
# Encounters
# ============================================================================


class EncounterResponse(ORMModel):
    id: int
    character_id: int
    status: str
    monster_current_health: int
    character_health_at_start: int
    started_at: datetime
    completed_at: Optional[datetime]
    monster: MonsterResponse
    problem: ProblemResponse


class EncounterResultResponse(ORMModel):
    success: bool
    experience_gained: int
    gold_gained: int
    level_up: Optional[LevelUpResponse]
    encounter: EncounterResponse
    character: CharacterResponse


class FleeResponse(ORMModel):
    encounter: EncounterResponse
    character: CharacterResponse


# ============================================================================
# Quests
# ============================================================================


class QuestProgressResponse(ORMModel):
    id: int
    quest_id: int
    status: str
    current_objective_index: int
    started_at: datetime
    completed_at: Optional[datetime]
    quest: QuestResponse


class ObjectiveResultResponse(ORMModel):
    quest_completed: bool
    objective_completed: bool
    experience_gained: int
    gold_gained: int
    item_reward: Optional[ItemResponse]
    level_up: Optional[LevelUpResponse]
    progress: QuestProgressResponse


# ============================================================================
# Inventory
# ============================================================================


class InventoryEntryResponse(ORMModel):
    id: int
    item: ItemResponse
    quantity: int
    is_equipped: bool
    acquired_at: datetime


class ItemUseResponse(ORMModel):
    item_consumed: bool
    remaining_quantity: int
    effect: Optional[str]
    health_restored: int
