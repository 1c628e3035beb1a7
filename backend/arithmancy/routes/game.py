# backend/arithmancy/routes/game.py
"""
Game API Routes

Provides REST API endpoints for the game loop of one character:
- Encounters (start, answer, flee)
- Quests (discover, accept, complete objectives, abandon)
- Inventory (list, use, equip) and the tradeable item catalog
- Experience calculator

Every character-scoped route checks that the character belongs to the
requesting player. Engine errors are mapped to status codes by the
application's GameError handler.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from ..engine import GameEngine
from ..engine.systems import experience_summary
from ..logging import get_logger
from ..models import Character, Encounter
from .deps import get_game_engine, get_owned_character, get_owned_encounter
from .schemas import (EncounterResponse, EncounterResultResponse,
                      ExperienceSummaryResponse, FleeResponse,
                      InventoryEntryResponse, ItemActionRequest,
                      ItemResponse, ItemUseResponse, MonsterResponse,
                      ObjectiveResultResponse, ProblemResponse,
                      QuestProgressResponse, QuestResponse,
                      SolveEncounterRequest, StartEncounterRequest)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/game", tags=["game"])


# ============================================================================
# Encounters
# ============================================================================


@router.post(
    "/characters/{character_id}/encounters",
    response_model=EncounterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_encounter(
    request: StartEncounterRequest | None = None,
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    """
    Start an encounter.

    Without a monster_id, a monster suited to the character's level is
    picked at random. A problem is always picked at random.
    """
    monster_id = request.monster_id if request is not None else None
    return await engine.encounters.start(character.id, monster_id)


@router.post("/encounters/{encounter_id}/solve", response_model=EncounterResultResponse)
async def solve_encounter(
    request: SolveEncounterRequest,
    encounter: Encounter = Depends(get_owned_encounter),
    engine: GameEngine = Depends(get_game_engine),
):
    result = await engine.encounters.solve(encounter.id, request.answer, request.time_taken)
    return EncounterResultResponse(
        success=result.success,
        experience_gained=result.experience_gained,
        gold_gained=result.gold_gained,
        level_up=result.level_up,
        encounter=result.encounter,
        character=result.encounter.character,
    )


@router.post("/encounters/{encounter_id}/flee", response_model=FleeResponse)
async def flee_encounter(
    encounter: Encounter = Depends(get_owned_encounter),
    engine: GameEngine = Depends(get_game_engine),
):
    fled = await engine.encounters.flee(encounter.id)
    return FleeResponse(encounter=fled, character=fled.character)


@router.get(
    "/characters/{character_id}/encounters/active",
    response_model=List[EncounterResponse],
)
async def active_encounters(
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.encounters.active_encounters(character.id)


@router.get("/characters/{character_id}/monsters", response_model=List[MonsterResponse])
async def suitable_monsters(
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.encounters.suitable_monsters(character.id)


@router.get("/characters/{character_id}/problems", response_model=List[ProblemResponse])
async def suitable_problems(
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.encounters.suitable_problems(character.id)


# ============================================================================
# Quests
# ============================================================================


@router.get("/characters/{character_id}/quests", response_model=List[QuestResponse])
async def available_quests(
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.quests.available(character.id)


@router.get(
    "/characters/{character_id}/quests/repeatable",
    response_model=List[QuestResponse],
)
async def repeatable_quests(
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.quests.repeatable(character.id)


@router.get(
    "/characters/{character_id}/quests/active",
    response_model=List[QuestProgressResponse],
)
async def active_quests(
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.quests.active_quests(character.id)


@router.get(
    "/characters/{character_id}/quests/completed",
    response_model=List[QuestProgressResponse],
)
async def completed_quests(
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.quests.completed_quests(character.id)


@router.post(
    "/characters/{character_id}/quests/{quest_id}/accept",
    response_model=QuestProgressResponse,
    status_code=status.HTTP_201_CREATED,
)
async def accept_quest(
    quest_id: int,
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.quests.accept(character.id, quest_id)


@router.post(
    "/characters/{character_id}/quests/{quest_id}/objectives/{objective_id}/complete",
    response_model=ObjectiveResultResponse,
)
async def complete_objective(
    quest_id: int,
    objective_id: int,
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    result = await engine.quests.complete_objective(character.id, quest_id, objective_id)
    return ObjectiveResultResponse.model_validate(result)


@router.post(
    "/characters/{character_id}/quests/{quest_id}/abandon",
    response_model=QuestProgressResponse,
)
async def abandon_quest(
    quest_id: int,
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.quests.abandon(character.id, quest_id)


# ============================================================================
# Inventory
# ============================================================================


@router.get("/items", response_model=List[ItemResponse])
async def list_items(engine: GameEngine = Depends(get_game_engine)):
    """Tradeable items, cheapest first."""
    return await engine.inventory.catalog()


@router.get(
    "/characters/{character_id}/inventory",
    response_model=List[InventoryEntryResponse],
)
async def list_inventory(
    equipped: bool = Query(False, description="Only equipped items"),
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    if equipped:
        return await engine.inventory.equipped_items(character.id)
    return await engine.inventory.inventory(character.id)


@router.post("/characters/{character_id}/inventory/use", response_model=ItemUseResponse)
async def use_item(
    request: ItemActionRequest,
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    result = await engine.inventory.use_item(character.id, request.item_id)
    return ItemUseResponse.model_validate(result)


@router.post(
    "/characters/{character_id}/inventory/equip",
    response_model=InventoryEntryResponse,
)
async def toggle_equip(
    request: ItemActionRequest,
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.inventory.toggle_equip(character.id, request.item_id)


# ============================================================================
# Experience
# ============================================================================


@router.get("/experience/calculate", response_model=ExperienceSummaryResponse)
async def calculate_experience(level: int = Query(..., ge=1, le=100)):
    """Experience thresholds around a level."""
    return experience_summary(level)
