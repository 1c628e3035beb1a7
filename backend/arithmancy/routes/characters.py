# backend/arithmancy/routes/characters.py
"""
Character API Routes

- Character creation and listing for the requesting player
- Name availability and per-player limits
- Character sheet, stats, rename/school change and deletion
- Schools and leaderboard
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from ..engine import GameEngine
from ..logging import get_logger
from ..models import Character
from .deps import PlayerSession, get_game_engine, get_owned_character, get_player_session
from .schemas import (CharacterCountResponse, CharacterLimitsResponse,
                      CharacterResponse, CharacterStatsResponse,
                      CheckNameRequest, CreateCharacterRequest,
                      LeaderboardEntry, NameAvailabilityResponse,
                      SchoolResponse, UpdateCharacterRequest)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/game", tags=["characters"])


@router.post(
    "/characters",
    response_model=CharacterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_character(
    request: CreateCharacterRequest,
    session: PlayerSession = Depends(get_player_session),
    engine: GameEngine = Depends(get_game_engine),
):
    """
    Create a new character for the requesting player.

    Characters start at level 1 with 100 health and 100 gold, whatever
    their school.
    """
    return await engine.characters.create(session.player_id, request.name, request.school_id)


@router.get("/characters", response_model=List[CharacterResponse])
async def list_characters(
    session: PlayerSession = Depends(get_player_session),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.characters.list_for_player(session.player_id)


# Fixed paths are registered before /characters/{character_id}


@router.get("/characters/count", response_model=CharacterCountResponse)
async def count_characters(
    session: PlayerSession = Depends(get_player_session),
    engine: GameEngine = Depends(get_game_engine),
):
    limits = await engine.characters.limits(session.player_id)
    return CharacterCountResponse(
        count=limits.current,
        max_limit=limits.maximum,
        can_create_more=limits.can_create_more,
        remaining=limits.remaining,
    )


@router.get("/characters/limits", response_model=CharacterLimitsResponse)
async def character_limits(
    session: PlayerSession = Depends(get_player_session),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.characters.limits(session.player_id)


@router.post("/characters/check-name", response_model=NameAvailabilityResponse)
async def check_character_name(
    request: CheckNameRequest,
    session: PlayerSession = Depends(get_player_session),
    engine: GameEngine = Depends(get_game_engine),
):
    """Whether the name is free among the player's characters."""
    available = await engine.characters.check_name(
        session.player_id, request.name, request.exclude_character_id
    )
    return NameAvailabilityResponse(name=request.name.strip(), available=available)


@router.get("/characters/{character_id}", response_model=CharacterResponse)
async def get_character(character: Character = Depends(get_owned_character)):
    return character


@router.patch("/characters/{character_id}", response_model=CharacterResponse)
async def update_character(
    request: UpdateCharacterRequest,
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    return await engine.characters.update(
        character.id, name=request.name, school_id=request.school_id
    )


@router.delete("/characters/{character_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_character(
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    """Delete the character and everything it owns."""
    await engine.characters.delete(character.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/characters/{character_id}/stats", response_model=CharacterStatsResponse)
async def get_character_stats(
    character: Character = Depends(get_owned_character),
    engine: GameEngine = Depends(get_game_engine),
):
    stats = await engine.characters.stats(character.id)
    return CharacterStatsResponse.model_validate(stats)


@router.get("/schools", response_model=List[SchoolResponse])
async def list_schools(engine: GameEngine = Depends(get_game_engine)):
    return await engine.characters.schools()


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def leaderboard(
    limit: int = Query(10, ge=1, le=100),
    session: PlayerSession = Depends(get_player_session),
    engine: GameEngine = Depends(get_game_engine),
):
    """Top characters by level, then experience."""
    characters = await engine.characters.leaderboard(limit)
    return [
        LeaderboardEntry(
            rank=rank,
            id=c.id,
            name=c.name,
            level=c.level,
            experience_points=c.experience_points,
        )
        for rank, c in enumerate(characters, start=1)
    ]
