# backend/arithmancy/routes/deps.py
"""
Shared route dependencies.

Authentication happens upstream: the gateway verifies the player's token and
forwards the player id in a header (config.PLAYER_ID_HEADER). Handlers get
it as an explicit PlayerSession and never read global state.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Path, Request, status

from .. import config
from ..engine import GameEngine
from ..models import Character, Encounter


@dataclass(frozen=True)
class PlayerSession:
    """The authenticated player making the request."""
    player_id: str


def get_game_engine(request: Request) -> GameEngine:
    """Get the GameEngine from app.state."""
    engine = getattr(request.app.state, "game_engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Game engine not initialized"
        )
    return engine


def get_player_session(request: Request) -> PlayerSession:
    player_id = request.headers.get(config.PLAYER_ID_HEADER, "").strip()
    if not player_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing player identity"
        )
    return PlayerSession(player_id=player_id)


async def get_owned_character(
    character_id: int = Path(..., gt=0),
    session: PlayerSession = Depends(get_player_session),
    engine: GameEngine = Depends(get_game_engine),
) -> Character:
    """Load a character and make sure it belongs to the requesting player."""
    character = await engine.characters.get(character_id)
    if character.player_id != session.player_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This character does not belong to you"
        )
    return character


async def get_owned_encounter(
    encounter_id: int = Path(..., gt=0),
    session: PlayerSession = Depends(get_player_session),
    engine: GameEngine = Depends(get_game_engine),
) -> Encounter:
    """Load an encounter and make sure its character belongs to the requesting player."""
    encounter = await engine.encounters.get(encounter_id)
    if encounter.character.player_id != session.player_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This encounter does not belong to you"
        )
    return encounter
