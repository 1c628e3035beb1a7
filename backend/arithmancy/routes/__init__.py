from .characters import router as characters_router
from .game import router as game_router

__all__ = ["characters_router", "game_router"]
