from .engine import GameEngine
from .errors import ConflictError, GameError, InvalidOperationError, NotFoundError

__all__ = [
    "GameEngine",
    "GameError",
    "NotFoundError",
    "ConflictError",
    "InvalidOperationError",
]
