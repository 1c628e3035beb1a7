"""
Engine error taxonomy.

Systems raise these instead of transport-specific errors; the HTTP layer
maps each kind to a status code (see arithmancy.main).

- NotFoundError: a referenced entity does not exist
- ConflictError: a state transition that is not allowed from the current state
- InvalidOperationError: a request the rules reject (wrong objective, item
  cannot be used that way, nothing suitable for the character's level, ...)
"""


class GameError(Exception):
    """Base class for all engine errors. Carries a stable machine code."""

    default_code = "GAME_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class NotFoundError(GameError):
    default_code = "NOT_FOUND"


class ConflictError(GameError):
    default_code = "CONFLICT"


class InvalidOperationError(GameError):
    default_code = "INVALID_OPERATION"
