"""
Server configuration.

Settings are read from the environment so deployments can override them
without touching code. Game balance lives next to each system
(ProgressionConfig, EncounterConfig, CharacterConfig).
"""

import os

# Server settings
HOST = os.getenv("ARITHMANCY_HOST", "127.0.0.1")
PORT = int(os.getenv("ARITHMANCY_PORT", "8000"))

# Database settings
DATABASE_URL = os.getenv("ARITHMANCY_DATABASE_URL", "sqlite+aiosqlite:///./arithmancy.db")
SQL_ECHO = os.getenv("ARITHMANCY_SQL_ECHO", "0").lower() in ("1", "true", "yes")

# Logging
LOG_LEVEL = os.getenv("ARITHMANCY_LOG_LEVEL", "INFO").upper()

# Identity header set by the upstream auth gateway
PLAYER_ID_HEADER = os.getenv("ARITHMANCY_PLAYER_HEADER", "X-Player-Id")

# Optional seed for monster/problem selection (useful for demos and replays)
_seed = os.getenv("ARITHMANCY_RANDOM_SEED")
RANDOM_SEED: int | None = int(_seed) if _seed else None

# Content directories
WORLD_DATA_DIR = os.getenv(
    "ARITHMANCY_WORLD_DATA_DIR",
    os.path.join(os.path.dirname(__file__), "world_data"),
)
