# backend/arithmancy/seed.py
"""
Reference data loader.

Reads schools, monsters, problems, items and quests (with nested objectives)
from YAML files in a world data directory and upserts them by id, so running
the seed twice leaves the database unchanged.

Layout:
    world_data/
        schools.yaml    schools: [...]
        items.yaml      items: [...]
        monsters.yaml   monsters: [...]
        problems.yaml   problems: [...]
        quests.yaml     quests: [{..., objectives: [...]}]
"""

from pathlib import Path
from typing import Any

import yaml
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from . import config
from .engine.repository import GameRepository
from .logging import get_logger
from .models import Base, Item, Monster, Problem, Quest, QuestObjective, School

logger = get_logger(__name__)

# Load order matters: quests reference items
SECTIONS = ("schools", "items", "monsters", "problems", "quests")


class SeedDataError(ValueError):
    """A world data file is missing required fields or is malformed."""


def _read_section(world_data_dir: Path, section: str) -> list[dict[str, Any]]:
    path = world_data_dir / f"{section}.yaml"
    if not path.exists():
        logger.debug("No %s file in %s", section, world_data_dir)
        return []

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    entries = data.get(section, []) if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise SeedDataError(f"{path}: expected a '{section}' list")
    for entry in entries:
        if not isinstance(entry, dict) or "id" not in entry:
            raise SeedDataError(f"{path}: every entry needs an 'id'")
    return entries


def _build(model: type[Base], entry: dict[str, Any], path: str) -> Base:
    columns = set(model.__table__.columns.keys())
    unknown = set(entry) - columns
    if unknown:
        raise SeedDataError(f"{path}: unknown fields {sorted(unknown)}")
    return model(**entry)


def build_quest(entry: dict[str, Any]) -> Quest:
    entry = dict(entry)
    objectives = entry.pop("objectives", []) or []
    quest = _build(Quest, entry, f"quest {entry['id']}")
    quest.objectives = [
        _build(QuestObjective, {**objective, "quest_id": entry["id"]}, f"quest {entry['id']}")
        for objective in objectives
    ]
    return quest


def load_world_data(world_data_dir: str | Path | None = None) -> dict[str, list[Base]]:
    """Parse every section into (unsaved) model instances."""
    world_data_dir = Path(world_data_dir or config.WORLD_DATA_DIR)
    if not world_data_dir.is_dir():
        raise SeedDataError(f"World data directory not found: {world_data_dir}")

    models = {"schools": School, "items": Item, "monsters": Monster, "problems": Problem}
    loaded: dict[str, list[Base]] = {}
    for section in SECTIONS:
        entries = _read_section(world_data_dir, section)
        if section == "quests":
            loaded[section] = [build_quest(entry) for entry in entries]
        else:
            loaded[section] = [_build(models[section], entry, section) for entry in entries]
    return loaded


async def seed_database(
    session_factory: async_sessionmaker[AsyncSession],
    world_data_dir: str | Path | None = None,
) -> dict[str, int]:
    """
    Upsert all reference data in one transaction.

    Returns the number of rows written per section.
    """
    world = load_world_data(world_data_dir)
    counts: dict[str, int] = {}

    async with session_factory() as session:
        async with session.begin():
            repo = GameRepository(session)
            for section in SECTIONS:
                counts[section] = await repo.upsert(world[section])

    logger.info(
        "Seeded %d schools, %d items, %d monsters, %d problems, %d quests",
        counts["schools"], counts["items"], counts["monsters"],
        counts["problems"], counts["quests"],
    )
    return counts
