"""
Integration tests against the bundled starter world.

Seeds the YAML world data into a fresh database and plays through the
first encounter and the first quest with the real reference rows.
"""

import pytest

from arithmancy.models import EncounterStatus, QuestStatus
from arithmancy.seed import seed_database
from tests.conftest import PLAYER_ID


@pytest.fixture
async def seeded(session_factory):
    return await seed_database(session_factory)


@pytest.mark.integration
async def test_seed_loads_every_section(seeded):
    assert seeded == {"schools": 5, "items": 7, "monsters": 6, "problems": 8, "quests": 4}


@pytest.mark.integration
async def test_seeding_twice_does_not_duplicate(session_factory, seeded, first_choice_engine):
    again = await seed_database(session_factory)

    assert again == seeded
    async with first_choice_engine.ctx.transaction() as repo:
        monsters = await repo.monsters_for_levels(1, 100)
    assert len(monsters) == 6


@pytest.mark.integration
async def test_new_character_fights_and_finishes_first_quest(seeded, first_choice_engine):
    engine = first_choice_engine
    hero = await engine.characters.create(PLAYER_ID, "Hypatia")

    # Level 1 meets monsters of difficulty 1..3 and problems of difficulty 1..2
    monsters = await engine.encounters.suitable_monsters(hero.id)
    assert {m.difficulty_level for m in monsters} <= {1, 2, 3}
    problems = await engine.encounters.suitable_problems(hero.id)
    assert {p.difficulty_level for p in problems} <= {1, 2}

    encounter = await engine.encounters.start(hero.id)
    assert encounter.monster.name == "Zero Absoluto"

    result = await engine.encounters.solve(encounter.id, encounter.problem.answer)
    assert result.success is True
    assert result.encounter.status == EncounterStatus.WON.value
    assert result.experience_gained == 15
    assert result.gold_gained == 5

    available = await engine.quests.available(hero.id)
    assert [q.id for q in available] == [1]

    quest = available[0]
    await engine.quests.accept(hero.id, quest.id)
    completed = await engine.quests.complete_objective(hero.id, quest.id, quest.objectives[0].id)

    assert completed.quest_completed is True
    assert completed.progress.status == QuestStatus.COMPLETED.value
    assert completed.item_reward.name == "Crivo de Eratóstenes"

    character = await engine.characters.get(hero.id)
    assert character.experience_points == 65
    assert character.gold == 130
    [entry] = await engine.inventory.inventory(hero.id)
    assert entry.item.id == 1

    stats = await engine.characters.stats(hero.id)
    assert (stats.won_encounters, stats.completed_quests, stats.total_items) == (1, 1, 1)


@pytest.mark.integration
async def test_starter_schools_and_shop(seeded, first_choice_engine):
    engine = first_choice_engine

    schools = await engine.characters.schools()
    assert [s.name for s in schools] == [
        "Algebristas", "Calculistas", "Estatísticos", "Geômetras", "Primordiais",
    ]

    catalog = await engine.inventory.catalog()
    assert [item.id for item in catalog] == [4, 6, 1, 2, 8, 7]
    assert all(item.is_tradeable for item in catalog)

    hero = await engine.characters.create(PLAYER_ID, "Euclides", school_id=2)
    assert hero.school_id == 2
    # Schools do not change starting stats
    assert (hero.current_health, hero.gold) == (100, 100)
