"""
Tests for EncounterSystem: selection, answer checking, rewards and penalties.
"""

import pytest

from arithmancy.engine.errors import ConflictError, InvalidOperationError, NotFoundError
from arithmancy.models import EncounterStatus
from tests.fixtures.builders import CharacterBuilder, MonsterBuilder, ProblemBuilder


async def _attempts(engine, character_id):
    async with engine.ctx.transaction() as repo:
        return await repo.attempts_for_character(character_id)


async def _character(engine, character_id):
    return await engine.characters.get(character_id)


@pytest.fixture
async def arena(persist):
    """A level 1 character, a monster and a problem it can meet."""
    hero, monster, problem = await persist(
        CharacterBuilder().with_gold(50).build(),
        MonsterBuilder().with_rewards(experience=30, gold=12).build(),
        ProblemBuilder().with_answer("24").with_experience(10).build(),
    )
    return hero, monster, problem


# ============================================================================
# Start
# ============================================================================


@pytest.mark.systems
async def test_start_creates_in_progress_encounter(game_engine, arena):
    hero, monster, problem = arena

    encounter = await game_engine.encounters.start(hero.id)

    assert encounter.status == EncounterStatus.IN_PROGRESS.value
    assert encounter.monster.id == monster.id
    assert encounter.problem.id == problem.id
    assert encounter.character.id == hero.id
    assert encounter.monster_current_health == monster.base_health
    assert encounter.character_health_at_start == 100
    assert encounter.completed_at is None


@pytest.mark.systems
async def test_start_only_picks_monsters_in_level_window(last_choice_engine, persist):
    hero = await persist(CharacterBuilder().with_level(1).build())
    await persist(
        MonsterBuilder().with_name("Easy").with_difficulty(1).build(),
        MonsterBuilder().with_name("Hard").with_difficulty(3).build(),
        MonsterBuilder().with_name("Too Hard").with_difficulty(4).build(),
        ProblemBuilder().build(),
    )

    suitable = await last_choice_engine.encounters.suitable_monsters(hero.id)
    encounter = await last_choice_engine.encounters.start(hero.id)

    assert [m.name for m in suitable] == ["Easy", "Hard"]
    assert encounter.monster.name == "Hard"


@pytest.mark.systems
async def test_start_only_picks_problems_in_level_window(last_choice_engine, persist):
    hero = await persist(CharacterBuilder().with_level(3).build())
    await persist(
        MonsterBuilder().with_difficulty(3).build(),
        ProblemBuilder().with_difficulty(1).build(),
        ProblemBuilder().with_difficulty(2).with_answer("two").build(),
        ProblemBuilder().with_difficulty(4).with_answer("four").build(),
        ProblemBuilder().with_difficulty(5).with_answer("five").build(),
    )

    suitable = await last_choice_engine.encounters.suitable_problems(hero.id)
    encounter = await last_choice_engine.encounters.start(hero.id)

    assert [p.difficulty_level for p in suitable] == [2, 4]
    assert encounter.problem.difficulty_level == 4


@pytest.mark.systems
async def test_start_without_suitable_monster(game_engine, persist):
    hero = await persist(CharacterBuilder().build())
    await persist(MonsterBuilder().with_difficulty(9).build(), ProblemBuilder().build())

    with pytest.raises(InvalidOperationError) as exc_info:
        await game_engine.encounters.start(hero.id)

    assert exc_info.value.code == "NO_SUITABLE_MONSTER"


@pytest.mark.systems
async def test_start_without_suitable_problem(game_engine, persist):
    hero = await persist(CharacterBuilder().build())
    await persist(MonsterBuilder().build(), ProblemBuilder().with_difficulty(9).build())

    with pytest.raises(InvalidOperationError) as exc_info:
        await game_engine.encounters.start(hero.id)

    assert exc_info.value.code == "NO_SUITABLE_PROBLEM"


@pytest.mark.systems
async def test_start_with_explicit_monster_ignores_level_window(game_engine, persist):
    hero = await persist(CharacterBuilder().build())
    boss, _ = await persist(
        MonsterBuilder().with_name("Boss").with_difficulty(9).build(),
        ProblemBuilder().build(),
    )

    encounter = await game_engine.encounters.start(hero.id, monster_id=boss.id)

    assert encounter.monster.name == "Boss"


@pytest.mark.systems
async def test_start_with_unknown_monster(game_engine, arena):
    hero, _, _ = arena

    with pytest.raises(NotFoundError) as exc_info:
        await game_engine.encounters.start(hero.id, monster_id=999)

    assert exc_info.value.code == "MONSTER_NOT_FOUND"


@pytest.mark.systems
async def test_start_for_unknown_character(game_engine, arena):
    with pytest.raises(NotFoundError) as exc_info:
        await game_engine.encounters.start(999)

    assert exc_info.value.code == "CHARACTER_NOT_FOUND"


# ============================================================================
# Solve
# ============================================================================


@pytest.mark.systems
async def test_correct_answer_wins_and_grants_rewards(game_engine, arena):
    hero, _, problem = arena
    encounter = await game_engine.encounters.start(hero.id)

    result = await game_engine.encounters.solve(encounter.id, " 24 ", time_taken=12)

    assert result.success is True
    assert result.experience_gained == 40
    assert result.gold_gained == 12
    assert result.level_up is not None and result.level_up.leveled_up is False
    assert result.encounter.status == EncounterStatus.WON.value
    assert result.encounter.completed_at is not None

    updated = await _character(game_engine, hero.id)
    assert updated.experience_points == 40
    assert updated.gold == 62

    attempts = await _attempts(game_engine, hero.id)
    assert len(attempts) == 1
    assert attempts[0].is_correct is True
    assert attempts[0].problem_id == problem.id
    assert attempts[0].user_answer == " 24 "
    assert attempts[0].time_taken_seconds == 12


@pytest.mark.systems
async def test_answers_compare_case_insensitively(game_engine, persist):
    hero = await persist(CharacterBuilder().build())
    await persist(MonsterBuilder().build(), ProblemBuilder().with_answer("Pi").build())
    encounter = await game_engine.encounters.start(hero.id)

    result = await game_engine.encounters.solve(encounter.id, "PI")

    assert result.success is True


@pytest.mark.systems
async def test_wrong_answer_loses_a_quarter_of_max_health(game_engine, arena):
    hero, _, _ = arena
    encounter = await game_engine.encounters.start(hero.id)

    result = await game_engine.encounters.solve(encounter.id, "25")

    assert result.success is False
    assert result.experience_gained == 0
    assert result.gold_gained == 0
    assert result.level_up is None
    assert result.encounter.status == EncounterStatus.LOST.value
    assert result.encounter.completed_at is not None

    updated = await _character(game_engine, hero.id)
    assert updated.current_health == 75
    assert updated.gold == 50
    assert updated.experience_points == 0

    attempts = await _attempts(game_engine, hero.id)
    assert [a.is_correct for a in attempts] == [False]


@pytest.mark.systems
async def test_losing_never_drops_health_below_one(game_engine, persist):
    hero = await persist(CharacterBuilder().with_health(10, max_health=100).build())
    await persist(MonsterBuilder().build(), ProblemBuilder().build())
    encounter = await game_engine.encounters.start(hero.id)

    await game_engine.encounters.solve(encounter.id, "wrong")

    updated = await _character(game_engine, hero.id)
    assert updated.current_health == 1


@pytest.mark.systems
async def test_late_answer_is_still_scored(game_engine, persist):
    hero = await persist(CharacterBuilder().build())
    await persist(MonsterBuilder().build(), ProblemBuilder().with_time_limit(30).build())
    encounter = await game_engine.encounters.start(hero.id)

    result = await game_engine.encounters.solve(encounter.id, "24", time_taken=300)

    assert result.success is True


@pytest.mark.systems
async def test_winning_can_level_up(game_engine, persist):
    hero = await persist(CharacterBuilder().with_experience(270).build())
    await persist(
        MonsterBuilder().with_rewards(experience=30, gold=0).build(),
        ProblemBuilder().with_experience(10).build(),
    )
    encounter = await game_engine.encounters.start(hero.id)

    result = await game_engine.encounters.solve(encounter.id, "24")

    assert result.level_up.leveled_up is True
    assert result.level_up.new_level == 2
    updated = await _character(game_engine, hero.id)
    assert updated.level == 2
    assert updated.experience_points == 310
    assert updated.max_health == 120
    assert updated.current_health == 120


@pytest.mark.systems
async def test_finished_encounter_cannot_be_solved_again(game_engine, arena):
    hero, _, _ = arena
    encounter = await game_engine.encounters.start(hero.id)
    await game_engine.encounters.solve(encounter.id, "24")

    with pytest.raises(ConflictError) as exc_info:
        await game_engine.encounters.solve(encounter.id, "24")

    assert exc_info.value.code == "ENCOUNTER_ALREADY_FINISHED"
    # No second attempt and no second reward
    assert len(await _attempts(game_engine, hero.id)) == 1
    assert (await _character(game_engine, hero.id)).gold == 62


@pytest.mark.systems
async def test_failed_reward_rolls_back_the_whole_solve(game_engine, arena, monkeypatch):
    hero, _, _ = arena
    encounter = await game_engine.encounters.start(hero.id)

    async def broken_apply_experience(repo, character, amount):
        raise RuntimeError("progression unavailable")

    monkeypatch.setattr(game_engine.progression, "apply_experience", broken_apply_experience)

    with pytest.raises(RuntimeError):
        await game_engine.encounters.solve(encounter.id, "24")

    # Attempt, gold and status were written before the failure and are all undone
    assert await _attempts(game_engine, hero.id) == []
    updated = await _character(game_engine, hero.id)
    assert (updated.gold, updated.experience_points) == (50, 0)
    reloaded = await game_engine.encounters.get(encounter.id)
    assert reloaded.status == EncounterStatus.IN_PROGRESS.value
    assert reloaded.completed_at is None


@pytest.mark.systems
async def test_solve_unknown_encounter(game_engine):
    with pytest.raises(NotFoundError) as exc_info:
        await game_engine.encounters.solve(999, "24")

    assert exc_info.value.code == "ENCOUNTER_NOT_FOUND"


# ============================================================================
# Flee
# ============================================================================


@pytest.mark.systems
async def test_flee_costs_a_tenth_of_max_health(game_engine, arena):
    hero, _, _ = arena
    encounter = await game_engine.encounters.start(hero.id)

    fled = await game_engine.encounters.flee(encounter.id)

    assert fled.status == EncounterStatus.FLED.value
    assert fled.completed_at is not None
    updated = await _character(game_engine, hero.id)
    assert updated.current_health == 90
    assert updated.gold == 50
    assert await _attempts(game_engine, hero.id) == []


@pytest.mark.systems
async def test_flee_never_drops_health_below_one(game_engine, persist):
    hero = await persist(CharacterBuilder().with_health(5).build())
    await persist(MonsterBuilder().build(), ProblemBuilder().build())
    encounter = await game_engine.encounters.start(hero.id)

    await game_engine.encounters.flee(encounter.id)

    assert (await _character(game_engine, hero.id)).current_health == 1


@pytest.mark.systems
async def test_cannot_flee_finished_encounter(game_engine, arena):
    hero, _, _ = arena
    encounter = await game_engine.encounters.start(hero.id)
    await game_engine.encounters.flee(encounter.id)

    with pytest.raises(ConflictError):
        await game_engine.encounters.flee(encounter.id)
    with pytest.raises(ConflictError):
        await game_engine.encounters.solve(encounter.id, "24")


# ============================================================================
# Queries
# ============================================================================


@pytest.mark.systems
async def test_active_encounters_lists_only_in_progress(game_engine, arena):
    hero, _, _ = arena
    finished = await game_engine.encounters.start(hero.id)
    await game_engine.encounters.solve(finished.id, "24")
    open_one = await game_engine.encounters.start(hero.id)

    active = await game_engine.encounters.active_encounters(hero.id)

    assert [e.id for e in active] == [open_one.id]
