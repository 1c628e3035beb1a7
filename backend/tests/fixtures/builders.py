"""
Builder pattern utilities for game data.

These builders provide fluent APIs for creating test rows with sensible
defaults and easy customization. build() returns an unsaved model instance;
persist it with the `persist` fixture.
"""

from typing import Any, Optional

from arithmancy.models import (Character, Item, ItemType, Monster, ObjectiveType,
                               Problem, Quest, QuestObjective, School)


class CharacterBuilder:
    """
    Fluent builder for characters that skips the creation rules.

    Example:
        hero = (CharacterBuilder()
                .with_level(3)
                .with_health(40, max_health=140)
                .build())
    """

    def __init__(self):
        self._fields: dict[str, Any] = {
            "player_id": "player-1",
            "name": "Test Hero",
            "level": 1,
            "experience_points": 0,
            "max_health": 100,
            "current_health": 100,
            "gold": 100,
        }

    def with_player(self, player_id: str) -> "CharacterBuilder":
        self._fields["player_id"] = player_id
        return self

    def with_name(self, name: str) -> "CharacterBuilder":
        self._fields["name"] = name
        return self

    def with_level(self, level: int, experience: Optional[int] = None) -> "CharacterBuilder":
        self._fields["level"] = level
        if experience is not None:
            self._fields["experience_points"] = experience
        return self

    def with_experience(self, experience: int) -> "CharacterBuilder":
        self._fields["experience_points"] = experience
        return self

    def with_health(self, current: int, max_health: Optional[int] = None) -> "CharacterBuilder":
        self._fields["current_health"] = current
        if max_health is not None:
            self._fields["max_health"] = max_health
        return self

    def with_gold(self, gold: int) -> "CharacterBuilder":
        self._fields["gold"] = gold
        return self

    def build(self) -> Character:
        return Character(**self._fields)


class SchoolBuilder:
    def __init__(self):
        self._fields: dict[str, Any] = {
            "name": "Test School",
            "description": "A school for testing",
            "axiom": "Every test has its answer",
            "health_bonus": 10,
            "starting_gold": 150,
        }

    def with_name(self, name: str) -> "SchoolBuilder":
        self._fields["name"] = name
        return self

    def build(self) -> School:
        return School(**self._fields)


class MonsterBuilder:
    def __init__(self):
        self._fields: dict[str, Any] = {
            "name": "Test Monster",
            "description": "A monster for testing",
            "mathematical_concept": "Arithmetic",
            "base_health": 20,
            "difficulty_level": 1,
            "experience_reward": 10,
            "gold_reward": 5,
        }

    def with_id(self, monster_id: int) -> "MonsterBuilder":
        self._fields["id"] = monster_id
        return self

    def with_name(self, name: str) -> "MonsterBuilder":
        self._fields["name"] = name
        return self

    def with_difficulty(self, level: int) -> "MonsterBuilder":
        self._fields["difficulty_level"] = level
        return self

    def with_rewards(self, experience: int, gold: int) -> "MonsterBuilder":
        self._fields["experience_reward"] = experience
        self._fields["gold_reward"] = gold
        return self

    def with_health(self, base_health: int) -> "MonsterBuilder":
        self._fields["base_health"] = base_health
        return self

    def build(self) -> Monster:
        return Monster(**self._fields)


class ProblemBuilder:
    def __init__(self):
        self._fields: dict[str, Any] = {
            "description": "What is 6 x 4?",
            "problem_type": "Arithmetic",
            "answer": "24",
            "difficulty_level": 1,
            "hint_text": "Multiply the numbers.",
            "time_limit_seconds": 60,
            "experience_reward": 5,
        }

    def with_answer(self, answer: str) -> "ProblemBuilder":
        self._fields["answer"] = answer
        return self

    def with_difficulty(self, level: int) -> "ProblemBuilder":
        self._fields["difficulty_level"] = level
        return self

    def with_experience(self, experience: int) -> "ProblemBuilder":
        self._fields["experience_reward"] = experience
        return self

    def with_time_limit(self, seconds: Optional[int]) -> "ProblemBuilder":
        self._fields["time_limit_seconds"] = seconds
        return self

    def build(self) -> Problem:
        return Problem(**self._fields)


class ItemBuilder:
    def __init__(self):
        self._fields: dict[str, Any] = {
            "name": "Test Item",
            "description": "An item for testing",
            "type": ItemType.ARTIFACT,
            "health_bonus": 0,
            "price": 10,
            "is_tradeable": True,
            "is_consumable": False,
        }

    def with_name(self, name: str) -> "ItemBuilder":
        self._fields["name"] = name
        return self

    def potion(self, health_bonus: int = 25) -> "ItemBuilder":
        self._fields["type"] = ItemType.CONSUMABLE
        self._fields["health_bonus"] = health_bonus
        self._fields["is_consumable"] = True
        return self

    def equipment(self) -> "ItemBuilder":
        self._fields["type"] = ItemType.EQUIPMENT
        return self

    def with_field(self, key: str, value: Any) -> "ItemBuilder":
        """Set arbitrary field for custom item properties"""
        self._fields[key] = value
        return self

    def build(self) -> Item:
        return Item(**self._fields)


class QuestBuilder:
    """
    Fluent builder for quests and their objectives.

    Example:
        quest = (QuestBuilder()
                 .with_objective("Solve a problem")
                 .with_objective("Defeat a monster", ObjectiveType.DEFEAT)
                 .with_rewards(experience=50, gold=25)
                 .build())
    """

    def __init__(self):
        self._fields: dict[str, Any] = {
            "title": "Test Quest",
            "description": "A quest for testing",
            "min_level": 1,
            "experience_reward": 50,
            "gold_reward": 25,
            "is_repeatable": False,
        }
        self._objectives: list[QuestObjective] = []
        self._item_reward: Optional[Item] = None

    def with_title(self, title: str) -> "QuestBuilder":
        self._fields["title"] = title
        return self

    def with_min_level(self, level: int) -> "QuestBuilder":
        self._fields["min_level"] = level
        return self

    def with_rewards(self, experience: int = 0, gold: int = 0) -> "QuestBuilder":
        self._fields["experience_reward"] = experience
        self._fields["gold_reward"] = gold
        return self

    def with_item_reward(self, item: Item) -> "QuestBuilder":
        self._item_reward = item
        return self

    def repeatable(self) -> "QuestBuilder":
        self._fields["is_repeatable"] = True
        return self

    def with_objective(
        self,
        description: str = "Do something",
        objective_type: ObjectiveType = ObjectiveType.SOLVE,
        target_quantity: int = 1,
    ) -> "QuestBuilder":
        self._objectives.append(
            QuestObjective(
                description=description,
                type=objective_type.value,
                target_quantity=target_quantity,
                order_index=len(self._objectives) + 1,
            )
        )
        return self

    def build(self) -> Quest:
        quest = Quest(**self._fields)
        quest.objectives = list(self._objectives)
        if self._item_reward is not None:
            quest.item_reward = self._item_reward
        return quest
