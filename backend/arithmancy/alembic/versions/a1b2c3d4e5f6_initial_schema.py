"""initial_schema

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 10:12:31.402118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1b2c3d4e5f6'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Reference data
    op.create_table(
        'items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.String(length=40), nullable=False),
        sa.Column('health_bonus', sa.Integer(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('is_tradeable', sa.Boolean(), nullable=False),
        sa.Column('is_consumable', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_items')),
        sa.UniqueConstraint('name', name=op.f('uq_items_name')),
    )
    op.create_table(
        'monsters',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('mathematical_concept', sa.String(length=120), nullable=True),
        sa.Column('base_health', sa.Integer(), nullable=False),
        sa.Column('difficulty_level', sa.Integer(), nullable=False),
        sa.Column('experience_reward', sa.Integer(), nullable=False),
        sa.Column('gold_reward', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_monsters')),
        sa.UniqueConstraint('name', name=op.f('uq_monsters_name')),
    )
    op.create_index(op.f('ix_monsters_difficulty_level'), 'monsters', ['difficulty_level'])
    op.create_table(
        'problems',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('problem_type', sa.String(length=80), nullable=True),
        sa.Column('answer', sa.String(length=255), nullable=False),
        sa.Column('difficulty_level', sa.Integer(), nullable=False),
        sa.Column('hint_text', sa.Text(), nullable=True),
        sa.Column('time_limit_seconds', sa.Integer(), nullable=True),
        sa.Column('experience_reward', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_problems')),
    )
    op.create_index(op.f('ix_problems_difficulty_level'), 'problems', ['difficulty_level'])
    op.create_table(
        'quests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=160), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('min_level', sa.Integer(), nullable=False),
        sa.Column('experience_reward', sa.Integer(), nullable=False),
        sa.Column('gold_reward', sa.Integer(), nullable=False),
        sa.Column('item_reward_id', sa.Integer(), nullable=True),
        sa.Column('is_repeatable', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ['item_reward_id'], ['items.id'],
            name=op.f('fk_quests_item_reward_id_items'), ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_quests')),
    )
    op.create_table(
        'quest_objectives',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('quest_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('target_quantity', sa.Integer(), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ['quest_id'], ['quests.id'],
            name=op.f('fk_quest_objectives_quest_id_quests'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_quest_objectives')),
    )
    op.create_index(op.f('ix_quest_objectives_quest_id'), 'quest_objectives', ['quest_id'])

    # Characters and their state
    op.create_table(
        'characters',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('player_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('experience_points', sa.Integer(), nullable=False),
        sa.Column('max_health', sa.Integer(), nullable=False),
        sa.Column('current_health', sa.Integer(), nullable=False),
        sa.Column('gold', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_characters')),
        sa.UniqueConstraint('player_id', 'name', name='uq_characters_player_name'),
    )
    op.create_index(op.f('ix_characters_player_id'), 'characters', ['player_id'])
    op.create_table(
        'encounters',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('character_id', sa.Integer(), nullable=False),
        sa.Column('monster_id', sa.Integer(), nullable=False),
        sa.Column('problem_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('monster_current_health', sa.Integer(), nullable=False),
        sa.Column('character_health_at_start', sa.Integer(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['character_id'], ['characters.id'],
            name=op.f('fk_encounters_character_id_characters'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['monster_id'], ['monsters.id'], name=op.f('fk_encounters_monster_id_monsters'),
        ),
        sa.ForeignKeyConstraint(
            ['problem_id'], ['problems.id'], name=op.f('fk_encounters_problem_id_problems'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_encounters')),
    )
    op.create_index(op.f('ix_encounters_character_id'), 'encounters', ['character_id'])
    op.create_index(op.f('ix_encounters_status'), 'encounters', ['status'])
    op.create_table(
        'problem_attempts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('character_id', sa.Integer(), nullable=False),
        sa.Column('problem_id', sa.Integer(), nullable=False),
        sa.Column('user_answer', sa.String(length=255), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('time_taken_seconds', sa.Integer(), nullable=True),
        sa.Column('attempted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['character_id'], ['characters.id'],
            name=op.f('fk_problem_attempts_character_id_characters'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['problem_id'], ['problems.id'], name=op.f('fk_problem_attempts_problem_id_problems'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_problem_attempts')),
    )
    op.create_index(op.f('ix_problem_attempts_character_id'), 'problem_attempts', ['character_id'])
    op.create_index(op.f('ix_problem_attempts_problem_id'), 'problem_attempts', ['problem_id'])
    op.create_table(
        'character_quests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('character_id', sa.Integer(), nullable=False),
        sa.Column('quest_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('current_objective_index', sa.Integer(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['character_id'], ['characters.id'],
            name=op.f('fk_character_quests_character_id_characters'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['quest_id'], ['quests.id'],
            name=op.f('fk_character_quests_quest_id_quests'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_character_quests')),
        sa.UniqueConstraint('character_id', 'quest_id', name='uq_character_quests_pair'),
    )
    op.create_index(op.f('ix_character_quests_character_id'), 'character_quests', ['character_id'])
    op.create_index(op.f('ix_character_quests_quest_id'), 'character_quests', ['quest_id'])
    op.create_table(
        'inventory_entries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('character_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('is_equipped', sa.Boolean(), nullable=False),
        sa.Column('acquired_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['character_id'], ['characters.id'],
            name=op.f('fk_inventory_entries_character_id_characters'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['item_id'], ['items.id'],
            name=op.f('fk_inventory_entries_item_id_items'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_inventory_entries')),
        sa.UniqueConstraint('character_id', 'item_id', name='uq_inventory_entries_pair'),
    )
    op.create_index(op.f('ix_inventory_entries_character_id'), 'inventory_entries', ['character_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('inventory_entries')
    op.drop_table('character_quests')
    op.drop_table('problem_attempts')
    op.drop_table('encounters')
    op.drop_table('characters')
    op.drop_table('quest_objectives')
    op.drop_table('quests')
    op.drop_table('problems')
    op.drop_table('monsters')
    op.drop_table('items')
