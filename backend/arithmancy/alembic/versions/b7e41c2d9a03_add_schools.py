"""add_schools

Revision ID: b7e41c2d9a03
Revises: a1b2c3d4e5f6
Create Date: 2026-10-26 14:03:55.218640

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'b7e41c2d9a03'
down_revision: Union[str, Sequence[str], None] = 'a1b2c3d4e5f6'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'schools',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=80), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('axiom', sa.String(length=160), nullable=True),
        sa.Column('health_bonus', sa.Integer(), nullable=False),
        sa.Column('starting_gold', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_schools')),
        sa.UniqueConstraint('name', name=op.f('uq_schools_name')),
    )

    with op.batch_alter_table('characters', schema=None) as batch_op:
        batch_op.add_column(sa.Column('school_id', sa.Integer(), nullable=True))
        batch_op.create_foreign_key(
            batch_op.f('fk_characters_school_id_schools'),
            'schools', ['school_id'], ['id'], ondelete='SET NULL',
        )


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('characters', schema=None) as batch_op:
        batch_op.drop_constraint(batch_op.f('fk_characters_school_id_schools'), type_='foreignkey')
        batch_op.drop_column('school_id')

    op.drop_table('schools')
