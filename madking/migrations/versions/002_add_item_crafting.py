"""add crafting columns to items

Revision ID: 002_add_item_crafting
Revises: 001_initial_schema
Create Date: 2026-10-19 15:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '002_add_item_crafting'
down_revision = '001_initial_schema'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column('items', sa.Column('craftable', sa.Boolean(), nullable=True, server_default=sa.false()))
    op.add_column('items', sa.Column('crafting_skill', sa.String(), nullable=True))
    op.add_column('items', sa.Column('crafting_difficulty', sa.Integer(), nullable=True, server_default='10'))
    op.add_column('items', sa.Column('crafting_materials', sa.JSON(), nullable=True, server_default='[]'))
    op.create_index('ix_items_craftable', 'items', ['craftable'])


def downgrade() -> None:
    with op.batch_alter_table('items') as batch_op:
        batch_op.drop_index('ix_items_craftable')
        batch_op.drop_column('crafting_materials')
        batch_op.drop_column('crafting_difficulty')
        batch_op.drop_column('crafting_skill')
        batch_op.drop_column('craftable')
