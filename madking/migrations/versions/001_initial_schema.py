"""initial catalog and character tables

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'races',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('size', sa.String(), nullable=True),
        sa.Column('natural_armor', sa.Integer(), nullable=True),
        sa.Column('darkvision', sa.Integer(), nullable=True),
        sa.Column('languages', sa.JSON(), nullable=True),
        sa.Column('abilities', sa.JSON(), nullable=True),
        sa.Column('bonuses', sa.JSON(), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=True),
        sa.Column('subraces', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_races_id', 'races', ['id'])
    op.create_index('ix_races_name', 'races', ['name'], unique=True)

    op.create_table(
        'classes',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('hp_bonus_per_level', sa.Integer(), nullable=True),
        sa.Column('mana_bonus_per_level', sa.Integer(), nullable=True),
        sa.Column('abilities', sa.JSON(), nullable=True),
        sa.Column('subclasses', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_classes_id', 'classes', ['id'])
    op.create_index('ix_classes_name', 'classes', ['name'], unique=True)

    op.create_table(
        'origins',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('social_standing', sa.String(), nullable=True),
        sa.Column('rarity', sa.String(), nullable=True),
        sa.Column('starting_wealth', sa.JSON(), nullable=True),
        sa.Column('abilities', sa.JSON(), nullable=True),
        sa.Column('bonuses', sa.JSON(), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=True),
        sa.Column('languages', sa.JSON(), nullable=True),
        sa.Column('tool_proficiencies', sa.JSON(), nullable=True),
        sa.Column('starting_equipment', sa.JSON(), nullable=True),
        sa.Column('connections', sa.JSON(), nullable=True),
        sa.Column('personality_traits', sa.JSON(), nullable=True),
        sa.Column('ideals', sa.JSON(), nullable=True),
        sa.Column('bonds', sa.JSON(), nullable=True),
        sa.Column('flaws', sa.JSON(), nullable=True),
        sa.Column('features', sa.JSON(), nullable=True),
        sa.Column('typical_locations', sa.JSON(), nullable=True),
        sa.Column('motivations', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_origins_id', 'origins', ['id'])
    op.create_index('ix_origins_name', 'origins', ['name'], unique=True)
    op.create_index('ix_origins_category', 'origins', ['category'])

    op.create_table(
        'items',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('slot_type', sa.String(), nullable=True),
        sa.Column('weapon_handling', sa.String(), nullable=True),
        sa.Column('subtype', sa.String(), nullable=True),
        sa.Column('weapon_type', sa.String(), nullable=True),
        sa.Column('rarity', sa.String(), nullable=True),
        sa.Column('base_value', sa.Float(), nullable=True),
        sa.Column('weight', sa.Float(), nullable=True),
        sa.Column('stackable', sa.Boolean(), nullable=True),
        sa.Column('max_stack_size', sa.Integer(), nullable=True),
        sa.Column('base_damage', sa.Integer(), nullable=True),
        sa.Column('damage_type', sa.String(), nullable=True),
        sa.Column('consumable', sa.Boolean(), nullable=True),
        sa.Column('lore', sa.Text(), nullable=True),
        sa.Column('requirements', sa.JSON(), nullable=True),
        sa.Column('bonuses', sa.JSON(), nullable=True),
        sa.Column('abilities', sa.JSON(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_items_id', 'items', ['id'])
    op.create_index('ix_items_name', 'items', ['name'], unique=True)
    op.create_index('ix_items_category', 'items', ['category'])
    op.create_index('ix_items_rarity', 'items', ['rarity'])

    op.create_table(
        'spells',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('circle', sa.Integer(), nullable=False),
        sa.Column('mana_cost', sa.Integer(), nullable=False),
        sa.Column('school', sa.String(), nullable=False),
        sa.Column('casting_time', sa.String(), nullable=False),
        sa.Column('range', sa.String(), nullable=False),
        sa.Column('duration', sa.String(), nullable=False),
        sa.Column('area', sa.String(), nullable=True),
        sa.Column('damage_type', sa.String(), nullable=True),
        sa.Column('concentration', sa.Boolean(), nullable=True),
        sa.Column('ritual', sa.Boolean(), nullable=True),
        sa.Column('components', sa.JSON(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_spells_id', 'spells', ['id'])
    op.create_index('ix_spells_name', 'spells', ['name'], unique=True)
    op.create_index('ix_spells_circle', 'spells', ['circle'])
    op.create_index('ix_spells_school', 'spells', ['school'])

    op.create_table(
        'characters',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('race_id', sa.String(), sa.ForeignKey('races.id'), nullable=False),
        sa.Column('class_id', sa.String(), sa.ForeignKey('classes.id'), nullable=False),
        sa.Column('origin_id', sa.String(), sa.ForeignKey('origins.id'), nullable=False),
        sa.Column('subclass', sa.String(), nullable=True),
        sa.Column('level', sa.Integer(), nullable=True),
        sa.Column('experience', sa.Integer(), nullable=True),
        sa.Column('hp', sa.Integer(), nullable=True),
        sa.Column('max_hp', sa.Integer(), nullable=True),
        sa.Column('mana', sa.Integer(), nullable=True),
        sa.Column('max_mana', sa.Integer(), nullable=True),
        sa.Column('base_ac', sa.Integer(), nullable=True),
        sa.Column('base_speed', sa.Integer(), nullable=True),
        sa.Column('currency', sa.Integer(), nullable=True),
        sa.Column('backstory', sa.Text(), nullable=True),
        sa.Column('stats', sa.JSON(), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=True),
        sa.Column('extra_skills', sa.JSON(), nullable=True),
        sa.Column('speed_modifiers', sa.JSON(), nullable=True),
        sa.Column('spells', sa.JSON(), nullable=True),
        sa.Column('items', sa.JSON(), nullable=True),
        sa.Column('equipped_slots', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_characters_id', 'characters', ['id'])
    op.create_index('ix_characters_name', 'characters', ['name'])


def downgrade() -> None:
    op.drop_table('characters')
    op.drop_table('spells')
    op.drop_table('items')
    op.drop_table('origins')
    op.drop_table('classes')
    op.drop_table('races')
