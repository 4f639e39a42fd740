# madking/modules/catalog_pkg/models.py
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text

from ...database import Base


def utcnow():
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class Race(TimestampMixin, Base):
    __tablename__ = "races"

    id = Column(String, primary_key=True, index=True)
    name = Column(String(50), unique=True, index=True, nullable=False)
    description = Column(Text, default="")
    size = Column(String, default="Medium")
    natural_armor = Column(Integer, default=0)
    darkvision = Column(Integer, default=0)

    languages = Column(JSON, default=list)
    abilities = Column(JSON, default=list)
    bonuses = Column(JSON, default=list)
    skills = Column(JSON, default=list)
    subraces = Column(JSON, default=list)


class CharacterClass(TimestampMixin, Base):
    __tablename__ = "classes"

    id = Column(String, primary_key=True, index=True)
    name = Column(String(50), unique=True, index=True, nullable=False)
    description = Column(Text, default="")
    hp_bonus_per_level = Column(Integer, default=10)
    mana_bonus_per_level = Column(Integer, default=0)

    abilities = Column(JSON, default=list)
    subclasses = Column(JSON, default=list)


class Origin(TimestampMixin, Base):
    __tablename__ = "origins"

    id = Column(String, primary_key=True, index=True)
    name = Column(String(50), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, default="Commoner", index=True)
    social_standing = Column(String, default="Middle Class")
    rarity = Column(String, default="Common")

    starting_wealth = Column(JSON)  # {"min": int, "max": int}
    abilities = Column(JSON, default=list)
    bonuses = Column(JSON, default=list)
    skills = Column(JSON, default=list)
    languages = Column(JSON, default=list)
    tool_proficiencies = Column(JSON, default=list)
    starting_equipment = Column(JSON, default=list)
    connections = Column(JSON, default=list)
    personality_traits = Column(JSON, default=list)
    ideals = Column(JSON, default=list)
    bonds = Column(JSON, default=list)
    flaws = Column(JSON, default=list)
    features = Column(JSON, default=list)
    typical_locations = Column(JSON, default=list)
    motivations = Column(JSON, default=list)


class Item(TimestampMixin, Base):
    __tablename__ = "items"

    id = Column(String, primary_key=True, index=True)
    name = Column(String(100), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, default="Miscellaneous", index=True)
    slot_type = Column(String, nullable=True)
    weapon_handling = Column(String, nullable=True)
    subtype = Column(String, default="")
    weapon_type = Column(String, nullable=True)
    rarity = Column(String, default="Common", index=True)
    base_value = Column(Float, default=1)
    weight = Column(Float, default=1)
    stackable = Column(Boolean, default=False)
    max_stack_size = Column(Integer, default=1)
    base_damage = Column(Integer, default=0)
    damage_type = Column(String, default="")
    consumable = Column(Boolean, default=False)
    lore = Column(Text, default="")
    craftable = Column(Boolean, default=False, index=True)
    crafting_skill = Column(String, nullable=True)
    crafting_difficulty = Column(Integer, default=10)

    requirements = Column(JSON, default=list)
    bonuses = Column(JSON, default=list)
    abilities = Column(JSON, default=list)
    tags = Column(JSON, default=list)
    crafting_materials = Column(JSON, default=list)


class Spell(TimestampMixin, Base):
    __tablename__ = "spells"

    id = Column(String, primary_key=True, index=True)
    name = Column(String(100), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=False)
    circle = Column(Integer, nullable=False, index=True)
    mana_cost = Column(Integer, nullable=False)
    school = Column(String, nullable=False, index=True)
    casting_time = Column(String, nullable=False)
    range = Column(String, nullable=False)
    duration = Column(String, nullable=False)
    area = Column(String, default="")
    damage_type = Column(String, default="")
    concentration = Column(Boolean, default=False)
    ritual = Column(Boolean, default=False)

    components = Column(JSON)
    tags = Column(JSON, default=list)
