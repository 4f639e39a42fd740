# madking/modules/character_pkg/schemas.py
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..catalog_pkg.schemas import CharacterClass, Item, LeveledAbility, Origin, Race, Spell
from ..rules_pkg.constants import (
    DEFAULT_BASE_AC,
    DEFAULT_BASE_SPEED,
    LEVEL_CAP,
    LEVEL_MIN,
    STAT_MAX,
    STAT_MIN,
    Skill,
    Slot,
    Stat,
)


# --- Sheet sub-documents ---
class Stats(BaseModel):
    """The four core abilities, serialised under their short names."""

    model_config = ConfigDict(populate_by_name=True)

    strength: int = Field(default=STAT_MIN, ge=STAT_MIN, le=STAT_MAX, alias="str")
    dexterity: int = Field(default=STAT_MIN, ge=STAT_MIN, le=STAT_MAX, alias="dex")
    intelligence: int = Field(default=STAT_MIN, ge=STAT_MIN, le=STAT_MAX, alias="int")
    charisma: int = Field(default=STAT_MIN, ge=STAT_MIN, le=STAT_MAX, alias="cha")

    def get(self, stat: Stat) -> int:
        return getattr(self, _STAT_FIELDS[stat])


_STAT_FIELDS: Dict[Stat, str] = {
    Stat.STR: "strength",
    Stat.DEX: "dexterity",
    Stat.INT: "intelligence",
    Stat.CHA: "charisma",
}


class Skills(BaseModel):
    """The 18 proficiency flags, serialised in camelCase (``heavyWeapons``...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Strength
    heavy_weapons: bool = False
    muscle: bool = False
    athletics: bool = False
    endurance: bool = False
    # Dexterity
    light_weapons: bool = False
    ranged_weapons: bool = False
    stealth: bool = False
    acrobatics: bool = False
    legerdemain: bool = False
    # Charisma
    negotiation: bool = False
    deception: bool = False
    intimidation: bool = False
    seduction: bool = False
    # Intelligence
    arcana: bool = False
    lore: bool = False
    investigation: bool = False
    nature: bool = False
    insight: bool = False

    def has(self, skill: Skill) -> bool:
        return getattr(self, _SKILL_FIELDS[skill])


_SKILL_FIELDS: Dict[Skill, str] = {Skill(to_camel(name)): name for name in Skills.model_fields}


class EquippedSlots(BaseModel):
    """Ten fixed equipment slots, each holding an optional item id."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    main_hand: Optional[str] = None
    off_hand: Optional[str] = None
    chest: Optional[str] = None
    boots: Optional[str] = None
    gloves: Optional[str] = None
    headgear: Optional[str] = None
    cape: Optional[str] = None
    necklace: Optional[str] = None
    ring: Optional[str] = None
    other: Optional[str] = None

    def get(self, slot: Slot) -> Optional[str]:
        return getattr(self, _SLOT_FIELDS[slot])

    def set(self, slot: Slot, item_id: Optional[str]) -> None:
        setattr(self, _SLOT_FIELDS[slot], item_id)

    def occupied(self) -> Dict[Slot, str]:
        """Every non-empty slot, in slot order."""
        return {slot: self.get(slot) for slot in Slot if self.get(slot)}

    def slots_holding(self, item_id: str) -> List[Slot]:
        return [slot for slot in Slot if self.get(slot) == item_id]


_SLOT_FIELDS: Dict[Slot, str] = {Slot(to_camel(name)): name for name in EquippedSlots.model_fields}


class InventoryEntry(BaseModel):
    item_id: str
    quantity: int = Field(default=1, ge=1)
    equipped: bool = False


class SpeedModifier(BaseModel):
    source: str
    value: int
    description: str = ""


def _check_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Character name is required")
    return value


def _check_unique_ids(values: List[str]) -> List[str]:
    if len(set(values)) != len(values):
        raise ValueError("Duplicate entries are not allowed")
    return values


def _check_unique_items(entries: List[InventoryEntry]) -> List[InventoryEntry]:
    _check_unique_ids([entry.item_id for entry in entries])
    return entries


# --- Request bodies ---
class CharacterCreate(BaseModel):
    """Body for creating a character. Level, slots and resources are derived."""

    name: str = Field(..., max_length=100)
    race_id: str
    class_id: str
    origin_id: str
    subclass: Optional[str] = None
    stats: Stats = Field(default_factory=Stats)
    skills: Skills = Field(default_factory=Skills)
    extra_skills: List[Skill] = Field(default_factory=list)
    spells: List[str] = Field(default_factory=list)
    items: List[InventoryEntry] = Field(default_factory=list)
    experience: int = Field(default=0, ge=0)
    base_ac: int = Field(default=DEFAULT_BASE_AC, ge=0)
    base_speed: int = Field(default=DEFAULT_BASE_SPEED, ge=0)
    speed_modifiers: List[SpeedModifier] = Field(default_factory=list)
    backstory: str = Field(default="", max_length=5000)
    currency: int = Field(default=0, ge=0)

    check_name = field_validator("name")(_check_name)
    check_spells = field_validator("spells")(_check_unique_ids)
    check_items = field_validator("items")(_check_unique_items)


class CharacterUpdate(CharacterCreate):
    """
    Full replacement (PUT). References may change here and only here.

    ``level`` may be echoed back but never changed; omitted experience, hp
    and mana keep their stored values.
    """

    level: Optional[int] = Field(default=None, ge=LEVEL_MIN, le=LEVEL_CAP)
    hp: Optional[int] = Field(default=None, ge=1)
    mana: Optional[int] = Field(default=None, ge=0)


class CharacterPatch(BaseModel):
    """Partial merge (PATCH). Race, class and origin are deliberately absent."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, max_length=100)
    subclass: Optional[str] = None
    stats: Optional[Stats] = None
    skills: Optional[Skills] = None
    extra_skills: Optional[List[Skill]] = None
    experience: Optional[int] = Field(default=None, ge=0)
    hp: Optional[int] = Field(default=None, ge=1)
    mana: Optional[int] = Field(default=None, ge=0)
    base_ac: Optional[int] = Field(default=None, ge=0)
    base_speed: Optional[int] = Field(default=None, ge=0)
    speed_modifiers: Optional[List[SpeedModifier]] = None
    backstory: Optional[str] = Field(default=None, max_length=5000)
    currency: Optional[int] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def patch_name(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_name(value)


class EquipRequest(BaseModel):
    item_id: str
    preferred_slot: Optional[Slot] = None


class UnequipRequest(BaseModel):
    item_id: str


class AddItemRequest(BaseModel):
    item_id: str
    quantity: int = Field(default=1, ge=1)


class LearnSpellRequest(BaseModel):
    spell_id: str


class ExperienceRequest(BaseModel):
    amount: int = Field(..., ge=0)


# --- Read models ---
class CharacterSheet(BaseModel):
    """The stored character, as the rules engine sees it."""

    id: str
    name: str
    race_id: str
    class_id: str
    origin_id: str
    subclass: Optional[str] = None
    spells: List[str] = Field(default_factory=list)
    items: List[InventoryEntry] = Field(default_factory=list)
    equipped_slots: EquippedSlots = Field(default_factory=EquippedSlots)
    stats: Stats = Field(default_factory=Stats)
    level: int = Field(default=LEVEL_MIN, ge=LEVEL_MIN, le=LEVEL_CAP)
    experience: int = Field(default=0, ge=0)
    hp: Optional[int] = None
    max_hp: int = 1
    mana: Optional[int] = None
    max_mana: Optional[int] = None
    base_ac: int = DEFAULT_BASE_AC
    base_speed: int = DEFAULT_BASE_SPEED
    speed_modifiers: List[SpeedModifier] = Field(default_factory=list)
    skills: Skills = Field(default_factory=Skills)
    extra_skills: List[Skill] = Field(default_factory=list)
    backstory: str = ""
    currency: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    def inventory_entry(self, item_id: str) -> Optional[InventoryEntry]:
        return next((entry for entry in self.items if entry.item_id == item_id), None)


class CharacterBundle(BaseModel):
    """A character with every reference resolved to its full value object."""

    character: CharacterSheet
    race: Race
    character_class: CharacterClass
    origin: Origin
    items: Dict[str, Item] = Field(default_factory=dict)
    spells: Dict[str, Spell] = Field(default_factory=dict)


class SkillCheckResult(BaseModel):
    roll: int
    modifier: int
    total: int
    skill: Skill
    is_proficient: bool


class AvailableAbility(BaseModel):
    ability: LeveledAbility
    source: str


class ArmorClassResponse(BaseModel):
    base_ac: int
    total_ac: int


class ComputedValues(BaseModel):
    """The derived overlay returned by ``GET /characters/{id}?computed=true``."""

    total_ac: int
    total_speed: int
    max_spell_circle: int
    skill_modifiers: Dict[str, int]
    available_spells: List[Spell]
    available_abilities: List[AvailableAbility]
