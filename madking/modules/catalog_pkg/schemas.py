# madking/modules/catalog_pkg/schemas.py
"""
Pydantic shapes for the reference catalogs (races, classes, origins,
items, spells).

The ``*Create`` models carry the save-time validation and normalisation
rules; the read models (``Race``, ``CharacterClass`` ...) are the fully
resolved value objects the rules engine works with.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from ..rules_pkg.constants import (
    CATALOG_BONUS_TYPES,
    CRAFTING_DIFFICULTY_DEFAULT,
    CRAFTING_DIFFICULTY_MAX,
    CRAFTING_DIFFICULTY_MIN,
    DEFAULT_HANDLING_BY_WEAPON_TYPE,
    EQUIPABLE_CATEGORIES,
    ITEM_STAT_BONUS_LIMIT,
    ITEM_STAT_REQUIREMENT_MAX,
    LEVEL_CAP,
    LEVEL_MIN,
    ORIGIN_SPEED_PENALTY_LIMIT,
    ORIGIN_STAT_BONUS_LIMIT,
    RACE_SPEED_PENALTY_LIMIT,
    RACE_STAT_BONUS_LIMIT,
    SPELL_CIRCLE_MAX,
    SPELL_CIRCLE_MIN,
    STAT_BONUS_TYPES,
    STAT_MIN,
    BonusType,
    ItemCategory,
    Rarity,
    RequirementType,
    Skill,
    Slot,
    SpellSchool,
    WeaponHandling,
    WeaponType,
)


def _unique(values: List[Any]) -> List[Any]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def _check_bonus_limits(bonuses, stat_limit: int, speed_floor: int) -> None:
    for bonus in bonuses:
        if bonus.type in STAT_BONUS_TYPES and abs(bonus.value) > stat_limit:
            raise ValueError(
                f"{bonus.type.value} bonus {bonus.value} exceeds the ±{stat_limit} limit"
            )
        if bonus.type == BonusType.SPEED and bonus.value < speed_floor:
            raise ValueError(f"Speed penalty {bonus.value} is below {speed_floor}")


# --- Shared sub-documents ---
class LeveledAbility(BaseModel):
    """An ability that unlocks at a character level."""

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    level: int = Field(default=1, ge=LEVEL_MIN, le=LEVEL_CAP)


class Bonus(BaseModel):
    type: BonusType
    value: float
    description: str = ""

    @field_validator("type")
    @classmethod
    def catalog_bonus_type(cls, value: BonusType) -> BonusType:
        if value not in CATALOG_BONUS_TYPES:
            raise ValueError(f"Bonus type '{value.value}' is only valid on items")
        return value


# --- Class ---
class Subclass(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    abilities: List[LeveledAbility] = Field(default_factory=list)


class CharacterClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field(default="", max_length=500)
    hp_bonus_per_level: int = Field(default=10, ge=0)
    mana_bonus_per_level: int = Field(default=0, ge=0)
    abilities: List[LeveledAbility] = Field(default_factory=list)
    subclasses: List[Subclass] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Class name is required")
        return value

    @model_validator(mode="after")
    def check_ability_parity(self):
        # Class abilities on odd levels, subclass abilities on even levels.
        for ability in self.abilities:
            if ability.level % 2 == 0:
                raise ValueError("Class abilities must be on odd levels only (1, 3, 5, 7, 9)")
        for subclass in self.subclasses:
            for ability in subclass.abilities:
                if ability.level % 2 == 1:
                    raise ValueError("Subclass abilities must be on even levels only (2, 4, 6, 8, 10)")

        self.abilities.sort(key=lambda a: a.level)
        for subclass in self.subclasses:
            subclass.abilities.sort(key=lambda a: a.level)
        return self


class CharacterClass(CharacterClassCreate):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    def get_subclass(self, subclass_name: Optional[str]) -> Optional[Subclass]:
        if not subclass_name:
            return None
        return next((sc for sc in self.subclasses if sc.name == subclass_name), None)


# --- Race ---
class Subrace(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    abilities: List[LeveledAbility] = Field(default_factory=list)
    bonuses: List[Bonus] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)


class RaceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field(default="", max_length=1000)
    size: str = Field(default="Medium", pattern="^(Tiny|Small|Medium|Large|Huge|Gargantuan)$")
    languages: List[str] = Field(default_factory=list)
    abilities: List[LeveledAbility] = Field(default_factory=list)
    bonuses: List[Bonus] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    subraces: List[Subrace] = Field(default_factory=list)
    natural_armor: int = Field(default=0, ge=0)
    darkvision: int = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Race name is required")
        return value

    @model_validator(mode="after")
    def normalise(self):
        _check_bonus_limits(self.bonuses, RACE_STAT_BONUS_LIMIT, RACE_SPEED_PENALTY_LIMIT)
        for subrace in self.subraces:
            _check_bonus_limits(subrace.bonuses, RACE_STAT_BONUS_LIMIT, RACE_SPEED_PENALTY_LIMIT)
            subrace.abilities.sort(key=lambda a: a.level)
            subrace.skills = _unique(subrace.skills)

        self.abilities.sort(key=lambda a: a.level)
        self.skills = _unique(self.skills)
        self.languages = _unique(self.languages)
        return self


class Race(RaceCreate):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    def get_subrace(self, subrace_name: Optional[str]) -> Optional[Subrace]:
        if not subrace_name:
            return None
        return next((sr for sr in self.subraces if sr.name == subrace_name), None)


# --- Origin ---
class StartingWealth(BaseModel):
    min: int = Field(default=10, ge=0)
    max: int = Field(default=50, ge=0)


class StartingEquipment(BaseModel):
    item_name: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    description: str = ""


class Connection(BaseModel):
    name: str = Field(..., min_length=1)
    relationship: str = Field(
        default="Contact",
        pattern="^(Ally|Contact|Rival|Enemy|Family|Mentor|Student|Guild Member)$",
    )
    description: str = Field(..., min_length=1)
    location: str = ""


class Ideal(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    alignment: str = Field(default="Any", pattern="^(Good|Neutral|Evil|Lawful|Chaotic|Any)$")


class OriginFeature(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    mechanical_benefit: str = ""


ORIGIN_CATEGORY_PATTERN = (
    "^(Noble|Commoner|Criminal|Scholar|Military|Religious|Artisan|Merchant"
    "|Entertainer|Hermit|Folk Hero|Outlander)$"
)
SOCIAL_STANDING_PATTERN = "^(Outcast|Lower Class|Middle Class|Upper Class|Nobility|Royalty)$"


class OriginCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=1000)
    category: str = Field(default="Commoner", pattern=ORIGIN_CATEGORY_PATTERN)
    social_standing: str = Field(default="Middle Class", pattern=SOCIAL_STANDING_PATTERN)
    starting_wealth: StartingWealth = Field(default_factory=StartingWealth)
    abilities: List[LeveledAbility] = Field(default_factory=list)
    bonuses: List[Bonus] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    tool_proficiencies: List[str] = Field(default_factory=list)
    starting_equipment: List[StartingEquipment] = Field(default_factory=list)
    connections: List[Connection] = Field(default_factory=list)
    personality_traits: List[str] = Field(default_factory=list)
    ideals: List[Ideal] = Field(default_factory=list)
    bonds: List[str] = Field(default_factory=list)
    flaws: List[str] = Field(default_factory=list)
    features: List[OriginFeature] = Field(default_factory=list)
    typical_locations: List[str] = Field(default_factory=list)
    motivations: List[str] = Field(default_factory=list)
    rarity: str = Field(default="Common", pattern="^(Common|Uncommon|Rare|Very Rare)$")

    @field_validator("personality_traits", "bonds", "flaws")
    @classmethod
    def short_entries(cls, values: List[str]) -> List[str]:
        for value in values:
            if len(value) > 200:
                raise ValueError("Entries cannot exceed 200 characters")
        return values

    @field_validator("motivations")
    @classmethod
    def short_motivations(cls, values: List[str]) -> List[str]:
        for value in values:
            if len(value) > 150:
                raise ValueError("Motivation cannot exceed 150 characters")
        return values

    @model_validator(mode="after")
    def normalise(self):
        _check_bonus_limits(self.bonuses, ORIGIN_STAT_BONUS_LIMIT, ORIGIN_SPEED_PENALTY_LIMIT)

        if self.starting_wealth.min > self.starting_wealth.max:
            self.starting_wealth.max = self.starting_wealth.min

        self.skills = sorted(_unique(self.skills), key=lambda s: s.value)
        self.languages = sorted(_unique(self.languages))
        self.tool_proficiencies = sorted(_unique(self.tool_proficiencies))
        self.personality_traits.sort()
        self.bonds.sort()
        self.flaws.sort()
        self.motivations.sort()
        self.abilities.sort(key=lambda a: a.level)
        return self


class Origin(OriginCreate):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# --- Item ---
class ItemBonus(BaseModel):
    type: BonusType
    value: float
    description: str = ""
    condition: str = ""


class ItemRequirement(BaseModel):
    type: RequirementType
    value: Union[int, str]
    description: str = ""


class ItemAbility(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    uses: Optional[int] = Field(default=None, ge=0)
    recharge_type: str = Field(
        default="permanent",
        pattern="^(daily|short-rest|long-rest|manual|consumable|permanent)$",
    )
    activation_type: str = Field(
        default="passive",
        pattern="^(passive|action|bonus-action|reaction|free)$",
    )


class CraftingMaterial(BaseModel):
    material_name: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(..., ge=1)
    description: str = ""


class ItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    category: ItemCategory = ItemCategory.MISCELLANEOUS
    slot_type: Optional[Slot] = None
    weapon_handling: Optional[WeaponHandling] = None
    subtype: str = Field(default="", max_length=50)
    weapon_type: Optional[WeaponType] = None
    rarity: Rarity = Rarity.COMMON
    base_value: float = Field(default=1, ge=0)
    weight: float = Field(default=1, ge=0)
    stackable: bool = False
    max_stack_size: int = Field(default=1, ge=1)
    base_damage: int = Field(default=0, ge=0)
    damage_type: str = ""
    consumable: bool = False
    requirements: List[ItemRequirement] = Field(default_factory=list)
    bonuses: List[ItemBonus] = Field(default_factory=list)
    abilities: List[ItemAbility] = Field(default_factory=list)
    lore: str = Field(default="", max_length=1000)
    tags: List[str] = Field(default_factory=list)
    craftable: bool = False
    crafting_materials: List[CraftingMaterial] = Field(default_factory=list)
    # Proficiency in this skill is needed to craft; its modifier applies to the roll.
    crafting_skill: Optional[Skill] = None
    crafting_difficulty: int = Field(
        default=CRAFTING_DIFFICULTY_DEFAULT, ge=CRAFTING_DIFFICULTY_MIN, le=CRAFTING_DIFFICULTY_MAX
    )

    @model_validator(mode="after")
    def normalise_and_validate(self):
        # Stacking
        if self.stackable and self.max_stack_size == 1:
            self.max_stack_size = 99
        if not self.stackable and self.max_stack_size > 1:
            self.max_stack_size = 1

        self.tags = sorted(_unique(self.tags))

        # Seeding defaults for handling and slot; see DEFAULT_HANDLING_BY_WEAPON_TYPE.
        if self.category == ItemCategory.WEAPON and self.weapon_handling is None:
            weapon_type = self.weapon_type.value if self.weapon_type else None
            self.weapon_handling = DEFAULT_HANDLING_BY_WEAPON_TYPE.get(
                weapon_type, WeaponHandling.ONE_HANDED
            )
            if self.slot_type is None:
                self.slot_type = Slot.MAIN_HAND
        if self.category == ItemCategory.SHIELD:
            if self.weapon_handling not in (None, WeaponHandling.OFF_HAND_ONLY):
                raise ValueError("Shields can only be off-hand-only")
            self.weapon_handling = WeaponHandling.OFF_HAND_ONLY
            self.slot_type = Slot.OFF_HAND

        if self.category in EQUIPABLE_CATEGORIES and self.slot_type is None:
            raise ValueError("Equipable items must have a slot type")
        if self.category not in EQUIPABLE_CATEGORIES and self.slot_type is not None:
            raise ValueError("Only weapons, armor and shields can have a slot type")
        if self.category not in (ItemCategory.WEAPON, ItemCategory.SHIELD) and self.weapon_handling is not None:
            raise ValueError("Only weapons and shields should have weapon handling specified")

        for req in self.requirements:
            if req.type in (RequirementType.STR, RequirementType.DEX, RequirementType.INT, RequirementType.CHA):
                if not isinstance(req.value, int) or not STAT_MIN <= req.value <= ITEM_STAT_REQUIREMENT_MAX:
                    raise ValueError("Requirements contain invalid values")
            elif req.type == RequirementType.LEVEL:
                if not isinstance(req.value, int) or not LEVEL_MIN <= req.value <= LEVEL_CAP:
                    raise ValueError("Requirements contain invalid values")

        for bonus in self.bonuses:
            if bonus.type in STAT_BONUS_TYPES and abs(bonus.value) > ITEM_STAT_BONUS_LIMIT:
                raise ValueError("Bonus values are out of reasonable range")
            if bonus.type == BonusType.DAMAGE and bonus.value < 0:
                raise ValueError("Damage bonuses cannot be negative")
        return self


class Item(ItemCreate):
    """A stored item. The computed fields are serialised with every item response."""

    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def effective_value(self) -> float:
        from ..rules_pkg import item_logic
        return item_logic.effective_value(self)

    @computed_field
    @property
    def is_magical(self) -> bool:
        from ..rules_pkg import item_logic
        return item_logic.is_magical(self)

    @computed_field
    @property
    def bonus_totals(self) -> Dict[str, float]:
        from ..rules_pkg import item_logic
        return {bonus.type.value: item_logic.total_bonus_value(self, bonus.type) for bonus in self.bonuses}

    @computed_field
    @property
    def compatible_slots(self) -> List[Slot]:
        from ..rules_pkg import item_logic
        return item_logic.compatible_slots(self)


# --- Spell ---
class SpellComponents(BaseModel):
    verbal: bool = False
    gesture: bool = False
    focus: bool = False
    cost: str = ""


class SpellCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    circle: int = Field(..., ge=SPELL_CIRCLE_MIN, le=SPELL_CIRCLE_MAX)
    mana_cost: int = Field(..., ge=0)
    school: SpellSchool
    casting_time: str = Field(..., min_length=1, max_length=50)
    range: str = Field(..., min_length=1, max_length=50)
    duration: str = Field(..., min_length=1, max_length=100)
    components: SpellComponents = Field(default_factory=SpellComponents)
    area: str = Field(default="", max_length=100)
    damage_type: str = Field(
        default="",
        pattern="^(|Fire|Ice|Lightning|Physical|Poison|Dark|Light|Mental|Energy)$",
    )
    concentration: bool = False
    ritual: bool = False
    tags: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_tags(self):
        self.tags = _unique(self.tags)
        return self


class Spell(SpellCreate):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OriginBackground(BaseModel):
    origin: str
    personality_trait: Optional[str] = None
    ideal: Optional[Ideal] = None
    bond: Optional[str] = None
    flaw: Optional[str] = None
    motivation: Optional[str] = None
    starting_wealth: int
    connections: List[Connection] = Field(default_factory=list)


class CanEquipResponse(BaseModel):
    can_equip: bool
    reason: Optional[str] = None


class CanCraftResponse(BaseModel):
    can_craft: bool
    reason: Optional[str] = None


class CraftingResult(BaseModel):
    success: bool
    roll: int
    modifier: int
    total: int
    target_dc: int
    margin: int
