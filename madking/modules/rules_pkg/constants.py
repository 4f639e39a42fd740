"""Shared game constants for the character rules engine.

Everything the engine branches on lives here as a closed set: stat names,
the 18-skill vocabulary, the ten equipment slots, bonus types and the
numeric limits of the ruleset.
"""
from enum import Enum
from typing import Dict, List


class Stat(str, Enum):
    STR = "str"
    DEX = "dex"
    INT = "int"
    CHA = "cha"


class Skill(str, Enum):
    # Strength
    HEAVY_WEAPONS = "heavyWeapons"
    MUSCLE = "muscle"
    ATHLETICS = "athletics"
    ENDURANCE = "endurance"
    # Dexterity
    LIGHT_WEAPONS = "lightWeapons"
    RANGED_WEAPONS = "rangedWeapons"
    STEALTH = "stealth"
    ACROBATICS = "acrobatics"
    LEGERDEMAIN = "legerdemain"
    # Charisma
    NEGOTIATION = "negotiation"
    DECEPTION = "deception"
    INTIMIDATION = "intimidation"
    SEDUCTION = "seduction"
    # Intelligence
    ARCANA = "arcana"
    LORE = "lore"
    INVESTIGATION = "investigation"
    NATURE = "nature"
    INSIGHT = "insight"


# Governing ability for every skill. Exact lookup only.
SKILL_STAT_MAP: Dict[Skill, Stat] = {
    Skill.HEAVY_WEAPONS: Stat.STR,
    Skill.MUSCLE: Stat.STR,
    Skill.ATHLETICS: Stat.STR,
    Skill.ENDURANCE: Stat.STR,
    Skill.LIGHT_WEAPONS: Stat.DEX,
    Skill.RANGED_WEAPONS: Stat.DEX,
    Skill.STEALTH: Stat.DEX,
    Skill.ACROBATICS: Stat.DEX,
    Skill.LEGERDEMAIN: Stat.DEX,
    Skill.NEGOTIATION: Stat.CHA,
    Skill.DECEPTION: Stat.CHA,
    Skill.INTIMIDATION: Stat.CHA,
    Skill.SEDUCTION: Stat.CHA,
    Skill.ARCANA: Stat.INT,
    Skill.LORE: Stat.INT,
    Skill.INVESTIGATION: Stat.INT,
    Skill.NATURE: Stat.INT,
    Skill.INSIGHT: Stat.INT,
}

SKILL_NAMES: List[str] = [skill.value for skill in Skill]


class Slot(str, Enum):
    MAIN_HAND = "mainHand"
    OFF_HAND = "offHand"
    CHEST = "chest"
    BOOTS = "boots"
    GLOVES = "gloves"
    HEADGEAR = "headgear"
    CAPE = "cape"
    NECKLACE = "necklace"
    RING = "ring"
    OTHER = "other"


SLOT_NAMES: List[str] = [slot.value for slot in Slot]
HAND_SLOTS = (Slot.MAIN_HAND.value, Slot.OFF_HAND.value)


class BonusType(str, Enum):
    STR = "STR"
    DEX = "DEX"
    INT = "INT"
    CHA = "CHA"
    HP = "HP"
    MANA = "Mana"
    AC = "AC"
    SPEED = "Speed"
    # Item-only bonus types
    DAMAGE = "Damage"
    ATTACK_BONUS = "AttackBonus"


STAT_BONUS_TYPES = (BonusType.STR, BonusType.DEX, BonusType.INT, BonusType.CHA)
CATALOG_BONUS_TYPES = STAT_BONUS_TYPES + (
    BonusType.HP,
    BonusType.MANA,
    BonusType.AC,
    BonusType.SPEED,
)


class ItemCategory(str, Enum):
    WEAPON = "Weapon"
    ARMOR = "Armor"
    SHIELD = "Shield"
    CONSUMABLE = "Consumable"
    TOOL = "Tool"
    TREASURE = "Treasure"
    QUEST = "Quest"
    MATERIAL = "Material"
    CONTAINER = "Container"
    MISCELLANEOUS = "Miscellaneous"


EQUIPABLE_CATEGORIES = (ItemCategory.WEAPON, ItemCategory.ARMOR, ItemCategory.SHIELD)


class WeaponHandling(str, Enum):
    ONE_HANDED = "one-handed"
    TWO_HANDED = "two-handed"
    OFF_HAND_ONLY = "off-hand-only"


class WeaponType(str, Enum):
    HEAVY = "Heavy"
    LIGHT = "Light"
    RANGED = "Ranged"
    STAFF = "Staff"
    WAND = "Wand"


# Used by the catalog save path only; the engine never re-derives handling.
DEFAULT_HANDLING_BY_WEAPON_TYPE: Dict[str, WeaponHandling] = {
    WeaponType.HEAVY.value: WeaponHandling.TWO_HANDED,
    WeaponType.LIGHT.value: WeaponHandling.ONE_HANDED,
    WeaponType.RANGED.value: WeaponHandling.TWO_HANDED,
    WeaponType.STAFF.value: WeaponHandling.TWO_HANDED,
    WeaponType.WAND.value: WeaponHandling.ONE_HANDED,
}


class Rarity(str, Enum):
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"
    ARTIFACT = "Artifact"


RARITY_MULTIPLIERS: Dict[str, int] = {
    Rarity.COMMON.value: 1,
    Rarity.UNCOMMON.value: 3,
    Rarity.RARE.value: 10,
    Rarity.EPIC.value: 50,
    Rarity.LEGENDARY.value: 200,
    Rarity.ARTIFACT.value: 1000,
}


class RequirementType(str, Enum):
    STR = "STR"
    DEX = "DEX"
    INT = "INT"
    CHA = "CHA"
    LEVEL = "Level"
    CLASS = "Class"
    RACE = "Race"
    SKILL = "Skill"


class SpellSchool(str, Enum):
    SACRED_VEIL = "Sacred Veil"
    DRAGON_CHURCH = "Dragon Church"
    SLUMBERING = "Slumbering"
    DEATHWEAVING = "Deathweaving"
    ASTROMANCY = "Astromancy"
    ROOTBOUND = "Rootbound"


# --- Ruleset limits ---
STAT_MIN = 1
STAT_MAX = 10
ITEM_STAT_REQUIREMENT_MAX = 6

LEVEL_MIN = 1
LEVEL_CAP = 10

SPELL_CIRCLE_MIN = 1
SPELL_CIRCLE_MAX = 5

PROFICIENCY_BONUS = 2
LEVEL_UP_HP_RECOVERY = 5
LEVEL_UP_MANA_RECOVERY_DIVISOR = 10

DEFAULT_BASE_AC = 10
DEFAULT_BASE_SPEED = 30
D20_SIDES = 20

RACE_STAT_BONUS_LIMIT = 3
RACE_SPEED_PENALTY_LIMIT = -20
ORIGIN_STAT_BONUS_LIMIT = 2
ORIGIN_SPEED_PENALTY_LIMIT = -10
ITEM_STAT_BONUS_LIMIT = 3

CRAFTING_DIFFICULTY_MIN = 5
CRAFTING_DIFFICULTY_MAX = 25
CRAFTING_DIFFICULTY_DEFAULT = 10

# Tie-break order for abilities unlocked at the same level.
ABILITY_SOURCE_ORDER: Dict[str, int] = {
    "race": 1,
    "origin": 2,
    "class": 3,
    "subclass": 4,
}
