import logging
import random
from typing import List, Mapping, Optional, Tuple, Union

from ..catalog_pkg.schemas import CharacterClass, CraftingResult, Item, Race
from ..character_pkg.schemas import CharacterSheet
from .constants import (
    EQUIPABLE_CATEGORIES,
    HAND_SLOTS,
    RARITY_MULTIPLIERS,
    BonusType,
    Rarity,
    RequirementType,
    SKILL_NAMES,
    Skill,
    Slot,
    Stat,
)
from .core import has_proficiency, roll_d20, skill_modifier
from .equipment_logic import hand_requirement

logger = logging.getLogger("madking.rules.items")

_REQUIREMENT_STATS = {
    RequirementType.STR: Stat.STR,
    RequirementType.DEX: Stat.DEX,
    RequirementType.INT: Stat.INT,
    RequirementType.CHA: Stat.CHA,
}


def effective_value(item: Item) -> float:
    """Base value scaled by the rarity multiplier (Common x1 ... Artifact x1000)."""
    return item.base_value * RARITY_MULTIPLIERS.get(item.rarity.value, 1)


def is_magical(item: Item) -> bool:
    return item.rarity != Rarity.COMMON or bool(item.abilities) or bool(item.bonuses)


def total_bonus_value(item: Item, bonus_type: Union[str, BonusType]) -> float:
    return sum(bonus.value for bonus in item.bonuses if bonus.type == bonus_type)


def has_requirement(
    item: Item,
    requirement_type: Union[str, RequirementType],
    value: Optional[Union[int, str]] = None,
) -> bool:
    """True if the item carries a requirement of that type (and value, when given)."""
    for req in item.requirements:
        if req.type != requirement_type:
            continue
        if value is None or str(req.value) == str(value):
            return True
    return False


def compatible_slots(item: Item) -> List[Slot]:
    req = hand_requirement(item)
    slots = []
    if req.can_main_hand:
        slots.append(Slot.MAIN_HAND)
    if req.can_off_hand:
        slots.append(Slot.OFF_HAND)
    if item.slot_type is not None and item.slot_type.value not in HAND_SLOTS:
        slots.append(item.slot_type)
    return slots


def can_equip(
    item: Item,
    character: CharacterSheet,
    race: Race,
    character_class: CharacterClass,
) -> Tuple[bool, Optional[str]]:
    """
    Checks an item's requirements against a character.

    Returns (allowed, reason); reason names the first unmet requirement.
    """
    if item.category not in EQUIPABLE_CATEGORIES:
        return False, "Item is not equipable"

    for req in item.requirements:
        if req.type in _REQUIREMENT_STATS:
            have = character.stats.get(_REQUIREMENT_STATS[req.type])
            if have < int(req.value):
                return False, f"Requires {req.type.value} {req.value}, have {have}"
        elif req.type == RequirementType.LEVEL:
            if character.level < int(req.value):
                return False, f"Requires level {req.value}, currently level {character.level}"
        elif req.type == RequirementType.CLASS:
            if character_class.name != req.value:
                return False, f"Requires class: {req.value}"
        elif req.type == RequirementType.RACE:
            if race.name != req.value:
                return False, f"Requires race: {req.value}"
        elif req.type == RequirementType.SKILL:
            if req.value not in SKILL_NAMES or not character.skills.has(Skill(req.value)):
                return False, f"Requires skill proficiency: {req.value}"

    return True, None


# --- Crafting ---
def can_craft(
    item: Item,
    character: CharacterSheet,
    materials: Mapping[str, int],
) -> Tuple[bool, Optional[str]]:
    """
    Checks whether a character could craft an item.

    Args:
        item (Item): The item to craft.
        character (CharacterSheet): The crafter.
        materials (Mapping[str, int]): Quantity on hand per material name.

    Returns:
        Tuple[bool, Optional[str]]: (allowed, reason); reason names the
        first thing missing.
    """
    if not item.craftable:
        return False, "Item is not craftable"
    if item.crafting_skill is not None and not has_proficiency(character, item.crafting_skill):
        return False, f"Requires {item.crafting_skill.value} skill"
    for material in item.crafting_materials:
        if materials.get(material.material_name, 0) < material.quantity:
            return False, f"Insufficient materials: need {material.quantity} {material.material_name}"
    return True, None


def crafting_success(item: Item, character: CharacterSheet, roll: int) -> CraftingResult:
    """Scores a d20 roll against the item's crafting difficulty."""
    modifier = skill_modifier(character, item.crafting_skill) if item.crafting_skill else 0
    total = roll + modifier
    return CraftingResult(
        success=total >= item.crafting_difficulty,
        roll=roll,
        modifier=modifier,
        total=total,
        target_dc=item.crafting_difficulty,
        margin=total - item.crafting_difficulty,
    )


def roll_crafting(
    item: Item,
    character: CharacterSheet,
    rng: Optional[random.Random] = None,
) -> CraftingResult:
    result = crafting_success(item, character, roll_d20(rng))
    logger.debug(f"Crafting {item.name} for {character.id}: {result.total} vs DC {result.target_dc}")
    return result
