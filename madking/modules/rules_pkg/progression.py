import logging
import math
from typing import Optional

from ..catalog_pkg.schemas import CharacterClass
from ..character_pkg.schemas import CharacterSheet
from .constants import LEVEL_CAP, LEVEL_UP_HP_RECOVERY, LEVEL_UP_MANA_RECOVERY_DIVISOR
from .errors import MaxLevelReached, ValidationError

logger = logging.getLogger("madking.rules.progression")


def max_hp(level: int, character_class: CharacterClass) -> int:
    return max(1, level * character_class.hp_bonus_per_level)


def max_mana(level: int, character_class: CharacterClass) -> Optional[int]:
    """None when the class grants no mana pool at all."""
    if character_class.mana_bonus_per_level == 0:
        return None
    return max(0, level * character_class.mana_bonus_per_level)


def apply_resource_ceilings(
    character: CharacterSheet,
    character_class: CharacterClass,
    is_new: bool = False,
) -> CharacterSheet:
    """
    Recomputes HP and mana ceilings and clamps the current values.

    Runs before every persist. New characters (and unset current values)
    start at their ceilings; otherwise current values are only ever
    lowered to fit.
    """
    updated = character.model_copy(deep=True)
    updated.max_hp = max_hp(updated.level, character_class)
    updated.max_mana = max_mana(updated.level, character_class)

    if is_new or updated.hp is None:
        updated.hp = updated.max_hp
    elif updated.hp > updated.max_hp:
        logger.info(f"Clamping hp for {character.id}: {updated.hp} -> {updated.max_hp}")
        updated.hp = updated.max_hp

    if updated.max_mana is None:
        updated.mana = None
    elif is_new or updated.mana is None:
        updated.mana = updated.max_mana
    elif updated.mana > updated.max_mana:
        logger.info(f"Clamping mana for {character.id}: {updated.mana} -> {updated.max_mana}")
        updated.mana = updated.max_mana

    return updated


def level_up(character: CharacterSheet, character_class: CharacterClass) -> CharacterSheet:
    """
    Advances a character one level.

    HP recovers by a flat LEVEL_UP_HP_RECOVERY and mana by a tenth of the
    new pool (rounded up); both are capped at the new ceilings. This is a
    partial recovery, not a refill.

    Raises:
        MaxLevelReached: If the character is already at LEVEL_CAP.
    """
    if character.level >= LEVEL_CAP:
        raise MaxLevelReached(character.level)

    updated = character.model_copy(deep=True)
    updated.level += 1
    updated.max_hp = max_hp(updated.level, character_class)
    updated.max_mana = max_mana(updated.level, character_class)

    updated.hp = min((updated.hp or 0) + LEVEL_UP_HP_RECOVERY, updated.max_hp)
    if updated.max_mana is None:
        updated.mana = None
    else:
        recovery = math.ceil(updated.max_mana / LEVEL_UP_MANA_RECOVERY_DIVISOR)
        updated.mana = min((updated.mana or 0) + recovery, updated.max_mana)

    logger.info(f"Character {character.id} advanced to level {updated.level}")
    return updated


def award_experience(character: CharacterSheet, amount: int) -> CharacterSheet:
    """Adds experience. Levelling stays an explicit operation."""
    if amount < 0:
        raise ValidationError.single("amount", "Experience award cannot be negative")
    updated = character.model_copy(deep=True)
    updated.experience += amount
    return updated
