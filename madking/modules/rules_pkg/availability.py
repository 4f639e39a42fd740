"""
Level-gated availability of spells and abilities, plus the append-only
spell and inventory lists that feed them.
"""
import logging
import math
from typing import List, Mapping

from ..catalog_pkg.schemas import CharacterClass, Origin, Race, Spell
from ..character_pkg.schemas import AvailableAbility, CharacterSheet, InventoryEntry
from .constants import ABILITY_SOURCE_ORDER, SPELL_CIRCLE_MAX
from .errors import (
    DuplicateInventoryItem,
    ItemNotInInventory,
    SpellAlreadyKnown,
    SpellCircleTooHigh,
    SpellNotKnown,
    ValidationError,
)

logger = logging.getLogger("madking.rules.availability")


# --- Spells ---


def max_spell_circle(level: int) -> int:
    """Highest spell circle reachable at ``level``: one new circle every two levels."""
    return min(SPELL_CIRCLE_MAX, math.ceil(level / 2))


def available_spells(character: CharacterSheet, spells: Mapping[str, Spell]) -> List[Spell]:
    """
    Known spells the character can currently cast.

    Args:
        character (CharacterSheet): The caster.
        spells (Mapping[str, Spell]): Resolved spells keyed by id.

    Returns:
        List[Spell]: Known spells with circle <= max_spell_circle(level),
        in the order they were learned.
    """
    ceiling = max_spell_circle(character.level)
    result = []
    for spell_id in character.spells:
        spell = spells.get(spell_id)
        if spell is None:
            logger.warning(f"Known spell {spell_id} on {character.id} no longer exists")
            continue
        if spell.circle <= ceiling:
            result.append(spell)
    return result


def learn_spell(character: CharacterSheet, spell: Spell) -> CharacterSheet:
    if spell.id in character.spells:
        raise SpellAlreadyKnown(spell.id)
    ceiling = max_spell_circle(character.level)
    if spell.circle > ceiling:
        raise SpellCircleTooHigh(spell.id, spell.circle, ceiling)

    updated = character.model_copy(deep=True)
    updated.spells.append(spell.id)
    logger.info(f"Character {character.id} learned spell {spell.name}")
    return updated


def forget_spell(character: CharacterSheet, spell_id: str) -> CharacterSheet:
    if spell_id not in character.spells:
        raise SpellNotKnown(spell_id)
    updated = character.model_copy(deep=True)
    updated.spells.remove(spell_id)
    return updated


# --- Abilities ---


def available_abilities(
    character: CharacterSheet,
    character_class: CharacterClass,
    race: Race,
    origin: Origin,
) -> List[AvailableAbility]:
    """
    Every ability unlocked at the character's level, tagged with its source.

    Class abilities only count on odd levels and subclass abilities only on
    even levels; race and origin abilities have no parity rule. The result is
    ordered by unlock level, then race, origin, class, subclass.
    """
    level = character.level
    unlocked: List[AvailableAbility] = []

    for ability in race.abilities:
        if ability.level <= level:
            unlocked.append(AvailableAbility(ability=ability, source="race"))

    for ability in origin.abilities:
        if ability.level <= level:
            unlocked.append(AvailableAbility(ability=ability, source="origin"))

    for ability in character_class.abilities:
        if ability.level <= level and ability.level % 2 == 1:
            unlocked.append(AvailableAbility(ability=ability, source="class"))

    subclass = character_class.get_subclass(character.subclass)
    if subclass is not None:
        for ability in subclass.abilities:
            if ability.level <= level and ability.level % 2 == 0:
                unlocked.append(AvailableAbility(ability=ability, source="subclass"))

    unlocked.sort(key=lambda a: (a.ability.level, ABILITY_SOURCE_ORDER[a.source]))
    return unlocked


# --- Inventory ---


def add_item(character: CharacterSheet, item_id: str, quantity: int = 1) -> CharacterSheet:
    """Adds a new inventory entry. An item already carried is rejected, not stacked."""
    if quantity < 1:
        raise ValidationError.single("quantity", "Quantity must be at least 1")
    if character.inventory_entry(item_id) is not None:
        raise DuplicateInventoryItem(item_id)

    updated = character.model_copy(deep=True)
    updated.items.append(InventoryEntry(item_id=item_id, quantity=quantity, equipped=False))
    return updated


def remove_item(character: CharacterSheet, item_id: str) -> CharacterSheet:
    """Drops an inventory entry, unequipping it from any slot it occupies."""
    if character.inventory_entry(item_id) is None:
        raise ItemNotInInventory(item_id)

    updated = character.model_copy(deep=True)
    for slot in updated.equipped_slots.slots_holding(item_id):
        updated.equipped_slots.set(slot, None)
    updated.items = [entry for entry in updated.items if entry.item_id != item_id]
    return updated
