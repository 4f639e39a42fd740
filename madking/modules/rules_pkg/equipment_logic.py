import logging
from typing import Callable, List, Mapping, NamedTuple, Optional

from ..catalog_pkg.schemas import Item
from ..character_pkg.schemas import CharacterSheet
from .constants import BonusType, ItemCategory, Slot, WeaponHandling
from .errors import (
    AmbiguousEquip,
    ItemNotEquipable,
    ItemNotEquipped,
    ItemNotInInventory,
    NotFound,
)

logger = logging.getLogger("madking.rules.equipment")

HAND_SLOT_PAIR = (Slot.MAIN_HAND, Slot.OFF_HAND)


class HandRequirement(NamedTuple):
    hands: int
    can_main_hand: bool
    can_off_hand: bool


def hand_requirement(item: Item) -> HandRequirement:
    """
    How many hands an item needs and which hand slots it may occupy.

    Weapons with no handling recorded are treated as one-handed. Anything
    that is neither a weapon nor a shield uses its fixed slot_type instead.
    """
    if item.category == ItemCategory.WEAPON:
        if item.weapon_handling == WeaponHandling.TWO_HANDED:
            return HandRequirement(2, True, False)
        if item.weapon_handling == WeaponHandling.OFF_HAND_ONLY:
            return HandRequirement(1, False, True)
        return HandRequirement(1, True, True)
    if item.category == ItemCategory.SHIELD:
        return HandRequirement(1, False, True)
    return HandRequirement(0, False, False)


def _sync_equipped_flags(character: CharacterSheet) -> None:
    held = set(character.equipped_slots.occupied().values())
    for entry in character.items:
        entry.equipped = entry.item_id in held


def _vacate(character: CharacterSheet, slot: Slot) -> None:
    """Unequips whatever occupies ``slot``, including its other hand if two-handed."""
    occupant = character.equipped_slots.get(slot)
    if not occupant:
        return
    for held_slot in character.equipped_slots.slots_holding(occupant):
        character.equipped_slots.set(held_slot, None)
    logger.debug(f"Vacated {slot.value} (was {occupant}) on {character.id}")


def _resolve_item(item_id: str, items: Mapping[str, Item]) -> Item:
    item = items.get(item_id)
    if item is None:
        raise NotFound("Item", item_id)
    return item


def equip_item(
    character: CharacterSheet,
    item_id: str,
    items: Mapping[str, Item],
    preferred_slot: Optional[Slot] = None,
) -> CharacterSheet:
    """
    Equips a carried item and returns the updated character.

    Any occupant of the target slot(s) is unequipped first. All of that
    happens on one copy, so the caller persists the final state once.

    Args:
        character (CharacterSheet): The character to equip.
        item_id (str): Id of an item in the character's inventory.
        items (Mapping[str, Item]): Resolved items keyed by id.
        preferred_slot (Slot, optional): mainHand or offHand for items that
            fit either hand. Ignored otherwise.

    Returns:
        CharacterSheet: A new character value with the item equipped.

    Raises:
        ItemNotInInventory, ItemNotEquipable, AmbiguousEquip
    """
    if character.inventory_entry(item_id) is None:
        raise ItemNotInInventory(item_id)
    item = _resolve_item(item_id, items)
    if item.slot_type is None:
        raise ItemNotEquipable(item_id)

    targets: List[Slot]
    if item.category in (ItemCategory.WEAPON, ItemCategory.SHIELD):
        req = hand_requirement(item)
        if req.hands == 2:
            targets = list(HAND_SLOT_PAIR)
        elif req.hands == 1 and req.can_main_hand and req.can_off_hand:
            targets = [preferred_slot if preferred_slot in HAND_SLOT_PAIR else Slot.MAIN_HAND]
        elif req.hands == 1 and req.can_off_hand:
            targets = [Slot.OFF_HAND]
        else:
            raise AmbiguousEquip(item_id)
    else:
        targets = [item.slot_type]

    updated = character.model_copy(deep=True)
    # Re-equipping moves the item rather than duplicating it.
    for held_slot in updated.equipped_slots.slots_holding(item_id):
        updated.equipped_slots.set(held_slot, None)
    for slot in targets:
        _vacate(updated, slot)
    for slot in targets:
        updated.equipped_slots.set(slot, item_id)
    _sync_equipped_flags(updated)

    logger.info(f"Equipped {item.name} ({item_id}) to {[s.value for s in targets]} on {character.id}")
    return updated


def unequip_item(
    character: CharacterSheet,
    item_id: str,
    items: Mapping[str, Item],
) -> CharacterSheet:
    """Removes an item from every slot it holds. Two-handed weapons free both hands."""
    slots = character.equipped_slots.slots_holding(item_id)
    if not slots:
        raise ItemNotEquipped(item_id)

    item = items.get(item_id)
    if item is not None and hand_requirement(item).hands == 2:
        slots = sorted(set(slots) | set(HAND_SLOT_PAIR), key=list(Slot).index)

    updated = character.model_copy(deep=True)
    for slot in slots:
        updated.equipped_slots.set(slot, None)
    _sync_equipped_flags(updated)

    logger.info(f"Unequipped {item_id} from {[s.value for s in slots]} on {character.id}")
    return updated


def reconcile_equipment(character: CharacterSheet) -> CharacterSheet:
    """
    Drops slot references to items that are no longer carried and resets
    every inventory entry's equipped flag to match the slots.
    """
    updated = character.model_copy(deep=True)
    carried = {entry.item_id for entry in updated.items}
    for slot, item_id in updated.equipped_slots.occupied().items():
        if item_id not in carried:
            logger.warning(f"Clearing {slot.value} on {character.id}: {item_id} is not carried")
            updated.equipped_slots.set(slot, None)
    _sync_equipped_flags(updated)
    return updated


def total_armor_class(
    character: CharacterSheet,
    items: Mapping[str, Item],
    resolve: Optional[Callable[[str], Optional[Item]]] = None,
) -> int:
    """
    Base AC plus every AC bonus on every occupied slot.

    A two-handed weapon sits in both hand slots and is counted once per slot.

    Args:
        character (CharacterSheet): The character.
        items (Mapping[str, Item]): Items already resolved for this character.
        resolve (callable, optional): Fetches an item by id when an equipped
            reference is missing from ``items``.

    Returns:
        int: The total armor class.
    """
    total = character.base_ac
    for slot, item_id in character.equipped_slots.occupied().items():
        item = items.get(item_id)
        if item is None and resolve is not None:
            item = resolve(item_id)
        if item is None:
            logger.warning(f"Equipped item {item_id} in {slot.value} could not be resolved; skipping")
            continue
        total += sum(bonus.value for bonus in item.bonuses if bonus.type == BonusType.AC)
    return int(total)
