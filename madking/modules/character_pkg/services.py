# madking/modules/character_pkg/services.py
"""
Character use-cases: fetch the character with its references resolved, run
one or more rules-engine operations on that value, then persist the result
with a single save.
"""
import logging
import random
import uuid
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ...shared import safe_update, validation_error_from_pydantic
from ..catalog_pkg import crud as catalog_crud
from ..catalog_pkg import schemas as catalog_schemas
from ..rules_pkg import availability, core, equipment_logic, item_logic, progression
from ..rules_pkg.constants import LEVEL_MIN, Slot
from ..rules_pkg.errors import ItemNotCraftable, NotFound, SpellCircleTooHigh, ValidationError
from . import crud, schemas

logger = logging.getLogger("madking.character.services")


# --- Persistence helpers ---
def _persist(
    db: Session,
    character: schemas.CharacterSheet,
    character_class: catalog_schemas.CharacterClass,
    is_new: bool = False,
) -> schemas.CharacterSheet:
    """Re-derives resource ceilings, then saves once."""
    character = progression.apply_resource_ceilings(character, character_class, is_new=is_new)
    return crud.save_character(db, character)


def _mutate(
    db: Session,
    character_id: str,
    operation: Callable[[schemas.CharacterBundle], schemas.CharacterSheet],
) -> schemas.CharacterSheet:
    bundle = crud.get_character_bundle(db, character_id)
    updated = operation(bundle)
    return _persist(db, updated, bundle.character_class)


def _check_references(
    db: Session,
    payload: schemas.CharacterCreate,
    level: int = LEVEL_MIN,
) -> catalog_schemas.CharacterClass:
    """
    Confirms every referenced catalog entry exists and that every listed
    spell is within reach at `level`. Returns the resolved class.

    Raises:
        ValidationError: Listing each dangling reference.
        SpellCircleTooHigh: For the first spell above the circle allowed at `level`.
    """
    errors = []
    resolved_class = None
    for field, getter in (
        ("race_id", catalog_crud.get_race),
        ("class_id", catalog_crud.get_class),
        ("origin_id", catalog_crud.get_origin),
    ):
        try:
            entry = getter(db, getattr(payload, field))
        except NotFound as e:
            errors.append({"field": field, "message": e.message})
            continue
        if field == "class_id":
            resolved_class = entry

    known_items = catalog_crud.get_items(db, [entry.item_id for entry in payload.items])
    for entry in payload.items:
        if entry.item_id not in known_items:
            errors.append({"field": "items", "message": f"Item '{entry.item_id}' not found"})

    known_spells = catalog_crud.get_spells(db, payload.spells)
    for spell_id in payload.spells:
        if spell_id not in known_spells:
            errors.append({"field": "spells", "message": f"Spell '{spell_id}' not found"})

    if errors:
        raise ValidationError(errors)

    ceiling = availability.max_spell_circle(level)
    for spell_id in payload.spells:
        spell = known_spells[spell_id]
        if spell.circle > ceiling:
            raise SpellCircleTooHigh(spell_id, spell.circle, ceiling)
    return resolved_class


# --- Queries ---
def list_characters(db: Session, skip: int = 0, limit: int = 100) -> List[schemas.CharacterSheet]:
    return crud.list_characters(db, skip=skip, limit=limit)


def get_character(db: Session, character_id: str) -> schemas.CharacterSheet:
    return crud.get_character(db, character_id)


def computed_values(db: Session, bundle: schemas.CharacterBundle) -> schemas.ComputedValues:
    """Every derived value for a character, from one resolved bundle."""
    character = bundle.character
    return schemas.ComputedValues(
        total_ac=equipment_logic.total_armor_class(
            character, bundle.items, resolve=lambda item_id: catalog_crud.get_item(db, item_id)
        ),
        total_speed=core.total_speed(character),
        max_spell_circle=availability.max_spell_circle(character.level),
        skill_modifiers=core.all_skill_modifiers(character),
        available_spells=availability.available_spells(character, bundle.spells),
        available_abilities=availability.available_abilities(
            character, bundle.character_class, bundle.race, bundle.origin
        ),
    )


def get_character_view(db: Session, character_id: str, computed: bool = False) -> Dict[str, Any]:
    """The stored sheet, optionally with a ``computed`` overlay of derived values."""
    if not computed:
        return {"character": crud.get_character(db, character_id)}
    bundle = crud.get_character_bundle(db, character_id)
    return {"character": bundle.character, "computed": computed_values(db, bundle)}


def get_available_abilities(db: Session, character_id: str) -> List[schemas.AvailableAbility]:
    bundle = crud.get_character_bundle(db, character_id)
    return availability.available_abilities(
        bundle.character, bundle.character_class, bundle.race, bundle.origin
    )


def get_available_spells(db: Session, character_id: str) -> List[catalog_schemas.Spell]:
    bundle = crud.get_character_bundle(db, character_id)
    return availability.available_spells(bundle.character, bundle.spells)


def get_armor_class(db: Session, character_id: str) -> schemas.ArmorClassResponse:
    character = crud.get_character(db, character_id)
    total = equipment_logic.total_armor_class(
        character, {}, resolve=lambda item_id: catalog_crud.get_item(db, item_id)
    )
    return schemas.ArmorClassResponse(base_ac=character.base_ac, total_ac=total)


def roll_skill_check(
    db: Session,
    character_id: str,
    skill: str,
    rng: Optional[random.Random] = None,
) -> schemas.SkillCheckResult:
    # Validate the name before touching the database.
    skill = core.parse_skill(skill)
    character = crud.get_character(db, character_id)
    return core.roll_skill_check(character, skill, rng=rng)


def can_equip(db: Session, item_id: str, character_id: str) -> catalog_schemas.CanEquipResponse:
    item = catalog_crud.get_entry(db, "items", item_id)
    bundle = crud.get_character_bundle(db, character_id)
    allowed, reason = item_logic.can_equip(item, bundle.character, bundle.race, bundle.character_class)
    return catalog_schemas.CanEquipResponse(can_equip=allowed, reason=reason)


def _materials_on_hand(bundle: schemas.CharacterBundle) -> Dict[str, int]:
    """Carried quantity per item name; dangling inventory entries are ignored."""
    on_hand: Dict[str, int] = {}
    for entry in bundle.character.items:
        item = bundle.items.get(entry.item_id)
        if item is not None:
            on_hand[item.name] = on_hand.get(item.name, 0) + entry.quantity
    return on_hand


def can_craft(db: Session, item_id: str, character_id: str) -> catalog_schemas.CanCraftResponse:
    item = catalog_crud.get_entry(db, "items", item_id)
    bundle = crud.get_character_bundle(db, character_id)
    allowed, reason = item_logic.can_craft(item, bundle.character, _materials_on_hand(bundle))
    return catalog_schemas.CanCraftResponse(can_craft=allowed, reason=reason)


def roll_crafting(
    db: Session,
    item_id: str,
    character_id: str,
    rng: Optional[random.Random] = None,
) -> catalog_schemas.CraftingResult:
    """
    Rolls a crafting attempt. Nothing is consumed or created.

    Raises:
        ItemNotCraftable: If the item is not craftable, or the character
            lacks the skill or the materials.
    """
    item = catalog_crud.get_entry(db, "items", item_id)
    bundle = crud.get_character_bundle(db, character_id)
    allowed, reason = item_logic.can_craft(item, bundle.character, _materials_on_hand(bundle))
    if not allowed:
        raise ItemNotCraftable(item_id, reason)
    result = item_logic.roll_crafting(item, bundle.character, rng=rng)
    logger.info(f"Character {character_id} crafting {item.name}: {result.total} vs DC {result.target_dc}")
    return result


# --- Lifecycle ---
def create_character(db: Session, payload: schemas.CharacterCreate) -> schemas.CharacterSheet:
    """
    Creates a level-1 character with empty slots and full HP/mana.

    Raises:
        ValidationError: If a referenced race/class/origin/item/spell does not exist.
    """
    logger.info(f"--- Creating character: {payload.name} ---")
    character_class = _check_references(db, payload)

    data = payload.model_dump()
    for entry in data["items"]:
        entry["equipped"] = False
    character = schemas.CharacterSheet(id=str(uuid.uuid4()), level=1, **data)

    saved = _persist(db, character, character_class, is_new=True)
    logger.info(f"Created character '{saved.name}' ({saved.id}) hp={saved.hp}/{saved.max_hp}")
    return saved


def update_character(db: Session, character_id: str, payload: schemas.CharacterUpdate) -> schemas.CharacterSheet:
    """
    Full replacement. Equipped slots are kept where the item is still carried.

    Level is never replaced: it only moves through `level_up`. Experience,
    hp and mana keep their stored values unless the payload sets them.

    Raises:
        ValidationError: If the payload asks for a different level, or a
            reference does not exist.
        SpellCircleTooHigh: If a listed spell is above the current circle.
    """
    existing = crud.get_character(db, character_id)
    if payload.level is not None and payload.level != existing.level:
        raise ValidationError.single(
            "level", f"Level is {existing.level} and can only change through level-up"
        )
    character_class = _check_references(db, payload, existing.level)

    data = payload.model_dump()
    data["level"] = existing.level
    for field in ("experience", "hp", "mana"):
        if field not in payload.model_fields_set:
            data[field] = getattr(existing, field)
    character = schemas.CharacterSheet(
        id=existing.id,
        equipped_slots=existing.equipped_slots,
        created_at=existing.created_at,
        **data,
    )
    character = equipment_logic.reconcile_equipment(character)
    saved = _persist(db, character, character_class)
    logger.info(f"Replaced character {character_id}")
    return saved


def patch_character(db: Session, character_id: str, patch: schemas.CharacterPatch) -> schemas.CharacterSheet:
    """Merges the supplied fields into the stored sheet. References cannot change here."""
    bundle = crud.get_character_bundle(db, character_id)
    diff = patch.model_dump(exclude_unset=True, by_alias=True)
    merged = safe_update(bundle.character.model_dump(by_alias=True), diff)
    try:
        character = schemas.CharacterSheet.model_validate(merged)
    except PydanticValidationError as e:
        raise validation_error_from_pydantic(e) from e

    saved = _persist(db, character, bundle.character_class)
    logger.info(f"Patched character {character_id}: {sorted(diff)}")
    return saved


def delete_character(db: Session, character_id: str) -> schemas.CharacterSheet:
    return crud.delete_character(db, character_id)


# --- State transitions ---
def level_up(db: Session, character_id: str) -> schemas.CharacterSheet:
    return _mutate(db, character_id, lambda b: progression.level_up(b.character, b.character_class))


def award_experience(db: Session, character_id: str, amount: int) -> schemas.CharacterSheet:
    return _mutate(db, character_id, lambda b: progression.award_experience(b.character, amount))


def learn_spell(db: Session, character_id: str, spell_id: str) -> schemas.CharacterSheet:
    spell = catalog_crud.get_spell(db, spell_id)
    return _mutate(db, character_id, lambda b: availability.learn_spell(b.character, spell))


def forget_spell(db: Session, character_id: str, spell_id: str) -> schemas.CharacterSheet:
    return _mutate(db, character_id, lambda b: availability.forget_spell(b.character, spell_id))


def add_item(db: Session, character_id: str, item_id: str, quantity: int = 1) -> schemas.CharacterSheet:
    item = catalog_crud.get_item(db, item_id)
    if item is None:
        raise NotFound("Item", item_id)
    saved = _mutate(db, character_id, lambda b: availability.add_item(b.character, item_id, quantity))
    logger.info(f"Character {character_id} picked up {quantity} x {item.name}")
    return saved


def remove_item(db: Session, character_id: str, item_id: str) -> schemas.CharacterSheet:
    return _mutate(db, character_id, lambda b: availability.remove_item(b.character, item_id))


def equip_item(
    db: Session,
    character_id: str,
    item_id: str,
    preferred_slot: Optional[Slot] = None,
) -> schemas.CharacterSheet:
    return _mutate(
        db,
        character_id,
        lambda b: equipment_logic.equip_item(b.character, item_id, b.items, preferred_slot),
    )


def unequip_item(db: Session, character_id: str, item_id: str) -> schemas.CharacterSheet:
    return _mutate(
        db,
        character_id,
        lambda b: equipment_logic.unequip_item(b.character, item_id, b.items),
    )
