# madking/modules/character.py
"""
HTTP adapter for the character module.

Routes are thin: they unpack the request, call into `character_pkg.services`
and wrap the result in the standard response envelope. Typed rule failures
propagate to the exception handlers registered in `madking.main`.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..shared import envelope
from .character_pkg import schemas
from .character_pkg import services as char_services

logger = logging.getLogger("madking.character")

router = APIRouter(prefix="/characters", tags=["Characters"])


# --- CRUD ---
@router.get("")
def list_characters_endpoint(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    characters = char_services.list_characters(db, skip=skip, limit=limit)
    return envelope(characters, count=len(characters))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_character_endpoint(payload: schemas.CharacterCreate, db: Session = Depends(get_db)):
    logger.info(f"Creating character: {payload.name}")
    character = char_services.create_character(db, payload)
    return envelope(character, message="Character created successfully")


@router.get("/{character_id}")
def get_character_endpoint(
    character_id: str,
    computed: bool = Query(False, description="Include derived values (AC, skills, abilities, spells)."),
    db: Session = Depends(get_db),
):
    view = char_services.get_character_view(db, character_id, computed=computed)
    return envelope(view)


@router.put("/{character_id}")
def update_character_endpoint(
    character_id: str,
    payload: schemas.CharacterUpdate,
    db: Session = Depends(get_db),
):
    character = char_services.update_character(db, character_id, payload)
    return envelope(character, message="Character updated successfully")


@router.patch("/{character_id}")
def patch_character_endpoint(
    character_id: str,
    patch: schemas.CharacterPatch,
    db: Session = Depends(get_db),
):
    character = char_services.patch_character(db, character_id, patch)
    return envelope(character, message="Character updated successfully")


@router.delete("/{character_id}")
def delete_character_endpoint(character_id: str, db: Session = Depends(get_db)):
    logger.info(f"Deleting character: {character_id}")
    character = char_services.delete_character(db, character_id)
    return envelope(character, message="Character deleted successfully")


# --- Progression ---
@router.post("/{character_id}/level-up")
def level_up_endpoint(character_id: str, db: Session = Depends(get_db)):
    character = char_services.level_up(db, character_id)
    return envelope(character, message=f"Character leveled up to level {character.level}")


@router.post("/{character_id}/experience")
def award_experience_endpoint(
    character_id: str,
    request: schemas.ExperienceRequest,
    db: Session = Depends(get_db),
):
    character = char_services.award_experience(db, character_id, request.amount)
    return envelope(character, message=f"Awarded {request.amount} experience")


# --- Spells ---
@router.post("/{character_id}/spells")
def learn_spell_endpoint(
    character_id: str,
    request: schemas.LearnSpellRequest,
    db: Session = Depends(get_db),
):
    character = char_services.learn_spell(db, character_id, request.spell_id)
    return envelope(character, message="Spell learned")


@router.delete("/{character_id}/spells/{spell_id}")
def forget_spell_endpoint(character_id: str, spell_id: str, db: Session = Depends(get_db)):
    character = char_services.forget_spell(db, character_id, spell_id)
    return envelope(character, message="Spell forgotten")


@router.get("/{character_id}/spells/available")
def available_spells_endpoint(character_id: str, db: Session = Depends(get_db)):
    spells = char_services.get_available_spells(db, character_id)
    return envelope(spells, count=len(spells))


# --- Inventory & equipment ---
@router.post("/{character_id}/items")
def add_item_endpoint(
    character_id: str,
    request: schemas.AddItemRequest,
    db: Session = Depends(get_db),
):
    character = char_services.add_item(db, character_id, request.item_id, request.quantity)
    return envelope(character, message="Item added to inventory")


@router.delete("/{character_id}/items/{item_id}")
def remove_item_endpoint(character_id: str, item_id: str, db: Session = Depends(get_db)):
    character = char_services.remove_item(db, character_id, item_id)
    return envelope(character, message="Item removed from inventory")


@router.post("/{character_id}/equip")
def equip_item_endpoint(
    character_id: str,
    request: schemas.EquipRequest,
    db: Session = Depends(get_db),
):
    character = char_services.equip_item(db, character_id, request.item_id, request.preferred_slot)
    return envelope(character, message="Item equipped successfully")


@router.post("/{character_id}/unequip")
def unequip_item_endpoint(
    character_id: str,
    request: schemas.UnequipRequest,
    db: Session = Depends(get_db),
):
    character = char_services.unequip_item(db, character_id, request.item_id)
    return envelope(character, message="Item unequipped successfully")


# --- Derived views ---
@router.post("/{character_id}/skill-checks/{skill}")
def roll_skill_check_endpoint(character_id: str, skill: str, db: Session = Depends(get_db)):
    result = char_services.roll_skill_check(db, character_id, skill)
    return envelope(result)


@router.get("/{character_id}/abilities")
def available_abilities_endpoint(character_id: str, db: Session = Depends(get_db)):
    abilities = char_services.get_available_abilities(db, character_id)
    return envelope(abilities, count=len(abilities))


@router.get("/{character_id}/armor-class")
def armor_class_endpoint(character_id: str, db: Session = Depends(get_db)):
    return envelope(char_services.get_armor_class(db, character_id))
