# madking/modules/catalog_pkg/services.py
import logging
import random
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..rules_pkg import availability, catalog_logic
from . import crud, schemas

logger = logging.getLogger("madking.catalog.services")


def list_entries(db: Session, collection: str, filters: Optional[Dict[str, Any]] = None,
                 skip: int = 0, limit: int = 100,
                 ranges: Optional[Dict[str, Tuple[Any, Any]]] = None,
                 predicate: Optional[Callable[[BaseModel], bool]] = None) -> List[BaseModel]:
    return crud.list_entries(
        db, collection, filters=filters, skip=skip, limit=limit, ranges=ranges, predicate=predicate
    )


def get_entry(db: Session, collection: str, entry_id: str) -> BaseModel:
    return crud.get_entry(db, collection, entry_id)


def _warn_on_cheap_spell(payload: BaseModel) -> None:
    if isinstance(payload, schemas.SpellCreate) and payload.mana_cost < payload.circle:
        logger.warning(
            f"Spell '{payload.name}' has mana cost {payload.mana_cost} "
            f"which seems low for circle {payload.circle}"
        )


def create_entry(db: Session, collection: str, payload: BaseModel) -> BaseModel:
    _warn_on_cheap_spell(payload)
    return crud.save_entry(db, collection, payload)


def update_entry(db: Session, collection: str, entry_id: str, payload: BaseModel) -> BaseModel:
    _warn_on_cheap_spell(payload)
    return crud.save_entry(db, collection, payload, entry_id=entry_id)


def delete_entry(db: Session, collection: str, entry_id: str) -> BaseModel:
    return crud.delete_entry(db, collection, entry_id)


# --- Derived views ---
def race_traits(db: Session, race_id: str, level: int, subrace: Optional[str] = None) -> Dict[str, Any]:
    """Abilities, skills and bonus totals a race (and optional subrace) grants at a level."""
    race = crud.get_race(db, race_id)
    bonuses = catalog_logic.race_bonuses(race, subrace)
    return {
        "race": race.name,
        "subrace": subrace if race.get_subrace(subrace) else None,
        "level": level,
        "abilities": catalog_logic.race_abilities_at_level(race, level, subrace),
        "skills": catalog_logic.race_skills(race, subrace),
        "stat_bonuses": catalog_logic.stat_bonuses(bonuses),
        "combat_bonuses": catalog_logic.combat_bonuses(bonuses),
    }


def class_progression(db: Session, class_id: str, level: int, subclass: Optional[str] = None) -> Dict[str, Any]:
    """Per-level HP/mana totals and the abilities a class (and optional subclass) has unlocked."""
    character_class = crud.get_class(db, class_id)
    subclass_abilities = []
    if subclass:
        subclass_abilities = catalog_logic.subclass_abilities_at_level(character_class, subclass, level)
    return {
        "class": character_class.name,
        "level": level,
        "hp_bonus": catalog_logic.hp_bonus_at_level(character_class, level),
        "mana_bonus": catalog_logic.mana_bonus_at_level(character_class, level),
        "abilities": catalog_logic.class_abilities_at_level(character_class, level),
        "subclass": subclass,
        "subclass_abilities": subclass_abilities,
    }


def origin_background(db: Session, origin_id: str, seed: Optional[int] = None) -> schemas.OriginBackground:
    origin = crud.get_origin(db, origin_id)
    rng = random.Random(seed) if seed is not None else None
    return catalog_logic.generate_background(origin, rng)


def origin_connections(db: Session, origin_id: str, relationship: str) -> List[schemas.Connection]:
    origin = crud.get_origin(db, origin_id)
    return catalog_logic.connections_by_relationship(origin, relationship)


def spell_mana_cost(db: Session, spell_id: str, caster_level: int) -> Dict[str, Any]:
    """What a caster of a given level pays for a spell, and whether they can reach its circle."""
    spell = crud.get_spell(db, spell_id)
    return {
        "spell": spell.name,
        "circle": spell.circle,
        "caster_level": caster_level,
        "mana_cost": catalog_logic.mana_cost_for_level(spell, caster_level),
        "castable": spell.circle <= availability.max_spell_circle(caster_level),
    }
