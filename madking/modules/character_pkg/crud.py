# crud.py
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from ..catalog_pkg import crud as catalog_crud
from ..rules_pkg.errors import DuplicateKey, NotFound
from . import models, schemas

logger = logging.getLogger("madking.character.crud")

JSON_COLUMNS = (
    "stats",
    "skills",
    "extra_skills",
    "speed_modifiers",
    "spells",
    "items",
    "equipped_slots",
)


def get_character_row(db: Session, character_id: str) -> Optional[models.Character]:
    return db.query(models.Character).filter(models.Character.id == character_id).first()


def get_character(db: Session, character_id: str) -> schemas.CharacterSheet:
    """
    Retrieves a single character by its id.

    Args:
        db (Session): The database session.
        character_id (str): The UUID string of the character.

    Returns:
        schemas.CharacterSheet: The stored character, references unresolved.

    Raises:
        NotFound: If no character has that id.
    """
    row = get_character_row(db, character_id)
    if row is None:
        raise NotFound("Character", character_id)
    return schemas.CharacterSheet.model_validate(row)


def list_characters(db: Session, skip: int = 0, limit: int = 100) -> List[schemas.CharacterSheet]:
    rows = db.query(models.Character).order_by(models.Character.name).offset(skip).limit(limit).all()
    return [schemas.CharacterSheet.model_validate(row) for row in rows]


def get_character_bundle(db: Session, character_id: str) -> schemas.CharacterBundle:
    """
    Retrieves a character with race, class, origin, carried items and known
    spells resolved to full value objects.

    Items or spells that no longer exist in the catalog are left out of the
    lookup maps; the engine skips them. A missing race, class or origin is
    an error.
    """
    character = get_character(db, character_id)
    return schemas.CharacterBundle(
        character=character,
        race=catalog_crud.get_race(db, character.race_id),
        character_class=catalog_crud.get_class(db, character.class_id),
        origin=catalog_crud.get_origin(db, character.origin_id),
        items=catalog_crud.get_items(db, [entry.item_id for entry in character.items]),
        spells=catalog_crud.get_spells(db, character.spells),
    )


def save_character(db: Session, character: schemas.CharacterSheet) -> schemas.CharacterSheet:
    """
    Inserts or replaces a character in a single commit.

    Raises:
        DuplicateKey: On a uniqueness violation.
    """
    data = character.model_dump(mode="json", by_alias=True, exclude={"created_at", "updated_at"})
    row = get_character_row(db, character.id)

    if row is None:
        row = models.Character(**data)
        db.add(row)
    else:
        for key, value in data.items():
            setattr(row, key, value)
        for column in JSON_COLUMNS:
            flag_modified(row, column)

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error saving character {character.id}: {e}")
        raise DuplicateKey("id", character.id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error saving character {character.id}: {e}")
        raise

    db.refresh(row)
    return schemas.CharacterSheet.model_validate(row)


def delete_character(db: Session, character_id: str) -> schemas.CharacterSheet:
    row = get_character_row(db, character_id)
    if row is None:
        raise NotFound("Character", character_id)
    removed = schemas.CharacterSheet.model_validate(row)
    try:
        db.delete(row)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error deleting character {character_id}: {e}")
        raise
    logger.info(f"Deleted character '{removed.name}' ({character_id})")
    return removed
