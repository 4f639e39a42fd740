# crud.py
import logging
import uuid
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple, Type

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..rules_pkg.errors import DuplicateKey, NotFound
from . import models, schemas

logger = logging.getLogger("madking.catalog.crud")


class Catalog(NamedTuple):
    label: str
    model: Type[models.Base]
    schema: Type[BaseModel]
    create_schema: Type[BaseModel]


CATALOGS: Dict[str, Catalog] = {
    "races": Catalog("Race", models.Race, schemas.Race, schemas.RaceCreate),
    "classes": Catalog("Class", models.CharacterClass, schemas.CharacterClass, schemas.CharacterClassCreate),
    "origins": Catalog("Origin", models.Origin, schemas.Origin, schemas.OriginCreate),
    "items": Catalog("Item", models.Item, schemas.Item, schemas.ItemCreate),
    "spells": Catalog("Spell", models.Spell, schemas.Spell, schemas.SpellCreate),
}


def _get_row(db: Session, catalog: Catalog, entry_id: str):
    return db.query(catalog.model).filter(catalog.model.id == entry_id).first()


def get_entry(db: Session, collection: str, entry_id: str) -> BaseModel:
    """
    Retrieves one catalog entry as its resolved pydantic shape.

    Raises:
        NotFound: If no entry has that id.
    """
    catalog = CATALOGS[collection]
    row = _get_row(db, catalog, entry_id)
    if row is None:
        raise NotFound(catalog.label, entry_id)
    return catalog.schema.model_validate(row)


def find_by_name(db: Session, collection: str, name: str) -> Optional[BaseModel]:
    catalog = CATALOGS[collection]
    row = db.query(catalog.model).filter(catalog.model.name == name).first()
    return catalog.schema.model_validate(row) if row is not None else None


def list_entries(
    db: Session,
    collection: str,
    filters: Optional[Dict[str, Any]] = None,
    skip: int = 0,
    limit: int = 100,
    ranges: Optional[Dict[str, Tuple[Any, Any]]] = None,
    predicate: Optional[Callable[[BaseModel], bool]] = None,
) -> List[BaseModel]:
    """
    Lists entries ordered by name.

    Args:
        filters: Exact column matches; None values are ignored.
        ranges: Inclusive ``(low, high)`` bounds per column; either end may be None.
        predicate: Applied to the resolved entries before paging, for
            conditions on JSON columns that SQL cannot express portably.
    """
    catalog = CATALOGS[collection]
    query = db.query(catalog.model)
    for column, value in (filters or {}).items():
        if value is not None:
            query = query.filter(getattr(catalog.model, column) == value)
    for column, (low, high) in (ranges or {}).items():
        if low is not None:
            query = query.filter(getattr(catalog.model, column) >= low)
        if high is not None:
            query = query.filter(getattr(catalog.model, column) <= high)
    query = query.order_by(catalog.model.name)

    if predicate is None:
        rows = query.offset(skip).limit(limit).all()
        return [catalog.schema.model_validate(row) for row in rows]

    entries = [catalog.schema.model_validate(row) for row in query.all()]
    return [entry for entry in entries if predicate(entry)][skip:skip + limit]


def save_entry(
    db: Session,
    collection: str,
    payload: BaseModel,
    entry_id: Optional[str] = None,
) -> BaseModel:
    """
    Inserts a new entry, or fully replaces an existing one when ``entry_id`` is given.

    Raises:
        NotFound: If ``entry_id`` does not exist.
        DuplicateKey: If the name collides with another entry.
    """
    catalog = CATALOGS[collection]
    data = payload.model_dump(mode="json")

    if entry_id is None:
        row = catalog.model(id=str(uuid.uuid4()), **data)
        db.add(row)
    else:
        row = _get_row(db, catalog, entry_id)
        if row is None:
            raise NotFound(catalog.label, entry_id)
        for key, value in data.items():
            setattr(row, key, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Duplicate {catalog.label} name '{data.get('name')}'")
        raise DuplicateKey("name", data.get("name"))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error saving {catalog.label}: {e}")
        raise

    db.refresh(row)
    logger.info(f"Saved {catalog.label} '{row.name}' ({row.id})")
    return catalog.schema.model_validate(row)


def delete_entry(db: Session, collection: str, entry_id: str) -> BaseModel:
    """Deletes an entry immediately and returns what was removed."""
    catalog = CATALOGS[collection]
    row = _get_row(db, catalog, entry_id)
    if row is None:
        raise NotFound(catalog.label, entry_id)
    removed = catalog.schema.model_validate(row)
    try:
        db.delete(row)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error deleting {catalog.label} {entry_id}: {e}")
        raise
    logger.info(f"Deleted {catalog.label} '{removed.name}' ({entry_id})")
    return removed


# --- Typed lookups used by the character module ---
def get_race(db: Session, race_id: str) -> schemas.Race:
    return get_entry(db, "races", race_id)


def get_class(db: Session, class_id: str) -> schemas.CharacterClass:
    return get_entry(db, "classes", class_id)


def get_origin(db: Session, origin_id: str) -> schemas.Origin:
    return get_entry(db, "origins", origin_id)


def get_item(db: Session, item_id: str) -> Optional[schemas.Item]:
    """Item by id, or None. Used as the resolve callback for armor class."""
    row = _get_row(db, CATALOGS["items"], item_id)
    return schemas.Item.model_validate(row) if row is not None else None


def get_spell(db: Session, spell_id: str) -> schemas.Spell:
    return get_entry(db, "spells", spell_id)


def get_items(db: Session, item_ids: Iterable[str]) -> Dict[str, schemas.Item]:
    ids = list(item_ids)
    if not ids:
        return {}
    rows = db.query(models.Item).filter(models.Item.id.in_(ids)).all()
    return {row.id: schemas.Item.model_validate(row) for row in rows}


def get_spells(db: Session, spell_ids: Iterable[str]) -> Dict[str, schemas.Spell]:
    ids = list(spell_ids)
    if not ids:
        return {}
    rows = db.query(models.Spell).filter(models.Spell.id.in_(ids)).all()
    return {row.id: schemas.Spell.model_validate(row) for row in rows}
