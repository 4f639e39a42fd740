# madking/seeds/__init__.py
"""
Starter catalogs for a fresh database.

Each collection has a JSON file under ``data/`` holding a list of
create-payloads. Entries are validated through the same ``*Create`` schemas
the API uses, so seeded items get the same handling/slot defaults as items
created over HTTP. Entries whose name already exists are skipped, which
makes the loader safe to run on every start.
"""
import json
import logging
import os
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..modules.catalog_pkg import crud as catalog_crud
from ..modules.catalog_pkg import services as catalog_services
from ..shared import with_db_session

logger = logging.getLogger("madking.seeds")

# Load order matters only for readability; catalogs do not reference each other.
SEED_FILES = {
    "races": "races.json",
    "classes": "classes.json",
    "origins": "origins.json",
    "items": "items.json",
    "spells": "spells.json",
}


def get_data_dir() -> str:
    return os.path.join(os.path.dirname(__file__), "data")


def load_json_data(filename: str) -> List[Dict[str, Any]]:
    filepath = os.path.join(get_data_dir(), filename)
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
            logger.info(f"Loaded {filename}")
            return data
    except FileNotFoundError:
        logger.error(f"Seed file not found: {filename}")
        return []
    except json.JSONDecodeError as e:
        logger.error(f"Error decoding {filename}: {e}")
        return []


def seed_collection(db: Session, collection: str, entries: List[Dict[str, Any]]) -> int:
    """
    Creates every entry whose name is not already taken.

    Args:
        db (Session): The database session.
        collection (str): Catalog key, e.g. ``"items"``.
        entries (List[Dict]): Raw create-payloads.

    Returns:
        int: Number of entries created.
    """
    create_schema = catalog_crud.CATALOGS[collection].create_schema
    created = 0
    for raw in entries:
        name = raw.get("name")
        if name and catalog_crud.find_by_name(db, collection, name) is not None:
            logger.debug(f"Skipping existing {collection} entry '{name}'")
            continue
        try:
            payload = create_schema.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Invalid {collection} seed '{name}': {e}")
            continue
        catalog_services.create_entry(db, collection, payload)
        created += 1
    return created


@with_db_session(SessionLocal)
def load_seeds(db: Session = None) -> Dict[str, int]:
    """Seeds every catalog. Returns the number of new entries per collection."""
    logger.info("--- Seeding catalogs ---")
    summary = {}
    for collection, filename in SEED_FILES.items():
        summary[collection] = seed_collection(db, collection, load_json_data(filename))
    logger.info(f"Seeding complete: {summary}")
    return summary
