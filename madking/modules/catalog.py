# madking/modules/catalog.py
"""
HTTP adapter for the reference catalogs (races, classes, origins, items,
spells).

All five collections share the same CRUD surface, so their routers are
built by `build_catalog_router`; catalog-specific views are added on top.
"""
import logging
from typing import Callable, Optional, Sequence

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..shared import envelope
from .catalog_pkg import crud as catalog_crud
from .catalog_pkg import services as catalog_services
from .catalog_pkg.schemas import Item
from .character_pkg import services as char_services
from .rules_pkg import item_logic
from .rules_pkg.constants import LEVEL_CAP, LEVEL_MIN, RequirementType
from .rules_pkg.errors import ValidationError

logger = logging.getLogger("madking.catalog")


def _coerce(name: str, raw: str, python_type):
    try:
        if python_type is bool:
            if raw.lower() not in ("true", "false", "1", "0"):
                raise ValueError(raw)
            return raw.lower() in ("true", "1")
        return python_type(raw)
    except ValueError:
        raise ValidationError.single(name, f"Invalid value '{raw}' for {name}") from None


def _parse_filters(request: Request, collection: str, allowed: Sequence[str]):
    """Picks the whitelisted query parameters and coerces them to the column type."""
    table = catalog_crud.CATALOGS[collection].model.__table__
    filters = {}
    for name in allowed:
        raw = request.query_params.get(name)
        if raw is None:
            continue
        filters[name] = _coerce(name, raw, table.c[name].type.python_type)
    return filters


def _parse_ranges(request: Request, collection: str, allowed: Sequence[str]):
    """Reads ``min_<column>`` / ``max_<column>`` bounds for the whitelisted columns."""
    table = catalog_crud.CATALOGS[collection].model.__table__
    ranges = {}
    for name in allowed:
        python_type = table.c[name].type.python_type
        bounds = []
        for prefix in ("min", "max"):
            param = f"{prefix}_{name}"
            raw = request.query_params.get(param)
            bounds.append(None if raw is None else _coerce(param, raw, python_type))
        low, high = bounds
        if low is None and high is None:
            continue
        if low is not None and high is not None and low > high:
            raise ValidationError.single(f"min_{name}", f"min_{name} is greater than max_{name}")
        ranges[name] = (low, high)
    return ranges


def _item_predicate(request: Request) -> Optional[Callable[[Item], bool]]:
    """``magical`` and ``requirement_type``/``requirement_value`` filters, which live in JSON columns."""
    checks = []
    raw = request.query_params.get("magical")
    if raw is not None:
        magical = _coerce("magical", raw, bool)
        checks.append(lambda item: item_logic.is_magical(item) == magical)

    raw_type = request.query_params.get("requirement_type")
    raw_value = request.query_params.get("requirement_value")
    if raw_value is not None and raw_type is None:
        raise ValidationError.single("requirement_type", "requirement_value needs a requirement_type")
    if raw_type is not None:
        try:
            requirement_type = RequirementType(raw_type)
        except ValueError:
            raise ValidationError.single(
                "requirement_type", f"Invalid value '{raw_type}' for requirement_type"
            ) from None
        checks.append(lambda item: item_logic.has_requirement(item, requirement_type, raw_value))

    if not checks:
        return None
    return lambda item: all(check(item) for check in checks)


def build_catalog_router(
    collection: str,
    tag: str,
    filter_fields: Sequence[str] = (),
    range_fields: Sequence[str] = (),
    predicate_parser: Optional[Callable[[Request], Optional[Callable[[BaseModel], bool]]]] = None,
) -> APIRouter:
    """
    Builds list/create/get/update/delete routes for one catalog collection.

    Args:
        collection (str): Key in ``catalog_crud.CATALOGS`` and the URL prefix.
        tag (str): OpenAPI tag.
        filter_fields (Sequence[str]): Columns that may be filtered on by
            exact match via query parameters.
        range_fields (Sequence[str]): Columns that accept ``min_<column>``
            and ``max_<column>`` query parameters.
        predicate_parser (Callable, optional): Builds an extra per-entry
            filter from the request, or returns None.
    """
    catalog = catalog_crud.CATALOGS[collection]
    create_schema = catalog.create_schema
    label = catalog.label
    router = APIRouter(prefix=f"/{collection}", tags=[tag])

    @router.get("")
    def list_entries_endpoint(
        request: Request,
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=500),
        db: Session = Depends(get_db),
    ):
        filters = _parse_filters(request, collection, filter_fields)
        ranges = _parse_ranges(request, collection, range_fields)
        predicate = predicate_parser(request) if predicate_parser else None
        entries = catalog_services.list_entries(
            db, collection, filters=filters, skip=skip, limit=limit, ranges=ranges, predicate=predicate
        )
        return envelope(entries, count=len(entries))

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_entry_endpoint(payload: create_schema, db: Session = Depends(get_db)):
        entry = catalog_services.create_entry(db, collection, payload)
        return envelope(entry, message=f"{label} created successfully")

    @router.get("/{entry_id}")
    def get_entry_endpoint(entry_id: str, db: Session = Depends(get_db)):
        return envelope(catalog_services.get_entry(db, collection, entry_id))

    @router.put("/{entry_id}")
    def update_entry_endpoint(entry_id: str, payload: create_schema, db: Session = Depends(get_db)):
        entry = catalog_services.update_entry(db, collection, entry_id, payload)
        return envelope(entry, message=f"{label} updated successfully")

    @router.delete("/{entry_id}")
    def delete_entry_endpoint(entry_id: str, db: Session = Depends(get_db)):
        logger.info(f"Deleting {collection} entry: {entry_id}")
        removed = catalog_services.delete_entry(db, collection, entry_id)
        return envelope(removed, message=f"{label} deleted successfully")

    return router


race_router = build_catalog_router("races", "Races", ("size",))
class_router = build_catalog_router("classes", "Classes")
origin_router = build_catalog_router("origins", "Origins", ("category", "social_standing", "rarity"))
item_router = build_catalog_router(
    "items",
    "Items",
    ("category", "rarity", "weapon_type", "slot_type", "craftable"),
    range_fields=("base_value",),
    predicate_parser=_item_predicate,
)
spell_router = build_catalog_router(
    "spells", "Spells", ("circle", "school"), range_fields=("circle", "mana_cost")
)


# --- Catalog-specific views ---
@race_router.get("/{race_id}/traits")
def race_traits_endpoint(
    race_id: str,
    level: int = Query(LEVEL_MIN, ge=LEVEL_MIN, le=LEVEL_CAP),
    subrace: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return envelope(catalog_services.race_traits(db, race_id, level, subrace))


@class_router.get("/{class_id}/progression")
def class_progression_endpoint(
    class_id: str,
    level: int = Query(LEVEL_MIN, ge=LEVEL_MIN, le=LEVEL_CAP),
    subclass: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return envelope(catalog_services.class_progression(db, class_id, level, subclass))


@origin_router.get("/{origin_id}/background")
def origin_background_endpoint(
    origin_id: str,
    seed: Optional[int] = Query(None, description="Seed for a reproducible roll."),
    db: Session = Depends(get_db),
):
    return envelope(catalog_services.origin_background(db, origin_id, seed))


@origin_router.get("/{origin_id}/connections")
def origin_connections_endpoint(
    origin_id: str,
    relationship: str = Query(..., description="e.g. Ally, Enemy, Contact"),
    db: Session = Depends(get_db),
):
    connections = catalog_services.origin_connections(db, origin_id, relationship)
    return envelope(connections, count=len(connections))


@item_router.get("/{item_id}/can-equip/{character_id}")
def can_equip_endpoint(item_id: str, character_id: str, db: Session = Depends(get_db)):
    return envelope(char_services.can_equip(db, item_id, character_id))


@item_router.get("/{item_id}/can-craft/{character_id}")
def can_craft_endpoint(item_id: str, character_id: str, db: Session = Depends(get_db)):
    return envelope(char_services.can_craft(db, item_id, character_id))


@item_router.post("/{item_id}/craft/{character_id}")
def craft_endpoint(item_id: str, character_id: str, db: Session = Depends(get_db)):
    result = char_services.roll_crafting(db, item_id, character_id)
    message = "Crafting succeeded" if result.success else "Crafting failed"
    return envelope(result, message=message)


@spell_router.get("/{spell_id}/mana-cost")
def spell_mana_cost_endpoint(
    spell_id: str,
    level: int = Query(LEVEL_MIN, ge=LEVEL_MIN, le=LEVEL_CAP),
    db: Session = Depends(get_db),
):
    return envelope(catalog_services.spell_mana_cost(db, spell_id, level))


routers = [race_router, class_router, origin_router, item_router, spell_router]
