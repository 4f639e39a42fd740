"""
Typed failures raised by the rules engine and the persistence layer.

Every failure carries a ``kind`` plus the ids/names needed to build a
precise message. The HTTP layer maps kinds to status codes; nothing in
here knows about HTTP.
"""
from typing import Any, Dict, List, Optional


class CharacterSheetError(Exception):
    """Base class for every expected, typed failure."""

    kind = "CharacterSheetError"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, **self.details}


class NotFound(CharacterSheetError):
    kind = "NotFound"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} '{entity_id}' not found", entity=entity, id=entity_id)
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(CharacterSheetError):
    kind = "ValidationError"

    def __init__(self, field_errors: List[Dict[str, str]], message: str = "Validation failed"):
        super().__init__(message, field_errors=field_errors)
        self.field_errors = field_errors

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}], message=message)


class DuplicateKey(CharacterSheetError):
    kind = "DuplicateKey"

    def __init__(self, field: str, value: Optional[Any] = None):
        super().__init__(f"Duplicate value for unique field '{field}'", field=field, value=value)
        self.field = field
        self.value = value


class UnknownSkill(CharacterSheetError):
    kind = "UnknownSkill"

    def __init__(self, name: str):
        super().__init__(f"Unknown skill '{name}'", skill=name)
        self.name = name


class UnknownBonusType(CharacterSheetError):
    kind = "UnknownBonusType"

    def __init__(self, name: str):
        super().__init__(f"Unknown bonus type '{name}'", bonus_type=name)
        self.name = name


class ItemNotInInventory(CharacterSheetError):
    kind = "ItemNotInInventory"

    def __init__(self, item_id: str):
        super().__init__(f"Item '{item_id}' not found in character inventory", item_id=item_id)
        self.item_id = item_id


class ItemNotEquipable(CharacterSheetError):
    kind = "ItemNotEquipable"

    def __init__(self, item_id: str):
        super().__init__(f"Item '{item_id}' is not equipable", item_id=item_id)
        self.item_id = item_id


class ItemNotCraftable(CharacterSheetError):
    kind = "ItemNotCraftable"

    def __init__(self, item_id: str, reason: str):
        super().__init__(f"Cannot craft item '{item_id}': {reason}", item_id=item_id, reason=reason)
        self.item_id = item_id
        self.reason = reason


class ItemNotEquipped(CharacterSheetError):
    kind = "ItemNotEquipped"

    def __init__(self, item_id: str):
        super().__init__(f"Item '{item_id}' is not equipped", item_id=item_id)
        self.item_id = item_id


class AmbiguousEquip(CharacterSheetError):
    kind = "AmbiguousEquip"

    def __init__(self, item_id: str):
        super().__init__(f"Cannot determine how to equip item '{item_id}'", item_id=item_id)
        self.item_id = item_id


class DuplicateInventoryItem(CharacterSheetError):
    kind = "DuplicateInventoryItem"

    def __init__(self, item_id: str):
        super().__init__(f"Item '{item_id}' is already carried", item_id=item_id)
        self.item_id = item_id


class MaxLevelReached(CharacterSheetError):
    kind = "MaxLevelReached"

    def __init__(self, level: int):
        super().__init__(f"Character is already at maximum level ({level})", level=level)
        self.level = level


class SpellCircleTooHigh(CharacterSheetError):
    kind = "SpellCircleTooHigh"

    def __init__(self, spell_id: str, circle: int, max_circle: int):
        super().__init__(
            f"Spell '{spell_id}' is circle {circle}; character can only learn up to circle {max_circle}",
            spell_id=spell_id,
            circle=circle,
            max_circle=max_circle,
        )
        self.spell_id = spell_id
        self.circle = circle
        self.max_circle = max_circle


class SpellAlreadyKnown(CharacterSheetError):
    kind = "SpellAlreadyKnown"

    def __init__(self, spell_id: str):
        super().__init__(f"Spell '{spell_id}' is already known", spell_id=spell_id)
        self.spell_id = spell_id


class SpellNotKnown(CharacterSheetError):
    kind = "SpellNotKnown"

    def __init__(self, spell_id: str):
        super().__init__(f"Spell '{spell_id}' is not known", spell_id=spell_id)
        self.spell_id = spell_id
