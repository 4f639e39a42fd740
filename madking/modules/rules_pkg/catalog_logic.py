# catalog_logic.py
"""
Read-only helpers over the race, class, origin and spell catalogs: level-gated
ability lists, bonus totals and origin background generation.
"""
import random
from typing import Dict, List, Optional, Sequence, TypeVar, Union

from ..catalog_pkg.schemas import (
    Bonus,
    CharacterClass,
    Connection,
    LeveledAbility,
    Origin,
    OriginBackground,
    Race,
    Spell,
)
from .constants import LEVEL_CAP, LEVEL_MIN, STAT_BONUS_TYPES, BonusType, Skill
from .core import parse_bonus_type
from .errors import NotFound, ValidationError

T = TypeVar("T")

COMBAT_BONUS_TYPES = (BonusType.HP, BonusType.MANA, BonusType.AC, BonusType.SPEED)


def _check_level(level: int) -> None:
    if not LEVEL_MIN <= level <= LEVEL_CAP:
        raise ValidationError.single("level", f"Level must be between {LEVEL_MIN} and {LEVEL_CAP}")


# --- Bonuses ---


def total_bonus_for_type(bonuses: Sequence[Bonus], bonus_type: Union[str, BonusType]) -> float:
    bonus_type = parse_bonus_type(bonus_type)
    return sum(bonus.value for bonus in bonuses if bonus.type == bonus_type)


def stat_bonuses(bonuses: Sequence[Bonus]) -> Dict[str, float]:
    """Totals per stat, omitting stats with no net bonus."""
    totals = {t.value: total_bonus_for_type(bonuses, t) for t in STAT_BONUS_TYPES}
    return {name: value for name, value in totals.items() if value != 0}


def combat_bonuses(bonuses: Sequence[Bonus]) -> Dict[str, float]:
    return {t.value: total_bonus_for_type(bonuses, t) for t in COMBAT_BONUS_TYPES}


# --- Race ---


def race_bonuses(race: Race, subrace: Optional[str] = None) -> List[Bonus]:
    bonuses = list(race.bonuses)
    sub = race.get_subrace(subrace)
    if sub is not None:
        bonuses.extend(sub.bonuses)
    return bonuses


def race_skills(race: Race, subrace: Optional[str] = None) -> List[Skill]:
    skills = list(race.skills)
    sub = race.get_subrace(subrace)
    if sub is not None:
        skills.extend(s for s in sub.skills if s not in skills)
    return skills


def race_abilities_at_level(race: Race, level: int, subrace: Optional[str] = None) -> List[LeveledAbility]:
    _check_level(level)
    abilities = [a for a in race.abilities if a.level <= level]
    sub = race.get_subrace(subrace)
    if sub is not None:
        abilities.extend(a for a in sub.abilities if a.level <= level)
    return sorted(abilities, key=lambda a: a.level)


# --- Class ---


def class_abilities_at_level(character_class: CharacterClass, level: int) -> List[LeveledAbility]:
    _check_level(level)
    return [a for a in character_class.abilities if a.level <= level and a.level % 2 == 1]


def subclass_abilities_at_level(
    character_class: CharacterClass,
    subclass: str,
    level: int,
) -> List[LeveledAbility]:
    """
    Even-level abilities of a named subclass.

    Raises:
        NotFound: If the class has no subclass by that name.
    """
    _check_level(level)
    sub = character_class.get_subclass(subclass)
    if sub is None:
        raise NotFound("Subclass", subclass)
    return [a for a in sub.abilities if a.level <= level and a.level % 2 == 0]


def hp_bonus_at_level(character_class: CharacterClass, level: int) -> int:
    _check_level(level)
    return character_class.hp_bonus_per_level * level


def mana_bonus_at_level(character_class: CharacterClass, level: int) -> int:
    _check_level(level)
    return character_class.mana_bonus_per_level * level


# --- Spell ---
def mana_cost_for_level(spell: Spell, caster_level: int) -> int:
    """Mana a caster of `caster_level` pays for the spell. Flat: the listed cost at every level."""
    _check_level(caster_level)
    return spell.mana_cost


# --- Origin ---


def _pick(values: Sequence[T], rng: random.Random) -> Optional[T]:
    if not values:
        return None
    return rng.choice(values)


def roll_starting_wealth(origin: Origin, rng: Optional[random.Random] = None) -> int:
    rng = rng or random.Random()
    return rng.randint(origin.starting_wealth.min, origin.starting_wealth.max)


def connections_by_relationship(origin: Origin, relationship: str) -> List[Connection]:
    return [c for c in origin.connections if c.relationship == relationship]


def generate_background(origin: Origin, rng: Optional[random.Random] = None) -> OriginBackground:
    """
    Rolls a random character background from an origin's narrative tables.

    Each table is sampled independently; empty tables yield None. Only the
    first two connections are carried over.
    """
    rng = rng or random.Random()
    return OriginBackground(
        origin=origin.name,
        personality_trait=_pick(origin.personality_traits, rng),
        ideal=_pick(origin.ideals, rng),
        bond=_pick(origin.bonds, rng),
        flaw=_pick(origin.flaws, rng),
        motivation=_pick(origin.motivations, rng),
        starting_wealth=roll_starting_wealth(origin, rng),
        connections=origin.connections[:2],
    )
