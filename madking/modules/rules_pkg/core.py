# core.py
import logging
import random
from typing import Dict, Optional, Union

from ..character_pkg.schemas import CharacterSheet, SkillCheckResult
from .constants import (
    D20_SIDES,
    PROFICIENCY_BONUS,
    SKILL_STAT_MAP,
    BonusType,
    Skill,
)
from .errors import UnknownBonusType, UnknownSkill

logger = logging.getLogger("madking.rules.core")


# --- Name Resolution ---


def parse_skill(name: Union[str, Skill]) -> Skill:
    """
    Resolves a skill name to the closed skill vocabulary.

    Args:
        name (str | Skill): A camelCase skill name such as ``"stealth"``.

    Returns:
        Skill: The matching enum member.

    Raises:
        UnknownSkill: If the name is not one of the 18 skills.
    """
    if isinstance(name, Skill):
        return name
    try:
        return Skill(name)
    except ValueError:
        raise UnknownSkill(str(name)) from None


def parse_bonus_type(name: Union[str, BonusType]) -> BonusType:
    if isinstance(name, BonusType):
        return name
    try:
        return BonusType(name)
    except ValueError:
        raise UnknownBonusType(str(name)) from None


# --- Modifiers ---


def stat_modifier(value: int) -> int:
    """
    Direct mapping: a score of 4 is a +4 modifier.

    Stats are bounded to STAT_MIN..STAT_MAX, so there is no
    ``(score - 10) / 2`` conversion.
    """
    return value


def has_proficiency(character: CharacterSheet, skill: Union[str, Skill]) -> bool:
    """True if the skill flag is set or the skill was granted as an extra skill."""
    skill = parse_skill(skill)
    return character.skills.has(skill) or skill in character.extra_skills


def skill_modifier(character: CharacterSheet, skill: Union[str, Skill]) -> int:
    """
    Calculates the total modifier for a skill.

    Args:
        character (CharacterSheet): The character making the check.
        skill (str | Skill): One of the 18 skills.

    Returns:
        int: Governing stat modifier plus PROFICIENCY_BONUS when proficient.
    """
    skill = parse_skill(skill)
    stat = SKILL_STAT_MAP[skill]
    modifier = stat_modifier(character.stats.get(stat))
    if has_proficiency(character, skill):
        modifier += PROFICIENCY_BONUS
    return modifier


def all_skill_modifiers(character: CharacterSheet) -> Dict[str, int]:
    return {skill.value: skill_modifier(character, skill) for skill in Skill}


def total_speed(character: CharacterSheet) -> int:
    return character.base_speed + sum(mod.value for mod in character.speed_modifiers)


# --- Dice Rolling ---


def roll_d20(rng: Optional[random.Random] = None) -> int:
    return (rng or random).randint(1, D20_SIDES)


def roll_skill_check(
    character: CharacterSheet,
    skill: Union[str, Skill],
    rng: Optional[random.Random] = None,
) -> SkillCheckResult:
    """
    Performs a d20 skill check.

    Args:
        character (CharacterSheet): The character making the check.
        skill (str | Skill): One of the 18 skills.
        rng (random.Random, optional): Source of the d20 roll. Anything with
            a ``randint(a, b)`` method works; defaults to the module RNG.

    Returns:
        SkillCheckResult: roll, modifier, total, skill and proficiency.
    """
    skill = parse_skill(skill)
    modifier = skill_modifier(character, skill)
    roll = roll_d20(rng)

    logger.debug(f"Skill check {skill.value} for {character.id}: {roll} + {modifier}")
    return SkillCheckResult(
        roll=roll,
        modifier=modifier,
        total=roll + modifier,
        skill=skill,
        is_proficient=has_proficiency(character, skill),
    )
