import random
from unittest.mock import MagicMock

import pytest

from madking.modules.rules_pkg import core
from madking.modules.rules_pkg.constants import (
    PROFICIENCY_BONUS,
    SKILL_STAT_MAP,
    STAT_MAX,
    STAT_MIN,
    BonusType,
    Skill,
)
from madking.modules.rules_pkg.errors import UnknownBonusType, UnknownSkill

from factories import character


@pytest.mark.parametrize("value", range(STAT_MIN, STAT_MAX + 1))
def test_stat_modifier_is_identity(value):
    assert core.stat_modifier(value) == value


def test_every_skill_has_a_governing_stat():
    assert len(Skill) == 18
    assert set(SKILL_STAT_MAP) == set(Skill)


def test_parse_skill_accepts_camel_case_names():
    assert core.parse_skill("heavyWeapons") is Skill.HEAVY_WEAPONS
    assert core.parse_skill(Skill.LORE) is Skill.LORE


@pytest.mark.parametrize("name", ["HeavyWeapons", "heavy_weapons", "swimming", ""])
def test_parse_skill_rejects_unknown_names(name):
    with pytest.raises(UnknownSkill) as excinfo:
        core.parse_skill(name)
    assert excinfo.value.to_dict()["skill"] == name


def test_parse_bonus_type():
    assert core.parse_bonus_type("Mana") is BonusType.MANA
    with pytest.raises(UnknownBonusType):
        core.parse_bonus_type("Luck")


def test_skill_modifier_without_proficiency_is_the_stat():
    hero = character(stats={"str": 3, "dex": 7})
    assert core.skill_modifier(hero, "athletics") == 3
    assert core.skill_modifier(hero, "stealth") == 7


def test_skill_flag_grants_proficiency():
    hero = character(stats={"int": 5}, skills={"arcana": True})
    assert core.has_proficiency(hero, Skill.ARCANA)
    assert core.skill_modifier(hero, Skill.ARCANA) == 5 + PROFICIENCY_BONUS
    assert core.skill_modifier(hero, Skill.LORE) == 5


def test_extra_skills_grant_proficiency():
    hero = character(stats={"cha": 2}, extra_skills=["deception"])
    assert core.has_proficiency(hero, "deception")
    assert core.skill_modifier(hero, "deception") == 4


def test_skill_modifier_unknown_skill():
    with pytest.raises(UnknownSkill):
        core.skill_modifier(character(), "cooking")


def test_all_skill_modifiers_covers_every_skill():
    hero = character(stats={"str": 2, "dex": 3, "int": 4, "cha": 5}, skills={"heavyWeapons": True})
    modifiers = core.all_skill_modifiers(hero)
    assert len(modifiers) == 18
    assert modifiers["heavyWeapons"] == 4
    assert modifiers["muscle"] == 2
    assert modifiers["legerdemain"] == 3
    assert modifiers["insight"] == 4
    assert modifiers["seduction"] == 5


def test_total_speed_sums_modifiers():
    hero = character(
        base_speed=30,
        speed_modifiers=[
            {"source": "race", "value": -5},
            {"source": "Ring of Swiftness", "value": 10},
        ],
    )
    assert core.total_speed(hero) == 35


def test_roll_skill_check_with_fixed_roll():
    rng = MagicMock()
    rng.randint.return_value = 15
    hero = character(stats={"dex": 4}, skills={"stealth": True})

    result = core.roll_skill_check(hero, "stealth", rng=rng)

    rng.randint.assert_called_once_with(1, 20)
    assert result.roll == 15
    assert result.modifier == 6
    assert result.total == 21
    assert result.is_proficient is True
    assert result.skill is Skill.STEALTH


def test_roll_skill_check_is_reproducible_with_a_seed():
    hero = character(stats={"int": 3})
    first = core.roll_skill_check(hero, "lore", rng=random.Random(42))
    second = core.roll_skill_check(hero, "lore", rng=random.Random(42))
    assert first == second
    assert 1 <= first.roll <= 20
    assert first.total == first.roll + 3
    assert first.is_proficient is False


def test_roll_skill_check_unknown_skill_does_not_roll():
    rng = MagicMock()
    with pytest.raises(UnknownSkill):
        core.roll_skill_check(character(), "flying", rng=rng)
    rng.randint.assert_not_called()
