import pytest

from madking.modules.rules_pkg import progression
from madking.modules.rules_pkg.constants import LEVEL_CAP
from madking.modules.rules_pkg.errors import MaxLevelReached, ValidationError

from factories import character, warrior


def test_max_hp_and_mana_scale_with_level():
    cls = warrior()
    assert progression.max_hp(1, cls) == 10
    assert progression.max_hp(4, cls) == 40
    assert progression.max_mana(3, cls) == 6


def test_max_hp_is_at_least_one():
    assert progression.max_hp(3, warrior(hp_bonus_per_level=0)) == 1


def test_no_mana_pool_without_mana_bonus():
    assert progression.max_mana(5, warrior(mana_bonus_per_level=0)) is None


def test_new_character_starts_at_ceilings():
    hero = character(hp=None, mana=None)
    result = progression.apply_resource_ceilings(hero, warrior(), is_new=True)
    assert (result.hp, result.max_hp) == (10, 10)
    assert (result.mana, result.max_mana) == (2, 2)


def test_ceilings_clamp_current_values():
    hero = character(level=2, hp=500, mana=99)
    result = progression.apply_resource_ceilings(hero, warrior())
    assert result.hp == result.max_hp == 20
    assert result.mana == result.max_mana == 4
    # The input value is left alone.
    assert hero.hp == 500


def test_ceilings_keep_lower_current_values():
    hero = character(level=3, hp=7, mana=1)
    result = progression.apply_resource_ceilings(hero, warrior())
    assert (result.hp, result.max_hp) == (7, 30)
    assert (result.mana, result.max_mana) == (1, 6)


def test_ceilings_drop_mana_when_class_has_no_pool():
    hero = character(mana=5, max_mana=5)
    result = progression.apply_resource_ceilings(hero, warrior(mana_bonus_per_level=0))
    assert result.mana is None
    assert result.max_mana is None


def test_warrior_level_up_scenario():
    cls = warrior()
    hero = progression.apply_resource_ceilings(character(hp=None), cls, is_new=True)
    assert hero.max_hp == 10

    leveled = progression.level_up(hero, cls)

    assert leveled.level == 2
    assert leveled.max_hp == 20
    assert leveled.hp == 15
    assert leveled.max_mana == 4
    assert leveled.mana == 3


@pytest.mark.parametrize("level", range(1, LEVEL_CAP))
def test_level_up_never_lowers_current_resources(level):
    cls = warrior(mana_bonus_per_level=10)
    hero = progression.apply_resource_ceilings(character(level=level), cls, is_new=True)

    leveled = progression.level_up(hero, cls)

    assert leveled.level == level + 1
    assert leveled.hp >= hero.hp
    assert leveled.mana >= hero.mana
    assert leveled.hp <= leveled.max_hp
    assert leveled.mana <= leveled.max_mana


def test_level_up_mana_recovery_rounds_up():
    cls = warrior(mana_bonus_per_level=7)
    hero = character(level=2, hp=1, mana=0, max_mana=14)
    leveled = progression.level_up(hero, cls)
    # ceil(21 / 10)
    assert leveled.mana == 3


def test_level_up_without_mana_pool():
    cls = warrior(mana_bonus_per_level=0)
    leveled = progression.level_up(character(mana=None, max_mana=None), cls)
    assert leveled.mana is None
    assert leveled.max_mana is None


def test_level_up_at_cap_fails():
    hero = character(level=LEVEL_CAP, hp=100, max_hp=100)
    with pytest.raises(MaxLevelReached) as excinfo:
        progression.level_up(hero, warrior())
    assert excinfo.value.level == LEVEL_CAP


def test_award_experience():
    hero = character(experience=40)
    assert progression.award_experience(hero, 60).experience == 100
    assert hero.experience == 40


def test_award_negative_experience_fails():
    with pytest.raises(ValidationError) as excinfo:
        progression.award_experience(character(), -5)
    assert excinfo.value.field_errors[0]["field"] == "amount"
