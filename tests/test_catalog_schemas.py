import pytest
from pydantic import ValidationError

from madking.modules.catalog_pkg import schemas
from madking.modules.rules_pkg.constants import Slot, WeaponHandling

from factories import ability


# --- Items ---
@pytest.mark.parametrize(
    "weapon_type, handling",
    [
        ("Heavy", WeaponHandling.TWO_HANDED),
        ("Light", WeaponHandling.ONE_HANDED),
        ("Ranged", WeaponHandling.TWO_HANDED),
        ("Staff", WeaponHandling.TWO_HANDED),
        ("Wand", WeaponHandling.ONE_HANDED),
        (None, WeaponHandling.ONE_HANDED),
    ],
)
def test_weapon_handling_defaults_from_weapon_type(weapon_type, handling):
    weapon = schemas.ItemCreate(name="W", description="d", category="Weapon", weapon_type=weapon_type)
    assert weapon.weapon_handling == handling
    assert weapon.slot_type == Slot.MAIN_HAND


def test_explicit_weapon_handling_is_kept():
    weapon = schemas.ItemCreate(
        name="Bastard Sword",
        description="d",
        category="Weapon",
        weapon_type="Heavy",
        weapon_handling="one-handed",
        slot_type="mainHand",
    )
    assert weapon.weapon_handling == WeaponHandling.ONE_HANDED
    assert weapon.slot_type == Slot.MAIN_HAND


def test_shield_is_forced_into_off_hand():
    buckler = schemas.ItemCreate(name="Buckler", description="d", category="Shield")
    assert buckler.weapon_handling == WeaponHandling.OFF_HAND_ONLY
    assert buckler.slot_type == Slot.OFF_HAND


def test_two_handed_shield_is_rejected():
    with pytest.raises(ValidationError):
        schemas.ItemCreate(name="Tower", description="d", category="Shield", weapon_handling="two-handed")


def test_armor_needs_a_slot():
    with pytest.raises(ValidationError, match="slot type"):
        schemas.ItemCreate(name="Mail", description="d", category="Armor")


def test_non_equipable_items_cannot_have_a_slot():
    with pytest.raises(ValidationError):
        schemas.ItemCreate(name="Gem", description="d", category="Treasure", slot_type="ring")


def test_handling_only_on_weapons_and_shields():
    with pytest.raises(ValidationError):
        schemas.ItemCreate(
            name="Robe", description="d", category="Armor", slot_type="chest", weapon_handling="one-handed"
        )


def test_stack_size_follows_stackable():
    arrows = schemas.ItemCreate(name="Arrows", description="d", category="Material", stackable=True)
    assert arrows.max_stack_size == 99
    rock = schemas.ItemCreate(name="Rock", description="d", max_stack_size=20)
    assert rock.max_stack_size == 1


def test_tags_are_sorted_and_unique():
    gem = schemas.ItemCreate(name="Gem", description="d", tags=["shiny", "blue", "shiny"])
    assert gem.tags == ["blue", "shiny"]


@pytest.mark.parametrize(
    "requirement",
    [
        {"type": "STR", "value": 7},
        {"type": "DEX", "value": 0},
        {"type": "Level", "value": 11},
        {"type": "INT", "value": "high"},
    ],
)
def test_requirement_ranges(requirement):
    with pytest.raises(ValidationError, match="Requirements"):
        schemas.ItemCreate(name="X", description="d", requirements=[requirement])


@pytest.mark.parametrize(
    "bonus",
    [{"type": "STR", "value": 4}, {"type": "CHA", "value": -4}, {"type": "Damage", "value": -1}],
)
def test_item_bonus_ranges(bonus):
    with pytest.raises(ValidationError):
        schemas.ItemCreate(name="X", description="d", bonuses=[bonus])


def test_item_bonuses_allow_damage_and_attack():
    blade = schemas.ItemCreate(
        name="Flame Blade",
        description="d",
        category="Weapon",
        bonuses=[{"type": "Damage", "value": 2}, {"type": "AttackBonus", "value": 1}],
    )
    assert len(blade.bonuses) == 2


@pytest.mark.parametrize("difficulty", [4, 26])
def test_crafting_difficulty_range(difficulty):
    with pytest.raises(ValidationError):
        schemas.ItemCreate(name="Torch", description="d", craftable=True, crafting_difficulty=difficulty)


def test_crafting_skill_is_closed():
    with pytest.raises(ValidationError):
        schemas.ItemCreate(name="Torch", description="d", craftable=True, crafting_skill="Smithing")
    torch = schemas.ItemCreate(name="Torch", description="d", craftable=True, crafting_skill="muscle")
    assert torch.crafting_difficulty == 10


# --- Classes ---
def test_class_abilities_must_be_on_odd_levels():
    with pytest.raises(ValidationError, match="odd levels"):
        schemas.CharacterClassCreate(name="Rogue", abilities=[ability("Sneak", 2)])


def test_subclass_abilities_must_be_on_even_levels():
    with pytest.raises(ValidationError, match="even levels"):
        schemas.CharacterClassCreate(
            name="Rogue",
            subclasses=[{"name": "Assassin", "abilities": [ability("Mark", 3)]}],
        )


def test_class_abilities_are_sorted_by_level():
    cls = schemas.CharacterClassCreate(
        name="  Rogue ",
        abilities=[ability("Late", 5), ability("Early", 1), ability("Mid", 3)],
    )
    assert cls.name == "Rogue"
    assert [a.level for a in cls.abilities] == [1, 3, 5]


def test_class_name_length():
    with pytest.raises(ValidationError):
        schemas.CharacterClassCreate(name="x" * 51)


# --- Races ---
def test_race_stat_bonus_limit():
    with pytest.raises(ValidationError, match="limit"):
        schemas.RaceCreate(name="Giant", bonuses=[{"type": "STR", "value": 4}])


def test_race_speed_penalty_limit():
    with pytest.raises(ValidationError):
        schemas.RaceCreate(name="Snail", bonuses=[{"type": "Speed", "value": -25}])


def test_race_rejects_item_only_bonus_types():
    with pytest.raises(ValidationError):
        schemas.RaceCreate(name="Orc", bonuses=[{"type": "Damage", "value": 1}])


def test_race_rejects_unknown_skills():
    with pytest.raises(ValidationError):
        schemas.RaceCreate(name="Orc", skills=["swimming"])


def test_race_lists_are_deduplicated():
    orc = schemas.RaceCreate(name="Orc", skills=["muscle", "muscle"], languages=["Orcish", "Orcish"])
    assert [s.value for s in orc.skills] == ["muscle"]
    assert orc.languages == ["Orcish"]


# --- Origins ---
def test_origin_wealth_max_raised_to_min():
    urchin = schemas.OriginCreate(name="Urchin", description="d", starting_wealth={"min": 30, "max": 5})
    assert (urchin.starting_wealth.min, urchin.starting_wealth.max) == (30, 30)


def test_origin_stat_bonus_limit():
    with pytest.raises(ValidationError):
        schemas.OriginCreate(name="Noble", description="d", bonuses=[{"type": "CHA", "value": 3}])


def test_origin_lists_are_sorted():
    urchin = schemas.OriginCreate(
        name="Urchin",
        description="d",
        skills=["stealth", "legerdemain", "stealth"],
        languages=["Thieves' Cant", "Common"],
    )
    assert [s.value for s in urchin.skills] == ["legerdemain", "stealth"]
    assert urchin.languages == ["Common", "Thieves' Cant"]


def test_origin_entry_lengths():
    with pytest.raises(ValidationError):
        schemas.OriginCreate(name="Urchin", description="d", bonds=["x" * 201])
    with pytest.raises(ValidationError):
        schemas.OriginCreate(name="Urchin", description="d", motivations=["x" * 151])


def test_origin_connection_relationship():
    with pytest.raises(ValidationError):
        schemas.OriginCreate(
            name="Urchin",
            description="d",
            connections=[{"name": "Bob", "relationship": "Pet", "description": "A dog"}],
        )


# --- Spells ---
@pytest.mark.parametrize("circle", [0, 6])
def test_spell_circle_range(circle):
    with pytest.raises(ValidationError):
        schemas.SpellCreate(
            name="Zap",
            description="d",
            circle=circle,
            mana_cost=1,
            school="Astromancy",
            casting_time="1 action",
            range="Touch",
            duration="Instantaneous",
        )


def test_spell_school_is_closed():
    with pytest.raises(ValidationError):
        schemas.SpellCreate(
            name="Zap",
            description="d",
            circle=1,
            mana_cost=1,
            school="Pyromancy",
            casting_time="1 action",
            range="Touch",
            duration="Instantaneous",
        )
