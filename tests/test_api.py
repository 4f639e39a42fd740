import pytest


def ability(name, level):
    return {"name": name, "description": f"{name} description", "level": level}


def create(client, collection, payload):
    response = client.post(f"/{collection}", json=payload)
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def names(response):
    return [entry["name"] for entry in response.json()["data"]]


@pytest.fixture
def catalog(client):
    """A minimal catalog: one race, class, origin, a handful of items and spells."""
    return {
        "race": create(client, "races", {
            "name": "Human",
            "abilities": [ability("Versatile", 1), ability("Second Wind", 3)],
        }),
        "class": create(client, "classes", {
            "name": "Warrior",
            "hp_bonus_per_level": 10,
            "mana_bonus_per_level": 2,
            "abilities": [ability("Battle Stance", 1), ability("Cleave", 3)],
            "subclasses": [{"name": "Berserker", "abilities": [ability("Rage", 2)]}],
        }),
        "origin": create(client, "origins", {
            "name": "Street Urchin",
            "description": "Raised on the streets.",
            "abilities": [ability("City Secrets", 1)],
            "personality_traits": ["Restless"],
            "connections": [{"name": "Pip", "relationship": "Ally", "description": "Lookout"}],
        }),
        "sword": create(client, "items", {
            "name": "Iron Sword", "description": "A blade", "category": "Weapon", "weapon_type": "Light",
        }),
        "hammer": create(client, "items", {
            "name": "War Hammer", "description": "Heavy", "category": "Weapon", "weapon_type": "Heavy",
            "requirements": [{"type": "STR", "value": 5}],
        }),
        "shield": create(client, "items", {
            "name": "Wooden Shield", "description": "Oak", "category": "Shield",
            "bonuses": [{"type": "AC", "value": 2}],
        }),
        "spark": create(client, "spells", {
            "name": "Spark", "description": "Zap", "circle": 1, "mana_cost": 2, "school": "Astromancy",
            "casting_time": "1 action", "range": "30 feet", "duration": "Instantaneous",
        }),
        "storm": create(client, "spells", {
            "name": "Storm", "description": "Boom", "circle": 3, "mana_cost": 9, "school": "Astromancy",
            "casting_time": "1 action", "range": "90 feet", "duration": "1 minute",
        }),
    }


@pytest.fixture
def hero(client, catalog):
    return create(client, "characters", {
        "name": "Aldric",
        "race_id": catalog["race"]["id"],
        "class_id": catalog["class"]["id"],
        "origin_id": catalog["origin"]["id"],
        "subclass": "Berserker",
        "stats": {"str": 4, "dex": 4, "int": 2, "cha": 1},
        "skills": {"stealth": True},
        "items": [
            {"item_id": catalog["sword"]["id"]},
            {"item_id": catalog["shield"]["id"]},
            {"item_id": catalog["hammer"]["id"]},
        ],
        "spells": [catalog["spark"]["id"]],
    })


# --- Meta ---
def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "madking-api"}


# --- Catalogs ---
def test_create_and_fetch_race(client, catalog):
    race_id = catalog["race"]["id"]
    response = client.get(f"/races/{race_id}")
    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["data"]["name"] == "Human"
    assert body["data"]["size"] == "Medium"


def test_duplicate_catalog_name(client, catalog):
    response = client.post("/races", json={"name": "Human"})
    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["kind"] == "DuplicateKey"
    assert body["field"] == "name"


def test_unknown_catalog_entry(client):
    response = client.get("/spells/no-such-spell")
    assert response.status_code == 404
    assert response.json()["kind"] == "NotFound"
    assert response.json()["entity"] == "Spell"


def test_invalid_catalog_payload(client):
    response = client.post("/classes", json={"name": "Rogue", "abilities": [ability("Sneak", 2)]})
    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "ValidationError"
    assert body["field_errors"]


def test_item_handling_defaults_are_saved(client, catalog):
    hammer = client.get(f"/items/{catalog['hammer']['id']}").json()["data"]
    assert hammer["weapon_handling"] == "two-handed"
    assert hammer["slot_type"] == "mainHand"
    shield = catalog["shield"]
    assert shield["weapon_handling"] == "off-hand-only"
    assert shield["slot_type"] == "offHand"


def test_list_catalog_with_filters(client, catalog):
    response = client.get("/items", params={"category": "Weapon"})
    body = response.json()
    assert body["count"] == 2
    assert [i["name"] for i in body["data"]] == ["Iron Sword", "War Hammer"]

    response = client.get("/spells", params={"circle": 3})
    assert [s["name"] for s in response.json()["data"]] == ["Storm"]


def test_list_catalog_with_bad_filter_value(client, catalog):
    response = client.get("/spells", params={"circle": "high"})
    assert response.status_code == 400
    assert response.json()["field_errors"][0]["field"] == "circle"


def test_item_responses_include_derived_values(client, catalog):
    shield = client.get(f"/items/{catalog['shield']['id']}").json()["data"]
    assert shield["is_magical"] is True
    assert shield["effective_value"] == 1
    assert shield["bonus_totals"] == {"AC": 2}
    assert shield["compatible_slots"] == ["offHand"]
    assert catalog["sword"]["is_magical"] is False


def test_list_items_by_value_range_magic_and_requirement(client, catalog):
    create(client, "items", {
        "name": "Crown", "description": "Gold", "category": "Treasure", "base_value": 500,
    })

    assert names(client.get("/items", params={"min_base_value": 100})) == ["Crown"]
    assert names(client.get("/items", params={"max_base_value": 1, "category": "Weapon"})) == [
        "Iron Sword", "War Hammer",
    ]
    assert names(client.get("/items", params={"magical": "true"})) == ["Wooden Shield"]
    assert names(client.get("/items", params={"requirement_type": "STR", "requirement_value": 5})) == ["War Hammer"]
    assert client.get("/items", params={"magical": "true", "skip": 1}).json()["count"] == 0

    response = client.get("/items", params={"min_base_value": 10, "max_base_value": 5})
    assert response.status_code == 400
    response = client.get("/items", params={"requirement_type": "Luck"})
    assert response.json()["field_errors"][0]["field"] == "requirement_type"


def test_list_spells_by_circle_range(client, catalog):
    response = client.get("/spells", params={"min_circle": 2, "max_circle": 5})
    assert [s["name"] for s in response.json()["data"]] == ["Storm"]


def test_spell_mana_cost_for_level(client, catalog):
    response = client.get(f"/spells/{catalog['storm']['id']}/mana-cost", params={"level": 2})
    assert response.json()["data"] == {
        "spell": "Storm", "circle": 3, "caster_level": 2, "mana_cost": 9, "castable": False,
    }
    response = client.get(f"/spells/{catalog['storm']['id']}/mana-cost", params={"level": 11})
    assert response.status_code == 400


def test_update_and_delete_catalog_entry(client, catalog):
    spell_id = catalog["storm"]["id"]
    payload = dict(catalog["storm"], description="A bigger boom")
    for key in ("id", "created_at", "updated_at"):
        payload.pop(key)

    response = client.put(f"/spells/{spell_id}", json=payload)
    assert response.status_code == 200
    assert response.json()["data"]["description"] == "A bigger boom"

    response = client.delete(f"/spells/{spell_id}")
    assert response.status_code == 200
    assert response.json()["data"]["id"] == spell_id
    assert client.get(f"/spells/{spell_id}").status_code == 404


def test_race_traits(client, catalog):
    response = client.get(f"/races/{catalog['race']['id']}/traits", params={"level": 3})
    data = response.json()["data"]
    assert [a["name"] for a in data["abilities"]] == ["Versatile", "Second Wind"]


def test_class_progression(client, catalog):
    response = client.get(
        f"/classes/{catalog['class']['id']}/progression",
        params={"level": 2, "subclass": "Berserker"},
    )
    data = response.json()["data"]
    assert data["hp_bonus"] == 20
    assert [a["name"] for a in data["abilities"]] == ["Battle Stance"]
    assert [a["name"] for a in data["subclass_abilities"]] == ["Rage"]


def test_origin_background_is_seeded(client, catalog):
    url = f"/origins/{catalog['origin']['id']}/background"
    first = client.get(url, params={"seed": 11}).json()["data"]
    second = client.get(url, params={"seed": 11}).json()["data"]
    assert first == second
    assert first["personality_trait"] == "Restless"


# --- Characters ---
def test_create_character_derives_resources(client, hero):
    assert hero["level"] == 1
    assert (hero["hp"], hero["max_hp"]) == (10, 10)
    assert (hero["mana"], hero["max_mana"]) == (2, 2)
    assert hero["stats"] == {"str": 4, "dex": 4, "int": 2, "cha": 1}
    assert hero["skills"]["stealth"] is True
    assert hero["skills"]["heavyWeapons"] is False
    assert all(slot is None for slot in hero["equipped_slots"].values())
    assert all(entry["equipped"] is False for entry in hero["items"])


def test_create_character_with_dangling_references(client, catalog):
    response = client.post("/characters", json={
        "name": "Ghost",
        "race_id": "missing",
        "class_id": catalog["class"]["id"],
        "origin_id": catalog["origin"]["id"],
        "spells": ["nope"],
    })
    assert response.status_code == 400
    fields = [e["field"] for e in response.json()["field_errors"]]
    assert fields == ["race_id", "spells"]


def test_create_character_with_spell_above_circle(client, catalog):
    response = client.post("/characters", json={
        "name": "Prodigy",
        "race_id": catalog["race"]["id"],
        "class_id": catalog["class"]["id"],
        "origin_id": catalog["origin"]["id"],
        "spells": [catalog["storm"]["id"]],
    })
    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "SpellCircleTooHigh"
    assert (body["circle"], body["max_circle"]) == (3, 1)
    assert client.get("/characters").json()["count"] == 0


def test_create_character_with_bad_stats(client, catalog):
    response = client.post("/characters", json={
        "name": "Titan",
        "race_id": catalog["race"]["id"],
        "class_id": catalog["class"]["id"],
        "origin_id": catalog["origin"]["id"],
        "stats": {"str": 11},
    })
    assert response.status_code == 400
    assert response.json()["field_errors"][0]["field"] == "stats.str"


def test_list_characters(client, hero):
    body = client.get("/characters").json()
    assert body["count"] == 1
    assert body["data"][0]["id"] == hero["id"]


def test_get_character_with_computed_values(client, hero):
    data = client.get(f"/characters/{hero['id']}", params={"computed": True}).json()["data"]
    computed = data["computed"]
    assert data["character"]["id"] == hero["id"]
    assert computed["total_ac"] == 10
    assert computed["total_speed"] == 30
    assert computed["max_spell_circle"] == 1
    assert computed["skill_modifiers"]["stealth"] == 6
    assert len(computed["skill_modifiers"]) == 18
    assert [s["name"] for s in computed["available_spells"]] == ["Spark"]
    assert [a["source"] for a in computed["available_abilities"]] == ["race", "origin", "class"]


def test_unknown_character(client):
    response = client.get("/characters/nobody")
    assert response.status_code == 404
    assert response.json()["entity"] == "Character"


def test_level_up(client, hero):
    response = client.post(f"/characters/{hero['id']}/level-up")
    data = response.json()["data"]
    assert data["level"] == 2
    assert (data["hp"], data["max_hp"]) == (15, 20)
    abilities = client.get(f"/characters/{hero['id']}/abilities").json()["data"]
    assert abilities[-1]["source"] == "subclass"


def test_level_up_at_cap(client, hero):
    for _ in range(9):
        assert client.post(f"/characters/{hero['id']}/level-up").status_code == 200
    response = client.post(f"/characters/{hero['id']}/level-up")
    assert response.status_code == 400
    assert response.json()["kind"] == "MaxLevelReached"


def test_equip_sword_and_shield_then_hammer(client, catalog, hero):
    char_url = f"/characters/{hero['id']}"
    client.post(f"{char_url}/equip", json={"item_id": catalog["sword"]["id"]})
    response = client.post(f"{char_url}/equip", json={"item_id": catalog["shield"]["id"]})
    slots = response.json()["data"]["equipped_slots"]
    assert slots["mainHand"] == catalog["sword"]["id"]
    assert slots["offHand"] == catalog["shield"]["id"]
    assert client.get(f"{char_url}/armor-class").json()["data"] == {"base_ac": 10, "total_ac": 12}

    response = client.post(f"{char_url}/equip", json={"item_id": catalog["hammer"]["id"]})
    data = response.json()["data"]
    assert data["equipped_slots"]["mainHand"] == catalog["hammer"]["id"]
    assert data["equipped_slots"]["offHand"] == catalog["hammer"]["id"]
    equipped = {entry["item_id"]: entry["equipped"] for entry in data["items"]}
    assert equipped == {
        catalog["sword"]["id"]: False,
        catalog["shield"]["id"]: False,
        catalog["hammer"]["id"]: True,
    }

    response = client.post(f"{char_url}/unequip", json={"item_id": catalog["hammer"]["id"]})
    slots = response.json()["data"]["equipped_slots"]
    assert slots["mainHand"] is None and slots["offHand"] is None


def test_equip_preconditions(client, catalog, hero):
    char_url = f"/characters/{hero['id']}"
    response = client.post(f"{char_url}/unequip", json={"item_id": catalog["sword"]["id"]})
    assert response.json()["kind"] == "ItemNotEquipped"

    client.delete(f"{char_url}/items/{catalog['sword']['id']}")
    response = client.post(f"{char_url}/equip", json={"item_id": catalog["sword"]["id"]})
    assert response.status_code == 400
    assert response.json()["kind"] == "ItemNotInInventory"


def test_add_item(client, catalog, hero):
    char_url = f"/characters/{hero['id']}"
    potion = create(client, "items", {"name": "Potion", "description": "Red", "category": "Consumable"})

    response = client.post(f"{char_url}/items", json={"item_id": potion["id"], "quantity": 2})
    assert response.status_code == 200
    assert response.json()["data"]["items"][-1] == {"item_id": potion["id"], "quantity": 2, "equipped": False}

    response = client.post(f"{char_url}/items", json={"item_id": potion["id"]})
    assert response.json()["kind"] == "DuplicateInventoryItem"

    response = client.post(f"{char_url}/items", json={"item_id": "no-such-item"})
    assert response.status_code == 404


def test_learn_and_forget_spells(client, catalog, hero):
    char_url = f"/characters/{hero['id']}"
    response = client.post(f"{char_url}/spells", json={"spell_id": catalog["storm"]["id"]})
    assert response.status_code == 400
    assert response.json()["kind"] == "SpellCircleTooHigh"

    response = client.post(f"{char_url}/spells", json={"spell_id": catalog["spark"]["id"]})
    assert response.json()["kind"] == "SpellAlreadyKnown"

    response = client.delete(f"{char_url}/spells/{catalog['spark']['id']}")
    assert response.json()["data"]["spells"] == []
    assert client.get(f"{char_url}/spells/available").json()["count"] == 0


def test_skill_check(client, hero):
    response = client.post(f"/characters/{hero['id']}/skill-checks/stealth")
    data = response.json()["data"]
    assert 1 <= data["roll"] <= 20
    assert data["modifier"] == 6
    assert data["total"] == data["roll"] + 6
    assert data["is_proficient"] is True


def test_skill_check_unknown_skill(client, hero):
    response = client.post(f"/characters/{hero['id']}/skill-checks/swimming")
    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "kind": "UnknownSkill",
        "message": "Unknown skill 'swimming'",
        "skill": "swimming",
    }


def test_can_equip(client, catalog, hero):
    response = client.get(f"/items/{catalog['hammer']['id']}/can-equip/{hero['id']}")
    assert response.json()["data"] == {"can_equip": False, "reason": "Requires STR 5, have 4"}


def test_crafting(client, hero):
    char_url = f"/characters/{hero['id']}"
    herb = create(client, "items", {
        "name": "Healing Herb", "description": "Redleaf", "category": "Material", "stackable": True,
    })
    draught = create(client, "items", {
        "name": "Healing Draught", "description": "Red tonic", "category": "Consumable",
        "craftable": True, "crafting_skill": "nature", "crafting_difficulty": 5,
        "crafting_materials": [{"material_name": "Healing Herb", "quantity": 2}],
    })
    can_craft_url = f"/items/{draught['id']}/can-craft/{hero['id']}"

    assert client.get(can_craft_url).json()["data"] == {"can_craft": False, "reason": "Requires nature skill"}
    response = client.post(f"/items/{draught['id']}/craft/{hero['id']}")
    assert response.status_code == 400
    assert response.json()["kind"] == "ItemNotCraftable"

    client.patch(char_url, json={"skills": {"nature": True}})
    client.post(f"{char_url}/items", json={"item_id": herb["id"], "quantity": 1})
    assert client.get(can_craft_url).json()["data"]["reason"] == "Insufficient materials: need 2 Healing Herb"

    client.delete(f"{char_url}/items/{herb['id']}")
    client.post(f"{char_url}/items", json={"item_id": herb["id"], "quantity": 2})
    assert client.get(can_craft_url).json()["data"] == {"can_craft": True, "reason": None}

    response = client.post(f"/items/{draught['id']}/craft/{hero['id']}")
    result = response.json()["data"]
    assert response.status_code == 200
    assert result["modifier"] == 4
    assert result["total"] == result["roll"] + 4
    assert result["target_dc"] == 5
    assert result["success"] is True


def test_patch_character(client, hero):
    response = client.patch(f"/characters/{hero['id']}", json={"hp": 99, "stats": {"str": 6}, "backstory": "Born in a ditch."})
    data = response.json()["data"]
    assert data["hp"] == 10
    assert data["stats"] == {"str": 6, "dex": 4, "int": 2, "cha": 1}
    assert data["backstory"] == "Born in a ditch."
    assert data["race_id"] == hero["race_id"]


def test_patch_cannot_change_references(client, hero):
    response = client.patch(f"/characters/{hero['id']}", json={"race_id": "elf"})
    assert response.status_code == 400
    assert response.json()["field_errors"][0]["field"] == "race_id"


def test_replace_character_keeps_carried_equipment(client, catalog, hero):
    char_url = f"/characters/{hero['id']}"
    client.post(f"{char_url}/equip", json={"item_id": catalog["sword"]["id"]})
    client.post(f"{char_url}/equip", json={"item_id": catalog["shield"]["id"]})

    response = client.put(char_url, json={
        "name": "Aldric the Bold",
        "race_id": hero["race_id"],
        "class_id": hero["class_id"],
        "origin_id": hero["origin_id"],
        "items": [{"item_id": catalog["sword"]["id"]}],
    })

    data = response.json()["data"]
    assert data["name"] == "Aldric the Bold"
    assert (data["level"], data["hp"], data["max_hp"]) == (1, 10, 10)
    assert data["equipped_slots"]["mainHand"] == catalog["sword"]["id"]
    assert data["equipped_slots"]["offHand"] is None
    assert data["items"] == [{"item_id": catalog["sword"]["id"], "quantity": 1, "equipped": True}]


def replacement(hero, **fields):
    payload = {
        "name": hero["name"],
        "race_id": hero["race_id"],
        "class_id": hero["class_id"],
        "origin_id": hero["origin_id"],
    }
    payload.update(fields)
    return payload


def test_replace_character_keeps_level_and_experience(client, hero):
    char_url = f"/characters/{hero['id']}"
    client.post(f"{char_url}/level-up")
    client.post(f"{char_url}/level-up")
    before = client.post(f"{char_url}/experience", json={"amount": 300}).json()["data"]

    response = client.put(char_url, json=replacement(hero, name="Aldric the Bold"))

    assert response.status_code == 200
    after = response.json()["data"]
    assert (after["level"], after["experience"]) == (3, 300)
    assert (after["hp"], after["max_hp"]) == (before["hp"], before["max_hp"])
    assert after["name"] == "Aldric the Bold"


def test_replace_character_cannot_change_level(client, hero):
    char_url = f"/characters/{hero['id']}"
    response = client.put(char_url, json=replacement(hero, level=5))
    assert response.status_code == 400
    assert response.json()["field_errors"][0]["field"] == "level"

    response = client.put(char_url, json=replacement(hero, level=1))
    assert response.status_code == 200
    assert client.get(char_url).json()["data"]["character"]["level"] == 1


def test_replace_character_checks_spell_circle(client, catalog, hero):
    response = client.put(f"/characters/{hero['id']}", json=replacement(hero, spells=[catalog["storm"]["id"]]))
    assert response.status_code == 400
    assert response.json()["kind"] == "SpellCircleTooHigh"


def test_award_experience(client, hero):
    response = client.post(f"/characters/{hero['id']}/experience", json={"amount": 250})
    assert response.json()["data"]["experience"] == 250
    response = client.post(f"/characters/{hero['id']}/experience", json={"amount": -1})
    assert response.status_code == 400


def test_delete_character(client, hero):
    response = client.delete(f"/characters/{hero['id']}")
    body = response.json()
    assert body["message"] == "Character deleted successfully"
    assert body["data"]["id"] == hero["id"]
    assert body["data"]["name"] == "Aldric"
    assert client.get(f"/characters/{hero['id']}").status_code == 404
