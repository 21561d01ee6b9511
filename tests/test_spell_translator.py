"""Tests for spell translation."""

import pytest

from beyond_bridge.models import PROVENANCE_SCOPE, DamagePart, SpellEntity
from beyond_bridge.translators import MissingDefinition, translate_spell
from beyond_bridge.translators.common import assemble_description


def _strip_import_time(document):
    document["flags"][PROVENANCE_SCOPE].pop("importedAt")
    return document


class TestTranslateSpell:
    """Test translate_spell() on a bare definition."""

    def test_basic_fields(self, fireball, import_time):
        spell = translate_spell(fireball, now=import_time)

        assert isinstance(spell, SpellEntity)
        assert spell.name == "Fireball"
        assert spell.type == "spell"
        assert spell.system["level"] == 3
        assert spell.system["school"] == "evo"
        assert spell.system["properties"] == ["material", "somatic", "vocal"]
        assert spell.system["source"] == {"book": "PHB", "page": "241", "custom": ""}
        assert spell.img.startswith("icons/magic/")

    def test_provenance(self, fireball, import_time):
        spell = translate_spell(fireball, import_method="compendium", now=import_time)

        assert spell.source_id == 2618
        assert spell.provenance.imported_at == import_time
        assert spell.provenance.import_method == "compendium"

    def test_save_and_damage(self, fireball, import_time):
        """Saving throw spells carry the save ability and scaled damage."""
        system = translate_spell(fireball, now=import_time).system

        assert system["actionType"] == "save"
        assert system["save"] == {"ability": "dex"}
        parts = system["damage"]["parts"]
        assert len(parts) == 1
        assert parts[0].formula == "8d6"
        assert parts[0].types == {"fire"}
        assert parts[0].scaling.formula == "1d6"
        assert system["scaling"].mode == "whole"

    def test_description_tags_and_higher_levels(self, fireball, import_time):
        value = translate_spell(fireball, now=import_time).system["description"]["value"]

        assert value.startswith("<p><strong>Tags:</strong> Material Component, Focus</p>")
        assert value.endswith(
            "<h3>At Higher Levels</h3><p>The damage increases by 1d6 for each slot level above 3rd.</p>"
        )

    def test_range_target_duration(self, fireball, import_time):
        system = translate_spell(fireball, now=import_time).system

        assert system["range"].value == 150
        assert system["range"].units == "ft"
        assert system["target"].type == "sphere"
        assert system["target"].size == 20
        assert system["duration"].units == "inst"
        assert system["activation"].type == "action"
        assert system["activation"].value == 1

    def test_healing_spell(self, cure_wounds, import_time):
        system = translate_spell(cure_wounds, now=import_time).system

        assert system["actionType"] == "heal"
        assert system["formula"] == "1d8"
        assert system["range"].units == "touch"
        assert system["damage"]["parts"] == []

    def test_concentration_duration(self, import_time):
        spell = translate_spell({
            "id": 1,
            "name": "Bless",
            "concentration": True,
            "duration": {"durationInterval": 1, "durationUnit": "Minute", "durationType": "Concentration"},
        }, now=import_time)

        duration = spell.system["duration"]
        assert duration.units == "minute"
        assert duration.value == 1
        assert duration.concentration
        assert "Concentration" in spell.system["description"]["value"]

    def test_damage_from_description_text(self, import_time):
        """Without explicit dice the description is scanned for damage."""
        spell = translate_spell({
            "id": 7,
            "name": "Fire Bolt",
            "attackType": 4,
            "description": "<p>A target hit takes 1d10 fire damage.</p>",
        }, now=import_time)

        parts = spell.system["damage"]["parts"]
        assert spell.system["actionType"] == "rsak"
        assert [(p.formula, p.types) for p in parts] == [("1d10", {"fire"})]

    def test_explicit_dice_win_over_text(self, import_time):
        spell = translate_spell({
            "id": 8,
            "name": "Odd Spell",
            "description": "<p>Deals 9d9 cold damage.</p>",
            "damageDice": [{"diceCount": 2, "diceValue": 4, "damageTypeId": 1}],
        }, now=import_time)

        assert [p.formula for p in spell.system["damage"]["parts"]] == ["2d4"]

    def test_material_cost(self, import_time):
        spell = translate_spell({
            "id": 9,
            "name": "Revivify",
            "components": [1, 2, 3],
            "componentsDescription": "diamonds worth 300 gp, which the spell consumes",
        }, now=import_time)

        materials = spell.system["materials"]
        assert materials["cost"] == 300
        assert materials["consumed"]

    @pytest.mark.parametrize("text,cost", [
        ("ink, gp", 0),
        (", gp", 0),
        ("a gem worth 1,500 gp", 1500),
        ("a 50gp pearl", 50),
    ])
    def test_material_cost_text(self, text, cost, import_time):
        """A gp mention without digits costs nothing."""
        spell = translate_spell({"id": 10, "name": "Scribble", "componentsDescription": text}, now=import_time)
        assert spell.system["materials"]["cost"] == cost

    def test_secondary_effects_kept(self, import_time):
        """An attack spell that also heals keeps the healing formula and the attack code."""
        spell = translate_spell({
            "id": 11,
            "name": "Vampiric Touch",
            "attackType": 3,
            "healing": True,
            "healingDice": [{"diceCount": 2, "diceValue": 6}],
            "requiresSavingThrow": True,
        }, now=import_time)

        assert spell.system["actionType"] == "msak"
        assert spell.system["attackType"] == 3
        assert spell.system["formula"] == "2d6"
        assert spell.system["save"] == {"ability": "dex"}


class TestSpellWrapper:
    """Test character-spell wrappers."""

    def test_wrapper_fields(self, fireball, import_time):
        record = {
            "definition": fireball,
            "prepared": True,
            "spellCastingAbilityId": 4,
            "limitedUse": {"maxUses": 1, "resetType": 2},
        }

        spell = translate_spell(record, preparation_mode="always", now=import_time)

        assert spell.system["preparation"] == {"mode": "always", "prepared": True}
        assert spell.system["ability"] == "int"
        assert spell.system["uses"] == {"value": 1, "max": "1", "recovery": "lr"}


class TestSpellDefaults:
    """Test totality on sparse records."""

    def test_minimal_record(self, import_time):
        """Only id and name are required; everything else gets a default."""
        spell = translate_spell({"id": 1, "name": "Mystery"}, now=import_time)

        assert spell.system["level"] == 0
        assert spell.system["school"] == "evo"
        assert spell.system["actionType"] == "other"
        assert spell.system["description"]["value"] == "<p>No description found for Mystery.</p>"
        assert spell.system["source"]["book"] == ""

    def test_unknown_codes_fall_back(self, import_time):
        spell = translate_spell({
            "id": 2,
            "name": "Strange",
            "school": "Chronurgy",
            "damageDice": [{"diceCount": 1, "diceValue": 6, "damageTypeId": 999}],
            "activation": {"activationType": 77},
        }, now=import_time)

        assert spell.system["school"] == "evo"
        assert spell.system["damage"]["parts"][0].types == {"force"}
        assert spell.system["activation"].type == "action"

    def test_missing_id(self):
        with pytest.raises(MissingDefinition) as exc_info:
            translate_spell({"name": "No Id"})

        assert exc_info.value.field == "id"

    def test_missing_name(self):
        with pytest.raises(MissingDefinition) as exc_info:
            translate_spell({"id": 12})

        assert exc_info.value.field == "name"
        assert "source id 12" in str(exc_info.value)

    def test_blank_name(self):
        with pytest.raises(MissingDefinition):
            translate_spell({"id": 12, "name": "   "})


class TestSpellDocument:
    """Test the persisted document."""

    def test_document_shape(self, fireball, import_time):
        document = translate_spell(fireball, now=import_time).to_document()

        provenance = document["flags"][PROVENANCE_SCOPE]
        assert provenance["sourceId"] == 2618
        assert provenance["importMethod"] == "api"
        assert provenance["importedAt"].startswith("2024-05-01T12:00:00")
        assert document["system"]["damage"]["parts"][0]["types"] == ["fire"]
        assert document["system"]["range"]["value"] == 150

    def test_translation_is_idempotent(self, fireball):
        """Translating the same record twice differs only in the import time."""
        first = _strip_import_time(translate_spell(fireball).to_document())
        second = _strip_import_time(translate_spell(fireball).to_document())

        assert first == second

    def test_input_not_mutated(self, fireball, import_time):
        snapshot = repr(fireball)
        translate_spell(fireball, now=import_time)
        assert repr(fireball) == snapshot


class TestAssembleDescription:
    """Test description assembly."""

    def test_plain(self):
        assert assemble_description("<p>x</p>") == "<p>x</p>"

    def test_empty_higher_level_ignored(self):
        assert assemble_description("<p>x</p>", "  ") == "<p>x</p>"

    def test_non_string_base(self):
        assert assemble_description(None, None, ["Ritual"]) == "<p><strong>Tags:</strong> Ritual</p>"


def test_damage_part_types_serialize_sorted():
    part = DamagePart(formula="1d6", types={"fire", "cold"})
    assert part.model_dump(mode="json")["types"] == ["cold", "fire"]
