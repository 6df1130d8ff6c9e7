"""
Tests for card records, deck lists and deck validation.

Tests:
- The demo deck is legal
- Ride deck and main deck composition rules
- Effect indices must be registered
- Loading JSON deck files
"""

import json

import pytest

from ..card_schema import (
    CardRecord, DeckEntry, DeckRecord, DeckValidationError, build_database, load_deck,
    parse_value, validate_deck,
)
from ..effects.registry import EffectRegistry
from ..engine_core.state import TriggerKind
from ..games.standard import build_demo_deck, standard_database
from ..games.standard.cards import MEDIC_OF_DAWN, SOVEREIGN_OF_DUSK


@pytest.fixture
def database():
    return standard_database()


def write_deck(tmp_path, data, name="deck.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestCardRecord:
    """Tests for reading card data."""

    @pytest.mark.parametrize("raw, expected", [
        ("Power 10000", 10000),
        ("Grade 1", 1),
        (3, 3),
        ("-", None),
        (None, None),
    ])
    def test_parse_value(self, raw, expected):
        assert parse_value(raw) == expected

    def test_from_database_shape(self):
        record = CardRecord.from_dict({
            "card_number_full": "D-BT01/001",
            "name_face": "Test Knight",
            "grade": "Grade 2",
            "power": "Power 10000",
            "critical": "Critical 1",
            "shield": "Shield 5000",
            "skill": "Intercept, Boost",
            "gift": "Heal Trigger +10000",
            "implemented_effects": [{"trigger": "on_ride", "function_index": 0, "condition": ["player.index", "===", 1]}],
        })

        assert record.id == "D-BT01/001"
        assert record.name == "Test Knight"
        assert record.grade == 2
        assert record.power == 10000
        assert record.shield == 5000
        assert record.skills == ["Intercept", "Boost"]
        assert record.trigger == TriggerKind.HEAL
        assert record.effects[0].function_index == 0
        assert record.effects[0].mandatory

    def test_no_shield(self):
        record = CardRecord.from_dict({"id": "X", "name": "No Guard", "grade": 3, "power": 13000, "shield": None})
        assert record.shield is None
        assert record.to_card("u1").shield is None

    def test_missing_id(self):
        with pytest.raises(ValueError):
            CardRecord.from_dict({"name": "Nameless"})

    def test_round_trip_keeps_effects(self):
        data = SOVEREIGN_OF_DUSK.to_dict()
        record = CardRecord.from_dict(data)
        assert record.skills == ["Twin Drive"]
        assert record.shield is None
        assert record.to_card("u1").drive == 2


class TestDeckRecord:
    """Tests for deck lists."""

    def test_to_cards_gives_unique_ids(self, database):
        ride, main = build_demo_deck().to_cards(database, owner="p1")

        assert [c.unique_id for c in ride] == ["p1-001", "p1-002", "p1-003", "p1-004", "p1-005"]
        assert main[0].unique_id == "p1-006"
        assert len(main) == 50
        assert len({c.unique_id for c in ride + main}) == 55

    def test_crest_skipped_in_main_deck(self, database):
        deck = DeckRecord(name="x", main_deck=[DeckEntry(1, "DEMO/CREST")])
        _, main = deck.to_cards(database)
        assert main == []

    def test_unknown_card_becomes_basic(self, database, caplog):
        deck = DeckRecord(name="x", main_deck=[DeckEntry(2, "NOPE/1", "Mystery")])
        _, main = deck.to_cards(database)

        assert [c.name for c in main] == ["Mystery", "Mystery"]
        assert main[0].power is None
        assert "NOPE/1" in caplog.text

    def test_dict_round_trip(self):
        deck = build_demo_deck("Round Trip")
        assert DeckRecord.from_dict(deck.to_dict()) == deck


class TestValidateDeck:
    """Tests for validate_deck."""

    def test_demo_deck_is_valid(self, database):
        result = validate_deck(build_demo_deck(), database)
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_too_many_heals(self, database):
        deck = build_demo_deck()
        deck.main_deck.append(DeckEntry(1, MEDIC_OF_DAWN.id))
        database["EXTRA/HEAL"] = CardRecord(
            id="EXTRA/HEAL", name="Extra Medic", grade=0, power=5000, shield=20000, trigger=TriggerKind.HEAL,
        )
        deck.main_deck.append(DeckEntry(1, "EXTRA/HEAL"))

        result = validate_deck(deck, database)

        assert not result.valid
        assert any("heal" in e for e in result.errors)
        assert any("trigger units" in e for e in result.errors)
        assert any("DEMO/010" in e for e in result.errors)  # five copies

    def test_ride_deck_needs_grade_zero(self, database):
        deck = build_demo_deck()
        deck.ride_deck = deck.ride_deck[1:]

        result = validate_deck(deck, database)
        assert any("grade 0" in e for e in result.errors)

    def test_ride_deck_grades_climb(self, database):
        deck = build_demo_deck()
        del deck.ride_deck[2]  # drop the grade 2

        result = validate_deck(deck, database)
        assert any("climb" in e for e in result.errors)

    def test_unknown_card(self, database):
        deck = build_demo_deck()
        deck.main_deck.append(DeckEntry(1, "NOPE/1"))

        result = validate_deck(deck, database)
        assert "Unknown card 'NOPE/1' in main deck" in result.errors

    def test_unregistered_effect(self, database):
        result = validate_deck(build_demo_deck(), database, registry=EffectRegistry())

        assert not result.valid
        assert any("effect index 1 is not registered" in e for e in result.errors)

    def test_small_main_deck_warns(self, database):
        deck = build_demo_deck()
        deck.main_deck = deck.main_deck[:-1]

        result = validate_deck(deck, database)
        assert result.valid
        assert any("expected 50" in w for w in result.warnings)

    def test_skills_without_power_warns(self, database):
        database["ODD/1"] = CardRecord(id="ODD/1", name="Odd", grade=1, skills=["Boost"], power=None)
        deck = build_demo_deck()
        deck.main_deck.append(DeckEntry(1, "ODD/1"))

        result = validate_deck(deck, database)
        assert any("no power" in w for w in result.warnings)


class TestLoadDeck:
    """Tests for loading deck files."""

    def test_load_demo_deck(self, tmp_path, database):
        path = write_deck(tmp_path, build_demo_deck("Loaded").to_dict())
        deck, loaded_database, result = load_deck(path, database)

        assert deck.name == "Loaded"
        assert deck.main_deck_size == 50
        assert result.valid
        assert loaded_database.keys() == database.keys()

    def test_name_defaults_to_file_stem(self, tmp_path, database):
        data = build_demo_deck().to_dict()
        del data["name"]
        deck, _, _ = load_deck(write_deck(tmp_path, data, "my_deck.json"), database)
        assert deck.name == "my_deck"

    def test_deck_cards_extend_database(self, tmp_path, database):
        data = build_demo_deck().to_dict()
        data["main_deck"][-1] = {"quantity": 2, "card_id": "NEW/1"}
        data["cards"] = [{"id": "NEW/1", "name": "New Warlord", "grade": 3, "power": 13000, "shield": None,
                          "skills": ["Twin Drive"]}]

        deck, loaded_database, result = load_deck(write_deck(tmp_path, data), database)

        assert "NEW/1" in loaded_database
        assert "NEW/1" not in database
        assert result.valid

    def test_strict_raises(self, tmp_path, database):
        data = build_demo_deck().to_dict()
        data["ride_deck"] = data["ride_deck"][1:]

        with pytest.raises(DeckValidationError) as excinfo:
            load_deck(write_deck(tmp_path, data), database, strict=True)
        assert excinfo.value.errors

    def test_not_a_deck_object(self, tmp_path, database):
        with pytest.raises(ValueError):
            load_deck(write_deck(tmp_path, [1, 2, 3]), database)

    def test_missing_file(self, tmp_path, database):
        with pytest.raises(FileNotFoundError):
            load_deck(tmp_path / "missing.json", database)

    def test_build_database_from_dicts(self):
        database = build_database([{"id": "A/1", "name": "A", "grade": 1, "power": 8000}])
        assert database["A/1"].power == 8000
