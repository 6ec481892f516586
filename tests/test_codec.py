"""Tests for codec module."""
import json

import pytest

from clickfluencer.codec import (
    decode_game,
    decode_system,
    diff,
    encode_game,
    encode_system,
    export_game,
    export_save,
    import_game,
    import_save,
)
from clickfluencer.results import InvalidSaveFormat
from clickfluencer.state import ActiveEvent, EventKind, SaveSlot, SaveSystemState, create_initial_state


def _make_played_state():
    state = create_initial_state(now=1_700_000_000_000)
    state.creds = 1234.5
    state.awards = 3
    state.prestige = 2
    state.notoriety = 0.42
    state.generator("photo").owned = 12
    state.generator("video").unlocked = True
    state.upgrade("better_camera").tier = 2
    state.upgrade("better_camera").cost = 4500
    state.upgrade("editing_software").purchased = True
    state.upgrade("ai_enhancements").current_level = 3
    state.upgrade("cred_boost").current_level = 4
    state.notoriety_generator("smm").owned = 2
    state.notoriety_generator("pr_team").unlocked = True
    state.theme("light").active = True
    state.theme("dark").active = False
    state.achievements[0].unlocked = True
    state.achievements[0].unlocked_at = 1_700_000_000_500
    state.stats.total_clicks = 77
    state.stats.play_time = 3_600_000
    state.settings.tutorial_completed = True
    state.active_events.append(
        ActiveEvent("viral_post", "Viral Post", EventKind.PRODUCTION, 3, 1_700_000_060_000)
    )
    return state


def _make_system():
    return SaveSystemState(
        active_slot=2,
        slots={
            1: SaveSlot(1, create_initial_state(), 10, 20, "First"),
            2: SaveSlot(2, _make_played_state(), 30, 40, "Main"),
        },
    )


class TestGameRoundTrip:
    def test_round_trip_equality(self):
        state = _make_played_state()
        assert decode_game(encode_game(state)) == state

    def test_text_round_trip(self):
        state = _make_played_state()
        assert import_game(export_game(state)) == state

    def test_snake_case_keys(self):
        data = encode_game(create_initial_state())
        assert "last_save_time" in data
        assert "total_creds_earned" in data["stats"]
        assert data["upgrades"][0]["effect"]["type"] == "clickAdditive"
        assert data["upgrades"][0]["currency"] == "creds"
        assert data["notoriety_generators"][0]["upkeep"] == 5

    def test_unknown_keys_preserved(self):
        data = encode_game(_make_played_state())
        data["seasonal_event"] = {"id": "halloween", "progress": 3}
        state = decode_game(data)
        assert state.extra == {"seasonal_event": {"id": "halloween", "progress": 3}}
        assert encode_game(state)["seasonal_event"] == {"id": "halloween", "progress": 3}


class TestSystemRoundTrip:
    def test_round_trip_equality(self):
        system = _make_system()
        assert decode_system(encode_system(system)) == system

    def test_text_round_trip(self):
        system = _make_system()
        assert import_save(export_save(system)) == system

    def test_slot_keys_are_strings(self):
        data = json.loads(export_save(_make_system()))
        assert sorted(data["slots"]) == ["1", "2"]


class TestInvalidGame:
    def test_missing_key(self):
        data = encode_game(create_initial_state())
        del data["creds"]
        with pytest.raises(InvalidSaveFormat, match="game.creds: missing"):
            decode_game(data)

    def test_wrong_type(self):
        data = encode_game(create_initial_state())
        data["creds"] = "lots"
        with pytest.raises(InvalidSaveFormat, match="expected int/float"):
            decode_game(data)

    def test_bool_is_not_a_number(self):
        data = encode_game(create_initial_state())
        data["awards"] = True
        with pytest.raises(InvalidSaveFormat):
            decode_game(data)

    def test_negative_count(self):
        data = encode_game(create_initial_state())
        data["generators"][0]["owned"] = -1
        with pytest.raises(InvalidSaveFormat, match="must be >= 0"):
            decode_game(data)

    def test_unknown_effect_type(self):
        data = encode_game(create_initial_state())
        data["upgrades"][0]["effect"]["type"] = "doubleEverything"
        with pytest.raises(InvalidSaveFormat, match="unknown effect type"):
            decode_game(data)

    def test_two_active_themes(self):
        data = encode_game(create_initial_state())
        for theme in data["themes"]:
            theme["active"] = True
        with pytest.raises(InvalidSaveFormat, match="more than one active theme"):
            decode_game(data)

    def test_fractional_prestige(self):
        data = encode_game(create_initial_state())
        data["prestige"] = 1.5
        with pytest.raises(InvalidSaveFormat, match=r"game\.prestige: expected int"):
            decode_game(data)

    def test_fractional_owned(self):
        data = encode_game(create_initial_state())
        data["generators"][0]["owned"] = 2.5
        with pytest.raises(InvalidSaveFormat, match=r"owned: expected int"):
            decode_game(data)

    def test_whole_float_count_is_still_refused(self):
        data = encode_game(create_initial_state())
        data["stats"]["total_clicks"] = 3.0
        with pytest.raises(InvalidSaveFormat, match="total_clicks"):
            decode_game(data)

    def test_nan_creds(self):
        text = export_game(create_initial_state()).replace(
            '"creds": 0.0', '"creds": NaN', 1
        )
        with pytest.raises(InvalidSaveFormat, match="must be finite"):
            import_game(text)

    def test_infinite_notoriety(self):
        data = encode_game(create_initial_state())
        data["notoriety"] = float("inf")
        with pytest.raises(InvalidSaveFormat, match="must be finite"):
            decode_game(data)

    def test_active_theme_must_be_unlocked(self):
        data = encode_game(create_initial_state())
        for theme in data["themes"]:
            theme["active"] = theme["id"] == "gold"
        with pytest.raises(InvalidSaveFormat, match="active theme is not unlocked"):
            decode_game(data)

    def test_unknown_currency(self):
        data = encode_game(create_initial_state())
        data["upgrades"][0]["currency"] = "gems"
        with pytest.raises(InvalidSaveFormat, match="unknown currency"):
            decode_game(data)

    def test_fractional_notoriety_generator_owned(self):
        data = encode_game(create_initial_state())
        data["notoriety_generators"][0]["owned"] = 0.5
        with pytest.raises(InvalidSaveFormat, match=r"notoriety_generators\[0\]\.owned"):
            decode_game(data)

    def test_unknown_event_kind(self):
        data = encode_game(_make_played_state())
        data["active_events"][0]["kind"] = "weather"
        with pytest.raises(InvalidSaveFormat, match="unknown event kind"):
            decode_game(data)

    def test_collects_every_problem(self):
        data = encode_game(create_initial_state())
        del data["creds"]
        del data["stats"]
        with pytest.raises(InvalidSaveFormat) as exc_info:
            decode_game(data)
        assert len(exc_info.value.problems) == 2

    def test_not_an_object(self):
        with pytest.raises(InvalidSaveFormat):
            decode_game([1, 2, 3])


class TestInvalidSystem:
    def test_bad_json(self):
        with pytest.raises(InvalidSaveFormat, match="not valid JSON"):
            import_save("{not json")

    def test_slot_out_of_range(self):
        data = encode_system(_make_system())
        data["slots"]["4"] = data["slots"].pop("1")
        data["slots"]["4"]["id"] = 4
        with pytest.raises(InvalidSaveFormat, match="slot id must be one of"):
            decode_system(data)

    def test_slot_id_mismatch(self):
        data = encode_system(_make_system())
        data["slots"]["1"]["id"] = 3
        with pytest.raises(InvalidSaveFormat, match="does not match key"):
            decode_system(data)

    def test_active_slot_out_of_range(self):
        data = encode_system(_make_system())
        data["active_slot"] = 0
        with pytest.raises(InvalidSaveFormat):
            decode_system(data)

    def test_nested_game_problem_rejects_everything(self):
        data = encode_system(_make_system())
        data["slots"]["2"]["game"]["prestige"] = -5
        with pytest.raises(InvalidSaveFormat, match=r"save\.slots\.2\.game\.prestige"):
            decode_system(data)


class TestDiff:
    def test_matches_factory(self):
        assert diff(encode_game(create_initial_state())).matches

    def test_reports_missing_and_extra(self):
        data = encode_game(create_initial_state())
        del data["notoriety"]
        data["legacy_bonus"] = 1
        result = diff(data)
        assert result.missing == ("notoriety",)
        assert result.extra == ("legacy_bonus",)
        assert not result.matches
