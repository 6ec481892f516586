"""Tests for MCP server tool functions."""
import json

import pytest

from clickfluencer.catalogue import default_definition
from clickfluencer.definition import EngineConfig
from clickfluencer.mcp.server import (
    _GameHolder,
    _new_holder,
    _tool_activate_theme,
    _tool_click,
    _tool_create_slot,
    _tool_delete_slot,
    _tool_diff_save,
    _tool_export_save,
    _tool_get_available_purchases,
    _tool_get_breakdown,
    _tool_get_game_info,
    _tool_get_game_state,
    _tool_list_slots,
    _tool_new_game,
    _tool_prestige,
    _tool_purchase_generator,
    _tool_purchase_notoriety_generator,
    _tool_purchase_theme,
    _tool_purchase_upgrade,
    _tool_switch_slot,
    _tool_wait,
)


def _make_holder() -> _GameHolder:
    return _new_holder(default_definition())


def _with_photo(holder: _GameHolder) -> _GameHolder:
    _tool_click(holder, 10)
    _tool_purchase_generator(holder, "photo")
    return holder


# ── get_game_info / get_game_state ──────────────────────────────────


class TestInfoAndState:
    def test_game_info(self):
        result = _tool_get_game_info(_make_holder())
        assert result["name"] == "Clickfluencer"
        assert [g["id"] for g in result["generators"]][:2] == ["photo", "video"]
        assert len(result["themes"]) == 9

    def test_hidden_achievements_not_listed(self):
        result = _tool_get_game_info(_make_holder())
        ids = {a["id"] for a in result["achievements"]}
        assert "first_click" in ids
        assert "nice" not in ids

    def test_initial_state(self):
        result = _tool_get_game_state(_make_holder())
        assert result["slot"] == 1
        assert result["creds"] == 0
        assert result["click_power"] == 1.0
        assert result["active_theme"] == "dark"
        assert result["generators"] == {"photo": 0}
        assert result["prestige"]["can_prestige"] is False

    def test_breakdown(self):
        result = _tool_get_breakdown(_make_holder())
        assert result["click"][0]["label"] == "Base click"
        assert result["production"][-1]["total"] == 0


# ── click / wait ─────────────────────────────────────────────────────


class TestClick:
    def test_click_earns(self):
        holder = _make_holder()
        result = _tool_click(holder, 10)
        assert result["clicks"] == 10
        assert result["creds_earned"] == 10
        assert result["new_balance"] == 10

    def test_clicks_are_never_throttled(self):
        holder = _make_holder()
        _tool_click(holder, 100)
        assert holder.runtime.state.stats.total_clicks == 100

    def test_count_bounds(self):
        holder = _make_holder()
        assert "error" in _tool_click(holder, 0)
        assert "error" in _tool_click(holder, 1001)


class TestWait:
    def test_production(self):
        # no random events, so the yield is exact
        holder = _with_photo(_new_holder(default_definition(EngineConfig(event_chance=0))))
        result = _tool_wait(holder, 100)
        assert result["creds"] == pytest.approx(10, abs=0.1)
        assert result["creds_per_second"] == pytest.approx(0.1)

    def test_reports_new_achievements(self):
        holder = _with_photo(_make_holder())
        result = _tool_wait(holder, 3600)
        assert "playtime_1hour" in result["new_achievements"]

    def test_reports_events(self):
        holder = _with_photo(_new_holder(default_definition(EngineConfig(event_chance=1))))
        result = _tool_wait(holder, 30)
        assert len(result["active_events"]) == 1
        state = _tool_get_game_state(holder)
        assert state["active_events"][0]["ends_in_s"] > 0

    def test_bounds(self):
        holder = _make_holder()
        assert "error" in _tool_wait(holder, 0)
        assert "error" in _tool_wait(holder, 86401)


# ── purchases ────────────────────────────────────────────────────────


class TestPurchases:
    def test_generator(self):
        holder = _make_holder()
        _tool_click(holder, 10)
        result = _tool_purchase_generator(holder, "photo")
        assert result["success"]
        assert result["owned"] == 1

    def test_generator_locked(self):
        result = _tool_purchase_generator(_make_holder(), "agency")
        assert result == {
            "success": False,
            "outcome": "INVALID_TARGET",
            "reason": "Generator not available: 'agency'",
        }

    def test_upgrade_insufficient(self):
        result = _tool_purchase_upgrade(_make_holder(), "better_camera")
        assert result["outcome"] == "INSUFFICIENT_FUNDS"

    def test_available_purchases(self):
        holder = _make_holder()
        _tool_click(holder, 10)
        result = _tool_get_available_purchases(holder)
        by_id = {p["id"]: p for p in result["purchases"]}
        assert by_id["photo"]["affordable"]
        assert by_id["photo"]["time_to_afford"] == 0.0
        assert by_id["better_camera"]["time_to_afford"] is None
        assert {t["id"] for t in result["themes"]} >= {"gold", "night-sky"}

    def test_notoriety_generator(self):
        holder = _make_holder()
        game = holder.runtime.state.copy()
        game.creds = 60_000
        game.generator("photo").owned = 1000
        holder.runtime.manager.update_active(game)
        result = _tool_purchase_notoriety_generator(holder, "smm")
        assert result["success"]
        assert result["owned"] == 1
        assert result["creds"] == 10_000
        assert result["creds_per_second"] == pytest.approx(95)
        state = _tool_get_game_state(holder)
        assert state["notoriety_generators"]["smm"] == 1

    def test_notoriety_generator_needs_production(self):
        holder = _make_holder()
        game = holder.runtime.state.copy()
        game.creds = 60_000
        holder.runtime.manager.update_active(game)
        result = _tool_purchase_notoriety_generator(holder, "smm")
        assert result == {
            "success": False,
            "outcome": "INSUFFICIENT_FUNDS",
            "reason": "Upkeep would drop production below 1 creds/s",
        }

    def test_notoriety_upgrades_priced_in_notoriety(self):
        holder = _make_holder()
        result = _tool_get_available_purchases(holder)
        by_id = {p["id"]: p for p in result["purchases"]}
        assert by_id["cred_boost"]["currency"] == "notoriety"
        assert by_id["cred_boost"]["time_to_afford"] is None
        assert by_id["photo"]["currency"] == "creds"

    def test_theme(self):
        holder = _make_holder()
        assert _tool_purchase_theme(holder, "gold")["outcome"] == "INSUFFICIENT_FUNDS"
        assert _tool_activate_theme(holder, "light") == {"success": True, "active_theme": "light"}

    def test_prestige_not_ready(self):
        assert _tool_prestige(_make_holder())["outcome"] == "INSUFFICIENT_FUNDS"


# ── slots ────────────────────────────────────────────────────────────


class TestSlots:
    def test_list(self):
        result = _tool_list_slots(_make_holder())
        assert result["active_slot"] == 1
        assert [s["id"] for s in result["slots"]] == [1]

    def test_create_switch_delete(self):
        holder = _make_holder()
        _tool_click(holder, 5)
        assert _tool_create_slot(holder, 2, "Alt")["success"]
        switched = _tool_switch_slot(holder, 2)
        assert switched["active_slot"] == 2
        assert _tool_get_game_state(holder)["creds"] == 0
        assert _tool_delete_slot(holder, 2)["active_slot"] == 1
        assert _tool_get_game_state(holder)["creds"] == 5

    def test_switch_to_empty(self):
        result = _tool_switch_slot(_make_holder(), 3)
        assert result["outcome"] == "SLOT_EMPTY"

    def test_export_and_diff(self):
        holder = _make_holder()
        text = _tool_export_save(holder)["save"]
        assert json.loads(text)["active_slot"] == 1
        assert _tool_diff_save(holder, text)["diff"]["1"]["matches"]

    def test_diff_single_game(self):
        holder = _make_holder()
        result = _tool_diff_save(holder, json.dumps({"creds": 1}))
        assert "awards" in result["diff"]["game"]["missing"]

    def test_diff_bad_json(self):
        assert "error" in _tool_diff_save(_make_holder(), "{")


def test_new_game():
    holder = _make_holder()
    _tool_click(holder, 20)
    assert _tool_new_game(holder)["success"]
    assert _tool_get_game_state(holder)["creds"] == 0


class TestCreateServer:
    def test_creates_server(self):
        from clickfluencer.mcp.server import create_server

        server = create_server(default_definition())
        assert server is not None

    def test_default_definition(self):
        from clickfluencer.mcp.server import create_server

        assert create_server() is not None
