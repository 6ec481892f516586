"""MCP server wrapping GameRuntime for interactive AI playtesting."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from mcp.server.fastmcp import FastMCP

from clickfluencer._types import SimulatedClock
from clickfluencer.codec import diff
from clickfluencer.definition import GameDefinition
from clickfluencer.runtime import GameRuntime
from clickfluencer.state import Currency
from clickfluencer.store import MemoryStore
from clickfluencer.strategy import purchase_options

# Maximum seconds per wait() call (24 hours)
_MAX_WAIT = 86400
# Maximum clicks per click() call
_MAX_CLICKS = 1000
# Production is linear between purchases, so waits integrate in coarse steps
_WAIT_STEP_MS = 60_000
_START_TIME_MS = 1_000_000_000_000


@dataclass
class _GameHolder:
    """Holds the active runtime and the simulated clock driving it."""

    definition: GameDefinition
    runtime: GameRuntime
    clock: SimulatedClock


def _new_holder(definition: GameDefinition) -> _GameHolder:
    clock = SimulatedClock(_START_TIME_MS)
    runtime = GameRuntime(definition, store=MemoryStore(clock), clock=clock)
    runtime.start()
    return _GameHolder(definition=definition, runtime=runtime, clock=clock)


def _failure(result) -> dict[str, Any]:
    return {"success": False, "outcome": result.outcome.name, "reason": result.message}


# ── Tool logic functions (testable without MCP protocol) ────────────


def _tool_get_game_info(holder: _GameHolder) -> dict[str, Any]:
    defn = holder.definition
    return {
        "name": defn.config.name,
        "generators": [
            {"id": g.id, "name": g.name, "base_cost": g.base_cost,
             "base_yield_per_second": g.base_yield_per_second}
            for g in defn.generators
        ],
        "notoriety_generators": [
            {"id": g.id, "name": g.name, "base_cost": g.base_cost,
             "notoriety_per_second": g.notoriety_per_second, "upkeep": g.upkeep}
            for g in defn.notoriety_generators
        ],
        "upgrades": [
            {"id": u.id, "name": u.name, "effect": u.effect.type.value,
             "kind": u.kind.name, "permanent": u.permanent, "currency": u.currency.value}
            for u in defn.upgrades
        ],
        "themes": [{"id": t.id, "name": t.name, "cost": t.cost} for t in defn.themes],
        "events": [
            {"id": e.id, "name": e.name, "description": e.description, "weight": e.weight}
            for e in defn.events
        ],
        "achievements": [
            {"id": a.id, "name": a.name, "description": a.description}
            for a in defn.achievements
            if not a.hidden
        ],
    }


def _tool_get_game_state(holder: _GameHolder) -> dict[str, Any]:
    runtime = holder.runtime
    state = runtime.state
    theme = state.active_theme()
    return {
        "slot": runtime.manager.active_slot,
        "creds": round(state.creds, 2),
        "creds_per_second": round(runtime.creds_per_second, 4),
        "click_power": round(runtime.click_power, 4),
        "awards": state.awards,
        "notoriety": round(state.notoriety, 4),
        "notoriety_per_second": round(runtime.notoriety_per_second, 4),
        "prestige": runtime.prestige_info(),
        "generators": {g.id: g.owned for g in state.generators if g.unlocked},
        "notoriety_generators": {
            g.id: g.owned for g in state.notoriety_generators if g.unlocked
        },
        "upgrades": {u.id: u.level for u in state.upgrades if u.level},
        "active_theme": theme.id if theme else None,
        "active_events": [
            {"id": e.id, "multiplies": e.kind.value, "multiplier": e.multiplier,
             "ends_in_s": max(0, e.ends_at - holder.clock()) / 1000}
            for e in state.active_events
        ],
        "achievements_unlocked": sorted(state.unlocked_achievement_ids()),
        "play_time_ms": state.stats.play_time,
    }


def _tool_get_breakdown(holder: _GameHolder) -> dict[str, Any]:
    def rows(steps):
        return [
            {"label": s.label, "kind": s.kind, "factor": round(s.factor, 4),
             "total": round(s.total, 4)}
            for s in steps
        ]

    return {
        "click": rows(holder.runtime.click_breakdown()),
        "production": rows(holder.runtime.production_breakdown()),
    }


def _tool_get_available_purchases(holder: _GameHolder) -> dict[str, Any]:
    state = holder.runtime.state
    rates = {
        Currency.CREDS: holder.runtime.creds_per_second,
        Currency.NOTORIETY: holder.runtime.notoriety_per_second,
    }
    result = []
    for option in purchase_options(state):
        shortfall = option.cost - state.balance(option.currency)
        rate = rates[option.currency]
        if shortfall <= 0:
            time_to_afford: float | None = 0.0
        elif rate > 0:
            time_to_afford = round(shortfall / rate, 2)
        else:
            time_to_afford = None
        result.append({
            "kind": option.kind,
            "id": option.id,
            "cost": round(option.cost, 2),
            "currency": option.currency.value,
            "affordable": option.affordable,
            "time_to_afford": time_to_afford,
        })
    themes = [
        {"id": t.id, "cost": t.cost, "affordable": state.awards >= t.cost}
        for t in state.themes
        if not t.unlocked
    ]
    return {"purchases": result, "themes": themes}


def _tool_click(holder: _GameHolder, count: int = 1) -> dict[str, Any]:
    if count < 1:
        return {"error": "Count must be at least 1"}
    if count > _MAX_CLICKS:
        return {"error": f"Count cannot exceed {_MAX_CLICKS}"}

    step = holder.definition.config.click_throttle_ms
    earned = 0
    awards = 0
    for _ in range(count):
        holder.clock.advance(step)
        result = holder.runtime.click()
        earned += result.creds_gained
        awards += int(result.award_dropped)
    # the clicks took real time; let production catch up
    holder.runtime.tick(count * step)
    return {
        "clicks": count,
        "creds_earned": earned,
        "awards_dropped": awards,
        "new_balance": round(holder.runtime.state.creds, 2),
    }


def _tool_wait(holder: _GameHolder, seconds: float) -> dict[str, Any]:
    if seconds <= 0:
        return {"error": "Seconds must be positive"}
    if seconds > _MAX_WAIT:
        return {"error": f"Cannot wait more than {_MAX_WAIT} seconds (24h) per call"}

    before = set(holder.runtime.state.unlocked_achievement_ids())
    remaining = seconds * 1000
    while remaining > 0:
        step = min(_WAIT_STEP_MS, remaining)
        holder.clock.advance(int(step))
        holder.runtime.tick(step)
        remaining -= step

    state = holder.runtime.state
    result: dict[str, Any] = {
        "waited": seconds,
        "creds": round(state.creds, 2),
        "creds_per_second": round(holder.runtime.creds_per_second, 4),
    }
    new_achievements = sorted(set(state.unlocked_achievement_ids()) - before)
    if new_achievements:
        result["new_achievements"] = new_achievements
    if state.active_events:
        result["active_events"] = [e.id for e in state.active_events]
    return result


def _tool_purchase_generator(
    holder: _GameHolder, generator_id: str, count: int = 1
) -> dict[str, Any]:
    if count < 1:
        return {"error": "Count must be at least 1"}
    result = holder.runtime.purchase_generator(generator_id, count)
    if not result.success:
        return _failure(result)
    return {
        "success": True,
        "generator_id": generator_id,
        "owned": result.state.generator(generator_id).owned,
        "creds": round(result.state.creds, 2),
    }


def _tool_purchase_notoriety_generator(holder: _GameHolder, generator_id: str) -> dict[str, Any]:
    result = holder.runtime.purchase_notoriety_generator(generator_id)
    if not result.success:
        return _failure(result)
    return {
        "success": True,
        "generator_id": generator_id,
        "owned": result.state.notoriety_generator(generator_id).owned,
        "creds": round(result.state.creds, 2),
        "creds_per_second": round(holder.runtime.creds_per_second, 4),
        "notoriety_per_second": round(holder.runtime.notoriety_per_second, 4),
    }


def _tool_purchase_upgrade(holder: _GameHolder, upgrade_id: str) -> dict[str, Any]:
    result = holder.runtime.purchase_upgrade(upgrade_id)
    if not result.success:
        return _failure(result)
    upgrade = result.state.upgrade(upgrade_id)
    return {
        "success": True,
        "upgrade_id": upgrade_id,
        "level": upgrade.level,
        "next_cost": None if upgrade.is_maxed else round(upgrade.cost, 2),
    }


def _tool_purchase_theme(holder: _GameHolder, theme_id: str) -> dict[str, Any]:
    result = holder.runtime.purchase_theme(theme_id)
    if not result.success:
        return _failure(result)
    return {"success": True, "theme_id": theme_id, "awards": result.state.awards}


def _tool_activate_theme(holder: _GameHolder, theme_id: str) -> dict[str, Any]:
    result = holder.runtime.activate_theme(theme_id)
    if not result.success:
        return _failure(result)
    return {"success": True, "active_theme": theme_id}


def _tool_prestige(holder: _GameHolder) -> dict[str, Any]:
    result = holder.runtime.prestige()
    if not result.success:
        return _failure(result)
    return {"success": True, "prestige": result.state.prestige}


def _tool_list_slots(holder: _GameHolder) -> dict[str, Any]:
    return {
        "active_slot": holder.runtime.manager.active_slot,
        "slots": [
            {
                "id": info.id,
                "name": info.name,
                "active": info.active,
                "creds": round(info.game.creds, 2),
                "prestige": info.game.prestige,
                "achievements_unlocked": info.achievements_unlocked,
            }
            for info in holder.runtime.manager.slots_overview()
        ],
    }


def _slot_response(holder: _GameHolder, result) -> dict[str, Any]:
    if not result.success:
        return _failure(result)
    return {"success": True, "message": result.message, **_tool_list_slots(holder)}


def _tool_create_slot(holder: _GameHolder, slot_id: int, name: str | None = None) -> dict[str, Any]:
    return _slot_response(holder, holder.runtime.create_slot(slot_id, name))


def _tool_switch_slot(holder: _GameHolder, slot_id: int) -> dict[str, Any]:
    return _slot_response(holder, holder.runtime.switch_slot(slot_id))


def _tool_delete_slot(holder: _GameHolder, slot_id: int) -> dict[str, Any]:
    return _slot_response(holder, holder.runtime.delete_slot(slot_id))


def _tool_export_save(holder: _GameHolder) -> dict[str, Any]:
    return {"save": holder.runtime.export_save()}


def _tool_diff_save(holder: _GameHolder, save_text: str) -> dict[str, Any]:
    try:
        data = json.loads(save_text)
    except json.JSONDecodeError as exc:
        return {"error": f"Invalid JSON: {exc}"}
    if not isinstance(data, dict):
        return {"error": "Save must be a JSON object"}
    # accept a whole save system or a single game
    slots = data.get("slots")
    if isinstance(slots, dict):
        games = {
            key: raw.get("game", {}) for key, raw in slots.items() if isinstance(raw, dict)
        }
    else:
        games = {"game": data}
    report = {}
    for key, game in games.items():
        drift = diff(game if isinstance(game, dict) else {})
        report[key] = {
            "matches": drift.matches,
            "missing": list(drift.missing),
            "extra": list(drift.extra),
        }
    return {"diff": report}


def _tool_new_game(holder: _GameHolder) -> dict[str, Any]:
    fresh = _new_holder(holder.definition)
    holder.runtime.stop()
    holder.runtime = fresh.runtime
    holder.clock = fresh.clock
    return {"success": True, "message": "Game reset to initial state"}


# ── Server factory ──────────────────────────────────────────────────


def create_server(definition: GameDefinition | None = None) -> FastMCP:
    """Create an MCP server wrapping a GameRuntime for the given definition."""
    if definition is None:
        from clickfluencer.catalogue import default_definition

        definition = default_definition()
    holder = _new_holder(definition)

    mcp = FastMCP(name=f"Clickfluencer: {definition.config.name}")

    @mcp.tool()
    def get_game_info() -> dict[str, Any]:
        """Get static game overview: generators, upgrades, themes, visible achievements."""
        return _tool_get_game_info(holder)

    @mcp.tool()
    def get_game_state() -> dict[str, Any]:
        """Get current game state snapshot: creds, yields, owned items, prestige, achievements."""
        return _tool_get_game_state(holder)

    @mcp.tool()
    def get_breakdown() -> dict[str, Any]:
        """Explain click power and production step by step."""
        return _tool_get_breakdown(holder)

    @mcp.tool()
    def get_available_purchases() -> dict[str, Any]:
        """List purchasable generators, upgrades and themes with cost and time-to-afford."""
        return _tool_get_available_purchases(holder)

    @mcp.tool()
    def click(count: int = 1) -> dict[str, Any]:
        """Click N times (max 1000), spaced at the throttle interval."""
        return _tool_click(holder, count)

    @mcp.tool()
    def wait(seconds: float) -> dict[str, Any]:
        """Advance game time by the given seconds (max 86400)."""
        return _tool_wait(holder, seconds)

    @mcp.tool()
    def purchase_generator(generator_id: str, count: int = 1) -> dict[str, Any]:
        """Buy one or more of a generator."""
        return _tool_purchase_generator(holder, generator_id, count)

    @mcp.tool()
    def purchase_notoriety_generator(generator_id: str) -> dict[str, Any]:
        """Hire a notoriety generator with creds. Its upkeep comes out of production."""
        return _tool_purchase_notoriety_generator(holder, generator_id)

    @mcp.tool()
    def purchase_upgrade(upgrade_id: str) -> dict[str, Any]:
        """Buy an upgrade, or its next tier or level."""
        return _tool_purchase_upgrade(holder, upgrade_id)

    @mcp.tool()
    def purchase_theme(theme_id: str) -> dict[str, Any]:
        """Unlock a theme with awards."""
        return _tool_purchase_theme(holder, theme_id)

    @mcp.tool()
    def activate_theme(theme_id: str) -> dict[str, Any]:
        """Make an unlocked theme the active one."""
        return _tool_activate_theme(holder, theme_id)

    @mcp.tool()
    def prestige() -> dict[str, Any]:
        """Reset the run for a permanent prestige bonus."""
        return _tool_prestige(holder)

    @mcp.tool()
    def list_slots() -> dict[str, Any]:
        """Summarize the save slots."""
        return _tool_list_slots(holder)

    @mcp.tool()
    def create_slot(slot_id: int, name: str | None = None) -> dict[str, Any]:
        """Start a fresh game in slot 1-3, replacing what was there."""
        return _tool_create_slot(holder, slot_id, name)

    @mcp.tool()
    def switch_slot(slot_id: int) -> dict[str, Any]:
        """Make another occupied slot active."""
        return _tool_switch_slot(holder, slot_id)

    @mcp.tool()
    def delete_slot(slot_id: int) -> dict[str, Any]:
        """Delete a slot. Deleting the last slot starts a fresh one."""
        return _tool_delete_slot(holder, slot_id)

    @mcp.tool()
    def export_save() -> dict[str, Any]:
        """Export every slot as JSON text."""
        return _tool_export_save(holder)

    @mcp.tool()
    def diff_save(save_text: str) -> dict[str, Any]:
        """Compare a save's top-level game keys against a fresh game."""
        return _tool_diff_save(holder, save_text)

    @mcp.tool()
    def new_game() -> dict[str, Any]:
        """Reset every slot to a fresh game."""
        return _tool_new_game(holder)

    return mcp
