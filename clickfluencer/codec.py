"""Conversion between game objects and JSON save payloads.

Decoding is strict: every key the encoder writes must be present with the
right type, otherwise the whole payload is rejected with
:class:`InvalidSaveFormat`. Unknown top-level game keys are kept in
``GameState.extra`` and written back as they were.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from clickfluencer.results import InvalidSaveFormat
from clickfluencer.state import (
    Achievement,
    ActiveEvent,
    Currency,
    EffectType,
    EventKind,
    GameState,
    Generator,
    NotorietyGenerator,
    SaveSlot,
    SaveSystemState,
    Settings,
    Statistics,
    Theme,
    Upgrade,
    UpgradeEffect,
    create_initial_state,
)

SLOT_IDS = (1, 2, 3)

_NUMBER = (int, float)
_MISSING = object()


@dataclass(frozen=True)
class SaveDiff:
    """Top-level key drift between a payload and the current game shape."""

    missing: tuple[str, ...] = ()
    extra: tuple[str, ...] = ()

    @property
    def matches(self) -> bool:
        return not self.missing and not self.extra


# ── Encoding ─────────────────────────────────────────────────────────


def _encode_effect(effect: UpgradeEffect) -> dict[str, Any]:
    return {
        "type": effect.type.value,
        "value": effect.value,
        "target_generator_id": effect.target_generator_id,
        "tier_table": list(effect.tier_table),
    }


def _encode_upgrade(u: Upgrade) -> dict[str, Any]:
    return {
        "id": u.id,
        "name": u.name,
        "description": u.description,
        "effect": _encode_effect(u.effect),
        "base_cost": u.base_cost,
        "cost": u.cost,
        "cost_multiplier": u.cost_multiplier,
        "purchased": u.purchased,
        "tier": u.tier,
        "max_tier": u.max_tier,
        "current_level": u.current_level,
        "max_level": u.max_level,
        "permanent": u.permanent,
        "currency": u.currency.value,
    }


def encode_game(state: GameState) -> dict[str, Any]:
    """GameState -> JSON-ready dict."""
    data: dict[str, Any] = {
        "creds": state.creds,
        "awards": state.awards,
        "prestige": state.prestige,
        "notoriety": state.notoriety,
        "generators": [
            {
                "id": g.id,
                "name": g.name,
                "base_cost": g.base_cost,
                "cost_scaling": g.cost_scaling,
                "base_yield_per_second": g.base_yield_per_second,
                "owned": g.owned,
                "unlocked": g.unlocked,
            }
            for g in state.generators
        ],
        "notoriety_generators": [
            {
                "id": g.id,
                "name": g.name,
                "base_cost": g.base_cost,
                "cost_scaling": g.cost_scaling,
                "notoriety_per_second": g.notoriety_per_second,
                "upkeep": g.upkeep,
                "owned": g.owned,
                "unlocked": g.unlocked,
            }
            for g in state.notoriety_generators
        ],
        "upgrades": [_encode_upgrade(u) for u in state.upgrades],
        "themes": [
            {
                "id": t.id,
                "name": t.name,
                "cost": t.cost,
                "bonus_multiplier": t.bonus_multiplier,
                "bonus_click_power": t.bonus_click_power,
                "unlocked": t.unlocked,
                "active": t.active,
            }
            for t in state.themes
        ],
        "achievements": [
            {"id": a.id, "unlocked": a.unlocked, "unlocked_at": a.unlocked_at}
            for a in state.achievements
        ],
        "active_events": [
            {
                "id": e.id,
                "name": e.name,
                "kind": e.kind.value,
                "multiplier": e.multiplier,
                "ends_at": e.ends_at,
            }
            for e in state.active_events
        ],
        "stats": {
            "total_clicks": state.stats.total_clicks,
            "total_creds_earned": state.stats.total_creds_earned,
            "awards_earned": state.stats.awards_earned,
            "total_generators_purchased": state.stats.total_generators_purchased,
            "total_upgrades_purchased": state.stats.total_upgrades_purchased,
            "prestige_count": state.stats.prestige_count,
            "play_time": state.stats.play_time,
            "session_count": state.stats.session_count,
        },
        "settings": {
            "tutorial_completed": state.settings.tutorial_completed,
            "auto_save": state.settings.auto_save,
            "offline_progress_enabled": state.settings.offline_progress_enabled,
        },
        "version": state.version,
        "last_save_time": state.last_save_time,
    }
    for key, value in state.extra.items():
        data.setdefault(key, value)
    return data


def encode_system(system: SaveSystemState) -> dict[str, Any]:
    return {
        "active_slot": system.active_slot,
        "version": system.version,
        "slots": {
            str(slot_id): {
                "id": slot.id,
                "name": slot.name,
                "created_at": slot.created_at,
                "updated_at": slot.updated_at,
                "game": encode_game(slot.game),
            }
            for slot_id, slot in sorted(system.slots.items())
        },
    }


# ── Decoding ─────────────────────────────────────────────────────────


class _Reader:
    """Pulls typed fields out of untrusted dicts, collecting every problem."""

    def __init__(self) -> None:
        self.problems: list[str] = []

    def obj(self, value: Any, path: str) -> Mapping[str, Any] | None:
        if not isinstance(value, Mapping):
            self.problems.append(f"{path}: expected object, got {type(value).__name__}")
            return None
        return value

    def get(
        self,
        data: Mapping[str, Any],
        key: str,
        types: tuple[type, ...],
        path: str,
        nullable: bool = False,
    ) -> Any:
        value = data.get(key, _MISSING)
        if value is _MISSING:
            self.problems.append(f"{path}.{key}: missing")
            return None
        if value is None and nullable:
            return None
        # bool is an int subclass; only accept it where bool is asked for
        if isinstance(value, bool) and bool not in types:
            ok = False
        else:
            ok = isinstance(value, types)
        if not ok:
            expected = "/".join(t.__name__ for t in types)
            self.problems.append(
                f"{path}.{key}: expected {expected}, got {type(value).__name__}"
            )
            return None
        if isinstance(value, float) and not math.isfinite(value):
            self.problems.append(f"{path}.{key}: must be finite, got {value}")
            return None
        return value

    def non_negative(self, data: Mapping[str, Any], key: str, path: str) -> Any:
        value = self.get(data, key, _NUMBER, path)
        if value is not None and value < 0:
            self.problems.append(f"{path}.{key}: must be >= 0, got {value}")
        return value

    def whole(self, data: Mapping[str, Any], key: str, path: str) -> Any:
        """A non-negative integer count. Fractions are refused, even 2.0."""
        value = self.get(data, key, (int,), path)
        if value is not None and value < 0:
            self.problems.append(f"{path}.{key}: must be >= 0, got {value}")
        return value

    def items(
        self,
        data: Mapping[str, Any],
        key: str,
        path: str,
        decode: Callable[[_Reader, Any, str], Any],
    ) -> list[Any]:
        values = self.get(data, key, (list,), path)
        if values is None:
            return []
        return [decode(self, item, f"{path}.{key}[{i}]") for i, item in enumerate(values)]


def _decode_generator(r: _Reader, value: Any, path: str) -> Generator | None:
    data = r.obj(value, path)
    if data is None:
        return None
    return Generator(
        id=r.get(data, "id", (str,), path),
        name=r.get(data, "name", (str,), path),
        base_cost=r.non_negative(data, "base_cost", path),
        cost_scaling=r.get(data, "cost_scaling", _NUMBER, path),
        base_yield_per_second=r.get(data, "base_yield_per_second", _NUMBER, path),
        owned=r.whole(data, "owned", path),
        unlocked=r.get(data, "unlocked", (bool,), path),
    )


def _decode_notoriety_generator(
    r: _Reader, value: Any, path: str
) -> NotorietyGenerator | None:
    data = r.obj(value, path)
    if data is None:
        return None
    return NotorietyGenerator(
        id=r.get(data, "id", (str,), path),
        name=r.get(data, "name", (str,), path),
        base_cost=r.non_negative(data, "base_cost", path),
        cost_scaling=r.get(data, "cost_scaling", _NUMBER, path),
        notoriety_per_second=r.non_negative(data, "notoriety_per_second", path),
        upkeep=r.non_negative(data, "upkeep", path),
        owned=r.whole(data, "owned", path),
        unlocked=r.get(data, "unlocked", (bool,), path),
    )


def _decode_effect(r: _Reader, value: Any, path: str) -> UpgradeEffect | None:
    data = r.obj(value, path)
    if data is None:
        return None
    tag = r.get(data, "type", (str,), path)
    try:
        etype = EffectType(tag) if tag is not None else None
    except ValueError:
        r.problems.append(f"{path}.type: unknown effect type {tag!r}")
        etype = None
    table = r.get(data, "tier_table", (list,), path) or []
    if not all(
        isinstance(v, _NUMBER) and not isinstance(v, bool) and math.isfinite(v) for v in table
    ):
        r.problems.append(f"{path}.tier_table: expected a list of numbers")
    value_ = r.get(data, "value", _NUMBER, path)
    target = r.get(data, "target_generator_id", (str,), path, nullable=True)
    if etype is None:
        return None
    return UpgradeEffect(etype, value_, target, tuple(table))


def _decode_upgrade(r: _Reader, value: Any, path: str) -> Upgrade | None:
    data = r.obj(value, path)
    if data is None:
        return None
    effect_data = data.get("effect", _MISSING)
    if effect_data is _MISSING:
        r.problems.append(f"{path}.effect: missing")
        effect = None
    else:
        effect = _decode_effect(r, effect_data, f"{path}.effect")
    tag = r.get(data, "currency", (str,), path)
    try:
        currency = Currency(tag) if tag is not None else None
    except ValueError:
        r.problems.append(f"{path}.currency: unknown currency {tag!r}")
        currency = None
    return Upgrade(
        id=r.get(data, "id", (str,), path),
        name=r.get(data, "name", (str,), path),
        description=r.get(data, "description", (str,), path),
        effect=effect,
        base_cost=r.non_negative(data, "base_cost", path),
        cost=r.non_negative(data, "cost", path),
        cost_multiplier=r.get(data, "cost_multiplier", _NUMBER, path),
        purchased=r.get(data, "purchased", (bool,), path),
        tier=r.get(data, "tier", (int,), path, nullable=True),
        max_tier=r.get(data, "max_tier", (int,), path, nullable=True),
        current_level=r.get(data, "current_level", (int,), path, nullable=True),
        max_level=r.get(data, "max_level", (int,), path, nullable=True),
        permanent=r.get(data, "permanent", (bool,), path),
        currency=currency,
    )


def _decode_theme(r: _Reader, value: Any, path: str) -> Theme | None:
    data = r.obj(value, path)
    if data is None:
        return None
    return Theme(
        id=r.get(data, "id", (str,), path),
        name=r.get(data, "name", (str,), path),
        cost=r.non_negative(data, "cost", path),
        bonus_multiplier=r.get(data, "bonus_multiplier", _NUMBER, path),
        bonus_click_power=r.get(data, "bonus_click_power", _NUMBER, path),
        unlocked=r.get(data, "unlocked", (bool,), path),
        active=r.get(data, "active", (bool,), path),
    )


def _decode_achievement(r: _Reader, value: Any, path: str) -> Achievement | None:
    data = r.obj(value, path)
    if data is None:
        return None
    return Achievement(
        id=r.get(data, "id", (str,), path),
        unlocked=r.get(data, "unlocked", (bool,), path),
        unlocked_at=r.get(data, "unlocked_at", (int,), path, nullable=True),
    )


def _decode_event(r: _Reader, value: Any, path: str) -> ActiveEvent | None:
    data = r.obj(value, path)
    if data is None:
        return None
    tag = r.get(data, "kind", (str,), path)
    try:
        kind = EventKind(tag) if tag is not None else None
    except ValueError:
        r.problems.append(f"{path}.kind: unknown event kind {tag!r}")
        kind = None
    return ActiveEvent(
        id=r.get(data, "id", (str,), path),
        name=r.get(data, "name", (str,), path),
        kind=kind,
        multiplier=r.non_negative(data, "multiplier", path),
        ends_at=r.get(data, "ends_at", (int,), path),
    )


def _decode_stats(r: _Reader, value: Any, path: str) -> Statistics | None:
    data = r.obj(value, path)
    if data is None:
        return None
    return Statistics(
        total_clicks=r.whole(data, "total_clicks", path),
        total_creds_earned=r.non_negative(data, "total_creds_earned", path),
        awards_earned=r.whole(data, "awards_earned", path),
        total_generators_purchased=r.whole(data, "total_generators_purchased", path),
        total_upgrades_purchased=r.whole(data, "total_upgrades_purchased", path),
        prestige_count=r.whole(data, "prestige_count", path),
        play_time=r.whole(data, "play_time", path),
        session_count=r.whole(data, "session_count", path),
    )


def _decode_settings(r: _Reader, value: Any, path: str) -> Settings | None:
    data = r.obj(value, path)
    if data is None:
        return None
    return Settings(
        tutorial_completed=r.get(data, "tutorial_completed", (bool,), path),
        auto_save=r.get(data, "auto_save", (bool,), path),
        offline_progress_enabled=r.get(data, "offline_progress_enabled", (bool,), path),
    )


_GAME_KEYS = tuple(encode_game(GameState()).keys())


def _decode_game(r: _Reader, value: Any, path: str) -> GameState | None:
    data = r.obj(value, path)
    if data is None:
        return None
    nested = {}
    for key, decode in (("stats", _decode_stats), ("settings", _decode_settings)):
        if key not in data:
            r.problems.append(f"{path}.{key}: missing")
            nested[key] = None
        else:
            nested[key] = decode(r, data[key], f"{path}.{key}")

    themes = r.items(data, "themes", path, _decode_theme)
    active = [t.id for t in themes if t is not None and t.active]
    if len(active) > 1:
        r.problems.append(f"{path}.themes: more than one active theme {active}")
    locked = [t.id for t in themes if t is not None and t.active and not t.unlocked]
    if locked:
        r.problems.append(f"{path}.themes: active theme is not unlocked {locked}")

    return GameState(
        creds=r.non_negative(data, "creds", path),
        awards=r.whole(data, "awards", path),
        prestige=r.whole(data, "prestige", path),
        notoriety=r.non_negative(data, "notoriety", path),
        generators=r.items(data, "generators", path, _decode_generator),
        notoriety_generators=r.items(
            data, "notoriety_generators", path, _decode_notoriety_generator
        ),
        upgrades=r.items(data, "upgrades", path, _decode_upgrade),
        themes=themes,
        achievements=r.items(data, "achievements", path, _decode_achievement),
        active_events=r.items(data, "active_events", path, _decode_event),
        stats=nested["stats"],
        settings=nested["settings"],
        version=r.get(data, "version", (str,), path),
        last_save_time=r.get(data, "last_save_time", (int,), path),
        extra={k: v for k, v in data.items() if k not in _GAME_KEYS},
    )


def _decode_slot(r: _Reader, key: str, value: Any, path: str) -> SaveSlot | None:
    data = r.obj(value, path)
    if data is None:
        return None
    if not key.isdigit() or int(key) not in SLOT_IDS:
        r.problems.append(f"{path}: slot id must be one of {SLOT_IDS}")
        return None
    slot_id = r.get(data, "id", (int,), path)
    if slot_id is not None and slot_id != int(key):
        r.problems.append(f"{path}.id: {slot_id} does not match key {key}")
    if "game" not in data:
        r.problems.append(f"{path}.game: missing")
        game = None
    else:
        game = _decode_game(r, data["game"], f"{path}.game")
    return SaveSlot(
        id=int(key),
        game=game,
        created_at=r.get(data, "created_at", (int,), path),
        updated_at=r.get(data, "updated_at", (int,), path),
        name=r.get(data, "name", (str,), path),
    )


def decode_game(data: Any) -> GameState:
    """Validated dict -> GameState. Raises InvalidSaveFormat."""
    r = _Reader()
    state = _decode_game(r, data, "game")
    if r.problems:
        raise InvalidSaveFormat(r.problems)
    return state


def decode_system(data: Any) -> SaveSystemState:
    """Validated dict -> SaveSystemState. Raises InvalidSaveFormat."""
    r = _Reader()
    root = r.obj(data, "save")
    if root is None:
        raise InvalidSaveFormat(r.problems)

    active = r.get(root, "active_slot", (int,), "save")
    if active is not None and active not in SLOT_IDS:
        r.problems.append(f"save.active_slot: must be one of {SLOT_IDS}")
    version = r.get(root, "version", (int,), "save")
    raw_slots = r.get(root, "slots", (dict,), "save") or {}
    if len(raw_slots) > len(SLOT_IDS):
        r.problems.append(f"save.slots: at most {len(SLOT_IDS)} slots allowed")

    slots: dict[int, SaveSlot] = {}
    for key, value in raw_slots.items():
        slot = _decode_slot(r, str(key), value, f"save.slots.{key}")
        if slot is not None:
            slots[slot.id] = slot

    if r.problems:
        raise InvalidSaveFormat(r.problems)
    return SaveSystemState(active_slot=active, slots=slots, version=version)


# ── Text round-trip ──────────────────────────────────────────────────


def _parse(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise InvalidSaveFormat([f"not valid JSON: {exc}"]) from exc


def export_save(system: SaveSystemState) -> str:
    return json.dumps(encode_system(system), indent=2)


def import_save(text: str) -> SaveSystemState:
    return decode_system(_parse(text))


def export_game(state: GameState) -> str:
    return json.dumps(encode_game(state), indent=2)


def import_game(text: str) -> GameState:
    return decode_game(_parse(text))


def diff(save_data: Mapping[str, Any], factory_state: GameState | None = None) -> SaveDiff:
    """Compare top-level keys of a game payload against the factory shape."""
    if factory_state is None:
        factory_state = create_initial_state()
    expected = set(encode_game(factory_state))
    actual = set(save_data)
    return SaveDiff(
        missing=tuple(sorted(expected - actual)),
        extra=tuple(sorted(actual - expected)),
    )
