"""Tests for slots module."""
import logging

import pytest

from clickfluencer._types import DAY_MS, HOUR_MS, SimulatedClock
from clickfluencer.achievements import WELCOME_BACK_ID
from clickfluencer.codec import export_save
from clickfluencer.results import Outcome
from clickfluencer.slots import (
    SaveSlotManager,
    create_new_slot,
    delete_slot,
    ensure_active_slot,
    get_slot_info,
    rename_slot,
    save_to_slot,
    switch_active_slot,
)
from clickfluencer.state import SaveSystemState, create_initial_state
from clickfluencer.store import MemoryStore, SaveStore, StoreError


def _make_system(*slot_ids: int, active: int = 1) -> SaveSystemState:
    system = SaveSystemState(active_slot=active)
    for slot_id in slot_ids:
        system = create_new_slot(system, slot_id, now=100).system
    return system


class _BrokenStore(SaveStore):
    def save(self, data):
        raise StoreError("disk full")

    def load(self):
        raise StoreError("unreadable")


class TestCreate:
    def test_fresh_slot(self):
        result = create_new_slot(SaveSystemState(), 2, now=500)
        assert result.success
        slot = result.system.slots[2]
        assert slot.name == "Slot 2"
        assert slot.created_at == slot.updated_at == 500
        assert slot.game.last_save_time == 500

    def test_does_not_switch(self):
        system = _make_system(1)
        assert create_new_slot(system, 3, now=0).system.active_slot == 1

    def test_overwrites_existing(self):
        system = _make_system(1)
        system.slots[1].game.creds = 999
        new = create_new_slot(system, 1, now=0, name="Again").system
        assert new.slots[1].game.creds == 0
        assert new.slots[1].name == "Again"
        assert system.slots[1].game.creds == 999

    def test_invalid_id(self):
        system = _make_system(1)
        result = create_new_slot(system, 4, now=0)
        assert result.outcome is Outcome.INVALID_TARGET
        assert result.system is system


class TestSwitch:
    def test_switch(self):
        system = _make_system(1, 2)
        assert switch_active_slot(system, 2).system.active_slot == 2

    def test_empty_slot_refused(self):
        system = _make_system(1)
        result = switch_active_slot(system, 3)
        assert result.outcome is Outcome.SLOT_EMPTY
        assert result.system.active_slot == 1

    def test_invalid_id(self):
        assert switch_active_slot(_make_system(1), 0).outcome is Outcome.INVALID_TARGET


class TestDelete:
    def test_delete_inactive(self):
        system = _make_system(1, 2)
        new = delete_slot(system, 2, now=0).system
        assert sorted(new.slots) == [1]
        assert new.active_slot == 1

    def test_delete_active_moves_to_lowest(self):
        system = _make_system(1, 2, 3, active=2)
        new = delete_slot(system, 2, now=0).system
        assert new.active_slot == 1
        assert sorted(new.slots) == [1, 3]

    def test_delete_last_slot_starts_fresh_in_one(self):
        system = _make_system(3, active=3)
        system.slots[3].game.creds = 50
        result = delete_slot(system, 3, now=777)
        assert result.success
        assert sorted(result.system.slots) == [1]
        assert result.system.active_slot == 1
        assert result.system.slots[1].game.creds == 0
        assert result.system.slots[1].created_at == 777

    def test_delete_empty(self):
        assert delete_slot(_make_system(1), 2, now=0).outcome is Outcome.SLOT_EMPTY


def test_rename():
    system = _make_system(1)
    assert rename_slot(system, 1, "  Speedrun ").system.slots[1].name == "Speedrun"
    assert rename_slot(system, 1, "   ").system.slots[1].name == "Slot 1"


def test_save_to_slot_copies_game():
    system = _make_system(1)
    game = create_initial_state()
    game.creds = 10
    new = save_to_slot(system, 1, game, now=900).system
    game.creds = 20
    assert new.slots[1].game.creds == 10
    assert new.slots[1].updated_at == 900


def test_slot_info():
    system = _make_system(1, 2, active=2)
    info = get_slot_info(system, 2)
    assert info.active
    assert info.achievements_unlocked == 0
    assert get_slot_info(system, 3) is None


class TestEnsureActive:
    def test_empty_system_gets_slot_one(self):
        system = ensure_active_slot(SaveSystemState(active_slot=3), now=0).system
        assert sorted(system.slots) == [1]
        assert system.active_slot == 1

    def test_dangling_pointer_repaired(self):
        system = _make_system(2, 3, active=1)
        assert ensure_active_slot(system, now=0).system.active_slot == 2


class TestManager:
    def test_first_load_starts_fresh(self):
        manager = SaveSlotManager(MemoryStore(), clock=SimulatedClock(1000))
        load = manager.load()
        assert not load.restored
        assert not load.welcome_back
        assert manager.active_slot == 1
        assert manager.active_game.stats.session_count == 1

    def test_save_then_load(self):
        clock = SimulatedClock(1000)
        store = MemoryStore(clock)
        first = SaveSlotManager(store, clock=clock)
        first.load()
        game = first.active_game.copy()
        game.creds = 321
        first.update_active(game)
        assert first.save()

        clock.advance(HOUR_MS)
        second = SaveSlotManager(store, clock=clock)
        load = second.load()
        assert load.restored
        assert load.last_seen == 1000
        assert second.active_game.creds == 321
        assert second.active_game.stats.session_count == 2
        assert not load.welcome_back

    def test_welcome_back_after_a_day(self):
        clock = SimulatedClock(1000)
        store = MemoryStore(clock)
        first = SaveSlotManager(store, clock=clock)
        first.load()
        first.save()

        clock.advance(DAY_MS)
        second = SaveSlotManager(store, clock=clock)
        assert second.load().welcome_back
        assert second.active_game.achievement(WELCOME_BACK_ID).unlocked

    def test_open_session_needs_a_loaded_system(self):
        manager = SaveSlotManager(MemoryStore(), clock=SimulatedClock())
        with pytest.raises(RuntimeError):
            manager.open_session()

    def test_open_session_on_a_stale_slot(self):
        clock = SimulatedClock(1000)
        manager = SaveSlotManager(MemoryStore(clock), clock=clock)
        manager.load()
        manager.create_slot(2)
        clock.advance(DAY_MS)
        manager.switch_slot(2)
        assert manager.open_session()
        assert manager.active_game.stats.session_count == 1
        # already unlocked, so a second session does not report it again
        assert not manager.open_session()
        assert manager.active_game.stats.session_count == 2

    def test_save_failure_reported(self, caplog):
        manager = SaveSlotManager(_BrokenStore(), clock=SimulatedClock())
        with caplog.at_level(logging.ERROR, logger="clickfluencer.slots"):
            load = manager.load()
            assert manager.save() is False
        assert load.error == "unreadable"
        assert manager.last_error == "disk full"
        assert "disk full" in caplog.text

    def test_corrupt_payload_starts_fresh(self):
        store = MemoryStore()
        store.save({"active_slot": "one"})
        manager = SaveSlotManager(store, clock=SimulatedClock())
        load = manager.load()
        assert not load.restored
        assert load.error is not None
        assert manager.active_game.creds == 0

    def test_slot_operations(self):
        manager = SaveSlotManager(clock=SimulatedClock())
        manager.load()
        assert manager.create_slot(2, "Alt").success
        assert manager.switch_slot(2).success
        assert manager.active_slot == 2
        assert not manager.switch_slot(3).success
        assert manager.rename_slot(2, "Main").success
        assert [i.name for i in manager.slots_overview()] == ["Slot 1", "Main"]
        assert manager.delete_slot(2).success
        assert manager.active_slot == 1

    def test_import_rejects_garbage_without_changes(self):
        manager = SaveSlotManager(clock=SimulatedClock())
        manager.load()
        before = manager.system
        result = manager.import_save("[]")
        assert result.outcome is Outcome.INVALID_FORMAT
        assert manager.system is before

    def test_import_replaces_system(self):
        manager = SaveSlotManager(clock=SimulatedClock())
        manager.load()
        other = _make_system(2, 3, active=3)
        other.slots[3].game.creds = 42
        assert manager.import_save(export_save(other)).success
        assert manager.active_slot == 3
        assert manager.active_game.creds == 42

    def test_export_round_trips(self):
        manager = SaveSlotManager(clock=SimulatedClock())
        manager.load()
        text = manager.export_save()
        copy = SaveSlotManager(clock=SimulatedClock())
        copy.load()
        assert copy.import_save(text).success
        assert copy.system == manager.system
