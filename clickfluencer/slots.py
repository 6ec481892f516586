"""Save slots: up to three independent games and the pointer to the live one.

The module-level functions are pure transforms over :class:`SaveSystemState`.
:class:`SaveSlotManager` owns the live system and talks to a store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from clickfluencer._types import Clock, SlotId, now_ms
from clickfluencer.achievements import WELCOME_BACK_ID, AchievementEvaluator
from clickfluencer.codec import SLOT_IDS, decode_system, encode_system, export_save, import_save
from clickfluencer.definition import GameDefinition
from clickfluencer.results import InvalidSaveFormat, Outcome
from clickfluencer.state import GameState, SaveSlot, SaveSystemState, create_initial_state
from clickfluencer.store import MemoryStore, SaveStore, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotResult:
    system: SaveSystemState
    outcome: Outcome = Outcome.OK
    message: str = ""

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.OK


@dataclass(frozen=True)
class SlotInfo:
    """Read-only summary of a slot for a slot picker."""

    id: SlotId
    name: str
    created_at: int
    updated_at: int
    game: GameState
    active: bool = False

    @property
    def achievements_unlocked(self) -> int:
        return len(self.game.unlocked_achievement_ids())


def _default_name(slot_id: SlotId) -> str:
    return f"Slot {slot_id}"


def _invalid(system: SaveSystemState, slot_id: SlotId) -> SlotResult | None:
    if slot_id not in SLOT_IDS:
        return SlotResult(system, Outcome.INVALID_TARGET, f"No such slot: {slot_id!r}")
    return None


def _empty(system: SaveSystemState, slot_id: SlotId) -> SlotResult | None:
    invalid = _invalid(system, slot_id)
    if invalid is not None:
        return invalid
    if slot_id not in system.slots:
        return SlotResult(system, Outcome.SLOT_EMPTY, f"Slot {slot_id} is empty")
    return None


# ── Pure transforms ──────────────────────────────────────────────────


def create_new_slot(
    system: SaveSystemState,
    slot_id: SlotId,
    now: int,
    name: str | None = None,
    definition: GameDefinition | None = None,
) -> SlotResult:
    """Install a fresh game at ``slot_id``. The active slot is left alone."""
    invalid = _invalid(system, slot_id)
    if invalid is not None:
        return invalid
    new = system.copy()
    new.slots[slot_id] = SaveSlot(
        id=slot_id,
        game=create_initial_state(definition, now=now),
        created_at=now,
        updated_at=now,
        name=name or _default_name(slot_id),
    )
    return SlotResult(new, message=f"Created slot {slot_id}")


def switch_active_slot(system: SaveSystemState, slot_id: SlotId) -> SlotResult:
    """Point at another slot. Empty slots are refused and nothing changes."""
    empty = _empty(system, slot_id)
    if empty is not None:
        return empty
    new = system.copy()
    new.active_slot = slot_id
    return SlotResult(new, message=f"Switched to slot {slot_id}")


def delete_slot(
    system: SaveSystemState,
    slot_id: SlotId,
    now: int,
    definition: GameDefinition | None = None,
) -> SlotResult:
    """Remove a slot, never leaving the system without one.

    Deleting the last slot replaces it with a fresh game in slot 1. Deleting
    the active slot moves the pointer to the lowest remaining slot.
    """
    empty = _empty(system, slot_id)
    if empty is not None:
        return empty
    if len(system.slots) == 1:
        fresh = create_new_slot(SaveSystemState(version=system.version), 1, now, definition=definition)
        fresh.system.active_slot = 1
        return SlotResult(fresh.system, message=f"Slot {slot_id} reset to a new game in slot 1")

    new = system.copy()
    del new.slots[slot_id]
    if new.active_slot == slot_id:
        new.active_slot = min(new.slots)
    return SlotResult(new, message=f"Deleted slot {slot_id}")


def rename_slot(system: SaveSystemState, slot_id: SlotId, name: str) -> SlotResult:
    empty = _empty(system, slot_id)
    if empty is not None:
        return empty
    new = system.copy()
    new.slots[slot_id].name = name.strip() or _default_name(slot_id)
    return SlotResult(new, message=f"Renamed slot {slot_id}")


def save_to_slot(
    system: SaveSystemState, slot_id: SlotId, game: GameState, now: int
) -> SlotResult:
    """Replace the game stored in an existing slot."""
    empty = _empty(system, slot_id)
    if empty is not None:
        return empty
    new = system.copy()
    slot = new.slots[slot_id]
    slot.game = game.copy()
    slot.updated_at = now
    return SlotResult(new)


def get_slot_info(system: SaveSystemState, slot_id: SlotId) -> SlotInfo | None:
    slot = system.slots.get(slot_id)
    if slot is None:
        return None
    return SlotInfo(
        id=slot.id,
        name=slot.name,
        created_at=slot.created_at,
        updated_at=slot.updated_at,
        game=slot.game.copy(),
        active=slot_id == system.active_slot,
    )


def ensure_active_slot(
    system: SaveSystemState, now: int, definition: GameDefinition | None = None
) -> SlotResult:
    """Guarantee the active pointer names an existing slot."""
    if not system.slots:
        created = create_new_slot(system, 1, now, definition=definition)
        created.system.active_slot = 1
        return created
    if system.active_slot in system.slots:
        return SlotResult(system)
    new = system.copy()
    new.active_slot = min(new.slots)
    return SlotResult(new, message=f"Active slot moved to {new.active_slot}")


# ── Manager ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LoadResult:
    restored: bool
    welcome_back: bool = False
    last_seen: int | None = None
    error: str | None = None


class SaveSlotManager:
    """Owns the live save system and persists it through a store."""

    def __init__(
        self,
        store: SaveStore | None = None,
        definition: GameDefinition | None = None,
        evaluator: AchievementEvaluator | None = None,
        clock: Clock | None = None,
    ) -> None:
        if definition is None:
            from clickfluencer.catalogue import default_definition

            definition = default_definition()
        self._clock = clock or now_ms
        self.store = store or MemoryStore(self._clock)
        self.definition = definition
        self.evaluator = evaluator or AchievementEvaluator(
            definition.achievements,
            clock=self._clock,
            welcome_back_ms=definition.config.welcome_back_ms,
        )
        self.system = SaveSystemState()
        self.last_error: str | None = None
        self.remote_version: int | None = None

    # ── Lifecycle ────────────────────────────────────────────────────

    def load(self) -> LoadResult:
        """Restore from the store, or start fresh, then open a session."""
        now = self._clock()
        error: str | None = None
        system: SaveSystemState | None = None

        try:
            stored = self.store.load()
        except StoreError as exc:
            logger.error("Could not load saves: %s", exc)
            error = str(exc)
            stored = None
        if stored is not None:
            try:
                system = decode_system(stored.save_data)
                self.remote_version = stored.version
            except InvalidSaveFormat as exc:
                logger.error("Stored save rejected: %s", exc)
                error = str(exc)

        restored = system is not None
        system = ensure_active_slot(system or SaveSystemState(), now, self.definition).system
        last_seen = system.slots[system.active_slot].game.last_save_time

        self.system = system
        self.last_error = error
        welcome_back = self.open_session()
        logger.info(
            "Loaded %d slot(s), active slot %d%s",
            len(system.slots),
            system.active_slot,
            " (restored)" if restored else "",
        )
        return LoadResult(restored, welcome_back, last_seen if restored else None, error)

    def open_session(self) -> bool:
        """Begin a play session on the active slot.

        Counts the session and unlocks Welcome Back when the slot was last
        saved at least a day ago. Runs on every load, slot switch and
        import. Returns whether Welcome Back was newly unlocked.
        """
        slot = self.system.active()
        if slot is None:
            raise RuntimeError("No active slot; call load() first")
        game = slot.game.copy()
        game.stats.session_count += 1
        welcome_back = False
        if self.evaluator.check_welcome_back(game.last_save_time, self._clock()):
            check = self.evaluator.unlock(game, WELCOME_BACK_ID)
            game = self.evaluator.commit(game, check)
            welcome_back = WELCOME_BACK_ID in check.newly_unlocked
        slot.game = game
        return welcome_back

    def save(self) -> bool:
        """Persist the system. Failures are logged and reported, never raised."""
        now = self._clock()
        slot = self.system.active()
        if slot is not None:
            slot.game.last_save_time = now
            slot.updated_at = now
        try:
            receipt = self.store.save(encode_system(self.system))
        except StoreError as exc:
            logger.error("Save failed: %s", exc)
            self.last_error = str(exc)
            return False
        self.last_error = None
        self.remote_version = receipt.version
        logger.debug("Saved version %d", receipt.version)
        return True

    # ── Active game ──────────────────────────────────────────────────

    @property
    def active_slot(self) -> SlotId:
        return self.system.active_slot

    @property
    def active_game(self) -> GameState:
        slot = self.system.active()
        if slot is None:
            raise RuntimeError("No active slot; call load() first")
        return slot.game

    def update_active(self, game: GameState) -> None:
        slot = self.system.active()
        if slot is None:
            raise RuntimeError("No active slot; call load() first")
        slot.game = game
        slot.updated_at = self._clock()

    # ── Slot operations ──────────────────────────────────────────────

    def _apply(self, result: SlotResult) -> SlotResult:
        if result.success:
            self.system = result.system
            if result.message:
                logger.info(result.message)
        else:
            logger.warning(result.message)
        return result

    def create_slot(self, slot_id: SlotId, name: str | None = None) -> SlotResult:
        return self._apply(
            create_new_slot(self.system, slot_id, self._clock(), name, self.definition)
        )

    def switch_slot(self, slot_id: SlotId) -> SlotResult:
        return self._apply(switch_active_slot(self.system, slot_id))

    def delete_slot(self, slot_id: SlotId) -> SlotResult:
        return self._apply(delete_slot(self.system, slot_id, self._clock(), self.definition))

    def rename_slot(self, slot_id: SlotId, name: str) -> SlotResult:
        return self._apply(rename_slot(self.system, slot_id, name))

    def slot_info(self, slot_id: SlotId) -> SlotInfo | None:
        return get_slot_info(self.system, slot_id)

    def slots_overview(self) -> list[SlotInfo]:
        return [get_slot_info(self.system, slot_id) for slot_id in sorted(self.system.slots)]

    # ── Import / export ──────────────────────────────────────────────

    def export_save(self) -> str:
        return export_save(self.system)

    def import_save(self, text: str) -> SlotResult:
        """Replace every slot with an exported payload, or change nothing."""
        try:
            system = import_save(text)
        except InvalidSaveFormat as exc:
            logger.warning("Import rejected: %s", exc)
            return SlotResult(self.system, Outcome.INVALID_FORMAT, str(exc))
        system = ensure_active_slot(system, self._clock(), self.definition).system
        return self._apply(SlotResult(system, message="Imported save"))
