from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Any

from clickfluencer._types import Clock, SlotId, now_ms
from clickfluencer.achievements import WELCOME_BACK_ID, AchievementCheck
from clickfluencer.composer import (
    BreakdownStep,
    click_breakdown,
    compute_click_power,
    compute_creds_per_second,
    compute_notoriety_per_second,
    production_breakdown,
)
from clickfluencer.definition import GameDefinition
from clickfluencer.engine import ProgressionEngine
from clickfluencer.prestige import can_prestige, estimate_time_to_prestige, prestige_cost
from clickfluencer.results import ActionResult, ClickResult, OfflineProgress
from clickfluencer.slots import LoadResult, SaveSlotManager, SlotResult
from clickfluencer.state import GameState
from clickfluencer.store import SaveStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartReport:
    load: LoadResult
    offline: OfflineProgress
    unlocked: tuple[str, ...] = ()


class GameRuntime:
    """Authoritative writer of the active slot.

    Routes every intent through the engine, scans achievements on the new
    state, and hands the result to the slot manager.
    """

    def __init__(
        self,
        definition: GameDefinition | None = None,
        store: SaveStore | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
        manager: SaveSlotManager | None = None,
    ) -> None:
        if definition is None:
            from clickfluencer.catalogue import default_definition

            definition = default_definition()
        errors = definition.validate()
        if errors:
            raise ValueError(
                "Invalid GameDefinition:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        self.definition = definition
        self._clock = clock or now_ms
        self._rng = rng or random.Random()
        self.manager = manager or SaveSlotManager(store, definition, clock=self._clock)
        self.evaluator = self.manager.evaluator
        self.engine: ProgressionEngine | None = None
        self.last_check = AchievementCheck()
        self._cache: dict[str, float] = {}

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self) -> StartReport:
        """Load saves, catch up offline time and scan achievements."""
        load = self.manager.load()
        offline = self.reload()
        unlocked = self.last_check.newly_unlocked
        if load.welcome_back:
            unlocked = (WELCOME_BACK_ID,) + unlocked
        return StartReport(load, offline, unlocked)

    def reload(self) -> OfflineProgress:
        """Rebuild the engine and caches against the active slot."""
        if self.engine is not None:
            self.engine.dispose()
        self.engine = ProgressionEngine.create(self.definition, self._clock, self._rng)
        self._invalidate()
        offline = self.engine.apply_offline(self.state)
        self._commit(offline.state)
        return offline

    def _enter_slot(self) -> OfflineProgress:
        # a different game just became live: same steps as a fresh start
        welcome_back = self.manager.open_session()
        offline = self.reload()
        if welcome_back:
            self.last_check = replace(
                self.last_check,
                newly_unlocked=(WELCOME_BACK_ID,) + self.last_check.newly_unlocked,
            )
        return offline

    def stop(self) -> bool:
        saved = self.manager.save()
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
        return saved

    def save(self) -> bool:
        return self.manager.save()

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def state(self) -> GameState:
        return self.manager.active_game

    @property
    def click_power(self) -> float:
        return self._cached("click_power", compute_click_power)

    @property
    def creds_per_second(self) -> float:
        return self._cached("creds_per_second", compute_creds_per_second)

    @property
    def notoriety_per_second(self) -> float:
        base = self.definition.config.notoriety_per_second
        return self._cached(
            "notoriety_per_second", lambda state: compute_notoriety_per_second(state, base)
        )

    def click_breakdown(self) -> list[BreakdownStep]:
        return click_breakdown(self.state)

    def production_breakdown(self) -> list[BreakdownStep]:
        return production_breakdown(self.state)

    def prestige_info(self) -> dict[str, Any]:
        state = self.state
        return {
            "prestige": state.prestige,
            "cost": prestige_cost(state.prestige),
            "can_prestige": can_prestige(state),
            "time_to_prestige": estimate_time_to_prestige(state, self.creds_per_second),
        }

    def progress(self, achievement_id: str) -> float:
        return self.evaluator.progress(self.state, achievement_id)

    # ── Player actions ───────────────────────────────────────────────

    def click(self) -> ClickResult:
        result = self._live().apply_click(self.state)
        if result.success:
            self._commit(result.state)
        return result

    def tick(self, delta_ms: float) -> AchievementCheck:
        """Advance the active game by ``delta_ms`` of play, rolling random events."""
        engine = self._live()
        state = engine.apply_elapsed(self.state, delta_ms)
        return self._commit(engine.roll_events(state, delta_ms))

    def purchase_generator(self, generator_id: str, count: int = 1) -> ActionResult:
        engine = self._live()
        if count == 1:
            return self._apply(engine.purchase_generator(self.state, generator_id))
        return self._apply(engine.purchase_generators(self.state, generator_id, count))

    def purchase_upgrade(self, upgrade_id: str) -> ActionResult:
        return self._apply(self._live().purchase_upgrade(self.state, upgrade_id))

    def purchase_notoriety_generator(self, generator_id: str) -> ActionResult:
        return self._apply(self._live().purchase_notoriety_generator(self.state, generator_id))

    def purchase_theme(self, theme_id: str) -> ActionResult:
        return self._apply(self._live().purchase_theme(self.state, theme_id))

    def activate_theme(self, theme_id: str) -> ActionResult:
        return self._apply(self._live().activate_theme(self.state, theme_id))

    def prestige(self) -> ActionResult:
        result = self._apply(self._live().prestige(self.state))
        if result.success:
            logger.info("Prestige %d reached", result.state.prestige)
        return result

    def update_setting(self, key: str, value: Any) -> ActionResult:
        return self._apply(self._live().update_setting(self.state, key, value))

    # ── Slots ────────────────────────────────────────────────────────

    def switch_slot(self, slot_id: SlotId) -> SlotResult:
        """Make another slot live. Nothing from the old slot's session survives."""
        if slot_id == self.manager.active_slot:
            return self.manager.switch_slot(slot_id)
        self.manager.save()
        result = self.manager.switch_slot(slot_id)
        if result.success:
            self._enter_slot()
        return result

    def create_slot(self, slot_id: SlotId, name: str | None = None) -> SlotResult:
        reload = slot_id == self.manager.active_slot
        result = self.manager.create_slot(slot_id, name)
        if result.success and reload:
            self._enter_slot()
        return result

    def delete_slot(self, slot_id: SlotId) -> SlotResult:
        before = self.manager.active_slot
        result = self.manager.delete_slot(slot_id)
        if result.success and (slot_id == before or self.manager.active_slot != before):
            self._enter_slot()
        return result

    def rename_slot(self, slot_id: SlotId, name: str) -> SlotResult:
        return self.manager.rename_slot(slot_id, name)

    def export_save(self) -> str:
        return self.manager.export_save()

    def import_save(self, text: str) -> SlotResult:
        result = self.manager.import_save(text)
        if result.success:
            self._enter_slot()
        return result

    # ── Internals ────────────────────────────────────────────────────

    def _live(self) -> ProgressionEngine:
        if self.engine is None:
            raise RuntimeError("GameRuntime is not running; call start() first")
        return self.engine

    def _apply(self, result: ActionResult) -> ActionResult:
        if result.success:
            self._commit(result.state)
        else:
            logger.debug("%s: %s", result.outcome.name, result.message)
        return result

    def _commit(self, state: GameState) -> AchievementCheck:
        state, check = self.evaluator.apply(state)
        self.manager.update_active(state)
        self.last_check = check
        self._invalidate()
        return check

    def _cached(self, key: str, compute) -> float:
        if key not in self._cache:
            self._cache[key] = compute(self.state)
        return self._cache[key]

    def _invalidate(self) -> None:
        self._cache.clear()
