from __future__ import annotations

import logging
import math
import random
from dataclasses import fields
from typing import Any

from clickfluencer._types import Clock, now_ms
from clickfluencer.composer import (
    award_drop_rate,
    click_yield,
    compute_click_power,
    compute_creds_per_second,
    compute_notoriety_per_second,
)
from clickfluencer.definition import GameDefinition
from clickfluencer.events import expire_events, pick_event, start_event
from clickfluencer.prestige import apply_prestige
from clickfluencer.results import ActionResult, ClickResult, OfflineProgress, Outcome
from clickfluencer.state import Currency, GameState, Settings, UpgradeKind

logger = logging.getLogger(__name__)


def _unlock_generators(state: GameState) -> list[str]:
    """Reveal generators the player can now afford. Mutates ``state``."""
    unlocked: list[str] = []
    for g in state.generators:
        if not g.unlocked and state.creds >= g.base_cost:
            g.unlocked = True
            unlocked.append(g.id)
    return unlocked


def _unlock_notoriety_generators(state: GameState, fraction: float) -> list[str]:
    unlocked: list[str] = []
    for g in state.notoriety_generators:
        if not g.unlocked and state.creds >= g.base_cost * fraction:
            g.unlocked = True
            unlocked.append(g.id)
    return unlocked


class ProgressionEngine:
    """Turns player actions and elapsed time into new game states.

    Every operation leaves its input untouched and returns a new state. The
    engine only remembers when it last accepted a click and how much play
    time has passed since the last random event roll.
    """

    def __init__(
        self,
        definition: GameDefinition | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if definition is None:
            from clickfluencer.catalogue import default_definition

            definition = default_definition()
        self.definition = definition
        self.config = definition.config
        self._clock = clock or now_ms
        self._rng = rng or random.Random()
        self._last_click_at: int | None = None
        self._event_timer = 0.0
        self._disposed = False

    @classmethod
    def create(
        cls,
        definition: GameDefinition | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ) -> ProgressionEngine:
        return cls(definition, clock, rng)

    def dispose(self) -> None:
        self._disposed = True
        self._last_click_at = None
        self._event_timer = 0.0

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _ensure_live(self) -> None:
        if self._disposed:
            raise RuntimeError("ProgressionEngine has been disposed")

    def _reveal(self, state: GameState) -> None:
        _unlock_generators(state)
        _unlock_notoriety_generators(state, self.config.notoriety_unlock_fraction)

    # ── Clicks and time ──────────────────────────────────────────────

    def apply_click(self, state: GameState) -> ClickResult:
        """Credit one click unless it lands inside the throttle window."""
        self._ensure_live()
        now = self._clock()
        if (
            self._last_click_at is not None
            and now - self._last_click_at < self.config.click_throttle_ms
        ):
            logger.debug("Click throttled (%d ms since last)", now - self._last_click_at)
            return ClickResult(state=state, outcome=Outcome.THROTTLED)
        self._last_click_at = now

        new = state.copy()
        expire_events(new, now)
        spread = self.config.click_variance
        variance = self._rng.uniform(1 - spread, 1 + spread)
        gained = click_yield(compute_click_power(new), variance)
        new.creds += gained
        new.stats.total_clicks += 1
        new.stats.total_creds_earned += gained

        dropped = self._rng.random() < award_drop_rate(new, self.config.award_drop_chance)
        if dropped:
            new.awards += 1
            new.stats.awards_earned += 1

        self._reveal(new)
        return ClickResult(
            state=new,
            message=f"+{gained} creds",
            creds_gained=gained,
            award_dropped=dropped,
            variance=variance,
        )

    def apply_elapsed(self, state: GameState, delta_ms: float) -> GameState:
        """Integrate production over ``delta_ms`` milliseconds."""
        self._ensure_live()
        if delta_ms <= 0:
            return state

        new = state.copy()
        expire_events(new, self._clock())
        seconds = delta_ms / 1000
        # upkeep can push net production below zero; creds stop at zero
        net = compute_creds_per_second(new)
        notoriety_rate = compute_notoriety_per_second(new, self.config.notoriety_per_second)
        new.notoriety += notoriety_rate * seconds
        new.creds = max(0.0, new.creds + net * seconds)
        new.stats.total_creds_earned += max(0.0, net) * seconds
        new.stats.play_time += round(delta_ms)
        self._reveal(new)
        return new

    def roll_events(self, state: GameState, delta_ms: float) -> GameState:
        """Give random events one chance per ``config.event_check_ms`` of live play.

        Offline catch-up never calls this, so events only start while the
        game is open.
        """
        self._ensure_live()
        cfg = self.config
        if not self.definition.events or delta_ms <= 0:
            return state
        self._event_timer += delta_ms
        new = state
        while self._event_timer >= cfg.event_check_ms:
            self._event_timer -= cfg.event_check_ms
            if len(new.active_events) >= cfg.max_active_events:
                continue
            if self._rng.random() >= cfg.event_chance:
                continue
            event = pick_event(self.definition.events, self._rng)
            if event is None:
                break
            if new is state:
                new = state.copy()
            start_event(new, event, self._clock())
        return new

    def apply_offline(self, state: GameState, now: int | None = None) -> OfflineProgress:
        """Catch up on the time since ``state.last_save_time``.

        Short absences are ignored, a clock that went backwards counts as no
        absence, and the window is capped then integrated in fixed chunks.
        """
        self._ensure_live()
        cfg = self.config
        if now is None:
            now = self._clock()
        time_away = max(0, now - state.last_save_time)

        if not state.settings.offline_progress_enabled or time_away < cfg.offline_min_ms:
            return OfflineProgress(state=state, time_away=time_away)

        processed = min(time_away, cfg.offline_cap_ms)
        new = state
        remaining = processed
        while remaining > 0:
            step = min(remaining, cfg.offline_chunk_ms)
            new = self.apply_elapsed(new, step)
            remaining -= step

        if new is state:
            new = state.copy()
        new.last_save_time = now
        gained = new.creds - state.creds
        logger.info(
            "Offline progress: %d ms away, %d ms processed, %.2f creds",
            time_away,
            processed,
            gained,
        )
        return OfflineProgress(
            state=new,
            time_away=time_away,
            time_processed=processed,
            creds_gained=gained,
            was_capped=time_away > cfg.offline_cap_ms,
        )

    # ── Purchases ────────────────────────────────────────────────────

    def purchase_generator(self, state: GameState, generator_id: str) -> ActionResult:
        self._ensure_live()
        generator = state.generator(generator_id)
        if generator is None or not generator.unlocked:
            return ActionResult(
                state, Outcome.INVALID_TARGET, f"Generator not available: {generator_id!r}"
            )
        cost = generator.next_cost
        if state.creds < cost:
            return ActionResult(state, Outcome.INSUFFICIENT_FUNDS, f"Need {cost} creds")

        new = state.copy()
        bought = new.generator(generator_id)
        new.creds -= cost
        bought.owned += 1
        new.stats.total_generators_purchased += 1
        return ActionResult(new, message=f"Purchased {bought.name or bought.id}")

    def purchase_generators(
        self, state: GameState, generator_id: str, count: int
    ) -> ActionResult:
        """Buy up to ``count`` units, stopping at the first failure."""
        self._ensure_live()
        result = ActionResult(state, Outcome.INVALID_TARGET, "Count must be at least 1")
        bought = 0
        current = state
        for _ in range(count):
            attempt = self.purchase_generator(current, generator_id)
            if not attempt.success:
                if bought == 0:
                    return attempt
                break
            current = attempt.state
            bought += 1
            result = ActionResult(current, message=f"Purchased {bought}x {generator_id}")
        return result

    def purchase_upgrade(self, state: GameState, upgrade_id: str) -> ActionResult:
        self._ensure_live()
        upgrade = state.upgrade(upgrade_id)
        if upgrade is None:
            return ActionResult(state, Outcome.INVALID_TARGET, f"Unknown upgrade: {upgrade_id!r}")
        if upgrade.is_maxed:
            reason = "Already purchased" if upgrade.kind is UpgradeKind.ONE_SHOT else "Already maxed"
            return ActionResult(state, Outcome.INVALID_TARGET, reason)
        currency = upgrade.currency
        if state.balance(currency) < upgrade.cost:
            return ActionResult(
                state, Outcome.INSUFFICIENT_FUNDS, f"Need {upgrade.cost:.0f} {currency.value}"
            )

        new = state.copy()
        bought = new.upgrade(upgrade_id)
        if currency is Currency.NOTORIETY:
            new.notoriety -= bought.cost
        else:
            new.creds -= bought.cost
        bought.purchased = True
        kind = bought.kind
        if kind is UpgradeKind.TIERED:
            bought.tier += 1
            bought.cost = bought.cost_at(bought.tier)
        elif kind is UpgradeKind.LEVELED:
            bought.current_level += 1
            bought.cost = bought.cost_at(bought.current_level)
        new.stats.total_upgrades_purchased += 1
        return ActionResult(new, message=f"Purchased {bought.name or bought.id}")

    def purchase_notoriety_generator(self, state: GameState, generator_id: str) -> ActionResult:
        """Buy one notoriety generator with creds.

        Refused when its upkeep would leave net production below
        ``config.min_net_creds_per_second``.
        """
        self._ensure_live()
        generator = state.notoriety_generator(generator_id)
        if generator is None or not generator.unlocked:
            return ActionResult(
                state,
                Outcome.INVALID_TARGET,
                f"Notoriety generator not available: {generator_id!r}",
            )
        cost = generator.next_cost
        if state.creds < cost:
            return ActionResult(state, Outcome.INSUFFICIENT_FUNDS, f"Need {cost} creds")
        floor = self.config.min_net_creds_per_second
        if compute_creds_per_second(state) - generator.upkeep < floor:
            return ActionResult(
                state,
                Outcome.INSUFFICIENT_FUNDS,
                f"Upkeep would drop production below {floor:g} creds/s",
            )

        new = state.copy()
        bought = new.notoriety_generator(generator_id)
        new.creds -= cost
        bought.owned += 1
        return ActionResult(new, message=f"Hired {bought.name or bought.id}")

    # ── Themes ───────────────────────────────────────────────────────

    def purchase_theme(self, state: GameState, theme_id: str) -> ActionResult:
        """Unlock a theme with awards."""
        self._ensure_live()
        theme = state.theme(theme_id)
        if theme is None:
            return ActionResult(state, Outcome.INVALID_TARGET, f"Unknown theme: {theme_id!r}")
        if theme.unlocked:
            return ActionResult(state, Outcome.INVALID_TARGET, "Theme already unlocked")
        if state.awards < theme.cost:
            return ActionResult(state, Outcome.INSUFFICIENT_FUNDS, "Not enough awards")

        new = state.copy()
        bought = new.theme(theme_id)
        new.awards -= math.ceil(bought.cost)
        bought.unlocked = True
        return ActionResult(new, message=f"Unlocked {bought.name or bought.id}")

    def activate_theme(self, state: GameState, theme_id: str) -> ActionResult:
        self._ensure_live()
        theme = state.theme(theme_id)
        if theme is None or not theme.unlocked:
            return ActionResult(state, Outcome.INVALID_TARGET, f"Theme not owned: {theme_id!r}")

        new = state.copy()
        for t in new.themes:
            t.active = False
        new.theme(theme_id).active = True
        return ActionResult(new, message=f"Activated {theme.name or theme.id}")

    # ── Prestige and settings ────────────────────────────────────────

    def prestige(self, state: GameState) -> ActionResult:
        self._ensure_live()
        return apply_prestige(state, self.definition)

    def update_setting(self, state: GameState, key: str, value: Any) -> ActionResult:
        self._ensure_live()
        known = {f.name for f in fields(Settings)}
        if key not in known or not isinstance(value, bool):
            return ActionResult(state, Outcome.INVALID_TARGET, f"Unknown setting: {key!r}")
        new = state.copy()
        setattr(new.settings, key, value)
        return ActionResult(new, message=f"{key} = {value}")
