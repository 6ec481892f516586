from __future__ import annotations

import logging
import math
import random

from clickfluencer._types import SimulatedClock
from clickfluencer.definition import GameDefinition
from clickfluencer.metrics import MetricsCollector
from clickfluencer.report import SimulationReport, build_report
from clickfluencer.runtime import GameRuntime
from clickfluencer.store import MemoryStore
from clickfluencer.strategy import GreedyCheapest, Strategy, purchase_options

logger = logging.getLogger(__name__)

MAX_TICKS = 10_000_000
# keeps simulated saves clear of the offline-progress window at start
START_TIME_MS = 1_000_000_000_000


class Simulation:
    """Plays the game headlessly on a simulated clock."""

    def __init__(
        self,
        definition: GameDefinition | None = None,
        strategy: Strategy | None = None,
        clicks_per_second: float = 0.0,
        duration_ms: float = 3_600_000,
        tick_ms: int = 1000,
        seed: int | None = None,
    ) -> None:
        if tick_ms <= 0:
            raise ValueError("tick_ms must be positive")
        self.strategy = strategy or GreedyCheapest()
        self.clicks_per_second = clicks_per_second
        self.duration_ms = duration_ms
        self.tick_ms = tick_ms

        self.clock = SimulatedClock(START_TIME_MS)
        self.rng = random.Random(seed)
        self.runtime = GameRuntime(
            definition=definition,
            store=MemoryStore(self.clock),
            clock=self.clock,
            rng=self.rng,
        )
        self.collector = MetricsCollector(snapshot_interval_ms=tick_ms)
        self._run_started_at = 0.0

    @property
    def elapsed_ms(self) -> int:
        return self.clock.now - START_TIME_MS

    def run(self) -> SimulationReport:
        start = self.runtime.start()
        self.collector.record_achievements(start.unlocked, 0)
        self.collector.record_tick(self.runtime, 0)

        interval = 1000 / self.clicks_per_second if self.clicks_per_second > 0 else None
        next_click = 0.0
        ticks = 0
        outcome = "Duration reached"

        while self.elapsed_ms < self.duration_ms:
            ticks += 1
            if ticks > MAX_TICKS:
                outcome = "Max ticks reached"
                break
            tick_start = self.elapsed_ms
            tick_end = min(tick_start + self.tick_ms, self.duration_ms)

            # 1. Clicks spread across the tick
            if interval is not None:
                while next_click < tick_end:
                    self.clock.set(START_TIME_MS + int(next_click))
                    result = self.runtime.click()
                    if result.success:
                        self.collector.clicks_accepted += 1
                        self._record_unlocks()
                    else:
                        self.collector.clicks_throttled += 1
                    next_click += interval

            # 2. Production for the tick
            self.clock.set(START_TIME_MS + int(tick_end))
            self.runtime.tick(tick_end - tick_start)
            self._record_unlocks()

            # 3. Purchases
            self._buy()

            # 4. Prestige
            if self.strategy.should_prestige(self.runtime.state):
                if self.runtime.prestige().success:
                    now = self.elapsed_ms
                    self.collector.record_prestige(
                        self.runtime.state.prestige, now, now - self._run_started_at
                    )
                    self._run_started_at = now
                    self._record_unlocks()

            self.collector.record_tick(self.runtime, self.elapsed_ms)

            if math.isnan(self.runtime.state.creds) or math.isinf(self.runtime.state.creds):
                outcome = "Aborted: NaN/Inf detected"
                break

        self.runtime.stop()
        logger.info("Simulation finished: %s", outcome)
        return build_report(
            collector=self.collector,
            strategy_description=self.strategy.describe(),
            clicks_per_second=self.clicks_per_second,
            outcome=outcome,
            total_time_ms=self.elapsed_ms,
        )

    def _buy(self) -> None:
        while True:
            choices = self.strategy.decide_purchases(
                self.runtime.state, purchase_options(self.runtime.state)
            )
            bought = False
            for option in choices:
                if option.kind == "generator":
                    result = self.runtime.purchase_generator(option.id)
                elif option.kind == "notoriety_generator":
                    result = self.runtime.purchase_notoriety_generator(option.id)
                else:
                    result = self.runtime.purchase_upgrade(option.id)
                if result.success:
                    self.collector.record_purchase(
                        self.runtime, self.elapsed_ms, option.kind, option.id, option.cost
                    )
                    self._record_unlocks()
                    bought = True
                    # prices moved; ask the strategy again
                    break
            if not bought:
                return

    def _record_unlocks(self) -> None:
        self.collector.record_achievements(self.runtime.last_check.newly_unlocked, self.elapsed_ms)
