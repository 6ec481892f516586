from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clickfluencer.runtime import GameRuntime


@dataclass
class Snapshot:
    time_ms: float
    creds: float
    creds_per_second: float
    click_power: float
    total_creds_earned: float
    notoriety: float
    awards: int
    prestige: int


@dataclass
class PurchaseEvent:
    time_ms: float
    kind: str  # "generator" | "upgrade" | "theme"
    target_id: str
    cost: float
    creds_after: float


@dataclass
class AchievementEvent:
    time_ms: float
    achievement_id: str


@dataclass
class PrestigeEvent:
    time_ms: float
    prestige: int
    run_duration_ms: float


class MetricsCollector:
    """Collects simulation metrics at configurable intervals."""

    def __init__(self, snapshot_interval_ms: float = 1000.0) -> None:
        self.snapshot_interval_ms = snapshot_interval_ms
        self._last_snapshot_time: float | None = None

        self.snapshots: list[Snapshot] = []
        self.purchases: list[PurchaseEvent] = []
        self.achievements: list[AchievementEvent] = []
        self.prestiges: list[PrestigeEvent] = []
        self.clicks_accepted = 0
        self.clicks_throttled = 0

    def record_tick(self, runtime: GameRuntime, time_ms: float) -> None:
        """Record a snapshot if enough time has passed."""
        if (
            self._last_snapshot_time is None
            or time_ms - self._last_snapshot_time >= self.snapshot_interval_ms
        ):
            self._take_snapshot(runtime, time_ms)
            self._last_snapshot_time = time_ms

    def record_purchase(
        self,
        runtime: GameRuntime,
        time_ms: float,
        kind: str,
        target_id: str,
        cost: float,
    ) -> None:
        self.purchases.append(
            PurchaseEvent(
                time_ms=time_ms,
                kind=kind,
                target_id=target_id,
                cost=cost,
                creds_after=runtime.state.creds,
            )
        )

    def record_achievements(self, ids: tuple[str, ...], time_ms: float) -> None:
        for id in ids:
            self.achievements.append(AchievementEvent(time_ms=time_ms, achievement_id=id))

    def record_prestige(self, prestige: int, time_ms: float, run_duration_ms: float) -> None:
        self.prestiges.append(
            PrestigeEvent(time_ms=time_ms, prestige=prestige, run_duration_ms=run_duration_ms)
        )

    def _take_snapshot(self, runtime: GameRuntime, time_ms: float) -> None:
        state = runtime.state
        self.snapshots.append(
            Snapshot(
                time_ms=time_ms,
                creds=state.creds,
                creds_per_second=runtime.creds_per_second,
                click_power=runtime.click_power,
                total_creds_earned=state.stats.total_creds_earned,
                notoriety=state.notoriety,
                awards=state.awards,
                prestige=state.prestige,
            )
        )
