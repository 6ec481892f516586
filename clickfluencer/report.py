from __future__ import annotations

from dataclasses import dataclass, field

from clickfluencer.metrics import (
    AchievementEvent,
    MetricsCollector,
    PrestigeEvent,
    PurchaseEvent,
    Snapshot,
)


@dataclass
class SimulationReport:
    """Container for simulation results and derived metrics."""

    strategy_description: str = ""
    clicks_per_second: float = 0.0
    outcome: str = ""
    total_time_ms: float = 0.0

    # Raw metrics
    snapshots: list[Snapshot] = field(default_factory=list)
    purchases: list[PurchaseEvent] = field(default_factory=list)
    achievements: list[AchievementEvent] = field(default_factory=list)
    prestiges: list[PrestigeEvent] = field(default_factory=list)
    clicks_accepted: int = 0
    clicks_throttled: int = 0

    # Final state
    final_creds: float = 0.0
    final_creds_per_second: float = 0.0
    final_click_power: float = 0.0
    final_awards: int = 0
    final_prestige: int = 0

    # Derived metrics
    achievement_times: dict[str, float] = field(default_factory=dict)
    purchase_gaps_ms: list[float] = field(default_factory=list)
    max_purchase_gap_ms: float = 0.0
    mean_purchase_gap_ms: float = 0.0
    purchases_per_minute: float = 0.0

    def achievement_time(self, achievement_id: str) -> float | None:
        return self.achievement_times.get(achievement_id)

    def creds_series(self) -> list[tuple[float, float]]:
        """Return (time_ms, creds) pairs."""
        return [(s.time_ms, s.creds) for s in self.snapshots]

    def rate_series(self) -> list[tuple[float, float]]:
        """Return (time_ms, creds_per_second) pairs."""
        return [(s.time_ms, s.creds_per_second) for s in self.snapshots]


def build_report(
    collector: MetricsCollector,
    strategy_description: str,
    clicks_per_second: float,
    outcome: str,
    total_time_ms: float,
) -> SimulationReport:
    """Build a SimulationReport from collected metrics."""
    achievement_times = {a.achievement_id: a.time_ms for a in collector.achievements}

    purchase_gaps: list[float] = []
    purchase_times = sorted(p.time_ms for p in collector.purchases)
    if purchase_times:
        purchase_gaps.append(purchase_times[0])  # gap from t=0 to first purchase
        for i in range(1, len(purchase_times)):
            purchase_gaps.append(purchase_times[i] - purchase_times[i - 1])

    max_gap = max(purchase_gaps) if purchase_gaps else 0.0
    mean_gap = (sum(purchase_gaps) / len(purchase_gaps)) if purchase_gaps else 0.0
    minutes = total_time_ms / 60_000
    ppm = len(collector.purchases) / minutes if minutes > 0 else 0.0

    last = collector.snapshots[-1] if collector.snapshots else None
    return SimulationReport(
        strategy_description=strategy_description,
        clicks_per_second=clicks_per_second,
        outcome=outcome,
        total_time_ms=total_time_ms,
        snapshots=collector.snapshots,
        purchases=collector.purchases,
        achievements=collector.achievements,
        prestiges=collector.prestiges,
        clicks_accepted=collector.clicks_accepted,
        clicks_throttled=collector.clicks_throttled,
        final_creds=last.creds if last else 0.0,
        final_creds_per_second=last.creds_per_second if last else 0.0,
        final_click_power=last.click_power if last else 0.0,
        final_awards=last.awards if last else 0,
        final_prestige=last.prestige if last else 0,
        achievement_times=achievement_times,
        purchase_gaps_ms=purchase_gaps,
        max_purchase_gap_ms=max_gap,
        mean_purchase_gap_ms=mean_gap,
        purchases_per_minute=ppm,
    )
