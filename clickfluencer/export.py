from __future__ import annotations

import csv
import json
from pathlib import Path

from clickfluencer.report import SimulationReport


def export_csv(report: SimulationReport, path: str | Path) -> None:
    """Export simulation data as CSV files.

    Creates three files:
      - {path}_snapshots.csv
      - {path}_purchases.csv
      - {path}_achievements.csv
    """
    base = str(path)

    with open(f"{base}_snapshots.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "time_ms", "creds", "creds_per_second", "click_power",
            "total_creds_earned", "notoriety", "awards", "prestige",
        ])
        for s in report.snapshots:
            writer.writerow([
                s.time_ms, s.creds, s.creds_per_second, s.click_power,
                s.total_creds_earned, s.notoriety, s.awards, s.prestige,
            ])

    with open(f"{base}_purchases.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["time_ms", "kind", "target_id", "cost", "creds_after"])
        for p in report.purchases:
            writer.writerow([p.time_ms, p.kind, p.target_id, p.cost, p.creds_after])

    with open(f"{base}_achievements.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["time_ms", "achievement_id"])
        for a in report.achievements:
            writer.writerow([a.time_ms, a.achievement_id])


def export_json(report: SimulationReport, path: str | Path) -> None:
    """Export the simulation summary as JSON."""
    data = {
        "strategy": report.strategy_description,
        "clicks_per_second": report.clicks_per_second,
        "outcome": report.outcome,
        "total_time_ms": report.total_time_ms,
        "clicks_accepted": report.clicks_accepted,
        "clicks_throttled": report.clicks_throttled,
        "final": {
            "creds": report.final_creds,
            "creds_per_second": report.final_creds_per_second,
            "click_power": report.final_click_power,
            "awards": report.final_awards,
            "prestige": report.final_prestige,
        },
        "achievement_times": report.achievement_times,
        "purchase_count": len(report.purchases),
        "purchases_per_minute": report.purchases_per_minute,
        "max_purchase_gap_ms": report.max_purchase_gap_ms,
        "mean_purchase_gap_ms": report.mean_purchase_gap_ms,
        "purchases": [
            {"time_ms": p.time_ms, "kind": p.kind, "target_id": p.target_id, "cost": p.cost}
            for p in report.purchases
        ],
        "prestiges": [
            {"time_ms": p.time_ms, "prestige": p.prestige, "run_duration_ms": p.run_duration_ms}
            for p in report.prestiges
        ],
    }
    with open(str(path), "w") as f:
        json.dump(data, f, indent=2)
