from __future__ import annotations

import math
from collections import OrderedDict
from typing import TYPE_CHECKING, Callable, Generic, Hashable, TypeVar

if TYPE_CHECKING:
    from clickfluencer.composer import BreakdownStep
    from clickfluencer.report import SimulationReport

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_SUFFIXES = [
    (1e48, "QiD"),
    (1e45, "QaD"),
    (1e42, "TDc"),
    (1e39, "DDc"),
    (1e36, "UDc"),
    (1e33, "Dc"),
    (1e30, "No"),
    (1e27, "Oc"),
    (1e24, "Sp"),
    (1e21, "Sx"),
    (1e18, "Qi"),
    (1e15, "Qa"),
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
    (1e3, "K"),
]


class FormatCache(Generic[K, V]):
    """Fixed-capacity memo that evicts the oldest entry on insert."""

    def __init__(self, capacity: int = 1000) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: OrderedDict[K, V] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        if key in self._entries:
            return self._entries[key]
        value = compute()
        self.put(key, value)
        return value

    def put(self, key: K, value: V) -> None:
        if key in self._entries:
            self._entries[key] = value
            return
        if len(self._entries) >= self.capacity:
            self._entries.popitem(last=False)
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()


_number_cache: FormatCache[tuple[float, int], str] = FormatCache(1000)


def _format_number(num: float, decimals: int) -> str:
    if math.isnan(num) or math.isinf(num):
        return str(num)
    if num < 0:
        return "-" + _format_number(-num, decimals)
    if num < 1000:
        return f"{num:.{min(decimals, 2)}f}"
    for value, suffix in _SUFFIXES:
        if num >= value:
            return f"{num / value:.{decimals}f}{suffix}"
    return f"{num:.{decimals}f}"


def format_number(num: float, decimals: int = 2) -> str:
    """1500 -> '1.50K', 2.5e6 -> '2.50M'."""
    return _number_cache.get_or_compute((num, decimals), lambda: _format_number(num, decimals))


def format_rate(rate: float) -> str:
    return format_number(rate) + "/s"


def format_multiplier(multiplier: float) -> str:
    return f"x{multiplier:.2f}"


def format_time(ms: float) -> str:
    """65000 -> '1m 5s'. Shows the two largest units."""
    seconds = int(ms // 1000)
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def format_breakdown(steps: list[BreakdownStep]) -> str:
    lines: list[str] = []
    for step in steps:
        if step.kind == "multiplier":
            change = format_multiplier(step.factor)
        elif step.kind == "upkeep":
            change = "-" + format_number(-step.contribution)
        else:
            change = "+" + format_number(step.contribution)
        lines.append(f"  {step.label:.<32s} {change:>10s}  = {format_number(step.total)}")
    return "\n".join(lines)


def format_simulation_report(report: SimulationReport) -> str:
    """Format a simulation report for console output."""
    lines: list[str] = []

    lines.append("=" * 30 + " Clickfluencer Simulation Report " + "=" * 30)
    lines.append(f"Strategy: {report.strategy_description}")
    lines.append(f"Clicks/s: {report.clicks_per_second:g}")
    lines.append(f"Result: {report.outcome} after {format_time(report.total_time_ms)}")
    lines.append("")

    lines.append("FINAL STATE:")
    lines.append(f"  Creds: {format_number(report.final_creds)}")
    lines.append(f"  Production: {format_rate(report.final_creds_per_second)}")
    lines.append(f"  Click power: {format_number(report.final_click_power)}")
    lines.append(f"  Awards: {report.final_awards}")
    lines.append(f"  Prestige: {report.final_prestige}")
    lines.append("")

    if report.achievements:
        lines.append("ACHIEVEMENTS:")
        for a in report.achievements:
            lines.append(f"  * {a.achievement_id:.<30s} {format_time(a.time_ms)}")
        lines.append("")

    lines.append("PURCHASES:")
    lines.append(f"  Total: {len(report.purchases)}")
    lines.append(f"  Rate: {report.purchases_per_minute:.1f}/min")
    lines.append(f"  Max gap: {format_time(report.max_purchase_gap_ms)}")
    lines.append(f"  Mean gap: {format_time(report.mean_purchase_gap_ms)}")
    if report.prestiges:
        lines.append("")
        lines.append("PRESTIGES:")
        for p in report.prestiges:
            lines.append(f"  * level {p.prestige:<4d} {format_time(p.time_ms)}")

    return "\n".join(lines)
