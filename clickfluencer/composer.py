"""Combines every active bonus into per-click and per-second yields.

Both paths replay the same fixed order: base, additive terms, upgrade
multipliers, random events, prestige, active theme. Production then pays the upkeep of
notoriety generators. Each step is recorded so a UI can show the breakdown,
and the last step's running total is the yield itself.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from clickfluencer.prestige import prestige_multiplier
from clickfluencer.state import EffectType, EventKind, GameState, Upgrade

BASE_CLICK_POWER = 1.0


@dataclass(frozen=True)
class BreakdownStep:
    """One labelled step of a yield computation.

    ``contribution`` is how much this step changed the running value, so the
    contributions of a breakdown sum to its final ``total``.
    """

    label: str
    kind: str  # "base" | "additive" | "multiplier" | "upkeep"
    factor: float
    contribution: float
    total: float


@dataclass
class _Bonuses:
    """Upgrade effects sorted by where they enter the composition."""

    click_additive: list[tuple[str, float]] = field(default_factory=list)
    click_multipliers: list[tuple[str, float]] = field(default_factory=list)
    generator_multipliers: dict[str, list[float]] = field(default_factory=dict)
    global_multipliers: list[tuple[str, float]] = field(default_factory=list)
    notoriety_multipliers: list[tuple[str, float]] = field(default_factory=list)
    award_drop_rate: float = 0.0


def _additive_amount(upgrade: Upgrade) -> float:
    level = upgrade.level
    if level <= 0:
        return 0.0
    if upgrade.effect.tier_table:
        return upgrade.effect.tier_value(level)
    return upgrade.effect.value * level


def _multiplier_factor(upgrade: Upgrade) -> float:
    # value^level; level 0 is a factor of 1
    return upgrade.effect.value ** upgrade.level


def _collect_bonuses(state: GameState) -> _Bonuses:
    bonuses = _Bonuses()
    for upgrade in state.upgrades:
        if upgrade.level <= 0:
            continue
        etype = upgrade.effect.type
        if etype is EffectType.CLICK_ADDITIVE:
            bonuses.click_additive.append((upgrade.name or upgrade.id, _additive_amount(upgrade)))
        elif etype is EffectType.CLICK_MULTIPLIER:
            bonuses.click_multipliers.append(
                (upgrade.name or upgrade.id, _multiplier_factor(upgrade))
            )
        elif etype is EffectType.GENERATOR_MULTIPLIER:
            target = upgrade.effect.target_generator_id or ""
            bonuses.generator_multipliers.setdefault(target, []).append(
                _multiplier_factor(upgrade)
            )
        elif etype is EffectType.GLOBAL_MULTIPLIER:
            bonuses.global_multipliers.append(
                (upgrade.name or upgrade.id, _multiplier_factor(upgrade))
            )
        elif etype is EffectType.AWARD_DROP_RATE:
            bonuses.award_drop_rate += _additive_amount(upgrade)
        elif etype is EffectType.NOTORIETY_MULTIPLIER:
            bonuses.notoriety_multipliers.append(
                (upgrade.name or upgrade.id, _multiplier_factor(upgrade))
            )
        else:
            raise ValueError(f"Unhandled effect type: {etype!r}")
    return bonuses


class _Ledger:
    def __init__(self) -> None:
        self.steps: list[BreakdownStep] = []
        self.total = 0.0

    def base(self, label: str, value: float) -> None:
        self.total += value
        self.steps.append(BreakdownStep(label, "base", value, value, self.total))

    def add(self, label: str, amount: float) -> None:
        if amount == 0:
            return
        self.total += amount
        self.steps.append(BreakdownStep(label, "additive", amount, amount, self.total))

    def multiply(self, label: str, factor: float) -> None:
        before = self.total
        self.total = before * factor
        self.steps.append(
            BreakdownStep(label, "multiplier", factor, self.total - before, self.total)
        )

    def subtract(self, label: str, amount: float) -> None:
        self.total -= amount
        self.steps.append(BreakdownStep(label, "upkeep", -amount, -amount, self.total))


def _apply_events(ledger: _Ledger, state: GameState, kind: EventKind) -> None:
    for event in state.active_events:
        if event.kind is kind:
            ledger.multiply(f"Event: {event.name or event.id}", event.multiplier)


def _apply_shared_tail(ledger: _Ledger, state: GameState) -> None:
    ledger.multiply(f"Prestige x{state.prestige}", prestige_multiplier(state.prestige))
    theme = state.active_theme()
    if theme is not None:
        ledger.multiply(f"Theme: {theme.name or theme.id}", theme.bonus_multiplier)


# ── Public API ───────────────────────────────────────────────────────


def click_breakdown(state: GameState) -> list[BreakdownStep]:
    """Steps of the pre-variance click power computation."""
    bonuses = _collect_bonuses(state)
    ledger = _Ledger()
    ledger.base("Base click", BASE_CLICK_POWER)

    for label, amount in bonuses.click_additive:
        ledger.add(label, amount)
    theme = state.active_theme()
    if theme is not None:
        ledger.add(f"Theme: {theme.name or theme.id}", theme.bonus_click_power)

    for label, factor in bonuses.click_multipliers:
        ledger.multiply(label, factor)
    _apply_events(ledger, state, EventKind.CLICK)

    _apply_shared_tail(ledger, state)
    return ledger.steps


def production_breakdown(state: GameState) -> list[BreakdownStep]:
    """Steps of the creds-per-second computation."""
    bonuses = _collect_bonuses(state)
    ledger = _Ledger()

    owned = [g for g in state.generators if g.owned > 0]
    if not owned:
        ledger.base("Generators", 0.0)
    for g in owned:
        output = g.output
        for factor in bonuses.generator_multipliers.get(g.id, []):
            output *= factor
        ledger.base(f"{g.name or g.id} x{g.owned}", output)

    for label, factor in bonuses.global_multipliers:
        ledger.multiply(label, factor)
    _apply_events(ledger, state, EventKind.PRODUCTION)

    _apply_shared_tail(ledger, state)

    upkeep = total_upkeep(state)
    if upkeep > 0:
        ledger.subtract("Notoriety upkeep", upkeep)
    return ledger.steps


def compute_click_power(state: GameState) -> float:
    """Click power before variance and flooring."""
    return click_breakdown(state)[-1].total


def compute_creds_per_second(state: GameState) -> float:
    """Net creds per second, after upkeep. Can be negative."""
    return production_breakdown(state)[-1].total


def total_upkeep(state: GameState) -> float:
    return sum(g.total_upkeep for g in state.notoriety_generators)


def compute_notoriety_per_second(state: GameState, base_rate: float = 0.0) -> float:
    """Notoriety gained per second. Zero unless net cred production is positive."""
    if compute_creds_per_second(state) <= 0:
        return 0.0
    rate = base_rate + sum(g.output for g in state.notoriety_generators)
    for _label, factor in _collect_bonuses(state).notoriety_multipliers:
        rate *= factor
    return rate


def award_drop_rate(state: GameState, base_chance: float) -> float:
    """Chance that a single click drops an award."""
    return base_chance + _collect_bonuses(state).award_drop_rate


def click_yield(power: float, variance: float) -> int:
    """Creds paid by one click. Never less than 1 once power reaches 1."""
    value = math.floor(power * variance)
    if power >= 1:
        return max(1, value)
    return max(0, value)
