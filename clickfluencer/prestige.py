"""Prestige pricing and the reset boundary."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from clickfluencer.results import ActionResult, Outcome
from clickfluencer.state import create_initial_state

if TYPE_CHECKING:
    from clickfluencer.definition import GameDefinition
    from clickfluencer.state import GameState, Generator, Upgrade

PRESTIGE_BASE_COST = 1e7
PRESTIGE_EXPONENT = 0.4
PRESTIGE_BONUS_PER_POINT = 0.1

# Every GameState field belongs to exactly one of these groups.
PRESTIGE_RESET_FIELDS = ("creds", "generators", "upgrades")
PRESTIGE_ADVANCED_FIELDS = ("prestige",)
PRESTIGE_PRESERVED_FIELDS = (
    "awards",
    "notoriety",
    "notoriety_generators",
    "themes",
    "achievements",
    "active_events",
    "stats",
    "settings",
    "version",
    "last_save_time",
    "extra",
)


def prestige_cost(prestige: int) -> float:
    """Creds required for the next prestige: base * (P + 1)^(1 / exponent)."""
    return PRESTIGE_BASE_COST * (prestige + 1) ** (1 / PRESTIGE_EXPONENT)


def prestige_multiplier(prestige: int) -> float:
    return 1 + prestige * PRESTIGE_BONUS_PER_POINT


def can_prestige(state: GameState) -> bool:
    return state.creds >= prestige_cost(state.prestige)


def estimate_time_to_prestige(state: GameState, creds_per_second: float) -> float | None:
    """Seconds until the next prestige is affordable, or None if never."""
    missing = prestige_cost(state.prestige) - state.creds
    if missing <= 0:
        return 0.0
    if creds_per_second <= 0:
        return None
    return missing / creds_per_second


def _carry_upgrades(old: list[Upgrade], factory: list[Upgrade]) -> list[Upgrade]:
    kept = {u.id: u for u in old if u.permanent}
    result = [copy.deepcopy(kept.pop(u.id, u)) for u in factory]
    # permanent upgrades unknown to this definition stay as inert entries
    result.extend(copy.deepcopy(u) for u in kept.values())
    return result


def _reset_generators(old: GameState, factory: GameState) -> list[Generator]:
    # owned counts go back to zero; a revealed generator stays revealed
    generators = factory.generators
    for g in generators:
        before = old.generator(g.id)
        if before is not None and before.unlocked:
            g.unlocked = True
    return generators


def apply_prestige(state: GameState, definition: GameDefinition) -> ActionResult:
    """Reset the run for one prestige point."""
    cost = prestige_cost(state.prestige)
    if state.creds < cost:
        return ActionResult(
            state=state,
            outcome=Outcome.INSUFFICIENT_FUNDS,
            message=f"Prestige needs {cost:.0f} creds",
        )

    factory = create_initial_state(definition)
    new = state.copy()
    new.creds = factory.creds
    new.generators = _reset_generators(state, factory)
    new.upgrades = _carry_upgrades(state.upgrades, factory.upgrades)
    new.prestige += 1
    new.stats.prestige_count += 1
    return ActionResult(state=new, message=f"Prestiged to level {new.prestige}")
