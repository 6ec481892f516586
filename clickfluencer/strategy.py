from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from clickfluencer.prestige import can_prestige
from clickfluencer.state import Currency

if TYPE_CHECKING:
    from clickfluencer.state import GameState


@dataclass(frozen=True)
class PurchaseOption:
    kind: str  # "generator" | "notoriety_generator" | "upgrade"
    id: str
    cost: float
    affordable: bool
    currency: Currency = Currency.CREDS


def purchase_options(state: GameState) -> list[PurchaseOption]:
    """Everything the player could buy at some price."""
    options: list[PurchaseOption] = []
    for g in state.generators:
        if g.unlocked:
            cost = g.next_cost
            options.append(PurchaseOption("generator", g.id, cost, state.creds >= cost))
    for g in state.notoriety_generators:
        if g.unlocked:
            cost = g.next_cost
            options.append(
                PurchaseOption("notoriety_generator", g.id, cost, state.creds >= cost)
            )
    for u in state.upgrades:
        if not u.is_maxed:
            affordable = state.balance(u.currency) >= u.cost
            options.append(PurchaseOption("upgrade", u.id, u.cost, affordable, u.currency))
    return options


class Strategy(ABC):
    """Base class for simulation purchase policies."""

    prestige_mode = "never"

    @abstractmethod
    def decide_purchases(
        self, state: GameState, options: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        """Return options to buy, in order."""
        ...

    def should_prestige(self, state: GameState) -> bool:
        """Whether to prestige now."""
        return self.prestige_mode == "first_opportunity" and can_prestige(state)

    @abstractmethod
    def describe(self) -> str: ...


class GreedyCheapest(Strategy):
    """Buy the cheapest affordable option first."""

    def __init__(self, prestige_mode: str = "never") -> None:
        self.prestige_mode = prestige_mode  # "never" or "first_opportunity"

    def decide_purchases(
        self, state: GameState, options: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        affordable = [o for o in options if o.affordable]
        return sorted(affordable, key=lambda o: o.cost)

    def describe(self) -> str:
        return "GreedyCheapest"


class PriorityList(Strategy):
    """Buy options in a fixed order of ids, skipping what is unaffordable."""

    def __init__(self, priority: list[str], prestige_mode: str = "never") -> None:
        self.priority = priority
        self.prestige_mode = prestige_mode

    def decide_purchases(
        self, state: GameState, options: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        by_id = {o.id: o for o in options if o.affordable}
        return [by_id[id] for id in self.priority if id in by_id]

    def describe(self) -> str:
        return f"PriorityList({', '.join(self.priority)})"


class Idle(Strategy):
    """Never buys anything; measures raw click income."""

    def decide_purchases(
        self, state: GameState, options: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        return []

    def describe(self) -> str:
        return "Idle"
