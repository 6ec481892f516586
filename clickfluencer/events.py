"""Random timed events: short-lived multipliers rolled during live play."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from clickfluencer.state import ActiveEvent, EventKind

if TYPE_CHECKING:
    import random

    from clickfluencer.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RandomEventDef:
    """Static description of an event that can be rolled.

    ``weight`` is relative to the other events; zero or less never rolls.
    """

    id: str
    name: str = ""
    description: str = ""
    kind: EventKind = EventKind.PRODUCTION
    multiplier: float = 1.0
    duration_ms: int = 0
    weight: float = 1.0


def pick_event(events: Sequence[RandomEventDef], rng: random.Random) -> RandomEventDef | None:
    """Weighted choice among ``events``. None when nothing can roll."""
    candidates = [e for e in events if e.weight > 0]
    if not candidates:
        return None
    remaining = rng.random() * sum(e.weight for e in candidates)
    for event in candidates:
        remaining -= event.weight
        if remaining < 0:
            return event
    return candidates[-1]


def start_event(state: GameState, event: RandomEventDef, now: int) -> None:
    """Append ``event`` to the active list. Mutates ``state``."""
    state.active_events.append(
        ActiveEvent(
            id=event.id,
            name=event.name,
            kind=event.kind,
            multiplier=event.multiplier,
            ends_at=now + event.duration_ms,
        )
    )
    logger.info("Event started: %s until %d", event.id, now + event.duration_ms)


def expire_events(state: GameState, now: int) -> list[str]:
    """Drop events whose time is up. Mutates ``state``; returns the dropped ids."""
    expired = [e.id for e in state.active_events if e.ends_at <= now]
    if expired:
        state.active_events = [e for e in state.active_events if e.ends_at > now]
        logger.debug("Events ended: %s", ", ".join(expired))
    return expired
