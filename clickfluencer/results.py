from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from clickfluencer.state import GameState


class Outcome(Enum):
    """Why an operation did or did not change anything."""

    OK = auto()
    INSUFFICIENT_FUNDS = auto()
    INVALID_TARGET = auto()
    THROTTLED = auto()
    INVALID_FORMAT = auto()
    SLOT_EMPTY = auto()
    UNKNOWN_CONDITION = auto()


class InvalidSaveFormat(ValueError):
    """A save payload failed validation. Nothing from it was applied."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__(
            "Invalid save payload:\n" + "\n".join(f"  - {p}" for p in problems)
        )


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an engine operation. On failure ``state`` is the input state."""

    state: GameState
    outcome: Outcome = Outcome.OK
    message: str = ""

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.OK


@dataclass(frozen=True)
class ClickResult(ActionResult):
    creds_gained: int = 0
    award_dropped: bool = False
    variance: float = 1.0


@dataclass(frozen=True)
class OfflineProgress:
    """What an offline catch-up did."""

    state: GameState
    time_away: int = 0
    time_processed: int = 0
    creds_gained: float = 0.0
    was_capped: bool = False

    @property
    def applied(self) -> bool:
        return self.time_processed > 0
