"""Achievement definitions, conditions and the unlock scan."""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable

from clickfluencer._types import DAY_MS, Clock, compare, now_ms
from clickfluencer.composer import compute_click_power
from clickfluencer.results import Outcome
from clickfluencer.state import Achievement

if TYPE_CHECKING:
    from clickfluencer.state import GameState

logger = logging.getLogger(__name__)

WELCOME_BACK_ID = "welcome_back"


@dataclass(frozen=True)
class AchievementDef:
    """Static description of an achievement."""

    id: str
    name: str = ""
    description: str = ""
    category: str = "progression"
    condition_key: str = ""
    condition_value: float | None = None
    hidden: bool = False
    tier: int | None = None


class Condition(ABC):
    """Maps a derived value of the game state onto an unlock decision."""

    manual = False

    @abstractmethod
    def evaluate(self, state: GameState, target: float | None) -> bool: ...

    @abstractmethod
    def progress(self, state: GameState, target: float | None) -> float: ...


# ── Private implementations ──────────────────────────────────────────


class _ThresholdCondition(Condition):
    def __init__(self, metric: Callable[[GameState], float], op: str = ">=") -> None:
        self.metric = metric
        self.op = op

    def evaluate(self, state: GameState, target: float | None) -> bool:
        if target is None:
            return False
        return compare(self.metric(state), self.op, target)

    def progress(self, state: GameState, target: float | None) -> float:
        if target is None:
            return 0.0
        if self.evaluate(state, target):
            return 1.0
        if self.op != ">=" or target <= 0:
            return 0.0
        return max(0.0, min(1.0, self.metric(state) / target))


class _CompletenessCondition(Condition):
    def __init__(self, flags: Callable[[GameState], list[bool]]) -> None:
        self.flags = flags

    def evaluate(self, state: GameState, target: float | None) -> bool:
        values = self.flags(state)
        return bool(values) and all(values)

    def progress(self, state: GameState, target: float | None) -> float:
        values = self.flags(state)
        if not values:
            return 0.0
        return sum(values) / len(values)


class _ManualCondition(Condition):
    """Never satisfied by a scan; unlocked through an explicit call."""

    manual = True

    def evaluate(self, state: GameState, target: float | None) -> bool:
        return False

    def progress(self, state: GameState, target: float | None) -> float:
        return 0.0


CONDITIONS: dict[str, Condition] = {
    "totalClicks": _ThresholdCondition(lambda s: s.stats.total_clicks),
    "clickPower": _ThresholdCondition(compute_click_power),
    "totalCredsEarned": _ThresholdCondition(lambda s: s.stats.total_creds_earned),
    "awardsEarned": _ThresholdCondition(lambda s: s.stats.awards_earned),
    "prestigeCurrency": _ThresholdCondition(lambda s: s.prestige),
    "notoriety": _ThresholdCondition(lambda s: s.notoriety),
    "totalGeneratorsPurchased": _ThresholdCondition(
        lambda s: s.stats.total_generators_purchased
    ),
    "totalUpgradesPurchased": _ThresholdCondition(
        lambda s: s.stats.total_upgrades_purchased
    ),
    "prestigeCount": _ThresholdCondition(lambda s: s.stats.prestige_count),
    "prestigeExact": _ThresholdCondition(lambda s: s.prestige, "=="),
    "themesUnlocked": _ThresholdCondition(lambda s: sum(t.unlocked for t in s.themes)),
    "playTime": _ThresholdCondition(lambda s: s.stats.play_time),
    "sessionCount": _ThresholdCondition(lambda s: s.stats.session_count),
    "allGeneratorsUnlocked": _CompletenessCondition(
        lambda s: [g.unlocked for g in s.generators]
    ),
    "allThemesUnlocked": _CompletenessCondition(lambda s: [t.unlocked for t in s.themes]),
    "returnAfter24h": _ManualCondition(),
}


# ── Evaluator ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AchievementCheck:
    """Result of a scan. ``updated_achievements`` is the full ledger to commit."""

    newly_unlocked: tuple[str, ...] = ()
    updated_achievements: tuple[Achievement, ...] = ()
    unknown_conditions: tuple[str, ...] = ()

    @property
    def outcome(self) -> Outcome:
        if self.unknown_conditions:
            return Outcome.UNKNOWN_CONDITION
        return Outcome.OK


class AchievementEvaluator:
    """Re-derives the unlock ledger of a game state."""

    def __init__(
        self,
        definitions: Iterable[AchievementDef] = (),
        clock: Clock | None = None,
        welcome_back_ms: int = DAY_MS,
    ) -> None:
        self._definitions = {d.id: d for d in definitions}
        self._clock = clock or now_ms
        self.welcome_back_ms = welcome_back_ms
        self._reported_unknown: set[str] = set()

    def get_definition(self, id: str) -> AchievementDef | None:
        return self._definitions.get(id)

    def _ledger(self, state: GameState) -> list[Achievement]:
        ledger = list(state.achievements)
        known = {a.id for a in ledger}
        # definitions added after this save was written start locked
        ledger.extend(Achievement(id) for id in self._definitions if id not in known)
        return ledger

    def check(self, state: GameState) -> AchievementCheck:
        """Scan locked achievements against ``state`` without modifying it."""
        now = self._clock()
        newly: list[str] = []
        unknown: list[str] = []
        ledger: list[Achievement] = []

        for entry in self._ledger(state):
            definition = self._definitions.get(entry.id)
            if entry.unlocked or definition is None:
                ledger.append(entry)
                continue
            condition = CONDITIONS.get(definition.condition_key)
            if condition is None:
                self._report_unknown(definition)
                if definition.condition_key not in unknown:
                    unknown.append(definition.condition_key)
                ledger.append(entry)
                continue
            if condition.evaluate(state, definition.condition_value):
                ledger.append(Achievement(entry.id, unlocked=True, unlocked_at=now))
                newly.append(entry.id)
            else:
                ledger.append(entry)

        return AchievementCheck(tuple(newly), tuple(ledger), tuple(unknown))

    def commit(self, state: GameState, check: AchievementCheck) -> GameState:
        """Return a copy of ``state`` carrying the ledger from ``check``."""
        if not check.newly_unlocked and len(check.updated_achievements) == len(
            state.achievements
        ):
            return state
        new = state.copy()
        new.achievements = copy.deepcopy(list(check.updated_achievements))
        for id in check.newly_unlocked:
            logger.info("Achievement unlocked: %s", id)
        return new

    def apply(self, state: GameState) -> tuple[GameState, AchievementCheck]:
        check = self.check(state)
        return self.commit(state, check), check

    def unlock(self, state: GameState, id: str) -> AchievementCheck:
        """Explicitly unlock one achievement, bypassing its condition."""
        ledger = self._ledger(state)
        target = next((a for a in ledger if a.id == id), None)
        if target is None or target.unlocked:
            return AchievementCheck(updated_achievements=tuple(ledger))
        now = self._clock()
        updated = tuple(
            Achievement(a.id, unlocked=True, unlocked_at=now) if a.id == id else a
            for a in ledger
        )
        return AchievementCheck(newly_unlocked=(id,), updated_achievements=updated)

    def check_welcome_back(self, last_seen: int, now: int) -> bool:
        """True when the player was away for at least the welcome-back gap."""
        return now - last_seen >= self.welcome_back_ms

    def progress(self, state: GameState, id: str) -> float:
        """Fraction in [0, 1] of the way to unlocking ``id``."""
        entry = state.achievement(id)
        if entry is not None and entry.unlocked:
            return 1.0
        definition = self._definitions.get(id)
        if definition is None:
            return 0.0
        condition = CONDITIONS.get(definition.condition_key)
        if condition is None:
            return 0.0
        return condition.progress(state, definition.condition_value)

    def _report_unknown(self, definition: AchievementDef) -> None:
        if definition.condition_key in self._reported_unknown:
            return
        self._reported_unknown.add(definition.condition_key)
        logger.warning(
            "Skipping achievement %r: unknown condition %r",
            definition.id,
            definition.condition_key,
        )
