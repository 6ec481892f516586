from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

from clickfluencer._types import SlotId
from clickfluencer.cost_scaling import CostScaling

if TYPE_CHECKING:
    from clickfluencer.definition import GameDefinition

SAVE_VERSION = "v0.2.0 Early Access"
SAVE_SYSTEM_VERSION = 1


class EffectType(Enum):
    """What an upgrade modifies. Values are the persisted tags."""

    CLICK_ADDITIVE = "clickAdditive"
    CLICK_MULTIPLIER = "clickMultiplier"
    GENERATOR_MULTIPLIER = "generatorMultiplier"
    GLOBAL_MULTIPLIER = "globalMultiplier"
    AWARD_DROP_RATE = "awardDropRate"
    NOTORIETY_MULTIPLIER = "notorietyMultiplier"


class Currency(Enum):
    """What a price is paid in."""

    CREDS = "creds"
    NOTORIETY = "notoriety"


class EventKind(Enum):
    """What a random event multiplies. Values are the persisted tags."""

    PRODUCTION = "production"
    CLICK = "click"


class UpgradeKind(Enum):
    ONE_SHOT = auto()
    TIERED = auto()
    LEVELED = auto()


@dataclass(frozen=True)
class UpgradeEffect:
    """Tagged effect of an upgrade.

    ``tier_table`` replaces ``value`` for tiered upgrades: the bonus at tier N
    is ``tier_table[N]``, and tiers past the end of the table contribute 0.
    """

    type: EffectType
    value: float = 0.0
    target_generator_id: str | None = None
    tier_table: tuple[float, ...] = ()

    def tier_value(self, tier: int) -> float:
        if 0 <= tier < len(self.tier_table):
            return self.tier_table[tier]
        return 0.0


# ── Game entities ────────────────────────────────────────────────────


@dataclass
class Generator:
    """An automated producer of creds."""

    id: str
    name: str = ""
    base_cost: float = 0.0
    cost_scaling: float = 1.15
    base_yield_per_second: float = 0.0
    owned: int = 0
    unlocked: bool = False

    @property
    def next_cost(self) -> int:
        return CostScaling.exponential(self.cost_scaling).compute(self.base_cost, self.owned)

    @property
    def output(self) -> float:
        return self.owned * self.base_yield_per_second


@dataclass
class NotorietyGenerator:
    """Bought with creds; produces notoriety and drains creds every second."""

    id: str
    name: str = ""
    base_cost: float = 0.0
    cost_scaling: float = 1.15
    notoriety_per_second: float = 0.0
    upkeep: float = 0.0
    owned: int = 0
    unlocked: bool = False

    @property
    def next_cost(self) -> int:
        return CostScaling.exponential(self.cost_scaling).compute(self.base_cost, self.owned)

    @property
    def output(self) -> float:
        return self.owned * self.notoriety_per_second

    @property
    def total_upkeep(self) -> float:
        return self.owned * self.upkeep


@dataclass
class Upgrade:
    """A one-shot, tiered or leveled purchase that modifies yields.

    Tiered upgrades carry ``tier``/``max_tier``; leveled upgrades carry
    ``current_level``/``max_level`` (``None`` means no cap). Anything else is
    a one-shot upgrade tracked by ``purchased``. ``currency`` says whether
    ``cost`` is paid in creds or notoriety.
    """

    id: str
    name: str = ""
    description: str = ""
    effect: UpgradeEffect = field(
        default_factory=lambda: UpgradeEffect(EffectType.CLICK_ADDITIVE)
    )
    base_cost: float = 0.0
    cost: float | None = None
    cost_multiplier: float = 1.0
    purchased: bool = False
    tier: int | None = None
    max_tier: int | None = None
    current_level: int | None = None
    max_level: int | None = None
    permanent: bool = False
    currency: Currency = Currency.CREDS

    def __post_init__(self) -> None:
        if self.cost is None:
            self.cost = self.base_cost

    @property
    def kind(self) -> UpgradeKind:
        if self.tier is not None:
            return UpgradeKind.TIERED
        if self.current_level is not None:
            return UpgradeKind.LEVELED
        return UpgradeKind.ONE_SHOT

    @property
    def level(self) -> int:
        """Effective rank used when composing the upgrade's effect."""
        kind = self.kind
        if kind is UpgradeKind.TIERED:
            return self.tier or 0
        if kind is UpgradeKind.LEVELED:
            return self.current_level or 0
        return 1 if self.purchased else 0

    @property
    def is_maxed(self) -> bool:
        kind = self.kind
        if kind is UpgradeKind.TIERED:
            return self.max_tier is not None and self.level >= self.max_tier
        if kind is UpgradeKind.LEVELED:
            return self.max_level is not None and self.level >= self.max_level
        return self.purchased

    def cost_at(self, rank: int) -> int:
        return CostScaling.for_multiplier(self.cost_multiplier).compute(self.base_cost, rank)


@dataclass
class Theme:
    """Cosmetic unlock bought with awards; the active one feeds the composer."""

    id: str
    name: str = ""
    cost: float = 0.0
    bonus_multiplier: float = 1.0
    bonus_click_power: float = 0.0
    unlocked: bool = False
    active: bool = False


@dataclass
class Achievement:
    """One entry of a slot's unlock ledger."""

    id: str
    unlocked: bool = False
    unlocked_at: int | None = None


@dataclass
class ActiveEvent:
    """A random event in progress. It stops counting at ``ends_at``."""

    id: str
    name: str = ""
    kind: EventKind = EventKind.PRODUCTION
    multiplier: float = 1.0
    ends_at: int = 0


@dataclass
class Statistics:
    total_clicks: int = 0
    total_creds_earned: float = 0.0
    awards_earned: int = 0
    total_generators_purchased: int = 0
    total_upgrades_purchased: int = 0
    prestige_count: int = 0
    play_time: int = 0
    session_count: int = 0


@dataclass
class Settings:
    tutorial_completed: bool = False
    auto_save: bool = True
    offline_progress_enabled: bool = True


# ── Aggregate root ───────────────────────────────────────────────────


@dataclass
class GameState:
    """Everything one save slot knows about a game in progress.

    ``extra`` holds top-level keys from a loaded payload that this version
    does not understand. They are written back untouched.
    """

    creds: float = 0.0
    awards: int = 0
    prestige: int = 0
    notoriety: float = 0.0
    generators: list[Generator] = field(default_factory=list)
    notoriety_generators: list[NotorietyGenerator] = field(default_factory=list)
    upgrades: list[Upgrade] = field(default_factory=list)
    themes: list[Theme] = field(default_factory=list)
    achievements: list[Achievement] = field(default_factory=list)
    active_events: list[ActiveEvent] = field(default_factory=list)
    stats: Statistics = field(default_factory=Statistics)
    settings: Settings = field(default_factory=Settings)
    version: str = SAVE_VERSION
    last_save_time: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    def copy(self) -> GameState:
        return copy.deepcopy(self)

    def generator(self, id: str) -> Generator | None:
        for g in self.generators:
            if g.id == id:
                return g
        return None

    def notoriety_generator(self, id: str) -> NotorietyGenerator | None:
        for g in self.notoriety_generators:
            if g.id == id:
                return g
        return None

    def upgrade(self, id: str) -> Upgrade | None:
        for u in self.upgrades:
            if u.id == id:
                return u
        return None

    def balance(self, currency: Currency) -> float:
        if currency is Currency.NOTORIETY:
            return self.notoriety
        return self.creds

    def theme(self, id: str) -> Theme | None:
        for t in self.themes:
            if t.id == id:
                return t
        return None

    def achievement(self, id: str) -> Achievement | None:
        for a in self.achievements:
            if a.id == id:
                return a
        return None

    def active_theme(self) -> Theme | None:
        for t in self.themes:
            if t.active:
                return t
        return None

    def unlocked_achievement_ids(self) -> list[str]:
        return [a.id for a in self.achievements if a.unlocked]


def create_initial_state(
    definition: GameDefinition | None = None,
    now: int = 0,
) -> GameState:
    """Build the canonical zero-progress game for a definition."""
    if definition is None:
        from clickfluencer.catalogue import default_definition

        definition = default_definition()

    return GameState(
        generators=copy.deepcopy(definition.generators),
        notoriety_generators=copy.deepcopy(definition.notoriety_generators),
        upgrades=copy.deepcopy(definition.upgrades),
        themes=copy.deepcopy(definition.themes),
        achievements=[Achievement(a.id) for a in definition.achievements],
        last_save_time=now,
    )


# ── Save slots ───────────────────────────────────────────────────────


@dataclass
class SaveSlot:
    id: SlotId
    game: GameState
    created_at: int = 0
    updated_at: int = 0
    name: str = ""


@dataclass
class SaveSystemState:
    """All save slots plus the pointer to the one being played."""

    active_slot: SlotId = 1
    slots: dict[SlotId, SaveSlot] = field(default_factory=dict)
    version: int = SAVE_SYSTEM_VERSION

    def copy(self) -> SaveSystemState:
        return copy.deepcopy(self)

    def active(self) -> SaveSlot | None:
        return self.slots.get(self.active_slot)
