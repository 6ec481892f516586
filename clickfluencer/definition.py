from __future__ import annotations

import warnings
from dataclasses import dataclass, field

from clickfluencer._types import DAY_MS, HOUR_MS, MINUTE_MS
from clickfluencer.achievements import CONDITIONS, AchievementDef
from clickfluencer.events import RandomEventDef
from clickfluencer.state import (
    EffectType,
    Generator,
    NotorietyGenerator,
    Theme,
    Upgrade,
    UpgradeKind,
)


@dataclass
class EngineConfig:
    """Tunable rules of the progression engine."""

    name: str = "Clickfluencer"
    click_throttle_ms: int = 50
    click_variance: float = 0.05
    award_drop_chance: float = 0.003
    notoriety_per_second: float = 0.0007
    # notoriety generators show up once creds reach this share of their price
    notoriety_unlock_fraction: float = 0.5
    min_net_creds_per_second: float = 1.0
    offline_min_ms: int = MINUTE_MS
    offline_cap_ms: int = 8 * HOUR_MS
    offline_chunk_ms: int = HOUR_MS
    welcome_back_ms: int = DAY_MS
    # random events get one roll per check interval of live play
    event_check_ms: int = 30_000
    event_chance: float = 0.05
    max_active_events: int = 3


@dataclass
class GameDefinition:
    """Immutable content tables plus the engine configuration."""

    config: EngineConfig = field(default_factory=EngineConfig)
    generators: list[Generator] = field(default_factory=list)
    upgrades: list[Upgrade] = field(default_factory=list)
    themes: list[Theme] = field(default_factory=list)
    achievements: list[AchievementDef] = field(default_factory=list)
    notoriety_generators: list[NotorietyGenerator] = field(default_factory=list)
    events: list[RandomEventDef] = field(default_factory=list)

    # Lookup dicts built in __post_init__
    _generators_by_id: dict[str, Generator] = field(
        default_factory=dict, init=False, repr=False
    )
    _notoriety_generators_by_id: dict[str, NotorietyGenerator] = field(
        default_factory=dict, init=False, repr=False
    )
    _upgrades_by_id: dict[str, Upgrade] = field(
        default_factory=dict, init=False, repr=False
    )
    _themes_by_id: dict[str, Theme] = field(
        default_factory=dict, init=False, repr=False
    )
    _achievements_by_id: dict[str, AchievementDef] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._generators_by_id = {g.id: g for g in self.generators}
        self._notoriety_generators_by_id = {g.id: g for g in self.notoriety_generators}
        self._upgrades_by_id = {u.id: u for u in self.upgrades}
        self._themes_by_id = {t.id: t for t in self.themes}
        self._achievements_by_id = {a.id: a for a in self.achievements}

    def get_generator(self, id: str) -> Generator | None:
        return self._generators_by_id.get(id)

    def get_notoriety_generator(self, id: str) -> NotorietyGenerator | None:
        return self._notoriety_generators_by_id.get(id)

    def get_upgrade(self, id: str) -> Upgrade | None:
        return self._upgrades_by_id.get(id)

    def get_theme(self, id: str) -> Theme | None:
        return self._themes_by_id.get(id)

    def get_achievement(self, id: str) -> AchievementDef | None:
        return self._achievements_by_id.get(id)

    def validate(self) -> list[str]:
        """Check for common definition errors. Returns list of error messages."""
        errors: list[str] = []
        generator_ids = {g.id for g in self.generators}

        for label, items in (
            ("generator", self.generators),
            ("notoriety generator", self.notoriety_generators),
            ("upgrade", self.upgrades),
            ("theme", self.themes),
            ("achievement", self.achievements),
            ("event", self.events),
        ):
            seen: set[str] = set()
            for item in items:
                if item.id in seen:
                    errors.append(f"Duplicate {label} ID: {item.id!r}")
                seen.add(item.id)

        for g in self.generators:
            if g.base_cost < 0 or g.cost_scaling <= 0:
                errors.append(f"Generator {g.id!r} has an invalid cost curve")
        for g in self.notoriety_generators:
            if g.base_cost < 0 or g.cost_scaling <= 0:
                errors.append(f"Notoriety generator {g.id!r} has an invalid cost curve")
            if g.upkeep < 0 or g.notoriety_per_second < 0:
                errors.append(f"Notoriety generator {g.id!r} has a negative rate")

        for u in self.upgrades:
            if u.effect.type is EffectType.GENERATOR_MULTIPLIER:
                if u.effect.target_generator_id not in generator_ids:
                    errors.append(
                        f"Upgrade {u.id!r} targets unknown generator "
                        f"{u.effect.target_generator_id!r}"
                    )
            if u.kind is UpgradeKind.TIERED and not u.effect.tier_table:
                if u.effect.type in (EffectType.CLICK_ADDITIVE, EffectType.AWARD_DROP_RATE):
                    errors.append(f"Tiered upgrade {u.id!r} has no tier table")

        for e in self.events:
            if e.multiplier <= 0 or e.duration_ms <= 0:
                errors.append(f"Event {e.id!r} needs a positive multiplier and duration")
        if self.events and self.config.event_check_ms <= 0:
            errors.append("event_check_ms must be positive")

        active = [t.id for t in self.themes if t.active]
        if len(active) > 1:
            errors.append(f"More than one theme active by default: {active}")
        for t in self.themes:
            if t.active and not t.unlocked:
                errors.append(f"Theme {t.id!r} is active but not unlocked")

        # Unknown condition keys stay loadable; the evaluator skips them.
        for a in self.achievements:
            if a.condition_key not in CONDITIONS:
                warnings.warn(
                    f"Achievement {a.id!r} uses unknown condition "
                    f"{a.condition_key!r} and can never unlock.",
                    stacklevel=2,
                )

        return errors
