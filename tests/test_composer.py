"""Tests for composer module."""
import pytest

from clickfluencer.composer import (
    award_drop_rate,
    click_breakdown,
    click_yield,
    compute_click_power,
    compute_creds_per_second,
    compute_notoriety_per_second,
    production_breakdown,
    total_upkeep,
)
from clickfluencer.state import (
    EffectType,
    GameState,
    Generator,
    NotorietyGenerator,
    Theme,
    Upgrade,
    UpgradeEffect,
    create_initial_state,
)


def _one_shot(id: str, etype: EffectType, value: float, target: str | None = None) -> Upgrade:
    return Upgrade(id, effect=UpgradeEffect(etype, value, target), purchased=True)


def _make_click_state() -> GameState:
    """Two additive bonuses, a leveled multiplier, prestige 1 and a x1.2 theme."""
    return GameState(
        prestige=1,
        upgrades=[
            _one_shot("plus_two", EffectType.CLICK_ADDITIVE, 2),
            _one_shot("plus_three", EffectType.CLICK_ADDITIVE, 3),
            Upgrade(
                "boost",
                effect=UpgradeEffect(EffectType.CLICK_MULTIPLIER, 1.1),
                current_level=2,
            ),
        ],
        themes=[Theme("shiny", bonus_multiplier=1.2, unlocked=True, active=True)],
    )


class TestClickPower:
    def test_fresh_game_is_one(self):
        assert compute_click_power(create_initial_state()) == 1.0

    def test_fixed_nesting_order(self):
        state = _make_click_state()
        expected = ((1 + 2 + 3) * 1.1 ** 2) * 1.1 * 1.2
        assert compute_click_power(state) == pytest.approx(expected)

    def test_breakdown_labels_in_order(self):
        steps = click_breakdown(_make_click_state())
        assert [s.kind for s in steps] == [
            "base", "additive", "additive", "multiplier", "multiplier", "multiplier",
        ]
        assert steps[0].label == "Base click"
        assert steps[4].label == "Prestige x1"

    def test_contributions_sum_to_total(self):
        steps = click_breakdown(_make_click_state())
        assert sum(s.contribution for s in steps) == pytest.approx(steps[-1].total)

    def test_unbought_upgrades_do_not_count(self):
        state = GameState(
            upgrades=[Upgrade("x", effect=UpgradeEffect(EffectType.CLICK_ADDITIVE, 5))]
        )
        assert compute_click_power(state) == 1.0

    def test_tier_table_replaces_value(self):
        state = GameState(
            upgrades=[
                Upgrade(
                    "camera",
                    effect=UpgradeEffect(
                        EffectType.CLICK_ADDITIVE, 1, tier_table=(0, 1, 2, 3, 5)
                    ),
                    tier=4,
                    max_tier=4,
                )
            ]
        )
        assert compute_click_power(state) == 6.0

    def test_theme_click_bonus_is_additive(self):
        state = GameState(
            themes=[Theme("t", bonus_click_power=4, unlocked=True, active=True)],
            prestige=2,
        )
        assert compute_click_power(state) == pytest.approx(5 * 1.2)

    def test_inactive_theme_ignored(self):
        state = GameState(themes=[Theme("t", bonus_multiplier=3, unlocked=True)])
        assert compute_click_power(state) == 1.0


class TestProduction:
    def test_no_generators(self):
        steps = production_breakdown(GameState())
        assert len(steps) == 2  # empty base + prestige
        assert compute_creds_per_second(GameState()) == 0.0

    def test_targeted_and_global_multipliers(self):
        state = GameState(
            generators=[
                Generator("photo", base_yield_per_second=0.1, owned=10),
                Generator("video", base_yield_per_second=1.0, owned=2),
            ],
            upgrades=[
                _one_shot("editing", EffectType.GENERATOR_MULTIPLIER, 2, "photo"),
                _one_shot("viral", EffectType.GLOBAL_MULTIPLIER, 1.5),
            ],
        )
        # photo 1.0 x2, video 2.0, then x1.5
        assert compute_creds_per_second(state) == pytest.approx(6.0)

    def test_prestige_and_theme_apply_to_production(self):
        state = GameState(
            prestige=3,
            generators=[Generator("photo", base_yield_per_second=1, owned=10)],
            themes=[Theme("gold", bonus_multiplier=1.25, unlocked=True, active=True)],
        )
        assert compute_creds_per_second(state) == pytest.approx(10 * 1.3 * 1.25)

    def test_breakdown_one_step_per_owned_generator(self):
        state = GameState(
            generators=[
                Generator("a", name="A", base_yield_per_second=1, owned=1),
                Generator("b", name="B", base_yield_per_second=1, owned=0),
            ]
        )
        labels = [s.label for s in production_breakdown(state)]
        assert labels[0] == "A x1"
        assert not any(label.startswith("B") for label in labels)


class TestUpkeep:
    def _state(self, photos: int, managers: int, **kwargs) -> GameState:
        return GameState(
            generators=[Generator("photo", base_yield_per_second=1, owned=photos)],
            notoriety_generators=[
                NotorietyGenerator("smm", notoriety_per_second=0.1, upkeep=5, owned=managers)
            ],
            **kwargs,
        )

    def test_upkeep_is_the_last_step(self):
        state = self._state(20, 2, prestige=1)
        steps = production_breakdown(state)
        assert steps[-1].kind == "upkeep"
        assert steps[-1].contribution == -10
        # prestige applies before upkeep is paid
        assert compute_creds_per_second(state) == pytest.approx(20 * 1.1 - 10)
        assert total_upkeep(state) == 10

    def test_no_upkeep_step_without_hires(self):
        steps = production_breakdown(self._state(20, 0))
        assert all(s.kind != "upkeep" for s in steps)

    def test_net_can_go_negative(self):
        assert compute_creds_per_second(self._state(2, 1)) == pytest.approx(-3)

    def test_notoriety_rate(self):
        assert compute_notoriety_per_second(self._state(20, 2), 0.0007) == pytest.approx(0.2007)

    def test_notoriety_stops_without_net_production(self):
        assert compute_notoriety_per_second(self._state(5, 1), 0.0007) == 0.0

    def test_notoriety_multiplier_compounds_per_level(self):
        boost = Upgrade(
            "nb", effect=UpgradeEffect(EffectType.NOTORIETY_MULTIPLIER, 1.01), current_level=3
        )
        state = self._state(20, 2, upgrades=[boost])
        assert compute_notoriety_per_second(state) == pytest.approx(0.2 * 1.01 ** 3)
        # notoriety boosts leave creds alone
        assert compute_creds_per_second(state) == pytest.approx(10)


def test_award_drop_rate_adds_tier_bonus():
    state = GameState(
        upgrades=[
            Upgrade(
                "lucky",
                effect=UpgradeEffect(
                    EffectType.AWARD_DROP_RATE, 0.003, tier_table=(0, 0.003, 0.006)
                ),
                tier=2,
            )
        ]
    )
    assert award_drop_rate(state, 0.003) == pytest.approx(0.009)


def test_unhandled_effect_type_raises():
    state = GameState(
        upgrades=[Upgrade("odd", effect=UpgradeEffect("bogus", 2), purchased=True)]
    )
    with pytest.raises(ValueError, match="Unhandled effect type"):
        compute_click_power(state)


class TestClickYield:
    def test_floors(self):
        assert click_yield(10, 1.05) == 10

    def test_minimum_one_once_power_reaches_one(self):
        assert click_yield(1, 0.95) == 1

    def test_below_one_power_can_pay_nothing(self):
        assert click_yield(0.5, 1.0) == 0
