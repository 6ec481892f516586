"""Tests for state module."""
from clickfluencer.catalogue import default_definition
from clickfluencer.state import (
    SAVE_VERSION,
    EffectType,
    GameState,
    Generator,
    SaveSlot,
    SaveSystemState,
    Upgrade,
    UpgradeEffect,
    UpgradeKind,
    create_initial_state,
)


class TestGenerator:
    def test_next_cost_grows_and_floors(self):
        g = Generator("photo", base_cost=10, cost_scaling=1.15)
        assert g.next_cost == 10
        g.owned = 1
        assert g.next_cost == 11
        g.owned = 2
        assert g.next_cost == 13

    def test_output(self):
        g = Generator("video", base_yield_per_second=1.5, owned=4)
        assert g.output == 6.0


class TestUpgradeKind:
    def test_one_shot(self):
        u = Upgrade("u", base_cost=100)
        assert u.kind is UpgradeKind.ONE_SHOT
        assert u.cost == 100
        assert u.level == 0
        assert not u.is_maxed
        u.purchased = True
        assert u.level == 1
        assert u.is_maxed

    def test_tiered(self):
        u = Upgrade("camera", base_cost=500, cost_multiplier=3, tier=0, max_tier=2)
        assert u.kind is UpgradeKind.TIERED
        assert u.cost_at(1) == 1500
        u.tier = 2
        assert u.level == 2
        assert u.is_maxed

    def test_leveled_without_cap(self):
        u = Upgrade("ai", base_cost=1_000_000, cost_multiplier=1.35, current_level=0)
        assert u.kind is UpgradeKind.LEVELED
        u.current_level = 500
        assert not u.is_maxed

    def test_leveled_with_cap(self):
        u = Upgrade("ai", current_level=3, max_level=3)
        assert u.is_maxed


def test_tier_value_past_table_is_zero():
    effect = UpgradeEffect(EffectType.CLICK_ADDITIVE, tier_table=(0, 1, 2))
    assert effect.tier_value(2) == 2
    assert effect.tier_value(3) == 0.0
    assert effect.tier_value(-1) == 0.0


class TestInitialState:
    def test_factory_values(self):
        state = create_initial_state(now=42)
        assert state.creds == 0
        assert state.awards == 0
        assert state.prestige == 0
        assert state.version == SAVE_VERSION
        assert state.last_save_time == 42
        assert state.active_theme().id == "dark"
        assert state.unlocked_achievement_ids() == []

    def test_ledger_covers_definitions(self):
        defn = default_definition()
        state = create_initial_state(defn)
        assert [a.id for a in state.achievements] == [a.id for a in defn.achievements]

    def test_only_first_generator_unlocked(self):
        state = create_initial_state()
        assert [g.id for g in state.generators if g.unlocked] == ["photo"]

    def test_does_not_share_definition_objects(self):
        defn = default_definition()
        state = create_initial_state(defn)
        state.generators[0].owned = 5
        assert defn.generators[0].owned == 0


def test_copy_is_deep():
    state = create_initial_state()
    clone = state.copy()
    clone.generators[0].owned = 3
    clone.stats.total_clicks = 10
    assert state.generators[0].owned == 0
    assert state.stats.total_clicks == 0


def test_lookups():
    state = create_initial_state()
    assert state.generator("video").name == "Video Content"
    assert state.upgrade("better_camera").kind is UpgradeKind.TIERED
    assert state.theme("gold").cost == 50
    assert state.achievement("first_click") is not None
    assert state.generator("missing") is None


def test_save_system_active():
    game = GameState()
    system = SaveSystemState(active_slot=2, slots={2: SaveSlot(2, game)})
    assert system.active().game is game
    system.active_slot = 3
    assert system.active() is None
