"""Shipped content tables for Clickfluencer."""

from __future__ import annotations

from clickfluencer._types import HOUR_MS
from clickfluencer.achievements import AchievementDef
from clickfluencer.definition import EngineConfig, GameDefinition
from clickfluencer.events import RandomEventDef
from clickfluencer.state import (
    Currency,
    EffectType,
    EventKind,
    Generator,
    NotorietyGenerator,
    Theme,
    Upgrade,
    UpgradeEffect,
)

CLICK_TIER_TABLE = (0, 1, 2, 3, 5, 8, 15, 25)
AWARD_TIER_TABLE = (0, 0.003, 0.006, 0.009, 0.012)


def _generators() -> list[Generator]:
    return [
        Generator("photo", "Photo Post", 10, 1.15, 0.1, unlocked=True),
        Generator("video", "Video Content", 100, 1.14, 1.0),
        Generator("stream", "Live Stream", 1100, 1.13, 8.0),
        Generator("collab", "Collaboration", 12_000, 1.12, 47.0),
        Generator("brand", "Brand Deal", 130_000, 1.11, 260.0),
        Generator("agency", "Talent Agency", 1_400_000, 1.10, 1400.0),
    ]


def _notoriety_generators() -> list[NotorietyGenerator]:
    # price in creds, price growth, notoriety/s, upkeep in creds/s
    return [
        NotorietyGenerator("smm", "Social Media Manager", 50_000, 1.15, 0.1, 5, unlocked=True),
        NotorietyGenerator("pr_team", "PR Team", 500_000, 1.14, 1.0, 50),
        NotorietyGenerator("key_client", "Key Client", 5_000_000, 1.13, 8.0, 400),
        NotorietyGenerator("celebrity_sponsor", "Celebrity Sponsor", 50_000_000, 1.12, 50.0, 3000),
    ]


def _upgrades() -> list[Upgrade]:
    return [
        Upgrade(
            "better_camera",
            "Better Camera",
            "Adds to base click power per tier (+1, +2, +3, +5, +8, +15, +25)",
            UpgradeEffect(EffectType.CLICK_ADDITIVE, 1, tier_table=CLICK_TIER_TABLE),
            base_cost=500,
            cost_multiplier=3,
            tier=0,
            max_tier=7,
        ),
        Upgrade(
            "editing_software",
            "Editing Software",
            "Photo Posts produce 2x creds",
            UpgradeEffect(EffectType.GENERATOR_MULTIPLIER, 2, target_generator_id="photo"),
            base_cost=2500,
        ),
        Upgrade(
            "viral_strategy",
            "Viral Strategy",
            "All production increased by 50%",
            UpgradeEffect(EffectType.GLOBAL_MULTIPLIER, 1.5),
            base_cost=50_000,
        ),
        Upgrade(
            "ai_enhancements",
            "AI Enhancements",
            "+5% to click power per level",
            UpgradeEffect(EffectType.CLICK_MULTIPLIER, 1.05),
            base_cost=1_000_000,
            cost_multiplier=1.35,
            current_level=0,
            permanent=True,
        ),
        Upgrade(
            "lucky_charm",
            "Lucky Charm",
            "Increases award drop rate per tier (+0.3% each)",
            UpgradeEffect(EffectType.AWARD_DROP_RATE, 0.003, tier_table=AWARD_TIER_TABLE),
            base_cost=1000,
            cost_multiplier=15,
            tier=0,
            max_tier=4,
        ),
        Upgrade(
            "better_filters",
            "Better Filters",
            "+1% to base click power per level",
            UpgradeEffect(EffectType.CLICK_MULTIPLIER, 1.01),
            base_cost=100_000,
            cost_multiplier=1.25,
            current_level=0,
            permanent=True,
        ),
        # Notoriety store
        Upgrade(
            "cred_boost",
            "Cred Boost",
            "+1% to all cred production per level",
            UpgradeEffect(EffectType.GLOBAL_MULTIPLIER, 1.01),
            base_cost=10,
            cost_multiplier=1.5,
            current_level=0,
            permanent=True,
            currency=Currency.NOTORIETY,
        ),
        Upgrade(
            "notoriety_boost",
            "Notoriety Boost",
            "+1% to all notoriety production per level",
            UpgradeEffect(EffectType.NOTORIETY_MULTIPLIER, 1.01),
            base_cost=15,
            cost_multiplier=1.5,
            current_level=0,
            permanent=True,
            currency=Currency.NOTORIETY,
        ),
        Upgrade(
            "drama_boost",
            "Drama Boost",
            "+0.2% to all cred production per level, resets on prestige",
            UpgradeEffect(EffectType.GLOBAL_MULTIPLIER, 1.002),
            base_cost=20,
            cost_multiplier=2,
            current_level=0,
            max_level=10,
            currency=Currency.NOTORIETY,
        ),
    ]


def _themes() -> list[Theme]:
    return [
        Theme("dark", "Dark", 0, 1.0, unlocked=True, active=True),
        Theme("light", "Light", 0, 1.05, unlocked=True),
        Theme("night-sky", "Night Sky", 5, 1.1),
        Theme("touch-grass", "Touch Grass", 10, 1.08),
        Theme("terminal", "Terminal", 15, 1.12),
        Theme("cherry-blossom", "Cherry Blossom", 20, 1.07),
        Theme("nightshade", "Nightshade", 30, 1.15),
        Theme("el-blue", "EL Blue", 40, 1.2),
        Theme("gold", "Gold", 50, 1.25),
    ]


def _events() -> list[RandomEventDef]:
    production, click = EventKind.PRODUCTION, EventKind.CLICK
    return [
        RandomEventDef("viral_post", "Viral Post", "3x production for 60 seconds",
                       production, 3, 60_000, weight=10),
        RandomEventDef("trending_topic", "Trending Topic", "2x production for 2 minutes",
                       production, 2, 120_000, weight=15),
        RandomEventDef("celebrity_mention", "Celebrity Mention", "5x click power for 30 seconds",
                       click, 5, 30_000, weight=5),
        RandomEventDef("algorithm_boost", "Algorithm Boost", "2x production for 90 seconds",
                       production, 2, 90_000, weight=8),
        RandomEventDef("sponsored_post", "Sponsored Post", "4x production for 45 seconds",
                       production, 4, 45_000, weight=12),
    ]


def _threshold_series(
    category: str,
    key: str,
    entries: list[tuple[str, str, str, float]],
) -> list[AchievementDef]:
    return [
        AchievementDef(id, name, description, category, key, value, tier=i + 1)
        for i, (id, name, description, value) in enumerate(entries)
    ]


def _achievements() -> list[AchievementDef]:
    defs = [
        AchievementDef("first_click", "First Click", "Click your first post",
                       "progression", "totalClicks", 1, tier=1),
        AchievementDef("first_generator", "Content Creator", "Purchase your first generator",
                       "progression", "totalGeneratorsPurchased", 1, tier=1),
        AchievementDef("first_upgrade", "Self Improvement", "Purchase your first upgrade",
                       "progression", "totalUpgradesPurchased", 1, tier=1),
        AchievementDef("first_prestige", "Fresh Start", "Perform your first prestige",
                       "progression", "prestigeCount", 1, tier=1),
        AchievementDef("unlock_all_generators", "Full Creator Suite",
                       "Unlock all generator types", "progression",
                       "allGeneratorsUnlocked", tier=2),
        # dark and light are free, so three means one premium theme
        AchievementDef("first_theme", "Style Points", "Unlock your first premium theme",
                       "progression", "themesUnlocked", 3, tier=1),
        AchievementDef("theme_master", "Fashion Icon", "Unlock all themes",
                       "progression", "allThemesUnlocked", tier=3),
        AchievementDef("notorious", "Notorious", "Reach 100 Notoriety",
                       "progression", "notoriety", 100, tier=2),
    ]
    defs += _threshold_series("currency", "totalCredsEarned", [
        ("hundred_creds", "Rising Star", "Reach 100 creds", 100),
        ("thousand_creds", "Trending Topic", "Reach 1,000 creds", 1000),
        ("million_creds", "Influencer Status", "Reach 1 million creds", 1e6),
        ("billion_creds", "Mega Influencer", "Reach 1 billion creds", 1e9),
        ("trillion_creds", "Legendary Status", "Reach 1 trillion creds", 1e12),
    ])
    defs += _threshold_series("currency", "awardsEarned", [
        ("first_award", "Lucky Drop", "Collect your first Award", 1),
        ("collector", "Award Collector", "Collect 100 Awards", 100),
        ("award_hoarder", "Award Hoarder", "Collect 1,000 Awards", 1000),
    ])
    defs += _threshold_series("currency", "prestigeCurrency", [
        ("prestige_unlocked", "Prestige Unlocked", "Gain your first prestige point", 1),
        ("prestige_power", "Prestige Power", "Accumulate 10 prestige points", 10),
        ("prestige_titan", "Prestige Titan", "Accumulate 100 prestige points", 100),
    ])
    defs += _threshold_series("generators", "totalGeneratorsPurchased", [
        ("ten_generators", "Content Farm I", "Own 10 total generators", 10),
        ("fifty_generators", "Content Farm II", "Own 50 total generators", 50),
        ("hundred_generators", "Content Farm III", "Own 100 total generators", 100),
        ("twohundred_generators", "Content Farm IV", "Own 200 total generators", 200),
    ])
    defs += _threshold_series("generators", "totalUpgradesPurchased", [
        ("ten_upgrades", "Optimizer I", "Purchase 10 upgrades", 10),
        ("twentyfive_upgrades", "Optimizer II", "Purchase 25 upgrades", 25),
        ("fifty_upgrades", "Optimizer III", "Purchase 50 upgrades", 50),
        ("hundred_upgrades", "Optimizer IV", "Purchase 100 upgrades", 100),
    ])
    defs += _threshold_series("clicks", "totalClicks", [
        ("hundred_clicks", "Click Enthusiast I", "Click 100 times", 100),
        ("thousand_clicks", "Click Enthusiast II", "Click 1,000 times", 1000),
        ("tenthousand_clicks", "Click Enthusiast III", "Click 10,000 times", 10_000),
        ("hundredthousand_clicks", "Click Enthusiast IV", "Click 100,000 times", 100_000),
    ])
    defs += _threshold_series("clicks", "clickPower", [
        ("click_power_10", "Click Master I", "Reach 10 click power", 10),
        ("click_power_100", "Click Master II", "Reach 100 click power", 100),
        ("click_power_1000", "Click Master III", "Reach 1,000 click power", 1000),
        ("click_power_10000", "Click Master IV", "Reach 10,000 click power", 10_000),
    ])
    defs += _threshold_series("prestige", "prestigeCount", [
        ("prestige_5", "Prestige Novice", "Reach prestige level 5", 5),
        ("prestige_10", "Prestige Veteran", "Reach prestige level 10", 10),
        ("prestige_25", "Prestige Master", "Reach prestige level 25", 25),
        ("prestige_50", "Prestige Legend", "Reach prestige level 50", 50),
    ])
    defs += _threshold_series("meta", "playTime", [
        ("playtime_1hour", "Getting Started", "Play for 1 hour", HOUR_MS),
        ("playtime_10hours", "Dedicated Player", "Play for 10 hours", 10 * HOUR_MS),
        ("playtime_24hours", "Full Day Grind", "Play for 24 hours", 24 * HOUR_MS),
        ("playtime_100hours", "Century Club", "Play for 100 hours", 100 * HOUR_MS),
    ])
    defs += _threshold_series("meta", "sessionCount", [
        ("sessions_10", "Regular Visitor", "Start 10 game sessions", 10),
        ("sessions_50", "Frequent Flyer", "Start 50 game sessions", 50),
        ("sessions_100", "Daily Ritual", "Start 100 game sessions", 100),
    ])
    defs += [
        AchievementDef("nice", "Nice.", "Reach 69 or higher click power",
                       "hidden", "clickPower", 69, hidden=True),
        AchievementDef("prestigious_fool", "Prestigious Fool",
                       "Reach exactly prestige level 42", "hidden",
                       "prestigeExact", 42, hidden=True),
        AchievementDef("welcome_back", "Welcome Back...?",
                       "Return after being away for more than 24 hours", "hidden",
                       "returnAfter24h", hidden=True),
    ]
    return defs


def default_definition(config: EngineConfig | None = None) -> GameDefinition:
    """Fresh copy of the shipped catalogue."""
    return GameDefinition(
        config=config or EngineConfig(),
        generators=_generators(),
        upgrades=_upgrades(),
        themes=_themes(),
        achievements=_achievements(),
        notoriety_generators=_notoriety_generators(),
        events=_events(),
    )
