"""Static reference data: instruments, news, scenarios and tuning."""
from catalog.assets import ASSET_CATALOG, SECTOR_TO_CLASSES, AssetSpec, build_assets
from catalog.news import NEWS_CARDS, NewsCard, draw_news_card, news_card_to_event, class_impact
from catalog.game_data import (
    AVATARS,
    STRATEGIES,
    SCENARIOS,
    RISK_SHIELD,
    BAILOUT,
    starting_power_ups,
    draw_scenario,
)
from catalog.tuning import MarketTuning, DEFAULT_TUNING

__all__ = [
    "ASSET_CATALOG",
    "SECTOR_TO_CLASSES",
    "AssetSpec",
    "build_assets",
    "NEWS_CARDS",
    "NewsCard",
    "draw_news_card",
    "news_card_to_event",
    "class_impact",
    "AVATARS",
    "STRATEGIES",
    "SCENARIOS",
    "RISK_SHIELD",
    "BAILOUT",
    "starting_power_ups",
    "draw_scenario",
    "MarketTuning",
    "DEFAULT_TUNING",
]
