"""Per-class market mood in [-100, 100]."""
import logging
import random

from catalog.assets import SECTOR_TO_CLASSES
from catalog.news import NewsCard
from catalog.tuning import DEFAULT_TUNING, MarketTuning
from models.enums import AssetClass, Sector

logger = logging.getLogger(__name__)

SENTIMENT_MIN = -100.0
SENTIMENT_MAX = 100.0


def _clamp(value: float) -> float:
    return max(SENTIMENT_MIN, min(SENTIMENT_MAX, value))


def neutral_sentiment() -> dict[AssetClass, float]:
    return {cls: 0.0 for cls in AssetClass}


class SentimentLedger:
    """Wraps the match's sentiment map; every write is clamped."""

    def __init__(self, values: dict[AssetClass, float], tuning: MarketTuning = DEFAULT_TUNING):
        self.values = values
        self.tuning = tuning
        for cls in AssetClass:
            self.values.setdefault(cls, 0.0)

    def read(self, cls: AssetClass) -> float:
        return self.values.get(cls, 0.0)

    def snapshot(self) -> dict[AssetClass, float]:
        return dict(self.values)

    def apply(self, sector: Sector, delta: float) -> None:
        for cls in SECTOR_TO_CLASSES[sector]:
            self.values[cls] = _clamp(self.values[cls] + delta)

    def decay(self, factor: float | None = None) -> None:
        factor = self.tuning.sentiment_decay if factor is None else factor
        for cls in self.values:
            self.values[cls] = _clamp(self.values[cls] * factor)

    def apply_news(self, card: NewsCard) -> None:
        multiplier = self.tuning.sentiment_multiplier[card.sentiment]
        for sector in card.affected_sectors:
            sensitivity = self.tuning.sector_sensitivity[sector]
            self.apply(sector, multiplier * sensitivity * self.tuning.news_sentiment_points)
        logger.debug("Sentiment after news %s: %s", card.id, self.values)

    def apply_rotation(self, card: NewsCard, rng: random.Random) -> list[Sector]:
        """Bad news in some sectors lifts the others a little."""
        if card.sentiment.polarity != "negative":
            return []
        low, high = self.tuning.rotation_drift_range
        unaffected = [s for s in Sector if s not in card.affected_sectors]
        for sector in unaffected:
            self.apply(sector, rng.uniform(low, high))
        logger.debug("Sector rotation into %s", [s.value for s in unaffected])
        return unaffected
