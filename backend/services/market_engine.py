"""
Tick-driven price formation for a live match.
Each trading second every asset moves by the sum of independent terms:
news impact (with shock window), controlled randomness, sentiment drift and
scenario bias, damped toward the round open in the final seconds and
clamped to a per-round safety rail.
"""
import logging
import random
from typing import Optional

from catalog.news import NewsCard
from catalog.tuning import DEFAULT_TUNING, MarketTuning
from models.market import Asset, Scenario
from models.enums import AssetClass

logger = logging.getLogger(__name__)


class MarketEngine:
    """Owns round-open prices and computes the next price for every asset."""

    def __init__(
        self,
        trading_window: int,
        tuning: MarketTuning = DEFAULT_TUNING,
        rng: Optional[random.Random] = None,
    ):
        self.trading_window = trading_window
        self.tuning = tuning
        self.rng = rng or random.Random()
        self.round_open: dict[str, float] = {}

    # ── ROUND BOUNDARIES ───────────────────────────────────────────────

    def begin_round(self, assets: list[Asset]) -> None:
        """Record the prices the safety rail is measured against."""
        self.round_open = {a.id: a.current_price for a in assets}

    def price_band(self, asset: Asset) -> tuple[float, float]:
        base = self.round_open.get(asset.id, asset.current_price)
        move = self.tuning.max_round_move
        return base * (1 - move), base * (1 + move)

    # ── INDIVIDUAL TERMS ───────────────────────────────────────────────

    def time_decay(self, elapsed: int) -> float:
        """Per-second share of the news impact for the current third of the window."""
        third = self.trading_window / 3
        early, mid, late = self.tuning.time_decay_shares
        if elapsed <= third:
            share = early
        elif elapsed <= 2 * third:
            share = mid
        else:
            share = late
        return share / third

    def in_shock_window(self, elapsed: int) -> bool:
        return elapsed <= self.tuning.shock_window_seconds

    def in_stabilization(self, elapsed: int) -> bool:
        return elapsed >= self.trading_window - self.tuning.stabilization_seconds

    def news_impact(self, asset: Asset, card: Optional[NewsCard], elapsed: int) -> float:
        """Zero unless the card touches one of the asset's sectors."""
        if card is None:
            return 0.0
        matched = [s for s in asset.sectors if s in card.affected_sectors]
        if not matched:
            return 0.0
        t = self.tuning
        impact = (
            t.sentiment_multiplier[card.sentiment]
            * t.sector_sensitivity[matched[0]]
            * self.time_decay(elapsed)
            * t.news_scale
        )
        if self.in_shock_window(elapsed):
            impact *= t.shock_multiplier
        return impact

    def random_factor(self, polarity_streak: int) -> float:
        """Dampen noise when the same mood has repeated for several rounds."""
        if polarity_streak >= self.tuning.damping_streak:
            return self.tuning.damped_random_factor
        return self.tuning.random_factor

    def random_movement(self, asset_class: AssetClass, polarity_streak: int) -> float:
        vol = self.tuning.class_volatility.get(asset_class, 0.05)
        return (self.rng.random() - 0.5) * self.random_factor(polarity_streak) * vol

    def sentiment_drift(self, sentiment: float) -> float:
        return sentiment / 100 * self.tuning.sentiment_drift_scale

    @staticmethod
    def scenario_bias(asset_class: AssetClass, scenario: Optional[Scenario]) -> float:
        if scenario is None:
            return 0.0
        return scenario.class_bias.get(asset_class, 0.0)

    # ── TICK ───────────────────────────────────────────────────────────

    def next_price(
        self,
        asset: Asset,
        elapsed: int,
        card: Optional[NewsCard],
        sentiment: float,
        scenario: Optional[Scenario] = None,
        polarity_streak: int = 0,
    ) -> float:
        change = self.news_impact(asset, card, elapsed)
        change += self.random_movement(asset.type, polarity_streak)
        change += self.sentiment_drift(sentiment)
        change += self.scenario_bias(asset.type, scenario)

        if self.in_stabilization(elapsed):
            base = self.round_open.get(asset.id, asset.current_price)
            deviation = (asset.current_price - base) / base
            change *= self.tuning.stabilization_scale
            change -= deviation * self.tuning.mean_reversion

        new_price = asset.current_price * (1 + change)
        low, high = self.price_band(asset)
        new_price = max(low, min(high, new_price))
        return max(self.tuning.min_price, new_price)

    def tick(
        self,
        assets: list[Asset],
        elapsed: int,
        card: Optional[NewsCard],
        sentiment: dict[AssetClass, float],
        scenario: Optional[Scenario] = None,
        polarity_streak: int = 0,
    ) -> None:
        """Advance every asset by one trading second (1-based `elapsed`)."""
        for asset in assets:
            price = self.next_price(
                asset, elapsed, card, sentiment.get(asset.type, 0.0),
                scenario=scenario, polarity_streak=polarity_streak,
            )
            asset.record_price(price)
