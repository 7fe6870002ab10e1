"""Canonical market tuning.

One parameter set for the whole engine: class volatility bands, news
multipliers, sector sensitivities, slippage bands, safety rails and the
risk-score scale. Tests may build their own instance.
"""
from pydantic import BaseModel, Field

from models.enums import AssetClass, NewsSentiment, Sector


class MarketTuning(BaseModel):
    class_volatility: dict[AssetClass, float] = Field(default_factory=lambda: {
        AssetClass.STOCK: 0.15,
        AssetClass.CRYPTO: 0.30,
        AssetClass.BOND: 0.06,
        AssetClass.ETF: 0.10,
    })
    sentiment_multiplier: dict[NewsSentiment, float] = Field(default_factory=lambda: {
        NewsSentiment.VERY_POSITIVE: 3.5,
        NewsSentiment.POSITIVE: 2.2,
        NewsSentiment.NEUTRAL: 0.3,
        NewsSentiment.NEGATIVE: -2.2,
        NewsSentiment.VERY_NEGATIVE: -3.5,
    })
    sector_sensitivity: dict[Sector, float] = Field(default_factory=lambda: {
        Sector.TECHNOLOGY: 2.0,
        Sector.FINANCE: 1.8,
        Sector.ENERGY: 1.9,
        Sector.CRYPTO: 3.0,
        Sector.BONDS: 1.2,
        Sector.GOLD: -1.2,  # moves against risk assets
    })

    # Price formation
    news_scale: float = 0.025
    time_decay_shares: tuple[float, float, float] = (0.6, 0.3, 0.1)
    shock_window_seconds: int = 7
    shock_multiplier: float = 2.0
    random_factor: float = 0.12
    damped_random_factor: float = 0.06
    damping_streak: int = 2
    sentiment_drift_scale: float = 0.002
    stabilization_seconds: int = 3
    stabilization_scale: float = 0.3
    mean_reversion: float = 0.05
    max_round_move: float = 0.40
    min_price: float = 1e-9

    # Sentiment ledger
    news_sentiment_points: float = 15.0
    rotation_drift_range: tuple[float, float] = (1.0, 2.0)
    sentiment_decay: float = 0.8

    # Slippage bands: (notional strictly above, rate), highest first
    slippage_bands: tuple[tuple[float, float], ...] = (
        (5000.0, 0.02),
        (2000.0, 0.01),
        (1000.0, 0.005),
    )

    # Risk score
    risk_scaling: float = 3.0
    safety_first_discount: int = 10
    risk_shield_discount: int = 20

    # Results
    risk_penalty: float = 0.5
    diversifier_bonus: float = 0.05
    diversifier_min_assets: int = 4

    # Power-ups
    bailout_cash: float = 1000.0

    model_config = {"frozen": True}

    @property
    def top_slippage_rate(self) -> float:
        return max(rate for _, rate in self.slippage_bands)


DEFAULT_TUNING = MarketTuning()
