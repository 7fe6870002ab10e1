from pydantic import BaseModel, Field

from models.enums import AssetClass, Sector

PRICE_HISTORY_LIMIT = 50


class Asset(BaseModel):
    """Live, per-match instrument. Price mutates every trading tick."""
    id: str
    name: str
    type: AssetClass
    base_volatility: float
    trend_bias: str = "SIDEWAYS"
    sectors: list[Sector]
    current_price: float = Field(..., gt=0)
    history: list[float] = Field(default_factory=list)

    def record_price(self, price: float) -> None:
        self.current_price = price
        self.history.append(price)
        if len(self.history) > PRICE_HISTORY_LIMIT:
            del self.history[: len(self.history) - PRICE_HISTORY_LIMIT]


class MarketEvent(BaseModel):
    """Display form of the active news card."""
    id: str
    title: str
    description: str
    sentiment: str  # positive, negative, neutral
    emotion: str  # five-point scale, e.g. very_negative
    intensity: str  # low, medium, high
    sectors: list[Sector]
    impact: dict[AssetClass, float]
    duration: int
    rounds_remaining: int
    hint: str
    emoji: str
    volatility_multiplier: float


class Scenario(BaseModel):
    """Match-wide modifier chosen once during pre-match."""
    id: str
    title: str
    description: str
    effect_description: str
    class_bias: dict[AssetClass, float] = Field(default_factory=dict)
