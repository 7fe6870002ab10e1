from typing import Optional

from pydantic import BaseModel, Field

from models.enums import AssetClass, AvatarId, StrategyId, TradeSide


class Holding(BaseModel):
    """Open long position. Removed from the player, never zeroed."""
    asset_id: str
    quantity: float = Field(..., gt=0)
    avg_buy_price: float = Field(..., gt=0)


class Transaction(BaseModel):
    """Immutable trade log entry; the only input to post-match analysis."""
    round: int
    type: TradeSide
    asset_id: str
    asset_type: AssetClass
    amount: float
    price: float  # executed, after slippage
    total_value: float
    event_active: Optional[str] = None
    sentiment_at_time: float = 0.0

    model_config = {"frozen": True}


class PowerUp(BaseModel):
    id: str
    name: str
    description: str
    uses_left: int = Field(..., ge=0)


class PlayerState(BaseModel):
    id: str  # connection id, rebound on reconnect
    name: str
    cash: float = Field(..., ge=0)
    holdings: list[Holding] = Field(default_factory=list)
    risk_score: int = Field(0, ge=0, le=100)
    total_value: float
    avatar_id: Optional[AvatarId] = None
    strategy_id: Optional[StrategyId] = None
    power_ups: list[PowerUp] = Field(default_factory=list)
    risk_shield_active: bool = False
    connected: bool = True
    transaction_log: list[Transaction] = Field(default_factory=list)

    def holding_for(self, asset_id: str) -> Optional[Holding]:
        return next((h for h in self.holdings if h.asset_id == asset_id), None)

    def power_up(self, power_up_id: str) -> Optional[PowerUp]:
        return next((p for p in self.power_ups if p.id == power_up_id), None)
