from models.enums import (
    AssetClass,
    Sector,
    NewsSentiment,
    GamePhase,
    PreMatchSubPhase,
    RoundStage,
    TradeSide,
    AvatarId,
    StrategyId,
    CommandResult,
)
from models.market import Asset, MarketEvent, Scenario
from models.player import Holding, Transaction, PowerUp, PlayerState
from models.game_state import GameState

__all__ = [
    "AssetClass",
    "Sector",
    "NewsSentiment",
    "GamePhase",
    "PreMatchSubPhase",
    "RoundStage",
    "TradeSide",
    "AvatarId",
    "StrategyId",
    "CommandResult",
    "Asset",
    "MarketEvent",
    "Scenario",
    "Holding",
    "Transaction",
    "PowerUp",
    "PlayerState",
    "GameState",
]
