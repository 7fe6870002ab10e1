from typing import Optional

from pydantic import BaseModel, Field

from models.enums import AvatarId, StrategyId
from models.player import Transaction


class LearningCard(BaseModel):
    """Bite-sized concept attached to a critique."""
    title: str
    text: str
    deep_dive: str = ""
    search_query: str = ""


class PlayerSummary(BaseModel):
    what_you_did_well: list[str] = Field(..., min_length=1)
    mistakes_and_opportunities: list[str] = Field(..., min_length=1)
    improvement_suggestions: list[str] = Field(..., min_length=1)


class Critique(BaseModel):
    """Natural-language post-match feedback for one player."""
    player_summary: PlayerSummary
    learning_cards: list[LearningCard] = Field(default_factory=list, max_length=3)


class CritiqueRequest(BaseModel):
    """Everything a critique provider may look at."""
    player_id: str
    player_name: str
    strategy_id: Optional[StrategyId] = None
    avatar_id: Optional[AvatarId] = None
    starting_cash: float
    final_value: float
    roi: float
    risk_score: int
    distinct_assets_held: int = 0
    transactions: list[Transaction] = Field(default_factory=list)


class GameResult(BaseModel):
    """One ranked row of the end-of-match leaderboard."""
    player_id: str
    player_name: str
    final_value: float
    risk_score: int = Field(..., ge=0, le=100)
    roi: float  # percent
    risk_adjusted_score: float
    rank: int = Field(..., ge=1)
    strategy_id: Optional[StrategyId] = None
    avatar_id: Optional[AvatarId] = None
    insights: list[str]
    player_summary: PlayerSummary
    learning_cards: list[LearningCard] = Field(default_factory=list)
