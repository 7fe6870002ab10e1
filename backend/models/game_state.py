from typing import Optional

from pydantic import BaseModel, Field

from models.enums import AssetClass, GamePhase, PreMatchSubPhase, RoundStage
from models.market import Asset, MarketEvent, Scenario
from models.player import PlayerState


class GameState(BaseModel):
    """Single source of truth for one match; broadcast whole after every mutation."""
    id: str
    phase: GamePhase = GamePhase.PRE_MATCH
    sub_phase: PreMatchSubPhase = PreMatchSubPhase.INTRO
    round_stage: Optional[RoundStage] = None
    current_round: int = 0
    max_rounds: int
    time_remaining: int = 0
    players: list[PlayerState] = Field(default_factory=list)
    assets: list[Asset] = Field(default_factory=list)
    active_event: Optional[MarketEvent] = None
    active_scenario: Optional[Scenario] = None
    fear_zone_active: bool = False
    sentiment: dict[AssetClass, float] = Field(default_factory=dict)

    def player(self, player_id: str) -> Optional[PlayerState]:
        return next((p for p in self.players if p.id == player_id), None)

    def player_by_name(self, name: str) -> Optional[PlayerState]:
        return next((p for p in self.players if p.name == name), None)

    def asset(self, asset_id: str) -> Optional[Asset]:
        return next((a for a in self.assets if a.id == asset_id), None)

    def connected_players(self) -> list[PlayerState]:
        return [p for p in self.players if p.connected]

    @property
    def trading_open(self) -> bool:
        return self.phase == GamePhase.PLAYING and self.round_stage == RoundStage.TRADING

    def snapshot(self) -> dict:
        """JSON-ready full state (no deltas)."""
        return self.model_dump(mode="json")
