"""Websocket frames exchanged with match clients."""
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from models.enums import AvatarId, StrategyId


# ── Inbound commands ────────────────────────────────────────────────────

class JoinGame(BaseModel):
    type: Literal["join_game"]
    name: str = Field(..., min_length=1, max_length=32)


class SelectAvatar(BaseModel):
    type: Literal["select_avatar"]
    avatar_id: AvatarId


class SelectStrategy(BaseModel):
    type: Literal["select_strategy"]
    strategy_id: StrategyId


class BuyAsset(BaseModel):
    type: Literal["buy_asset"]
    asset_id: str
    amount: float


class SellAsset(BaseModel):
    type: Literal["sell_asset"]
    asset_id: str
    amount: float


class UsePowerUp(BaseModel):
    type: Literal["use_power_up"]
    power_up_id: str


class PlayAgain(BaseModel):
    type: Literal["play_again"]


ClientCommand = Annotated[
    Union[JoinGame, SelectAvatar, SelectStrategy, BuyAsset, SellAsset, UsePowerUp, PlayAgain],
    Field(discriminator="type"),
]

client_command_adapter: TypeAdapter = TypeAdapter(ClientCommand)


# ── Outbound events ─────────────────────────────────────────────────────

class GameStateFrame(BaseModel):
    type: Literal["game_state"] = "game_state"
    state: dict[str, Any]


class GameOverFrame(BaseModel):
    type: Literal["game_over"] = "game_over"
    results: list[dict[str, Any]]
