"""Fresh match state, used at construction and on every reset."""
from typing import Iterable, Optional

from catalog.assets import build_assets
from catalog.game_data import starting_power_ups
from config import Settings, get_settings
from models.game_state import GameState
from models.player import PlayerState
from services.sentiment import neutral_sentiment


def new_player(player_id: str, name: str, settings: Optional[Settings] = None) -> PlayerState:
    settings = settings or get_settings()
    return PlayerState(
        id=player_id,
        name=name,
        cash=settings.starting_cash,
        total_value=settings.starting_cash,
        power_ups=starting_power_ups(),
    )


def build_initial_state(
    match_id: str,
    settings: Optional[Settings] = None,
    players: Iterable[tuple[str, str]] = (),
) -> GameState:
    """`players` is (connection id, name) pairs carried over with default values."""
    settings = settings or get_settings()
    return GameState(
        id=match_id,
        max_rounds=settings.max_rounds,
        players=[new_player(pid, name, settings) for pid, name in players],
        assets=build_assets(),
        sentiment=neutral_sentiment(),
    )
