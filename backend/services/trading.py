"""
Buy/sell execution against live prices with notional-based slippage.
Rejections are silent to clients; callers get a CommandResult for logging
and tests.
"""
import logging
import math

from catalog.tuning import DEFAULT_TUNING, MarketTuning
from models.enums import CommandResult, TradeSide
from models.game_state import GameState
from models.player import Holding, Transaction

logger = logging.getLogger(__name__)

# Residual below this is treated as a closed position.
QUANTITY_EPSILON = 1e-9


def slippage_rate(notional: float, tuning: MarketTuning = DEFAULT_TUNING) -> float:
    """Step function of order value. Anti-whale, not a depth model."""
    for threshold, rate in tuning.slippage_bands:
        if notional > threshold:
            return rate
    return 0.0


def _valid_quantity(quantity) -> bool:
    try:
        return math.isfinite(quantity) and quantity > 0
    except TypeError:
        return False


def _record(state: GameState, player, asset, side: TradeSide, quantity: float,
            price: float, total: float) -> None:
    event_id = state.active_event.id if state.active_event else None
    player.transaction_log.append(Transaction(
        round=state.current_round,
        type=side,
        asset_id=asset.id,
        asset_type=asset.type,
        amount=quantity,
        price=price,
        total_value=total,
        event_active=event_id,
        sentiment_at_time=state.sentiment.get(asset.type, 0.0),
    ))


def _precheck(state: GameState, player_id: str, asset_id: str, quantity):
    if not state.trading_open:
        return CommandResult.WRONG_PHASE, None, None
    player = state.player(player_id)
    if player is None:
        return CommandResult.UNKNOWN_PLAYER, None, None
    asset = state.asset(asset_id)
    if asset is None:
        return CommandResult.UNKNOWN_ASSET, None, None
    if not _valid_quantity(quantity):
        return CommandResult.INVALID_QUANTITY, None, None
    return CommandResult.ACCEPTED, player, asset


def buy(state: GameState, player_id: str, asset_id: str, quantity: float,
        tuning: MarketTuning = DEFAULT_TUNING) -> CommandResult:
    result, player, asset = _precheck(state, player_id, asset_id, quantity)
    if not result.accepted:
        return result

    quote = asset.current_price
    rate = slippage_rate(quantity * quote, tuning)
    effective_price = quote * (1 + rate)
    cost = quantity * effective_price
    if cost > player.cash:
        return CommandResult.INSUFFICIENT_CASH

    player.cash = max(0.0, player.cash - cost)
    holding = player.holding_for(asset_id)
    if holding:
        total_cost = holding.quantity * holding.avg_buy_price + cost
        holding.quantity += quantity
        holding.avg_buy_price = total_cost / holding.quantity
    else:
        player.holdings.append(Holding(
            asset_id=asset_id, quantity=quantity, avg_buy_price=effective_price,
        ))

    _record(state, player, asset, TradeSide.BUY, quantity, effective_price, cost)
    logger.debug("%s bought %s %s @ %.6f (slippage %.1f%%)",
                 player.name, quantity, asset_id, effective_price, rate * 100)
    return CommandResult.ACCEPTED


def sell(state: GameState, player_id: str, asset_id: str, quantity: float,
         tuning: MarketTuning = DEFAULT_TUNING) -> CommandResult:
    result, player, asset = _precheck(state, player_id, asset_id, quantity)
    if not result.accepted:
        return result

    holding = player.holding_for(asset_id)
    if holding is None or quantity > holding.quantity:
        return CommandResult.INSUFFICIENT_HOLDINGS

    quote = asset.current_price
    rate = slippage_rate(quantity * quote, tuning)
    effective_price = quote * (1 - rate)
    revenue = quantity * effective_price

    player.cash += revenue
    holding.quantity -= quantity
    if holding.quantity <= QUANTITY_EPSILON:
        player.holdings = [h for h in player.holdings if h.asset_id != asset_id]

    _record(state, player, asset, TradeSide.SELL, quantity, effective_price, revenue)
    logger.debug("%s sold %s %s @ %.6f (slippage %.1f%%)",
                 player.name, quantity, asset_id, effective_price, rate * 100)
    return CommandResult.ACCEPTED
