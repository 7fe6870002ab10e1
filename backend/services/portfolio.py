"""Mark-to-market valuation and point-in-time risk scoring."""
from catalog.tuning import DEFAULT_TUNING, MarketTuning
from models.enums import StrategyId
from models.market import Asset
from models.player import PlayerState


def _by_id(assets: list[Asset]) -> dict[str, Asset]:
    return {a.id: a for a in assets}


def holdings_value(player: PlayerState, prices: dict[str, Asset]) -> float:
    return sum(
        h.quantity * prices[h.asset_id].current_price
        for h in player.holdings
        if h.asset_id in prices
    )


def revalue(player: PlayerState, prices: dict[str, Asset]) -> float:
    player.total_value = player.cash + holdings_value(player, prices)
    return player.total_value


def risk_score(
    player: PlayerState,
    prices: dict[str, Asset],
    tuning: MarketTuning = DEFAULT_TUNING,
) -> int:
    """Value-weighted class volatility on a 0-100 scale. No holdings => 0."""
    weighted = 0.0
    total = 0.0
    for h in player.holdings:
        asset = prices.get(h.asset_id)
        if asset is None:
            continue
        value = h.quantity * asset.current_price
        total += value
        weighted += value * tuning.class_volatility.get(asset.type, 0.05) * tuning.risk_scaling

    if total <= 0:
        return 0

    score = min(100, round(weighted / total * 100))
    if player.strategy_id == StrategyId.SAFETY_FIRST:
        score -= tuning.safety_first_discount
    if player.risk_shield_active:
        score -= tuning.risk_shield_discount
    return max(0, min(100, score))


def refresh(
    players: list[PlayerState],
    assets: list[Asset],
    tuning: MarketTuning = DEFAULT_TUNING,
) -> None:
    """Recompute total value and risk for everyone. Run after every tick and trade."""
    prices = _by_id(assets)
    for player in players:
        revalue(player, prices)
        player.risk_score = risk_score(player, prices, tuning)
