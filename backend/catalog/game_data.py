"""Avatars, strategies, scenarios and power-ups offered during a match."""
import random

from pydantic import BaseModel

from models.enums import AssetClass, AvatarId, StrategyId
from models.market import Scenario
from models.player import PowerUp


class Avatar(BaseModel):
    id: AvatarId
    name: str
    description: str
    effect_description: str

    model_config = {"frozen": True}


class Strategy(BaseModel):
    id: StrategyId
    name: str
    bonus_description: str
    tooltip: str

    model_config = {"frozen": True}


AVATARS: tuple[Avatar, ...] = (
    Avatar(id=AvatarId.ANALYST, name="The Analyst",
           description="Smart, calm, and calculated.",
           effect_description="Reads the news before the crowd does."),
    Avatar(id=AvatarId.DEGEN, name="The DeGen",
           description="YOLO trader looking for moonshots.",
           effect_description="Higher upside volatility, but higher risk."),
    Avatar(id=AvatarId.STRATEGIST, name="The Strategist",
           description="Long-term thinker, playing the long game.",
           effect_description="Lower risk penalties on holding."),
    Avatar(id=AvatarId.MEME_LORD, name="The Meme Lord",
           description="Chaotic, funny, and unpredictable.",
           effect_description="Random bonus effects during events."),
)

STRATEGIES: tuple[Strategy, ...] = (
    Strategy(id=StrategyId.HIGH_ROLLER, name="High Roller",
             bonus_description="+8% upside on growth assets",
             tooltip="Diamond hands or disaster: your choice."),
    Strategy(id=StrategyId.SAFETY_FIRST, name="Safety First",
             bonus_description="-10 risk score",
             tooltip="Slow and steady can still win the race."),
    Strategy(id=StrategyId.DIVERSIFIER, name="Diversifier",
             bonus_description="+5% final value with 4+ different assets",
             tooltip="Put eggs in 4 baskets, not 1."),
    Strategy(id=StrategyId.SWING_TRADER, name="Swing Trader",
             bonus_description="Faster cooldowns between actions",
             tooltip="Buy the dip, sell the rip."),
)

# Per-tick price bias per class while the scenario is active.
SCENARIOS: tuple[Scenario, ...] = (
    Scenario(id="TECH_MOONSHOT", title="Tech Moonshot",
             description="Ultra bullish on Tech.",
             effect_description="Tech stocks soar early. Only the patient will survive.",
             class_bias={AssetClass.STOCK: 0.002}),
    Scenario(id="CRYPTO_WINTER", title="Crypto Winter",
             description="Scary & bearish for Crypto.",
             effect_description="Crypto dumps at start. Fortunes reverse as fast as they rise.",
             class_bias={AssetClass.CRYPTO: -0.004}),
    Scenario(id="RATE_SHOCKWAVE", title="Rate Shockwave",
             description="Fear in the market.",
             effect_description="Bonds rise, stocks stumble. Diversify, or die trying.",
             class_bias={AssetClass.BOND: 0.001, AssetClass.STOCK: -0.0015}),
    Scenario(id="GREEN_ENERGY_SURGE", title="Green Energy Surge",
             description="Optimistic for ETFs.",
             effect_description="ETFs outperform. Follow the trend.",
             class_bias={AssetClass.ETF: 0.0015}),
)

RISK_SHIELD = "risk-shield"
BAILOUT = "bailout"


def starting_power_ups() -> list[PowerUp]:
    return [
        PowerUp(id=RISK_SHIELD, name="Risk Shield", description="-20 Risk Score", uses_left=1),
        PowerUp(id=BAILOUT, name="Bailout", description="+$1000 Cash", uses_left=1),
    ]


def draw_scenario(rng: random.Random) -> Scenario:
    return rng.choice(SCENARIOS).model_copy(deep=True)
