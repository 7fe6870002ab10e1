from enum import Enum


class AssetClass(str, Enum):
    STOCK = "STOCK"
    CRYPTO = "CRYPTO"
    BOND = "BOND"
    ETF = "ETF"


class Sector(str, Enum):
    TECHNOLOGY = "technology"
    FINANCE = "finance"
    ENERGY = "energy"
    CRYPTO = "crypto"
    BONDS = "bonds"
    GOLD = "gold"


class NewsSentiment(str, Enum):
    """Five-point polarity scale used by news cards."""
    VERY_POSITIVE = "very_positive"
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    VERY_NEGATIVE = "very_negative"

    @property
    def polarity(self) -> str:
        """Coarse polarity: positive, negative or neutral."""
        if self in (NewsSentiment.VERY_POSITIVE, NewsSentiment.POSITIVE):
            return "positive"
        if self in (NewsSentiment.VERY_NEGATIVE, NewsSentiment.NEGATIVE):
            return "negative"
        return "neutral"


class GamePhase(str, Enum):
    PRE_MATCH = "PRE_MATCH"
    PLAYING = "PLAYING"
    FINISHED = "FINISHED"


class PreMatchSubPhase(str, Enum):
    INTRO = "INTRO"
    AVATAR_SELECTION = "AVATAR_SELECTION"
    STRATEGY_SELECTION = "STRATEGY_SELECTION"
    SCENARIO_TEASER = "SCENARIO_TEASER"
    TUTORIAL = "TUTORIAL"


class RoundStage(str, Enum):
    NEWS = "NEWS"
    TRADING = "TRADING"


class TradeSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class AvatarId(str, Enum):
    ANALYST = "ANALYST"
    DEGEN = "DEGEN"
    STRATEGIST = "STRATEGIST"
    MEME_LORD = "MEME_LORD"


class StrategyId(str, Enum):
    HIGH_ROLLER = "HIGH_ROLLER"
    SAFETY_FIRST = "SAFETY_FIRST"
    DIVERSIFIER = "DIVERSIFIER"
    SWING_TRADER = "SWING_TRADER"


class CommandResult(str, Enum):
    """Outcome of a client command. Never sent to clients."""
    ACCEPTED = "accepted"
    UNKNOWN_PLAYER = "unknown_player"
    UNKNOWN_ASSET = "unknown_asset"
    UNKNOWN_CHOICE = "unknown_choice"
    WRONG_PHASE = "wrong_phase"
    INVALID_QUANTITY = "invalid_quantity"
    INSUFFICIENT_CASH = "insufficient_cash"
    INSUFFICIENT_HOLDINGS = "insufficient_holdings"
    NAME_IN_USE = "name_in_use"
    POWER_UP_UNAVAILABLE = "power_up_unavailable"

    @property
    def accepted(self) -> bool:
        return self is CommandResult.ACCEPTED
