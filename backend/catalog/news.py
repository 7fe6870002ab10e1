"""News card pool and its translation into display events."""
import random

from pydantic import BaseModel

from catalog.assets import SECTOR_TO_CLASSES
from catalog.tuning import DEFAULT_TUNING, MarketTuning
from models.enums import AssetClass, NewsSentiment, Sector
from models.market import MarketEvent


class NewsCard(BaseModel):
    id: int
    title: str
    sentiment: NewsSentiment
    affected_sectors: tuple[Sector, ...]
    duration_rounds: int
    description: str

    model_config = {"frozen": True}


VP, P, N, NG, VN = (
    NewsSentiment.VERY_POSITIVE, NewsSentiment.POSITIVE, NewsSentiment.NEUTRAL,
    NewsSentiment.NEGATIVE, NewsSentiment.VERY_NEGATIVE,
)
TECH, FIN, ENERGY, CRYPTO, BONDS, GOLD = (
    Sector.TECHNOLOGY, Sector.FINANCE, Sector.ENERGY,
    Sector.CRYPTO, Sector.BONDS, Sector.GOLD,
)

_CARDS = [
    (1, "Central Bank Signals Rate Hike", VN, (FIN, TECH), 2,
     "Markets react sharply as central bank hints at aggressive tightening."),
    (2, "Major Tech Firm Faces Data Lawsuit", NG, (TECH,), 1,
     "Privacy concerns trigger sell-off in tech stocks."),
    (3, "Geopolitical Tensions Escalate", NG, (ENERGY, FIN), 2,
     "Uncertainty fuels volatility across global markets."),
    (4, "Crypto Exchange Freezes Withdrawals", VN, (CRYPTO,), 2,
     "Panic selling hits digital assets."),
    (5, "Banking Sector Liquidity Concerns", NG, (FIN,), 2,
     "Rumors of liquidity stress unsettle investors."),
    (6, "Central Bank Signals Rate Cuts", VP, (FIN, TECH), 2,
     "Markets rally as monetary easing looks likely."),
    (7, "Tech Giant Reports Record Profits", P, (TECH,), 1,
     "Strong earnings boost investor confidence."),
    (8, "AI Breakthrough Boosts Productivity", P, (TECH,), 2,
     "Optimism grows around AI-led growth."),
    (9, "Government Announces Startup Tax Relief", P, (TECH, FIN), 1,
     "Early-stage companies attract fresh capital."),
    (10, "Institutional Investors Enter Crypto", VP, (CRYPTO,), 2,
     "Crypto prices surge on strong inflows."),
    (11, "Inflation Data Cools Down", P, (FIN,), 1,
     "Reduced inflation pressure supports equities."),
    (12, "Trade Agreement Signed", P, (ENERGY, FIN), 2,
     "Global trade outlook improves."),
    (13, "Banking Stress Eases", P, (FIN,), 1,
     "Liquidity injections calm the markets."),
    (14, "Energy Supply Stabilizes", N, (ENERGY,), 1,
     "Oil prices remain range-bound."),
    (15, "Manufacturing Data Beats Expectations", P, (FIN,), 1,
     "Economic optimism lifts market mood."),
    (16, "Unexpected Market Volatility", NG, (TECH, FIN), 2,
     "Sharp swings shake investor confidence."),
    (17, "Conflicting Economic Indicators", N, (FIN,), 1,
     "Markets struggle to find direction."),
    (18, "Sector Rotation Observed", N, (TECH, FIN), 1,
     "Capital shifts between sectors."),
    (19, "Crypto Rallies Amid Stock Weakness", P, (CRYPTO,), 1,
     "Risk appetite shifts to digital assets."),
    (20, "Earnings Season Creates Volatility", N, (TECH, FIN), 2,
     "Stock-specific moves dominate the market."),
    (21, "Merger Rumors in Tech Sector", P, (TECH,), 1,
     "Speculation drives short-term rally."),
    (22, "Hedge Funds Increase Short Positions", NG, (FIN,), 2,
     "Bearish bets increase selling pressure."),
    (23, "Whale Activity Detected in Crypto", N, (CRYPTO,), 1,
     "Large transfers cause sharp intraday moves."),
    (24, "New Policy Under Government Review", N, (FIN,), 2,
     "Investors wait for clarity."),
    (25, "AI Trading Volume Spikes", P, (TECH,), 1,
     "Algorithmic trading fuels momentum."),
    (26, "Oil Supply Shock", VN, (ENERGY,), 2,
     "Energy prices surge, markets react."),
    (27, "Gold Attracts Safe-Haven Demand", P, (GOLD,), 1,
     "Risk-off sentiment benefits gold."),
    (28, "Bond Yields Rise Unexpectedly", NG, (BONDS, FIN), 2,
     "Equities face pressure from rising yields."),
    (29, "Market Awaits Major Announcement", N, (FIN,), 1,
     "Low volume, cautious trading."),
    (30, "Speculative Bubble Concerns Grow", VN, (TECH, CRYPTO), 2,
     "Sharp corrections hit high-risk assets."),
]

NEWS_CARDS: tuple[NewsCard, ...] = tuple(
    NewsCard(
        id=card_id, title=title, sentiment=sentiment,
        affected_sectors=sectors, duration_rounds=duration,
        description=description,
    )
    for card_id, title, sentiment, sectors, duration, description in _CARDS
)

_INTENSITY = {VP: "high", P: "medium", N: "low", NG: "medium", VN: "high"}
_EMOJI = {VP: "🚀📈", P: "📈💹", N: "📊", NG: "📉⚠️", VN: "🔴📉"}
_HINTS = {
    VP: "🔥 Strong momentum! Consider riding the wave.",
    P: "💡 Positive outlook. Good entry opportunity.",
    N: "⚖️ Mixed signals. Trade with caution.",
    NG: "⚠️ Bearish pressure. Consider hedging.",
    VN: "🚨 High risk! Protect your portfolio.",
}


def draw_news_card(rng: random.Random) -> NewsCard:
    return rng.choice(NEWS_CARDS)


def class_impact(card: NewsCard, tuning: MarketTuning = DEFAULT_TUNING) -> dict[AssetClass, float]:
    """Per-class impact factor: polarity x sensitivity, summed over routed sectors."""
    multiplier = tuning.sentiment_multiplier[card.sentiment]
    impact: dict[AssetClass, float] = {}
    for sector in card.affected_sectors:
        for cls in SECTOR_TO_CLASSES[sector]:
            impact[cls] = impact.get(cls, 0.0) + multiplier * tuning.sector_sensitivity[sector]
    return {cls: round(value, 3) for cls, value in impact.items()}


def news_card_to_event(
    card: NewsCard,
    rounds_remaining: int | None = None,
    tuning: MarketTuning = DEFAULT_TUNING,
) -> MarketEvent:
    return MarketEvent(
        id=f"news-{card.id}",
        title=card.title,
        description=card.description,
        sentiment=card.sentiment.polarity,
        emotion=card.sentiment.value,
        intensity=_INTENSITY[card.sentiment],
        sectors=list(card.affected_sectors),
        impact=class_impact(card, tuning),
        duration=card.duration_rounds,
        rounds_remaining=card.duration_rounds if rounds_remaining is None else rounds_remaining,
        hint=_HINTS[card.sentiment],
        emoji=_EMOJI[card.sentiment],
        volatility_multiplier=1.5 if card.sentiment in (VP, VN) else 1.2,
    )
