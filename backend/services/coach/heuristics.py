"""
Deterministic rule-based critique. Used in mock mode, without an API key,
and whenever the Gemini call fails or runs out of time.
"""

from models.enums import StrategyId, TradeSide
from schemas.results import Critique, CritiqueRequest, LearningCard, PlayerSummary
from services.coach.base import CritiqueProvider
from services.coach.helpers import (
    FEAR_SENTIMENT,
    HIGH_RISK,
    HYPE_SENTIMENT,
    MAX_LEARNING_CARDS,
)

# ── Learning card library ────────────────────────────────────────────────────

CARD_LIBRARY: dict[str, LearningCard] = {
    "diversification": LearningCard(
        title="Diversification",
        text="Mixing different kinds of investments means one bad headline can't sink you.",
        deep_dive=(
            "Assets in different sectors react differently to the same news. Holding "
            "a spread of stocks, bonds, ETFs and crypto smooths the ride."
        ),
        search_query="what is portfolio diversification",
    ),
    "fomo": LearningCard(
        title="FOMO",
        text="Fear Of Missing Out pushes traders to buy after the move has already happened.",
        deep_dive=(
            "When sentiment is already euphoric, most of the good news is priced in. "
            "Late buyers often become the exit liquidity for early ones."
        ),
        search_query="FOMO investing buying the top",
    ),
    "panic_selling": LearningCard(
        title="HODL vs Panic Selling",
        text="Selling into fear locks in losses that might have recovered.",
        deep_dive=(
            "Markets overreact to bad news in the short term. A plan decided before "
            "the headline is worth more than a reaction decided during it."
        ),
        search_query="panic selling stock market behavior",
    ),
    "volatility": LearningCard(
        title="Volatility",
        text="Volatility measures how wildly a price swings. High volatility cuts both ways.",
        deep_dive=(
            "Crypto and growth stocks can double or halve in a session. Size positions "
            "so a bad swing hurts but doesn't end your game."
        ),
        search_query="what is volatility in investing",
    ),
    "contrarian": LearningCard(
        title="Buy Fear, Sell Greed",
        text="The best prices usually show up when everyone else is scared.",
        deep_dive=(
            "Contrarian traders look for assets that sentiment has pushed below fair "
            "value. It takes conviction and a stop-loss plan."
        ),
        search_query="contrarian investing strategy",
    ),
    "news": LearningCard(
        title="News Drives Markets",
        text="React quickly to news but don't panic sell.",
        deep_dive="Markets overreact to news in the short term. Smart traders buy fear and sell greed.",
        search_query="how news affects stock prices",
    ),
}


class HeuristicCoach(CritiqueProvider):
    """Rule-based coach. Never raises for a well-formed request."""

    async def critique(self, request: CritiqueRequest) -> Critique:
        return self.analyze(request)

    def analyze(self, request: CritiqueRequest) -> Critique:
        well: list[str] = []
        mistakes: list[str] = []
        suggestions: list[str] = []
        topics: list[str] = []

        buys = [t for t in request.transactions if t.type == TradeSide.BUY]
        sells = [t for t in request.transactions if t.type == TradeSide.SELL]
        distinct_bought = {t.asset_id for t in buys}

        if not request.transactions:
            mistakes.append("You sat this one out. No trades means no learning (and no gains).")
            suggestions.append("Next match, place at least one small trade when the first headline drops.")
            topics.append("news")

        # Diversification
        if len(distinct_bought) >= 3:
            well.append(f"Nice spread: you bought {len(distinct_bought)} different assets.")
            topics.append("diversification")
        elif len(distinct_bought) == 1:
            mistakes.append("All your buys went into a single asset. That's concentration risk.")
            suggestions.append("Spread your cash over at least three assets from different sectors.")
            topics.append("diversification")

        # Contrarian buys
        fear_buys = [t for t in buys if t.sentiment_at_time <= FEAR_SENTIMENT]
        if fear_buys:
            well.append(
                f"You bought {fear_buys[0].asset_id} while the market was fearful. "
                "That's contrarian thinking."
            )
            topics.append("contrarian")

        # Hype chasing
        hype_buys = [t for t in buys if t.sentiment_at_time >= HYPE_SENTIMENT]
        if len(hype_buys) >= 2:
            mistakes.append(
                f"{len(hype_buys)} of your buys came when sentiment was already euphoric. "
                "Watch out for FOMO."
            )
            suggestions.append("When everyone is cheering, ask how much good news is already in the price.")
            topics.append("fomo")

        # Panic selling
        panic_sells = [t for t in sells if t.sentiment_at_time <= FEAR_SENTIMENT]
        if panic_sells:
            mistakes.append(
                f"You sold {len(panic_sells)} time(s) into heavy fear. Panic selling locks in losses."
            )
            suggestions.append("Decide your exit before the bad headline, not during it.")
            topics.append("panic_selling")

        # Risk
        if request.risk_score >= HIGH_RISK:
            mistakes.append(f"Your risk score finished at {request.risk_score}/100. That's a lot of exposure.")
            suggestions.append("Balance volatile crypto with bonds or ETFs to bring risk down.")
            topics.append("volatility")

        # Outcome
        if request.roi > 0:
            well.append(f"You finished in profit: {request.roi:+.1f}% ROI.")
        elif request.roi < 0:
            mistakes.append(f"You finished at {request.roi:.1f}% ROI. Review which trade hurt the most.")

        if request.strategy_id == StrategyId.DIVERSIFIER and request.distinct_assets_held < 4:
            suggestions.append("Your Diversifier bonus needs 4+ different assets held at the end.")

        # Filler so every section has something to say
        if not well:
            well.append("You participated in the market!")
        if not mistakes:
            mistakes.append("Consider diversifying more.")
        if not suggestions:
            suggestions.append("Watch the news for trading signals.")
        if not topics:
            topics.append("news")

        cards: list[LearningCard] = []
        for topic in dict.fromkeys(topics):
            cards.append(CARD_LIBRARY[topic].model_copy())
            if len(cards) == MAX_LEARNING_CARDS:
                break

        return Critique(
            player_summary=PlayerSummary(
                what_you_did_well=well,
                mistakes_and_opportunities=mistakes,
                improvement_suggestions=suggestions,
            ),
            learning_cards=cards,
        )
