"""
End-of-match scoring, ranking and critique fan-out.

Scores are deterministic; critiques come from a CritiqueProvider and are
bounded per player, with the heuristic coach covering any failure.
"""
import asyncio
import logging
from typing import Optional

from catalog.tuning import DEFAULT_TUNING, MarketTuning
from config import Settings, get_settings
from models.enums import StrategyId
from models.player import PlayerState
from schemas.results import Critique, CritiqueRequest, GameResult
from services.coach.base import CritiqueProvider
from services.coach.heuristics import HeuristicCoach

logger = logging.getLogger(__name__)


class ResultsGenerator:
    def __init__(
        self,
        provider: CritiqueProvider,
        settings: Optional[Settings] = None,
        tuning: MarketTuning = DEFAULT_TUNING,
    ):
        self.provider = provider
        self.settings = settings or get_settings()
        self.tuning = tuning
        self.fallback = HeuristicCoach()

    # ── Scoring ────────────────────────────────────────────────────────

    def final_value(self, player: PlayerState) -> float:
        value = player.total_value
        distinct = len({h.asset_id for h in player.holdings})
        if player.strategy_id == StrategyId.DIVERSIFIER and distinct >= self.tuning.diversifier_min_assets:
            value += value * self.tuning.diversifier_bonus
        return value

    def roi(self, final_value: float) -> float:
        start = self.settings.starting_cash
        return (final_value - start) / start * 100

    def risk_adjusted(self, roi: float, risk_score: int) -> float:
        return roi - risk_score * self.tuning.risk_penalty

    def build_request(self, player: PlayerState) -> CritiqueRequest:
        final_value = self.final_value(player)
        return CritiqueRequest(
            player_id=player.id,
            player_name=player.name,
            strategy_id=player.strategy_id,
            avatar_id=player.avatar_id,
            starting_cash=self.settings.starting_cash,
            final_value=final_value,
            roi=self.roi(final_value),
            risk_score=player.risk_score,
            distinct_assets_held=len({h.asset_id for h in player.holdings}),
            transactions=list(player.transaction_log),
        )

    # ── Critique ───────────────────────────────────────────────────────

    async def _critique(self, request: CritiqueRequest) -> Critique:
        try:
            return await asyncio.wait_for(
                self.provider.critique(request),
                timeout=self.settings.critique_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("Critique for %s timed out, falling back to heuristic", request.player_name)
        except Exception as e:
            logger.error("Critique for %s failed, falling back to heuristic: %s", request.player_name, e)
        return self.fallback.analyze(request)

    # ── Public API ─────────────────────────────────────────────────────

    async def generate(self, players: list[PlayerState]) -> list[GameResult]:
        """Score, critique concurrently, and rank. Ties keep player order."""
        requests = [self.build_request(p) for p in players]
        critiques = await asyncio.gather(*(self._critique(r) for r in requests))

        rows = []
        for request, critique in zip(requests, critiques):
            summary = critique.player_summary
            rows.append(dict(
                player_id=request.player_id,
                player_name=request.player_name,
                final_value=request.final_value,
                risk_score=request.risk_score,
                roi=request.roi,
                risk_adjusted_score=self.risk_adjusted(request.roi, request.risk_score),
                strategy_id=request.strategy_id,
                avatar_id=request.avatar_id,
                insights=summary.what_you_did_well + summary.mistakes_and_opportunities,
                player_summary=summary,
                learning_cards=critique.learning_cards,
            ))

        # sorted() is stable
        rows = sorted(rows, key=lambda r: r["risk_adjusted_score"], reverse=True)
        results = [GameResult(rank=i + 1, **row) for i, row in enumerate(rows)]
        logger.info(
            "Results ready: %s",
            ", ".join(f"#{r.rank} {r.player_name} ({r.risk_adjusted_score:.1f})" for r in results),
        )
        return results
