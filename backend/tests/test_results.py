"""
Tests for end-of-match scoring, ranking and critique fallback.
"""
import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from models.enums import AssetClass, StrategyId, TradeSide
from models.player import Holding, PlayerState, Transaction
from schemas.results import Critique, PlayerSummary
from services.coach.heuristics import HeuristicCoach
from services.results import ResultsGenerator


def _player(pid, name, total_value, risk=0, strategy=None, holdings=(), trades=()):
    return PlayerState(
        id=pid, name=name, cash=0.0, total_value=total_value, risk_score=risk,
        strategy_id=strategy, holdings=list(holdings), transaction_log=list(trades),
    )


def _holdings(*asset_ids):
    return [Holding(asset_id=a, quantity=1, avg_buy_price=1.0) for a in asset_ids]


class _Hanging:
    async def critique(self, request):
        await asyncio.sleep(30)


class _Exploding:
    async def critique(self, request):
        raise RuntimeError("boom")


class TestScoring:
    def setup_method(self):
        self.gen = ResultsGenerator(HeuristicCoach())

    def test_roi_and_risk_adjusted(self):
        assert self.gen.roi(11_000) == pytest.approx(10.0)
        assert self.gen.roi(9_000) == pytest.approx(-10.0)
        assert self.gen.risk_adjusted(10.0, 40) == pytest.approx(-10.0)

    def test_diversifier_bonus_needs_four_assets(self):
        four = _player("a", "A", 10_000, strategy=StrategyId.DIVERSIFIER,
                       holdings=_holdings("tcs", "doge", "gold-bees", "muni-bond"))
        three = _player("b", "B", 10_000, strategy=StrategyId.DIVERSIFIER,
                        holdings=_holdings("tcs", "doge", "gold-bees"))
        other = _player("c", "C", 10_000, strategy=StrategyId.HIGH_ROLLER,
                        holdings=_holdings("tcs", "doge", "gold-bees", "muni-bond"))
        assert self.gen.final_value(four) == pytest.approx(10_500)
        assert self.gen.final_value(three) == pytest.approx(10_000)
        assert self.gen.final_value(other) == pytest.approx(10_000)


class TestGenerate:
    @pytest.mark.asyncio
    async def test_ranked_by_risk_adjusted_score(self, settings):
        gen = ResultsGenerator(HeuristicCoach(), settings)
        players = [
            _player("a", "Cautious", 10_400, risk=0),    # 4.0
            _player("b", "Gambler", 13_000, risk=90),    # 30 - 45 = -15
            _player("c", "Steady", 11_000, risk=10),     # 10 - 5 = 5
        ]
        results = await gen.generate(players)
        assert [r.player_name for r in results] == ["Steady", "Cautious", "Gambler"]
        assert [r.rank for r in results] == [1, 2, 3]
        scores = [r.risk_adjusted_score for r in results]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_ties_keep_player_order(self, settings):
        gen = ResultsGenerator(HeuristicCoach(), settings)
        players = [_player(str(i), f"P{i}", 10_000) for i in range(4)]
        results = await gen.generate(players)
        assert [r.player_name for r in results] == ["P0", "P1", "P2", "P3"]
        assert [r.rank for r in results] == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_insights_are_strengths_then_mistakes(self, settings):
        critique = Critique(player_summary=PlayerSummary(
            what_you_did_well=["good"],
            mistakes_and_opportunities=["bad"],
            improvement_suggestions=["try"],
        ))
        provider = AsyncMock()
        provider.critique.return_value = critique
        gen = ResultsGenerator(provider, settings)
        results = await gen.generate([_player("a", "A", 10_000)])
        assert results[0].insights == ["good", "bad"]
        provider.critique.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failing_provider_falls_back(self, settings):
        gen = ResultsGenerator(_Exploding(), settings)
        results = await gen.generate([_player("a", "A", 10_000), _player("b", "B", 9_000)])
        assert len(results) == 2
        for r in results:
            assert r.player_summary.what_you_did_well
            assert r.player_summary.mistakes_and_opportunities
            assert r.player_summary.improvement_suggestions

    @pytest.mark.asyncio
    async def test_hanging_provider_is_bounded(self, settings):
        settings = settings.model_copy(update={"critique_timeout_seconds": 0.1})
        gen = ResultsGenerator(_Hanging(), settings)
        players = [_player(str(i), f"P{i}", 10_000 + i) for i in range(5)]

        start = time.perf_counter()
        results = await gen.generate(players)
        elapsed = time.perf_counter() - start

        # concurrent, so one timeout for everyone
        assert elapsed < 2.0
        assert len(results) == 5
        assert all(r.player_summary.what_you_did_well for r in results)

    @pytest.mark.asyncio
    async def test_request_carries_trade_log(self, settings):
        trade = Transaction(round=1, type=TradeSide.BUY, asset_id="doge",
                            asset_type=AssetClass.CRYPTO, amount=10, price=0.15,
                            total_value=1.5, sentiment_at_time=-40)
        gen = ResultsGenerator(HeuristicCoach(), settings)
        request = gen.build_request(_player("a", "A", 10_000, trades=[trade]))
        assert request.transactions == [trade]
        assert request.starting_cash == settings.starting_cash
        assert request.roi == pytest.approx(0.0)
