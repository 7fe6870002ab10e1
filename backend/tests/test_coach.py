"""
Tests for the critique providers: heuristic rules and the Gemini coach.
"""
import json
from unittest.mock import MagicMock

import pytest

from models.enums import AssetClass, StrategyId, TradeSide
from models.player import Transaction
from schemas.results import CritiqueRequest
from services.coach import GeminiCoach, HeuristicCoach, _cache, _cache_key, _transaction_trace


def _tx(side, asset_id, sentiment=0.0, asset_type=AssetClass.STOCK, round_=1):
    return Transaction(round=round_, type=side, asset_id=asset_id, asset_type=asset_type,
                       amount=1, price=10.0, total_value=10.0, sentiment_at_time=sentiment)


def _request(transactions=(), roi=0.0, risk=0, strategy=None, held=0):
    return CritiqueRequest(
        player_id="p1", player_name="Alice", strategy_id=strategy,
        starting_cash=10_000, final_value=10_000 * (1 + roi / 100), roi=roi,
        risk_score=risk, distinct_assets_held=held, transactions=list(transactions),
    )


def _all_text(critique):
    s = critique.player_summary
    return " ".join(s.what_you_did_well + s.mistakes_and_opportunities + s.improvement_suggestions)


class TestHeuristicCoach:
    def setup_method(self):
        self.coach = HeuristicCoach()

    def test_no_trades(self):
        critique = self.coach.analyze(_request())
        assert "sat this one out" in _all_text(critique)
        assert critique.learning_cards

    def test_diversification_praise(self):
        trades = [_tx(TradeSide.BUY, a) for a in ("tcs", "doge", "muni-bond")]
        critique = self.coach.analyze(_request(trades))
        assert any("3 different assets" in s for s in critique.player_summary.what_you_did_well)
        assert critique.learning_cards[0].title == "Diversification"

    def test_concentration_flag(self):
        trades = [_tx(TradeSide.BUY, "doge"), _tx(TradeSide.BUY, "doge")]
        critique = self.coach.analyze(_request(trades))
        assert any("concentration" in s for s in critique.player_summary.mistakes_and_opportunities)

    def test_contrarian_buy(self):
        critique = self.coach.analyze(_request([_tx(TradeSide.BUY, "doge", sentiment=-45)]))
        assert any("contrarian" in s for s in critique.player_summary.what_you_did_well)

    def test_hype_chasing_needs_two_buys(self):
        one = self.coach.analyze(_request([_tx(TradeSide.BUY, "tcs", sentiment=60)]))
        assert "FOMO" not in _all_text(one)
        two = self.coach.analyze(_request([
            _tx(TradeSide.BUY, "tcs", sentiment=60),
            _tx(TradeSide.BUY, "infy", sentiment=30),
        ]))
        assert "FOMO" in _all_text(two)

    def test_panic_selling(self):
        trades = [_tx(TradeSide.BUY, "tcs"), _tx(TradeSide.SELL, "tcs", sentiment=-50)]
        critique = self.coach.analyze(_request(trades))
        assert any("Panic selling" in s for s in critique.player_summary.mistakes_and_opportunities)

    def test_high_risk_flag(self):
        critique = self.coach.analyze(_request([_tx(TradeSide.BUY, "doge")], risk=85))
        assert "85/100" in _all_text(critique)

    def test_profit_and_loss_notes(self):
        up = self.coach.analyze(_request([_tx(TradeSide.BUY, "tcs")], roi=12.5))
        assert any("+12.5%" in s for s in up.player_summary.what_you_did_well)
        down = self.coach.analyze(_request([_tx(TradeSide.BUY, "tcs")], roi=-8.0))
        assert any("-8.0%" in s for s in down.player_summary.mistakes_and_opportunities)

    def test_every_section_non_empty_and_cards_capped(self):
        trades = [
            _tx(TradeSide.BUY, "tcs", sentiment=-40),
            _tx(TradeSide.BUY, "doge", sentiment=50),
            _tx(TradeSide.BUY, "shib", sentiment=50),
            _tx(TradeSide.SELL, "doge", sentiment=-60),
        ]
        critique = self.coach.analyze(_request(trades, risk=90, strategy=StrategyId.DIVERSIFIER))
        s = critique.player_summary
        assert s.what_you_did_well and s.mistakes_and_opportunities and s.improvement_suggestions
        assert 1 <= len(critique.learning_cards) <= 3

    @pytest.mark.asyncio
    async def test_async_interface(self):
        critique = await self.coach.critique(_request())
        assert critique.player_summary.what_you_did_well


class TestHelpers:
    def test_trace_lists_each_trade(self):
        trace = _transaction_trace([_tx(TradeSide.BUY, "tcs", 35), _tx(TradeSide.SELL, "tcs", -10)])
        lines = trace.splitlines()
        assert len(lines) == 2
        assert "BUY" in lines[0] and "tcs" in lines[0] and "+35" in lines[0]

    def test_trace_without_trades(self):
        assert _transaction_trace([]) == "(no trades)"

    def test_cache_key_changes_with_request(self):
        assert _cache_key(_request()) == _cache_key(_request())
        assert _cache_key(_request()) != _cache_key(_request(roi=5.0))


def _gemini_payload(cards=1):
    return {
        "player_summary": {
            "what_you_did_well": ["Bought the dip on doge in round 2."],
            "mistakes_and_opportunities": ["Held too much crypto."],
            "improvement_suggestions": ["Add bonds."],
        },
        "learning_cards": [
            {"title": f"Card {i}", "text": "t", "deep_dive": "d", "search_query": "q"}
            for i in range(cards)
        ],
    }


class TestGeminiCoach:
    def setup_method(self):
        _cache.clear()

    def _coach(self, settings, text):
        settings = settings.model_copy(update={"use_mock_gemini": False, "gemini_max_retries": 1})
        client = MagicMock()
        client.models.generate_content.return_value = MagicMock(text=text)
        return GeminiCoach(settings, client=client), client

    @pytest.mark.asyncio
    async def test_mock_mode_uses_heuristic(self, settings):
        coach = GeminiCoach(settings)
        assert coach.client is None
        critique = await coach.critique(_request())
        assert "sat this one out" in _all_text(critique)

    @pytest.mark.asyncio
    async def test_valid_response_is_parsed(self, settings):
        coach, client = self._coach(settings, json.dumps(_gemini_payload()))
        critique = await coach.critique(_request([_tx(TradeSide.BUY, "doge")]))
        assert critique.player_summary.what_you_did_well == ["Bought the dip on doge in round 2."]
        assert critique.learning_cards[0].title == "Card 0"
        client.models.generate_content.assert_called_once()

    @pytest.mark.asyncio
    async def test_learning_cards_trimmed_to_three(self, settings):
        coach, _ = self._coach(settings, json.dumps(_gemini_payload(cards=5)))
        critique = await coach.critique(_request())
        assert len(critique.learning_cards) == 3

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(self, settings):
        coach, client = self._coach(settings, json.dumps(_gemini_payload()))
        request = _request([_tx(TradeSide.BUY, "doge")])
        await coach.critique(request)
        await coach.critique(request)
        assert client.models.generate_content.call_count == 1

    @pytest.mark.asyncio
    async def test_invalid_json_falls_back(self, settings):
        coach, _ = self._coach(settings, "not json at all")
        critique = await coach.critique(_request())
        assert "sat this one out" in _all_text(critique)

    @pytest.mark.asyncio
    async def test_schema_mismatch_falls_back(self, settings):
        payload = _gemini_payload()
        payload["player_summary"]["what_you_did_well"] = []
        coach, _ = self._coach(settings, json.dumps(payload))
        critique = await coach.critique(_request())
        assert "sat this one out" in _all_text(critique)

    @pytest.mark.asyncio
    async def test_transport_error_falls_back(self, settings):
        coach, client = self._coach(settings, "")
        client.models.generate_content.side_effect = ConnectionError("network down")
        critique = await coach.critique(_request())
        assert critique.player_summary.improvement_suggestions

    def test_prompt_includes_trade_log_and_scores(self):
        request = _request([_tx(TradeSide.BUY, "doge", sentiment=-40)], roi=7.5, risk=55)
        prompt = GeminiCoach._build_critique_prompt(request)
        assert "doge" in prompt
        assert "+7.50%" in prompt
        assert "55/100" in prompt
