"""
Tests for the asyncio timer that drives matches in production.
"""
import asyncio
import random
import time

import pytest

from models.enums import CommandResult, GamePhase, PreMatchSubPhase
from services.coach.base import CritiqueProvider
from services.match_engine import MatchEngine
from services.scheduler import AsyncioScheduler


FAST_TICK = 0.005


class TrackingScheduler(AsyncioScheduler):
    def __init__(self):
        self.handles = []

    def call_every(self, period, callback):
        handle = super().call_every(period, callback)
        self.handles.append(handle)
        return handle

    @property
    def live(self):
        return [h for h in self.handles if not h.cancelled]


class HangingCoach(CritiqueProvider):
    async def critique(self, request):
        await asyncio.sleep(3600)


async def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def fast_settings(settings):
    return settings.model_copy(update={
        "tick_seconds": FAST_TICK,
        "max_rounds": 2,
        "news_phase_seconds": 1,
        "trading_phase_seconds": 1,
        "intro_seconds": 1,
        "avatar_selection_seconds": 1,
        "strategy_selection_seconds": 1,
        "scenario_teaser_seconds": 1,
        "tutorial_seconds": 1,
        "critique_timeout_seconds": 0.2,
    })


class TestAsyncioScheduler:
    @pytest.mark.asyncio
    async def test_fires_until_cancelled(self):
        calls = []

        async def callback():
            calls.append(1)

        handle = AsyncioScheduler().call_every(FAST_TICK, callback)
        await _wait_for(lambda: len(calls) >= 3)
        handle.cancel()
        assert handle.cancelled
        await asyncio.sleep(0.02)
        fired = len(calls)
        await asyncio.sleep(0.05)
        assert len(calls) == fired

    @pytest.mark.asyncio
    async def test_failing_callback_keeps_timer_alive(self):
        calls = []

        async def callback():
            calls.append(1)
            raise ValueError("boom")

        handle = AsyncioScheduler().call_every(FAST_TICK, callback)
        await _wait_for(lambda: len(calls) >= 2)
        handle.cancel()

    @pytest.mark.asyncio
    async def test_callback_may_cancel_its_own_timer(self):
        finished = asyncio.Event()
        holder = {}

        async def callback():
            holder["handle"].cancel()
            await asyncio.sleep(0.02)
            finished.set()

        holder["handle"] = AsyncioScheduler().call_every(FAST_TICK, callback)
        await asyncio.wait_for(finished.wait(), timeout=1)
        assert holder["handle"].cancelled


class TestMatchOnRealTimer:
    @pytest.mark.asyncio
    async def test_full_match_with_hanging_critic(self, fast_settings, listener):
        scheduler = TrackingScheduler()
        engine = MatchEngine(scheduler, HangingCoach(), fast_settings,
                             rng=random.Random(7), match_id="live")
        engine.add_listener(listener)

        assert engine.join("conn-0", "Alice") == CommandResult.ACCEPTED
        await _wait_for(lambda: engine.state.phase == GamePhase.FINISHED)
        await _wait_for(lambda: listener.results)

        results = listener.results[-1]
        assert len(results) == 1
        assert results[0].rank == 1
        assert results[0].player_summary.what_you_did_well
        assert engine.state.current_round == fast_settings.max_rounds
        assert scheduler.live == []

        assert engine.play_again("conn-0") == CommandResult.ACCEPTED
        assert engine.play_again("conn-0") == CommandResult.ACCEPTED
        assert len(scheduler.live) == 1
        assert engine.state.phase == GamePhase.PRE_MATCH
        assert engine.state.sub_phase == PreMatchSubPhase.INTRO

        engine.close()
        assert scheduler.live == []
        await asyncio.sleep(0.02)
        assert all(h.task.done() for h in scheduler.handles)
