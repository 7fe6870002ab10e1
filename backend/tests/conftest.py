"""Shared test configuration."""
import sys
import os
import random

import pytest

# Add backend directory to path so imports work
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Force mock mode for all tests
os.environ["USE_MOCK_GEMINI"] = "true"
os.environ["GEMINI_API_KEY"] = ""

from config import Settings  # noqa: E402
from services.coach.heuristics import HeuristicCoach  # noqa: E402
from services.match_engine import MatchEngine, MatchListener  # noqa: E402
from services.scheduler import Scheduler, TimerHandle  # noqa: E402


# ── Manual scheduler: ticks only when the test says so ───────────────────────

class ManualHandle(TimerHandle):
    def __init__(self, period, callback):
        self.period = period
        self.callback = callback
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class ManualScheduler(Scheduler):
    def __init__(self):
        self.handles: list[ManualHandle] = []

    def call_every(self, period, callback):
        handle = ManualHandle(period, callback)
        self.handles.append(handle)
        return handle

    @property
    def live(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    async def advance(self, ticks: int = 1) -> None:
        """Fire every live handle once per tick. Handles created mid-tick wait for the next one."""
        for _ in range(ticks):
            for handle in self.live:
                if not handle.cancelled:
                    await handle.callback()


class RecordingListener(MatchListener):
    def __init__(self):
        self.states: list[dict] = []
        self.results: list = []

    def on_state(self, snapshot):
        self.states.append(snapshot)

    def on_results(self, results):
        self.results.append(results)


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def settings():
    return Settings(use_mock_gemini=True, gemini_api_key="", critique_timeout_seconds=0.5)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def engine(scheduler, settings, listener):
    eng = MatchEngine(
        scheduler, HeuristicCoach(), settings,
        rng=random.Random(42), match_id="test-match",
    )
    eng.add_listener(listener)
    return eng


@pytest.fixture
def start_match(engine, scheduler):
    """Join players and run the clock until round 1 trading opens."""
    async def _start(*names):
        for i, name in enumerate(names):
            engine.join(f"conn-{i}", name)
        await scheduler.advance(sum(step.duration for step in engine.pre_match_steps))
        await scheduler.advance(engine.settings.news_phase_seconds)
        return engine
    return _start
