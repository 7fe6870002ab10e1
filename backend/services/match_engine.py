"""
Match state machine.

One `MatchEngine` owns one `GameState` and is the only thing that mutates it
or publishes it. Time advances through a table of phase steps driven by a
single scheduler handle:

    pre-match:  INTRO -> AVATAR_SELECTION -> STRATEGY_SELECTION
                -> SCENARIO_TEASER -> TUTORIAL -> start game
    round:      NEWS -> TRADING -> next round | finish

Client commands return a CommandResult and broadcast a full snapshot when
accepted.
"""
import logging
import random
import uuid
from typing import Awaitable, Callable, Optional, Sequence

from catalog.game_data import BAILOUT, RISK_SHIELD, draw_scenario
from catalog.news import NewsCard, draw_news_card, news_card_to_event
from catalog.tuning import DEFAULT_TUNING, MarketTuning
from config import Settings, get_settings
from models.enums import (
    AvatarId,
    CommandResult,
    GamePhase,
    PreMatchSubPhase,
    RoundStage,
    StrategyId,
)
from models.game_state import GameState
from schemas.results import GameResult
from services import portfolio, trading
from services.coach.base import CritiqueProvider
from services.market_engine import MarketEngine
from services.results import ResultsGenerator
from services.scheduler import Scheduler, TimerHandle
from services.sentiment import SentimentLedger
from services.state_factory import build_initial_state, new_player

logger = logging.getLogger(__name__)


class PhaseStep:
    """One timed step of the phase table."""

    def __init__(
        self,
        key: PreMatchSubPhase | RoundStage,
        duration: int,
        ready: Optional[Callable[[], bool]] = None,
        on_enter: Optional[Callable[[], None]] = None,
        on_tick: Optional[Callable[[int], None]] = None,
    ):
        self.key = key
        self.duration = duration
        self.ready = ready
        self.on_enter = on_enter
        self.on_tick = on_tick


class MatchListener:
    """Receives every published snapshot and the final results."""

    def on_state(self, snapshot: dict) -> None:
        pass

    def on_results(self, results: list[GameResult]) -> None:
        pass


class MatchEngine:
    def __init__(
        self,
        scheduler: Scheduler,
        critic: CritiqueProvider,
        settings: Optional[Settings] = None,
        tuning: MarketTuning = DEFAULT_TUNING,
        rng: Optional[random.Random] = None,
        match_id: Optional[str] = None,
    ):
        self.settings = settings or get_settings()
        self.tuning = tuning
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.match_id = match_id or uuid.uuid4().hex[:8]
        self.results_generator = ResultsGenerator(critic, self.settings, tuning)
        self.market = MarketEngine(self.settings.trading_phase_seconds, tuning, self.rng)

        self.state: GameState = build_initial_state(self.match_id, self.settings)
        self.sentiment = SentimentLedger(self.state.sentiment, tuning)
        self.last_results: Optional[list[GameResult]] = None

        self._listeners: list[MatchListener] = []
        self._timer: Optional[TimerHandle] = None
        self._epoch = 0

        self._steps: Sequence[PhaseStep] = ()
        self._step_index = 0
        self._step_elapsed = 0
        self._on_steps_done: Optional[Callable[[], Awaitable[None]]] = None

        self._active_card: Optional[NewsCard] = None
        self._card_rounds_left = 0
        self._last_polarity: Optional[str] = None
        self.polarity_streak = 0

        s = self.settings
        self.pre_match_steps: tuple[PhaseStep, ...] = (
            PhaseStep(PreMatchSubPhase.INTRO, s.intro_seconds),
            PhaseStep(PreMatchSubPhase.AVATAR_SELECTION, s.avatar_selection_seconds,
                      ready=self._all_avatars_selected),
            PhaseStep(PreMatchSubPhase.STRATEGY_SELECTION, s.strategy_selection_seconds,
                      ready=self._all_strategies_selected),
            PhaseStep(PreMatchSubPhase.SCENARIO_TEASER, s.scenario_teaser_seconds,
                      on_enter=self._draw_scenario),
            PhaseStep(PreMatchSubPhase.TUTORIAL, s.tutorial_seconds),
        )
        self.round_steps: tuple[PhaseStep, ...] = (
            PhaseStep(RoundStage.NEWS, s.news_phase_seconds, on_enter=self._setup_round),
            PhaseStep(RoundStage.TRADING, s.trading_phase_seconds, on_tick=self._trading_tick),
        )

    # ── LISTENERS ──────────────────────────────────────────────────────

    def add_listener(self, listener: MatchListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: MatchListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def broadcast(self) -> None:
        snapshot = self.state.snapshot()
        for listener in list(self._listeners):
            listener.on_state(snapshot)

    def _publish_results(self, results: list[GameResult]) -> None:
        for listener in list(self._listeners):
            listener.on_results(results)

    # ── TIMER ──────────────────────────────────────────────────────────

    @property
    def timer_active(self) -> bool:
        return self._timer is not None and not self._timer.cancelled

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _start_timer(self) -> None:
        self._cancel_timer()
        self._timer = self.scheduler.call_every(self.settings.tick_seconds, self._tick)

    # ── PHASE TABLE DRIVER ─────────────────────────────────────────────

    def _run_steps(self, steps: Sequence[PhaseStep], on_done: Callable[[], Awaitable[None]]) -> None:
        self._steps = steps
        self._on_steps_done = on_done
        self._enter_step(0)

    def _enter_step(self, index: int) -> None:
        step = self._steps[index]
        self._step_index = index
        self._step_elapsed = 0
        if isinstance(step.key, PreMatchSubPhase):
            self.state.sub_phase = step.key
        else:
            self.state.round_stage = step.key
        self.state.time_remaining = step.duration
        if step.on_enter:
            step.on_enter()
        logger.info("Entering %s (%ds)", step.key.value, step.duration)
        self._start_timer()
        self.broadcast()

    async def _tick(self) -> None:
        step = self._steps[self._step_index]
        self._step_elapsed += 1
        self.state.time_remaining = max(0, self.state.time_remaining - 1)
        if step.on_tick:
            step.on_tick(self._step_elapsed)
        portfolio.refresh(self.state.players, self.state.assets, self.tuning)
        self.broadcast()

        if self.state.time_remaining <= 0 or (step.ready is not None and step.ready()):
            await self._advance()

    async def _advance(self) -> None:
        if self._step_index + 1 < len(self._steps):
            self._enter_step(self._step_index + 1)
            return
        self._cancel_timer()
        if self._on_steps_done is not None:
            await self._on_steps_done()

    # ── PRE-MATCH ──────────────────────────────────────────────────────

    def start_pre_match(self) -> CommandResult:
        """Kick off the pre-match countdown. No-op once running or playing."""
        if self.state.phase != GamePhase.PRE_MATCH or self.timer_active:
            return CommandResult.WRONG_PHASE
        logger.info("Match %s: pre-match starting", self.match_id)
        self._run_steps(self.pre_match_steps, self._start_game)
        return CommandResult.ACCEPTED

    def _all_avatars_selected(self) -> bool:
        players = self.state.connected_players()
        return bool(players) and all(p.avatar_id is not None for p in players)

    def _all_strategies_selected(self) -> bool:
        players = self.state.connected_players()
        return bool(players) and all(p.strategy_id is not None for p in players)

    def _draw_scenario(self) -> None:
        self.state.active_scenario = draw_scenario(self.rng)
        logger.info("Scenario drawn: %s", self.state.active_scenario.id)

    # ── ROUNDS ─────────────────────────────────────────────────────────

    async def _start_game(self) -> None:
        self.state.phase = GamePhase.PLAYING
        logger.info("Match %s: game started with %d players", self.match_id, len(self.state.players))
        self._run_steps(self.round_steps, self._end_round)

    def _setup_round(self) -> None:
        state = self.state
        state.current_round += 1
        state.fear_zone_active = state.current_round == state.max_rounds
        self.market.begin_round(state.assets)
        self.sentiment.decay()

        if self._active_card is not None and self._card_rounds_left > 0:
            self._card_rounds_left -= 1
            card = self._active_card
            logger.info("Round %d: news continues: %s", state.current_round, card.title)
        else:
            card = draw_news_card(self.rng)
            self._active_card = card
            self._card_rounds_left = card.duration_rounds - 1
            self.sentiment.apply_news(card)
            self.sentiment.apply_rotation(card, self.rng)
            logger.info("Round %d: news drawn: %s (%s)", state.current_round, card.title, card.sentiment.value)

        polarity = card.sentiment.polarity
        if polarity == self._last_polarity:
            self.polarity_streak += 1
        else:
            self.polarity_streak = 1
        self._last_polarity = polarity

        state.active_event = news_card_to_event(card, self._card_rounds_left, self.tuning)

    def _trading_tick(self, elapsed: int) -> None:
        self.market.tick(
            self.state.assets,
            elapsed,
            self._active_card,
            self.state.sentiment,
            scenario=self.state.active_scenario,
            polarity_streak=self.polarity_streak,
        )

    async def _end_round(self) -> None:
        logger.info("Round %d complete", self.state.current_round)
        if self.state.current_round >= self.state.max_rounds:
            await self._finish()
        else:
            self._run_steps(self.round_steps, self._end_round)

    async def _finish(self) -> None:
        self._cancel_timer()
        state = self.state
        state.phase = GamePhase.FINISHED
        state.round_stage = None
        state.time_remaining = 0
        portfolio.refresh(state.players, state.assets, self.tuning)
        logger.info("Match %s finished after %d rounds", self.match_id, state.current_round)
        self.broadcast()

        epoch = self._epoch
        results = await self.results_generator.generate(list(state.players))
        if epoch != self._epoch:
            logger.info("Match was reset while results were pending; dropping them")
            return
        self.last_results = results
        self._publish_results(results)

    # ── RESET ──────────────────────────────────────────────────────────

    def _reset(self, restart: bool = True) -> None:
        self._cancel_timer()
        self._epoch += 1
        keep = [(p.id, p.name) for p in self.state.connected_players()]
        self.state = build_initial_state(self.match_id, self.settings, players=keep)
        self.sentiment = SentimentLedger(self.state.sentiment, self.tuning)
        self.market.round_open = {}
        self._steps = ()
        self._active_card = None
        self._card_rounds_left = 0
        self._last_polarity = None
        self.polarity_streak = 0
        self.last_results = None
        logger.info("Match %s reset (%d players kept)", self.match_id, len(keep))

        if restart and keep:
            self.start_pre_match()
        else:
            self.broadcast()

    def reset(self) -> CommandResult:
        """Operator reset: same as play-again, without a requesting player."""
        self._reset()
        return CommandResult.ACCEPTED

    # ── PLAYER COMMANDS ────────────────────────────────────────────────

    def _rejected(self, command: str, conn_id: str, result: CommandResult) -> CommandResult:
        logger.debug("Ignored %s from %s: %s", command, conn_id, result.value)
        return result

    def _accepted(self) -> CommandResult:
        portfolio.refresh(self.state.players, self.state.assets, self.tuning)
        self.broadcast()
        return CommandResult.ACCEPTED

    def join(self, conn_id: str, name: str) -> CommandResult:
        name = (name or "").strip()
        if not name:
            return self._rejected("join", conn_id, CommandResult.UNKNOWN_CHOICE)
        if self.state.player(conn_id) is not None:
            return self._rejected("join", conn_id, CommandResult.NAME_IN_USE)

        existing = self.state.player_by_name(name)
        if existing is not None:
            if existing.connected:
                return self._rejected("join", conn_id, CommandResult.NAME_IN_USE)
            logger.info("%s reconnected (%s -> %s)", name, existing.id, conn_id)
            existing.id = conn_id
            existing.connected = True
        else:
            self.state.players.append(new_player(conn_id, name, self.settings))
            logger.info("%s joined match %s", name, self.match_id)

        if (
            self.settings.auto_start_on_join
            and self.state.phase == GamePhase.PRE_MATCH
            and not self.timer_active
        ):
            self.start_pre_match()
        return self._accepted()

    def disconnect(self, conn_id: str) -> CommandResult:
        player = self.state.player(conn_id)
        if player is None:
            return self._rejected("disconnect", conn_id, CommandResult.UNKNOWN_PLAYER)
        player.connected = False
        logger.info("%s disconnected", player.name)
        if not self.state.connected_players():
            self._reset(restart=False)
            return CommandResult.ACCEPTED
        self.broadcast()
        return CommandResult.ACCEPTED

    def _in_sub_phase(self, sub_phase: PreMatchSubPhase) -> bool:
        return (
            self.state.phase == GamePhase.PRE_MATCH
            and self.timer_active
            and self.state.sub_phase == sub_phase
        )

    def _selection_made(self) -> CommandResult:
        """Broadcast a selection; skip the rest of the countdown once everyone has chosen."""
        step = self._steps[self._step_index]
        if step.ready is not None and step.ready() and self._step_index + 1 < len(self._steps):
            self._enter_step(self._step_index + 1)
            return CommandResult.ACCEPTED
        return self._accepted()

    def select_avatar(self, conn_id: str, avatar_id) -> CommandResult:
        if not self._in_sub_phase(PreMatchSubPhase.AVATAR_SELECTION):
            return self._rejected("select_avatar", conn_id, CommandResult.WRONG_PHASE)
        player = self.state.player(conn_id)
        if player is None:
            return self._rejected("select_avatar", conn_id, CommandResult.UNKNOWN_PLAYER)
        try:
            player.avatar_id = AvatarId(avatar_id)
        except ValueError:
            return self._rejected("select_avatar", conn_id, CommandResult.UNKNOWN_CHOICE)
        return self._selection_made()

    def select_strategy(self, conn_id: str, strategy_id) -> CommandResult:
        if not self._in_sub_phase(PreMatchSubPhase.STRATEGY_SELECTION):
            return self._rejected("select_strategy", conn_id, CommandResult.WRONG_PHASE)
        player = self.state.player(conn_id)
        if player is None:
            return self._rejected("select_strategy", conn_id, CommandResult.UNKNOWN_PLAYER)
        try:
            player.strategy_id = StrategyId(strategy_id)
        except ValueError:
            return self._rejected("select_strategy", conn_id, CommandResult.UNKNOWN_CHOICE)
        return self._selection_made()

    def buy(self, conn_id: str, asset_id: str, quantity: float) -> CommandResult:
        result = trading.buy(self.state, conn_id, asset_id, quantity, self.tuning)
        if not result.accepted:
            return self._rejected("buy", conn_id, result)
        return self._accepted()

    def sell(self, conn_id: str, asset_id: str, quantity: float) -> CommandResult:
        result = trading.sell(self.state, conn_id, asset_id, quantity, self.tuning)
        if not result.accepted:
            return self._rejected("sell", conn_id, result)
        return self._accepted()

    def use_power_up(self, conn_id: str, power_up_id: str) -> CommandResult:
        if self.state.phase != GamePhase.PLAYING:
            return self._rejected("use_power_up", conn_id, CommandResult.WRONG_PHASE)
        player = self.state.player(conn_id)
        if player is None:
            return self._rejected("use_power_up", conn_id, CommandResult.UNKNOWN_PLAYER)
        power_up = player.power_up(power_up_id)
        if power_up is None:
            return self._rejected("use_power_up", conn_id, CommandResult.UNKNOWN_CHOICE)
        if power_up.uses_left <= 0:
            return self._rejected("use_power_up", conn_id, CommandResult.POWER_UP_UNAVAILABLE)

        power_up.uses_left -= 1
        if power_up.id == RISK_SHIELD:
            player.risk_shield_active = True
        elif power_up.id == BAILOUT:
            player.cash += self.tuning.bailout_cash
        logger.info("%s used %s", player.name, power_up.name)
        return self._accepted()

    def play_again(self, conn_id: str) -> CommandResult:
        if self.state.player(conn_id) is None:
            return self._rejected("play_again", conn_id, CommandResult.UNKNOWN_PLAYER)
        self._reset()
        return CommandResult.ACCEPTED

    def close(self) -> None:
        """Stop the running timer; used on application shutdown."""
        self._cancel_timer()
