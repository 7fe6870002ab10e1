"""
Websocket session gateway.

Translates inbound JSON frames into engine commands and fans engine
snapshots/results out to every connected socket. Command results are never
sent back; rejected commands only show up in the debug log.
"""
import asyncio
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from models.enums import CommandResult
from schemas.game import (
    BuyAsset,
    GameOverFrame,
    GameStateFrame,
    JoinGame,
    PlayAgain,
    SelectAvatar,
    SelectStrategy,
    SellAsset,
    UsePowerUp,
    client_command_adapter,
)
from schemas.results import GameResult
from services.match_engine import MatchEngine, MatchListener

router = APIRouter(tags=["game"])
logger = logging.getLogger(__name__)


class ConnectionHub(MatchListener):
    """One outbound queue per socket; engine events are queued, never awaited."""

    def __init__(self):
        self.queues: dict[str, asyncio.Queue] = {}

    def register(self, conn_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self.queues[conn_id] = queue
        return queue

    def unregister(self, conn_id: str) -> None:
        self.queues.pop(conn_id, None)

    def _fan_out(self, frame: dict) -> None:
        for queue in self.queues.values():
            queue.put_nowait(frame)

    def on_state(self, snapshot: dict) -> None:
        self._fan_out(GameStateFrame(state=snapshot).model_dump(mode="json"))

    def on_results(self, results: list[GameResult]) -> None:
        frame = GameOverFrame(results=[r.model_dump(mode="json") for r in results])
        self._fan_out(frame.model_dump(mode="json"))


def dispatch(engine: MatchEngine, conn_id: str, raw: str) -> Optional[CommandResult]:
    """Validate one inbound frame and forward it. Malformed frames are dropped."""
    try:
        command = client_command_adapter.validate_json(raw)
    except ValidationError as e:
        logger.debug("Dropped malformed frame from %s: %s", conn_id, e.errors()[:1])
        return None

    if isinstance(command, JoinGame):
        return engine.join(conn_id, command.name)
    if isinstance(command, SelectAvatar):
        return engine.select_avatar(conn_id, command.avatar_id)
    if isinstance(command, SelectStrategy):
        return engine.select_strategy(conn_id, command.strategy_id)
    if isinstance(command, BuyAsset):
        return engine.buy(conn_id, command.asset_id, command.amount)
    if isinstance(command, SellAsset):
        return engine.sell(conn_id, command.asset_id, command.amount)
    if isinstance(command, UsePowerUp):
        return engine.use_power_up(conn_id, command.power_up_id)
    if isinstance(command, PlayAgain):
        return engine.play_again(conn_id)
    return None


async def _drain(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        frame = await queue.get()
        await websocket.send_json(frame)


@router.websocket("/ws")
async def game_socket(websocket: WebSocket):
    await websocket.accept()
    engine: MatchEngine = websocket.app.state.match
    hub: ConnectionHub = websocket.app.state.hub

    conn_id = uuid.uuid4().hex
    queue = hub.register(conn_id)
    queue.put_nowait(GameStateFrame(state=engine.state.snapshot()).model_dump(mode="json"))
    writer = asyncio.create_task(_drain(websocket, queue))
    logger.info("Socket %s connected", conn_id)

    try:
        while True:
            raw = await websocket.receive_text()
            dispatch(engine, conn_id, raw)
    except WebSocketDisconnect:
        logger.info("Socket %s closed", conn_id)
    finally:
        hub.unregister(conn_id)
        writer.cancel()
        engine.disconnect(conn_id)
