"""Holdem table engine - Texas Hold'em WebSocket server."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional, Set
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from game.runner import Intent, IntentType, TableRunner
from game.table import Table
from models.schemas import (
    AddChipsRequest, JoinTableRequest, PlayerActionRequest, TableRequest,
    TableSettings, WebSocketMessage
)
import config

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


class TableManager:
    """Maps table ids to their runners and player ids to sockets."""

    def __init__(self):
        self.runners: Dict[str, TableRunner] = {}
        self.connections: Dict[str, WebSocket] = {}

    @staticmethod
    def default_settings() -> TableSettings:
        return TableSettings(
            small_blind=config.DEFAULT_SMALL_BLIND,
            big_blind=config.DEFAULT_BIG_BLIND,
            min_buy_in=config.MIN_BUY_IN,
            max_buy_in=config.MAX_BUY_IN,
            max_seats=config.DEFAULT_MAX_SEATS,
            action_timeout=config.ACTION_TIMEOUT_SECONDS,
            disconnect_grace=config.DISCONNECT_GRACE_SECONDS,
            max_missed_turns=config.MAX_MISSED_TURNS,
            rake_percent=config.RAKE_PERCENT,
            rake_cap=config.RAKE_CAP
        )

    def create_table(self, table_id: str, settings: Optional[TableSettings] = None) -> TableRunner:
        """Create a table and start its runner."""
        if settings is None:
            settings = self.default_settings()
        table = Table(table_id, **settings.model_dump())
        runner = TableRunner(table, self.send, next_hand_delay=config.NEXT_HAND_DELAY_SECONDS)
        runner.start()
        self.runners[table_id] = runner
        logger.info("Created table %s (%d/%d)", table_id, settings.small_blind, settings.big_blind)
        return runner

    def get_or_create(self, table_id: str) -> TableRunner:
        runner = self.runners.get(table_id)
        if runner is None:
            runner = self.create_table(table_id)
        return runner

    def get_runner(self, table_id: str) -> Optional[TableRunner]:
        return self.runners.get(table_id)

    def connect(self, player_id: str, websocket: WebSocket):
        previous = self.connections.get(player_id)
        if previous is not None and previous is not websocket:
            logger.info("Player %s connected again, replacing old socket", player_id)
        self.connections[player_id] = websocket

    def disconnect(self, player_id: str, websocket: WebSocket) -> bool:
        """Forget a socket. False if a newer socket already replaced it."""
        if self.connections.get(player_id) is websocket:
            del self.connections[player_id]
            return True
        return False

    async def send(self, player_id: str, message: dict):
        websocket = self.connections.get(player_id)
        if websocket is None:
            return
        await websocket.send_json(message)

    async def shutdown(self):
        await asyncio.gather(*(runner.stop() for runner in self.runners.values()))
        self.runners.clear()


manager = TableManager()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Holdem server starting on %s:%s", config.HOST, config.PORT)
    if config.PRODUCTION:
        logger.info("Running in PRODUCTION mode")
    yield
    await manager.shutdown()


app = FastAPI(title="Holdem Table Engine", lifespan=lifespan)

# CORS middleware for production deployment
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if config.CORS_ALLOW_ALL else config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get('loc', ()))
    if not location:
        return f"Invalid message: {first['msg']}"
    return f"Invalid {location}: {first['msg']}"


async def send_error(websocket: WebSocket, message: str):
    await websocket.send_json({'type': 'error', 'data': {'message': message}})


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers."""
    return {"status": "healthy", "tables": len(manager.runners)}


# WebSocket endpoint
@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, player_id: str, name: Optional[str] = None):
    """WebSocket connection for one authenticated player."""
    await websocket.accept()
    manager.connect(player_id, websocket)
    display_name = (name or "").strip() or player_id
    joined: Set[str] = set()

    try:
        while True:
            raw = await websocket.receive_json()
            try:
                message = WebSocketMessage.model_validate(raw)
                msg_data = message.data or {}

                if message.type == 'join_table':
                    request = JoinTableRequest.model_validate(msg_data)
                    runner = manager.get_or_create(request.table_id)
                    joined.add(request.table_id)
                    runner.submit(Intent(IntentType.JOIN, player_id, {
                        'name': display_name,
                        'buy_in': request.buy_in,
                        'seat': request.seat
                    }))
                    continue

                if message.type == 'player_action':
                    request = PlayerActionRequest.model_validate(msg_data)
                    intent = Intent(IntentType.ACTION, player_id, {
                        'action': request.action,
                        'amount': request.amount,
                        'turn_id': request.turn_id
                    })
                elif message.type == 'add_chips':
                    request = AddChipsRequest.model_validate(msg_data)
                    intent = Intent(IntentType.ADD_CHIPS, player_id, {'amount': request.amount})
                elif message.type in ('leave_table', 'sit_out', 'sit_in'):
                    request = TableRequest.model_validate(msg_data)
                    kind = {
                        'leave_table': IntentType.LEAVE,
                        'sit_out': IntentType.SIT_OUT,
                        'sit_in': IntentType.SIT_IN
                    }[message.type]
                    intent = Intent(kind, player_id)
                else:
                    await send_error(websocket, f"Unknown message type: {message.type}")
                    continue
            except ValidationError as e:
                await send_error(websocket, validation_message(e))
                continue

            runner = manager.get_runner(request.table_id)
            if runner is None:
                await send_error(websocket, "Table not found")
                continue
            if intent.kind == IntentType.LEAVE:
                joined.discard(request.table_id)
            runner.submit(intent)

    except WebSocketDisconnect:
        if manager.disconnect(player_id, websocket):
            for table_id in joined:
                runner = manager.get_runner(table_id)
                if runner:
                    runner.submit(Intent(IntentType.DISCONNECT, player_id))
            logger.info("Player %s disconnected", player_id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
