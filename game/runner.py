"""Single owner of a table: drains intents in arrival order and fires timers."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from .betting import GamePhase
from .errors import PokerError
from .table import Table

logger = logging.getLogger(__name__)

SendFn = Callable[[str, dict], Awaitable[None]]


class IntentType(Enum):
    JOIN = "join"
    ACTION = "action"
    LEAVE = "leave"
    DISCONNECT = "disconnect"
    SIT_OUT = "sit_out"
    SIT_IN = "sit_in"
    ADD_CHIPS = "add_chips"


@dataclass
class Intent:
    kind: IntentType
    player_id: str
    data: Dict[str, Any] = field(default_factory=dict)


class TableRunner:
    """
    Serializes every mutation of one Table.

    Intents are queued by the transport and applied one at a time. The only
    wait is for the next intent, bounded by the earliest timer (the acting
    player's deadline or the start of the next hand). After each change the
    runner sends every seated player their own snapshot.
    """

    def __init__(self, table: Table, send: SendFn, next_hand_delay: float = 3.0):
        self.table = table
        self.send = send
        self.next_hand_delay = next_hand_delay
        self.queue: "asyncio.Queue[Optional[Intent]]" = asyncio.Queue()
        self.next_hand_at: Optional[float] = None
        self._sent_version: Optional[int] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self):
        if self._task is None:
            return
        self.queue.put_nowait(None)
        await self._task
        self._task = None

    def submit(self, intent: Intent):
        self.queue.put_nowait(intent)

    def _next_timeout(self) -> Optional[float]:
        now = self.table.clock()
        timers = []
        remaining = self.table.seconds_until_deadline(now)
        if remaining is not None:
            timers.append(remaining)
        if self.next_hand_at is not None:
            timers.append(max(0.0, self.next_hand_at - now))
        return min(timers) if timers else None

    async def run(self):
        logger.info("Table %s: runner started", self.table.table_id)
        while True:
            try:
                intent = await asyncio.wait_for(self.queue.get(), timeout=self._next_timeout())
            except asyncio.TimeoutError:
                try:
                    self._on_timer()
                except Exception:
                    logger.exception("Table %s: timer handling failed", self.table.table_id)
                await self._after_change()
                continue

            if intent is None:
                break

            try:
                self.handle(intent)
            except PokerError as e:
                logger.warning("Table %s: rejected %s from %s: %s",
                               self.table.table_id, intent.kind.value, intent.player_id, e.message)
                await self._send_error(intent.player_id, e.message)
            except Exception:
                logger.exception("Table %s: failed to handle %s from %s",
                                 self.table.table_id, intent.kind.value, intent.player_id)
            await self._after_change()

        logger.info("Table %s: runner stopped", self.table.table_id)

    def handle(self, intent: Intent):
        """Apply one intent to the table. Raises PokerError on rejection."""
        table = self.table
        data = intent.data
        player_id = intent.player_id

        if intent.kind == IntentType.JOIN:
            buy_in = data.get('buy_in') or table.max_buy_in
            table.add_player(player_id, data.get('name') or player_id, buy_in, data.get('seat'))
        elif intent.kind == IntentType.ACTION:
            table.process_action(player_id, data.get('action'), data.get('amount'), data.get('turn_id'))
        elif intent.kind == IntentType.LEAVE:
            table.leave(player_id)
        elif intent.kind == IntentType.DISCONNECT:
            # Socket closed for someone who already left
            if table.get_player(player_id):
                table.mark_disconnected(player_id)
        elif intent.kind == IntentType.SIT_OUT:
            table.sit_out(player_id)
        elif intent.kind == IntentType.SIT_IN:
            table.sit_in(player_id)
        elif intent.kind == IntentType.ADD_CHIPS:
            table.add_chips(player_id, data.get('amount', 0))

    def _on_timer(self):
        table = self.table
        now = table.clock()
        if table.hand_in_progress:
            table.apply_timeout(now)
            return

        if self.next_hand_at is not None and now >= self.next_hand_at:
            self.next_hand_at = None
            if table.can_start_hand():
                table.start_hand()
            elif table.phase != GamePhase.WAITING:
                table.reset_to_waiting()

    async def _after_change(self):
        table = self.table
        if table.version != self._sent_version:
            self._sent_version = table.version
            await self.broadcast()

        if table.hand_in_progress:
            self.next_hand_at = None
        elif self.next_hand_at is None and (
            table.phase == GamePhase.SHOWDOWN or table.can_start_hand()
        ):
            self.next_hand_at = table.clock() + self.next_hand_delay

    async def broadcast(self):
        """Send each seated player their personalised snapshot."""
        table = self.table
        now = table.clock()
        recipients = [p.id for p in table.players.values()]
        messages = [
            {
                'type': 'game_state',
                'data': table.get_game_state(for_player=player_id, now=now).model_dump(by_alias=True)
            }
            for player_id in recipients
        ]
        results = await asyncio.gather(
            *(self.send(player_id, message) for player_id, message in zip(recipients, messages)),
            return_exceptions=True
        )
        for player_id, result in zip(recipients, results):
            if isinstance(result, Exception):
                logger.warning("Table %s: could not deliver state to %s: %r",
                               table.table_id, player_id, result)

    async def _send_error(self, player_id: str, message: str):
        try:
            await self.send(player_id, {'type': 'error', 'data': {'message': message}})
        except Exception as e:
            logger.warning("Table %s: could not deliver error to %s: %r",
                           self.table.table_id, player_id, e)
