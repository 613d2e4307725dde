"""
Bot Adapter — runs one inbound activity through the bot as one turn.

Provides:
- TurnContext construction per inbound activity
- Per-conversation serialization (one turn at a time per conversation id)
- Turn error boundary: log, then hand the error to ``on_turn_error``
- Ordered collection of outbound replies
"""
from __future__ import annotations

import asyncio
import structlog
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional

from context.turn import TurnContext
from models.schemas import Activity

logger = structlog.get_logger()

TurnLogic = Callable[[TurnContext], Awaitable[None]]
TurnErrorHandler = Callable[[TurnContext, Exception], Awaitable[None]]

ERROR_MESSAGE = "Sorry, it looks like something went wrong."


async def send_error_message(turn_context: TurnContext, error: Exception) -> None:
    """Default turn error handler: apologise to the user."""
    await turn_context.send_activity(ERROR_MESSAGE)


class BotAdapter:
    """
    Host-side runner for bot turns.

    Turns for the same conversation never overlap: each conversation id
    gets its own lock, held for the whole turn including state saves.
    """

    def __init__(self, on_turn_error: Optional[TurnErrorHandler] = send_error_message):
        self.on_turn_error = on_turn_error
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}
        self._turn_count = 0

    @asynccontextmanager
    async def _conversation_lock(self, conversation_id: str):
        """Hold the conversation's lock; drop it once no turn holds or awaits it."""
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        self._waiters[conversation_id] = self._waiters.get(conversation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[conversation_id] -= 1
            if self._waiters[conversation_id] == 0:
                del self._waiters[conversation_id]
                del self._locks[conversation_id]


    async def process_activity(self, activity: Activity, logic: TurnLogic) -> list[Activity]:
        """Run ``logic`` for one activity and return the replies it sent."""
        turn_context = TurnContext(activity)
        conversation_id = turn_context.conversation_id

        async with self._conversation_lock(conversation_id):
            self._turn_count += 1
            logger.debug("turn_started",
                         conversation_id=conversation_id,
                         activity_type=activity.type)
            try:
                await logic(turn_context)
            except Exception as e:
                logger.error("turn_error",
                             conversation_id=conversation_id,
                             activity_type=activity.type,
                             error=str(e),
                             error_type=type(e).__name__)
                if self.on_turn_error is None:
                    raise
                await self.on_turn_error(turn_context, e)

        logger.debug("turn_completed",
                     conversation_id=conversation_id,
                     replies=len(turn_context.sent))
        return list(turn_context.sent)

    @property
    def turn_count(self) -> int:
        return self._turn_count
