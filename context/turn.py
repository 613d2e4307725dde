"""
Turn Context — one inbound activity and everything sent in reply to it.

A TurnContext lives for exactly one turn. It carries:
  - the inbound activity
  - the ordered list of outbound replies (``sent``)
  - the ``responded`` flag the turn controller uses to decide whether
    anything has already answered the user this turn
  - ``turn_state``, a scratch dict where scoped bot state caches its
    loaded records until the end of the turn
"""
from __future__ import annotations

import structlog
from typing import Any, Union

from models.schemas import Activity

logger = structlog.get_logger()


class TurnContext:

    def __init__(self, activity: Activity):
        self.activity = activity
        self.sent: list[Activity] = []
        self.turn_state: dict[str, Any] = {}

    @property
    def responded(self) -> bool:
        return len(self.sent) > 0

    @property
    def conversation_id(self) -> str:
        conversation = self.activity.conversation
        return conversation.id if conversation else ""

    async def send_activity(
        self,
        activity_or_text: Union[Activity, str],
        suggested_actions: list[str] = None,
    ) -> Activity:
        """Queue an outbound reply; replies keep the order they were sent in."""
        if isinstance(activity_or_text, Activity):
            reply = activity_or_text
        else:
            reply = self.activity.create_reply(activity_or_text, suggested_actions)
        self.sent.append(reply)
        logger.debug("activity_sent",
                     conversation_id=self.conversation_id,
                     text=reply.text,
                     suggested_actions=reply.suggested_actions)
        return reply

    @property
    def replies(self) -> list[str]:
        """Text of every reply sent this turn, in order."""
        return [a.text or "" for a in self.sent]
