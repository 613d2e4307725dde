"""
Core data models for the multi-turn prompts bot.
These are the universal types shared across all modules.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ──────────────────────────────────────────────────────────────
#  Enums
# ──────────────────────────────────────────────────────────────

class ActivityType(str, Enum):
    MESSAGE = "message"
    CONVERSATION_UPDATE = "conversationUpdate"


class PromptType(str, Enum):
    """Which input collector a prompt dialog runs."""
    TEXT = "text"
    CHOICE = "choice"
    NUMBER = "number"


class DialogTurnStatus(str, Enum):
    EMPTY = "empty"               # no dialog was active
    WAITING = "waiting"           # a prompt is pending user input
    COMPLETE = "complete"         # the stack emptied this turn
    CANCELLED = "cancelled"       # cancel_all cleared the stack


# ──────────────────────────────────────────────────────────────
#  Activity — one inbound or outbound turn payload
# ──────────────────────────────────────────────────────────────

class ChannelAccount(BaseModel):
    id: str = ""
    name: str = ""


class ConversationAccount(BaseModel):
    id: str


class Activity(BaseModel):
    """
    A single turn payload.

    Accepts the camelCase wire names (``membersAdded``, ``channelId``,
    ``from``) as well as the python field names.
    """
    model_config = ConfigDict(populate_by_name=True)

    type: str = ActivityType.MESSAGE.value
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:16])
    text: Optional[str] = None
    channel_id: str = Field("chat", alias="channelId")
    from_: Optional[ChannelAccount] = Field(None, alias="from")
    recipient: Optional[ChannelAccount] = None
    conversation: Optional[ConversationAccount] = None
    members_added: list[ChannelAccount] = Field(default_factory=list, alias="membersAdded")
    suggested_actions: list[str] = Field(default_factory=list, alias="suggestedActions")
    reply_to_id: Optional[str] = Field(None, alias="replyToId")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_message(self) -> bool:
        return self.type == ActivityType.MESSAGE.value

    @property
    def is_conversation_update(self) -> bool:
        return self.type == ActivityType.CONVERSATION_UPDATE.value

    def create_reply(self, text: str, suggested_actions: list[str] = None) -> Activity:
        """Build an outbound message addressed back to the sender of this activity."""
        return Activity(
            type=ActivityType.MESSAGE.value,
            text=text,
            channel_id=self.channel_id,
            from_=self.recipient,
            recipient=self.from_,
            conversation=self.conversation,
            suggested_actions=list(suggested_actions or []),
            reply_to_id=self.id,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ──────────────────────────────────────────────────────────────
#  User Profile — per-user record collected by onboarding
# ──────────────────────────────────────────────────────────────

class UserProfile(BaseModel):
    name: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)


# ──────────────────────────────────────────────────────────────
#  Dialog position — persisted per conversation
# ──────────────────────────────────────────────────────────────

class DialogInstance(BaseModel):
    """One entry on the dialog stack."""
    id: str
    state: dict[str, Any] = {}


class DialogState(BaseModel):
    """The per-conversation dialog stack; the last entry is the active dialog."""
    dialog_stack: list[DialogInstance] = []


class DialogTurnResult(BaseModel):
    status: DialogTurnStatus
    result: Any = None


# ──────────────────────────────────────────────────────────────
#  Prompts
# ──────────────────────────────────────────────────────────────

class PromptOptions(BaseModel):
    prompt: str
    retry_prompt: Optional[str] = None
    choices: list[str] = []


class FoundChoice(BaseModel):
    """Result of a choice prompt: the matched label and its position."""
    value: str
    index: int
    score: float = 1.0
