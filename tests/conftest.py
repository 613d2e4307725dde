"""Shared test fixtures for the multi-turn prompts bot."""
import pytest
from typing import Callable

from channels.adapter import BotAdapter
from context.state import ConversationState, UserState
from context.turn import TurnContext
from core.main_dialog import MainDialog
from database.store_memory import InMemoryStateStore
from models.schemas import Activity, ChannelAccount, ConversationAccount


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def user_state(store) -> UserState:
    return UserState(store)


@pytest.fixture
def conversation_state(store) -> ConversationState:
    return ConversationState(store)


@pytest.fixture
def bot(conversation_state, user_state) -> MainDialog:
    return MainDialog(conversation_state, user_state)


@pytest.fixture
def adapter() -> BotAdapter:
    """Adapter without an error handler, so faults surface in tests."""
    return BotAdapter(on_turn_error=None)


@pytest.fixture
def make_activity() -> Callable[..., Activity]:
    def _make(text: str = None, type: str = "message", user_id: str = "user-1",
              conversation_id: str = "conv-1", members_added: list = None) -> Activity:
        return Activity(
            type=type,
            text=text,
            channel_id="test",
            from_=ChannelAccount(id=user_id, name="User"),
            recipient=ChannelAccount(id="bot-1", name="Bot"),
            conversation=ConversationAccount(id=conversation_id),
            members_added=members_added or [],
        )
    return _make


@pytest.fixture
def turn_context(make_activity) -> TurnContext:
    return TurnContext(make_activity("hello"))


class ScriptedConversation:
    """Drives the bot through a scripted exchange, one turn per call."""

    def __init__(self, adapter: BotAdapter, bot: MainDialog, make_activity,
                 user_id: str = "user-1", conversation_id: str = "conv-1"):
        self.adapter = adapter
        self.bot = bot
        self.make_activity = make_activity
        self.user_id = user_id
        self.conversation_id = conversation_id

    async def say(self, text: str) -> list[str]:
        activity = self.make_activity(text, user_id=self.user_id,
                                      conversation_id=self.conversation_id)
        replies = await self.adapter.process_activity(activity, self.bot.on_turn)
        return [r.text for r in replies]

    async def script(self, *texts: str) -> list[list[str]]:
        return [await self.say(t) for t in texts]

    async def join(self, *members: ChannelAccount) -> list[str]:
        activity = self.make_activity(
            type="conversationUpdate", user_id=self.user_id,
            conversation_id=self.conversation_id, members_added=list(members),
        )
        replies = await self.adapter.process_activity(activity, self.bot.on_turn)
        return [r.text for r in replies]


@pytest.fixture
def conversation(adapter, bot, make_activity) -> ScriptedConversation:
    return ScriptedConversation(adapter, bot, make_activity)
