"""Tests for core data models."""
import pytest
from pydantic import ValidationError

from models.schemas import (
    Activity, ActivityType, ChannelAccount, ConversationAccount,
    DialogInstance, DialogState, PromptOptions, UserProfile,
)


class TestActivity:
    def test_accepts_wire_names(self):
        activity = Activity.model_validate({
            "type": "conversationUpdate",
            "channelId": "webchat",
            "from": {"id": "u1", "name": "Ada"},
            "conversation": {"id": "c1"},
            "membersAdded": [{"id": "u1", "name": "Ada"}],
        })
        assert activity.is_conversation_update
        assert activity.channel_id == "webchat"
        assert activity.from_.id == "u1"
        assert activity.members_added[0].name == "Ada"

    def test_accepts_field_names(self):
        activity = Activity(type=ActivityType.MESSAGE.value, text="hi",
                            from_=ChannelAccount(id="u1"),
                            conversation=ConversationAccount(id="c1"))
        assert activity.is_message
        assert activity.channel_id == "chat"

    def test_create_reply_swaps_sender_and_recipient(self):
        inbound = Activity(
            text="hi",
            from_=ChannelAccount(id="u1", name="Ada"),
            recipient=ChannelAccount(id="b1", name="Bot"),
            conversation=ConversationAccount(id="c1"),
        )
        reply = inbound.create_reply("hello", suggested_actions=["yes", "no"])
        assert reply.is_message
        assert reply.text == "hello"
        assert reply.from_.id == "b1"
        assert reply.recipient.id == "u1"
        assert reply.conversation.id == "c1"
        assert reply.reply_to_id == inbound.id
        assert reply.suggested_actions == ["yes", "no"]

    def test_to_wire_uses_camel_case(self):
        reply = Activity(text="hi", from_=ChannelAccount(id="b1"),
                         suggested_actions=["yes"])
        wire = reply.to_wire()
        assert wire["from"] == {"id": "b1", "name": ""}
        assert wire["suggestedActions"] == ["yes"]
        assert wire["channelId"] == "chat"
        assert "conversation" not in wire


class TestUserProfile:
    def test_defaults_to_empty(self):
        profile = UserProfile()
        assert profile.name is None
        assert profile.age is None
        assert profile.model_dump(exclude_none=True) == {}

    def test_rejects_negative_age(self):
        with pytest.raises(ValidationError):
            UserProfile(name="Ada", age=-1)


class TestDialogState:
    def test_round_trips_through_json(self):
        state = DialogState(dialog_stack=[
            DialogInstance(id="who_are_you", state={"step_index": 1}),
            DialogInstance(id="confirm_prompt", state={
                "options": PromptOptions(prompt="Q?", choices=["yes", "no"]).model_dump(mode="json"),
            }),
        ])
        restored = DialogState.model_validate(state.model_dump(mode="json"))
        assert [d.id for d in restored.dialog_stack] == ["who_are_you", "confirm_prompt"]
        assert restored.dialog_stack[0].state["step_index"] == 1

    def test_instances_do_not_share_state(self):
        a = DialogInstance(id="a")
        b = DialogInstance(id="b")
        a.state["step_index"] = 3
        assert b.state == {}
