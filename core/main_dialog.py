"""
Main Dialog — onboarding and greeting flows plus the per-turn controller.

Flows:
  who_are_you   ask name → ask whether to share age → ask age (or skip) → confirm
  hello_user    read the stored profile back to the user

Turn controller (``on_turn``), once per inbound activity:
  message             "cancel" clears the stack; otherwise resume the active
                      flow; if nothing answered the user, start hello_user
                      when a name is stored, else who_are_you
  conversationUpdate  describe the bot to newly added members
  always              save user state, then conversation state

Both state scopes are passed in by the host. Faults from the stores or
the dialog layer propagate to the host's turn error handler.
"""
from __future__ import annotations

import structlog
from typing import Optional

from context.state import ConversationState, UserState
from context.turn import TurnContext
from dialogs import ChoicePrompt, DialogSet, NumberPrompt, TextPrompt, WaterfallDialog
from dialogs.waterfall import WaterfallStepContext
from models.schemas import (
    Activity, ChannelAccount, DialogState, DialogTurnResult, FoundChoice, UserProfile,
)

logger = structlog.get_logger()

DIALOG_STATE_PROPERTY = "dialog_state"
USER_PROFILE_PROPERTY = "user"

WHO_ARE_YOU = "who_are_you"
HELLO_USER = "hello_user"

NAME_PROMPT = "name_prompt"
CONFIRM_PROMPT = "confirm_prompt"
AGE_PROMPT = "age_prompt"

CANCEL_UTTERANCE = "cancel"

DESCRIPTION = [
    "I am a bot that demonstrates the TextPrompt and NumberPrompt classes",
    "to collect your name and age, then store those values in UserState for later use.",
    "Say anything to continue.",
]


class MainDialog:

    def __init__(self, conversation_state: ConversationState, user_state: UserState,
                 bot_name: str = "Bot"):
        """
        Args:
            conversation_state: scope holding the dialog stack
            user_state:         scope holding the user profile
            bot_name:           name of the bot account in conversationUpdate events
        """
        self.conversation_state = conversation_state
        self.user_state = user_state
        self.bot_name = bot_name

        self.dialog_state = conversation_state.create_property(DIALOG_STATE_PROPERTY, DialogState)
        self.user_profile = user_state.create_property(USER_PROFILE_PROPERTY, UserProfile)

        self.dialogs = DialogSet(self.dialog_state)
        self.dialogs.add(TextPrompt(NAME_PROMPT))
        self.dialogs.add(ChoicePrompt(CONFIRM_PROMPT))
        self.dialogs.add(NumberPrompt(AGE_PROMPT, validator=self.validate_age, integer_only=True))

        self.dialogs.add(WaterfallDialog(WHO_ARE_YOU, [
            self.prompt_for_name,
            self.confirm_age_prompt,
            self.prompt_for_age,
            self.capture_age,
        ]))
        self.dialogs.add(WaterfallDialog(HELLO_USER, [
            self.display_profile,
        ]))

    # ── Validators ────────────────────────────────────

    async def validate_age(self, turn_context: TurnContext, value: int) -> bool:
        if value < 0:
            await turn_context.send_activity("Your age can't be less than zero.")
            return False
        return True

    # ── who_are_you ───────────────────────────────────

    async def prompt_for_name(self, step: WaterfallStepContext) -> DialogTurnResult:
        return await step.prompt(NAME_PROMPT, "What is your name, human?")

    async def confirm_age_prompt(self, step: WaterfallStepContext) -> DialogTurnResult:
        profile = await self.user_profile.get(step.context, UserProfile)
        profile.name = step.result
        await self.user_profile.set(step.context, profile)
        return await step.prompt(CONFIRM_PROMPT, "Do you want to give your age?",
                                 choices=["yes", "no"])

    async def prompt_for_age(self, step: WaterfallStepContext) -> DialogTurnResult:
        choice: Optional[FoundChoice] = step.result
        if choice is not None and choice.value == "yes":
            return await step.prompt(
                AGE_PROMPT, "What is your age?",
                retry_prompt="Sorry, please specify your age as a positive number or say cancel.",
            )
        # None marks "no age given"
        return await step.next(None)

    async def capture_age(self, step: WaterfallStepContext) -> DialogTurnResult:
        age: Optional[int] = step.result
        if age is not None:
            profile = await self.user_profile.get(step.context, UserProfile)
            profile.age = age
            await self.user_profile.set(step.context, profile)
            await step.context.send_activity(f"I will remember that you are {age} years old.")
        else:
            await step.context.send_activity("No age given.")
        return await step.end()

    # ── hello_user ────────────────────────────────────

    async def display_profile(self, step: WaterfallStepContext) -> DialogTurnResult:
        profile = await self.user_profile.get(step.context, UserProfile)
        if profile.age is not None:
            await step.context.send_activity(
                f"Your name is {profile.name} and you are {profile.age} years old.")
        else:
            await step.context.send_activity(
                f"Your name is {profile.name} and you did not share your age.")
        return await step.end()

    # ── Turn controller ───────────────────────────────

    async def on_turn(self, turn_context: TurnContext) -> None:
        activity = turn_context.activity

        if activity.is_message:
            dc = await self.dialogs.create_context(turn_context)

            utterance = (activity.text or "").strip().lower()
            if utterance == CANCEL_UTTERANCE:
                if dc.active_dialog is not None:
                    await dc.cancel_all()
                    await turn_context.send_activity("Ok... canceled.")
                else:
                    await turn_context.send_activity("Nothing to cancel.")

            await dc.continue_dialog()

            if not turn_context.responded and dc.active_dialog is None:
                profile = await self.user_profile.get(turn_context, UserProfile)
                flow_id = HELLO_USER if profile.name else WHO_ARE_YOU
                logger.info("flow_selected",
                            conversation_id=turn_context.conversation_id, flow_id=flow_id)
                await dc.begin(flow_id)

        elif activity.is_conversation_update and self._has_new_member(activity):
            await turn_context.send_activity(" ".join(DESCRIPTION))

        await self.user_state.save_changes(turn_context)
        await self.conversation_state.save_changes(turn_context)

    def _is_bot(self, activity: Activity, member: ChannelAccount) -> bool:
        if activity.recipient is not None and activity.recipient.id and member.id == activity.recipient.id:
            return True
        return member.name == self.bot_name

    def _has_new_member(self, activity: Activity) -> bool:
        return any(not self._is_bot(activity, m) for m in activity.members_added)
