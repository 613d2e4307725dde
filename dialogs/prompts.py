"""
Prompts — dialogs that ask one question and wait for an acceptable reply.

Three kinds share one suspend/resume contract and differ only in how the
reply is recognized:

  PromptType.TEXT    any non-blank text           → str
  PromptType.CHOICE  a label or its 1-based index → FoundChoice
  PromptType.NUMBER  the first number in the text → int | float

A reply that is not recognized, or that the optional validator rejects,
keeps the prompt on the stack and re-asks with ``retry_prompt`` (or the
original question). A validator that already told the user what was
wrong suppresses the re-ask for that turn.
"""
from __future__ import annotations

import re
import structlog
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from context.turn import TurnContext
from dialogs.dialog import Dialog
from dialogs.dialog_context import DialogContext
from models.schemas import (
    DialogTurnResult, DialogTurnStatus, FoundChoice, PromptOptions, PromptType,
)

logger = structlog.get_logger()

PromptValidator = Callable[[TurnContext, Any], Awaitable[bool]]

# A leading "-" (spaced or not) or the word "minus" negates. Digits that are
# part of a larger token such as a date or an id are not a number.
_NUMBER_RE = re.compile(
    r'(?<![\w.-])(?:(?P<minus>minus\s+)|(?P<dash>-)\s*)?'
    r'(?P<digits>\d+(?:\.\d+)?)(?!\w|-|\.\d)',
    re.IGNORECASE,
)


@dataclass
class PromptRecognizerResult:
    succeeded: bool = False
    value: Any = None


class Prompt(Dialog):
    """Base class for all prompt kinds."""

    prompt_type: PromptType

    def __init__(self, dialog_id: str, validator: Optional[PromptValidator] = None):
        super().__init__(dialog_id)
        self._validator = validator

    async def begin(self, dc: DialogContext, options: PromptOptions = None) -> DialogTurnResult:
        if options is None:
            raise ValueError(f"Prompt '{self.id}' requires PromptOptions")
        dc.active_dialog.state.update({
            "options": options.model_dump(mode="json"),
            "attempt_count": 0,
        })
        await self._send_prompt(dc.context, options, is_retry=False)
        return DialogTurnResult(status=DialogTurnStatus.WAITING)

    async def continue_dialog(self, dc: DialogContext) -> DialogTurnResult:
        activity = dc.context.activity
        if not activity.is_message:
            return DialogTurnResult(status=DialogTurnStatus.WAITING)

        instance = dc.active_dialog
        options = PromptOptions.model_validate(instance.state["options"])
        instance.state["attempt_count"] = instance.state.get("attempt_count", 0) + 1

        recognized = self.recognize(activity.text or "", options)
        sent_before = len(dc.context.sent)
        if recognized.succeeded:
            is_valid = True
            if self._validator is not None:
                is_valid = await self._validator(dc.context, recognized.value)
            if is_valid:
                logger.debug("prompt_recognized",
                             prompt_id=self.id, prompt_type=self.prompt_type.value,
                             attempts=instance.state["attempt_count"])
                return await dc.end(recognized.value)

        logger.info("prompt_retry",
                    prompt_id=self.id,
                    recognized=recognized.succeeded,
                    attempts=instance.state["attempt_count"])
        if len(dc.context.sent) == sent_before:
            await self._send_prompt(dc.context, options, is_retry=True)
        return DialogTurnResult(status=DialogTurnStatus.WAITING)

    async def _send_prompt(self, turn_context: TurnContext, options: PromptOptions, is_retry: bool):
        text = options.retry_prompt if is_retry and options.retry_prompt else options.prompt
        await turn_context.send_activity(text)

    @abstractmethod
    def recognize(self, text: str, options: PromptOptions) -> PromptRecognizerResult:
        ...


class TextPrompt(Prompt):
    prompt_type = PromptType.TEXT

    def recognize(self, text: str, options: PromptOptions) -> PromptRecognizerResult:
        if not text.strip():
            return PromptRecognizerResult()
        return PromptRecognizerResult(succeeded=True, value=text)


class ChoicePrompt(Prompt):
    """
    Offers a fixed set of labels.

    The labels travel with the outgoing prompt as suggested actions; the
    prompt text itself is sent unchanged.
    """
    prompt_type = PromptType.CHOICE

    async def _send_prompt(self, turn_context: TurnContext, options: PromptOptions, is_retry: bool):
        text = options.retry_prompt if is_retry and options.retry_prompt else options.prompt
        await turn_context.send_activity(text, suggested_actions=options.choices)

    def recognize(self, text: str, options: PromptOptions) -> PromptRecognizerResult:
        found = recognize_choice(text, options.choices)
        if found is None:
            return PromptRecognizerResult()
        return PromptRecognizerResult(succeeded=True, value=found)


class NumberPrompt(Prompt):
    prompt_type = PromptType.NUMBER

    def __init__(self, dialog_id: str, validator: Optional[PromptValidator] = None,
                 integer_only: bool = False):
        super().__init__(dialog_id, validator)
        self._integer_only = integer_only

    def recognize(self, text: str, options: PromptOptions) -> PromptRecognizerResult:
        value = recognize_number(text)
        if value is None:
            return PromptRecognizerResult()
        if self._integer_only and not isinstance(value, int):
            return PromptRecognizerResult()
        return PromptRecognizerResult(succeeded=True, value=value)


# ──────────────────────────────────────────────────────
#  Recognizers
# ──────────────────────────────────────────────────────

def recognize_choice(text: str, choices: list[str]) -> Optional[FoundChoice]:
    """
    Match a reply against choice labels.

    Tried in order: exact label (case-insensitive), 1-based ordinal,
    then a label appearing as a whole word inside the reply when exactly
    one label does.
    """
    utterance = text.strip().lower()
    if not utterance or not choices:
        return None

    for index, label in enumerate(choices):
        if utterance == label.lower():
            return FoundChoice(value=label, index=index, score=1.0)

    if utterance.isdigit():
        ordinal = int(utterance)
        if 1 <= ordinal <= len(choices):
            return FoundChoice(value=choices[ordinal - 1], index=ordinal - 1, score=1.0)
        return None

    partial = [
        (index, label) for index, label in enumerate(choices)
        if re.search(rf'\b{re.escape(label.lower())}\b', utterance)
    ]
    if len(partial) == 1:
        index, label = partial[0]
        return FoundChoice(value=label, index=index, score=0.5)
    return None


def recognize_number(text: str) -> Optional[Union[int, float]]:
    """Return the first number in ``text``: an int when whole, else a float."""
    match = _NUMBER_RE.search(text.replace(",", ""))
    if not match:
        return None
    raw = match.group("digits")
    negative = bool(match.group("minus") or match.group("dash"))
    if "." in raw:
        value = float(raw)
        value = int(value) if value.is_integer() else value
    else:
        value = int(raw)
    return -value if negative else value
