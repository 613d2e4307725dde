"""
Dialog layer — multi-turn flows over a persisted dialog stack.

  - DialogSet      registry of dialogs, bound to a conversation state property
  - DialogContext  the stack for one turn: begin / continue / end / cancel_all
  - WaterfallDialog  ordered steps resumable across turns
  - TextPrompt / ChoicePrompt / NumberPrompt  suspend until an acceptable reply
"""
from dialogs.dialog import Dialog
from dialogs.dialog_context import DialogContext
from dialogs.dialog_set import DialogSet
from dialogs.waterfall import WaterfallDialog, WaterfallStepContext
from dialogs.prompts import (
    Prompt, TextPrompt, ChoicePrompt, NumberPrompt,
    PromptRecognizerResult, recognize_choice, recognize_number,
)

__all__ = [
    "Dialog", "DialogContext", "DialogSet",
    "WaterfallDialog", "WaterfallStepContext",
    "Prompt", "TextPrompt", "ChoicePrompt", "NumberPrompt",
    "PromptRecognizerResult", "recognize_choice", "recognize_number",
]
