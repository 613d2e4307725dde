"""
Dialog Context — the dialog stack of one conversation, bound to one turn.

Only the top of the stack is active. ``continue_dialog`` hands the turn to
it; when a dialog ends, its result resumes the dialog beneath it. The
stack is written back into conversation state after every operation,
so the position survives until the next turn even if the process does
not.
"""
from __future__ import annotations

import structlog
from typing import TYPE_CHECKING, Any, Optional

from context.state import StatePropertyAccessor
from context.turn import TurnContext
from dialogs.dialog import Dialog
from models.schemas import (
    DialogInstance, DialogState, DialogTurnResult, DialogTurnStatus, PromptOptions,
)

if TYPE_CHECKING:
    from dialogs.dialog_set import DialogSet

logger = structlog.get_logger()


class DialogContext:

    def __init__(
        self,
        dialogs: DialogSet,
        turn_context: TurnContext,
        state: DialogState,
        dialog_state: StatePropertyAccessor,
    ):
        self.dialogs = dialogs
        self.context = turn_context
        self._state = state
        self._dialog_state = dialog_state

    @property
    def stack(self) -> list[DialogInstance]:
        return self._state.dialog_stack

    @property
    def active_dialog(self) -> Optional[DialogInstance]:
        return self.stack[-1] if self.stack else None

    # ── Stack operations ──────────────────────────────

    async def begin(self, dialog_id: str, options: Any = None) -> DialogTurnResult:
        """Push a dialog onto the stack and start it."""
        dialog = self._find(dialog_id)
        self.stack.append(DialogInstance(id=dialog_id))
        logger.info("dialog_begun",
                    conversation_id=self.context.conversation_id,
                    dialog_id=dialog_id, depth=len(self.stack))
        result = await dialog.begin(self, options)
        await self._persist()
        return result

    async def prompt(
        self,
        prompt_id: str,
        text: str,
        choices: list[str] = None,
        retry_prompt: str = None,
    ) -> DialogTurnResult:
        """Start a prompt dialog asking ``text``."""
        options = PromptOptions(prompt=text, retry_prompt=retry_prompt, choices=choices or [])
        return await self.begin(prompt_id, options)

    async def continue_dialog(self) -> DialogTurnResult:
        """Hand this turn to the active dialog, if there is one."""
        active = self.active_dialog
        if active is None:
            return DialogTurnResult(status=DialogTurnStatus.EMPTY)
        dialog = self._find(active.id)
        result = await dialog.continue_dialog(self)
        await self._persist()
        return result

    async def end(self, result: Any = None) -> DialogTurnResult:
        """Pop the active dialog and resume its parent with ``result``."""
        if self.stack:
            ended = self.stack.pop()
            logger.info("dialog_ended",
                        conversation_id=self.context.conversation_id,
                        dialog_id=ended.id, depth=len(self.stack))
        await self._persist()

        parent = self.active_dialog
        if parent is not None:
            return await self._find(parent.id).resume(self, result)
        return DialogTurnResult(status=DialogTurnStatus.COMPLETE, result=result)

    async def cancel_all(self) -> DialogTurnResult:
        """Clear the whole stack."""
        if not self.stack:
            return DialogTurnResult(status=DialogTurnStatus.EMPTY)
        cancelled = [d.id for d in self.stack]
        self.stack.clear()
        await self._persist()
        logger.info("dialogs_cancelled",
                    conversation_id=self.context.conversation_id,
                    dialog_ids=cancelled)
        return DialogTurnResult(status=DialogTurnStatus.CANCELLED)

    # ── Internals ─────────────────────────────────────

    def _find(self, dialog_id: str) -> Dialog:
        dialog = self.dialogs.find(dialog_id)
        if dialog is None:
            raise KeyError(f"Dialog '{dialog_id}' is not registered")
        return dialog

    async def _persist(self):
        await self._dialog_state.set(self.context, self._state)
