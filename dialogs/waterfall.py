"""
Waterfall Dialog — a fixed sequence of steps resumable across turns.

Each step is an async callable taking a WaterfallStepContext. A step
either suspends (by starting a prompt), advances immediately with
``step.next(result)``, or ends the dialog with ``step.end(result)``.
When a prompt completes, its result is handed to the following step.

Only the index of the current step is persisted:

    DialogInstance(id="who_are_you", state={"step_index": 2})
"""
from __future__ import annotations

import structlog
from typing import Any, Awaitable, Callable, Optional

from context.turn import TurnContext
from dialogs.dialog import Dialog
from dialogs.dialog_context import DialogContext
from models.schemas import DialogTurnResult, DialogTurnStatus

logger = structlog.get_logger()

WaterfallStep = Callable[["WaterfallStepContext"], Awaitable[Optional[DialogTurnResult]]]


class WaterfallStepContext:
    """What a single waterfall step sees: the previous result and the stack."""

    def __init__(self, parent: WaterfallDialog, dc: DialogContext, index: int, result: Any):
        self._parent = parent
        self._dc = dc
        self._next_called = False
        self.index = index
        self.result = result

    @property
    def context(self) -> TurnContext:
        return self._dc.context

    async def prompt(self, prompt_id: str, text: str, choices: list[str] = None,
                     retry_prompt: str = None) -> DialogTurnResult:
        return await self._dc.prompt(prompt_id, text, choices=choices, retry_prompt=retry_prompt)

    async def next(self, result: Any = None) -> DialogTurnResult:
        """Skip to the following step without waiting for the user."""
        if self._next_called:
            raise RuntimeError(f"next() called twice in step {self.index} of '{self._parent.id}'")
        self._next_called = True
        return await self._parent.resume(self._dc, result)

    async def end(self, result: Any = None) -> DialogTurnResult:
        return await self._dc.end(result)


class WaterfallDialog(Dialog):

    def __init__(self, dialog_id: str, steps: list[WaterfallStep]):
        super().__init__(dialog_id)
        if not steps:
            raise ValueError(f"Waterfall '{dialog_id}' must have at least one step")
        self._steps = list(steps)

    async def begin(self, dc: DialogContext, options: Any = None) -> DialogTurnResult:
        return await self._run_step(dc, 0, options)

    async def continue_dialog(self, dc: DialogContext) -> DialogTurnResult:
        # No prompt is pending, so the raw reply feeds the next step.
        return await self.resume(dc, dc.context.activity.text)

    async def resume(self, dc: DialogContext, result: Any = None) -> DialogTurnResult:
        index = dc.active_dialog.state.get("step_index", 0)
        return await self._run_step(dc, index + 1, result)

    async def _run_step(self, dc: DialogContext, index: int, result: Any) -> DialogTurnResult:
        if index >= len(self._steps):
            return await dc.end(result)

        instance = dc.active_dialog
        instance.state["step_index"] = index
        step = self._steps[index]
        logger.debug("waterfall_step",
                     dialog_id=self.id, index=index,
                     step=getattr(step, "__name__", repr(step)))

        turn_result = await step(WaterfallStepContext(self, dc, index, result))
        if turn_result is not None:
            return turn_result
        if dc.active_dialog is None:
            return DialogTurnResult(status=DialogTurnStatus.COMPLETE)
        return DialogTurnResult(status=DialogTurnStatus.WAITING)
