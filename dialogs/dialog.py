"""
Dialog base class.

A dialog is a resumable unit of conversation identified by a stable id.
Its position between turns lives in a DialogInstance on the
per-conversation stack; the dialog object itself holds no turn data.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from models.schemas import DialogTurnResult

if TYPE_CHECKING:
    from dialogs.dialog_context import DialogContext


class Dialog(ABC):

    def __init__(self, dialog_id: str):
        if not dialog_id:
            raise ValueError("dialog id is required")
        self.id = dialog_id

    @abstractmethod
    async def begin(self, dc: DialogContext, options: Any = None) -> DialogTurnResult:
        """Called once when the dialog is pushed onto the stack."""
        ...

    async def continue_dialog(self, dc: DialogContext) -> DialogTurnResult:
        """Called with a new turn while this dialog is on top of the stack."""
        return await dc.end()

    async def resume(self, dc: DialogContext, result: Any = None) -> DialogTurnResult:
        """Called when a child dialog ended and this dialog is on top again."""
        return await dc.end(result)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"
