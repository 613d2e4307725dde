"""
Dialog Set — registry of the dialogs a bot can run.

Dialogs are indexed by id. The set is bound to a conversation-scoped
state property holding the DialogState (the dialog stack); each turn
``create_context`` loads that stack and wraps it in a DialogContext.
"""
from __future__ import annotations

import structlog
from typing import Optional

from context.state import StatePropertyAccessor
from context.turn import TurnContext
from dialogs.dialog import Dialog
from dialogs.dialog_context import DialogContext
from models.schemas import DialogState

logger = structlog.get_logger()


class DialogSet:

    def __init__(self, dialog_state: StatePropertyAccessor = None):
        self._dialog_state = dialog_state
        self._dialogs: dict[str, Dialog] = {}

    # ── Registration ──────────────────────────────────

    def add(self, dialog: Dialog) -> DialogSet:
        """Register a dialog. Ids must be unique within the set."""
        if dialog.id in self._dialogs:
            logger.error("duplicate_dialog_id", dialog_id=dialog.id)
            raise ValueError(f"Dialog '{dialog.id}' is already registered")
        self._dialogs[dialog.id] = dialog
        logger.debug("dialog_registered",
                     dialog_id=dialog.id, kind=type(dialog).__name__)
        return self

    def find(self, dialog_id: str) -> Optional[Dialog]:
        return self._dialogs.get(dialog_id)

    def list_ids(self) -> list[str]:
        return list(self._dialogs)

    # ── Turn binding ──────────────────────────────────

    async def create_context(self, turn_context: TurnContext) -> DialogContext:
        """Load the conversation's dialog stack and wrap it for this turn."""
        if self._dialog_state is None:
            raise ValueError("DialogSet was created without a dialog state property")
        state = await self._dialog_state.get(turn_context, DialogState)
        return DialogContext(self, turn_context, state, self._dialog_state)
