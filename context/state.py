"""
Scoped Bot State — per-user and per-conversation property bags.

Each scope maps a turn to one storage key:

  UserState          {channel_id}/users/{from.id}
  ConversationState  {channel_id}/conversations/{conversation.id}

State is read from the store at most once per turn and cached on the
TurnContext. Property accessors hand out copies, so callers do an
explicit read-modify-write:

    profile = await user_profile.get(turn_context, UserProfile)
    profile.name = "Ada"
    await user_profile.set(turn_context, profile)

Nothing reaches the store until ``save_changes`` runs at the end of the
turn, and only when the cached state differs from what was loaded.
"""
from __future__ import annotations

import copy
import json
import structlog
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel

from context.turn import TurnContext
from database.store_base import BaseStateStore

logger = structlog.get_logger()


def _compute_hash(state: dict[str, Any]) -> str:
    return json.dumps(state, sort_keys=True, default=str)


class CachedBotState:
    """State loaded for one scope during one turn."""

    def __init__(self, state: dict[str, Any] = None):
        self.state: dict[str, Any] = state or {}
        self.hash = _compute_hash(self.state)

    @property
    def is_changed(self) -> bool:
        return _compute_hash(self.state) != self.hash


class BotState(ABC):
    """Base class for a storage scope (user, conversation)."""

    def __init__(self, store: BaseStateStore, scope: str):
        self._store = store
        self._scope = scope
        self._cache_key = f"bot_state:{scope}"

    @property
    def scope(self) -> str:
        return self._scope

    @abstractmethod
    def get_storage_key(self, turn_context: TurnContext) -> str:
        ...

    def create_property(self, name: str, model: type[BaseModel] = None) -> StatePropertyAccessor:
        if not name:
            raise ValueError("state property name is required")
        return StatePropertyAccessor(self, name, model)

    # ── Load / Save ───────────────────────────────────────

    async def load(self, turn_context: TurnContext, force: bool = False) -> None:
        cached = turn_context.turn_state.get(self._cache_key)
        if cached is not None and not force:
            return
        key = self.get_storage_key(turn_context)
        items = await self._store.read([key])
        turn_context.turn_state[self._cache_key] = CachedBotState(items.get(key))
        logger.debug("bot_state_loaded", scope=self._scope, key=key, found=key in items)

    async def save_changes(self, turn_context: TurnContext, force: bool = False) -> None:
        cached: Optional[CachedBotState] = turn_context.turn_state.get(self._cache_key)
        if cached is None:
            return
        if not force and not cached.is_changed:
            return
        key = self.get_storage_key(turn_context)
        await self._store.write({key: cached.state})
        cached.hash = _compute_hash(cached.state)
        logger.debug("bot_state_saved", scope=self._scope, key=key)

    async def clear_state(self, turn_context: TurnContext) -> None:
        """Empty the cached state; the store is updated on the next save."""
        cached = turn_context.turn_state.get(self._cache_key)
        if cached is None:
            turn_context.turn_state[self._cache_key] = CachedBotState()
            # force a write of the empty record even though nothing was loaded
            turn_context.turn_state[self._cache_key].hash = ""
        else:
            cached.state = {}

    async def delete(self, turn_context: TurnContext) -> None:
        turn_context.turn_state.pop(self._cache_key, None)
        key = self.get_storage_key(turn_context)
        await self._store.delete([key])
        logger.info("bot_state_deleted", scope=self._scope, key=key)

    # ── Property access (used by StatePropertyAccessor) ───

    def _cached(self, turn_context: TurnContext) -> CachedBotState:
        cached = turn_context.turn_state.get(self._cache_key)
        if cached is None:
            raise RuntimeError(f"{self._scope} state has not been loaded for this turn")
        return cached

    def get_property_value(self, turn_context: TurnContext, name: str) -> Any:
        return self._cached(turn_context).state.get(name)

    def set_property_value(self, turn_context: TurnContext, name: str, value: Any) -> None:
        self._cached(turn_context).state[name] = value

    def delete_property_value(self, turn_context: TurnContext, name: str) -> None:
        self._cached(turn_context).state.pop(name, None)


class UserState(BotState):

    def __init__(self, store: BaseStateStore):
        super().__init__(store, "user")

    def get_storage_key(self, turn_context: TurnContext) -> str:
        activity = turn_context.activity
        if not activity.from_ or not activity.from_.id:
            raise ValueError("UserState requires activity.from.id")
        return f"{activity.channel_id}/users/{activity.from_.id}"


class ConversationState(BotState):

    def __init__(self, store: BaseStateStore):
        super().__init__(store, "conversation")

    def get_storage_key(self, turn_context: TurnContext) -> str:
        activity = turn_context.activity
        if not activity.conversation or not activity.conversation.id:
            raise ValueError("ConversationState requires activity.conversation.id")
        return f"{activity.channel_id}/conversations/{activity.conversation.id}"


class StatePropertyAccessor:
    """
    Named property inside a BotState scope.

    ``get`` returns a fresh copy (a model instance when ``model`` is set);
    ``set`` replaces the whole stored record.
    """

    def __init__(self, state: BotState, name: str, model: type[BaseModel] = None):
        self._state = state
        self._name = name
        self._model = model

    @property
    def name(self) -> str:
        return self._name

    async def get(
        self,
        turn_context: TurnContext,
        default: Union[Any, Callable[[], Any]] = None,
    ) -> Any:
        await self._state.load(turn_context)
        raw = self._state.get_property_value(turn_context, self._name)
        if raw is None:
            if default is None:
                return None
            value = default() if callable(default) else default
            await self.set(turn_context, value)
            raw = self._state.get_property_value(turn_context, self._name)
        return self._to_value(raw)

    async def set(self, turn_context: TurnContext, value: Any) -> None:
        await self._state.load(turn_context)
        self._state.set_property_value(turn_context, self._name, self._to_raw(value))

    async def delete(self, turn_context: TurnContext) -> None:
        await self._state.load(turn_context)
        self._state.delete_property_value(turn_context, self._name)

    def _to_raw(self, value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json", exclude_none=True)
        return copy.deepcopy(value)

    def _to_value(self, raw: Any) -> Any:
        if self._model is not None:
            return self._model.model_validate(raw)
        return copy.deepcopy(raw)
