"""
Abstract State Store — Interface for all storage backends.

Implementations:
  - InMemoryStateStore (dict-based, single-process, no persistence)
  - FileStateStore     (JSON file on disk, single-process, durable)

Records are JSON-compatible dicts keyed by a storage key such as
"chat/users/u1" or "chat/conversations/c1". Scoped bot state
(context/state.py) is the only caller.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BaseStateStore(ABC):
    """Interface that all state store backends must implement."""

    @abstractmethod
    async def read(self, keys: list[str]) -> dict[str, dict[str, Any]]:
        """Return the stored record for each key; missing keys are left out."""
        ...

    @abstractmethod
    async def write(self, changes: dict[str, dict[str, Any]]) -> None:
        ...

    @abstractmethod
    async def delete(self, keys: list[str]) -> None:
        ...
