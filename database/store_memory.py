"""
InMemoryStateStore — Dict-backed store for development and testing.

Features:
  - Zero dependencies (no database, no files)
  - Reads and writes copy records, so callers never alias stored data
  - All data lost on process restart

Best for: local development, unit tests, quick prototyping.
"""
from __future__ import annotations

import copy
import structlog
from typing import Any

from database.store_base import BaseStateStore

logger = structlog.get_logger()


class InMemoryStateStore(BaseStateStore):
    """State store keeping every record in a single dict."""

    def __init__(self):
        self._records: dict[str, dict[str, Any]] = {}     # storage key → record
        logger.info("inmemory_store_initialized")

    async def read(self, keys: list[str]) -> dict[str, dict[str, Any]]:
        return {
            key: copy.deepcopy(self._records[key])
            for key in keys
            if key in self._records
        }

    async def write(self, changes: dict[str, dict[str, Any]]) -> None:
        for key, record in changes.items():
            self._records[key] = copy.deepcopy(record)
        logger.debug("state_store_written", keys=list(changes))

    async def delete(self, keys: list[str]) -> None:
        for key in keys:
            self._records.pop(key, None)
        logger.debug("state_store_deleted", keys=list(keys))

    @property
    def count(self) -> int:
        return len(self._records)
