"""
FileStateStore — JSON file-backed store with persistence across restarts.

Data layout:
  {data_dir}/
    state.json        {storage_key: record, ...}

Features:
  - Survives process restarts (unlike InMemoryStateStore)
  - No external dependencies (no database server)
  - Every write or delete flushes the whole file (tmp file + rename)
  - Single-process only (no concurrent write safety)

Best for: small deployments, demos, edge devices.
"""
from __future__ import annotations

import json
import structlog
from pathlib import Path
from typing import Any

from database.store_memory import InMemoryStateStore

logger = structlog.get_logger()

_STATE_FILE = "state.json"


class FileStateStore(InMemoryStateStore):
    """
    Extends InMemoryStateStore with JSON file persistence.

    On init: loads every record from disk into memory.
    On every write/delete: flushes all records back to disk.
    """

    def __init__(self, data_dir: str = "./data"):
        super().__init__()
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._load()
        logger.info("file_store_initialized",
                    data_dir=str(self._data_dir), records=self.count)

    @property
    def path(self) -> Path:
        return self._data_dir / _STATE_FILE

    # ── Load / Save ───────────────────────────────────────

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("file_store_load_error",
                           path=str(self.path), error=str(e))
            return
        if not isinstance(data, dict):
            logger.warning("file_store_load_error",
                           path=str(self.path), error="top-level value is not an object")
            return
        self._records = data

    def flush(self):
        """Write all records to disk."""
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, "w") as f:
            json.dump(self._records, f, indent=2, default=str)
        tmp_path.replace(self.path)  # atomic on POSIX
        logger.debug("file_store_flushed", records=self.count)

    # ── Override write methods to trigger persistence ──────

    async def write(self, changes: dict[str, dict[str, Any]]) -> None:
        await super().write(changes)
        self.flush()

    async def delete(self, keys: list[str]) -> None:
        await super().delete(keys)
        self.flush()
