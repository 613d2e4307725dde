"""
Store Factory — builds the state store named by ``storage.store_backend``.

"memory" keeps state in process; "file" persists it to
``{store_file_dir}/state.json``. Any other value is a configuration error.
"""
from __future__ import annotations

import structlog
from typing import Optional

from database.store_base import BaseStateStore

logger = structlog.get_logger()

_instance: Optional[BaseStateStore] = None


def create_store(config: dict = None) -> BaseStateStore:
    """Create the singleton store from a ``storage`` config dict (memory by default)."""
    global _instance
    if _instance is not None:
        return _instance

    config = config or {}
    backend = config.get("store_backend", "memory")

    if backend == "file":
        from database.store_file import FileStateStore
        data_dir = config.get("store_file_dir", "./data")
        _instance = FileStateStore(data_dir=data_dir)
        logger.info("store_created", backend="file", data_dir=data_dir)

    elif backend == "memory":
        from database.store_memory import InMemoryStateStore
        _instance = InMemoryStateStore()
        logger.info("store_created", backend="memory")

    else:
        raise ValueError(f"Unknown store backend '{backend}' (expected 'memory' or 'file')")

    return _instance


def get_store() -> BaseStateStore:
    """Return the singleton store instance, creating a memory store if none exists."""
    global _instance
    if _instance is None:
        _instance = create_store()
    return _instance


def reset_store() -> None:
    """Forget the singleton so the next create_store builds a fresh one."""
    global _instance
    _instance = None
