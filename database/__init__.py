"""
Database layer — Multi-backend state persistence.

Backends:
  - In-memory (dict-based, for development/testing)
  - File (JSON file on disk, for small deployments)

Quick start:
  from database import create_store
  store = create_store({"store_backend": "memory"})
  records = await store.read(["chat/users/u1"])
"""
from database.store_base import BaseStateStore
from database.store_memory import InMemoryStateStore
from database.store_file import FileStateStore
from database.store_factory import create_store, get_store, reset_store

__all__ = [
    # Store interface
    "BaseStateStore",
    # Store backends
    "InMemoryStateStore", "FileStateStore",
    # Factory
    "create_store", "get_store", "reset_store",
]
