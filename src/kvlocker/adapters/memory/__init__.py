"""In-memory store adapter for tests and single-process use."""

from __future__ import annotations

from .store import InMemoryLockStore, create_memory_store

__all__ = ["InMemoryLockStore", "create_memory_store"]
