"""Shared fixtures for kvlocker tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

# Ensure the package is importable when running pytest from the repo root
# without ``pip install -e .``
_src = Path(__file__).resolve().parents[1] / "src"
if _src.is_dir() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from kvlocker import Locker, LockerSettings  # noqa: E402
from kvlocker.adapters.memory import InMemoryLockStore  # noqa: E402

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@pytest.fixture
def memory_store() -> InMemoryLockStore:
    return InMemoryLockStore()


@pytest.fixture
async def locker(memory_store: InMemoryLockStore) -> AsyncIterator[Locker]:
    """A locker over an in-memory store with prefix ``lock:``."""
    locker = Locker(memory_store, LockerSettings(prefix="lock:"), driver="memory")
    yield locker
    await locker.close()
