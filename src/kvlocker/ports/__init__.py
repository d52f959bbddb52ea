"""Ports: protocols implemented by store adapters."""

from __future__ import annotations

from .store import TTL_KEY_ABSENT, TTL_NO_EXPIRY, ILockStore

__all__ = ["ILockStore", "TTL_KEY_ABSENT", "TTL_NO_EXPIRY"]
