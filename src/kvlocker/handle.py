"""LockHandle: the caller's view of an acquired lease."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .primitives.exceptions import LockNotHeldError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("kvlocker.handle")


class LockState(enum.Enum):
    HELD = "held"
    RELEASED = "released"


@dataclass(eq=False)
class LockHandle:
    """
    An acquired lease on ``resource_id``.

    ``unlock()`` may be called exactly once. The state flips from HELD to
    RELEASED before the store is touched, with no suspension point between
    the check and the flip, so two concurrent ``unlock()`` calls cannot both
    pass. A second call raises :class:`LockNotHeldError`; it does not consult
    the store, so it cannot tell whether the lease already expired there.

    Usage:
        ```python
        async with await locker.acquire("invoice:42", {"expire": 30}):
            await render_invoice()
        ```
    """

    resource_id: str
    key: str
    _release: Callable[[LockHandle], Awaitable[None]] = field(repr=False)
    locked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    state: LockState = LockState.HELD

    @property
    def locked(self) -> bool:
        return self.state is LockState.HELD

    async def unlock(self) -> None:
        """Release the lease.

        Raises:
            LockNotHeldError: If this handle was already unlocked.
            LockerClosedError: If the owning locker was closed. The handle is
                still marked released; the lease ends through its expiry.
        """
        if self.state is not LockState.HELD:
            raise LockNotHeldError(self.resource_id)
        self.state = LockState.RELEASED
        await self._release(self)

    async def __aenter__(self) -> LockHandle:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Unlock on exit unless the body already did."""
        if self.locked:
            await self.unlock()
        else:
            logger.debug("Lock on %s already released before exit", self.resource_id)
