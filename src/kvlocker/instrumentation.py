"""Instrumentation hooks around lock operations (tracing, metrics, audit)."""

from __future__ import annotations

import fnmatch
import functools
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@runtime_checkable
class InstrumentationHook(Protocol):
    """Protocol for instrumentation hooks.

    A hook receives the operation name (``locker.acquire.<driver>`` or
    ``locker.release.<driver>``), its attributes and the continuation. It
    must await ``next_handler()`` and return its result.
    """

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any: ...


@dataclass(frozen=True)
class _Registration:
    hook: InstrumentationHook
    priority: int
    operations: tuple[str, ...]

    def applies_to(self, operation: str) -> bool:
        return not self.operations or any(
            fnmatch.fnmatchcase(operation, pattern) for pattern in self.operations
        )


class HookRegistry:
    """Ordered hooks wrapped around lock operations.

    Lower priority wraps further outside. ``operations`` takes fnmatch
    patterns; without it a hook sees every operation.
    """

    def __init__(self) -> None:
        self._registrations: list[_Registration] = []

    def register(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        operations: list[str] | None = None,
    ) -> None:
        self._registrations.append(
            _Registration(hook, priority, tuple(operations or ()))
        )
        self._registrations.sort(key=lambda r: r.priority)

    def unregister(self, hook: InstrumentationHook) -> None:
        self._registrations = [r for r in self._registrations if r.hook is not hook]

    def clear(self) -> None:
        self._registrations.clear()

    async def execute_all(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Run ``next_handler`` inside every hook registered for ``operation``."""
        call: Callable[[], Awaitable[Any]] = next_handler
        for registration in reversed(self._registrations):
            if registration.applies_to(operation):
                call = functools.partial(
                    registration.hook, operation, attributes, call
                )
        return await call()


_hook_registry_var: ContextVar[HookRegistry | None] = ContextVar(
    "kvlocker_hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Return the registry for the current context, creating it on first use."""
    registry = _hook_registry_var.get()
    if registry is None:
        registry = HookRegistry()
        _hook_registry_var.set(registry)
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    _hook_registry_var.set(registry)
