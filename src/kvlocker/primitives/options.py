"""Immutable option and settings models for lockers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError

_M = TypeVar("_M", bound="_FrozenModel")


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def coerce(cls: type[_M], value: _M | Mapping[str, Any] | None) -> _M:
        """Resolve ``value`` into a model instance without mutating it."""
        if isinstance(value, cls):
            return value
        try:
            return cls.model_validate(dict(value or {}))
        except PydanticValidationError as exc:
            raise ConfigurationError(
                f"Invalid {cls.__name__}: {exc.errors(include_url=False)}"
            ) from exc


class LockOptions(_FrozenModel):
    """
    Per-call acquisition options.

    ``expire`` is in seconds and ``retry_interval`` in milliseconds. With
    ``retry`` enabled a contended acquire is attempted at most
    ``max_retry_attempts + 1`` times.

    Fields are strict: booleans, numeric strings and floats are rejected
    rather than coerced.
    """

    expire: int = Field(default=60, ge=1, strict=True)
    retry: bool = Field(default=False, strict=True)
    max_retry_attempts: int = Field(default=20, ge=0, strict=True)
    retry_interval: int = Field(default=200, ge=0, strict=True)

    @property
    def retry_interval_seconds(self) -> float:
        return self.retry_interval / 1000


class LockerSettings(_FrozenModel):
    """Settings shared by every lock of one locker."""

    prefix: str = Field(min_length=1)


class LockerSpec(_FrozenModel):
    """Everything needed to build a locker: driver name, store config, settings."""

    driver: str
    config: dict[str, Any] = Field(default_factory=dict)
    settings: LockerSettings
