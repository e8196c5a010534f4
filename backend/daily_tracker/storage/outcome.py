"""Typed result of a database backend call."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Outcome:
    """Either a value or the error that prevented producing one."""

    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> "Outcome":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Outcome":
        return cls(error=error)
