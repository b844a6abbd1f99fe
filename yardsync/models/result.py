"""Result values returned by the operator-facing sync operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Either a value (``ok=True``) or a human-readable error string.

    Expected failures (bad input, partial imports) travel through this type
    instead of exceptions so callers can render them directly.
    """

    ok: bool
    value: T | None = None
    error: str | None = None

    def unwrap(self) -> T:
        if not self.ok:
            raise ValueError(self.error or "result is an error")
        return self.value  # type: ignore[return-value]


def Ok(value: T) -> Result[T]:  # noqa: N802
    return Result(ok=True, value=value)


def Err(error: str) -> Result[T]:  # noqa: N802
    return Result(ok=False, error=error)


__all__ = ["Err", "Ok", "Result"]
