"""
Result envelope for one request attempt.

A request attempt either produced a response (``Ok``) or a transport
failure (``Err``). Making the outcome a value lets the executor classify and
resolve it without threading control flow through ``except`` blocks.

Examples:
    >>> outcome = Ok(42)
    >>> outcome.map(lambda x: x + 1).unwrap()
    43
    >>> Err(ValueError("boom")).unwrap_or(0)
    0
    >>> match Ok("body"):
    ...     case Ok(value):
    ...         print(value)
    ...     case Err(error):
    ...         print("failed", error)
    body
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed outcome containing the error."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the contained error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """No-op for Err."""
        return self  # type: ignore[return-value]

    def to_dict(self) -> dict[str, Any]:
        to_dict = getattr(self.error, "to_dict", None)
        error = to_dict() if callable(to_dict) else {"message": str(self.error)}
        return {"ok": False, "error": error}

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[T]]


__all__ = ["Ok", "Err", "Result"]
