"""
Output kinds and the coercion of raw transport values into them.

``parse_output(kind, value)`` is the single entry point. Coercion failures
raise :class:`~dyncall.core.errors.CoercionError`; they are never swallowed.

Rules:
    BOOL     None -> False; bool passthrough; number >= 1 -> True;
             text in {"true", "1", "yes", "t", "y"} (any case) -> True
    STRING   None -> None; str passthrough; anything else -> str(value)
    INTEGER  None -> None; int passthrough; float truncated; text parsed
    DECIMAL  None -> None; float passthrough; int widened; text parsed
    JSON     None -> None; dict/list/number/bool passthrough; text parsed

Examples:
    >>> parse_output(OutputKind.BOOL, "YES")
    True
    >>> parse_output(OutputKind.INTEGER, "42")
    42
    >>> parse_output(OutputKind.JSON, '{"a": 1}')
    {'a': 1}
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from dyncall.core.errors import CoercionError


class OutputKind(str, Enum):
    """Primitive/structured kinds a call output is coerced into."""

    BOOL = "BOOL"
    STRING = "STRING"
    INTEGER = "INTEGER"
    DECIMAL = "DECIMAL"
    JSON = "JSON"

    @classmethod
    def parse(cls, value: str | OutputKind) -> OutputKind:
        """Resolve a kind from its name, case-insensitively."""
        if isinstance(value, OutputKind):
            return value
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown output kind: {value!r}") from None


TRUE_VALUES = frozenset({"true", "1", "yes", "t", "y"})


def _float_to_int(value: float, kind: OutputKind) -> int:
    try:
        return int(value)
    except (ValueError, OverflowError) as e:
        raise CoercionError(
            f"Can't parse {kind.value} from: {value!r}",
            output_kind=kind.value,
            value=value,
            cause=e,
        ) from e


def parse_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return _float_to_int(value, OutputKind.BOOL) >= 1
    return str(value).strip().lower() in TRUE_VALUES


def parse_string(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def parse_integer(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float):
        return _float_to_int(value, OutputKind.INTEGER)
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise CoercionError(
            f"Can't parse INTEGER from: {value!r}",
            output_kind=OutputKind.INTEGER.value,
            value=value,
            cause=e,
        ) from e


def parse_decimal(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, float):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError as e:
        raise CoercionError(
            f"Can't parse DECIMAL from: {value!r}",
            output_kind=OutputKind.DECIMAL.value,
            value=value,
            cause=e,
        ) from e


def parse_json(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (dict, list, int, float, bool)):
        return value
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    try:
        return json.loads(str(value))
    except json.JSONDecodeError as e:
        raise CoercionError(
            f"Can't parse JSON from: {value!r}",
            output_kind=OutputKind.JSON.value,
            value=value,
            cause=e,
        ) from e


_PARSERS = {
    OutputKind.BOOL: parse_bool,
    OutputKind.STRING: parse_string,
    OutputKind.INTEGER: parse_integer,
    OutputKind.DECIMAL: parse_decimal,
    OutputKind.JSON: parse_json,
}


def parse_output(kind: OutputKind, value: Any) -> Any:
    """Coerce ``value`` to ``kind``."""
    return _PARSERS[kind](value)


__all__ = [
    "OutputKind",
    "TRUE_VALUES",
    "parse_bool",
    "parse_string",
    "parse_integer",
    "parse_decimal",
    "parse_json",
    "parse_output",
]
