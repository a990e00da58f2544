"""
``{{variable}}`` pattern substitution.

Used for request paths, query strings, body patterns and response filter
patterns. A placeholder is ``{{name}}`` where ``name`` is a word made of
letters, digits, ``_``, ``-`` or ``.``; surrounding whitespace inside the
braces is ignored.

Lookup order:
    1. ``parameters`` (the primary mapping)
    2. each extra context, in the order given

Within a mapping the exact key wins; otherwise a dotted name walks nested
mappings and sequences (``{{user.roles.0}}``).

Missing variables substitute to the empty string and emit a
``pattern_variable_missing`` warning (see
``DynCallSettings.warn_missing_pattern_values``).

Examples:
    >>> render_pattern("user={{u}}", {"u": "joe"})
    'user=joe'
    >>> render_pattern("no placeholders", {})
    'no placeholders'
    >>> render_pattern_json("{{id}}:{{user.name}}", {}, {"id": 7, "user": {"name": "ann"}})
    '7:ann'
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

from dyncall.core.logging import get_logger
from dyncall.core.settings import get_settings

logger = get_logger(__name__)

PATTERN_RE = re.compile(r"\{\{\s*([\w.\-]+)\s*\}\}")

_MISSING = object()


def has_pattern(text: str | None) -> bool:
    """True when ``text`` contains at least one placeholder."""
    if not text:
        return False
    return PATTERN_RE.search(text) is not None


def pattern_variables(text: str | None) -> list[str]:
    """Names of the placeholders in ``text``, in order of first appearance."""
    if not text:
        return []
    names: list[str] = []
    for match in PATTERN_RE.finditer(text):
        name = match.group(1)
        if name not in names:
            names.append(name)
    return names


def _lookup_path(value: Any, path: list[str]) -> Any:
    for part in path:
        if isinstance(value, Mapping):
            if part not in value:
                return _MISSING
            value = value[part]
        elif isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            try:
                value = value[int(part)]
            except (ValueError, IndexError):
                return _MISSING
        else:
            return _MISSING
    return value


def _lookup(name: str, contexts: Sequence[Mapping[str, Any] | None]) -> Any:
    for context in contexts:
        if not context:
            continue
        if name in context:
            return context[name]
        if "." in name:
            value = _lookup_path(context, name.split("."))
            if value is not _MISSING:
                return value
    return _MISSING


def _stringify(value: Any, json_values: bool) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if json_values:
        return json.dumps(value)
    return str(value)


def render_pattern(
    template: str,
    parameters: Mapping[str, Any] | None,
    *contexts: Mapping[str, Any] | None,
    json_values: bool = False,
) -> str:
    """
    Replace every ``{{name}}`` in ``template``.

    Args:
        template: Text with zero or more placeholders
        parameters: Primary lookup mapping
        *contexts: Secondary lookup mappings, consulted in order
        json_values: Serialize non-string values as JSON literals instead of
            their ``str()`` form

    Returns:
        The substituted text. Text outside placeholders is unchanged.
    """
    if not template or "{{" not in template:
        return template

    lookup_contexts = (parameters, *contexts)
    missing: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        value = _lookup(name, lookup_contexts)
        if value is _MISSING:
            missing.append(name)
            return ""
        return _stringify(value, json_values)

    rendered = PATTERN_RE.sub(_replace, template)

    if missing and get_settings().warn_missing_pattern_values:
        logger.warning("pattern_variable_missing", variables=missing, template=template)

    return rendered


def render_pattern_json(
    template: str,
    parameters: Mapping[str, Any] | None,
    json_value: Any,
    *contexts: Mapping[str, Any] | None,
) -> str:
    """
    Render ``template`` with a parsed JSON value as extra context.

    A JSON object exposes its keys (and dotted paths); any other JSON value
    is reachable as ``{{value}}``. Non-string values are written as JSON
    literals.
    """
    if isinstance(json_value, Mapping):
        json_context: Mapping[str, Any] = json_value
    else:
        json_context = {"value": json_value}
    return render_pattern(template, parameters, json_context, *contexts, json_values=True)


__all__ = [
    "PATTERN_RE",
    "has_pattern",
    "pattern_variables",
    "render_pattern",
    "render_pattern_json",
]
