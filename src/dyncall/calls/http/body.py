"""
Request body construction.

A literal ``body`` always wins. Otherwise a ``BodyBuilder`` produces the
body; the builder's shape is an explicit variant chosen at configuration
time:

    ====================  ==============================================
    ``BodyPattern``       ``{{var}}`` template over the call parameters,
                          request parameters as secondary context
    ``BodyProducer``      zero-argument function
    ``BodyFunction``      ``fn(parameters, request_parameters)``
    ====================  ==============================================

Examples:
    >>> BodyBuilder.pattern('{"user": "{{u}}"}').build({"u": "joe"}, None)
    '{"user": "joe"}'
    >>> resolve_body_type("JSON", "{}")
    'application/json'
    >>> resolve_body_type("json", None) is None
    True
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from dyncall.core.patterns import render_pattern

BODY_TYPES: dict[str, str] = {
    "json": "application/json",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
    "text": "text/plain",
    "html": "text/html",
}


class BodyBuilder(ABC):
    """Produces a request body from call and request parameters."""

    @abstractmethod
    def build(
        self,
        parameters: Mapping[str, Any] | None,
        request_parameters: Mapping[str, Any] | None,
    ) -> Any: ...

    @staticmethod
    def pattern(template: str) -> BodyPattern:
        return BodyPattern(template)

    @staticmethod
    def producer(function: Callable[[], Any]) -> BodyProducer:
        return BodyProducer(function)

    @staticmethod
    def function(
        function: Callable[[Mapping[str, Any], Mapping[str, Any] | None], Any],
    ) -> BodyFunction:
        return BodyFunction(function)


@dataclass(frozen=True)
class BodyPattern(BodyBuilder):
    template: str

    def build(self, parameters, request_parameters):
        return render_pattern(self.template, parameters, request_parameters)


@dataclass(frozen=True)
class BodyProducer(BodyBuilder):
    function: Callable[[], Any]

    def build(self, parameters, request_parameters):
        return self.function()


@dataclass(frozen=True)
class BodyFunction(BodyBuilder):
    function: Callable[[Mapping[str, Any], Mapping[str, Any] | None], Any]

    def build(self, parameters, request_parameters):
        return self.function(parameters or {}, request_parameters)


def build_body(
    body: Any,
    body_builder: BodyBuilder | None,
    parameters: Mapping[str, Any] | None,
    request_parameters: Mapping[str, Any] | None,
) -> Any:
    """Literal body first, then the builder, else ``None``."""
    if body is not None:
        return body
    if body_builder is not None:
        return body_builder.build(parameters, request_parameters)
    return None


def resolve_body_type(body_type: str | None, body: Any) -> str | None:
    """
    MIME type of ``body``.

    Short tags (json/jpeg/png/text/html, any case) map to their MIME type;
    anything else passes through. No body, no content type.
    """
    if body is None or not body_type:
        return None
    if isinstance(body, (str, bytes)) and not body:
        return None
    body_type = body_type.strip()
    return BODY_TYPES.get(body_type.lower(), body_type)


__all__ = [
    "BODY_TYPES",
    "BodyBuilder",
    "BodyPattern",
    "BodyProducer",
    "BodyFunction",
    "build_body",
    "resolve_body_type",
]
