"""
DynCall - the typed contract of one logical remote operation.

A ``DynCall`` declares which input fields it accepts, the kind its raw output
is coerced into, and an optional filter mapping that output to the caller's
type. It does not know how the operation is performed: that is the job of
the bound :class:`~dyncall.calls.executors.Executor`.

Lifecycle:
    ::

        created at startup ──► bound to an executor ──► called many times
                                 (rebinding allowed during setup)

Examples:
    >>> from dyncall.calls import DynCall, StaticExecutor
    >>> from dyncall.core.output import OutputKind
    >>> call_logout = DynCall([], OutputKind.BOOL)
    >>> call_logout.executor = StaticExecutor(True)
    >>> await call_logout()   # doctest: +SKIP
    True

    With no executor bound, a call resolves to the output kind's no-op
    default (``False`` for BOOL, ``None`` otherwise) without failing.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from dyncall.core.errors import InterceptorError
from dyncall.core.logging import LogContext, get_logger
from dyncall.core.output import OutputKind, parse_output

if TYPE_CHECKING:
    from dyncall.calls.executors import Executor

logger = get_logger(__name__)

E = TypeVar("E")
O = TypeVar("O")

OutputFilter = Callable[[Any], Any]
CallCallback = Callable[[Any], None]


def to_parameter_value(value: Any) -> str:
    """String form of an input value as sent to executors."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class DynCall(Generic[E, O]):
    """
    Typed, reusable definition of a remote call.

    Args:
        input_fields: Names of the accepted input parameters. Anything else
            passed to :meth:`call` is dropped.
        output_kind: Kind the raw output is coerced into
        output_filter: Maps the coerced output to the caller's type
        allow_retries: Whether executors may retry this call on transport
            errors
        name: Optional label used in logs
    """

    def __init__(
        self,
        input_fields: Iterable[str],
        output_kind: OutputKind | str,
        output_filter: OutputFilter | None = None,
        *,
        allow_retries: bool = False,
        name: str | None = None,
    ):
        self._input_fields = tuple(dict.fromkeys(input_fields))
        self._output_kind = OutputKind.parse(output_kind)
        self._output_filter = output_filter
        self._allow_retries = bool(allow_retries)
        self.name = name
        self.executor: Executor | None = None

    @property
    def input_fields(self) -> tuple[str, ...]:
        return self._input_fields

    @property
    def output_kind(self) -> OutputKind:
        return self._output_kind

    @property
    def output_filter(self) -> OutputFilter | None:
        return self._output_filter

    @property
    def allow_retries(self) -> bool:
        return self._allow_retries

    @property
    def label(self) -> str:
        return self.name or f"DynCall({', '.join(self._input_fields)})"

    async def call(
        self,
        parameters: Mapping[str, Any] | None = None,
        callback: CallCallback | None = None,
    ) -> O:
        """
        Perform the call.

        Transport failures never surface here: they resolve to the
        executor's fallback value. Coercion and configuration errors do.
        """
        executor = self.executor

        if executor is None:
            output = self.parse_output(None)
            self._notify(callback, output)
            return output

        call_parameters = self.build_call_parameters(parameters)
        async with LogContext(call=self.label, call_id=uuid.uuid4().hex[:12]):
            raw = await executor.call(self, call_parameters)
        output = self.map_output(raw)
        self._notify(callback, output)
        return output

    __call__ = call

    def _notify(self, callback: CallCallback | None, output: Any) -> None:
        if callback is None:
            return
        try:
            callback(output)
        except Exception as e:
            error = InterceptorError(f"Call callback failed: {e}", cause=e).with_context(call=self.label)
            logger.warning("call_callback_failed", **error.to_dict())

    def build_call_parameters(self, parameters: Mapping[str, Any] | None) -> dict[str, str]:
        """Keep declared input fields with a value, as strings."""
        call_parameters: dict[str, str] = {}
        if not parameters:
            return call_parameters

        for key in self._input_fields:
            value = parameters.get(key)
            if value is not None:
                call_parameters[key] = to_parameter_value(value)

        return call_parameters

    def parse_execution(self, value: Any) -> E:
        """Coerce a raw executor value to the declared output kind."""
        return parse_output(self._output_kind, value)

    def map_output(self, output: E) -> O:
        if self._output_filter is not None:
            return self._output_filter(output)
        return output  # type: ignore[return-value]

    def parse_output(self, value: Any) -> O:
        return self.map_output(self.parse_execution(value))

    def __repr__(self) -> str:
        return (
            f"DynCall(input={list(self._input_fields)!r}, "
            f"output_kind={self._output_kind.value}, allow_retries={self._allow_retries})"
        )


__all__ = ["DynCall", "OutputFilter", "CallCallback", "to_parameter_value"]
