"""Executors - pluggable strategies that perform a DynCall.

Every executor exposes one capability, ``call(dyn_call, parameters)``,
returning the raw output the DynCall then maps to its final type.

Variants:
    - ``StaticExecutor``    constant response
    - ``FunctionExecutor``  delegates to a supplied (async) function
    - ``HttpExecutor``      full request pipeline (``dyncall.calls.http``)

An executor instance may be shared by several DynCalls.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar, Union

if TYPE_CHECKING:
    from dyncall.calls.call import DynCall
    from dyncall.calls.http.credentials import Credential

E = TypeVar("E")

ExecutorFunction = Callable[
    ["DynCall[Any, Any]", Mapping[str, Any]],
    Union[Any, Awaitable[Any]],
]


class Executor(ABC, Generic[E]):
    """Base class of all executors."""

    def __init__(self) -> None:
        self._authorization: Credential | None = None

    @property
    def authorization(self) -> Credential | None:
        """Default credential for future calls."""
        return self._authorization

    @authorization.setter
    def authorization(self, credential: Credential | None) -> None:
        self._authorization = credential

    @abstractmethod
    async def call(self, dyn_call: DynCall[E, Any], parameters: Mapping[str, Any]) -> E:
        """Perform ``dyn_call`` with already-filtered call parameters."""
        raise NotImplementedError


class StaticExecutor(Executor[E]):
    """Always resolves to the same response."""

    def __init__(self, response: E):
        super().__init__()
        self.response = response

    async def call(self, dyn_call: DynCall[E, Any], parameters: Mapping[str, Any]) -> E:
        return self.response

    def __repr__(self) -> str:
        return f"StaticExecutor({self.response!r})"


class FunctionExecutor(Executor[E]):
    """Delegates to ``function(dyn_call, parameters)``.

    The function may be a coroutine function or return a plain value.
    """

    def __init__(self, function: ExecutorFunction):
        super().__init__()
        self.function = function

    async def call(self, dyn_call: DynCall[E, Any], parameters: Mapping[str, Any]) -> E:
        result = self.function(dyn_call, parameters)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        name = getattr(self.function, "__qualname__", repr(self.function))
        return f"FunctionExecutor({name})"


__all__ = ["Executor", "StaticExecutor", "FunctionExecutor", "ExecutorFunction"]
