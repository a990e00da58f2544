"""Data handlers backed by a DynCall or by a bare executor."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from dyncall.calls.call import DynCall
from dyncall.core.output import OutputKind
from dyncall.data.handlers import PARAM_PAYLOAD, DataReceiver, DataSource, T

if TYPE_CHECKING:
    from dyncall.calls.executors import Executor
    from dyncall.data.registry import Registry


class DataSourceDynCall(DataSource[T]):
    """Source whose ``get`` performs ``call``."""

    def __init__(self, domain: str, name: str, call: DynCall[Any, Any], *, registry: Registry | None = None):
        self.call = call
        super().__init__(domain, name, registry=registry)

    async def get_impl(self, parameters: Mapping[str, Any] | None) -> Any:
        return await self.call.call(parameters)


class DataReceiverDynCall(DataReceiver[T]):
    """
    Receiver whose ``put`` performs ``call``.

    The payload is offered to the call as ``--payload``; it only reaches the
    executor when the call declares that input field.
    """

    def __init__(self, domain: str, name: str, call: DynCall[Any, Any], *, registry: Registry | None = None):
        self.call = call
        super().__init__(domain, name, registry=registry)

    async def put_impl(self, parameters: Mapping[str, Any] | None, payload: Any) -> Any:
        return await self.call.call(_with_payload(parameters, payload))


class DataSourceExecutor(DataSource[T]):
    """Source driving an executor directly, with a retry-enabled JSON call."""

    def __init__(self, domain: str, name: str, executor: Executor, *, registry: Registry | None = None):
        self.dyn_call: DynCall[Any, Any] = DynCall([], OutputKind.JSON, allow_retries=True, name=f"{domain}:{name}")
        self.dyn_call.executor = executor
        super().__init__(domain, name, registry=registry)

    @property
    def executor(self) -> Executor:
        return self.dyn_call.executor

    async def get_impl(self, parameters: Mapping[str, Any] | None) -> Any:
        return await self.executor.call(self.dyn_call, dict(parameters or {}))


class DataReceiverExecutor(DataReceiver[T]):
    """Receiver driving an executor directly; the payload travels as ``--payload``."""

    def __init__(self, domain: str, name: str, executor: Executor, *, registry: Registry | None = None):
        self.dyn_call: DynCall[Any, Any] = DynCall([], OutputKind.JSON, allow_retries=True, name=f"{domain}:{name}")
        self.dyn_call.executor = executor
        super().__init__(domain, name, registry=registry)

    @property
    def executor(self) -> Executor:
        return self.dyn_call.executor

    async def put_impl(self, parameters: Mapping[str, Any] | None, payload: Any) -> Any:
        return await self.executor.call(self.dyn_call, _with_payload(parameters, payload))


def _with_payload(parameters: Mapping[str, Any] | None, payload: Any) -> dict[str, Any]:
    merged = dict(parameters or {})
    if payload is not None:
        merged[PARAM_PAYLOAD] = payload
    return merged


__all__ = [
    "DataSourceDynCall",
    "DataReceiverDynCall",
    "DataSourceExecutor",
    "DataReceiverExecutor",
]
