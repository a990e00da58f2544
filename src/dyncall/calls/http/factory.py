"""Factory for HTTP executors sharing one client and base path.

Usage:
    factory = HttpExecutorFactory(HttpClient("https://api.example.com"), "v1/")

    # create, then bind
    executor = factory.create(HttpMethod.GET, path="items/{{id}}")
    call_item.executor = executor

    # create and bind in one go
    factory.define(call_item, HttpMethod.GET, path="items/{{id}}")
    factory.call(call_item).executor(HttpMethod.GET, path="items/{{id}}")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dyncall.calls.http.client import HttpClient, HttpMethod
from dyncall.calls.http.executor import HttpExecutor

if TYPE_CHECKING:
    from dyncall.calls.call import DynCall


class HttpExecutorFactory:
    def __init__(self, http_client: HttpClient, base_path: str | None = None):
        self.http_client = http_client
        self._base_path = base_path.strip() if base_path is not None else None

    @property
    def base_path(self) -> str | None:
        return self._base_path

    def _call_path(self, path: str | None) -> str | None:
        path = path.strip() if path is not None else None
        if self._base_path:
            return f"{self._base_path}{path or ''}"
        return path

    def create(self, method: HttpMethod | str, *, path: str | None = None, **options: Any) -> HttpExecutor:
        """New executor; ``options`` are :class:`HttpExecutorConfig` fields."""
        return HttpExecutor(self.http_client, method, self._call_path(path), **options)

    def define(
        self,
        call: DynCall[Any, Any],
        method: HttpMethod | str,
        *,
        path: str | None = None,
        **options: Any,
    ) -> HttpExecutor:
        """Create an executor and bind it to ``call``."""
        executor = self.create(method, path=path, **options)
        call.executor = executor
        return executor

    def call(self, call: DynCall[Any, Any]) -> HttpExecutorBuilder:
        return HttpExecutorBuilder(self, call)


class HttpExecutorBuilder:
    """``factory.call(dyn_call).executor(...)`` form of :meth:`HttpExecutorFactory.define`."""

    def __init__(self, factory: HttpExecutorFactory, call: DynCall[Any, Any]):
        self.factory = factory
        self.dyn_call = call

    def executor(self, method: HttpMethod | str, *, path: str | None = None, **options: Any) -> HttpExecutor:
        return self.factory.define(self.dyn_call, method, path=path, **options)


__all__ = ["HttpExecutorFactory", "HttpExecutorBuilder"]
