"""
HTTP-backed data handlers.

Selector parameters are rewritten into the request:

    ==========================  ==================================
    selector                    request
    ==========================  ==================================
    ``--id``                    ``<path>/<id>``
    ``--fromID`` + ``--toID``   ``<path>/<from>..<to>``
    ``--filter`` (mapping)      filter entries as query parameters
    anything else               parameters as query parameters
    ==========================  ==================================

Each data operation may carry its own :class:`DataCallHttp`. Source
operations without one fall back to the GET configuration; an operation
with nothing to fall back to raises
:class:`~dyncall.core.errors.UnsupportedOperationError`.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

from dyncall.calls.call import DynCall, to_parameter_value
from dyncall.calls.http.client import HttpClient, HttpMethod
from dyncall.calls.http.executor import HttpExecutor
from dyncall.core.errors import InvalidConfigError, UnsupportedOperationError
from dyncall.core.output import OutputKind
from dyncall.core.patterns import has_pattern, render_pattern
from dyncall.data.handlers import (
    PARAM_FILTER,
    PARAM_FROM_ID,
    PARAM_ID,
    PARAM_TO_ID,
    DataReceiver,
    DataRepository,
    DataSource,
    T,
)

if TYPE_CHECKING:
    from dyncall.core.retry import RetryStrategy
    from dyncall.data.registry import Registry


class DataOperation(str, Enum):
    GET = "get"
    FIND = "find"
    FIND_BY_ID = "find_by_id"
    FIND_BY_ID_RANGE = "find_by_id_range"
    PUT = "put"


SOURCE_OPERATIONS = frozenset(
    {DataOperation.GET, DataOperation.FIND, DataOperation.FIND_BY_ID, DataOperation.FIND_BY_ID_RANGE}
)


def operation_for(parameters: Mapping[str, Any] | None) -> DataOperation:
    """Source operation selected by ``parameters``."""
    if not parameters:
        return DataOperation.GET
    if parameters.get(PARAM_ID) is not None:
        return DataOperation.FIND_BY_ID
    if parameters.get(PARAM_FROM_ID) is not None and parameters.get(PARAM_TO_ID) is not None:
        return DataOperation.FIND_BY_ID_RANGE
    if parameters.get(PARAM_FILTER) is not None:
        return DataOperation.FIND
    return DataOperation.GET


def _append_path(path: str | None, segment: Any) -> str:
    path = path or ""
    if not path.endswith("/"):
        path += "/"
    return path + str(segment)


def _query(parameters: Mapping[str, Any] | None) -> dict[str, str] | None:
    if not parameters:
        return None
    query = {k: to_parameter_value(v) for k, v in parameters.items() if v is not None}
    return query or None


class DataCallHttp:
    """
    One HTTP request configuration of a data handler.

    Args:
        client: Shared transport; built from ``base_url`` when absent
        base_url: Base URL, used only without ``client``
        method: HTTP method
        path: Request path, may contain ``{{var}}`` placeholders
        full_path: ``path`` replaces the base URL path instead of extending it
        body: Fixed request body, used when a call has no payload
        body_type: Body content type (see :func:`~dyncall.calls.http.body.resolve_body_type`)
        max_retries: Retries on transport errors
        output_kind: Kind the response body is coerced into
    """

    def __init__(
        self,
        *,
        client: HttpClient | None = None,
        base_url: str | None = None,
        method: HttpMethod | str = HttpMethod.GET,
        path: str | None = None,
        full_path: bool = False,
        body: Any = None,
        body_type: str | None = None,
        max_retries: int = 3,
        output_kind: OutputKind | str = OutputKind.JSON,
        retry_strategy: RetryStrategy | None = None,
    ):
        self.owns_client = client is None
        if client is None:
            if not base_url:
                raise InvalidConfigError("base_url", base_url, "DataCallHttp needs a client or a base_url")
            client = HttpClient(base_url)

        self.client = client
        self.method = HttpMethod.parse(method)
        self.path = path
        self.full_path = full_path
        self.body = body
        self.body_type = body_type
        self.max_retries = max_retries
        self.output_kind = OutputKind.parse(output_kind)
        self.retry_strategy = retry_strategy

    def resolve_request(self, parameters: Mapping[str, Any] | None) -> tuple[str | None, dict[str, str] | None]:
        """Path and query parameters for ``parameters``."""
        parameters = dict(parameters or {})

        path = self.path
        if has_pattern(path):
            path = render_pattern(path, parameters)

        find_id = parameters.pop(PARAM_ID, None)
        if find_id is not None:
            return _append_path(path, find_id), _query(parameters)

        from_id = parameters.pop(PARAM_FROM_ID, None)
        to_id = parameters.pop(PARAM_TO_ID, None)
        if from_id is not None and to_id is not None:
            return _append_path(path, f"{from_id}..{to_id}"), _query(parameters)

        filter = parameters.pop(PARAM_FILTER, None)
        if isinstance(filter, Mapping):
            return path, _query(filter)

        return path, _query(parameters)

    def create_executor(self, parameters: Mapping[str, Any] | None, body: Any = None) -> HttpExecutor:
        path, query = self.resolve_request(parameters)
        return HttpExecutor(
            self.client,
            self.method,
            path,
            retry_strategy=self.retry_strategy,
            full_path=self.full_path,
            parameters_static=query,
            body=body if body is not None else self.body,
            body_type=self.body_type,
            error_max_retries=self.max_retries,
        )

    async def call_and_resolve(self, parameters: Mapping[str, Any] | None = None, body: Any = None) -> Any:
        """Perform the request; transport failures resolve to ``None``."""
        executor = self.create_executor(parameters, body)
        dyn_call: DynCall[Any, Any] = DynCall([], self.output_kind, allow_retries=self.max_retries > 0)
        return await executor.call(dyn_call, {})

    async def aclose(self) -> None:
        """Close the client, unless it was passed in."""
        if self.owns_client:
            await self.client.aclose()

    def __repr__(self) -> str:
        return f"DataCallHttp({self.method.value} {self.client.build_url(self.path, full_path=self.full_path)})"


class _HttpOperations:
    """
    Per-operation :class:`DataCallHttp` lookup.

    Handlers close the clients they built from a ``base_url`` on
    :meth:`aclose` or when leaving ``async with``; clients passed in stay
    open.
    """

    id: str
    operations: dict[DataOperation, DataCallHttp]
    owned_client: HttpClient | None = None

    def operation_config(self, operation: DataOperation) -> DataCallHttp:
        config = self.operations.get(operation)
        if config is None and operation in SOURCE_OPERATIONS:
            config = self.operations.get(DataOperation.GET)
        if config is None:
            raise UnsupportedOperationError(self.id, operation.value)
        return config

    def supports(self, operation: DataOperation) -> bool:
        try:
            self.operation_config(operation)
        except UnsupportedOperationError:
            return False
        return True

    async def aclose(self) -> None:
        for config in {id(c): c for c in self.operations.values()}.values():
            await config.aclose()
        if self.owned_client is not None:
            await self.owned_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


def _operations(operations: Mapping[DataOperation | str, DataCallHttp] | None) -> dict[DataOperation, DataCallHttp]:
    return {DataOperation(op): config for op, config in (operations or {}).items()}


class DataSourceHttp(_HttpOperations, DataSource[T]):
    """
    Source over HTTP.

    ``method``/``path`` describe the GET configuration, unless
    ``operations`` already provides one.
    """

    def __init__(
        self,
        domain: str,
        name: str,
        *,
        client: HttpClient | None = None,
        base_url: str | None = None,
        method: HttpMethod | str = HttpMethod.GET,
        path: str | None = None,
        full_path: bool = False,
        body: Any = None,
        max_retries: int = 3,
        operations: Mapping[DataOperation | str, DataCallHttp] | None = None,
        registry: Registry | None = None,
    ):
        self.operations = _operations(operations)
        if DataOperation.GET not in self.operations and (path is not None or not self.operations):
            self.operations[DataOperation.GET] = DataCallHttp(
                client=client,
                base_url=base_url,
                method=method,
                path=path,
                full_path=full_path,
                body=body,
                max_retries=max_retries,
            )
        super().__init__(domain, name, registry=registry)

    async def get_impl(self, parameters: Mapping[str, Any] | None) -> Any:
        config = self.operation_config(operation_for(parameters))
        return await config.call_and_resolve(parameters)


class DataReceiverHttp(_HttpOperations, DataReceiver[T]):
    """Receiver over HTTP; the payload is the request body."""

    def __init__(
        self,
        domain: str,
        name: str,
        *,
        client: HttpClient | None = None,
        base_url: str | None = None,
        method: HttpMethod | str = HttpMethod.POST,
        path: str | None = None,
        full_path: bool = False,
        body: Any = None,
        max_retries: int = 0,
        operations: Mapping[DataOperation | str, DataCallHttp] | None = None,
        registry: Registry | None = None,
    ):
        self.operations = _operations(operations)
        if DataOperation.PUT not in self.operations:
            self.operations[DataOperation.PUT] = DataCallHttp(
                client=client,
                base_url=base_url,
                method=method,
                path=path,
                full_path=full_path,
                body=body,
                max_retries=max_retries,
            )
        super().__init__(domain, name, registry=registry)

    async def put_impl(self, parameters: Mapping[str, Any] | None, payload: Any) -> Any:
        config = self.operation_config(DataOperation.PUT)
        return await config.call_and_resolve(parameters, payload)


class DataRepositoryHttp(_HttpOperations, DataRepository[T]):
    """
    Repository over HTTP.

    Usage:
        repository = DataRepositoryHttp(
            "users",
            "accounts",
            base_url="https://api.example.com",
            source_path="accounts",
            receiver_path="accounts",
        )
        await repository.find_by_id(42)          # GET /accounts/42
        await repository.put(data_list=[...])    # POST /accounts
        await repository.aclose()
    """

    def __init__(
        self,
        domain: str,
        name: str,
        *,
        client: HttpClient | None = None,
        base_url: str | None = None,
        source_method: HttpMethod | str = HttpMethod.GET,
        source_path: str | None = None,
        source_full_path: bool = False,
        source_body: Any = None,
        receiver_method: HttpMethod | str = HttpMethod.POST,
        receiver_path: str | None = None,
        receiver_full_path: bool = False,
        receiver_body: Any = None,
        operations: Mapping[DataOperation | str, DataCallHttp] | None = None,
        registry: Registry | None = None,
    ):
        self.operations = _operations(operations)
        if client is None and base_url:
            client = self.owned_client = HttpClient(base_url)

        if client is not None:
            self.operations.setdefault(
                DataOperation.GET,
                DataCallHttp(
                    client=client,
                    method=source_method,
                    path=source_path,
                    full_path=source_full_path,
                    body=source_body,
                    max_retries=3,
                ),
            )
            self.operations.setdefault(
                DataOperation.PUT,
                DataCallHttp(
                    client=client,
                    method=receiver_method,
                    path=receiver_path,
                    full_path=receiver_full_path,
                    body=receiver_body,
                    max_retries=0,
                ),
            )
        elif not self.operations:
            raise InvalidConfigError("base_url", base_url, "DataRepositoryHttp needs a client, a base_url or operations")

        super().__init__(domain, name, registry=registry)

    @classmethod
    def from_configs(
        cls,
        domain: str,
        name: str,
        source: DataCallHttp | None,
        receiver: DataCallHttp | None,
        *,
        registry: Registry | None = None,
    ) -> DataRepositoryHttp[Any]:
        """Repository from a GET and a PUT configuration, either may be absent."""
        operations: dict[DataOperation | str, DataCallHttp] = {}
        if source is not None:
            operations[DataOperation.GET] = source
        if receiver is not None:
            operations[DataOperation.PUT] = receiver
        if not operations:
            raise InvalidConfigError("operations", None, "DataRepositoryHttp needs a source or a receiver")
        return cls(domain, name, operations=operations, registry=registry)

    async def get_impl(self, parameters: Mapping[str, Any] | None) -> Any:
        config = self.operation_config(operation_for(parameters))
        return await config.call_and_resolve(parameters)

    async def put_impl(self, parameters: Mapping[str, Any] | None, payload: Any) -> Any:
        config = self.operation_config(DataOperation.PUT)
        return await config.call_and_resolve(parameters, payload)


__all__ = [
    "DataOperation",
    "operation_for",
    "DataCallHttp",
    "DataSourceHttp",
    "DataReceiverHttp",
    "DataRepositoryHttp",
]
