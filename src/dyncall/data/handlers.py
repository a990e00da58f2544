"""
Data handlers - get/find/put facades over named data resources.

Handlers are identified by ``domain:name`` (case-insensitive):

    ::

        DataHandler ─┬─ DataSource     get / find / find_by_id / find_by_id_range
                     ├─ DataReceiver   put
                     └─ DataRepository both

Every operation returns a list of the handler's element type. Raw results
are normalized uniformly: ``None`` becomes ``[]``, a non-list becomes a
one-element list, and each element goes through ``transform_to``.

Selector operations are expressed as reserved parameters handed to
``get``: ``--id``, ``--fromID``/``--toID`` and ``--filter``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from dyncall.data.registry import Registry

T = TypeVar("T")

PARAM_ID = "--id"
PARAM_FROM_ID = "--fromID"
PARAM_TO_ID = "--toID"
PARAM_FILTER = "--filter"
PARAM_PAYLOAD = "--payload"

TransformerTo = Callable[[Any], Any]
TransformerToList = Callable[[Any], list]
TransformerFrom = Callable[[Any], Any]
TransformerFromList = Callable[[list], Any]


def handler_id(domain: str | None, name: str | None) -> str:
    """Composite, case-insensitive id of a handler."""
    return f"{domain or ''}:{name or ''}".lower()


def parameters_find_by_id(id: Any) -> dict[str, Any]:
    return {PARAM_ID: id}


def parameters_find_by_id_range(from_id: Any, to_id: Any) -> dict[str, Any]:
    return {PARAM_FROM_ID: from_id, PARAM_TO_ID: to_id}


def parameters_find(filter: Mapping[str, Any]) -> dict[str, Any]:
    return {PARAM_FILTER: filter}


class DataHandler(ABC, Generic[T]):
    """
    Base class of data sources and receivers.

    Args:
        domain: Resource domain (e.g. ``"users"``)
        name: Resource name within the domain
        registry: When given, the handler registers itself on construction
    """

    def __init__(self, domain: str, name: str, *, registry: Registry | None = None):
        self.domain = domain
        self.name = name
        self.transformer_to: TransformerTo | None = None
        self.transformer_to_list: TransformerToList | None = None
        self.transformer_from: TransformerFrom | None = None
        self.transformer_from_list: TransformerFromList | None = None

        if registry is not None and self.has_id:
            registry.register(self)

    @property
    def id(self) -> str:
        return handler_id(self.domain, self.name)

    @property
    def has_id(self) -> bool:
        return bool(self.domain) and bool(self.name)

    # ------------------------------------------------------------------ #
    # Transformations
    # ------------------------------------------------------------------ #

    def transform_to(self, o: Any) -> T:
        if self.transformer_to is None:
            return o
        return self.transformer_to(o)

    def transform_to_list(self, o: Any) -> list[T]:
        if self.transformer_to_list is not None:
            return self.transformer_to_list(o)

        if o is None:
            return []
        if isinstance(o, list):
            return [self.transform_to(e) for e in o]
        return [self.transform_to(o)]

    def transform_from(self, data: T) -> Any:
        if self.transformer_from is None:
            return data
        return self.transformer_from(data)

    def transform_from_list(self, data_list: list[T] | None) -> Any:
        if self.transformer_from_list is not None:
            return self.transformer_from_list(data_list)

        if not data_list:
            return None
        return [self.transform_from(e) for e in data_list]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.id!r})"


class DataSource(DataHandler[T]):
    """Read-only data handler."""

    @abstractmethod
    async def get_impl(self, parameters: Mapping[str, Any] | None) -> Any:
        """Fetch the raw result for ``parameters``."""
        ...

    async def get(self, parameters: Mapping[str, Any] | None = None) -> list[T]:
        """Get data using ``parameters`` as selector."""
        result = await self.get_impl(parameters)
        return self.transform_to_list(result)

    async def find_by_id(self, id: Any) -> list[T]:
        return await self.get(parameters_find_by_id(id))

    async def find_by_id_range(self, from_id: Any, to_id: Any) -> list[T]:
        return await self.get(parameters_find_by_id_range(from_id, to_id))

    async def find(self, filter: Mapping[str, Any]) -> list[T]:
        return await self.get(parameters_find(filter))


class DataReceiver(DataHandler[T]):
    """Write-only data handler."""

    @abstractmethod
    async def put_impl(self, parameters: Mapping[str, Any] | None, payload: Any) -> Any:
        """Store ``payload`` and return the raw result."""
        ...

    async def put(
        self,
        parameters: Mapping[str, Any] | None = None,
        data_list: list[T] | None = None,
    ) -> list[T]:
        """Put ``data_list`` using ``parameters``."""
        payload = self.transform_from_list(data_list)
        result = await self.put_impl(parameters, payload)
        return self.transform_to_list(result)


class DataRepository(DataSource[T], DataReceiver[T]):
    """Read-write data handler."""


class DataRepositoryWrapper(DataRepository[T]):
    """
    A repository made of a source and a receiver.

    Transformations prefer the receiver's transformers, then the source's,
    then the wrapper's own.
    """

    def __init__(
        self,
        domain: str,
        name: str,
        source: DataSource[T],
        receiver: DataReceiver[T],
        *,
        registry: Registry | None = None,
    ):
        self.source = source
        self.receiver = receiver
        super().__init__(domain, name, registry=registry)

    async def get(self, parameters: Mapping[str, Any] | None = None) -> list[T]:
        return await self.source.get(parameters)

    async def get_impl(self, parameters: Mapping[str, Any] | None) -> Any:
        return await self.source.get_impl(parameters)

    async def put(
        self,
        parameters: Mapping[str, Any] | None = None,
        data_list: list[T] | None = None,
    ) -> list[T]:
        return await self.receiver.put(parameters, data_list)

    async def put_impl(self, parameters: Mapping[str, Any] | None, payload: Any) -> Any:
        return await self.receiver.put_impl(parameters, payload)

    def _transform_delegate(self, attribute: str) -> DataHandler[T] | None:
        if getattr(self.receiver, attribute) is not None:
            return self.receiver
        if getattr(self.source, attribute) is not None:
            return self.source
        return None

    def transform_to(self, o: Any) -> T:
        delegate = self._transform_delegate("transformer_to")
        return delegate.transform_to(o) if delegate else super().transform_to(o)

    def transform_to_list(self, o: Any) -> list[T]:
        delegate = self._transform_delegate("transformer_to_list") or self._transform_delegate(
            "transformer_to"
        )
        return delegate.transform_to_list(o) if delegate else super().transform_to_list(o)

    def transform_from(self, data: T) -> Any:
        delegate = self._transform_delegate("transformer_from")
        return delegate.transform_from(data) if delegate else super().transform_from(data)

    def transform_from_list(self, data_list: list[T] | None) -> Any:
        delegate = self._transform_delegate("transformer_from_list") or self._transform_delegate(
            "transformer_from"
        )
        return delegate.transform_from_list(data_list) if delegate else super().transform_from_list(data_list)


__all__ = [
    "PARAM_ID",
    "PARAM_FROM_ID",
    "PARAM_TO_ID",
    "PARAM_FILTER",
    "PARAM_PAYLOAD",
    "handler_id",
    "parameters_find_by_id",
    "parameters_find_by_id_range",
    "parameters_find",
    "DataHandler",
    "DataSource",
    "DataReceiver",
    "DataRepository",
    "DataRepositoryWrapper",
]
