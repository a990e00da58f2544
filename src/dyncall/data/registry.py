"""
Registry of data handlers.

An explicit object owned by application startup; nothing registers
implicitly. Ids are ``domain:name``, case-insensitive.

Usage:
    registry = Registry()
    registry.register(DataSourceHttp("users", "accounts", base_url=API))

    source = registry.source("Users:Accounts")
    accounts = await source.find_by_id(42)
"""

from __future__ import annotations

from typing import Any

from dyncall.core.errors import HandlerNotFoundError, InvalidConfigError
from dyncall.core.logging import get_logger
from dyncall.data.handlers import DataHandler, DataReceiver, DataRepository, DataSource

logger = get_logger(__name__)


def _normalize(id: str) -> str:
    return id.strip().lower()


class Registry:
    """
    Data handlers keyed by id.

    Sources, receivers and repositories are kept apart, so a source and a
    receiver may share an id (the usual way to assemble a
    :class:`~dyncall.data.handlers.DataRepositoryWrapper`). Registering the
    identical instance again is a no-op; a different instance under the same
    id replaces the previous one.
    """

    def __init__(self) -> None:
        self._sources: dict[str, DataSource[Any]] = {}
        self._receivers: dict[str, DataReceiver[Any]] = {}
        self._repositories: dict[str, DataRepository[Any]] = {}

    def _bucket(self, handler: DataHandler[Any]) -> dict[str, Any]:
        if isinstance(handler, DataRepository):
            return self._repositories
        if isinstance(handler, DataSource):
            return self._sources
        if isinstance(handler, DataReceiver):
            return self._receivers
        raise InvalidConfigError("handler", handler, f"Can't handle type: {type(handler).__name__}")

    def register(self, handler: DataHandler[Any]) -> None:
        """Register ``handler`` under its id."""
        if not handler.has_id:
            raise InvalidConfigError("handler", handler, "Data handler needs a domain and a name")

        bucket = self._bucket(handler)
        id = handler.id
        previous = bucket.get(id)
        if previous is handler:
            return

        bucket[id] = handler
        logger.debug(
            "data_handler_registered",
            id=id,
            handler=type(handler).__name__,
            replaced=previous is not None,
        )

    def unregister(self, id: str) -> bool:
        """Remove every handler registered under ``id``."""
        id = _normalize(id)
        removed = False
        for bucket in (self._sources, self._receivers, self._repositories):
            if bucket.pop(id, None) is not None:
                removed = True
        return removed

    def by_id(self, id: str) -> DataHandler[Any] | None:
        """Repository, then source, then receiver registered under ``id``."""
        id = _normalize(id)
        return self._repositories.get(id) or self._sources.get(id) or self._receivers.get(id)

    def get(self, id: str) -> DataHandler[Any]:
        """Like :meth:`by_id`, raising when nothing is registered."""
        handler = self.by_id(id)
        if handler is None:
            raise HandlerNotFoundError(id)
        return handler

    def source(self, id: str) -> DataSource[Any] | None:
        id = _normalize(id)
        return self._sources.get(id) or self._repositories.get(id)

    def receiver(self, id: str) -> DataReceiver[Any] | None:
        id = _normalize(id)
        return self._receivers.get(id) or self._repositories.get(id)

    def repository(self, id: str) -> DataRepository[Any] | None:
        return self._repositories.get(_normalize(id))

    def ids(self) -> list[str]:
        """All registered ids."""
        return sorted(set(self._sources) | set(self._receivers) | set(self._repositories))

    def clear(self) -> None:
        """Clear registry (for testing)."""
        self._sources.clear()
        self._receivers.clear()
        self._repositories.clear()

    def __contains__(self, id: object) -> bool:
        return isinstance(id, str) and self.by_id(id) is not None

    def __len__(self) -> int:
        return len(self.ids())


__all__ = ["Registry"]
