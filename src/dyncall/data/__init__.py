"""
Data facade.

Named data handlers (``domain:name``) exposing get/find/put over DynCalls,
executors or HTTP endpoints, plus an explicit :class:`Registry`.
"""

from dyncall.data.adapters import (
    DataReceiverDynCall,
    DataReceiverExecutor,
    DataSourceDynCall,
    DataSourceExecutor,
)
from dyncall.data.handlers import (
    DataHandler,
    DataReceiver,
    DataRepository,
    DataRepositoryWrapper,
    DataSource,
)
from dyncall.data.http import (
    DataCallHttp,
    DataOperation,
    DataReceiverHttp,
    DataRepositoryHttp,
    DataSourceHttp,
)
from dyncall.data.registry import Registry

__all__ = [
    "DataHandler",
    "DataSource",
    "DataReceiver",
    "DataRepository",
    "DataRepositoryWrapper",
    "DataSourceDynCall",
    "DataReceiverDynCall",
    "DataSourceExecutor",
    "DataReceiverExecutor",
    "DataOperation",
    "DataCallHttp",
    "DataSourceHttp",
    "DataReceiverHttp",
    "DataRepositoryHttp",
    "Registry",
]
