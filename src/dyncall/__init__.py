"""
dyncall - declarative remote calls.

A :class:`DynCall` declares a call's inputs and output kind; an executor
performs it (static value, function, or HTTP with retries, filtering and
credential refresh). Data handlers put a get/find/put facade on top.
"""

__version__ = "0.1.0"

from dyncall.calls import DynCall, Executor, FunctionExecutor, StaticExecutor
from dyncall.calls.http import HttpClient, HttpExecutor, HttpExecutorFactory, HttpMethod
from dyncall.core import (
    DynCallError,
    OutputKind,
    configure_logging,
    get_logger,
    get_settings,
)
from dyncall.data import Registry

__all__ = [
    "__version__",
    "DynCall",
    "Executor",
    "StaticExecutor",
    "FunctionExecutor",
    "HttpClient",
    "HttpExecutor",
    "HttpExecutorFactory",
    "HttpMethod",
    "OutputKind",
    "DynCallError",
    "configure_logging",
    "get_logger",
    "get_settings",
    "Registry",
]
