"""
Calls and executors.

``DynCall`` is the contract, an ``Executor`` performs it. HTTP execution
lives in :mod:`dyncall.calls.http`.
"""

from dyncall.calls.call import DynCall, to_parameter_value
from dyncall.calls.executors import Executor, FunctionExecutor, StaticExecutor

__all__ = [
    "DynCall",
    "to_parameter_value",
    "Executor",
    "StaticExecutor",
    "FunctionExecutor",
]
