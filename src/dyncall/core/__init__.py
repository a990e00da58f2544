"""
dyncall core primitives.

Leaf modules with no knowledge of executors or data handlers:

- ``errors``    typed error hierarchy
- ``logging``   structlog configuration
- ``settings``  pydantic-settings configuration
- ``result``    Ok/Err outcome envelope
- ``patterns``  ``{{var}}`` substitution
- ``output``    output kinds and coercion
- ``retry``     backoff policies and call state tracking
"""

from dyncall.core.errors import (
    CoercionError,
    ConfigError,
    DynCallError,
    ErrorCategory,
    ErrorContext,
    HandlerNotFoundError,
    HttpError,
    InterceptorError,
    InvalidConfigError,
    TransportError,
    UnsupportedOperationError,
)
from dyncall.core.logging import LogContext, configure_logging, get_logger
from dyncall.core.output import OutputKind, parse_output
from dyncall.core.patterns import render_pattern, render_pattern_json
from dyncall.core.result import Err, Ok, Result
from dyncall.core.retry import CallAttempt, CallState, NoRetry, RetryStrategy, TieredBackoff
from dyncall.core.settings import DynCallSettings, get_settings

__all__ = [
    # errors
    "DynCallError",
    "ErrorCategory",
    "ErrorContext",
    "TransportError",
    "HttpError",
    "CoercionError",
    "ConfigError",
    "InvalidConfigError",
    "UnsupportedOperationError",
    "HandlerNotFoundError",
    "InterceptorError",
    # logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # output
    "OutputKind",
    "parse_output",
    # patterns
    "render_pattern",
    "render_pattern_json",
    # result
    "Ok",
    "Err",
    "Result",
    # retry
    "RetryStrategy",
    "TieredBackoff",
    "NoRetry",
    "CallState",
    "CallAttempt",
    # settings
    "DynCallSettings",
    "get_settings",
]
