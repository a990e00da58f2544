"""
Structured error types for dyncall.

Every failure a caller can observe is a ``DynCallError`` subclass carrying a
category, a retry flag, structured context and the chained cause.

Manifesto:
    - **Typed Error Hierarchy:** Transport, coercion, configuration and
      interceptor failures are different types with different policies
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry call/executor metadata for logging
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                       DynCallError                           │
        │  (category, retryable, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  TransportError     CoercionError        ConfigError         │
        │  (TRANSPORT)        (PARSE)              (CONFIG)            │
        │       │                                      │               │
        │  HttpError                          InvalidConfigError       │
        │                                     UnsupportedOperation     │
        │                                     HandlerNotFoundError     │
        │                                                              │
        │  InterceptorError (INTERCEPTOR, logged, never raised)        │
        └─────────────────────────────────────────────────────────────┘

Propagation policy:
    - TransportError is absorbed by the HTTP executor (retry or fallback)
    - CoercionError and ConfigError always reach the caller
    - InterceptorError is only ever logged

Examples:
    >>> error = HttpError("Service unavailable", status_code=503)
    >>> error.is_status_error
    True
    >>> error.with_context(executor="GET /items").context.executor
    'GET /items'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    TRANSPORT = "TRANSPORT"       # Network, HTTP status
    PARSE = "PARSE"               # Output coercion
    VALIDATION = "VALIDATION"     # Output validator rejections
    CONFIG = "CONFIG"             # Executor/handler wiring
    AUTH = "AUTH"                 # Credentials
    INTERCEPTOR = "INTERCEPTOR"   # Interceptors and callbacks
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set end up in ``to_dict()``; anything that has no
    dedicated field goes into ``metadata``.
    """

    call: str | None = None
    executor: str | None = None
    handler: str | None = None
    method: str | None = None
    url: str | None = None
    http_status: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["call", "executor", "handler", "method", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DynCallError(Exception):
    """
    Base exception for all dyncall errors.

    Subclasses set ``default_category`` and ``default_retryable`` so callers
    only pass what differs from the defaults.

    Examples:
        >>> error = DynCallError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DynCallError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConfigError("No executor").with_context(call="login")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSPORT ERRORS
# =============================================================================


class TransportError(DynCallError):
    """Network or HTTP failure while talking to the backend."""

    default_category = ErrorCategory.TRANSPORT
    default_retryable = True


class HttpError(TransportError):
    """
    Failed HTTP exchange.

    ``status_code`` is ``None`` when no response was received at all
    (connection refused, DNS failure, timeout).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        body: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.url = url
        self.body = body
        if url is not None:
            self.context.url = url
        if status_code is not None:
            self.context.http_status = status_code

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None

    @property
    def is_status_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_status_error(self) -> bool:
        return self.status_code is not None and self.status_code >= 400

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.status_code is not None:
            result["status_code"] = self.status_code
        return result


# =============================================================================
# COERCION ERRORS
# =============================================================================


class CoercionError(DynCallError, ValueError):
    """
    A received output could not be coerced to the declared output kind.

    Never retryable: a malformed success response is a contract bug
    between caller and backend, not a transient fault.
    """

    default_category = ErrorCategory.PARSE
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        output_kind: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.output_kind = output_kind
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.output_kind:
            result["output_kind"] = self.output_kind
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(DynCallError):
    """
    Invalid wiring of calls, executors or handlers.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


class UnsupportedOperationError(ConfigError):
    """A data handler was asked for an operation it has no configuration for."""

    def __init__(self, handler_id: str, operation: str):
        self.handler_id = handler_id
        self.operation = operation
        super().__init__(f"Operation '{operation}' not supported by handler: {handler_id}")
        self.context.handler = handler_id


class HandlerNotFoundError(ConfigError):
    """No data handler registered under the requested id."""

    def __init__(self, handler_id: str):
        self.handler_id = handler_id
        super().__init__(f"Data handler not found: {handler_id}")


# =============================================================================
# INTERCEPTOR ERRORS
# =============================================================================


class InterceptorError(DynCallError):
    """Failure inside an output interceptor or a call callback."""

    default_category = ErrorCategory.INTERCEPTOR
    default_retryable = False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, DynCallError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, DynCallError):
        return error.category
    if isinstance(error, (ConnectionError, TimeoutError)):
        return ErrorCategory.TRANSPORT
    if isinstance(error, ValueError):
        return ErrorCategory.PARSE
    if isinstance(error, (KeyError, AttributeError, TypeError)):
        return ErrorCategory.CONFIG
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DynCallError",
    "TransportError",
    "HttpError",
    "CoercionError",
    "ConfigError",
    "InvalidConfigError",
    "UnsupportedOperationError",
    "HandlerNotFoundError",
    "InterceptorError",
    "is_retryable",
    "categorize_error",
]
