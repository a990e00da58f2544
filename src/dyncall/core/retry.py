"""Retry policies and per-call attempt tracking for remote calls.

The HTTP executor retries transport failures classified as retryable with a
two-tier, non-exponential backoff: a short delay while only a few errors
have been recorded, a longer one afterwards. There is never a delay before
the first attempt.

Example:
    >>> from dyncall.core.retry import TieredBackoff
    >>>
    >>> strategy = TieredBackoff(short_delay=0.2, long_delay=0.5, short_delay_errors=2)
    >>> [strategy.next_delay(n) for n in (1, 2, 3, 4)]
    [0.2, 0.2, 0.5, 0.5]
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class RetryStrategy(ABC):
    """Abstract base for retry strategies."""

    @abstractmethod
    def next_delay(self, error_count: int) -> float:
        """Calculate delay before the next attempt.

        Args:
            error_count: Number of errors recorded so far (>= 1)

        Returns:
            Delay in seconds before next attempt
        """
        ...

    @abstractmethod
    def should_retry(self, error_count: int, remaining: int) -> bool:
        """Determine if another attempt may be scheduled.

        Args:
            error_count: Number of errors recorded so far
            remaining: Retry budget left

        Returns:
            True if should retry, False otherwise
        """
        ...


@dataclass
class TieredBackoff(RetryStrategy):
    """Two-tier backoff.

    Delay = short_delay while error_count <= short_delay_errors, else long_delay.

    Attributes:
        short_delay: Delay in seconds for the first errors
        long_delay: Delay in seconds once errors pile up
        short_delay_errors: How many recorded errors still use short_delay
    """

    short_delay: float = 0.2
    long_delay: float = 0.5
    short_delay_errors: int = 2

    @classmethod
    def from_settings(cls) -> TieredBackoff:
        """Build the strategy from :class:`~dyncall.core.settings.DynCallSettings`."""
        from dyncall.core.settings import get_settings

        settings = get_settings()
        return cls(
            short_delay=settings.retry_short_delay,
            long_delay=settings.retry_long_delay,
            short_delay_errors=settings.retry_short_delay_errors,
        )

    def next_delay(self, error_count: int) -> float:
        if error_count <= 0:
            return 0.0
        if error_count <= self.short_delay_errors:
            return self.short_delay
        return self.long_delay

    def should_retry(self, error_count: int, remaining: int) -> bool:
        return remaining > 0


@dataclass
class NoRetry(RetryStrategy):
    """No retry - one attempt only."""

    def next_delay(self, error_count: int) -> float:
        return 0.0

    def should_retry(self, error_count: int, remaining: int) -> bool:
        return False


class CallState(str, Enum):
    """States of one logical remote call."""

    NOT_STARTED = "not_started"
    SENDING = "sending"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED_TERMINAL = "failed_terminal"

    @property
    def is_terminal(self) -> bool:
        return self in (CallState.SUCCEEDED, CallState.FAILED_TERMINAL)


_TRANSITIONS: dict[CallState, frozenset[CallState]] = {
    CallState.NOT_STARTED: frozenset({CallState.SENDING}),
    CallState.SENDING: frozenset(
        {CallState.SUCCEEDED, CallState.RETRYING, CallState.FAILED_TERMINAL}
    ),
    CallState.RETRYING: frozenset({CallState.SENDING}),
    CallState.SUCCEEDED: frozenset(),
    CallState.FAILED_TERMINAL: frozenset(),
}


@dataclass
class CallAttempt:
    """Tracks the state machine of one logical call.

    Example:
        >>> attempt = CallAttempt(strategy=TieredBackoff(), max_retries=3)
        >>> attempt.start_sending()
        >>> attempt.record_failure(ConnectionError("refused"))
        >>> attempt.can_retry()
        True
    """

    strategy: RetryStrategy
    max_retries: int = 0
    state: CallState = field(default=CallState.NOT_STARTED, init=False)
    attempts: int = field(default=0, init=False)
    errors: list[Exception] = field(default_factory=list, init=False)
    started_at: datetime = field(default_factory=utcnow, init=False)

    @property
    def remaining(self) -> int:
        return max(self.max_retries - len(self.errors), 0)

    @property
    def last_error(self) -> Exception | None:
        return self.errors[-1] if self.errors else None

    @property
    def elapsed_seconds(self) -> float:
        return (utcnow() - self.started_at).total_seconds()

    def _transition(self, target: CallState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid call state transition: {self.state.value} -> {target.value}")
        self.state = target

    def start_sending(self) -> None:
        self._transition(CallState.SENDING)
        self.attempts += 1

    def can_retry(self) -> bool:
        """Whether a failure recorded now may be followed by another attempt."""
        return self.strategy.should_retry(len(self.errors), self.remaining)

    def record_failure(self, error: Exception) -> None:
        """Record a retryable failure and move to RETRYING."""
        self.errors.append(error)
        self._transition(CallState.RETRYING)

    def next_delay(self) -> float:
        return self.strategy.next_delay(len(self.errors))

    def succeed(self) -> None:
        self._transition(CallState.SUCCEEDED)

    def fail(self) -> None:
        self._transition(CallState.FAILED_TERMINAL)


__all__ = [
    "RetryStrategy",
    "TieredBackoff",
    "NoRetry",
    "CallState",
    "CallAttempt",
]
