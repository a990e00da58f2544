"""
Shared pytest fixtures for dyncall tests.

This module provides:
- Settings cache isolation
- A recording ``httpx.MockTransport`` wired into an ``HttpClient``
- A zero-delay retry strategy so retry tests do not sleep

Usage:
    @pytest.mark.asyncio
    async def test_something(mock_http, zero_backoff):
        client, recorder = mock_http(lambda request: httpx.Response(200, text="ok"))
        executor = HttpExecutor(client, "GET", "items", retry_strategy=zero_backoff)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from dyncall.calls.http.client import HttpClient
from dyncall.core.retry import TieredBackoff
from dyncall.core.settings import clear_settings_cache

BASE_URL = "http://api.test/v1"


class Recorder:
    """MockTransport handler that keeps every request it sees."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def count(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _replay(*responses: Any) -> Callable[[httpx.Request], httpx.Response]:
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    return handler


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Fresh settings per test, unaffected by the developer's environment."""
    for key in ("DYNCALL_ERROR_MAX_RETRIES", "DYNCALL_WARN_MISSING_PATTERN_VALUES", "DYNCALL_HTTP_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def zero_backoff() -> TieredBackoff:
    return TieredBackoff(short_delay=0.0, long_delay=0.0, short_delay_errors=2)


@pytest.fixture
def mock_http() -> Callable[..., tuple[HttpClient, Recorder]]:
    """Factory: ``mock_http(handler, base_url=BASE_URL) -> (client, recorder)``."""

    def make(handler: Callable[[httpx.Request], httpx.Response], base_url: str = BASE_URL):
        recorder = Recorder(handler)
        client = HttpClient(base_url, transport=httpx.MockTransport(recorder))
        return client, recorder

    return make


@pytest.fixture
def respond_sequence() -> Callable[..., Callable[[httpx.Request], httpx.Response]]:
    """Handler replaying the given responses in order, repeating the last one."""
    return _replay
