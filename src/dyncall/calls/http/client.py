"""
HTTP transport used by the HTTP executor.

``HttpClient`` is a thin layer over ``httpx.AsyncClient`` that speaks the
terms the executor needs: a method, a path relative to a base URL, an
optional credential, query parameters and a body. Any status >= 400 and any
httpx transport failure surface as :class:`~dyncall.core.errors.HttpError`,
which the executor classifies.

The client carries a mutable default ``authorization``. Requests that pass no
credential of their own use it; credential-refresh interceptors replace it
after a login call.

Examples:
    >>> client = HttpClient("https://api.example.com/v1")
    >>> client.build_url("items/42")
    'https://api.example.com/v1/items/42'
    >>> client.build_url("/status", full_path=True)
    'https://api.example.com/status'
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from dyncall.calls.http.credentials import Credential
from dyncall.core.errors import HttpError
from dyncall.core.logging import get_logger

logger = get_logger(__name__)


class HttpMethod(str, Enum):
    """Supported HTTP methods."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, value: str | HttpMethod) -> HttpMethod:
        if isinstance(value, HttpMethod):
            return value
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown HTTP method: {value!r}") from None


@dataclass(frozen=True)
class HttpResponse:
    """Response of a successful (status < 400) request.

    ``body`` is ``None`` when the response has no content.
    """

    status_code: int
    body: str | None
    content_type: str | None = None
    url: str | None = None

    @property
    def is_ok(self) -> bool:
        return 200 <= self.status_code < 300


class HttpClient:
    """
    Async HTTP client bound to a base URL.

    Args:
        base_url: Prefix of every relative request path
        authorization: Default credential
        timeout: Request timeout in seconds (default from settings)
        transport: Custom httpx transport (``httpx.MockTransport`` in tests)
        headers: Extra headers sent with every request
    """

    def __init__(
        self,
        base_url: str,
        *,
        authorization: Credential | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: Mapping[str, str] | None = None,
    ):
        if timeout is None:
            from dyncall.core.settings import get_settings

            timeout = get_settings().http_timeout

        self.base_url = base_url.strip()
        self.authorization = authorization
        self.timeout = timeout
        self.headers = dict(headers or {})
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    # ------------------------------------------------------------------ #
    # URL building
    # ------------------------------------------------------------------ #

    @property
    def origin(self) -> str:
        url = httpx.URL(self.base_url)
        port = f":{url.port}" if url.port else ""
        return f"{url.scheme}://{url.host}{port}"

    def build_url(self, path: str | None, *, full_path: bool = False) -> str:
        """Resolve ``path`` against the base URL (or its origin for full paths)."""
        path = (path or "").strip()

        if path.startswith(("http://", "https://")):
            return path

        if full_path:
            return f"{self.origin}/{path.lstrip('/')}"

        if not path:
            return self.base_url

        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers=self.headers,
            )
        return self._client

    @staticmethod
    def _encode_body(body: Any, content_type: str | None) -> tuple[bytes | None, str | None]:
        if body is None:
            return None, None
        if isinstance(body, bytes):
            return body, content_type
        if isinstance(body, str):
            return body.encode("utf-8"), content_type
        return json.dumps(body).encode("utf-8"), content_type or "application/json"

    async def request(
        self,
        method: HttpMethod | str,
        path: str | None,
        *,
        full_path: bool = False,
        authorization: Credential | None = None,
        query_parameters: Mapping[str, Any] | None = None,
        query_string: str | None = None,
        body: Any = None,
        content_type: str | None = None,
    ) -> HttpResponse:
        """
        Send one request.

        Args:
            query_string: Raw query string; replaces ``query_parameters``
                when given

        Raises:
            HttpError: Status >= 400 or transport failure
        """
        method = HttpMethod.parse(method)
        url = self.build_url(path, full_path=full_path)

        if query_string:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{query_string.lstrip('?')}"
            params = None
        else:
            params = {
                key: value
                for key, value in (query_parameters or {}).items()
                if value is not None
            } or None

        headers: dict[str, str] = {}
        credential = authorization or self.authorization
        if credential is not None:
            headers["Authorization"] = credential.header_value()

        content, content_type = self._encode_body(body, content_type)
        if content is not None and content_type:
            headers["Content-Type"] = content_type

        try:
            response = await self._get_client().request(
                method.value,
                url,
                params=params,
                content=content,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise HttpError(
                f"{method.value} {url} failed: {e}",
                url=url,
                cause=e,
            ).with_context(method=method.value) from e

        text = response.text
        if response.status_code >= 400:
            raise HttpError(
                f"{method.value} {url} returned {response.status_code}",
                status_code=response.status_code,
                url=str(response.request.url),
                body=text or None,
            ).with_context(method=method.value)

        return HttpResponse(
            status_code=response.status_code,
            body=text if text else None,
            content_type=response.headers.get("content-type"),
            url=str(response.request.url),
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"HttpClient({self.base_url!r})"


__all__ = ["HttpMethod", "HttpResponse", "HttpClient"]
