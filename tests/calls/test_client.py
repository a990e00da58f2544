"""Tests for the httpx-backed HttpClient."""

import json

import httpx
import pytest

from dyncall.calls.http.client import HttpClient, HttpMethod
from dyncall.calls.http.credentials import BasicCredential, BearerCredential
from dyncall.core.errors import HttpError


class TestHttpMethod:
    def test_parse(self):
        assert HttpMethod.parse("post") is HttpMethod.POST
        assert HttpMethod.parse(HttpMethod.GET) is HttpMethod.GET

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            HttpMethod.parse("FETCH")


class TestBuildUrl:
    @pytest.mark.parametrize(
        "path,full_path,expected",
        [
            ("items", False, "http://api.test/v1/items"),
            ("/items", False, "http://api.test/v1/items"),
            (None, False, "http://api.test/v1"),
            ("items", True, "http://api.test/items"),
            ("/other/x", True, "http://api.test/other/x"),
            ("https://elsewhere.test/a", False, "https://elsewhere.test/a"),
        ],
    )
    def test_resolution(self, path, full_path, expected):
        client = HttpClient("http://api.test/v1")
        assert client.build_url(path, full_path=full_path) == expected

    def test_origin_with_port(self):
        assert HttpClient("http://localhost:8080/api").origin == "http://localhost:8080"


class TestRequest:
    @pytest.mark.asyncio
    async def test_get_with_query(self, mock_http):
        client, recorder = mock_http(lambda request: httpx.Response(200, text="ok"))
        response = await client.request(HttpMethod.GET, "items", query_parameters={"a": "1", "skip": None})
        assert response.status_code == 200
        assert response.body == "ok"
        assert recorder.last.url.path == "/v1/items"
        assert dict(recorder.last.url.params) == {"a": "1"}

    @pytest.mark.asyncio
    async def test_query_string_replaces_parameters(self, mock_http):
        client, recorder = mock_http(lambda request: httpx.Response(200))
        await client.request("GET", "items", query_parameters={"a": "1"}, query_string="b=2")
        assert dict(recorder.last.url.params) == {"b": "2"}

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self, mock_http):
        client, _ = mock_http(lambda request: httpx.Response(204))
        response = await client.request("DELETE", "items/1")
        assert response.body is None
        assert response.is_ok

    @pytest.mark.asyncio
    async def test_json_body_encoded(self, mock_http):
        client, recorder = mock_http(lambda request: httpx.Response(201, text="{}"))
        await client.request("POST", "items", body={"name": "x"})
        assert json.loads(recorder.last.content) == {"name": "x"}
        assert recorder.last.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_text_body_with_content_type(self, mock_http):
        client, recorder = mock_http(lambda request: httpx.Response(200))
        await client.request("PUT", "items", body="a,b", content_type="text/plain")
        assert recorder.last.content == b"a,b"
        assert recorder.last.headers["content-type"] == "text/plain"

    @pytest.mark.asyncio
    async def test_default_authorization(self, mock_http):
        client, recorder = mock_http(lambda request: httpx.Response(200))
        client.authorization = BearerCredential("t")
        await client.request("GET", "me")
        assert recorder.last.headers["authorization"] == "Bearer t"

    @pytest.mark.asyncio
    async def test_request_authorization_wins(self, mock_http):
        client, recorder = mock_http(lambda request: httpx.Response(200))
        client.authorization = BearerCredential("t")
        await client.request("GET", "me", authorization=BasicCredential("u", "p"))
        assert recorder.last.headers["authorization"].startswith("Basic ")

    @pytest.mark.asyncio
    async def test_status_error(self, mock_http):
        client, _ = mock_http(lambda request: httpx.Response(503, text="down"))
        with pytest.raises(HttpError) as exc_info:
            await client.request("GET", "items")
        assert exc_info.value.status_code == 503
        assert exc_info.value.body == "down"
        assert exc_info.value.is_status_error

    @pytest.mark.asyncio
    async def test_network_error(self, mock_http):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client, _ = mock_http(handler)
        with pytest.raises(HttpError) as exc_info:
            await client.request("GET", "items")
        assert exc_info.value.is_network_error
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, mock_http):
        client, _ = mock_http(lambda request: httpx.Response(200))
        async with client:
            await client.request("GET", "x")
            assert client._client is not None
        assert client._client is None
