"""Tests for HTTP-backed data handlers."""

import json

import httpx
import pytest

from dyncall.core.errors import InvalidConfigError, UnsupportedOperationError
from dyncall.data import (
    DataCallHttp,
    DataOperation,
    DataReceiverHttp,
    DataRepositoryHttp,
    DataSourceHttp,
    Registry,
)
from dyncall.data.http import operation_for


def echo_path(request):
    """Responds with the request path and query as JSON."""
    return httpx.Response(
        200,
        text=json.dumps({"path": request.url.path, "query": dict(request.url.params)}),
    )


class TestOperationFor:
    @pytest.mark.parametrize(
        "parameters,expected",
        [
            (None, DataOperation.GET),
            ({"a": 1}, DataOperation.GET),
            ({"--id": 1}, DataOperation.FIND_BY_ID),
            ({"--fromID": 1, "--toID": 2}, DataOperation.FIND_BY_ID_RANGE),
            ({"--fromID": 1}, DataOperation.GET),
            ({"--filter": {"a": 1}}, DataOperation.FIND),
        ],
    )
    def test_selection(self, parameters, expected):
        assert operation_for(parameters) is expected


class TestDataCallHttp:
    def test_requires_client_or_base_url(self):
        with pytest.raises(InvalidConfigError):
            DataCallHttp(path="items")

    def test_builds_client_from_base_url(self):
        config = DataCallHttp(base_url="http://api.test", path="items")
        assert config.client.base_url == "http://api.test"

    @pytest.mark.parametrize(
        "parameters,expected",
        [
            ({"--id": 7}, ("items/7", None)),
            ({"--id": 7, "lang": "en"}, ("items/7", {"lang": "en"})),
            ({"--fromID": 1, "--toID": 9}, ("items/1..9", None)),
            ({"--filter": {"name": "x", "active": True}}, ("items", {"name": "x", "active": "true"})),
            ({"page": 2}, ("items", {"page": "2"})),
            (None, ("items", None)),
        ],
    )
    def test_resolve_request(self, parameters, expected):
        config = DataCallHttp(base_url="http://api.test", path="items")
        assert config.resolve_request(parameters) == expected

    def test_resolve_request_trailing_slash(self):
        config = DataCallHttp(base_url="http://api.test", path="items/")
        assert config.resolve_request({"--id": 1})[0] == "items/1"

    def test_resolve_request_path_pattern(self):
        config = DataCallHttp(base_url="http://api.test", path="users/{{user}}/posts")
        assert config.resolve_request({"user": "joe", "--id": 3}) == ("users/joe/posts/3", {"user": "joe"})

    @pytest.mark.asyncio
    async def test_call_and_resolve(self, mock_http):
        client, recorder = mock_http(echo_path)
        config = DataCallHttp(client=client, path="items")
        assert await config.call_and_resolve({"--id": 5}) == {"path": "/v1/items/5", "query": {}}
        assert recorder.last.method == "GET"

    @pytest.mark.asyncio
    async def test_call_and_resolve_retries(self, mock_http, zero_backoff, respond_sequence):
        client, recorder = mock_http(respond_sequence(httpx.Response(500), httpx.Response(200, text="[1]")))
        config = DataCallHttp(client=client, path="items", max_retries=2, retry_strategy=zero_backoff)
        assert await config.call_and_resolve() == [1]
        assert recorder.count == 2

    @pytest.mark.asyncio
    async def test_failure_resolves_to_none(self, mock_http):
        client, recorder = mock_http(lambda request: httpx.Response(500))
        config = DataCallHttp(client=client, path="items", max_retries=0)
        assert await config.call_and_resolve() is None
        assert recorder.count == 1


class TestDataSourceHttp:
    @pytest.mark.asyncio
    async def test_get_and_selectors(self, mock_http):
        client, _ = mock_http(echo_path)
        source = DataSourceHttp("users", "accounts", client=client, path="accounts")

        assert await source.get() == [{"path": "/v1/accounts", "query": {}}]
        assert await source.find_by_id(42) == [{"path": "/v1/accounts/42", "query": {}}]
        assert await source.find_by_id_range(1, 3) == [{"path": "/v1/accounts/1..3", "query": {}}]
        assert await source.find({"name": "ann"}) == [{"path": "/v1/accounts", "query": {"name": "ann"}}]

    @pytest.mark.asyncio
    async def test_list_response(self, mock_http):
        client, _ = mock_http(lambda request: httpx.Response(200, text="[1, 2, 3]"))
        source = DataSourceHttp("a", "b", client=client, path="numbers")
        source.transformer_to = lambda n: n * 10
        assert await source.get() == [10, 20, 30]

    @pytest.mark.asyncio
    async def test_per_operation_config(self, mock_http):
        client, recorder = mock_http(echo_path)
        source = DataSourceHttp(
            "a",
            "b",
            operations={
                DataOperation.GET: DataCallHttp(client=client, path="list"),
                "find_by_id": DataCallHttp(client=client, method="POST", path="lookup"),
            },
        )
        await source.find_by_id(1)
        assert recorder.last.method == "POST"
        assert recorder.last.url.path == "/v1/lookup/1"

        await source.find({"q": "x"})
        assert recorder.last.method == "GET"
        assert recorder.last.url.path == "/v1/list"

    @pytest.mark.asyncio
    async def test_missing_operation_without_get(self, mock_http):
        client, _ = mock_http(echo_path)
        source = DataSourceHttp(
            "a",
            "b",
            operations={DataOperation.FIND_BY_ID: DataCallHttp(client=client, path="items")},
        )
        assert await source.find_by_id(1) == [{"path": "/v1/items/1", "query": {}}]
        assert not source.supports(DataOperation.GET)
        with pytest.raises(UnsupportedOperationError):
            await source.get()

    def test_registers(self, mock_http):
        client, _ = mock_http(echo_path)
        registry = Registry()
        source = DataSourceHttp("Users", "Accounts", client=client, registry=registry)
        assert registry.source("users:accounts") is source


class TestDataReceiverHttp:
    @pytest.mark.asyncio
    async def test_put_sends_payload(self, mock_http):
        client, recorder = mock_http(lambda request: httpx.Response(200, text=request.content.decode()))
        receiver = DataReceiverHttp("a", "b", client=client, path="items")
        assert await receiver.put(None, [{"id": 1}, {"id": 2}]) == [{"id": 1}, {"id": 2}]
        assert recorder.last.method == "POST"
        assert recorder.last.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_put_text_payload(self, mock_http):
        client, recorder = mock_http(lambda request: httpx.Response(200, text="[" + request.content.decode() + "]"))
        receiver = DataReceiverHttp("a", "b", client=client, method="PUT", path="numbers")
        receiver.transformer_from_list = lambda items: ",".join(map(str, items))
        assert await receiver.put(None, [1, 2, 3]) == [1, 2, 3]
        assert recorder.last.method == "PUT"

    @pytest.mark.asyncio
    async def test_put_is_not_retried(self, mock_http):
        client, recorder = mock_http(lambda request: httpx.Response(503))
        receiver = DataReceiverHttp("a", "b", client=client, path="items")
        assert await receiver.put(None, [1]) == []
        assert recorder.count == 1


class TestDataRepositoryHttp:
    @pytest.mark.asyncio
    async def test_get_and_put(self, mock_http):
        def handler(request):
            if request.method == "POST":
                return httpx.Response(201, text=request.content.decode())
            return echo_path(request)

        client, recorder = mock_http(handler)
        repository = DataRepositoryHttp(
            "users",
            "accounts",
            client=client,
            source_path="accounts",
            receiver_path="accounts/bulk",
        )
        assert await repository.find_by_id(9) == [{"path": "/v1/accounts/9", "query": {}}]
        assert await repository.put(None, [{"name": "ann"}]) == [{"name": "ann"}]
        assert recorder.last.url.path == "/v1/accounts/bulk"

    def test_base_url(self):
        repository = DataRepositoryHttp("a", "b", base_url="http://api.test")
        assert repository.supports(DataOperation.GET)
        assert repository.supports(DataOperation.PUT)

    def test_needs_something(self):
        with pytest.raises(InvalidConfigError):
            DataRepositoryHttp("a", "b")

    @pytest.mark.asyncio
    async def test_from_configs_without_receiver(self, mock_http):
        client, _ = mock_http(echo_path)
        repository = DataRepositoryHttp.from_configs("a", "b", DataCallHttp(client=client, path="x"), None)
        assert await repository.get() == [{"path": "/v1/x", "query": {}}]
        with pytest.raises(UnsupportedOperationError):
            await repository.put(None, [1])

    def test_from_configs_needs_one(self):
        with pytest.raises(InvalidConfigError):
            DataRepositoryHttp.from_configs("a", "b", None, None)


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_source_closes_client_it_built(self):
        source = DataSourceHttp("d", "n", base_url="http://api.test", path="items")
        inner = source.operation_config(DataOperation.GET).client._get_client()
        async with source as entered:
            assert entered is source
        assert inner.is_closed

    @pytest.mark.asyncio
    async def test_repository_closes_client_it_built(self):
        repository = DataRepositoryHttp("a", "b", base_url="http://api.test")
        inner = repository.operation_config(DataOperation.PUT).client._get_client()
        await repository.aclose()
        assert inner.is_closed

    @pytest.mark.asyncio
    async def test_shared_client_stays_open(self, mock_http):
        client, _ = mock_http(echo_path)
        receiver = DataReceiverHttp("d", "n", client=client, path="items")
        inner = client._get_client()
        await receiver.aclose()
        assert not inner.is_closed
        await client.aclose()
