"""Tests for DynCall and executor backed data handlers."""

import pytest

from dyncall.calls import DynCall, FunctionExecutor, StaticExecutor
from dyncall.core.output import OutputKind
from dyncall.data import (
    DataReceiverDynCall,
    DataReceiverExecutor,
    DataRepositoryWrapper,
    DataSourceDynCall,
    DataSourceExecutor,
    Registry,
)


def parse_ints(o):
    return [int(x) for x in str(o).split(",")]


class TestDynCallBacked:
    @pytest.mark.asyncio
    async def test_source(self):
        call = DynCall([], OutputKind.STRING)
        call.executor = StaticExecutor("1,2,3,4,5,6")
        source = DataSourceDynCall("foo", "test", call)
        source.transformer_to_list = parse_ints
        assert await source.get() == [1, 2, 3, 4, 5, 6]

    @pytest.mark.asyncio
    async def test_source_passes_declared_parameters(self):
        call = DynCall(["page"], OutputKind.JSON)
        call.executor = FunctionExecutor(lambda dyn_call, params: [params.get("page")])
        source = DataSourceDynCall("foo", "paged", call)
        assert await source.get({"page": 2, "other": "x"}) == ["2"]

    @pytest.mark.asyncio
    async def test_receiver_payload_reaches_declared_field(self):
        seen = {}

        def function(dyn_call, params):
            seen.update(params)
            return "10,11,12"

        call = DynCall(["--payload"], OutputKind.STRING)
        call.executor = FunctionExecutor(function)
        receiver = DataReceiverDynCall("foo", "test", call)
        receiver.transformer_from_list = lambda items: ",".join(map(str, items))
        receiver.transformer_to_list = parse_ints
        assert await receiver.put(None, [1, 2, 3]) == [10, 11, 12]
        assert seen == {"--payload": "1,2,3"}

    @pytest.mark.asyncio
    async def test_wrapper_over_dyncall_handlers(self):
        get_call = DynCall([], OutputKind.STRING)
        get_call.executor = StaticExecutor("1,2")
        put_call = DynCall([], OutputKind.STRING)
        put_call.executor = StaticExecutor("10,11,12")

        registry = Registry()
        source = DataSourceDynCall("foo", "test", get_call, registry=registry)
        receiver = DataReceiverDynCall("foo", "test", put_call, registry=registry)
        receiver.transformer_to_list = parse_ints
        wrapper = DataRepositoryWrapper("foo", "test", source, receiver, registry=registry)

        assert registry.repository("foo:test") is wrapper
        assert await wrapper.get() == ["1,2"]
        assert await wrapper.put(None, [10, 11, 12]) == [10, 11, 12]


class TestExecutorBacked:
    @pytest.mark.asyncio
    async def test_source(self):
        source = DataSourceExecutor("foo", "test", StaticExecutor("1,2,3"))
        source.transformer_to_list = parse_ints
        assert await source.get() == [1, 2, 3]
        assert source.dyn_call.allow_retries is True
        assert source.dyn_call.output_kind is OutputKind.JSON
        assert source.dyn_call.output_filter is None

    @pytest.mark.asyncio
    async def test_source_transforms_once(self):
        source = DataSourceExecutor("foo", "test", StaticExecutor([1, 2]))
        source.transformer_to = lambda o: o + 1
        assert await source.get() == [2, 3]

    @pytest.mark.asyncio
    async def test_source_receives_raw_parameters(self):
        seen = []
        source = DataSourceExecutor("foo", "test", FunctionExecutor(lambda dyn_call, params: seen.append(params)))
        assert await source.find_by_id(5) == []
        assert seen == [{"--id": 5}]

    @pytest.mark.asyncio
    async def test_receiver(self):
        seen = []

        def function(dyn_call, params):
            seen.append(params)
            return [10, 11, 12]

        receiver = DataReceiverExecutor("foo", "test", FunctionExecutor(function))
        assert await receiver.put({"mode": "append"}, [1, 2]) == [10, 11, 12]
        assert seen == [{"mode": "append", "--payload": [1, 2]}]

    @pytest.mark.asyncio
    async def test_receiver_without_payload(self):
        seen = []
        receiver = DataReceiverExecutor("foo", "test", FunctionExecutor(lambda d, params: seen.append(params)))
        await receiver.put()
        assert seen == [{}]
