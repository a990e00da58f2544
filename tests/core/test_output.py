"""Tests for output kinds and coercion."""

import pytest

from dyncall.core.errors import CoercionError
from dyncall.core.output import (
    OutputKind,
    parse_bool,
    parse_decimal,
    parse_integer,
    parse_json,
    parse_output,
    parse_string,
)


class TestOutputKind:
    @pytest.mark.parametrize("name", ["json", "JSON", " Json "])
    def test_parse_case_insensitive(self, name):
        assert OutputKind.parse(name) is OutputKind.JSON

    def test_parse_kind_passthrough(self):
        assert OutputKind.parse(OutputKind.BOOL) is OutputKind.BOOL

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown output kind"):
            OutputKind.parse("xml")


class TestParseBool:
    @pytest.mark.parametrize("value", [True, "true", "TRUE", "1", "yes", 1, 2.5])
    def test_truthy(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", [None, False, "false", "0", "", "nope", 0])
    def test_falsy(self, value):
        assert parse_bool(value) is False


class TestParseScalars:
    def test_string(self):
        assert parse_string(None) is None
        assert parse_string("abc") == "abc"
        assert parse_string(12) == "12"

    def test_integer(self):
        assert parse_integer(None) is None
        assert parse_integer(" 42 ") == 42
        assert parse_integer(3.9) == 3

    def test_integer_failure(self):
        with pytest.raises(CoercionError) as exc_info:
            parse_integer("forty-two")
        assert exc_info.value.output_kind == "INTEGER"

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_float_is_coercion_error(self, value):
        with pytest.raises(CoercionError) as exc_info:
            parse_integer(value)
        assert exc_info.value.output_kind == "INTEGER"
        with pytest.raises(CoercionError) as exc_info:
            parse_bool(value)
        assert exc_info.value.output_kind == "BOOL"

    def test_decimal(self):
        assert parse_decimal("2.5") == 2.5
        assert parse_decimal(2) == 2.0
        assert parse_decimal(None) is None

    def test_decimal_failure(self):
        with pytest.raises(CoercionError):
            parse_decimal("x.y")


class TestParseJson:
    def test_object(self):
        assert parse_json('{"a": [1, 2]}') == {"a": [1, 2]}

    def test_already_parsed_passthrough(self):
        value = {"a": 1}
        assert parse_json(value) is value

    def test_bytes(self):
        assert parse_json(b"[1]") == [1]

    def test_none(self):
        assert parse_json(None) is None

    def test_invalid(self):
        with pytest.raises(CoercionError):
            parse_json("{not json")


def test_parse_output_dispatch():
    assert parse_output(OutputKind.INTEGER, "7") == 7
    assert parse_output(OutputKind.BOOL, "true") is True
    assert parse_output(OutputKind.JSON, "[]") == []
