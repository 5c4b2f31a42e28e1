"""Tests for JSON recovery helpers."""

import json

import pytest

from market_scout.utils.json_recovery import extract_json_object, safe_json_loads


class TestExtractJsonObject:
    def test_ignores_trailing_prose_braces(self) -> None:
        text = 'Result: {"a": 1, "b": "x}y"} and {not json}'
        assert extract_json_object(text) == {"a": 1, "b": "x}y"}

    def test_nested_object(self) -> None:
        assert extract_json_object('{"patch": {"taste": {}}}') == {"patch": {"taste": {}}}

    def test_escaped_quote_in_string(self) -> None:
        assert extract_json_object(r'{"t": "say \"hi\" {"}') == {"t": 'say "hi" {'}

    def test_truncated_returns_none(self) -> None:
        assert extract_json_object('{"a": [1, 2') is None

    def test_no_object(self) -> None:
        assert extract_json_object("nothing here") is None

    def test_invalid_balanced_object(self) -> None:
        assert extract_json_object("{a: 1}") is None


class TestSafeJsonLoads:
    def test_repairs_lone_backslash(self) -> None:
        assert safe_json_loads(r'{"path": "C:\data"}') == {"path": "C:\\data"}

    def test_raises_when_unrecoverable(self) -> None:
        with pytest.raises(json.JSONDecodeError):
            safe_json_loads("not json")
