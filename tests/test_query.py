"""Tests for wren.http.query — immutable QueryParams."""

import pytest

from wren.http.query import QueryParams


class TestQueryParams:
    def test_getitem(self) -> None:
        q = QueryParams(b"q=hello&page=2")
        assert q["q"] == "hello"
        assert q["page"] == "2"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            QueryParams(b"q=hello")["missing"]

    def test_get_with_default(self) -> None:
        q = QueryParams(b"q=hello")
        assert q.get("q") == "hello"
        assert q.get("missing") is None
        assert q.get("missing", "fallback") == "fallback"

    def test_first_value_wins(self) -> None:
        assert QueryParams(b"tag=a&tag=b")["tag"] == "a"

    def test_get_list(self) -> None:
        q = QueryParams(b"tag=python&tag=rust&q=hello")
        assert q.get_list("tag") == ["python", "rust"]
        assert q.get_list("missing") == []

    def test_keys_in_send_order(self) -> None:
        q = QueryParams(b"b=1&a=2&b=3")
        assert list(q) == ["b", "a"]
        assert len(q) == 2
        assert q.pairs == (("b", "1"), ("a", "2"), ("b", "3"))

    def test_get_int(self) -> None:
        q = QueryParams(b"page=3&size=abc")
        assert q.get_int("page") == 3
        assert q.get_int("size") is None
        assert q.get_int("missing", 10) == 10

    def test_blank_value_preserved(self) -> None:
        assert QueryParams(b"flag=")["flag"] == ""

    def test_decodes_percent_escapes(self) -> None:
        assert QueryParams(b"name=J%C3%BCrgen+M")["name"] == "Jürgen M"

    def test_raw(self) -> None:
        assert QueryParams(b"a=1").raw == b"a=1"

    def test_contains(self) -> None:
        q = QueryParams(b"a=1")
        assert "a" in q
        assert "b" not in q
