"""Tests for specforge.extensions.values -- typed readers and coalescing."""

from __future__ import annotations

from specforge.extensions.values import (
    coalesce,
    coalesce_list,
    read_bool,
    read_float,
    read_int,
    read_str,
    read_str_list,
    scope_extensions,
)


class TestReaders:
    """Mis-typed values read as missing."""

    def test_read_str(self) -> None:
        assert read_str({"k": "v"}, "k") == "v"
        assert read_str({"k": ""}, "k") is None
        assert read_str({"k": 5}, "k") is None
        assert read_str({}, "k") is None

    def test_read_int_rejects_bool(self) -> None:
        assert read_int({"k": 5}, "k") == 5
        assert read_int({"k": True}, "k") is None
        assert read_int({"k": "5"}, "k") is None
        assert read_int({"k": 1.5}, "k") is None

    def test_read_float_widens_int(self) -> None:
        assert read_float({"k": 2}, "k") == 2.0
        assert read_float({"k": 0.5}, "k") == 0.5
        assert read_float({"k": False}, "k") is None

    def test_read_bool(self) -> None:
        assert read_bool({"k": False}, "k") is False
        assert read_bool({"k": "true"}, "k") is None

    def test_read_str_list_filters_items(self) -> None:
        assert read_str_list({"k": ["a", 1, "", "b"]}, "k") == ["a", "b"]
        assert read_str_list({"k": "a"}, "k") == []


class TestScopes:
    """Scope extraction and precedence."""

    def test_scope_extensions(self) -> None:
        assert scope_extensions({"x-a": 1, "get": {}, "summary": "s"}) == {"x-a": 1}
        assert scope_extensions(None) == {}

    def test_first_scope_wins(self) -> None:
        assert coalesce(read_int, "x-n", {"x-n": 1}, {"x-n": 2}) == 1

    def test_mistyped_value_falls_through(self) -> None:
        assert coalesce(read_int, "x-n", {"x-n": "many"}, {}, {"x-n": 3}) == 3

    def test_nothing_set(self) -> None:
        assert coalesce(read_str, "x-s", {}, {}, {}) is None

    def test_empty_list_counts_as_unset(self) -> None:
        assert coalesce_list("x-l", {"x-l": []}, {"x-l": ["a"]}) == ["a"]
        assert coalesce_list("x-l", {}, {}) == []
