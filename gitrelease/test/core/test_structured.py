from __future__ import annotations

from gitrelease.core.structured import (
    as_str_dict,
    get_bool,
    get_int,
    get_raw_str,
    get_str,
    get_str_list,
    get_table,
)


def test_as_str_dict_rejects_non_string_keys() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict({1: "a"}) is None
    assert as_str_dict(["a"]) is None


def test_get_str_strips_and_drops_empty() -> None:
    table = {"a": "  x  ", "b": "   ", "c": 3}
    assert get_str(table, "a") == "x"
    assert get_str(table, "b") is None
    assert get_str(table, "c") is None


def test_get_raw_str_keeps_empty() -> None:
    assert get_raw_str({"prefix": ""}, "prefix") == ""
    assert get_raw_str({}, "prefix") is None


def test_get_int_excludes_bool() -> None:
    assert get_int({"n": 2}, "n") == 2
    assert get_int({"n": True}, "n") is None


def test_get_bool() -> None:
    assert get_bool({"b": False}, "b") is False
    assert get_bool({"b": "false"}, "b") is None


def test_get_table_and_list() -> None:
    data = {"t": {"k": "v"}, "l": ["a", 1, "b"]}
    assert get_table(data, "t") == {"k": "v"}
    assert get_table(data, "l") is None
    assert get_str_list(data, "l") == ["a", "b"]
    assert get_str_list(data, "t") is None
