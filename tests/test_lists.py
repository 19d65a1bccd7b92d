from __future__ import annotations

from pyflexopts import FlexibleOptions, OptionsConfig
from pyflexopts._lists import parse_list


def test_delimited_list_is_split_and_trimmed() -> None:
    opts = FlexibleOptions().set("x", "a, b, c")

    assert opts.get_as_list("x") == ["a", "b", "c"]


def test_json_array() -> None:
    opts = FlexibleOptions().set("x", '["a","b"]')

    assert opts.get_as_list("x") == ["a", "b"]


def test_json_array_written_as_list() -> None:
    opts = FlexibleOptions().set("x", ["one", "two, three"])

    assert opts.get_as_list("x") == ["one", "two, three"]


def test_json_array_numbers_become_strings() -> None:
    assert parse_list("[1, 2.5]", ",") == ["1", "2.5"]


def test_json_array_null_elements_become_none() -> None:
    assert parse_list('["a", null]', ",") == ["a", None]


def test_json_array_with_null_is_not_split_on_commas() -> None:
    opts = FlexibleOptions().set("x", ["a, b", None])

    assert opts.get_as_list("x") == ["a, b", None]


def test_malformed_json_array_falls_back_to_split() -> None:
    assert parse_list("[a, b]", ",") == ["[a", "b]"]


def test_missing_key_is_distinct_from_empty_list() -> None:
    opts = FlexibleOptions()

    assert opts.get_as_list("missing") is None


def test_none_delimiters_keep_whole_value() -> None:
    opts = FlexibleOptions().set("x", "  a, b  ")

    assert opts.get_as_list("x", None) == ["a, b"]


def test_custom_delimiters() -> None:
    opts = FlexibleOptions().set("x", "a;b|c")

    assert opts.get_as_list("x", ";|") == ["a", "b", "c"]
    assert opts.get_as_list("x", ("|",)) == ["a;b", "c"]


def test_empty_delimiters_fall_back_to_default() -> None:
    opts = FlexibleOptions().set("x", "a,b")

    assert opts.get_as_list("x", "") == ["a", "b"]
    assert opts.get_as_list("x", ()) == ["a", "b"]


def test_empty_delimiters_use_configured_default() -> None:
    opts = FlexibleOptions(config=OptionsConfig(list_delimiters=";")).set("x", "a;b,c")

    assert opts.get_as_list("x", "") == ["a", "b,c"]
    assert opts.get_as_list("x") == ["a;b", "c"]


def test_multi_character_delimiters() -> None:
    assert parse_list("a::b:c", ["::", ":"]) == ["a", "b", "c"]


def test_list_read_through_alias() -> None:
    opts = FlexibleOptions().set("hosts", "h1,h2")
    opts.set_alias("hosts", "servers")

    assert opts.get_as_list("servers") == ["h1", "h2"]


def test_keeps_empty_elements() -> None:
    assert parse_list("a,,b", ",") == ["a", "", "b"]
