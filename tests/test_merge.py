from __future__ import annotations

from pyflexopts import FlexibleOptions, OptionsConfig


def test_later_store_wins() -> None:
    a = FlexibleOptions().set("k", "1").set("only_a", "a")
    b = FlexibleOptions().set("k", "2")

    merged = FlexibleOptions.merge(a, b)

    assert merged.as_dict() == {"k": "2", "only_a": "a"}
    assert merged is not a
    assert a.get("k") == "1"


def test_merge_without_stores_is_empty() -> None:
    merged = FlexibleOptions.merge()

    assert len(merged) == 0
    assert merged.case_insensitive


def test_merge_skips_none_and_uses_last_policy() -> None:
    a = FlexibleOptions().set("Key", "1")
    b = FlexibleOptions(case_insensitive=False).set("other", "2")

    merged = FlexibleOptions.merge(a, None, b, None)

    assert not merged.case_insensitive
    assert merged.get("Key") == "1"
    assert merged.get("key", "none") == "none"


def test_merge_of_only_none_is_default_store() -> None:
    merged = FlexibleOptions.merge(None, None)

    assert len(merged) == 0
    assert merged.case_insensitive


def test_merge_copies_aliases_under_result_policy() -> None:
    a = FlexibleOptions(case_insensitive=False).set("real", "v")
    a.set_alias("real", "Alt")
    b = FlexibleOptions()

    merged = FlexibleOptions.merge(a, b)

    assert merged.get("alt") == "v"


def test_merge_keeps_config_of_last_store() -> None:
    config = OptionsConfig(list_delimiters=";")
    merged = FlexibleOptions.merge(FlexibleOptions(), FlexibleOptions(config=config))

    assert merged.config is config


def test_add_range_from_store_overwrites_without_aliases() -> None:
    target = FlexibleOptions().set("k", "old")
    source = FlexibleOptions().set("K", "new").set("extra", None)
    source.set_alias("k", "alias")

    target.add_range(source)

    assert target.get("k") == "new"
    assert target.has("extra")
    assert target.aliases() == {}


def test_add_range_from_mapping() -> None:
    opts = FlexibleOptions().set("a", "1")

    opts.add_range({"a": "2", "b": None, "c": 3, "d": ["x"]})

    assert opts.get_raw("a") == "2"
    assert opts.has("b")
    assert opts.get_raw("c") == "3"
    assert opts.get_raw("d") == '["x"]'
