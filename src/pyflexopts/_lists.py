"""Interpret a stored option as a list of strings.

Two source formats are detected: a JSON array (``["a", "b"]``) and a
delimiter-separated string (``a, b``).
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from pydantic import ConfigDict, TypeAdapter, ValidationError

_STRING_LIST_ADAPTER: TypeAdapter[list[str | None]] = TypeAdapter(
    list[str | None],
    config=ConfigDict(coerce_numbers_to_str=True),
)


def _delimiter_pattern(delimiters: str | Iterable[str]) -> re.Pattern[str]:
    parts = list(delimiters)
    # Longest first so multi-character delimiters win over their prefixes.
    parts.sort(key=len, reverse=True)
    return re.compile("|".join(re.escape(part) for part in parts if part))


def looks_like_json_array(text: str) -> bool:
    return text.startswith("[") and text.endswith("]")


def parse_list(
    raw: str,
    delimiters: str | Iterable[str] | None,
    *,
    default_delimiters: str | Iterable[str] = ",",
) -> list[str | None]:
    """Split *raw* into trimmed elements.

    Parameters
    ----------
    raw : str
        The stored option value.
    delimiters : str | Iterable[str] | None
        Delimiter characters (a string) or delimiter strings (an
        iterable). ``None`` keeps the whole value as a single element;
        an empty set falls back to *default_delimiters*.
    default_delimiters : str | Iterable[str]
        Used when *delimiters* is empty.

    A JSON array keeps its ``null`` elements as ``None``; numbers become
    strings.
    """
    text = raw.strip()
    if looks_like_json_array(text):
        try:
            return _STRING_LIST_ADAPTER.validate_json(raw)
        except ValidationError:
            pass

    if delimiters is None:
        return [text]

    chosen = list(delimiters)
    if not any(chosen):
        chosen = list(default_delimiters)
    return [part.strip() for part in _delimiter_pattern(chosen).split(text)]
