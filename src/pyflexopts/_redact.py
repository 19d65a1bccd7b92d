"""Helpers for safe debug logging.

Option stores frequently carry secrets (passwords, API tokens, PINs).
This module masks those values before they are emitted in DEBUG logs
or shown in a store's ``repr``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

REDACTED = "<redacted>"

# Words of a key: camelCase humps, acronyms and digit runs; any other
# character separates words.
_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


def _words(text: str) -> str:
    return "_" + "_".join(word.lower() for word in _WORD_RE.findall(text)) + "_"


def is_sensitive_key(key: str | None, sensitive_keys: Iterable[str]) -> bool:
    """Return ``True`` when *key* contains a sensitive marker as whole words.

    ``apiToken``, ``api_token`` and ``API-TOKEN`` all match the marker
    ``token``; ``ping_interval`` does not match ``pin``.
    """
    if not key:
        return False
    words = _words(key)
    return any(_words(marker) in words for marker in sensitive_keys if marker)


def redact_option_value(
    key: str | None,
    value: str | None,
    *,
    sensitive_keys: Iterable[str],
    max_string: int = 256,
) -> str | None:
    """Return a copy of a stored option value suitable for debug logs."""
    if value is None:
        return None
    if is_sensitive_key(key, sensitive_keys):
        return REDACTED
    if len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    return value


def redact_options(
    options: Mapping[str, str | None],
    *,
    sensitive_keys: Iterable[str],
    max_string: int = 64,
) -> dict[str, str | None]:
    """Redact every value of an option mapping."""
    markers = tuple(sensitive_keys)
    return {
        key: redact_option_value(key, value, sensitive_keys=markers, max_string=max_string)
        for key, value in options.items()
    }
