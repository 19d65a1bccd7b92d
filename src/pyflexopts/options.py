"""String-backed option store with typed, best-effort reads."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from pyflexopts._coerce import decode_value, encode_value
from pyflexopts._keys import KeyTable
from pyflexopts._lists import parse_list
from pyflexopts._redact import REDACTED, is_sensitive_key, redact_option_value, redact_options
from pyflexopts.config import OptionsConfig
from pyflexopts.exceptions import OptionsDecodeError

_logger = logging.getLogger(__name__)

_DEFAULT_DELIMITERS = ","


class FlexibleOptions:
    """Key/value option store that keeps every value as a string.

    Values of any type are encoded to strings on :meth:`set` and decoded
    on every :meth:`get` into the type the caller asks for. A read that
    cannot be decoded returns the caller's default instead of raising.

    Keys compare case-insensitively unless ``case_insensitive=False``.
    The policy is fixed for the lifetime of the store; use
    :meth:`clone_with_case_policy` to obtain a store with a different one.

    Instances are not thread-safe. Callers sharing a store across threads
    must serialize access themselves.
    """

    def __init__(self, case_insensitive: bool = True, *, config: OptionsConfig | None = None) -> None:
        self._config = config or OptionsConfig()
        self._options: KeyTable[str | None] = KeyTable(case_insensitive=case_insensitive)
        self._alias: KeyTable[str] = KeyTable(case_insensitive=case_insensitive)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def clone_with_case_policy(cls, other: FlexibleOptions, case_insensitive: bool) -> FlexibleOptions:
        """Copy *other*'s entries into a new store with the given key policy.

        Aliases are not copied. When switching to case-insensitive keys,
        entries that only differed by case collapse into one; the entry
        iterated last wins.
        """
        clone = cls(case_insensitive=case_insensitive, config=other._config)
        options, collisions = other._options.rebuilt(case_insensitive=case_insensitive)
        if collisions:
            _logger.warning(
                "Rebuilding option keys case-insensitively merged %d entries: %s",
                len(collisions),
                collisions,
            )
        clone._options = options
        return clone

    @classmethod
    def merge(cls, *stores: FlexibleOptions | None) -> FlexibleOptions:
        """Merge stores into a new one; later stores win on conflicts.

        The key policy and configuration of the result come from the last
        non-``None`` store. Both entries and aliases are copied; ``None``
        stores are skipped.
        """
        last = next((store for store in reversed(stores) if store is not None), None)
        if last is None:
            return cls()

        merged = cls(case_insensitive=last.case_insensitive, config=last._config)
        for store in stores:
            if store is None:
                continue
            for key, value in store._options.items():
                merged._options[key] = value
            for alias, key in store._alias.items():
                merged.set_alias(key, alias)
        return merged

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def case_insensitive(self) -> bool:
        return self._options.case_insensitive

    @property
    def config(self) -> OptionsConfig:
        return self._config

    def __len__(self) -> int:
        return len(self._options)

    def __iter__(self) -> Iterator[str]:
        return iter(self._options)

    def __contains__(self, key: object) -> bool:
        return key in self._options

    def __repr__(self) -> str:
        policy = "case_insensitive" if self.case_insensitive else "case_sensitive"
        redacted = redact_options(self._options, sensitive_keys=self._config.sensitive_keys)
        return f"FlexibleOptions({policy}, {redacted!r})"

    def items(self) -> Iterator[tuple[str, str | None]]:
        """Iterate over ``(key, raw string value)`` pairs."""
        return iter(list(self._options.items()))

    def as_dict(self) -> dict[str, str | None]:
        """Return a snapshot of the raw entries."""
        return dict(self._options.items())

    def aliases(self) -> dict[str, str]:
        """Return a snapshot of the alias table (alias -> canonical key)."""
        return dict(self._alias.items())

    # ------------------------------------------------------------------
    # Value store
    # ------------------------------------------------------------------

    def has(self, key: str | None) -> bool:
        """Check whether *key* holds an entry. Aliases are not consulted."""
        if key is None:
            return False
        return key in self._options

    def get_raw(self, key: str | None) -> str | None:
        """Return the stored string for *key*, falling back to its alias.

        ``None`` is returned both for missing keys and for keys stored
        with a ``None`` value.
        """
        if key is None:
            return None
        found, value = self._options.lookup(key)
        if found:
            return value
        found, canonical = self._alias.lookup(key)
        if not found or canonical is None:
            return None
        return self._options.lookup(canonical)[1]

    def set(self, key: str | None, value: Any) -> FlexibleOptions:
        """Add or overwrite an option; the value is stored as a string.

        Strings are stored verbatim, scalars as their textual form and
        anything else as JSON. A ``None`` key is ignored.

        Raises
        ------
        OptionsEncodeError
            If *value* cannot be serialized.
        """
        if key is not None:
            self._options[key] = encode_value(value, key=key)
        return self

    def get(
        self,
        key: str | None,
        default: Any = "",
        as_type: Any = None,
        *,
        preserve_quotes: bool = False,
    ) -> Any:
        """Return the option converted to the requested type.

        The requested type is *as_type* when given, otherwise the type of
        *default* (``str`` when *default* is ``None``). Missing keys,
        empty values and failed conversions all return *default*.

        Strings are returned as stored unless they are wrapped in double
        quotes, in which case they are JSON-decoded (unescaped) unless
        *preserve_quotes* is set.
        """
        raw = self.get_raw(key)
        if not raw:
            return default

        target = as_type if as_type is not None else (type(default) if default is not None else str)
        result = decode_value(raw, target, preserve_quotes=preserve_quotes)
        if result.error is not None:
            if self._config.log_decode_failures:
                self._log_decode_failure(key, raw, target, result.error)
            return default
        return result.value

    def _log_decode_failure(self, key: str | None, raw: str, target: Any, error: OptionsDecodeError) -> None:
        sensitive_keys = self._config.sensitive_keys
        reason = error.reason
        if is_sensitive_key(key, sensitive_keys):
            # Parser messages echo the input.
            detail = type(reason).__name__ if reason is not None else REDACTED
        else:
            detail = str(reason) if reason is not None else str(error)
        _logger.debug(
            "Option %r = %r could not be read as %r, using default: %s",
            key,
            redact_option_value(key, raw, sensitive_keys=sensitive_keys),
            getattr(target, "__name__", target),
            detail,
        )

    def get_as_list(
        self,
        key: str | None,
        delimiters: str | tuple[str, ...] | list[str] | None = _DEFAULT_DELIMITERS,
    ) -> list[str | None] | None:
        """Return the option as a list of strings, or ``None`` if it is missing.

        A value wrapped in ``[...]`` is decoded as a JSON array, with
        ``null`` elements returned as ``None``; anything else is split on
        *delimiters* and each element trimmed. Pass ``None`` to keep the
        whole value as a single element.
        """
        value = self.get(key, None, str)
        if value is None:
            return None
        return parse_list(value, delimiters, default_delimiters=self._config.list_delimiters)

    def __getitem__(self, key: str) -> str:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    # ------------------------------------------------------------------
    # Aliases & bulk updates
    # ------------------------------------------------------------------

    def set_alias(self, key: str, *aliases: str) -> None:
        """Register *aliases* as alternate names for *key*.

        Aliases are consulted only when a direct lookup misses.
        """
        for alias in aliases:
            if alias is not None:
                self._alias[alias] = key

    def add_range(self, source: FlexibleOptions | Mapping[str, Any]) -> None:
        """Copy every entry of *source* into this store, overwriting conflicts.

        Aliases are not copied. Mapping values that are not strings go
        through the same encoding as :meth:`set`.
        """
        entries = source._options.items() if isinstance(source, FlexibleOptions) else source.items()
        for key, value in entries:
            if key is None:
                continue
            if value is None or isinstance(value, str):
                self._options[key] = value
            else:
                self.set(key, value)
