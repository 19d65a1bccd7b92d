"""Store configuration for pyflexopts."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyflexopts._coerce import parse_bool_literal
from pyflexopts.exceptions import OptionsConfigError

DEFAULT_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "passwd",
        "secret",
        "token",
        "key",
        "apikey",
        "pin",
        "credential",
        "credentials",
    }
)


def _env_bool(name: str, value: str | None, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    try:
        return parse_bool_literal(value)
    except ValueError as exc:
        raise OptionsConfigError(f"{name} must be a boolean literal, got {value!r}") from exc


def _env_key_set(value: str | None) -> frozenset[str] | None:
    if value is None:
        return None
    return frozenset(part.strip().lower() for part in value.split(",") if part.strip())


@dataclasses.dataclass(frozen=True)
class OptionsConfig:
    """Store-wide settings.

    Parameters
    ----------
    list_delimiters : str
        Delimiter characters used by ``get_as_list`` when the caller
        passes an empty delimiter set. Defaults to ``","``.
    log_decode_failures : bool
        Emit a DEBUG record whenever a typed read falls back to its
        default value.
    sensitive_keys : frozenset[str]
        Markers matched against whole words of an option name (``db_password``,
        ``apiToken``); matching values never appear in logs or ``repr`` output.
    """

    list_delimiters: str = ","
    log_decode_failures: bool = True
    sensitive_keys: frozenset[str] = DEFAULT_SENSITIVE_KEYS

    def __post_init__(self) -> None:
        if not self.list_delimiters:
            raise OptionsConfigError("list_delimiters must contain at least one character")

    @classmethod
    def from_env(cls, **overrides: Any) -> OptionsConfig:
        """Create configuration from environment variables.

        Reads ``FLEXOPTS_LIST_DELIMITERS``, ``FLEXOPTS_LOG_DECODE_FAILURES``
        and ``FLEXOPTS_SENSITIVE_KEYS`` (comma-separated). Explicit keyword
        arguments override environment values.

        Raises
        ------
        OptionsConfigError
            If a variable holds a value that cannot be interpreted.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        delimiters = env.get("FLEXOPTS_LIST_DELIMITERS")
        if delimiters:
            config_kwargs["list_delimiters"] = delimiters

        if "log_decode_failures" not in overrides:
            config_kwargs["log_decode_failures"] = _env_bool(
                "FLEXOPTS_LOG_DECODE_FAILURES",
                env.get("FLEXOPTS_LOG_DECODE_FAILURES"),
                True,
            )

        sensitive = _env_key_set(env.get("FLEXOPTS_SENSITIVE_KEYS"))
        if sensitive is not None:
            config_kwargs["sensitive_keys"] = sensitive

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
