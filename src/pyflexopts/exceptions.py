"""Custom exception hierarchy for pyflexopts."""

from __future__ import annotations

from typing import Any


class FlexOptionsError(Exception):
    """Base exception for all pyflexopts errors."""


class OptionsConfigError(FlexOptionsError):
    """Invalid or malformed store configuration."""


class OptionsEncodeError(FlexOptionsError):
    """A value could not be converted to its stored string form.

    Raised by :meth:`FlexibleOptions.set` when JSON serialization of a
    complex value fails (e.g. an object pydantic cannot serialize).
    """

    def __init__(self, message: str, *, key: str | None = None, value_type: type | None = None) -> None:
        self.key = key
        self.value_type = value_type
        super().__init__(message)


class OptionsDecodeError(FlexOptionsError):
    """A stored string could not be converted to the requested type.

    This is the error variant of :class:`pyflexopts._coerce.Decoded`.
    It is never raised out of :meth:`FlexibleOptions.get`; the store
    converts it to the caller-supplied default.
    """

    def __init__(self, message: str, *, raw: str, target: Any, reason: Exception | None = None) -> None:
        self.raw = raw
        self.target = target
        self.reason = reason
        super().__init__(message)
