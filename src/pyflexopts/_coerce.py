"""Typed encode/decode between Python values and stored option strings.

Every option is persisted as a plain string. Values are encoded on write
and decoded lazily, on every read, into whatever type the caller asks
for. Dispatch runs over :data:`HANDLERS`, an ordered tuple of
:class:`TypeHandler` entries; the first handler whose ``matches``
predicate accepts the requested type wins, and the JSON handler at the
end of the chain accepts everything.

Decoding never raises: :func:`decode_value` returns a :class:`Decoded`
result whose error variant the store discards in favour of the
caller's default. Encoding does raise (:class:`OptionsEncodeError`) so
unsupported values are reported at write time.
"""

from __future__ import annotations

import enum
import functools
import re
import types
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Generic, TypeVar, Union, get_args, get_origin

from dateutil import parser as date_parser
from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from pyflexopts.exceptions import OptionsDecodeError, OptionsEncodeError

T = TypeVar("T")

TRUTHY_LITERALS: frozenset[str] = frozenset({"true", "1", "yes", "y", "on"})
FALSY_LITERALS: frozenset[str] = frozenset({"false", "0", "no", "n", "off"})

_QUOTE = '"'
_JSON_NULL = "null"
_COMPACT_DATE_FORMAT = "%Y%m%d"
# Defaults that differ in year, month and day; a parse whose result depends
# on them left part of the date unspecified.
_PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))

# [-][d.]hh:mm[:ss[.fffffff]]
_CLOCK_DURATION_RE = re.compile(
    r"^(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{1,2})"
    r"(?::(?P<seconds>\d{1,2})(?:\.(?P<fraction>\d{1,7}))?)?$"
)
# str(timedelta) with a day component, e.g. "-1 day, 23:59:59.500000"
_PY_DURATION_RE = re.compile(
    r"^(?P<days>-?\d+) days?, (?P<hours>\d{1,2}):(?P<minutes>\d{2}):(?P<seconds>\d{2})(?:\.(?P<fraction>\d{1,6}))?$"
)
_WHOLE_DAYS_RE = re.compile(r"^-?\d+$")
_FLAG_SEPARATORS_RE = re.compile(r"[,|]")


class _Sentinel(enum.Enum):
    FALL_THROUGH = enum.auto()


FALL_THROUGH = _Sentinel.FALL_THROUGH
"""Returned by a decoder that declines the value; the JSON fallback runs next."""


@dataclass(frozen=True, slots=True)
class Decoded(Generic[T]):
    """Outcome of decoding one stored string.

    Exactly one of ``value`` / ``error`` is meaningful: when ``error``
    is ``None`` the decode succeeded (``value`` may legitimately be
    ``None``, e.g. a JSON ``null`` read as an optional type).
    """

    value: T | None = None
    error: OptionsDecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: Any) -> Any:
        return default if self.error is not None else self.value


# ---------------------------------------------------------------------------
# Shared parsing helpers
# ---------------------------------------------------------------------------


def is_quoted(raw: str) -> bool:
    """Return ``True`` when *raw* is wrapped in a pair of double quotes."""
    return len(raw) >= 2 and raw[0] == _QUOTE and raw[-1] == _QUOTE


def strip_quotes(raw: str) -> str:
    """Drop exactly one leading and one trailing quote, if both are present."""
    return raw[1:-1] if is_quoted(raw) else raw


def parse_bool_literal(text: str) -> bool:
    """Return the boolean represented by *text* or raise ``ValueError``."""
    normalized = text.strip().lower()
    if normalized in TRUTHY_LITERALS:
        return True
    if normalized in FALSY_LITERALS:
        return False
    raise ValueError(f"Unsupported boolean literal: {text!r}")


def unwrap_optional(target: Any) -> Any:
    """Reduce ``X | None`` / ``Optional[X]`` to ``X``; other types pass through."""
    origin = get_origin(target)
    if origin is Union or origin is types.UnionType:
        args = get_args(target)
        remaining = [arg for arg in args if arg is not type(None)]
        if len(remaining) == 1 and len(remaining) < len(args):
            return remaining[0]
    return target


def _is_subclass(target: Any, cls: type | tuple[type, ...]) -> bool:
    if get_origin(target) is not None:
        return False
    return isinstance(target, type) and issubclass(target, cls)


@functools.lru_cache(maxsize=256)
def _cached_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def type_adapter(target: Any) -> TypeAdapter[Any]:
    """Return a (cached where possible) pydantic adapter for *target*."""
    try:
        return _cached_adapter(target)
    except TypeError:
        # Unhashable type expressions (e.g. Annotated with dict metadata).
        return TypeAdapter(target)


def parse_datetime(text: str) -> datetime | None:
    """Free-form date/time parse, then the compact ``YYYYMMDD`` form.

    Input that leaves the year, month or day unspecified (e.g. ``"5"`` or
    ``"10:30"``) is rejected instead of being completed from a default date.
    """
    try:
        first, second = (date_parser.parse(text, default=default) for default in _PARSE_DEFAULTS)
    except (ValueError, OverflowError):
        pass
    else:
        if first == second:
            return first
    if len(text) == 8:
        try:
            return datetime.strptime(text, _COMPACT_DATE_FORMAT)
        except ValueError:
            pass
    return None


def _fraction_to_microseconds(fraction: str | None) -> int:
    if not fraction:
        return 0
    return int(fraction.ljust(6, "0")[:6])


def parse_duration(text: str) -> timedelta | None:
    """Parse the textual duration forms a human (or ``str(timedelta)``) writes.

    Returns ``None`` when *text* matches none of them.
    """
    text = text.strip()
    if _WHOLE_DAYS_RE.match(text):
        return timedelta(days=int(text))

    match = _CLOCK_DURATION_RE.match(text)
    if match is not None:
        hours = int(match["hours"])
        minutes = int(match["minutes"])
        seconds = int(match["seconds"] or 0)
        if hours > 23 or minutes > 59 or seconds > 59:
            return None
        result = timedelta(
            days=int(match["days"] or 0),
            hours=hours,
            minutes=minutes,
            seconds=seconds,
            microseconds=_fraction_to_microseconds(match["fraction"]),
        )
        return -result if match["sign"] else result

    match = _PY_DURATION_RE.match(text)
    if match is not None:
        return timedelta(days=int(match["days"])) + timedelta(
            hours=int(match["hours"]),
            minutes=int(match["minutes"]),
            seconds=int(match["seconds"]),
            microseconds=_fraction_to_microseconds(match["fraction"]),
        )
    return None


def parse_enum(enum_cls: type[enum.Enum], text: str) -> enum.Enum:
    """Resolve *text* to a member of *enum_cls*.

    Names match case-insensitively. Integer text resolves by value, and
    flag enums accept several names separated by ``,`` or ``|``.

    Raises
    ------
    ValueError
        If nothing in *enum_cls* matches.
    """
    text = text.strip()
    if issubclass(enum_cls, enum.Flag) and _FLAG_SEPARATORS_RE.search(text):
        combined = enum_cls(0)
        for part in _FLAG_SEPARATORS_RE.split(text):
            combined |= parse_enum(enum_cls, part)
        return combined

    by_name: dict[str, enum.Enum] = {}
    for name, member in enum_cls.__members__.items():
        by_name.setdefault(name.lower(), member)
    member = by_name.get(text.lower())
    if member is not None:
        return member

    try:
        number = int(text)
    except ValueError:
        raise ValueError(f"{text!r} is not a valid {enum_cls.__name__}") from None
    return enum_cls(number)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

Encoder = Callable[[Any], str]
Decoder = Callable[[str, Any, bool], Any]


@dataclass(frozen=True)
class TypeHandler:
    """Encode/decode strategy pair for a family of types.

    ``decode(raw, target, preserve_quotes)`` returns the decoded value,
    raises on a hard failure, or returns :data:`FALL_THROUGH` to hand
    the raw string to the JSON fallback. ``strict_fallback`` runs that
    fallback in pydantic strict mode. A handler without ``encode``
    leaves writes to the JSON fallback.
    """

    name: str
    matches: Callable[[Any], bool]
    decode: Decoder
    encode: Encoder | None = None
    strict_fallback: bool = False


def _decode_str(raw: str, target: Any, preserve_quotes: bool) -> Any:
    if preserve_quotes or not is_quoted(raw):
        return raw
    # JSON decoding also unescapes the string body.
    return type_adapter(str).validate_json(raw)


def _decode_datetime(raw: str, target: Any, preserve_quotes: bool) -> Any:
    parsed = parse_datetime(strip_quotes(raw))
    if parsed is None:
        return FALL_THROUGH
    if not issubclass(target, datetime):
        return parsed.date()
    return parsed


def _encode_datetime(value: date) -> str:
    return value.isoformat()


def _decode_enum(raw: str, target: Any, preserve_quotes: bool) -> Any:
    return parse_enum(target, raw)


def _encode_enum(value: enum.Enum) -> str:
    if value.name is None:
        return str(value.value)
    return value.name


def _decode_scalar(raw: str, target: Any, preserve_quotes: bool) -> Any:
    text = strip_quotes(raw)
    if issubclass(target, bool):
        return parse_bool_literal(text)
    return target(text)


def _encode_scalar(value: Any) -> str:
    if isinstance(value, float):
        return repr(value)
    return str(value)


def _decode_uuid(raw: str, target: Any, preserve_quotes: bool) -> Any:
    try:
        return target(raw)
    except ValueError:
        return FALL_THROUGH


def _decode_timedelta(raw: str, target: Any, preserve_quotes: bool) -> Any:
    parsed = parse_duration(raw)
    if parsed is not None:
        return parsed
    try:
        return type_adapter(timedelta).validate_python(raw)
    except ValidationError:
        return FALL_THROUGH


def _decode_json(raw: str, target: Any, preserve_quotes: bool, *, strict: bool = False) -> Any:
    return type_adapter(target).validate_json(raw, strict=strict)


def _encode_json(value: Any) -> str:
    return to_json(value).decode("utf-8")


HANDLERS: tuple[TypeHandler, ...] = (
    TypeHandler("str", lambda t: t is str, _decode_str, encode=str),
    # Checked before the scalar handler: dates are plain scalars too.
    TypeHandler(
        "datetime",
        lambda t: _is_subclass(t, date),
        _decode_datetime,
        encode=_encode_datetime,
        strict_fallback=True,
    ),
    TypeHandler("enum", lambda t: _is_subclass(t, enum.Enum), _decode_enum, encode=_encode_enum),
    TypeHandler(
        "scalar",
        lambda t: _is_subclass(t, (bool, int, float, Decimal)),
        _decode_scalar,
        encode=_encode_scalar,
    ),
    TypeHandler("uuid", lambda t: _is_subclass(t, uuid.UUID), _decode_uuid),
    TypeHandler("timedelta", lambda t: _is_subclass(t, timedelta), _decode_timedelta),
    TypeHandler("json", lambda t: True, _decode_json, encode=_encode_json),
)

JSON_HANDLER = HANDLERS[-1]


def handler_for(target: Any) -> TypeHandler:
    """Return the first handler that accepts *target*."""
    for handler in HANDLERS:
        if handler.matches(target):
            return handler
    return JSON_HANDLER


def encode_value(value: Any, *, key: str | None = None) -> str | None:
    """Convert *value* to its stored string form.

    Raises
    ------
    OptionsEncodeError
        If the value has no textual form and JSON serialization fails.
    """
    if value is None:
        return None
    value_type = type(value)
    for handler in HANDLERS:
        if handler.encode is not None and handler.matches(value_type):
            try:
                return handler.encode(value)
            except PydanticSerializationError as exc:
                raise OptionsEncodeError(
                    f"Cannot serialize {value_type.__name__} value for option {key!r}: {exc}",
                    key=key,
                    value_type=value_type,
                ) from exc
    return _encode_json(value)


def decode_value(raw: str, target: Any, *, preserve_quotes: bool = False) -> Decoded[Any]:
    """Decode a stored string into *target*.

    Never raises; failures are reported through :attr:`Decoded.error`.
    """
    try:
        base = unwrap_optional(target)
        if base is not target and base is not str and raw.strip() == _JSON_NULL:
            return Decoded(value=None)
        handler = handler_for(base)
        value = handler.decode(raw, base, preserve_quotes)
        if value is FALL_THROUGH:
            value = _decode_json(raw, target, preserve_quotes, strict=handler.strict_fallback)
        return Decoded(value=value)
    except Exception as exc:  # noqa: BLE001
        return Decoded(
            error=OptionsDecodeError(
                f"Cannot decode option value as {getattr(target, '__name__', target)!r}",
                raw=raw,
                target=target,
                reason=exc,
            )
        )
