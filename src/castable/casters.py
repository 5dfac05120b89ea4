"""Built-in primitive casts — the base delegate of the read path.

This module defines the conversions applied to stored values whose cast type
is in the primitive vocabulary.  The attribute pipelines decide *whether* a
primitive cast applies (and decrypt first where needed); the conversions
themselves live here.

Exports
-------
BUILTIN_CASTERS
    Dictionary mapping primitive type names to ``(value, arguments) → value``
    converters.  Date types are handled by ``PrimitiveCaster`` because they
    depend on the record's date format.

PrimitiveCaster
    Applies a primitive cast declaration (``"decimal:2"``, ``"array"``, …).

as_date_time / as_timestamp
    Date normalization helpers shared with ``Model``.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Tuple

from .classification import normalize_cast_type
from .core import parse_cast_spec
from .json_codec import from_json

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

Converter = Callable[[Any, Tuple[str, ...]], Any]


# ─────────────────────────────────────────────────────────────────────────────
# Scalar converters
# ─────────────────────────────────────────────────────────────────────────────


def _as_bool(value: Any, arguments: Tuple[str, ...]) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false")
    return bool(value)


def _as_decimal(value: Any, arguments: Tuple[str, ...]) -> Decimal:
    result = Decimal(str(value))
    if arguments and arguments[0]:
        result = result.quantize(Decimal(1).scaleb(-int(arguments[0])), rounding=ROUND_HALF_UP)
    return result


BUILTIN_CASTERS: dict[str, Converter] = {
    "int": lambda x, _: int(x),
    "integer": lambda x, _: int(x),
    "real": lambda x, _: float(x),
    "float": lambda x, _: float(x),
    "double": lambda x, _: float(x),
    "decimal": _as_decimal,
    "string": lambda x, _: str(x),
    "bool": _as_bool,
    "boolean": _as_bool,
    "object": lambda x, _: from_json(x, as_object=True),
    "array": lambda x, _: from_json(x),
    "json": lambda x, _: from_json(x),
    "collection": lambda x, _: from_json(x),
}

_DATE_TYPES = ("date", "datetime", "custom_datetime", "timestamp")


# ─────────────────────────────────────────────────────────────────────────────
# Date helpers
# ─────────────────────────────────────────────────────────────────────────────


def as_date_time(value: Any, date_format: str = DEFAULT_DATE_FORMAT) -> datetime:
    """Normalize *value* into a naive ``datetime``.

    Accepts ``datetime``, ``date``, epoch seconds (int/float or digit-only
    strings, interpreted as UTC), strings in *date_format*, and ISO-8601
    strings.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return as_date_time(int(text), date_format)
        try:
            return datetime.strptime(text, date_format)
        except ValueError:
            return datetime.fromisoformat(text)
    raise TypeError(f"Cannot interpret {type(value).__name__} as a date/time value")


def as_timestamp(value: Any, date_format: str = DEFAULT_DATE_FORMAT) -> int:
    """Epoch seconds for *value*; naive datetimes are taken as UTC."""
    moment = as_date_time(value, date_format)
    if moment.tzinfo is not None:
        return int(moment.timestamp())
    return calendar.timegm(moment.timetuple())


# ─────────────────────────────────────────────────────────────────────────────
# PrimitiveCaster
# ─────────────────────────────────────────────────────────────────────────────


class PrimitiveCaster:
    """Apply a primitive cast declaration to a stored value.

    An empty declaration (``""``) is the pass-through used for plain
    ``encrypted`` fields after decryption.

    ::

        PrimitiveCaster().cast("decimal:2", "3.14159")   → Decimal("3.14")
        PrimitiveCaster().cast("array", '{"a": 1}')      → {"a": 1}
    """

    def __init__(
            self,
            *,
            casters: dict[str, Converter] | None = None,
            date_format: str = DEFAULT_DATE_FORMAT,
    ) -> None:
        self._casters = dict(casters) if casters is not None else dict(BUILTIN_CASTERS)
        self.date_format = date_format

    def cast(self, declaration: str, value: Any) -> Any:
        if value is None or not declaration:
            return value

        spec = parse_cast_spec(declaration.strip())
        cast_type = spec.type_identifier.lower()

        date_type = normalize_cast_type(declaration)
        if date_type in _DATE_TYPES:
            return self._cast_date(date_type, value)

        try:
            converter = self._casters[cast_type]
        except KeyError:
            raise KeyError(f"Unknown primitive cast type '{cast_type}'") from None
        return converter(value, spec.arguments)

    def _cast_date(self, cast_type: str, value: Any) -> Any:
        if cast_type == "date":
            return as_date_time(value, self.date_format).date()
        if cast_type == "timestamp":
            return as_timestamp(value, self.date_format)
        return as_date_time(value, self.date_format)
