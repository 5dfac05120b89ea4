"""JSON encoding/decoding for the JSON cast family.

``as_json`` is used on the write path (``array``, ``json``, ``object``,
``collection`` and their ``encrypted:`` variants); ``from_json`` on the read
path and for nested ``base->path`` writes.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from typing import Any


def _default(obj: Any) -> Any:
    """Fallback serializer for values ``json`` does not know."""
    if isinstance(obj, SimpleNamespace):
        return vars(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def as_json(value: Any) -> str:
    """Encode *value* as a compact JSON string.

    Raises ``TypeError`` / ``ValueError`` from the ``json`` module unchanged.
    """
    return json.dumps(value, default=_default, separators=(",", ":"))


def from_json(value: Any, *, as_object: bool = False) -> Any:
    """Decode a JSON string.

    ``as_object=True`` turns every JSON object into a ``SimpleNamespace``.
    ``None`` decodes to ``None``.
    """
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    if as_object:
        return json.loads(value, object_hook=lambda d: SimpleNamespace(**d))
    return json.loads(value)
