"""Cast classification — which processing path applies to a field.

``CastClassifier`` reads the record's cast declarations (``get_casts``) and
answers the questions the attribute pipelines ask:

* ``is_primitive``        – normalized cast type is in the primitive vocabulary
* ``is_json_family``      – array / json / object / collection (+ encrypted)
* ``is_encrypted_family`` – encrypted (+ array / collection / json / object)
* ``is_date_cast``        – date / datetime / custom_datetime
* ``is_class_castable``   – names a resolvable caster; raises
                            ``InvalidCastException`` for anything else

Classification never mutates the record's declarations.
"""

from __future__ import annotations

from typing import Any, Optional

from .core import (
    DATE_CAST_TYPES,
    ENCRYPTED_CAST_TYPES,
    JSON_CAST_TYPES,
    PRIMITIVE_CAST_TYPES,
    InvalidCastException,
    parse_caster_class,
)
from .registry import CasterRegistry


def normalize_cast_type(declaration: Any) -> Optional[str]:
    """Lower-cased, trimmed cast type used for primitive matching.

    ``date:<fmt>`` / ``datetime:<fmt>`` → ``custom_datetime``;
    ``decimal:<n>`` → ``decimal``.  Non-string declarations → ``None``.
    Write-path classification (``is_class_castable``) compares the
    declaration as written, so ``"Integer"`` reads as an integer but is
    looked up as a caster name on write.
    """
    if not isinstance(declaration, str):
        return None
    cast_type = declaration.strip().lower()
    if cast_type.startswith(("date:", "datetime:")):
        return "custom_datetime"
    if cast_type.startswith("decimal:"):
        return "decimal"
    return cast_type


class CastClassifier:
    """Classify a record's fields by their cast declaration."""

    def __init__(self, model: Any, registry: CasterRegistry) -> None:
        self.model = model
        self.registry = registry

    def declaration(self, key: str) -> Any:
        return self.model.get_casts().get(key)

    def has_cast(self, key: str) -> bool:
        return key in self.model.get_casts()

    def cast_type(self, key: str) -> Optional[str]:
        return normalize_cast_type(self.declaration(key))

    def _in(self, key: str, types: tuple) -> bool:
        return self.has_cast(key) and self.cast_type(key) in types

    def is_primitive(self, key: str) -> bool:
        return self._in(key, PRIMITIVE_CAST_TYPES)

    def is_json_family(self, key: str) -> bool:
        return self._in(key, JSON_CAST_TYPES)

    def is_encrypted_family(self, key: str) -> bool:
        return self._in(key, ENCRYPTED_CAST_TYPES)

    def is_date_cast(self, key: str) -> bool:
        return self._in(key, DATE_CAST_TYPES)

    def is_class_castable(self, key: str) -> bool:
        """True if *key* is cast through a caster object.

        Raises ``InvalidCastException`` when the declaration is neither a
        primitive nor something the registry can resolve.
        """
        if not self.has_cast(key):
            return False

        declaration = self.declaration(key)
        if not isinstance(declaration, str):
            if self.registry.is_loadable(declaration):
                return True
            raise InvalidCastException(self.model, key, repr(declaration))

        cast_type = parse_caster_class(declaration)
        if cast_type in PRIMITIVE_CAST_TYPES:
            return False
        if self.registry.is_loadable(cast_type):
            return True

        raise InvalidCastException(self.model, key, cast_type)
