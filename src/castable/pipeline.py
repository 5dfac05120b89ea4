"""Attribute pipelines — the two-way cast path of a record.

Write path (``AttributeSetPipeline.set``)::

    set mutator?            → delegate, return its result      (short-circuit)
    date attribute?         → from_date_time(value)
    class castable?         → caster.set(...) merged into attributes,
                              cache updated                     (return)
    json family?            → as_json(value)
    "base->path" key?       → nested write into base            (return)
    encrypted family?       → encrypt(value)
    attributes[key] = value

Read path (``AttributeGetPipeline.get``)::

    primitive?      → None passthrough, decrypt if encrypted,
                      base primitive cast with the decrypted type
    class castable? → cache hit, or caster.get(...) (inbound-only casters
                      return the raw value), cache updated
    otherwise       → raw value
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .cache import ClassCastCache
from .classification import CastClassifier
from .core import (
    JSON_PATH_DELIMITER,
    PRIMITIVE_CAST_TYPES,
    CasterRole,
    CastsInboundAttributes,
    Encrypter,
    JsonEncodingError,
    caster_role,
)
from .encryption import get_default_encrypter
from .json_codec import as_json, from_json
from .registry import CasterRegistry
from .resolvers.path import DotPathResolver

_ENCRYPTED_PREFIX = "encrypted:"


def normalize_cast_class_response(key: str, value: Any) -> Dict[str, Any]:
    """A caster may answer with one raw value or a mapping of attributes."""
    return dict(value) if isinstance(value, Mapping) else {key: value}


class _AttributePipeline:
    """State shared by both directions: one record and its collaborators."""

    def __init__(
            self,
            model: Any,
            *,
            classifier: CastClassifier,
            registry: CasterRegistry,
            cache: ClassCastCache,
            encrypter: Optional[Encrypter] = None,
            resolver: Optional[DotPathResolver] = None,
    ) -> None:
        self.model = model
        self.classifier = classifier
        self.registry = registry
        self.cache = cache
        self._encrypter = encrypter
        self.resolver = resolver or DotPathResolver()

    # -- encryption ---------------------------------------------------------

    @property
    def encrypter(self) -> Encrypter:
        """Injected encrypter, else the record class's, else the process default."""
        return (
            self._encrypter
            or getattr(type(self.model), "encrypter", None)
            or get_default_encrypter()
        )

    def encrypt(self, value: Any) -> str:
        return self.encrypter.encrypt(value)

    def decrypt(self, payload: str) -> Any:
        return self.encrypter.decrypt(payload)

    # -- casters ------------------------------------------------------------

    def resolve_caster(self, key: str) -> CastsInboundAttributes:
        return self.registry.resolve(self.model.get_casts()[key])

    def snapshot(self) -> Dict[str, Any]:
        return dict(self.model.attributes)


# ─────────────────────────────────────────────────────────────────────────────
# Write path
# ─────────────────────────────────────────────────────────────────────────────


class AttributeSetPipeline(_AttributePipeline):
    """Turn an in-memory value into stored attribute(s)."""

    def set(self, key: str, value: Any) -> Any:
        """Store *value* under *key*.

        Returns the mutator's result when a set mutator handles *key*,
        otherwise the record.
        """
        model = self.model

        if model.has_set_mutator(key):
            return model.set_mutated_attribute_value(key, value)
        elif value is not None and model.is_date_attribute(key):
            value = model.from_date_time(value)

        if self.classifier.is_class_castable(key):
            self.set_class_castable(key, value)
            return model

        if value is not None and self.classifier.is_json_family(key):
            value = self.cast_as_json(key, value)

        if JSON_PATH_DELIMITER in key:
            return self.fill_json_attribute(key, value)

        if value is not None and self.classifier.is_encrypted_family(key):
            value = self.encrypt(value)

        model.attributes[key] = value
        return model

    def set_class_castable(self, key: str, value: Any) -> None:
        """Delegate to the field's caster and merge what it returns.

        Writing ``None`` asks the caster which attributes it owns (using the
        current value) and clears every one of them.
        """
        caster = self.resolve_caster(key)
        model = self.model

        if value is None:
            current = model.get_attribute(key)
            owned = normalize_cast_class_response(
                key, caster.set(model, key, current, self.snapshot())
            )
            model.attributes.update({name: None for name in owned})
        else:
            model.attributes.update(normalize_cast_class_response(
                key, caster.set(model, key, value, self.snapshot())
            ))

        self.cache.update(key, caster, value)

    def cast_as_json(self, key: str, value: Any) -> str:
        try:
            return as_json(value)
        except (TypeError, ValueError) as exc:
            raise JsonEncodingError(self.model, key, str(exc)) from exc

    def get_array_attribute_by_key(self, key: str) -> Any:
        """Decoded JSON stored under *key* (decrypting first), ``{}`` if unset."""
        raw = self.model.attributes.get(key)
        if raw is None:
            return {}
        if self.classifier.is_encrypted_family(key):
            raw = self.decrypt(raw)
        return from_json(raw)

    def fill_json_attribute(self, key: str, value: Any) -> Any:
        """Write *value* at the nested path of a ``base->path`` key."""
        base, path = key.split(JSON_PATH_DELIMITER, 1)

        document = self.resolver.set(path, self.get_array_attribute_by_key(base), value)
        encoded = self.cast_as_json(base, document)

        self.model.attributes[base] = (
            self.encrypt(encoded) if self.classifier.is_encrypted_family(base) else encoded
        )
        return self.model


# ─────────────────────────────────────────────────────────────────────────────
# Read path
# ─────────────────────────────────────────────────────────────────────────────


class AttributeGetPipeline(_AttributePipeline):
    """Turn a stored value into its in-memory form."""

    def get(self, key: str, value: Any) -> Any:
        cast_type = self.classifier.cast_type(key)

        if cast_type in PRIMITIVE_CAST_TYPES:
            if value is None:
                return None
            declaration = self.model.get_casts()[key]
            if self.classifier.is_encrypted_family(key):
                value = self.decrypt(value)
                declaration = (
                    cast_type[len(_ENCRYPTED_PREFIX):]
                    if cast_type.startswith(_ENCRYPTED_PREFIX) else ""
                )
            return self.model.cast_attribute(key, value, declaration)

        if self.classifier.is_class_castable(key):
            return self.get_class_castable(key, value)

        return value

    def get_class_castable(self, key: str, value: Any) -> Any:
        if key in self.cache:
            return self.cache.get(key)

        caster = self.resolve_caster(key)

        if caster_role(caster) is CasterRole.OUTBOUND:
            value = caster.get(self.model, key, value, self.snapshot())

        self.cache.update(key, caster, value)
        return value
