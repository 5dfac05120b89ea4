"""``Model`` — a minimal record host for the casting engine.

A subclass declares its casts, date fields and mutators; every instance owns
its attribute dictionary, class-cast cache and a pair of attribute
pipelines::

    class Order(Model):
        casts = {
            "total": "decimal:2",
            "meta": "array",
            "card": "encrypted",
            "price": "money:USD",
        }
        dates = ["shipped_at"]

        def set_email_attribute(self, value):
            self.attributes["email"] = value.lower()

    order = Order({"total": "10.5"})
    order.set_attribute("meta->shipping.city", "Riga")
    order.get_attribute("total")            → Decimal("10.50")
    order.get_attribute("meta->shipping")   → {"city": "Riga"}
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

from .casters import DEFAULT_DATE_FORMAT, PrimitiveCaster, as_date_time
from .core import JSON_PATH_DELIMITER, Encrypter, parse_cast_spec
from .factory import build_pipelines
from .json_codec import from_json
from .registry import CasterRegistry, DEFAULT_REGISTRY
from .pipeline import normalize_cast_class_response


class Model:
    """Attribute container with declarative casts."""

    #: field → cast declaration (string, caster class or caster instance)
    casts: ClassVar[Dict[str, Any]] = {}
    #: extra fields treated as dates without a cast
    dates: ClassVar[List[str]] = []
    date_format: ClassVar[str] = DEFAULT_DATE_FORMAT
    #: ``None`` → ``registry.DEFAULT_REGISTRY``
    caster_registry: ClassVar[Optional[CasterRegistry]] = None
    #: ``None`` → ``encryption.get_default_encrypter()``
    encrypter: ClassVar[Optional[Encrypter]] = None

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None) -> None:
        self.attributes: Dict[str, Any] = {}
        registry = self.caster_registry or DEFAULT_REGISTRY
        self._primitive = PrimitiveCaster(date_format=self.date_format)
        self._classifier, self._cache, self._setter, self._getter = build_pipelines(
            self, registry=registry,
        )
        for key, value in (attributes or {}).items():
            self.set_attribute(key, value)

    @classmethod
    def hydrate(cls, attributes: Mapping[str, Any]) -> "Model":
        """Build an instance from already-stored attribute values."""
        instance = cls()
        instance.set_raw_attributes(attributes)
        return instance

    @classmethod
    def encrypt_using(cls, encrypter: Optional[Encrypter]) -> None:
        """Use *encrypter* for every instance of this class."""
        cls.encrypter = encrypter

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.attributes!r})"

    def __getitem__(self, key: str) -> Any:
        return self.get_attribute(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set_attribute(key, value)

    # -- attribute dictionary ----------------------------------------------

    def get_attributes(self) -> Dict[str, Any]:
        """Stored attributes, with cached class-cast values written back first."""
        self.merge_attributes_from_class_casts()
        return dict(self.attributes)

    def set_raw_attributes(self, attributes: Mapping[str, Any]) -> None:
        """Replace the stored attributes verbatim and forget cached casts."""
        self.attributes = dict(attributes)
        self._cache.clear()

    def merge_attributes_from_class_casts(self) -> None:
        for key, value in self._cache.items():
            caster = self._setter.resolve_caster(key)
            self.attributes.update(normalize_cast_class_response(
                key, caster.set(self, key, value, dict(self.attributes))
            ))

    # -- casts --------------------------------------------------------------

    def get_casts(self) -> Dict[str, Any]:
        return self.casts

    def has_cast(self, key: str, types: Optional[Tuple[str, ...]] = None) -> bool:
        if key not in self.get_casts():
            return False
        return types is None or self.get_cast_type(key) in types

    def get_cast_type(self, key: str) -> Optional[str]:
        return self._classifier.cast_type(key)

    def is_class_castable(self, key: str) -> bool:
        return self._classifier.is_class_castable(key)

    def cast_attribute(self, key: str, value: Any, cast_type: Optional[str] = None) -> Any:
        """Base primitive cast of *value*.

        *cast_type* overrides the declared type for this call only; the
        read pipeline passes the decrypted type of ``encrypted:*`` fields.
        """
        declaration = self.get_casts().get(key, "") if cast_type is None else cast_type
        return self._primitive.cast(declaration, value)

    # -- mutators -----------------------------------------------------------

    def has_set_mutator(self, key: str) -> bool:
        return callable(getattr(self, f"set_{key}_attribute", None))

    def set_mutated_attribute_value(self, key: str, value: Any) -> Any:
        return getattr(self, f"set_{key}_attribute")(value)

    def has_get_mutator(self, key: str) -> bool:
        return callable(getattr(self, f"get_{key}_attribute", None))

    def mutate_attribute(self, key: str, value: Any) -> Any:
        return getattr(self, f"get_{key}_attribute")(value)

    # -- dates --------------------------------------------------------------

    def get_dates(self) -> List[str]:
        return list(self.dates)

    def is_date_attribute(self, key: str) -> bool:
        return key in self.get_dates() or self._classifier.is_date_cast(key)

    def as_date_time(self, value: Any) -> datetime:
        return as_date_time(value, self.date_format)

    def from_date_time(self, value: Any) -> str:
        """Storable string for a date-like *value*."""
        return self.as_date_time(value).strftime(self.date_format)

    # -- read / write -------------------------------------------------------

    def set_attribute(self, key: str, value: Any) -> Any:
        return self._setter.set(key, value)

    def get_attribute(self, key: str) -> Any:
        if JSON_PATH_DELIMITER in key:
            return self.get_json_attribute(key)

        value = self.attributes.get(key)

        if self.has_get_mutator(key):
            return self.mutate_attribute(key, value)
        if self.has_cast(key):
            return self._getter.get(key, value)
        if value is not None and key in self.get_dates():
            return self.as_date_time(value)
        return value

    def get_json_attribute(self, key: str) -> Any:
        """Read the nested value addressed by a ``base->path`` key."""
        base, path = key.split(JSON_PATH_DELIMITER, 1)
        return self._getter.resolver.get(path, self._setter.get_array_attribute_by_key(base))

    # -- JSON / encryption helpers -----------------------------------------

    def fill_json_attribute(self, key: str, value: Any) -> Any:
        return self._setter.fill_json_attribute(key, value)

    def get_array_attribute_by_key(self, key: str) -> Any:
        return self._setter.get_array_attribute_by_key(key)

    def cast_attribute_as_json(self, key: str, value: Any) -> str:
        return self._setter.cast_as_json(key, value)

    def from_encrypted_string(self, value: str) -> Any:
        return self._getter.decrypt(value)

    def cast_attribute_as_encrypted_string(self, value: Any) -> str:
        return self._setter.encrypt(value)

    @staticmethod
    def from_json(value: Any, as_object: bool = False) -> Any:
        return from_json(value, as_object=as_object)

    # -- serialization ------------------------------------------------------

    def attributes_to_dict(self) -> Dict[str, Any]:
        """JSON-friendly rendering of every attribute with casts applied."""
        return {
            key: self._serialize(key, self.get_attribute(key))
            for key in list(self.attributes)
        }

    def _serialize(self, key: str, value: Any) -> Any:
        if isinstance(value, (datetime, date)):
            return value.strftime(self._serialization_date_format(key))
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, SimpleNamespace):
            return {k: self._serialize(key, v) for k, v in vars(value).items()}
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return value

    def _serialization_date_format(self, key: str) -> str:
        if self.get_cast_type(key) == "custom_datetime":
            return ",".join(parse_cast_spec(self.get_casts()[key]).arguments)
        return self.date_format
