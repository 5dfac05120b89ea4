"""Core abstractions: cast declarations, caster contracts, and errors.

This module owns every *interface* in the system.  Nothing here depends on a
concrete implementation — the registry, classifier, cache and pipelines live
in their own modules and are assembled by ``factory``.

Data flow (``Model.set_attribute`` / ``Model.get_attribute``)::

    declaration ("Money:USD,2")
      │
      ▼
    parse_cast_spec(...)          → CastSpec(type_identifier, arguments)
      │
      ▼
    CastClassifier                → primitive / json / encrypted / class / uncast
      │
      ├─ primitive  → PrimitiveCaster (base delegate)
      └─ class      → CasterRegistry.resolve(...) → caster.get / caster.set
                                                      └── ClassCastCache
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Tuple, Union

# ─────────────────────────────────────────────────────────────────────────────
# Cast type vocabularies
# ─────────────────────────────────────────────────────────────────────────────

PRIMITIVE_CAST_TYPES: Tuple[str, ...] = (
    "array",
    "bool",
    "boolean",
    "collection",
    "custom_datetime",
    "date",
    "datetime",
    "decimal",
    "double",
    "encrypted",
    "encrypted:array",
    "encrypted:collection",
    "encrypted:json",
    "encrypted:object",
    "float",
    "int",
    "integer",
    "json",
    "object",
    "real",
    "string",
    "timestamp",
)

JSON_CAST_TYPES: Tuple[str, ...] = (
    "array",
    "json",
    "object",
    "collection",
    "encrypted:array",
    "encrypted:collection",
    "encrypted:json",
    "encrypted:object",
)

ENCRYPTED_CAST_TYPES: Tuple[str, ...] = (
    "encrypted",
    "encrypted:array",
    "encrypted:collection",
    "encrypted:json",
    "encrypted:object",
)

DATE_CAST_TYPES: Tuple[str, ...] = ("date", "datetime", "custom_datetime")

#: Delimiter between a JSON attribute and the nested path written into it.
JSON_PATH_DELIMITER = "->"


# ─────────────────────────────────────────────────────────────────────────────
# CastSpec — parsed declaration
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CastSpec:
    """A parsed cast declaration.

    Attributes:
        type_identifier: Everything before the first ``:``.
        arguments:       Positional string arguments (split on ``,``).
    """

    type_identifier: str
    arguments: Tuple[str, ...] = field(default_factory=tuple)


def parse_cast_spec(declaration: str) -> CastSpec:
    """Split ``type`` or ``type:arg1,arg2`` into a ``CastSpec``.

    No validation is done here; unknown identifiers surface later as
    classification or resolution errors.

    Examples::

        parse_cast_spec("Money")          → CastSpec("Money", ())
        parse_cast_spec("Money:USD,2")    → CastSpec("Money", ("USD", "2"))
        parse_cast_spec("encrypted:array") → CastSpec("encrypted", ("array",))
    """
    type_identifier, sep, rest = declaration.partition(":")
    if not sep:
        return CastSpec(type_identifier)
    return CastSpec(type_identifier, tuple(rest.split(",")))


def parse_caster_class(declaration: str) -> str:
    """Return only the type identifier part of *declaration*."""
    return declaration.partition(":")[0]


# ─────────────────────────────────────────────────────────────────────────────
# Caster contracts
# ─────────────────────────────────────────────────────────────────────────────


class CastsInboundAttributes(ABC):
    """A caster that only transforms values on their way *into* the record.

    Reads return the stored value unchanged.
    """

    @abstractmethod
    def set(self, model: Any, key: str, value: Any, attributes: Mapping[str, Any]) -> Any:
        """Transform *value* into its stored form.

        May return a single raw value (stored under *key*) or a mapping of
        several attribute names to raw values.
        """


class CastsAttributes(CastsInboundAttributes):
    """A caster that transforms values in both directions."""

    @abstractmethod
    def get(self, model: Any, key: str, value: Any, attributes: Mapping[str, Any]) -> Any:
        """Transform the stored *value* into its in-memory form."""


class Castable(ABC):
    """A value type that names (or builds) the caster used for it.

    ``cast_using`` returns either a ready caster instance or the identifier
    of a caster registered in the ``CasterRegistry``.
    """

    @classmethod
    @abstractmethod
    def cast_using(cls, arguments: List[str]) -> Union[str, CastsInboundAttributes]: ...


class CasterRole(enum.Enum):
    """Capability of a resolved caster."""

    OUTBOUND = "outbound"          # get + set
    INBOUND_ONLY = "inbound_only"  # set only


def caster_role(caster: CastsInboundAttributes) -> CasterRole:
    """Classify *caster* by the contract it implements."""
    if isinstance(caster, CastsAttributes):
        return CasterRole.OUTBOUND
    return CasterRole.INBOUND_ONLY


def is_object_like(value: Any) -> bool:
    """True for values that are neither ``None``, scalars nor plain containers.

    Only object-like results are kept in the class-cast cache.
    """
    return not isinstance(
        value,
        (type(None), bool, int, float, complex, str, bytes, list, tuple, dict, set, frozenset),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Encryption contract
# ─────────────────────────────────────────────────────────────────────────────


class Encrypter(ABC):
    """Opaque two-way string encryption service."""

    @abstractmethod
    def encrypt(self, value: str) -> str: ...

    @abstractmethod
    def decrypt(self, payload: str) -> str: ...


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────


class CastError(Exception):
    """Base class for every error raised by this package."""


class InvalidCastException(CastError):
    """A declared cast type is neither primitive nor a resolvable caster.

    Attributes:
        model:     The record whose cast declaration is invalid.
        key:       Field name.
        cast_type: The offending type identifier.
    """

    def __init__(self, model: Any, key: str, cast_type: str) -> None:
        self.model = model
        self.key = key
        self.cast_type = cast_type
        super().__init__(
            f"Call to undefined cast [{cast_type}] on column [{key}] "
            f"in model [{type(model).__name__}]."
        )


class UnresolvableCaster(CastError):
    """A caster could not be constructed from its declaration."""

    def __init__(self, cast_type: Any, reason: str) -> None:
        self.cast_type = cast_type
        self.reason = reason
        super().__init__(f"Unable to resolve caster [{cast_type}]: {reason}")


class JsonEncodingError(CastError):
    """An attribute value could not be encoded as JSON."""

    def __init__(self, model: Any, key: str, message: str) -> None:
        self.model = model
        self.key = key
        super().__init__(
            f"Unable to encode attribute [{key}] for model "
            f"[{type(model).__name__}] to JSON: {message}."
        )


class EncryptionError(CastError):
    """The encryption service is misconfigured or a payload is invalid."""
