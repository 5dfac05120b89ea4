"""castable — declarative attribute casting for data records.

Stored values are converted to rich in-memory values (and back) according to
per-field cast declarations: primitive casts, JSON documents with nested
``base->path`` writes, encrypted fields, and user-defined caster classes.
"""

from .cache import ClassCastCache
from .casters import BUILTIN_CASTERS, PrimitiveCaster
from .classification import CastClassifier, normalize_cast_type
from .core import (
    CastSpec,
    parse_cast_spec,
    parse_caster_class,
    CastsAttributes,
    CastsInboundAttributes,
    Castable,
    CasterRole,
    caster_role,
    is_object_like,
    Encrypter,
    CastError,
    InvalidCastException,
    UnresolvableCaster,
    JsonEncodingError,
    EncryptionError,
    PRIMITIVE_CAST_TYPES,
    JSON_CAST_TYPES,
    ENCRYPTED_CAST_TYPES,
)
from .encryption import FernetEncrypter, get_default_encrypter, set_default_encrypter
from .factory import build_default_registry, build_pipelines
from .model import Model
from .pipeline import AttributeGetPipeline, AttributeSetPipeline
from .registry import DEFAULT_REGISTRY, CasterRegistry, register_caster
from .resolvers import DotPathResolver

__all__ = [
    # core
    "CastSpec",
    "parse_cast_spec",
    "parse_caster_class",
    "CastsAttributes",
    "CastsInboundAttributes",
    "Castable",
    "CasterRole",
    "caster_role",
    "is_object_like",
    "Encrypter",
    "PRIMITIVE_CAST_TYPES",
    "JSON_CAST_TYPES",
    "ENCRYPTED_CAST_TYPES",
    # errors
    "CastError",
    "InvalidCastException",
    "UnresolvableCaster",
    "JsonEncodingError",
    "EncryptionError",
    # registry
    "CasterRegistry",
    "DEFAULT_REGISTRY",
    "register_caster",
    # classification / cache / pipelines
    "CastClassifier",
    "normalize_cast_type",
    "ClassCastCache",
    "AttributeSetPipeline",
    "AttributeGetPipeline",
    # primitives
    "BUILTIN_CASTERS",
    "PrimitiveCaster",
    # paths
    "DotPathResolver",
    # encryption
    "FernetEncrypter",
    "get_default_encrypter",
    "set_default_encrypter",
    # wiring
    "build_default_registry",
    "build_pipelines",
    "Model",
]
