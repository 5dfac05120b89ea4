"""Wiring — the single place where a record's casting pieces are assembled.

``build_pipelines`` is what ``Model.__init__`` calls; use it directly to put
the casting engine on a record type that does not inherit from ``Model``
(the record only has to provide the accessors listed in ``pipeline``).

Customisation points:

* **registry**  – ``CasterRegistry`` used to resolve caster identifiers.
                  ``None`` → ``registry.DEFAULT_REGISTRY``.
* **encrypter** – ``Encrypter`` for the ``encrypted`` family.  ``None`` →
                  the record class's ``encrypter``, else the process default.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

from .cache import ClassCastCache
from .classification import CastClassifier
from .core import Encrypter
from .pipeline import AttributeGetPipeline, AttributeSetPipeline
from .registry import DEFAULT_REGISTRY, CasterFactory, CasterRegistry
from .resolvers.path import DotPathResolver


def build_default_registry(
        casters: Optional[Mapping[str, CasterFactory]] = None,
) -> CasterRegistry:
    """Return a fresh registry seeded with *casters*.

    Example::

        registry = build_default_registry({"money": MoneyCaster})
        registry.resolve("money:USD")   → MoneyCaster("USD")
    """
    return CasterRegistry(casters)


def build_pipelines(
        model: Any,
        *,
        registry: Optional[CasterRegistry] = None,
        encrypter: Optional[Encrypter] = None,
) -> Tuple[CastClassifier, ClassCastCache, AttributeSetPipeline, AttributeGetPipeline]:
    """Assemble classifier, cache and both attribute pipelines for *model*.

    Both pipelines share one classifier, one cache and one path resolver,
    so a value cached by a write is seen by the next read.
    """
    registry = registry or DEFAULT_REGISTRY
    classifier = CastClassifier(model, registry)
    cache = ClassCastCache()
    resolver = DotPathResolver()

    shared = dict(
        classifier=classifier,
        registry=registry,
        cache=cache,
        encrypter=encrypter,
        resolver=resolver,
    )
    return (
        classifier,
        cache,
        AttributeSetPipeline(model, **shared),
        AttributeGetPipeline(model, **shared),
    )
