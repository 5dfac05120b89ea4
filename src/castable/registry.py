"""Caster registry — maps cast type identifiers to caster factories.

Identifiers used in cast declarations (``"Money:USD"``) are looked up here
instead of being imported dynamically.  A registry entry is either a caster
class (constructed with the declaration's arguments) or a ``Castable`` value
type whose ``cast_using`` supplies the caster.

Exports
-------
CasterRegistry
    The lookup table + resolution algorithm.

DEFAULT_REGISTRY / register_caster
    Process-wide registry and the decorator that fills it.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple, Type, TypeVar, Union

from .core import (
    Castable,
    CastsInboundAttributes,
    UnresolvableCaster,
    parse_cast_spec,
)

logger = logging.getLogger(__name__)

CasterFactory = Union[Type[CastsInboundAttributes], Type[Castable]]
Declaration = Union[str, CasterFactory, CastsInboundAttributes]

_T = TypeVar("_T", bound=type)


class CasterRegistry:
    """Identifier → caster factory table.

    ::

        registry = CasterRegistry()
        registry.register("money", MoneyCaster)
        caster = registry.resolve("money:USD")   # MoneyCaster("USD")
    """

    def __init__(self, casters: Optional[Mapping[str, CasterFactory]] = None) -> None:
        self._casters: Dict[str, CasterFactory] = {}
        for name, factory in (casters or {}).items():
            self.register(name, factory)

    # -- registration -------------------------------------------------------

    def register(self, name: str, factory: CasterFactory) -> None:
        """Add *factory* under *name*.  Duplicate names raise ``ValueError``."""
        if name in self._casters:
            raise ValueError(f"Caster '{name}' is already registered")
        if not isinstance(factory, type):
            raise TypeError(f"Caster '{name}' must be a class, got {type(factory).__name__}")
        self._casters[name] = factory

    def unregister(self, name: str) -> None:
        self._casters.pop(name, None)

    # -- lookup -------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        return name in self._casters

    def names(self) -> Iterable[str]:
        return sorted(self._casters)

    def get(self, name: str) -> CasterFactory:
        """Return the factory registered under *name*."""
        try:
            return self._casters[name]
        except KeyError:
            raise UnresolvableCaster(name, "no caster registered under this name") from None

    def is_loadable(self, declaration: Any) -> bool:
        """True if *declaration* names something ``resolve`` can build."""
        if isinstance(declaration, CastsInboundAttributes):
            return True
        if isinstance(declaration, type):
            return issubclass(declaration, (CastsInboundAttributes, Castable))
        if isinstance(declaration, str):
            return parse_cast_spec(declaration).type_identifier in self._casters
        return False

    # -- resolution ---------------------------------------------------------

    def resolve(self, declaration: Declaration) -> CastsInboundAttributes:
        """Produce a live caster for *declaration*.

        Algorithm::

            instance               → returned as-is
            "name:a,b" / class     → factory, arguments
            factory is Castable    → factory.cast_using(arguments)
                                       instance → returned as-is
                                       str      → registry lookup
                                       class    → used as factory
            factory(*arguments)    → new caster
        """
        if isinstance(declaration, CastsInboundAttributes):
            return declaration

        factory, arguments = self._factory_for(declaration)

        if issubclass(factory, Castable):
            produced = factory.cast_using(list(arguments))
            logger.debug("castable %s supplied caster %r", factory.__name__, produced)
            if isinstance(produced, CastsInboundAttributes):
                return produced
            if isinstance(produced, str):
                factory = self.get(produced)
            elif isinstance(produced, type):
                factory = produced
            else:
                raise UnresolvableCaster(
                    factory.__name__,
                    f"cast_using returned {type(produced).__name__}, expected a caster or identifier",
                )

        return self._construct(factory, arguments)

    # -- internal helpers ---------------------------------------------------

    def _factory_for(self, declaration: Any) -> Tuple[CasterFactory, Tuple[str, ...]]:
        if isinstance(declaration, type):
            return declaration, ()
        if isinstance(declaration, str):
            spec = parse_cast_spec(declaration)
            return self.get(spec.type_identifier), spec.arguments
        raise UnresolvableCaster(declaration, f"unsupported declaration type {type(declaration).__name__}")

    def _construct(self, factory: type, arguments: Tuple[str, ...]) -> CastsInboundAttributes:
        if not issubclass(factory, CastsInboundAttributes):
            raise UnresolvableCaster(factory.__name__, "does not implement the caster contract")
        try:
            inspect.signature(factory).bind(*arguments)
        except TypeError as exc:
            raise UnresolvableCaster(factory.__name__, str(exc)) from exc
        logger.debug("constructing caster %s with arguments %r", factory.__name__, arguments)
        return factory(*arguments)


# ─────────────────────────────────────────────────────────────────────────────
# Process-wide default registry
# ─────────────────────────────────────────────────────────────────────────────

DEFAULT_REGISTRY = CasterRegistry()


def register_caster(name: str) -> Callable[[_T], _T]:
    """Decorator that registers a caster or Castable class under *name*."""

    def decorator(cls: _T) -> _T:
        DEFAULT_REGISTRY.register(name, cls)
        return cls

    return decorator
