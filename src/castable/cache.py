"""Per-record memoization of class-cast results.

An entry exists only while the field's caster can read (``CastsAttributes``)
and the last value seen was object-like.  ``ClassCastCache.update`` applies
that rule; the pipelines never call ``put``/``invalidate`` directly for
caster results.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Optional, Tuple

from .core import CasterRole, CastsInboundAttributes, caster_role, is_object_like

logger = logging.getLogger(__name__)

_MISSING = object()


class ClassCastCache:
    """field name → decoded value, scoped to one record instance."""

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> Iterator[Tuple[str, Any]]:
        return iter(list(self._entries.items()))

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._entries.get(key, default)

    def put(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def invalidate(self, key: str) -> None:
        if self._entries.pop(key, _MISSING) is not _MISSING:
            logger.debug("class cast cache invalidated for %r", key)

    def clear(self) -> None:
        self._entries.clear()

    def update(self, key: str, caster: CastsInboundAttributes, value: Any) -> None:
        """Cache *value* for *key* or drop the entry, depending on *caster*."""
        if caster_role(caster) is CasterRole.INBOUND_ONLY or not is_object_like(value):
            self.invalidate(key)
        else:
            self.put(key, value)
