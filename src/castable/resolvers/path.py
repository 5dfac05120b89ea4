"""Dot-path resolver for nested writes/reads inside JSON attributes.

Paths come from ``base->path`` attribute keys.  Segments are separated by
``.`` or ``->`` (``a.b`` and ``a->b`` are the same location).

* Writes create missing intermediate objects and replace scalar
  intermediates with objects.
* Digit-only segments index into existing lists (auto-grow with ``None``).
* Reads are compiled to JMESPath and return ``None`` for missing paths.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, List

import jmespath
from jmespath.parser import ParsedResult

from ..core import JSON_PATH_DELIMITER


def split_path(path: str) -> List[str]:
    """``"a->b.c"`` → ``["a", "b", "c"]``."""
    return path.replace(JSON_PATH_DELIMITER, ".").split(".")


@lru_cache(maxsize=256)
def compile_path(path: str) -> ParsedResult:
    """Compile *path* into a JMESPath expression.

    Identifiers are quoted so keys with spaces or dashes survive; digit-only
    segments become index expressions.

    ::

        compile_path("a.b")       → "a"."b"
        compile_path("items.0.id") → "items"[0]."id"
    """
    expression = ""
    for segment in split_path(path):
        if segment.isdigit():
            expression += f"[{segment}]"
        else:
            quoted = json.dumps(segment)
            expression += f".{quoted}" if expression else quoted
    return jmespath.compile(expression)


class DotPathResolver:
    """Read/write nested values addressed by dot paths."""

    # -- read ---------------------------------------------------------------

    def get(self, path: str, data: Any) -> Any:
        """Read the value at *path*, ``None`` if absent.

        Examples::

            get("a.b", {"a": {"b": 42}})          → 42
            get("items.1", {"items": [1, 2]})     → 2
            get("missing.key", {})                → None
        """
        if path in ("", "."):
            return data
        return compile_path(path).search(data)

    # -- write --------------------------------------------------------------

    def set(self, path: str, data: Any, value: Any) -> Any:
        """Write *value* at *path*.  Returns the (possibly new) root.

        A non-container root is replaced by a fresh ``dict``.

        Examples::

            set("a.b", {}, 1)              → {"a": {"b": 1}}
            set("a.b", {"a": "x"}, 1)      → {"a": {"b": 1}}
            set("arr.3", {"arr": [0]}, 9)  → {"arr": [0, None, None, 9]}
        """
        if path in ("", "."):
            return value

        if not isinstance(data, (dict, list)):
            data = {}

        parts = split_path(path)
        cur: Any = data

        for token in parts[:-1]:
            if isinstance(cur, list):
                idx = self._index(path, token)
                while idx >= len(cur):
                    cur.append({})
                if not isinstance(cur[idx], (dict, list)):
                    cur[idx] = {}
                cur = cur[idx]
            else:
                if not isinstance(cur.get(token), (dict, list)):
                    cur[token] = {}
                cur = cur[token]

        leaf = parts[-1]
        if isinstance(cur, list):
            idx = self._index(path, leaf)
            while idx >= len(cur):
                cur.append(None)
            cur[idx] = value
        else:
            cur[leaf] = value

        return data

    # -- internal helpers ---------------------------------------------------

    @staticmethod
    def _index(path: str, token: str) -> int:
        if not token.isdigit():
            raise TypeError(f"{path}: segment '{token}' used on a list")
        return int(token)
