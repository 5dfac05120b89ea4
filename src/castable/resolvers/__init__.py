"""Resolvers sub-package — path addressing inside decoded JSON attributes.

path – ``base->a.b`` style nested reads (JMESPath) and writes
"""

from .path import DotPathResolver, compile_path, split_path

__all__ = [
    "DotPathResolver",
    "compile_path",
    "split_path",
]
