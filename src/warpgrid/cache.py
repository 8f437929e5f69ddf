from __future__ import annotations

from typing import Any, Hashable

# Derived caches owned by a grid session.
TRANSFORMATION_CACHE = "transformationCache"
BLENDING_CACHE = "blendingCache"
GRID_CELL_CACHE = "gridCellCache"
DERIVED_CACHES: tuple[str, ...] = (TRANSFORMATION_CACHE, BLENDING_CACHE, GRID_CELL_CACHE)

_MISSING = object()


class NamedCache:
    """Independent exact-match key/value stores addressed by name."""

    def __init__(self) -> None:
        self._caches: dict[str, dict[Hashable, Any]] = {}

    def _cache(self, name: str) -> dict[Hashable, Any]:
        return self._caches.setdefault(name, {})

    def set(self, name: str, key: Hashable, value: Any) -> Any:
        self._cache(name)[key] = value
        return value

    def get(self, name: str, key: Hashable, default: Any = None) -> Any:
        return self._cache(name).get(key, default)

    def has(self, name: str, key: Hashable) -> bool:
        return key in self._cache(name)

    def lookup(self, name: str, key: Hashable) -> tuple[bool, Any]:
        value = self._cache(name).get(key, _MISSING)
        if value is _MISSING:
            return False, None
        return True, value

    def remove(self, name: str, key: Hashable) -> bool:
        return self._cache(name).pop(key, _MISSING) is not _MISSING

    def clear(self, name: str) -> None:
        self._cache(name).clear()

    def clear_all(self) -> None:
        for cache in self._caches.values():
            cache.clear()

    def keys(self, name: str) -> list[Hashable]:
        return list(self._cache(name))

    def size(self, name: str) -> int:
        return len(self._cache(name))

