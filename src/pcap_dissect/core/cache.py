from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable

from .config import settings


class PacketCache:
    """Generic cache for pure lookups performed while reading packets."""

    def __init__(self, maxsize: int | None = None, enabled: bool | None = None) -> None:
        self.enabled = settings.cache_enabled if enabled is None else enabled
        self.maxsize = maxsize if maxsize is not None else settings.field_cache_size
        self._cached_funcs: list[Callable[..., Any]] = []

    def memoize(self, func: Callable[..., Any]) -> Callable[..., Any]:
        if not self.enabled:
            return func
        cached = lru_cache(maxsize=self.maxsize)(func)
        self._cached_funcs.append(cached)
        return cached

    def clear(self) -> None:
        for f in self._cached_funcs:
            if hasattr(f, "cache_clear"):
                f.cache_clear()  # type: ignore[attr-defined]

    def stats(self) -> dict[str, Any]:
        return {f.__name__: f.cache_info() for f in self._cached_funcs if hasattr(f, "cache_info")}


__all__ = ["PacketCache"]
