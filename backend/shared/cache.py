"""In-process TTL cache with stale fallback for the lobbywatch API.

Backed by cachetools.TTLCache. Every process owns its own instances;
nothing is shared between the API workers.

When the history store cannot be read, cached reads fall back to the last
value that was loaded successfully, even if its TTL has expired.
"""

import asyncio
import functools
import logging
from collections import OrderedDict
from collections.abc import Callable
from typing import Any, TypeVar

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

# Distinguishes "not cached" from a cached None
_MISSING = object()

F = TypeVar("F", bound=Callable[..., Any])


class AsyncTTLCache:
    """TTL cache plus a bounded store of last-known-good values.

    ``_fresh`` answers normal lookups until the TTL expires. ``_stale`` keeps
    the most recent value per key (LRU, bounded by *maxsize*) and is only
    consulted after the loader has failed.
    """

    def __init__(self, maxsize: int = 16, ttl: float = 30.0):
        self.maxsize = maxsize
        self.ttl = ttl
        self._fresh: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)
        self._stale: OrderedDict[str, Any] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}

    def lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def get(self, key: str) -> Any:
        """Return the fresh value or ``_MISSING``."""
        return self._fresh.get(key, _MISSING)

    def set(self, key: str, value: Any) -> None:
        self._fresh[key] = value
        self._stale[key] = value
        self._stale.move_to_end(key)
        while len(self._stale) > self.maxsize:
            self._stale.popitem(last=False)

    def invalidate(self, key: str) -> None:
        """Drop the fresh value; the stale copy is kept."""
        self._fresh.pop(key, None)

    def clear(self) -> None:
        self._fresh.clear()
        self._stale.clear()

    def get_stale(self, key: str) -> Any:
        """Return the last-known-good value or ``_MISSING``."""
        value = self._stale.get(key, _MISSING)
        if value is not _MISSING:
            self._stale.move_to_end(key)
        return value

    @property
    def size(self) -> int:
        return len(self._fresh)

    @property
    def stale_size(self) -> int:
        return len(self._stale)


def cached(
    cache: AsyncTTLCache,
    key_func: Callable[..., str],
    *,
    retry: int = 2,
    retry_delay: float = 0.5,
):
    """Cache the result of an async loader, with retries and stale fallback.

    ``key_func`` receives the loader's ``(*args, **kwargs)`` and returns the
    cache key. After ``retry`` failed attempts the last-known-good value is
    returned with a warning; if there is none the last error is re-raised.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            key = key_func(*args, **kwargs)

            result = cache.get(key)
            if result is not _MISSING:
                return result

            async with cache.lock_for(key):
                result = cache.get(key)
                if result is not _MISSING:
                    return result

                last_exc: Exception | None = None
                for attempt in range(1, retry + 1):
                    try:
                        result = await func(*args, **kwargs)
                    except asyncio.CancelledError:
                        raise
                    except Exception as exc:
                        last_exc = exc
                        if attempt < retry:
                            delay = retry_delay * attempt
                            logger.warning(
                                f"Load attempt {attempt}/{retry} failed for {key}: "
                                f"{type(exc).__name__}, retrying in {delay:.1f}s"
                            )
                            await asyncio.sleep(delay)
                        continue
                    cache.set(key, result)
                    return result

                stale = cache.get_stale(key)
                if stale is not _MISSING:
                    logger.warning(f"Serving stale data for {key} ({type(last_exc).__name__})")
                    return stale

                assert last_exc is not None
                raise last_exc

        wrapper.cache = cache  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    return decorator
