"""Cache contracts and the basic store-backed cache."""

from __future__ import annotations

import abc
import hashlib
from datetime import timedelta
from typing import Any, Protocol, runtime_checkable

from layercache.codec import Codec, CodecInterface, _BaseOperations
from layercache.store import InvalidateOption, Option, StoreInterface

CACHE_TYPE = "cache"


class CacheInterface(_BaseOperations):
    """Contract shared by every cache."""

    @abc.abstractmethod
    def get_type(self) -> str:
        """Return the cache type name."""


class SetterCacheInterface(CacheInterface):
    """A cache backed directly by a store."""

    @abc.abstractmethod
    def get_with_ttl(self, key: Any) -> tuple[Any, timedelta]:
        """Return the value for key and its remaining lifetime."""

    @property
    @abc.abstractmethod
    def codec(self) -> CodecInterface:
        """The codec in front of the store."""


@runtime_checkable
class CacheKeyGenerator(Protocol):
    """Objects that produce their own cache key."""

    def get_cache_key(self) -> str:
        """Return the cache key for this object."""
        ...


def checksum(obj: Any) -> str:
    """Hash the type and the representation of an object to a hex digest."""
    kind = type(obj)
    digest = hashlib.md5(usedforsecurity=False)
    digest.update(f"{kind.__module__}.{kind.__qualname__}".encode())
    digest.update(repr(obj).encode())
    return digest.hexdigest()


def cache_key(key: Any) -> str:
    """Turn any key into a string cache key."""
    if isinstance(key, str):
        return key
    if isinstance(key, CacheKeyGenerator):
        return key.get_cache_key()
    return checksum(key)


class _ForwardingCache(CacheInterface):
    """Base for caches that pass writes straight to an inner cache."""

    def __init__(self, cache: CacheInterface) -> None:
        self._cache = cache

    @property
    def cache(self) -> CacheInterface:
        return self._cache

    def set(self, key: Any, value: Any, *args: Option) -> None:
        self._cache.set(key, value, *args)

    def delete(self, key: Any) -> None:
        self._cache.delete(key)

    def invalidate(self, *args: InvalidateOption) -> None:
        self._cache.invalidate(*args)

    def clear(self) -> None:
        self._cache.clear()


class Cache(SetterCacheInterface):
    """A cache that reads and writes through a single store."""

    def __init__(self, store: StoreInterface) -> None:
        self._codec = Codec(store)

    @property
    def codec(self) -> CodecInterface:
        return self._codec

    def get(self, key: Any) -> Any:
        return self._codec.get(cache_key(key))

    def get_with_ttl(self, key: Any) -> tuple[Any, timedelta]:
        return self._codec.get_with_ttl(cache_key(key))

    def set(self, key: Any, value: Any, *args: Option) -> None:
        self._codec.set(cache_key(key), value, *args)

    def delete(self, key: Any) -> None:
        self._codec.delete(cache_key(key))

    def invalidate(self, *args: InvalidateOption) -> None:
        self._codec.invalidate(*args)

    def clear(self) -> None:
        self._codec.clear()

    def get_type(self) -> str:
        return CACHE_TYPE