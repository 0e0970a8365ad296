"""Stores values in a cache as MessagePack bytes."""

from __future__ import annotations

import dataclasses
from typing import Any, Optional

import msgpack

from layercache.cache import CacheInterface
from layercache.store import InvalidateOption, Option


def _encode(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"cannot serialize object of type {type(obj).__name__!r}")


def _convert(data: Any, return_type: Optional[type]) -> Any:
    if return_type is None or isinstance(data, return_type):
        return data
    if isinstance(data, dict):
        return return_type(**data)
    return return_type(data)


class Marshaler:
    """Packs values before writing them and unpacks them when reading."""

    def __init__(self, cache: CacheInterface) -> None:
        self._cache = cache

    @property
    def cache(self) -> CacheInterface:
        return self._cache

    def get(self, key: Any, return_type: Optional[type] = None) -> Any:
        """Read and unpack a value, building return_type from it when given.

        Text values are taken as UTF-8 with surrogate escapes; values that are
        neither bytes nor text are returned as they are.
        """
        result = self._cache.get(key)
        if isinstance(result, str):
            result = result.encode("utf-8", "surrogateescape")
        if not isinstance(result, (bytes, bytearray, memoryview)):
            return result
        data = msgpack.unpackb(bytes(result), raw=False)
        return _convert(data, return_type)

    def set(self, key: Any, value: Any, *args: Option) -> None:
        """Pack the value and write it to the cache."""
        packed = msgpack.packb(value, default=_encode, use_bin_type=True)
        self._cache.set(key, packed, *args)

    def delete(self, key: Any) -> None:
        self._cache.delete(key)

    def invalidate(self, *args: InvalidateOption) -> None:
        self._cache.invalidate(*args)

    def clear(self) -> None:
        self._cache.clear()