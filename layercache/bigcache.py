"""Store backed by a bigcache-like byte cache client."""

from __future__ import annotations

import abc
import logging
from datetime import timedelta
from typing import Any, Optional

from layercache.store import (
    InvalidateOption,
    Option,
    Options,
    StoreInterface,
    apply_invalidate_options,
    apply_options,
    apply_options_with_default,
    not_found_with_cause,
    with_expiration,
)

BIGCACHE_TYPE = "bigcache"
BIGCACHE_TAG_PATTERN = "gocache_tag_{}"

_TAG_EXPIRATION = timedelta(hours=720)

_log = logging.getLogger(__name__)


class BigcacheClientInterface(abc.ABC):
    """Contract of a client that stores bytes under string keys."""

    @abc.abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the bytes stored under key, or None."""

    @abc.abstractmethod
    def set(self, key: str, entry: bytes) -> None:
        """Store bytes under key."""

    @abc.abstractmethod
    def delete(self, key: str) -> None:
        """Remove the entry stored under key."""

    @abc.abstractmethod
    def reset(self) -> None:
        """Remove every entry."""


def _require_str_key(key: Any) -> str:
    if not isinstance(key, str):
        raise TypeError("key type not supported by Bigcache store")
    return key


def _split_keys(raw: Any) -> list[str]:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode().split(",")
    return []


class BigcacheStore(StoreInterface):
    """A store for a bigcache-like client; values are kept as bytes."""

    def __init__(self, client: BigcacheClientInterface, *options: Option) -> None:
        self._client = client
        self._options = apply_options(*options)

    @property
    def client(self) -> BigcacheClientInterface:
        return self._client

    @property
    def options(self) -> Options:
        return self._options

    def get(self, key: Any) -> bytes:
        """Return the bytes stored under key; raise NotFound when there are none."""
        item = self._client.get(_require_str_key(key))
        if item is None:
            raise not_found_with_cause(LookupError("unable to retrieve data from bigcache"))
        return item

    def get_with_ttl(self, key: Any) -> tuple[Any, timedelta]:
        """Not supported by this store."""
        raise NotImplementedError("method not implemented for codec, use Get() instead")

    def set(self, key: Any, value: Any, *args: Option) -> None:
        """Store text or bytes under key, and record the key under its tags."""
        opts = apply_options_with_default(self._options, *args)
        if isinstance(value, str):
            entry = value.encode()
        elif isinstance(value, (bytes, bytearray)):
            entry = bytes(value)
        else:
            raise TypeError("value type not supported by Bigcache store")

        key = _require_str_key(key)
        self._client.set(key, entry)

        if opts.tags:
            self._set_tags(key, opts.tags)

    def _set_tags(self, key: str, tags: list[str]) -> None:
        for tag in tags:
            tag_key = BIGCACHE_TAG_PATTERN.format(tag)
            try:
                cache_keys = _split_keys(self.get(tag_key))
            except Exception:
                cache_keys = []

            if key not in cache_keys:
                cache_keys.append(key)

            try:
                self.set(
                    tag_key,
                    ",".join(cache_keys).encode(),
                    with_expiration(_TAG_EXPIRATION),
                )
            except Exception:
                _log.debug("unable to store tag %s", tag, exc_info=True)

    def delete(self, key: Any) -> None:
        self._client.delete(_require_str_key(key))

    def invalidate(self, *args: InvalidateOption) -> None:
        """Delete every key recorded under the given tags; failures are ignored."""
        opts = apply_invalidate_options(*args)
        for tag in opts.tags:
            tag_key = BIGCACHE_TAG_PATTERN.format(tag)
            try:
                result = self.get(tag_key)
            except Exception:
                return

            for cache_key in _split_keys(result):
                try:
                    self.delete(cache_key)
                except Exception:
                    _log.debug("unable to delete key %s", cache_key, exc_info=True)

    def clear(self) -> None:
        self._client.reset()

    def get_type(self) -> str:
        return BIGCACHE_TYPE