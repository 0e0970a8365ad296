"""Store backed by a freecache-like byte cache client."""

from __future__ import annotations

import abc
import logging
from datetime import timedelta
from typing import Any

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

FREECACHE_TYPE = "freecache"
FREECACHE_TAG_PATTERN = "freecache_tag_{}"

_TAG_EXPIRATION = timedelta(hours=720)
_KEY_NOT_SUPPORTED = "key type not supported by Freecache store"
_NOT_FOUND = "value not found in Freecache store"

_log = logging.getLogger(__name__)


class FreecacheClientInterface(abc.ABC):
    """Contract of a client that stores bytes under byte keys with expiry."""

    @abc.abstractmethod
    def get(self, key: bytes) -> bytes:
        """Return the bytes stored under key or raise when missing."""

    @abc.abstractmethod
    def ttl(self, key: bytes) -> int:
        """Return the seconds left before key expires, or raise when missing."""

    @abc.abstractmethod
    def set(self, key: bytes, value: bytes, expire_seconds: int) -> None:
        """Store bytes under key; expire_seconds <= 0 means no expiry."""

    @abc.abstractmethod
    def delete(self, key: bytes) -> bool:
        """Remove key and tell whether something was removed."""

    @abc.abstractmethod
    def clear(self) -> None:
        """Remove every entry."""


def _require_str_key(key: Any) -> str:
    if not isinstance(key, str):
        raise TypeError(_KEY_NOT_SUPPORTED)
    return key


class FreecacheStore(StoreInterface):
    """A store for a freecache-like client; values must be bytes."""

    def __init__(self, client: FreecacheClientInterface, *options: Option) -> None:
        self._client = client
        self._options = apply_options(*options)

    @property
    def client(self) -> FreecacheClientInterface:
        return self._client

    @property
    def options(self) -> Options:
        return self._options

    def get(self, key: Any) -> bytes:
        """Return the bytes stored under key; raise NotFound when missing."""
        raw_key = _require_str_key(key).encode()
        try:
            return self._client.get(raw_key)
        except Exception:
            raise not_found_with_cause(LookupError(_NOT_FOUND)) from None

    def get_with_ttl(self, key: Any) -> tuple[bytes, timedelta]:
        """Return the bytes stored under key and the time they have left."""
        raw_key = _require_str_key(key).encode()
        try:
            result = self._client.get(raw_key)
            seconds = self._client.ttl(raw_key)
        except Exception:
            raise not_found_with_cause(LookupError(_NOT_FOUND)) from None
        return result, timedelta(seconds=seconds)

    def set(self, key: Any, value: Any, *args: Option) -> None:
        """Store bytes under key with the expiration from the options.

        The client may refuse entries whose key or value is too large.
        """
        opts = apply_options_with_default(self._options, *args)
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError("value type not supported by Freecache store")
        entry = bytes(value)
        key = _require_str_key(key)

        try:
            self._client.set(key.encode(), entry, int(opts.expiration.total_seconds()))
        except Exception as err:
            raise RuntimeError(
                f"size of key: {key}, value: {len(entry)}, err: {err}"
            ) from err

        if opts.tags:
            self._set_tags(key, opts.tags)

    def _set_tags(self, key: str, tags: list[str]) -> None:
        for tag in tags:
            tag_key = FREECACHE_TAG_PATTERN.format(tag)
            cache_keys = self._cache_keys_for_tag(tag_key)
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

    def _cache_keys_for_tag(self, tag_key: str) -> list[str]:
        try:
            result = self.get(tag_key)
        except Exception:
            return []
        if isinstance(result, (bytes, bytearray)):
            return bytes(result).decode().split(",")
        return []

    def delete(self, key: Any) -> None:
        """Remove key; raise LookupError when the client removed nothing."""
        raw_key = _require_str_key(key)
        if not self._client.delete(raw_key.encode()):
            raise LookupError(f"failed to delete key {raw_key}")

    def invalidate(self, *args: InvalidateOption) -> None:
        """Delete every key recorded under the given tags, then the tag itself."""
        opts = apply_invalidate_options(*args)
        for tag in opts.tags:
            tag_key = FREECACHE_TAG_PATTERN.format(tag)
            for cache_key in self._cache_keys_for_tag(tag_key):
                self.delete(cache_key)
            self.delete(tag_key)

    def clear(self) -> None:
        self._client.clear()

    def get_type(self) -> str:
        return FREECACHE_TYPE