"""A cache that reads through several layers and refills the faster ones."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional

from layercache.cache import CacheInterface, SetterCacheInterface
from layercache.store import InvalidateOption, Option, with_expiration

CHAIN_TYPE = "chain"

_QUEUE_SIZE = 10000

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Refill:
    key: Any
    value: Any
    ttl: timedelta
    store_type: Optional[str]


class ChainCache(CacheInterface):
    """Aggregates caches; a hit in a lower layer is written back to the layers above."""

    def __init__(self, *caches: SetterCacheInterface) -> None:
        self._caches = list(caches)
        self._queue: queue.Queue[Optional[_Refill]] = queue.Queue(maxsize=_QUEUE_SIZE)
        self._closed = False
        self._worker = threading.Thread(
            target=self._setter, name="chain-cache-setter", daemon=True
        )
        self._worker.start()

    @property
    def caches(self) -> list[SetterCacheInterface]:
        return list(self._caches)

    def _refill(self, item: _Refill) -> None:
        for cache in self._caches:
            if item.store_type is not None and item.store_type == cache.codec.store.get_type():
                break
            try:
                cache.set(item.key, item.value, with_expiration(item.ttl))
            except Exception:
                _log.debug("unable to refill cache layer", exc_info=True)

    def _setter(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                self._refill(item)
            except Exception:
                _log.exception("unable to refill chained caches")
            finally:
                self._queue.task_done()

    def get(self, key: Any) -> Any:
        """Return the value from the first layer that holds it."""
        last_error: Optional[Exception] = None
        for cache in self._caches:
            store_type = cache.codec.store.get_type()
            try:
                value, ttl = cache.get_with_ttl(key)
            except Exception as err:
                last_error = err
                continue
            self._queue.put(_Refill(key, value, ttl, store_type))
            return value
        if last_error is not None:
            raise last_error
        return None

    def set(self, key: Any, value: Any, *args: Option) -> None:
        """Write the value to every layer, reporting all failures together."""
        failures = []
        for cache in self._caches:
            try:
                cache.set(key, value, *args)
            except Exception as err:
                store_type = cache.codec.store.get_type()
                failures.append(
                    f"Unable to set item into cache with store '{store_type}': {err}"
                )
        if failures:
            total = len(failures)
            raise RuntimeError(
                "".join(
                    f"error {number} of {total}: {message}"
                    for number, message in enumerate(failures, start=1)
                )
            )

    def delete(self, key: Any) -> None:
        """Remove the value from every layer; failures are ignored."""
        for cache in self._caches:
            try:
                cache.delete(key)
            except Exception:
                _log.debug("unable to delete from cache layer", exc_info=True)

    def invalidate(self, *args: InvalidateOption) -> None:
        """Invalidate in every layer; failures are ignored."""
        for cache in self._caches:
            try:
                cache.invalidate(*args)
            except Exception:
                _log.debug("unable to invalidate cache layer", exc_info=True)

    def clear(self) -> None:
        """Clear every layer; failures are ignored."""
        for cache in self._caches:
            try:
                cache.clear()
            except Exception:
                _log.debug("unable to clear cache layer", exc_info=True)

    def get_type(self) -> str:
        return CHAIN_TYPE

    def flush(self) -> None:
        """Wait until every pending refill has been written."""
        self._queue.join()

    def close(self) -> None:
        """Stop the background refiller after it drains pending refills."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(None)
        self._worker.join()

    def __enter__(self) -> ChainCache:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()