"""Codec: a store wrapper that counts the outcome of each operation."""

from __future__ import annotations

import abc
import dataclasses
import functools
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, TypeVar

from layercache.store import InvalidateOption, Option, StoreInterface

_F = TypeVar("_F", bound=Callable[..., Any])


@dataclass
class Stats:
    """Counters of codec usage."""

    hits: int = 0
    miss: int = 0
    set_success: int = 0
    set_error: int = 0
    delete_success: int = 0
    delete_error: int = 0
    invalidate_success: int = 0
    invalidate_error: int = 0
    clear_success: int = 0
    clear_error: int = 0


class _BaseOperations(abc.ABC):
    """Key-value operations shared by codecs and caches."""

    @abc.abstractmethod
    def get(self, key: Any) -> Any:
        """Return the value for key or raise."""

    @abc.abstractmethod
    def set(self, key: Any, value: Any, *args: Option) -> None:
        """Store a value under key."""

    @abc.abstractmethod
    def delete(self, key: Any) -> None:
        """Remove the value under key."""

    @abc.abstractmethod
    def invalidate(self, *args: InvalidateOption) -> None:
        """Invalidate items selected by options."""

    @abc.abstractmethod
    def clear(self) -> None:
        """Remove every item."""


class CodecInterface(_BaseOperations):
    """Contract of a codec sitting in front of a store."""

    @abc.abstractmethod
    def get_with_ttl(self, key: Any) -> tuple[Any, timedelta]:
        """Return the value for key and its remaining lifetime."""

    @property
    @abc.abstractmethod
    def store(self) -> StoreInterface:
        """The store behind this codec."""

    @abc.abstractmethod
    def stats(self) -> Stats:
        """Return a snapshot of the counters."""


def _counted(success: str, failure: str) -> Callable[[_F], _F]:
    """Count a call as a success when it returns and a failure when it raises."""

    def decorate(method: _F) -> _F:
        @functools.wraps(method)
        def wrapper(self: Codec, *args: Any) -> Any:
            try:
                result = method(self, *args)
            except Exception:
                self._bump(failure)
                raise
            self._bump(success)
            return result

        return wrapper  # type: ignore[return-value]

    return decorate


class Codec(CodecInterface):
    """Forwards calls to a store and records successes and failures."""

    def __init__(self, store: StoreInterface) -> None:
        self._store = store
        self._stats = Stats()
        self._lock = threading.Lock()

    def _bump(self, counter: str) -> None:
        with self._lock:
            setattr(self._stats, counter, getattr(self._stats, counter) + 1)

    @_counted("hits", "miss")
    def get(self, key: Any) -> Any:
        return self._store.get(key)

    @_counted("hits", "miss")
    def get_with_ttl(self, key: Any) -> tuple[Any, timedelta]:
        return self._store.get_with_ttl(key)

    @_counted("set_success", "set_error")
    def set(self, key: Any, value: Any, *args: Option) -> None:
        self._store.set(key, value, *args)

    @_counted("delete_success", "delete_error")
    def delete(self, key: Any) -> None:
        self._store.delete(key)

    @_counted("invalidate_success", "invalidate_error")
    def invalidate(self, *args: InvalidateOption) -> None:
        self._store.invalidate(*args)

    @_counted("clear_success", "clear_error")
    def clear(self) -> None:
        self._store.clear()

    @property
    def store(self) -> StoreInterface:
        return self._store

    def stats(self) -> Stats:
        with self._lock:
            return dataclasses.replace(self._stats)