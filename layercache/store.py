"""Store contract, store options and the not-found error."""

from __future__ import annotations

import abc
import dataclasses
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Union

NOT_FOUND_ERR = "value not found in store"

Duration = Union[timedelta, int, float]


def _as_timedelta(value: Duration) -> timedelta:
    """Accept a timedelta or a number of seconds."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    raise TypeError(f"expected a timedelta or seconds, got {type(value).__name__}")


class NotFound(LookupError):
    """Raised when a store holds no value for a key."""

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(NOT_FOUND_ERR)
        self.cause = cause
        self.__cause__ = cause

    def __str__(self) -> str:
        return NOT_FOUND_ERR


def not_found_with_cause(cause: BaseException | None) -> NotFound:
    """Build a NotFound error that carries the underlying cause."""
    return NotFound(cause)


@dataclass
class Options:
    """Options applied when a value is written to a store."""

    cost: int = 0
    expiration: timedelta = timedelta(0)
    tags: list[str] = field(default_factory=list)
    client_side_cache_expiration: timedelta = timedelta(0)

    def is_empty(self) -> bool:
        return self.cost == 0 and self.expiration == timedelta(0) and not self.tags


Option = Callable[[Options], None]


@dataclass
class InvalidateOptions:
    """Options that select which items an invalidation removes."""

    tags: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.tags


InvalidateOption = Callable[[InvalidateOptions], None]


def apply_options(*args: Option | None) -> Options:
    """Build fresh Options from option functions."""
    return apply_options_with_default(Options(), *args)


def apply_options_with_default(default_options: Options, *args: Option | None) -> Options:
    """Apply option functions on top of a copy of the default options."""
    options = dataclasses.replace(default_options)
    for option in args:
        if option is not None:
            option(options)
    return options


def with_cost(cost: int) -> Option:
    """Set the memory cost of an item."""

    def apply(options: Options) -> None:
        options.cost = cost

    return apply


def with_expiration(expiration: Duration) -> Option:
    """Set how long an item lives."""
    value = _as_timedelta(expiration)

    def apply(options: Options) -> None:
        options.expiration = value

    return apply


def with_tags(tags: Sequence[str]) -> Option:
    """Attach tags to an item."""
    value = list(tags)

    def apply(options: Options) -> None:
        options.tags = value

    return apply


def with_client_side_caching(expiration: Duration) -> Option:
    """Set the client side caching expiration."""
    value = _as_timedelta(expiration)

    def apply(options: Options) -> None:
        options.client_side_cache_expiration = value

    return apply


def apply_invalidate_options(*args: InvalidateOption | None) -> InvalidateOptions:
    """Build fresh InvalidateOptions from option functions."""
    options = InvalidateOptions()
    for option in args:
        if option is not None:
            option(options)
    return options


def apply_invalidate_options_with_default(
    default_options: InvalidateOptions, *args: InvalidateOption | None
) -> InvalidateOptions:
    """Apply invalidate options, falling back to the defaults when nothing was set."""
    options = apply_invalidate_options(*args)
    return default_options if options.is_empty() else options


def with_invalidate_tags(tags: Sequence[str]) -> InvalidateOption:
    """Select items to invalidate by tag."""
    value = list(tags)

    def apply(options: InvalidateOptions) -> None:
        options.tags = value

    return apply


class StoreInterface(abc.ABC):
    """Contract shared by all storage backends."""

    @abc.abstractmethod
    def get(self, key: Any) -> Any:
        """Return the value stored under key or raise."""

    @abc.abstractmethod
    def get_with_ttl(self, key: Any) -> tuple[Any, timedelta]:
        """Return the value stored under key with its remaining lifetime."""

    @abc.abstractmethod
    def set(self, key: Any, value: Any, *args: Option) -> None:
        """Store value under key using the given options."""

    @abc.abstractmethod
    def delete(self, key: Any) -> None:
        """Remove the value stored under key."""

    @abc.abstractmethod
    def invalidate(self, *args: InvalidateOption) -> None:
        """Remove the items selected by the given options."""

    @abc.abstractmethod
    def clear(self) -> None:
        """Remove every item."""

    @abc.abstractmethod
    def get_type(self) -> str:
        """Return the name of the store type."""


@dataclass
class OptionsMatcher:
    """Checks that a sequence of option functions produces given values."""

    cost: int = 0
    expiration: Duration = timedelta(0)
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.expiration = _as_timedelta(self.expiration)
        self.tags = list(self.tags)

    def matches(self, options: Any) -> bool:
        if isinstance(options, Options):
            applied = options
        elif isinstance(options, (list, tuple)):
            applied = apply_options(*options)
        else:
            return False
        return (
            applied.cost == self.cost
            and applied.expiration == self.expiration
            and list(applied.tags) == self.tags
        )

    def __str__(self) -> str:
        return (
            f"options should match (cost: {self.cost} "
            f"expiration: {self.expiration} tags: {self.tags})"
        )


@dataclass
class InvalidateOptionsMatcher:
    """Checks that a sequence of invalidate options selects given tags."""

    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.tags = list(self.tags)

    def matches(self, options: Any) -> bool:
        if isinstance(options, InvalidateOptions):
            applied = options
        elif isinstance(options, (list, tuple)):
            applied = apply_invalidate_options(*options)
        else:
            return False
        return list(applied.tags) == self.tags

    def __str__(self) -> str:
        return f"invalidate options should match (tags: {self.tags})"