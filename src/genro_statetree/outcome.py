# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Outcome - a value or the reason it is missing.

Lookups on a StateTree never raise for absent data. They return an
Outcome instead: either a Success wrapping the value, or a Failure
wrapping the StateTreeError that explains what went wrong. Outcomes
compose with map/flat_map/zip_with, and a chain stops at the first
Failure.

Example:
    >>> state = empty().updating_value('user.age', 41)
    >>> state.value_at('user.age').map(lambda v: v + 1).get()
    42
    >>> state.value_at('user.name').get('anonymous')
    'anonymous'
    >>> state.value_at('user.name').unwrap()
    Traceback (most recent call last):
        ...
    PathNotFoundError: No value found at 'user.name'
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

from .exceptions import StateTreeError

T = TypeVar('T')
R = TypeVar('R')
U = TypeVar('U')


class Outcome(Generic[T]):
    """Base class for Success and Failure.

    Do not instantiate directly; use Success(value), Failure(error) or
    Outcome.from_optional(value, error).
    """

    __slots__ = ()

    @staticmethod
    def from_optional(value: T | None, error: StateTreeError) -> Outcome[T]:
        """Wrap value in a Success, or return Failure(error) if it is None."""
        if value is None:
            return Failure(error)
        return Success(value)

    @property
    def is_success(self) -> bool:
        raise NotImplementedError

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    @property
    def value(self) -> T | None:
        """The wrapped value, or None for a Failure."""
        raise NotImplementedError

    @property
    def error(self) -> StateTreeError | None:
        """The failure reason, or None for a Success."""
        raise NotImplementedError

    def get(self, default: Any = None) -> Any:
        """Return the value, or default for a Failure."""
        raise NotImplementedError

    def unwrap(self) -> T:
        """Return the value, raising the carried error for a Failure."""
        raise NotImplementedError

    def map(self, fn: Callable[[T], R]) -> Outcome[R]:
        raise NotImplementedError

    def flat_map(self, fn: Callable[[T], Outcome[R]]) -> Outcome[R]:
        raise NotImplementedError

    def map_error(
        self, fn: Callable[[StateTreeError], StateTreeError]
    ) -> Outcome[T]:
        raise NotImplementedError

    def filter(
        self, predicate: Callable[[T], bool], error: StateTreeError
    ) -> Outcome[T]:
        """Keep a Success only if predicate holds, else Failure(error)."""
        raise NotImplementedError

    def zip_with(
        self, other: Outcome[U], fn: Callable[[T, U], R]
    ) -> Outcome[R]:
        """Combine two successes with fn; the first failure wins."""
        raise NotImplementedError

    def or_else(self, alternative: Outcome[T]) -> Outcome[T]:
        raise NotImplementedError

    def __bool__(self) -> bool:
        return self.is_success


class Success(Outcome[T]):
    """A found value."""

    __slots__ = ('_value',)

    def __init__(self, value: T) -> None:
        self._value = value

    def __repr__(self) -> str:
        return f"Success({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Success):
            return NotImplemented
        return bool(self._value == other._value)

    __hash__ = None  # type: ignore[assignment]

    @property
    def is_success(self) -> bool:
        return True

    @property
    def value(self) -> T:
        return self._value

    @property
    def error(self) -> None:
        return None

    def get(self, default: Any = None) -> T:
        return self._value

    def unwrap(self) -> T:
        return self._value

    def map(self, fn: Callable[[T], R]) -> Outcome[R]:
        return Success(fn(self._value))

    def flat_map(self, fn: Callable[[T], Outcome[R]]) -> Outcome[R]:
        return fn(self._value)

    def map_error(
        self, fn: Callable[[StateTreeError], StateTreeError]
    ) -> Outcome[T]:
        return self

    def filter(
        self, predicate: Callable[[T], bool], error: StateTreeError
    ) -> Outcome[T]:
        if predicate(self._value):
            return self
        return Failure(error)

    def zip_with(
        self, other: Outcome[U], fn: Callable[[T, U], R]
    ) -> Outcome[R]:
        return other.map(lambda v: fn(self._value, v))

    def or_else(self, alternative: Outcome[T]) -> Outcome[T]:
        return self


class Failure(Outcome[T]):
    """A missing value, with the error that explains why."""

    __slots__ = ('_error',)

    def __init__(self, error: StateTreeError) -> None:
        self._error = error

    def __repr__(self) -> str:
        return f"Failure({self._error!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Failure):
            return NotImplemented
        return (
            type(self._error) is type(other._error)
            and self._error.args == other._error.args
        )

    __hash__ = None  # type: ignore[assignment]

    @property
    def is_success(self) -> bool:
        return False

    @property
    def value(self) -> None:
        return None

    @property
    def error(self) -> StateTreeError:
        return self._error

    def get(self, default: Any = None) -> Any:
        return default

    def unwrap(self) -> T:
        raise self._error

    def map(self, fn: Callable[[T], R]) -> Outcome[R]:
        return self  # type: ignore[return-value]

    def flat_map(self, fn: Callable[[T], Outcome[R]]) -> Outcome[R]:
        return self  # type: ignore[return-value]

    def map_error(
        self, fn: Callable[[StateTreeError], StateTreeError]
    ) -> Outcome[T]:
        return Failure(fn(self._error))

    def filter(
        self, predicate: Callable[[T], bool], error: StateTreeError
    ) -> Outcome[T]:
        return self

    def zip_with(
        self, other: Outcome[U], fn: Callable[[T, U], R]
    ) -> Outcome[R]:
        return self  # type: ignore[return-value]

    def or_else(self, alternative: Outcome[T]) -> Outcome[T]:
        return alternative
