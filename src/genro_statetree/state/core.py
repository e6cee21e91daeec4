# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""StateTree - An immutable, path-addressable state container.

This module provides the StateTree class, the core node of the
genro-statetree library. A StateTree holds two flat maps: its own leaf
values, and its named substates (child StateTrees). Every structural
operation returns a new root and leaves the receiver untouched, which
makes the class suitable as the state of a reducer-style architecture.

Key Features:
    - **Immutable nodes**: maps are persistent (pyrsistent PMap) and can
      only be installed through the owning StateTreeBuilder
    - **Path navigation**: dotted paths ('a.b.c') with a per-tree separator
    - **Missing paths are not errors**: reads return an Outcome, writes
      create intermediate substates on demand
    - **Plain-object interchange**: flatten() / from_plain_object()
      round-trip through {'values': {...}, 'substate': {...}}
    - **Traversal**: walk/for_each with level tracking, mapping_each,
      single-branch decomposition and structural equality

Path Syntax:
    - 'a' addresses the value (or substate) 'a' of the receiver
    - 'a.b.c' descends into substate 'a', then 'b', and addresses 'c'
    - '' as a substate path addresses the receiver itself

Example:
    Basic usage::

        state = empty()
        state = state.updating_value('config.database.host', 'localhost')
        state = state.updating_value('config.database.port', 5432)

        state.value_at('config.database.port').get()   # 5432
        state.substate_at('config.database').is_success  # True
        state.value_at('config.database').is_failure    # True

    Reducer style::

        def reducer(state, action):
            if action['type'] == 'increment':
                return state.mapping_value(
                    'counter.value', lambda v: v.map(lambda x: x + 1).get(1)
                )
            return state
"""

from __future__ import annotations

import logging
import numbers
from typing import Any, Callable, Generic, Iterable, Iterator, Mapping, TypeVar, TYPE_CHECKING

from pyrsistent import PMap, pmap

from ..exceptions import IllegalMutationError, PathNotFoundError, TypeMismatchError
from ..outcome import Failure, Outcome, Success
from ..paths import DEFAULT_SEPARATOR, join_path, split_head

if TYPE_CHECKING:
    from ..building import StateTreeBuilder

logger = logging.getLogger(__name__)

V = TypeVar('V')
R = TypeVar('R')

VALUES_KEY = 'values'
SUBSTATE_KEY = 'substate'

Visitor = Callable[[str, Any, 'str | None', int], Any]
UpdateFn = Callable[[Outcome[Any]], Any]


def _unwrap_update(result: Any) -> Any:
    """Normalize an update function result: Outcome or plain value."""
    if isinstance(result, Outcome):
        return result.value
    return result


def _same_value(lhs: Any, rhs: Any) -> bool:
    """Default value comparison: identical objects are equal, even NaN."""
    return lhs is rhs or bool(lhs == rhs)


class StateTree(Generic[V]):
    """An immutable node holding leaf values and named substates.

    StateTree provides:
    - value_at(path) / substate_at(path): Outcome-returning lookups
    - updating_value / mapping_value / removing_value: value writes
    - updating_substate / removing_substate: substate writes
    - copying_* / moving_*: relocate values or substates
    - flatten() / for_each() / mapping_each(): conversion and traversal
    - equals(): structural equality

    Instances are produced by StateTreeBuilder.build(). Calling
    StateTree() directly is internal to the builder: it yields an empty
    node that nothing can ever populate. The private _install_* and
    _set_*/_remove_* primitives check that the calling builder owns this
    node, has not built it yet and runs in its owner thread, and raise
    IllegalMutationError otherwise.

    Attributes:
        separator: The path segment delimiter for this tree.

    Example:
        >>> state = empty().updating_value('a.b.c', 5)
        >>> state.value_at('a.b.c').get()
        5
        >>> state.value_at('a.b').is_failure
        True
    """

    __slots__ = ('_values', '_substate', '_separator')

    def __init__(self) -> None:
        """Initialize an empty StateTree. Internal: use empty() or builder()."""
        self._values: PMap = pmap()
        self._substate: PMap = pmap()
        self._separator: str = DEFAULT_SEPARATOR

    # ==================== Factories ====================

    @classmethod
    def builder(cls) -> StateTreeBuilder[V]:
        """Return a fresh builder owning a new empty StateTree."""
        from ..building import StateTreeBuilder
        return StateTreeBuilder()

    @classmethod
    def empty(cls, separator: str = DEFAULT_SEPARATOR) -> StateTree[V]:
        """Return an empty StateTree using the given separator."""
        return cls.builder().with_separator(separator).build()

    @classmethod
    def from_plain(cls, source: Any, separator: str = DEFAULT_SEPARATOR) -> StateTree[Any]:
        """Build a StateTree from its plain-object form (see from_plain_object)."""
        from .loading import from_plain_object
        return from_plain_object(source, separator=separator)

    def clone_builder(self) -> StateTreeBuilder[V]:
        """Return a builder pre-populated with this tree's content.

        The copy is shallow: substates are shared, since they are
        immutable themselves.
        """
        return self.builder().with_buildable(self)

    # ==================== Write Gate ====================

    def _check_writer(self, builder: StateTreeBuilder[V] | None) -> None:
        """Raise IllegalMutationError unless builder may write this node."""
        if builder is None or not builder.owns(self):
            logger.debug("Rejected mutation of %r by non-owning builder", self)
            raise IllegalMutationError(
                "Cannot mutate StateTree: builder does not own this state"
            )
        if builder.has_built:
            logger.debug("Rejected mutation of %r after build()", self)
            raise IllegalMutationError(
                "Cannot mutate StateTree: builder has already built this state"
            )
        if not builder.in_owner_thread():
            logger.debug("Rejected mutation of %r from a foreign thread", self)
            raise IllegalMutationError(
                "Cannot mutate StateTree: builder belongs to another thread"
            )

    def _install_values(self, values: PMap, builder: StateTreeBuilder[V]) -> None:
        self._check_writer(builder)
        self._values = values

    def _install_substate(self, substate: PMap, builder: StateTreeBuilder[V]) -> None:
        self._check_writer(builder)
        self._substate = substate

    def _install_separator(self, separator: str, builder: StateTreeBuilder[V]) -> None:
        self._check_writer(builder)
        self._separator = separator

    def _set_value(self, key: str, value: V, builder: StateTreeBuilder[V]) -> None:
        self._check_writer(builder)
        self._values = self._values.set(key, value)

    def _remove_value(self, key: str, builder: StateTreeBuilder[V]) -> None:
        self._check_writer(builder)
        self._values = self._values.discard(key)

    def _set_substate(
        self, key: str, substate: StateTree[V], builder: StateTreeBuilder[V]
    ) -> None:
        self._check_writer(builder)
        self._substate = self._substate.set(key, substate)

    def _remove_substate(self, key: str, builder: StateTreeBuilder[V]) -> None:
        self._check_writer(builder)
        self._substate = self._substate.discard(key)

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        """Return string representation showing value and substate keys."""
        return (
            f"StateTree(values={sorted(self._values, key=str)}, "
            f"substate={sorted(self._substate, key=str)})"
        )

    def __len__(self) -> int:
        """Return the number of own values plus own substates."""
        return len(self._values) + len(self._substate)

    def __contains__(self, path: str) -> bool:
        """Check if a value or a substate exists at path.

        '' only matches a value stored under the empty key; the receiver
        does not contain itself.
        """
        if self.value_at(path).is_success:
            return True
        return path != '' and self.substate_at(path).is_success

    def __getitem__(self, path: str) -> V:
        """Get the value at path.

        Raises:
            PathNotFoundError: If no value exists at path.
        """
        return self.value_at(path).unwrap()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StateTree):
            return NotImplemented
        return self.equals(other)

    __hash__ = None  # type: ignore[assignment]

    # ==================== Access ====================

    @property
    def values(self) -> dict[str, V]:
        """Snapshot of this node's own values."""
        return dict(self._values)

    @property
    def value_keys(self) -> list[str]:
        return list(self._values)

    @property
    def substate(self) -> dict[str, StateTree[V]]:
        """Snapshot of this node's direct substates."""
        return dict(self._substate)

    @property
    def substate_keys(self) -> list[str]:
        return list(self._substate)

    @property
    def separator(self) -> str:
        return self._separator

    def has_values(self) -> bool:
        return len(self._values) > 0

    def has_substate(self) -> bool:
        return len(self._substate) > 0

    def is_empty(self) -> bool:
        """True if this node has neither values nor substates."""
        return not self.has_values() and not self.has_substate()

    def first_value(self) -> Outcome[V]:
        """Return the first own value in map order, if any."""
        for value in self._values.values():
            return Success(value)
        return Failure(PathNotFoundError('', 'value'))

    def first_substate(self) -> Outcome[StateTree[V]]:
        """Return the first direct substate in map order, if any."""
        for substate in self._substate.values():
            return Success(substate)
        return Failure(PathNotFoundError('', 'substate'))

    def _resolve_substate(self, path: str, original: str) -> Outcome[StateTree[V]]:
        head, rest = split_head(path, self._separator)
        child = self._substate.get(head)
        if child is None:
            return Failure(PathNotFoundError(original, 'substate'))
        if rest is None:
            return Success(child)
        return child._resolve_substate(rest, original)

    def _resolve_value(self, path: str, original: str) -> Outcome[V]:
        head, rest = split_head(path, self._separator)
        if rest is None:
            return Outcome.from_optional(
                self._values.get(head), PathNotFoundError(original)
            )
        child = self._substate.get(head)
        if child is None:
            return Failure(PathNotFoundError(original))
        return child._resolve_value(rest, original)

    def substate_at(self, path: str) -> Outcome[StateTree[V]]:
        """Get the substate at the given path.

        Args:
            path: Dotted path to the substate. '' addresses this node.

        Returns:
            Success with the substate, or Failure(PathNotFoundError).
        """
        if path == '':
            return Success(self)
        return self._resolve_substate(path, path)

    def value_at(self, path: str) -> Outcome[V]:
        """Get the value at the given path.

        The last segment is looked up in the values of the substate
        addressed by the preceding segments. Nothing is created.

        Args:
            path: Dotted path to the value.

        Returns:
            Success with the value, or Failure(PathNotFoundError) if any
            segment is missing.

        Example:
            >>> state = empty().updating_value('a.b', 1)
            >>> state.value_at('a.b')
            Success(1)
            >>> state.value_at('a.c').get('fallback')
            'fallback'
        """
        return self._resolve_value(path, path)

    def get(self, path: str, default: Any = None) -> Any:
        """Get the value at path, or default if it does not exist."""
        return self.value_at(path).get(default)

    def _typed_at(
        self, path: str, expected: type, check: Callable[[Any], bool]
    ) -> Outcome[Any]:
        def _check(value: Any) -> Outcome[Any]:
            if check(value):
                return Success(value)
            return Failure(TypeMismatchError(path, expected, value))

        return self.value_at(path).flat_map(_check)

    def string_at(self, path: str) -> Outcome[str]:
        """Get a str at path, failing with TypeMismatchError otherwise."""
        return self._typed_at(path, str, lambda v: isinstance(v, str))

    def number_at(self, path: str) -> Outcome[numbers.Number]:
        """Get a number at path. Booleans are not numbers here."""
        return self._typed_at(
            path,
            numbers.Number,
            lambda v: isinstance(v, numbers.Number) and not isinstance(v, bool),
        )

    def boolean_at(self, path: str) -> Outcome[bool]:
        """Get a bool at path, failing with TypeMismatchError otherwise."""
        return self._typed_at(path, bool, lambda v: isinstance(v, bool))

    def instance_at(self, cls: type[R], path: str) -> Outcome[R]:
        """Get an instance of cls at path, failing with TypeMismatchError otherwise."""
        return self._typed_at(path, cls, lambda v: isinstance(v, cls))

    # ==================== Modify ====================

    def _mapping_value(self, path: str, fn: UpdateFn, original: str) -> StateTree[V]:
        head, rest = split_head(path, self._separator)

        if rest is None:
            current = Outcome.from_optional(
                self._values.get(head), PathNotFoundError(original)
            )
            new_value = _unwrap_update(fn(current))
            if new_value is None and current.is_failure:
                return self
            return self.clone_builder().update_value(head, new_value).build()

        child = self._substate.get(head)
        if child is None:
            child = self.emptying()
        new_child = child._mapping_value(rest, fn, original)
        if new_child is child:
            # Nothing changed below: do not rebuild the spine.
            return self
        return self.clone_builder().update_substate(head, new_child).build()

    def mapping_value(self, path: str, fn: UpdateFn) -> StateTree[V]:
        """Map the value at path, creating missing substates on the way.

        Args:
            path: Dotted path to the value.
            fn: Receives the current Outcome at path (Success or
                Failure(PathNotFoundError)) and returns the new value. The
                result may be a plain value or an Outcome; None or a
                Failure removes the value.

        Returns:
            A new StateTree. The receiver is returned unchanged when the
            value was absent and fn asks for removal.

        Example:
            >>> inc = lambda v: v.map(lambda x: x + 1).get(0)
            >>> state = empty().mapping_value('hits', inc).mapping_value('hits', inc)
            >>> state['hits']
            1
        """
        return self._mapping_value(path, fn, path)

    def updating_value(self, path: str, value: V | None) -> StateTree[V]:
        """Set the value at path, ignoring the old value. None removes it."""
        return self.mapping_value(path, lambda _: value)

    def updating_key_values(self, values: Mapping[str, V | None] | None) -> StateTree[V]:
        """Apply updating_value for each (path, value) pair, in order.

        This is a fold, not an atomic batch: each update starts from the
        result of the previous one.

        Example:
            >>> state = empty().updating_key_values({'a': 1, 'a.b': 2})
            >>> state['a'], state['a.b']
            (1, 2)
        """
        state = self
        for path, value in (values or {}).items():
            state = state.updating_value(path, value)
        return state

    def removing_value(self, path: str) -> StateTree[V]:
        """Remove the value at path."""
        return self.updating_value(path, None)

    def copying_value(self, src: str, dest: str) -> StateTree[V]:
        """Copy the value at src to dest. No-op if src has no value."""
        source = self.value_at(src)
        if source.is_failure:
            return self
        return self.updating_value(dest, source.value)

    def moving_value(self, src: str, dest: str) -> StateTree[V]:
        """Move the value at src to dest. No-op if src has no value."""
        if src == dest:
            return self
        return self.copying_value(src, dest).removing_value(src)

    def _updating_substate(
        self, path: str, substate: StateTree[V] | None
    ) -> StateTree[V]:
        head, rest = split_head(path, self._separator)

        if rest is None:
            if substate is None and head not in self._substate:
                return self
            return self.clone_builder().update_substate(head, substate).build()

        child = self._substate.get(head)
        if child is None:
            if substate is None:
                return self
            child = self.emptying()
        new_child = child._updating_substate(rest, substate)
        if new_child is child:
            return self
        return self.clone_builder().update_substate(head, new_child).build()

    def updating_substate(self, path: str, substate: Any) -> StateTree[V]:
        """Set the substate at path, creating missing substates on the way.

        Args:
            path: Dotted path to the substate. '' addresses the receiver,
                so the result is substate itself.
            substate: A StateTree, a plain {'values', 'substate'} mapping,
                or None to remove the substate at path.

        Returns:
            A new StateTree.
        """
        if substate is not None:
            from .loading import from_plain_object
            substate = from_plain_object(substate, separator=self._separator)
        if path == '':
            return substate if substate is not None else self.emptying()
        return self._updating_substate(path, substate)

    def removing_substate(self, path: str) -> StateTree[V]:
        """Remove the substate at path."""
        return self.updating_substate(path, None)

    def copying_substate(self, src: str, dest: str) -> StateTree[V]:
        """Copy the substate at src to dest. No-op if src has no substate."""
        source = self.substate_at(src)
        if source.is_failure:
            return self
        return self.updating_substate(dest, source.value)

    def moving_substate(self, src: str, dest: str) -> StateTree[V]:
        """Move the substate at src to dest. No-op if src has no substate."""
        if src == dest:
            return self
        return self.copying_substate(src, dest).removing_substate(src)

    def emptying(self) -> StateTree[V]:
        """Return an empty StateTree with the same separator."""
        return StateTree.empty(self._separator)

    # ==================== Clone ====================

    def clone_with_paths(
        self,
        value_paths: Iterable[str] = (),
        substate_paths: Iterable[str] = (),
    ) -> StateTree[V]:
        """Build a slice of this tree holding only the requested paths.

        Starts from an empty tree, copies each value path that resolves,
        then each substate path that resolves. Missing paths are skipped.

        Args:
            value_paths: Dotted paths of single values to keep.
            substate_paths: Dotted paths of whole substates to keep.

        Returns:
            A new StateTree with the same separator.
        """
        state = self.emptying()
        for path in value_paths:
            outcome = self.value_at(path)
            if outcome.is_success:
                state = state.updating_value(path, outcome.value)
        for path in substate_paths:
            outcome = self.substate_at(path)
            if outcome.is_success:
                state = state.updating_substate(path, outcome.value)
        return state

    def cloning_with_values_at(self, *paths: str) -> StateTree[V]:
        return self.clone_with_paths(value_paths=paths)

    def cloning_with_substates_at(self, *paths: str) -> StateTree[V]:
        return self.clone_with_paths(substate_paths=paths)

    # ==================== Inspect ====================

    def level_count(self) -> int:
        """Return how deep the tree is; a node without substates has 1 level."""
        return 1 + max(
            (child.level_count() for child in self._substate.values()), default=0
        )

    def total_value_count(self) -> int:
        """Return the number of values in this node and all its descendants."""
        return len(self._values) + sum(
            child.total_value_count() for child in self._substate.values()
        )

    def flatten(self) -> dict[str, Any]:
        """Convert to the plain {'values': ..., 'substate': ...} form.

        The result only contains fresh dicts, so it is safe to mutate and
        to hand to a JSON encoder when the values are JSON-compatible.
        from_plain_object() rebuilds an equal StateTree from it.
        """
        return {
            VALUES_KEY: dict(self._values),
            SUBSTATE_KEY: {
                key: child.flatten() for key, child in self._substate.items()
            },
        }

    def _walk(
        self, substate_path: str | None, level: int
    ) -> Iterator[tuple[str, V, str | None, int]]:
        for key, value in self._values.items():
            yield key, value, substate_path, level
        for key, child in self._substate.items():
            child_path = join_path(substate_path, key, separator=self._separator)
            yield from child._walk(child_path, level + 1)

    def walk(
        self, callback: Visitor | None = None
    ) -> Iterator[tuple[str, V, str | None, int]] | None:
        """Walk every value in the tree, depth first.

        Each value is reported as (key, value, substate_path, level):
        substate_path is the dotted path of the substate holding the
        value (None at the root) and level is 0 for the root's own values.
        Order within a node follows the underlying map and is not sorted.

        Args:
            callback: Optional function called with the four items above.
                If provided, walk returns None.

        Yields:
            Tuples of (key, value, substate_path, level) if no callback.

        Example:
            >>> for key, value, path, level in state.walk():
            ...     print(path, key, value, level)
        """
        if callback is not None:
            for key, value, path, level in self._walk(None, 0):
                callback(key, value, path, level)
            return None
        return self._walk(None, 0)

    def for_each(self, visitor: Visitor) -> None:
        """Call visitor(key, value, substate_path, level) for every value."""
        self.walk(visitor)

    def mapping_each(self, fn: Callable[[V], R], strict: bool = False) -> StateTree[R]:
        """Map every value into a new tree with the same paths.

        The result is rebuilt from the full paths of the mapped values, so
        substates without any value do not survive, and a value mapped to
        None is dropped.

        Args:
            fn: Mapper applied to each value.
            strict: If False (default), a value whose mapper raises is
                dropped from the result and the error is logged at DEBUG.
                If True, the exception propagates.

        Returns:
            A new StateTree with the same separator.
        """
        state: StateTree[R] = StateTree.empty(self._separator)
        for key, value, path, _level in self._walk(None, 0):
            full_path = join_path(path, key, separator=self._separator)
            try:
                new_value = fn(value)
            except Exception as exc:
                if strict:
                    raise
                logger.debug("Dropping value at %r: mapper raised %r", full_path, exc)
                continue
            state = state.updating_value(full_path, new_value)
        return state

    def values_with_full_paths(self) -> dict[str, V]:
        """Return all values keyed by their full dotted path.

        Own values win over descendant values whose full path collides.
        """
        result: dict[str, V] = {}
        for key, child in self._substate.items():
            for sub_path, value in child.values_with_full_paths().items():
                result[f"{key}{self._separator}{sub_path}"] = value
        result.update(self._values)
        return result

    def values_for_matching_paths(self, predicate: Callable[[str], bool]) -> dict[str, V]:
        """Return values_with_full_paths() filtered by a full-path predicate."""
        return {
            path: value
            for path, value in self.values_with_full_paths().items()
            if predicate(path)
        }

    def create_single_branches(self) -> list[StateTree[V]]:
        """Split the tree into branches holding at most one substate per node.

        Each branch follows one root-to-leaf substate path; every node on
        that path keeps its own values. A tree without substates yields a
        single branch, itself. For a uniform tree of L levels with K
        substates per node there are K ** (L - 1) branches.

        Example:
            Tree with substates 'a' and 'b' under the root::

                root{x} -> a{y}, b{z}

            becomes two branches::

                root{x} -> a{y}
                root{x} -> b{z}
        """
        if not self._substate:
            return [self]
        branches: list[StateTree[V]] = []
        for key, child in self._substate.items():
            for branch in child.create_single_branches():
                branches.append(
                    self.clone_builder().with_substate({key: branch}).build()
                )
        return branches

    # ==================== Equality ====================

    def _equals(self, other: StateTree[Any], value_equal: Callable[[Any, Any], Any]) -> bool:
        if self is other:
            return True
        if set(self._values) != set(other._values):
            return False
        if set(self._substate) != set(other._substate):
            return False
        for key, value in self._values.items():
            if not value_equal(value, other._values[key]):
                return False
        for key, child in self._substate.items():
            if not child._equals(other._substate[key], value_equal):
                return False
        return True

    def equals(
        self,
        other: Any,
        value_equal: Callable[[V, V], Any] | None = None,
    ) -> bool:
        """Check structural equality with another tree.

        Args:
            other: A StateTree or its plain-object form. None, or any
                other type, is never equal.
            value_equal: Value comparison function (default: identity, then ==,
                so a NaN held by both trees compares equal).

        Returns:
            True if both trees have the same value keys and substate keys
            at every node, and every pair of values compares equal.
        """
        if isinstance(other, StateTree):
            other_state = other
        elif isinstance(other, Mapping):
            from .loading import from_plain_object
            other_state = from_plain_object(other)
        else:
            return False
        return self._equals(other_state, value_equal or _same_value)

    def equals_for_values(
        self,
        other: Any,
        keys: Iterable[str],
        equal_fn: Callable[[V, V], Any] | None = None,
    ) -> bool:
        """Check that the values at the given paths are equal.

        A path missing on both sides counts as equal; missing on one side
        only counts as different.
        """
        from .loading import from_plain_object
        other_state = from_plain_object(other)
        compare = equal_fn or _same_value

        for key in keys:
            lhs = self.value_at(key)
            rhs = other_state.value_at(key)
            if lhs.is_failure and rhs.is_failure:
                continue
            if not lhs.zip_with(rhs, compare).get(False):
                return False
        return True

    def equals_for_substates(
        self,
        other: Any,
        keys: Iterable[str],
        equal_fn: Callable[[StateTree[V], StateTree[V]], Any] | None = None,
    ) -> bool:
        """Check that the substates at the given paths are equal.

        Same rules as equals_for_values; substates are compared with
        equals() unless equal_fn is given.
        """
        from .loading import from_plain_object
        other_state = from_plain_object(other)
        compare = equal_fn or (lambda lhs, rhs: lhs.equals(rhs))

        for key in keys:
            lhs = self.substate_at(key)
            rhs = other_state.substate_at(key)
            if lhs.is_failure and rhs.is_failure:
                continue
            if not lhs.zip_with(rhs, compare).get(False):
                return False
        return True
