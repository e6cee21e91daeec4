# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""StateTreeBuilder - the only way to populate a StateTree."""

from __future__ import annotations

import threading
from typing import Any, Callable, Generic, Mapping, TypeVar

from pyrsistent import pmap

from .exceptions import PathNotFoundError
from .outcome import Outcome
from .state.core import StateTree

V = TypeVar('V')


def _present(values: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop None entries: None means absent, it is never stored."""
    return {k: v for k, v in (values or {}).items() if v is not None}


class StateTreeBuilder(Generic[V]):
    """Builder owning exactly one in-progress StateTree.

    Every with_*/update_* call writes into the owned StateTree. After
    build() the builder is inert: any further write raises
    IllegalMutationError, so a StateTree handed out by build() can never
    change, even through a stale reference to its builder.

    A builder belongs to the thread that created it. Writes and build()
    from any other thread raise IllegalMutationError; share the built
    StateTree between threads, never an open builder.

    Example:
        >>> state = (
        ...     StateTreeBuilder()
        ...     .with_values({'a': 1})
        ...     .with_substate({'child': empty().updating_value('b', 2)})
        ...     .build()
        ... )
        >>> state['child.b']
        2
        >>> builder = state.clone_builder()
        >>> clone = builder.update_value('a', 10).build()
        >>> builder.update_value('a', 20)
        Traceback (most recent call last):
            ...
        IllegalMutationError: Cannot mutate StateTree: builder has already built this state
    """

    __slots__ = ('_state', '_has_built', '_owner_thread')

    def __init__(self) -> None:
        self._state: StateTree[V] = StateTree()
        self._has_built = False
        self._owner_thread = threading.get_ident()

    def __repr__(self) -> str:
        status = 'built' if self._has_built else 'open'
        return f"StateTreeBuilder({status}, {self._state!r})"

    @property
    def has_built(self) -> bool:
        """True once build() has been called."""
        return self._has_built

    def owns(self, state: StateTree[Any]) -> bool:
        """Check if state is the StateTree this builder writes into."""
        return self._state is state

    def in_owner_thread(self) -> bool:
        """Check if the calling thread is the one that created this builder."""
        return threading.get_ident() == self._owner_thread

    def with_values(self, values: Mapping[str, V | None] | None) -> StateTreeBuilder[V]:
        """Replace the values. None entries are dropped."""
        self._state._install_values(pmap(_present(values)), self)
        return self

    def with_substate(self, substate: Mapping[str, Any] | None) -> StateTreeBuilder[V]:
        """Replace the substates.

        Args:
            substate: Mapping of key to StateTree, or to the plain-object
                form of one. None entries are dropped.
        """
        from .state.loading import from_plain_object

        separator = self._state.separator
        children = {
            key: from_plain_object(child, separator=separator)
            for key, child in _present(substate).items()
        }
        self._state._install_substate(pmap(children), self)
        return self

    def with_separator(self, separator: str) -> StateTreeBuilder[V]:
        """Replace the path separator.

        Raises:
            ValueError: If separator is empty.
        """
        if not separator:
            raise ValueError("separator must be a non-empty string")
        self._state._install_separator(separator, self)
        return self

    def with_buildable(self, state: StateTree[V] | None) -> StateTreeBuilder[V]:
        """Copy values, substates and separator from another StateTree."""
        if state is None:
            return self
        self._state._install_values(state._values, self)
        self._state._install_substate(state._substate, self)
        self._state._install_separator(state.separator, self)
        return self

    def update_value_with_function(
        self, key: str, fn: Callable[[Outcome[V]], Any]
    ) -> StateTreeBuilder[V]:
        """Set the value at a local key from fn(current Outcome).

        fn may return a plain value or an Outcome; None or a Failure
        removes the key.
        """
        current = Outcome.from_optional(
            self._state._values.get(key), PathNotFoundError(key)
        )
        result = fn(current)
        value = result.value if isinstance(result, Outcome) else result

        if value is not None:
            self._state._set_value(key, value, self)
        else:
            self._state._remove_value(key, self)
        return self

    def update_value(self, key: str, value: V | None) -> StateTreeBuilder[V]:
        """Set the value at a local key. None removes it."""
        return self.update_value_with_function(key, lambda _: value)

    def update_substate(self, key: str, substate: StateTree[V] | None) -> StateTreeBuilder[V]:
        """Set the substate at a local key. None removes it."""
        if substate is not None:
            self._state._set_substate(key, substate, self)
        else:
            self._state._remove_substate(key, self)
        return self

    def build(self) -> StateTree[V]:
        """Return the StateTree and close the write window.

        Calling build() again returns the same StateTree.

        Raises:
            IllegalMutationError: If called from a thread other than the
                builder's owner.
        """
        if not self._has_built:
            self._state._check_writer(self)
        self._has_built = True
        return self._state
