# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Loading functions for StateTree.

This module builds StateTree instances from scratch or from their plain
nested-object form:

    {
        'values':   {<key>: <leaf value>, ...},
        'substate': {<key>: <same shape, recursively>, ...},
    }

The legacy form using '_values' / '_substate' (the private attribute
names of older serialized states) is accepted too.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, TYPE_CHECKING

from ..paths import DEFAULT_SEPARATOR
from .core import SUBSTATE_KEY, VALUES_KEY, StateTree

if TYPE_CHECKING:
    from ..building import StateTreeBuilder

LEGACY_VALUES_KEY = '_' + VALUES_KEY
LEGACY_SUBSTATE_KEY = '_' + SUBSTATE_KEY

logger = logging.getLogger(__name__)


def builder() -> StateTreeBuilder[Any]:
    """Return a fresh StateTreeBuilder."""
    return StateTree.builder()


def empty(separator: str = DEFAULT_SEPARATOR) -> StateTree[Any]:
    """Return an empty StateTree.

    Args:
        separator: Path separator for the new tree and everything derived
            from it.
    """
    return StateTree.empty(separator)


def _load(
    values: Mapping[str, Any] | None,
    substate: Mapping[str, Any] | None,
    separator: str,
) -> StateTree[Any]:
    """Build one node; substates are converted recursively by the builder."""
    return (
        builder()
        .with_separator(separator)
        .with_values(values)
        .with_substate(substate)
        .build()
    )


def from_state(source: Any, separator: str = DEFAULT_SEPARATOR) -> StateTree[Any]:
    """Build a StateTree from any object exposing values and substate.

    Unlike from_plain_object, source is read through attributes, so any
    object shaped like a StateTree (values/substate attributes) works.

    Args:
        source: A StateTree (returned as is), None (empty tree), a
            Mapping (see from_plain_object), or an object with 'values'
            and 'substate' attributes.
        separator: Separator for the rebuilt nodes.
    """
    if source is None:
        return empty(separator)
    if isinstance(source, (StateTree, Mapping)):
        return from_plain_object(source, separator)
    substate = getattr(source, SUBSTATE_KEY, None) or {}
    return _load(
        getattr(source, VALUES_KEY, None),
        {
            key: from_state(child, separator)
            for key, child in substate.items()
            if child is not None
        },
        separator,
    )


def from_plain_object(source: Any, separator: str = DEFAULT_SEPARATOR) -> StateTree[Any]:
    """Build a StateTree from its plain nested-object form.

    Args:
        source: One of:
            - None: returns an empty tree
            - StateTree: returned unchanged
            - Mapping with 'values' and/or 'substate' keys
            - Mapping with legacy '_values' and/or '_substate' keys
            Missing or None sections are treated as empty. A non-empty
            Mapping with none of the four keys loads as an empty tree
            and is logged at DEBUG.
        separator: Separator for the rebuilt nodes.

    Returns:
        A StateTree equal to the one that produced source via flatten().

    Raises:
        TypeError: If source is not None, a StateTree or a Mapping.

    Example:
        >>> state = from_plain_object({
        ...     'values': {'a': 1},
        ...     'substate': {'b': {'values': {'c': 2}}},
        ... })
        >>> state['b.c']
        2
    """
    if source is None:
        return empty(separator)
    if isinstance(source, StateTree):
        return source
    if not isinstance(source, Mapping):
        raise TypeError(
            f"source must be a Mapping or StateTree, not {type(source).__name__}"
        )

    if VALUES_KEY in source or SUBSTATE_KEY in source:
        values_key, substate_key = VALUES_KEY, SUBSTATE_KEY
    else:
        values_key, substate_key = LEGACY_VALUES_KEY, LEGACY_SUBSTATE_KEY
        if source and values_key not in source and substate_key not in source:
            logger.debug(
                "Loading empty StateTree: no values/substate keys in %r",
                sorted(source, key=str),
            )

    return _load(source.get(values_key), source.get(substate_key), separator)
