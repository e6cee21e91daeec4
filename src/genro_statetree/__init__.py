# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-StateTree - Immutable, path-addressable state trees.

A small library providing a persistent tree for application state in
reducer-style architectures: every operation returns a new tree, missing
paths never raise, and trees round-trip through plain nested dicts.
"""

__version__ = "0.1.0"

from .state import (
    SUBSTATE_KEY,
    VALUES_KEY,
    StateTree,
    builder,
    empty,
    from_plain_object,
    from_state,
)
from .building import StateTreeBuilder
from .exceptions import (
    IllegalMutationError,
    PathNotFoundError,
    StateTreeError,
    TypeMismatchError,
)
from .outcome import Failure, Outcome, Success
from .paths import DEFAULT_SEPARATOR, join_path, split_head, split_tail

__all__ = [
    # Core classes
    "StateTree",
    "StateTreeBuilder",
    # Factories
    "builder",
    "empty",
    "from_plain_object",
    "from_state",
    # Outcomes
    "Outcome",
    "Success",
    "Failure",
    # Paths
    "DEFAULT_SEPARATOR",
    "VALUES_KEY",
    "SUBSTATE_KEY",
    "split_head",
    "split_tail",
    "join_path",
    # Exceptions
    "StateTreeError",
    "PathNotFoundError",
    "TypeMismatchError",
    "IllegalMutationError",
]
