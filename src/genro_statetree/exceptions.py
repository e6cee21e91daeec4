# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""StateTree exceptions.

Two families live here. Lookup failures (PathNotFoundError,
TypeMismatchError) are normally carried inside a Failure outcome and only
raised when a caller explicitly unwraps. IllegalMutationError is always
raised on the spot.
"""

from __future__ import annotations

from typing import Any


class StateTreeError(Exception):
    """Base exception for StateTree errors."""

    pass


class PathNotFoundError(StateTreeError, KeyError):
    """Raised when no value or substate exists at a path."""

    def __init__(self, path: str, kind: str = 'value') -> None:
        self.path = path
        self.kind = kind
        super().__init__(f"No {kind} found at '{path}'")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0])


class TypeMismatchError(StateTreeError, TypeError):
    """Raised when the value at a path is not of the requested type."""

    def __init__(self, path: str, expected: type, actual: Any) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"No {expected.__name__} at '{path}', "
            f"found {type(actual).__name__}"
        )


class IllegalMutationError(StateTreeError, RuntimeError):
    """Raised when a StateTree is mutated outside its builder's write window."""

    pass
