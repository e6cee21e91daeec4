# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Path utilities for dotted StateTree paths.

A path such as 'a.b.c' means: descend into substate 'a', then substate
'b', then read the value (or substate) 'c' there. The separator is
configurable per tree, so every helper takes it explicitly.
"""

from __future__ import annotations

DEFAULT_SEPARATOR = '.'


def split_head(path: str, separator: str = DEFAULT_SEPARATOR) -> tuple[str, str | None]:
    """Split a path on its first separator.

    Args:
        path: The full path.
        separator: Path segment delimiter.

    Returns:
        Tuple (head, rest); rest is None when path has a single segment.

    Example:
        >>> split_head('a.b.c')
        ('a', 'b.c')
        >>> split_head('a')
        ('a', None)
    """
    head, sep, rest = path.partition(separator)
    if not sep:
        return head, None
    return head, rest


def split_tail(path: str, separator: str = DEFAULT_SEPARATOR) -> tuple[str, str]:
    """Split a path on its last separator.

    Used to separate the substate part of a full path from the value key.

    Args:
        path: The full path.
        separator: Path segment delimiter.

    Returns:
        Tuple (rest, tail); rest is '' when path has a single segment.

    Example:
        >>> split_tail('a.b.c')
        ('a.b', 'c')
        >>> split_tail('c')
        ('', 'c')
    """
    rest, _, tail = path.rpartition(separator)
    return rest, tail


def join_path(*segments: str | None, separator: str = DEFAULT_SEPARATOR) -> str:
    """Join path segments, skipping None (the root has no path).

    Example:
        >>> join_path(None, 'a')
        'a'
        >>> join_path('a.b', 'c')
        'a.b.c'
    """
    return separator.join(s for s in segments if s is not None)
