# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures: uniformly shaped state trees.

A uniform tree with levels ['A', 'B'] and 2 entries per level holds one
value per path prefix:

    A0, A1, A0.B0, A0.B1, A1.B0, A1.B1
"""

import itertools

import pytest

from genro_statetree import empty

ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'


def create_levels(level_count):
    return list(ALPHABET[:level_count])


def create_all_keys(levels, count_per_level, separator='.'):
    """Full-depth keys, e.g. A0.B0, A0.B1, A1.B0, A1.B1."""
    per_level = [
        [f'{letter}{i}' for i in range(count_per_level)] for letter in levels
    ]
    return [separator.join(parts) for parts in itertools.product(*per_level)]


def create_combinations(levels, count_per_level, separator='.'):
    """Map every prefix of every full-depth key to a distinct int."""
    combinations = {}
    for key in create_all_keys(levels, count_per_level, separator):
        parts = key.split(separator)
        for n in range(1, len(parts) + 1):
            prefix = separator.join(parts[:n])
            if prefix not in combinations:
                combinations[prefix] = len(combinations) * 7 + 3
    return combinations


@pytest.fixture
def uniform():
    """Factory returning (state, combinations) for a uniform tree."""
    def _uniform(level_count, count_per_level):
        levels = create_levels(level_count)
        combinations = create_combinations(levels, count_per_level)
        return empty().updating_key_values(combinations), combinations
    return _uniform


@pytest.fixture
def all_keys():
    """Factory returning the full-depth keys of a uniform tree."""
    def _all_keys(level_count, count_per_level):
        return create_all_keys(create_levels(level_count), count_per_level)
    return _all_keys


@pytest.fixture
def sample_state():
    """Small hand-built tree used across tests.

    Layout::

        x = 1
        a: y = 2
           b: z = 3
        c: w = 'text'
    """
    return (
        empty()
        .updating_value('x', 1)
        .updating_value('a.y', 2)
        .updating_value('a.b.z', 3)
        .updating_value('c.w', 'text')
    )
