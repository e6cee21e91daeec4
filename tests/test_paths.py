# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for path splitting helpers."""

import pytest

from genro_statetree import join_path, split_head, split_tail


class TestSplitHead:
    """Tests for split_head."""

    def test_multi_segment(self):
        """Test head is the first segment, rest keeps the others."""
        assert split_head('a.b.c') == ('a', 'b.c')

    def test_single_segment(self):
        """Test single segment has no rest."""
        assert split_head('a') == ('a', None)

    def test_empty_path(self):
        """Test empty path is a single empty segment."""
        assert split_head('') == ('', None)

    def test_trailing_separator(self):
        """Test trailing separator leaves an empty rest, not None."""
        assert split_head('a.') == ('a', '')

    def test_custom_separator(self):
        """Test multi-character separators."""
        assert split_head('a::b::c', '::') == ('a', 'b::c')
        assert split_head('a.b', '/') == ('a.b', None)


class TestSplitTail:
    """Tests for split_tail."""

    @pytest.mark.parametrize('path,expected', [
        ('should.be.correct', ('should.be', 'correct')),
        ('should', ('', 'should')),
        ('', ('', '')),
    ])
    def test_split(self, path, expected):
        """Test substate part and value key are separated."""
        assert split_tail(path) == expected

    def test_custom_separator(self):
        """Test split_tail with a custom separator."""
        assert split_tail('a/b/c', '/') == ('a/b', 'c')


class TestJoinPath:
    """Tests for join_path."""

    def test_root_prefix_is_skipped(self):
        """Test None prefix (root) yields the bare key."""
        assert join_path(None, 'a') == 'a'

    def test_join(self):
        """Test segments are joined with the separator."""
        assert join_path('a.b', 'c') == 'a.b.c'
        assert join_path('a', 'b', separator='/') == 'a/b'

    def test_round_trip_with_split_tail(self):
        """Test join_path undoes split_tail for multi-segment paths."""
        rest, tail = split_tail('a.b.c')
        assert join_path(rest, tail) == 'a.b.c'
