"""Tests for line matching and context extraction."""

import pytest

from fask_cli.errors import InvalidConfig, InvalidPattern
from fask_cli.matcher import build_blocks, extract_ranges, match_lines


class TestMatchLines:
    """Tests for match_lines."""

    def test_returns_one_based_line_numbers(self):
        lines = ["a", "TODO: x", "b", "c", "TODO: y", "d"]
        assert match_lines(lines, "TODO") == {2, 5}

    def test_multiple_occurrences_yield_one_entry(self):
        assert match_lines(["TODO TODO TODO"], "TODO") == {1}

    def test_case_sensitive_by_default(self):
        lines = ["todo: lower", "TODO: upper", "ToDo: mixed"]
        assert match_lines(lines, "TODO") == {2}

    def test_ignore_case(self):
        lines = ["todo: lower", "TODO: upper", "ToDo: mixed", "done"]
        assert match_lines(lines, "TODO", ignore_case=True) == {1, 2, 3}

    def test_substring_match_inside_words(self):
        assert match_lines(["TODOS list", "MYTODO"], "TODO") == {1, 2}

    def test_empty_lines(self):
        assert match_lines([], "TODO") == set()

    def test_empty_pattern_rejected(self):
        with pytest.raises(InvalidPattern):
            match_lines(["anything"], "")

    def test_sound_and_complete(self):
        lines = ["x FIXME", "FIX ME", "", "FIXME", "fixme", "prefixFIXMEsuffix"]
        result = match_lines(lines, "FIXME")
        assert result == {i for i, line in enumerate(lines, 1) if "FIXME" in line}


class TestExtractRanges:
    """Tests for extract_ranges."""

    def test_adjacent_windows_merge(self):
        # Windows [1,3] and [4,6] touch (3 + 1 == 4)
        assert extract_ranges(6, {2, 5}, 1) == [(1, 6)]

    def test_overlapping_windows_merge(self):
        assert extract_ranges(20, {5, 7}, 2) == [(3, 9)]

    def test_separate_windows(self):
        assert extract_ranges(20, {3, 15}, 2) == [(1, 5), (13, 17)]

    def test_gap_of_one_line_stays_separate(self):
        # [2,4] and [6,8] leave line 5 uncovered
        assert extract_ranges(10, {3, 7}, 1) == [(2, 4), (6, 8)]

    def test_radius_zero(self):
        assert extract_ranges(10, {4, 8}, 0) == [(4, 4), (8, 8)]

    def test_radius_zero_adjacent_lines_merge(self):
        assert extract_ranges(10, {4, 5}, 0) == [(4, 5)]

    def test_clipped_to_file_bounds(self):
        assert extract_ranges(5, {1, 5}, 10) == [(1, 5)]
        assert extract_ranges(100, {1}, 3) == [(1, 4)]
        assert extract_ranges(100, {100}, 3) == [(97, 100)]

    def test_unsorted_input(self):
        assert extract_ranges(50, [40, 2, 20], 1) == [(1, 3), (19, 21), (39, 41)]

    def test_out_of_range_matches_ignored(self):
        assert extract_ranges(5, {0, 3, 9}, 1) == [(2, 4)]

    def test_empty_matches(self):
        assert extract_ranges(10, set(), 2) == []

    def test_negative_radius_rejected(self):
        with pytest.raises(InvalidConfig):
            extract_ranges(10, {1}, -1)

    def test_every_match_covered_by_exactly_one_range(self):
        matches = {1, 4, 9, 10, 22, 30, 31, 48}
        ranges = extract_ranges(50, matches, 2)

        for start, end in ranges:
            assert 1 <= start <= end <= 50
        for (_, prev_end), (next_start, _) in zip(ranges, ranges[1:]):
            assert next_start > prev_end + 1
        for m in matches:
            assert sum(1 for start, end in ranges if start <= m <= end) == 1


class TestBuildBlocks:
    """Tests for build_blocks."""

    def test_slices_lines_and_records_matches(self):
        lines = ["a", "TODO: x", "b", "c", "TODO: y", "d"]
        blocks = build_blocks("f.txt", lines, [(1, 3), (4, 6)], {2, 5})

        assert len(blocks) == 2
        assert blocks[0].path == "f.txt"
        assert (blocks[0].start, blocks[0].end) == (1, 3)
        assert blocks[0].lines == [(1, "a"), (2, "TODO: x"), (3, "b")]
        assert blocks[0].matches == [2]
        assert blocks[1].lines == [(4, "c"), (5, "TODO: y"), (6, "d")]
        assert blocks[1].matches == [5]

    def test_block_without_matches(self):
        blocks = build_blocks("f.txt", ["a", "b"], [(1, 2)], {7})
        assert blocks[0].matches == []
