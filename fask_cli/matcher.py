"""Line matching and context window extraction."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Set, Tuple

from .errors import InvalidConfig, InvalidPattern
from .models import ContextBlock


def match_lines(lines: Sequence[str], pattern: str, ignore_case: bool = False) -> Set[int]:
    """Return the 1-based numbers of lines containing ``pattern``.

    A line with several occurrences is reported once.

    Args:
        lines: File contents, one entry per line
        pattern: Literal substring to look for
        ignore_case: Compare case-insensitively

    Returns:
        Set of matching line numbers

    Raises:
        InvalidPattern: If ``pattern`` is empty
    """
    if not pattern:
        raise InvalidPattern("Pattern must not be empty")

    if ignore_case:
        needle = pattern.casefold()
        return {i for i, line in enumerate(lines, 1) if needle in line.casefold()}
    return {i for i, line in enumerate(lines, 1) if pattern in line}


def extract_ranges(line_count: int, matches: Iterable[int], radius: int) -> List[Tuple[int, int]]:
    """Merge the ``[m - radius, m + radius]`` windows of all matches.

    Windows are clipped to ``[1, line_count]``. Overlapping or adjacent
    windows collapse into one range, so the result is ascending and no two
    ranges touch.

    Raises:
        InvalidConfig: If ``radius`` is negative
    """
    if radius < 0:
        raise InvalidConfig(f"Context radius must be >= 0, got {radius}")

    windows = sorted(
        (max(1, m - radius), min(line_count, m + radius))
        for m in set(matches)
        if 1 <= m <= line_count
    )

    merged: List[Tuple[int, int]] = []
    for start, end in windows:
        if merged and start <= merged[-1][1] + 1:
            prev_start, prev_end = merged[-1]
            merged[-1] = (prev_start, max(prev_end, end))
        else:
            merged.append((start, end))
    return merged


def build_blocks(
    path: str,
    lines: Sequence[str],
    ranges: Iterable[Tuple[int, int]],
    matches: Iterable[int],
) -> List[ContextBlock]:
    """Materialize line ranges into context blocks for ``path``."""
    matched = sorted(set(matches))
    blocks = []
    for start, end in ranges:
        blocks.append(
            ContextBlock(
                path=path,
                start=start,
                end=end,
                lines=[(n, lines[n - 1]) for n in range(start, end + 1)],
                matches=[m for m in matched if start <= m <= end],
            )
        )
    return blocks
