"""Scan coordinators for the current tree and for git history.

Both coordinators fan per-file work out to a thread pool and collect
``(index, result)`` pairs, then sort by index so the Report always follows
input order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar, Union

from .errors import FileReadError
from .matcher import build_blocks, extract_ranges, match_lines
from .models import FileDiff, FileError, FileReport, Match, Report, ScanOptions, SourceFile
from .sources import read_source_file

logger = logging.getLogger(__name__)

T = TypeVar("T")
Reader = Callable[[Union[str, Path]], SourceFile]


def scan_source(source: SourceFile, options: ScanOptions) -> Optional[FileReport]:
    """Find matches in one file and build their context blocks.

    Returns:
        FileReport, or None when the file has no matches
    """
    matched = match_lines(source.lines, options.pattern, options.ignore_case)
    if not matched:
        return None

    ranges = extract_ranges(source.line_count, matched, options.radius)
    return FileReport(
        path=source.path,
        matches=[Match(source.path, n, source.lines[n - 1]) for n in sorted(matched)],
        blocks=build_blocks(source.path, source.lines, ranges, matched),
    )


def scan_diff(diff: FileDiff, options: ScanOptions) -> Optional[FileReport]:
    """Report markers that are themselves added lines of ``diff``.

    Matching runs on added-line content only. Context comes from the full
    current file, so unchanged neighbouring lines are shown too.
    """
    if not diff.added_lines:
        return None

    added_content = [a.content for a in diff.added_lines]
    hits = match_lines(added_content, options.pattern, options.ignore_case)
    added_matches = {
        diff.added_lines[i - 1].line_number
        for i in hits
        if 1 <= diff.added_lines[i - 1].line_number <= len(diff.full_content)
    }
    if not added_matches:
        return None

    ranges = extract_ranges(len(diff.full_content), added_matches, options.radius)
    blocks = [
        block
        for block in build_blocks(diff.path, diff.full_content, ranges, added_matches)
        if block.matches
    ]
    if not blocks:
        return None

    return FileReport(
        path=diff.path,
        matches=[Match(diff.path, n, diff.full_content[n - 1]) for n in sorted(added_matches)],
        blocks=blocks,
    )


def _run_indexed(
    items: Sequence[T],
    task: Callable[[T], Tuple[Optional[FileReport], Optional[FileError]]],
    workers: int,
) -> Report:
    results: List[Tuple[int, Optional[FileReport], Optional[FileError]]] = []

    if items:
        executor = ThreadPoolExecutor(max_workers=min(workers, len(items)))
        try:
            futures = {executor.submit(task, item): idx for idx, item in enumerate(items)}
            for future in as_completed(futures):
                file_report, error = future.result()
                results.append((futures[future], file_report, error))
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

    results.sort(key=lambda r: r[0])

    report = Report()
    for _, file_report, error in results:
        if file_report is not None:
            report.files.append(file_report)
        if error is not None:
            report.errors.append(error)
    return report


def scan_current(
    paths: Sequence[Union[str, Path]],
    options: ScanOptions,
    reader: Reader = read_source_file,
) -> Report:
    """Scan the current contents of ``paths``.

    Args:
        paths: Files to scan, in report order
        options: Pattern, context radius and pool size
        reader: Loads a file; raises FileReadError on failure

    Returns:
        Report with one entry per file that has matches. Files that could
        not be read are listed in ``Report.errors``.
    """

    def task(path):
        try:
            source = reader(path)
        except FileReadError as exc:
            logger.warning("Skipping %s: %s", exc.path, exc.message)
            return None, FileError(exc.path, exc.message)
        logger.debug("Scanning %s (%d lines)", source.path, source.line_count)
        return scan_source(source, options), None

    report = _run_indexed(paths, task, options.max_workers)
    logger.debug(
        "Scanned %d file(s): %d match(es), %d error(s)",
        len(paths), report.match_count, len(report.errors),
    )
    return report


def scan_history(
    diffs: Sequence[FileDiff],
    options: ScanOptions,
    errors: Sequence[FileError] = (),
) -> Report:
    """Scan per-file diffs for markers added since the cutoff.

    Files without added lines are skipped silently. ``errors`` are files
    whose history could not be read; they are carried into
    ``Report.errors`` ahead of any found here.
    """

    def task(diff):
        return scan_diff(diff, options), None

    report = _run_indexed(diffs, task, options.max_workers)
    report.errors[:0] = errors
    logger.debug(
        "Scanned %d diff(s): %d new match(es), %d error(s)",
        len(diffs), report.match_count, len(report.errors),
    )
    return report
