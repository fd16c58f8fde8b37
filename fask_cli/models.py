"""Data models shared by the matcher, the scan coordinators and the renderer."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, NamedTuple, Optional, Tuple

from .errors import InvalidConfig, InvalidPattern


@dataclass
class SourceFile:
    """Snapshot of a file's lines, read once per scan."""
    path: str
    lines: List[str]

    @property
    def line_count(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class Match:
    path: str
    line_number: int
    content: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line_number}"


@dataclass
class ContextBlock:
    """Contiguous run of lines around one or more matches."""
    path: str
    start: int
    end: int
    lines: List[Tuple[int, str]]
    matches: List[int] = field(default_factory=list)

    def contains(self, line_number: int) -> bool:
        return self.start <= line_number <= self.end

    def __str__(self) -> str:
        return f"{self.path}:{self.start}-{self.end}"


@dataclass(frozen=True)
class AddedLine:
    """A line added since the base commit, numbered as in the current file."""
    line_number: int
    content: str


class FileDiff(NamedTuple):
    path: str
    added_lines: List[AddedLine]
    full_content: List[str]


@dataclass(frozen=True)
class LineOrigin:
    """Commit that introduced a line, as reported by ``git blame``."""
    commit: str
    author: str
    date: date
    summary: str = ""

    @property
    def short_commit(self) -> str:
        return self.commit[:8]


@dataclass
class FileError:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class FileReport:
    """All matches and context blocks found in one file."""
    path: str
    matches: List[Match]
    blocks: List[ContextBlock]
    origins: Dict[int, LineOrigin] = field(default_factory=dict)

    @property
    def match_count(self) -> int:
        return len(self.matches)


@dataclass
class Report:
    """Ordered output of a scan: one entry per file with matches."""
    files: List[FileReport] = field(default_factory=list)
    errors: List[FileError] = field(default_factory=list)

    @property
    def blocks(self) -> List[ContextBlock]:
        return [block for file_report in self.files for block in file_report.blocks]

    @property
    def match_count(self) -> int:
        return sum(f.match_count for f in self.files)

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def is_empty(self) -> bool:
        return not self.files


@dataclass
class ScanOptions:
    """Validated settings for a single scan."""
    pattern: str = "TODO"
    radius: int = 2
    ignore_case: bool = False
    workers: Optional[int] = None

    def __post_init__(self):
        if not self.pattern:
            raise InvalidPattern("Pattern must not be empty")
        if self.radius < 0:
            raise InvalidConfig(f"Context radius must be >= 0, got {self.radius}")
        if self.workers is not None and self.workers < 1:
            raise InvalidConfig(f"Worker count must be >= 1, got {self.workers}")

    @property
    def max_workers(self) -> int:
        """Worker pool size; defaults to the number of available CPUs."""
        return self.workers or os.cpu_count() or 1
