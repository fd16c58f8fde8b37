"""Directory traversal and file reading for the current-tree scan."""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .config import SKIP_DIRS
from .errors import DirectoryNotFound, FileReadError
from .models import SourceFile

logger = logging.getLogger(__name__)

BINARY_SNIFF_BYTES = 8192


def resolve_directory(directory: Union[str, Path]) -> Path:
    """Return ``directory`` as a Path, failing if it is not a directory."""
    path = Path(directory).expanduser()
    if not path.exists():
        raise DirectoryNotFound(f"Directory not found: {directory}")
    if not path.is_dir():
        raise DirectoryNotFound(f"Not a directory: {directory}")
    return path


def is_binary(path: Path) -> bool:
    """Heuristic used by grep-like tools: a NUL byte near the start."""
    try:
        with open(path, "rb") as f:
            return b"\0" in f.read(BINARY_SNIFF_BYTES)
    except OSError:
        # Let the reader report the failure
        return False


def _matches_glob(rel_path: Path, file_type: str) -> bool:
    if "/" in file_type:
        return fnmatch.fnmatch(rel_path.as_posix(), file_type)
    return fnmatch.fnmatch(rel_path.name, file_type)


def list_files(
    directory: Union[str, Path],
    file_type: Optional[str] = None,
    exclude: Iterable[str] = (),
) -> List[Path]:
    """List scannable files below ``directory`` in a stable order.

    Hidden entries, VCS and build directories, and binary files are skipped.

    Args:
        directory: Root directory to walk
        file_type: Optional glob such as ``*.rs``; matched against the file
            name, or against the relative path when it contains ``/``
        exclude: Extra directory names to skip

    Returns:
        Sorted list of file paths, each prefixed with ``directory``

    Raises:
        DirectoryNotFound: If ``directory`` is missing
    """
    root = resolve_directory(directory)
    skip = SKIP_DIRS | set(exclude)

    files: List[Path] = []
    for file_path in sorted(root.rglob("*")):
        rel_path = file_path.relative_to(root)
        if any(part in skip or part.startswith(".") for part in rel_path.parts):
            continue
        if not file_path.is_file():
            continue
        if file_type and not _matches_glob(rel_path, file_type):
            continue
        if is_binary(file_path):
            logger.debug("Skipping binary file %s", file_path)
            continue
        files.append(file_path)

    logger.debug("Found %d file(s) under %s", len(files), root)
    return files


def read_source_file(path: Union[str, Path]) -> SourceFile:
    """Read a file as UTF-8, replacing undecodable bytes.

    Raises:
        FileReadError: If the file cannot be opened or read
    """
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise FileReadError(str(path), exc.strerror or str(exc)) from exc
    return SourceFile(path=str(path), lines=text.splitlines())
