"""Read added lines from git history for the ``since`` scan.

The history scan compares ``HEAD`` against the newest commit on its
first-parent line that is older than the cutoff date. Every line that is in
``HEAD`` but not in that base commit is an added line, numbered as it appears
in ``HEAD``.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

import pygit2

from .errors import GitError, InvalidDate
from .matcher import match_lines
from .models import AddedLine, FileDiff, FileError, LineOrigin
from .sources import resolve_directory

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# ADDED, MODIFIED and RENAMED deltas can carry new lines
_KEPT_STATUSES = frozenset(
    {pygit2.GIT_DELTA_ADDED, pygit2.GIT_DELTA_MODIFIED, pygit2.GIT_DELTA_RENAMED}
)


def parse_since_date(text: str) -> date:
    """Parse a ``YYYY-MM-DD`` cutoff date.

    Raises:
        InvalidDate: If ``text`` is not a valid calendar date in that format
    """
    text = text.strip()
    if not _DATE_RE.match(text):
        raise InvalidDate("Invalid date format. Use YYYY-MM-DD (e.g., 2025-12-01)")
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError as exc:
        raise InvalidDate(f"Invalid date '{text}': {exc}") from exc


def open_repository(directory: Union[str, Path]) -> Tuple[pygit2.Repository, str]:
    """Open the repository containing ``directory``.

    Returns:
        The repository and the posix path of ``directory`` relative to its
        work tree ("" at the top level)

    Raises:
        DirectoryNotFound: If ``directory`` is missing
        GitError: If ``directory`` is not in a work tree with commits
    """
    root = resolve_directory(directory).resolve()
    try:
        repo_path = pygit2.discover_repository(str(root))
    except (KeyError, ValueError, pygit2.GitError):
        repo_path = None
    if repo_path is None:
        raise GitError(f"Not a git repository: {directory}")

    repo = pygit2.Repository(repo_path)
    if repo.workdir is None:
        raise GitError(f"Repository at {directory} has no work tree")
    if repo.head_is_unborn:
        raise GitError(f"Repository at {directory} has no commits")

    prefix = root.relative_to(Path(repo.workdir).resolve()).as_posix()
    return repo, "" if prefix == "." else prefix


def _head_commit(repo: pygit2.Repository) -> pygit2.Commit:
    try:
        return repo.head.peel(pygit2.Commit)
    except (KeyError, ValueError, pygit2.GitError) as exc:
        raise GitError(f"Could not resolve HEAD: {exc}") from exc


def find_base_commit(repo: pygit2.Repository, since: date) -> Optional[pygit2.Commit]:
    """Return the newest first-parent ancestor of HEAD committed before ``since``.

    Only HEAD's first-parent line is walked, so commits that arrived through
    a merge never become the base. The cutoff is local midnight of ``since``.
    """
    cutoff = datetime.combine(since, time.min).timestamp()
    walker = repo.walk(_head_commit(repo).id)
    walker.simplify_first_parent()
    for commit in walker:
        if commit.commit_time < cutoff:
            return commit
    return None


def _added_lines(patch: pygit2.Patch) -> List[AddedLine]:
    added = []
    for hunk in patch.hunks:
        for line in hunk.lines:
            if line.origin != "+":
                continue
            content = line.raw_content.decode("utf-8", errors="replace").rstrip("\r\n")
            added.append(AddedLine(line.new_lineno, content))
    return added


def _read_blob(repo: pygit2.Repository, file: pygit2.DiffFile) -> List[str]:
    blob = repo[file.id]
    return blob.data.decode("utf-8", errors="replace").splitlines()


def diffs_since(
    directory: Union[str, Path],
    since: date,
    pattern: Optional[str] = None,
    ignore_case: bool = False,
) -> Tuple[List[FileDiff], List[FileError]]:
    """Return the lines added to each file since ``since``.

    Args:
        directory: Directory inside a git work tree; paths are relative to it
        since: Cutoff date; commits on or after it count as new
        pattern: When given, files whose added lines cannot match it are
            dropped before their content is read
        ignore_case: Case-insensitive ``pattern`` prefilter

    Returns:
        One FileDiff per changed file, sorted by path, and a FileError for
        every file whose diff or content could not be read. Both are empty
        when no commits were made since the cutoff.

    Raises:
        DirectoryNotFound: If ``directory`` is missing
        GitError: If ``directory`` is not in a repository with commits, or
            the two trees cannot be compared
    """
    repo, prefix = open_repository(directory)
    head = _head_commit(repo)
    base = find_base_commit(repo, since)
    if base is not None and base.id == head.id:
        logger.debug("No commits since %s", since)
        return [], []

    try:
        if base is None:
            logger.debug("Repository starts after %s; diffing against the empty tree", since)
            diff = head.tree.diff_to_tree(context_lines=0, swap=True)
        else:
            diff = repo.diff(base, head, context_lines=0)
        diff.find_similar()
    except pygit2.GitError as exc:
        raise GitError(f"Could not diff {since} against HEAD: {exc}") from exc

    scope = f"{prefix}/" if prefix else ""
    diffs: List[FileDiff] = []
    errors: List[FileError] = []
    for patch in diff:
        delta = patch.delta
        repo_path = delta.new_file.path
        if delta.status not in _KEPT_STATUSES or not repo_path.startswith(scope):
            continue
        path = repo_path[len(scope):]
        if delta.is_binary:
            logger.debug("Skipping binary file %s", path)
            continue
        try:
            added_lines = _added_lines(patch)
            if not added_lines:
                continue
            if pattern and not match_lines([a.content for a in added_lines], pattern, ignore_case):
                continue
            content = _read_blob(repo, delta.new_file)
        except (KeyError, ValueError, pygit2.GitError) as exc:
            logger.warning("Skipping %s: %s", path, exc)
            errors.append(FileError(path, str(exc)))
            continue
        diffs.append(FileDiff(path, added_lines, content))

    diffs.sort(key=lambda d: d.path)
    logger.debug("%d file(s) with relevant additions since %s", len(diffs), since)
    return diffs, errors


def _signature_date(signature: pygit2.Signature) -> date:
    tz = timezone(timedelta(minutes=signature.offset))
    return datetime.fromtimestamp(signature.time, tz=tz).date()


def _summary(commit: pygit2.Commit) -> str:
    lines = commit.message.splitlines()
    return lines[0] if lines else ""


def blame_lines(
    directory: Union[str, Path],
    path: str,
    line_numbers: Iterable[int],
    rev: str = "HEAD",
) -> Dict[int, LineOrigin]:
    """Find the commit that introduced each of ``line_numbers`` in ``path``.

    ``path`` is relative to ``directory``, as in the FileDiffs returned by
    diffs_since. Authors are resolved through the repository mailmap.

    Raises:
        GitError: If the file cannot be blamed at ``rev``
    """
    numbers = sorted(set(line_numbers))
    if not numbers:
        return {}

    repo, prefix = open_repository(directory)
    repo_path = f"{prefix}/{path}" if prefix else path
    try:
        newest = repo.revparse_single(rev).peel(pygit2.Commit)
        blame = repo.blame(repo_path, newest_commit=newest.id)
    except (KeyError, ValueError, pygit2.GitError) as exc:
        raise GitError(f"blame failed for {path}: {exc}") from exc

    try:
        mailmap = pygit2.Mailmap.from_repository(repo)
    except pygit2.GitError:
        mailmap = None

    origins: Dict[int, LineOrigin] = {}
    commits: Dict[str, pygit2.Commit] = {}
    for number in numbers:
        try:
            hunk = blame.for_line(number)
        except (IndexError, ValueError):
            logger.debug("No blame for %s:%d", path, number)
            continue
        commit_id = str(hunk.final_commit_id)
        if commit_id not in commits:
            commits[commit_id] = repo[hunk.final_commit_id]
        signature = hunk.final_committer
        if signature is None:
            signature = commits[commit_id].author
        if mailmap is not None:
            signature = mailmap.resolve_signature(signature)
        origins[number] = LineOrigin(
            commit=commit_id,
            author=signature.name,
            date=_signature_date(signature),
            summary=_summary(commits[commit_id]),
        )
    return origins
