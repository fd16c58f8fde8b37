"""Exception hierarchy shared by the scanner, sources and git layers."""

from __future__ import annotations


class FaskError(Exception):
    """Base class for all errors raised by fask."""


class InvalidPattern(FaskError, ValueError):
    """Raised when the search pattern is empty."""


class InvalidConfig(FaskError, ValueError):
    """Raised for invalid scan settings such as a negative context radius."""


class InvalidDate(FaskError, ValueError):
    """Raised when a ``--date`` value is not in YYYY-MM-DD format."""


class DirectoryNotFound(FaskError):
    """Raised when the directory to scan does not exist."""


class GitError(FaskError):
    """Raised when a git command fails or the directory is not a repository."""


class FileReadError(FaskError):
    """Raised when a single file cannot be read. Never aborts a scan."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message
