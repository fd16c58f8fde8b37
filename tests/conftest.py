"""Pytest configuration and fixtures for fask tests."""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to sample test project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture
def temp_config(temp_dir: Path, monkeypatch) -> Path:
    """Point the config file at temporary storage."""
    base_dir = temp_dir / "fask_home"
    config_file = base_dir / "config.toml"
    monkeypatch.setattr("fask_cli.config.BASE_DIR", base_dir)
    monkeypatch.setattr("fask_cli.config.CONFIG_FILE", config_file)
    return config_file


class GitRepo:
    """Throwaway git repository with dated commits."""

    def __init__(self, path: Path):
        self.path = path
        self.git("init", "-q")

    def git(self, *args: str, date: str = "2025-01-01T12:00:00+0000") -> str:
        env = {
            **os.environ,
            "GIT_AUTHOR_NAME": "Test Author",
            "GIT_AUTHOR_EMAIL": "author@example.com",
            "GIT_COMMITTER_NAME": "Test Author",
            "GIT_COMMITTER_EMAIL": "author@example.com",
            "GIT_AUTHOR_DATE": date,
            "GIT_COMMITTER_DATE": date,
        }
        result = subprocess.run(
            ["git", "-c", "commit.gpgsign=false", *args],
            cwd=self.path,
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def commit(self, files: Dict[str, str], date: str, message: str = "update") -> str:
        for name, content in files.items():
            file_path = self.path / name
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
            self.git("add", name, date=date)
        self.git("commit", "-q", "-m", message, date=date)
        return self.git("rev-parse", "HEAD").strip()

    @property
    def branch(self) -> str:
        return self.git("rev-parse", "--abbrev-ref", "HEAD").strip()

    def checkout(self, name: str, create: bool = False) -> None:
        self.git("checkout", "-q", *(["-b"] if create else []), name)

    def merge(self, name: str, date: str, message: str = "merge") -> str:
        self.git("merge", "-q", "--no-ff", "-m", message, name, date=date)
        return self.git("rev-parse", "HEAD").strip()


@pytest.fixture
def git_repo(temp_dir: Path) -> GitRepo:
    """Create an empty git repository; skipped when git is not installed."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    repo_dir = temp_dir / "repo"
    repo_dir.mkdir()
    return GitRepo(repo_dir)


@pytest.fixture
def write_lines(temp_dir: Path) -> Callable[..., Path]:
    """Write a list of lines to a file under the temporary directory."""

    def _write(name: str, lines) -> Path:
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
