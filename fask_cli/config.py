"""Configuration paths and built-in scan defaults for fask."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("FASK_HOME", str(Path.home() / ".fask"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

# Directories never worth scanning for markers
SKIP_DIRS = frozenset({
    ".git", ".hg", ".svn",
    "node_modules", "__pycache__",
    ".venv", "venv", ".tox",
    ".mypy_cache", ".pytest_cache",
    "target", "dist", "build",
})

# Built-in defaults; ~/.fask/config.toml overrides them (set via `fask config set`)
DEFAULT_SCAN = {
    "pattern": "TODO",
    "context": 2,
    "workers": None,
    "ignore_case": False,
    "exclude": [],
}


def ensure_base_dir() -> None:
    """Create the configuration directory if needed."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
