"""Tests for file enumeration and reading."""

from pathlib import Path

import pytest

from fask_cli.errors import DirectoryNotFound, FileReadError
from fask_cli.sources import is_binary, list_files, read_source_file, resolve_directory


def _relative(paths, root: Path):
    return [p.relative_to(root).as_posix() for p in paths]


class TestListFiles:
    """Tests for list_files."""

    def test_lists_text_files_sorted(self, sample_project_path: Path):
        files = _relative(list_files(sample_project_path), sample_project_path)
        assert files == ["src/orders.py", "src/users.py", "web/app.js"]

    def test_skips_hidden_vendor_and_binary(self, sample_project_path: Path):
        files = _relative(list_files(sample_project_path), sample_project_path)
        assert not any(f.startswith("node_modules/") for f in files)
        assert not any(f.startswith(".cache/") for f in files)
        assert "src/blob.bin" not in files

    def test_file_type_glob(self, sample_project_path: Path):
        files = _relative(list_files(sample_project_path, "*.js"), sample_project_path)
        assert files == ["web/app.js"]

    def test_file_type_glob_with_directory(self, sample_project_path: Path):
        files = _relative(list_files(sample_project_path, "src/*.py"), sample_project_path)
        assert files == ["src/orders.py", "src/users.py"]

    def test_extra_excludes(self, sample_project_path: Path):
        files = _relative(list_files(sample_project_path, exclude=["web"]), sample_project_path)
        assert "web/app.js" not in files

    def test_empty_directory(self, temp_dir: Path):
        assert list_files(temp_dir) == []

    def test_missing_directory(self, temp_dir: Path):
        with pytest.raises(DirectoryNotFound):
            list_files(temp_dir / "nope")


class TestResolveDirectory:
    """Tests for resolve_directory."""

    def test_existing(self, temp_dir: Path):
        assert resolve_directory(temp_dir) == temp_dir

    def test_file_is_not_a_directory(self, temp_dir: Path):
        path = temp_dir / "file.txt"
        path.write_text("x")
        with pytest.raises(DirectoryNotFound):
            resolve_directory(path)


class TestReadSourceFile:
    """Tests for read_source_file and is_binary."""

    def test_reads_lines(self, write_lines):
        path = write_lines("a.txt", ["first", "second"])
        source = read_source_file(path)
        assert source.path == str(path)
        assert source.lines == ["first", "second"]

    def test_invalid_utf8_is_replaced(self, temp_dir: Path):
        path = temp_dir / "latin1.txt"
        path.write_bytes("caf\xe9 TODO\n".encode("latin-1"))
        source = read_source_file(path)
        assert "TODO" in source.lines[0]

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(FileReadError) as excinfo:
            read_source_file(temp_dir / "gone.txt")
        assert excinfo.value.path.endswith("gone.txt")

    def test_is_binary(self, sample_project_path: Path):
        assert is_binary(sample_project_path / "src" / "blob.bin")
        assert not is_binary(sample_project_path / "src" / "orders.py")
