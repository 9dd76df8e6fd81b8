"""Tests for AtomicFileWriter."""

from pathlib import Path

import pytest

from keynote_file.writer import AtomicFileWriter


def test_creates_new_file(tmp_path: Path) -> None:
    """A new file is created and recorded."""
    writer = AtomicFileWriter()
    target = tmp_path / "new.knt"

    assert writer.write_bytes(target, b"data") == "create"
    assert target.read_bytes() == b"data"
    assert writer.updates == [("create", str(target))]


def test_identical_content_is_not_rewritten(tmp_path: Path) -> None:
    """Identical content leaves the file untouched."""
    target = tmp_path / "same.knt"
    target.write_bytes(b"data")
    writer = AtomicFileWriter()

    assert writer.write_bytes(target, b"data") == "same"
    assert writer.updates == []


def test_changed_content_is_replaced(tmp_path: Path) -> None:
    """Changed content replaces the file."""
    target = tmp_path / "file.knt"
    target.write_bytes(b"old")

    assert AtomicFileWriter().write_bytes(target, b"new contents") == "update"
    assert target.read_bytes() == b"new contents"


def test_no_temporary_files_left_behind(tmp_path: Path) -> None:
    """No temporary file remains after a write."""
    AtomicFileWriter().write_bytes(tmp_path / "a.knt", b"x")

    assert [p.name for p in tmp_path.iterdir()] == ["a.knt"]


def test_missing_directory_raises(tmp_path: Path) -> None:
    """A missing target directory raises ValueError."""
    with pytest.raises(ValueError, match="not found"):
        AtomicFileWriter().write_bytes(tmp_path / "missing" / "a.knt", b"x")


def test_dry_run_records_but_does_not_write(tmp_path: Path) -> None:
    """Dry-run records the update without writing."""
    target = tmp_path / "file.knt"
    target.write_bytes(b"old")
    writer = AtomicFileWriter(dry_run=True)

    assert writer.write_bytes(target, b"new") == "update"
    assert target.read_bytes() == b"old"
    assert writer.updates == [("update", str(target))]
