"""Unit tests for atomic file writes and extension helpers."""

from unittest.mock import patch

import pytest

from jobtracker.utils.file_ops import atomic_write_bytes, file_extension


class TestAtomicWriteBytes:
    """Tests for atomic_write_bytes."""

    def test_creates_parent_directories(self, tmp_path):
        target = tmp_path / "resumes" / "user-1" / "cv.pdf"

        atomic_write_bytes(target, b"%PDF-1.4")

        assert target.read_bytes() == b"%PDF-1.4"

    def test_overwrites_existing_file(self, tmp_path):
        target = tmp_path / "avatar.png"
        target.write_bytes(b"old")

        atomic_write_bytes(str(target), b"new")

        assert target.read_bytes() == b"new"

    def test_no_temp_files_left_behind(self, tmp_path):
        atomic_write_bytes(tmp_path / "a.bin", b"x")
        assert [p.name for p in tmp_path.iterdir()] == ["a.bin"]

    def test_failed_rename_cleans_up(self, tmp_path):
        target = tmp_path / "cover.jpg"

        with patch("jobtracker.utils.file_ops.os.replace", side_effect=OSError("read-only")):
            with pytest.raises(OSError):
                atomic_write_bytes(target, b"data")

        assert not target.exists()
        assert list(tmp_path.iterdir()) == []


class TestFileExtension:
    @pytest.mark.parametrize(
        "name,expected",
        [("My Resume.PDF", "pdf"), ("photo.jpeg", "jpeg"), ("archive.tar.gz", "gz"), ("README", "bin")],
    )
    def test_extension(self, name, expected):
        assert file_extension(name) == expected

    def test_custom_default(self):
        assert file_extension("noext", default="dat") == "dat"
