"""Tests for filesystem durability helpers."""
import pytest

from anonsurvey.shared.storage.durability import fsync_directory


class TestFsyncDirectory:
    def test_existing_directory(self, tmp_path):
        (tmp_path / "record.json").write_text("{}", encoding="utf-8")

        fsync_directory(tmp_path)

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(OSError):
            fsync_directory(tmp_path / "missing")
