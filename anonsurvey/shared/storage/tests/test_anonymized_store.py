"""Tests for the anonymized record store."""
import json
import pytest

from anonsurvey.shared.models import AnonymizedRecord
from anonsurvey.shared.storage import (
    AnonymizedStore,
    AnonymizedWriteError,
    NotFoundError,
    StorageError,
)

IDENTITY = "0123456789abcdef0123456789abcdef"


@pytest.fixture
def record():
    return AnonymizedRecord(
        age=29,
        gender="female",
        marital_status="single",
        opinion="It depends on the people involved",
        religious_view="Strongly",
        cultural_factors="Family expectations",
        challenges="Secrecy",
        benefits="Getting to know each other",
        guidance="Be honest with your family",
        societal_changes="More openness",
    )


@pytest.fixture
def store(tmp_path):
    directory = tmp_path / "submissions"
    directory.mkdir()
    return AnonymizedStore(directory)


class TestWrite:
    def test_write_creates_one_file_named_by_identity(self, store, record):
        path = store.write(IDENTITY, record)

        assert path.name == f"{IDENTITY}.json"
        assert [p.name for p in store.directory.iterdir()] == [f"{IDENTITY}.json"]

    def test_document_uses_form_field_names_without_name(self, store, record):
        path = store.write(IDENTITY, record)
        document = json.loads(path.read_text(encoding="utf-8"))

        assert "name" not in document
        assert document["maritalStatus"] == "single"
        assert document["age"] == 29
        assert set(document) == {
            "age", "gender", "maritalStatus", "opinion", "religious_view",
            "cultural_factors", "challenges", "benefits", "guidance",
            "societal_changes",
        }

    def test_non_ascii_text_stored_verbatim(self, store, record):
        from dataclasses import replace
        path = store.write(IDENTITY, replace(record, opinion="نعم، ولكن"))

        assert "نعم، ولكن" in path.read_text(encoding="utf-8")

    def test_missing_directory_raises_write_error(self, tmp_path, record):
        store = AnonymizedStore(tmp_path / "does-not-exist")

        with pytest.raises(AnonymizedWriteError) as exc_info:
            store.write(IDENTITY, record)

        assert exc_info.value.identity == IDENTITY
        assert isinstance(exc_info.value, StorageError)
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_failed_rename_leaves_no_files(self, store, record, monkeypatch):
        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("anonsurvey.shared.storage.anonymized_store.os.replace", broken_replace)

        with pytest.raises(AnonymizedWriteError):
            store.write(IDENTITY, record)

        assert list(store.directory.iterdir()) == []

    def test_directory_fsynced_after_rename(self, store, record, monkeypatch):
        synced = []

        def record_fsync(directory):
            synced.append((directory, store.path_for(IDENTITY).exists()))

        monkeypatch.setattr("anonsurvey.shared.storage.anonymized_store.fsync_directory", record_fsync)

        store.write(IDENTITY, record)

        assert synced == [(store.directory, True)]

    def test_directory_fsync_failure_raises_write_error(self, store, record, monkeypatch):
        def broken_fsync(directory):
            raise OSError("EIO")

        monkeypatch.setattr("anonsurvey.shared.storage.anonymized_store.fsync_directory", broken_fsync)

        with pytest.raises(AnonymizedWriteError):
            store.write(IDENTITY, record)

    def test_malformed_identity_rejected(self, store, record):
        with pytest.raises(ValueError):
            store.write("../names", record)


class TestRead:
    def test_read_returns_written_record(self, store, record):
        store.write(IDENTITY, record)

        assert store.read(IDENTITY) == record
        assert store.exists(IDENTITY) is True

    def test_read_unknown_identity(self, store):
        with pytest.raises(NotFoundError):
            store.read(IDENTITY)
        assert store.exists(IDENTITY) is False

    def test_read_refuses_path_traversal(self, store):
        with pytest.raises(ValueError):
            store.read("../../etc/passwd")
