"""Tests for submission domain models."""
import dataclasses
import pytest

from anonsurvey.shared.models import (
    AnonymizedRecord,
    FieldViolation,
    IdentityLedgerEntry,
    ValidatedSubmission,
    ValidationResult,
    is_valid_identity,
    split_identity,
)

IDENTITY = "a" * 32


@pytest.fixture
def submission():
    return ValidatedSubmission(
        name="Amina",
        age=29,
        gender="female",
        marital_status="single",
        opinion="...",
        religious_view="...",
        cultural_factors="...",
        challenges="...",
        benefits="...",
        guidance="...",
        societal_changes="...",
    )


class TestSplitIdentity:
    def test_split_separates_name(self, submission):
        record, name = split_identity(submission)

        assert name == "Amina"
        assert isinstance(record, AnonymizedRecord)
        assert not hasattr(record, "name")
        assert "name" not in record.to_document()

    def test_split_keeps_every_other_field(self, submission):
        record, _ = split_identity(submission)

        submission_fields = {f.name for f in dataclasses.fields(submission)} - {"name"}
        record_fields = {f.name for f in dataclasses.fields(record)}
        assert record_fields == submission_fields
        for field_name in record_fields:
            assert getattr(record, field_name) == getattr(submission, field_name)

    def test_split_does_not_modify_submission(self, submission):
        before = dataclasses.asdict(submission)
        split_identity(submission)
        assert dataclasses.asdict(submission) == before


class TestAnonymizedRecordDocument:
    def test_document_round_trip(self, submission):
        record, _ = split_identity(submission)
        assert AnonymizedRecord.from_document(record.to_document()) == record

    def test_document_missing_field(self):
        with pytest.raises(KeyError):
            AnonymizedRecord.from_document({"age": 3})


class TestIdentityLedgerEntry:
    def test_to_line(self):
        entry = IdentityLedgerEntry(identity=IDENTITY, name="Amina")
        assert entry.to_line() == f"{IDENTITY}: Amina\n"

    @pytest.mark.parametrize("name", ["Amina\nfake: Bob", "Amina\rX", "Amina\u2028X"])
    def test_multiline_names_rejected(self, name):
        with pytest.raises(ValueError):
            IdentityLedgerEntry(identity=IDENTITY, name=name)

    def test_invalid_identity_rejected(self):
        with pytest.raises(ValueError):
            IdentityLedgerEntry(identity="not-hex", name="Amina")

    def test_entry_is_immutable(self):
        entry = IdentityLedgerEntry(identity=IDENTITY, name="Amina")
        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.name = "Someone else"


class TestIdentityShape:
    @pytest.mark.parametrize("value,expected", [
        ("0" * 32, True),
        ("0123456789abcdef" * 2, True),
        ("0123456789ABCDEF" * 2, False),
        ("0" * 31, False),
        ("0" * 33, False),
        ("../" + "0" * 29, False),
        (None, False),
    ])
    def test_is_valid_identity(self, value, expected):
        assert is_valid_identity(value) is expected


class TestValidationResult:
    def test_valid_result(self, submission):
        result = ValidationResult(submission=submission)
        assert result.is_valid is True
        assert result.violations == []

    def test_invalid_result(self):
        result = ValidationResult(violations=[FieldViolation("age", "bad")])
        assert result.is_valid is False

    def test_needs_exactly_one_outcome(self, submission):
        with pytest.raises(ValueError):
            ValidationResult()
        with pytest.raises(ValueError):
            ValidationResult(submission=submission, violations=[FieldViolation("age", "bad")])

    def test_violation_to_dict(self):
        assert FieldViolation("age", "Age must be a whole number").to_dict() == {
            "field": "age",
            "message": "Age must be a whole number",
            "location": "body",
        }
