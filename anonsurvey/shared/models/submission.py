"""Submission domain models.

A questionnaire submission is split in two halves on the way to storage:
the anonymized record (every answer, no name) and the identity ledger
entry (identity and declared name). The two halves only share the
submission identity.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple
import re

# 128 bits rendered as lowercase hex
IDENTITY_HEX_LENGTH = 32

_IDENTITY_PATTERN = re.compile(r"^[0-9a-f]{%d}$" % IDENTITY_HEX_LENGTH)

# Characters str.splitlines() treats as line boundaries
_LINE_BREAKS = frozenset("\n\r\v\f\x1c\x1d\x1e\x85\u2028\u2029")

# Raw form input: field name -> string or number, straight from the request
RawSubmission = Mapping[str, Any]


def is_valid_identity(identity: str) -> bool:
    """Check that a value has the shape of a generated submission identity."""
    return isinstance(identity, str) and bool(_IDENTITY_PATTERN.match(identity))


def contains_line_break(text: str) -> bool:
    return any(ch in _LINE_BREAKS for ch in text)


@dataclass(frozen=True)
class FieldViolation:
    """A single field that failed validation.

    Violations are data, not exceptions: the validator collects all of
    them for a request so the participant can fix everything at once.
    """
    field: str
    message: str
    location: str = "body"

    def to_dict(self) -> Dict[str, str]:
        return {
            "field": self.field,
            "message": self.message,
            "location": self.location,
        }


@dataclass(frozen=True)
class AnonymizedRecord:
    """Every validated answer except the participant's name.

    Persisted as one JSON document per submission, keyed by identity.
    Document keys use the questionnaire's form field names.
    """
    age: int
    gender: str
    marital_status: str
    opinion: str
    religious_view: str
    cultural_factors: str
    challenges: str
    benefits: str
    guidance: str
    societal_changes: str

    def to_document(self) -> Dict[str, Any]:
        return {
            "age": self.age,
            "gender": self.gender,
            "maritalStatus": self.marital_status,
            "opinion": self.opinion,
            "religious_view": self.religious_view,
            "cultural_factors": self.cultural_factors,
            "challenges": self.challenges,
            "benefits": self.benefits,
            "guidance": self.guidance,
            "societal_changes": self.societal_changes,
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "AnonymizedRecord":
        """Rebuild a record from its stored JSON document.

        Raises:
            KeyError: If the document is missing a field
        """
        return cls(
            age=int(document["age"]),
            gender=document["gender"],
            marital_status=document["maritalStatus"],
            opinion=document["opinion"],
            religious_view=document["religious_view"],
            cultural_factors=document["cultural_factors"],
            challenges=document["challenges"],
            benefits=document["benefits"],
            guidance=document["guidance"],
            societal_changes=document["societal_changes"],
        )


@dataclass(frozen=True)
class ValidatedSubmission:
    """A submission whose every field passed validation.

    Text fields are trimmed and HTML-escaped, age is an int. Owned by the
    orchestrator for one request; never persisted as a whole.
    """
    name: str
    age: int
    gender: str
    marital_status: str
    opinion: str
    religious_view: str
    cultural_factors: str
    challenges: str
    benefits: str
    guidance: str
    societal_changes: str


def split_identity(submission: ValidatedSubmission) -> Tuple[AnonymizedRecord, str]:
    """Split a validated submission into (public fields, name).

    Pure and total: the submission is left untouched and the returned
    record has no name field at all.
    """
    record = AnonymizedRecord(
        age=submission.age,
        gender=submission.gender,
        marital_status=submission.marital_status,
        opinion=submission.opinion,
        religious_view=submission.religious_view,
        cultural_factors=submission.cultural_factors,
        challenges=submission.challenges,
        benefits=submission.benefits,
        guidance=submission.guidance,
        societal_changes=submission.societal_changes,
    )
    return record, submission.name


@dataclass(frozen=True)
class IdentityLedgerEntry:
    """Maps a submission identity back to the participant's declared name.

    Rendered as exactly one ledger line, so names with line breaks are
    refused here rather than split across lines on disk.
    """
    identity: str
    name: str

    def __post_init__(self):
        if not is_valid_identity(self.identity):
            raise ValueError(f"Invalid submission identity: {self.identity!r}")
        if contains_line_break(self.name):
            raise ValueError("Ledger names must be a single line")

    def to_line(self) -> str:
        return f"{self.identity}: {self.name}\n"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one raw submission.

    Exactly one of `submission` and `violations` is populated.
    """
    submission: Optional[ValidatedSubmission] = None
    violations: List[FieldViolation] = field(default_factory=list)

    def __post_init__(self):
        if (self.submission is None) == (not self.violations):
            raise ValueError("ValidationResult needs a submission or violations, not both")

    @property
    def is_valid(self) -> bool:
        return self.submission is not None
