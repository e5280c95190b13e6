"""Shared domain models for the questionnaire service."""
from .submission import (
    IDENTITY_HEX_LENGTH,
    RawSubmission,
    FieldViolation,
    ValidatedSubmission,
    AnonymizedRecord,
    IdentityLedgerEntry,
    ValidationResult,
    split_identity,
    is_valid_identity,
    contains_line_break,
)

__all__ = [
    "IDENTITY_HEX_LENGTH",
    "RawSubmission",
    "FieldViolation",
    "ValidatedSubmission",
    "AnonymizedRecord",
    "IdentityLedgerEntry",
    "ValidationResult",
    "split_identity",
    "is_valid_identity",
    "contains_line_break",
]
