"""Input validation for questionnaire submissions.

Untrusted form input is checked field by field. Malformed input is data,
not an exceptional condition: every violation in a request is collected
and returned together so the participant can fix them in one round trip.
"""
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from anonsurvey.shared.models import (
    FieldViolation,
    RawSubmission,
    ValidatedSubmission,
    ValidationResult,
    contains_line_break,
)
from anonsurvey.shared.utils import sanitize_text
from .config import (
    AGE_MAX,
    AGE_MIN,
    FORM_FIELDS,
    GENDER_OPTIONS,
    MARITAL_STATUS_OPTIONS,
    TEXT_FIELDS,
)

logger = logging.getLogger(__name__)

# Optional sign, leading zeros allowed
_INTEGER_PATTERN = re.compile(r"^[+-]?[0-9]+$")

# Significant digits in the largest accepted age
_AGE_MAX_DIGITS = len(str(AGE_MAX))

# Python attribute name for each form field
_ATTRIBUTE_NAMES: Dict[str, str] = {
    field_name: ("marital_status" if field_name == "maritalStatus" else field_name)
    for field_name in FORM_FIELDS
}

# Result of a single field check: (normalized value, violation message)
_FieldCheck = Tuple[Any, Optional[str]]


class SubmissionValidator:
    """Validates and normalizes a raw questionnaire submission.

    Rules:
    - Free-text fields: required, trimmed, non-empty, HTML-escaped
    - name: additionally a single line (it becomes one ledger line)
    - age: whole number in [AGE_MIN, AGE_MAX], never clamped
    - gender / maritalStatus: one of a closed set of options

    Fields not on the questionnaire are ignored.
    """

    def validate(self, raw: RawSubmission) -> ValidationResult:
        """Validate every field of a raw submission.

        Args:
            raw: Untrusted mapping of form field to value

        Returns:
            ValidationResult with either a ValidatedSubmission or the
            full list of violations in form field order
        """
        values: Dict[str, Any] = {}
        violations: List[FieldViolation] = []

        for field_name in FORM_FIELDS:
            value, message = self._check_field(field_name, raw.get(field_name))
            if message is not None:
                violations.append(FieldViolation(field=field_name, message=message))
            else:
                values[_ATTRIBUTE_NAMES[field_name]] = value

        if violations:
            logger.info(
                "SUBMISSION_VALIDATION_FAILED",
                extra={
                    "violation_count": len(violations),
                    "fields": [v.field for v in violations],
                }
            )
            return ValidationResult(violations=violations)

        return ValidationResult(submission=ValidatedSubmission(**values))

    def _check_field(self, field_name: str, value: Any) -> _FieldCheck:
        if field_name in TEXT_FIELDS:
            return self._check_text(field_name, value)
        if field_name == "age":
            return self._check_age(value)
        if field_name == "gender":
            return self._check_choice(value, GENDER_OPTIONS, "Gender")
        if field_name == "maritalStatus":
            return self._check_choice(value, MARITAL_STATUS_OPTIONS, "Marital status")
        raise KeyError(f"No rule for form field {field_name}")

    def _check_text(self, field_name: str, value: Any) -> _FieldCheck:
        if value is None:
            return None, "This field is required"
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return None, "This field must be text"

        text = value if isinstance(value, str) else str(value)
        if not text.strip():
            return None, "This field is required"

        if field_name == "name" and contains_line_break(text.strip()):
            return None, "Name must be a single line"

        return sanitize_text(text), None

    def _check_age(self, value: Any) -> _FieldCheck:
        message = f"Age must be a whole number between {AGE_MIN} and {AGE_MAX}"

        if value is None or (isinstance(value, str) and not value.strip()):
            return None, "This field is required"

        # bool is an int subclass; floats are not whole-number input
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            return None, message

        if isinstance(value, str):
            text = value.strip()
            if not _INTEGER_PATTERN.match(text):
                return None, message
            # Only significant digits reach int(), which caps string length
            digits = text.lstrip("+-").lstrip("0") or "0"
            if len(digits) > _AGE_MAX_DIGITS:
                return None, message
            value = -int(digits) if text.startswith("-") else int(digits)

        if not AGE_MIN <= value <= AGE_MAX:
            return None, message

        return value, None

    def _check_choice(self, value: Any, options, label: str) -> _FieldCheck:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None, "This field is required"

        message = f"{label} must be one of: {', '.join(sorted(options))}"
        if not isinstance(value, str):
            return None, message

        choice = value.strip()
        if choice not in options:
            return None, message

        return choice, None
