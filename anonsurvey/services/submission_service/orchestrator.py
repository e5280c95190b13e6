"""Submission orchestrator - drives one submission through the pipeline.

    RECEIVED -> VALIDATED -> IDENTITY_ASSIGNED -> ANONYMIZED_WRITTEN
             -> LEDGER_WRITTEN -> ACKNOWLEDGED

with REJECTED (validation failed, nothing written) and FAILED (a writer
failed) as terminal error states.

The anonymized record is always written before the ledger entry. If the
ledger append then fails the record stays on disk, unattributed; there
is no rollback and no retry. A ledger entry can therefore never point at
a record that does not exist.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from anonsurvey.shared.models import (
    FieldViolation,
    IdentityLedgerEntry,
    RawSubmission,
    split_identity,
)
from anonsurvey.shared.storage import (
    AnonymizedStore,
    AnonymizedWriteError,
    IdentityLedger,
    LedgerWriteError,
    StorageError,
)
from .identity import IdentityGenerator
from .validator import SubmissionValidator

logger = logging.getLogger(__name__)


class SubmissionState(Enum):
    """State machine for a single submission."""
    RECEIVED = "received"
    VALIDATED = "validated"
    IDENTITY_ASSIGNED = "identity_assigned"
    ANONYMIZED_WRITTEN = "anonymized_written"
    LEDGER_WRITTEN = "ledger_written"
    ACKNOWLEDGED = "acknowledged"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class SubmissionOutcome:
    """Final state of one submission, handed back to the HTTP layer.

    Carries the identity but never the participant's name.
    """
    state: SubmissionState
    identity: Optional[str] = None
    violations: List[FieldViolation] = field(default_factory=list)
    error: Optional[StorageError] = None
    failed_stage: Optional[SubmissionState] = None

    @property
    def accepted(self) -> bool:
        return self.state == SubmissionState.ACKNOWLEDGED

    @property
    def rejected(self) -> bool:
        return self.state == SubmissionState.REJECTED


class SubmissionOrchestrator:
    """Sequences validation, identity, split and both writes.

    All stages of one submission run sequentially on the calling thread.
    Different submissions may run concurrently: they share only the
    ledger, which serializes its own appends.
    """

    def __init__(
        self,
        anonymized_store: AnonymizedStore,
        identity_ledger: IdentityLedger,
        validator: Optional[SubmissionValidator] = None,
        identity_generator: Optional[IdentityGenerator] = None,
    ):
        """Initialize orchestrator with its resources.

        Args:
            anonymized_store: Store for name-free records
            identity_ledger: Append-only identity -> name ledger
            validator: Input validator
            identity_generator: Source of submission identities
        """
        self.anonymized_store = anonymized_store
        self.identity_ledger = identity_ledger
        self.validator = validator or SubmissionValidator()
        self.identity_generator = identity_generator or IdentityGenerator()

        logger.info("SUBMISSION_ORCHESTRATOR_INITIALIZED")

    def submit(self, raw: RawSubmission) -> SubmissionOutcome:
        """Process one raw submission end to end.

        Args:
            raw: Untrusted form input

        Returns:
            SubmissionOutcome in ACKNOWLEDGED, REJECTED or FAILED state

        Raises:
            IdentityGenerationError: Entropy source unavailable (fatal)

        Logs:
            - SUBMISSION_REJECTED: Validation failed, nothing written
            - SUBMISSION_ANONYMIZED_WRITE_FAILED: No ledger entry attempted
            - SUBMISSION_LEDGER_WRITE_FAILED: Record kept without attribution
            - SUBMISSION_ACKNOWLEDGED: Both writes completed
        """
        result = self.validator.validate(raw)
        if not result.is_valid:
            logger.info(
                "SUBMISSION_REJECTED",
                extra={"violation_count": len(result.violations)}
            )
            return SubmissionOutcome(
                state=SubmissionState.REJECTED,
                violations=list(result.violations),
            )

        # VALIDATED -> IDENTITY_ASSIGNED; failure here is fatal and propagates
        identity = self.identity_generator.generate()
        record, name = split_identity(result.submission)

        try:
            self.anonymized_store.write(identity, record)
        except AnonymizedWriteError as e:
            logger.error(
                "SUBMISSION_ANONYMIZED_WRITE_FAILED",
                extra={"identity": identity, "ledger_entry": "not_attempted"}
            )
            return SubmissionOutcome(
                state=SubmissionState.FAILED,
                identity=identity,
                error=e,
                failed_stage=SubmissionState.IDENTITY_ASSIGNED,
            )

        try:
            self.identity_ledger.append(IdentityLedgerEntry(identity=identity, name=name))
        except LedgerWriteError as e:
            logger.error(
                "SUBMISSION_LEDGER_WRITE_FAILED",
                extra={"identity": identity, "anonymized_record": "kept_unattributed"}
            )
            return SubmissionOutcome(
                state=SubmissionState.FAILED,
                identity=identity,
                error=e,
                failed_stage=SubmissionState.ANONYMIZED_WRITTEN,
            )

        logger.info(
            "SUBMISSION_ACKNOWLEDGED",
            extra={"identity": identity}
        )
        return SubmissionOutcome(state=SubmissionState.ACKNOWLEDGED, identity=identity)
