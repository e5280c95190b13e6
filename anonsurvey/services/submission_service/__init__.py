"""Submission Service: anonymous questionnaire intake.

Each submission is validated, given a random identity, and split in two:
the answers go to the anonymized store, the declared name goes to the
identity ledger. The anonymized write always happens first.

Endpoints:
- GET /        - Questionnaire form
- POST /submit - Submit answers
- GET /health  - Liveness
- GET /ready   - Readiness
"""

from .config import ServiceConfig
from .identity import IdentityGenerator, IdentityGenerationError
from .orchestrator import SubmissionOrchestrator, SubmissionOutcome, SubmissionState
from .validator import SubmissionValidator

__all__ = [
    "ServiceConfig",
    "IdentityGenerator",
    "IdentityGenerationError",
    "SubmissionOrchestrator",
    "SubmissionOutcome",
    "SubmissionState",
    "SubmissionValidator",
]
