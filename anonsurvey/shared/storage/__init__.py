"""Durable storage for submissions.

Two independently readable stores:
- AnonymizedStore: one JSON document per submission, no names
- IdentityLedger: append-only identity -> name mapping
"""

from .config import StorageConfig
from .errors import (
    StorageError,
    NotFoundError,
    AnonymizedWriteError,
    LedgerWriteError,
)
from .anonymized_store import AnonymizedStore
from .identity_ledger import IdentityLedger

__all__ = [
    "StorageConfig",
    "StorageError",
    "NotFoundError",
    "AnonymizedWriteError",
    "LedgerWriteError",
    "AnonymizedStore",
    "IdentityLedger",
]
