"""Storage exceptions.

Writer failures are distinct types so the orchestrator can tell which
half of a submission reached disk.
"""
from typing import Optional


class StorageError(Exception):
    """Base exception for storage errors."""
    pass


class NotFoundError(StorageError):
    """No stored record under the requested identity."""
    pass


class AnonymizedWriteError(StorageError):
    """The anonymized record could not be persisted.

    No ledger entry exists for the identity when this is raised.
    """

    def __init__(self, identity: str, message: Optional[str] = None):
        self.identity = identity
        super().__init__(message or f"Failed to write anonymized record {identity}")


class LedgerWriteError(StorageError):
    """The identity ledger append failed.

    The anonymized record for the identity is already on disk and stays
    there, unattributed.
    """

    def __init__(self, identity: str, message: Optional[str] = None):
        self.identity = identity
        super().__init__(message or f"Failed to append ledger entry {identity}")
