"""Identity ledger - append-only mapping of identity to declared name.

This is the only place participant names are written. The ledger is a
plain text file, one `<identity>: <name>` line per submission, read out
of band by the researcher. This writer only ever appends: it never
reads, rewrites or compacts the file.
"""
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Union

from anonsurvey.shared.models import IdentityLedgerEntry
from .durability import fsync_directory
from .errors import LedgerWriteError

logger = logging.getLogger(__name__)

# One lock per ledger file, shared by every IdentityLedger in the process
_LEDGER_LOCKS: Dict[Path, threading.Lock] = {}
_LEDGER_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _LEDGER_LOCKS_GUARD:
        return _LEDGER_LOCKS.setdefault(key, threading.Lock())


class IdentityLedger:
    """Serialized appender for the identity ledger.

    All requests share one ledger file. Appends are serialized with a
    process-wide lock per ledger path, shared by every instance over
    that file. Each entry goes out in a single write on an O_APPEND
    handle, so concurrent entries never interleave or truncate each
    other. The directory is fsynced when the file is first created.
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize ledger.

        Args:
            path: Ledger file path (created on first append)
        """
        self.path = Path(path)
        self._lock = _lock_for(self.path)

        logger.info(
            "IDENTITY_LEDGER_INITIALIZED",
            extra={"path": str(self.path)}
        )

    def append(self, entry: IdentityLedgerEntry) -> None:
        """Append one entry after all prior entries.

        Args:
            entry: Identity and declared name

        Raises:
            LedgerWriteError: If the append could not be made durable

        Logs:
            - LEDGER_ENTRY_APPENDED: After fsync (identity only, never the name)
            - LEDGER_APPEND_FAILED: On any storage error
        """
        line = entry.to_line().encode("utf-8")

        with self._lock:
            try:
                created = not self.path.exists()
                fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o600)
                try:
                    written = os.write(fd, line)
                    if written != len(line):
                        raise OSError(f"Short ledger write: {written} of {len(line)} bytes")
                    os.fsync(fd)
                finally:
                    os.close(fd)
                if created:
                    fsync_directory(self.path.parent)

            except OSError as e:
                logger.error(
                    "LEDGER_APPEND_FAILED",
                    extra={
                        "identity": entry.identity,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                )
                raise LedgerWriteError(entry.identity) from e

        logger.info(
            "LEDGER_ENTRY_APPENDED",
            extra={"identity": entry.identity}
        )
