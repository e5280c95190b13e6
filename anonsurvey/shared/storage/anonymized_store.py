"""Anonymized record store - one JSON document per submission.

Records carry no participant name. Each record is written once under
its submission identity and never modified afterwards. Identities are
unique by construction, so the store does no cross-request locking.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from anonsurvey.shared.models import AnonymizedRecord, is_valid_identity
from .durability import fsync_directory
from .errors import AnonymizedWriteError, NotFoundError

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"


class AnonymizedStore:
    """Filesystem store for anonymized records.

    Writes go to a temporary file in the target directory which is
    fsynced and then renamed into place, so a reader sees either the
    complete document or nothing. The directory is fsynced after the
    rename so the new entry survives a crash.
    """

    def __init__(self, directory: Union[str, Path]):
        """Initialize store.

        Args:
            directory: Directory holding one file per submission
        """
        self.directory = Path(directory)

        logger.info(
            "ANONYMIZED_STORE_INITIALIZED",
            extra={"directory": str(self.directory)}
        )

    def path_for(self, identity: str) -> Path:
        """Return the file path for an identity.

        Raises:
            ValueError: If identity is not a generated submission identity
        """
        if not is_valid_identity(identity):
            raise ValueError(f"Invalid submission identity: {identity!r}")
        return self.directory / f"{identity}{RECORD_SUFFIX}"

    def write(self, identity: str, record: AnonymizedRecord) -> Path:
        """Durably persist a record under its identity.

        Args:
            identity: Submission identity
            record: Anonymized record (no name field)

        Returns:
            Path of the written document

        Raises:
            AnonymizedWriteError: If the record could not be persisted

        Logs:
            - ANONYMIZED_RECORD_WRITTEN: After the rename completes
            - ANONYMIZED_RECORD_WRITE_FAILED: On any storage error
        """
        target = self.path_for(identity)
        tmp_path = None

        try:
            payload = json.dumps(record.to_document(), ensure_ascii=False)

            fd, tmp_path = tempfile.mkstemp(
                dir=self.directory, prefix=f".{identity}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())

            os.replace(tmp_path, target)
            tmp_path = None
            fsync_directory(self.directory)

        except (OSError, TypeError, ValueError) as e:
            logger.error(
                "ANONYMIZED_RECORD_WRITE_FAILED",
                extra={
                    "identity": identity,
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            raise AnonymizedWriteError(identity) from e

        finally:
            if tmp_path is not None:
                self._discard(tmp_path)

        logger.info(
            "ANONYMIZED_RECORD_WRITTEN",
            extra={"identity": identity, "path": str(target)}
        )
        return target

    def read(self, identity: str) -> AnonymizedRecord:
        """Retrieve a record by identity alone.

        Raises:
            NotFoundError: If no record exists under the identity
            ValueError: If identity is malformed
        """
        path = self.path_for(identity)
        try:
            with path.open("r", encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError:
            raise NotFoundError(f"No anonymized record for {identity}")

        return AnonymizedRecord.from_document(document)

    def exists(self, identity: str) -> bool:
        return self.path_for(identity).is_file()

    def _discard(self, tmp_path: str) -> None:
        """Remove a leftover temp file after a failed write."""
        try:
            os.unlink(tmp_path)
        except OSError as e:
            logger.warning(
                "ANONYMIZED_TEMP_FILE_CLEANUP_FAILED",
                extra={"path": tmp_path, "error": str(e)}
            )
