"""Storage locations for submissions and the identity ledger.

Both stores live on the local filesystem of the single writer process:

    <data_dir>/submissions/<identity>.json   anonymized records
    <data_dir>/names.txt                      identity ledger
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

SUBMISSIONS_DIRNAME = "submissions"
LEDGER_FILENAME = "names.txt"


@dataclass(frozen=True)
class StorageConfig:
    """Filesystem layout for both stores."""
    data_dir: Path = Path("data")

    @property
    def submissions_dir(self) -> Path:
        return self.data_dir / SUBMISSIONS_DIRNAME

    @property
    def ledger_path(self) -> Path:
        return self.data_dir / LEDGER_FILENAME

    @classmethod
    def from_env(cls) -> "StorageConfig":
        """Create config from environment variables.

        Environment variables:
            DATA_DIR: Root directory for both stores (default data)
        """
        return cls(data_dir=Path(os.getenv("DATA_DIR", "data")))

    def initialize(self) -> None:
        """Create the store directories.

        Call this during application startup. The ledger file itself is
        created by its first append.
        """
        self.submissions_dir.mkdir(parents=True, exist_ok=True)
        self.ledger_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(
            "STORAGE_INITIALIZED",
            extra={
                "submissions_dir": str(self.submissions_dir),
                "ledger_path": str(self.ledger_path),
            }
        )

    def health_check(self) -> Dict[str, Any]:
        """Check that both stores are writable.

        Returns:
            Dict with per-store status
        """
        submissions_ok = os.access(self.submissions_dir, os.W_OK)
        ledger_ok = os.access(self.ledger_path.parent, os.W_OK) and (
            not self.ledger_path.exists() or os.access(self.ledger_path, os.W_OK)
        )
        return {
            "healthy": submissions_ok and ledger_ok,
            "submissions_writable": submissions_ok,
            "ledger_writable": ledger_ok,
        }
