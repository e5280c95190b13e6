"""Submission identity generation.

Identities come from the operating system's CSPRNG only. They never
derive from submission content, the clock or a counter, so they can be
neither guessed nor correlated with an answer.
"""
import logging
import secrets
from typing import Callable

from anonsurvey.shared.models import IDENTITY_HEX_LENGTH, is_valid_identity

logger = logging.getLogger(__name__)

# 16 bytes = 128 bits = 32 hex characters
ENTROPY_BYTES = IDENTITY_HEX_LENGTH // 2


class IdentityGenerationError(Exception):
    """The entropy source is unavailable.

    Fatal to the process: never retried per request.
    """
    pass


class IdentityGenerator:
    """Mints fixed-width hexadecimal submission identities."""

    def __init__(self, token_source: Callable[[int], str] = secrets.token_hex):
        """Initialize generator.

        Args:
            token_source: Returns `n` random bytes rendered as lowercase hex
        """
        self._token_source = token_source

    def generate(self) -> str:
        """Generate a new submission identity.

        Returns:
            32-character lowercase hex string

        Raises:
            IdentityGenerationError: If the entropy source fails or
                returns something that is not an identity
        """
        try:
            identity = self._token_source(ENTROPY_BYTES)
        except (OSError, NotImplementedError) as e:
            logger.critical(
                "IDENTITY_ENTROPY_UNAVAILABLE",
                extra={"error": str(e), "error_type": type(e).__name__}
            )
            raise IdentityGenerationError("Entropy source unavailable") from e

        if not is_valid_identity(identity):
            logger.critical(
                "IDENTITY_MALFORMED",
                extra={"length": len(identity) if isinstance(identity, str) else None}
            )
            raise IdentityGenerationError("Entropy source returned a malformed identity")

        return identity
