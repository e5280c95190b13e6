"""Submission Service configuration and questionnaire field rules.

Field names are shared with the questionnaire markup in
templates/questionnaire.html; the two must agree.
"""
import logging
import os
import secrets
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)


# Every field of the questionnaire, in form order
FORM_FIELDS: Tuple[str, ...] = (
    "name",
    "age",
    "gender",
    "maritalStatus",
    "opinion",
    "religious_view",
    "cultural_factors",
    "challenges",
    "benefits",
    "guidance",
    "societal_changes",
)

# Free-text answers: required, trimmed, HTML-escaped
TEXT_FIELDS: Tuple[str, ...] = (
    "name",
    "opinion",
    "religious_view",
    "cultural_factors",
    "challenges",
    "benefits",
    "guidance",
    "societal_changes",
)

AGE_MIN: int = 0
AGE_MAX: int = 120

GENDER_OPTIONS: FrozenSet[str] = frozenset({
    "male",
    "female",
    "other",
    "prefer_not_to_say",
})

MARITAL_STATUS_OPTIONS: FrozenSet[str] = frozenset({
    "single",
    "married",
    "divorced",
    "widowed",
})

# Session secrets shorter than this are refused in production
MIN_SESSION_SECRET_LENGTH: int = 32


@dataclass(frozen=True)
class ServiceConfig:
    """Runtime configuration for the HTTP layer around the pipeline.

    The pipeline itself never reads these; they shape admission control,
    transport and process start-up.
    """
    port: int = 3000
    environment: str = "development"
    session_secret: str = ""
    tls_cert_path: Optional[str] = None
    tls_key_path: Optional[str] = None

    # 100 requests per client per 15 minutes
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60

    max_content_length: int = 64 * 1024

    @property
    def production(self) -> bool:
        return self.environment == "production"

    @property
    def use_tls(self) -> bool:
        """Encrypted transport is selected by the production environment."""
        return self.production

    @property
    def ssl_context(self) -> Optional[Tuple[str, str]]:
        if not self.use_tls:
            return None
        return (self.tls_cert_path, self.tls_key_path)

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Create config from environment variables (and a .env file).

        Environment variables:
            PORT: Listening port (default 3000)
            APP_ENV: "production" enables TLS (default development)
            SESSION_SECRET: Session cookie signing secret
            TLS_CERT_PATH: Certificate chain (required in production)
            TLS_KEY_PATH: Private key (required in production)
            RATE_LIMIT_MAX_REQUESTS: Requests per window per client (default 100)
            RATE_LIMIT_WINDOW_SECONDS: Window length (default 900)
            MAX_CONTENT_LENGTH: Request body limit in bytes (default 65536)

        Raises:
            ValueError: If the configuration is unusable
        """
        load_dotenv(find_dotenv(usecwd=True))

        environment = os.getenv("APP_ENV", "development").lower()
        session_secret = os.getenv("SESSION_SECRET", "")

        if not session_secret and environment != "production":
            session_secret = secrets.token_hex(32)
            logger.warning(
                "SESSION_SECRET_GENERATED",
                extra={"reason": "SESSION_SECRET not set", "scope": "process_lifetime"}
            )

        config = cls(
            port=int(os.getenv("PORT", "3000")),
            environment=environment,
            session_secret=session_secret,
            tls_cert_path=os.getenv("TLS_CERT_PATH") or None,
            tls_key_path=os.getenv("TLS_KEY_PATH") or None,
            rate_limit_max_requests=int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100")),
            rate_limit_window_seconds=int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900")),
            max_content_length=int(os.getenv("MAX_CONTENT_LENGTH", str(64 * 1024))),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check the configuration before the service starts.

        Raises:
            ValueError: If a production setting is missing or weak
        """
        if self.production and len(self.session_secret) < MIN_SESSION_SECRET_LENGTH:
            logger.critical(
                "SESSION_SECRET_CONFIGURATION_FAILED",
                extra={
                    "reason": "Secret too short or empty",
                    "min_length": MIN_SESSION_SECRET_LENGTH,
                }
            )
            raise ValueError(
                f"SESSION_SECRET must be at least {MIN_SESSION_SECRET_LENGTH} characters in production"
            )

        if self.use_tls and not (self.tls_cert_path and self.tls_key_path):
            raise ValueError("TLS_CERT_PATH and TLS_KEY_PATH are required in production")

        if self.rate_limit_max_requests < 1 or self.rate_limit_window_seconds < 1:
            raise ValueError("Rate limit settings must be positive")
