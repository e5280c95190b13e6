"""Admission control - gates requests before they reach the pipeline.

- Per-client fixed-window rate limiting
- Signed cookie session establishment
- Security response headers
"""
import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from flask import Flask, request, session

from .config import ServiceConfig

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."

SECURITY_HEADERS: Dict[str, str] = {
    "Content-Security-Policy": (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; "
        "object-src 'none'; base-uri 'self'; form-action 'self'; "
        "frame-ancestors 'self'"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Referrer-Policy": "no-referrer",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Frame-Options": "SAMEORIGIN",
}

HSTS_HEADER = ("Strict-Transport-Security", "max-age=15552000; includeSubDomains")


@dataclass
class RateLimitDecision:
    """Whether a request may proceed, and when the client may retry."""
    allowed: bool
    remaining: int
    retry_after_seconds: int


class FixedWindowRateLimiter:
    """Counts requests per client within fixed time windows.

    State is in-memory and per-process, matching the single writer
    process deployment.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: int = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def check(self, client_key: str) -> RateLimitDecision:
        """Count one request for a client and decide whether to admit it."""
        now = self._clock()

        with self._lock:
            self._prune(now)
            window_start, count = self._windows.get(client_key, (now, 0))
            count += 1
            self._windows[client_key] = (window_start, count)

        retry_after = max(1, int(window_start + self.window_seconds - now))
        return RateLimitDecision(
            allowed=count <= self.max_requests,
            remaining=max(0, self.max_requests - count),
            retry_after_seconds=retry_after,
        )

    def _prune(self, now: float) -> None:
        expired = [
            key for key, (start, _) in self._windows.items()
            if now - start >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]


def install_admission_control(
    app: Flask,
    config: ServiceConfig,
    limiter: Optional[FixedWindowRateLimiter] = None,
) -> FixedWindowRateLimiter:
    """Wire rate limiting, sessions and security headers into an app.

    Args:
        app: Flask application
        config: Service configuration
        limiter: Rate limiter (built from config if omitted)

    Returns:
        The rate limiter in use

    Raises:
        ValueError: If no session secret is configured
    """
    if not config.session_secret:
        raise ValueError("A session secret is required to establish sessions")

    limiter = limiter or FixedWindowRateLimiter(
        max_requests=config.rate_limit_max_requests,
        window_seconds=config.rate_limit_window_seconds,
    )

    app.config.update(
        SECRET_KEY=config.session_secret,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Strict",
        SESSION_COOKIE_SECURE=config.use_tls,
        MAX_CONTENT_LENGTH=config.max_content_length,
    )

    @app.before_request
    def admit_request():
        client_key = request.remote_addr or "unknown"
        decision = limiter.check(client_key)

        if not decision.allowed:
            logger.warning(
                "RATE_LIMIT_EXCEEDED",
                extra={"path": request.path, "retry_after": decision.retry_after_seconds}
            )
            return app.response_class(
                RATE_LIMIT_MESSAGE,
                status=429,
                mimetype="text/plain",
                headers={"Retry-After": str(decision.retry_after_seconds)},
            )

        if "session_id" not in session:
            session["session_id"] = secrets.token_urlsafe(16)

        return None

    @app.after_request
    def apply_security_headers(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        if config.use_tls:
            response.headers.setdefault(*HSTS_HEADER)
        return response

    logger.info(
        "ADMISSION_CONTROL_INSTALLED",
        extra={
            "rate_limit_max_requests": limiter.max_requests,
            "rate_limit_window_seconds": limiter.window_seconds,
            "secure_cookies": config.use_tls,
        }
    )
    return limiter
