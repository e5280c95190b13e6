"""Submission Service HTTP handler - questionnaire endpoints.

Serves the questionnaire and accepts submissions. Every submission goes
through admission control, then the orchestrator, and the outcome is
mapped to a response here:

    400  JSON {"errors": [...]}       validation failed, nothing written
    200  text "Thank you ..."         both stores written
    500  text "Error saving ..."      a writer failed
    503  text                         identity generation is unavailable
"""
import logging
import os
from typing import Optional

from flask import Flask, jsonify, render_template, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from anonsurvey.shared.storage import (
    AnonymizedStore,
    IdentityLedger,
    StorageConfig,
)
from .admission import install_admission_control
from .config import ServiceConfig
from .identity import IdentityGenerationError
from .orchestrator import SubmissionOrchestrator

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Thank you for your submission!"
WRITE_FAILED_MESSAGE = "Error saving submission"
UNAVAILABLE_MESSAGE = "Submissions are temporarily unavailable"
UNEXPECTED_ERROR_MESSAGE = "Something went wrong!"


def _text(body: str, status: int):
    return body, status, {"Content-Type": "text/plain; charset=utf-8"}


def create_app(
    config: Optional[ServiceConfig] = None,
    storage_config: Optional[StorageConfig] = None,
    orchestrator: Optional[SubmissionOrchestrator] = None,
) -> Flask:
    """Build the Flask application with explicit resources.

    Args:
        config: HTTP layer configuration (from environment if omitted)
        storage_config: Store locations (from environment if omitted)
        orchestrator: Pipeline to run (built over storage_config if omitted)

    Returns:
        Configured Flask app
    """
    config = config or ServiceConfig.from_env()

    if orchestrator is None:
        storage_config = storage_config or StorageConfig.from_env()
        storage_config.initialize()
        orchestrator = SubmissionOrchestrator(
            anonymized_store=AnonymizedStore(storage_config.submissions_dir),
            identity_ledger=IdentityLedger(storage_config.ledger_path),
        )

    app = Flask(__name__)
    install_admission_control(app, config)

    # Set once the entropy source fails; submissions stay refused until restart
    service_state = {"identity_available": True}

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({
            "status": "healthy",
            "service": "submission-service",
        }), 200

    @app.route("/ready", methods=["GET"])
    def ready():
        """Readiness check - not ready after a fatal identity failure
        or while a store is not writable."""
        if not service_state["identity_available"]:
            return jsonify({"status": "not_ready", "reason": "identity_source_unavailable"}), 503
        if storage_config is not None:
            storage = storage_config.health_check()
            if not storage["healthy"]:
                return jsonify({"status": "not_ready", "storage": storage}), 503
        return jsonify({"status": "ready"}), 200

    @app.route("/", methods=["GET"])
    def questionnaire():
        """Serve the questionnaire form."""
        return render_template("questionnaire.html")

    @app.route("/submit", methods=["POST"])
    def submit():
        """Accept one questionnaire submission.

        Request Body (form-encoded):
            name, age, gender, maritalStatus, opinion, religious_view,
            cultural_factors, challenges, benefits, guidance,
            societal_changes

        Response:
            400 {"errors": [{"field": "age", "message": "...", "location": "body"}]}
            200 Thank you for your submission!
            500 Error saving submission
        """
        if not service_state["identity_available"]:
            return _text(UNAVAILABLE_MESSAGE, 503)

        raw = request.form.to_dict(flat=True)

        try:
            outcome = orchestrator.submit(raw)
        except IdentityGenerationError:
            service_state["identity_available"] = False
            logger.critical(
                "SUBMISSIONS_HALTED",
                extra={"reason": "identity_source_unavailable"}
            )
            return _text(UNAVAILABLE_MESSAGE, 503)

        if outcome.rejected:
            return jsonify({"errors": [v.to_dict() for v in outcome.violations]}), 400

        if not outcome.accepted:
            logger.error(
                "SUBMISSION_FAILED",
                extra={
                    "identity": outcome.identity,
                    "failed_stage": outcome.failed_stage.value if outcome.failed_stage else None,
                    "error_type": type(outcome.error).__name__,
                }
            )
            return _text(WRITE_FAILED_MESSAGE, 500)

        return _text(SUCCESS_MESSAGE, 200)

    @app.errorhandler(RequestEntityTooLarge)
    def request_too_large(e):
        logger.warning(
            "REQUEST_TOO_LARGE",
            extra={"path": request.path, "limit": config.max_content_length}
        )
        return _text("Request body too large", 413)

    @app.errorhandler(Exception)
    def unexpected_error(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception(
            "UNEXPECTED_ERROR",
            extra={"path": request.path, "error_type": type(e).__name__}
        )
        return _text(UNEXPECTED_ERROR_MESSAGE, 500)

    logger.info(
        "SUBMISSION_SERVICE_CREATED",
        extra={"environment": config.environment, "tls": config.use_tls}
    )
    return app


def main() -> None:
    """Run the service on the configured port."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config = ServiceConfig.from_env()
    app = create_app(config=config)

    logger.info(
        "SUBMISSION_SERVICE_STARTING",
        extra={"port": config.port, "tls": config.use_tls}
    )
    app.run(host="0.0.0.0", port=config.port, debug=False, ssl_context=config.ssl_context)


if __name__ == "__main__":
    main()
