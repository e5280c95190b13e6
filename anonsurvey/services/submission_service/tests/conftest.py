"""Shared fixtures for Submission Service tests."""
import pytest

from anonsurvey.shared.storage import AnonymizedStore, IdentityLedger, StorageConfig
from anonsurvey.services.submission_service.config import ServiceConfig
from anonsurvey.services.submission_service.orchestrator import SubmissionOrchestrator

TEST_SESSION_SECRET = "test_session_secret_that_is_at_least_32_characters"


@pytest.fixture
def valid_form():
    """A complete, valid questionnaire submission as form values."""
    return {
        "name": "Amina",
        "age": "29",
        "gender": "female",
        "maritalStatus": "single",
        "opinion": "It depends on intentions",
        "religious_view": "My faith shapes most of my views",
        "cultural_factors": "Family expectations matter a lot",
        "challenges": "Secrecy and pressure",
        "benefits": "Knowing someone before committing",
        "guidance": "Talk openly with your parents",
        "societal_changes": "People are more open than before",
    }


@pytest.fixture
def storage_config(tmp_path):
    config = StorageConfig(data_dir=tmp_path / "data")
    config.initialize()
    return config


@pytest.fixture
def anonymized_store(storage_config):
    return AnonymizedStore(storage_config.submissions_dir)


@pytest.fixture
def identity_ledger(storage_config):
    return IdentityLedger(storage_config.ledger_path)


@pytest.fixture
def orchestrator(anonymized_store, identity_ledger):
    return SubmissionOrchestrator(
        anonymized_store=anonymized_store,
        identity_ledger=identity_ledger,
    )


@pytest.fixture
def service_config():
    return ServiceConfig(session_secret=TEST_SESSION_SECRET)


@pytest.fixture
def app(service_config, storage_config):
    from anonsurvey.services.submission_service.handler import create_app
    app = create_app(config=service_config, storage_config=storage_config)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client
