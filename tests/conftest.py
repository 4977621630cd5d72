from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from outbound_survey.db import ResultStore, get_store
from outbound_survey.main import app
from outbound_survey.survey.configuration import SurveyConfiguration


@pytest.fixture(name="database")
def database_fixture(tmp_path):
    return str(tmp_path / "survey.db")


@pytest.fixture(name="store")
def store_fixture(database):
    store = ResultStore.open(database)
    yield store
    store.close()


@pytest.fixture(name="client")
def client_fixture(store):
    # Dependency override
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(name="survey_fields")
def survey_fields_fixture(database):
    return {
        "file_based": False,
        "numbers": ("+351900000001", "+351900000002"),
        "database": database,
        "call_handler_url": "https://survey.test/v1/survey/call-handler",
        "call_result_url": "https://survey.test/v1/survey/call-result",
        "account_sid": "AC34567890123456789012345678901234",
        "auth_token": "anAuthToken",
        "caller_number": "+351123123123",
    }


@pytest.fixture(name="configuration")
def configuration_fixture(survey_fields):
    return SurveyConfiguration(**survey_fields)


@pytest.fixture
def fake_call():
    """Builds objects shaped like the ``CallInstance`` Twilio returns."""
    def make(**attrs):
        values = {
            "sid": "CAfake_sid",
            "to": "+351900000001",
            "status": "queued",
            "answered_by": None,
            "direction": "outbound-api",
            "duration": None,
            "date_created": datetime(2025, 8, 22, 14, 0, tzinfo=timezone.utc),
            **attrs
        }
        return SimpleNamespace(**values)
    return make
