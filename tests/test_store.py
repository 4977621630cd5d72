import logging

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from outbound_survey.db import ResultStore, database_url
from outbound_survey.enum import CallDirection, CallStatus
from outbound_survey.errors import StoreError
from outbound_survey.models import CallResult


def make_result(**kwargs):
    values = {
        "sid": "CA1",
        "destination": "+351900000001",
        "status": CallStatus.COMPLETED,
        "direction": CallDirection.OUTBOUND,
        **kwargs
    }
    return CallResult(**values)


def test_database_url():
    assert database_url("survey.db") == "sqlite:///survey.db"
    assert database_url("/var/lib/survey.db") == "sqlite:////var/lib/survey.db"
    assert database_url("postgresql://user@localhost/survey") == "postgresql://user@localhost/survey"


def test_open_is_idempotent(database):
    store = ResultStore.open(database)
    store.save(make_result())
    store.close()

    store = ResultStore.open(database)
    assert store.completed_destinations() == ["+351900000001"]
    store.close()


def test_open_unreachable_location(tmp_path):
    with pytest.raises(StoreError):
        ResultStore.open(str(tmp_path / "missing" / "survey.db"))


def test_open_unknown_backend():
    with pytest.raises(StoreError):
        ResultStore.open("nosuchbackend://localhost/survey")


def test_completed_destinations(store):
    store.save(make_result(sid="CA1", destination="+351900000001", status=CallStatus.COMPLETED))
    store.save(make_result(sid="CA2", destination="+351900000002", status=CallStatus.NO_ANSWER))
    store.save(make_result(sid="CA3", destination="+351900000003", status=CallStatus.BUSY))
    store.save(make_result(sid="CA4", destination="+351900000004", status=CallStatus.COMPLETED))

    assert sorted(store.completed_destinations()) == ["+351900000001", "+351900000004"]


def test_completed_destinations_empty(store):
    assert store.completed_destinations() == []


def test_status_and_direction_stored_as_codes(store):
    store.save(make_result(status=CallStatus.NO_ANSWER, direction=CallDirection.OUTBOUND))

    with store.engine.connect() as connection:
        row = connection.execute(text("SELECT status, direction FROM call_results")).one()

    assert tuple(row) == (8, 1)


def test_save_round_trip(store):
    store.save(make_result(duration=28, human_answered=True, digits="013"))

    result = store.get("CA1")

    assert result.destination == "+351900000001"
    assert result.duration == 28
    assert result.human_answered is True
    assert result.status is CallStatus.COMPLETED
    assert result.direction is CallDirection.OUTBOUND
    assert result.digits == "013"


def test_save_updates_same_sid(store):
    store.save(make_result(status=CallStatus.IN_PROGRESS, digits="2"))
    store.save(make_result(status=CallStatus.COMPLETED, duration=61, digits=None))

    result = store.get("CA1")

    assert result.status is CallStatus.COMPLETED
    assert result.duration == 61
    assert result.digits == "2"
    with store.engine.connect() as connection:
        assert connection.execute(text("SELECT COUNT(*) FROM call_results")).scalar() == 1


def test_save_without_sid(store):
    with pytest.raises(StoreError):
        store.save(CallResult.failed_call("+351900000001"))

    assert store.completed_destinations() == []


def test_get_missing(store):
    assert store.get("CAmissing") is None


def test_close_twice(database):
    store = ResultStore.open(database)
    store.close()
    store.close()


def test_open_missing_driver(mocker):
    mocker.patch("outbound_survey.db.create_engine", side_effect=ModuleNotFoundError("No module named 'psycopg2'"))

    with pytest.raises(StoreError):
        ResultStore.open("postgresql://user@localhost/survey")


def test_close_error_is_logged(database, mocker, caplog):
    store = ResultStore.open(database)
    mocker.patch.object(store.engine, "dispose", side_effect=OperationalError("dispose", {}, Exception("disk I/O error")))

    with caplog.at_level(logging.ERROR, logger="outbound_survey.db"):
        store.close()

    assert "Unable to close the result store." in caplog.text
