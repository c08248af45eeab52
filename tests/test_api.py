from __future__ import annotations

import pytest

from src.nfc_attendance.nfc_attendance.container import wire_services
from src.nfc_attendance.nfc_attendance.core.exceptions import SourceUnavailableError
from src.nfc_attendance.nfc_attendance.main import create_app


@pytest.fixture
def container(attendance, employees, tags, source, clock):
    return wire_services(
        conn=None,
        employees_repo=employees,
        tags_repo=tags,
        attendance_repo=attendance,
        event_source=source,
        clock=clock,
    )


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


def test_toggle_checkin_then_checkout(client, clock):
    res = client.post("/api/attendance/toggle", json={"tagUid": "TAG1", "readerId": "R1"})
    assert res.status_code == 201
    body = res.get_json()
    assert body["action"] == "checkin"
    assert body["employee"]["id"] == 7
    assert body["readerId"] == "R1"

    clock.advance(hours=8)
    res = client.post("/api/attendance/toggle", json={"tagUid": "TAG1"})
    assert res.status_code == 200
    body = res.get_json()
    assert body["action"] == "checkout"
    assert body["duration"] == 480


def test_toggle_replay_is_200(client):
    assert client.post("/api/attendance/toggle", json={"employeeId": 8, "idempotencyKey": "k1"}).status_code == 201
    res = client.post("/api/attendance/toggle", json={"employeeId": 8, "idempotencyKey": "k1"})

    assert res.status_code == 200
    assert res.get_json()["message"] == "Check-in already processed (idempotency)"


@pytest.mark.parametrize(
    "payload, code",
    [
        ({}, "MISSING_IDENTIFIER"),
        ({"tagUid": "GHOST"}, "TAG_NOT_FOUND"),
        ({"employeeId": 404}, "EMPLOYEE_NOT_FOUND"),
    ],
)
def test_toggle_validation_errors_are_400(client, payload, code):
    res = client.post("/api/attendance/toggle", json=payload)

    assert res.status_code == 400
    assert res.get_json()["code"] == code


def test_toggle_store_failure_is_500(client, attendance, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(attendance, "find_open_session", boom)
    res = client.post("/api/attendance/toggle", json={"tagUid": "TAG1"})

    assert res.status_code == 500
    assert res.get_json()["code"] == "INTERNAL_ERROR"


def test_today(client):
    client.post("/api/attendance/toggle", json={"tagUid": "TAG2"})
    res = client.get("/api/attendance/today")

    assert res.status_code == 200
    body = res.get_json()
    assert body["date"] == "2024-05-01"
    assert body["summary"]["present"] == 1
    assert body["summary"]["absent"] == 1
    assert body["records"][0]["employee"]["name"] == "Ben Okafor"


def test_mark_leave(client, clock):
    client.post("/api/attendance/toggle", json={"tagUid": "TAG1"})
    clock.advance(days=1)

    res = client.post("/api/attendance/mark-leave", json={})
    assert res.status_code == 200
    assert res.get_json()["count"] == 1

    res = client.post("/api/attendance/mark-leave", json={"cutoff_date": "yesterday"})
    assert res.status_code == 400
    assert res.get_json()["code"] == "INVALID_DATE_FORMAT"


@pytest.mark.parametrize("method", ["GET", "POST"])
def test_poll_runs_reconciliation(client, source, method):
    source.snapshot = {"TAG1": {"2024-05-01": {"check_in": "09:05", "check_out": "17:00"}}}

    res = client.open("/api/firebase/poll", method=method)

    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert body["created"] == 1


def test_poll_source_failure_is_500(client, source):
    source.error = SourceUnavailableError("firebase down")
    res = client.get("/api/firebase/poll")

    assert res.status_code == 500
    assert res.get_json()["code"] == "SOURCE_UNAVAILABLE"


def test_poll_auth_enforced(app, client, source):
    app.config["ENFORCE_POLL_AUTH"] = True
    source.snapshot = {}

    assert client.get("/api/firebase/poll").status_code == 401
    assert client.get("/api/firebase/poll", headers={"Authorization": "Bearer wrong"}).status_code == 401
    assert client.get("/api/firebase/poll", headers={"Authorization": "Bearer test-cron-secret"}).status_code == 200
    assert client.get("/api/firebase/poll", headers={"Referer": "http://localhost/admin"}).status_code == 200
    assert source.calls == 2


def test_sync_requires_secret(client):
    res = client.post("/api/firebase/sync", json={"tagUid": "TAG1", "date": "2024-05-01", "check_in": "09:00"})
    assert res.status_code == 401


def test_sync_single_record(client, attendance):
    res = client.post(
        "/api/firebase/sync",
        json={"tagUid": "TAG1", "date": "2024-05-01", "check_in": "09:00", "check_out": "17:30"},
        headers={"x-firebase-secret": "test-sync-secret"},
    )

    assert res.status_code == 200
    body = res.get_json()
    assert body["processed"] == 1
    assert body["results"][0]["action"] == "created"
    assert body["results"][0]["duration"] == 510
    assert attendance.records[0].employee_id == 7


def test_sync_missing_tag_uid_is_400(client):
    res = client.post("/api/firebase/sync", json={"data": {}}, headers={"x-firebase-secret": "test-sync-secret"})

    assert res.status_code == 400
    assert res.get_json()["code"] == "MISSING_TAG_UID"


def test_toggle_idempotency_key_of_other_employee_is_409(client):
    assert client.post("/api/attendance/toggle", json={"tagUid": "TAG2", "idempotencyKey": "k9"}).status_code == 201
    res = client.post("/api/attendance/toggle", json={"tagUid": "TAG1", "idempotencyKey": "k9"})

    assert res.status_code == 409
    assert res.get_json()["code"] == "IDEMPOTENCY_KEY_MISMATCH"
