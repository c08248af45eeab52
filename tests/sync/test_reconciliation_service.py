from __future__ import annotations

import pytest

from src.nfc_attendance.nfc_attendance.core.exceptions import SourceUnavailableError, ValidationError
from src.nfc_attendance.nfc_attendance.sync.service import ReconciliationService


def test_first_run_creates_second_run_skips(reconciliation, source, attendance):
    source.snapshot = {"TAG1": {"2024-05-01": {"check_in": "09:05", "check_out": "17:00"}}}

    first = reconciliation.run()
    assert (first.created, first.updated, first.skipped, first.errors) == (1, 0, 0, ())

    [rec] = attendance.records
    assert rec.employee_id == 7
    assert rec.duration == 475

    second = reconciliation.run()
    assert (second.created, second.updated, second.skipped, second.errors) == (0, 0, 1, ())
    assert len(attendance.records) == 1


def test_checkout_written_between_runs_is_applied(reconciliation, source, attendance):
    source.snapshot = {"TAG1": {"2024-05-01": {"check_in": "09:00"}}}
    assert reconciliation.run().created == 1

    source.snapshot = {"TAG1": {"2024-05-01": {"check_in": "09:00", "check_out": "17:30"}}}
    summary = reconciliation.run()

    assert (summary.created, summary.updated, summary.skipped) == (0, 1, 0)
    assert attendance.records[0].duration == 510


@pytest.mark.parametrize("snapshot", [None, {}])
def test_empty_tree_reports_zero_counts(reconciliation, source, snapshot):
    source.snapshot = snapshot
    summary = reconciliation.run()

    assert (summary.created, summary.updated, summary.skipped, summary.errors) == (0, 0, 0, ())
    assert summary.timestamp == "2024-05-01T09:05:00"


def test_malformed_nodes_are_ignored(reconciliation, source, attendance):
    source.snapshot = {
        "TAG1": {
            "2024-05-01": {"check_out": "17:00"},
            "yesterday": {"check_in": "09:00"},
            "2024-05-02": "09:00",
            "2024-05-03": {"check_in": "08:55", "check_out": "17:05"},
        },
        "TAG2": "not a tree",
    }
    summary = reconciliation.run()

    assert (summary.created, summary.updated, summary.skipped, summary.errors) == (1, 0, 0, ())
    assert [r.work_date for r in attendance.records] == ["2024-05-03"]


def test_failed_events_do_not_stop_the_run(reconciliation, source, attendance):
    source.snapshot = {
        "GHOST": {"2024-05-01": {"check_in": "09:00"}},
        "TAG1": {"2024-05-01": {"check_in": "09:00", "check_out": "17:00"}},
        "TAG2": {"2024-05-01": {"check_in": "08:45"}},
    }
    summary = reconciliation.run()

    assert summary.created == 2
    assert summary.errors == ("Unknown tag: GHOST",)
    assert {r.employee_id for r in attendance.records} == {7, 8}


def test_errors_are_truncated_to_limit(source, normalizer, clock):
    source.snapshot = {
        "GHOST": {f"2024-04-{day:02d}": {"check_in": "09:00"} for day in range(1, 16)},
    }
    summary = ReconciliationService(source, normalizer, clock=clock, error_limit=10).run()

    assert len(summary.errors) == 10
    assert summary.created == 0


def test_source_failure_propagates(reconciliation, source, attendance):
    source.error = SourceUnavailableError("firebase down")

    with pytest.raises(SourceUnavailableError):
        reconciliation.run()
    assert attendance.records == []


def test_summary_to_dict(reconciliation, source):
    source.snapshot = {"TAG1": {"2024-05-01": {"check_in": "09:05"}}}
    data = reconciliation.run().to_dict()

    assert data["success"] is True
    assert data["created"] == 1
    assert data["errors"] == []
    assert isinstance(data["durationMs"], int)
    assert data["timestamp"] == "2024-05-01T09:05:00"


def test_sync_tag_single_record(reconciliation, attendance):
    outcomes = reconciliation.sync_tag("TAG1", {"date": "2024-05-01", "check_in": "09:00", "check_out": "12:00"})

    assert [o.action for o in outcomes] == ["created"]
    assert outcomes[0].duration == 180
    assert attendance.records[0].time_out == "12:00"


def test_sync_tag_full_tree(reconciliation, attendance):
    payload = {
        "data": {
            "2024-05-01": {"check_in": "09:00", "check_out": "17:00"},
            "2024-05-02": {"check_in": "09:10"},
        }
    }
    outcomes = reconciliation.sync_tag("TAG2", payload)

    assert [o.action for o in outcomes] == ["created", "created"]
    assert len(attendance.records) == 2


def test_sync_tag_requires_tag_uid(reconciliation):
    with pytest.raises(ValidationError) as exc:
        reconciliation.sync_tag("  ", {"data": {}})
    assert exc.value.code == "MISSING_TAG_UID"
