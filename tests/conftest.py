from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from src.nfc_attendance.nfc_attendance.attendance.model import AttendanceRecord, AttendanceRosterRow, NewAttendanceRecord
from src.nfc_attendance.nfc_attendance.attendance.service import AttendanceService
from src.nfc_attendance.nfc_attendance.common.datetime_utils import FixedClock, format_timestamp
from src.nfc_attendance.nfc_attendance.core.enums import AttendanceStatus, EmployeeStatus, TagStatus
from src.nfc_attendance.nfc_attendance.core.exceptions import ConflictError
from src.nfc_attendance.nfc_attendance.employees.model import Employee
from src.nfc_attendance.nfc_attendance.sync.normalizer import EventNormalizer
from src.nfc_attendance.nfc_attendance.sync.service import ReconciliationService
from src.nfc_attendance.nfc_attendance.tags.model import NfcTag


class InMemoryEmployees:
    def __init__(self, employees: list[Employee] | None = None):
        self._by_id = {e.employee_id: e for e in employees or []}

    def add(self, employee: Employee) -> None:
        self._by_id[employee.employee_id] = employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(int(employee_id))

    def count_active(self) -> int:
        return sum(1 for e in self._by_id.values() if e.is_active)


class InMemoryTags:
    def __init__(self, tags: list[NfcTag] | None = None):
        self._by_uid = {t.tag_uid: t for t in tags or []}
        self.touched: list[tuple[str, datetime, Optional[str]]] = []

    def add(self, tag: NfcTag) -> None:
        self._by_uid[tag.tag_uid] = tag

    def get_by_uid(self, tag_uid: str) -> Optional[NfcTag]:
        return self._by_uid.get(tag_uid)

    def touch_last_used(self, tag_uid: str, *, used_at: datetime, reader_id: Optional[str] = None) -> bool:
        tag = self._by_uid.get(tag_uid)
        if not tag:
            return False
        self._by_uid[tag_uid] = replace(
            tag, last_used_at=format_timestamp(used_at), reader_id=reader_id or tag.reader_id
        )
        self.touched.append((tag_uid, used_at, reader_id))
        return True


class InMemoryAttendance:
    """Enforces the same unique constraints as schema.sql."""

    def __init__(self, employees: InMemoryEmployees | None = None):
        self._employees = employees
        self._by_id: dict[int, AttendanceRecord] = {}
        self._id = 0
        self.inserts = 0
        self.updates = 0

    @property
    def records(self) -> list[AttendanceRecord]:
        return sorted(self._by_id.values(), key=lambda r: r.attendance_id)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._by_id.get(int(attendance_id))

    def get_by_idempotency_key(self, idempotency_key: str) -> Optional[AttendanceRecord]:
        for r in self._by_id.values():
            if r.idempotency_key == idempotency_key:
                return r
        return None

    def get_by_checkout_key(self, idempotency_key: str) -> Optional[AttendanceRecord]:
        for r in self._by_id.values():
            if r.checkout_idempotency_key == idempotency_key:
                return r
        return None

    def find_open_session(self, employee_id: int, work_date: str) -> Optional[AttendanceRecord]:
        for r in self._by_id.values():
            if r.employee_id == employee_id and r.work_date == work_date and r.is_open:
                return r
        return None

    def insert(self, record: NewAttendanceRecord) -> AttendanceRecord:
        if record.idempotency_key and self.get_by_idempotency_key(record.idempotency_key):
            raise ConflictError("Duplicate idempotency key", code="DUPLICATE_KEY")
        new = AttendanceRecord.from_new(self._id + 1, record)
        if new.is_open and self.find_open_session(record.employee_id, record.work_date):
            raise ConflictError("Open session exists", code="DUPLICATE_KEY")
        self._id += 1
        self._by_id[new.attendance_id] = new
        self.inserts += 1
        return new

    def close_session(self, *, attendance_id: int, time_out: str, duration, metadata=None, idempotency_key=None) -> bool:
        r = self._by_id.get(int(attendance_id))
        if r is None or r.time_out is not None:
            return False
        if idempotency_key and self.get_by_checkout_key(idempotency_key):
            raise ConflictError("Duplicate check-out key", code="DUPLICATE_KEY")
        self._by_id[r.attendance_id] = replace(
            r,
            time_out=time_out,
            duration=duration,
            status=AttendanceStatus.PRESENT,
            metadata=metadata if metadata is not None else r.metadata,
            checkout_idempotency_key=idempotency_key,
        )
        self.updates += 1
        return True

    def list_for_date(self, work_date: str) -> list[AttendanceRosterRow]:
        out = []
        for r in self.records:
            if r.work_date != work_date or self._employees is None:
                continue
            emp = self._employees.get_by_id(r.employee_id)
            if emp and emp.is_active:
                out.append(AttendanceRosterRow(record=r, employee=emp))
        return out

    def mark_open_as_leave(self, *, before: str) -> list[int]:
        ids = []
        for r in self.records:
            if r.time_out is None and r.status == AttendanceStatus.PRESENT and r.work_date < before:
                self._by_id[r.attendance_id] = replace(r, status=AttendanceStatus.LEAVE)
                ids.append(r.attendance_id)
        return ids


class FakeSource:
    def __init__(self, snapshot=None, error: Exception | None = None):
        self.snapshot = snapshot
        self.error = error
        self.calls = 0

    def fetch_snapshot(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.snapshot


def make_employee(employee_id: int, name: str = "", *, active: bool = True) -> Employee:
    name = name or f"Employee {employee_id}"
    return Employee(
        employee_id=employee_id,
        name=name,
        email=f"e{employee_id}@example.com",
        department="Engineering",
        status=EmployeeStatus.ACTIVE if active else EmployeeStatus.INACTIVE,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 1, 9, 5, 0)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees([make_employee(7, "Ana Reyes"), make_employee(8, "Ben Okafor"), make_employee(9, active=False)])


@pytest.fixture
def tags() -> InMemoryTags:
    return InMemoryTags(
        [
            NfcTag(tag_uid="TAG1", employee_id=7, status=TagStatus.ACTIVE),
            NfcTag(tag_uid="TAG2", employee_id=8, status=TagStatus.ACTIVE),
            NfcTag(tag_uid="FREE", employee_id=None, status=TagStatus.ACTIVE),
            NfcTag(tag_uid="OLD", employee_id=8, status=TagStatus.INACTIVE),
        ]
    )


@pytest.fixture
def attendance(employees) -> InMemoryAttendance:
    return InMemoryAttendance(employees)


@pytest.fixture
def attendance_service(attendance, employees, tags, clock) -> AttendanceService:
    return AttendanceService(attendance, employees, tags, clock=clock)


@pytest.fixture
def normalizer(attendance, tags, clock) -> EventNormalizer:
    return EventNormalizer(attendance, tags, clock=clock)


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def reconciliation(source, normalizer, clock) -> ReconciliationService:
    return ReconciliationService(source, normalizer, clock=clock)
