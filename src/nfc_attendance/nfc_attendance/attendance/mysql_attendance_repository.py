from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus, CheckInMethod, EmployeeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date_str, db_cursor, fetchall, fetchone
from ..employees.mysql_employee_repository import employee_from_row
from .model import AttendanceRecord, AttendanceRosterRow, NewAttendanceRecord
from .repository import AttendanceRepository

_RECORD_COLUMNS = """
    ar.attendance_id, ar.employee_id, ar.work_date, ar.time_in, ar.time_out, ar.duration,
    ar.status, ar.check_in_method, ar.tag_uid, ar.reader_id, ar.location,
    ar.idempotency_key, ar.metadata, ar.created_at, ar.checkout_idempotency_key
"""


def _record_from_row(r: Mapping[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=as_date_str(r["work_date"]),
        time_in=r["time_in"],
        time_out=r.get("time_out"),
        duration=int(r["duration"]) if r.get("duration") is not None else None,
        status=AttendanceStatus(r["status"]),
        check_in_method=CheckInMethod(r["check_in_method"]),
        tag_uid=r.get("tag_uid"),
        reader_id=r.get("reader_id"),
        location=r.get("location"),
        idempotency_key=r.get("idempotency_key"),
        metadata=r.get("metadata"),
        created_at=r.get("created_at"),
        checkout_idempotency_key=r.get("checkout_idempotency_key"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, where: str, params: tuple) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records ar
                WHERE {where}
                ORDER BY ar.attendance_id DESC
                LIMIT 1
                """,
                params,
            )
            r = fetchone(cur)
            return _record_from_row(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._select_one("ar.attendance_id=%s", (int(attendance_id),))

    def get_by_idempotency_key(self, idempotency_key: str) -> Optional[AttendanceRecord]:
        return self._select_one("ar.idempotency_key=%s", (idempotency_key,))

    def get_by_checkout_key(self, idempotency_key: str) -> Optional[AttendanceRecord]:
        return self._select_one("ar.checkout_idempotency_key=%s", (idempotency_key,))

    def find_open_session(self, employee_id: int, work_date: str) -> Optional[AttendanceRecord]:
        return self._select_one(
            "ar.employee_id=%s AND ar.work_date=%s AND ar.time_out IS NULL AND ar.status=%s",
            (int(employee_id), work_date, AttendanceStatus.PRESENT.value),
        )

    def insert(self, record: NewAttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date, time_in, time_out, duration, status, check_in_method,
                    tag_uid, reader_id, location, idempotency_key, metadata, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.employee_id,
                    record.work_date,
                    record.time_in,
                    record.time_out,
                    record.duration,
                    record.status.value,
                    record.check_in_method.value,
                    record.tag_uid,
                    record.reader_id,
                    record.location,
                    record.idempotency_key,
                    record.metadata,
                    record.created_at,
                ),
            )
            return AttendanceRecord.from_new(int(cur.lastrowid), record)

    def close_session(
        self,
        *,
        attendance_id: int,
        time_out: str,
        duration: Optional[int],
        metadata: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET time_out=%s, duration=%s, status=%s, metadata=COALESCE(%s, metadata),
                    checkout_idempotency_key=%s
                WHERE attendance_id=%s AND time_out IS NULL
                """,
                (time_out, duration, AttendanceStatus.PRESENT.value, metadata, idempotency_key, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_for_date(self, work_date: str) -> Sequence[AttendanceRosterRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS},
                    e.employee_id AS emp_employee_id, e.name AS emp_name, e.email AS emp_email,
                    e.department AS emp_department, e.photo_url AS emp_photo_url,
                    e.nfc_card_id AS emp_nfc_card_id, e.status AS emp_status
                FROM attendance_records ar
                JOIN employees e ON e.employee_id = ar.employee_id
                WHERE ar.work_date=%s AND e.status=%s
                ORDER BY ar.time_in ASC, ar.attendance_id ASC
                """,
                (work_date, EmployeeStatus.ACTIVE.value),
            )
            rows = fetchall(cur)
            return [
                AttendanceRosterRow(record=_record_from_row(r), employee=employee_from_row(r, prefix="emp_"))
                for r in rows
            ]

    def mark_open_as_leave(self, *, before: str) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id
                FROM attendance_records
                WHERE time_out IS NULL AND status=%s AND work_date < %s
                FOR UPDATE
                """,
                (AttendanceStatus.PRESENT.value, before),
            )
            ids = [int(r["attendance_id"]) for r in fetchall(cur)]
            if not ids:
                return []

            placeholders = ",".join(["%s"] * len(ids))
            cur.execute(
                f"UPDATE attendance_records SET status=%s WHERE attendance_id IN ({placeholders})",
                (AttendanceStatus.LEAVE.value, *ids),
            )
            return ids
