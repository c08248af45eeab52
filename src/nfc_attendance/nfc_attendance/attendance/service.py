from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Optional, Sequence

from ..common.datetime_utils import Clock, SystemClock, elapsed_minutes, format_timestamp, session_instant
from ..common.validators import optional_str, require_int, require_iso_date
from ..core.constants import DEFAULT_LATE_CUTOFF
from ..core.enums import AttendanceStatus, CheckInMethod, ToggleAction
from ..core.exceptions import ConflictError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..tags.repository import TagRepository
from .model import AttendanceRecord, NewAttendanceRecord
from .repository import AttendanceRepository
from .summary import DailySummary, build_daily_summary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToggleResult:
    action: ToggleAction
    record: AttendanceRecord
    employee: Employee
    message: str
    created: bool = False

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            **self.record.to_dict(),
            "employee": self.employee.identity(),
            "message": self.message,
        }


@dataclass(frozen=True)
class MarkLeaveResult:
    cutoff_date: str
    updated_ids: Sequence[int]

    @property
    def count(self) -> int:
        return len(self.updated_ids)

    def to_dict(self) -> dict:
        return {
            "message": f"Marked {self.count} records as leave",
            "count": self.count,
            "updated_records": list(self.updated_ids),
            "cutoff_date": self.cutoff_date,
        }


class AttendanceService:
    """Interactive attendance: live tag toggles, leave closing, today's rollup."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        tags: TagRepository,
        *,
        clock: Optional[Clock] = None,
        late_cutoff: time = DEFAULT_LATE_CUTOFF,
    ):
        self._attendance = attendance
        self._employees = employees
        self._tags = tags
        self._clock = clock or SystemClock()
        self._late_cutoff = late_cutoff

    def _resolve_tag(self, tag_uid: str) -> int:
        tag = self._tags.get_by_uid(tag_uid)
        if tag is None:
            raise ValidationError("NFC tag not found", code="TAG_NOT_FOUND")
        if not tag.is_active:
            raise ValidationError("NFC tag is not active", code="TAG_INACTIVE")
        if tag.employee_id is None:
            raise ValidationError("NFC tag is not assigned to any employee", code="TAG_NOT_ASSIGNED")
        return tag.employee_id

    @staticmethod
    def _parse_method(value: Any) -> Optional[CheckInMethod]:
        v = optional_str(value)
        if v is None:
            return None
        try:
            return CheckInMethod(v.lower())
        except ValueError:
            raise ValidationError(f"Unsupported check-in method: {v}", code="INVALID_METHOD")

    def toggle(
        self,
        *,
        tag_uid: Any = None,
        employee_id: Any = None,
        reader_id: Any = None,
        location: Any = None,
        idempotency_key: Any = None,
        method: Any = None,
        metadata: Any = None,
    ) -> ToggleResult:
        """Check the employee in, or out when a session is already open today.

        A tag uid wins over an explicit employee id. Integrity under concurrent
        taps comes from the store: the insert is guarded by the open-session
        unique index and the check-out is a compare-and-swap on ``time_out``.
        The tag is stamped before the attendance write, so a failed stamp
        leaves no attendance change behind.
        """
        tag_uid = optional_str(tag_uid)
        reader_id = optional_str(reader_id)
        location = optional_str(location)
        idempotency_key = optional_str(idempotency_key)
        declared = self._parse_method(method)

        if tag_uid:
            resolved_id = self._resolve_tag(tag_uid)
            check_in_method = declared or CheckInMethod.NFC
        elif employee_id is not None and employee_id != "":
            resolved_id = require_int(employee_id, "employeeId", code="INVALID_EMPLOYEE_ID")
            check_in_method = declared or CheckInMethod.MANUAL
        else:
            raise ValidationError("Either tagUid or employeeId must be provided", code="MISSING_IDENTIFIER")

        employee = self._employees.get_by_id(resolved_id)
        if employee is None:
            raise ValidationError("Employee not found", code="EMPLOYEE_NOT_FOUND")

        if idempotency_key:
            replayed = self._replay(idempotency_key, employee)
            if replayed is not None:
                return replayed

        now = self._clock.now()
        today = now.date().isoformat()

        open_record = self._attendance.find_open_session(employee.employee_id, today)

        if tag_uid:
            self._tags.touch_last_used(tag_uid, used_at=now, reader_id=reader_id)

        if open_record is not None:
            return self._check_out(open_record, employee, now=now, idempotency_key=idempotency_key)

        return self._check_in(
            NewAttendanceRecord(
                employee_id=employee.employee_id,
                work_date=today,
                time_in=format_timestamp(now),
                status=AttendanceStatus.PRESENT,
                check_in_method=check_in_method,
                created_at=format_timestamp(now),
                tag_uid=tag_uid,
                reader_id=reader_id,
                location=location,
                idempotency_key=idempotency_key,
                metadata=json.dumps(metadata, default=str) if metadata is not None else None,
            ),
            employee,
        )

    def _replay(self, idempotency_key: str, employee: Employee) -> Optional[ToggleResult]:
        """Answer a replayed tap from the record it created or closed."""
        existing = self._attendance.get_by_idempotency_key(idempotency_key)
        action, message = ToggleAction.CHECKIN, "Check-in already processed (idempotency)"
        if existing is None:
            existing = self._attendance.get_by_checkout_key(idempotency_key)
            action, message = ToggleAction.CHECKOUT, "Check-out already processed (idempotency)"
        if existing is None:
            return None

        if existing.employee_id != employee.employee_id:
            raise ConflictError(
                "Idempotency key was already used by another employee",
                code="IDEMPOTENCY_KEY_MISMATCH",
            )
        return ToggleResult(action=action, record=existing, employee=employee, message=message)

    def _check_in(self, new: NewAttendanceRecord, employee: Employee) -> ToggleResult:
        try:
            record = self._attendance.insert(new)
        except ConflictError:
            # Lost a race against a concurrent tap for the same employee.
            winner = None
            if new.idempotency_key:
                winner = self._attendance.get_by_idempotency_key(new.idempotency_key)
            if winner is None:
                winner = self._attendance.find_open_session(new.employee_id, new.work_date)
            if winner is None:
                raise
            logger.info("[toggle] concurrent check-in for employee_id=%s resolved to record %s", new.employee_id, winner.attendance_id)
            return ToggleResult(
                action=ToggleAction.CHECKIN,
                record=winner,
                employee=employee,
                message="Check-in already processed",
            )

        logger.info("[toggle] check-in employee_id=%s record=%s method=%s", new.employee_id, record.attendance_id, new.check_in_method.value)
        return ToggleResult(
            action=ToggleAction.CHECKIN,
            record=record,
            employee=employee,
            message="Time In recorded successfully",
            created=True,
        )

    def _check_out(
        self,
        open_record: AttendanceRecord,
        employee: Employee,
        *,
        now: datetime,
        idempotency_key: Optional[str] = None,
    ) -> ToggleResult:
        started = session_instant(open_record.work_date, open_record.time_in)
        duration = elapsed_minutes(started, now) if started is not None else None

        try:
            closed = self._attendance.close_session(
                attendance_id=open_record.attendance_id,
                time_out=format_timestamp(now),
                duration=duration,
                idempotency_key=idempotency_key,
            )
        except ConflictError:
            # The same check-out tap was delivered twice at once.
            closed = False

        if not closed:
            replayed = self._replay(idempotency_key, employee) if idempotency_key else None
            if replayed is not None:
                return replayed
            raise ConflictError("Attendance session was already closed", code="SESSION_ALREADY_CLOSED")

        record = self._attendance.get_by_id(open_record.attendance_id)
        if record is None:
            raise ConflictError("Attendance record disappeared during check-out", code="RECORD_MISSING")

        logger.info("[toggle] check-out employee_id=%s record=%s duration=%s", employee.employee_id, record.attendance_id, duration)
        return ToggleResult(
            action=ToggleAction.CHECKOUT,
            record=record,
            employee=employee,
            message=f"Time Out recorded successfully. Duration: {duration} minutes",
        )

    def mark_leave(self, cutoff_date: Any = None) -> MarkLeaveResult:
        """Close every still-open session dated before ``cutoff_date`` as leave."""
        raw_cutoff = optional_str(cutoff_date)
        if raw_cutoff:
            cutoff = require_iso_date(raw_cutoff, "cutoff_date")
        else:
            cutoff = self._clock.today().isoformat()

        ids = self._attendance.mark_open_as_leave(before=cutoff)
        logger.info("[mark-leave] cutoff=%s marked=%d", cutoff, len(ids))
        return MarkLeaveResult(cutoff_date=cutoff, updated_ids=list(ids))

    def today_summary(self) -> DailySummary:
        today = self._clock.today()
        return build_daily_summary(
            today=today,
            total_employees=self._employees.count_active(),
            rows=self._attendance.list_for_date(today.isoformat()),
            late_cutoff=self._late_cutoff,
        )
