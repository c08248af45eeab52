from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AttendanceStatus, CheckInMethod
from ..employees.model import Employee


@dataclass(frozen=True)
class NewAttendanceRecord:
    """Values for a record about to be inserted (no id yet)."""

    employee_id: int
    work_date: str
    time_in: str
    status: AttendanceStatus
    check_in_method: CheckInMethod
    created_at: str
    time_out: Optional[str] = None
    duration: Optional[int] = None
    tag_uid: Optional[str] = None
    reader_id: Optional[str] = None
    location: Optional[str] = None
    idempotency_key: Optional[str] = None
    metadata: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in session of one employee.

    ``work_date``, ``time_in`` and ``check_in_method`` never change after
    creation. ``time_out`` is set once, when the session closes, together
    with the key of the tap that closed it.
    """

    attendance_id: int
    employee_id: int
    work_date: str
    time_in: str
    time_out: Optional[str]
    duration: Optional[int]
    status: AttendanceStatus
    check_in_method: CheckInMethod
    tag_uid: Optional[str] = None
    reader_id: Optional[str] = None
    location: Optional[str] = None
    idempotency_key: Optional[str] = None
    metadata: Optional[str] = None
    created_at: Optional[str] = None
    checkout_idempotency_key: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.time_out is None and self.status == AttendanceStatus.PRESENT

    @classmethod
    def from_new(cls, attendance_id: int, new: NewAttendanceRecord) -> "AttendanceRecord":
        return cls(
            attendance_id=attendance_id,
            employee_id=new.employee_id,
            work_date=new.work_date,
            time_in=new.time_in,
            time_out=new.time_out,
            duration=new.duration,
            status=new.status,
            check_in_method=new.check_in_method,
            tag_uid=new.tag_uid,
            reader_id=new.reader_id,
            location=new.location,
            idempotency_key=new.idempotency_key,
            metadata=new.metadata,
            created_at=new.created_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "employeeId": self.employee_id,
            "date": self.work_date,
            "timeIn": self.time_in,
            "timeOut": self.time_out,
            "duration": self.duration,
            "status": self.status.value,
            "checkInMethod": self.check_in_method.value,
            "tagUid": self.tag_uid,
            "readerId": self.reader_id,
            "location": self.location,
            "idempotencyKey": self.idempotency_key,
            "checkoutIdempotencyKey": self.checkout_idempotency_key,
            "metadata": self.metadata,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class AttendanceRosterRow:
    """Read-model: a record joined to its (active) employee."""

    record: AttendanceRecord
    employee: Employee
