from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceRosterRow, NewAttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store.

    Implementations must enforce the two integrity rules themselves (unique
    idempotency key, one open session per employee per day) and raise
    ``ConflictError`` from ``insert`` when either is violated.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_idempotency_key(self, idempotency_key: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_checkout_key(self, idempotency_key: str) -> Optional[AttendanceRecord]:
        """Record closed by the tap carrying ``idempotency_key``."""

        raise NotImplementedError

    def find_open_session(self, employee_id: int, work_date: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert(self, record: NewAttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def close_session(
        self,
        *,
        attendance_id: int,
        time_out: str,
        duration: Optional[int],
        metadata: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> bool:
        """Set ``time_out`` only if still unset. False when someone else closed it.

        ``idempotency_key`` is the key of the closing tap; it is unique across
        check-out keys, a duplicate raises ``ConflictError``.
        """

        raise NotImplementedError

    def list_for_date(self, work_date: str) -> Sequence[AttendanceRosterRow]:
        """Records of ``work_date`` joined to active employees."""

        raise NotImplementedError

    def mark_open_as_leave(self, *, before: str) -> Sequence[int]:
        raise NotImplementedError
