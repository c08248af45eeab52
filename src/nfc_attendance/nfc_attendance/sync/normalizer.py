from __future__ import annotations

import logging
from typing import Optional

from ..attendance.model import NewAttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock, SystemClock, calculate_duration, format_timestamp
from ..core.enums import AttendanceStatus, CheckInMethod
from ..core.exceptions import ConflictError
from ..tags.repository import TagRepository
from .model import Created, EventOutcome, Failed, RawAttendanceEvent, Skipped, Updated, build_idempotency_key

logger = logging.getLogger(__name__)


class EventNormalizer:
    """Turns one raw reader event into at most one attendance store write."""

    def __init__(self, attendance: AttendanceRepository, tags: TagRepository, *, clock: Optional[Clock] = None):
        self._attendance = attendance
        self._tags = tags
        self._clock = clock or SystemClock()

    def apply(self, tag_uid: str, work_date: str, event: RawAttendanceEvent) -> EventOutcome:
        key = build_idempotency_key(tag_uid, work_date, event.check_in)
        try:
            return self._apply(key, tag_uid, work_date, event)
        except Exception as exc:
            # Event boundary: one broken event must not stop the run.
            logger.warning("[%s] error processing event: %s", key, exc)
            return Failed(key, reason=f"{key}: {exc}")

    def _apply(self, key: str, tag_uid: str, work_date: str, event: RawAttendanceEvent) -> EventOutcome:
        existing = self._attendance.get_by_idempotency_key(key)
        if existing is not None:
            if existing.time_out is None and event.check_out:
                duration = calculate_duration(work_date, existing.time_in, event.check_out)
                closed = self._attendance.close_session(
                    attendance_id=existing.attendance_id,
                    time_out=event.check_out,
                    duration=duration,
                    metadata=event.metadata_json(),
                )
                if closed:
                    logger.info("[%s] check-out %s recorded (duration=%s)", key, event.check_out, duration)
                    return Updated(key, duration=duration)
                return Skipped(key, reason="closed concurrently")
            return Skipped(key)

        tag = self._tags.get_by_uid(tag_uid)
        if tag is None:
            return Failed(key, reason=f"Unknown tag: {tag_uid}")
        if tag.employee_id is None:
            return Failed(key, reason=f"Tag {tag_uid} not assigned")
        if not tag.is_active:
            return Failed(key, reason=f"Tag {tag_uid} inactive")

        duration = calculate_duration(work_date, event.check_in, event.check_out) if event.check_out else None
        try:
            self._attendance.insert(
                NewAttendanceRecord(
                    employee_id=tag.employee_id,
                    work_date=work_date,
                    time_in=event.check_in,
                    time_out=event.check_out,
                    duration=duration,
                    status=AttendanceStatus.PRESENT,
                    check_in_method=CheckInMethod.NFC,
                    created_at=format_timestamp(self._clock.now()),
                    tag_uid=tag_uid,
                    idempotency_key=key,
                    metadata=event.metadata_json(),
                )
            )
        except ConflictError:
            if self._attendance.get_by_idempotency_key(key) is not None:
                # Another run inserted the same event first.
                return Skipped(key, reason="inserted concurrently")
            return Failed(
                key,
                reason=f"{key}: employee {tag.employee_id} already has an open session on {work_date}",
            )

        logger.info("[%s] attendance recorded (in=%s out=%s duration=%s)", key, event.check_in, event.check_out or "-", duration)
        return Created(key, duration=duration)
