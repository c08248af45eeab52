from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Any, Mapping, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock, SystemClock
from .core.constants import DEFAULT_ERROR_LIMIT, DEFAULT_LATE_CUTOFF, DEFAULT_SOURCE_TIMEOUT_SECONDS
from .database.connection import DatabaseConnection, DBConfig
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .sync.normalizer import EventNormalizer
from .sync.service import ReconciliationService
from .sync.source import AttendanceEventSource, FirebaseAttendanceSource
from .tags.mysql_tag_repository import MySQLTagRepository
from .tags.repository import TagRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    tags_repo: TagRepository
    attendance_repo: AttendanceRepository
    event_source: AttendanceEventSource

    attendance_service: AttendanceService
    reconciliation_service: ReconciliationService


def wire_services(
    *,
    conn: Optional[DatabaseConnection],
    employees_repo: EmployeeRepository,
    tags_repo: TagRepository,
    attendance_repo: AttendanceRepository,
    event_source: AttendanceEventSource,
    clock: Optional[Clock] = None,
    late_cutoff: time = DEFAULT_LATE_CUTOFF,
    error_limit: int = DEFAULT_ERROR_LIMIT,
) -> Container:
    clock = clock or SystemClock()

    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        tags_repo,
        clock=clock,
        late_cutoff=late_cutoff,
    )
    reconciliation_service = ReconciliationService(
        event_source,
        EventNormalizer(attendance_repo, tags_repo, clock=clock),
        clock=clock,
        error_limit=error_limit,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        tags_repo=tags_repo,
        attendance_repo=attendance_repo,
        event_source=event_source,
        attendance_service=attendance_service,
        reconciliation_service=reconciliation_service,
    )


def build_container(
    *,
    db_config: Mapping[str, Any],
    firebase_config: Mapping[str, Any],
    late_cutoff: time = DEFAULT_LATE_CUTOFF,
    error_limit: int = DEFAULT_ERROR_LIMIT,
    clock: Optional[Clock] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    source = FirebaseAttendanceSource(
        str(firebase_config.get("database_url") or ""),
        auth_token=firebase_config.get("auth_token"),
        timeout=float(firebase_config.get("timeout", DEFAULT_SOURCE_TIMEOUT_SECONDS)),
    )

    return wire_services(
        conn=conn,
        employees_repo=MySQLEmployeeRepository(conn),
        tags_repo=MySQLTagRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        event_source=source,
        clock=clock,
        late_cutoff=late_cutoff,
        error_limit=error_limit,
    )
