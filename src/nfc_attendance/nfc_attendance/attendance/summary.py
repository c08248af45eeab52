from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Sequence

from ..common.datetime_utils import is_late
from ..core.constants import DEFAULT_LATE_CUTOFF
from .model import AttendanceRosterRow


@dataclass(frozen=True)
class DailySummary:
    work_date: str
    total_employees: int
    present: int
    absent: int
    late: int
    on_time: int
    checked_out: int
    still_working: int
    records: list[dict] = field(default_factory=list)

    def counts(self) -> dict:
        return {
            "totalEmployees": self.total_employees,
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "onTime": self.on_time,
            "checkedOut": self.checked_out,
            "stillWorking": self.still_working,
        }

    def to_dict(self) -> dict:
        return {"date": self.work_date, "summary": self.counts(), "records": list(self.records)}


def build_daily_summary(
    *,
    today: date,
    total_employees: int,
    rows: Sequence[AttendanceRosterRow],
    late_cutoff: time = DEFAULT_LATE_CUTOFF,
) -> DailySummary:
    """Roll up today's attendance. Pure: reads its inputs, mutates nothing.

    ``rows`` should already be restricted to active employees; rows of other
    dates are ignored.
    """
    work_date = today.isoformat()
    todays = [r for r in rows if r.record.work_date == work_date]

    present = len(todays)
    late = sum(1 for r in todays if is_late(r.record.time_in, late_cutoff))
    checked_out = sum(1 for r in todays if r.record.time_out)

    records = []
    for r in todays:
        item = r.record.to_dict()
        item["employee"] = r.employee.identity()
        records.append(item)

    return DailySummary(
        work_date=work_date,
        total_employees=int(total_employees),
        present=present,
        absent=int(total_employees) - present,
        late=late,
        on_time=present - late,
        checked_out=checked_out,
        still_working=present - checked_out,
        records=records,
    )
