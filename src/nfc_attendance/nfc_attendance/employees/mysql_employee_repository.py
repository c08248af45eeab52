from __future__ import annotations

from typing import Any, Mapping, Optional

from ..core.enums import EmployeeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeRepository


def employee_from_row(r: Mapping[str, Any], *, prefix: str = "") -> Employee:
    return Employee(
        employee_id=int(r[f"{prefix}employee_id"]),
        name=r[f"{prefix}name"],
        email=r[f"{prefix}email"],
        department=r.get(f"{prefix}department"),
        photo_url=r.get(f"{prefix}photo_url"),
        nfc_card_id=r.get(f"{prefix}nfc_card_id"),
        status=EmployeeStatus(r.get(f"{prefix}status") or EmployeeStatus.ACTIVE.value),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, name, email, department, photo_url, nfc_card_id, status
                FROM employees
                WHERE employee_id=%s
                """,
                (int(employee_id),),
            )
            row = fetchone(cur)
            return employee_from_row(row) if row else None

    def count_active(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM employees WHERE status=%s", (EmployeeStatus.ACTIVE.value,))
            row = fetchone(cur)
            return int(row["total"]) if row else 0
