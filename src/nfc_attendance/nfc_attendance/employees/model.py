from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import EmployeeStatus


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee on the roster.

    Owned by the HR side of the system; attendance only reads it.
    """

    employee_id: int
    name: str
    email: str
    department: Optional[str] = None
    photo_url: Optional[str] = None
    nfc_card_id: Optional[str] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE

    def identity(self) -> dict:
        return {
            "id": self.employee_id,
            "name": self.name,
            "email": self.email,
            "department": self.department,
            "photoUrl": self.photo_url,
            "nfcCardId": self.nfc_card_id,
        }
