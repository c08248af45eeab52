from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Status stored on an attendance record."""

    PRESENT = "present"
    LEAVE = "leave"


class CheckInMethod(str, Enum):
    """How a session was started. Set on creation, never changed."""

    NFC = "nfc"
    MANUAL = "manual"
    GEOLOCATION = "geolocation"


class TagStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ToggleAction(str, Enum):
    CHECKIN = "checkin"
    CHECKOUT = "checkout"
