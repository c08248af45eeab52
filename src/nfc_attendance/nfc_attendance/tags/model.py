from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import TagStatus


@dataclass(frozen=True)
class NfcTag:
    """Physical NFC credential, bound to at most one employee."""

    tag_uid: str
    employee_id: Optional[int]
    status: TagStatus
    last_used_at: Optional[str] = None
    reader_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == TagStatus.ACTIVE
