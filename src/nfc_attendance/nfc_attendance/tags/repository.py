from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import NfcTag


class TagRepository(Protocol):
    """Tag directory: resolves a physical tag uid to its employee."""

    def get_by_uid(self, tag_uid: str) -> Optional[NfcTag]:
        raise NotImplementedError

    def touch_last_used(self, tag_uid: str, *, used_at: datetime, reader_id: Optional[str] = None) -> bool:
        raise NotImplementedError
