from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import format_timestamp
from ..core.enums import TagStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import NfcTag
from .repository import TagRepository


class MySQLTagRepository(TagRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_uid(self, tag_uid: str) -> Optional[NfcTag]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT tag_uid, employee_id, status, last_used_at, reader_id
                FROM nfc_tags
                WHERE tag_uid=%s
                """,
                (tag_uid,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return NfcTag(
                tag_uid=r["tag_uid"],
                employee_id=int(r["employee_id"]) if r.get("employee_id") is not None else None,
                status=TagStatus(r["status"]),
                last_used_at=r.get("last_used_at"),
                reader_id=r.get("reader_id"),
            )

    def touch_last_used(self, tag_uid: str, *, used_at: datetime, reader_id: Optional[str] = None) -> bool:
        # Keep the previous reader when the scan did not report one.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE nfc_tags
                SET last_used_at=%s, reader_id=COALESCE(%s, reader_id)
                WHERE tag_uid=%s
                """,
                (format_timestamp(used_at), reader_id, tag_uid),
            )
            return cur.rowcount > 0
