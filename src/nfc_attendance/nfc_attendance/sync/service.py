from __future__ import annotations

import logging
import time
from typing import Any, Iterator, Mapping, Optional

from ..common.datetime_utils import Clock, SystemClock, format_timestamp, is_iso_date
from ..common.validators import optional_str
from ..core.constants import DEFAULT_ERROR_LIMIT
from ..core.exceptions import ValidationError
from .model import EventOutcome, RawAttendanceEvent, ReconciliationSummary, RunTally
from .normalizer import EventNormalizer
from .source import AttendanceEventSource

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Drains the reader event tree into the attendance store.

    One ``run`` reads a single snapshot and walks tag -> date -> event
    sequentially. There is no run-level lock: overlapping runs are safe
    because the store rejects duplicate idempotency keys.
    """

    def __init__(
        self,
        source: AttendanceEventSource,
        normalizer: EventNormalizer,
        *,
        clock: Optional[Clock] = None,
        error_limit: int = DEFAULT_ERROR_LIMIT,
    ):
        self._source = source
        self._normalizer = normalizer
        self._clock = clock or SystemClock()
        self._error_limit = int(error_limit)

    def run(self) -> ReconciliationSummary:
        """One reconciliation pass.

        Raises ``SourceUnavailableError`` when the snapshot cannot be read;
        per-event failures only show up in the summary's ``errors``.
        """
        started = time.monotonic()
        logger.info("[firebase-poll] starting sync")

        snapshot = self._source.fetch_snapshot()

        tally = RunTally()
        for tag_uid, dates in (snapshot or {}).items():
            for outcome in self._iter_tag(str(tag_uid), dates):
                tally.add(outcome)

        summary = tally.summarize(
            duration_ms=int((time.monotonic() - started) * 1000),
            timestamp=format_timestamp(self._clock.now()),
            error_limit=self._error_limit,
        )
        logger.info(
            "[firebase-poll] complete: created=%d updated=%d skipped=%d errors=%d in %dms",
            summary.created,
            summary.updated,
            summary.skipped,
            len(tally.errors),
            summary.duration_ms,
        )
        return summary

    def sync_tag(self, tag_uid: Any, payload: Mapping[str, Any]) -> list[EventOutcome]:
        """Push-style ingestion for a single tag.

        Accepts either one record ``{date, check_in, check_out?}`` or the
        full per-tag tree ``{data: {date: event}}``.
        """
        tag = optional_str(tag_uid)
        if not tag:
            raise ValidationError("Missing tagUid", code="MISSING_TAG_UID")

        if payload.get("date") and payload.get("check_in"):
            entries: Any = {
                str(payload["date"]): {"check_in": payload.get("check_in"), "check_out": payload.get("check_out")}
            }
        else:
            entries = payload.get("data")

        return list(self._iter_tag(tag, entries))

    def _iter_tag(self, tag_uid: str, dates: Any) -> Iterator[EventOutcome]:
        # Malformed nodes are dropped here and never reach the normalizer.
        if not tag_uid or not isinstance(dates, Mapping):
            return
        for work_date, value in dates.items():
            if not is_iso_date(work_date):
                continue
            event = RawAttendanceEvent.parse(value)
            if event is None:
                continue
            yield self._normalizer.apply(tag_uid, work_date, event)
