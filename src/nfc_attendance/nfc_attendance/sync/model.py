from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Optional

from ..common.validators import optional_str


def build_idempotency_key(tag_uid: str, work_date: str, check_in: str) -> str:
    """Key of one physical check-in as reported by the reader network."""
    return f"{tag_uid}_{work_date}_{check_in}"


@dataclass(frozen=True)
class RawAttendanceEvent:
    """One ``attendance/{tagUid}/{date}`` node from Firebase, validated.

    ``raw`` keeps every field the reader wrote so it can be stored as
    metadata for auditing.
    """

    check_in: str
    check_out: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, value: Any) -> Optional["RawAttendanceEvent"]:
        """Return None for anything that is not a mapping with a ``check_in``."""
        if not isinstance(value, Mapping):
            return None
        check_in = optional_str(value.get("check_in"))
        if not check_in:
            return None
        return cls(check_in=check_in, check_out=optional_str(value.get("check_out")), raw=dict(value))

    def metadata_json(self) -> str:
        return json.dumps(dict(self.raw), default=str, sort_keys=True)


@dataclass(frozen=True)
class EventOutcome:
    """Result of normalizing one raw event: Created, Updated, Skipped or Failed."""

    action: ClassVar[str] = ""

    idempotency_key: str

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict:
        return {"success": self.success, "action": self.action, "logKey": self.idempotency_key}


@dataclass(frozen=True)
class Created(EventOutcome):
    action: ClassVar[str] = "created"

    duration: Optional[int] = None

    def to_dict(self) -> dict:
        return {**super().to_dict(), "duration": self.duration}


@dataclass(frozen=True)
class Updated(EventOutcome):
    action: ClassVar[str] = "updated"

    duration: Optional[int] = None

    def to_dict(self) -> dict:
        return {**super().to_dict(), "duration": self.duration}


@dataclass(frozen=True)
class Skipped(EventOutcome):
    action: ClassVar[str] = "skipped"

    reason: str = "already up to date"

    def to_dict(self) -> dict:
        return {**super().to_dict(), "reason": self.reason}


@dataclass(frozen=True)
class Failed(EventOutcome):
    action: ClassVar[str] = "error"

    reason: str = ""

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return {**super().to_dict(), "error": self.reason}


@dataclass(frozen=True)
class ReconciliationSummary:
    created: int
    updated: int
    skipped: int
    errors: tuple[str, ...]
    duration_ms: int
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "success": True,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": list(self.errors),
            "durationMs": self.duration_ms,
            "timestamp": self.timestamp,
        }


@dataclass
class RunTally:
    """Accumulates event outcomes over one reconciliation run."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def add(self, outcome: EventOutcome) -> None:
        if isinstance(outcome, Created):
            self.created += 1
        elif isinstance(outcome, Updated):
            self.updated += 1
        elif isinstance(outcome, Skipped):
            self.skipped += 1
        elif isinstance(outcome, Failed):
            self.errors.append(outcome.reason)

    def summarize(self, *, duration_ms: int, timestamp: str, error_limit: int) -> ReconciliationSummary:
        return ReconciliationSummary(
            created=self.created,
            updated=self.updated,
            skipped=self.skipped,
            errors=tuple(self.errors[: max(error_limit, 0)]),
            duration_ms=duration_ms,
            timestamp=timestamp,
        )
