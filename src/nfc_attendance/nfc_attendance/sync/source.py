from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

import requests

from ..core.constants import DEFAULT_SOURCE_TIMEOUT_SECONDS, FIREBASE_ATTENDANCE_PATH
from ..core.exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)


class AttendanceEventSource(Protocol):
    """External snapshot of raw reader events: ``{tagUid: {date: event}}``."""

    def fetch_snapshot(self) -> Optional[Mapping[str, Any]]:
        raise NotImplementedError


class FirebaseAttendanceSource(AttendanceEventSource):
    """Reads the attendance node of a Firebase Realtime Database over REST.

    ``GET {database_url}/{path}.json`` returns the whole subtree, or ``null``
    when the node does not exist.
    """

    def __init__(
        self,
        database_url: str,
        *,
        auth_token: Optional[str] = None,
        path: str = FIREBASE_ATTENDANCE_PATH,
        timeout: float = DEFAULT_SOURCE_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self._database_url = (database_url or "").rstrip("/")
        self._auth_token = auth_token or None
        self._path = path.strip("/")
        self._timeout = float(timeout)
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self._database_url}/{self._path}.json"

    def fetch_snapshot(self) -> Optional[Mapping[str, Any]]:
        if not self._database_url:
            raise SourceUnavailableError("FIREBASE_DATABASE_URL is not configured")

        params = {"auth": self._auth_token} if self._auth_token else None
        try:
            response = self._session.get(self.url, params=params, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise SourceUnavailableError(f"Cannot read '{self._path}' from Firebase: {exc}") from exc
        except ValueError as exc:
            raise SourceUnavailableError(f"Firebase returned invalid JSON for '{self._path}'") from exc

        if data is None:
            logger.info("Firebase node '%s' is empty", self._path)
            return None
        if not isinstance(data, Mapping):
            raise SourceUnavailableError(f"Unexpected payload type for '{self._path}': {type(data).__name__}")
        return data
