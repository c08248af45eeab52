from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every error carries a machine readable ``code`` that controllers return
    next to the human message.
    """

    code = "DOMAIN_ERROR"

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        if code:
            self.code = code


class ValidationError(DomainError):
    """Raised when input data is invalid or references something unusable."""

    code = "VALIDATION_ERROR"


class ConflictError(DomainError):
    """Raised when a store integrity constraint rejects a write."""

    code = "CONFLICT"


class SourceUnavailableError(DomainError):
    """Raised when the external event source cannot be read at all."""

    code = "SOURCE_UNAVAILABLE"
