from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError
from .datetime_utils import is_iso_date


def optional_str(value: Any) -> Optional[str]:
    """Strip a scalar request value into a string, or None when blank."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def require_iso_date(value: str, field_name: str) -> str:
    v = (value or "").strip()
    if not is_iso_date(v):
        raise ValidationError(f"Invalid {field_name} format. Expected YYYY-MM-DD", code="INVALID_DATE_FORMAT")
    return v


def require_int(value: Any, field_name: str, *, code: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer", code=code)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer", code=code)
