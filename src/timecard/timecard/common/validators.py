from __future__ import annotations

import math
from typing import Any, Optional

from ..core.exceptions import InvalidGeometry, ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    return text or None


def require_coordinate(value: Any, field_name: str, *, limit: float) -> float:
    if isinstance(value, bool):
        raise InvalidGeometry(f"{field_name} must be numeric")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidGeometry(f"{field_name} must be numeric")
    if math.isnan(number) or math.isinf(number):
        raise InvalidGeometry(f"{field_name} must be a finite number")
    if abs(number) > limit:
        raise InvalidGeometry(f"{field_name} must be within ±{limit:g}")
    return number


def require_non_negative(value: Any, field_name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be numeric")
    if math.isnan(number) or number < 0:
        raise ValidationError(f"{field_name} must be zero or positive")
    return number
