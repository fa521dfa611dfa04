from __future__ import annotations

from datetime import date

from ..core.constants import MAX_BULK_RANGE_DAYS
from ..core.exceptions import ValidationError


def require_date_range(start: date, end: date, *, max_days: int = MAX_BULK_RANGE_DAYS) -> None:
    if end < start:
        raise ValidationError("End date must not be before start date")
    if (end - start).days + 1 > max_days:
        raise ValidationError(f"Date range must not exceed {max_days} days")
