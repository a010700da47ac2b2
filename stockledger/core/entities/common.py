"""Shared field coercions for ledger rows."""

import math
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

RowId = int | str


def safe_number(value: Any) -> float:
    """
    Coerce anything to a finite float.

    Non-numeric, missing, NaN and infinite values all become 0.0.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def optional_number(value: Any) -> float | None:
    """Like safe_number but keeps an absent value absent."""
    if value is None:
        return None
    return safe_number(value)


def naive_utc(value: datetime | None) -> datetime | None:
    """Normalize aware timestamps to naive UTC so all comparisons agree."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
