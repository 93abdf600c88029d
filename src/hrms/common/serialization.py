from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional


def iso(value: Any) -> Optional[str]:
    """ISO-8601 text for dates, datetimes and times (None stays None)."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat(sep=" ", timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def amount(value: Optional[Decimal]) -> Optional[str]:
    # Money goes out as fixed-point text so clients never see float noise.
    if value is None:
        return None
    return f"{value:.2f}"
