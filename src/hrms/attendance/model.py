from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance day of one user."""

    attendance_id: int
    user_id: int
    work_date: date
    check_in: Optional[time]
    check_out: Optional[time]
    status: AttendanceStatus
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceRow:
    """Read-model for listings (record joined with its owner)."""

    record: AttendanceRecord
    user_name: str
    email: str
    employee_code: Optional[str]
