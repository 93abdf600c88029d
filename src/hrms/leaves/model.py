from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    """Domain entity: a leave request and its approval state."""

    leave_id: int
    user_id: int
    leave_type: LeaveType
    from_date: date
    to_date: date
    reason: str
    status: LeaveStatus
    admin_comment: Optional[str] = None
    created_at: Optional[datetime] = None
    # Owner details, filled by listing queries.
    user_name: Optional[str] = None
    employee_code: Optional[str] = None
    email: Optional[str] = None

    @property
    def days(self) -> int:
        return (self.to_date - self.from_date).days + 1
