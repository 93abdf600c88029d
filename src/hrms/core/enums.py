from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Normalized attendance status stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"
    LEAVE = "leave"


class LeaveType(str, Enum):
    SICK = "sick"
    ANNUAL = "annual"
    CASUAL = "casual"
    EMERGENCY = "emergency"
    OTHER = "other"
    PAID = "paid"
    UNPAID = "unpaid"


class LeaveStatus(str, Enum):
    """Leave approval workflow state."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class PresenceStatus(str, Enum):
    """Directory status of an employee for a given day."""

    ON_LEAVE = "on_leave"
    PRESENT = "present"
    ABSENT = "absent"
