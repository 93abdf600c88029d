from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceRow


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(self, *, user_id: int, work_date: date, check_in: time, status: AttendanceStatus) -> int:
        """Insert today's row; raises ConflictError if the day already exists."""

        raise NotImplementedError

    def update_checkin(self, *, attendance_id: int, check_in: time, status: AttendanceStatus) -> bool:
        raise NotImplementedError

    def update_checkout(self, *, attendance_id: int, check_out: time) -> bool:
        raise NotImplementedError

    def upsert_record(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in: Optional[time],
        check_out: Optional[time],
        status: AttendanceStatus,
    ) -> int:
        """Admin override keyed by (user, date); returns the row id."""

        raise NotImplementedError

    def search(
        self,
        *,
        user_id: Optional[int] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        offset: int = 0,
        limit: int = 15,
    ) -> tuple[Sequence[AttendanceRow], int]:
        raise NotImplementedError

    def user_ids_checked_in_on(self, work_date: date, user_ids: Sequence[int]) -> set[int]:
        raise NotImplementedError
