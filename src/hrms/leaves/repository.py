from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(self, *, user_id: int, leave_type: LeaveType, from_date: date, to_date: date, reason: str) -> int:
        raise NotImplementedError

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def exists_exact(self, *, user_id: int, from_date: date, to_date: date, statuses: Iterable[LeaveStatus]) -> bool:
        raise NotImplementedError

    def exists_overlapping(
        self,
        *,
        user_id: int,
        from_date: date,
        to_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> bool:
        raise NotImplementedError

    def update_status(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        expected: LeaveStatus,
        admin_comment: Optional[str] = None,
    ) -> bool:
        """Move a leave out of ``expected``; False when it was no longer in that state."""

        raise NotImplementedError

    def search(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        offset: int = 0,
        limit: int = 15,
    ) -> tuple[Sequence[LeaveRequest], int]:
        raise NotImplementedError

    def user_ids_on_leave(self, on_date: date, user_ids: Sequence[int]) -> set[int]:
        """Users with an approved leave covering ``on_date``."""

        raise NotImplementedError
