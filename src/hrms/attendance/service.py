from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Callable, Optional

from ..common.datetime_utils import now_local, parse_clock_time, week_bounds
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_date, require_date
from ..core.constants import DEFAULT_PER_PAGE
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import AttendanceRecord, AttendanceRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

# Statuses an admin may set by hand ('leave' is derived from approved leaves).
MANUAL_STATUSES = (
    AttendanceStatus.PRESENT,
    AttendanceStatus.ABSENT,
    AttendanceStatus.LATE,
    AttendanceStatus.HALF_DAY,
)


@dataclass(frozen=True)
class TodayStatus:
    checked_in: bool
    checked_out: bool
    check_in_time: Optional[time]
    check_out_time: Optional[time]
    status: Optional[AttendanceStatus]


def _optional_clock_time(value: Any, field_name: str) -> Optional[time]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, time):
        return value
    try:
        return parse_clock_time(str(value).strip())
    except ValueError:
        raise ValidationError(
            f"The {field_name} does not match the format H:i:s.",
            errors={field_name: ["Must be a time in HH:MM:SS format."]},
        )


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._users = users
        self._clock = clock

    def check_in(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock()
        today = now.date()
        clock_time = now.time().replace(microsecond=0)

        existing = self._attendance.get_for_user_and_date(user_id, today)
        if existing and existing.check_in is not None:
            raise InvalidStateError("You have already checked in today.")

        if existing:
            # Admin pre-created the day without a check-in.
            if not self._attendance.update_checkin(
                attendance_id=existing.attendance_id, check_in=clock_time, status=AttendanceStatus.PRESENT
            ):
                raise InvalidStateError("You have already checked in today.")
        else:
            try:
                self._attendance.create_checkin(
                    user_id=user_id, work_date=today, check_in=clock_time, status=AttendanceStatus.PRESENT
                )
            except ConflictError:
                raise InvalidStateError("You have already checked in today.")

        logger.info("User %s checked in at %s", user_id, clock_time)
        return self._attendance.get_for_user_and_date(user_id, today)

    def check_out(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock()
        today = now.date()

        record = self._attendance.get_for_user_and_date(user_id, today)
        if not record:
            raise InvalidStateError("Please check in first.")
        if record.check_out is not None:
            raise InvalidStateError("You have already checked out today.")

        clock_time = now.time().replace(microsecond=0)
        if not self._attendance.update_checkout(attendance_id=record.attendance_id, check_out=clock_time):
            raise InvalidStateError("You have already checked out today.")

        logger.info("User %s checked out at %s", user_id, clock_time)
        return self._attendance.get_for_user_and_date(user_id, today)

    def today_status(self, user_id: int, *, today: Optional[date] = None) -> TodayStatus:
        today = today or self._clock().date()
        record = self._attendance.get_for_user_and_date(user_id, today)
        if not record:
            return TodayStatus(False, False, None, None, None)
        return TodayStatus(
            checked_in=record.check_in is not None,
            checked_out=record.check_out is not None,
            check_in_time=record.check_in,
            check_out_time=record.check_out,
            status=record.status,
        )

    def list_records(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        from_date: Any = None,
        to_date: Any = None,
        on_date: Any = None,
        week: Any = None,
        user_id: Any = None,
        page: Any = None,
        per_page: Any = None,
    ) -> Page[AttendanceRow]:
        """Attendance rows, newest first.

        Employees only ever see their own rows. A date range needs both ends;
        otherwise a single ``on_date`` applies. ``week`` narrows to the
        Monday-Sunday week containing it.
        """

        req = PageRequest.of(page, per_page, default_per_page=DEFAULT_PER_PAGE)

        start = optional_date(from_date, "from_date")
        end = optional_date(to_date, "to_date")
        if start is None or end is None:
            start = end = optional_date(on_date, "date")

        week_day = optional_date(week, "week")
        if week_day is not None:
            week_start, week_end = week_bounds(week_day)
            start = max(start, week_start) if start else week_start
            end = min(end, week_end) if end else week_end

        owner: Optional[int] = None
        if current_role != Role.ADMIN:
            owner = int(current_user_id)
        elif user_id not in (None, ""):
            try:
                owner = int(user_id)
            except (TypeError, ValueError):
                raise ValidationError("The user id must be an integer.", errors={"user_id": ["Must be an integer."]})

        rows, total = self._attendance.search(
            user_id=owner, from_date=start, to_date=end, offset=req.offset, limit=req.per_page
        )
        return Page(items=rows, total=total, page=req.page, per_page=req.per_page)

    def record_manual(
        self,
        *,
        current_role: Role,
        user_id: Any,
        work_date: Any,
        check_in: Any = None,
        check_out: Any = None,
        status: Any = None,
    ) -> AttendanceRecord:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Unauthorized access.")

        try:
            target = int(user_id)
        except (TypeError, ValueError):
            raise ValidationError("The user id field is required.", errors={"user_id": ["This field is required."]})
        if not self._users.get_by_id(target):
            raise ValidationError("The selected user id is invalid.", errors={"user_id": ["The selected user id is invalid."]})

        day = require_date(work_date, "date")
        start = _optional_clock_time(check_in, "check_in")
        end = _optional_clock_time(check_out, "check_out")
        if end is not None and (start is None or end <= start):
            raise ValidationError(
                "The check out must be a time after check in.",
                errors={"check_out": ["Must be a time after check in."]},
            )

        if status in (None, ""):
            new_status = AttendanceStatus.PRESENT
        else:
            try:
                new_status = AttendanceStatus(str(status))
            except ValueError:
                new_status = None
            if new_status not in MANUAL_STATUSES:
                raise ValidationError("The selected status is invalid.", errors={"status": ["The selected status is invalid."]})

        attendance_id = self._attendance.upsert_record(
            user_id=target, work_date=day, check_in=start, check_out=end, status=new_status
        )
        logger.info("Attendance of user %s on %s set manually", target, day)
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found.")
        return record
