from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..common.validators import clean_optional, optional_date, require_date, require_max_length, require_non_empty
from ..core.constants import (
    ADMIN_COMMENT_MAX_LENGTH,
    DEFAULT_PER_PAGE,
    LEAVE_REASON_MAX_LENGTH,
    LEAVE_REASON_MIN_LENGTH,
)
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

# Rejected and cancelled leaves may be submitted again.
BLOCKING_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)
DECISIONS = (LeaveStatus.APPROVED, LeaveStatus.REJECTED)


def _parse_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"The selected {field_name} is invalid.", errors={field_name: ["The selected value is invalid."]})


class LeaveService:
    def __init__(self, leaves: LeaveRepository, *, clock: Callable[[], datetime] = now_local):
        self._leaves = leaves
        self._clock = clock

    def create_leave(
        self,
        *,
        current_role: Role,
        user_id: int,
        leave_type: Any,
        from_date: Any,
        to_date: Any,
        reason: Optional[str],
    ) -> LeaveRequest:
        if current_role != Role.EMPLOYEE:
            raise AuthorizationError("Only employees can request leave.")

        kind = _parse_enum(LeaveType, require_non_empty(leave_type, "type"), "type")
        start = require_date(from_date, "from_date")
        end = require_date(to_date, "to_date")
        today = self._clock().date()

        if start < today:
            raise ValidationError(
                "The from date must be today or a future date.",
                errors={"from_date": ["The from date must be today or a future date."]},
            )
        if end < start:
            raise ValidationError(
                "The to date must be the same as or after the from date.",
                errors={"to_date": ["The to date must be the same as or after the from date."]},
            )

        text = require_non_empty(reason, "reason")
        if len(text) < LEAVE_REASON_MIN_LENGTH:
            raise ValidationError(
                f"The reason must be at least {LEAVE_REASON_MIN_LENGTH} characters long.",
                errors={"reason": [f"The reason must be at least {LEAVE_REASON_MIN_LENGTH} characters long."]},
            )
        require_max_length(text, "reason", LEAVE_REASON_MAX_LENGTH)

        if self._leaves.exists_exact(user_id=user_id, from_date=start, to_date=end, statuses=BLOCKING_STATUSES):
            message = "A leave request already exists for these dates."
            raise ValidationError(
                "You already have a leave request for these exact dates.",
                errors={"from_date": [message], "to_date": [message]},
            )
        if self._leaves.exists_overlapping(user_id=user_id, from_date=start, to_date=end, statuses=BLOCKING_STATUSES):
            message = "This date range overlaps with an existing leave request."
            raise ValidationError(
                "You already have a pending or approved leave request that overlaps with the selected dates.",
                errors={"from_date": [message], "to_date": [message]},
            )

        leave_id = self._leaves.create(user_id=user_id, leave_type=kind, from_date=start, to_date=end, reason=text)
        logger.info("Leave %s requested by user %s (%s to %s)", leave_id, user_id, start, end)
        return self._leaves.get_by_id(leave_id)

    def list_leaves(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        status: Any = None,
        leave_type: Any = None,
        from_date: Any = None,
        to_date: Any = None,
        page: Any = None,
        per_page: Any = None,
    ) -> Page[LeaveRequest]:
        req = PageRequest.of(page, per_page, default_per_page=DEFAULT_PER_PAGE)
        start = optional_date(from_date, "from_date")
        end = optional_date(to_date, "to_date")
        if start is None or end is None:
            start = end = None

        rows, total = self._leaves.search(
            user_id=None if current_role == Role.ADMIN else int(current_user_id),
            status=_parse_enum(LeaveStatus, status, "status") if clean_optional(status) else None,
            leave_type=_parse_enum(LeaveType, leave_type, "type") if clean_optional(leave_type) else None,
            from_date=start,
            to_date=end,
            offset=req.offset,
            limit=req.per_page,
        )
        return Page(items=rows, total=total, page=req.page, per_page=req.per_page)

    def get_leave(self, *, current_user_id: int, current_role: Role, leave_id: int) -> LeaveRequest:
        leave = self._leaves.get_by_id(leave_id)
        if not leave:
            raise NotFoundError("Leave request not found.")
        if current_role != Role.ADMIN and leave.user_id != int(current_user_id):
            raise AuthorizationError("Unauthorized access.")
        return leave

    def decide_leave(
        self,
        *,
        current_role: Role,
        leave_id: int,
        status: Any,
        admin_comment: Optional[str] = None,
    ) -> LeaveRequest:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Unauthorized access.")

        decision = _parse_enum(LeaveStatus, require_non_empty(status, "status"), "status")
        if decision not in DECISIONS:
            raise ValidationError("The selected status is invalid.", errors={"status": ["The selected value is invalid."]})
        comment = require_max_length(clean_optional(admin_comment), "admin_comment", ADMIN_COMMENT_MAX_LENGTH)

        leave = self._leaves.get_by_id(leave_id)
        if not leave:
            raise NotFoundError("Leave request not found.")
        if leave.status != LeaveStatus.PENDING:
            raise InvalidStateError("This leave request has already been processed.")

        if not self._leaves.update_status(
            leave_id=leave_id, status=decision, expected=LeaveStatus.PENDING, admin_comment=comment
        ):
            raise InvalidStateError("This leave request has already been processed.")

        logger.info("Leave %s %s", leave_id, decision.value)
        return self._leaves.get_by_id(leave_id)

    def cancel_leave(self, *, current_user_id: int, leave_id: int) -> LeaveRequest:
        leave = self._leaves.get_by_id(leave_id)
        if not leave:
            raise NotFoundError("Leave request not found.")
        if leave.user_id != int(current_user_id):
            raise AuthorizationError("Unauthorized access.")
        if leave.status != LeaveStatus.PENDING:
            raise InvalidStateError("Only pending leave requests can be cancelled.")

        if not self._leaves.update_status(leave_id=leave_id, status=LeaveStatus.CANCELLED, expected=LeaveStatus.PENDING):
            raise InvalidStateError("Only pending leave requests can be cancelled.")

        logger.info("Leave %s cancelled by user %s", leave_id, current_user_id)
        return self._leaves.get_by_id(leave_id)
