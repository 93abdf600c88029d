from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRepository

_SELECT = """
    SELECT l.leave_id, l.user_id, l.leave_type, l.from_date, l.to_date, l.reason, l.status,
           l.admin_comment, l.created_at,
           u.name AS user_name, u.employee_code, u.email
    FROM leaves l
    JOIN users u ON u.user_id = l.user_id
"""


def _row_to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        user_id=int(r["user_id"]),
        leave_type=LeaveType(r["leave_type"]),
        from_date=r["from_date"],
        to_date=r["to_date"],
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        admin_comment=r.get("admin_comment"),
        created_at=r.get("created_at"),
        user_name=r.get("user_name"),
        employee_code=r.get("employee_code"),
        email=r.get("email"),
    )


def _status_clause(statuses: Iterable[LeaveStatus]) -> tuple[str, list[str]]:
    values = [s.value for s in statuses]
    return "status IN (" + ",".join(["%s"] * len(values)) + ")", values


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, user_id: int, leave_type: LeaveType, from_date: date, to_date: date, reason: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leaves(user_id, leave_type, from_date, to_date, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), leave_type.value, from_date, to_date, reason, LeaveStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE l.leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def exists_exact(self, *, user_id: int, from_date: date, to_date: date, statuses: Iterable[LeaveStatus]) -> bool:
        status_sql, status_params = _status_clause(statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT 1 AS found FROM leaves
                WHERE user_id=%s AND from_date=%s AND to_date=%s AND {status_sql}
                LIMIT 1
                """,
                (int(user_id), from_date, to_date, *status_params),
            )
            return fetchone(cur) is not None

    def exists_overlapping(
        self,
        *,
        user_id: int,
        from_date: date,
        to_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> bool:
        status_sql, status_params = _status_clause(statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT 1 AS found FROM leaves
                WHERE user_id=%s AND from_date <= %s AND to_date >= %s AND {status_sql}
                LIMIT 1
                """,
                (int(user_id), to_date, from_date, *status_params),
            )
            return fetchone(cur) is not None

    def update_status(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        expected: LeaveStatus,
        admin_comment: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if status == LeaveStatus.CANCELLED:
                cur.execute(
                    "UPDATE leaves SET status=%s WHERE leave_id=%s AND status=%s",
                    (status.value, int(leave_id), expected.value),
                )
            else:
                cur.execute(
                    "UPDATE leaves SET status=%s, admin_comment=%s WHERE leave_id=%s AND status=%s",
                    (status.value, admin_comment, int(leave_id), expected.value),
                )
            return cur.rowcount > 0

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
        clauses = ["1=1"]
        params: list[object] = []

        if user_id is not None:
            clauses.append("l.user_id=%s")
            params.append(int(user_id))
        if status is not None:
            clauses.append("l.status=%s")
            params.append(status.value)
        if leave_type is not None:
            clauses.append("l.leave_type=%s")
            params.append(leave_type.value)
        if from_date is not None and to_date is not None:
            clauses.append("l.from_date <= %s AND l.to_date >= %s")
            params.extend([to_date, from_date])

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM leaves l WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY l.created_at DESC, l.leave_id DESC LIMIT %s OFFSET %s",
                tuple(params) + (int(limit), int(offset)),
            )
            return [_row_to_leave(r) for r in fetchall(cur)], total

    def user_ids_on_leave(self, on_date: date, user_ids: Sequence[int]) -> set[int]:
        ids = [int(i) for i in user_ids]
        if not ids:
            return set()
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT DISTINCT user_id FROM leaves
                WHERE status=%s AND from_date <= %s AND to_date >= %s AND user_id IN ({placeholders})
                """,
                (LeaveStatus.APPROVED.value, on_date, on_date, *ids),
            )
            return {int(r["user_id"]) for r in fetchall(cur)}
