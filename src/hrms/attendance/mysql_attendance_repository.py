from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, normalize_mysql_time
from .model import AttendanceRecord, AttendanceRow
from .repository import AttendanceRepository

_COLUMNS = "a.attendance_id, a.user_id, a.work_date, a.check_in, a.check_out, a.status, a.created_at"


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in=normalize_mysql_time(r.get("check_in")),
        check_out=normalize_mysql_time(r.get("check_out")),
        status=AttendanceStatus(r["status"]),
        created_at=r.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendances a WHERE a.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendances a WHERE a.user_id=%s AND a.work_date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create_checkin(self, *, user_id: int, work_date: date, check_in: time, status: AttendanceStatus) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendances(user_id, work_date, check_in, status)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (int(user_id), work_date, check_in, status.value),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError("You have already checked in today.") from e
            raise

    def update_checkin(self, *, attendance_id: int, check_in: time, status: AttendanceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendances SET check_in=%s, status=%s WHERE attendance_id=%s AND check_in IS NULL",
                (check_in, status.value, int(attendance_id)),
            )
            return cur.rowcount > 0

    def update_checkout(self, *, attendance_id: int, check_out: time) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendances SET check_out=%s WHERE attendance_id=%s AND check_out IS NULL",
                (check_out, int(attendance_id)),
            )
            return cur.rowcount > 0

    def upsert_record(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in: Optional[time],
        check_out: Optional[time],
        status: AttendanceStatus,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendances(user_id, work_date, check_in, check_out, status)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    attendance_id=LAST_INSERT_ID(attendance_id),
                    check_in=VALUES(check_in),
                    check_out=VALUES(check_out),
                    status=VALUES(status)
                """,
                (int(user_id), work_date, check_in, check_out, status.value),
            )
            return int(cur.lastrowid)

    def search(
        self,
        *,
        user_id: Optional[int] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        offset: int = 0,
        limit: int = 15,
    ) -> tuple[Sequence[AttendanceRow], int]:
        clauses = ["1=1"]
        params: list[object] = []

        if user_id is not None:
            clauses.append("a.user_id=%s")
            params.append(int(user_id))
        if from_date is not None:
            clauses.append("a.work_date >= %s")
            params.append(from_date)
        if to_date is not None:
            clauses.append("a.work_date <= %s")
            params.append(to_date)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendances a WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS}, u.name AS user_name, u.email, u.employee_code
                FROM attendances a
                JOIN users u ON u.user_id = a.user_id
                WHERE {where}
                ORDER BY a.work_date DESC, a.check_in DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            rows = [
                AttendanceRow(
                    record=_row_to_record(r),
                    user_name=r["user_name"],
                    email=r["email"],
                    employee_code=r.get("employee_code"),
                )
                for r in fetchall(cur)
            ]
            return rows, total

    def user_ids_checked_in_on(self, work_date: date, user_ids: Sequence[int]) -> set[int]:
        ids = [int(i) for i in user_ids]
        if not ids:
            return set()
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id FROM attendances
                WHERE work_date=%s AND check_in IS NOT NULL AND user_id IN ({placeholders})
                """,
                (work_date, *ids),
            )
            return {int(r["user_id"]) for r in fetchall(cur)}
