from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

import mysql.connector

from ..core.enums import Role
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, like_pattern
from .model import PROFILE_FIELDS, EmployeeProfile, User
from .repository import UserRepository

logger = logging.getLogger(__name__)

_USER_COLUMNS = (
    "user_id, employee_code, name, email, password_hash, role, "
    "email_verified_at, password_changed_at, created_at"
)
_PROFILE_COLUMNS = "user_id, " + ", ".join(PROFILE_FIELDS)


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        employee_code=row.get("employee_code"),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        email_verified_at=row.get("email_verified_at"),
        password_changed_at=row.get("password_changed_at"),
        created_at=row.get("created_at"),
    )


def _row_to_profile(row: dict) -> EmployeeProfile:
    salary = row.get("salary")
    return EmployeeProfile(
        user_id=int(row["user_id"]),
        **{name: row.get(name) for name in PROFILE_FIELDS if name != "salary"},
        salary=Decimal(str(salary)) if salary is not None else None,
    )


def _conflict_message(exc: Exception) -> str:
    text = str(exc)
    if "employee_code" in text:
        return "The employee ID has already been taken."
    return "The email has already been taken."


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_login(self, login: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE email=%s OR employee_code=%s
                ORDER BY user_id
                LIMIT 1
                """,
                (login, login),
            )
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def exists_by_employee_code(self, employee_code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM users WHERE employee_code=%s LIMIT 1", (employee_code,))
            return fetchone(cur) is not None

    def find_employee_codes_matching(self, pattern: str) -> Sequence[str]:
        # 'c' forces a case-sensitive match regardless of the column collation.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_code
                FROM users
                WHERE employee_code IS NOT NULL AND REGEXP_LIKE(employee_code, %s, 'c')
                """,
                (pattern,),
            )
            return [r["employee_code"] for r in fetchall(cur)]

    def create_user(
        self,
        *,
        employee_code: Optional[str],
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        email_verified_at: Optional[datetime] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(employee_code, name, email, password_hash, role, email_verified_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (employee_code, name, email, password_hash, role.value, email_verified_at),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                logger.warning("Duplicate user rejected: %s", e)
                raise ConflictError(_conflict_message(e)) from e
            raise

    def update_user(
        self,
        user_id: int,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> bool:
        sets: list[str] = []
        params: list[object] = []
        if name is not None:
            sets.append("name=%s")
            params.append(name)
        if email is not None:
            sets.append("email=%s")
            params.append(email)
        if role is not None:
            sets.append("role=%s")
            params.append(role.value)
        if not sets:
            return False

        params.append(int(user_id))
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE users SET {', '.join(sets)} WHERE user_id=%s", tuple(params))
                return cur.rowcount > 0
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError(_conflict_message(e)) from e
            raise

    def update_password(self, user_id: int, *, password_hash: str, changed_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET password_hash=%s, password_changed_at=%s WHERE user_id=%s",
                (password_hash, changed_at, int(user_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

    def search(
        self,
        *,
        role: Optional[Role] = None,
        term: Optional[str] = None,
        with_employee_code: bool = False,
        order_by_name: bool = False,
        offset: int = 0,
        limit: int = 15,
    ) -> tuple[Sequence[User], int]:
        clauses = ["1=1"]
        params: list[object] = []

        if role is not None:
            clauses.append("role=%s")
            params.append(role.value)
        if with_employee_code:
            clauses.append("employee_code IS NOT NULL")
        if term:
            pattern = like_pattern(term)
            clauses.append("(name LIKE %s OR email LIKE %s OR employee_code LIKE %s)")
            params.extend([pattern, pattern, pattern])

        where = " AND ".join(clauses)
        order = "name ASC, user_id ASC" if order_by_name else "created_at DESC, user_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM users WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE {where}
                ORDER BY {order}
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            return [_row_to_user(r) for r in fetchall(cur)], total

    def list_employee_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id FROM users WHERE role=%s AND employee_code IS NOT NULL ORDER BY user_id",
                (Role.EMPLOYEE.value,),
            )
            return [int(r["user_id"]) for r in fetchall(cur)]

    def get_profile(self, user_id: int) -> Optional[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PROFILE_COLUMNS} FROM employee_profiles WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_profile(row) if row else None

    def get_profiles(self, user_ids: Sequence[int]) -> Mapping[int, EmployeeProfile]:
        ids = [int(i) for i in user_ids]
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PROFILE_COLUMNS} FROM employee_profiles WHERE user_id IN ({placeholders})",
                tuple(ids),
            )
            return {int(r["user_id"]): _row_to_profile(r) for r in fetchall(cur)}

    def upsert_profile(self, user_id: int, fields: Mapping[str, Any]) -> None:
        data = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
        columns = ["user_id", *data.keys()]
        values = [int(user_id), *data.values()]
        placeholders = ",".join(["%s"] * len(columns))
        if data:
            updates = ", ".join(f"{k}=VALUES({k})" for k in data)
        else:
            updates = "user_id=user_id"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO employee_profiles({', '.join(columns)})
                VALUES({placeholders})
                ON DUPLICATE KEY UPDATE {updates}
                """,
                tuple(values),
            )
