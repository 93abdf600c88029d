from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import COMPONENT_FIELDS, SalaryComponents, SalaryStructure
from .repository import SalaryStructureRepository

_COLUMNS = (
    "salary_structure_id, user_id, monthly_wage, yearly_wage, working_days_per_week, break_time_hours, "
    + ", ".join(COMPONENT_FIELDS)
)


def _dec(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def _row_to_structure(r: dict) -> SalaryStructure:
    return SalaryStructure(
        salary_structure_id=int(r["salary_structure_id"]),
        user_id=int(r["user_id"]),
        monthly_wage=_dec(r["monthly_wage"]),
        yearly_wage=_dec(r["yearly_wage"]),
        working_days_per_week=int(r["working_days_per_week"]),
        break_time_hours=_dec(r["break_time_hours"]),
        components=SalaryComponents(**{name: _dec(r[name]) for name in COMPONENT_FIELDS}),
    )


class MySQLSalaryStructureRepository(SalaryStructureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_user(self, user_id: int) -> Optional[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_structures WHERE user_id=%s", (int(user_id),))
            r = fetchone(cur)
            return _row_to_structure(r) if r else None

    def get_by_users(self, user_ids: Sequence[int]) -> Mapping[int, SalaryStructure]:
        ids = [int(i) for i in user_ids]
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_structures WHERE user_id IN ({placeholders})", tuple(ids))
            return {int(r["user_id"]): _row_to_structure(r) for r in fetchall(cur)}

    def upsert(self, structure: SalaryStructure) -> int:
        amounts = structure.components.as_dict()
        columns = [
            "user_id",
            "monthly_wage",
            "yearly_wage",
            "working_days_per_week",
            "break_time_hours",
            *COMPONENT_FIELDS,
        ]
        values = [
            int(structure.user_id),
            structure.monthly_wage,
            structure.yearly_wage,
            int(structure.working_days_per_week),
            structure.break_time_hours,
            *(amounts[name] for name in COMPONENT_FIELDS),
        ]
        updates = ", ".join(f"{c}=VALUES({c})" for c in columns[1:])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO salary_structures({', '.join(columns)})
                VALUES({','.join(['%s'] * len(columns))})
                ON DUPLICATE KEY UPDATE salary_structure_id=LAST_INSERT_ID(salary_structure_id), {updates}
                """,
                tuple(values),
            )
            return int(cur.lastrowid)
