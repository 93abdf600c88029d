from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

from ..common.pagination import Page, PageRequest
from ..common.validators import clean_optional, require_decimal, require_int
from ..core.constants import (
    DEFAULT_BREAK_TIME_HOURS,
    DEFAULT_MONTHLY_WAGE,
    DEFAULT_PER_PAGE,
    DEFAULT_WORKING_DAYS_PER_WEEK,
)
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..users.repository import UserRepository
from .calculator.base import SalaryCalculator
from .calculator.standard_calculator import StandardSalaryCalculator, money, to_decimal
from .model import PayrollRow, SalaryStructure
from .repository import SalaryStructureRepository

logger = logging.getLogger(__name__)


class PayrollService:
    """Salary structures: view, edit (admin) and the admin payroll list."""

    def __init__(
        self,
        structures: SalaryStructureRepository,
        users: UserRepository,
        *,
        calculator: Optional[SalaryCalculator] = None,
    ):
        self._structures = structures
        self._users = users
        self._calculator = calculator or StandardSalaryCalculator()

    def build_structure(
        self,
        user_id: int,
        monthly_wage: Any,
        *,
        working_days_per_week: int = DEFAULT_WORKING_DAYS_PER_WEEK,
        break_time_hours: Any = DEFAULT_BREAK_TIME_HOURS,
    ) -> SalaryStructure:
        """Derive a full (unsaved) structure from a monthly wage."""

        wage = money(to_decimal(monthly_wage))
        return SalaryStructure(
            user_id=int(user_id),
            monthly_wage=wage,
            yearly_wage=self._calculator.yearly_wage(wage),
            working_days_per_week=int(working_days_per_week),
            break_time_hours=money(to_decimal(break_time_hours)),
            components=self._calculator.calculate_components(wage),
        )

    def get_structure(self, *, current_user_id: int, current_role: Role, user_id: Optional[int] = None) -> SalaryStructure:
        target = int(user_id) if user_id is not None else int(current_user_id)
        if current_role != Role.ADMIN and target != int(current_user_id):
            raise AuthorizationError("Unauthorized access.")

        stored = self._structures.get_by_user(target)
        if stored:
            return stored

        if not self._users.get_by_id(target):
            raise NotFoundError("Employee not found.")
        profile = self._users.get_profile(target)
        wage = profile.salary if profile and profile.salary is not None else Decimal(DEFAULT_MONTHLY_WAGE)
        return self.build_structure(target, wage)

    def update_structure(
        self,
        *,
        current_role: Role,
        user_id: int,
        monthly_wage: Any,
        working_days_per_week: Any = None,
        break_time_hours: Any = None,
    ) -> SalaryStructure:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Unauthorized. Only admins can update salary structures.")

        wage = require_decimal(monthly_wage, "monthly_wage", min_value=Decimal("0"))
        days = (
            DEFAULT_WORKING_DAYS_PER_WEEK
            if working_days_per_week in (None, "")
            else require_int(working_days_per_week, "working_days_per_week", min_value=1, max_value=7)
        )
        hours = (
            Decimal(DEFAULT_BREAK_TIME_HOURS)
            if break_time_hours in (None, "")
            else require_decimal(break_time_hours, "break_time_hours", min_value=Decimal("0"), max_value=Decimal("24"))
        )

        if not self._users.get_by_id(user_id):
            raise NotFoundError("Employee not found.")

        structure = self.build_structure(user_id, wage, working_days_per_week=days, break_time_hours=hours)
        self._structures.upsert(structure)

        if self._users.get_profile(user_id) is not None:
            self._users.upsert_profile(user_id, {"salary": structure.monthly_wage})

        logger.info("Salary structure of user %s set to %s/month", user_id, structure.monthly_wage)
        return self._structures.get_by_user(user_id) or structure

    def list_payrolls(
        self,
        *,
        current_role: Role,
        search: Optional[str] = None,
        page: Any = None,
        per_page: Any = None,
    ) -> Page[PayrollRow]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Unauthorized. Only admins can view all payrolls.")

        req = PageRequest.of(page, per_page, default_per_page=DEFAULT_PER_PAGE)
        users, total = self._users.search(
            role=Role.EMPLOYEE,
            term=clean_optional(search),
            order_by_name=True,
            offset=req.offset,
            limit=req.per_page,
        )
        ids = [u.user_id for u in users]
        profiles = self._users.get_profiles(ids)
        structures = self._structures.get_by_users(ids)

        rows: list[PayrollRow] = []
        for u in users:
            profile = profiles.get(u.user_id)
            structure = structures.get(u.user_id)
            if structure is None and profile is not None:
                structure = self.build_structure(u.user_id, profile.salary or 0)
            rows.append(
                PayrollRow(
                    user_id=u.user_id,
                    name=u.name,
                    email=u.email,
                    employee_code=u.employee_code,
                    department=profile.department if profile else None,
                    designation=profile.designation if profile else None,
                    profile_salary=profile.salary if profile else None,
                    structure=structure,
                )
            )
        return Page(items=rows, total=total, page=req.page, per_page=req.per_page)
