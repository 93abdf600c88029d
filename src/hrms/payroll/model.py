from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Optional

COMPONENT_FIELDS = (
    "basic_salary",
    "hra",
    "standard_allowance",
    "performance_bonus",
    "lta",
    "fixed_allowance",
    "pf_employee",
    "pf_employer",
    "professional_tax",
)


@dataclass(frozen=True)
class SalaryComponents:
    """Monthly breakdown of a wage, every amount rounded to cents."""

    basic_salary: Decimal
    hra: Decimal
    standard_allowance: Decimal
    performance_bonus: Decimal
    lta: Decimal
    fixed_allowance: Decimal
    pf_employee: Decimal
    pf_employer: Decimal
    professional_tax: Decimal

    def earnings_total(self) -> Decimal:
        return (
            self.basic_salary
            + self.hra
            + self.standard_allowance
            + self.performance_bonus
            + self.lta
            + self.fixed_allowance
        )

    def as_dict(self) -> dict[str, Decimal]:
        return asdict(self)


@dataclass(frozen=True)
class SalaryStructure:
    user_id: int
    monthly_wage: Decimal
    yearly_wage: Decimal
    working_days_per_week: int
    break_time_hours: Decimal
    components: SalaryComponents
    salary_structure_id: Optional[int] = None


@dataclass(frozen=True)
class PayrollRow:
    """Read-model for the admin payroll list."""

    user_id: int
    name: str
    email: str
    employee_code: Optional[str]
    department: Optional[str]
    designation: Optional[str]
    profile_salary: Optional[Decimal]
    structure: Optional[SalaryStructure]
