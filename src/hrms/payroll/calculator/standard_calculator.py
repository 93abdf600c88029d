from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ..model import SalaryComponents
from .base import Number, SalaryCalculator

CENT = Decimal("0.01")

BASIC_RATE = Decimal("0.50")
HRA_RATE = Decimal("0.50")
STANDARD_ALLOWANCE_RATE = Decimal("0.1667")
PERFORMANCE_BONUS_RATE = Decimal("0.0833")
LTA_RATE = Decimal("0.0833")
PF_RATE = Decimal("0.12")
PROFESSIONAL_TAX = Decimal("200.00")


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class StandardSalaryCalculator(SalaryCalculator):
    """Standard rule: basic is 50% of wage, allowances are shares of basic,
    fixed allowance is the remainder, professional tax is flat.

    The fixed allowance absorbs the rounding of the other earnings, so the six
    earnings always add up to the wage rounded to cents.
    """

    def calculate_components(self, monthly_wage: Number) -> SalaryComponents:
        wage = to_decimal(monthly_wage)

        raw_basic = wage * BASIC_RATE
        basic = money(raw_basic)
        hra = money(raw_basic * HRA_RATE)
        standard_allowance = money(raw_basic * STANDARD_ALLOWANCE_RATE)
        performance_bonus = money(raw_basic * PERFORMANCE_BONUS_RATE)
        lta = money(raw_basic * LTA_RATE)
        fixed_allowance = money(wage) - (basic + hra + standard_allowance + performance_bonus + lta)
        pf = money(raw_basic * PF_RATE)

        return SalaryComponents(
            basic_salary=basic,
            hra=hra,
            standard_allowance=standard_allowance,
            performance_bonus=performance_bonus,
            lta=lta,
            fixed_allowance=fixed_allowance,
            pf_employee=pf,
            pf_employer=pf,
            professional_tax=money(PROFESSIONAL_TAX),
        )

    def yearly_wage(self, monthly_wage: Number) -> Decimal:
        return money(to_decimal(monthly_wage) * 12)
