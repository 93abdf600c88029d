from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Union

from ..model import SalaryComponents

Number = Union[Decimal, int, float, str]


class SalaryCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate_components(self, monthly_wage: Number) -> SalaryComponents:
        raise NotImplementedError

    @abstractmethod
    def yearly_wage(self, monthly_wage: Number) -> Decimal:
        raise NotImplementedError
