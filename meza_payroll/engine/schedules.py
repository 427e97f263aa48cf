"""Helpers for multi-period and multi-employee payroll runs."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence

from ..money import ZERO, pro_rata, round_cents, to_decimal, to_float
from .models import PayrollResult


@dataclass(frozen=True)
class WeeklyShare:
    week_number: int
    working_days: int
    amount: Decimal
    is_reconciled: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "working_days": self.working_days,
            "amount": to_float(self.amount),
            "is_reconciled": self.is_reconciled,
        }


def split_monthly_salary_by_weeks(monthly_salary: Any, weekly_working_days: Sequence[int]) -> List[WeeklyShare]:
    """Spread a monthly salary across weeks by working days.

    Every week but the last is pro-rated; the last week takes the remainder, so the
    shares always add up to the monthly salary exactly.

    >>> [str(s.amount) for s in split_monthly_salary_by_weeks(1000, [5, 5, 5, 5, 3])]
    ['217.39', '217.39', '217.39', '217.39', '130.44']
    """

    salary = round_cents(monthly_salary)
    days = [int(value) for value in weekly_working_days]
    if not days:
        return []
    total_days = sum(days)
    last = len(days) - 1
    if total_days <= 0:
        return [
            WeeklyShare(index + 1, value, round_cents(ZERO), index == last) for index, value in enumerate(days)
        ]

    shares: List[WeeklyShare] = []
    paid = ZERO
    for index, value in enumerate(days):
        if index == last:
            amount = salary - paid
        else:
            amount = pro_rata(salary, value, total_days)
            paid += amount
        shares.append(WeeklyShare(index + 1, value, amount, index == last))
    return shares


@dataclass(frozen=True)
class RunSummary:
    employee_count: int
    total_gross_pay: Decimal
    total_income_tax: Decimal
    total_inss_employee: Decimal
    total_inss_employer: Decimal
    total_deductions: Decimal
    total_net_pay: Decimal
    total_employer_cost: Decimal
    negative_net_pay: tuple

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employee_count": self.employee_count,
            "total_gross_pay": to_float(self.total_gross_pay),
            "total_income_tax": to_float(self.total_income_tax),
            "total_inss_employee": to_float(self.total_inss_employee),
            "total_inss_employer": to_float(self.total_inss_employer),
            "total_deductions": to_float(self.total_deductions),
            "total_net_pay": to_float(self.total_net_pay),
            "total_employer_cost": to_float(self.total_employer_cost),
            "negative_net_pay": list(self.negative_net_pay),
        }


def summarize_run(results: Iterable[PayrollResult]) -> RunSummary:
    """Totals across a run; lists employees whose net pay came out negative."""

    items = list(results)

    def total(attribute: str) -> Decimal:
        return round_cents(sum((to_decimal(getattr(item, attribute)) for item in items), ZERO))

    return RunSummary(
        employee_count=len(items),
        total_gross_pay=total("gross_pay"),
        total_income_tax=total("income_tax"),
        total_inss_employee=total("inss_employee"),
        total_inss_employer=total("inss_employer"),
        total_deductions=total("total_deductions"),
        total_net_pay=total("net_pay"),
        total_employer_cost=total("total_employer_cost"),
        negative_net_pay=tuple(item.employee_id for item in items if item.has_negative_net_pay),
    )


__all__ = ["RunSummary", "WeeklyShare", "split_monthly_salary_by_weeks", "summarize_run"]
