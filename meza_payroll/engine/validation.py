"""Business-rule checks on payroll inputs.

These never raise: they return human readable warnings for a reviewer. Structural
problems that make an input impossible to calculate are raised by
:func:`meza_payroll.engine.calculator.calculate_payroll` instead.
"""
from __future__ import annotations

from decimal import Decimal
from typing import List

from ..money import format_amount, to_decimal
from ..rules import JurisdictionRules, load_rules
from .models import PayFrequency, PayrollInput

_NON_NEGATIVE_FIELDS = (
    "monthly_salary",
    "hourly_rate",
    "regular_hours",
    "overtime_hours",
    "night_shift_hours",
    "holiday_hours",
    "rest_day_hours",
    "absence_hours",
    "late_arrival_minutes",
    "sick_days_used",
    "ytd_sick_days_used",
    "bonus",
    "commission",
    "per_diem",
    "food_allowance",
    "transport_allowance",
    "other_earnings",
    "subsidio_anual",
    "inss_contribution_base",
    "loan_repayment",
    "advance_repayment",
    "court_orders",
    "other_deductions",
)

_WEEKS_PER_PERIOD = {
    PayFrequency.WEEKLY: Decimal(1),
    PayFrequency.BIWEEKLY: Decimal(2),
    PayFrequency.MONTHLY: Decimal(52) / Decimal(12),
}


def _whole_days(value: object) -> int:
    # Non-numeric values are already reported by the non-negative check.
    try:
        days = to_decimal(value)
    except (TypeError, ArithmeticError, ValueError):
        return 0
    if not days.is_finite() or days <= 0:
        return 0
    return int(days)


def validate_payroll_input(payroll_input: PayrollInput, rules: JurisdictionRules | None = None) -> List[str]:
    rules = rules or load_rules()
    warnings: List[str] = []

    if not payroll_input.employee_id:
        warnings.append("Employee ID is required.")

    for name in _NON_NEGATIVE_FIELDS:
        raw = getattr(payroll_input, name)
        if raw is None:
            continue
        try:
            value = to_decimal(raw)
            if not value.is_finite():
                raise ValueError(raw)
        except (TypeError, ArithmeticError, ValueError):
            warnings.append(f"{name} is not a number: {raw!r}.")
            continue
        if value < 0:
            warnings.append(f"{name} cannot be negative.")

    try:
        salary = to_decimal(payroll_input.monthly_salary)
    except (TypeError, ArithmeticError, ValueError):
        salary = None
    minimum = rules.minimum_monthly_wage
    if not payroll_input.is_hourly and salary is not None and 0 < salary < minimum:
        warnings.append(
            f"Monthly salary ${format_amount(salary)} is below the minimum wage of ${format_amount(minimum)}."
        )

    try:
        frequency = PayFrequency.parse(payroll_input.pay_frequency)
    except ValueError:
        warnings.append(f"Unsupported pay frequency {payroll_input.pay_frequency!r}.")
        frequency = None
    if frequency is not None:
        weekly_cap = rules.working_hours.max_overtime_per_week
        limit = (weekly_cap * _WEEKS_PER_PERIOD[frequency]).quantize(Decimal("0.01"))
        try:
            overtime = to_decimal(payroll_input.overtime_hours)
        except (TypeError, ArithmeticError, ValueError):
            overtime = None
        if weekly_cap > 0 and overtime is not None and overtime > limit:
            warnings.append(
                f"Overtime of {overtime} hours exceeds the maximum of {limit} hours for a "
                f"{frequency.value} period."
            )

    total_sick = _whole_days(payroll_input.ytd_sick_days_used) + _whole_days(payroll_input.sick_days_used)
    if total_sick > rules.sick_leave.total_days:
        warnings.append(
            f"Sick days ({total_sick}) exceed the annual limit of {rules.sick_leave.total_days}; "
            "days beyond the limit are unpaid."
        )

    if payroll_input.is_hourly and payroll_input.hourly_rate is None:
        warnings.append("Hourly employees need an hourly rate.")

    return warnings


__all__ = ["validate_payroll_input"]
