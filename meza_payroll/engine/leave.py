"""Leave, annual subsidy and time-based deduction helpers."""
from __future__ import annotations

import math
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ..business_days import coerce_date
from ..money import ZERO, to_decimal
from ..rules import JurisdictionRules, load_rules


def sick_pay_rate(day_number: int, rules: JurisdictionRules | None = None) -> Decimal:
    """Pay rate for the ``day_number``-th sick day of the year (1-based)."""

    rules = rules or load_rules()
    policy = rules.sick_leave
    if day_number <= 0:
        return ZERO
    if day_number <= policy.full_pay_days:
        return policy.full_pay_rate
    if day_number <= policy.total_days:
        return policy.reduced_pay_rate
    return ZERO


def calculate_sick_pay(
    hourly_rate: Any,
    sick_days_used: int,
    ytd_sick_days_used: int = 0,
    rules: JurisdictionRules | None = None,
) -> Decimal:
    """Sick pay for the period, numbering days on from the year-to-date count."""

    rules = rules or load_rules()
    daily_rate = to_decimal(hourly_rate) * rules.working_hours.standard_daily_hours
    total = ZERO
    days = max(0, int(to_decimal(sick_days_used)))
    already_used = max(0, int(to_decimal(ytd_sick_days_used)))
    for offset in range(days):
        rate = sick_pay_rate(already_used + offset + 1, rules)
        total += rules.rounding.round(daily_rate * rate, "line")
    return rules.rounding.round(total, "line")


def calculate_subsidio_anual(
    monthly_salary: Any,
    months_worked_this_year: int = 12,
    hire_date: date | str | None = None,
    as_of: date | str | None = None,
    rules: JurisdictionRules | None = None,
) -> Decimal:
    """13th-month salary, pro-rated by the months worked in the year of ``as_of``.

    An employee hired in the ``as_of`` year is credited with the months from the hire
    month through the ``as_of`` month inclusive; one hired after that year earns nothing.
    """

    rules = rules or load_rules()
    months = int(months_worked_this_year)
    if hire_date is not None:
        hired = coerce_date(hire_date)
        reference = coerce_date(as_of) if as_of is not None else date.today()
        if hired.year > reference.year:
            months = 0
        elif hired.year == reference.year:
            months = reference.month - hired.month + 1
    full_year = rules.subsidio_full_year_months
    months = max(0, min(months, full_year))
    if full_year <= 0:
        return ZERO.quantize(Decimal("0.01"))
    return rules.rounding.round(to_decimal(monthly_salary) * Decimal(months) / Decimal(full_year), "line")


def annual_leave_entitlement(years_of_service: Any, rules: JurisdictionRules | None = None) -> int:
    """Annual leave days for the given completed years of service."""

    rules = rules or load_rules()
    years = to_decimal(years_of_service)
    days = 0
    for step in rules.annual_leave:
        if years >= step.min_years:
            days = step.days
    return days


def rounded_late_minutes(minutes: Any, increment: int) -> Decimal:
    value = to_decimal(minutes)
    if value <= 0:
        return ZERO
    if increment <= 1:
        return Decimal(math.ceil(value))
    return Decimal(math.ceil(value / Decimal(increment)) * increment)


def calculate_absence_deduction(
    hourly_rate: Any, absence_hours: Any, rules: JurisdictionRules | None = None
) -> Decimal:
    rules = rules or load_rules()
    hours = to_decimal(absence_hours)
    if hours <= 0:
        return rules.rounding.round(ZERO, "line")
    return rules.rounding.round(to_decimal(hourly_rate) * hours, "line")


def calculate_late_deduction(
    hourly_rate: Any,
    late_minutes: Any,
    rules: JurisdictionRules | None = None,
    rounding_minutes: Optional[int] = None,
) -> Decimal:
    """Deduction for late arrival, with minutes rounded up to the table's increment."""

    rules = rules or load_rules()
    increment = rounding_minutes if rounding_minutes is not None else rules.late_rounding_minutes
    minutes = rounded_late_minutes(late_minutes, increment)
    return rules.rounding.round(to_decimal(hourly_rate) * minutes / Decimal(60), "line")


__all__ = [
    "annual_leave_entitlement",
    "calculate_absence_deduction",
    "calculate_late_deduction",
    "calculate_sick_pay",
    "calculate_subsidio_anual",
    "rounded_late_minutes",
    "sick_pay_rate",
]
