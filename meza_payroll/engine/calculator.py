"""Gross-to-net payroll calculation for one employee and one pay period.

The calculation is a pure function of a :class:`PayrollInput` and a
:class:`JurisdictionRules` table. Every line item is rounded to cents as it is
produced and totals are exact sums of the rounded lines, so

* ``gross_pay`` equals the sum of the earning lines,
* ``net_pay`` equals ``gross_pay - total_deductions``,
* ``total_employer_cost`` equals ``gross_pay + inss_employer``.

Negative net pay is reported, never clamped.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ..money import ZERO, format_amount, to_decimal
from ..rules import JurisdictionRules, load_rules
from .inss import calculate_inss
from .leave import calculate_absence_deduction, calculate_late_deduction, calculate_sick_pay
from .models import DeductionLine, EarningLine, PayFrequency, PayrollInput, PayrollInputError, PayrollResult

logger = logging.getLogger(__name__)

# kind -> (description, Tetun description)
_EARNING_LABELS: Dict[str, Tuple[str, str]] = {
    "regular": ("Regular Salary", "Saláriu Regular"),
    "overtime": ("Overtime", "Oras Extra"),
    "night_shift": ("Night Shift Premium", "Prémiu Turnu Kalan"),
    "holiday": ("Public Holiday Pay", "Pagamentu Feriadu"),
    "rest_day": ("Rest Day Pay", "Pagamentu Loron Deskansa"),
    "sick_pay": ("Sick Leave Pay", "Pagamentu Lisensa Moras"),
    "bonus": ("Bonus", "Bónus"),
    "commission": ("Commission", "Komisaun"),
    "per_diem": ("Per Diem / Travel", "Per Diem / Viajen"),
    "food_allowance": ("Food Allowance", "Subsidiu Ai-han"),
    "transport_allowance": ("Transport Allowance", "Subsidiu Transporte"),
    "other": ("Other Earnings", "Rendimentu Seluk"),
    "subsidio_anual": ("Annual Subsidy (13th Month)", "Subsidiu Anual (13º Mês)"),
}

_DEDUCTION_LABELS: Dict[str, Tuple[str, str]] = {
    "absence": ("Absence Deduction", "Dedusaun Ausensia"),
    "late_arrival": ("Late Arrival Deduction", "Dedusaun Tarde Mai"),
    "income_tax": ("Withholding Income Tax (WIT)", "Impostu Retidu (WIT)"),
    "inss_employee": ("INSS Employee", "INSS Trabalhador"),
    "loan_repayment": ("Loan Repayment", "Pagamentu Empréstimu"),
    "advance_repayment": ("Advance Repayment", "Pagamentu Adiantamentu"),
    "court_order": ("Court Order", "Ordem Tribunal"),
    "other": ("Other Deductions", "Dedusaun Seluk"),
}

STATUTORY_DEDUCTIONS = frozenset({"income_tax", "inss_employee", "court_order"})


def resolve_frequency(payroll_input: PayrollInput) -> PayFrequency:
    """Check the structural requirements of an input and return its pay frequency."""

    if not payroll_input.employee_id or not str(payroll_input.employee_id).strip():
        raise PayrollInputError("employee_id is required")
    frequency = PayFrequency.parse(payroll_input.pay_frequency)
    if payroll_input.is_hourly and _blank(payroll_input.hourly_rate):
        raise PayrollInputError(f"Hourly employee {payroll_input.employee_id} has no hourly_rate")
    return frequency


def _blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _positive(value: object) -> Decimal:
    amount = to_decimal(value)
    return amount if amount > 0 else ZERO


def periods_in_month(frequency: PayFrequency, payroll_input: PayrollInput, rules: JurisdictionRules) -> Decimal:
    """Pay periods the monthly figures are spread over for this run."""

    if frequency is not PayFrequency.MONTHLY and payroll_input.total_periods_in_month:
        return Decimal(int(payroll_input.total_periods_in_month))
    return rules.pay_period(frequency.value).periods_per_month


def calculate_hourly_rate(monthly_salary: object, rules: JurisdictionRules | None = None) -> Decimal:
    """Hourly equivalent of a monthly salary over the standard monthly hours."""

    rules = rules or load_rules()
    monthly_hours = rules.working_hours.standard_monthly_hours
    if monthly_hours <= 0:
        return rules.rounding.round(ZERO, "rate")
    return rules.rounding.round(to_decimal(monthly_salary) / monthly_hours, "rate")


def _employee_rate(payroll_input: PayrollInput, rules: JurisdictionRules) -> Decimal:
    if payroll_input.is_hourly:
        return rules.rounding.round(_positive(payroll_input.hourly_rate), "rate")
    return calculate_hourly_rate(_positive(payroll_input.monthly_salary), rules)


def _regular_pay(
    payroll_input: PayrollInput, frequency: PayFrequency, hourly_rate: Decimal, rules: JurisdictionRules
) -> Decimal:
    if payroll_input.is_hourly:
        return rules.rounding.round(hourly_rate * _positive(payroll_input.regular_hours), "line")
    periods = periods_in_month(frequency, payroll_input, rules)
    if periods <= 0:
        return rules.rounding.round(ZERO, "line")
    return rules.rounding.round(_positive(payroll_input.monthly_salary) / periods, "line")


class _Earnings:
    """Accumulates earning lines and classifies them against the rule table."""

    def __init__(self, rules: JurisdictionRules) -> None:
        self._rules = rules
        self.lines: List[EarningLine] = []
        self.amounts: Dict[str, Decimal] = {}

    def add(
        self,
        kind: str,
        amount: Decimal,
        *,
        hours: Optional[Decimal] = None,
        rate: Optional[Decimal] = None,
        always: bool = False,
    ) -> Decimal:
        amount = self._rules.rounding.round(amount, "line")
        self.amounts[kind] = amount
        if amount <= 0 and not always:
            return amount
        description, description_tl = _EARNING_LABELS[kind]
        self.lines.append(
            EarningLine(
                kind=kind,
                description=description,
                description_tl=description_tl,
                amount=amount,
                taxable=kind not in self._rules.income_tax.excluded_earnings,
                inss_base=kind not in self._rules.inss.excluded_earnings,
                hours=hours,
                rate=rate,
            )
        )
        return amount

    def premium(self, kind: str, hourly_rate: Decimal, hours: Decimal, multiplier: Decimal) -> Decimal:
        if hours <= 0:
            self.amounts[kind] = self._rules.rounding.round(ZERO, "line")
            return self.amounts[kind]
        return self.add(
            kind,
            hourly_rate * hours * multiplier,
            hours=hours,
            rate=self._rules.rounding.round(hourly_rate * multiplier, "rate"),
        )

    def total(self, *, taxable: bool = False, inss_base: bool = False) -> Decimal:
        total = ZERO
        for line in self.lines:
            if taxable and not line.taxable:
                continue
            if inss_base and not line.inss_base:
                continue
            total += line.amount
        return total


def _deduction(kind: str, amount: Decimal, description: Optional[str] = None) -> DeductionLine:
    label, label_tl = _DEDUCTION_LABELS[kind]
    return DeductionLine(
        kind=kind,
        description=description or label,
        description_tl=label_tl,
        amount=amount,
        statutory=kind in STATUTORY_DEDUCTIONS,
    )


def calculate_income_tax(
    taxable_income: Decimal,
    is_resident: bool,
    periods: Decimal,
    rules: JurisdictionRules,
) -> Tuple[Decimal, Decimal]:
    """Return ``(tax, period_threshold)`` for a period's taxable income."""

    band = rules.income_tax.band_for(is_resident)
    threshold = ZERO
    if band.monthly_threshold > 0 and periods > 0:
        threshold = rules.rounding.round(band.monthly_threshold / periods, "line")
    if taxable_income <= 0:
        return rules.rounding.round(ZERO, "tax"), threshold
    above = max(ZERO, taxable_income - threshold)
    return rules.rounding.round(above * band.rate, "tax"), threshold


def _apply_deduction_cap(
    deductions: List[DeductionLine], gross_pay: Decimal, rules: JurisdictionRules, warnings: List[str]
) -> List[DeductionLine]:
    cap = rules.voluntary_deduction_cap
    if cap.ratio is None:
        return deductions
    voluntary = [line for line in deductions if not line.statutory]
    voluntary_total = sum((line.amount for line in voluntary), ZERO)
    limit = rules.rounding.round(gross_pay * cap.ratio, "line")
    if not voluntary or voluntary_total <= limit:
        return deductions
    percent = (cap.ratio * 100).normalize()
    if not cap.enforce:
        warnings.append(
            f"Voluntary deductions (${format_amount(voluntary_total)}) exceed the {percent:f}% cap "
            f"(${format_amount(limit)})."
        )
        return deductions
    warnings.append(
        f"Voluntary deductions (${format_amount(voluntary_total)}) exceed the {percent:f}% cap "
        f"(${format_amount(limit)}). Excess deductions have been reduced proportionally."
    )
    ratio = limit / voluntary_total if voluntary_total > 0 else ZERO
    adjusted: List[DeductionLine] = []
    for line in deductions:
        if line.statutory:
            adjusted.append(line)
            continue
        adjusted.append(
            DeductionLine(
                kind=line.kind,
                description=line.description,
                description_tl=line.description_tl,
                amount=rules.rounding.round(line.amount * ratio, "line"),
                statutory=False,
            )
        )
    return adjusted


def calculate_payroll(payroll_input: PayrollInput, rules: JurisdictionRules | None = None) -> PayrollResult:
    """Compute the full gross-to-net breakdown for one employee.

    Raises :class:`PayrollInputError` for inputs that cannot be calculated at all
    (missing employee id, missing or unknown pay frequency, hourly employee without
    a rate). Anything merely unusual is reported through ``warnings``.
    """

    rules = rules or load_rules()
    frequency = resolve_frequency(payroll_input)
    rounding = rules.rounding
    warnings: List[str] = []

    hourly_rate = _employee_rate(payroll_input, rules)
    premiums = rules.premiums
    earnings = _Earnings(rules)

    # Earnings
    regular_hours = _positive(payroll_input.regular_hours)
    earnings.add(
        "regular",
        _regular_pay(payroll_input, frequency, hourly_rate, rules),
        hours=regular_hours,
        rate=hourly_rate,
        always=True,
    )
    earnings.premium("overtime", hourly_rate, _positive(payroll_input.overtime_hours), premiums.overtime)
    earnings.premium("night_shift", hourly_rate, _positive(payroll_input.night_shift_hours), premiums.night_shift)
    earnings.premium("holiday", hourly_rate, _positive(payroll_input.holiday_hours), premiums.public_holiday)
    earnings.premium("rest_day", hourly_rate, _positive(payroll_input.rest_day_hours), premiums.rest_day)

    sick_days = int(_positive(payroll_input.sick_days_used))
    ytd_sick_days = int(_positive(payroll_input.ytd_sick_days_used))
    earnings.add("sick_pay", calculate_sick_pay(hourly_rate, sick_days, ytd_sick_days, rules))
    if sick_days > 0:
        total_sick_days = ytd_sick_days + sick_days
        if total_sick_days >= rules.sick_leave.warning_threshold_days:
            warnings.append(
                f"Employee has used {total_sick_days} of {rules.sick_leave.total_days} annual sick days."
            )

    earnings.add("bonus", _positive(payroll_input.bonus))
    earnings.add("commission", _positive(payroll_input.commission))
    earnings.add("per_diem", _positive(payroll_input.per_diem))
    earnings.add("food_allowance", _positive(payroll_input.food_allowance))
    earnings.add("transport_allowance", _positive(payroll_input.transport_allowance))
    earnings.add("other", _positive(payroll_input.other_earnings))
    earnings.add("subsidio_anual", _positive(payroll_input.subsidio_anual))

    gross_pay = rounding.round(earnings.total(), "total")

    # Time-based deductions reduce both the tax base and the contribution base.
    absence = calculate_absence_deduction(hourly_rate, _positive(payroll_input.absence_hours), rules)
    late = calculate_late_deduction(hourly_rate, _positive(payroll_input.late_arrival_minutes), rules)

    taxable_income = max(ZERO, earnings.total(taxable=True) - absence - late)
    periods = periods_in_month(frequency, payroll_input, rules)
    tax_info = payroll_input.tax_info
    if tax_info.has_tax_exemption:
        income_tax = rounding.round(ZERO, "tax")
        warnings.append("Tax exemption applied - no income tax withheld.")
    else:
        income_tax, threshold = calculate_income_tax(taxable_income, tax_info.is_resident, periods, rules)
        if tax_info.is_resident and taxable_income <= threshold:
            warnings.append(
                f"Income below ${format_amount(threshold)} threshold - no income tax applied."
            )

    if _blank(payroll_input.inss_contribution_base):
        contribution_base = earnings.total(inss_base=True) - absence - late
    else:
        contribution_base = to_decimal(payroll_input.inss_contribution_base)
    inss = calculate_inss(contribution_base, rules)

    deductions: List[DeductionLine] = []
    if absence > 0:
        deductions.append(_deduction("absence", absence))
    if late > 0:
        deductions.append(_deduction("late_arrival", late))
    if income_tax > 0:
        deductions.append(_deduction("income_tax", income_tax))
    if inss.employee > 0:
        percent = (rules.inss.employee_rate * 100).normalize()
        deductions.append(_deduction("inss_employee", inss.employee, f"INSS Employee ({percent:f}%)"))
    for kind, raw in (
        ("loan_repayment", payroll_input.loan_repayment),
        ("advance_repayment", payroll_input.advance_repayment),
        ("court_order", payroll_input.court_orders),
        ("other", payroll_input.other_deductions),
    ):
        amount = rounding.round(_positive(raw), "line")
        if amount > 0:
            deductions.append(_deduction(kind, amount))

    deductions = _apply_deduction_cap(deductions, gross_pay, rules, warnings)
    by_kind: Dict[str, Decimal] = {line.kind: line.amount for line in deductions}
    zero = rounding.round(ZERO, "line")

    total_deductions = rounding.round(sum((line.amount for line in deductions), ZERO), "total")
    net_pay = gross_pay - total_deductions
    total_employer_cost = gross_pay + inss.employer

    if net_pay < 0:
        warnings.append("Net pay is negative. Please review deductions.")
        logger.warning("Negative net pay for employee %s", payroll_input.employee_id)

    amounts = earnings.amounts
    return PayrollResult(
        employee_id=str(payroll_input.employee_id),
        pay_frequency=frequency,
        hourly_rate=hourly_rate,
        regular_pay=amounts["regular"],
        overtime_pay=amounts["overtime"],
        night_shift_pay=amounts["night_shift"],
        holiday_pay=amounts["holiday"],
        rest_day_pay=amounts["rest_day"],
        sick_pay=amounts["sick_pay"],
        bonus=amounts["bonus"],
        commission=amounts["commission"],
        per_diem=amounts["per_diem"],
        food_allowance=amounts["food_allowance"],
        transport_allowance=amounts["transport_allowance"],
        other_earnings=amounts["other"],
        subsidio_anual=amounts["subsidio_anual"],
        gross_pay=gross_pay,
        taxable_income=rounding.round(taxable_income, "line"),
        inss_base=inss.base,
        income_tax=by_kind.get("income_tax", zero),
        inss_employee=by_kind.get("inss_employee", zero),
        loan_repayment=by_kind.get("loan_repayment", zero),
        advance_repayment=by_kind.get("advance_repayment", zero),
        court_orders=by_kind.get("court_order", zero),
        absence_deduction=by_kind.get("absence", zero),
        late_deduction=by_kind.get("late_arrival", zero),
        other_deductions=by_kind.get("other", zero),
        inss_employer=inss.employer,
        total_deductions=total_deductions,
        net_pay=net_pay,
        total_employer_cost=total_employer_cost,
        earnings=tuple(earnings.lines),
        deductions=tuple(deductions),
        new_ytd_gross_pay=rounding.round(to_decimal(payroll_input.ytd_gross_pay) + gross_pay, "total"),
        new_ytd_income_tax=rounding.round(to_decimal(payroll_input.ytd_income_tax) + income_tax, "total"),
        new_ytd_inss_employee=rounding.round(
            to_decimal(payroll_input.ytd_inss_employee) + inss.employee, "total"
        ),
        warnings=tuple(warnings),
        rules_version=rules.version,
    )


__all__ = [
    "STATUTORY_DEDUCTIONS",
    "calculate_hourly_rate",
    "calculate_income_tax",
    "calculate_payroll",
    "periods_in_month",
    "resolve_frequency",
]
