"""Timor-Leste payroll calculation engine."""

from .calculator import (
    STATUTORY_DEDUCTIONS,
    calculate_hourly_rate,
    calculate_income_tax,
    calculate_payroll,
    periods_in_month,
)
from .inss import (
    InssContribution,
    calculate_inss,
    default_inss_optional_contribution_base,
    inss_optional_contribution_bands,
)
from .leave import (
    annual_leave_entitlement,
    calculate_absence_deduction,
    calculate_late_deduction,
    calculate_sick_pay,
    calculate_subsidio_anual,
    sick_pay_rate,
)
from .models import (
    DeductionLine,
    EarningLine,
    PayFrequency,
    PayrollInput,
    PayrollInputError,
    PayrollResult,
    TaxProfile,
)
from .schedules import RunSummary, WeeklyShare, split_monthly_salary_by_weeks, summarize_run
from .validation import validate_payroll_input

__all__ = [
    "STATUTORY_DEDUCTIONS",
    "DeductionLine",
    "EarningLine",
    "InssContribution",
    "PayFrequency",
    "PayrollInput",
    "PayrollInputError",
    "PayrollResult",
    "RunSummary",
    "TaxProfile",
    "WeeklyShare",
    "annual_leave_entitlement",
    "calculate_absence_deduction",
    "calculate_hourly_rate",
    "calculate_income_tax",
    "calculate_inss",
    "calculate_late_deduction",
    "calculate_payroll",
    "calculate_sick_pay",
    "calculate_subsidio_anual",
    "default_inss_optional_contribution_base",
    "inss_optional_contribution_bands",
    "periods_in_month",
    "sick_pay_rate",
    "split_monthly_salary_by_weeks",
    "summarize_run",
    "validate_payroll_input",
]
