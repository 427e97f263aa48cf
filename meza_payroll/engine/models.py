"""Payroll engine inputs and results."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from ..money import to_float


class PayrollInputError(ValueError):
    """Raised when a payroll input is structurally unusable."""


class PayFrequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value: Any) -> "PayFrequency":
        if isinstance(value, cls):
            return value
        if value is None or (isinstance(value, str) and not value.strip()):
            raise PayrollInputError("pay_frequency is required")
        key = str(value).strip().lower().replace("-", "").replace("_", "")
        if key == "fortnightly":
            key = "biweekly"
        for member in cls:
            if member.value == key:
                return member
        raise PayrollInputError(f"Unsupported pay frequency '{value}'")


@dataclass(frozen=True)
class TaxProfile:
    is_resident: bool = True
    has_tax_exemption: bool = False


@dataclass(frozen=True)
class PayrollInput:
    """One employee's finished inputs for one pay period.

    Monetary and hour fields accept ``Decimal``, ``int``, ``float`` or numeric strings.
    """

    employee_id: str
    pay_frequency: Optional[PayFrequency | str] = None
    monthly_salary: Any = 0
    is_hourly: bool = False
    hourly_rate: Any = None

    regular_hours: Any = 0
    overtime_hours: Any = 0
    night_shift_hours: Any = 0
    holiday_hours: Any = 0
    rest_day_hours: Any = 0
    absence_hours: Any = 0
    late_arrival_minutes: Any = 0

    sick_days_used: int = 0
    ytd_sick_days_used: int = 0

    bonus: Any = 0
    commission: Any = 0
    per_diem: Any = 0
    food_allowance: Any = 0
    transport_allowance: Any = 0
    other_earnings: Any = 0
    subsidio_anual: Any = 0

    tax_info: TaxProfile = field(default_factory=TaxProfile)
    inss_contribution_base: Any = None

    loan_repayment: Any = 0
    advance_repayment: Any = 0
    court_orders: Any = 0
    other_deductions: Any = 0

    ytd_gross_pay: Any = 0
    ytd_income_tax: Any = 0
    ytd_inss_employee: Any = 0

    months_worked_this_year: int = 12
    hire_date: Optional[date | str] = None

    # Weekly and biweekly runs: which period of the month and how many periods it has.
    period_number: Optional[int] = None
    total_periods_in_month: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PayrollInput":
        """Build an input from a plain mapping, ignoring unknown keys."""

        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {key: value for key, value in data.items() if key in known}
        # A missing id is rejected by calculate_payroll as PayrollInputError.
        values.setdefault("employee_id", "")
        tax_info = data.get("tax_info")
        if isinstance(tax_info, Mapping):
            values["tax_info"] = TaxProfile(
                is_resident=bool(tax_info.get("is_resident", True)),
                has_tax_exemption=bool(tax_info.get("has_tax_exemption", False)),
            )
        elif "is_resident" in data or "has_tax_exemption" in data:
            values["tax_info"] = TaxProfile(
                is_resident=bool(data.get("is_resident", True)),
                has_tax_exemption=bool(data.get("has_tax_exemption", False)),
            )
        return cls(**values)


@dataclass(frozen=True)
class EarningLine:
    kind: str
    description: str
    description_tl: str
    amount: Decimal
    taxable: bool
    inss_base: bool
    hours: Optional[Decimal] = None
    rate: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "description": self.description,
            "description_tl": self.description_tl,
            "hours": float(self.hours) if self.hours is not None else None,
            "rate": to_float(self.rate) if self.rate is not None else None,
            "amount": to_float(self.amount),
            "taxable": self.taxable,
            "inss_base": self.inss_base,
        }


@dataclass(frozen=True)
class DeductionLine:
    kind: str
    description: str
    description_tl: str
    amount: Decimal
    statutory: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "description": self.description,
            "description_tl": self.description_tl,
            "amount": to_float(self.amount),
            "statutory": self.statutory,
        }


@dataclass(frozen=True)
class PayrollResult:
    """Gross-to-net breakdown for one employee and one period.

    ``net_pay == gross_pay - total_deductions`` and
    ``total_employer_cost == gross_pay + inss_employer`` hold exactly.
    """

    employee_id: str
    pay_frequency: PayFrequency
    hourly_rate: Decimal

    regular_pay: Decimal
    overtime_pay: Decimal
    night_shift_pay: Decimal
    holiday_pay: Decimal
    rest_day_pay: Decimal
    sick_pay: Decimal
    bonus: Decimal
    commission: Decimal
    per_diem: Decimal
    food_allowance: Decimal
    transport_allowance: Decimal
    other_earnings: Decimal
    subsidio_anual: Decimal

    gross_pay: Decimal
    taxable_income: Decimal
    inss_base: Decimal

    income_tax: Decimal
    inss_employee: Decimal
    loan_repayment: Decimal
    advance_repayment: Decimal
    court_orders: Decimal
    absence_deduction: Decimal
    late_deduction: Decimal
    other_deductions: Decimal

    inss_employer: Decimal

    total_deductions: Decimal
    net_pay: Decimal
    total_employer_cost: Decimal

    earnings: Tuple[EarningLine, ...]
    deductions: Tuple[DeductionLine, ...]

    new_ytd_gross_pay: Decimal
    new_ytd_income_tax: Decimal
    new_ytd_inss_employee: Decimal

    warnings: Tuple[str, ...] = ()
    rules_version: str = ""

    @property
    def has_negative_net_pay(self) -> bool:
        return self.net_pay < 0

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "employee_id": self.employee_id,
            "pay_frequency": self.pay_frequency.value,
            "rules_version": self.rules_version,
        }
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, Decimal):
                payload[item.name] = to_float(value)
        payload["earnings"] = [line.to_dict() for line in self.earnings]
        payload["deductions"] = [line.to_dict() for line in self.deductions]
        payload["warnings"] = list(self.warnings)
        payload["has_negative_net_pay"] = self.has_negative_net_pay
        return payload


__all__ = [
    "DeductionLine",
    "EarningLine",
    "PayFrequency",
    "PayrollInput",
    "PayrollInputError",
    "PayrollResult",
    "TaxProfile",
]
