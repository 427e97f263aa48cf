"""Pydantic request models for the payroll service."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field

NonNegative = Annotated[Decimal, Field(ge=0)]


class TaxInfoModel(BaseModel):
    is_resident: bool = True
    has_tax_exemption: bool = False


class PayrollInputModel(BaseModel):
    employee_id: str = Field(..., description="Employee identifier")
    pay_frequency: str = Field(..., description="weekly, biweekly or monthly")
    monthly_salary: NonNegative = Decimal("0")
    is_hourly: bool = False
    hourly_rate: Optional[Decimal] = Field(None, ge=0)

    regular_hours: NonNegative = Decimal("0")
    overtime_hours: NonNegative = Decimal("0")
    night_shift_hours: NonNegative = Decimal("0")
    holiday_hours: NonNegative = Decimal("0")
    rest_day_hours: NonNegative = Decimal("0")
    absence_hours: NonNegative = Decimal("0")
    late_arrival_minutes: NonNegative = Decimal("0")

    sick_days_used: int = Field(0, ge=0)
    ytd_sick_days_used: int = Field(0, ge=0)

    bonus: NonNegative = Decimal("0")
    commission: NonNegative = Decimal("0")
    per_diem: NonNegative = Decimal("0")
    food_allowance: NonNegative = Decimal("0")
    transport_allowance: NonNegative = Decimal("0")
    other_earnings: NonNegative = Decimal("0")
    subsidio_anual: NonNegative = Decimal("0")

    tax_info: TaxInfoModel = Field(default_factory=TaxInfoModel)
    inss_contribution_base: Optional[Decimal] = Field(None, ge=0)

    loan_repayment: NonNegative = Decimal("0")
    advance_repayment: NonNegative = Decimal("0")
    court_orders: NonNegative = Decimal("0")
    other_deductions: NonNegative = Decimal("0")

    ytd_gross_pay: NonNegative = Decimal("0")
    ytd_income_tax: NonNegative = Decimal("0")
    ytd_inss_employee: NonNegative = Decimal("0")

    months_worked_this_year: int = Field(12, ge=0, le=12)
    hire_date: Optional[date] = None
    period_number: Optional[int] = Field(None, ge=1)
    total_periods_in_month: Optional[int] = Field(None, ge=1)


class PayrollBatchRequest(BaseModel):
    items: List[PayrollInputModel]


class EmployeeModel(BaseModel):
    id: str
    name: str = ""
    employee_number: Optional[str] = None
    bank_code: Optional[str] = None
    bank_name: Optional[str] = None
    bank_account_number: Optional[str] = None


class PayrollRecordModel(BaseModel):
    employee_id: str
    employee_name: str = ""
    # Negative values are accepted here so the generator can refuse them explicitly.
    net_pay: Decimal
    employee_number: Optional[str] = None
    gross_pay: Optional[Decimal] = None


class PayrollRunModel(BaseModel):
    id: str
    period_start: date
    period_end: date
    pay_date: Optional[date] = None


class BankGroupRequest(BaseModel):
    records: List[PayrollRecordModel]
    employees: List[EmployeeModel]


class BankFileRequest(BaseModel):
    payroll_run: PayrollRunModel
    records: List[PayrollRecordModel]
    employees: List[EmployeeModel]
    value_date: str = Field(..., description="ISO date the funds should move")
    company_name: Optional[str] = None
    company_account_number: Optional[str] = None
    roll_to_business_day: Optional[bool] = None


__all__ = [
    "BankFileRequest",
    "BankGroupRequest",
    "EmployeeModel",
    "PayrollBatchRequest",
    "PayrollInputModel",
    "PayrollRecordModel",
    "PayrollRunModel",
    "TaxInfoModel",
]
