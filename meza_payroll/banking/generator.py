"""Build bank transfer files from a payroll run's records."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from ..business_days import coerce_date, next_business_day
from ..money import ZERO, round_cents, to_decimal
from .formats import format_for
from .grouping import group_records_by_bank, index_employees
from .models import (
    BankCode,
    BankFileError,
    BankFileResult,
    BankGrouping,
    BankTransferInput,
    BankTransferLine,
    BankTransferSummary,
    PayrollRecord,
    UnassignedRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BankFileBatch:
    files: Tuple[BankFileResult, ...]
    unassigned: Tuple[UnassignedRecord, ...] = ()
    skipped_banks: Tuple[BankCode, ...] = field(default_factory=tuple)

    def to_dict(self, include_content: bool = True) -> Dict[str, Any]:
        return {
            "files": [item.to_dict(include_content=include_content) for item in self.files],
            "unassigned": [item.to_dict() for item in self.unassigned],
            "skipped_banks": [code.value for code in self.skipped_banks],
        }


def payment_reference(period: str, record: PayrollRecord) -> str:
    return f"SALARY-{period}-{record.employee_number or record.employee_id}"


def bank_file_name(bank_code: BankCode, period: str, value_date: date, extension: str) -> str:
    return f"{bank_code.value}_SALARY_{period}_{value_date.strftime('%Y%m%d')}.{extension}"


def _resolve_value_date(transfer_input: BankTransferInput) -> date:
    try:
        value_date = coerce_date(transfer_input.value_date)
    except (TypeError, ValueError) as exc:
        raise BankFileError(f"Invalid value date {transfer_input.value_date!r}") from exc
    if transfer_input.roll_to_business_day:
        rolled = next_business_day(value_date)
        if rolled != value_date:
            logger.info("Value date %s rolled to business day %s", value_date, rolled)
        return rolled
    return value_date


def _check_company(transfer_input: BankTransferInput) -> Tuple[str, str]:
    account = (transfer_input.company_account_number or "").strip()
    name = (transfer_input.company_name or "").strip()
    if not account:
        raise BankFileError("Company debit account number is required to generate a bank file")
    if not name:
        raise BankFileError("Company name is required to generate a bank file")
    return name, account


def _build_file(bank_code: BankCode, transfer_input: BankTransferInput, grouping: BankGrouping) -> BankFileResult:
    company_name, company_account = _check_company(transfer_input)
    value_date = _resolve_value_date(transfer_input)
    records = grouping.records_for(bank_code)
    if not records:
        raise BankFileError(f"No payroll records for bank {bank_code.value}")

    employees = index_employees(transfer_input.employees)
    period = transfer_input.payroll_run.period_label
    lines: List[BankTransferLine] = []
    excluded: List[str] = []
    for record in records:
        amount = round_cents(record.net_pay)
        if amount < 0:
            raise BankFileError(
                f"Employee {record.employee_id} has negative net pay {amount}; resolve it before paying"
            )
        if amount == 0:
            excluded.append(record.employee_id)
            continue
        employee = employees[record.employee_id]
        account_number = (employee.bank_account_number or "").strip()
        if not account_number:
            raise BankFileError(f"Employee {record.employee_id} has no bank account number")
        lines.append(
            BankTransferLine(
                account_number=account_number,
                account_name=record.employee_name or employee.name,
                amount=amount,
                reference=payment_reference(period, record),
                employee_id=record.employee_id,
            )
        )
    if not lines:
        raise BankFileError(f"No payable records for bank {bank_code.value}")

    line_total = round_cents(sum((line.amount for line in lines), ZERO))
    record_total = round_cents(sum((to_decimal(record.net_pay) for record in records), Decimal("0")))
    if line_total != record_total:
        raise BankFileError(
            f"{bank_code.value} file total {line_total} does not match payroll net pay {record_total}"
        )

    summary = BankTransferSummary(
        bank_code=bank_code,
        bank_name=bank_code.display_name,
        lines=tuple(lines),
        total_amount=line_total,
        value_date=value_date,
        payroll_period=period,
    )
    layout = format_for(bank_code)
    content = layout.render(summary, company_name, company_account)
    logger.info(
        "Generated %s bank file for run %s: %d transfers totalling %s",
        bank_code.value,
        transfer_input.payroll_run.id,
        summary.transaction_count,
        line_total,
    )
    return BankFileResult(
        bank_code=bank_code,
        content=content,
        file_name=bank_file_name(bank_code, period, value_date, layout.extension),
        mime_type=layout.mime_type,
        summary=summary,
        excluded_zero_pay=tuple(excluded),
    )


def generate_bank_file(bank_code: Any, transfer_input: BankTransferInput) -> BankFileResult:
    """Generate one bank's transfer file.

    Raises :class:`BankFileError` (or :class:`UnsupportedBankError`) when the file
    cannot be produced; partial content is never returned.
    """

    code = BankCode.parse(bank_code)
    grouping = group_records_by_bank(transfer_input.records, transfer_input.employees)
    return _build_file(code, transfer_input, grouping)


def generate_all_bank_files(transfer_input: BankTransferInput) -> BankFileBatch:
    """One file per bank with payable records; banks without any are skipped."""

    _check_company(transfer_input)
    grouping = group_records_by_bank(transfer_input.records, transfer_input.employees)
    files: List[BankFileResult] = []
    skipped: List[BankCode] = []
    for code in BankCode:
        records = grouping.records_for(code)
        if not records or all(round_cents(record.net_pay) == 0 for record in records):
            skipped.append(code)
            continue
        files.append(_build_file(code, transfer_input, grouping))
    return BankFileBatch(files=tuple(files), unassigned=tuple(grouping.unassigned), skipped_banks=tuple(skipped))


__all__ = [
    "BankFileBatch",
    "bank_file_name",
    "generate_all_bank_files",
    "generate_bank_file",
    "payment_reference",
]
