"""Payroll records, employees and bank transfer artefacts."""
from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..business_days import coerce_date
from ..money import round_cents, to_decimal, to_float


class BankFileError(ValueError):
    """Raised when a bank file cannot be produced; no content is returned."""


class UnsupportedBankError(BankFileError):
    """Raised for a bank code outside the supported set."""


class BankCode(str, Enum):
    BNU = "BNU"
    MANDIRI = "MANDIRI"
    ANZ = "ANZ"
    BNCTL = "BNCTL"

    @property
    def display_name(self) -> str:
        return _BANK_NAMES[self]

    @classmethod
    def resolve(cls, value: Any) -> Optional["BankCode"]:
        """Map a bank code or a free-text bank name to a code; ``None`` when unknown."""

        if isinstance(value, cls):
            return value
        if value is None:
            return None
        text = str(value).strip().upper()
        if not text:
            return None
        for member in cls:
            if text == member.value:
                return member
        folded = _fold(text)
        for member, keywords in _BANK_KEYWORDS:
            if any(keyword in folded for keyword in keywords):
                return member
        return None

    @classmethod
    def parse(cls, value: Any) -> "BankCode":
        """Strict lookup by code, raising :class:`UnsupportedBankError`."""

        if isinstance(value, cls):
            return value
        text = str(value or "").strip().upper()
        for member in cls:
            if text == member.value:
                return member
        raise UnsupportedBankError(f"Unsupported bank code '{value}'")


_BANK_NAMES = {
    BankCode.BNU: "Banco Nacional Ultramarino",
    BankCode.MANDIRI: "Bank Mandiri (Timor-Leste)",
    BankCode.ANZ: "ANZ Bank",
    BankCode.BNCTL: "Banco Nacional de Comércio de Timor-Leste",
}

# Checked in order against an accent-folded, upper-case bank name.
_BANK_KEYWORDS = (
    (BankCode.BNU, ("BNU", "ULTRAMARINO")),
    (BankCode.MANDIRI, ("MANDIRI",)),
    (BankCode.ANZ, ("ANZ",)),
    (BankCode.BNCTL, ("BNCTL", "COMERCIO")),
)


def _fold(text: str) -> str:
    normalised = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in normalised if not unicodedata.combining(ch))


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


@dataclass(frozen=True)
class Employee:
    """Bank metadata for one employee at file-generation time."""

    id: str
    name: str = ""
    employee_number: Optional[str] = None
    bank_code: Optional[str] = None
    bank_name: Optional[str] = None
    bank_account_number: Optional[str] = None

    @property
    def bank_designation(self) -> str:
        return _text(self.bank_code) or _text(self.bank_name)

    @property
    def resolved_bank(self) -> Optional[BankCode]:
        return BankCode.resolve(self.bank_code) or BankCode.resolve(self.bank_name)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Employee":
        return cls(
            id=_text(data.get("id") or data.get("employee_id")),
            name=_text(data.get("name")),
            employee_number=_text(data.get("employee_number")) or None,
            bank_code=_text(data.get("bank_code")) or None,
            bank_name=_text(data.get("bank_name")) or None,
            bank_account_number=_text(data.get("bank_account_number")) or None,
        )


@dataclass(frozen=True)
class PayrollRecord:
    """A persisted, already-calculated payroll line for one employee."""

    employee_id: str
    employee_name: str
    net_pay: Decimal
    employee_number: Optional[str] = None
    gross_pay: Optional[Decimal] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PayrollRecord":
        gross = data.get("gross_pay")
        return cls(
            employee_id=_text(data.get("employee_id")),
            employee_name=_text(data.get("employee_name")),
            net_pay=round_cents(data.get("net_pay")),
            employee_number=_text(data.get("employee_number")) or None,
            gross_pay=round_cents(gross) if gross is not None else None,
        )

    @classmethod
    def from_result(cls, result: Any, employee_name: str, employee_number: Optional[str] = None) -> "PayrollRecord":
        """Record for a :class:`~meza_payroll.engine.PayrollResult`."""

        return cls(
            employee_id=result.employee_id,
            employee_name=employee_name,
            net_pay=result.net_pay,
            employee_number=employee_number,
            gross_pay=result.gross_pay,
        )


@dataclass(frozen=True)
class PayrollRun:
    id: str
    period_start: date
    period_end: date
    pay_date: Optional[date] = None

    @property
    def period_label(self) -> str:
        """``MMMYYYY`` of the period end, e.g. ``JAN2025``."""

        return format_period(self.period_end)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PayrollRun":
        pay_date = data.get("pay_date")
        return cls(
            id=_text(data.get("id")),
            period_start=coerce_date(data["period_start"]),
            period_end=coerce_date(data["period_end"]),
            pay_date=coerce_date(pay_date) if pay_date else None,
        )


_MONTHS = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")


def format_period(value: date) -> str:
    return f"{_MONTHS[value.month - 1]}{value.year}"


@dataclass(frozen=True)
class BankTransferLine:
    account_number: str
    account_name: str
    amount: Decimal
    reference: str
    employee_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_number": self.account_number,
            "account_name": self.account_name,
            "amount": to_float(self.amount),
            "reference": self.reference,
            "employee_id": self.employee_id,
        }


@dataclass(frozen=True)
class BankTransferSummary:
    bank_code: BankCode
    bank_name: str
    lines: Tuple[BankTransferLine, ...]
    total_amount: Decimal
    value_date: date
    payroll_period: str

    @property
    def transaction_count(self) -> int:
        return len(self.lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bank_code": self.bank_code.value,
            "bank_name": self.bank_name,
            "lines": [line.to_dict() for line in self.lines],
            "total_amount": to_float(self.total_amount),
            "transaction_count": self.transaction_count,
            "value_date": self.value_date.isoformat(),
            "payroll_period": self.payroll_period,
        }


@dataclass(frozen=True)
class BankFileResult:
    """In-memory bank file; persisting or downloading it is the caller's job."""

    bank_code: BankCode
    content: str
    file_name: str
    mime_type: str
    summary: BankTransferSummary
    excluded_zero_pay: Tuple[str, ...] = ()

    @property
    def record_count(self) -> int:
        return self.summary.transaction_count

    def to_dict(self, include_content: bool = True) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "bank_code": self.bank_code.value,
            "file_name": self.file_name,
            "mime_type": self.mime_type,
            "record_count": self.record_count,
            "excluded_zero_pay": list(self.excluded_zero_pay),
            "summary": self.summary.to_dict(),
        }
        if include_content:
            payload["content"] = self.content
        return payload


@dataclass(frozen=True)
class BankTransferInput:
    payroll_run: PayrollRun
    records: Tuple[PayrollRecord, ...]
    employees: Tuple[Employee, ...]
    value_date: Any
    company_name: str
    company_account_number: str
    roll_to_business_day: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", tuple(self.records))
        object.__setattr__(self, "employees", tuple(self.employees))


UNASSIGNED_EMPLOYEE_NOT_FOUND = "employee_not_found"
UNASSIGNED_MISSING_BANK = "missing_bank"
UNASSIGNED_UNSUPPORTED_BANK = "unsupported_bank"


@dataclass(frozen=True)
class UnassignedRecord:
    record: PayrollRecord
    reason: str
    bank_designation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employee_id": self.record.employee_id,
            "employee_name": self.record.employee_name,
            "net_pay": to_float(self.record.net_pay),
            "reason": self.reason,
            "bank": self.bank_designation or None,
        }


@dataclass(frozen=True)
class BankGrouping:
    """Records partitioned by bank, plus the ones no bank could be resolved for."""

    buckets: Dict[BankCode, List[PayrollRecord]] = field(default_factory=dict)
    unassigned: List[UnassignedRecord] = field(default_factory=list)

    def records_for(self, bank_code: BankCode) -> List[PayrollRecord]:
        return list(self.buckets.get(bank_code, []))

    def banks_with_records(self) -> List[BankCode]:
        return [code for code in BankCode if self.buckets.get(code)]

    def total_for(self, bank_code: BankCode) -> Decimal:
        return round_cents(sum((to_decimal(r.net_pay) for r in self.records_for(bank_code)), Decimal("0")))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "buckets": {
                code.value: [
                    {
                        "employee_id": record.employee_id,
                        "employee_name": record.employee_name,
                        "net_pay": to_float(record.net_pay),
                    }
                    for record in self.buckets.get(code, [])
                ]
                for code in BankCode
            },
            "totals": {code.value: to_float(self.total_for(code)) for code in BankCode},
            "unassigned": [item.to_dict() for item in self.unassigned],
        }


__all__ = [
    "BankCode",
    "BankFileError",
    "BankFileResult",
    "BankGrouping",
    "BankTransferInput",
    "BankTransferLine",
    "BankTransferSummary",
    "Employee",
    "PayrollRecord",
    "PayrollRun",
    "UNASSIGNED_EMPLOYEE_NOT_FOUND",
    "UNASSIGNED_MISSING_BANK",
    "UNASSIGNED_UNSUPPORTED_BANK",
    "UnassignedRecord",
    "UnsupportedBankError",
    "format_period",
]
