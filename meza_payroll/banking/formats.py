"""Per-bank bulk salary transfer layouts.

Each writer turns a :class:`BankTransferSummary` into the text the bank imports.
All layouts use CRLF line endings and two-decimal USD amounts unless the bank
expects integer cents.
"""
from __future__ import annotations

import csv
import io
import unicodedata
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence

from ..money import format_amount, to_cents
from .models import BankCode, BankFileError, BankTransferSummary, UnsupportedBankError

LINE_END = "\r\n"

Writer = Callable[[BankTransferSummary, str, str], str]


@dataclass(frozen=True)
class BankFormat:
    bank_code: BankCode
    extension: str
    mime_type: str
    writer: Writer

    def render(self, summary: BankTransferSummary, company_name: str, company_account: str) -> str:
        return self.writer(summary, company_name, company_account)


def ascii_upper(value: str) -> str:
    """Accent-folded upper-case ASCII, e.g. ``João`` -> ``JOAO``."""

    normalised = unicodedata.normalize("NFKD", value or "")
    stripped = "".join(ch for ch in normalised if not unicodedata.combining(ch))
    return stripped.encode("ascii", "ignore").decode("ascii").upper()


def fixed(value: str, width: int) -> str:
    return value[:width].ljust(width)


def fixed_strict(value: str, width: int, label: str) -> str:
    """Like :func:`fixed` but refuses values that would be cut."""

    if len(value) > width:
        raise BankFileError(f"{label} is {len(value)} characters; the layout allows {width}")
    return value.ljust(width)


def zero_padded(value: int, width: int) -> str:
    text = str(value)
    if len(text) > width:
        raise BankFileError(f"Value {value} does not fit in {width} digits")
    return text.rjust(width, "0")


def _csv(rows: Sequence[Sequence[str]], delimiter: str = ",") -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator=LINE_END)
    writer.writerows(rows)
    return buffer.getvalue()


def write_bnu(summary: BankTransferSummary, company_name: str, company_account: str) -> str:
    """Semicolon-separated ``H`` / ``D`` / ``T`` records."""

    rows: List[List[str]] = [
        [
            "H",
            company_account,
            company_name,
            summary.value_date.strftime("%Y%m%d"),
            str(summary.transaction_count),
            format_amount(summary.total_amount),
        ]
    ]
    for sequence, line in enumerate(summary.lines, start=1):
        rows.append(
            ["D", str(sequence), line.account_number, line.account_name, format_amount(line.amount), line.reference]
        )
    rows.append(["T", str(summary.transaction_count), format_amount(summary.total_amount)])
    return _csv(rows, delimiter=";")


MANDIRI_RECORD_WIDTH = 120
_MANDIRI_AMOUNT_WIDTH = 17


def write_mandiri(summary: BankTransferSummary, company_name: str, company_account: str) -> str:
    """Fixed-width records: ``0`` header, ``1`` detail, ``9`` trailer; amounts in cents."""

    total_cents = to_cents(summary.total_amount)
    records = [
        "0"
        + fixed_strict(company_account, 20, "Debit account")
        + fixed(ascii_upper(company_name), 40)
        + summary.value_date.strftime("%Y%m%d")
        + zero_padded(summary.transaction_count, 6)
        + zero_padded(total_cents, _MANDIRI_AMOUNT_WIDTH)
    ]
    for line in summary.lines:
        records.append(
            "1"
            + fixed_strict(line.account_number, 20, "Account number")
            + fixed(ascii_upper(line.account_name), 40)
            + zero_padded(to_cents(line.amount), _MANDIRI_AMOUNT_WIDTH)
            + "USD"
            + fixed_strict(ascii_upper(line.reference), 30, "Payment reference")
        )
    records.append(
        "9" + zero_padded(summary.transaction_count, 6) + zero_padded(total_cents, _MANDIRI_AMOUNT_WIDTH)
    )
    return "".join(fixed(record, MANDIRI_RECORD_WIDTH) + LINE_END for record in records)


ANZ_COLUMNS = (
    "Debit Account",
    "Value Date",
    "Beneficiary Account",
    "Beneficiary Name",
    "Amount",
    "Currency",
    "Reference",
)


def write_anz(summary: BankTransferSummary, company_name: str, company_account: str) -> str:
    value_date = summary.value_date.strftime("%d/%m/%Y")
    rows: List[Sequence[str]] = [ANZ_COLUMNS]
    for line in summary.lines:
        rows.append(
            [
                company_account,
                value_date,
                line.account_number,
                line.account_name,
                format_amount(line.amount),
                "USD",
                line.reference,
            ]
        )
    return _csv(rows)


BNCTL_COLUMNS = ("No", "Account Number", "Account Name", "Amount", "Reference")


def write_bnctl(summary: BankTransferSummary, company_name: str, company_account: str) -> str:
    rows: List[Sequence[str]] = [
        ["Company", company_name],
        ["Debit Account", company_account],
        ["Value Date", summary.value_date.strftime("%d/%m/%Y")],
        BNCTL_COLUMNS,
    ]
    for sequence, line in enumerate(summary.lines, start=1):
        rows.append(
            [str(sequence), line.account_number, line.account_name, format_amount(line.amount), line.reference]
        )
    rows.append(["TOTAL", "", "", format_amount(summary.total_amount), ""])
    return _csv(rows)


BANK_FORMATS: Dict[BankCode, BankFormat] = {
    BankCode.BNU: BankFormat(BankCode.BNU, "csv", "text/csv", write_bnu),
    BankCode.MANDIRI: BankFormat(BankCode.MANDIRI, "txt", "text/plain", write_mandiri),
    BankCode.ANZ: BankFormat(BankCode.ANZ, "csv", "text/csv", write_anz),
    BankCode.BNCTL: BankFormat(BankCode.BNCTL, "csv", "text/csv", write_bnctl),
}


def format_for(bank_code: BankCode) -> BankFormat:
    try:
        return BANK_FORMATS[bank_code]
    except KeyError as exc:
        raise UnsupportedBankError(f"No file layout registered for bank '{bank_code}'") from exc


__all__ = [
    "ANZ_COLUMNS",
    "BANK_FORMATS",
    "BNCTL_COLUMNS",
    "BankFormat",
    "LINE_END",
    "MANDIRI_RECORD_WIDTH",
    "ascii_upper",
    "fixed_strict",
    "format_for",
    "write_anz",
    "write_bnctl",
    "write_bnu",
    "write_mandiri",
]
