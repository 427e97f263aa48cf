"""Bulk salary transfer files for Timor-Leste banks."""

from .formats import BANK_FORMATS, BankFormat, format_for
from .generator import (
    BankFileBatch,
    bank_file_name,
    generate_all_bank_files,
    generate_bank_file,
    payment_reference,
)
from .grouping import group_records_by_bank
from .models import (
    BankCode,
    BankFileError,
    BankFileResult,
    BankGrouping,
    BankTransferInput,
    BankTransferLine,
    BankTransferSummary,
    Employee,
    PayrollRecord,
    PayrollRun,
    UnassignedRecord,
    UnsupportedBankError,
)

__all__ = [
    "BANK_FORMATS",
    "BankCode",
    "BankFileBatch",
    "BankFileError",
    "BankFileResult",
    "BankFormat",
    "BankGrouping",
    "BankTransferInput",
    "BankTransferLine",
    "BankTransferSummary",
    "Employee",
    "PayrollRecord",
    "PayrollRun",
    "UnassignedRecord",
    "UnsupportedBankError",
    "bank_file_name",
    "format_for",
    "generate_all_bank_files",
    "generate_bank_file",
    "group_records_by_bank",
    "payment_reference",
]
