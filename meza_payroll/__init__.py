"""Timor-Leste payroll calculation and bank transfer file generation."""

from .banking import (
    BankCode,
    BankFileError,
    BankFileResult,
    BankTransferInput,
    Employee,
    PayrollRecord,
    PayrollRun,
    UnsupportedBankError,
    generate_all_bank_files,
    generate_bank_file,
    group_records_by_bank,
)
from .engine import (
    PayFrequency,
    PayrollInput,
    PayrollInputError,
    PayrollResult,
    TaxProfile,
    calculate_payroll,
    validate_payroll_input,
)
from .rules import JurisdictionRules, RuleFormatError, RuleNotFoundError, load_rules

__version__ = "0.1.0"

__all__ = [
    "BankCode",
    "BankFileError",
    "BankFileResult",
    "BankTransferInput",
    "Employee",
    "JurisdictionRules",
    "PayFrequency",
    "PayrollInput",
    "PayrollInputError",
    "PayrollRecord",
    "PayrollResult",
    "PayrollRun",
    "RuleFormatError",
    "RuleNotFoundError",
    "TaxProfile",
    "UnsupportedBankError",
    "calculate_payroll",
    "generate_all_bank_files",
    "generate_bank_file",
    "group_records_by_bank",
    "load_rules",
    "validate_payroll_input",
]
