"""Jurisdiction rule tables for the payroll engine."""

from pathlib import Path

from .loader import (
    RuleDocument,
    RuleNotFoundError,
    clear_cache,
    load_rule_documents,
    load_rules,
    rules_version_payload,
)
from .tables import (
    AnnualLeaveStep,
    DeductionCap,
    IncomeTaxRule,
    InssRule,
    JurisdictionRules,
    PayPeriod,
    PremiumRates,
    RuleFormatError,
    SickLeaveRule,
    TaxBand,
    WorkingHours,
)

RULES_DIR = Path(__file__).resolve().parent

__all__ = [
    "RULES_DIR",
    "AnnualLeaveStep",
    "DeductionCap",
    "IncomeTaxRule",
    "InssRule",
    "JurisdictionRules",
    "PayPeriod",
    "PremiumRates",
    "RuleDocument",
    "RuleFormatError",
    "RuleNotFoundError",
    "SickLeaveRule",
    "TaxBand",
    "WorkingHours",
    "clear_cache",
    "load_rule_documents",
    "load_rules",
    "rules_version_payload",
]
