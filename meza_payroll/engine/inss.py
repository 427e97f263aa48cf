"""INSS social security contributions."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List

from ..money import ZERO, to_decimal
from ..rules import JurisdictionRules, load_rules


@dataclass(frozen=True)
class InssContribution:
    base: Decimal
    employee: Decimal
    employer: Decimal

    @property
    def total(self) -> Decimal:
        return self.employee + self.employer


def capped_contribution_base(base: Any, rules: JurisdictionRules | None = None) -> Decimal:
    """Floor the base at zero and apply the table's ceiling, if any."""

    rules = rules or load_rules()
    amount = max(ZERO, to_decimal(base))
    ceiling = rules.inss.ceiling
    if ceiling is not None and amount > ceiling:
        amount = ceiling
    return rules.rounding.round(amount, "line")


def calculate_inss(base: Any, rules: JurisdictionRules | None = None) -> InssContribution:
    rules = rules or load_rules()
    amount = capped_contribution_base(base, rules)
    return InssContribution(
        base=amount,
        employee=rules.rounding.round(amount * rules.inss.employee_rate, "contribution"),
        employer=rules.rounding.round(amount * rules.inss.employer_rate, "contribution"),
    )


def inss_optional_contribution_bands(rules: JurisdictionRules | None = None) -> List[Decimal]:
    """Monthly contribution bases open to optional registrants (social pension multiples)."""

    rules = rules or load_rules()
    pension = rules.inss.social_pension
    return [rules.rounding.round(pension * multiplier, "line") for multiplier in rules.inss.band_multipliers]


def default_inss_optional_contribution_base(
    monthly_income: Any, rules: JurisdictionRules | None = None
) -> Decimal:
    """Smallest band covering ``monthly_income``; the top band when income exceeds them all."""

    rules = rules or load_rules()
    income = to_decimal(monthly_income)
    bands = inss_optional_contribution_bands(rules)
    if income <= 0 or not bands:
        return rules.rounding.round(ZERO, "line")
    for band in bands:
        if band >= income:
            return band
    return bands[-1]


__all__ = [
    "InssContribution",
    "calculate_inss",
    "capped_contribution_base",
    "default_inss_optional_contribution_base",
    "inss_optional_contribution_bands",
]
