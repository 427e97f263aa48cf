"""Typed, immutable views over a jurisdiction rule document."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional, Tuple

from ..rounding import RoundingConfigError, RoundingPolicy


class RuleFormatError(ValueError):
    """Raised when a rule document is missing data or has the wrong shape."""


def _dec(data: Mapping[str, Any], key: str, default: Any = None) -> Decimal:
    raw = data.get(key, default)
    if raw is None:
        raise RuleFormatError(f"Missing numeric rule value '{key}'")
    try:
        return Decimal(str(raw))
    except InvalidOperation as exc:
        raise RuleFormatError(f"Rule value '{key}' is not numeric: {raw!r}") from exc


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = data.get(key)
    if not isinstance(section, Mapping):
        raise RuleFormatError(f"Rule section '{key}' must be a mapping")
    return section


@dataclass(frozen=True)
class TaxBand:
    rate: Decimal
    monthly_threshold: Decimal

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TaxBand":
        return cls(rate=_dec(data, "rate"), monthly_threshold=_dec(data, "monthly_threshold", 0))


@dataclass(frozen=True)
class IncomeTaxRule:
    """Flat rate above a monthly threshold, one band per residency class."""

    resident: TaxBand
    non_resident: TaxBand
    excluded_earnings: Tuple[str, ...] = ()

    def band_for(self, is_resident: bool) -> TaxBand:
        return self.resident if is_resident else self.non_resident

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "IncomeTaxRule":
        return cls(
            resident=TaxBand.from_mapping(_section(data, "resident")),
            non_resident=TaxBand.from_mapping(_section(data, "non_resident")),
            excluded_earnings=tuple(data.get("excluded_earnings") or ()),
        )


@dataclass(frozen=True)
class InssRule:
    employee_rate: Decimal
    employer_rate: Decimal
    ceiling: Optional[Decimal]
    minimum_salary: Decimal
    excluded_earnings: Tuple[str, ...]
    social_pension: Decimal
    band_multipliers: Tuple[Decimal, ...]

    @property
    def total_rate(self) -> Decimal:
        return self.employee_rate + self.employer_rate

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "InssRule":
        optional = data.get("optional_registration") or {}
        ceiling = data.get("ceiling")
        return cls(
            employee_rate=_dec(data, "employee_rate"),
            employer_rate=_dec(data, "employer_rate"),
            ceiling=Decimal(str(ceiling)) if ceiling is not None else None,
            minimum_salary=_dec(data, "minimum_salary", 0),
            excluded_earnings=tuple(data.get("excluded_earnings") or ()),
            social_pension=_dec(optional, "social_pension", 0),
            band_multipliers=tuple(Decimal(str(m)) for m in optional.get("band_multipliers", ())),
        )


@dataclass(frozen=True)
class PremiumRates:
    overtime: Decimal
    night_shift: Decimal
    rest_day: Decimal
    public_holiday: Decimal

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PremiumRates":
        return cls(
            overtime=_dec(data, "overtime"),
            night_shift=_dec(data, "night_shift"),
            rest_day=_dec(data, "rest_day"),
            public_holiday=_dec(data, "public_holiday"),
        )


@dataclass(frozen=True)
class WorkingHours:
    standard_weekly_hours: Decimal
    standard_daily_hours: Decimal
    max_overtime_per_week: Decimal

    @property
    def standard_monthly_hours(self) -> Decimal:
        return self.standard_weekly_hours * Decimal(52) / Decimal(12)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WorkingHours":
        return cls(
            standard_weekly_hours=_dec(data, "standard_weekly_hours"),
            standard_daily_hours=_dec(data, "standard_daily_hours"),
            max_overtime_per_week=_dec(data, "max_overtime_per_week", 0),
        )


@dataclass(frozen=True)
class PayPeriod:
    periods_per_year: int
    periods_per_month: Decimal

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PayPeriod":
        return cls(
            periods_per_year=int(data.get("periods_per_year", 0)),
            periods_per_month=_dec(data, "periods_per_month"),
        )


@dataclass(frozen=True)
class SickLeaveRule:
    total_days: int
    full_pay_days: int
    full_pay_rate: Decimal
    reduced_pay_rate: Decimal
    warning_threshold_days: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SickLeaveRule":
        total = int(data.get("total_days", 0))
        return cls(
            total_days=total,
            full_pay_days=int(data.get("full_pay_days", 0)),
            full_pay_rate=_dec(data, "full_pay_rate", 1),
            reduced_pay_rate=_dec(data, "reduced_pay_rate", 0),
            warning_threshold_days=int(data.get("warning_threshold_days", total)),
        )


@dataclass(frozen=True)
class AnnualLeaveStep:
    min_years: int
    days: int


@dataclass(frozen=True)
class DeductionCap:
    ratio: Optional[Decimal]
    enforce: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "DeductionCap":
        data = data or {}
        ratio = data.get("ratio")
        return cls(
            ratio=Decimal(str(ratio)) if ratio is not None else None,
            enforce=bool(data.get("enforce", False)),
        )


@dataclass(frozen=True)
class JurisdictionRules:
    """Every constant the payroll engine needs for one jurisdiction.

    Instances are immutable; derive a variant with :func:`dataclasses.replace`.
    """

    name: str
    jurisdiction: str
    version: str
    currency: str
    income_tax: IncomeTaxRule
    inss: InssRule
    premiums: PremiumRates
    working_hours: WorkingHours
    pay_periods: Dict[str, PayPeriod]
    sick_leave: SickLeaveRule
    annual_leave: Tuple[AnnualLeaveStep, ...]
    subsidio_full_year_months: int
    voluntary_deduction_cap: DeductionCap
    late_rounding_minutes: int
    minimum_monthly_wage: Decimal
    rounding: RoundingPolicy = field(default_factory=RoundingPolicy)
    source_url: Optional[str] = None
    last_reviewed: Optional[str] = None

    def pay_period(self, frequency: str) -> PayPeriod:
        try:
            return self.pay_periods[frequency]
        except KeyError as exc:
            raise KeyError(f"No pay period rules for '{frequency}' in {self.name}") from exc

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "JurisdictionRules":
        if not isinstance(data, Mapping):
            raise RuleFormatError("Rule document must be a mapping")
        periods_raw = _section(data, "pay_periods")
        ladder = sorted(
            (
                AnnualLeaveStep(min_years=int(step["min_years"]), days=int(step["days"]))
                for step in data.get("annual_leave") or ()
            ),
            key=lambda step: step.min_years,
        )
        try:
            rounding = RoundingPolicy.from_mapping(data.get("rounding"))
        except RoundingConfigError as exc:
            raise RuleFormatError(str(exc)) from exc
        return cls(
            name=str(data.get("name") or data.get("jurisdiction") or "unknown"),
            jurisdiction=str(data.get("jurisdiction") or ""),
            version=str(data.get("version") or "unversioned"),
            currency=str(data.get("currency") or "USD"),
            income_tax=IncomeTaxRule.from_mapping(_section(data, "income_tax")),
            inss=InssRule.from_mapping(_section(data, "inss")),
            premiums=PremiumRates.from_mapping(_section(data, "premiums")),
            working_hours=WorkingHours.from_mapping(_section(data, "working_hours")),
            pay_periods={name: PayPeriod.from_mapping(cfg) for name, cfg in periods_raw.items()},
            sick_leave=SickLeaveRule.from_mapping(_section(data, "sick_leave")),
            annual_leave=tuple(ladder),
            subsidio_full_year_months=int((data.get("subsidio_anual") or {}).get("full_year_months", 12)),
            voluntary_deduction_cap=DeductionCap.from_mapping(data.get("voluntary_deduction_cap")),
            late_rounding_minutes=int((data.get("late_arrival") or {}).get("rounding_minutes", 1)),
            minimum_monthly_wage=_dec(data.get("minimum_wage") or {}, "monthly", 0),
            rounding=rounding,
            source_url=data.get("source_url"),
            last_reviewed=data.get("last_reviewed"),
        )


__all__ = [
    "AnnualLeaveStep",
    "DeductionCap",
    "IncomeTaxRule",
    "InssRule",
    "JurisdictionRules",
    "PayPeriod",
    "PremiumRates",
    "RuleFormatError",
    "SickLeaveRule",
    "TaxBand",
    "WorkingHours",
]
