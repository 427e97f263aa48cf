"""Rounding helpers driven by the ``rounding`` section of a rule table."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_UP, Decimal
from typing import Any, Dict, Mapping

_DEFAULT_MODE = "HALF_UP"
_DEFAULT_PRECISION = "nearest_cent"

_PRECISION_QUANT = {
    "nearest_cent": Decimal("0.01"),
    "whole_dollar": Decimal("1"),
}

_ROUNDING_MODES = {
    "HALF_UP": ROUND_HALF_UP,
    "HALF_EVEN": ROUND_HALF_EVEN,
    "UP": ROUND_UP,
    "DOWN": ROUND_DOWN,
}

STAGES = ("rate", "line", "tax", "contribution", "total")


class RoundingConfigError(ValueError):
    """Raised when the rounding configuration is invalid or missing data."""


@dataclass(frozen=True)
class RoundingRule:
    mode: str = _DEFAULT_MODE
    precision: str = _DEFAULT_PRECISION

    def apply(self, amount: Decimal) -> Decimal:
        return amount.quantize(_PRECISION_QUANT[self.precision], rounding=_ROUNDING_MODES[self.mode])


@dataclass(frozen=True)
class RoundingPolicy:
    """Rounding rule per calculation stage."""

    rate: RoundingRule = RoundingRule()
    line: RoundingRule = RoundingRule()
    tax: RoundingRule = RoundingRule()
    contribution: RoundingRule = RoundingRule()
    total: RoundingRule = RoundingRule()

    def round(self, amount: Decimal, stage: str) -> Decimal:
        if stage not in STAGES:
            raise RoundingConfigError(f"Unknown rounding stage '{stage}'")
        rule: RoundingRule = getattr(self, stage)
        return rule.apply(amount)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "RoundingPolicy":
        """Build a policy from ``{defaults: {...}, <stage>: {mode, precision}}``.

        Stage entries fall back to ``defaults`` and then to HALF_UP / nearest cent.
        """

        data = data or {}
        if not isinstance(data, Mapping):
            raise RoundingConfigError("rounding section must be a mapping")
        defaults = data.get("defaults") or {}
        rules: Dict[str, RoundingRule] = {}
        for stage in STAGES:
            stage_cfg = data.get(stage) or {}
            if not isinstance(stage_cfg, Mapping):
                raise RoundingConfigError(f"Rounding rule for stage '{stage}' must be a mapping")
            rules[stage] = _normalise_rule(stage_cfg, defaults)
        unknown = set(data) - set(STAGES) - {"defaults"}
        if unknown:
            raise RoundingConfigError("Unknown rounding stages: " + ", ".join(sorted(unknown)))
        return cls(**rules)


def _normalise_rule(rule: Mapping[str, Any], defaults: Mapping[str, Any]) -> RoundingRule:
    mode = str(rule.get("mode") or defaults.get("mode") or _DEFAULT_MODE).upper()
    precision = str(rule.get("precision") or defaults.get("precision") or _DEFAULT_PRECISION)
    if precision not in _PRECISION_QUANT:
        raise RoundingConfigError(f"Unsupported precision '{precision}'")
    if mode not in _ROUNDING_MODES:
        raise RoundingConfigError(f"Unsupported rounding mode '{mode}'")
    return RoundingRule(mode=mode, precision=precision)


__all__ = ["RoundingConfigError", "RoundingPolicy", "RoundingRule", "STAGES"]
