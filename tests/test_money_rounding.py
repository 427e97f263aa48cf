from decimal import Decimal

import pytest

from meza_payroll.money import (
    apply_rate,
    divide,
    format_amount,
    multiply,
    pro_rata,
    round_cents,
    sum_money,
    to_cents,
    to_decimal,
)
from meza_payroll.rounding import RoundingConfigError, RoundingPolicy, RoundingRule


def test_to_decimal_conversions():
    assert to_decimal(None) == Decimal("0")
    assert to_decimal("  ") == Decimal("0")
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("12.345") == Decimal("12.345")
    with pytest.raises(TypeError):
        to_decimal(True)
    with pytest.raises(TypeError):
        to_decimal(object())


def test_round_half_up():
    assert round_cents("0.005") == Decimal("0.01")
    assert round_cents("2.675") == Decimal("2.68")
    assert apply_rate(800, "0.04") == Decimal("32.00")
    assert multiply("4.20", 10, "1.5") == Decimal("63.00")


def test_divide_and_pro_rata_guard_zero():
    assert divide(800, 0) == Decimal("0.00")
    assert divide(800, "4.33") == Decimal("184.76")
    assert pro_rata(1000, 5, 23) == Decimal("217.39")
    assert pro_rata(1000, 5, 0) == Decimal("0.00")


def test_sum_and_cents():
    assert sum_money(["0.10", "0.20", "0.30"]) == Decimal("0.60")
    assert to_cents("1238.10") == 123810
    assert format_amount(738) == "738.00"


def test_policy_stage_overrides():
    policy = RoundingPolicy.from_mapping({"defaults": {"mode": "HALF_EVEN"}, "tax": {"mode": "UP"}})

    assert policy.round(Decimal("0.001"), "tax") == Decimal("0.01")
    assert policy.round(Decimal("0.125"), "line") == Decimal("0.12")
    assert policy.rate == RoundingRule(mode="HALF_EVEN", precision="nearest_cent")


def test_whole_dollar_precision():
    policy = RoundingPolicy.from_mapping({"total": {"precision": "whole_dollar"}})
    assert policy.round(Decimal("10.50"), "total") == Decimal("11")


@pytest.mark.parametrize(
    "config",
    [
        {"tax": {"mode": "SIDEWAYS"}},
        {"tax": {"precision": "nearest_mill"}},
        {"payday": {"mode": "UP"}},
        {"tax": "UP"},
        ["not", "a", "mapping"],
    ],
)
def test_invalid_policies(config):
    with pytest.raises(RoundingConfigError):
        RoundingPolicy.from_mapping(config)


def test_unknown_stage_on_round():
    with pytest.raises(RoundingConfigError):
        RoundingPolicy().round(Decimal("1"), "bonus")
