from dataclasses import replace
from decimal import Decimal

import pytest

from meza_payroll.engine import (
    PayrollInput,
    PayrollInputError,
    TaxProfile,
    calculate_payroll,
)
from meza_payroll.rules import DeductionCap, load_rules


@pytest.fixture(scope="module")
def rules():
    return load_rules("timor_leste")


def monthly(salary, **overrides):
    return PayrollInput(employee_id="EMP-1", pay_frequency="monthly", monthly_salary=salary, **overrides)


def test_resident_800_monthly(rules):
    result = calculate_payroll(monthly(800), rules)

    assert result.gross_pay == Decimal("800.00")
    assert result.taxable_income == Decimal("800.00")
    assert result.income_tax == Decimal("30.00")
    assert result.inss_employee == Decimal("32.00")
    assert result.inss_employer == Decimal("48.00")
    assert result.total_deductions == Decimal("62.00")
    assert result.net_pay == Decimal("738.00")
    assert result.total_employer_cost == Decimal("848.00")
    assert result.inss_base == Decimal("800.00")
    assert result.hourly_rate == Decimal("4.20")
    assert result.warnings == ()
    assert result.rules_version == rules.version


def test_resident_below_threshold(rules):
    result = calculate_payroll(monthly(450), rules)

    assert result.income_tax == Decimal("0.00")
    assert result.inss_employee == Decimal("18.00")
    assert result.net_pay == Decimal("432.00")
    assert any("threshold" in warning for warning in result.warnings)
    assert all(line.kind != "income_tax" for line in result.deductions)


def test_threshold_is_exclusive_by_one_cent(rules):
    at_threshold = calculate_payroll(monthly("500.00"), rules)
    above = calculate_payroll(monthly("500.01"), rules)

    assert at_threshold.income_tax == Decimal("0.00")
    assert above.income_tax > 0
    assert above.income_tax == Decimal("0.01")


def test_non_resident_taxed_from_first_dollar(rules):
    result = calculate_payroll(monthly(800, tax_info=TaxProfile(is_resident=False)), rules)

    assert result.income_tax == Decimal("80.00")
    assert result.net_pay == Decimal("688.00")


def test_tax_exemption(rules):
    result = calculate_payroll(monthly(800, tax_info=TaxProfile(has_tax_exemption=True)), rules)

    assert result.income_tax == Decimal("0.00")
    assert result.net_pay == Decimal("768.00")
    assert any("exemption" in warning for warning in result.warnings)


def test_inss_base_excludes_overtime_bonus_and_allowances(rules):
    result = calculate_payroll(
        monthly(800, overtime_hours=10, bonus=100, food_allowance=50),
        rules,
    )

    assert result.overtime_pay == Decimal("63.00")
    assert result.gross_pay == Decimal("1013.00")
    assert result.taxable_income == Decimal("1013.00")
    assert result.income_tax == Decimal("51.30")
    assert result.inss_base == Decimal("800.00")
    assert result.inss_employee == Decimal("32.00")
    assert result.net_pay == Decimal("929.70")

    lines = {line.kind: line for line in result.earnings}
    assert lines["regular"].inss_base is True
    assert lines["overtime"].inss_base is False
    assert lines["overtime"].rate == Decimal("6.30")
    assert lines["food_allowance"].taxable is True


def test_premium_multipliers(rules):
    result = calculate_payroll(
        monthly(800, night_shift_hours=4, holiday_hours=8, rest_day_hours=2),
        rules,
    )

    assert result.night_shift_pay == Decimal("21.00")
    assert result.holiday_pay == Decimal("67.20")
    assert result.rest_day_pay == Decimal("16.80")
    assert result.gross_pay == Decimal("905.00")


def test_absence_and_late_reduce_tax_and_inss_base(rules):
    result = calculate_payroll(monthly(800, absence_hours=8, late_arrival_minutes=20), rules)

    assert result.absence_deduction == Decimal("33.60")
    # 20 minutes rounds up to 30
    assert result.late_deduction == Decimal("2.10")
    assert result.taxable_income == Decimal("764.30")
    assert result.income_tax == Decimal("26.43")
    assert result.inss_base == Decimal("764.30")
    assert result.inss_employee == Decimal("30.57")
    assert result.inss_employer == Decimal("45.86")
    assert result.total_deductions == Decimal("92.70")
    assert result.net_pay == Decimal("707.30")


def test_hourly_employee(rules):
    payroll_input = PayrollInput(
        employee_id="EMP-H",
        pay_frequency="monthly",
        is_hourly=True,
        hourly_rate="5.00",
        regular_hours=160,
    )
    result = calculate_payroll(payroll_input, rules)

    assert result.hourly_rate == Decimal("5.00")
    assert result.regular_pay == Decimal("800.00")
    assert result.net_pay == Decimal("738.00")


def test_weekly_proration_and_period_threshold(rules):
    result = calculate_payroll(
        PayrollInput(employee_id="EMP-W", pay_frequency="weekly", monthly_salary=800),
        rules,
    )

    assert result.regular_pay == Decimal("184.76")
    assert result.income_tax == Decimal("6.93")
    assert result.inss_employee == Decimal("7.39")
    assert result.net_pay == Decimal("170.44")


def test_weekly_uses_actual_periods_in_month(rules):
    result = calculate_payroll(
        PayrollInput(
            employee_id="EMP-W",
            pay_frequency="weekly",
            monthly_salary=800,
            period_number=5,
            total_periods_in_month=5,
        ),
        rules,
    )

    assert result.regular_pay == Decimal("160.00")
    assert result.income_tax == Decimal("6.00")
    assert result.inss_employee == Decimal("6.40")
    assert result.net_pay == Decimal("147.60")


@pytest.mark.parametrize(
    "ytd, days, expected",
    [
        (0, 2, Decimal("67.20")),
        (5, 3, Decimal("67.20")),
        (9, 2, Decimal("33.60")),
        (12, 1, Decimal("0.00")),
    ],
)
def test_sick_pay_bands(rules, ytd, days, expected):
    result = calculate_payroll(monthly(800, sick_days_used=days, ytd_sick_days_used=ytd), rules)
    assert result.sick_pay == expected


def test_sick_day_warning_near_limit(rules):
    result = calculate_payroll(monthly(800, sick_days_used=2, ytd_sick_days_used=9), rules)
    assert any("11 of 12" in warning for warning in result.warnings)


def test_negative_net_pay_is_reported_not_clamped(rules):
    result = calculate_payroll(monthly(800, loan_repayment=900), rules)

    assert result.loan_repayment == Decimal("900.00")
    assert result.net_pay == Decimal("-162.00")
    assert result.has_negative_net_pay
    assert any("negative" in warning for warning in result.warnings)
    assert any("cap" in warning for warning in result.warnings)
    assert result.net_pay + result.total_deductions == result.gross_pay


def test_enforced_deduction_cap_reduces_voluntary_items(rules):
    capped = replace(rules, voluntary_deduction_cap=DeductionCap(ratio=Decimal("0.30"), enforce=True))
    result = calculate_payroll(monthly(800, loan_repayment=300, advance_repayment=100, court_orders=50), capped)

    assert result.loan_repayment == Decimal("180.00")
    assert result.advance_repayment == Decimal("60.00")
    assert result.court_orders == Decimal("50.00")
    assert result.total_deductions == Decimal("352.00")
    assert result.net_pay == Decimal("448.00")


def test_ytd_accumulators(rules):
    result = calculate_payroll(
        monthly(800, ytd_gross_pay=1600, ytd_income_tax=60, ytd_inss_employee=64),
        rules,
    )

    assert result.new_ytd_gross_pay == Decimal("2400.00")
    assert result.new_ytd_income_tax == Decimal("90.00")
    assert result.new_ytd_inss_employee == Decimal("96.00")


def test_contribution_base_override(rules):
    result = calculate_payroll(monthly(800, inss_contribution_base=600), rules)

    assert result.inss_base == Decimal("600.00")
    assert result.inss_employee == Decimal("24.00")
    assert result.inss_employer == Decimal("36.00")
    assert result.total_employer_cost == Decimal("836.00")


def test_inss_ceiling_from_rules(rules):
    capped = replace(rules, inss=replace(rules.inss, ceiling=Decimal("500")))
    result = calculate_payroll(monthly(800), capped)

    assert result.inss_base == Decimal("500.00")
    assert result.inss_employee == Decimal("20.00")


def test_subsidio_anual_is_taxable_and_contributory(rules):
    result = calculate_payroll(monthly(800, subsidio_anual=800), rules)

    assert result.gross_pay == Decimal("1600.00")
    assert result.inss_base == Decimal("1600.00")
    assert result.income_tax == Decimal("110.00")


@pytest.mark.parametrize(
    "payroll_input",
    [
        PayrollInput(employee_id="", pay_frequency="monthly", monthly_salary=800),
        PayrollInput(employee_id="EMP-1", monthly_salary=800),
        PayrollInput(employee_id="EMP-1", pay_frequency="daily", monthly_salary=800),
        PayrollInput(employee_id="EMP-1", pay_frequency="monthly", is_hourly=True, regular_hours=10),
    ],
)
def test_structural_errors_raise(rules, payroll_input):
    with pytest.raises(PayrollInputError):
        calculate_payroll(payroll_input, rules)


def test_frequency_aliases(rules):
    result = calculate_payroll(
        PayrollInput(employee_id="EMP-1", pay_frequency="Fortnightly", monthly_salary=800), rules
    )
    assert result.pay_frequency.value == "biweekly"


def test_idempotent(rules):
    payroll_input = monthly(1234.56, overtime_hours="3.5", bonus=75, absence_hours=2, loan_repayment=40)
    assert calculate_payroll(payroll_input, rules) == calculate_payroll(payroll_input, rules)


def test_to_dict_serialises_amounts(rules):
    payload = calculate_payroll(monthly(800), rules).to_dict()

    assert payload["employee_id"] == "EMP-1"
    assert payload["pay_frequency"] == "monthly"
    assert payload["net_pay"] == pytest.approx(738.0)
    assert payload["has_negative_net_pay"] is False
    assert payload["earnings"][0]["kind"] == "regular"
    assert {line["kind"] for line in payload["deductions"]} == {"income_tax", "inss_employee"}


def test_from_mapping_accepts_nested_tax_info():
    payroll_input = PayrollInput.from_mapping(
        {
            "employee_id": "EMP-9",
            "pay_frequency": "monthly",
            "monthly_salary": 800,
            "tax_info": {"is_resident": False},
            "unknown_field": "ignored",
        }
    )
    assert payroll_input.tax_info.is_resident is False
    assert payroll_input.monthly_salary == 800


def test_from_mapping_without_employee_id_is_an_input_error(rules):
    payroll_input = PayrollInput.from_mapping({"pay_frequency": "monthly", "monthly_salary": 800})

    assert payroll_input.employee_id == ""
    with pytest.raises(PayrollInputError, match="employee_id"):
        calculate_payroll(payroll_input, rules)


def test_fractional_sick_day_strings_count_whole_days(rules):
    from_text = calculate_payroll(monthly(800, sick_days_used="2.5", ytd_sick_days_used="1.0"), rules)
    from_int = calculate_payroll(monthly(800, sick_days_used=2, ytd_sick_days_used=1), rules)

    assert from_text.sick_pay == from_int.sick_pay > 0
    assert from_text.net_pay == from_int.net_pay
