from decimal import Decimal

from hypothesis import given, settings, strategies as st

from meza_payroll.engine import PayrollInput, TaxProfile, calculate_payroll
from meza_payroll.rules import load_rules

RULES = load_rules("timor_leste")

cents = st.integers(min_value=0, max_value=500_000).map(lambda v: Decimal(v) / 100)
hours = st.integers(min_value=0, max_value=400).map(lambda v: Decimal(v) / 4)
frequencies = st.sampled_from(["weekly", "biweekly", "monthly"])


def hourly_input(rate_cents: int, regular_hours: int, is_resident: bool = True) -> PayrollInput:
    return PayrollInput(
        employee_id="EMP-P",
        pay_frequency="monthly",
        is_hourly=True,
        hourly_rate=Decimal(rate_cents) / 100,
        regular_hours=regular_hours,
        tax_info=TaxProfile(is_resident=is_resident),
    )


@given(
    st.integers(min_value=100, max_value=10_000),
    st.integers(min_value=0, max_value=250),
    st.booleans(),
)
def test_plain_hourly_gross_and_net(rate_cents, regular_hours, is_resident):
    result = calculate_payroll(hourly_input(rate_cents, regular_hours, is_resident), RULES)

    assert result.gross_pay == result.hourly_rate * regular_hours
    assert result.net_pay == result.gross_pay - result.income_tax - result.inss_employee


@settings(max_examples=200)
@given(
    salary=cents,
    freq=frequencies,
    overtime=hours,
    night=hours,
    absence=hours,
    late=st.integers(min_value=0, max_value=240),
    bonus=cents,
    food=cents,
    loan=cents,
    court=cents,
    resident=st.booleans(),
    sick=st.integers(min_value=0, max_value=5),
    ytd_sick=st.integers(min_value=0, max_value=14),
)
def test_accounting_identities_hold_for_any_input(
    salary, freq, overtime, night, absence, late, bonus, food, loan, court, resident, sick, ytd_sick
):
    result = calculate_payroll(
        PayrollInput(
            employee_id="EMP-P",
            pay_frequency=freq,
            monthly_salary=salary,
            overtime_hours=overtime,
            night_shift_hours=night,
            absence_hours=absence,
            late_arrival_minutes=late,
            bonus=bonus,
            food_allowance=food,
            loan_repayment=loan,
            court_orders=court,
            sick_days_used=sick,
            ytd_sick_days_used=ytd_sick,
            tax_info=TaxProfile(is_resident=resident),
        ),
        RULES,
    )

    assert result.net_pay + result.total_deductions == result.gross_pay
    assert result.total_employer_cost == result.gross_pay + result.inss_employer
    assert result.gross_pay == sum((line.amount for line in result.earnings), Decimal("0"))
    assert result.total_deductions == sum((line.amount for line in result.deductions), Decimal("0"))
    assert result.income_tax >= 0
    assert result.inss_base >= 0
    assert result.has_negative_net_pay == (result.net_pay < 0)


@given(
    st.integers(min_value=100, max_value=10_000),
    st.integers(min_value=0, max_value=250),
    st.booleans(),
)
def test_more_regular_hours_increase_gross_and_net(rate_cents, regular_hours, is_resident):
    before = calculate_payroll(hourly_input(rate_cents, regular_hours, is_resident), RULES)
    after = calculate_payroll(hourly_input(rate_cents, regular_hours + 1, is_resident), RULES)

    assert after.gross_pay > before.gross_pay
    assert after.net_pay > before.net_pay


@given(salary=cents, freq=frequencies, bonus=cents, overtime=hours)
def test_same_input_same_result(salary, freq, bonus, overtime):
    payroll_input = PayrollInput(
        employee_id="EMP-P",
        pay_frequency=freq,
        monthly_salary=salary,
        bonus=bonus,
        overtime_hours=overtime,
    )
    assert calculate_payroll(payroll_input, RULES) == calculate_payroll(payroll_input, RULES)
