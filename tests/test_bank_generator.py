from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from meza_payroll.banking import (
    BankCode,
    BankFileError,
    Employee,
    PayrollRecord,
    UnsupportedBankError,
    generate_all_bank_files,
    generate_bank_file,
)


def test_zero_pay_records_are_excluded_and_totals_match(transfer_input):
    result = generate_bank_file("BNU", transfer_input)

    assert result.excluded_zero_pay == ("E8",)
    assert result.record_count == 2
    assert result.summary.total_amount == Decimal("1238.10")
    assert sum(line.amount for line in result.summary.lines) == result.summary.total_amount
    assert result.summary.payroll_period == "JAN2025"
    assert result.summary.bank_name == "Banco Nacional Ultramarino"


@pytest.mark.parametrize("code", ["BRI", "", None, "Bank Mandiri"])
def test_unsupported_bank_code(transfer_input, code):
    with pytest.raises(UnsupportedBankError):
        generate_bank_file(code, transfer_input)


@pytest.mark.parametrize(
    "changes, message",
    [
        ({"company_account_number": "  "}, "debit account"),
        ({"company_name": ""}, "Company name"),
        ({"value_date": "31/01/2025"}, "Invalid value date"),
        ({"value_date": None}, "Invalid value date"),
    ],
)
def test_missing_settings_abort(transfer_input, changes, message):
    with pytest.raises(BankFileError, match=message):
        generate_bank_file("BNU", replace(transfer_input, **changes))


def test_negative_net_pay_is_refused(transfer_input):
    records = list(transfer_input.records) + [
        PayrollRecord(employee_id="E1", employee_name="Ana Soares", net_pay=Decimal("-5.00"))
    ]
    with pytest.raises(BankFileError, match="negative net pay"):
        generate_bank_file("BNU", replace(transfer_input, records=records))


def test_missing_account_number_is_refused(transfer_input):
    employees = [Employee(id="E1", name="Ana Soares", bank_code="BNU")]
    records = [PayrollRecord(employee_id="E1", employee_name="Ana Soares", net_pay=Decimal("10"))]
    with pytest.raises(BankFileError, match="no bank account number"):
        generate_bank_file("BNU", replace(transfer_input, employees=employees, records=records))


def test_bank_without_payable_records(transfer_input):
    only_zero = [r for r in transfer_input.records if r.employee_id == "E8"]
    with pytest.raises(BankFileError, match="No payable records"):
        generate_bank_file("BNU", replace(transfer_input, records=only_zero))
    with pytest.raises(BankFileError, match="No payroll records"):
        generate_bank_file("ANZ", replace(transfer_input, records=only_zero))


def test_value_date_rolls_past_holiday(transfer_input):
    rolled = replace(transfer_input, value_date="2025-05-20", roll_to_business_day=True)
    result = generate_bank_file("BNU", rolled)

    assert result.summary.value_date == date(2025, 5, 21)
    assert result.file_name == "BNU_SALARY_JAN2025_20250521.csv"

    kept = generate_bank_file("BNU", replace(transfer_input, value_date="2025-05-20"))
    assert kept.summary.value_date == date(2025, 5, 20)


def test_generate_all(transfer_input):
    batch = generate_all_bank_files(transfer_input)

    assert [item.bank_code for item in batch.files] == [BankCode.BNU, BankCode.MANDIRI, BankCode.ANZ, BankCode.BNCTL]
    assert batch.skipped_banks == ()
    assert {item.reason for item in batch.unassigned} == {"missing_bank", "unsupported_bank", "employee_not_found"}
    paid = sum(item.summary.total_amount for item in batch.files)
    assert paid == Decimal("738.00") + Decimal("432.00") + Decimal("1000.50") + Decimal("250.25") + Decimal("500.10")


def test_generate_all_skips_banks_without_payments(transfer_input):
    records = [r for r in transfer_input.records if r.employee_id in {"E2", "E8"}]
    batch = generate_all_bank_files(replace(transfer_input, records=records))

    assert [item.bank_code for item in batch.files] == [BankCode.MANDIRI]
    assert batch.skipped_banks == (BankCode.BNU, BankCode.ANZ, BankCode.BNCTL)
    payload = batch.to_dict(include_content=False)
    assert "content" not in payload["files"][0]
    assert payload["skipped_banks"] == ["BNU", "ANZ", "BNCTL"]


def test_generate_all_requires_company(transfer_input):
    with pytest.raises(BankFileError):
        generate_all_bank_files(replace(transfer_input, company_account_number=""))
