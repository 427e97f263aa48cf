from datetime import date
from decimal import Decimal

import pytest

from meza_payroll.banking import BankTransferInput, Employee, PayrollRecord, PayrollRun

COMPANY_NAME = "Meza Lda"
COMPANY_ACCOUNT = "0009990001"


@pytest.fixture
def payroll_run():
    return PayrollRun(id="run-2025-01", period_start=date(2025, 1, 1), period_end=date(2025, 1, 31))


@pytest.fixture
def employees():
    return [
        Employee(id="E1", name="Ana Soares", bank_code="BNU", bank_account_number="0001234567"),
        Employee(id="E2", name="João da Costa", bank_name="Bank Mandiri", bank_account_number="1234500001"),
        Employee(id="E3", name="Maria Ximenes", bank_name="ANZ Timor", bank_account_number="5550001"),
        Employee(
            id="E4",
            name="Tomás Pereira",
            bank_name="Banco Nacional de Comércio",
            bank_account_number="777000123",
        ),
        Employee(id="E5", name="No Bank"),
        Employee(id="E6", name="Other Bank", bank_name="BRI", bank_account_number="42424242"),
        Employee(id="E8", name="Unpaid Leave", bank_code="BNU", bank_account_number="0001230008"),
        Employee(
            id="E9",
            name="Rui Guterres",
            employee_number="EMP-009",
            bank_name="BNU Timor-Leste",
            bank_account_number="0001230009",
        ),
    ]


@pytest.fixture
def records():
    return [
        PayrollRecord(employee_id="E1", employee_name="Ana Soares", net_pay=Decimal("738.00")),
        PayrollRecord(employee_id="E2", employee_name="João da Costa", net_pay=Decimal("432.00")),
        PayrollRecord(employee_id="E3", employee_name="Maria Ximenes", net_pay=Decimal("1000.50")),
        PayrollRecord(employee_id="E4", employee_name="Tomás Pereira", net_pay=Decimal("250.25")),
        PayrollRecord(employee_id="E5", employee_name="No Bank", net_pay=Decimal("100.00")),
        PayrollRecord(employee_id="E6", employee_name="Other Bank", net_pay=Decimal("200.00")),
        PayrollRecord(employee_id="E7", employee_name="Departed", net_pay=Decimal("300.00")),
        PayrollRecord(employee_id="E8", employee_name="Unpaid Leave", net_pay=Decimal("0.00")),
        PayrollRecord(
            employee_id="E9", employee_name="Rui Guterres", employee_number="EMP-009", net_pay=Decimal("500.10")
        ),
    ]


@pytest.fixture
def transfer_input(payroll_run, records, employees):
    return BankTransferInput(
        payroll_run=payroll_run,
        records=records,
        employees=employees,
        value_date="2025-01-31",
        company_name=COMPANY_NAME,
        company_account_number=COMPANY_ACCOUNT,
    )
