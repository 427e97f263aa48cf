import re
from decimal import Decimal

import pytest

from meza_payroll.rules import (
    RULES_DIR,
    RuleFormatError,
    RuleNotFoundError,
    clear_cache,
    load_rule_documents,
    load_rules,
    rules_version_payload,
)


@pytest.fixture(autouse=True)
def fresh_cache(monkeypatch):
    monkeypatch.delenv("MEZA_PAYROLL_RULES_DIR", raising=False)
    monkeypatch.delenv("MEZA_PAYROLL_RULES", raising=False)
    clear_cache()
    yield
    clear_cache()


@pytest.mark.parametrize("name", ["timor_leste", "Timor-Leste", "TIMOR LESTE"])
def test_load_rules_name_normalised(name):
    rules = load_rules(name)
    assert rules.jurisdiction == "TL"
    assert rules.currency == "USD"


def test_timor_leste_constants():
    rules = load_rules()

    assert rules.income_tax.resident.rate == Decimal("0.10")
    assert rules.income_tax.resident.monthly_threshold == Decimal("500")
    assert rules.income_tax.non_resident.monthly_threshold == Decimal("0")
    assert rules.inss.employee_rate == Decimal("0.04")
    assert rules.inss.employer_rate == Decimal("0.06")
    assert rules.inss.total_rate == Decimal("0.10")
    assert rules.inss.ceiling is None
    assert "overtime" in rules.inss.excluded_earnings
    assert rules.premiums.overtime == Decimal("1.5")
    assert rules.pay_period("weekly").periods_per_month == Decimal("4.33")
    assert rules.pay_period("biweekly").periods_per_year == 26
    assert rules.sick_leave.full_pay_days == 6
    assert rules.voluntary_deduction_cap.enforce is False
    assert rules.late_rounding_minutes == 15
    assert rules.rounding.tax.mode == "UP"
    assert rules.rounding.line.mode == "HALF_UP"
    assert [step.days for step in rules.annual_leave] == [12, 15, 18, 22]


def test_loaded_rules_are_cached_and_immutable():
    first = load_rules()
    assert load_rules() is first
    with pytest.raises(AttributeError):
        first.version = "x"


def test_unknown_pay_period():
    with pytest.raises(KeyError):
        load_rules().pay_period("daily")


def test_unknown_table():
    with pytest.raises(RuleNotFoundError):
        load_rules("atlantis")


def test_rules_dir_override(monkeypatch, tmp_path):
    source = (RULES_DIR / "timor_leste.yaml").read_text(encoding="utf-8")
    (tmp_path / "custom.yml").write_text(source.replace('version: "2025-01.0"', 'version: "test-1"'), encoding="utf-8")
    monkeypatch.setenv("MEZA_PAYROLL_RULES_DIR", str(tmp_path))

    assert load_rules("custom").version == "test-1"


def test_malformed_yaml(tmp_path):
    (tmp_path / "broken.yaml").write_text("income_tax: [unclosed\n", encoding="utf-8")
    with pytest.raises(RuleFormatError):
        load_rules("broken", directory=tmp_path)


def test_missing_section(tmp_path):
    (tmp_path / "partial.yaml").write_text("jurisdiction: XX\nversion: '1'\n", encoding="utf-8")
    with pytest.raises(RuleFormatError):
        load_rules("partial", directory=tmp_path)


def test_bad_rounding_mode(tmp_path):
    source = (RULES_DIR / "timor_leste.yaml").read_text(encoding="utf-8")
    (tmp_path / "odd.yaml").write_text(source.replace("mode: UP", "mode: SIDEWAYS"), encoding="utf-8")
    with pytest.raises(RuleFormatError):
        load_rules("odd", directory=tmp_path)


def test_version_payload():
    payload = rules_version_payload()

    assert payload["default"] == "timor_leste"
    entry = next(item for item in payload["files"] if item["name"] == "timor_leste")
    assert entry["version"] == "2025-01.0"
    assert re.fullmatch(r"[0-9a-f]{64}", entry["sha256"])
    assert entry["last_reviewed"]


def test_documents_keyed_by_name():
    documents = load_rule_documents()
    assert "timor_leste" in documents
    assert documents["timor_leste"].payload["jurisdiction"] == "TL"
