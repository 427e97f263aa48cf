"""Environment driven settings for the payroll service and CLI."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

_PACKAGE_RULES_DIR = Path(__file__).resolve().parent / "rules"


def rules_dir() -> Path:
    """Directory holding the YAML rule tables."""
    configured = os.getenv("MEZA_PAYROLL_RULES_DIR")
    if configured:
        return Path(configured).expanduser().resolve()
    return _PACKAGE_RULES_DIR


def default_rule_table() -> str:
    return os.getenv("MEZA_PAYROLL_RULES", "timor_leste").strip() or "timor_leste"


def log_level() -> str:
    return os.getenv("MEZA_PAYROLL_LOG_LEVEL", "INFO").strip().upper() or "INFO"


def default_company_name() -> Optional[str]:
    value = os.getenv("MEZA_PAYROLL_COMPANY_NAME", "").strip()
    return value or None


def default_company_account() -> Optional[str]:
    value = os.getenv("MEZA_PAYROLL_COMPANY_ACCOUNT", "").strip()
    return value or None


def roll_value_date_default() -> bool:
    """Return True when bank value dates should roll to the next business day."""
    flag = os.getenv("MEZA_PAYROLL_ROLL_VALUE_DATE", "false").strip().lower()
    return flag in {"1", "true", "on", "yes"}
