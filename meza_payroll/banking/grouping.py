"""Partition payroll records by the bank each employee is paid through."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from .models import (
    UNASSIGNED_EMPLOYEE_NOT_FOUND,
    UNASSIGNED_MISSING_BANK,
    UNASSIGNED_UNSUPPORTED_BANK,
    BankCode,
    BankGrouping,
    Employee,
    PayrollRecord,
    UnassignedRecord,
)

logger = logging.getLogger(__name__)


def index_employees(employees: Iterable[Employee]) -> Dict[str, Employee]:
    return {employee.id: employee for employee in employees}


def group_records_by_bank(records: Iterable[PayrollRecord], employees: Iterable[Employee]) -> BankGrouping:
    """Assign every record to exactly one bank bucket or to ``unassigned``.

    Input order is preserved inside each bucket.
    """

    by_id = index_employees(employees)
    buckets: Dict[BankCode, List[PayrollRecord]] = {code: [] for code in BankCode}
    unassigned: List[UnassignedRecord] = []

    for record in records:
        employee = by_id.get(record.employee_id)
        if employee is None:
            unassigned.append(UnassignedRecord(record, UNASSIGNED_EMPLOYEE_NOT_FOUND))
            continue
        designation = employee.bank_designation
        if not designation:
            unassigned.append(UnassignedRecord(record, UNASSIGNED_MISSING_BANK))
            continue
        code = employee.resolved_bank
        if code is None:
            unassigned.append(UnassignedRecord(record, UNASSIGNED_UNSUPPORTED_BANK, designation))
            continue
        buckets[code].append(record)

    if unassigned:
        logger.warning(
            "%d payroll record(s) have no supported bank: %s",
            len(unassigned),
            ", ".join(f"{item.record.employee_id} ({item.reason})" for item in unassigned),
        )
    return BankGrouping(buckets=buckets, unassigned=unassigned)


__all__ = ["group_records_by_bank", "index_employees"]
