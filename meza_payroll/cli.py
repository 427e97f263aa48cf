"""Command line entry point: calculate payroll, group records, write bank files."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .banking import (
    BankCode,
    BankFileError,
    BankTransferInput,
    Employee,
    PayrollRecord,
    PayrollRun,
    generate_all_bank_files,
    generate_bank_file,
    group_records_by_bank,
)
from .config import default_company_account, default_company_name, log_level, roll_value_date_default
from .engine import PayrollInput, PayrollInputError, calculate_payroll, summarize_run, validate_payroll_input
from .logging_utils import configure_logging
from .rules import RuleFormatError, RuleNotFoundError, load_rules

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> Any:
    if str(path) == "-":
        return json.load(sys.stdin)
    return json.loads(path.read_text(encoding="utf-8"))


def _write_json(payload: Any, output: Optional[Path]) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def _records_and_employees(data: Dict[str, Any]) -> tuple:
    records = [PayrollRecord.from_mapping(item) for item in data.get("records", [])]
    employees = [Employee.from_mapping(item) for item in data.get("employees", [])]
    return records, employees


def cmd_calculate(args: argparse.Namespace) -> int:
    rules = load_rules(args.rules)
    data = _read_json(args.input)
    items: List[Dict[str, Any]] = data if isinstance(data, list) else [data]
    results = []
    payloads = []
    for item in items:
        payroll_input = PayrollInput.from_mapping(item)
        result = calculate_payroll(payroll_input, rules)
        payload = result.to_dict()
        payload["validation_warnings"] = validate_payroll_input(payroll_input, rules)
        results.append(result)
        payloads.append(payload)
    if isinstance(data, list):
        _write_json({"results": payloads, "summary": summarize_run(results).to_dict()}, args.output)
    else:
        _write_json(payloads[0], args.output)
    return 0


def cmd_group(args: argparse.Namespace) -> int:
    records, employees = _records_and_employees(_read_json(args.input))
    grouping = group_records_by_bank(records, employees)
    _write_json(grouping.to_dict(), args.output)
    return 0


def cmd_bank_files(args: argparse.Namespace) -> int:
    data = _read_json(args.input)
    records, employees = _records_and_employees(data)
    transfer_input = BankTransferInput(
        payroll_run=PayrollRun.from_mapping(data["payroll_run"]),
        records=tuple(records),
        employees=tuple(employees),
        value_date=args.value_date or data.get("value_date"),
        company_name=args.company_name or data.get("company_name") or default_company_name() or "",
        company_account_number=(
            args.company_account or data.get("company_account_number") or default_company_account() or ""
        ),
        roll_to_business_day=args.roll_value_date or roll_value_date_default(),
    )
    if args.bank:
        files = [generate_bank_file(BankCode.parse(args.bank.upper()), transfer_input)]
        unassigned: List[Any] = []
    else:
        batch = generate_all_bank_files(transfer_input)
        files = list(batch.files)
        unassigned = list(batch.unassigned)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    for result in files:
        target = args.output_dir / result.file_name
        # newline="" keeps the CRLF record separators intact.
        with target.open("w", encoding="utf-8", newline="") as fh:
            fh.write(result.content)
        logger.info("Wrote %s bank file %s", result.bank_code.value, target)
        print(
            f"{result.bank_code.value}: {result.record_count} transfers, "
            f"total {result.summary.total_amount:.2f} -> {target}"
        )
    for item in unassigned:
        print(f"UNASSIGNED {item.record.employee_id}: {item.reason}", file=sys.stderr)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    level = (args.log_level or log_level()).lower()
    uvicorn.run("meza_payroll.api:app", host=args.host, port=args.port, log_level=level)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="meza-payroll", description="Timor-Leste payroll tools")
    parser.add_argument("--log-level", default=None, help="Logging level (default from MEZA_PAYROLL_LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)

    calc = sub.add_parser("calculate", help="Calculate payroll for one input or a list of inputs")
    calc.add_argument("input", type=Path, help="JSON file with a payroll input object or list ('-' for stdin)")
    calc.add_argument("--rules", help="Rule table name (default from MEZA_PAYROLL_RULES)")
    calc.add_argument("--output", type=Path, help="Optional output file (defaults to stdout)")
    calc.set_defaults(func=cmd_calculate)

    group = sub.add_parser("group", help="Group payroll records by bank")
    group.add_argument("input", type=Path, help="JSON file with 'records' and 'employees'")
    group.add_argument("--output", type=Path, help="Optional output file (defaults to stdout)")
    group.set_defaults(func=cmd_group)

    files = sub.add_parser("bank-files", help="Write bank transfer files for a payroll run")
    files.add_argument("input", type=Path, help="JSON file with 'payroll_run', 'records' and 'employees'")
    files.add_argument("--output-dir", type=Path, default=Path("."), help="Directory to write files into")
    files.add_argument("--bank", help="Only generate the file for this bank code")
    files.add_argument("--value-date", help="ISO date funds should move")
    files.add_argument("--company-name")
    files.add_argument("--company-account")
    files.add_argument("--roll-value-date", action="store_true", help="Roll the value date to a business day")
    files.set_defaults(func=cmd_bank_files)

    serve = sub.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=cmd_serve)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    try:
        return args.func(args)
    except (PayrollInputError, BankFileError, RuleNotFoundError, RuleFormatError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except (OSError, json.JSONDecodeError, KeyError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
