from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from . import __version__
from .banking import (
    BankCode,
    BankFileError,
    BankTransferInput,
    Employee,
    PayrollRecord,
    PayrollRun,
    UnsupportedBankError,
    generate_all_bank_files,
    generate_bank_file,
    group_records_by_bank,
)
from .config import default_company_account, default_company_name, roll_value_date_default
from .engine import (
    PayrollInput,
    PayrollInputError,
    PayrollResult,
    TaxProfile,
    calculate_payroll,
    summarize_run,
    validate_payroll_input,
)
from .logging_utils import configure_logging
from .rules import JurisdictionRules, RuleFormatError, RuleNotFoundError, load_rules, rules_version_payload
from .schemas import (
    BankFileRequest,
    BankGroupRequest,
    EmployeeModel,
    PayrollBatchRequest,
    PayrollInputModel,
    PayrollRecordModel,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Meza Payroll", version=__version__)

PAYROLL_CALCULATIONS = Counter(
    "payroll_calculations_total",
    "Payroll calculations processed",
    ["outcome"],
)
NEGATIVE_NET_PAY = Counter("payroll_negative_net_pay_total", "Calculations that produced negative net pay")
BANK_FILES = Counter("bank_files_generated_total", "Bank transfer files generated", ["bank"])
BANK_FILE_ERRORS = Counter("bank_file_errors_total", "Bank transfer files refused")
CALC_LAT = Histogram("payroll_calc_seconds", "Payroll calculation latency")


@app.on_event("startup")
def startup() -> None:
    configure_logging()


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/healthz")
def healthz() -> Dict[str, Any]:
    return {"ok": True, "version": __version__}


@app.get("/rules/version")
def rules_version() -> Dict[str, Any]:
    return rules_version_payload()


def _rules(name: Optional[str]) -> JurisdictionRules:
    try:
        return load_rules(name)
    except RuleNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except RuleFormatError as exc:
        logger.error("Rule table %s is malformed: %s", name, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


def _to_input(model: PayrollInputModel) -> PayrollInput:
    data = model.model_dump()
    tax_info = data.pop("tax_info")
    return PayrollInput(**data, tax_info=TaxProfile(**tax_info))


def _calculate(model: PayrollInputModel, rules: JurisdictionRules) -> Tuple[PayrollResult, Dict[str, Any]]:
    payroll_input = _to_input(model)
    with CALC_LAT.time():
        try:
            result = calculate_payroll(payroll_input, rules)
        except PayrollInputError:
            PAYROLL_CALCULATIONS.labels(outcome="rejected").inc()
            raise
    PAYROLL_CALCULATIONS.labels(outcome="ok").inc()
    if result.has_negative_net_pay:
        NEGATIVE_NET_PAY.inc()
    payload = result.to_dict()
    payload["validation_warnings"] = validate_payroll_input(payroll_input, rules)
    return result, payload


@app.post("/payroll/calculate")
def calculate(body: PayrollInputModel, rules: Optional[str] = None) -> Dict[str, Any]:
    table = _rules(rules)
    try:
        return _calculate(body, table)[1]
    except PayrollInputError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


@app.post("/payroll/calculate/batch")
def calculate_batch(body: PayrollBatchRequest, rules: Optional[str] = None) -> Dict[str, Any]:
    table = _rules(rules)
    results: List[PayrollResult] = []
    payloads: List[Dict[str, Any]] = []
    for index, item in enumerate(body.items):
        try:
            result, payload = _calculate(item, table)
        except PayrollInputError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"index": index, "employee_id": item.employee_id, "error": str(exc)},
            ) from exc
        payloads.append(payload)
        results.append(result)
    return {"results": payloads, "summary": summarize_run(results).to_dict()}


def _records(models: List[PayrollRecordModel]) -> List[PayrollRecord]:
    return [PayrollRecord.from_mapping(model.model_dump()) for model in models]


def _employees(models: List[EmployeeModel]) -> List[Employee]:
    return [Employee.from_mapping(model.model_dump()) for model in models]


def _transfer_input(body: BankFileRequest) -> BankTransferInput:
    run = body.payroll_run
    roll = body.roll_to_business_day
    return BankTransferInput(
        payroll_run=PayrollRun(
            id=run.id, period_start=run.period_start, period_end=run.period_end, pay_date=run.pay_date
        ),
        records=tuple(_records(body.records)),
        employees=tuple(_employees(body.employees)),
        value_date=body.value_date,
        company_name=body.company_name or default_company_name() or "",
        company_account_number=body.company_account_number or default_company_account() or "",
        roll_to_business_day=roll_value_date_default() if roll is None else roll,
    )


@app.post("/bank-files/group")
def group_bank_records(body: BankGroupRequest) -> Dict[str, Any]:
    grouping = group_records_by_bank(_records(body.records), _employees(body.employees))
    return grouping.to_dict()


@app.post("/bank-files")
def bank_files(body: BankFileRequest, include_content: bool = True) -> Dict[str, Any]:
    try:
        batch = generate_all_bank_files(_transfer_input(body))
    except BankFileError as exc:
        BANK_FILE_ERRORS.inc()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    for item in batch.files:
        BANK_FILES.labels(bank=item.bank_code.value).inc()
    return batch.to_dict(include_content=include_content)


@app.post("/bank-files/{bank_code}")
def bank_file(bank_code: str, body: BankFileRequest) -> Response:
    try:
        code = BankCode.parse(bank_code.upper())
        result = generate_bank_file(code, _transfer_input(body))
    except UnsupportedBankError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except BankFileError as exc:
        BANK_FILE_ERRORS.inc()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    BANK_FILES.labels(bank=result.bank_code.value).inc()
    return Response(
        content=result.content,
        media_type=result.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.file_name}"',
            "X-Record-Count": str(result.record_count),
            "X-Total-Amount": f"{result.summary.total_amount:.2f}",
        },
    )
