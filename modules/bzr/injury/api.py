"""FastAPI routes for ESAW coding of injury reports."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Path, status
from fastapi.responses import JSONResponse

from . import service
from .validators import (
    ClassificationRead,
    CodeValidationRead,
    EsawCodes,
    InjuryReportCreate,
    InjuryReportRead,
    TableSummaryRead,
)

router = APIRouter(prefix="/api/bzr/injury", tags=["bzr-injury"])


@router.get("/tables", response_model=List[TableSummaryRead])
def list_tables() -> List[TableSummaryRead]:
    return [TableSummaryRead(**row) for row in service.tables_summary()]


@router.get("/tables/{table_no}/options", response_model=List[ClassificationRead])
def table_options(table_no: int = Path(..., ge=1, le=19)) -> List[ClassificationRead]:
    return [ClassificationRead.model_validate(row) for row in service.get_options(table_no)]


@router.post("/validate", response_model=CodeValidationRead)
def validate_codes(payload: EsawCodes) -> CodeValidationRead:
    result = service.validate_report_codes(payload.model_dump())
    return CodeValidationRead.model_validate(result)


@router.post("/reports", response_model=InjuryReportRead, status_code=status.HTTP_201_CREATED)
def create_report(payload: InjuryReportCreate):
    try:
        report = service.create_report(payload.model_dump())
    except service.InvalidEsawCodeError as exc:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"error": "invalid_esaw_code", "unknown": exc.unknown, "message": str(exc)},
        )
    return InjuryReportRead.model_validate(report)


@router.get("/reports/{report_id}", response_model=InjuryReportRead)
def read_report(report_id: int):
    try:
        return InjuryReportRead.model_validate(service.get_report(report_id))
    except KeyError as exc:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "not_found", "message": str(exc.args[0])},
        )
