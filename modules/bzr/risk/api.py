"""FastAPI routes for the risk assessment module."""

from __future__ import annotations

from io import BytesIO

from fastapi import APIRouter, Query, Response, status
from fastapi.responses import JSONResponse, StreamingResponse

from . import pdf_export, service
from .validators import (
    AssessmentCreate,
    AssessmentRead,
    AttachDocumentRequest,
    ClassifyRequest,
    ClassifyResponse,
    HighRiskPositionRead,
    ReassessRequest,
    ScoreRead,
)

router = APIRouter(prefix="/api/bzr/risk", tags=["bzr-risk"])


def _not_reduced(exc: service.ResidualRiskNotReducedError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "residual_not_reduced",
            "initial_value": exc.initial,
            "residual_value": exc.residual,
            "message": str(exc),
        },
    )


def _conflict(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": error, "message": str(exc)},
    )


def _not_found(exc: KeyError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "not_found", "message": str(exc.args[0]) if exc.args else "not found"},
    )


@router.post("/classify", response_model=ClassifyResponse)
def classify(payload: ClassifyRequest) -> ClassifyResponse:
    initial, residual = service.score_assessment(
        (payload.initial.e, payload.initial.p, payload.initial.f),
        (payload.residual.e, payload.residual.p, payload.residual.f),
    )
    return ClassifyResponse(
        initial=ScoreRead(value=initial.value, band=initial.band.code, label=initial.band.label),
        residual=ScoreRead(value=residual.value, band=residual.band.code, label=residual.band.label),
        is_high_risk=service.UNACCEPTABLE in (initial.band, residual.band),
        residual_reduced=residual.value < initial.value,
    )


@router.post("/assessments", response_model=AssessmentRead, status_code=status.HTTP_201_CREATED)
def create_assessment(payload: AssessmentCreate) -> Response:
    try:
        assessment = service.record_assessment(payload.model_dump())
    except service.ResidualRiskNotReducedError as exc:
        return _not_reduced(exc)
    return AssessmentRead.model_validate(assessment)


@router.get("/assessments", response_model=list[AssessmentRead])
def list_assessments(company_id: int = Query(...), position_id: int = Query(...)) -> list[AssessmentRead]:
    return [AssessmentRead.model_validate(a) for a in service.list_current(company_id, position_id)]


@router.get("/assessments/{assessment_id}", response_model=AssessmentRead)
def get_assessment(assessment_id: int) -> Response:
    try:
        assessment = service.get_assessment(assessment_id)
    except KeyError as exc:
        return _not_found(exc)
    return AssessmentRead.model_validate(assessment)


@router.post(
    "/assessments/{assessment_id}/reassess",
    response_model=AssessmentRead,
    status_code=status.HTTP_201_CREATED,
)
def reassess(assessment_id: int, payload: ReassessRequest) -> Response:
    try:
        assessment = service.reassess(assessment_id, payload.model_dump())
    except KeyError as exc:
        return _not_found(exc)
    except service.ResidualRiskNotReducedError as exc:
        return _not_reduced(exc)
    except service.AssessmentSupersededError as exc:
        return _conflict("assessment_superseded", exc)
    return AssessmentRead.model_validate(assessment)


@router.post("/documents", response_model=list[AssessmentRead])
def attach_document(payload: AttachDocumentRequest) -> Response:
    try:
        attached = service.attach_to_document(payload.company_id, payload.position_id, payload.version)
    except service.AssessmentLockedError as exc:
        return _conflict("assessment_locked", exc)
    return [AssessmentRead.model_validate(a) for a in attached]


@router.get("/high-risk", response_model=list[HighRiskPositionRead])
def high_risk(company_id: int = Query(...)) -> list[HighRiskPositionRead]:
    return [HighRiskPositionRead.model_validate(p) for p in service.high_risk_positions(company_id)]


@router.get("/export")
def export_pdf(company_id: int = Query(...), position_id: int = Query(...)) -> Response:
    assessments = service.list_current(company_id, position_id)
    if not assessments:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "not_found", "message": "No assessments for position"},
        )
    versions = {a.document_version for a in assessments if a.document_version}
    pdf_bytes = pdf_export.build_pdf(
        position_name=assessments[0].position_name,
        assessments=assessments,
        document_version=versions.pop() if len(versions) == 1 else None,
    )
    filename = f"procena_rizika_{company_id}_{position_id}.pdf"
    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename={filename}"},
    )
