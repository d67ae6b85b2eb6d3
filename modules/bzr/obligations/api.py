"""FastAPI routes for legal obligations and deadline reminders."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from notifications.services.email import get_email_sender

from . import detector, notifier, services
from .models.schemas import (
    AgencyCreate,
    CompanyCreate,
    CreatedRead,
    FrequencyRequirementCreate,
    InspectionCreate,
    ObligationRead,
    PositionCreate,
    SweepRead,
    SyncRead,
    SyncRequest,
)

router = APIRouter(prefix="/api/bzr/obligations", tags=["bzr-obligations"])


def _not_found(exc: KeyError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "not_found", "message": str(exc.args[0]) if exc.args else "not found"},
    )


@router.get("/upcoming", response_model=List[ObligationRead])
def upcoming(
    company_id: Optional[int] = Query(None),
    agency_id: Optional[int] = Query(None),
    today: Optional[date] = Query(None),
    days: int = Query(services.UPCOMING_DAYS, ge=0, le=3650),
) -> List[ObligationRead]:
    rows = services.list_upcoming(company_id, agency_id, today=today, days=days)
    return [ObligationRead.model_validate(row) for row in rows]


@router.get("/overdue", response_model=List[ObligationRead])
def overdue(
    company_id: Optional[int] = Query(None),
    agency_id: Optional[int] = Query(None),
    today: Optional[date] = Query(None),
) -> List[ObligationRead]:
    rows = services.list_overdue(company_id, agency_id, today=today)
    return [ObligationRead.model_validate(row) for row in rows]


@router.post("/sync", response_model=SyncRead)
def sync(payload: SyncRequest, today: Optional[date] = Query(None)):
    result = detector.sync_obligations(payload.company_id, payload.agency_id, today=today)
    if not result.company_found:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "company_not_found", "message": result.errors[0]},
        )
    return SyncRead.model_validate(result)


@router.post("/notifications/send", response_model=SweepRead)
def send_notifications(
    today: Optional[date] = Query(None),
    dry_run: bool = Query(False),
) -> SweepRead:
    sender = get_email_sender(dry_run=dry_run)
    result = notifier.check_and_send_notifications(today=today, sender=sender)
    return SweepRead.model_validate(result)


@router.post("/sources/agencies", response_model=CreatedRead, status_code=status.HTTP_201_CREATED)
def create_agency(payload: AgencyCreate) -> CreatedRead:
    return CreatedRead(id=services.add_agency(payload.name, payload.email))


@router.post("/sources/companies", response_model=CreatedRead, status_code=status.HTTP_201_CREATED)
def create_company(payload: CompanyCreate):
    try:
        new_id = services.add_company(
            payload.name,
            email=payload.email,
            owner_email=payload.owner_email,
            agency_id=payload.agency_id,
        )
    except KeyError as exc:
        return _not_found(exc)
    return CreatedRead(id=new_id)


@router.post("/sources/positions", response_model=CreatedRead, status_code=status.HTTP_201_CREATED)
def create_position(payload: PositionCreate):
    try:
        new_id = services.add_position(
            payload.company_id,
            payload.position_name,
            job_description=payload.job_description,
            total_count=payload.total_count,
        )
    except KeyError as exc:
        return _not_found(exc)
    return CreatedRead(id=new_id)


@router.post("/sources/medical-exams", response_model=CreatedRead, status_code=status.HTTP_201_CREATED)
def create_medical_exam(payload: FrequencyRequirementCreate):
    try:
        new_id = services.add_medical_exam(payload.position_id, payload.kind, payload.frequency)
    except KeyError as exc:
        return _not_found(exc)
    return CreatedRead(id=new_id)


@router.post("/sources/trainings", response_model=CreatedRead, status_code=status.HTTP_201_CREATED)
def create_training(payload: FrequencyRequirementCreate):
    try:
        new_id = services.add_training(payload.position_id, payload.kind, payload.frequency)
    except KeyError as exc:
        return _not_found(exc)
    return CreatedRead(id=new_id)


_INSPECTION_CREATORS = {
    "equipment-inspections": services.add_equipment_inspection,
    "electrical-inspections": services.add_electrical_inspection,
    "environment-tests": services.add_environment_test,
}


@router.post("/sources/{kind}", response_model=CreatedRead, status_code=status.HTTP_201_CREATED)
def create_inspection(kind: str, payload: InspectionCreate):
    creator = _INSPECTION_CREATORS.get(kind)
    if creator is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "unknown_source", "message": f"Unknown source table: {kind}"},
        )
    try:
        new_id = creator(
            payload.company_id,
            payload.name,
            next_inspection=payload.next_inspection,
            last_inspection=payload.last_inspection,
        )
    except KeyError as exc:
        return _not_found(exc)
    return CreatedRead(id=new_id)


@router.get("/{obligation_id}", response_model=ObligationRead)
def read_obligation(obligation_id: int):
    try:
        return ObligationRead.model_validate(services.get_obligation(obligation_id))
    except KeyError as exc:
        return _not_found(exc)


@router.post("/{obligation_id}/complete", response_model=ObligationRead)
def complete_obligation(obligation_id: int):
    try:
        obligation = services.mark_complete(obligation_id)
    except KeyError as exc:
        return _not_found(exc)
    except services.ObligationTransitionError as exc:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "error": "invalid_transition",
                "current_status": exc.current,
                "message": str(exc),
            },
        )
    return ObligationRead.model_validate(obligation)
