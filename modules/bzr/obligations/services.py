"""Queries and user actions on legal obligations.

Also holds the small creators for companies, agencies, positions and the
source tables the detector scans.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import select

from utils.audit import now_utc_naive, today_utc

from . import repository
from .models import (
    Agency,
    Company,
    ElectricalInspectionRecord,
    EnvironmentTestRecord,
    EquipmentInspectionRecord,
    LegalObligation,
    MedicalExamRequirement,
    ObligationStatus,
    TrainingRequirement,
    WorkPosition,
)
from .models.enums import ALLOWED_STATUS_TRANSITIONS, OVERDUE_STATUSES

logger = logging.getLogger(__name__)

UPCOMING_DAYS = 90


class ObligationTransitionError(RuntimeError):
    """Raised when an obligation cannot move to the requested status."""

    def __init__(self, obligation_id: int, current: str, target: str):
        super().__init__(f"Obligation {obligation_id} cannot move from {current} to {target}")
        self.obligation_id = obligation_id
        self.current = current
        self.target = target


def _scoped(stmt, company_id: Optional[int], agency_id: Optional[int]):
    if company_id is not None:
        stmt = stmt.where(LegalObligation.company_id == company_id)
    if agency_id is not None:
        stmt = stmt.where(LegalObligation.agency_id == agency_id)
    return stmt.order_by(LegalObligation.due_date, LegalObligation.id)


def list_upcoming(
    company_id: Optional[int] = None,
    agency_id: Optional[int] = None,
    *,
    today: Optional[date] = None,
    days: int = UPCOMING_DAYS,
) -> List[LegalObligation]:
    """Active obligations due between today and ``days`` days from now."""
    today = today or today_utc()
    stmt = select(LegalObligation).where(
        LegalObligation.status == ObligationStatus.ACTIVE.value,
        LegalObligation.due_date >= today,
        LegalObligation.due_date <= today + timedelta(days=days),
    )
    with repository.with_session() as session:
        return list(session.scalars(_scoped(stmt, company_id, agency_id)))


def list_overdue(
    company_id: Optional[int] = None,
    agency_id: Optional[int] = None,
    *,
    today: Optional[date] = None,
) -> List[LegalObligation]:
    """Obligations past their due date that were never completed."""
    today = today or today_utc()
    stmt = select(LegalObligation).where(
        LegalObligation.due_date < today,
        LegalObligation.status.in_([s.value for s in OVERDUE_STATUSES]),
    )
    with repository.with_session() as session:
        return list(session.scalars(_scoped(stmt, company_id, agency_id)))


def get_obligation(obligation_id: int) -> LegalObligation:
    with repository.with_session() as session:
        obligation = session.get(LegalObligation, obligation_id)
        if obligation is None:
            raise KeyError(f"Obligation {obligation_id} not found")
        return obligation


def mark_complete(obligation_id: int) -> LegalObligation:
    target = ObligationStatus.COMPLETED
    with repository.with_session() as session:
        obligation = session.get(LegalObligation, obligation_id)
        if obligation is None:
            raise KeyError(f"Obligation {obligation_id} not found")
        current = ObligationStatus(obligation.status)
        if target not in ALLOWED_STATUS_TRANSITIONS.get(current, set()):
            raise ObligationTransitionError(obligation_id, current.value, target.value)
        obligation.status = target.value
        obligation.updated_at = now_utc_naive()
    logger.info("Obligation %s marked complete", obligation_id)
    return obligation


# --- directory and source records ------------------------------------------


def _add(row, *parents) -> int:
    """Insert ``row`` after checking each ``(model, id)`` parent exists."""
    with repository.with_session() as session:
        for model, parent_id in parents:
            if parent_id is not None and session.get(model, parent_id) is None:
                raise KeyError(f"{model.__name__} {parent_id} not found")
        session.add(row)
        session.flush()
        return row.id


def add_agency(name: str, email: Optional[str] = None) -> int:
    return _add(Agency(name=name, email=email))


def add_company(
    name: str,
    *,
    email: Optional[str] = None,
    owner_email: Optional[str] = None,
    agency_id: Optional[int] = None,
) -> int:
    return _add(
        Company(name=name, email=email, owner_email=owner_email, agency_id=agency_id),
        (Agency, agency_id),
    )


def add_position(
    company_id: int,
    position_name: str,
    *,
    job_description: Optional[str] = None,
    total_count: int = 0,
) -> int:
    return _add(
        WorkPosition(
            company_id=company_id,
            position_name=position_name,
            job_description=job_description,
            total_count=total_count,
        ),
        (Company, company_id),
    )


def add_medical_exam(position_id: int, exam_type: str, frequency: Optional[str] = None) -> int:
    return _add(
        MedicalExamRequirement(position_id=position_id, exam_type=exam_type, frequency=frequency),
        (WorkPosition, position_id),
    )


def add_training(position_id: int, training_type: str, frequency: Optional[str] = None) -> int:
    return _add(
        TrainingRequirement(position_id=position_id, training_type=training_type, frequency=frequency),
        (WorkPosition, position_id),
    )


def add_equipment_inspection(
    company_id: int,
    equipment_name: str,
    *,
    next_inspection: Optional[date] = None,
    last_inspection: Optional[date] = None,
) -> int:
    return _add(
        EquipmentInspectionRecord(
            company_id=company_id,
            equipment_name=equipment_name,
            last_inspection=last_inspection,
            next_inspection=next_inspection,
        ),
        (Company, company_id),
    )


def add_electrical_inspection(
    company_id: int,
    installation_type: str,
    *,
    next_inspection: Optional[date] = None,
    last_inspection: Optional[date] = None,
) -> int:
    return _add(
        ElectricalInspectionRecord(
            company_id=company_id,
            installation_type=installation_type,
            last_inspection=last_inspection,
            next_inspection=next_inspection,
        ),
        (Company, company_id),
    )


def add_environment_test(
    company_id: int,
    test_type: str,
    *,
    next_inspection: Optional[date] = None,
    last_inspection: Optional[date] = None,
) -> int:
    return _add(
        EnvironmentTestRecord(
            company_id=company_id,
            test_type=test_type,
            last_inspection=last_inspection,
            next_inspection=next_inspection,
        ),
        (Company, company_id),
    )


__all__ = [
    "ObligationTransitionError",
    "UPCOMING_DAYS",
    "add_agency",
    "add_company",
    "add_electrical_inspection",
    "add_environment_test",
    "add_equipment_inspection",
    "add_medical_exam",
    "add_position",
    "add_training",
    "get_obligation",
    "list_overdue",
    "list_upcoming",
    "mark_complete",
]
