"""Detection of legal obligations from existing company data.

A sync scans medical exam and training requirements of the company's work
positions and its equipment, electrical and environment inspection records.
Every source row without a tracking obligation gets one; rows that already
have an obligation are left untouched so repeated syncs never duplicate rows
or reset notification flags. The sync finishes by expiring active
obligations whose due date has passed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterator, List, Optional

from sqlalchemy import select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from utils.audit import now_utc_naive, today_utc

from . import repository
from .frequency import add_months, parse_frequency_to_months
from .models import (
    Company,
    ElectricalInspection,
    ElectricalInspectionRecord,
    EnvironmentTest,
    EnvironmentTestRecord,
    EquipmentInspection,
    EquipmentInspectionRecord,
    LegalObligation,
    MedicalExam,
    MedicalExamRequirement,
    ObligationStatus,
    SourceRecord,
    Training,
    TrainingRequirement,
    WorkPosition,
)

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    company_id: int
    company_found: bool = True
    created: int = 0
    expired: int = 0
    by_type: Dict[str, int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)


def compute_due_date(record: SourceRecord, today: date) -> Optional[date]:
    """Next due date for a source record, or ``None`` when it has none."""
    if isinstance(record, (MedicalExam, Training)):
        return add_months(today, parse_frequency_to_months(record.frequency))
    if isinstance(record, (EquipmentInspection, ElectricalInspection, EnvironmentTest)):
        return record.next_inspection
    raise TypeError(f"Unsupported source record: {type(record).__name__}")


def load_source_records(session: Session, company_id: int) -> Iterator[SourceRecord]:
    exams = session.execute(
        select(MedicalExamRequirement, WorkPosition.position_name)
        .join(WorkPosition, MedicalExamRequirement.position_id == WorkPosition.id)
        .where(
            WorkPosition.company_id == company_id,
            MedicalExamRequirement.is_deleted.is_(False),
            WorkPosition.is_deleted.is_(False),
        )
        .order_by(MedicalExamRequirement.id)
    )
    for exam, position_name in exams:
        yield MedicalExam(
            record_id=exam.id,
            exam_type=exam.exam_type,
            position_name=position_name,
            frequency=exam.frequency,
        )

    trainings = session.execute(
        select(TrainingRequirement, WorkPosition.position_name)
        .join(WorkPosition, TrainingRequirement.position_id == WorkPosition.id)
        .where(
            WorkPosition.company_id == company_id,
            TrainingRequirement.is_deleted.is_(False),
            WorkPosition.is_deleted.is_(False),
        )
        .order_by(TrainingRequirement.id)
    )
    for training, position_name in trainings:
        yield Training(
            record_id=training.id,
            training_type=training.training_type,
            position_name=position_name,
            frequency=training.frequency,
        )

    inspection_sources = (
        (EquipmentInspectionRecord, EquipmentInspection, "equipment_name"),
        (ElectricalInspectionRecord, ElectricalInspection, "installation_type"),
        (EnvironmentTestRecord, EnvironmentTest, "test_type"),
    )
    for model, variant, name_field in inspection_sources:
        rows = session.scalars(
            select(model)
            .where(model.company_id == company_id, model.is_deleted.is_(False))
            .order_by(model.id)
        )
        for row in rows:
            yield variant(row.id, getattr(row, name_field), row.next_inspection)


def _obligation_exists(session: Session, company_id: int, record: SourceRecord) -> bool:
    found = session.scalar(
        select(LegalObligation.id)
        .where(
            LegalObligation.company_id == company_id,
            LegalObligation.source_table == record.source_table,
            LegalObligation.source_record_id == record.record_id,
        )
        .limit(1)
    )
    return found is not None


def _insert_obligation(
    session: Session,
    company_id: int,
    agency_id: Optional[int],
    record: SourceRecord,
    due: date,
) -> bool:
    stamp = now_utc_naive()
    stmt = (
        sqlite_insert(LegalObligation)
        .values(
            company_id=company_id,
            agency_id=agency_id,
            obligation_type=record.obligation_type.value,
            description=record.description,
            due_date=due,
            legal_basis=record.legal_basis,
            status=ObligationStatus.ACTIVE.value,
            notified_30=False,
            notified_7=False,
            notified_1=False,
            notified_expired=False,
            source_table=record.source_table,
            source_record_id=record.record_id,
            created_at=stamp,
            updated_at=stamp,
        )
        .on_conflict_do_nothing(
            index_elements=["company_id", "source_table", "source_record_id"]
        )
    )
    result = session.execute(stmt)
    return bool(result.rowcount)


def sync_obligations(
    company_id: int,
    agency_id: Optional[int] = None,
    *,
    today: Optional[date] = None,
) -> SyncResult:
    """Create missing obligations for a company and expire overdue ones."""
    today = today or today_utc()
    result = SyncResult(company_id=company_id)

    with repository.with_session() as session:
        company = session.get(Company, company_id)
        if company is None:
            result.company_found = False
            result.errors.append(f"company {company_id} not found")
            logger.warning("Obligation sync skipped: company %s not found", company_id)
            return result
        if agency_id is None:
            agency_id = company.agency_id
        records = list(load_source_records(session, company_id))

    for record in records:
        label = f"{record.source_table}#{record.record_id}"
        try:
            due = compute_due_date(record, today)
            if due is None:
                continue
            with repository.with_session() as session:
                if _obligation_exists(session, company_id, record):
                    continue
                if _insert_obligation(session, company_id, agency_id, record, due):
                    key = record.obligation_type.value
                    result.by_type[key] = result.by_type.get(key, 0) + 1
                    result.created += 1
        except Exception as exc:
            logger.exception("Obligation sync failed for %s (company %s)", label, company_id)
            result.errors.append(f"{label}: {exc}")

    result.expired = expire_overdue(company_id, today=today)
    logger.info(
        "Obligation sync for company %s: %s created, %s expired, %s errors",
        company_id,
        result.created,
        result.expired,
        len(result.errors),
    )
    return result


def expire_overdue(company_id: Optional[int] = None, *, today: Optional[date] = None) -> int:
    """Move active obligations past their due date to expired in one UPDATE."""
    today = today or today_utc()
    stmt = (
        update(LegalObligation)
        .where(
            LegalObligation.status == ObligationStatus.ACTIVE.value,
            LegalObligation.due_date < today,
        )
        .values(status=ObligationStatus.EXPIRED.value, updated_at=now_utc_naive())
        .execution_options(synchronize_session=False)
    )
    if company_id is not None:
        stmt = stmt.where(LegalObligation.company_id == company_id)
    with repository.with_session() as session:
        return session.execute(stmt).rowcount or 0


__all__ = [
    "SyncResult",
    "compute_due_date",
    "expire_overdue",
    "load_source_records",
    "sync_obligations",
]
