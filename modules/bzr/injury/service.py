"""ESAW code lookups, validation and injury report creation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from sqlalchemy import func, select

from . import repository
from .models import ESAW_FIELDS, EsawClassification, InjuryReport

logger = logging.getLogger(__name__)

SEED_FILE = Path(__file__).resolve().parents[3] / "data" / "esaw_classifications.yaml"

BODY_PART_FIELD = "esaw_povredjeni_deo_tela"
INJURY_TYPE_FIELD = "esaw_vrsta_povrede"
TRAUMATIC_AMPUTATION = "040"


class InvalidEsawCodeError(ValueError):
    """Raised when a report carries codes missing from their ESAW table."""

    def __init__(self, unknown: Mapping[str, str]):
        listed = ", ".join(f"{name}={code}" for name, code in unknown.items())
        super().__init__(f"Unknown ESAW codes: {listed}")
        self.unknown = dict(unknown)


@dataclass
class CodeValidation:
    valid: bool
    unknown: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


def load_seed_file(path: Path | None = None) -> List[Dict[str, Any]]:
    """Flatten the YAML seed into one dict per classification row."""
    with open(path or SEED_FILE, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    rows: List[Dict[str, Any]] = []
    for table in data.get("tables", []):
        for entry in table.get("codes", []):
            rows.append(
                {
                    "table_no": int(table["table_no"]),
                    "table_name": table["table_name"],
                    "code": str(entry["code"]),
                    "name": entry["name"],
                    "parent_code": entry.get("parent"),
                    "level": int(entry.get("level", 1)),
                }
            )
    return rows


def seed_classifications(path: Path | None = None) -> int:
    """Insert classification rows that are not present yet; returns how many."""
    rows = load_seed_file(path)
    inserted = 0
    with repository.with_session() as session:
        existing = set(session.execute(select(EsawClassification.table_no, EsawClassification.code)))
        for row in rows:
            if (row["table_no"], row["code"]) in existing:
                continue
            session.add(EsawClassification(**row))
            existing.add((row["table_no"], row["code"]))
            inserted += 1
    if inserted:
        logger.info("Seeded %s ESAW classification rows", inserted)
    return inserted


def ensure_seeded() -> None:
    with repository.with_session() as session:
        count = session.scalar(select(func.count()).select_from(EsawClassification))
    if not count:
        seed_classifications()


def get_options(table_no: int) -> List[EsawClassification]:
    ensure_seeded()
    with repository.with_session() as session:
        return list(
            session.scalars(
                select(EsawClassification)
                .where(EsawClassification.table_no == table_no)
                .order_by(EsawClassification.code)
            )
        )


def tables_summary() -> List[Dict[str, Any]]:
    ensure_seeded()
    stmt = (
        select(
            EsawClassification.table_no,
            EsawClassification.table_name,
            func.count(EsawClassification.id),
        )
        .group_by(EsawClassification.table_no, EsawClassification.table_name)
        .order_by(EsawClassification.table_no)
    )
    with repository.with_session() as session:
        return [
            {"table_no": table_no, "table_name": table_name, "code_count": count}
            for table_no, table_name, count in session.execute(stmt)
        ]


def consistency_warnings(codes: Mapping[str, Optional[str]]) -> List[str]:
    warnings: List[str] = []
    body_part = codes.get(BODY_PART_FIELD)
    injury_type = codes.get(INJURY_TYPE_FIELD)
    if body_part and injury_type:
        if body_part.startswith("1") and injury_type == TRAUMATIC_AMPUTATION:
            warnings.append("Traumatska amputacija glave je neobicna klasifikacija - proverite")
    return warnings


def validate_report_codes(codes: Mapping[str, Optional[str]]) -> CodeValidation:
    """Check every filled-in code against its ESAW table.

    Keys are report column names (``esaw_vrsta_povrede`` ...). Blank values are
    skipped. Consistency warnings are advisory and do not make the codes
    invalid.
    """
    unknown: Dict[str, str] = {}
    for name in codes:
        if name not in ESAW_FIELDS:
            raise ValueError(f"Unknown ESAW field: {name}")
    filled = {name: code.strip() for name, code in codes.items() if code and code.strip()}
    if filled:
        ensure_seeded()
        with repository.with_session() as session:
            for name, code in filled.items():
                found = session.scalar(
                    select(EsawClassification.id).where(
                        EsawClassification.table_no == ESAW_FIELDS[name],
                        EsawClassification.code == code,
                    )
                )
                if found is None:
                    unknown[name] = code
    return CodeValidation(valid=not unknown, unknown=unknown, warnings=consistency_warnings(filled))


def create_report(payload: Mapping[str, Any]) -> InjuryReport:
    data = dict(payload)
    codes = {name: data.get(name) for name in ESAW_FIELDS}
    result = validate_report_codes(codes)
    if not result.valid:
        raise InvalidEsawCodeError(result.unknown)
    for warning in result.warnings:
        logger.warning("Injury report for company %s: %s", data.get("company_id"), warning)
    for name, code in codes.items():
        data[name] = code.strip() if code and code.strip() else None
    with repository.with_session() as session:
        report = InjuryReport(**data)
        session.add(report)
        session.flush()
    logger.info("Injury report %s created for company %s", report.id, report.company_id)
    return report


def get_report(report_id: int) -> InjuryReport:
    with repository.with_session() as session:
        report = session.get(InjuryReport, report_id)
        if report is None:
            raise KeyError(f"Injury report {report_id} not found")
        return report


__all__ = [
    "CodeValidation",
    "InvalidEsawCodeError",
    "consistency_warnings",
    "create_report",
    "ensure_seeded",
    "get_options",
    "get_report",
    "load_seed_file",
    "seed_classifications",
    "tables_summary",
    "validate_report_codes",
]
