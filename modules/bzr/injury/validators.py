"""Pydantic schemas for the injury API."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Severity = Literal["laka", "teska", "smrtna"]


class EsawCodes(BaseModel):
    esaw_radni_status: Optional[str] = None
    esaw_zanimanje: Optional[str] = None
    esaw_delatnost_poslodavca: Optional[str] = None
    esaw_vrsta_radnog_mesta: Optional[str] = None
    esaw_radno_okruzenje: Optional[str] = None
    esaw_radni_proces: Optional[str] = None
    esaw_specificna_aktivnost: Optional[str] = None
    esaw_odstupanje: Optional[str] = None
    esaw_nacin_povredjivanja: Optional[str] = None
    esaw_materijalni_uzrocnik_odstupanja: Optional[str] = None
    esaw_materijalni_uzrocnik_povredjivanja: Optional[str] = None
    esaw_povredjeni_deo_tela: Optional[str] = None
    esaw_vrsta_povrede: Optional[str] = None


class InjuryReportCreate(EsawCodes):
    company_id: int
    injured_name: str = Field(min_length=1, max_length=255)
    injury_date: date
    description: Optional[str] = None
    severity: Optional[Severity] = None

    @field_validator("injured_name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Field is required")
        return value.strip()


class InjuryReportRead(EsawCodes):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    injured_name: str
    injury_date: date
    description: Optional[str] = None
    severity: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class ClassificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    table_no: int
    table_name: str
    code: str
    name: str
    parent_code: Optional[str] = None
    level: int


class TableSummaryRead(BaseModel):
    table_no: int
    table_name: str
    code_count: int


class CodeValidationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    valid: bool
    unknown: Dict[str, str]
    warnings: List[str]
