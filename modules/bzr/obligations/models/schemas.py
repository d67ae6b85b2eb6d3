"""Pydantic schemas for legal obligation payloads."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


def _required(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("Field is required")
    return value.strip()


def _email(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    value = value.strip()
    local, _, domain = value.partition("@")
    if not local or not domain or "." not in domain:
        raise ValueError("Invalid email address")
    return value


class AgencyCreate(BaseModel):
    name: str
    email: Optional[str] = None

    @field_validator("name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _required(value)

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: Optional[str]) -> Optional[str]:
        return _email(value)


class CompanyCreate(BaseModel):
    name: str
    email: Optional[str] = None
    owner_email: Optional[str] = None
    agency_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _required(value)

    @field_validator("email", "owner_email")
    @classmethod
    def valid_email(cls, value: Optional[str]) -> Optional[str]:
        return _email(value)


class PositionCreate(BaseModel):
    company_id: int
    position_name: str
    job_description: Optional[str] = None
    total_count: int = 0

    @field_validator("position_name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _required(value)


class FrequencyRequirementCreate(BaseModel):
    position_id: int
    kind: str
    frequency: Optional[str] = None

    @field_validator("kind")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _required(value)


class InspectionCreate(BaseModel):
    company_id: int
    name: str
    last_inspection: Optional[date] = None
    next_inspection: Optional[date] = None

    @field_validator("name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _required(value)


class CreatedRead(BaseModel):
    id: int


class SyncRequest(BaseModel):
    company_id: int
    agency_id: Optional[int] = None


class SyncRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    company_id: int
    created: int
    expired: int
    by_type: Dict[str, int]
    errors: List[str]


class DeliveryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    obligation_id: int
    gate: str
    recipient_kind: str
    address: Optional[str]
    ok: bool
    error: Optional[str]


class SweepRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sent: int
    delivered: int
    failed: int
    errors: List[str]
    deliveries: List[DeliveryRead]


class ObligationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    agency_id: Optional[int]
    obligation_type: str
    description: str
    worker_id: Optional[int]
    worker_name: Optional[str]
    due_date: date
    legal_basis: Optional[str]
    status: str
    notified_30: bool
    notified_7: bool
    notified_1: bool
    notified_expired: bool
    source_table: Optional[str]
    source_record_id: Optional[int]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
