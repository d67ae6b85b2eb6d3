"""Pydantic schemas for risk assessment REST payloads."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .service import score

RiskBandCode = Literal["acceptable", "monitor", "unacceptable"]


class RiskFactors(BaseModel):
    e: int = Field(ge=1, le=6)
    p: int = Field(ge=1, le=6)
    f: int = Field(ge=1, le=6)


class ClassifyRequest(BaseModel):
    initial: RiskFactors
    residual: RiskFactors


class ScoreRead(BaseModel):
    value: int
    band: RiskBandCode
    label: str


class ClassifyResponse(BaseModel):
    initial: ScoreRead
    residual: ScoreRead
    is_high_risk: bool
    residual_reduced: bool


class _TripleFields(BaseModel):
    initial_e: int = Field(ge=1, le=6)
    initial_p: int = Field(ge=1, le=6)
    initial_f: int = Field(ge=1, le=6)
    residual_e: int = Field(ge=1, le=6)
    residual_p: int = Field(ge=1, le=6)
    residual_f: int = Field(ge=1, le=6)


class AssessmentCreate(_TripleFields):
    company_id: int
    position_id: int
    position_name: str
    hazard_code: str
    hazard_description: Optional[str] = None
    corrective_measures: Optional[str] = None

    @field_validator("position_name", "hazard_code")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Field is required")
        return value.strip()


class ReassessRequest(_TripleFields):
    hazard_description: Optional[str] = None
    corrective_measures: Optional[str] = None


class AttachDocumentRequest(BaseModel):
    company_id: int
    position_id: int
    version: str

    @field_validator("version")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Field is required")
        return value.strip()


class AssessmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    position_id: int
    position_name: str
    hazard_code: str
    hazard_description: Optional[str]
    initial_e: int
    initial_p: int
    initial_f: int
    residual_e: int
    residual_p: int
    residual_f: int
    corrective_measures: Optional[str]
    is_high_risk: bool
    document_version: Optional[str]
    supersedes_id: Optional[int]
    superseded_at: Optional[str]
    created_at: str
    initial_value: int = 0
    initial_band: Optional[RiskBandCode] = None
    residual_value: int = 0
    residual_band: Optional[RiskBandCode] = None

    @model_validator(mode="after")
    def fill_scores(self) -> "AssessmentRead":
        initial = score(self.initial_e, self.initial_p, self.initial_f)
        residual = score(self.residual_e, self.residual_p, self.residual_f)
        self.initial_value = initial.value
        self.initial_band = initial.band.code
        self.residual_value = residual.value
        self.residual_band = residual.band.code
        return self


class HighRiskPositionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    position_id: int
    position_name: str
    hazard_summary: str
    corrective_measures: str
    assessment_ids: list[int]
