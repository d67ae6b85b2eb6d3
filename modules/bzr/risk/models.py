"""Datamodel definitions for the risk assessment module."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional


class RiskTriple(NamedTuple):
    """Severity (E), probability (P) and frequency (F), each 1-6."""

    e: int
    p: int
    f: int


@dataclass(frozen=True, slots=True)
class RiskBand:
    code: str
    label: str
    upper_bound: Optional[int]


@dataclass(frozen=True, slots=True)
class RiskScore:
    value: int
    band: RiskBand


@dataclass(slots=True)
class HazardAssessment:
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

    @property
    def initial(self) -> RiskTriple:
        return RiskTriple(self.initial_e, self.initial_p, self.initial_f)

    @property
    def residual(self) -> RiskTriple:
        return RiskTriple(self.residual_e, self.residual_p, self.residual_f)

    @property
    def is_current(self) -> bool:
        return self.superseded_at is None


@dataclass(slots=True)
class HighRiskPosition:
    position_id: int
    position_name: str
    hazard_summary: str
    corrective_measures: str
    assessment_ids: list[int]
