"""Risk scoring rules and hazard assessment workflow.

Risk is the product of three ordinal factors, severity (E), probability (P)
and frequency (F), each on a 1-6 scale, giving a value in 1-216. The value
falls into one of three bands with inclusive upper bounds of 36 and 70.
The band is always recomputed from the triple; only ``is_high_risk`` is
stored, and every writer derives it here.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from . import repository
from .models import HazardAssessment, HighRiskPosition, RiskBand, RiskScore, RiskTriple

logger = logging.getLogger(__name__)

FACTOR_MIN = 1
FACTOR_MAX = 6

ACCEPTABLE = RiskBand("acceptable", "Низак ризик (прихватљив)", 36)
MONITOR = RiskBand("monitor", "Средњи ризик (потребно праћење)", 70)
UNACCEPTABLE = RiskBand("unacceptable", "Висок ризик (неприхватљив)", None)

RISK_BANDS: Sequence[RiskBand] = (ACCEPTABLE, MONITOR, UNACCEPTABLE)
RISK_BY_CODE = {band.code: band for band in RISK_BANDS}


class RiskInputError(ValueError):
    """Raised when a risk factor or value is outside its defined range."""


class ResidualRiskNotReducedError(ValueError):
    """Raised when residual risk is not strictly below initial risk."""

    def __init__(self, initial: int, residual: int):
        super().__init__(
            f"Residual risk {residual} must be lower than initial risk {initial}."
        )
        self.initial = initial
        self.residual = residual


class AssessmentSupersededError(RuntimeError):
    """Raised when a superseded assessment is used as the base of a change."""

    def __init__(self, assessment_id: int):
        super().__init__(f"Assessment {assessment_id} has already been superseded.")
        self.assessment_id = assessment_id


class AssessmentLockedError(RuntimeError):
    """Raised when an assessment already attached to a document would change."""

    def __init__(self, assessment_id: int, version: str):
        super().__init__(
            f"Assessment {assessment_id} is attached to document version {version}."
        )
        self.assessment_id = assessment_id
        self.version = version


def _check_factor(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RiskInputError(f"{name} must be an integer, got {value!r}")
    if not FACTOR_MIN <= value <= FACTOR_MAX:
        raise RiskInputError(f"{name} must be between {FACTOR_MIN} and {FACTOR_MAX}, got {value}")
    return value


def calculate_risk(e: int, p: int, f: int) -> int:
    return _check_factor("E", e) * _check_factor("P", p) * _check_factor("F", f)


def classify_risk(value: int) -> RiskBand:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RiskInputError(f"Risk value must be an integer, got {value!r}")
    if not FACTOR_MIN <= value <= FACTOR_MAX ** 3:
        raise RiskInputError(f"Risk value out of range: {value}")
    if value <= ACCEPTABLE.upper_bound:
        return ACCEPTABLE
    if value <= MONITOR.upper_bound:
        return MONITOR
    return UNACCEPTABLE


def score(e: int, p: int, f: int) -> RiskScore:
    value = calculate_risk(e, p, f)
    return RiskScore(value=value, band=classify_risk(value))


def score_assessment(
    initial: Iterable[int], residual: Iterable[int]
) -> tuple[RiskScore, RiskScore]:
    """Score an (initial, residual) pair of E/P/F triples."""
    return score(*_triple(initial)), score(*_triple(residual))


def is_high_risk(initial: Iterable[int], residual: Iterable[int]) -> bool:
    initial_score, residual_score = score_assessment(initial, residual)
    return UNACCEPTABLE in (initial_score.band, residual_score.band)


def _triple(values: Iterable[int]) -> RiskTriple:
    items = tuple(values)
    if len(items) != 3:
        raise RiskInputError(f"Expected three factors (E, P, F), got {len(items)}")
    return RiskTriple(*items)


def _payload_triples(payload: Mapping[str, Any]) -> tuple[RiskTriple, RiskTriple]:
    initial = RiskTriple(payload.get("initial_e"), payload.get("initial_p"), payload.get("initial_f"))
    residual = RiskTriple(payload.get("residual_e"), payload.get("residual_p"), payload.get("residual_f"))
    return initial, residual


def _prepare(payload: Mapping[str, Any]) -> dict[str, Any]:
    initial, residual = _payload_triples(payload)
    initial_score, residual_score = score_assessment(initial, residual)
    if residual_score.value >= initial_score.value:
        raise ResidualRiskNotReducedError(initial_score.value, residual_score.value)
    prepared = {key: payload.get(key) for key in repository.INSERT_FIELDS}
    prepared["is_high_risk"] = UNACCEPTABLE in (initial_score.band, residual_score.band)
    prepared["supersedes_id"] = None
    return prepared


def record_assessment(payload: Mapping[str, Any]) -> HazardAssessment:
    prepared = _prepare(payload)
    with repository.company_connection() as conn:
        assessment = repository.insert_assessment(conn, prepared)
    logger.info(
        "Recorded hazard assessment %s for company %s position %s (high risk: %s)",
        assessment.id,
        assessment.company_id,
        assessment.position_id,
        assessment.is_high_risk,
    )
    return assessment


def get_assessment(assessment_id: int) -> HazardAssessment:
    with repository.company_connection() as conn:
        assessment = repository.fetch_assessment(conn, assessment_id)
    if assessment is None:
        raise KeyError(f"Assessment {assessment_id} not found")
    return assessment


def list_current(company_id: int, position_id: int) -> list[HazardAssessment]:
    with repository.company_connection() as conn:
        return repository.list_current(conn, company_id, position_id)


def reassess(assessment_id: int, payload: Mapping[str, Any]) -> HazardAssessment:
    """Supersede an assessment with a new one; the old row is only stamped."""
    with repository.company_connection() as conn:
        previous = repository.fetch_assessment(conn, assessment_id)
        if previous is None:
            raise KeyError(f"Assessment {assessment_id} not found")
        if not previous.is_current:
            raise AssessmentSupersededError(assessment_id)
        merged = {
            "company_id": previous.company_id,
            "position_id": previous.position_id,
            "position_name": previous.position_name,
            "hazard_code": previous.hazard_code,
            "hazard_description": previous.hazard_description,
            "corrective_measures": previous.corrective_measures,
        }
        merged.update({name: getattr(previous, name) for name in repository.TRIPLE_FIELDS})
        merged.update({k: v for k, v in payload.items() if v is not None})
        # identity of the hazard stays with the row being replaced
        merged["company_id"] = previous.company_id
        merged["position_id"] = previous.position_id
        prepared = _prepare(merged)
        prepared["supersedes_id"] = previous.id
        repository.mark_superseded(conn, previous.id)
        replacement = repository.insert_assessment(conn, prepared)
    logger.info("Assessment %s superseded by %s", assessment_id, replacement.id)
    return replacement


def attach_to_document(company_id: int, position_id: int, version: str) -> list[HazardAssessment]:
    with repository.company_connection() as conn:
        current = repository.list_current(conn, company_id, position_id)
        for assessment in current:
            if assessment.document_version and assessment.document_version != version:
                raise AssessmentLockedError(assessment.id, assessment.document_version)
        return [repository.set_document_version(conn, a.id, version) for a in current]


def describe(assessment: HazardAssessment) -> dict[str, Any]:
    initial_score, residual_score = score_assessment(assessment.initial, assessment.residual)
    return {
        "initial_value": initial_score.value,
        "initial_band": initial_score.band.code,
        "initial_label": initial_score.band.label,
        "residual_value": residual_score.value,
        "residual_band": residual_score.band.code,
        "residual_label": residual_score.band.label,
    }


def group_high_risk(assessments: Iterable[HazardAssessment]) -> list[HighRiskPosition]:
    grouped: dict[int, HighRiskPosition] = {}
    summaries: dict[int, list[str]] = {}
    measures: dict[int, list[str]] = {}
    for assessment in assessments:
        if not assessment.is_high_risk:
            continue
        entry = grouped.get(assessment.position_id)
        if entry is None:
            entry = HighRiskPosition(
                position_id=assessment.position_id,
                position_name=assessment.position_name,
                hazard_summary="",
                corrective_measures="",
                assessment_ids=[],
            )
            grouped[assessment.position_id] = entry
            summaries[assessment.position_id] = []
            measures[assessment.position_id] = []
        initial_score, residual_score = score_assessment(assessment.initial, assessment.residual)
        summaries[assessment.position_id].append(f"Ri={initial_score.value}, R={residual_score.value}")
        if assessment.corrective_measures:
            measures[assessment.position_id].append(assessment.corrective_measures)
        entry.assessment_ids.append(assessment.id)
    for position_id, entry in grouped.items():
        entry.hazard_summary = "; ".join(summaries[position_id])
        entry.corrective_measures = "; ".join(measures[position_id])
    return list(grouped.values())


def high_risk_positions(company_id: int) -> list[HighRiskPosition]:
    with repository.company_connection() as conn:
        assessments = repository.list_current_high_risk(conn, company_id)
    return group_high_risk(assessments)


def band_counts(assessments: Sequence[HazardAssessment]) -> dict[str, int]:
    counts = {band.code: 0 for band in RISK_BANDS}
    for assessment in assessments:
        counts[score(*assessment.residual).band.code] += 1
    return counts
