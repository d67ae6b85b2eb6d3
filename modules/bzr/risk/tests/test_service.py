from __future__ import annotations

import pytest

from modules.bzr.risk import repository, service


def _payload(**overrides):
    payload = {
        "company_id": 1,
        "position_id": 10,
        "position_name": "Zavarivac",
        "hazard_code": "H-01",
        "hazard_description": "Rad na visini",
        "initial_e": 6,
        "initial_p": 4,
        "initial_f": 3,
        "residual_e": 3,
        "residual_p": 2,
        "residual_f": 2,
        "corrective_measures": "Zastitna ograda",
    }
    payload.update(overrides)
    return payload


@pytest.mark.parametrize(
    "value, band",
    [
        (1, "acceptable"),
        (36, "acceptable"),
        (37, "monitor"),
        (70, "monitor"),
        (71, "unacceptable"),
        (216, "unacceptable"),
    ],
)
def test_band_boundaries(value, band):
    assert service.classify_risk(value).code == band


def test_score_multiplies_factors():
    result = service.score(4, 3, 3)
    assert result.value == 36
    assert result.band is service.ACCEPTABLE
    assert service.score(6, 6, 2).band.label == "Висок ризик (неприхватљив)"


@pytest.mark.parametrize("factors", [(0, 1, 1), (1, 7, 1), (1, 1, -2), (1.5, 2, 2), (True, 2, 2)])
def test_factor_out_of_range_rejected(factors):
    with pytest.raises(service.RiskInputError):
        service.calculate_risk(*factors)


def test_classify_rejects_values_outside_product_range():
    with pytest.raises(service.RiskInputError):
        service.classify_risk(0)
    with pytest.raises(service.RiskInputError):
        service.classify_risk(217)


def test_high_risk_when_either_score_unacceptable():
    assert service.is_high_risk((6, 6, 2), (2, 2, 2))
    assert service.is_high_risk((6, 6, 6), (6, 6, 5))
    assert not service.is_high_risk((4, 4, 4), (2, 2, 2))


def test_record_assessment_derives_high_risk_flag():
    assessment = service.record_assessment(_payload())
    assert assessment.id > 0
    # 6*4*3 = 72 initial, 12 residual
    assert assessment.is_high_risk is True
    assert service.describe(assessment)["initial_band"] == "unacceptable"
    assert service.describe(assessment)["residual_value"] == 12


def test_residual_must_be_lower_than_initial():
    with pytest.raises(service.ResidualRiskNotReducedError) as excinfo:
        service.record_assessment(_payload(residual_e=6, residual_p=4, residual_f=3))
    assert excinfo.value.initial == 72
    assert excinfo.value.residual == 72
    assert service.list_current(1, 10) == []


def test_reassess_supersedes_previous_row():
    first = service.record_assessment(_payload())
    second = service.reassess(
        first.id,
        {"residual_e": 2, "residual_p": 2, "residual_f": 2, "initial_e": 6, "initial_p": 4, "initial_f": 3},
    )
    assert second.supersedes_id == first.id
    assert service.get_assessment(first.id).superseded_at is not None
    assert [a.id for a in service.list_current(1, 10)] == [second.id]

    with pytest.raises(service.AssessmentSupersededError):
        service.reassess(first.id, {"residual_e": 1})


def test_get_missing_assessment_raises_key_error():
    with pytest.raises(KeyError):
        service.get_assessment(999)


def test_repository_updates_of_missing_rows_raise_key_error():
    with repository.company_connection() as conn:
        with pytest.raises(KeyError, match="Assessment 41"):
            repository.mark_superseded(conn, 41)
        with pytest.raises(KeyError, match="Assessment 42"):
            repository.set_document_version(conn, 42, "v1")


def test_attach_to_document_locks_version():
    service.record_assessment(_payload())
    attached = service.attach_to_document(1, 10, "v1")
    assert [a.document_version for a in attached] == ["v1"]
    # same version is a no-op
    service.attach_to_document(1, 10, "v1")
    with pytest.raises(service.AssessmentLockedError) as excinfo:
        service.attach_to_document(1, 10, "v2")
    assert excinfo.value.version == "v1"


def test_high_risk_positions_grouped_by_position():
    service.record_assessment(_payload())
    service.record_assessment(_payload(hazard_code="H-02", initial_e=6, initial_p=6, initial_f=2,
                                       corrective_measures="Obuka"))
    service.record_assessment(_payload(position_id=11, position_name="Magacioner", hazard_code="H-03",
                                       initial_e=2, initial_p=2, initial_f=2,
                                       residual_e=1, residual_p=1, residual_f=1))
    positions = service.high_risk_positions(1)
    assert len(positions) == 1
    entry = positions[0]
    assert entry.position_name == "Zavarivac"
    assert entry.hazard_summary == "Ri=72, R=12; Ri=72, R=12"
    assert entry.corrective_measures == "Zastitna ograda; Obuka"
    assert len(entry.assessment_ids) == 2


def test_band_counts_use_residual_score():
    a = service.record_assessment(_payload())
    b = service.record_assessment(_payload(hazard_code="H-02", initial_e=6, initial_p=6, initial_f=6,
                                           residual_e=6, residual_p=6, residual_f=5))
    assert service.band_counts([a, b]) == {"acceptable": 1, "monitor": 0, "unacceptable": 1}


@pytest.mark.parametrize(
    "factors, value, band",
    [
        ((1, 1, 1), 1, "acceptable"),
        ((2, 3, 6), 36, "acceptable"),
        ((2, 4, 5), 40, "monitor"),
        ((6, 6, 2), 72, "unacceptable"),
        ((6, 6, 3), 108, "unacceptable"),
    ],
)
def test_reference_triples(factors, value, band):
    result = service.score(*factors)
    assert (result.value, result.band.code) == (value, band)
