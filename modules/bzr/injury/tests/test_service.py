from __future__ import annotations

from datetime import date

import pytest

from modules.bzr.injury import service
from modules.bzr.injury.models import ESAW_FIELDS


def test_seed_is_idempotent():
    first = service.seed_classifications()
    assert first == len(service.load_seed_file())
    assert service.seed_classifications() == 0


def test_seed_file_covers_all_report_tables():
    tables = {row["table_no"] for row in service.load_seed_file()}
    assert set(ESAW_FIELDS.values()) <= tables
    assert tables == set(range(1, 20))


def test_options_ordered_by_code_with_hierarchy():
    options = service.get_options(1)
    codes = [o.code for o in options]
    assert codes == sorted(codes)
    employed = {o.code: o for o in options}
    assert employed["10"].name == "Zaposleni"
    assert employed["11"].parent_code == "10"
    assert employed["11"].level == 2


def test_tables_summary_lists_nineteen_tables():
    summary = service.tables_summary()
    assert [row["table_no"] for row in summary] == list(range(1, 20))
    assert summary[0]["table_name"] == "Radni status povredjenog"
    assert all(row["code_count"] > 0 for row in summary)


def test_validate_known_codes():
    result = service.validate_report_codes(
        {"esaw_radni_status": "11", "esaw_povredjeni_deo_tela": "54", "esaw_vrsta_povrede": "020"}
    )
    assert result.valid
    assert result.unknown == {}
    assert result.warnings == []


def test_validate_flags_unknown_codes_and_skips_blanks():
    result = service.validate_report_codes(
        {"esaw_radni_status": "77", "esaw_zanimanje": "", "esaw_vrsta_povrede": None}
    )
    assert not result.valid
    assert result.unknown == {"esaw_radni_status": "77"}


def test_head_amputation_warning_is_advisory():
    result = service.validate_report_codes(
        {"esaw_povredjeni_deo_tela": "11", "esaw_vrsta_povrede": "040"}
    )
    assert result.valid
    assert result.warnings == ["Traumatska amputacija glave je neobicna klasifikacija - proverite"]


def test_validate_rejects_unknown_field_names():
    with pytest.raises(ValueError):
        service.validate_report_codes({"esaw_boja_kacige": "1"})


def test_create_report_rejects_unknown_codes():
    with pytest.raises(service.InvalidEsawCodeError) as excinfo:
        service.create_report(
            {
                "company_id": 3,
                "injured_name": "Petar Petrovic",
                "injury_date": date(2025, 2, 14),
                "esaw_vrsta_povrede": "998",
            }
        )
    assert excinfo.value.unknown == {"esaw_vrsta_povrede": "998"}


def test_create_and_read_report():
    report = service.create_report(
        {
            "company_id": 3,
            "injured_name": "Petar Petrovic",
            "injury_date": date(2025, 2, 14),
            "description": "Pad sa merdevina",
            "severity": "laka",
            "esaw_odstupanje": "52",
            "esaw_povredjeni_deo_tela": " 54 ",
            "esaw_zanimanje": "",
        }
    )
    stored = service.get_report(report.id)
    assert stored.status == "draft"
    assert stored.esaw_povredjeni_deo_tela == "54"
    assert stored.esaw_zanimanje is None
    with pytest.raises(KeyError):
        service.get_report(report.id + 1)
