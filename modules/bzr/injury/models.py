"""SQLAlchemy models for ESAW classifications and injury reports."""

from typing import Dict

from sqlalchemy import Column, Date, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

from utils.audit import now_utc_naive

InjuryBase = declarative_base()

# report column -> ESAW table number
ESAW_FIELDS: Dict[str, int] = {
    "esaw_radni_status": 1,
    "esaw_zanimanje": 2,
    "esaw_delatnost_poslodavca": 3,
    "esaw_vrsta_radnog_mesta": 4,
    "esaw_radno_okruzenje": 5,
    "esaw_radni_proces": 6,
    "esaw_specificna_aktivnost": 7,
    "esaw_odstupanje": 8,
    "esaw_nacin_povredjivanja": 9,
    "esaw_materijalni_uzrocnik_odstupanja": 10,
    "esaw_materijalni_uzrocnik_povredjivanja": 11,
    "esaw_povredjeni_deo_tela": 12,
    "esaw_vrsta_povrede": 13,
}


class EsawClassification(InjuryBase):
    __tablename__ = "esaw_classifications"
    __table_args__ = (UniqueConstraint("table_no", "code", name="uq_esaw_table_code"),)

    id = Column(Integer, primary_key=True)
    table_no = Column(Integer, nullable=False, index=True)
    table_name = Column(String(500), nullable=False)
    code = Column(String(20), nullable=False)
    name = Column(String(500), nullable=False)
    parent_code = Column(String(20))
    level = Column(Integer, default=1)


class InjuryReport(InjuryBase):
    """Izvestaj o povredi na radu, reduced to the coded fields."""

    __tablename__ = "injury_reports"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False, index=True)
    injured_name = Column(String(255), nullable=False)
    injury_date = Column(Date, nullable=False)
    description = Column(Text)
    severity = Column(String(50))  # laka / teska / smrtna
    status = Column(String(50), default="draft", nullable=False)

    esaw_radni_status = Column(String(20))
    esaw_zanimanje = Column(String(20))
    esaw_delatnost_poslodavca = Column(String(20))
    esaw_vrsta_radnog_mesta = Column(String(20))
    esaw_radno_okruzenje = Column(String(20))
    esaw_radni_proces = Column(String(20))
    esaw_specificna_aktivnost = Column(String(20))
    esaw_odstupanje = Column(String(20))
    esaw_nacin_povredjivanja = Column(String(20))
    esaw_materijalni_uzrocnik_odstupanja = Column(String(20))
    esaw_materijalni_uzrocnik_povredjivanja = Column(String(20))
    esaw_povredjeni_deo_tela = Column(String(20))
    esaw_vrsta_povrede = Column(String(20))

    created_at = Column(DateTime, default=now_utc_naive)
    updated_at = Column(DateTime, default=now_utc_naive, onupdate=now_utc_naive)


__all__ = ["ESAW_FIELDS", "EsawClassification", "InjuryBase", "InjuryReport"]
