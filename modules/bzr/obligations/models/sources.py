"""Source tables scanned by the obligation detector.

Medical exam and training requirements hang off a work position and carry a
free-text frequency. Inspection records (Obrazac 8, 9 and 10) carry the date
of the next inspection directly.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String

from utils.audit import now_utc_naive

from . import Base


class MedicalExamRequirement(Base):
    __tablename__ = "medical_exam_requirements"

    id = Column(Integer, primary_key=True)
    position_id = Column(Integer, ForeignKey("work_positions.id", ondelete="CASCADE"), nullable=False)
    exam_type = Column(String(255), nullable=False)
    frequency = Column(String(100))
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=now_utc_naive)


class TrainingRequirement(Base):
    __tablename__ = "training_requirements"

    id = Column(Integer, primary_key=True)
    position_id = Column(Integer, ForeignKey("work_positions.id", ondelete="CASCADE"), nullable=False)
    training_type = Column(String(255), nullable=False)
    frequency = Column(String(100))
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=now_utc_naive)


class EquipmentInspectionRecord(Base):
    """Obrazac 8."""

    __tablename__ = "evidence_equipment_inspections"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    equipment_name = Column(String(255), nullable=False)
    last_inspection = Column(Date)
    next_inspection = Column(Date)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=now_utc_naive)


class ElectricalInspectionRecord(Base):
    """Obrazac 9."""

    __tablename__ = "evidence_electrical_inspections"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    installation_type = Column(String(255), nullable=False)
    last_inspection = Column(Date)
    next_inspection = Column(Date)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=now_utc_naive)


class EnvironmentTestRecord(Base):
    """Obrazac 10."""

    __tablename__ = "evidence_environment_tests"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    test_type = Column(String(255), nullable=False)
    last_inspection = Column(Date)
    next_inspection = Column(Date)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=now_utc_naive)
