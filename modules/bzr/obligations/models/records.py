"""Typed views of the source rows the obligation detector scans.

Each variant knows which table it came from, which obligation type it
produces and its legal basis. Medical exams and training carry a
frequency text; the three inspection kinds carry the next inspection date.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import ClassVar, Optional, Union

from .enums import ObligationType


@dataclass(frozen=True, slots=True)
class MedicalExam:
    source_table: ClassVar[str] = "medical_exam_requirements"
    obligation_type: ClassVar[ObligationType] = ObligationType.MEDICAL_EXAM
    legal_basis: ClassVar[str] = "Zakon o BZR, clan 41"

    record_id: int
    exam_type: str
    position_name: str
    frequency: Optional[str]

    @property
    def description(self) -> str:
        return f"{self.exam_type} - {self.position_name}"


@dataclass(frozen=True, slots=True)
class Training:
    source_table: ClassVar[str] = "training_requirements"
    obligation_type: ClassVar[ObligationType] = ObligationType.TRAINING
    legal_basis: ClassVar[str] = "Zakon o BZR, clan 27-30"

    record_id: int
    training_type: str
    position_name: str
    frequency: Optional[str]

    @property
    def description(self) -> str:
        return f"{self.training_type} - {self.position_name}"


@dataclass(frozen=True, slots=True)
class EquipmentInspection:
    source_table: ClassVar[str] = "evidence_equipment_inspections"
    obligation_type: ClassVar[ObligationType] = ObligationType.EQUIPMENT_INSPECTION
    legal_basis: ClassVar[str] = "Zakon o BZR, clan 16"

    record_id: int
    equipment_name: str
    next_inspection: Optional[date]

    @property
    def description(self) -> str:
        return f"Pregled opreme: {self.equipment_name}"


@dataclass(frozen=True, slots=True)
class ElectricalInspection:
    source_table: ClassVar[str] = "evidence_electrical_inspections"
    obligation_type: ClassVar[ObligationType] = ObligationType.ELECTRICAL_INSPECTION
    legal_basis: ClassVar[str] = "Zakon o BZR, clan 15"

    record_id: int
    installation_type: str
    next_inspection: Optional[date]

    @property
    def description(self) -> str:
        return f"Ispitivanje elektricnih instalacija: {self.installation_type}"


@dataclass(frozen=True, slots=True)
class EnvironmentTest:
    source_table: ClassVar[str] = "evidence_environment_tests"
    obligation_type: ClassVar[ObligationType] = ObligationType.ENVIRONMENT_TEST
    legal_basis: ClassVar[str] = "Zakon o BZR, clan 14"

    record_id: int
    test_type: str
    next_inspection: Optional[date]

    @property
    def description(self) -> str:
        return f"Ispitivanje uslova radne okoline: {self.test_type}"


SourceRecord = Union[MedicalExam, Training, EquipmentInspection, ElectricalInspection, EnvironmentTest]
