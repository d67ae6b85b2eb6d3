"""SQLAlchemy base and model exports for legal obligations."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()

# convenient re-exports
from .enums import ObligationStatus, ObligationType, NotificationGate  # noqa: E402
from .directory import Agency, Company, WorkPosition  # noqa: E402
from .sources import (  # noqa: E402
    ElectricalInspectionRecord,
    EnvironmentTestRecord,
    EquipmentInspectionRecord,
    MedicalExamRequirement,
    TrainingRequirement,
)
from .obligation import LegalObligation, NotificationDelivery  # noqa: E402
from .records import (  # noqa: E402
    ElectricalInspection,
    EnvironmentTest,
    EquipmentInspection,
    MedicalExam,
    SourceRecord,
    Training,
)

__all__ = [
    "Base",
    "ObligationStatus",
    "ObligationType",
    "NotificationGate",
    "Agency",
    "Company",
    "WorkPosition",
    "MedicalExamRequirement",
    "TrainingRequirement",
    "EquipmentInspectionRecord",
    "ElectricalInspectionRecord",
    "EnvironmentTestRecord",
    "LegalObligation",
    "NotificationDelivery",
    "SourceRecord",
    "MedicalExam",
    "Training",
    "EquipmentInspection",
    "ElectricalInspection",
    "EnvironmentTest",
]
