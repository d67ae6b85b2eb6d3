"""Enumerations used by the legal obligation tracker."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class _StrEnum(str, Enum):
    """Enum subclass that compares/serialises as its value."""

    def __str__(self) -> str:  # pragma: no cover - trivial
        return str(self.value)


class ObligationType(_StrEnum):
    MEDICAL_EXAM = "lekarski_pregled"
    TRAINING = "obuka_bzr"
    EQUIPMENT_INSPECTION = "pregled_opreme"
    ELECTRICAL_INSPECTION = "ispitivanje_instalacija"
    ENVIRONMENT_TEST = "ispitivanje_okoline"


class ObligationStatus(_StrEnum):
    ACTIVE = "aktivan"
    COMPLETED = "zavrsen"
    EXPIRED = "istekao"


class NotificationGate(_StrEnum):
    DAYS_30 = "30"
    DAYS_7 = "7"
    DAYS_1 = "1"
    EXPIRED = "expired"

    @property
    def horizon_days(self) -> Optional[int]:
        if self is NotificationGate.EXPIRED:
            return None
        return int(self.value)

    @property
    def flag(self) -> str:
        return GATE_FLAGS[self]


GATE_FLAGS = {
    NotificationGate.DAYS_30: "notified_30",
    NotificationGate.DAYS_7: "notified_7",
    NotificationGate.DAYS_1: "notified_1",
    NotificationGate.EXPIRED: "notified_expired",
}

ALLOWED_STATUS_TRANSITIONS = {
    ObligationStatus.ACTIVE: {ObligationStatus.COMPLETED, ObligationStatus.EXPIRED},
    ObligationStatus.COMPLETED: set(),
    ObligationStatus.EXPIRED: set(),
}

OVERDUE_STATUSES = {ObligationStatus.ACTIVE, ObligationStatus.EXPIRED}
