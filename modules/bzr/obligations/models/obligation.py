"""Legal obligation and notification delivery SQLAlchemy models."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from utils.audit import now_utc_naive

from . import Base
from .enums import ObligationStatus


class LegalObligation(Base):
    __tablename__ = "legal_obligations"
    __table_args__ = (
        UniqueConstraint(
            "company_id", "source_table", "source_record_id", name="uq_legal_obligation_source"
        ),
    )

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    agency_id = Column(Integer, ForeignKey("agencies.id"))
    obligation_type = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)
    worker_id = Column(Integer)
    worker_name = Column(String(255))
    due_date = Column(Date, nullable=False, index=True)
    legal_basis = Column(String(500))
    status = Column(String(50), default=ObligationStatus.ACTIVE.value, nullable=False)
    notified_30 = Column(Boolean, default=False, nullable=False)
    notified_7 = Column(Boolean, default=False, nullable=False)
    notified_1 = Column(Boolean, default=False, nullable=False)
    notified_expired = Column(Boolean, default=False, nullable=False)
    source_table = Column(String(100))
    source_record_id = Column(Integer)
    created_at = Column(DateTime, default=now_utc_naive)
    updated_at = Column(DateTime, default=now_utc_naive, onupdate=now_utc_naive)


class NotificationDelivery(Base):
    __tablename__ = "notification_deliveries"

    id = Column(Integer, primary_key=True)
    obligation_id = Column(Integer, ForeignKey("legal_obligations.id", ondelete="CASCADE"), nullable=False)
    gate = Column(String(20), nullable=False)
    recipient_kind = Column(String(20), nullable=False)  # company or agency
    address = Column(String(255))
    ok = Column(Boolean, nullable=False)
    error = Column(Text)
    attempted_at = Column(DateTime, default=now_utc_naive)
