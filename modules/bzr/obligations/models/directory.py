"""Company, agency and work position SQLAlchemy models."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from utils.audit import now_utc_naive

from . import Base


class Agency(Base):
    __tablename__ = "agencies"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    created_at = Column(DateTime, default=now_utc_naive)


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    owner_email = Column(String(255))
    agency_id = Column(Integer, ForeignKey("agencies.id"))
    created_at = Column(DateTime, default=now_utc_naive)

    @property
    def contact_email(self):
        return self.owner_email or self.email


class WorkPosition(Base):
    __tablename__ = "work_positions"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    position_name = Column(String(255), nullable=False)
    job_description = Column(Text)
    total_count = Column(Integer, default=0)
    is_deleted = Column(Boolean, default=False, nullable=False)
