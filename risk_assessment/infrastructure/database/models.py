"""SQLAlchemy ORM models for assessments, their factors, and the external call audit trail"""

import uuid
from sqlalchemy import Column, String, Boolean, Float, DateTime, Integer, ForeignKey, Text, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class RiskAssessmentRecord(Base):
    """Persisted risk assessment"""

    __tablename__ = "risk_assessments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(Uuid, nullable=False, index=True)
    assessment_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    credit_score = Column(Integer, nullable=True)
    debt_ratio = Column(Float, nullable=True)
    risk_score = Column(Float, nullable=True)
    decision = Column(String(20), nullable=False)
    decision_reason = Column(Text, nullable=True)
    processing_time_ms = Column(Integer, nullable=True)

    risk_factors = relationship(
        "RiskFactorRecord",
        back_populates="assessment",
        cascade="all, delete-orphan",
        order_by="RiskFactorRecord.position",
    )


class RiskFactorRecord(Base):
    """Weighted score component owned by one assessment"""

    __tablename__ = "risk_factors"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    assessment_id = Column(Uuid, ForeignKey("risk_assessments.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    factor_name = Column(Text, nullable=False)
    factor_value = Column(Float, nullable=False)
    weight = Column(Float, nullable=False)
    contribution = Column(Float, nullable=False)

    assessment = relationship("RiskAssessmentRecord", back_populates="risk_factors")


class ExternalApiCall(Base):
    """Append-only audit of external API call attempts"""

    __tablename__ = "external_api_calls"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(Uuid, nullable=True, index=True)
    api_name = Column(Text, nullable=False)
    request_time = Column(DateTime(timezone=True), nullable=False)
    response_time = Column(DateTime(timezone=True), nullable=False)
    status_code = Column(Integer, nullable=True)
    cached = Column(Boolean, nullable=False, default=False)
