"""Pydantic schemas for API responses"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel
from risk_assessment.domain.models import RiskAssessment


class RiskFactorSchema(BaseModel):
    """Single weighted score component"""

    name: str
    value: float
    weight: float
    contribution: float


class AssessmentResponse(BaseModel):
    """Response for GET /v1/assessments/{application_id}"""

    assessment_id: str
    application_id: str
    assessment_date: datetime
    credit_score: Optional[int] = None
    debt_ratio: Optional[float] = None
    risk_score: Optional[float] = None
    decision: str
    decision_reason: str
    processing_time_ms: int
    risk_factors: List[RiskFactorSchema]

    @classmethod
    def from_domain(cls, assessment: RiskAssessment) -> "AssessmentResponse":
        return cls(
            assessment_id=str(assessment.id),
            application_id=str(assessment.application_id),
            assessment_date=assessment.assessment_date,
            credit_score=assessment.credit_score,
            debt_ratio=float(assessment.debt_ratio) if assessment.debt_ratio is not None else None,
            risk_score=assessment.risk_score,
            decision=assessment.decision.value,
            decision_reason=assessment.decision_reason,
            processing_time_ms=assessment.processing_time_ms,
            risk_factors=[
                RiskFactorSchema(
                    name=factor.name,
                    value=factor.value,
                    weight=factor.weight,
                    contribution=factor.contribution,
                )
                for factor in assessment.risk_factors
            ],
        )


class EventAckResponse(BaseModel):
    """Response for POST /v1/events/scoring-complete"""

    accepted: bool = True
    assessment_id: Optional[str] = None
    decision: Optional[str] = None
