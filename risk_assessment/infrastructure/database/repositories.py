"""Data access layer for risk assessment entities"""

import uuid
from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Session
from risk_assessment.infrastructure.database.models import ExternalApiCall, RiskAssessmentRecord, RiskFactorRecord
from risk_assessment.domain.models import Decision, ExternalApiCallRecord, RiskAssessment, RiskFactor


class RiskAssessmentRepository:
    """Repository for risk assessments and their factors"""

    def __init__(self, db: Session):
        self.db = db

    def save(self, assessment: RiskAssessment) -> RiskAssessment:
        """Persist a fully built assessment together with its factors"""
        db_assessment = RiskAssessmentRecord(
            id=assessment.id,
            application_id=assessment.application_id,
            assessment_date=assessment.assessment_date,
            credit_score=assessment.credit_score,
            debt_ratio=float(assessment.debt_ratio) if assessment.debt_ratio is not None else None,
            risk_score=assessment.risk_score,
            decision=assessment.decision.value,
            decision_reason=assessment.decision_reason,
            processing_time_ms=assessment.processing_time_ms,
            risk_factors=[
                RiskFactorRecord(
                    position=position,
                    factor_name=factor.name,
                    factor_value=factor.value,
                    weight=factor.weight,
                    contribution=factor.contribution,
                )
                for position, factor in enumerate(assessment.risk_factors)
            ],
        )
        self.db.add(db_assessment)
        self.db.flush()
        return assessment

    def find_latest_by_application_id(self, application_id: uuid.UUID) -> Optional[RiskAssessment]:
        """Most recent assessment for an application, if any"""
        record = (
            self.db.query(RiskAssessmentRecord)
            .filter(RiskAssessmentRecord.application_id == application_id)
            .order_by(RiskAssessmentRecord.assessment_date.desc())
            .first()
        )
        return to_domain(record) if record else None


class ExternalApiCallRepository:
    """Repository for the external call audit trail"""

    def __init__(self, db: Session):
        self.db = db

    def save(self, record: ExternalApiCallRecord) -> None:
        self.db.add(
            ExternalApiCall(
                id=record.id,
                application_id=record.application_id,
                api_name=record.api_name,
                request_time=record.request_time,
                response_time=record.response_time,
                status_code=record.status_code,
                cached=record.cached,
            )
        )
        self.db.flush()

    def count_by_application_id(self, application_id: uuid.UUID) -> int:
        return self.db.query(ExternalApiCall).filter(ExternalApiCall.application_id == application_id).count()


def to_domain(record: RiskAssessmentRecord) -> RiskAssessment:
    return RiskAssessment(
        id=record.id,
        application_id=record.application_id,
        assessment_date=record.assessment_date,
        credit_score=record.credit_score,
        debt_ratio=Decimal(str(record.debt_ratio)) if record.debt_ratio is not None else None,
        risk_score=record.risk_score,
        decision=Decision(record.decision),
        decision_reason=record.decision_reason or "",
        processing_time_ms=record.processing_time_ms or 0,
        risk_factors=tuple(
            RiskFactor(
                name=factor.factor_name,
                value=factor.factor_value,
                weight=factor.weight,
                contribution=factor.contribution,
            )
            for factor in record.risk_factors
        ),
    )
