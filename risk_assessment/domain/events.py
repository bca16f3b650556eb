"""Wire schemas for inbound scoring events and outbound decision events"""

import uuid
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from risk_assessment.domain.models import ApplicationInput, RiskAssessment


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScoringCompleteEvent(CamelModel):
    """Emitted upstream once initial application scoring has finished"""

    application_id: uuid.UUID
    customer_id: str = Field(..., min_length=1)
    loan_amount: Decimal = Field(..., ge=0)
    income: Decimal
    loan_purpose: str = ""
    initial_score_weight: float | None = None

    def to_application(self) -> ApplicationInput:
        return ApplicationInput(
            application_id=self.application_id,
            customer_id=self.customer_id,
            loan_amount=self.loan_amount,
            income=self.income,
            loan_purpose=self.loan_purpose,
            initial_score_weight=1.0 if self.initial_score_weight is None else self.initial_score_weight,
        )


class DecisionEvent(CamelModel):
    """Published after a decision has been persisted"""

    application_id: uuid.UUID
    assessment_id: uuid.UUID
    decision: str
    reason: str
    final_risk_score: float | None = None

    @classmethod
    def from_assessment(cls, assessment: RiskAssessment) -> "DecisionEvent":
        return cls(
            application_id=assessment.application_id,
            assessment_id=assessment.id,
            decision=assessment.decision.value,
            reason=assessment.decision_reason,
            final_risk_score=assessment.risk_score,
        )
