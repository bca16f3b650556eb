"""Domain models - immutable dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Tuple

CREDIT_STATUS_ACTIVE = "ACTIVE"
CREDIT_STATUS_FALLBACK = "FALLBACK_API_UNAVAILABLE"


class Decision(str, Enum):
    """Outcome of a risk assessment"""

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ERROR = "ERROR"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ApplicationInput:
    """Loan application data supplied once per assessment"""

    application_id: uuid.UUID
    customer_id: str
    loan_amount: Decimal
    income: Decimal
    loan_purpose: str
    initial_score_weight: float = 1.0


@dataclass(frozen=True)
class CreditReport:
    """Credit report from the central bank API (or its fallback)"""

    customer_id: str
    credit_score: int  # 300-850 nominal, 0 = unavailable
    status: str
    details: str = ""


@dataclass(frozen=True)
class DebtRatioResult:
    percentage: Decimal
    note: str


@dataclass(frozen=True)
class CollateralResult:
    verified_value: Decimal
    note: str


@dataclass(frozen=True)
class FraudCheckResult:
    fraud_risk_score: Decimal  # 0.0 (clean) - 1.0 (fraudulent)
    note: str


@dataclass(frozen=True)
class RiskFactor:
    """Single weighted component of the final risk score"""

    name: str
    value: float  # Normalized 0-100
    weight: float
    contribution: float


@dataclass(frozen=True)
class RiskAssessment:
    """Output of the risk assessment pipeline"""

    application_id: uuid.UUID
    decision: Decision
    decision_reason: str
    processing_time_ms: int
    credit_score: int | None = None
    debt_ratio: Decimal | None = None
    risk_score: float | None = None
    risk_factors: Tuple[RiskFactor, ...] = ()
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    assessment_date: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class ExternalApiCallRecord:
    """Audit trail entry for one external call attempt"""

    application_id: uuid.UUID
    api_name: str
    request_time: datetime
    response_time: datetime
    status_code: int
    cached: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)
