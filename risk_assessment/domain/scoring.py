"""Risk scoring engine - core business logic for credit decisions"""

from typing import List, Tuple
from risk_assessment.domain.models import (
    ApplicationInput,
    CollateralResult,
    CreditReport,
    DebtRatioResult,
    Decision,
    FraudCheckResult,
    RiskFactor,
)

APPROVAL_THRESHOLD = 60.0

CREDIT_SCORE_FLOOR = 300
CREDIT_SCORE_CEILING = 850

# Component weights (sum to 1.0)
CREDIT_WEIGHT = 0.35
DEBT_RATIO_WEIGHT = 0.30
COLLATERAL_WEIGHT = 0.20
FRAUD_WEIGHT = 0.15

SUCCESS_STATUSES = frozenset({"ACTIVE", "OK"})


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def normalize_credit_score(report: CreditReport) -> float:
    """
    Map a 300-850 bureau score onto 0-100.

    An unavailable report (non-success status with no score) is scored as
    the worst possible bureau score rather than dividing by zero.
    """
    score = float(report.credit_score)
    if report.status.upper() not in SUCCESS_STATUSES and report.credit_score <= 0:
        score = CREDIT_SCORE_FLOOR

    span = CREDIT_SCORE_CEILING - CREDIT_SCORE_FLOOR
    return clamp((score - CREDIT_SCORE_FLOOR) / span * 100.0)


def normalize_debt_ratio(result: DebtRatioResult) -> float:
    """
    Tiered debt ratio score (lower ratio is better):
    - < 30%:    100
    - 30%-50%:  60
    - > 50%:    20
    """
    percentage = float(result.percentage)
    if percentage < 30:
        return 100.0
    elif percentage <= 50:
        return 60.0
    else:
        return 20.0


def normalize_collateral(result: CollateralResult) -> float:
    return 80.0 if result.verified_value > 0 else 30.0


def normalize_fraud(result: FraudCheckResult) -> float:
    return clamp((1 - float(result.fraud_risk_score)) * 100.0)


def calculate_risk_score(
    report: CreditReport,
    debt_ratio: DebtRatioResult,
    collateral: CollateralResult,
    fraud: FraudCheckResult,
    initial_score_weight: float | None = 1.0,
) -> Tuple[float, Tuple[RiskFactor, ...]]:
    """
    Weighted composite score from the four normalized components.

    Scoring weights:
    - 35%: Central bank credit score
    - 30%: Debt ratio tier
    - 20%: Collateral verification
    - 15%: Fraud check

    The weighted sum is scaled by the upstream initial score weight (1.0
    when absent). Factor contributions include that scaling, so they always
    sum to the returned score.
    """
    weight = 1.0 if initial_score_weight is None else float(initial_score_weight)

    components: List[Tuple[str, float, float]] = [
        ("credit_score", normalize_credit_score(report), CREDIT_WEIGHT),
        ("debt_ratio", normalize_debt_ratio(debt_ratio), DEBT_RATIO_WEIGHT),
        ("collateral", normalize_collateral(collateral), COLLATERAL_WEIGHT),
        ("fraud_check", normalize_fraud(fraud), FRAUD_WEIGHT),
    ]

    factors = tuple(
        RiskFactor(
            name=name,
            value=round(value, 4),
            weight=component_weight,
            contribution=round(value * component_weight * weight, 4),
        )
        for name, value, component_weight in components
    )
    score = sum(value * component_weight for _, value, component_weight in components) * weight

    return round(score, 4), factors


def determine_decision(score: float) -> Tuple[Decision, str]:
    """
    Approve at or above the threshold, reject below it.

    Returns: (decision, reason)
    """
    if score >= APPROVAL_THRESHOLD:
        return Decision.APPROVED, f"Risk score {score:.2f} above threshold {APPROVAL_THRESHOLD:.0f}."
    return Decision.REJECTED, f"Risk score {score:.2f} below threshold {APPROVAL_THRESHOLD:.0f}."


def score_application(
    application: ApplicationInput,
    report: CreditReport,
    debt_ratio: DebtRatioResult,
    collateral: CollateralResult,
    fraud: FraudCheckResult,
) -> Tuple[float, Tuple[RiskFactor, ...], Decision, str]:
    """
    Main entry point: aggregate the sub-assessments and decide.

    Returns (risk_score, factors, decision, reason).
    """
    score, factors = calculate_risk_score(
        report, debt_ratio, collateral, fraud, application.initial_score_weight
    )
    decision, reason = determine_decision(score)
    return score, factors, decision, reason
