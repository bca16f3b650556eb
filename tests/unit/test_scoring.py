"""Unit tests for risk scoring logic"""

import pytest
from decimal import Decimal
from risk_assessment.domain.models import (
    CollateralResult,
    CreditReport,
    DebtRatioResult,
    Decision,
    FraudCheckResult,
)
from risk_assessment.domain.scoring import (
    APPROVAL_THRESHOLD,
    calculate_risk_score,
    determine_decision,
    normalize_collateral,
    normalize_credit_score,
    normalize_debt_ratio,
    normalize_fraud,
    score_application,
)


def report(score: int = 750, status: str = "ACTIVE") -> CreditReport:
    return CreditReport(customer_id="cust123", credit_score=score, status=status)


DEBT_30 = DebtRatioResult(percentage=Decimal("30.0000"), note="Calculated")
COLLATERAL_8000 = CollateralResult(verified_value=Decimal("8000"), note="Property Verified")
FRAUD_5 = FraudCheckResult(fraud_risk_score=Decimal("0.05"), note="No obvious fraud detected")


def test_normalize_credit_score_linear_mapping():
    """Test 300-850 maps linearly onto 0-100"""
    assert normalize_credit_score(report(300)) == 0.0
    assert normalize_credit_score(report(850)) == 100.0
    assert normalize_credit_score(report(750)) == pytest.approx(81.8182, abs=1e-4)


def test_normalize_credit_score_clamped():
    """Test out-of-range scores stay within 0-100"""
    assert normalize_credit_score(report(900)) == 100.0
    assert normalize_credit_score(report(100)) == 0.0


def test_normalize_credit_score_fallback_uses_floor():
    """Test an unavailable report scores as the minimum bureau score"""
    fallback = CreditReport(customer_id="cust123", credit_score=0, status="FALLBACK_API_UNAVAILABLE")
    assert normalize_credit_score(fallback) == 0.0


def test_normalize_debt_ratio_tiers():
    """Test debt ratio tier boundaries"""
    assert normalize_debt_ratio(DebtRatioResult(Decimal("29.99"), "")) == 100.0
    assert normalize_debt_ratio(DebtRatioResult(Decimal("30"), "")) == 60.0
    assert normalize_debt_ratio(DebtRatioResult(Decimal("50"), "")) == 60.0
    assert normalize_debt_ratio(DebtRatioResult(Decimal("50.01"), "")) == 20.0


def test_normalize_collateral():
    """Test verified collateral scores 80, none scores 30"""
    assert normalize_collateral(COLLATERAL_8000) == 80.0
    assert normalize_collateral(CollateralResult(Decimal("0"), "")) == 30.0


def test_normalize_fraud():
    """Test fraud risk is inverted onto 0-100"""
    assert normalize_fraud(FRAUD_5) == pytest.approx(95.0)
    assert normalize_fraud(FraudCheckResult(Decimal("1"), "")) == 0.0
    assert normalize_fraud(FraudCheckResult(Decimal("0"), "")) == 100.0


def test_calculate_risk_score_reference_application():
    """Test the weighted composite for a 750 score, 30% debt ratio applicant"""
    score, factors = calculate_risk_score(report(750), DEBT_30, COLLATERAL_8000, FRAUD_5)

    # 0.35 * 81.8182 + 0.30 * 60 + 0.20 * 80 + 0.15 * 95
    assert score == pytest.approx(76.8864, abs=1e-4)
    assert [f.name for f in factors] == ["credit_score", "debt_ratio", "collateral", "fraud_check"]
    assert [f.weight for f in factors] == [0.35, 0.30, 0.20, 0.15]


def test_factor_contributions_sum_to_score():
    """Test contributions include the initial weight and add up to the score"""
    score, factors = calculate_risk_score(report(700), DEBT_30, COLLATERAL_8000, FRAUD_5, 0.9)

    assert sum(f.contribution for f in factors) == pytest.approx(score, abs=1e-3)


def test_initial_score_weight_scales_score():
    """Test the upstream weight multiplies the composite score"""
    full, _ = calculate_risk_score(report(750), DEBT_30, COLLATERAL_8000, FRAUD_5, 1.0)
    half, _ = calculate_risk_score(report(750), DEBT_30, COLLATERAL_8000, FRAUD_5, 0.5)
    missing, _ = calculate_risk_score(report(750), DEBT_30, COLLATERAL_8000, FRAUD_5, None)

    assert half == pytest.approx(full / 2, abs=1e-3)
    assert missing == full


def test_calculate_risk_score_deterministic():
    """Test identical inputs always give identical outputs"""
    first = calculate_risk_score(report(640), DEBT_30, COLLATERAL_8000, FRAUD_5)
    second = calculate_risk_score(report(640), DEBT_30, COLLATERAL_8000, FRAUD_5)
    assert first == second


def test_determine_decision_threshold():
    """Test approval is inclusive at the threshold"""
    decision, reason = determine_decision(APPROVAL_THRESHOLD)
    assert decision == Decision.APPROVED
    assert reason == "Risk score 60.00 above threshold 60."

    decision, reason = determine_decision(59.99)
    assert decision == Decision.REJECTED
    assert reason == "Risk score 59.99 below threshold 60."


def test_score_application_fallback_report_rejected(application):
    """Test an unavailable credit report drags the score below threshold"""
    fallback = CreditReport(customer_id="cust123", credit_score=0, status="FALLBACK_API_UNAVAILABLE")

    score, _, decision, reason = score_application(application, fallback, DEBT_30, COLLATERAL_8000, FRAUD_5)

    assert score == pytest.approx(48.25, abs=1e-4)
    assert decision == Decision.REJECTED
    assert reason.startswith("Risk score 48.25 below")


def test_score_application_approves_reference(application):
    """Test the reference application is approved"""
    score, factors, decision, reason = score_application(application, report(750), DEBT_30, COLLATERAL_8000, FRAUD_5)

    assert decision == Decision.APPROVED
    assert reason == "Risk score 76.89 above threshold 60."
    assert len(factors) == 4
