"""Unit tests for inbound scoring events and outbound decision events"""

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock
import pytest
from pydantic import ValidationError
from risk_assessment.domain.events import DecisionEvent, ScoringCompleteEvent
from risk_assessment.domain.models import Decision, RiskAssessment
from risk_assessment.services.events import ScoringEventHandler


def scoring_payload(**overrides) -> dict:
    payload = {
        "applicationId": str(uuid.uuid4()),
        "customerId": "cust123",
        "loanAmount": "10000",
        "income": "5000",
        "loanPurpose": "Home renovation",
        "initialScoreWeight": 0.8,
    }
    payload.update(overrides)
    return payload


def test_scoring_event_parses_camel_case():
    """Test wire field names map onto the application input"""
    event = ScoringCompleteEvent.model_validate(scoring_payload())
    application = event.to_application()

    assert application.customer_id == "cust123"
    assert application.loan_amount == Decimal("10000")
    assert application.initial_score_weight == 0.8


def test_scoring_event_missing_weight_defaults_to_one():
    """Test an absent initial score weight is neutral"""
    payload = scoring_payload()
    del payload["initialScoreWeight"]

    assert ScoringCompleteEvent.model_validate(payload).to_application().initial_score_weight == 1.0


def test_scoring_event_rejects_negative_loan():
    """Test negative loan amounts are invalid"""
    with pytest.raises(ValidationError):
        ScoringCompleteEvent.model_validate(scoring_payload(loanAmount="-1"))


def test_decision_event_from_assessment():
    """Test decision events carry ids, decision, reason and score"""
    assessment = RiskAssessment(
        application_id=uuid.uuid4(),
        decision=Decision.REJECTED,
        decision_reason="Risk score 48.25 below threshold 60.",
        processing_time_ms=5,
        risk_score=48.25,
    )

    payload = DecisionEvent.from_assessment(assessment).model_dump(mode="json", by_alias=True)

    assert payload == {
        "applicationId": str(assessment.application_id),
        "assessmentId": str(assessment.id),
        "decision": "REJECTED",
        "reason": "Risk score 48.25 below threshold 60.",
        "finalRiskScore": 48.25,
    }


async def test_handler_runs_assessment(metrics):
    """Test a valid event triggers exactly one assessment"""
    assessment = RiskAssessment(
        application_id=uuid.uuid4(), decision=Decision.APPROVED, decision_reason="ok", processing_time_ms=1
    )
    service = AsyncMock()
    service.assess_risk.return_value = assessment
    handler = ScoringEventHandler(service, metrics)

    result = await handler.handle(scoring_payload())

    assert result is assessment
    service.assess_risk.assert_awaited_once()
    assert service.assess_risk.await_args.args[0].customer_id == "cust123"
    assert metrics.count("scoring_events", status="success") == 1


async def test_handler_counts_error_assessments(metrics):
    """Test an ERROR assessment is acknowledged but counted as an error"""
    service = AsyncMock()
    service.assess_risk.return_value = RiskAssessment(
        application_id=uuid.uuid4(), decision=Decision.ERROR, decision_reason="Processing error: x", processing_time_ms=1
    )

    await ScoringEventHandler(service, metrics).handle(scoring_payload())

    assert metrics.count("scoring_events", status="error") == 1


async def test_handler_drops_malformed_event(metrics):
    """Test a malformed event is discarded without an assessment"""
    service = AsyncMock()

    result = await ScoringEventHandler(service, metrics).handle({"customerId": "cust123"})

    assert result is None
    service.assess_risk.assert_not_awaited()
    assert metrics.count("scoring_events", status="error") == 1
