"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from risk_assessment.container import ServiceContainer
from risk_assessment.services.events import ScoringEventHandler
from risk_assessment.services.risk_assessment import RiskAssessmentService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_assessment_service(request: Request) -> RiskAssessmentService:
    """Provide the shared risk assessment service"""
    return get_container(request).assessment_service


def get_event_handler(request: Request) -> ScoringEventHandler:
    """Provide the shared scoring event handler"""
    return get_container(request).event_handler
