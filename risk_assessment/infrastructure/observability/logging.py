"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger.json import JsonFormatter
from risk_assessment.domain.models import RiskAssessment


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = "risk-assessment-service", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "risk-assessment-service") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_assessment(assessment: RiskAssessment, customer_id: str) -> None:
    """Log structured assessment outcome for analysis"""
    logging.getLogger("risk_assessment.decisions").info(
        "Risk assessment completed",
        extra={
            "application_id": str(assessment.application_id),
            "assessment_id": str(assessment.id),
            "customer_id": customer_id,
            "step": "assessment_complete",
            "decision": assessment.decision.value,
            "risk_score": assessment.risk_score,
            "processing_time_ms": assessment.processing_time_ms,
        },
    )
