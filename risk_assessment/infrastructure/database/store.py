"""Async facade over the blocking repositories, run on a bounded worker pool"""

import asyncio
import uuid
from concurrent.futures import Executor
from typing import Callable, Optional, TypeVar
from sqlalchemy.orm import Session, sessionmaker
from risk_assessment.domain.models import ExternalApiCallRecord, RiskAssessment
from risk_assessment.infrastructure.database.repositories import ExternalApiCallRepository, RiskAssessmentRepository

T = TypeVar("T")


class AssessmentStore:
    """
    Durable storage for assessments and audit records.

    Every operation opens its own session on a worker thread and commits
    (or rolls back) before returning, so the event loop never blocks on the
    database.
    """

    def __init__(self, session_factory: sessionmaker, executor: Executor):
        self._session_factory = session_factory
        self._executor = executor

    async def _run(self, work: Callable[[Session], T]) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._in_session, work)

    def _in_session(self, work: Callable[[Session], T]) -> T:
        db = self._session_factory()
        try:
            result = work(db)
            db.commit()
            return result
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    async def save_assessment(self, assessment: RiskAssessment) -> RiskAssessment:
        return await self._run(lambda db: RiskAssessmentRepository(db).save(assessment))

    async def find_assessment(self, application_id: uuid.UUID) -> Optional[RiskAssessment]:
        return await self._run(lambda db: RiskAssessmentRepository(db).find_latest_by_application_id(application_id))

    async def save_api_call(self, record: ExternalApiCallRecord) -> None:
        await self._run(lambda db: ExternalApiCallRepository(db).save(record))
