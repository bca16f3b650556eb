"""Best-effort audit trail of external API calls"""

import uuid
from datetime import datetime
from risk_assessment.domain.models import ExternalApiCallRecord
from risk_assessment.infrastructure.background import BackgroundRunner
from risk_assessment.infrastructure.database.store import AssessmentStore

CENTRAL_BANK_SUCCESS = "CentralBankAPI_Success"
CENTRAL_BANK_ERROR = "CentralBankAPI_Error"
CENTRAL_BANK_FALLBACK = "CentralBankAPI_Fallback"
CENTRAL_BANK_NO_DATA = "CentralBankAPI_NoData"
CENTRAL_BANK_CACHE_HIT = "CentralBankAPI_CacheHit"


class AuditLogger:
    """Records each external call attempt without making the caller wait"""

    def __init__(self, store: AssessmentStore, runner: BackgroundRunner):
        self._store = store
        self._runner = runner

    def record(
        self,
        application_id: uuid.UUID,
        api_name: str,
        request_time: datetime,
        response_time: datetime,
        status_code: int,
        cached: bool = False,
    ) -> ExternalApiCallRecord:
        record = ExternalApiCallRecord(
            application_id=application_id,
            api_name=api_name,
            request_time=request_time,
            response_time=response_time,
            status_code=status_code,
            cached=cached,
        )
        self._runner.spawn(self._store.save_api_call(record), name="audit_log")
        return record
