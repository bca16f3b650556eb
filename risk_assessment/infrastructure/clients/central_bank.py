"""Central bank HTTP client for fetching customer credit reports"""

import httpx
from risk_assessment.domain.models import CreditReport, CREDIT_STATUS_ACTIVE
from risk_assessment.domain.exceptions import CentralBankAPIError
from risk_assessment.config import settings


class CentralBankClient:
    """Client for the external central bank credit-check API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.central_bank_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self._http_client = http_client

    async def fetch_credit_report(self, customer_id: str) -> CreditReport:
        """
        Fetch the current credit report for a customer (single attempt).

        The provider answers either {creditScore, status, details} or
        {creditScore, outstandingLoans, paymentHistory}; a missing status on a
        2xx response is treated as ACTIVE.

        Raises:
            CentralBankAPIError: On timeout, transport failure, non-2xx status, or invalid payload
        """
        if self._http_client is not None:
            return await self._fetch(self._http_client, customer_id)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._fetch(client, customer_id)

    async def _fetch(self, client: httpx.AsyncClient, customer_id: str) -> CreditReport:
        try:
            response = await client.get(
                f"{self.base_url}/api/credit-check/{customer_id}",
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()

            return CreditReport(
                customer_id=data.get("customerId") or customer_id,
                credit_score=int(data.get("creditScore") or 0),
                status=data.get("status") or CREDIT_STATUS_ACTIVE,
                details=data.get("details") or data.get("paymentHistory") or "",
            )

        except httpx.TimeoutException as e:
            raise CentralBankAPIError(f"Central bank API timeout after {self.timeout}s", status_code=504) from e
        except httpx.HTTPStatusError as e:
            raise CentralBankAPIError(
                f"Central bank API error: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise CentralBankAPIError(f"Central bank API unreachable: {e}", status_code=503) from e
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise CentralBankAPIError(f"Invalid credit report data from central bank: {e}", status_code=502) from e
