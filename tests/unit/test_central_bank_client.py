"""Unit tests for the central bank HTTP client"""

import httpx
import pytest
from risk_assessment.domain.exceptions import CentralBankAPIError
from risk_assessment.infrastructure.clients.central_bank import CentralBankClient


def client_for(handler) -> CentralBankClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CentralBankClient(base_url="http://bank.test/", timeout=1.0, http_client=http_client)


async def test_fetch_credit_report_success():
    """Test a status/details payload is parsed into a credit report"""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(
            200, json={"customerId": "cust123", "creditScore": 750, "status": "ACTIVE", "details": "Good standing"}
        )

    report = await client_for(handler).fetch_credit_report("cust123")

    assert seen == ["/api/credit-check/cust123"]
    assert report.credit_score == 750
    assert report.status == "ACTIVE"
    assert report.details == "Good standing"


async def test_fetch_credit_report_payment_history_payload():
    """Test the provider's alternate payload defaults status to ACTIVE"""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"creditScore": 680, "outstandingLoans": 2, "paymentHistory": "Good"})

    report = await client_for(handler).fetch_credit_report("cust9")

    assert report.customer_id == "cust9"
    assert report.status == "ACTIVE"
    assert report.details == "Good"


async def test_fetch_credit_report_missing_score_is_zero():
    """Test a response without a score yields a no-data report"""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "NOT_FOUND"})

    report = await client_for(handler).fetch_credit_report("cust123")
    assert report.credit_score == 0
    assert report.status == "NOT_FOUND"


@pytest.mark.parametrize("status_code", [404, 500, 503])
async def test_fetch_credit_report_http_error(status_code: int):
    """Test non-2xx responses carry their status code"""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code)

    with pytest.raises(CentralBankAPIError) as exc_info:
        await client_for(handler).fetch_credit_report("cust123")
    assert exc_info.value.status_code == status_code


async def test_fetch_credit_report_timeout():
    """Test timeouts map to 504"""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(CentralBankAPIError) as exc_info:
        await client_for(handler).fetch_credit_report("cust123")
    assert exc_info.value.status_code == 504


async def test_fetch_credit_report_unreachable():
    """Test transport failures map to 503"""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CentralBankAPIError) as exc_info:
        await client_for(handler).fetch_credit_report("cust123")
    assert exc_info.value.status_code == 503


async def test_fetch_credit_report_invalid_payload():
    """Test an unparseable body maps to 502"""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"not json")

    with pytest.raises(CentralBankAPIError) as exc_info:
        await client_for(handler).fetch_credit_report("cust123")
    assert exc_info.value.status_code == 502
