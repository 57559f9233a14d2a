"""Tests for the tax authority HTTP client, with the HTTP session mocked out."""

from unittest.mock import MagicMock

import pytest
import requests

from petwash.domain.exceptions import IntegrationError
from petwash.integrations.ita_client import CircuitBreaker, TaxAuthorityClient

INVOICE = {
    "invoiceNumber": "INV-2026-0301-0001",
    "invoiceDate": "2026-03-01T10:00:00",
    "invoiceType": "b2b",
    "customerName": "Dog Spa Ltd",
    "customerTaxId": "514000000",
    "totalAmount": "29500.00",
    "vatAmount": "4500.00",
    "amountBeforeVat": "25000.00",
    "currency": "ILS",
    "paymentMethod": "bank_transfer",
    "lineItems": [
        {"description": "K9000 fleet service", "quantity": "1", "unitPrice": "29500.00", "totalPrice": "29500.00"},
    ],
}

TAX_RETURN = {
    "returnNumber": "TAX-2026-Q1-001",
    "returnType": "vat_quarterly",
    "fiscalYear": 2026,
    "fiscalPeriod": 1,
    "periodStart": "2026-01-01",
    "periodEnd": "2026-03-31",
    "totalRevenue": "118000.00",
    "taxableIncome": "100000.00",
    "vatCollected": "18000.00",
    "vatPaid": "14400.00",
    "netVatOwed": "3600.00",
    "preparedBy": "accountant-7",
}


def _response(status_code, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body if body is not None else {}
    response.text = ""
    return response


def _client(session, **overrides):
    kwargs = {
        "client_id": "petwash",
        "client_secret": "s3cret",
        "token_url": "https://ita.example/oauth2/token",
        "api_base_url": "https://ita.example/api",
        "failure_threshold": 3,
        "session": session,
    }
    kwargs.update(overrides)
    return TaxAuthorityClient(**kwargs)


@pytest.fixture()
def session():
    session = MagicMock()
    session.post.return_value = _response(200, {"access_token": "tok-1", "expires_in": 3600})
    session.request.return_value = _response(201, {"referenceNumber": "ITA-778899"})
    return session


class TestSubmission:
    def test_successful_submission(self, session):
        result = _client(session).submit_invoice(INVOICE)

        assert result["success"] is True
        assert result["status"] == "submitted"
        assert result["itaReferenceNumber"] == "ITA-778899"

        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert (method, url) == ("POST", "https://ita.example/api/Invoices/")
        assert kwargs["headers"]["Authorization"] == "Bearer tok-1"
        assert kwargs["timeout"] == 30
        assert kwargs["json"]["DocumentType"] == "InvoiceB2B"
        assert kwargs["json"]["LineItems"][0]["LineNumber"] == 1

    def test_token_request_uses_client_credentials(self, session):
        _client(session, token_timeout=15).submit_invoice(INVOICE)

        kwargs = session.post.call_args.kwargs
        assert kwargs["data"]["grant_type"] == "client_credentials"
        assert kwargs["auth"] == ("petwash", "s3cret")
        assert kwargs["timeout"] == 15

    def test_token_is_cached(self, session):
        client = _client(session)
        client.submit_invoice(INVOICE)
        client.submit_invoice(INVOICE)

        assert session.post.call_count == 1
        assert session.request.call_count == 2

    def test_unauthorized_response_drops_cached_token(self, session):
        client = _client(session)
        session.request.return_value = _response(401, {"message": "token expired"})
        client.submit_invoice(INVOICE)
        session.request.return_value = _response(201, {"referenceNumber": "ITA-1"})
        client.submit_invoice(INVOICE)

        assert session.post.call_count == 2

    def test_error_response_becomes_failed_result(self, session):
        session.request.return_value = _response(400, {"message": "Invalid TaxId"})

        result = _client(session).submit_invoice(INVOICE)

        assert result["success"] is False
        assert result["status"] == "error"
        assert result["errorCode"] == "HTTP_400"
        assert result["errorMessage"] == "Invalid TaxId"

    def test_unconfigured_client_makes_no_calls(self, session):
        client = _client(session, client_id=None)

        result = client.submit_invoice(INVOICE)

        assert client.configured is False
        assert result["errorCode"] == "NOT_CONFIGURED"
        session.post.assert_not_called()
        session.request.assert_not_called()

    def test_transport_failure_raises(self, session):
        session.request.side_effect = requests.ConnectionError("connection refused")
        client = _client(session)

        with pytest.raises(IntegrationError):
            client.submit_invoice(INVOICE)
        assert client.breaker.consecutive_failures == 1


class TestCircuitBreaker:
    def test_opens_after_three_failures_and_fails_fast(self, session):
        session.request.return_value = _response(503)
        client = _client(session)

        for _ in range(3):
            assert client.submit_invoice(INVOICE)["success"] is False
        assert client.breaker.is_open

        with pytest.raises(IntegrationError):
            client.submit_invoice(INVOICE)
        assert session.request.call_count == 3

    def test_reset_closes_breaker(self, session):
        session.request.return_value = _response(503)
        client = _client(session)
        for _ in range(3):
            client.submit_invoice(INVOICE)

        client.breaker.reset()
        session.request.return_value = _response(201, {"referenceNumber": "ITA-2"})

        assert client.breaker.snapshot()["state"] == "closed"
        assert client.submit_invoice(INVOICE)["success"] is True

    def test_success_resets_failure_count(self):
        breaker = CircuitBreaker(failure_threshold=3)
        breaker.record_failure()
        breaker.record_failure()
        breaker.record_success()
        breaker.record_failure()

        assert not breaker.is_open
        assert breaker.consecutive_failures == 1


class TestStatusCheck:
    def test_status_check(self, session):
        session.request.return_value = _response(200, {"status": "Accepted", "id": "ITA-778899"})

        result = _client(session).check_invoice_status("ITA-778899")

        assert result["status"] == "Accepted"
        assert session.request.call_args.args == ("GET", "https://ita.example/api/Invoices/ITA-778899")

    def test_status_check_error_raises(self, session):
        session.request.return_value = _response(404)

        with pytest.raises(IntegrationError):
            _client(session).check_invoice_status("missing")


class TestTaxReturns:
    def test_submission(self, session):
        result = _client(session).submit_tax_return(TAX_RETURN)

        assert result["success"] is True
        assert result["itaReferenceNumber"] == "ITA-778899"
        method, url = session.request.call_args.args
        assert (method, url) == ("POST", "https://ita.example/api/TaxReturns/")
        document = session.request.call_args.kwargs["json"]
        assert document["ReturnNumber"] == "TAX-2026-Q1-001"
        assert document["NetVATOwed"] == 3600.0
        assert document["FiscalPeriod"] == 1

    def test_error_response_becomes_failed_result(self, session):
        session.request.return_value = _response(409, {"code": "DUPLICATE_PERIOD", "message": "Period already filed"})

        result = _client(session).submit_tax_return(TAX_RETURN)

        assert result["success"] is False
        assert result["errorCode"] == "DUPLICATE_PERIOD"
        assert result["errorMessage"] == "Period already filed"

    def test_failures_share_the_circuit_breaker(self, session):
        session.request.return_value = _response(503)
        client = _client(session)
        client.submit_invoice(INVOICE)
        client.submit_invoice(INVOICE)
        client.submit_tax_return(TAX_RETURN)

        with pytest.raises(IntegrationError):
            client.submit_tax_return(TAX_RETURN)

    def test_status_check(self, session):
        session.request.return_value = _response(200, {"status": "Approved"})

        result = _client(session).check_tax_return_status("ITA-778899")

        assert result["status"] == "Approved"
        assert session.request.call_args.args == ("GET", "https://ita.example/api/TaxReturns/ITA-778899")

    def test_status_check_needs_credentials(self, session):
        with pytest.raises(IntegrationError):
            _client(session, client_secret=None).check_tax_return_status("ITA-778899")
        session.request.assert_not_called()
