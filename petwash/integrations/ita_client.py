"""HTTP client for the Israeli Tax Authority (ITA) invoicing API.

OAuth2 client-credentials authentication, explicit timeouts on every call
and a consecutive-failure circuit breaker. One instance is built per
application in ``create_app`` and shared through ``app.extensions``.
"""

import logging
import threading
import time
from datetime import datetime, timezone

import requests

from petwash.domain.exceptions import IntegrationError

logger = logging.getLogger(__name__)

# Refresh the access token this many seconds before it expires.
TOKEN_EXPIRY_MARGIN = 60


class CircuitBreaker:
    """Opens after ``failure_threshold`` consecutive failures; closed by ``reset()``
    or by the next success."""

    def __init__(self, failure_threshold: int = 3):
        self.failure_threshold = failure_threshold
        self._failures = 0
        self._opened_at: datetime | None = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._opened_at is not None

    @property
    def consecutive_failures(self) -> int:
        return self._failures

    def before_call(self) -> None:
        if self.is_open:
            raise IntegrationError(
                "Tax authority circuit breaker is open",
                details=self.snapshot(),
            )

    def record_success(self) -> None:
        with self._lock:
            self._failures = 0
            self._opened_at = None

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1
            if self._failures >= self.failure_threshold and self._opened_at is None:
                self._opened_at = datetime.now(timezone.utc)
                logger.error(
                    "ITA circuit breaker opened after %s consecutive failures", self._failures,
                )

    def reset(self) -> None:
        with self._lock:
            self._failures = 0
            self._opened_at = None
        logger.info("ITA circuit breaker reset")

    def snapshot(self) -> dict:
        return {
            "state": "open" if self.is_open else "closed",
            "consecutiveFailures": self._failures,
            "failureThreshold": self.failure_threshold,
            "openedAt": self._opened_at.isoformat() if self._opened_at else None,
        }


class TaxAuthorityClient:
    """Submits invoices and tax returns to the ITA and queries their status.

    Args:
        client_id / client_secret: OAuth2 client credentials. When either is
            missing the client reports itself unconfigured and submissions
            return a ``NOT_CONFIGURED`` result without any network call.
        session: A ``requests.Session`` (or compatible object); one is created
            when omitted.
    """

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        token_url: str,
        api_base_url: str,
        scope: str = "invoice vat income_tax reports",
        timeout: float = 30,
        token_timeout: float = 15,
        failure_threshold: int = 3,
        session: requests.Session | None = None,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._api_base_url = api_base_url.rstrip("/") + "/"
        self._scope = scope
        self._timeout = timeout
        self._token_timeout = token_timeout
        self._session = session or requests.Session()
        self._token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = threading.Lock()
        self.breaker = CircuitBreaker(failure_threshold)

    @classmethod
    def from_config(cls, config) -> "TaxAuthorityClient":
        return cls(
            client_id=config.get("ITA_CLIENT_ID"),
            client_secret=config.get("ITA_CLIENT_SECRET"),
            token_url=config["ITA_TOKEN_URL"],
            api_base_url=config["ITA_API_BASE_URL"],
            scope=config["ITA_SCOPE"],
            timeout=config["ITA_TIMEOUT_SECONDS"],
            token_timeout=config["ITA_TOKEN_TIMEOUT_SECONDS"],
            failure_threshold=config["ITA_FAILURE_THRESHOLD"],
        )

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    def describe(self) -> dict:
        return {
            "configured": self.configured,
            "apiBaseUrl": self._api_base_url,
            "scope": self._scope,
            "timeoutSeconds": self._timeout,
            "circuitBreaker": self.breaker.snapshot(),
        }

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit_invoice(self, invoice: dict) -> dict:
        """Submit a serialised ``ElectronicInvoice``.

        Returns ``{success, status, itaReferenceNumber?, errorCode?,
        errorMessage?, response?}``. Rejections by the ITA come back as an
        unsuccessful result; transport failures raise ``IntegrationError``.
        """
        label = f"invoice {invoice['invoiceNumber']}"
        if self.configured:
            logger.info(
                "Submitting %s (%s, %s %s) to the ITA",
                label, invoice["invoiceType"], invoice["totalAmount"], invoice["currency"],
            )
        return self._submit("Invoices/", label, self.format_invoice(invoice))

    def submit_tax_return(self, tax_return: dict) -> dict:
        """Submit a serialised ``TaxReturn``; same result shape as ``submit_invoice``."""
        label = f"tax return {tax_return['returnNumber']}"
        if self.configured:
            logger.info(
                "Submitting %s (%s %s/%s, net VAT %s) to the ITA",
                label, tax_return["returnType"], tax_return["fiscalYear"],
                tax_return["fiscalPeriod"], tax_return["netVatOwed"],
            )
        return self._submit("TaxReturns/", label, self.format_tax_return(tax_return))

    def check_invoice_status(self, reference_number: str) -> dict:
        """Return ``{status, details}`` for a previously submitted invoice."""
        return self._status("Invoices/", reference_number)

    def check_tax_return_status(self, reference_number: str) -> dict:
        return self._status("TaxReturns/", reference_number)

    @staticmethod
    def format_invoice(invoice: dict) -> dict:
        """Map a serialised invoice onto the ITA document schema."""
        return {
            "DocumentNumber": invoice["invoiceNumber"],
            "DocumentDate": invoice["invoiceDate"],
            "Customer": {
                "TaxId": invoice.get("customerTaxId"),
                "Name": invoice["customerName"],
            },
            "TotalAmount": float(invoice["totalAmount"]),
            "VATAmount": float(invoice["vatAmount"]),
            "AmountBeforeVAT": float(invoice["amountBeforeVat"]),
            "DocumentType": "InvoiceB2B" if invoice["invoiceType"] == "b2b" else "InvoiceB2C",
            "Currency": invoice["currency"],
            "PaymentMethod": invoice.get("paymentMethod"),
            "LineItems": [
                {
                    "LineNumber": number,
                    "Description": item["description"],
                    "Quantity": float(item["quantity"]),
                    "UnitPrice": float(item["unitPrice"]),
                    "TotalPrice": float(item["totalPrice"]),
                }
                for number, item in enumerate(invoice["lineItems"], start=1)
            ],
        }

    @staticmethod
    def format_tax_return(tax_return: dict) -> dict:
        """Map a serialised tax return onto the ITA filing schema."""
        return {
            "ReturnNumber": tax_return["returnNumber"],
            "ReturnType": tax_return["returnType"],
            "FiscalYear": tax_return["fiscalYear"],
            "FiscalPeriod": tax_return["fiscalPeriod"],
            "PeriodStart": tax_return["periodStart"],
            "PeriodEnd": tax_return["periodEnd"],
            "TotalRevenue": float(tax_return["totalRevenue"]),
            "TaxableIncome": float(tax_return["taxableIncome"]),
            "VATCollected": float(tax_return["vatCollected"]),
            "VATPaid": float(tax_return["vatPaid"]),
            "NetVATOwed": float(tax_return["netVatOwed"]),
            "PreparedBy": tax_return.get("preparedBy"),
        }

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _submit(self, path: str, label: str, document: dict) -> dict:
        if not self.configured:
            logger.warning("Skipping ITA submission of %s: credentials not configured", label)
            return {
                "success": False,
                "status": "error",
                "errorCode": "NOT_CONFIGURED",
                "errorMessage": "ITA API credentials not configured",
            }

        response = self._request("POST", path, json=document)
        body = _json_or_empty(response)

        if response.status_code >= 400:
            self.breaker.record_failure()
            logger.error(
                "ITA rejected %s with HTTP %s: %s",
                label, response.status_code, body or response.text[:200],
            )
            return {
                "success": False,
                "status": "error",
                "errorCode": body.get("code") or f"HTTP_{response.status_code}",
                "errorMessage": body.get("message") or f"ITA returned HTTP {response.status_code}",
                "response": body,
            }

        self.breaker.record_success()
        reference = body.get("referenceNumber") or body.get("id")
        logger.info("ITA accepted %s, reference %s", label, reference)
        return {
            "success": True,
            "status": "submitted",
            "itaReferenceNumber": str(reference) if reference is not None else None,
            "response": body,
        }

    def _status(self, path: str, reference_number: str) -> dict:
        if not self.configured:
            raise IntegrationError("ITA API credentials not configured")
        response = self._request("GET", f"{path}{reference_number}")
        body = _json_or_empty(response)
        if response.status_code >= 400:
            self.breaker.record_failure()
            raise IntegrationError(
                f"ITA status check failed with HTTP {response.status_code}",
                details={"referenceNumber": reference_number},
            )
        self.breaker.record_success()
        return {"status": body.get("status", "unknown"), "details": body}

    def _access_token(self) -> str:
        with self._token_lock:
            if self._token and time.monotonic() < self._token_expires_at:
                return self._token

            response = self._session.post(
                self._token_url,
                data={"grant_type": "client_credentials", "scope": self._scope},
                auth=(self._client_id, self._client_secret),
                headers={"Accept": "application/json"},
                timeout=self._token_timeout,
            )
            response.raise_for_status()
            payload = response.json()
            expires_in = int(payload.get("expires_in", 3600))
            self._token = payload["access_token"]
            self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
            logger.info("Obtained ITA access token, valid for %ss", expires_in)
            return self._token

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        self.breaker.before_call()
        try:
            token = self._access_token()
            response = self._session.request(
                method,
                self._api_base_url + path,
                headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
                timeout=self._timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            self.breaker.record_failure()
            logger.error("ITA %s %s failed: %s", method, path, exc)
            raise IntegrationError("Tax authority request failed", details={"reason": str(exc)}) from exc
        if response.status_code == 401:
            self._token = None
        return response


def _json_or_empty(response: requests.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
