"""API tests for tax returns, tax payments and the tax audit trail."""

import json

from petwash.domain.exceptions import IntegrationError
from petwash.domain.models import TaxAuditLog
from petwash.extensions import db

BASE = "/api/finance"


class FakeTaxAuthority:
    """Stands in for ``TaxAuthorityClient`` on tax-return calls."""

    configured = True

    def __init__(self, result=None, error=None, remote_status="Approved"):
        self.result = result or {
            "success": True,
            "status": "submitted",
            "itaReferenceNumber": "ITA-RET-1",
            "response": {"referenceNumber": "ITA-RET-1"},
        }
        self.error = error
        self.remote_status = remote_status
        self.submitted = []

    def submit_tax_return(self, tax_return):
        self.submitted.append(tax_return["returnNumber"])
        if self.error:
            raise self.error
        return self.result

    def check_tax_return_status(self, reference_number):
        return {"status": self.remote_status, "details": {"id": reference_number, "status": self.remote_status}}


def _post_json(client, url, data=None, headers=None):
    resp = client.post(
        url, data=json.dumps(data if data is not None else {}), content_type="application/json", headers=headers,
    )
    return resp.status_code, resp.get_json()


def _put_json(client, url, data):
    resp = client.put(url, data=json.dumps(data), content_type="application/json")
    return resp.status_code, resp.get_json()


def _tax_return(client, **overrides):
    payload = {
        "returnType": "vat_quarterly",
        "fiscalYear": 2026,
        "fiscalPeriod": 1,
        "periodStart": "2026-01-01",
        "periodEnd": "2026-03-31",
        "totalRevenue": "118000.00",
        "taxableIncome": "100000.00",
        "vatCollected": "18000.00",
        "vatPaid": "14400.00",
        "preparedBy": "accountant-7",
    }
    payload.update(overrides)
    return _post_json(client, f"{BASE}/tax-returns", payload)


def _payment(client, **overrides):
    payload = {
        "paymentType": "vat",
        "amount": "3600.00",
        "paymentDate": "2026-04-15",
        "paymentMethod": "bank_transfer",
        "bankReference": "LEUMI-5521",
    }
    payload.update(overrides)
    return _post_json(client, f"{BASE}/tax-payments", payload)


def _audit_for(client, entity_type, entity_id):
    return client.get(f"{BASE}/tax-audit-logs?entityType={entity_type}&entityId={entity_id}").get_json()


class TestTaxReturns:
    def test_create_draft(self, client):
        status, body = _tax_return(client)

        assert status == 201
        assert body["returnNumber"] == "TAX-2026-Q1-001"
        assert body["status"] == "draft"
        assert body["netVatOwed"] == "3600.00"
        assert body["submittedToIta"] is False
        assert body["submittedAt"] is None

    def test_amended_return_gets_next_number(self, client):
        _tax_return(client)
        _, amended = _tax_return(client, notes="Corrected input VAT")

        assert amended["returnNumber"] == "TAX-2026-Q1-002"

    def test_monthly_and_annual_numbering(self, client):
        _, monthly = _tax_return(client, returnType="vat_monthly", fiscalPeriod=3,
                                 periodStart="2026-03-01", periodEnd="2026-03-31")
        _, annual = _tax_return(client, returnType="income_annual", fiscalYear=2025, fiscalPeriod=1,
                                periodStart="2025-01-01", periodEnd="2025-12-31")

        assert monthly["returnNumber"] == "TAX-2026-M03-001"
        assert annual["returnNumber"] == "TAX-2025-Y-001"

    def test_period_must_fit_return_type(self, client):
        status, body = _tax_return(client, fiscalPeriod=5)

        assert status == 400
        assert "between 1 and 4" in body["details"][0]["message"]

    def test_period_end_before_start(self, client):
        status, _ = _tax_return(client, periodStart="2026-03-31", periodEnd="2026-01-01")

        assert status == 400

    def test_filters(self, client):
        _tax_return(client)
        _tax_return(client, fiscalPeriod=2, periodStart="2026-04-01", periodEnd="2026-06-30")

        by_period = client.get(f"{BASE}/tax-returns?fiscalYear=2026&fiscalPeriod=2").get_json()
        drafts = client.get(f"{BASE}/tax-returns?status=draft").get_json()
        other_year = client.get(f"{BASE}/tax-returns?fiscalYear=2025").get_json()

        assert [row["returnNumber"] for row in by_period] == ["TAX-2026-Q2-001"]
        assert [row["fiscalPeriod"] for row in drafts] == [2, 1]
        assert other_year == []

    def test_update_recomputes_net_vat(self, client):
        _, created = _tax_return(client)

        status, body = _put_json(client, f"{BASE}/tax-returns/{created['id']}", {"vatPaid": "15000.00"})

        assert status == 200
        assert body["netVatOwed"] == "3000.00"

    def test_unknown_return(self, client):
        resp = client.get(f"{BASE}/tax-returns/404")

        assert resp.status_code == 404
        assert resp.get_json() == {"error": "TaxReturn with id 404 not found"}


class TestSubmission:
    def test_submit_records_reference(self, client, use_client):
        fake = use_client(FakeTaxAuthority())
        _, created = _tax_return(client)

        status, body = _post_json(client, f"{BASE}/tax-returns/{created['id']}/submit", {"submittedBy": "cfo"})

        assert status == 200
        assert body["success"] is True
        assert fake.submitted == ["TAX-2026-Q1-001"]
        stored = body["taxReturn"]
        assert stored["status"] == "submitted"
        assert stored["submittedToIta"] is True
        assert stored["submittedBy"] == "cfo"
        assert stored["itaReferenceNumber"] == "ITA-RET-1"
        assert stored["submittedAt"] is not None

    def test_submitted_return_is_locked(self, client, use_client):
        fake = use_client(FakeTaxAuthority())
        _, created = _tax_return(client)
        _post_json(client, f"{BASE}/tax-returns/{created['id']}/submit")

        resubmit_status, resubmit = _post_json(client, f"{BASE}/tax-returns/{created['id']}/submit")
        edit_status, _ = _put_json(client, f"{BASE}/tax-returns/{created['id']}", {"vatPaid": "0"})

        assert resubmit_status == 409
        assert resubmit["details"] == {"status": "submitted"}
        assert edit_status == 409
        assert len(fake.submitted) == 1

    def test_refused_submission_keeps_draft(self, client, use_client):
        use_client(FakeTaxAuthority(result={
            "success": False, "status": "error", "errorCode": "HTTP_400", "errorMessage": "Period already filed",
        }))
        _, created = _tax_return(client)

        status, body = _post_json(client, f"{BASE}/tax-returns/{created['id']}/submit")

        assert status == 200
        assert body["success"] is False
        assert body["errorCode"] == "HTTP_400"
        assert body["taxReturn"]["status"] == "draft"
        logs = _audit_for(client, "tax_return", created["id"])
        assert logs[0]["action"] == "submission_failed"
        assert logs[0]["notes"] == "HTTP_400: Period already filed"

    def test_unreachable_authority(self, client, use_client):
        use_client(FakeTaxAuthority(error=IntegrationError("connection refused")))
        _, created = _tax_return(client)

        resp = client.post(f"{BASE}/tax-returns/{created['id']}/submit")

        assert resp.status_code == 502
        assert client.get(f"{BASE}/tax-returns/{created['id']}").get_json()["status"] == "draft"
        logs = _audit_for(client, "tax_return", created["id"])
        assert [log["action"] for log in logs] == ["submission_failed", "created"]

    def test_unconfigured_client(self, client):
        _, created = _tax_return(client)

        _, body = _post_json(client, f"{BASE}/tax-returns/{created['id']}/submit")

        assert body["success"] is False
        assert body["errorCode"] == "NOT_CONFIGURED"
        assert body["taxReturn"]["submittedToIta"] is False

    def test_status_refresh_marks_approval(self, client, use_client):
        use_client(FakeTaxAuthority(remote_status="Approved"))
        _, created = _tax_return(client)
        _post_json(client, f"{BASE}/tax-returns/{created['id']}/submit")

        body = client.get(f"{BASE}/tax-returns/{created['id']}/status").get_json()

        assert body["status"] == "approved"
        assert body["itaStatus"] == "Approved"
        stored = client.get(f"{BASE}/tax-returns/{created['id']}").get_json()
        assert stored["approvedAt"] is not None

    def test_rejected_return_can_be_corrected_and_resubmitted(self, client, use_client):
        fake = use_client(FakeTaxAuthority(remote_status="Rejected"))
        _, created = _tax_return(client)
        _post_json(client, f"{BASE}/tax-returns/{created['id']}/submit")
        client.get(f"{BASE}/tax-returns/{created['id']}/status")

        _, corrected = _put_json(client, f"{BASE}/tax-returns/{created['id']}", {"vatPaid": "14000.00"})
        status, body = _post_json(client, f"{BASE}/tax-returns/{created['id']}/submit")

        assert corrected["status"] == "draft"
        assert status == 200
        assert body["taxReturn"]["status"] == "submitted"
        assert len(fake.submitted) == 2

    def test_status_of_draft(self, client):
        _, created = _tax_return(client)

        body = client.get(f"{BASE}/tax-returns/{created['id']}/status").get_json()

        assert body["status"] == "draft"
        assert "message" in body


class TestTaxPayments:
    def test_payment_against_return(self, client):
        _, tax_return = _tax_return(client)

        status, body = _payment(client, taxReturnId=tax_return["id"])

        assert status == 201
        assert body["paymentNumber"] == "TAXPAY-2026-001"
        assert body["fiscalYear"] == 2026
        assert body["fiscalPeriod"] == 1
        assert body["status"] == "pending"
        assert body["currency"] == "ILS"

    def test_standalone_payment_takes_year_from_date(self, client):
        _, body = _payment(client, paymentType="advance_tax", paymentDate="2025-12-20")

        assert body["fiscalYear"] == 2025
        assert body["fiscalPeriod"] is None
        assert body["paymentNumber"] == "TAXPAY-2025-001"

    def test_unknown_return(self, client):
        status, body = _payment(client, taxReturnId=99)

        assert status == 404
        assert body == {"error": "TaxReturn with id 99 not found"}

    def test_amount_must_be_positive(self, client):
        status, _ = _payment(client, amount="0")

        assert status == 400

    def test_filters(self, client):
        _, tax_return = _tax_return(client)
        _payment(client, taxReturnId=tax_return["id"])
        _payment(client, paymentType="income_tax", paymentDate="2026-06-10")

        by_return = client.get(f"{BASE}/tax-payments?taxReturnId={tax_return['id']}").get_json()
        april = client.get(f"{BASE}/tax-payments?startDate=2026-04-01&endDate=2026-04-30").get_json()
        income = client.get(f"{BASE}/tax-payments?paymentType=income_tax").get_json()

        assert [row["paymentNumber"] for row in by_return] == ["TAXPAY-2026-001"]
        assert [row["paymentDate"] for row in april] == ["2026-04-15"]
        assert [row["paymentNumber"] for row in income] == ["TAXPAY-2026-002"]

    def test_bad_date_filter(self, client):
        resp = client.get(f"{BASE}/tax-payments?startDate=April")

        assert resp.status_code == 400

    def test_confirmed_payment_is_final(self, client):
        _, payment = _payment(client)
        _put_json(client, f"{BASE}/tax-payments/{payment['id']}", {"status": "confirmed", "itaReceiptNumber": "R-1"})

        status, body = _put_json(client, f"{BASE}/tax-payments/{payment['id']}", {"amount": "1.00"})

        assert status == 409
        assert body["details"] == {"status": "confirmed"}


class TestAuditTrail:
    def test_state_changes_are_chained(self, client, use_client):
        use_client(FakeTaxAuthority())
        _, created = _tax_return(client)
        _post_json(client, f"{BASE}/tax-returns/{created['id']}/submit", {"submittedBy": "cfo"})

        logs = _audit_for(client, "tax_return", created["id"])

        assert [log["action"] for log in logs] == ["submitted_to_ita", "created"]
        assert [log["userId"] for log in logs] == ["cfo", "accountant-7"]
        assert logs[1]["previousState"] is None
        assert logs[1]["previousAuditHash"] is None
        assert logs[0]["previousState"]["status"] == "draft"
        assert logs[0]["newState"]["status"] == "submitted"
        assert logs[0]["previousAuditHash"] == logs[1]["auditHash"]
        assert len(logs[0]["auditHash"]) == 64
        verify = client.get(f"{BASE}/tax-audit-logs/verify").get_json()
        assert verify == {"valid": True, "checked": 2, "firstInvalidId": None}

    def test_payment_is_audited(self, client):
        _, payment = _payment(client, paidBy="treasurer")

        logs = _audit_for(client, "tax_payment", payment["id"])

        assert len(logs) == 1
        assert logs[0]["eventType"] == "tax_payment_made"
        assert logs[0]["userId"] == "treasurer"
        assert logs[0]["newState"]["paymentNumber"] == "TAXPAY-2026-001"

    def test_request_metadata_is_captured(self, client):
        _post_json(
            client, f"{BASE}/tax-payments",
            {"paymentType": "vat", "amount": "10", "paymentDate": "2026-04-15", "paymentMethod": "cash"},
            headers={"X-User-Id": "clerk-3", "X-User-Email": "clerk@petwash.example", "User-Agent": "backoffice/2.1"},
        )

        logs = client.get(f"{BASE}/tax-audit-logs?userId=clerk-3").get_json()

        assert len(logs) == 1
        assert logs[0]["userEmail"] == "clerk@petwash.example"
        assert logs[0]["userAgent"] == "backoffice/2.1"
        assert logs[0]["ipAddress"] == "127.0.0.1"

    def test_tampering_is_detected(self, client):
        _, first = _tax_return(client)
        _tax_return(client, fiscalPeriod=2, periodStart="2026-04-01", periodEnd="2026-06-30")
        log = TaxAuditLog.query.filter_by(entity_type="tax_return", entity_id=first["id"]).one()
        log.new_state = {**log.new_state, "vatPaid": "0.00"}
        db.session.commit()

        verify = client.get(f"{BASE}/tax-audit-logs/verify").get_json()

        assert verify == {"valid": False, "checked": 0, "firstInvalidId": log.id}

    def test_get_single_log(self, client):
        _tax_return(client)
        log_id = client.get(f"{BASE}/tax-audit-logs").get_json()[0]["id"]

        body = client.get(f"{BASE}/tax-audit-logs/{log_id}").get_json()

        assert body["entityType"] == "tax_return"
        assert body["eventType"] == "tax_return_created"

    def test_unknown_log(self, client):
        resp = client.get(f"{BASE}/tax-audit-logs/77")

        assert resp.status_code == 404
