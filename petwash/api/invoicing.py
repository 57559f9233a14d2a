"""ITA electronic invoicing API — issue, submit and audit VAT invoices."""

from datetime import datetime, timezone

from flask import request
from flask_restx import Namespace, Resource

from petwash.api.common import date_arg, parse_body, schema_model
from petwash.auth import require_admin
from petwash.schemas.base import to_columns
from petwash.schemas.invoice_schema import InvoiceCreateSchema
from petwash.schemas.response import success_response
from petwash.services.invoice_service import InvoiceService

ns = Namespace("ita", description="Israeli Tax Authority electronic invoicing", decorators=[require_admin])

invoice_model = schema_model(ns, InvoiceCreateSchema)

_invoice_svc = InvoiceService()


@ns.route("/config")
class InvoicingConfig(Resource):
    @ns.doc("ita_config")
    def get(self):
        """Whether ITA credentials are configured, and the circuit breaker state."""
        return success_response(_invoice_svc.config())


@ns.route("/invoices")
class InvoiceList(Resource):
    @ns.doc("list_invoices", params={"status": "ITA submission status", "limit": "Default 50"})
    def get(self):
        limit = request.args.get("limit", default=50, type=int)
        return success_response(_invoice_svc.list(request.args.get("status"), max(1, min(limit, 500))))

    @ns.doc("create_invoice")
    @ns.expect(invoice_model)
    def post(self):
        """Issue an invoice; B2B invoices at or above the threshold are submitted at once."""
        data = parse_body(InvoiceCreateSchema)
        return success_response(_invoice_svc.create_invoice(**to_columns(data)), 201)


@ns.route("/invoices/retry-failed")
class InvoiceRetry(Resource):
    @ns.doc("retry_failed_invoices")
    def post(self):
        """Resubmit every invoice whose last submission failed."""
        return success_response(_invoice_svc.retry_failed())


@ns.route("/invoices/<int:invoice_id>")
@ns.param("invoice_id", "The invoice ID")
class InvoiceDetail(Resource):
    @ns.doc("get_invoice")
    def get(self, invoice_id: int):
        return success_response(_invoice_svc.get(invoice_id))


@ns.route("/invoices/<int:invoice_id>/submit")
@ns.param("invoice_id", "The invoice ID")
class InvoiceSubmit(Resource):
    @ns.doc("submit_invoice")
    def post(self, invoice_id: int):
        return success_response(_invoice_svc.submit(invoice_id))


@ns.route("/invoices/<int:invoice_id>/status")
@ns.param("invoice_id", "The invoice ID")
class InvoiceStatus(Resource):
    @ns.doc("invoice_status")
    def get(self, invoice_id: int):
        """Ask the ITA for the invoice's processing status."""
        return success_response(_invoice_svc.refresh_status(invoice_id))


@ns.route("/compliance/report")
class ComplianceReport(Resource):
    @ns.doc("compliance_report", params={
        "startDate": "YYYY-MM-DD, defaults to the first of this month",
        "endDate": "YYYY-MM-DD, defaults to today",
    })
    def get(self):
        today = datetime.now(timezone.utc).date()
        start_date = date_arg("startDate") or today.replace(day=1)
        end_date = date_arg("endDate") or today
        return success_response(_invoice_svc.compliance_report(start_date, end_date))


@ns.route("/compliance/reset-circuit-breaker")
class CircuitBreakerReset(Resource):
    @ns.doc("reset_circuit_breaker")
    def post(self):
        return success_response(_invoice_svc.reset_circuit_breaker())


@ns.route("/statistics")
class InvoiceStatistics(Resource):
    @ns.doc("invoice_statistics")
    def get(self):
        return success_response(_invoice_svc.statistics())
