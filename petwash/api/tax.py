"""Tax compliance API — tax returns, tax payments and the tax audit trail."""

from flask import request
from flask_restx import Namespace, Resource

from petwash.api.common import create_record, date_arg, json_body, schema_model, update_record
from petwash.auth import require_admin
from petwash.schemas.base import validate_payload
from petwash.schemas.response import success_response
from petwash.schemas.tax_schema import TaxPaymentCreateSchema, TaxReturnCreateSchema, TaxReturnSubmitSchema
from petwash.services.tax_audit_service import TaxAuditService
from petwash.services.tax_service import TaxPaymentService, TaxReturnService

ns = Namespace("tax", description="Tax returns, tax payments and the tax audit trail", decorators=[require_admin])

tax_return_model = schema_model(ns, TaxReturnCreateSchema)
tax_return_submit_model = schema_model(ns, TaxReturnSubmitSchema)
tax_payment_model = schema_model(ns, TaxPaymentCreateSchema)

# ---------------------------------------------------------------------------
# Service instances
# ---------------------------------------------------------------------------
_audit_svc = TaxAuditService()
_return_svc = TaxReturnService(audit=_audit_svc)
_payment_svc = TaxPaymentService(audit=_audit_svc)


# ---------------------------------------------------------------------------
# Tax returns
# ---------------------------------------------------------------------------
@ns.route("/tax-returns")
class TaxReturnList(Resource):
    @ns.doc("list_tax_returns")
    def get(self):
        """Tax returns (?fiscalYear=, ?fiscalPeriod=, ?status=, ?returnType=)."""
        return success_response(_return_svc.list(
            fiscal_year=request.args.get("fiscalYear", type=int),
            fiscal_period=request.args.get("fiscalPeriod", type=int),
            status=request.args.get("status"),
            return_type=request.args.get("returnType"),
        ))

    @ns.doc("create_tax_return")
    @ns.expect(tax_return_model)
    def post(self):
        """Prepare a draft return; netVatOwed is vatCollected minus vatPaid."""
        return create_record(_return_svc, TaxReturnCreateSchema)


@ns.route("/tax-returns/<int:return_id>")
@ns.param("return_id", "The tax return ID")
class TaxReturnDetail(Resource):
    @ns.doc("get_tax_return")
    def get(self, return_id: int):
        return success_response(_return_svc.get(return_id))

    @ns.doc("update_tax_return")
    @ns.expect(tax_return_model)
    def put(self, return_id: int):
        """Edit a draft or rejected return; a rejected return goes back to draft."""
        return update_record(_return_svc, TaxReturnCreateSchema, return_id)


@ns.route("/tax-returns/<int:return_id>/submit")
@ns.param("return_id", "The tax return ID")
class TaxReturnSubmit(Resource):
    @ns.doc("submit_tax_return")
    @ns.expect(tax_return_submit_model)
    def post(self, return_id: int):
        """Submit the return to the ITA; 409 once submitted, 502 when the ITA is unreachable."""
        data = validate_payload(TaxReturnSubmitSchema, json_body() or {})
        return success_response(_return_svc.submit(return_id, data.submitted_by))


@ns.route("/tax-returns/<int:return_id>/status")
@ns.param("return_id", "The tax return ID")
class TaxReturnStatus(Resource):
    @ns.doc("tax_return_status")
    def get(self, return_id: int):
        return success_response(_return_svc.refresh_status(return_id))


# ---------------------------------------------------------------------------
# Tax payments
# ---------------------------------------------------------------------------
@ns.route("/tax-payments")
class TaxPaymentList(Resource):
    @ns.doc("list_tax_payments")
    def get(self):
        """Tax payments (?taxReturnId=, ?paymentType=, ?status=, ?startDate=, ?endDate=)."""
        return success_response(_payment_svc.search(
            tax_return_id=request.args.get("taxReturnId", type=int),
            payment_type=request.args.get("paymentType"),
            status=request.args.get("status"),
            start_date=date_arg("startDate"),
            end_date=date_arg("endDate"),
        ))

    @ns.doc("create_tax_payment")
    @ns.expect(tax_payment_model)
    def post(self):
        return create_record(_payment_svc, TaxPaymentCreateSchema)


@ns.route("/tax-payments/<int:payment_id>")
@ns.param("payment_id", "The tax payment ID")
class TaxPaymentDetail(Resource):
    @ns.doc("get_tax_payment")
    def get(self, payment_id: int):
        return success_response(_payment_svc.get(payment_id))

    @ns.doc("update_tax_payment")
    @ns.expect(tax_payment_model)
    def put(self, payment_id: int):
        """Update a pending or processed payment; confirmed and rejected payments are final."""
        return update_record(_payment_svc, TaxPaymentCreateSchema, payment_id)


# ---------------------------------------------------------------------------
# Tax audit trail
# ---------------------------------------------------------------------------
@ns.route("/tax-audit-logs")
class TaxAuditLogList(Resource):
    @ns.doc("list_tax_audit_logs")
    def get(self):
        """Newest first (?entityType=, ?entityId=, ?userId=, ?startDate=, ?endDate=, ?limit=)."""
        return success_response(_audit_svc.search(
            entity_type=request.args.get("entityType"),
            entity_id=request.args.get("entityId", type=int),
            user_id=request.args.get("userId"),
            start_date=date_arg("startDate"),
            end_date=date_arg("endDate"),
            limit=min(request.args.get("limit", 100, type=int), 1000),
        ))


@ns.route("/tax-audit-logs/verify")
class TaxAuditLogVerify(Resource):
    @ns.doc("verify_tax_audit_chain")
    def get(self):
        """Recompute the hash chain; reports the first row that no longer matches."""
        return success_response(_audit_svc.verify_chain())


@ns.route("/tax-audit-logs/<int:log_id>")
@ns.param("log_id", "The audit log ID")
class TaxAuditLogDetail(Resource):
    @ns.doc("get_tax_audit_log")
    def get(self, log_id: int):
        return success_response(_audit_svc.get(log_id))
