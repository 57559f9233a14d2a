"""Finance API — accounts payable, accounts receivable and the general ledger."""

from datetime import datetime, timezone

from flask import request
from flask_restx import Namespace, Resource

from petwash.api.common import create_record, parse_body, schema_model, update_record
from petwash.auth import require_admin
from petwash.schemas.base import to_columns
from petwash.schemas.finance_schema import (
    LedgerEntryCreateSchema,
    PayableCreateSchema,
    PayablePaymentSchema,
    ReceivableCreateSchema,
    ReceivablePaymentSchema,
)
from petwash.schemas.response import success_response
from petwash.services.finance_service import LedgerService, PayableService, ReceivableService

ns = Namespace("finance", description="Payables, receivables and the general ledger", decorators=[require_admin])

payable_model = schema_model(ns, PayableCreateSchema)
payable_payment_model = schema_model(ns, PayablePaymentSchema)
receivable_model = schema_model(ns, ReceivableCreateSchema)
receivable_payment_model = schema_model(ns, ReceivablePaymentSchema)
ledger_model = schema_model(ns, LedgerEntryCreateSchema)

# ---------------------------------------------------------------------------
# Service instances
# ---------------------------------------------------------------------------
_ledger_svc = LedgerService()
_payable_svc = PayableService(_ledger_svc)
_receivable_svc = ReceivableService(_ledger_svc)


# ---------------------------------------------------------------------------
# Accounts payable
# ---------------------------------------------------------------------------
@ns.route("/accounts-payable")
class PayableList(Resource):
    @ns.doc("list_payables")
    def get(self):
        """Supplier invoices (?paymentStatus=, ?supplierId=)."""
        return success_response(_payable_svc.list(
            payment_status=request.args.get("paymentStatus"),
            supplier_id=request.args.get("supplierId"),
        ))

    @ns.doc("create_payable")
    @ns.expect(payable_model)
    def post(self):
        return create_record(_payable_svc, PayableCreateSchema)


@ns.route("/accounts-payable/overdue")
class PayableOverdue(Resource):
    @ns.doc("list_overdue_payables")
    def get(self):
        """Pending or overdue supplier invoices past their due date."""
        return success_response(_payable_svc.get_overdue())


@ns.route("/accounts-payable/<int:payable_id>")
@ns.param("payable_id", "The payable ID")
class PayableDetail(Resource):
    @ns.doc("get_payable")
    def get(self, payable_id: int):
        return success_response(_payable_svc.get(payable_id))

    @ns.doc("update_payable")
    @ns.expect(payable_model)
    def put(self, payable_id: int):
        return update_record(_payable_svc, PayableCreateSchema, payable_id)


@ns.route("/accounts-payable/<int:payable_id>/pay")
@ns.param("payable_id", "The payable ID")
class PayablePayment(Resource):
    @ns.doc("pay_payable")
    @ns.expect(payable_payment_model)
    def post(self, payable_id: int):
        """Mark a supplier invoice paid and post it to the ledger."""
        data = parse_body(PayablePaymentSchema)
        return success_response(_payable_svc.pay(payable_id, **to_columns(data)))


# ---------------------------------------------------------------------------
# Accounts receivable
# ---------------------------------------------------------------------------
@ns.route("/accounts-receivable")
class ReceivableList(Resource):
    @ns.doc("list_receivables")
    def get(self):
        """Customer invoices (?paymentStatus=, ?customerId=)."""
        return success_response(_receivable_svc.list(
            payment_status=request.args.get("paymentStatus"),
            customer_id=request.args.get("customerId"),
        ))

    @ns.doc("create_receivable")
    @ns.expect(receivable_model)
    def post(self):
        return create_record(_receivable_svc, ReceivableCreateSchema)


@ns.route("/accounts-receivable/<int:receivable_id>")
@ns.param("receivable_id", "The receivable ID")
class ReceivableDetail(Resource):
    @ns.doc("get_receivable")
    def get(self, receivable_id: int):
        return success_response(_receivable_svc.get(receivable_id))

    @ns.doc("update_receivable")
    @ns.expect(receivable_model)
    def put(self, receivable_id: int):
        return update_record(_receivable_svc, ReceivableCreateSchema, receivable_id)


@ns.route("/accounts-receivable/<int:receivable_id>/payment")
@ns.param("receivable_id", "The receivable ID")
class ReceivablePayment(Resource):
    @ns.doc("record_receivable_payment")
    @ns.expect(receivable_payment_model)
    def post(self, receivable_id: int):
        data = parse_body(ReceivablePaymentSchema)
        return success_response(_receivable_svc.record_payment(receivable_id, **to_columns(data)))


# ---------------------------------------------------------------------------
# General ledger
# ---------------------------------------------------------------------------
@ns.route("/general-ledger")
class LedgerList(Resource):
    @ns.doc("list_ledger_entries")
    def get(self):
        """Journal entries (?accountCode=, ?fiscalYear=, ?fiscalPeriod=)."""
        return success_response(_ledger_svc.list(
            account_code=request.args.get("accountCode"),
            fiscal_year=request.args.get("fiscalYear", type=int),
            fiscal_period=request.args.get("fiscalPeriod", type=int),
        ))

    @ns.doc("create_ledger_entry")
    @ns.expect(ledger_model)
    def post(self):
        """Post a manual journal line; exactly one of debit or credit is positive."""
        return create_record(_ledger_svc, LedgerEntryCreateSchema)


@ns.route("/general-ledger/trial-balance")
class TrialBalance(Resource):
    @ns.doc("trial_balance", params={"fiscalYear": "Defaults to the current year", "fiscalPeriod": "Month 1-12"})
    def get(self):
        """Per-account debit and credit sums with overall totals."""
        fiscal_year = request.args.get("fiscalYear", type=int) or datetime.now(timezone.utc).year
        return success_response(_ledger_svc.trial_balance(
            fiscal_year, request.args.get("fiscalPeriod", type=int),
        ))


@ns.route("/general-ledger/<int:entry_id>")
@ns.param("entry_id", "The ledger entry ID")
class LedgerDetail(Resource):
    @ns.doc("get_ledger_entry")
    def get(self, entry_id: int):
        return success_response(_ledger_svc.get(entry_id))


@ns.route("/general-ledger/<int:entry_id>/reconcile")
@ns.param("entry_id", "The ledger entry ID")
class LedgerReconcile(Resource):
    @ns.doc("reconcile_ledger_entry")
    def post(self, entry_id: int):
        return success_response(_ledger_svc.reconcile(entry_id))
