"""Electronic invoicing service — issue VAT invoices and report them to the ITA.

Pipeline: validate -> compute VAT split -> persist (``pending`` when
electronic submission is required, else ``not_required``) -> submit ->
record the outcome. Failed submissions are retried on demand.
"""

import logging
from datetime import date, datetime, time, timezone
from decimal import Decimal

from flask import current_app

from petwash.domain.amounts import split_vat, to_money
from petwash.domain.exceptions import IntegrationError, ResourceNotFoundError, ValidationError
from petwash.domain.models import ElectronicInvoice
from petwash.extensions import transaction
from petwash.integrations.ita_client import TaxAuthorityClient
from petwash.repositories.invoice_repository import InvoiceRepository
from petwash.services.tax_audit_service import TaxAuditService

logger = logging.getLogger(__name__)

# Submission states after which no further submission is attempted.
FINAL_SUBMISSION_STATUSES = ("submitted", "accepted")

ITA_STATUS_MAP = {"accepted": "accepted", "rejected": "rejected"}


class InvoiceService:
    """Issues invoices and drives their ITA submission state.

    Args:
        client: Tax authority client; defaults to the one registered on the
            current app.
    """

    def __init__(self, client: TaxAuthorityClient | None = None, audit: TaxAuditService | None = None):
        self._invoices = InvoiceRepository()
        self._audit = audit or TaxAuditService()
        self._client = client

    @property
    def client(self) -> TaxAuthorityClient:
        return self._client or current_app.extensions["ita_client"]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, invoice_id: int) -> dict:
        return self._get_instance(invoice_id).to_dict()

    def list(self, status: str | None = None, limit: int = 50) -> list[dict]:
        return [invoice.to_dict() for invoice in self._invoices.list_recent(status, limit)]

    def config(self) -> dict:
        data = self.client.describe()
        data["b2bThreshold"] = format(self._threshold(), "f")
        data["defaultVatRate"] = current_app.config["DEFAULT_VAT_RATE"]
        return data

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_invoice(self, **values) -> dict:
        """Persist a new invoice and submit it straight away when required."""
        vat_rate = values.pop("vat_rate", None)
        if vat_rate is None:
            vat_rate = Decimal(current_app.config["DEFAULT_VAT_RATE"])
        amounts = split_vat(values["total_amount"], vat_rate)

        line_items = []
        for item in values.pop("line_items"):
            quantity, unit_price = Decimal(str(item["quantity"])), to_money(item["unitPrice"])
            line_items.append({**item, "totalPrice": format(to_money(quantity * unit_price), "f")})

        invoice_type = "b2b" if values.get("customer_tax_id") else "b2c"
        requires_submission = invoice_type == "b2b" and amounts.total >= self._threshold()
        now = datetime.now(timezone.utc)

        with transaction():
            invoice = self._invoices.create(
                **values,
                line_items=line_items,
                invoice_number=self._invoices.next_number(
                    "invoice_number", f"INV-{now:%Y}-{now:%m%d}", width=4,
                ),
                invoice_date=now,
                invoice_type=invoice_type,
                amount_before_vat=amounts.amount_before_vat,
                vat_amount=amounts.vat_amount,
                vat_rate=amounts.vat_rate,
                requires_electronic_invoicing=requires_submission,
                ita_submission_status="pending" if requires_submission else "not_required",
                compliance_status="pending" if requires_submission else "compliant",
            )
            if requires_submission and not self.client.configured:
                invoice.compliance_status = "warning"
                invoice.compliance_notes = "Electronic submission required but ITA credentials are not configured"
            self._audit.record(
                "electronic_invoice", invoice.id,
                event_type="invoice_created", action="created",
                new_state=invoice.to_dict(), user_id=invoice.created_by,
            )
        logger.info(
            "Created %s invoice %s total=%s (ITA submission %s)",
            invoice_type, invoice.invoice_number, amounts.total,
            "required" if requires_submission else "not required",
        )

        if requires_submission and self.client.configured:
            try:
                return self.submit(invoice.id)
            except IntegrationError:
                # The failure is recorded on the invoice and can be retried.
                logger.warning("Invoice %s saved but submission failed", invoice.invoice_number)
        return invoice.to_dict()

    def submit(self, invoice_id: int) -> dict:
        """Submit one invoice to the ITA and record the result.

        Raises:
            IntegrationError: The ITA could not be reached (recorded as
                ``error`` / ``non_compliant`` before re-raising).
        """
        invoice = self._get_instance(invoice_id)
        if invoice.ita_submission_status in FINAL_SUBMISSION_STATUSES:
            logger.info("Invoice %s already %s, skipping", invoice.invoice_number, invoice.ita_submission_status)
            return invoice.to_dict()
        previous = invoice.to_dict()

        try:
            result = self.client.submit_invoice(previous)
        except IntegrationError as err:
            with transaction():
                invoice.ita_submission_status = "error"
                invoice.ita_error_message = err.message
                invoice.compliance_status = "non_compliant"
                invoice.compliance_notes = f"ITA submission failed: {err.message}"
                self._audit_submission(invoice, previous, success=False, notes=err.message)
            raise

        with transaction():
            invoice.ita_response = result.get("response")
            if result["success"]:
                invoice.ita_submission_status = result["status"]
                invoice.ita_reference_number = result.get("itaReferenceNumber")
                invoice.ita_submitted_at = datetime.now(timezone.utc)
                invoice.ita_error_message = None
                invoice.compliance_status = "compliant"
                invoice.compliance_notes = None
            else:
                invoice.ita_submission_status = "error"
                invoice.ita_error_message = result.get("errorMessage")
                invoice.compliance_status = "warning"
                invoice.compliance_notes = f"ITA submission failed ({result.get('errorCode')})"
            self._audit_submission(
                invoice, previous, success=result["success"],
                notes=None if result["success"] else result.get("errorMessage"),
            )
        return invoice.to_dict()

    def refresh_status(self, invoice_id: int) -> dict:
        """Ask the ITA for the current state of a submitted invoice."""
        invoice = self._get_instance(invoice_id)
        if not invoice.ita_reference_number:
            return {
                "invoiceNumber": invoice.invoice_number,
                "status": invoice.ita_submission_status,
                "message": "Invoice has not been accepted for processing by the ITA",
            }

        remote = self.client.check_invoice_status(invoice.ita_reference_number)
        local_status = ITA_STATUS_MAP.get(str(remote["status"]).lower())
        if local_status and local_status != invoice.ita_submission_status:
            previous = invoice.to_dict()
            with transaction():
                invoice.ita_submission_status = local_status
                invoice.ita_response = remote["details"]
                if local_status == "rejected":
                    invoice.compliance_status = "non_compliant"
                    invoice.compliance_notes = "Rejected by the ITA"
                self._audit.record(
                    "electronic_invoice", invoice.id,
                    event_type="invoice_status_changed", action="status_changed",
                    previous_state=previous, new_state=invoice.to_dict(),
                    notes=f"ITA status {remote['status']}",
                )
            logger.info("Invoice %s is now %s at the ITA", invoice.invoice_number, local_status)
        return {
            "invoiceNumber": invoice.invoice_number,
            "status": invoice.ita_submission_status,
            "itaReferenceNumber": invoice.ita_reference_number,
            "itaStatus": remote["status"],
            "details": remote["details"],
        }

    def retry_failed(self) -> dict:
        """Resubmit every invoice whose last submission ended in ``error``."""
        results = []
        for invoice in self._invoices.get_failed():
            try:
                outcome = self.submit(invoice.id)
                success = outcome["itaSubmissionStatus"] in FINAL_SUBMISSION_STATUSES
                results.append({
                    "invoiceId": invoice.id,
                    "invoiceNumber": invoice.invoice_number,
                    "success": success,
                    "status": outcome["itaSubmissionStatus"],
                    "error": outcome["itaErrorMessage"],
                })
            except IntegrationError as err:
                results.append({
                    "invoiceId": invoice.id,
                    "invoiceNumber": invoice.invoice_number,
                    "success": False,
                    "status": "error",
                    "error": err.message,
                })
        successful = sum(1 for result in results if result["success"])
        logger.info("Retried %s failed invoice(s): %s succeeded", len(results), successful)
        return {
            "results": results,
            "total": len(results),
            "successful": successful,
            "failed": len(results) - successful,
        }

    def reset_circuit_breaker(self) -> dict:
        self.client.breaker.reset()
        return self.client.breaker.snapshot()

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def compliance_report(self, start_date: date, end_date: date) -> dict:
        """Submission coverage for invoices that legally required it."""
        if end_date < start_date:
            raise ValidationError(
                "Validation failed",
                details=[{"field": "endDate", "message": "endDate must not be before startDate", "type": "value_error"}],
            )
        invoices = self._invoices.get_in_period(
            datetime.combine(start_date, time.min), datetime.combine(end_date, time.max),
        )
        required = [invoice for invoice in invoices if invoice.requires_electronic_invoicing]
        submitted = [i for i in required if i.ita_submission_status in FINAL_SUBMISSION_STATUSES]
        pending = [i for i in required if i.ita_submission_status == "pending"]
        failed = [i for i in required if i.ita_submission_status in ("error", "rejected")]

        if required:
            compliance_rate = f"{len(submitted) / len(required) * 100:.2f}%"
        else:
            compliance_rate = "100%"
        return {
            "period": {"startDate": start_date.isoformat(), "endDate": end_date.isoformat()},
            "totalInvoices": len(invoices),
            "b2bOverThreshold": {
                "total": len(required),
                "submitted": len(submitted),
                "pending": len(pending),
                "failed": len(failed),
            },
            "complianceRate": compliance_rate,
            "failedInvoices": [
                {
                    "id": invoice.id,
                    "invoiceNumber": invoice.invoice_number,
                    "totalAmount": format(to_money(invoice.total_amount), "f"),
                    "status": invoice.ita_submission_status,
                    "error": invoice.ita_error_message,
                }
                for invoice in failed
            ],
        }

    def statistics(self) -> dict:
        total_revenue, total_vat = self._invoices.totals()
        return {
            "bySubmissionStatus": self._invoices.count_by("ita_submission_status"),
            "byInvoiceType": self._invoices.count_by("invoice_type"),
            "byServiceType": self._invoices.count_by("service_type"),
            "byComplianceStatus": self._invoices.count_by("compliance_status"),
            "totalRevenue": format(to_money(total_revenue), "f"),
            "totalVat": format(to_money(total_vat), "f"),
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _audit_submission(self, invoice: ElectronicInvoice, previous: dict, success: bool, notes: str | None) -> None:
        self._audit.record(
            "electronic_invoice", invoice.id,
            event_type="invoice_submitted" if success else "invoice_submission_failed",
            action="submitted_to_ita" if success else "submission_failed",
            previous_state=previous, new_state=invoice.to_dict(), notes=notes,
        )

    def _get_instance(self, invoice_id: int) -> ElectronicInvoice:
        invoice = self._invoices.get_by_id(invoice_id)
        if invoice is None:
            raise ResourceNotFoundError("ElectronicInvoice", invoice_id)
        return invoice

    @staticmethod
    def _threshold() -> Decimal:
        return Decimal(current_app.config["ITA_B2B_THRESHOLD"])
