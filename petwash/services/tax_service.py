"""Tax returns and tax payments.

Returns are prepared as drafts, submitted to the ITA through the shared
``TaxAuthorityClient`` and then follow the ITA's decision. Every state
change is written to the tax audit trail in the same transaction.
"""

import logging
from datetime import datetime, timezone

from flask import current_app

from petwash.domain.amounts import to_money
from petwash.domain.exceptions import ConflictError, IntegrationError
from petwash.domain.models import TaxPayment, TaxReturn
from petwash.extensions import transaction
from petwash.integrations.ita_client import TaxAuthorityClient
from petwash.repositories.tax_repository import TaxPaymentRepository, TaxReturnRepository
from petwash.services.crud_service import CrudService
from petwash.services.tax_audit_service import TaxAuditService

logger = logging.getLogger(__name__)

# Returns can be edited and (re)submitted only in these states.
OPEN_RETURN_STATUSES = ("draft", "rejected")
FINAL_PAYMENT_STATUSES = ("confirmed", "rejected")

ITA_RETURN_STATUS_MAP = {"approved": "approved", "accepted": "approved", "rejected": "rejected"}


def _period_code(return_type: str, fiscal_period: int) -> str:
    if return_type == "vat_monthly":
        return f"M{fiscal_period:02d}"
    if return_type == "vat_quarterly":
        return f"Q{fiscal_period}"
    return "Y"


class TaxReturnService(CrudService):
    """Prepares tax returns and drives their ITA submission.

    Args:
        client: Tax authority client; defaults to the one registered on the
            current app.
    """

    def __init__(self, client: TaxAuthorityClient | None = None, audit: TaxAuditService | None = None):
        self._returns = TaxReturnRepository()
        self._audit = audit or TaxAuditService()
        self._client = client
        super().__init__(self._returns, "TaxReturn")

    @property
    def client(self) -> TaxAuthorityClient:
        return self._client or current_app.extensions["ita_client"]

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _before_create(self, values: dict) -> dict:
        prefix = f"TAX-{values['fiscal_year']}-{_period_code(values['return_type'], values['fiscal_period'])}"
        values["return_number"] = self._returns.next_number("return_number", prefix, width=3)
        values["net_vat_owed"] = to_money(values.get("vat_collected", 0)) - to_money(values.get("vat_paid", 0))
        values["status"] = "draft"
        return values

    def _before_update(self, instance: TaxReturn, values: dict) -> dict:
        if instance.status not in OPEN_RETURN_STATUSES:
            raise ConflictError(
                f"Tax return {instance.return_number} is {instance.status} and can no longer be edited",
                details={"status": instance.status},
            )
        vat_collected = values.get("vat_collected", instance.vat_collected)
        vat_paid = values.get("vat_paid", instance.vat_paid)
        values["net_vat_owed"] = to_money(vat_collected) - to_money(vat_paid)
        if instance.status == "rejected":
            # A corrected return goes back to draft before it is resubmitted.
            values["status"] = "draft"
        return values

    def _after_write(self, instance: TaxReturn, previous: dict | None = None) -> None:
        self._audit.record(
            "tax_return", instance.id,
            event_type="tax_return_updated" if previous else "tax_return_created",
            action="updated" if previous else "created",
            previous_state=previous,
            new_state=instance.to_dict(),
            user_id=None if previous else instance.prepared_by,
        )

    # ------------------------------------------------------------------
    # ITA submission
    # ------------------------------------------------------------------

    def submit(self, return_id: int, submitted_by: str | None = None) -> dict:
        """Submit a draft (or corrected) return to the ITA.

        An unsuccessful result leaves the return in its current state and is
        recorded on the audit trail.

        Raises:
            ConflictError: The return was already submitted or decided.
            IntegrationError: The ITA could not be reached (audited before
                re-raising).
        """
        tax_return = self.get_instance(return_id)
        if tax_return.status not in OPEN_RETURN_STATUSES:
            raise ConflictError(
                f"Tax return {tax_return.return_number} is already {tax_return.status}",
                details={"status": tax_return.status},
            )
        previous = tax_return.to_dict()

        try:
            result = self.client.submit_tax_return(previous)
        except IntegrationError as err:
            with transaction():
                self._audit.record(
                    "tax_return", tax_return.id,
                    event_type="tax_return_submission_failed", action="submission_failed",
                    previous_state=previous, new_state=previous,
                    user_id=submitted_by, notes=err.message,
                )
            raise

        with transaction():
            tax_return.ita_response = result.get("response")
            if result["success"]:
                tax_return.status = "submitted"
                tax_return.submitted_to_ita = True
                tax_return.submitted_at = datetime.now(timezone.utc)
                tax_return.submitted_by = submitted_by
                tax_return.ita_reference_number = result.get("itaReferenceNumber")
                event_type, action, notes = "tax_return_submitted", "submitted_to_ita", None
            else:
                event_type, action = "tax_return_submission_failed", "submission_failed"
                notes = f"{result.get('errorCode')}: {result.get('errorMessage')}"
            self._audit.record(
                "tax_return", tax_return.id,
                event_type=event_type, action=action,
                previous_state=previous, new_state=tax_return.to_dict(),
                user_id=submitted_by, notes=notes,
            )

        if result["success"]:
            logger.info("Tax return %s submitted, ITA reference %s",
                        tax_return.return_number, tax_return.ita_reference_number)
        else:
            logger.warning("Tax return %s was not accepted for submission: %s", tax_return.return_number, notes)
        return {
            "taxReturn": tax_return.to_dict(),
            "success": result["success"],
            "itaReferenceNumber": result.get("itaReferenceNumber"),
            "errorCode": result.get("errorCode"),
            "errorMessage": result.get("errorMessage"),
        }

    def refresh_status(self, return_id: int) -> dict:
        """Ask the ITA whether a submitted return was approved or rejected."""
        tax_return = self.get_instance(return_id)
        if not tax_return.ita_reference_number:
            return {
                "returnNumber": tax_return.return_number,
                "status": tax_return.status,
                "message": "Tax return has not been submitted to the ITA",
            }

        remote = self.client.check_tax_return_status(tax_return.ita_reference_number)
        local_status = ITA_RETURN_STATUS_MAP.get(str(remote["status"]).lower())
        if local_status and local_status != tax_return.status:
            previous = tax_return.to_dict()
            with transaction():
                tax_return.status = local_status
                tax_return.ita_response = remote["details"]
                if local_status == "approved":
                    tax_return.approved_at = datetime.now(timezone.utc)
                self._audit.record(
                    "tax_return", tax_return.id,
                    event_type="tax_return_status_changed", action="status_changed",
                    previous_state=previous, new_state=tax_return.to_dict(),
                    notes=f"ITA status {remote['status']}",
                )
            logger.info("Tax return %s is now %s at the ITA", tax_return.return_number, local_status)
        return {
            "returnNumber": tax_return.return_number,
            "status": tax_return.status,
            "itaReferenceNumber": tax_return.ita_reference_number,
            "itaStatus": remote["status"],
            "details": remote["details"],
        }


class TaxPaymentService(CrudService):
    def __init__(self, audit: TaxAuditService | None = None):
        self._payments = TaxPaymentRepository()
        self._returns = TaxReturnRepository()
        self._audit = audit or TaxAuditService()
        super().__init__(
            self._payments,
            "TaxPayment",
            references={"tax_return_id": (self._returns, "TaxReturn")},
        )

    def search(self, **filters) -> list[dict]:
        """Payments by return, type, status and ``start_date``..``end_date``."""
        return [payment.to_dict() for payment in self._payments.search(**filters)]

    def _before_create(self, values: dict) -> dict:
        payment_date = values["payment_date"]
        tax_return = self._returns.get_by_id(values["tax_return_id"]) if values.get("tax_return_id") else None
        if values.get("fiscal_year") is None:
            values["fiscal_year"] = tax_return.fiscal_year if tax_return else payment_date.year
        if values.get("fiscal_period") is None and tax_return:
            values["fiscal_period"] = tax_return.fiscal_period
        values["payment_number"] = self._payments.next_number(
            "payment_number", f"TAXPAY-{payment_date:%Y}", width=3,
        )
        return values

    def _before_update(self, instance: TaxPayment, values: dict) -> dict:
        if instance.status in FINAL_PAYMENT_STATUSES:
            raise ConflictError(
                f"Tax payment {instance.payment_number} is {instance.status} and can no longer be changed",
                details={"status": instance.status},
            )
        return values

    def _after_write(self, instance: TaxPayment, previous: dict | None = None) -> None:
        self._audit.record(
            "tax_payment", instance.id,
            event_type="tax_payment_updated" if previous else "tax_payment_made",
            action="updated" if previous else "payment_made",
            previous_state=previous,
            new_state=instance.to_dict(),
            user_id=None if previous else instance.paid_by,
        )
