"""Finance services: payables, receivables and general-ledger postings."""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from petwash.domain.amounts import checked_total, to_money
from petwash.domain.exceptions import BusinessRuleError, ConflictError
from petwash.domain.models import AccountsPayable, AccountsReceivable
from petwash.extensions import transaction
from petwash.repositories.finance_repository import (
    LedgerRepository,
    PayableRepository,
    ReceivableRepository,
)
from petwash.repositories.network_repository import StationRepository
from petwash.services.crud_service import CrudService

logger = logging.getLogger(__name__)

CASH_ACCOUNT = ("1000", "Cash and bank", "asset")
RECEIVABLE_ACCOUNT = ("1200", "Accounts receivable", "asset")
PAYABLE_ACCOUNT = ("2000", "Accounts payable", "liability")


class LedgerService(CrudService):
    """Journal entries, reconciliation, trial balance and balanced postings."""

    def __init__(self):
        self._ledger = LedgerRepository()
        super().__init__(self._ledger, "LedgerEntry")

    def _before_create(self, values: dict) -> dict:
        entry_date = values["entry_date"]
        values.setdefault("fiscal_year", entry_date.year)
        values.setdefault("fiscal_period", entry_date.month)
        values["entry_number"] = self._ledger.next_number("entry_number", f"GL-{entry_date.year}")
        return values

    def post(
        self,
        entry_date: date,
        debit_account: tuple[str, str, str],
        credit_account: tuple[str, str, str],
        amount: Decimal,
        currency: str,
        description: str,
        source_type: str,
        source_id: int,
    ) -> list[dict]:
        """Write a balanced debit/credit pair.

        Must be called inside the caller's transaction; nothing is committed here.
        """
        entries = []
        for (code, name, account_type), debit, credit in (
            (debit_account, amount, Decimal("0")),
            (credit_account, Decimal("0"), amount),
        ):
            values = self._before_create({
                "entry_date": entry_date,
                "account_code": code,
                "account_name": name,
                "account_type": account_type,
                "debit": debit,
                "credit": credit,
                "currency": currency,
                "description": description,
                "source_type": source_type,
                "source_id": source_id,
            })
            entries.append(self._ledger.create(**values))
        logger.info(
            "Posted %s %s: debit %s / credit %s for %s id=%s",
            amount, currency, debit_account[0], credit_account[0], source_type, source_id,
        )
        return [entry.to_dict() for entry in entries]

    def reconcile(self, entry_id: int) -> dict:
        with transaction():
            entry = self.get_instance(entry_id, for_update=True)
            if entry.is_reconciled:
                raise ConflictError(f"Ledger entry {entry.entry_number} is already reconciled")
            entry.is_reconciled = True
            entry.reconciled_at = datetime.now(timezone.utc)
        logger.info("Reconciled ledger entry id=%s", entry_id)
        return entry.to_dict()

    def trial_balance(self, fiscal_year: int, fiscal_period: int | None = None) -> dict:
        accounts = []
        total_debit = total_credit = Decimal("0.00")
        for row in self._ledger.trial_balance(fiscal_year, fiscal_period):
            debit, credit = to_money(row.total_debit), to_money(row.total_credit)
            total_debit += debit
            total_credit += credit
            accounts.append({
                "accountCode": row.account_code,
                "accountName": row.account_name,
                "accountType": row.account_type,
                "totalDebit": format(debit, "f"),
                "totalCredit": format(credit, "f"),
                "balance": format(debit - credit, "f"),
            })
        return {
            "fiscalYear": fiscal_year,
            "fiscalPeriod": fiscal_period,
            "accounts": accounts,
            "totalDebit": format(total_debit, "f"),
            "totalCredit": format(total_credit, "f"),
            "balanced": total_debit == total_credit,
        }


class PayableService(CrudService):
    """Supplier invoices; paying one posts it against cash."""

    def __init__(self, ledger: LedgerService | None = None):
        self._payables = PayableRepository()
        self._ledger = ledger or LedgerService()
        super().__init__(
            self._payables,
            "AccountsPayable",
            references={"station_id": (StationRepository(), "Station")},
        )

    def _before_create(self, values: dict) -> dict:
        values["total_amount"] = checked_total(
            "totalAmount",
            {"amount": values["amount"], "taxAmount": values.get("tax_amount")},
            values.get("total_amount"),
        )
        return values

    def _before_update(self, instance: AccountsPayable, values: dict) -> dict:
        if instance.payment_status == "paid":
            raise ConflictError(f"Payable {instance.invoice_number} is paid and can no longer change")
        if {"amount", "tax_amount", "total_amount"} & values.keys():
            values["total_amount"] = checked_total(
                "totalAmount",
                {
                    "amount": values.get("amount", instance.amount),
                    "taxAmount": values.get("tax_amount", instance.tax_amount),
                },
                values.get("total_amount"),
            )
        return values

    def get_overdue(self) -> list[dict]:
        today = datetime.now(timezone.utc).date()
        return [row.to_dict() for row in self._payables.get_overdue(today)]

    def pay(
        self,
        payable_id: int,
        payment_date: date,
        payment_method: str,
        payment_reference: str | None = None,
    ) -> dict:
        """Mark a payable paid and post it, in a single transaction."""
        with transaction():
            payable = self.get_instance(payable_id, for_update=True)
            if payable.payment_status in ("paid", "cancelled"):
                raise ConflictError(
                    f"Payable {payable.invoice_number} is already {payable.payment_status}",
                    details={"paymentStatus": payable.payment_status},
                )
            payable.payment_status = "paid"
            payable.payment_date = payment_date
            payable.payment_method = payment_method
            payable.payment_reference = payment_reference
            self._ledger.post(
                entry_date=payment_date,
                debit_account=PAYABLE_ACCOUNT,
                credit_account=CASH_ACCOUNT,
                amount=to_money(payable.total_amount),
                currency=payable.currency,
                description=f"Payment of supplier invoice {payable.invoice_number}",
                source_type="accounts_payable",
                source_id=payable.id,
            )
        logger.info("Paid payable id=%s via %s", payable_id, payment_method)
        return payable.to_dict()


class ReceivableService(CrudService):
    """Customer invoices with partial-payment tracking."""

    def __init__(self, ledger: LedgerService | None = None):
        self._ledger = ledger or LedgerService()
        super().__init__(ReceivableRepository(), "AccountsReceivable")

    def _before_create(self, values: dict) -> dict:
        values["total_amount"] = checked_total(
            "totalAmount",
            {"amount": values["amount"], "taxAmount": values.get("tax_amount")},
            values.get("total_amount"),
        )
        values["paid_amount"] = Decimal("0.00")
        values["balance_due"] = values["total_amount"]
        return values

    def _before_update(self, instance: AccountsReceivable, values: dict) -> dict:
        if {"amount", "tax_amount", "total_amount"} & values.keys():
            total = checked_total(
                "totalAmount",
                {
                    "amount": values.get("amount", instance.amount),
                    "taxAmount": values.get("tax_amount", instance.tax_amount),
                },
                values.get("total_amount"),
            )
            if total < to_money(instance.paid_amount):
                raise BusinessRuleError("totalAmount cannot be less than the amount already paid")
            values["total_amount"] = total
            values["balance_due"] = total - to_money(instance.paid_amount)
        return values

    def record_payment(
        self,
        receivable_id: int,
        amount: Decimal,
        payment_date: date,
        payment_method: str | None = None,
    ) -> dict:
        """Apply a customer payment; the invoice becomes ``partial`` or ``paid``."""
        amount = to_money(amount)
        with transaction():
            receivable = self.get_instance(receivable_id, for_update=True)
            if receivable.payment_status in ("paid", "written_off"):
                raise ConflictError(
                    f"Receivable {receivable.invoice_number} is already {receivable.payment_status}",
                )
            balance = to_money(receivable.balance_due)
            if amount > balance:
                raise BusinessRuleError(
                    "Payment exceeds the balance due",
                    details={"balanceDue": format(balance, "f"), "amount": format(amount, "f")},
                )
            receivable.paid_amount = to_money(receivable.paid_amount) + amount
            receivable.balance_due = balance - amount
            receivable.payment_status = "paid" if receivable.balance_due == 0 else "partial"
            receivable.last_payment_date = payment_date
            self._ledger.post(
                entry_date=payment_date,
                debit_account=CASH_ACCOUNT,
                credit_account=RECEIVABLE_ACCOUNT,
                amount=amount,
                currency=receivable.currency,
                description=(
                    f"Payment received for invoice {receivable.invoice_number}"
                    + (f" ({payment_method})" if payment_method else "")
                ),
                source_type="accounts_receivable",
                source_id=receivable.id,
            )
        logger.info(
            "Receivable id=%s received %s, status=%s", receivable_id, amount, receivable.payment_status,
        )
        return receivable.to_dict()
