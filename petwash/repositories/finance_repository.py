"""Repositories for payables, receivables and the general ledger."""

from datetime import date

from sqlalchemy import func

from petwash.domain.models import AccountsPayable, AccountsReceivable, GeneralLedgerEntry
from petwash.extensions import db
from petwash.repositories.base import BaseRepository


class PayableRepository(BaseRepository[AccountsPayable]):
    def __init__(self):
        super().__init__(
            AccountsPayable,
            default_order=[AccountsPayable.due_date, AccountsPayable.id],
        )

    def get_overdue(self, today: date) -> list[AccountsPayable]:
        """Unpaid invoices whose due date has passed."""
        return (
            AccountsPayable.query
            .filter(
                AccountsPayable.due_date < today,
                AccountsPayable.payment_status.in_(("pending", "overdue")),
            )
            .order_by(AccountsPayable.due_date)
            .all()
        )


class ReceivableRepository(BaseRepository[AccountsReceivable]):
    def __init__(self):
        super().__init__(
            AccountsReceivable,
            default_order=[AccountsReceivable.due_date, AccountsReceivable.id],
        )


class LedgerRepository(BaseRepository[GeneralLedgerEntry]):
    def __init__(self):
        super().__init__(
            GeneralLedgerEntry,
            default_order=[GeneralLedgerEntry.entry_date, GeneralLedgerEntry.id],
        )

    def trial_balance(self, fiscal_year: int, fiscal_period: int | None = None) -> list:
        """Per-account debit and credit sums for a fiscal year (and period)."""
        entry = GeneralLedgerEntry
        query = (
            db.session.query(
                entry.account_code,
                entry.account_name,
                entry.account_type,
                func.coalesce(func.sum(entry.debit), 0).label("total_debit"),
                func.coalesce(func.sum(entry.credit), 0).label("total_credit"),
            )
            .filter(entry.fiscal_year == fiscal_year)
        )
        if fiscal_period is not None:
            query = query.filter(entry.fiscal_period == fiscal_period)
        return (
            query
            .group_by(entry.account_code, entry.account_name, entry.account_type)
            .order_by(entry.account_code)
            .all()
        )
