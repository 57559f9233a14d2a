"""Finance ledgers: payables, receivables and the general ledger."""

from decimal import Decimal

from petwash.domain.models.base import SerializerMixin, TimestampMixin, money
from petwash.extensions import db


class AccountsPayable(SerializerMixin, TimestampMixin, db.Model):
    """A supplier invoice owed by the company."""

    __tablename__ = "accounts_payable"

    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(100), unique=True, nullable=False)
    supplier_id = db.Column(db.String(100), nullable=False, index=True)
    supplier_name = db.Column(db.String(200))
    station_id = db.Column(db.Integer, db.ForeignKey("pet_wash_stations.id"), index=True)
    invoice_date = db.Column(db.Date, nullable=False)
    due_date = db.Column(db.Date, nullable=False, index=True)
    amount = money(nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="ILS")
    tax_amount = money(nullable=False, default=Decimal("0"))
    total_amount = money(nullable=False)
    payment_status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    payment_date = db.Column(db.Date)
    payment_method = db.Column(db.String(50))
    payment_reference = db.Column(db.String(100))
    gl_account_code = db.Column(db.String(20))
    category = db.Column(db.String(50))
    notes = db.Column(db.Text)


class AccountsReceivable(SerializerMixin, TimestampMixin, db.Model):
    """An invoice issued to a customer and the payments collected against it."""

    __tablename__ = "accounts_receivable"

    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(100), unique=True, nullable=False)
    customer_id = db.Column(db.String(100), nullable=False, index=True)
    customer_name = db.Column(db.String(200))
    invoice_date = db.Column(db.Date, nullable=False)
    due_date = db.Column(db.Date, nullable=False, index=True)
    amount = money(nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="ILS")
    tax_amount = money(nullable=False, default=Decimal("0"))
    total_amount = money(nullable=False)
    paid_amount = money(nullable=False, default=Decimal("0"))
    balance_due = money(nullable=False)
    payment_status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    last_payment_date = db.Column(db.Date)
    gl_account_code = db.Column(db.String(20))
    notes = db.Column(db.Text)


class GeneralLedgerEntry(SerializerMixin, TimestampMixin, db.Model):
    """One side of a double-entry journal line."""

    __tablename__ = "general_ledger"

    id = db.Column(db.Integer, primary_key=True)
    entry_number = db.Column(db.String(50), unique=True, nullable=False)
    entry_date = db.Column(db.Date, nullable=False, index=True)
    account_code = db.Column(db.String(20), nullable=False, index=True)
    account_name = db.Column(db.String(200), nullable=False)
    account_type = db.Column(db.String(20), nullable=False)
    debit = money(nullable=False, default=Decimal("0"))
    credit = money(nullable=False, default=Decimal("0"))
    currency = db.Column(db.String(3), nullable=False, default="ILS")
    description = db.Column(db.Text)
    source_type = db.Column(db.String(50))
    source_id = db.Column(db.Integer)
    fiscal_year = db.Column(db.Integer, nullable=False, index=True)
    fiscal_period = db.Column(db.Integer, nullable=False)
    is_reconciled = db.Column(db.Boolean, nullable=False, default=False)
    reconciled_at = db.Column(db.DateTime)
