"""Tax compliance: periodic tax returns, tax payments and the audit trail."""

from decimal import Decimal

from petwash.domain.models.base import SerializerMixin, TimestampMixin, money, utcnow
from petwash.extensions import db


class TaxReturn(SerializerMixin, TimestampMixin, db.Model):
    """A VAT or income tax return for one fiscal period."""

    __tablename__ = "tax_returns"

    id = db.Column(db.Integer, primary_key=True)
    return_number = db.Column(db.String(50), unique=True, nullable=False)
    return_type = db.Column(db.String(20), nullable=False, index=True)
    fiscal_year = db.Column(db.Integer, nullable=False, index=True)
    # Month (1-12) for monthly VAT, quarter (1-4) for quarterly VAT, 1 for annual returns.
    fiscal_period = db.Column(db.Integer, nullable=False)
    period_start = db.Column(db.Date, nullable=False)
    period_end = db.Column(db.Date, nullable=False)
    total_revenue = money(nullable=False)
    taxable_income = money(nullable=False)
    vat_collected = money(nullable=False, default=Decimal("0"))
    vat_paid = money(nullable=False, default=Decimal("0"))
    net_vat_owed = money(nullable=False)
    status = db.Column(db.String(20), nullable=False, default="draft", index=True)
    submitted_to_ita = db.Column(db.Boolean, nullable=False, default=False)
    submitted_at = db.Column(db.DateTime)
    submitted_by = db.Column(db.String(100))
    ita_reference_number = db.Column(db.String(100))
    ita_response = db.Column(db.JSON)
    approved_at = db.Column(db.DateTime)
    prepared_by = db.Column(db.String(100))
    reviewed_by = db.Column(db.String(100))
    notes = db.Column(db.Text)
    attachments = db.Column(db.JSON)


class TaxPayment(SerializerMixin, db.Model):
    """Money paid to the tax authority, optionally against a return."""

    __tablename__ = "tax_payments"

    id = db.Column(db.Integer, primary_key=True)
    payment_number = db.Column(db.String(50), unique=True, nullable=False)
    tax_return_id = db.Column(db.Integer, db.ForeignKey("tax_returns.id"), index=True)
    payment_type = db.Column(db.String(20), nullable=False)
    amount = money(nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="ILS")
    payment_date = db.Column(db.Date, nullable=False, index=True)
    payment_method = db.Column(db.String(50), nullable=False)
    bank_reference = db.Column(db.String(100))
    ita_receipt_number = db.Column(db.String(100))
    fiscal_year = db.Column(db.Integer, nullable=False)
    fiscal_period = db.Column(db.Integer)
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    confirmation_url = db.Column(db.Text)
    paid_by = db.Column(db.String(100))
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)


class TaxAuditLog(SerializerMixin, db.Model):
    """Append-only record of a state change on a tax document.

    Each row's ``audit_hash`` covers its own content and the previous row's
    hash, so editing or deleting any row breaks the chain after it.
    """

    __tablename__ = "tax_audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    event_type = db.Column(db.String(50), nullable=False, index=True)
    entity_type = db.Column(db.String(50), nullable=False)
    entity_id = db.Column(db.Integer, nullable=False)
    action = db.Column(db.String(50), nullable=False)
    previous_state = db.Column(db.JSON)
    new_state = db.Column(db.JSON)
    user_id = db.Column(db.String(100), index=True)
    user_email = db.Column(db.String(255))
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.Text)
    audit_hash = db.Column(db.String(64), nullable=False)
    previous_audit_hash = db.Column(db.String(64))
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    __table_args__ = (db.Index("ix_tax_audit_logs_entity", "entity_type", "entity_id"),)
