"""Electronic tax invoices and their submission state with the tax authority."""

from petwash.domain.models.base import SerializerMixin, TimestampMixin, money, rate, utcnow
from petwash.extensions import db


class ElectronicInvoice(SerializerMixin, TimestampMixin, db.Model):
    """A VAT invoice, submitted electronically when the amount requires it."""

    __tablename__ = "electronic_invoices"

    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(50), unique=True, nullable=False)
    invoice_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    service_type = db.Column(db.String(30), nullable=False, index=True)
    transaction_id = db.Column(db.String(100), index=True)
    invoice_type = db.Column(db.String(10), nullable=False)
    customer_name = db.Column(db.String(200), nullable=False)
    customer_email = db.Column(db.String(255))
    customer_phone = db.Column(db.String(30))
    customer_tax_id = db.Column(db.String(20))
    customer_address = db.Column(db.Text)
    amount_before_vat = money(nullable=False)
    vat_amount = money(nullable=False)
    total_amount = money(nullable=False)
    vat_rate = rate(nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="ILS")
    line_items = db.Column(db.JSON, nullable=False)
    payment_method = db.Column(db.String(50))
    payment_status = db.Column(db.String(20), nullable=False, default="paid")
    ita_submission_status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    ita_reference_number = db.Column(db.String(100))
    ita_submitted_at = db.Column(db.DateTime)
    ita_response = db.Column(db.JSON)
    ita_error_message = db.Column(db.Text)
    requires_electronic_invoicing = db.Column(db.Boolean, nullable=False, default=False)
    compliance_status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    compliance_notes = db.Column(db.Text)
    created_by = db.Column(db.String(100))
