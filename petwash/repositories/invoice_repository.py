"""Repository for electronic tax invoices."""

from datetime import datetime

from sqlalchemy import func

from petwash.domain.models import ElectronicInvoice
from petwash.extensions import db
from petwash.repositories.base import BaseRepository


class InvoiceRepository(BaseRepository[ElectronicInvoice]):
    def __init__(self):
        super().__init__(
            ElectronicInvoice,
            default_order=[ElectronicInvoice.invoice_date.desc(), ElectronicInvoice.id.desc()],
        )

    def get_by_number(self, invoice_number: str) -> ElectronicInvoice | None:
        return ElectronicInvoice.query.filter_by(invoice_number=invoice_number).first()

    def get_failed(self) -> list[ElectronicInvoice]:
        return (
            ElectronicInvoice.query
            .filter_by(ita_submission_status="error")
            .order_by(ElectronicInvoice.id)
            .all()
        )

    def list_recent(self, status: str | None = None, limit: int = 50) -> list[ElectronicInvoice]:
        query = ElectronicInvoice.query
        if status:
            query = query.filter_by(ita_submission_status=status)
        return (
            query
            .order_by(ElectronicInvoice.invoice_date.desc(), ElectronicInvoice.id.desc())
            .limit(limit)
            .all()
        )

    def get_in_period(self, start: datetime, end: datetime) -> list[ElectronicInvoice]:
        return (
            ElectronicInvoice.query
            .filter(ElectronicInvoice.invoice_date >= start, ElectronicInvoice.invoice_date <= end)
            .order_by(ElectronicInvoice.invoice_date)
            .all()
        )

    def count_by(self, column_name: str) -> dict[str, int]:
        column = getattr(ElectronicInvoice, column_name)
        rows = db.session.query(column, func.count(ElectronicInvoice.id)).group_by(column).all()
        return {value: count for value, count in rows}

    def totals(self) -> tuple:
        """(sum of totalAmount, sum of vatAmount) across all invoices."""
        return db.session.query(
            func.coalesce(func.sum(ElectronicInvoice.total_amount), 0),
            func.coalesce(func.sum(ElectronicInvoice.vat_amount), 0),
        ).one()
