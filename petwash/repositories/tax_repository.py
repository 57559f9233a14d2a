"""Repositories for tax returns, tax payments and the tax audit trail."""

from datetime import date, datetime

from petwash.domain.models import TaxAuditLog, TaxPayment, TaxReturn
from petwash.repositories.base import BaseRepository


class TaxReturnRepository(BaseRepository[TaxReturn]):
    def __init__(self):
        super().__init__(
            TaxReturn,
            default_order=[TaxReturn.fiscal_year.desc(), TaxReturn.fiscal_period.desc(), TaxReturn.id.desc()],
        )


class TaxPaymentRepository(BaseRepository[TaxPayment]):
    def __init__(self):
        super().__init__(TaxPayment, default_order=[TaxPayment.payment_date.desc(), TaxPayment.id.desc()])

    def search(
        self,
        tax_return_id: int | None = None,
        payment_type: str | None = None,
        status: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[TaxPayment]:
        query = TaxPayment.query
        if tax_return_id is not None:
            query = query.filter_by(tax_return_id=tax_return_id)
        if payment_type:
            query = query.filter_by(payment_type=payment_type)
        if status:
            query = query.filter_by(status=status)
        if start_date:
            query = query.filter(TaxPayment.payment_date >= start_date)
        if end_date:
            query = query.filter(TaxPayment.payment_date <= end_date)
        return query.order_by(TaxPayment.payment_date.desc(), TaxPayment.id.desc()).all()


class TaxAuditLogRepository(BaseRepository[TaxAuditLog]):
    def __init__(self):
        super().__init__(TaxAuditLog, default_order=[TaxAuditLog.id.desc()])

    def latest(self) -> TaxAuditLog | None:
        """The most recent row, whose hash the next row chains onto."""
        return TaxAuditLog.query.order_by(TaxAuditLog.id.desc()).first()

    def in_order(self) -> list[TaxAuditLog]:
        return TaxAuditLog.query.order_by(TaxAuditLog.id).all()

    def search(
        self,
        entity_type: str | None = None,
        entity_id: int | None = None,
        user_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 100,
    ) -> list[TaxAuditLog]:
        query = TaxAuditLog.query
        if entity_type:
            query = query.filter_by(entity_type=entity_type)
        if entity_id is not None:
            query = query.filter_by(entity_id=entity_id)
        if user_id:
            query = query.filter_by(user_id=user_id)
        if start:
            query = query.filter(TaxAuditLog.created_at >= start)
        if end:
            query = query.filter(TaxAuditLog.created_at <= end)
        return query.order_by(TaxAuditLog.id.desc()).limit(limit).all()
