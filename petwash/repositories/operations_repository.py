"""Repositories for bills, assets, spare parts, stock movements and work orders."""

from petwash.domain.models import (
    MaintenanceWorkOrder,
    SparePart,
    StationAsset,
    StationBill,
    StationSparePart,
    StockTransaction,
)
from petwash.repositories.base import BaseRepository


class BillRepository(BaseRepository[StationBill]):
    def __init__(self):
        super().__init__(StationBill, default_order=[StationBill.due_date.desc(), StationBill.id.desc()])

    def get_recent_for_station(self, station_id: int, limit: int = 10) -> list[StationBill]:
        return (
            StationBill.query
            .filter_by(station_id=station_id)
            .order_by(StationBill.due_date.desc(), StationBill.id.desc())
            .limit(limit)
            .all()
        )


class AssetRepository(BaseRepository[StationAsset]):
    def __init__(self):
        super().__init__(StationAsset)


class SparePartRepository(BaseRepository[SparePart]):
    def __init__(self):
        super().__init__(SparePart, default_order=SparePart.part_number)

    def search(self, category: str | None = None, low_stock: bool = False) -> list[SparePart]:
        """Parts in ``category``; with ``low_stock`` only those at or below reorder point."""
        query = SparePart.query
        if category:
            query = query.filter(SparePart.category == category)
        if low_stock:
            query = query.filter(SparePart.quantity_in_stock <= SparePart.reorder_point)
        return query.order_by(SparePart.part_number).all()


class StationSparePartRepository(BaseRepository[StationSparePart]):
    def __init__(self):
        super().__init__(StationSparePart)

    def get_allocation(self, station_id: int, spare_part_id: int) -> StationSparePart | None:
        return StationSparePart.query.filter_by(
            station_id=station_id, spare_part_id=spare_part_id,
        ).first()

    def get_for_station(self, station_id: int) -> list[tuple[StationSparePart, SparePart]]:
        """Allocations at a station joined with their catalogue part."""
        return (
            StationSparePart.query
            .join(SparePart, StationSparePart.spare_part_id == SparePart.id)
            .filter(StationSparePart.station_id == station_id)
            .with_entities(StationSparePart, SparePart)
            .order_by(SparePart.part_number)
            .all()
        )


class StockTransactionRepository(BaseRepository[StockTransaction]):
    def __init__(self):
        super().__init__(
            StockTransaction,
            default_order=[StockTransaction.created_at.desc(), StockTransaction.id.desc()],
        )


class WorkOrderRepository(BaseRepository[MaintenanceWorkOrder]):
    def __init__(self):
        super().__init__(
            MaintenanceWorkOrder,
            default_order=[MaintenanceWorkOrder.requested_date.desc(), MaintenanceWorkOrder.id.desc()],
        )
