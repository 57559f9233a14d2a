"""Station operations: bills, assets, spare parts, inventory and work orders."""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from petwash.domain.amounts import checked_total, parts_cost, to_money
from petwash.domain.exceptions import BusinessRuleError, ConflictError, ResourceNotFoundError
from petwash.domain.lifecycle import WORK_ORDER_LIFECYCLE
from petwash.domain.models import MaintenanceWorkOrder, StationBill
from petwash.extensions import transaction
from petwash.repositories.monitoring_repository import AlertRepository
from petwash.repositories.network_repository import StationRepository
from petwash.repositories.operations_repository import (
    AssetRepository,
    BillRepository,
    SparePartRepository,
    StationSparePartRepository,
    StockTransactionRepository,
    WorkOrderRepository,
)
from petwash.services.crud_service import CrudService
from petwash.services.finance_service import CASH_ACCOUNT, LedgerService
from petwash.services.health_service import StationHealthService

logger = logging.getLogger(__name__)

# Statuses an operator may set directly; paid states only come from payments.
MANUAL_BILL_STATUSES = ("unpaid", "overdue", "disputed")
PAID_BILL_STATUSES = ("paid", "partially_paid")

BILL_EXPENSE_ACCOUNTS = {
    "electricity": ("6110", "Electricity"),
    "water": ("6120", "Water"),
    "gas": ("6130", "Gas"),
    "internet": ("6140", "Internet and telecom"),
    "rent": ("6200", "Rent"),
    "insurance": ("6300", "Insurance"),
    "maintenance": ("6400", "Repairs and maintenance"),
}
DEFAULT_EXPENSE_ACCOUNT = ("6900", "Other station expenses")


# ---------------------------------------------------------------------------
# Bills
# ---------------------------------------------------------------------------
class BillService(CrudService):
    """Station bills. ``totalAmount`` is always ``amount + vat``."""

    def __init__(self, ledger: LedgerService | None = None):
        self._bills = BillRepository()
        self._ledger = ledger or LedgerService()
        super().__init__(
            self._bills,
            "StationBill",
            references={"station_id": (StationRepository(), "Station")},
        )

    def _before_create(self, values: dict) -> dict:
        self._check_manual_status(values.get("status", "unpaid"))
        values["total_amount"] = checked_total(
            "totalAmount",
            {"amount": values["amount"], "vat": values.get("vat")},
            values.get("total_amount"),
        )
        return values

    def _before_update(self, instance: StationBill, values: dict) -> dict:
        if "status" in values and values["status"] != instance.status:
            if instance.status in PAID_BILL_STATUSES or to_money(instance.paid_amount) > 0:
                raise ConflictError(
                    f"Bill {instance.id} has recorded payments; its status follows those payments",
                    details={"status": instance.status, "paidAmount": format(to_money(instance.paid_amount), "f")},
                )
            self._check_manual_status(values["status"])
        if {"amount", "vat", "total_amount"} & values.keys():
            if instance.paid_amount:
                raise ConflictError("Amounts cannot change after a payment has been recorded")
            values["total_amount"] = checked_total(
                "totalAmount",
                {"amount": values.get("amount", instance.amount), "vat": values.get("vat", instance.vat)},
                values.get("total_amount"),
            )
        return values

    @staticmethod
    def _check_manual_status(status: str) -> None:
        if status not in MANUAL_BILL_STATUSES:
            raise ConflictError(
                f"Bill status '{status}' can only be set by recording a payment",
                details={"allowed": list(MANUAL_BILL_STATUSES)},
            )

    def pay(
        self,
        bill_id: int,
        payment_date: date,
        paid_amount: Decimal | None = None,
        payment_method: str | None = None,
        payment_reference: str | None = None,
    ) -> dict:
        """Record a (possibly partial) payment and post it to the ledger.

        Raises:
            ConflictError: The bill is already fully paid.
            BusinessRuleError: The payment exceeds the outstanding balance.
        """
        with transaction():
            bill = self.get_instance(bill_id, for_update=True)
            outstanding = to_money(bill.outstanding)
            if bill.status == "paid" or outstanding <= 0:
                raise ConflictError(f"Bill {bill_id} is already paid", details={"status": bill.status})

            amount = to_money(paid_amount) if paid_amount is not None else outstanding
            if amount > outstanding:
                raise BusinessRuleError(
                    "Payment exceeds the outstanding balance",
                    details={"outstanding": format(outstanding, "f"), "paidAmount": format(amount, "f")},
                )

            bill.paid_amount = to_money(bill.paid_amount) + amount
            bill.status = "paid" if amount == outstanding else "partially_paid"
            bill.paid_date = payment_date
            bill.payment_method = payment_method
            bill.payment_reference = payment_reference

            code, name = BILL_EXPENSE_ACCOUNTS.get(bill.bill_type, DEFAULT_EXPENSE_ACCOUNT)
            self._ledger.post(
                entry_date=payment_date,
                debit_account=(code, name, "expense"),
                credit_account=CASH_ACCOUNT,
                amount=amount,
                currency=bill.currency,
                description=f"{bill.vendor} {bill.bill_type} bill for station {bill.station_id}",
                source_type="station_bill",
                source_id=bill.id,
            )
        logger.info("Bill id=%s paid %s, status=%s", bill_id, amount, bill.status)
        return bill.to_dict()


# ---------------------------------------------------------------------------
# Assets and spare parts
# ---------------------------------------------------------------------------
class AssetService(CrudService):
    def __init__(self):
        super().__init__(
            AssetRepository(),
            "StationAsset",
            references={"station_id": (StationRepository(), "Station")},
        )


class SparePartService(CrudService):
    def __init__(self):
        self._parts = SparePartRepository()
        super().__init__(self._parts, "SparePart")

    def search(self, category: str | None = None, low_stock: bool = False) -> list[dict]:
        return [part.to_dict() for part in self._parts.search(category, low_stock)]


class StationSparePartService(CrudService):
    """Per-station spare part allocations."""

    def __init__(self):
        self._allocations = StationSparePartRepository()
        self._stations = StationRepository()
        super().__init__(
            self._allocations,
            "StationSparePart",
            references={
                "station_id": (self._stations, "Station"),
                "spare_part_id": (SparePartRepository(), "SparePart"),
            },
        )

    def list_for_station(self, station_id: int) -> list[dict]:
        if self._stations.get_by_id(station_id) is None:
            raise ResourceNotFoundError("Station", station_id)
        rows = []
        for allocation, part in self._allocations.get_for_station(station_id):
            data = allocation.to_dict()
            data.update({
                "partNumber": part.part_number,
                "partName": part.part_name,
                "category": part.category,
                "unitCost": format(to_money(part.unit_cost), "f"),
                "lowStock": allocation.low_stock,
            })
            rows.append(data)
        return rows

    def _before_create(self, values: dict) -> dict:
        if self._allocations.get_allocation(values["station_id"], values["spare_part_id"]):
            raise ConflictError(
                f"Spare part {values['spare_part_id']} is already allocated to station {values['station_id']}",
            )
        return values


# ---------------------------------------------------------------------------
# Inventory adjustments
# ---------------------------------------------------------------------------
class InventoryService:
    """Stock adjustments against the warehouse or a station allocation."""

    def __init__(self):
        self._parts = SparePartRepository()
        self._allocations = StationSparePartRepository()
        self._transactions = StockTransactionRepository()
        self._stations = StationRepository()
        self._alerts = AlertRepository()
        self._health = StationHealthService()

    def list_transactions(self, **filters) -> list[dict]:
        return [tx.to_dict() for tx in self._transactions.filter(**filters)]

    def adjust(
        self,
        spare_part_id: int,
        delta: int,
        reason: str,
        station_id: int | None = None,
        transaction_type: str = "adjustment",
        performed_by: str | None = None,
        work_order_id: int | None = None,
    ) -> dict:
        """Apply ``delta`` to on-hand stock, never letting it go negative.

        The stock change, its ``StockTransaction`` record and any low-supply
        alerts it clears are committed together.
        """
        now = datetime.now(timezone.utc)
        resolved_alerts: list[int] = []

        with transaction():
            part = self._parts.get_for_update(spare_part_id)
            if part is None:
                raise ResourceNotFoundError("SparePart", spare_part_id)

            allocation = None
            if station_id is not None:
                station = self._stations.get_by_id(station_id)
                if station is None:
                    raise ResourceNotFoundError("Station", station_id)
                allocation = self._allocations.get_allocation(station_id, spare_part_id)
                on_hand = allocation.quantity if allocation else 0
            else:
                on_hand = part.quantity_in_stock

            would_be = on_hand + delta
            if would_be < 0:
                raise BusinessRuleError(
                    "Adjustment would make stock negative",
                    details={"currentOnHand": on_hand, "requestedDelta": delta, "wouldBe": would_be},
                )

            if station_id is None:
                part.quantity_in_stock = would_be
            else:
                if allocation is None:
                    allocation = self._allocations.create(
                        station_id=station_id, spare_part_id=spare_part_id, quantity=0,
                    )
                allocation.quantity = would_be
                if delta > 0:
                    allocation.last_restocked_at = now
                    allocation.last_restocked_by = performed_by

            unit_cost = to_money(part.unit_cost)
            stock_tx = self._transactions.create(
                transaction_number=self._transactions.next_number("transaction_number", f"STX-{now.year}"),
                spare_part_id=spare_part_id,
                transaction_type=transaction_type,
                quantity=delta,
                from_station_id=station_id if station_id and delta < 0 else None,
                to_station_id=station_id if station_id and delta > 0 else None,
                unit_cost=unit_cost,
                total_cost=unit_cost * abs(delta),
                work_order_id=work_order_id,
                performed_by=performed_by,
                reason=reason,
            )

            if allocation is not None and not allocation.low_stock:
                for alert in self._alerts.get_open_for_station(station_id, alert_type="low_supplies"):
                    alert.status = "resolved"
                    alert.resolved_at = now
                    alert.resolved_by = performed_by or "inventory"
                    alert.resolution_notes = f"Restocked via {stock_tx.transaction_number}"
                    resolved_alerts.append(alert.id)
                if resolved_alerts:
                    self._health.refresh(station)

        logger.info(
            "Stock adjusted part id=%s station id=%s delta=%s -> %s (%s)",
            spare_part_id, station_id, delta, would_be, stock_tx.transaction_number,
        )
        return {
            "sparePart": part.to_dict(),
            "allocation": allocation.to_dict() if allocation else None,
            "transaction": stock_tx.to_dict(),
            "resolvedAlertIds": resolved_alerts,
        }


# ---------------------------------------------------------------------------
# Work orders
# ---------------------------------------------------------------------------
class WorkOrderService(CrudService):
    """Work orders follow ``pending -> scheduled -> in_progress -> completed``.

    ``totalCost`` is ``laborCost + partsCost``; ``partsCost`` defaults to
    the priced ``partsUsed`` lines.
    """

    def __init__(self):
        self._orders = WorkOrderRepository()
        self._stations = StationRepository()
        self._assets = AssetRepository()
        super().__init__(
            self._orders,
            "WorkOrder",
            references={
                "station_id": (self._stations, "Station"),
                "asset_id": (self._assets, "StationAsset"),
            },
        )

    def _before_create(self, values: dict) -> dict:
        if values.get("status", "pending") not in ("pending", "scheduled"):
            raise ConflictError("A work order must start as 'pending' or 'scheduled'")
        asset_id = values.get("asset_id")
        if asset_id and self._assets.get_by_id(asset_id).station_id != values["station_id"]:
            raise BusinessRuleError(f"Asset {asset_id} is not installed at station {values['station_id']}")
        if not values.get("work_order_number"):
            year = datetime.now(timezone.utc).year
            values["work_order_number"] = self._orders.next_number("work_order_number", f"WO-{year}")
        values.update(self._costs(
            values.get("labor_cost"), values.get("parts_used"), values.get("parts_cost"), values.get("total_cost"),
        ))
        return values

    def _before_update(self, instance: MaintenanceWorkOrder, values: dict) -> dict:
        if "status" in values and values["status"] != instance.status:
            values.update(self._transition(instance, values["status"]))
        cost_fields = {"labor_cost", "parts_used", "parts_cost", "total_cost"}
        if cost_fields & values.keys():
            parts_used = values.get("parts_used", instance.parts_used)
            supplied_parts_cost = values.get("parts_cost")
            if supplied_parts_cost is None and "parts_used" not in values:
                supplied_parts_cost = instance.parts_cost
            values.update(self._costs(
                values.get("labor_cost", instance.labor_cost),
                parts_used,
                supplied_parts_cost,
                values.get("total_cost"),
            ))
        return values

    def add(self, **values) -> MaintenanceWorkOrder:
        """Insert a work order within the caller's transaction."""
        self._check_references(values)
        return self._orders.create(**self._before_create(values))

    def change_status(
        self,
        work_order_id: int,
        status: str,
        technician_notes: str | None = None,
        actual_duration_minutes: int | None = None,
        scheduled_date: datetime | None = None,
    ) -> dict:
        values = {"status": status}
        if technician_notes is not None:
            values["technician_notes"] = technician_notes
        if actual_duration_minutes is not None:
            values["actual_duration_minutes"] = actual_duration_minutes
        if scheduled_date is not None:
            values["scheduled_date"] = scheduled_date
        return self.update(work_order_id, **values)

    @staticmethod
    def _transition(order: MaintenanceWorkOrder, status: str) -> dict:
        WORK_ORDER_LIFECYCLE.check(order.status, status)
        changes = {}
        if status == "completed":
            changes["completed_date"] = datetime.now(timezone.utc)
        logger.info("Work order %s: %s -> %s", order.work_order_number, order.status, status)
        return changes

    @staticmethod
    def _costs(labor_cost, parts_used, supplied_parts_cost, supplied_total) -> dict:
        labor = to_money(labor_cost)
        parts = to_money(supplied_parts_cost) if supplied_parts_cost is not None else parts_cost(parts_used)
        total = checked_total("totalCost", {"laborCost": labor, "partsCost": parts}, supplied_total)
        return {"labor_cost": labor, "parts_cost": parts, "total_cost": total}
