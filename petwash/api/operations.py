"""Station operations API — bills, assets, spare parts, inventory and work orders."""

from flask import request
from flask_restx import Namespace, Resource

from petwash.api.common import bool_arg, create_record, parse_body, schema_model, update_record
from petwash.auth import require_admin
from petwash.schemas.base import to_columns
from petwash.schemas.operations_schema import (
    AssetCreateSchema,
    BillCreateSchema,
    BillPaymentSchema,
    InventoryAdjustSchema,
    SparePartCreateSchema,
    StationSparePartCreateSchema,
    WorkOrderCreateSchema,
    WorkOrderStatusSchema,
)
from petwash.schemas.response import success_response
from petwash.services.operations_service import (
    AssetService,
    BillService,
    InventoryService,
    SparePartService,
    StationSparePartService,
    WorkOrderService,
)

ns = Namespace("operations", description="Bills, assets, spare parts and work orders", decorators=[require_admin])

bill_model = schema_model(ns, BillCreateSchema)
bill_payment_model = schema_model(ns, BillPaymentSchema)
asset_model = schema_model(ns, AssetCreateSchema)
spare_part_model = schema_model(ns, SparePartCreateSchema)
allocation_model = schema_model(ns, StationSparePartCreateSchema)
adjust_model = schema_model(ns, InventoryAdjustSchema)
work_order_model = schema_model(ns, WorkOrderCreateSchema)
work_order_status_model = schema_model(ns, WorkOrderStatusSchema)

# ---------------------------------------------------------------------------
# Service instances
# ---------------------------------------------------------------------------
_bill_svc = BillService()
_asset_svc = AssetService()
_spare_part_svc = SparePartService()
_allocation_svc = StationSparePartService()
_inventory_svc = InventoryService()
_work_order_svc = WorkOrderService()


# ---------------------------------------------------------------------------
# Bills
# ---------------------------------------------------------------------------
@ns.route("/stations/<int:station_id>/bills")
@ns.param("station_id", "The station ID")
class StationBillList(Resource):
    @ns.doc("list_station_bills")
    def get(self, station_id: int):
        """Bills for one station (?status=)."""
        return success_response(_bill_svc.list(station_id=station_id, status=request.args.get("status")))

    @ns.doc("create_station_bill")
    @ns.expect(bill_model)
    def post(self, station_id: int):
        """Record a bill; totalAmount is computed as amount + vat."""
        return create_record(_bill_svc, BillCreateSchema, station_id=station_id)


@ns.route("/bills")
class BillList(Resource):
    @ns.doc("list_bills")
    def get(self):
        """All bills (?status=, ?stationId=)."""
        return success_response(_bill_svc.list(
            status=request.args.get("status"),
            station_id=request.args.get("stationId", type=int),
        ))


@ns.route("/bills/<int:bill_id>")
@ns.param("bill_id", "The bill ID")
class BillDetail(Resource):
    @ns.doc("get_bill")
    def get(self, bill_id: int):
        return success_response(_bill_svc.get(bill_id))

    @ns.doc("update_bill")
    @ns.expect(bill_model)
    def put(self, bill_id: int):
        return update_record(_bill_svc, BillCreateSchema, bill_id)


@ns.route("/bills/<int:bill_id>/pay")
@ns.param("bill_id", "The bill ID")
class BillPayment(Resource):
    @ns.doc("pay_bill")
    @ns.expect(bill_payment_model)
    def post(self, bill_id: int):
        """Pay a bill in full (or partially with paidAmount) and post it to the ledger."""
        data = parse_body(BillPaymentSchema)
        return success_response(_bill_svc.pay(bill_id, **to_columns(data)))


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------
@ns.route("/stations/<int:station_id>/assets")
@ns.param("station_id", "The station ID")
class StationAssetList(Resource):
    @ns.doc("list_station_assets")
    def get(self, station_id: int):
        return success_response(_asset_svc.list(station_id=station_id, status=request.args.get("status")))

    @ns.doc("create_station_asset")
    @ns.expect(asset_model)
    def post(self, station_id: int):
        return create_record(_asset_svc, AssetCreateSchema, station_id=station_id)


@ns.route("/assets/<int:asset_id>")
@ns.param("asset_id", "The asset ID")
class AssetDetail(Resource):
    @ns.doc("get_asset")
    def get(self, asset_id: int):
        return success_response(_asset_svc.get(asset_id))

    @ns.doc("update_asset")
    @ns.expect(asset_model)
    def put(self, asset_id: int):
        return update_record(_asset_svc, AssetCreateSchema, asset_id)


# ---------------------------------------------------------------------------
# Spare parts and inventory
# ---------------------------------------------------------------------------
@ns.route("/spare-parts")
class SparePartList(Resource):
    @ns.doc("list_spare_parts")
    def get(self):
        """Spare part catalogue (?category=, ?lowStock=true)."""
        return success_response(_spare_part_svc.search(
            category=request.args.get("category"),
            low_stock=bool(bool_arg("lowStock")),
        ))

    @ns.doc("create_spare_part")
    @ns.expect(spare_part_model)
    def post(self):
        return create_record(_spare_part_svc, SparePartCreateSchema)


@ns.route("/spare-parts/<int:part_id>")
@ns.param("part_id", "The spare part ID")
class SparePartDetail(Resource):
    @ns.doc("get_spare_part")
    def get(self, part_id: int):
        return success_response(_spare_part_svc.get(part_id))

    @ns.doc("update_spare_part")
    @ns.expect(spare_part_model)
    def put(self, part_id: int):
        return update_record(_spare_part_svc, SparePartCreateSchema, part_id)


@ns.route("/stations/<int:station_id>/spare-parts")
@ns.param("station_id", "The station ID")
class StationSparePartList(Resource):
    @ns.doc("list_station_spare_parts")
    def get(self, station_id: int):
        """Parts allocated to a station, with catalogue details and a lowStock flag."""
        return success_response(_allocation_svc.list_for_station(station_id))

    @ns.doc("allocate_spare_part")
    @ns.expect(allocation_model)
    def post(self, station_id: int):
        return create_record(_allocation_svc, StationSparePartCreateSchema, station_id=station_id)


@ns.route("/inventory/adjust")
class InventoryAdjust(Resource):
    @ns.doc("adjust_inventory")
    @ns.expect(adjust_model)
    def post(self):
        """Adjust central stock, or a station allocation when stationId is given."""
        data = parse_body(InventoryAdjustSchema)
        return success_response(_inventory_svc.adjust(**to_columns(data)))


@ns.route("/stock-transactions")
class StockTransactionList(Resource):
    @ns.doc("list_stock_transactions")
    def get(self):
        """Stock movements (?sparePartId=, ?transactionType=)."""
        return success_response(_inventory_svc.list_transactions(
            spare_part_id=request.args.get("sparePartId", type=int),
            transaction_type=request.args.get("transactionType"),
        ))


# ---------------------------------------------------------------------------
# Work orders
# ---------------------------------------------------------------------------
@ns.route("/work-orders")
class WorkOrderList(Resource):
    @ns.doc("list_work_orders")
    def get(self):
        """Work orders, newest requested first (?stationId=, ?status=, ?priority=, ?technicianId=)."""
        return success_response(_work_order_svc.list(
            station_id=request.args.get("stationId", type=int),
            status=request.args.get("status"),
            priority=request.args.get("priority"),
            assigned_to_technician_id=request.args.get("technicianId"),
        ))

    @ns.doc("create_work_order")
    @ns.expect(work_order_model)
    def post(self):
        return create_record(_work_order_svc, WorkOrderCreateSchema)


@ns.route("/work-orders/<int:work_order_id>")
@ns.param("work_order_id", "The work order ID")
class WorkOrderDetail(Resource):
    @ns.doc("get_work_order")
    def get(self, work_order_id: int):
        return success_response(_work_order_svc.get(work_order_id))

    @ns.doc("update_work_order")
    @ns.expect(work_order_model)
    def put(self, work_order_id: int):
        return update_record(_work_order_svc, WorkOrderCreateSchema, work_order_id)


@ns.route("/work-orders/<int:work_order_id>/status")
@ns.param("work_order_id", "The work order ID")
class WorkOrderStatus(Resource):
    @ns.doc("change_work_order_status")
    @ns.expect(work_order_status_model)
    def post(self, work_order_id: int):
        """Move a work order through pending -> scheduled -> in_progress -> completed."""
        data = parse_body(WorkOrderStatusSchema)
        return success_response(_work_order_svc.change_status(work_order_id, **to_columns(data)))
