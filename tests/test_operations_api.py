"""API tests for bills, spare parts, inventory adjustments and work orders."""

import json
from datetime import datetime, timezone
from decimal import Decimal

from petwash.domain.models import GeneralLedgerEntry, SparePart, StationBill, StockTransaction

BASE = "/api/enterprise"


def _post_json(client, url, data):
    """Helper to POST JSON and return the status code and parsed body."""
    resp = client.post(url, data=json.dumps(data), content_type="application/json")
    return resp.status_code, resp.get_json()


def _put_json(client, url, data):
    resp = client.put(url, data=json.dumps(data), content_type="application/json")
    return resp.status_code, resp.get_json()


def _create_bill(client, station_id, **overrides):
    payload = {
        "billType": "electricity",
        "vendor": "Israel Electric Corp",
        "dueDate": "2026-03-31",
        "amount": "1250.00",
        "vat": "212.50",
    }
    payload.update(overrides)
    return _post_json(client, f"{BASE}/stations/{station_id}/bills", payload)


def _create_part(client, **overrides):
    payload = {
        "partNumber": "K9-PUMP-01",
        "partName": "Shampoo dosing pump",
        "category": "pumps",
        "unitCost": "85.00",
        "quantityInStock": 20,
    }
    payload.update(overrides)
    status, body = _post_json(client, f"{BASE}/spare-parts", payload)
    assert status == 201, body
    return body


class TestBills:
    def test_total_is_computed_and_payment_marks_paid(self, client, network):
        station_id = network["station"]["id"]
        status, bill = _create_bill(client, station_id)

        assert status == 201
        assert bill["totalAmount"] == "1462.50"
        assert bill["status"] == "unpaid"

        status, paid = _post_json(client, f"{BASE}/bills/{bill['id']}/pay", {"paymentDate": "2026-03-10"})
        assert status == 200

        fetched = client.get(f"{BASE}/bills/{bill['id']}").get_json()
        assert fetched["status"] == "paid"
        assert fetched["paidAmount"] == "1462.50"
        assert fetched["paidDate"] == "2026-03-10"

    def test_payment_posts_balanced_ledger_entries(self, client, network):
        _, bill = _create_bill(client, network["station"]["id"])
        _post_json(client, f"{BASE}/bills/{bill['id']}/pay", {"paymentDate": "2026-03-10"})

        entries = GeneralLedgerEntry.query.filter_by(source_type="station_bill", source_id=bill["id"]).all()
        assert len(entries) == 2
        assert sum(entry.debit for entry in entries) == sum(entry.credit for entry in entries) == Decimal("1462.50")
        assert {entry.account_code for entry in entries} == {"6110", "1000"}

    def test_paying_twice_conflicts(self, client, network):
        _, bill = _create_bill(client, network["station"]["id"])
        _post_json(client, f"{BASE}/bills/{bill['id']}/pay", {"paymentDate": "2026-03-10"})

        status, body = _post_json(client, f"{BASE}/bills/{bill['id']}/pay", {"paymentDate": "2026-03-11"})

        assert status == 409
        assert GeneralLedgerEntry.query.count() == 2

    def test_partial_payment(self, client, network):
        _, bill = _create_bill(client, network["station"]["id"])

        status, body = _post_json(client, f"{BASE}/bills/{bill['id']}/pay", {
            "paymentDate": "2026-03-10", "paidAmount": "462.50",
        })
        assert status == 200
        assert body["status"] == "partially_paid"
        assert body["paidAmount"] == "462.50"

        status, body = _post_json(client, f"{BASE}/bills/{bill['id']}/pay", {"paymentDate": "2026-03-20"})
        assert body["status"] == "paid"
        assert body["paidAmount"] == "1462.50"

    def test_overpayment_is_rejected(self, client, network):
        _, bill = _create_bill(client, network["station"]["id"])

        status, body = _post_json(client, f"{BASE}/bills/{bill['id']}/pay", {
            "paymentDate": "2026-03-10", "paidAmount": "2000",
        })

        assert status == 422
        assert body["details"]["outstanding"] == "1462.50"
        assert client.get(f"{BASE}/bills/{bill['id']}").get_json()["status"] == "unpaid"

    def test_total_mismatch_is_rejected(self, client, network):
        status, body = _create_bill(client, network["station"]["id"], totalAmount="1500.00")

        assert status == 422
        assert body["details"]["expected"] == "1462.50"
        assert StationBill.query.count() == 0

    def test_missing_required_field(self, client, network):
        status, body = _post_json(client, f"{BASE}/stations/{network['station']['id']}/bills", {
            "billType": "water", "dueDate": "2026-03-31", "amount": "90",
        })

        assert status == 400
        assert body["details"]
        assert StationBill.query.count() == 0

    def test_status_cannot_be_set_to_paid_by_hand(self, client, network):
        _, bill = _create_bill(client, network["station"]["id"])

        status, _ = _put_json(client, f"{BASE}/bills/{bill['id']}", {"status": "paid"})

        assert status == 409

    def test_paid_bill_keeps_its_status(self, client, network):
        _, bill = _create_bill(client, network["station"]["id"])
        _post_json(client, f"{BASE}/bills/{bill['id']}/pay", {"paymentDate": "2026-03-10"})

        status, body = _put_json(client, f"{BASE}/bills/{bill['id']}", {"status": "unpaid"})

        assert status == 409
        assert body["details"]["status"] == "paid"
        assert client.get(f"{BASE}/bills/{bill['id']}").get_json()["status"] == "paid"
        stats = client.get(f"{BASE}/analytics/global").get_json()["billStats"]
        assert stats["totalUnpaid"] == 0

    def test_partially_paid_bill_cannot_be_disputed_by_hand(self, client, network):
        _, bill = _create_bill(client, network["station"]["id"])
        _post_json(client, f"{BASE}/bills/{bill['id']}/pay", {"paymentDate": "2026-03-10", "paidAmount": "100"})

        status, body = _put_json(client, f"{BASE}/bills/{bill['id']}", {"status": "disputed"})

        assert status == 409
        assert body["details"]["paidAmount"] == "100.00"

    def test_update_recomputes_total(self, client, network):
        _, bill = _create_bill(client, network["station"]["id"])

        status, body = _put_json(client, f"{BASE}/bills/{bill['id']}", {"vat": "225.00"})

        assert status == 200
        assert body["totalAmount"] == "1475.00"

    def test_list_filters(self, client, network):
        station_id = network["station"]["id"]
        _, first = _create_bill(client, station_id)
        _create_bill(client, station_id, billType="water", amount="80", vat="0")
        _post_json(client, f"{BASE}/bills/{first['id']}/pay", {"paymentDate": "2026-03-10"})

        unpaid = client.get(f"{BASE}/stations/{station_id}/bills?status=unpaid").get_json()
        everything = client.get(f"{BASE}/bills?stationId={station_id}").get_json()

        assert [row["billType"] for row in unpaid] == ["water"]
        assert len(everything) == 2


class TestSpareParts:
    def test_low_stock_flags_and_filter(self, client):
        _create_part(client, partNumber="K9-A", quantityInStock=8)
        _create_part(client, partNumber="K9-B", quantityInStock=30)

        rows = client.get(f"{BASE}/spare-parts?lowStock=true").get_json()

        assert [row["partNumber"] for row in rows] == ["K9-A"]
        assert rows[0]["lowStock"] is True
        assert rows[0]["belowMinimum"] is False

    def test_stock_levels_must_be_ordered(self, client):
        status, body = _post_json(client, f"{BASE}/spare-parts", {
            "partNumber": "K9-C", "partName": "Hose", "category": "hoses", "unitCost": "10",
            "minimumStockLevel": 20, "reorderPoint": 10,
        })
        assert status == 400
        assert SparePart.query.count() == 0

    def test_station_allocation_listing(self, client, network):
        station_id = network["station"]["id"]
        part = _create_part(client)

        status, _ = _post_json(client, f"{BASE}/stations/{station_id}/spare-parts", {
            "sparePartId": part["id"], "quantity": 1, "minimumQuantity": 2,
        })
        assert status == 201

        rows = client.get(f"{BASE}/stations/{station_id}/spare-parts").get_json()
        assert rows[0]["partNumber"] == "K9-PUMP-01"
        assert rows[0]["unitCost"] == "85.00"
        assert rows[0]["lowStock"] is True

    def test_duplicate_allocation_conflicts(self, client, network):
        station_id = network["station"]["id"]
        part = _create_part(client)
        _post_json(client, f"{BASE}/stations/{station_id}/spare-parts", {"sparePartId": part["id"]})

        status, _ = _post_json(client, f"{BASE}/stations/{station_id}/spare-parts", {"sparePartId": part["id"]})

        assert status == 409


class TestInventoryAdjust:
    def test_negative_result_is_rejected_without_changes(self, client):
        part = _create_part(client, quantityInStock=3)

        status, body = _post_json(client, f"{BASE}/inventory/adjust", {
            "sparePartId": part["id"], "delta": -5, "reason": "used in repair",
        })

        assert status == 422
        assert body["details"] == {"currentOnHand": 3, "requestedDelta": -5, "wouldBe": -2}
        assert client.get(f"{BASE}/spare-parts/{part['id']}").get_json()["quantityInStock"] == 3
        assert StockTransaction.query.count() == 0

    def test_central_adjustment_records_transaction(self, client):
        part = _create_part(client, quantityInStock=3)

        status, body = _post_json(client, f"{BASE}/inventory/adjust", {
            "sparePartId": part["id"], "delta": 12, "reason": "supplier delivery", "transactionType": "purchase",
        })

        assert status == 200
        assert body["sparePart"]["quantityInStock"] == 15
        assert body["transaction"]["transactionNumber"].startswith("STX-")
        assert body["transaction"]["totalCost"] == "1020.00"

        rows = client.get(f"{BASE}/stock-transactions?transactionType=purchase").get_json()
        assert [row["id"] for row in rows] == [body["transaction"]["id"]]

    def test_restocking_station_resolves_low_supply_alerts(self, client, network):
        station_id = network["station"]["id"]
        part = _create_part(client)
        _post_json(client, f"{BASE}/stations/{station_id}/spare-parts", {
            "sparePartId": part["id"], "quantity": 2, "minimumQuantity": 5,
        })
        _, alert = _post_json(client, f"{BASE}/alerts", {
            "stationId": station_id, "alertType": "low_supplies", "severity": "warning",
            "title": "Low supplies", "message": "Soap below 10%",
        })
        assert client.get(f"{BASE}/stations/{station_id}").get_json()["healthStatus"] == "warning"

        status, body = _post_json(client, f"{BASE}/inventory/adjust", {
            "sparePartId": part["id"], "stationId": station_id, "delta": 4,
            "reason": "restock", "performedBy": "tech-7",
        })

        assert status == 200
        assert body["allocation"]["quantity"] == 6
        assert body["resolvedAlertIds"] == [alert["id"]]
        assert client.get(f"{BASE}/alerts/{alert['id']}").get_json()["status"] == "resolved"
        assert client.get(f"{BASE}/stations/{station_id}").get_json()["healthStatus"] == "healthy"


class TestWorkOrders:
    def _create(self, client, station_id, **overrides):
        payload = {
            "stationId": station_id,
            "workType": "corrective",
            "title": "Replace dosing pump",
            "laborCost": "200",
            "partsUsed": [{"partId": 1, "quantity": 2, "cost": "12.50"}],
        }
        payload.update(overrides)
        return _post_json(client, f"{BASE}/work-orders", payload)

    def test_costs_and_number_are_generated(self, client, network):
        status, body = self._create(client, network["station"]["id"])

        assert status == 201
        assert body["workOrderNumber"].startswith("WO-")
        assert body["partsCost"] == "25.00"
        assert body["totalCost"] == "225.00"
        assert body["status"] == "pending"

    def test_generated_number_skips_hand_entered_ones(self, client, network):
        station_id = network["station"]["id"]
        year = datetime.now(timezone.utc).year
        self._create(client, station_id, workOrderNumber=f"WO-{year}-000002")
        self._create(client, station_id, workOrderNumber=f"WO-{year}-URGENT")

        status, body = self._create(client, station_id)

        assert status == 201
        assert body["workOrderNumber"] == f"WO-{year}-000003"

    def test_state_machine(self, client, network):
        _, order = self._create(client, network["station"]["id"])
        url = f"{BASE}/work-orders/{order['id']}/status"

        status, body = _post_json(client, url, {"status": "completed"})
        assert status == 409
        assert body["details"]["allowed"] == ["cancelled", "in_progress", "scheduled"]

        status, body = _post_json(client, url, {"status": "in_progress"})
        assert status == 200

        status, body = _post_json(client, url, {"status": "completed", "actualDurationMinutes": 90})
        assert status == 200
        assert body["completedDate"] is not None
        assert body["actualDurationMinutes"] == 90

        status, _ = _post_json(client, url, {"status": "in_progress"})
        assert status == 409

    def test_put_status_change_uses_state_machine(self, client, network):
        _, order = self._create(client, network["station"]["id"])

        status, _ = _put_json(client, f"{BASE}/work-orders/{order['id']}", {"status": "completed"})

        assert status == 409

    def test_new_order_cannot_start_completed(self, client, network):
        status, _ = self._create(client, network["station"]["id"], status="completed")
        assert status == 409

    def test_list_filters(self, client, network):
        station_id = network["station"]["id"]
        self._create(client, station_id, priority="high")
        self._create(client, station_id, priority="low", title="Inspect hoses")

        rows = client.get(f"{BASE}/work-orders?stationId={station_id}&priority=high").get_json()

        assert [row["title"] for row in rows] == ["Replace dosing pump"]
