"""API tests for the dashboard aggregates."""

import json

BASE = "/api/enterprise"


def _post_json(client, url, data):
    resp = client.post(url, data=json.dumps(data), content_type="application/json")
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def _bill(client, station_id, due_date, amount):
    return _post_json(client, f"{BASE}/stations/{station_id}/bills", {
        "billType": "water", "vendor": "Mei Avivim", "dueDate": due_date, "amount": amount,
    })


def _alert(client, station_id, severity):
    return _post_json(client, f"{BASE}/alerts", {
        "stationId": station_id, "alertType": "sensor", "severity": severity,
        "title": f"{severity} alert", "message": "Sensor fault",
    })


class TestGlobalAnalytics:
    def test_empty_network(self, client):
        body = client.get(f"{BASE}/analytics/global").get_json()

        assert body["stationStats"] == {
            "totalStations": 0, "activeStations": 0, "offlineStations": 0, "maintenanceStations": 0,
        }
        assert body["billStats"] == {"totalUnpaid": 0, "totalOverdue": 0, "totalAmount": "0.00"}
        assert body["timestamp"]

    def test_counts_match_tables(self, client, network):
        station_id = network["station"]["id"]
        _bill(client, station_id, "2020-01-31", "100.00")
        _bill(client, station_id, "2099-01-31", "50.50")
        paid = _bill(client, station_id, "2020-01-31", "999.00")
        client.post(
            f"{BASE}/bills/{paid['id']}/pay",
            data=json.dumps({"paymentDate": "2020-01-15"}),
            content_type="application/json",
        )
        _alert(client, station_id, "critical")
        _alert(client, station_id, "warning")
        _alert(client, station_id, "info")
        _post_json(client, f"{BASE}/work-orders", {
            "stationId": station_id, "workType": "inspection", "title": "Monthly inspection",
        })

        body = client.get(f"{BASE}/analytics/global").get_json()

        assert body["stationStats"]["totalStations"] == 1
        assert body["stationStats"]["activeStations"] == 1
        assert body["franchiseeStats"] == {"totalFranchisees": 1, "activeFranchisees": 1}
        assert body["billStats"] == {"totalUnpaid": 2, "totalOverdue": 1, "totalAmount": "150.50"}
        assert body["alertStats"] == {"totalAlerts": 3, "criticalAlerts": 1, "warningAlerts": 1}
        assert body["workOrderStats"] == {"totalPending": 1, "totalInProgress": 0, "totalCompleted": 0}


class TestFranchiseeAnalytics:
    def test_unknown_franchisee(self, client):
        resp = client.get(f"{BASE}/analytics/franchisee/404")

        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Franchisee with id 404 not found"}

    def test_franchisee_without_stations(self, client, network):
        franchisee = _post_json(client, f"{BASE}/franchisees", {
            "companyName": "New Paws",
            "contactFirstName": "Avi",
            "contactLastName": "Mizrahi",
            "contactEmail": "avi@newpaws.example",
            "countryId": network["country"]["id"],
            "agreementType": "area_developer",
        })

        body = client.get(f"{BASE}/analytics/franchisee/{franchisee['id']}").get_json()

        assert body["stations"] == []
        assert body["totalRevenue"] == "0.00"
        assert body["totalBills"] == 0
        assert body["openAlerts"] == 0

    def test_franchisee_totals(self, client, network):
        station_id = network["station"]["id"]
        _bill(client, station_id, "2099-01-31", "80.00")
        _alert(client, station_id, "critical")
        for day, revenue in (("2026-03-01", "1200.00"), ("2026-03-02", "800.50")):
            _post_json(client, f"{BASE}/stations/{station_id}/metrics", {"date": day, "totalRevenue": revenue})

        body = client.get(f"{BASE}/analytics/franchisee/{network['franchisee']['id']}").get_json()

        assert [station["stationCode"] for station in body["stations"]] == ["PW-TLV-001"]
        assert body["totalRevenue"] == "2000.50"
        assert body["totalBills"] == 1
        assert body["unpaidBills"] == 1
        assert body["criticalAlerts"] == 1


class TestStationPerformance:
    def test_window(self, client, network):
        station_id = network["station"]["id"]
        for day, washes in (("2026-03-01", 30), ("2026-03-02", 45), ("2026-03-03", 50)):
            _post_json(client, f"{BASE}/stations/{station_id}/metrics", {
                "date": day, "totalWashes": washes, "totalRevenue": "100", "uptimePercent": "99.5",
            })

        body = client.get(
            f"{BASE}/analytics/stations/{station_id}/performance?startDate=2026-03-02&endDate=2026-03-03"
        ).get_json()

        assert body["days"] == 2
        assert body["totalWashes"] == 95
        assert body["totalRevenue"] == "200.00"
        assert body["averageUptimePercent"] == "99.50"
        assert body["startDate"] == "2026-03-02"

    def test_unknown_station(self, client):
        assert client.get(f"{BASE}/analytics/stations/9/performance").status_code == 404
