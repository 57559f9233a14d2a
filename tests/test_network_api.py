"""API tests for countries, territories, franchisees and stations.

Uses the Flask test client with an in-memory SQLite database.
"""

import json

from petwash.domain.models import Country, PetWashStation

BASE = "/api/enterprise"


def _post_json(client, url, data):
    """Helper to POST JSON and return the status code and parsed body."""
    resp = client.post(url, data=json.dumps(data), content_type="application/json")
    return resp.status_code, resp.get_json()


def _put_json(client, url, data):
    resp = client.put(url, data=json.dumps(data), content_type="application/json")
    return resp.status_code, resp.get_json()


def _station_payload(network, code, **overrides):
    payload = {
        "stationCode": code,
        "stationName": f"Station {code}",
        "territoryId": network["territory"]["id"],
        "countryId": network["country"]["id"],
        "address": "22 Dizengoff St",
        "city": "Tel Aviv",
    }
    payload.update(overrides)
    return payload


class TestCountries:
    def test_create_then_get_round_trip(self, client):
        status, created = _post_json(client, f"{BASE}/countries", {
            "code": "gb", "name": "United Kingdom", "currency": "gbp", "timezone": "Europe/London",
            "vatRate": "0.20",
        })
        assert status == 201
        assert created["code"] == "GB"
        assert created["currency"] == "GBP"
        assert created["vatRate"] == "0.2000"
        assert created["createdAt"] and created["updatedAt"]

        resp = client.get(f"{BASE}/countries/{created['id']}")
        assert resp.status_code == 200
        assert resp.get_json() == created

    def test_invalid_body_returns_400_and_creates_nothing(self, client):
        status, body = _post_json(client, f"{BASE}/countries", {"code": "ISR", "name": ""})

        assert status == 400
        assert body["error"] == "Validation failed"
        fields = {detail["field"] for detail in body["details"]}
        assert {"code", "name", "currency", "timezone"} <= fields
        assert Country.query.count() == 0

    def test_non_object_body_is_rejected(self, client):
        status, body = _post_json(client, f"{BASE}/countries", ["not", "an", "object"])
        assert status == 400
        assert body["details"][0]["message"] == "Request body must be a JSON object"

    def test_duplicate_code_conflicts(self, client, network):
        status, body = _post_json(client, f"{BASE}/countries", {
            "code": "IL", "name": "Israel again", "currency": "ILS", "timezone": "Asia/Jerusalem",
        })
        assert status == 409
        assert "error" in body

    def test_list_is_ordered_by_name(self, client, network):
        _post_json(client, f"{BASE}/countries", {
            "code": "AU", "name": "Australia", "currency": "AUD", "timezone": "Australia/Sydney",
        })
        names = [row["name"] for row in client.get(f"{BASE}/countries").get_json()]
        assert names == ["Australia", "Israel"]

    def test_put_on_missing_id_returns_404(self, client):
        status, body = _put_json(client, f"{BASE}/countries/999", {"name": "Nowhere"})
        assert status == 404
        assert body["error"] == "Country with id 999 not found"

    def test_partial_update(self, client, network):
        country_id = network["country"]["id"]
        status, body = _put_json(client, f"{BASE}/countries/{country_id}", {"nameLocal": "ישראל"})

        assert status == 200
        assert body["nameLocal"] == "ישראל"
        assert body["code"] == "IL"

    def test_partial_update_is_validated(self, client, network):
        country_id = network["country"]["id"]
        status, body = _put_json(client, f"{BASE}/countries/{country_id}", {"vatRate": "1.5"})
        assert status == 400
        assert body["details"][0]["field"] == "vatRate"

    def test_empty_update_is_rejected(self, client, network):
        status, _ = _put_json(client, f"{BASE}/countries/{network['country']['id']}", {})
        assert status == 400


class TestFranchisees:
    def test_invalid_email_is_rejected(self, client, network):
        status, body = _post_json(client, f"{BASE}/franchisees", {
            "companyName": "Wag Ltd",
            "contactFirstName": "Dana",
            "contactLastName": "Cohen",
            "contactEmail": "not-an-email",
            "countryId": network["country"]["id"],
            "agreementType": "single_station",
        })
        assert status == 400
        assert body["details"][0]["field"] == "contactEmail"

    def test_unknown_country_returns_404(self, client):
        status, body = _post_json(client, f"{BASE}/franchisees", {
            "companyName": "Wag Ltd",
            "contactFirstName": "Dana",
            "contactLastName": "Cohen",
            "contactEmail": "dana@wag.example",
            "countryId": 42,
            "agreementType": "single_station",
        })
        assert status == 404
        assert body["error"] == "Country with id 42 not found"

    def test_station_count_follows_stations(self, client, network):
        franchisee_id = network["franchisee"]["id"]
        _post_json(client, f"{BASE}/stations", _station_payload(network, "PW-TLV-002", franchiseeId=franchisee_id))

        body = client.get(f"{BASE}/franchisees/{franchisee_id}").get_json()
        assert body["totalStations"] == 2


class TestStations:
    def test_create_marks_franchised_stations(self, client, network):
        status, body = _post_json(client, f"{BASE}/stations", _station_payload(
            network, "PW-TLV-010",
            franchiseeId=network["franchisee"]["id"],
            operatingHours={"monday": {"open": "07:00", "close": "22:00"}, "saturday": {"closed": True}},
        ))

        assert status == 201
        assert body["ownershipType"] == "franchise"
        assert body["healthStatus"] == "healthy"
        assert body["operatingHours"]["saturday"]["closed"] is True

    def test_invalid_operating_hours(self, client, network):
        status, body = _post_json(client, f"{BASE}/stations", _station_payload(
            network, "PW-TLV-011", operatingHours={"monday": {"open": "25:00", "close": "22:00"}},
        ))
        assert status == 400
        assert PetWashStation.query.filter_by(station_code="PW-TLV-011").count() == 0

    def test_territory_must_belong_to_country(self, client, network):
        _, other = _post_json(client, f"{BASE}/countries", {
            "code": "US", "name": "United States", "currency": "USD", "timezone": "America/New_York",
        })
        status, body = _post_json(client, f"{BASE}/stations", _station_payload(
            network, "PW-NYC-001", countryId=other["id"],
        ))
        assert status == 422
        assert body["details"]["territoryId"] == network["territory"]["id"]

    def test_filter_by_status(self, client, network):
        _post_json(client, f"{BASE}/stations", _station_payload(network, "PW-TLV-020", operationalStatus="maintenance"))

        maintenance = client.get(f"{BASE}/stations?operationalStatus=maintenance").get_json()
        aliased = client.get(f"{BASE}/stations?status=maintenance").get_json()
        everything = client.get(f"{BASE}/stations").get_json()

        assert [row["stationCode"] for row in maintenance] == ["PW-TLV-020"]
        assert aliased == maintenance
        assert [row["stationCode"] for row in everything] == ["PW-TLV-001", "PW-TLV-020"]

    def test_filter_by_franchisee(self, client, network):
        _post_json(client, f"{BASE}/stations", _station_payload(network, "PW-TLV-030"))

        rows = client.get(f"{BASE}/stations?franchiseeId={network['franchisee']['id']}").get_json()
        assert [row["stationCode"] for row in rows] == ["PW-TLV-001"]

    def test_detail_includes_related_rows(self, client, network):
        station_id = network["station"]["id"]
        body = client.get(f"{BASE}/stations/{station_id}").get_json()

        assert body["stationCode"] == "PW-TLV-001"
        assert body["bills"] == []
        assert body["assets"] == []
        assert body["openAlerts"] == []
        assert body["latestTelemetry"] is None

    def test_get_missing_station(self, client):
        resp = client.get(f"{BASE}/stations/12345")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Station with id 12345 not found"}

    def test_map(self, client, network):
        rows = client.get(f"{BASE}/stations/map").get_json()

        assert len(rows) == 1
        assert rows[0]["stationCode"] == "PW-TLV-001"
        assert rows[0]["franchiseeId"] == network["franchisee"]["id"]
        assert "latitude" in rows[0] and "longitude" in rows[0]

    def test_moving_station_to_corporate(self, client, network):
        station_id = network["station"]["id"]
        status, body = _put_json(client, f"{BASE}/stations/{station_id}", {"franchiseeId": None})

        assert status == 200
        assert body["ownershipType"] == "corporate"
        franchisee = client.get(f"{BASE}/franchisees/{network['franchisee']['id']}").get_json()
        assert franchisee["totalStations"] == 0
