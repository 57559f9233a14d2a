"""Unit tests for the pure domain helpers: money, lifecycles, station health and error types."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from petwash.domain.amounts import checked_total, parts_cost, split_vat, to_money
from petwash.domain.exceptions import (
    AuthenticationError,
    BusinessRuleError,
    ConflictError,
    IntegrationError,
    ResourceNotFoundError,
    ValidationError,
)
from petwash.domain.health import derive_health_status, low_supply_readings
from petwash.domain.lifecycle import ALERT_LIFECYCLE, WORK_ORDER_LIFECYCLE


class TestAmounts:
    def test_to_money_rounds_half_up(self):
        assert to_money("10.005") == Decimal("10.01")
        assert to_money(None) == Decimal("0.00")
        assert to_money(3) == Decimal("3.00")

    def test_checked_total_computes_sum(self):
        total = checked_total("totalAmount", {"amount": Decimal("1250"), "vat": Decimal("212.5")})
        assert total == Decimal("1462.50")

    def test_checked_total_accepts_matching_total(self):
        assert checked_total("totalAmount", {"amount": "10", "vat": "1.80"}, "11.8") == Decimal("11.80")

    def test_checked_total_rejects_mismatch(self):
        with pytest.raises(BusinessRuleError) as exc:
            checked_total("totalAmount", {"amount": "10", "vat": "1.80"}, "12.00")
        assert exc.value.status_code == 422
        assert exc.value.details["expected"] == "11.80"

    def test_parts_cost_multiplies_unit_cost(self):
        lines = [{"partId": 1, "quantity": 2, "cost": "12.50"}, {"partId": 2, "quantity": 1, "cost": "4"}]
        assert parts_cost(lines) == Decimal("29.00")
        assert parts_cost(None) == Decimal("0.00")

    def test_split_vat(self):
        breakdown = split_vat(Decimal("118"), Decimal("0.18"))
        assert breakdown.amount_before_vat == Decimal("100.00")
        assert breakdown.vat_amount == Decimal("18.00")
        assert breakdown.total == Decimal("118.00")

    def test_split_vat_parts_always_sum_to_total(self):
        breakdown = split_vat(Decimal("99.99"), Decimal("0.17"))
        assert breakdown.amount_before_vat + breakdown.vat_amount == Decimal("99.99")


class TestLifecycles:
    @pytest.mark.parametrize("current,target", [
        ("pending", "scheduled"),
        ("pending", "in_progress"),
        ("scheduled", "in_progress"),
        ("in_progress", "completed"),
        ("in_progress", "cancelled"),
    ])
    def test_work_order_allowed(self, current, target):
        assert WORK_ORDER_LIFECYCLE.can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        ("pending", "completed"),
        ("completed", "in_progress"),
        ("cancelled", "pending"),
        ("scheduled", "pending"),
    ])
    def test_work_order_rejected(self, current, target):
        with pytest.raises(ConflictError) as exc:
            WORK_ORDER_LIFECYCLE.check(current, target)
        assert exc.value.details["currentStatus"] == current
        assert exc.value.details["requestedStatus"] == target

    def test_terminal_statuses(self):
        assert WORK_ORDER_LIFECYCLE.is_terminal("completed")
        assert not WORK_ORDER_LIFECYCLE.is_terminal("pending")
        assert ALERT_LIFECYCLE.is_terminal("resolved")
        assert ALERT_LIFECYCLE.is_terminal("ignored")

    def test_alert_cannot_reopen(self):
        assert ALERT_LIFECYCLE.can_transition("acknowledged", "resolved")
        assert not ALERT_LIFECYCLE.can_transition("resolved", "open")


class TestStationHealth:
    NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_stale_heartbeat_is_offline_even_with_alerts(self):
        heartbeat = self.NOW - timedelta(minutes=11)
        assert derive_health_status(heartbeat, ["critical"], 10, now=self.NOW) == "offline"

    def test_naive_heartbeat_is_treated_as_utc(self):
        heartbeat = (self.NOW - timedelta(minutes=5)).replace(tzinfo=None)
        assert derive_health_status(heartbeat, [], 10, now=self.NOW) == "healthy"

    def test_severity_ordering(self):
        heartbeat = self.NOW - timedelta(minutes=1)
        assert derive_health_status(heartbeat, ["warning", "critical"], 10, now=self.NOW) == "critical"
        assert derive_health_status(heartbeat, ["info", "warning"], 10, now=self.NOW) == "warning"
        assert derive_health_status(heartbeat, ["info"], 10, now=self.NOW) == "healthy"

    def test_never_reported_station_is_not_offline(self):
        assert derive_health_status(None, [], 10, now=self.NOW) == "healthy"

    def test_low_supply_readings(self):
        reading = {"soap_level": 12.0, "conditioner_level": 40.0, "sanitizer_level": None}
        assert low_supply_readings(reading, 15.0) == {"soap_level": 12.0}


class TestExceptions:
    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (ResourceNotFoundError("Station", 7), 404),
            (ValidationError("Validation failed"), 400),
            (AuthenticationError(), 401),
            (ConflictError("busy"), 409),
            (BusinessRuleError("no credits"), 422),
            (IntegrationError("timeout"), 502),
        ],
    )
    def test_status_codes(self, error, status_code):
        assert error.status_code == status_code

    def test_message_and_details(self):
        error = ConflictError("Bill 3 has recorded payments", details={"status": "paid"})

        assert str(error) == error.message == "Bill 3 has recorded payments"
        assert error.details == {"status": "paid"}
        assert not hasattr(error, "error_code")

    def test_validation_details_default_to_empty_list(self):
        assert ValidationError("Validation failed").details == []

    def test_not_found_message(self):
        assert ResourceNotFoundError("Station", 7).message == "Station with id 7 not found"
