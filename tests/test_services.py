"""Service-level tests, called directly inside the app context."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from petwash.extensions import db
from petwash.domain.exceptions import BusinessRuleError, ConflictError, ResourceNotFoundError
from petwash.domain.models import GeneralLedgerEntry, PetWashStation, StockTransaction
from petwash.integrations.ita_client import TaxAuthorityClient
from petwash.repositories.network_repository import CountryRepository
from petwash.services.crud_service import CrudService
from petwash.services.finance_service import CASH_ACCOUNT, LedgerService, PayableService
from petwash.services.health_service import StationHealthService
from petwash.services.invoice_service import InvoiceService
from petwash.services.operations_service import InventoryService, SparePartService


class TestCrudService:
    def test_missing_row(self):
        service = CrudService(CountryRepository(), "Country")

        with pytest.raises(ResourceNotFoundError) as exc:
            service.get(7)
        assert exc.value.message == "Country with id 7 not found"

    def test_list_skips_none_filters(self, network):
        service = CrudService(CountryRepository(), "Country")

        assert [row["code"] for row in service.list(code=None)] == ["IL"]
        assert service.list(code="GB") == []


class TestRepositories:
    def test_lookups(self, network):
        repo = CountryRepository()

        assert [country.code for country in repo.get_all()] == ["IL"]
        assert repo.get_by_code("IL").id == network["country"]["id"]
        assert repo.get_by_code("GB") is None


class TestLedger:
    def test_post_writes_balanced_pair(self):
        entries = LedgerService().post(
            entry_date=date(2026, 5, 4),
            debit_account=("6110", "Electricity", "expense"),
            credit_account=CASH_ACCOUNT,
            amount=Decimal("80.00"),
            currency="ILS",
            description="test posting",
            source_type="manual",
            source_id=1,
        )

        assert [entry["entryNumber"] for entry in entries] == ["GL-2026-000001", "GL-2026-000002"]
        assert entries[0]["debit"] == entries[1]["credit"] == "80.00"
        assert {entry["fiscalPeriod"] for entry in entries} == {5}

    def test_failed_payment_leaves_no_ledger_rows(self):
        payables = PayableService()
        payable = payables.create(
            invoice_number="SUP-9", supplier_id="S", invoice_date=date(2026, 1, 1),
            due_date=date(2026, 2, 1), amount=Decimal("10"),
        )
        payables.pay(payable["id"], date(2026, 1, 5), "cash")

        with pytest.raises(ConflictError):
            payables.pay(payable["id"], date(2026, 1, 6), "cash")
        assert GeneralLedgerEntry.query.count() == 2


class TestInventory:
    def test_rejected_adjustment_rolls_back(self):
        part = SparePartService().create(
            part_number="P-1", part_name="Nozzle", category="nozzles", unit_cost=Decimal("5"), quantity_in_stock=1,
        )

        with pytest.raises(BusinessRuleError):
            InventoryService().adjust(part["id"], -2, "used")

        assert StockTransaction.query.count() == 0
        assert SparePartService().get(part["id"])["quantityInStock"] == 1

    def test_unknown_part(self):
        with pytest.raises(ResourceNotFoundError):
            InventoryService().adjust(99, 1, "found one")


class TestStationHealth:
    def test_refresh_marks_stale_station_offline(self, network, app):
        station = db.session.get(PetWashStation, network["station"]["id"])
        station.last_heartbeat = datetime.now(timezone.utc) - timedelta(
            minutes=app.config["HEARTBEAT_TIMEOUT_MINUTES"] + 5,
        )

        assert StationHealthService().refresh(station) == "offline"
        assert station.health_status == "offline"


class TestInvoiceServiceClient:
    def test_injected_client_is_used(self):
        client = TaxAuthorityClient(
            client_id=None, client_secret=None,
            token_url="https://ita.example/token", api_base_url="https://ita.example/api",
        )

        config = InvoiceService(client=client).config()

        assert config["configured"] is False
        assert config["apiBaseUrl"] == "https://ita.example/api/"
        assert config["circuitBreaker"]["state"] == "closed"
