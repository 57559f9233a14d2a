"""Shared test fixtures."""

from decimal import Decimal

import pytest

from petwash import create_app
from petwash.extensions import db as _db
from petwash.services.network_service import (
    CountryService,
    FranchiseeService,
    StationService,
    TerritoryService,
)


@pytest.fixture(scope="session")
def app():
    """Create an application instance configured for testing."""
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.drop_all()


@pytest.fixture(autouse=True)
def db_session(app):
    """Ensure a clean database state for each test.

    Re-creates all tables before each test to guarantee isolation.
    """
    with app.app_context():
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def network(app):
    """Israel, one territory, one franchisee and a franchised station.

    Returns the created rows as API dicts keyed by entity.
    """
    country = CountryService().create(
        code="IL", name="Israel", currency="ILS", timezone="Asia/Jerusalem", vat_rate=Decimal("0.18"),
    )
    territory = TerritoryService().create(
        country_id=country["id"], name="Tel Aviv District", territory_code="IL-TA", status="active",
    )
    franchisee = FranchiseeService().create(
        company_name="Clean Paws Ltd",
        contact_first_name="Noa",
        contact_last_name="Levi",
        contact_email="noa@cleanpaws.example",
        country_id=country["id"],
        territory_id=territory["id"],
        agreement_type="single_station",
        status="active",
    )
    station = StationService().create(
        station_code="PW-TLV-001",
        station_name="Tel Aviv Port",
        franchisee_id=franchisee["id"],
        territory_id=territory["id"],
        country_id=country["id"],
        address="1 Hangar St",
        city="Tel Aviv",
        latitude=Decimal("32.0972"),
        longitude=Decimal("34.7731"),
    )
    return {"country": country, "territory": territory, "franchisee": franchisee, "station": station}


@pytest.fixture()
def use_client(app, monkeypatch):
    """Install a fake tax authority client on the app for one test."""

    def install(fake):
        monkeypatch.setitem(app.extensions, "ita_client", fake)
        return fake

    return install
