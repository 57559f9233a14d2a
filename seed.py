"""Seed script — populates the database with a demo franchise network.

Usage:
    flask shell
    >>> exec(open('seed.py').read())

Or run directly:
    python seed.py
"""

from datetime import date
from decimal import Decimal

from petwash import create_app
from petwash.extensions import db
from petwash.domain.models import Country
from petwash.services.monitoring_service import TelemetryService
from petwash.services.network_service import (
    CountryService,
    FranchiseeService,
    StationService,
    TerritoryService,
)
from petwash.services.operations_service import (
    BillService,
    SparePartService,
    StationSparePartService,
    WorkOrderService,
)
from petwash.services.subscription_service import PlanService
from petwash.services.tax_service import TaxReturnService


def seed():
    """Insert a country, territory, franchisee, stations, parts, plans and a first reading."""
    app = create_app("development")

    with app.app_context():
        db.create_all()

        # Check if already seeded
        if Country.query.first():
            print("⚠ Seed data already exists — skipping.")
            return

        # -- Network --
        israel = CountryService().create(
            code="IL", name="Israel", name_local="ישראל", currency="ILS",
            timezone="Asia/Jerusalem", vat_rate=Decimal("0.18"),
        )
        tel_aviv = TerritoryService().create(
            country_id=israel["id"], name="Tel Aviv District", territory_code="IL-TA",
            status="active", population=1_400_000,
        )
        clean_paws = FranchiseeService().create(
            company_name="Clean Paws Ltd",
            contact_first_name="Noa",
            contact_last_name="Levi",
            contact_email="noa@cleanpaws.example",
            country_id=israel["id"],
            territory_id=tel_aviv["id"],
            agreement_type="multi_station",
            royalty_rate=Decimal("0.06"),
            status="active",
        )

        stations = StationService()
        port = stations.create(
            station_code="PW-TLV-001", station_name="Tel Aviv Port",
            franchisee_id=clean_paws["id"], territory_id=tel_aviv["id"], country_id=israel["id"],
            address="1 Hangar St", city="Tel Aviv",
            latitude=Decimal("32.0972"), longitude=Decimal("34.7731"),
        )
        flagship = stations.create(
            station_code="PW-TLV-002", station_name="Rothschild Flagship",
            territory_id=tel_aviv["id"], country_id=israel["id"],
            address="45 Rothschild Blvd", city="Tel Aviv",
            latitude=Decimal("32.0636"), longitude=Decimal("34.7740"),
        )

        # -- Spare parts --
        parts = SparePartService()
        pump = parts.create(
            part_number="K9-PUMP-01", part_name="Shampoo dosing pump", category="pumps",
            unit_cost=Decimal("85.00"), quantity_in_stock=12, is_critical=True,
        )
        parts.create(
            part_number="K9-HOSE-03", part_name="High-pressure hose 3m", category="hoses",
            unit_cost=Decimal("42.50"), quantity_in_stock=4,
        )
        StationSparePartService().create(
            station_id=port["id"], spare_part_id=pump["id"], quantity=2, minimum_quantity=1,
            storage_location="Cabinet B",
        )

        # -- Bills and maintenance --
        BillService().create(
            station_id=port["id"], bill_type="electricity", vendor="Israel Electric Corp",
            due_date=date(2026, 3, 31), amount=Decimal("1250.00"), vat=Decimal("212.50"),
        )
        WorkOrderService().create(
            station_id=flagship["id"], work_type="preventive", priority="medium",
            title="Quarterly K9000 service", labor_cost=Decimal("350.00"),
        )

        # -- Subscription plans --
        plans = PlanService()
        plans.create(
            plan_code="PAWS-MONTHLY", name="Paws Monthly", name_he="פאוז חודשי",
            price=Decimal("99.00"), wash_credits_per_month=4, discount_percent=Decimal("10"),
            country_id=israel["id"],
        )
        plans.create(
            plan_code="PAWS-YEARLY", name="Paws Yearly", price=Decimal("990.00"),
            billing_interval="yearly", trial_days=14, wash_credits_per_month=6,
            discount_percent=Decimal("20"), country_id=israel["id"],
        )

        # -- Draft VAT return for the first quarter --
        TaxReturnService().create(
            return_type="vat_quarterly", fiscal_year=2026, fiscal_period=1,
            period_start=date(2026, 1, 1), period_end=date(2026, 3, 31),
            total_revenue=Decimal("118000.00"), taxable_income=Decimal("100000.00"),
            vat_collected=Decimal("18000.00"), vat_paid=Decimal("14400.00"), prepared_by="seed",
        )

        # -- First telemetry (low soap raises an alert) --
        TelemetryService().record(port["id"], soap_level=11.0, conditioner_level=64.0, water_pressure=3.2)
        TelemetryService().record(flagship["id"], soap_level=82.0, conditioner_level=77.0, water_pressure=3.4)

        print("✓ Seed data inserted successfully.")


if __name__ == "__main__":
    seed()
