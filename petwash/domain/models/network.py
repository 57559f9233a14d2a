"""Geography and franchise network: countries down to individual stations."""

from decimal import Decimal

from petwash.domain.models.base import SerializerMixin, TimestampMixin, money, rate
from petwash.extensions import db


# ---------------------------------------------------------------------------
# Country
# ---------------------------------------------------------------------------
class Country(SerializerMixin, TimestampMixin, db.Model):
    """Reference data for a country the network operates in."""

    __tablename__ = "countries"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(2), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    name_local = db.Column(db.String(100))
    currency = db.Column(db.String(3), nullable=False)
    currency_symbol = db.Column(db.String(5))
    timezone = db.Column(db.String(50), nullable=False)
    language = db.Column(db.String(10), nullable=False, default="he")
    vat_rate = rate(nullable=False, default=Decimal("0.18"))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    launch_date = db.Column(db.Date)

    territories = db.relationship("FranchiseTerritory", back_populates="country", lazy="dynamic")


# ---------------------------------------------------------------------------
# Franchise territory
# ---------------------------------------------------------------------------
class FranchiseTerritory(SerializerMixin, TimestampMixin, db.Model):
    """An exclusive geographic area that can be sold to a franchisee."""

    __tablename__ = "franchise_territories"

    id = db.Column(db.Integer, primary_key=True)
    country_id = db.Column(db.Integer, db.ForeignKey("countries.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    territory_code = db.Column(db.String(50), unique=True, nullable=False)
    boundary_north = db.Column(db.Numeric(10, 7))
    boundary_south = db.Column(db.Numeric(10, 7))
    boundary_east = db.Column(db.Numeric(10, 7))
    boundary_west = db.Column(db.Numeric(10, 7))
    center_latitude = db.Column(db.Numeric(10, 7))
    center_longitude = db.Column(db.Numeric(10, 7))
    population = db.Column(db.Integer)
    pet_ownership_rate = rate()
    estimated_market_size = db.Column(db.Integer)
    competition_level = db.Column(db.String(20))
    status = db.Column(db.String(20), nullable=False, default="planning", index=True)
    launched_at = db.Column(db.DateTime)

    country = db.relationship("Country", back_populates="territories")


# ---------------------------------------------------------------------------
# Franchisee
# ---------------------------------------------------------------------------
class Franchisee(SerializerMixin, TimestampMixin, db.Model):
    """A business licensed to operate one or more stations."""

    __tablename__ = "franchisees"

    id = db.Column(db.Integer, primary_key=True)
    company_name = db.Column(db.String(200), nullable=False)
    registration_number = db.Column(db.String(100))
    tax_id = db.Column(db.String(100))
    contact_first_name = db.Column(db.String(100), nullable=False)
    contact_last_name = db.Column(db.String(100), nullable=False)
    contact_email = db.Column(db.String(255), unique=True, nullable=False)
    contact_phone = db.Column(db.String(30))
    address = db.Column(db.Text)
    city = db.Column(db.String(100))
    state = db.Column(db.String(100))
    postal_code = db.Column(db.String(20))
    country_id = db.Column(db.Integer, db.ForeignKey("countries.id"), nullable=False, index=True)
    territory_id = db.Column(db.Integer, db.ForeignKey("franchise_territories.id"), index=True)
    agreement_type = db.Column(db.String(30), nullable=False)
    agreement_start_date = db.Column(db.Date)
    agreement_end_date = db.Column(db.Date)
    initial_fee = money()
    royalty_rate = rate()
    marketing_fee_rate = rate()
    minimum_monthly_royalty = money()
    total_stations = db.Column(db.Integer, nullable=False, default=0)
    total_revenue = money(nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    account_manager_id = db.Column(db.String(100))
    notes = db.Column(db.Text)

    stations = db.relationship("PetWashStation", back_populates="franchisee", lazy="dynamic")


# ---------------------------------------------------------------------------
# Station
# ---------------------------------------------------------------------------
class PetWashStation(SerializerMixin, TimestampMixin, db.Model):
    """A physical wash unit.

    ``operational_status`` is set by operators; ``health_status`` is derived
    from telemetry and open alerts (see ``petwash.domain.health``).
    """

    __tablename__ = "pet_wash_stations"

    id = db.Column(db.Integer, primary_key=True)
    station_code = db.Column(db.String(50), unique=True, nullable=False)
    station_name = db.Column(db.String(200), nullable=False)
    identity_number = db.Column(db.String(100), unique=True)
    qr_code = db.Column(db.String(255), unique=True)
    franchisee_id = db.Column(db.Integer, db.ForeignKey("franchisees.id"), index=True)
    ownership_type = db.Column(db.String(20), nullable=False, default="corporate")
    territory_id = db.Column(
        db.Integer, db.ForeignKey("franchise_territories.id"), nullable=False, index=True,
    )
    country_id = db.Column(db.Integer, db.ForeignKey("countries.id"), nullable=False, index=True)
    address = db.Column(db.Text, nullable=False)
    city = db.Column(db.String(100), nullable=False)
    postal_code = db.Column(db.String(20))
    latitude = db.Column(db.Numeric(10, 7))
    longitude = db.Column(db.Numeric(10, 7))
    location_type = db.Column(db.String(50))
    hardware_version = db.Column(db.String(50))
    firmware_version = db.Column(db.String(50))
    installation_date = db.Column(db.Date)
    last_maintenance_date = db.Column(db.Date)
    next_maintenance_date = db.Column(db.Date)
    operational_status = db.Column(db.String(20), nullable=False, default="active", index=True)
    health_status = db.Column(db.String(20), nullable=False, default="healthy", index=True)
    last_heartbeat = db.Column(db.DateTime)
    daily_capacity = db.Column(db.Integer, nullable=False, default=50)
    operating_hours = db.Column(db.JSON)
    accepts_cash = db.Column(db.Boolean, nullable=False, default=False)
    accepts_card = db.Column(db.Boolean, nullable=False, default=True)
    accepts_mobile = db.Column(db.Boolean, nullable=False, default=True)
    nayax_terminal_id = db.Column(db.String(100))

    franchisee = db.relationship("Franchisee", back_populates="stations")
