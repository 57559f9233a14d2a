"""Pydantic schemas for countries, territories, franchisees and stations."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import EmailStr, Field, field_validator, model_validator

from petwash.schemas.base import CamelModel

Weekday = Literal["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]


class CountryCreateSchema(CamelModel):
    code: str = Field(..., min_length=2, max_length=2)
    name: str = Field(..., min_length=1, max_length=100)
    name_local: str | None = Field(default=None, max_length=100)
    currency: str = Field(..., min_length=3, max_length=3)
    currency_symbol: str | None = Field(default=None, max_length=5)
    timezone: str = Field(..., min_length=1, max_length=50)
    language: str = Field(default="he", max_length=10)
    vat_rate: Decimal = Field(default=Decimal("0.18"), ge=0, lt=1)
    is_active: bool = True
    launch_date: date | None = None

    @field_validator("code", "currency")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()


class TerritoryCreateSchema(CamelModel):
    country_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=200)
    territory_code: str = Field(..., min_length=1, max_length=50)
    boundary_north: Decimal | None = Field(default=None, ge=-90, le=90)
    boundary_south: Decimal | None = Field(default=None, ge=-90, le=90)
    boundary_east: Decimal | None = Field(default=None, ge=-180, le=180)
    boundary_west: Decimal | None = Field(default=None, ge=-180, le=180)
    center_latitude: Decimal | None = Field(default=None, ge=-90, le=90)
    center_longitude: Decimal | None = Field(default=None, ge=-180, le=180)
    population: int | None = Field(default=None, ge=0)
    pet_ownership_rate: Decimal | None = Field(default=None, ge=0, le=1)
    estimated_market_size: int | None = Field(default=None, ge=0)
    competition_level: Literal["low", "medium", "high"] | None = None
    status: Literal["planning", "active", "saturated", "closed"] = "planning"
    launched_at: datetime | None = None


class FranchiseeCreateSchema(CamelModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    registration_number: str | None = Field(default=None, max_length=100)
    tax_id: str | None = Field(default=None, max_length=100)
    contact_first_name: str = Field(..., min_length=1, max_length=100)
    contact_last_name: str = Field(..., min_length=1, max_length=100)
    contact_email: EmailStr
    contact_phone: str | None = Field(default=None, max_length=30)
    address: str | None = None
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    country_id: int = Field(..., gt=0)
    territory_id: int | None = Field(default=None, gt=0)
    agreement_type: Literal["single_station", "multi_station", "master_franchise", "area_developer"]
    agreement_start_date: date | None = None
    agreement_end_date: date | None = None
    initial_fee: Decimal | None = Field(default=None, ge=0)
    royalty_rate: Decimal | None = Field(default=None, ge=0, le=1)
    marketing_fee_rate: Decimal | None = Field(default=None, ge=0, le=1)
    minimum_monthly_royalty: Decimal | None = Field(default=None, ge=0)
    status: Literal["active", "suspended", "terminated", "pending"] = "pending"
    account_manager_id: str | None = Field(default=None, max_length=100)
    notes: str | None = None

    @model_validator(mode="after")
    def check_agreement_window(self) -> "FranchiseeCreateSchema":
        """An agreement cannot end before it starts."""
        if (
            self.agreement_start_date
            and self.agreement_end_date
            and self.agreement_end_date < self.agreement_start_date
        ):
            raise ValueError("agreementEndDate must not be before agreementStartDate")
        return self


class DayHours(CamelModel):
    """Opening window for one weekday, ``HH:MM`` local time."""

    open: str | None = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    close: str | None = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    closed: bool = False

    @model_validator(mode="after")
    def check_window(self) -> "DayHours":
        if not self.closed and (self.open is None or self.close is None):
            raise ValueError("open and close are required unless the day is closed")
        return self


class StationCreateSchema(CamelModel):
    station_code: str = Field(..., min_length=1, max_length=50)
    station_name: str = Field(..., min_length=1, max_length=200)
    identity_number: str | None = Field(default=None, max_length=100)
    qr_code: str | None = Field(default=None, max_length=255)
    franchisee_id: int | None = Field(default=None, gt=0)
    ownership_type: Literal["corporate", "franchise"] = "corporate"
    territory_id: int = Field(..., gt=0)
    country_id: int = Field(..., gt=0)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    latitude: Decimal | None = Field(default=None, ge=-90, le=90)
    longitude: Decimal | None = Field(default=None, ge=-180, le=180)
    location_type: str | None = Field(default=None, max_length=50)
    hardware_version: str | None = Field(default=None, max_length=50)
    firmware_version: str | None = Field(default=None, max_length=50)
    installation_date: date | None = None
    last_maintenance_date: date | None = None
    next_maintenance_date: date | None = None
    operational_status: Literal["active", "offline", "maintenance", "decommissioned"] = "active"
    daily_capacity: int = Field(default=50, ge=0)
    operating_hours: dict[Weekday, DayHours] | None = None
    accepts_cash: bool = False
    accepts_card: bool = True
    accepts_mobile: bool = True
    nayax_terminal_id: str | None = Field(default=None, max_length=100)
