"""SQLAlchemy ORM models for the enterprise back office.

Grouped by area; import from here rather than from the submodules.
"""

from petwash.domain.models.finance import AccountsPayable, AccountsReceivable, GeneralLedgerEntry
from petwash.domain.models.invoicing import ElectronicInvoice
from petwash.domain.models.monitoring import (
    StationAlert,
    StationPerformanceMetrics,
    StationTelemetry,
)
from petwash.domain.models.network import Country, Franchisee, FranchiseTerritory, PetWashStation
from petwash.domain.models.operations import (
    MaintenanceWorkOrder,
    SparePart,
    StationAsset,
    StationBill,
    StationSparePart,
    StockTransaction,
)
from petwash.domain.models.subscriptions import (
    SubscriptionPlan,
    SubscriptionUsage,
    UserSubscription,
)
from petwash.domain.models.tax import TaxAuditLog, TaxPayment, TaxReturn

__all__ = [
    "AccountsPayable",
    "AccountsReceivable",
    "Country",
    "ElectronicInvoice",
    "FranchiseTerritory",
    "Franchisee",
    "GeneralLedgerEntry",
    "MaintenanceWorkOrder",
    "PetWashStation",
    "SparePart",
    "StationAlert",
    "StationAsset",
    "StationBill",
    "StationPerformanceMetrics",
    "StationSparePart",
    "StationTelemetry",
    "StockTransaction",
    "SubscriptionPlan",
    "SubscriptionUsage",
    "TaxAuditLog",
    "TaxPayment",
    "TaxReturn",
    "UserSubscription",
]
