"""Application configuration classes.

Supports multiple environments via class inheritance.
Every setting can be overridden through an environment variable of the same name.
"""

import os


class BaseConfig:
    """Base configuration shared across all environments."""

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    RESTX_MASK_SWAGGER = False
    ERROR_INCLUDE_MESSAGE = False
    RESTX_ERROR_404_HELP = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Shared secret for the admin back office; auth is disabled when unset.
    ADMIN_API_KEY = os.getenv("ADMIN_API_KEY")

    DEFAULT_VAT_RATE = os.getenv("DEFAULT_VAT_RATE", "0.18")
    LOW_SUPPLY_THRESHOLD = float(os.getenv("LOW_SUPPLY_THRESHOLD", "15"))
    HEARTBEAT_TIMEOUT_MINUTES = int(os.getenv("HEARTBEAT_TIMEOUT_MINUTES", "10"))

    # Israeli Tax Authority electronic invoicing
    ITA_CLIENT_ID = os.getenv("ITA_CLIENT_ID")
    ITA_CLIENT_SECRET = os.getenv("ITA_CLIENT_SECRET")
    ITA_SCOPE = os.getenv("ITA_SCOPE", "invoice vat income_tax reports")
    ITA_TOKEN_URL = os.getenv(
        "ITA_TOKEN_URL",
        "https://openapi.taxes.gov.il/shaam/longtimetoken/oauth2/token",
    )
    ITA_API_BASE_URL = os.getenv(
        "ITA_API_BASE_URL",
        "https://api.taxes.gov.il/shaam/production/",
    )
    ITA_TIMEOUT_SECONDS = float(os.getenv("ITA_TIMEOUT_SECONDS", "30"))
    ITA_TOKEN_TIMEOUT_SECONDS = float(os.getenv("ITA_TOKEN_TIMEOUT_SECONDS", "15"))
    ITA_FAILURE_THRESHOLD = int(os.getenv("ITA_FAILURE_THRESHOLD", "3"))
    ITA_B2B_THRESHOLD = os.getenv("ITA_B2B_THRESHOLD", "25000")


class DevelopmentConfig(BaseConfig):
    """Development configuration — SQLite fallback for local testing."""

    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///petwash-dev.db",
    )


class TestingConfig(BaseConfig):
    """Testing configuration — in-memory SQLite, no auth, no tax authority credentials."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    ADMIN_API_KEY = None
    ITA_CLIENT_ID = None
    ITA_CLIENT_SECRET = None


class ProductionConfig(BaseConfig):
    """Production configuration — requires DATABASE_URL and ADMIN_API_KEY to be set."""

    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "")


CONFIG_MAP = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
