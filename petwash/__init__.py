"""Flask application factory.

Creates and configures the Flask app, registers extensions, the tax
authority client, error handlers, and API namespaces.
"""

import atexit
import logging
import os
from datetime import date, datetime
from decimal import Decimal

from flask import Flask
from flask.json.provider import DefaultJSONProvider
from flask_restx import Api
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from petwash.config.settings import CONFIG_MAP
from petwash.domain.exceptions import AppError
from petwash.extensions import db, migrate
from petwash.integrations.ita_client import TaxAuthorityClient
from petwash.schemas.response import error_response

logger = logging.getLogger(__name__)


class CustomJSONProvider(DefaultJSONProvider):
    """Render Decimals as fixed-point strings and dates as ISO-8601."""

    @staticmethod
    def default(o):
        if isinstance(o, Decimal):
            return format(o, "f")
        if isinstance(o, (date, datetime)):
            return o.isoformat()
        return DefaultJSONProvider.default(o)


def create_app(config_name: str | None = None, ita_client: TaxAuthorityClient | None = None) -> Flask:
    """Build and configure the Flask application.

    Args:
        config_name: One of 'development', 'testing', 'production'.
                     Defaults to the FLASK_ENV environment variable.
        ita_client: Tax authority client to use instead of one built from config.
    """
    app = Flask(__name__)
    app.json_provider_class = CustomJSONProvider
    app.json = CustomJSONProvider(app)

    # --- Configuration ---
    config_name = config_name or os.getenv("FLASK_ENV", "development")
    app.config.from_object(CONFIG_MAP[config_name])

    # --- Logging ---
    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if not app.config.get("ADMIN_API_KEY"):
        logger.warning("ADMIN_API_KEY is not set; admin endpoints are unauthenticated")

    # --- Extensions ---
    db.init_app(app)
    migrate.init_app(app, db)

    with app.app_context():
        db.create_all()

    if ita_client is None:
        ita_client = TaxAuthorityClient.from_config(app.config)
        atexit.register(ita_client.close)
    app.extensions["ita_client"] = ita_client
    if not ita_client.configured:
        logger.warning("ITA credentials are not configured; electronic invoices will not be submitted")

    # --- API ---
    api = Api(
        app,
        title="Pet Wash Enterprise API",
        version="1.0",
        description="Franchise network, station operations, finance and ITA e-invoicing",
    )

    # Register namespaces
    from petwash.api.analytics import ns as analytics_ns
    from petwash.api.finance import ns as finance_ns
    from petwash.api.health import ns as health_ns
    from petwash.api.invoicing import ns as invoicing_ns
    from petwash.api.monitoring import ns as monitoring_ns
    from petwash.api.network import ns as network_ns
    from petwash.api.operations import ns as operations_ns
    from petwash.api.subscriptions import ns as subscriptions_ns
    from petwash.api.tax import ns as tax_ns

    for ns in (network_ns, operations_ns, monitoring_ns, subscriptions_ns, analytics_ns):
        api.add_namespace(ns, path="/api/enterprise")
    api.add_namespace(finance_ns, path="/api/finance")
    api.add_namespace(tax_ns, path="/api/finance")
    api.add_namespace(invoicing_ns, path="/api/finance/ita")
    api.add_namespace(health_ns, path="/api/health")

    # --- Global error handlers ---
    _register_error_handlers(app, api)

    return app


def _handle_app_error(error: AppError):
    return error_response(error.message, error.status_code, error.details)


def _handle_integrity_error(error: IntegrityError):
    db.session.rollback()
    logger.warning("Integrity error: %s", error.orig)
    return error_response("Record conflicts with existing data", 409)


def _handle_http_error(error: HTTPException):
    return error_response(error.description or error.name, error.code or 500)


def _handle_unexpected(error: Exception):
    db.session.rollback()
    logger.exception("Unhandled server error")
    return error_response("Internal server error", 500)


def _register_error_handlers(app: Flask, api: Api) -> None:
    """Map exceptions to ``{error, details?}`` JSON for API and non-API routes alike."""
    api.errorhandler(AppError)(_handle_app_error)
    api.errorhandler(IntegrityError)(_handle_integrity_error)
    api.errorhandler(HTTPException)(_handle_http_error)
    api.errorhandler(_handle_unexpected)

    app.register_error_handler(AppError, _handle_app_error)
    app.register_error_handler(IntegrityError, _handle_integrity_error)

    @app.errorhandler(404)
    def handle_not_found(_error):
        return error_response("Resource not found", 404)

    @app.errorhandler(500)
    def handle_internal(_error):
        logger.exception("Unhandled server error")
        return error_response("Internal server error", 500)
