"""Liveness endpoint; open to unauthenticated callers such as load balancers."""

import logging

from flask_restx import Namespace, Resource
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from petwash.extensions import db
from petwash.schemas.response import success_response

logger = logging.getLogger(__name__)

ns = Namespace("health", description="Service health")


@ns.route("")
class Health(Resource):
    @ns.doc("health")
    def get(self):
        try:
            db.session.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Health check could not reach the database")
            db.session.rollback()
            return success_response({"status": "degraded", "database": "unavailable"}, 503)
        return success_response({"status": "ok", "database": "connected"})
