"""Tamper-evident audit trail for tax documents.

Every state change on an electronic invoice, tax return or tax payment
appends one ``TaxAuditLog`` row in the same transaction as the change. Rows
form a SHA-256 hash chain: each hash covers the row's content and the hash
of the row before it.
"""

import hashlib
import json
import logging
from datetime import date, datetime, time

from flask import has_request_context, request

from petwash.domain.exceptions import ResourceNotFoundError
from petwash.domain.models import TaxAuditLog
from petwash.repositories.tax_repository import TaxAuditLogRepository

logger = logging.getLogger(__name__)

HASHED_COLUMNS = (
    "event_type", "entity_type", "entity_id", "action",
    "previous_state", "new_state", "user_id", "notes",
)


def audit_hash(entry: dict, previous_hash: str | None) -> str:
    """SHA-256 over the canonical JSON of ``entry`` chained to ``previous_hash``."""
    payload = json.dumps(
        {**entry, "previous_audit_hash": previous_hash},
        sort_keys=True, separators=(",", ":"), default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _hashed_fields(log: TaxAuditLog) -> dict:
    return {column: getattr(log, column) for column in HASHED_COLUMNS}


class TaxAuditService:
    def __init__(self):
        self._logs = TaxAuditLogRepository()

    def record(
        self,
        entity_type: str,
        entity_id: int,
        event_type: str,
        action: str,
        previous_state: dict | None = None,
        new_state: dict | None = None,
        user_id: str | None = None,
        notes: str | None = None,
    ) -> TaxAuditLog:
        """Append a row to the chain; the caller owns the transaction.

        Inside a request, the client address, user agent and the optional
        ``X-User-Id`` / ``X-User-Email`` headers are captured as well.
        """
        user_email = ip_address = user_agent = None
        if has_request_context():
            user_id = user_id or request.headers.get("X-User-Id")
            user_email = request.headers.get("X-User-Email")
            ip_address = request.remote_addr
            user_agent = request.headers.get("User-Agent")

        fields = {
            "event_type": event_type,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "action": action,
            "previous_state": previous_state,
            "new_state": new_state,
            "user_id": user_id,
            "notes": notes,
        }
        latest = self._logs.latest()
        previous_hash = latest.audit_hash if latest else None
        log = self._logs.create(
            **fields,
            user_email=user_email,
            ip_address=ip_address,
            user_agent=user_agent,
            previous_audit_hash=previous_hash,
            audit_hash=audit_hash(fields, previous_hash),
        )
        logger.info("Audit %s id=%s %s, hash %s", entity_type, entity_id, action, log.audit_hash[:12])
        return log

    def get(self, log_id: int) -> dict:
        log = self._logs.get_by_id(log_id)
        if log is None:
            raise ResourceNotFoundError("TaxAuditLog", log_id)
        return log.to_dict()

    def search(
        self,
        entity_type: str | None = None,
        entity_id: int | None = None,
        user_id: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 100,
    ) -> list[dict]:
        rows = self._logs.search(
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            start=datetime.combine(start_date, time.min) if start_date else None,
            end=datetime.combine(end_date, time.max) if end_date else None,
            limit=limit,
        )
        return [row.to_dict() for row in rows]

    def verify_chain(self) -> dict:
        """Recompute every hash in order and report the first broken link."""
        previous_hash = None
        checked = 0
        for log in self._logs.in_order():
            expected = audit_hash(_hashed_fields(log), previous_hash)
            if log.previous_audit_hash != previous_hash or log.audit_hash != expected:
                logger.error("Tax audit chain broken at log id=%s", log.id)
                return {"valid": False, "checked": checked, "firstInvalidId": log.id}
            previous_hash = log.audit_hash
            checked += 1
        return {"valid": True, "checked": checked, "firstInvalidId": None}
