"""Admin API-key authentication for the back-office namespaces.

Set ADMIN_API_KEY to enable it; leave it unset to disable auth (a warning is
logged at startup).
"""

import hmac
import logging
from functools import wraps

from flask import current_app, request

from petwash.domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def _presented_key() -> str | None:
    key = request.headers.get("X-Admin-Key")
    if key:
        return key
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return None


def require_admin(func):
    """Reject the request with 401 unless it carries the admin key.

    Accepts ``X-Admin-Key: <key>`` or ``Authorization: Bearer <key>``.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        expected = current_app.config.get("ADMIN_API_KEY")
        if expected:
            presented = _presented_key()
            if presented is None or not hmac.compare_digest(presented.encode(), expected.encode()):
                logger.warning("Rejected admin request to %s from %s", request.path, request.remote_addr)
                raise AuthenticationError("Invalid or missing admin API key")
        return func(*args, **kwargs)

    return wrapper
