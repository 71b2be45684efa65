"""Liveness/readiness endpoint used by the load balancer and deploy checks."""

import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse

from apps.site_settings.encryption import load_key

logger = logging.getLogger(__name__)


def _database_ok() -> bool:
    try:
        with connection.cursor() as cur:
            cur.execute("SELECT 1;")
    except DatabaseError:
        logger.warning("health check: database unreachable", exc_info=True)
        return False
    return True


def health_view(_request):
    """Report database reachability and encryption-key presence.

    Returns 200 when both are fine, 503 otherwise.
    """
    db_ok = _database_ok()
    encryption_ok = load_key() is not None
    ok = db_ok and encryption_ok
    return JsonResponse(
        {"ok": ok, "components": {"db": {"ok": db_ok}, "encryption_key": {"ok": encryption_ok}}},
        status=200 if ok else 503,
    )
