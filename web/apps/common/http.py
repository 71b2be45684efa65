"""Shared helpers for outbound provider calls made with ``httpx``."""

from django.conf import settings

from gateway.middleware import REQUEST_ID_CTX


def request_headers(extra: dict | None = None) -> dict:
    """Build base headers including ``X-Request-ID`` and any extras.

    Reads the request id from the ContextVar populated by the gateway
    middleware so provider-side logs can be correlated with ours.
    """
    headers: dict[str, str] = {}
    rid = REQUEST_ID_CTX.get()
    if rid and rid != "-":
        headers["X-Request-ID"] = rid
    if extra:
        headers.update(extra)
    return headers


def http_timeout() -> float:
    return float(getattr(settings, "HTTP_TIMEOUT_SECS", 15))


def error_detail(resp) -> str:
    """Best-effort provider error text, for logs only."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:300]
    if isinstance(data, dict):
        errors = data.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            return str(errors[0].get("detail") or errors[0].get("message") or errors[0])
        return str(data.get("error_description") or data.get("message") or data.get("error") or data)[:300]
    return str(data)[:300]
