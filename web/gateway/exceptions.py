"""DRF exception handler rendering every failure as ``{"error": ...}``.

Mapping:
- ``StoreError`` subclasses use their own ``status_code`` and ``message``.
- pydantic ``ValidationError`` (DTO validation in views) becomes a 400 with
  the first error message.
- DRF ``APIException`` keeps its status (401/403/404/405/429...).
- Anything else is logged with its traceback and rendered as a 500.
"""

import logging

from django.http import Http404
from pydantic import ValidationError
from rest_framework import exceptions, status
from rest_framework.response import Response

from apps.common.errors import StoreError

logger = logging.getLogger(__name__)


def _first_validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid input."
    first = errors[0]
    msg = str(first.get("msg", "Invalid input."))
    if first.get("type") == "value_error":
        # validators raise ValueError with a complete user-facing sentence
        return msg.removeprefix("Value error, ")
    loc = ".".join(str(p) for p in first.get("loc", ()))
    return f"{loc}: {msg}" if loc else msg


def _detail_text(detail) -> str:
    if isinstance(detail, list) and detail:
        return _detail_text(detail[0])
    if isinstance(detail, dict) and detail:
        return _detail_text(next(iter(detail.values())))
    return str(detail)


def api_exception_handler(exc, context):
    """Convert ``exc`` into a JSON error response.

    Args:
        exc: The exception raised by the view.
        context: DRF handler context (view, request, args).

    Returns:
        Response: Always a response, nothing propagates uncaught.
    """
    if isinstance(exc, StoreError):
        if exc.status_code >= 500:
            logger.error("request failed", extra={"error": exc.message, "kind": type(exc).__name__})
        return Response({"error": exc.message}, status=exc.status_code)

    if isinstance(exc, ValidationError):
        return Response({"error": _first_validation_message(exc)}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, Http404):
        return Response({"error": "Not found."}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, exceptions.ParseError):
        return Response({"error": "Invalid JSON body."}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, exceptions.APIException):
        headers = {}
        if getattr(exc, "auth_header", None):
            headers["WWW-Authenticate"] = exc.auth_header
        if getattr(exc, "wait", None):
            headers["Retry-After"] = str(int(exc.wait))
        return Response({"error": _detail_text(exc.detail)}, status=exc.status_code, headers=headers)

    logger.exception("unhandled error", extra={"view": type(context.get("view")).__name__})
    return Response({"error": "Internal error."}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
