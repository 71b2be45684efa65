"""Middleware that assigns a request identifier and guards API payload size.

Every incoming HTTP request receives a request identifier. The identifier is
read from the incoming ``X-Request-Id`` header when the client (or a proxy)
provides one, or generated server-side otherwise. It is stored on the
``request`` object and in a context variable so provider adapters and log
records can pick it up without passing it explicitly.

Behavior contract:
- If the incoming request contains the ``X-Request-Id`` header, that value
  is reused as the request id.
- Otherwise a new UUIDv4 is generated.
- The response carries the same id in the ``X-Request-ID`` header.
- One "request handled" log line is emitted per request.
"""

import contextvars
import logging
import os
import uuid

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger("storefront.requests")

REQUEST_ID_CTX = contextvars.ContextVar("request_id", default="-")
MAX_API_BYTES = int(os.getenv("API_MAX_BYTES", str(1 * 1024 * 1024)))


class RequestIdMiddleware(MiddlewareMixin):
    """Django middleware that sets and returns a per-request identifier.

    Attributes:
        HEADER (str): Incoming header name in ``request.META`` casing.
        RESPONSE_HEADER (str): Header added to outgoing responses.
    """

    HEADER = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-ID"

    def process_request(self, request):
        """Attach the request id to ``request`` and to ``REQUEST_ID_CTX``."""
        rid = request.META.get(self.HEADER) or str(uuid.uuid4())
        request.request_id = rid
        REQUEST_ID_CTX.set(rid)

    def process_response(self, request, response):
        """Echo the request id and log the handled request.

        Falls back to the ContextVar value when the request object lost its
        attribute (for example in some error handlers).
        """
        rid = getattr(request, "request_id", REQUEST_ID_CTX.get())
        response[self.RESPONSE_HEADER] = rid
        logger.info(
            "request handled",
            extra={"path": request.path, "method": request.method, "status": response.status_code},
        )
        return response


class ApiSizeLimitMiddleware(MiddlewareMixin):
    """Reject API bodies larger than ``API_MAX_BYTES`` with a 413."""

    def process_request(self, request):
        if not request.path.startswith("/api/"):
            return None
        clen = request.META.get("CONTENT_LENGTH")
        if clen and clen.isdigit() and int(clen) > MAX_API_BYTES:
            logger.warning("payload too large", extra={"path": request.path, "bytes": int(clen)})
            return JsonResponse({"error": "Payload too large."}, status=413)
        return None
