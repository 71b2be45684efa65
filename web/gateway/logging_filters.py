"""Logging filter that stamps log records with the current request id.

The id comes from the ContextVar populated by
``gateway.middleware.RequestIdMiddleware``, so every JSON log line emitted
while serving a request (views, provider adapters, email client) can be
correlated without touching individual log calls.
"""

from logging import Filter, LogRecord

from .middleware import REQUEST_ID_CTX


class RequestIdFilter(Filter):
    """Attach ``request_id`` to log records.

    Records emitted outside a request (management commands, gunicorn
    startup) get a hyphen so formatters can always reference
    ``%(request_id)s``.
    """

    def filter(self, record: LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = REQUEST_ID_CTX.get()
        return True
