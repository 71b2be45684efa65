"""Domain error taxonomy shared by every app.

Each error carries the HTTP status it maps to and a user-facing message.
Views let these propagate; ``gateway.exceptions.api_exception_handler``
renders them as ``{"error": message}``. Provider internals never reach the
message: adapters log the details and raise with a generic text.
"""


class StoreError(Exception):
    """Base class for errors that end a request with a JSON error body."""

    status_code = 400
    default_message = "Invalid request."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(StoreError):
    status_code = 400
    default_message = "Invalid input."


class NotFound(StoreError):
    status_code = 404
    default_message = "Not found."


class UpstreamError(StoreError):
    """A third-party provider (Stripe, PayPal, Sendcloud, Brevo) failed."""

    status_code = 502
    default_message = "Upstream provider error."


class ConfigurationError(StoreError):
    """Missing or unusable configuration (keys, credentials)."""

    status_code = 500
    default_message = "Server configuration error."
