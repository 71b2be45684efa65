"""Real payment providers: Stripe through its SDK, PayPal through ``httpx``.

Both are single-shot: no retries, errors logged with the provider detail
and re-raised as a generic domain error. Credentials are passed in by
``providers.py``; the Stripe key travels with each call instead of being set
on the ``stripe`` module, so two keys never race inside one process.
"""

import logging

import httpx
import stripe
from django.conf import settings

from apps.common.http import error_detail, http_timeout, request_headers
from apps.common.money import format_cents, parse_money_to_cents

from .domain import (
    CardPayment,
    Charge,
    PaymentFailed,
    PaymentReference,
    PaymentReferenceMissing,
    PayPalCapture,
    RefundFailed,
)

logger = logging.getLogger(__name__)

PAYPAL_LIVE_URL = "https://api-m.paypal.com"
PAYPAL_SANDBOX_URL = "https://api-m.sandbox.paypal.com"


def _field(obj, name):
    if obj is None or isinstance(obj, str):
        return None
    return obj.get(name) if hasattr(obj, "get") else getattr(obj, name, None)


class StripeProvider:
    """Stripe PaymentIntents and Refunds."""

    name = "stripe"

    def __init__(self, secret_key: str):
        self.secret_key = secret_key

    def create_charge(self, amount_cents: int, currency: str, metadata: dict) -> Charge:
        """Create a card-only PaymentIntent.

        Raises:
            PaymentFailed: On any SDK error or a missing client secret.
        """
        try:
            intent = stripe.PaymentIntent.create(
                api_key=self.secret_key,
                amount=amount_cents,
                currency=currency.lower(),
                payment_method_types=["card"],
                metadata={k: str(v) for k, v in metadata.items() if isinstance(v, (str, int))},
            )
        except stripe.StripeError as exc:
            logger.warning("stripe create intent failed", extra={"detail": str(exc)})
            raise PaymentFailed()
        if not intent.client_secret:
            logger.warning("stripe intent without client secret", extra={"intent": intent.id})
            raise PaymentFailed("Unable to create the payment.")
        logger.info("stripe intent created", extra={"intent": intent.id, "amount_cents": amount_cents})
        return Charge(intent.id, amount_cents, currency, client_secret=intent.client_secret)

    def retrieve(self, payment_intent_id: str) -> CardPayment:
        """Fetch an intent with its latest charge and risk outcome."""
        try:
            intent = stripe.PaymentIntent.retrieve(
                payment_intent_id, api_key=self.secret_key, expand=["latest_charge"]
            )
        except stripe.StripeError as exc:
            logger.warning("stripe retrieve failed", extra={"intent": payment_intent_id, "detail": str(exc)})
            raise PaymentFailed()

        charge = intent.latest_charge
        charge_id = charge if isinstance(charge, str) else _field(charge, "id")
        outcome = _field(charge, "outcome")
        risk_score = _field(outcome, "risk_score")
        logger.info("stripe intent retrieved", extra={"intent": intent.id, "status": intent.status})
        return CardPayment(
            payment_intent_id=intent.id,
            status=intent.status,
            amount_cents=intent.amount,
            currency=intent.currency,
            charge_id=charge_id,
            risk_level=_field(outcome, "risk_level"),
            risk_score=risk_score if isinstance(risk_score, int) else None,
            outcome_type=_field(outcome, "type"),
            seller_message=_field(outcome, "seller_message"),
        )

    def refund(self, reference: PaymentReference, amount_cents: int, currency: str) -> str:
        """Refund by payment intent when known, otherwise by charge."""
        if not reference.payment_intent_id and not reference.charge_id:
            raise PaymentReferenceMissing("Stripe payment not found for this order.")
        target = (
            {"payment_intent": reference.payment_intent_id}
            if reference.payment_intent_id
            else {"charge": reference.charge_id}
        )
        try:
            refund = stripe.Refund.create(api_key=self.secret_key, amount=amount_cents, **target)
        except stripe.StripeError as exc:
            logger.warning("stripe refund failed", extra={"detail": str(exc), **target})
            raise RefundFailed()
        logger.info("stripe refund created", extra={"refund": refund.id, "amount_cents": amount_cents})
        return refund.id


class PayPalProvider:
    """PayPal Orders v2 and capture refunds over REST."""

    name = "paypal"

    def __init__(self, client_id: str, client_secret: str, base_url: str | None = None, timeout: float | None = None):
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = (base_url or paypal_base_url()).rstrip("/")
        self.timeout = timeout or http_timeout()

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=self.timeout)

    def _token(self, client: httpx.Client, error_cls) -> str:
        resp = client.post(
            "/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.client_secret),
            headers=request_headers(),
        )
        token = None
        if resp.status_code < 300:
            try:
                token = resp.json().get("access_token")
            except ValueError:
                token = None
        if not token:
            logger.warning("paypal token failed", extra={"status": resp.status_code, "detail": error_detail(resp)})
            raise error_cls("Unable to authenticate with PayPal.")
        return token

    def _post(self, path: str, payload: dict | None, error_cls, message: str) -> dict:
        try:
            with self._client() as client:
                token = self._token(client, error_cls)
                resp = client.post(
                    path, json=payload or {}, headers=request_headers({"Authorization": f"Bearer {token}"})
                )
        except httpx.HTTPError as exc:
            logger.warning("paypal call failed", extra={"path": path, "detail": str(exc)})
            raise error_cls(message)
        if resp.status_code >= 300:
            logger.warning(
                "paypal call rejected",
                extra={"path": path, "status": resp.status_code, "detail": error_detail(resp)},
            )
            raise error_cls(message)
        return resp.json()

    def create_charge(self, amount_cents: int, currency: str, metadata: dict) -> Charge:
        """Create a CAPTURE-intent order with an item breakdown.

        ``metadata`` carries ``subtotal_cents``, ``shipping_cents``,
        ``discount_cents`` and ``items`` (name, qty, unit_cents).
        """
        code = currency.upper()

        def money(cents):
            return {"currency_code": code, "value": format_cents(cents)}

        breakdown = {
            "item_total": money(metadata.get("subtotal_cents", amount_cents)),
            "shipping": money(metadata.get("shipping_cents", 0)),
        }
        if metadata.get("discount_cents"):
            breakdown["discount"] = money(metadata["discount_cents"])
        unit = {
            "amount": {**money(amount_cents), "breakdown": breakdown},
            "items": [
                {"name": item["name"], "quantity": str(item["qty"]), "unit_amount": money(item["unit_cents"])}
                for item in metadata.get("items", [])
            ],
        }
        data = self._post(
            "/v2/checkout/orders",
            {"intent": "CAPTURE", "purchase_units": [unit]},
            PaymentFailed,
            "Unable to create the PayPal order.",
        )
        if not data.get("id"):
            raise PaymentFailed("Unable to create the PayPal order.")
        logger.info("paypal order created", extra={"paypal_order": data["id"], "amount_cents": amount_cents})
        return Charge(data["id"], amount_cents, code)

    def capture(self, order_id: str) -> PayPalCapture:
        data = self._post(f"/v2/checkout/orders/{order_id}/capture", None, PaymentFailed, "PayPal capture failed.")
        units = data.get("purchase_units") or [{}]
        captures = ((units[0].get("payments") or {}).get("captures")) or [{}]
        amount = captures[0].get("amount") or {}
        payer = data.get("payer") or {}
        name = payer.get("name") or {}
        logger.info("paypal order captured", extra={"paypal_order": order_id, "status": data.get("status")})
        return PayPalCapture(
            order_id=order_id,
            status=str(data.get("status") or ""),
            capture_id=captures[0].get("id"),
            amount_cents=parse_money_to_cents(amount.get("value")),
            currency=amount.get("currency_code"),
            payer={
                "email": payer.get("email_address") or "",
                "first_name": name.get("given_name") or "",
                "last_name": name.get("surname") or "",
            },
        )

    def refund(self, reference: PaymentReference, amount_cents: int, currency: str) -> str:
        if not reference.capture_id:
            raise PaymentReferenceMissing("PayPal payment not found for this order.")
        data = self._post(
            f"/v2/payments/captures/{reference.capture_id}/refund",
            {"amount": {"value": format_cents(amount_cents), "currency_code": currency.upper()}},
            RefundFailed,
            "PayPal refund failed.",
        )
        logger.info("paypal refund created", extra={"refund": data.get("id"), "amount_cents": amount_cents})
        return str(data.get("id") or "")


def paypal_base_url() -> str:
    env = (getattr(settings, "PAYPAL_ENV", "") or "").lower()
    return PAYPAL_LIVE_URL if env in {"live", "production"} else PAYPAL_SANDBOX_URL
