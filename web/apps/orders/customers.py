"""Idempotent customer upsert keyed by lower-cased email."""

from django.db import IntegrityError, transaction

from .models import Customer

CONTACT_FIELDS = ("first_name", "last_name", "phone", "address1", "address2", "postal_code", "city", "country")


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _locked(email: str) -> Customer | None:
    return Customer.objects.select_for_update().filter(email=email).first()


def upsert_customer(email: str, **fields) -> Customer:
    """Create or update the customer for ``email``.

    Blank values never overwrite stored ones, so a sparse PayPal payer
    record cannot erase an address captured by an earlier checkout.
    Callers run this inside their own transaction; the insert runs in a
    savepoint so losing a race on the unique email falls back to updating
    the row the other checkout created.
    """
    email = email.strip().lower()
    values = {name: _clean(fields.get(name)) for name in CONTACT_FIELDS}
    customer = _locked(email)
    if customer is None:
        try:
            with transaction.atomic():
                return Customer.objects.create(email=email, **values)
        except IntegrityError:
            customer = _locked(email)
            if customer is None:
                raise

    changed = [name for name, value in values.items() if value and getattr(customer, name) != value]
    for name in changed:
        setattr(customer, name, values[name])
    if changed:
        customer.save(update_fields=[*changed, "updated_at"])
    return customer
