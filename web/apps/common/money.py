"""Money helpers: every amount is handled as integer minor units (cents).

Decimal strings only exist at the edges: admin input ("4,90"), persisted
shipping prices, and provider payloads (PayPal, Sendcloud) that want a
two-decimal fixed string.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, Overflow

CENT = Decimal("0.01")


def _to_decimal(value) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        raw = value.strip().replace(",", ".", 1)
        if not raw:
            return None
        try:
            amount = Decimal(raw)
        except InvalidOperation:
            return None
    else:
        return None
    if not amount.is_finite():
        return None
    return amount


def parse_money_to_cents(value) -> int | None:
    """Convert a user-supplied amount to integer cents.

    Accepts strings with a dot or comma decimal separator and plain numbers.
    Returns ``None`` for anything unparseable, non-finite or negative; it
    never raises, callers decide whether ``None`` is an error.

    >>> parse_money_to_cents("12,50"), parse_money_to_cents("12.50")
    (1250, 1250)
    """
    amount = _to_decimal(value)
    if amount is None or amount < 0:
        return None
    try:
        return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except (InvalidOperation, Overflow):
        # more digits than the decimal context can hold
        return None


def parse_positive_money_to_cents(value) -> int | None:
    """Like ``parse_money_to_cents`` but zero is rejected too."""
    cents = parse_money_to_cents(value)
    if cents is None or cents <= 0:
        return None
    return cents


def normalize_decimal_string(value) -> str | None:
    """Canonical two-decimal string for persisted prices ("4,9" -> "4.90")."""
    cents = parse_money_to_cents(value)
    if cents is None:
        return None
    return format_cents(cents)


def format_cents(cents: int) -> str:
    """Two-decimal fixed string for provider payloads and emails."""
    return str((Decimal(int(cents)) / 100).quantize(CENT, rounding=ROUND_HALF_UP))


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
