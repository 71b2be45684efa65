"""Unit tests for the discount evaluator.

A dict-backed stub lookup stands in for the ORM so every branch can be
driven deterministically.
"""

import pytest

from apps.discounts.domain import (
    Discount,
    DiscountEvaluator,
    DiscountNotFound,
    DiscountType,
    InvalidDiscountAmount,
    InvalidDiscountPercent,
)


class StubLookup:
    """Lookup over a fixed set of active discounts."""

    def __init__(self, *discounts):
        self.rows = {d.code: d for d in discounts}
        self.calls = []

    def find_active(self, code):
        self.calls.append(code)
        return self.rows.get(code)


SAVE10 = Discount(id=1, code="SAVE10", discount_type=DiscountType.PERCENT, percent_off=10)
FIVE = Discount(id=2, code="FIVE", discount_type=DiscountType.FIXED, amount_cents=500)


def evaluator(*discounts):
    return DiscountEvaluator(StubLookup(*discounts or (SAVE10, FIVE)))


def test_code_is_trimmed_and_uppercased():
    lookup = StubLookup(SAVE10)
    DiscountEvaluator(lookup).evaluate("  save10 ", 1000)
    assert lookup.calls == ["SAVE10"]


def test_percent_discount_rounds_half_up():
    # 5490 * 10% = 549
    assert evaluator().evaluate("SAVE10", 5490).discount_cents == 549
    # 1005 * 10% = 100.5 -> 101
    assert evaluator().evaluate("SAVE10", 1005).discount_cents == 101


def test_fixed_discount_is_clamped_to_base():
    assert evaluator().evaluate("FIVE", 2000).discount_cents == 500
    assert evaluator().evaluate("FIVE", 300).discount_cents == 300


def test_negative_base_counts_as_zero():
    assert evaluator().evaluate("FIVE", -50).discount_cents == 0
    assert evaluator().evaluate("SAVE10", -50).discount_cents == 0


@pytest.mark.parametrize("base", [0, 1, 99, 5490, 10_000_000])
@pytest.mark.parametrize(
    "discount",
    [
        SAVE10,
        FIVE,
        Discount(id=3, code="ALL", discount_type=DiscountType.PERCENT, percent_off=100),
        Discount(id=4, code="HUGE", discount_type=DiscountType.FIXED, amount_cents=10**9),
    ],
)
def test_result_always_within_zero_and_base(discount, base):
    cents = DiscountEvaluator(StubLookup(discount)).evaluate(discount.code, base).discount_cents
    assert 0 <= cents <= base


@pytest.mark.parametrize("code", [None, "", "   ", "UNKNOWN"])
def test_unknown_code_raises_not_found(code):
    with pytest.raises(DiscountNotFound) as e:
        evaluator().evaluate(code, 1000)
    assert e.value.status_code == 404


@pytest.mark.parametrize("percent", [0, -5, 101, None])
def test_invalid_percent(percent):
    bad = Discount(id=9, code="BAD", discount_type=DiscountType.PERCENT, percent_off=percent)
    with pytest.raises(InvalidDiscountPercent):
        DiscountEvaluator(StubLookup(bad)).evaluate("BAD", 1000)


@pytest.mark.parametrize("amount", [0, -1, None])
def test_invalid_fixed_amount(amount):
    bad = Discount(id=9, code="BAD", discount_type=DiscountType.FIXED, amount_cents=amount)
    with pytest.raises(InvalidDiscountAmount):
        DiscountEvaluator(StubLookup(bad)).evaluate("BAD", 1000)


def test_validate_returns_record():
    assert evaluator().validate("five") == FIVE
