from decimal import Decimal

import pytest

from bistro.pricing import calculate_totals, format_cents, to_cents


def test_totals_round_each_charge_half_up():
    # 16.50 + 12.50 + 3 x 4.50 = 42.50
    breakdown = calculate_totals([(1650, 1), (1250, 1), (450, 3)])

    assert breakdown.subtotal_cents == 4250
    assert breakdown.tax_cents == 351  # 3.50625
    assert breakdown.service_charge_cents == 213  # 2.125
    assert breakdown.total_cents == 4814


def test_total_is_sum_of_rounded_parts():
    breakdown = calculate_totals([(1650, 2)])

    assert breakdown.subtotal_cents == 3300
    assert breakdown.tax_cents == 272  # 2.7225
    assert breakdown.service_charge_cents == 165
    assert breakdown.total_cents == (
        breakdown.subtotal_cents + breakdown.tax_cents + breakdown.service_charge_cents
    )


def test_empty_order_is_all_zero():
    breakdown = calculate_totals([])

    assert breakdown.subtotal_cents == 0
    assert breakdown.tax_cents == 0
    assert breakdown.service_charge_cents == 0
    assert breakdown.total_cents == 0


def test_custom_rates():
    breakdown = calculate_totals([(1000, 1)], tax_rate=Decimal("0.10"), service_charge_rate=Decimal("0"))

    assert breakdown.tax_cents == 100
    assert breakdown.service_charge_cents == 0
    assert breakdown.total_cents == 1100


@pytest.mark.parametrize(
    "amount, cents",
    [("16.50", 1650), (Decimal("16.5"), 1650), (16, 1600), ("0", 0), (4.5, 450)],
)
def test_to_cents(amount, cents):
    assert to_cents(amount) == cents


@pytest.mark.parametrize("amount", ["-1.00", "12.345", "abc", "NaN", "Infinity"])
def test_to_cents_rejects_bad_amounts(amount):
    with pytest.raises(ValueError):
        to_cents(amount)


def test_format_cents():
    assert format_cents(1650) == "16.50"
    assert format_cents(0) == "0.00"
    assert format_cents(5) == "0.05"
    assert format_cents(123456) == "1234.56"
