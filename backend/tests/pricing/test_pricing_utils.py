import random
from decimal import Decimal

import pytest

from screenprint.pricing.utils import round_cents, split_deposit, to_decimal


def test_to_decimal_avoids_float_artifacts():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("12.50") == Decimal("12.50")


def test_round_cents_half_up():
    assert round_cents(Decimal("2.345")) == Decimal("2.35")
    assert round_cents(Decimal("2.344")) == Decimal("2.34")


@pytest.mark.parametrize("total, percentage, deposit", [
    (Decimal("590"), Decimal("50"), Decimal("295.00")),
    (Decimal("100.01"), Decimal("50"), Decimal("50.01")),
    (Decimal("333.33"), Decimal("33.33"), Decimal("111.10")),
    (Decimal("482"), Decimal("0"), Decimal("0.00")),
])
def test_split_deposit_sums_to_total(total, percentage, deposit):
    got_deposit, balance = split_deposit(total, percentage)
    assert got_deposit == deposit
    assert got_deposit + balance == total


def test_deposit_plus_balance_equals_total_for_random_amounts():
    rng = random.Random(2024)
    for _ in range(500):
        total = Decimal(rng.randint(0, 5_000_000)) / 100
        percentage = Decimal(rng.randint(0, 10_000)) / 100
        deposit, balance = split_deposit(total, percentage)
        assert deposit + balance == total
        assert Decimal(0) <= deposit <= total
        assert deposit == round_cents(deposit)


@pytest.mark.parametrize("percentage", [Decimal("0"), Decimal("100")])
def test_deposit_bounds(percentage):
    deposit, balance = split_deposit(Decimal("1234.56"), percentage)
    assert deposit == (Decimal("1234.56") if percentage else Decimal("0.00"))
    assert deposit + balance == Decimal("1234.56")
