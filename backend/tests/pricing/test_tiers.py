import random
from types import SimpleNamespace

import pytest

from screenprint.pricing.exceptions import ConfigurationGapException, InvalidPricingTierException, TierOverlapException
from screenprint.pricing.tiers import (
    find_tier_for_quantity,
    lowest_tier,
    ranges_overlap,
    check_no_overlap,
    validate_tier_range,
    find_coverage_gaps,
)


def tier(name, min_qty, max_qty):
    return SimpleNamespace(name=name, min_qty=min_qty, max_qty=max_qty)


STANDARD_TIERS = [
    tier("144+", 144, None),
    tier("24-47", 24, 47),
    tier("72-143", 72, 143),
    tier("48-71", 48, 71),
]


@pytest.mark.parametrize("quantity, expected", [
    (24, "24-47"),
    (47, "24-47"),
    (48, "48-71"),
    (71, "48-71"),
    (72, "72-143"),
    (143, "72-143"),
    (144, "144+"),
    (10_000, "144+"),
])
def test_find_tier_bounds_are_inclusive(quantity, expected):
    assert find_tier_for_quantity(STANDARD_TIERS, quantity).name == expected


def test_quantity_below_every_tier_is_a_configuration_gap():
    with pytest.raises(ConfigurationGapException) as exc_info:
        find_tier_for_quantity(STANDARD_TIERS, 10)
    assert exc_info.value.quantity == 10


def test_gap_between_tiers_is_not_filled_with_nearest_tier():
    tiers = [tier("24-47", 24, 47), tier("60+", 60, None)]
    with pytest.raises(ConfigurationGapException):
        find_tier_for_quantity(tiers, 50)


def test_overlapping_tiers_are_rejected_at_lookup():
    tiers = [tier("a", 24, 50), tier("b", 48, 100)]
    with pytest.raises(ConfigurationGapException):
        find_tier_for_quantity(tiers, 49)


def test_every_quantity_maps_to_exactly_one_tier_for_random_partitions():
    rng = random.Random(1234)
    for _ in range(50):
        bounds = sorted(rng.sample(range(2, 500), rng.randint(1, 6)))
        tiers = []
        start = 1
        for upper in bounds:
            tiers.append(tier(f"{start}-{upper - 1}", start, upper - 1))
            start = upper
        tiers.append(tier(f"{start}+", start, None))
        rng.shuffle(tiers)

        assert find_coverage_gaps(tiers) == []
        for quantity in rng.sample(range(1, 1000), 40):
            found = find_tier_for_quantity(tiers, quantity)
            assert found.min_qty <= quantity
            assert found.max_qty is None or quantity <= found.max_qty


def test_lowest_tier():
    assert lowest_tier(STANDARD_TIERS).name == "24-47"
    with pytest.raises(ConfigurationGapException):
        lowest_tier([])


def test_ranges_overlap():
    assert ranges_overlap(24, 47, 47, 71)
    assert not ranges_overlap(24, 47, 48, 71)
    assert ranges_overlap(144, None, 200, 300)
    assert not ranges_overlap(24, 47, 144, None)


def test_check_no_overlap_names_the_conflicting_tier():
    with pytest.raises(TierOverlapException) as exc_info:
        check_no_overlap(40, 60, STANDARD_TIERS)
    assert exc_info.value.tier_name == "24-47"
    check_no_overlap(1, 23, STANDARD_TIERS)


def test_validate_tier_range():
    validate_tier_range(24, 47)
    validate_tier_range(144, None)
    with pytest.raises(InvalidPricingTierException):
        validate_tier_range(50, 50)
    with pytest.raises(InvalidPricingTierException):
        validate_tier_range(-1, 10)


def test_find_coverage_gaps_reports_problems():
    assert find_coverage_gaps(STANDARD_TIERS) == []
    problems = find_coverage_gaps([tier("a", 24, 47), tier("b", 50, 99)])
    assert any("47" in p and "50" in p for p in problems)
    assert any("99" in p for p in problems)
