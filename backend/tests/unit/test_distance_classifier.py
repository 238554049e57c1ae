"""
Unit tests for the distance classifier.

WHAT: Test kilometer rounding and proximity bands
WHY: Band edges decide what the decision-maker sees
HOW: Boundary values in meters and a sweep over whole kilometers
"""

import pytest

from offerdesk.services.distance_classifier import (
    ProximityCategory,
    classify,
    meters_to_km,
)


@pytest.mark.unit
class TestMetersToKm:
    """Test half-up rounding to whole kilometers."""

    @pytest.mark.parametrize("meters,expected_km", [
        (0, 0),
        (499, 0),
        (500, 1),
        (45000, 45),
        (50499, 50),
        (50500, 51),
        (250499.9, 250),
        (500001, 500),
    ])
    def test_rounding(self, meters, expected_km):
        assert meters_to_km(meters) == expected_km


@pytest.mark.unit
class TestClassify:
    """Test band lookup."""

    @pytest.mark.parametrize("meters,category,label", [
        (50000, ProximityCategory.NEARBY, "Nearby"),
        (51000, ProximityCategory.REGIONAL, "Regional"),
        (250000, ProximityCategory.REGIONAL, "Regional"),
        (251000, ProximityCategory.LONG_DISTANCE, "Long distance"),
        (500000, ProximityCategory.LONG_DISTANCE, "Long distance"),
        (501000, ProximityCategory.OUT_OF_RANGE, "Out of range"),
    ])
    def test_band_edges(self, meters, category, label):
        proximity = classify(meters)
        assert proximity.category is category
        assert proximity.label == label

    def test_nearby_example(self):
        proximity = classify(45000)
        assert proximity.category is ProximityCategory.NEARBY
        assert proximity.label == "Nearby"
        assert proximity.display == "45km Nearby"

    def test_zero_distance_is_nearby(self):
        assert classify(0).category is ProximityCategory.NEARBY

    def test_rounding_happens_before_banding(self):
        assert classify(50499).category is ProximityCategory.NEARBY
        assert classify(50500).category is ProximityCategory.REGIONAL
        # 500.001 km rounds to 500 km, still inside the long-distance band
        assert classify(500001).category is ProximityCategory.LONG_DISTANCE
        assert classify(500500).category is ProximityCategory.OUT_OF_RANGE

    def test_far_distance(self):
        proximity = classify(1_234_000)
        assert proximity.category is ProximityCategory.OUT_OF_RANGE
        assert proximity.display == "1234km Out of range"

    def test_bands_partition_kilometers(self):
        """Every whole km maps to one category, and categories never go back."""
        order = list(ProximityCategory)
        previous = 0
        for km in range(0, 1001):
            category = classify(km * 1000).category
            index = order.index(category)
            assert index >= previous
            previous = index

            expected = (
                ProximityCategory.NEARBY if km <= 50 else
                ProximityCategory.REGIONAL if km <= 250 else
                ProximityCategory.LONG_DISTANCE if km <= 500 else
                ProximityCategory.OUT_OF_RANGE
            )
            assert category is expected

    @pytest.mark.parametrize("bad", [None, -1, -0.5, float("nan"), float("inf")])
    def test_invalid_input_raises(self, bad):
        with pytest.raises(ValueError):
            classify(bad)
