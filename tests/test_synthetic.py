"""Tests for deterministic synthetic values."""

from datetime import date, timedelta

import pytest

from eventdesk.services import synthetic
from eventdesk.services.synthetic import (
    INT32_MAX,
    UtilizationVariant,
    normalized_hash,
    occupancy_or_synthetic,
    seed_for,
    string_hash,
    synthetic_utilization,
    synthetic_value,
    to_int32,
    utilization_or_synthetic,
)
from tests.helpers import NOW

DAYS = [date(2025, 1, 1) + timedelta(days=i) for i in range(180)]


class TestStringHash:
    """Tests for the 32-bit rolling hash."""

    def test_known_values(self):
        assert string_hash("") == 0
        assert string_hash("a") == 97
        assert string_hash("hello") == 99162322

    def test_collision_pair(self):
        """Given 'Aa' and 'BB', both hash to 2112."""
        assert string_hash("Aa") == string_hash("BB") == 2112

    def test_hashes_utf16_code_units(self):
        """Given a character outside the BMP, both surrogates are hashed."""
        assert string_hash("\U0001F600") == 0xD83D * 31 + 0xDE00

    def test_wraps_to_signed_32_bit(self):
        value = string_hash("utilization-2025-03-12" * 20)
        assert -(2**31) <= value <= INT32_MAX

    def test_to_int32(self):
        assert to_int32(2**31) == -(2**31)
        assert to_int32(2**32 + 5) == 5
        assert to_int32(-1) == -1

    def test_seed_format(self):
        assert seed_for("utilization", date(2025, 3, 2)) == "utilization-2025-03-02"


class TestNormalizedHash:
    def test_within_unit_interval(self):
        for day in DAYS:
            assert 0.0 <= normalized_hash(seed_for("utilization", day)) <= 1.0

    def test_int32_min_is_clamped(self, monkeypatch):
        """Given a hash of -2**31, the normalized value stays at 1."""
        monkeypatch.setattr(synthetic, "string_hash", lambda text: -(2**31))
        assert normalized_hash("anything") == 1.0


class TestSyntheticValue:
    """Tests for determinism and bounds."""

    def test_deterministic(self):
        first = synthetic_value("Jazz Night", date(2025, 3, 1), 10, 85)
        second = synthetic_value("Jazz Night", date(2025, 3, 1), 10, 85)
        assert first == second

    def test_varies_with_seed_and_date(self):
        values = {synthetic_value("Jazz Night", day, 10, 85) for day in DAYS[:30]}
        assert len(values) > 20
        assert synthetic_value("Jazz Night", DAYS[0], 10, 85) != synthetic_value(
            "Rock Night", DAYS[0], 10, 85
        )

    def test_linear_mapping_without_context(self, monkeypatch):
        monkeypatch.setattr(synthetic, "string_hash", lambda text: INT32_MAX)
        assert synthetic_value("x", DAYS[0], 10, 85) == 85
        monkeypatch.setattr(synthetic, "string_hash", lambda text: 0)
        assert synthetic_value("x", DAYS[0], 10, 85) == 10

    def test_context_is_clamped(self, monkeypatch):
        """Given the extreme hash, biased values still respect the bounds."""
        monkeypatch.setattr(synthetic, "string_hash", lambda text: -(2**31))
        for day in DAYS:
            value = synthetic_utilization(day, NOW, UtilizationVariant.RECORDED)
            assert 30.0 <= value <= 79.0


class TestOccupancy:
    def test_real_value_is_kept(self):
        assert occupancy_or_synthetic(42.5, "Jazz Night", date(2025, 3, 1)) == 42.5

    def test_zero_occupancy_is_backfilled(self):
        """Given an event with 230 seats and none booked, a stable value in [10, 85]."""
        value = occupancy_or_synthetic(0.0, "Gala Dinner", date(2025, 3, 20))
        assert 10.0 <= value <= 85.0
        assert value == occupancy_or_synthetic(0.0, "Gala Dinner", date(2025, 3, 20))

    def test_bounds_over_many_events(self):
        for index, day in enumerate(DAYS):
            assert 10.0 <= occupancy_or_synthetic(0, f"Event {index}", day) <= 85.0


class TestUtilization:
    """Tests for utilization backfill rules."""

    def test_past_non_zero_is_never_overridden(self):
        value, synthesized = utilization_or_synthetic(55.0, date(2025, 3, 1), NOW)
        assert (value, synthesized) == (55.0, False)

    def test_today_counts_as_past(self):
        value, synthesized = utilization_or_synthetic(12.5, NOW.date(), NOW)
        assert (value, synthesized) == (12.5, False)

    def test_past_zero_is_backfilled(self):
        value, synthesized = utilization_or_synthetic(0.0, date(2025, 3, 1), NOW)
        assert synthesized
        assert 30.0 <= value <= 79.0

    def test_future_day_is_projected(self):
        value, synthesized = utilization_or_synthetic(55.0, date(2025, 3, 20), NOW)
        assert synthesized
        assert 30.0 <= value <= 79.0

    @pytest.mark.parametrize(
        "variant, low, high",
        [
            (UtilizationVariant.RECORDED, 30.0, 79.0),
            (UtilizationVariant.FORECAST, 20.0, 75.0),
        ],
    )
    def test_variant_bounds(self, variant, low, high):
        for day in DAYS:
            assert low <= synthetic_utilization(day, NOW, variant) <= high

    def test_proximity_boost(self):
        context = UtilizationVariant.RECORDED.context(NOW)
        assert context.proximity_for(NOW.date()) == 0.0
        assert context.proximity_for(NOW.date() - timedelta(days=3)) == 0.0
        assert context.proximity_for(NOW.date() + timedelta(days=31)) == 0.0
        near = context.proximity_for(NOW.date() + timedelta(days=1))
        far = context.proximity_for(NOW.date() + timedelta(days=20))
        assert near > far > 0.0

    def test_future_base_is_higher(self):
        context = UtilizationVariant.RECORDED.context(NOW)
        # Both Thursdays
        assert context.base_for(date(2025, 3, 20)) > context.base_for(date(2025, 3, 6))
