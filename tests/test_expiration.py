"""Tests for expiration classification and tier aggregates."""

import itertools
from dataclasses import dataclass
from datetime import date, datetime, timezone

import pytest

from udi_inventory.core.expiration import (
    ExpirationThresholds,
    InvalidExpirationDateError,
    classify_expiration,
    count_by_tier,
    days_until_expiration,
    expiry_warnings,
    partition_by_tier,
    sort_by_recency,
    tier_for_days,
)
from udi_inventory.core.models import ExpirationTier


@dataclass
class Item:
    name: str
    expiration_date: str
    added_at: datetime


NEW_YEAR = datetime(2024, 1, 1)


class TestClassifyBoundaries:
    """Tier boundaries relative to 2024-01-01."""

    @pytest.mark.parametrize(
        "expiration_date, expected_days, expected_tier",
        [
            ("2023-12-31", -1, ExpirationTier.EXPIRED),
            ("2024-01-01", 0, ExpirationTier.CRITICAL),
            ("2024-01-08", 7, ExpirationTier.CRITICAL),
            ("2024-01-09", 8, ExpirationTier.WARNING),
            ("2024-01-31", 30, ExpirationTier.WARNING),
            ("2024-02-01", 31, ExpirationTier.GOOD),
        ],
    )
    def test_boundaries(self, expiration_date, expected_days, expected_tier):
        assert days_until_expiration(expiration_date, NEW_YEAR) == expected_days
        assert classify_expiration(expiration_date, NEW_YEAR) == expected_tier

    def test_aware_now_reads_date_as_utc_midnight(self, now):
        assert classify_expiration("2024-01-08", now) == ExpirationTier.CRITICAL
        assert classify_expiration("2024-01-09", now) == ExpirationTier.WARNING

    def test_accepts_date_objects(self):
        assert classify_expiration(date(2024, 1, 31), NEW_YEAR) == ExpirationTier.WARNING

    def test_same_inputs_same_tier(self):
        results = {classify_expiration("2024-01-08", NEW_YEAR) for _ in range(5)}
        assert results == {ExpirationTier.CRITICAL}


class TestTimeOfDay:
    """``now`` is not normalized to midnight."""

    def test_afternoon_rounds_partial_day_up(self):
        afternoon = datetime(2024, 1, 1, 12, 0)
        # 7.5 days away
        assert days_until_expiration("2024-01-09", afternoon) == 8
        assert classify_expiration("2024-01-09", afternoon) == ExpirationTier.WARNING

    def test_same_day_afternoon_is_still_critical(self):
        afternoon = datetime(2024, 1, 1, 12, 0)
        assert days_until_expiration("2024-01-01", afternoon) == 0
        assert classify_expiration("2024-01-01", afternoon) == ExpirationTier.CRITICAL

    def test_one_second_past_midnight_rounds_up(self):
        just_after = datetime(2024, 1, 1, 0, 0, 1)
        assert days_until_expiration("2024-01-09", just_after) == 8
        assert days_until_expiration("2024-01-08", just_after) == 7


class TestInvalidDates:
    """Unparseable dates are a precondition violation."""

    @pytest.mark.parametrize("value", ["", "   ", "not-a-date", "2024-13-45"])
    def test_raises(self, value):
        with pytest.raises(InvalidExpirationDateError):
            classify_expiration(value, NEW_YEAR)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            days_until_expiration("soon", NEW_YEAR)


class TestThresholds:
    """Configurable tier thresholds."""

    def test_defaults(self):
        assert ExpirationThresholds() == ExpirationThresholds(critical_days=7, warning_days=30)

    def test_custom_thresholds(self):
        thresholds = ExpirationThresholds(critical_days=3, warning_days=10)
        assert tier_for_days(3, thresholds) == ExpirationTier.CRITICAL
        assert tier_for_days(4, thresholds) == ExpirationTier.WARNING
        assert tier_for_days(11, thresholds) == ExpirationTier.GOOD

    @pytest.mark.parametrize("critical, warning", [(7, 7), (30, 7), (-1, 30)])
    def test_rejects_bad_order(self, critical, warning):
        with pytest.raises(ValueError):
            ExpirationThresholds(critical_days=critical, warning_days=warning)


class TestTierOrder:
    """ExpirationTier is ordered worst to best."""

    def test_order(self):
        assert ExpirationTier.EXPIRED < ExpirationTier.CRITICAL < ExpirationTier.WARNING < ExpirationTier.GOOD

    def test_sorting_and_max(self):
        shuffled = [ExpirationTier.GOOD, ExpirationTier.EXPIRED, ExpirationTier.WARNING, ExpirationTier.CRITICAL]
        assert sorted(shuffled) == list(ExpirationTier)
        assert max(shuffled) == ExpirationTier.GOOD
        assert ExpirationTier.WARNING >= ExpirationTier.WARNING

    def test_labels(self):
        assert ExpirationTier.EXPIRED.label == "Expired"
        assert ExpirationTier.CRITICAL.label == "Critical (<7d)"
        assert ExpirationTier.WARNING.label == "Warning (7-30d)"
        assert ExpirationTier.GOOD.label == "Good (>30d)"


class TestExpiryWarnings:
    """Warnings shown during draft review."""

    def test_expired(self):
        assert expiry_warnings("2023-12-31", NEW_YEAR) == ["This item is already EXPIRED."]

    def test_expiring_soon(self):
        assert expiry_warnings("2024-01-20", NEW_YEAR) == ["Expiring soon (19 days remaining)."]

    def test_thirty_days_is_not_soon(self):
        assert expiry_warnings("2024-01-31", NEW_YEAR) == []

    def test_missing_date(self):
        assert expiry_warnings("", NEW_YEAR) == []

    def test_invalid_date(self):
        assert expiry_warnings("2025-02-31", NEW_YEAR) == ["Expiration date is not a valid date."]


@pytest.fixture
def items():
    return [
        Item("a", "2024-03-01", datetime(2023, 12, 1)),
        Item("b", "2023-12-01", datetime(2023, 12, 5)),
        Item("c", "2024-01-03", datetime(2023, 12, 3)),
        Item("d", "2024-02-20", datetime(2023, 12, 5)),
        Item("e", "2024-01-15", datetime(2023, 12, 2)),
        Item("f", "2023-10-10", datetime(2023, 12, 4)),
        Item("g", "2024-01-05", datetime(2023, 12, 6)),
    ]


class TestAggregates:
    """Counting, partitioning and recency sorting."""

    def test_count_by_tier(self, items):
        counts = count_by_tier(items, NEW_YEAR)
        assert counts == {
            ExpirationTier.EXPIRED: 2,
            ExpirationTier.CRITICAL: 2,
            ExpirationTier.WARNING: 1,
            ExpirationTier.GOOD: 2,
        }

    def test_count_empty_has_every_tier(self):
        assert count_by_tier([], NEW_YEAR) == {tier: 0 for tier in ExpirationTier}

    def test_partition_is_stable(self, items):
        buckets = partition_by_tier(items, NEW_YEAR)
        assert list(buckets) == list(ExpirationTier)
        assert [i.name for i in buckets[ExpirationTier.EXPIRED]] == ["b", "f"]
        assert [i.name for i in buckets[ExpirationTier.CRITICAL]] == ["c", "g"]
        assert [i.name for i in buckets[ExpirationTier.WARNING]] == ["e"]
        assert [i.name for i in buckets[ExpirationTier.GOOD]] == ["a", "d"]

    def test_partition_is_permutation(self, items):
        buckets = partition_by_tier(items, NEW_YEAR)
        combined = list(itertools.chain.from_iterable(buckets.values()))
        assert len(combined) == len(items)
        assert sorted(i.name for i in combined) == sorted(i.name for i in items)

    def test_partition_with_custom_key(self):
        rows = [{"exp": "2023-12-01"}, {"exp": "2025-01-01"}]
        buckets = partition_by_tier(rows, NEW_YEAR, key=lambda row: row["exp"])
        assert buckets[ExpirationTier.EXPIRED] == [rows[0]]
        assert buckets[ExpirationTier.GOOD] == [rows[1]]

    def test_sort_by_recency(self, items):
        ordered = sort_by_recency(items)
        assert [i.name for i in ordered] == ["g", "b", "d", "f", "c", "e", "a"]

    def test_sort_by_recency_accepts_iso_strings(self):
        rows = [
            {"id": 1, "added": "2024-01-01T08:00:00"},
            {"id": 2, "added": "2024-01-02T08:00:00"},
        ]
        ordered = sort_by_recency(rows, added_key=lambda row: row["added"])
        assert [row["id"] for row in ordered] == [2, 1]

    def test_aggregates_default_to_current_time(self):
        far_future = [Item("z", "2999-01-01", datetime(2024, 1, 1, tzinfo=timezone.utc))]
        assert count_by_tier(far_future)[ExpirationTier.GOOD] == 1

    def test_sort_by_recency_mixes_naive_and_aware(self):
        rows = [
            Item("naive", "2024-06-01", datetime(2024, 1, 1, 12, 0)),
            Item("aware", "2024-06-01", datetime(2024, 1, 1, 13, 0, tzinfo=timezone.utc)),
            Item("oldest", "2024-06-01", datetime(2023, 12, 31, tzinfo=timezone.utc)),
        ]
        assert [i.name for i in sort_by_recency(rows)] == ["aware", "naive", "oldest"]

    @pytest.mark.parametrize("added", ["", "yesterday"])
    def test_sort_by_recency_names_bad_timestamp(self, added):
        rows = [{"added": "2024-01-01T08:00:00"}, {"added": added}]
        with pytest.raises(ValueError, match="added timestamp") as exc_info:
            sort_by_recency(rows, added_key=lambda row: row["added"])
        assert not isinstance(exc_info.value, InvalidExpirationDateError)
