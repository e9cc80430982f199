"""
Tests for time bucketing.
"""

import pytest

from cipherstats.analysis.analytics.time_buckets import aggregate_by_time_period


class TestBucketKeys:

    @pytest.mark.parametrize("period, expected", [
        ("hour", "2024-01-15T10"),
        ("day", "2024-01-15"),
        ("week", "2024-01-W2"),
        ("month", "2024-01"),
    ])
    def test_key_format(self, record, period, expected):
        buckets = aggregate_by_time_period([record("A", 1, timestamp="2024-01-15T10:30:00.000Z")], period)
        assert [b.date for b in buckets] == [expected]

    @pytest.mark.parametrize("day, week", [(1, 0), (6, 0), (7, 1), (14, 2), (28, 4), (31, 4)])
    def test_week_index_is_day_of_month_div_7(self, record, day, week):
        ts = f"2024-01-{day:02d}T08:00:00Z"
        buckets = aggregate_by_time_period([record("A", 1, timestamp=ts)], "week")
        assert buckets[0].date == f"2024-01-W{week}"

    def test_timestamps_are_normalized_to_utc(self, record):
        buckets = aggregate_by_time_period([record("A", 1, timestamp="2024-01-15T23:30:00-02:00")], "day")
        assert buckets[0].date == "2024-01-16"


class TestAggregateByTimePeriod:

    def test_first_seen_order_is_kept(self, sample_records):
        buckets = aggregate_by_time_period(sample_records, "day")
        assert [b.date for b in buckets] == ["2024-01-17", "2024-01-16", "2024-01-15"]

    def test_bucket_values(self, sample_records):
        newest = aggregate_by_time_period(sample_records, "day")[0]
        assert newest.count == 4
        assert newest.total_time == pytest.approx(66.2)
        assert newest.avg_time == pytest.approx(16.55)

    def test_skips_unusable_records(self, record):
        records = [
            record("A", 10, timestamp="not a date"),
            record("A", "fast", timestamp="2024-01-15T10:00:00Z"),
            record("A", 4, timestamp="2024-01-15T11:00:00Z"),
        ]
        buckets = aggregate_by_time_period(records, "day")
        assert len(buckets) == 1
        assert buckets[0].count == 1
        assert buckets[0].avg_time == 4

    def test_unknown_period_raises(self, sample_records):
        with pytest.raises(ValueError):
            aggregate_by_time_period(sample_records, "fortnight")

    def test_empty_input(self):
        assert aggregate_by_time_period([], "month") == []
