"""
Tests for per-algorithm aggregation.
"""

import pytest

from cipherstats.analysis.analytics.aggregator import aggregate_by_algorithm, summarize_times


class TestAggregateByAlgorithm:

    def test_worked_example(self, ab_records):
        stats = aggregate_by_algorithm(ab_records)

        a = stats["A"]
        assert a.count == 2
        assert a.avg_time == 15
        assert a.min_time == 10
        assert a.max_time == 20
        assert a.median == 15
        assert a.std_dev == pytest.approx(5)
        assert a.total_time == 30

        b = stats["B"]
        assert (b.count, b.avg_time, b.min_time, b.max_time, b.median, b.std_dev) == (1, 5, 5, 5, 5, 0)

    def test_percentiles(self, ab_records):
        a = aggregate_by_algorithm(ab_records)["A"]
        assert a.p25 == pytest.approx(12.5)
        assert a.p75 == pytest.approx(17.5)
        assert a.p95 == pytest.approx(19.5)

    def test_idempotent(self, sample_records):
        assert aggregate_by_algorithm(sample_records) == aggregate_by_algorithm(sample_records)

    def test_first_seen_order(self, record):
        records = [record("Zeta", 1), record("Alpha", 2), record("Zeta", 3), record("Mid", 4)]
        assert list(aggregate_by_algorithm(records)) == ["Zeta", "Alpha", "Mid"]

    def test_names_are_exact(self, record):
        stats = aggregate_by_algorithm([record("des", 1), record("DES", 2)])
        assert set(stats) == {"des", "DES"}

    def test_non_numeric_times_are_excluded(self, record):
        records = [record("A", "abc"), record("A", 10), record("A", "inf"), record("B", "N/A")]
        stats = aggregate_by_algorithm(records)

        assert stats["A"].count == 1
        assert stats["A"].avg_time == 10
        assert "B" not in stats

    def test_empty_input(self):
        assert aggregate_by_algorithm([]) == {}


class TestSummarizeTimes:

    def test_single_value(self):
        stat = summarize_times([7.5])
        assert stat.count == 1
        assert stat.std_dev == 0.0
        assert stat.p25 == stat.p95 == 7.5
