"""
Tests for insight heuristics.
"""

import pytest

from cipherstats.analysis.analytics.aggregator import aggregate_by_algorithm
from cipherstats.analysis.analytics.insights import InsightEngine, find_fastest, generate_insights
from cipherstats.analysis.analytics.trends import analyze_trends
from cipherstats.analysis.config import InsightThresholds
from cipherstats.analysis.data_structures import TrendResult


def titles(insights):
    return [i.title for i in insights]


def make_trend(trend, change):
    return TrendResult(period="day", data=[], trend=trend, change=change, slope=1.0)


class TestBestPerformance:

    def test_names_global_minimum(self, stat):
        stats = {"Slow": stat(10, 9.0), "Fast": stat(10, 1.5), "Mid": stat(10, 4.0)}
        best = generate_insights(stats, [], total_operations=30)[0]

        assert best.type == "success"
        assert best.title == "Best Performance"
        assert best.data["algorithm"] == "Fast"
        assert best.message == "Fast has the best average performance at 1.50ms"

    def test_tie_goes_to_first_encountered(self, stat):
        assert find_fastest({"X": stat(10, 5.0), "Y": stat(10, 5.0)}) == "X"
        assert find_fastest({"Y": stat(10, 5.0), "X": stat(10, 5.0)}) == "Y"

    def test_no_algorithms(self):
        assert find_fastest({}) is None


class TestThresholdBoundaries:

    def test_cv_exactly_50_does_not_fire(self, stat):
        insights = generate_insights({"A": stat(10, 10.0, std_dev=5.0)}, [], total_operations=10)
        assert "High Variability" not in titles(insights)

    def test_cv_above_50_fires(self, stat):
        insights = generate_insights({"A": stat(10, 10.0, std_dev=5.01)}, [], total_operations=10)
        warning = next(i for i in insights if i.title == "High Variability")
        assert warning.type == "warning"
        assert warning.data["cv"] == pytest.approx(50.1)

    def test_degradation_exactly_10_does_not_fire(self, stat):
        insights = generate_insights({"A": stat(10, 1.0)}, [make_trend("increasing", 10.0)], total_operations=10)
        assert "Performance Degradation" not in titles(insights)

    def test_degradation_above_10_fires(self, stat):
        insights = generate_insights({"A": stat(10, 1.0)}, [make_trend("increasing", 10.01)], total_operations=10)
        degradation = next(i for i in insights if i.title == "Performance Degradation")
        assert degradation.message == "Performance is degrading over day (10.0% increase)"
        assert degradation.data["change"] == 10.01

    def test_decreasing_trend_is_not_degradation(self, stat):
        insights = generate_insights({"A": stat(10, 1.0)}, [make_trend("decreasing", 50.0)], total_operations=10)
        assert "Performance Degradation" not in titles(insights)

    def test_low_usage_needs_more_than_two_records(self, stat):
        stats = {"Common": stat(95, 1.0), "Rare": stat(3, 1.0), "Rarer": stat(2, 1.0)}
        insights = generate_insights(stats, [], total_operations=100)

        low = [i for i in insights if i.title == "Low Usage"]
        assert [i.data["algorithm"] for i in low] == ["Rare"]
        assert low[0].message == "Rare is rarely used (3.0% of operations)"

    def test_custom_thresholds(self, stat):
        thresholds = InsightThresholds(variability_cv_pct=10.0)
        insights = generate_insights({"A": stat(10, 10.0, std_dev=2.0)}, [], 10, thresholds=thresholds)
        assert "High Variability" in titles(insights)


class TestOptimizationOpportunity:

    def test_slow_algorithm_is_flagged(self, stat):
        stats = {"A": stat(6, 10.0), "B": stat(6, 10.0), "C": stat(6, 40.0)}
        insights = generate_insights(stats, [], total_operations=18, min_data_points=5)

        assert titles(insights) == ["Best Performance", "Optimization Opportunity"]
        assert insights[0].data["algorithm"] == "A"
        assert insights[1].message == "C is 100% slower than average"
        assert insights[1].data["overall_avg"] == pytest.approx(20.0)

    def test_needs_more_than_min_data_points(self, stat):
        stats = {"A": stat(5, 10.0), "C": stat(5, 40.0)}
        insights = generate_insights(stats, [], total_operations=10, min_data_points=5)
        assert "Optimization Opportunity" not in titles(insights)


class TestInsightEngine:

    def test_nothing_below_min_data_points(self, stat):
        assert generate_insights({"A": stat(4, 1.0)}, [], total_operations=4, min_data_points=5) == []

    def test_sample_records(self, sample_records):
        stats = aggregate_by_algorithm(sample_records)
        trends = analyze_trends(sample_records)
        insights = generate_insights(stats, trends, len(sample_records))

        assert titles(insights) == ["Best Performance", "Optimization Opportunity"]
        assert insights[0].data["algorithm"] == "Caesar"
        assert insights[1].message == "DES is 82% slower than average"

    def test_on_insight_called_per_insight(self, stat):
        seen = []
        engine = InsightEngine(min_data_points=1, on_insight=seen.append)
        insights = engine.generate({"A": stat(10, 10.0, std_dev=9.0)}, [], total_operations=10)

        assert len(insights) == 2
        assert seen == insights
