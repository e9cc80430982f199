"""
Tests for report composition and report files.
"""

import pandas as pd
import pytest

from cipherstats.analysis.analytics import (
    aggregate_by_algorithm,
    analyze_trends,
    generate_insights,
    generate_predictions,
)
from cipherstats.analysis.data_structures import Insight, Report
from cipherstats.analysis.errors import InvalidRecordError
from cipherstats.analysis.reports import ReportGenerator, build_report, generate_recommendations


@pytest.fixture
def full_report(sample_records):
    stats = aggregate_by_algorithm(sample_records)
    trends = analyze_trends(sample_records)
    insights = generate_insights(stats, trends, len(sample_records))
    predictions = generate_predictions(sample_records, stats)
    return build_report(sample_records, stats, trends, insights, predictions,
                        period="week", include_predictions=True)


class TestBuildReport:

    def test_summary(self, full_report, sample_records):
        summary = full_report.summary
        assert summary.total_operations == 12
        assert summary.algorithms == 2
        assert summary.period == "week"
        assert summary.date_range == {
            "start": sample_records[-1].timestamp,
            "end": sample_records[0].timestamp,
        }

    def test_recommendations(self, full_report):
        assert full_report.recommendations == [
            "Consider optimizing algorithms with low usage or high execution times",
            "Consider using Caesar for better performance",
        ]

    def test_predictions_only_when_enabled(self, sample_records):
        stats = aggregate_by_algorithm(sample_records)
        report = build_report(sample_records, stats, [], [], {"x": None})
        assert report.predictions is None

    def test_empty_records(self):
        report = build_report([], {}, [], [], {})
        assert report.summary.date_range is None
        assert report.summary.total_operations == 0
        assert report.recommendations == []
        assert report.generated_at.endswith("Z")

    def test_json_round_trip(self, full_report):
        restored = Report.from_json(full_report.to_json())
        assert restored == full_report


class TestRecommendations:

    def test_order(self, stat):
        insights = [
            Insight(type="info", title="i", message="m"),
            Insight(type="warning", title="w", message="m"),
        ]
        recommendations = generate_recommendations(insights, {"A": stat(1, 2.0), "B": stat(1, 1.0)})
        assert recommendations == [
            "Address performance warnings to improve efficiency",
            "Consider optimizing algorithms with low usage or high execution times",
            "Consider using B for better performance",
        ]

    def test_single_algorithm_has_no_suggestion(self, stat):
        assert generate_recommendations([], {"A": stat(1, 2.0)}) == []


class TestReportGenerator:

    def test_writes_all_files(self, full_report, tmp_path):
        generator = ReportGenerator(tmp_path / "reports")
        paths = generator.generate_all_reports(full_report)

        assert [p.name for p in paths] == ["analytics_report.json", "AnalyticsSummary.txt", "algorithm_stats.csv"]
        assert all(p.exists() for p in paths)

        summary = paths[1].read_text()
        assert "Total operations: 12" in summary
        assert "Consider using Caesar for better performance" in summary

        table = pd.read_csv(paths[2])
        assert list(table["algorithm"]) == ["Caesar", "DES"]
        assert list(table["count"]) == [6, 6]

    def test_load_report(self, full_report, tmp_path):
        generator = ReportGenerator(tmp_path)
        generator.generate_all_reports(full_report)
        assert generator.load_report() == full_report

    def test_load_missing_report(self, tmp_path):
        with pytest.raises(InvalidRecordError):
            ReportGenerator(tmp_path).load_report(tmp_path / "missing.json")
