"""Report composition and report file output."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd

from cipherstats.core.utils import get_logger, FileManager
from .analytics.insights import find_fastest
from .analytics.statistics import coefficient_of_variation
from .data_structures import (
    AggregatedStat,
    Insight,
    MetricRecord,
    Prediction,
    Report,
    ReportSummary,
    TrendResult,
)
from .errors import InvalidRecordError


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_recommendations(insights: Sequence[Insight], stats: Dict[str, AggregatedStat]) -> List[str]:
    recommendations = []
    if any(i.type == "warning" for i in insights):
        recommendations.append("Address performance warnings to improve efficiency")
    if any(i.type == "info" for i in insights):
        recommendations.append("Consider optimizing algorithms with low usage or high execution times")
    if len(stats) > 1:
        recommendations.append(f"Consider using {find_fastest(stats)} for better performance")
    return recommendations


def build_report(
    records: Sequence[MetricRecord],
    stats: Dict[str, AggregatedStat],
    trends: Sequence[TrendResult],
    insights: Sequence[Insight],
    predictions: Dict[str, Prediction],
    period: str = "all",
    include_predictions: bool = False,
    generated_at: Optional[str] = None,
) -> Report:
    """Compose a report from already-derived analytics.

    Args:
        records: Metric records, newest first
        stats: Aggregated statistics by algorithm
        trends: Trend results
        insights: Generated insights
        predictions: Predictions by algorithm
        period: Label stored in the report and its summary
        include_predictions: Whether predictions are part of the report
        generated_at: Timestamp override, current UTC time when omitted

    Returns:
        Report instance
    """
    date_range = None
    if records:
        date_range = {"start": records[-1].timestamp, "end": records[0].timestamp}

    summary = ReportSummary(
        total_operations=len(records),
        algorithms=len(stats),
        period=period,
        date_range=date_range,
    )
    return Report(
        generated_at=generated_at or utc_timestamp(),
        period=period,
        summary=summary,
        algorithms=dict(stats),
        trends=list(trends),
        insights=list(insights),
        predictions=dict(predictions) if include_predictions else None,
        recommendations=generate_recommendations(insights, stats),
    )


class ReportGenerator:
    """Writes a report as JSON, a text summary and a per-algorithm CSV."""

    def __init__(self, output_dir: Union[str, Path]):
        """
        Initialize report generator.

        Args:
            output_dir: Directory to save generated reports
        """
        self.logger = get_logger(__name__)
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.file_manager = FileManager()

    def generate_all_reports(self, report: Report) -> List[Path]:
        """
        Generate all report files.

        Args:
            report: Report to write

        Returns:
            List of generated report paths
        """
        generated_reports = [
            self._write_report_json(report),
            self._write_summary_txt(report),
            self._write_algorithm_csv(report),
        ]
        self.logger.info(f"Generated {len(generated_reports)} report files in {self.output_dir}")
        return generated_reports

    def _write_report_json(self, report: Report) -> Path:
        """Write the structured report for later reloading."""
        path = self.output_dir / "analytics_report.json"
        result = self.file_manager.write_json_file(report.to_dict(), path)
        if not result.success:
            raise OSError(result.error_message)
        return path

    def _write_summary_txt(self, report: Report) -> Path:
        """Write human-readable summary."""
        path = self.output_dir / "AnalyticsSummary.txt"
        summary = report.summary

        lines = []
        lines.append("=" * 60)
        lines.append("Cipher Performance Analytics")
        lines.append(f"Generated: {report.generated_at}")
        lines.append("=" * 60)
        lines.append("")

        lines.append("SUMMARY")
        lines.append("-" * 40)
        lines.append(f"  Period:           {summary.period}")
        lines.append(f"  Total operations: {summary.total_operations:,}")
        lines.append(f"  Algorithms:       {summary.algorithms}")
        if summary.date_range:
            lines.append(f"  From:             {summary.date_range['start']}")
            lines.append(f"  To:               {summary.date_range['end']}")
        lines.append("")

        if report.algorithms:
            lines.append("ALGORITHMS")
            lines.append("-" * 40)
            for name, stat in report.algorithms.items():
                lines.append(f"  {name} (n={stat.count:,}):")
                lines.append(f"    Avg:    {stat.avg_time:.2f} ms")
                lines.append(f"    Median: {stat.median:.2f} ms")
                lines.append(f"    Range:  {stat.min_time:.2f} - {stat.max_time:.2f} ms")
                lines.append(f"    P95:    {stat.p95:.2f} ms")
                lines.append(f"    CV:     {coefficient_of_variation(stat.std_dev, stat.avg_time):.1f}%")
            lines.append("")

        if report.trends:
            lines.append("TRENDS")
            lines.append("-" * 40)
            for trend in report.trends:
                lines.append(f"  {trend.period:<6} {trend.trend:<11} {trend.change:+.2f}% over {len(trend.data)} buckets")
            lines.append("")

        if report.insights:
            lines.append("INSIGHTS")
            lines.append("-" * 40)
            for insight in report.insights:
                lines.append(f"  [{insight.type.upper()}] {insight.title}: {insight.message}")
            lines.append("")

        if report.predictions:
            lines.append("PREDICTIONS")
            lines.append("-" * 40)
            for name, prediction in report.predictions.items():
                lines.append(
                    f"  {name}: {prediction.next_execution_time:.2f} ms "
                    f"(confidence {prediction.confidence}%, n={prediction.based_on})"
                )
            lines.append("")

        if report.recommendations:
            lines.append("RECOMMENDATIONS")
            lines.append("-" * 40)
            for recommendation in report.recommendations:
                lines.append(f"  - {recommendation}")
            lines.append("")

        lines.append("=" * 60)

        result = self.file_manager.write_text_file("\n".join(lines), path)
        if not result.success:
            raise OSError(result.error_message)
        return path

    def _write_algorithm_csv(self, report: Report) -> Path:
        """Write one row of aggregated statistics per algorithm."""
        path = self.output_dir / "algorithm_stats.csv"

        records = []
        for name, stat in report.algorithms.items():
            records.append({"algorithm": name, **stat.to_dict()})

        df = pd.DataFrame(records, columns=["algorithm", *AggregatedStat.__dataclass_fields__])
        df.to_csv(path, index=False)

        return path

    def load_report(self, path: Optional[Union[str, Path]] = None) -> Report:
        """Re-read a report written by ``generate_all_reports``.

        Raises:
            InvalidRecordError: If the file is missing or not a valid report
        """
        path = Path(path) if path else self.output_dir / "analytics_report.json"
        result = self.file_manager.read_json_file(path)
        if not result.success:
            raise InvalidRecordError(result.error_message)
        try:
            return Report.from_dict(result.data)
        except (KeyError, TypeError) as e:
            raise InvalidRecordError(f"Malformed report {path}: {e}")
