"""Analytics over cipher performance metrics."""

from .config import AnalyticsConfig, InsightThresholds
from .data_structures import (
    MetricRecord,
    AggregatedStat,
    TimeBucket,
    TrendResult,
    Insight,
    Prediction,
    ComparisonResult,
    Report,
    AnalyticsState,
)
from .errors import AnalyticsError, InvalidRecordError, ConfigurationError, AlgorithmNotFoundError
from .pipeline import refresh_state
from .reports import ReportGenerator, build_report
from .manager import AnalyticsEngine

__all__ = [
    "AnalyticsConfig",
    "InsightThresholds",
    "MetricRecord",
    "AggregatedStat",
    "TimeBucket",
    "TrendResult",
    "Insight",
    "Prediction",
    "ComparisonResult",
    "Report",
    "AnalyticsState",
    "AnalyticsError",
    "InvalidRecordError",
    "ConfigurationError",
    "AlgorithmNotFoundError",
    "refresh_state",
    "ReportGenerator",
    "build_report",
    "AnalyticsEngine",
]
