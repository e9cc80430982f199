"""Metric record loading, tabulation and tracking."""

from .data_loader import RecordLoader, coerce_records, records_to_frame
from .tracker import PerformanceTracker, calculate_efficiency, calculate_throughput

__all__ = [
    "RecordLoader",
    "coerce_records",
    "records_to_frame",
    "PerformanceTracker",
    "calculate_efficiency",
    "calculate_throughput",
]
