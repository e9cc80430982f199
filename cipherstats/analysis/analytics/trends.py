"""Linear trend classification over time buckets."""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from cipherstats.core.utils import get_logger
from ..config import InsightThresholds
from ..data_structures import TREND_PERIODS, MetricRecord, TimeBucket, TrendResult
from .time_buckets import aggregate_by_time_period


logger = get_logger(__name__)


def fit_trend(avg_times: Sequence[float]) -> Tuple[float, float]:
    """Least-squares slope over bucket index and the fitted change in percent.

    ``x`` is the bucket index ``0..n-1``; the change is the slope projected
    over the whole series relative to its mean, ``m(n-1) / mean(y) * 100``.
    A constant series, or one whose values sum to zero, has a change of 0.

    Returns:
        Tuple of (slope, change_percent)
    """
    y = np.asarray(avg_times, dtype=float)
    n = y.size
    if n < 2 or np.all(y == y[0]):
        return 0.0, 0.0

    x = np.arange(n, dtype=float)
    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_x2 = float(np.sum(x * x))

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    if sum_y == 0:
        return slope, 0.0

    change = (slope * (n - 1)) / (sum_y / n) * 100
    return slope, change


def classify_change(change: float, thresholds: InsightThresholds) -> str:
    if change > thresholds.trend_change_pct:
        return "increasing"
    if change < -thresholds.trend_change_pct:
        return "decreasing"
    return "stable"


def trend_for_buckets(
    period: str,
    buckets: List[TimeBucket],
    thresholds: Optional[InsightThresholds] = None,
) -> Optional[TrendResult]:
    """Fit one period's buckets; None when fewer than two buckets exist."""
    if len(buckets) < 2:
        return None

    thresholds = thresholds or InsightThresholds()
    slope, change = fit_trend([b.avg_time for b in buckets])
    return TrendResult(
        period=period,
        data=list(buckets),
        trend=classify_change(change, thresholds),
        change=round(change, 2),
        slope=round(slope, 4),
    )


def analyze_trends(
    records: Sequence[MetricRecord],
    min_data_points: int = 5,
    thresholds: Optional[InsightThresholds] = None,
) -> List[TrendResult]:
    """Trend results for the day, week and month periods.

    Nothing is computed when fewer than ``min_data_points`` records exist;
    a period with fewer than two buckets is left out.
    """
    if len(records) < min_data_points:
        logger.debug(f"Skipping trends: {len(records)} < {min_data_points} records")
        return []

    results = []
    for period in TREND_PERIODS:
        result = trend_for_buckets(period, aggregate_by_time_period(records, period), thresholds)
        if result is not None:
            results.append(result)
    return results
