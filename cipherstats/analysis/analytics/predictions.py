"""Moving-average forecasts of the next execution time."""

from typing import Dict, List, Optional, Sequence

from cipherstats.core.utils import get_logger
from ..config import InsightThresholds
from ..data_structures import AggregatedStat, MetricRecord, Prediction
from .statistics import coefficient_of_variation, mean


logger = get_logger(__name__)


def recent_times(records: Sequence[MetricRecord], algorithm: str, limit: int) -> List[float]:
    """First ``limit`` valid execution times of ``algorithm`` in record order."""
    times = []
    for record in records:
        if record.algorithm != algorithm:
            continue
        value = record.execution_ms
        if value is None:
            continue
        times.append(value)
        if len(times) == limit:
            break
    return times


def generate_predictions(
    records: Sequence[MetricRecord],
    stats: Dict[str, AggregatedStat],
    min_data_points: int = 5,
    thresholds: Optional[InsightThresholds] = None,
) -> Dict[str, Prediction]:
    """Predict each algorithm's next execution time.

    The forecast is the mean of the algorithm's ``min_data_points`` most
    recent times (records are newest-first). Confidence is ``100 - CV`` of
    the algorithm's full sample, floored at 0.

    Args:
        records: Metric records, newest first
        stats: Aggregated statistics by algorithm
        min_data_points: Window size and minimum per-algorithm sample
        thresholds: Supplies the overall data factor (default 2)

    Returns:
        Mapping of algorithm to prediction; algorithms with too few records
        are omitted, and nothing is predicted below
        ``min_data_points * factor`` records overall
    """
    thresholds = thresholds or InsightThresholds()
    required = min_data_points * thresholds.prediction_data_factor
    if len(records) < required:
        logger.debug(f"Skipping predictions: {len(records)} < {required} records")
        return {}

    predictions: Dict[str, Prediction] = {}
    for algorithm, stat in stats.items():
        recent = recent_times(records, algorithm, min_data_points)
        if len(recent) < min_data_points:
            continue

        cv = coefficient_of_variation(stat.std_dev, stat.avg_time)
        predictions[algorithm] = Prediction(
            next_execution_time=mean(recent),
            confidence=f"{max(0.0, 100 - cv):.1f}",
            based_on=len(recent),
        )
    return predictions
