"""Per-algorithm aggregation of execution times."""

from typing import Dict, Sequence

import numpy as np

from cipherstats.core.utils import get_logger
from ..data.data_loader import records_to_frame
from ..data_structures import AggregatedStat, MetricRecord
from .statistics import mean, median, percentile, std_dev


logger = get_logger(__name__)


def summarize_times(times: Sequence[float]) -> AggregatedStat:
    """Build the summary statistics for one non-empty sample."""
    arr = np.asarray(times, dtype=float)
    avg = mean(arr)
    return AggregatedStat(
        count=int(arr.size),
        total_time=float(np.sum(arr)),
        avg_time=avg,
        min_time=float(np.min(arr)),
        max_time=float(np.max(arr)),
        std_dev=std_dev(arr, avg),
        median=median(arr),
        p25=percentile(arr, 25),
        p75=percentile(arr, 75),
        p95=percentile(arr, 95),
    )


def aggregate_by_algorithm(records: Sequence[MetricRecord]) -> Dict[str, AggregatedStat]:
    """Group records by exact algorithm name and summarize each group.

    Records whose execution time is not a finite number are left out of
    their algorithm's sample; an algorithm with no usable record is absent.
    The result iterates in first-seen algorithm order.

    Args:
        records: Metric records (any order)

    Returns:
        Mapping of algorithm name to its statistics
    """
    frame = records_to_frame(records)
    valid = frame.dropna(subset=["execution_ms"])

    skipped = len(frame) - len(valid)
    if skipped:
        logger.warning(f"Excluded {skipped} record(s) with non-numeric execution time")

    stats: Dict[str, AggregatedStat] = {}
    for algorithm, times in valid.groupby("algorithm", sort=False)["execution_ms"]:
        stats[algorithm] = summarize_times(times.to_numpy())

    logger.debug(f"Aggregated {len(valid)} records into {len(stats)} algorithms")
    return stats
