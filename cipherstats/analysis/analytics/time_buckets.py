"""Grouping records into hour/day/week/month buckets."""

from typing import List, Sequence

import numpy as np
import pandas as pd

from cipherstats.core.utils import get_logger
from ..data.data_loader import records_to_frame
from ..data_structures import PERIODS, MetricRecord, TimeBucket
from .statistics import mean


logger = get_logger(__name__)


def bucket_keys(timestamps: pd.Series, period: str) -> pd.Series:
    """Map UTC timestamps to bucket keys for ``period``.

    Keys: hour ``YYYY-MM-DDTHH``, day ``YYYY-MM-DD``, week ``YYYY-MM-W<k>``
    and month ``YYYY-MM``. The week index is ``day_of_month // 7`` (0-4), a
    coarse within-month grouping rather than an ISO week number.
    """
    if period == "hour":
        return timestamps.dt.strftime("%Y-%m-%dT%H")
    if period == "day":
        return timestamps.dt.strftime("%Y-%m-%d")
    if period == "week":
        return timestamps.dt.strftime("%Y-%m") + "-W" + (timestamps.dt.day // 7).astype(str)
    if period == "month":
        return timestamps.dt.strftime("%Y-%m")
    raise ValueError(f"Unknown period '{period}', expected one of {PERIODS}")


def aggregate_by_time_period(records: Sequence[MetricRecord], period: str = "day") -> List[TimeBucket]:
    """Average execution time per time bucket.

    Buckets come back in first-seen order of their keys in ``records``;
    they are not sorted chronologically. Records with an unparseable
    timestamp or execution time are skipped.

    Raises:
        ValueError: If ``period`` is not one of hour, day, week, month
    """
    if period not in PERIODS:
        raise ValueError(f"Unknown period '{period}', expected one of {PERIODS}")

    frame = records_to_frame(records)
    frame["parsed_at"] = pd.to_datetime(frame["timestamp"], errors="coerce", utc=True, format="ISO8601")
    usable = frame.dropna(subset=["execution_ms", "parsed_at"])

    skipped = len(frame) - len(usable)
    if skipped:
        logger.debug(f"Skipped {skipped} record(s) while bucketing by {period}")
    if usable.empty:
        return []

    keys = bucket_keys(usable["parsed_at"], period)
    buckets = []
    for key, times in usable["execution_ms"].groupby(keys, sort=False):
        values = times.to_numpy()
        buckets.append(
            TimeBucket(
                date=key,
                count=int(values.size),
                avg_time=mean(values),
                total_time=float(np.sum(values)),
            )
        )
    return buckets
