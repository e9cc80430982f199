"""Timing cipher operations into metric records."""

import math
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from cipherstats.core.utils import get_logger, FileManager
from ..data_structures import MetricRecord
from .data_loader import RecordLoader


def calculate_efficiency(execution_time_ms: float, input_size: int) -> float:
    """Efficiency score in [0, 100]: time costs up to 50 points, larger inputs earn a bonus."""
    time_penalty = min(execution_time_ms / 10, 50)
    size_bonus = math.log10(max(input_size, 1)) * 5
    return max(0.0, min(100.0, 100 - time_penalty + size_bonus))


def calculate_throughput(input_size: int, execution_time_ms: float) -> float:
    """Characters per second; 0.0 for a zero-length measurement."""
    if execution_time_ms <= 0:
        return 0.0
    return input_size / (execution_time_ms / 1000)


class PerformanceTracker:
    """Measures cipher executions and keeps a bounded history of records.

    History is kept newest-first, which is the order the analytics engine
    expects. When ``storage_path`` is set every new record is persisted.
    """

    def __init__(self, history_limit: int = 100, storage_path: Optional[Union[str, Path]] = None):
        if history_limit < 1:
            raise ValueError(f"history_limit {history_limit} must be at least 1")

        self.logger = get_logger(__name__)
        self.history_limit = history_limit
        self.storage_path = Path(storage_path) if storage_path else None
        self.loader = RecordLoader()
        self._records: List[MetricRecord] = []
        self._start: Optional[float] = None

        if self.storage_path and self.storage_path.exists():
            self._records = self.loader.load(self.storage_path)[: self.history_limit]

    @property
    def records(self) -> List[MetricRecord]:
        return list(self._records)

    @property
    def is_tracking(self) -> bool:
        return self._start is not None

    def start(self) -> None:
        self._start = time.perf_counter()

    def stop(self, algorithm: str, input_size: int, output_size: int) -> MetricRecord:
        """Finish the current measurement and record it.

        Raises:
            RuntimeError: If ``start()`` was not called first
        """
        if self._start is None:
            raise RuntimeError("Tracking was not started")

        elapsed_ms = (time.perf_counter() - self._start) * 1000
        self._start = None
        return self.record(algorithm, elapsed_ms, input_size, output_size)

    def record(self, algorithm: str, execution_time_ms: float, input_size: int, output_size: int) -> MetricRecord:
        """Add a measurement taken elsewhere."""
        record = MetricRecord(
            algorithm=algorithm,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            execution_time=f"{execution_time_ms:.2f}",
            input_size=input_size,
            output_size=output_size,
            throughput=f"{calculate_throughput(input_size, execution_time_ms):.2f}",
            efficiency=f"{calculate_efficiency(execution_time_ms, input_size):.2f}",
        )

        self._records.insert(0, record)
        del self._records[self.history_limit:]
        self._persist()
        return record

    @contextmanager
    def measure(self, algorithm: str, input_size: int, output_size: Optional[int] = None):
        """Time the enclosed block.

        Examples:
            >>> with tracker.measure("Caesar", len(text)):
            ...     caesar_encrypt(text, 3)
        """
        self.start()
        try:
            yield self
        except BaseException:
            self._start = None
            raise
        self.stop(algorithm, input_size, input_size if output_size is None else output_size)

    def get_statistics(self) -> Optional[Dict[str, object]]:
        """Overall summary of the tracked history, None when empty."""
        times = [r.execution_ms for r in self._records if r.execution_ms is not None]
        if not times:
            return None

        total = sum(times)
        return {
            "total_operations": len(self._records),
            "avg_execution_time": round(total / len(times), 2),
            "total_time": round(total, 2),
            "fastest_operation": round(min(times), 2),
            "slowest_operation": round(max(times), 2),
            "recent_records": self._records[:10],
        }

    def clear(self) -> None:
        self._records = []
        if self.storage_path:
            FileManager().delete_file(self.storage_path)

    def _persist(self) -> None:
        if not self.storage_path:
            return
        try:
            self.loader.save(self._records, self.storage_path)
        except OSError as e:
            self.logger.warning(f"Failed to save metrics to storage: {e}")
